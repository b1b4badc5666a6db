"""
Recombination operators.

All recombinators take two compatible parents (same kind and length) and
return two new, unevaluated children; the parents are left untouched.
Partially Mapped Crossover (PMX) is the permutation-preserving operator:
its children are always bijections on the parents' index domain.
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple

from src.evolver.core.characteristic import GeneKind, RealCharacteristic
from src.evolver.core.individual import (
    Individual,
    require_compatible,
    require_kind,
)
from src.evolver.exceptions import RepresentationMismatchError
from src.evolver.random_source import RandomSource, bernoulli, sample_indices

logger = logging.getLogger("evolver.operators.recombination")


class OnePointCrossover:
    """Swap tails after a random cut point.

    Not defined for permutations, whose children could repeat indices.
    """

    def __init__(self, rng: RandomSource):
        self.rng = rng

    def recombine(self, parent_a: Individual, parent_b: Individual) -> List[Individual]:
        require_compatible(parent_a, parent_b)
        require_kind(parent_a, GeneKind.BINARY, GeneKind.REAL, GeneKind.INTEGER)
        # Cut in [1, L) so each child mixes both parents when L > 1
        point = 1 + self.rng.next_index(len(parent_a) - 1) if len(parent_a) > 1 else 0
        return self.crossover_at(parent_a, parent_b, point)

    @staticmethod
    def crossover_at(parent_a: Individual, parent_b: Individual, point: int) -> List[Individual]:
        require_compatible(parent_a, parent_b)
        if not 0 <= point <= len(parent_a):
            raise ValueError(f"Cut point {point} outside [0, {len(parent_a)}]")
        a, b = parent_a.genotype, parent_b.genotype
        return [
            parent_a.with_values(a[:point] + b[point:]),
            parent_b.with_values(b[:point] + a[point:]),
        ]


class UniformCrossover:
    """Discrete recombination: each locus comes from either parent."""

    def __init__(self, rng: RandomSource, swap_probability: float = 0.5):
        if not 0.0 <= swap_probability <= 1.0:
            raise ValueError(f"Swap probability must be in [0, 1], got {swap_probability}")
        self.rng = rng
        self.swap_probability = swap_probability

    def recombine(self, parent_a: Individual, parent_b: Individual) -> List[Individual]:
        require_compatible(parent_a, parent_b)
        require_kind(parent_a, GeneKind.BINARY, GeneKind.REAL, GeneKind.INTEGER)
        child_a, child_b = [], []
        for a, b in zip(parent_a.genotype, parent_b.genotype):
            if bernoulli(self.rng, self.swap_probability):
                a, b = b, a
            child_a.append(a)
            child_b.append(b)
        return [parent_a.with_values(child_a), parent_b.with_values(child_b)]


class ArithmeticRecombination:
    """
    Arithmetic recombination for real vectors.

    Loci from ``start`` onwards become the blends ``alpha*b + (1-alpha)*a``
    and ``alpha*a + (1-alpha)*b``; earlier loci are copied. ``start=0`` is
    whole arithmetic recombination; ``simple=True`` draws ``start`` at
    random per mating. ``alpha=None`` draws a fresh weight in [0, 1) per
    mating.
    """

    def __init__(self, rng: RandomSource, alpha: Optional[float] = 0.5, simple: bool = False):
        if alpha is not None and not 0.0 <= alpha <= 1.0:
            raise ValueError(f"Alpha must be in [0, 1], got {alpha}")
        self.rng = rng
        self.alpha = alpha
        self.simple = simple

    def recombine(self, parent_a: Individual, parent_b: Individual) -> List[Individual]:
        require_compatible(parent_a, parent_b)
        require_kind(parent_a, GeneKind.REAL)
        alpha = self.alpha if self.alpha is not None else self.rng.next_uniform_real()
        start = self.rng.next_index(len(parent_a)) if self.simple else 0
        return self.blend(parent_a, parent_b, alpha, start)

    @staticmethod
    def blend(parent_a: Individual, parent_b: Individual, alpha: float, start: int = 0) -> List[Individual]:
        child_a, child_b = list(parent_a.genotype), list(parent_b.genotype)
        for i in range(start, len(parent_a)):
            a, b = child_a[i], child_b[i]
            char = parent_a.characteristic_at(i)
            blend_a = alpha * b + (1 - alpha) * a
            blend_b = alpha * a + (1 - alpha) * b
            # Convex combinations stay in bounds up to float round-off
            if isinstance(char, RealCharacteristic):
                blend_a, blend_b = char.clamp(blend_a), char.clamp(blend_b)
            child_a[i], child_b[i] = blend_a, blend_b
        return [parent_a.with_values(child_a), parent_b.with_values(child_b)]


class PartiallyMappedCrossover:
    """
    Partially Mapped Crossover (PMX) for permutations.

    Two cut points ``i < j`` are drawn from ``[0, L]``. Each child copies the
    segment ``[i, j)`` of its first parent, then fills the remaining
    positions from the second parent, following the segment mapping until a
    value not already in the segment is reached.

    Cut points may be confined to ``bounds=(lower, upper)`` (``0 <= lower <
    upper <= L``); with ``fixed=True`` the bounds themselves are the cuts.
    """

    def __init__(
        self,
        rng: RandomSource,
        bounds: Optional[Tuple[int, int]] = None,
        fixed: bool = False,
    ):
        if bounds is not None:
            lower, upper = bounds
            if lower < 0:
                raise ValueError(f"Lower cut bound must be non-negative, got {lower}")
            if lower >= upper:
                raise ValueError(f"Cut bounds must satisfy lower < upper, got {bounds}")
        elif fixed:
            raise ValueError("Fixed cut points require bounds")
        self.rng = rng
        self.bounds = bounds
        self.fixed = fixed

    def cut_points(self, length: int) -> Tuple[int, int]:
        lower, upper = self.bounds if self.bounds is not None else (0, length)
        if upper > length:
            raise RepresentationMismatchError(
                f"Cut bound {upper} exceeds genotype length {length}"
            )
        if self.fixed:
            return lower, upper
        i, j = sorted(lower + k for k in sample_indices(self.rng, upper - lower + 1, 2))
        return i, j

    def recombine(self, parent_a: Individual, parent_b: Individual) -> List[Individual]:
        self._check_parents(parent_a, parent_b)
        i, j = self.cut_points(len(parent_a))
        logger.debug("PMX of %d and %d with cuts [%d, %d)", parent_a.id, parent_b.id, i, j)
        return [
            self.crossover_at(parent_a, parent_b, i, j),
            self.crossover_at(parent_b, parent_a, i, j),
        ]

    @classmethod
    def crossover_at(cls, parent_a: Individual, parent_b: Individual, i: int, j: int) -> Individual:
        """Build the child that inherits ``parent_a[i:j]``."""
        cls._check_parents(parent_a, parent_b)
        length = len(parent_a)
        if not 0 <= i < j <= length:
            raise ValueError(f"Cut points must satisfy 0 <= i < j <= {length}, got ({i}, {j})")
        values = pmx(parent_a.genotype, parent_b.genotype, i, j)
        return parent_a.with_values(values)

    @staticmethod
    def _check_parents(parent_a: Individual, parent_b: Individual) -> None:
        require_compatible(parent_a, parent_b)
        require_kind(parent_a, GeneKind.PERMUTATION)
        for parent in (parent_a, parent_b):
            if len(set(parent.genotype)) != len(parent):
                raise RepresentationMismatchError(
                    f"PMX parent {list(parent.genotype)} repeats values"
                )
        if sorted(parent_a.genotype) != sorted(parent_b.genotype):
            raise RepresentationMismatchError(
                "PMX parents must be permutations of the same values"
            )


def pmx(a: Sequence[int], b: Sequence[int], i: int, j: int) -> List[int]:
    """PMX on raw sequences: child keeps ``a[i:j]`` and is legalized from ``b``."""
    if len(set(a)) != len(a) or sorted(a) != sorted(b):
        raise RepresentationMismatchError("PMX needs two permutations of the same distinct values")
    child: List[Optional[int]] = [None] * len(a)
    child[i:j] = a[i:j]
    segment = set(a[i:j])
    mapping: Dict[int, int] = {a[k]: b[k] for k in range(i, j)}

    for k in list(range(0, i)) + list(range(j, len(a))):
        value = b[k]
        # The chain a->b inside the segment always exits it because b is a permutation
        while value in segment:
            value = mapping[value]
        child[k] = value
    return child
