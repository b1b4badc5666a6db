"""
Differential evolution operators for real vectors.

A DifferentialMutator builds a donor vector for one target out of scaled
differences between other population members. A DE crossover then mixes the
target with its donor into a single trial vector that always takes at least
one locus from the donor. Neither operator modifies its arguments.
"""

import logging
from abc import ABC, abstractmethod
from typing import List, Literal, Sequence

from src.evolver.core.characteristic import GeneKind
from src.evolver.core.environment import Environment
from src.evolver.core.individual import Individual, require_compatible, require_kind
from src.evolver.exceptions import EmptyPopulationError, InvalidConfigError
from src.evolver.random_source import RandomSource, bernoulli, sample_indices

logger = logging.getLogger("evolver.operators.differential")


class DifferentialMutator:
    """
    DE/rand/n and DE/best/n donor construction.

    The donor is ``base + scale * sum(x_r1 - x_r2)`` over ``differences``
    pairs of distinct members other than the target. ``base="rand"`` draws
    the base vector from the remaining members; ``base="best"`` uses the
    population's best individual. Loci leaving their interval are clamped.
    """

    def __init__(
        self,
        rng: RandomSource,
        scale: float = 0.5,
        base: Literal["rand", "best"] = "rand",
        differences: int = 1,
    ):
        if not 0.0 < scale <= 2.0:
            raise ValueError(f"Scale factor must be in (0, 2], got {scale}")
        if base not in ("rand", "best"):
            raise ValueError(f"Unknown base vector: {base}")
        if differences < 1:
            raise ValueError(f"Differences must be at least 1, got {differences}")
        self.rng = rng
        self.scale = scale
        self.base = base
        self.differences = differences

    @property
    def members_needed(self) -> int:
        """Members besides the target that one donor draws on."""
        return 2 * self.differences + (1 if self.base == "rand" else 0)

    def donor(
        self,
        members: Sequence[Individual],
        target_index: int,
        environment: Environment,
    ) -> Individual:
        """Build the donor vector for ``members[target_index]``."""
        if not members:
            raise EmptyPopulationError("Cannot build a donor from an empty population")
        target = members[target_index]
        require_kind(target, GeneKind.REAL)

        others = [i for i in range(len(members)) if i != target_index]
        if len(others) < self.members_needed:
            raise InvalidConfigError(
                f"DE/{self.base}/{self.differences} needs at least {self.members_needed + 1} "
                f"members, got {len(members)}"
            )
        picks = [others[k] for k in sample_indices(self.rng, len(others), self.members_needed)]
        base = environment.best_of(members) if self.base == "best" else members[picks.pop()]
        require_compatible(target, base, *(members[i] for i in picks))

        values = list(base.genotype)
        for k in range(0, len(picks), 2):
            plus, minus = members[picks[k]].genotype, members[picks[k + 1]].genotype
            for locus in range(len(values)):
                values[locus] += self.scale * (plus[locus] - minus[locus])

        return target.with_values(
            [target.characteristic_at(i).clamp(value) for i, value in enumerate(values)]
        )


class _TrialCrossover(ABC):
    """Mixes a target with its donor; ``recombine`` returns the single trial."""

    def __init__(self, rng: RandomSource, crossover_rate: float = 0.9):
        if not 0.0 <= crossover_rate <= 1.0:
            raise ValueError(f"Crossover rate must be in [0, 1], got {crossover_rate}")
        self.rng = rng
        self.crossover_rate = crossover_rate

    def recombine(self, target: Individual, donor: Individual) -> List[Individual]:
        require_compatible(target, donor)
        require_kind(target, GeneKind.REAL)
        mask = self.donor_loci(len(target))
        values = [d if take else t for t, d, take in zip(target.genotype, donor.genotype, mask)]
        return [target.with_values(values)]

    @abstractmethod
    def donor_loci(self, length: int) -> List[bool]:
        """Mask of the loci the trial takes from the donor."""


class BinomialCrossover(_TrialCrossover):
    """Each locus comes from the donor with ``crossover_rate``; one random locus always does."""

    def donor_loci(self, length: int) -> List[bool]:
        forced = self.rng.next_index(length)
        return [i == forced or bernoulli(self.rng, self.crossover_rate) for i in range(length)]


class ExponentialCrossover(_TrialCrossover):
    """
    A contiguous, wrapping run of donor loci from a random start.

    The run has at least one locus and grows while successive draws stay
    below ``crossover_rate``.
    """

    def donor_loci(self, length: int) -> List[bool]:
        start = self.rng.next_index(length)
        taken = 1
        while taken < length and bernoulli(self.rng, self.crossover_rate):
            taken += 1
        mask = [False] * length
        for k in range(taken):
            mask[(start + k) % length] = True
        logger.debug("Exponential crossover takes %d loci from %d", taken, start)
        return mask
