"""
Mutation operators.

Mutators return a perturbed copy and never modify their argument. Whether an
individual is mutated at all is decided by the engine from the configured
mutation probability; ``locus_probability`` controls how many loci change.
When it is None exactly one uniformly chosen locus is perturbed.
"""

from abc import ABC, abstractmethod
from typing import List, Literal, Optional

from src.evolver.core.characteristic import GeneKind, IntegerCharacteristic, RealCharacteristic
from src.evolver.core.individual import Individual, require_kind
from src.evolver.random_source import RandomSource, bernoulli, sample_indices, uniform_between


class _LocusMutator(ABC):
    """Chooses which loci a mutation touches."""

    kinds: tuple = ()

    def __init__(self, rng: RandomSource, locus_probability: Optional[float] = None):
        if locus_probability is not None and not 0.0 <= locus_probability <= 1.0:
            raise ValueError(f"Locus probability must be in [0, 1], got {locus_probability}")
        self.rng = rng
        self.locus_probability = locus_probability

    def positions(self, length: int) -> List[int]:
        if self.locus_probability is None:
            return [self.rng.next_index(length)]
        return [i for i in range(length) if bernoulli(self.rng, self.locus_probability)]

    def mutate(self, individual: Individual) -> Individual:
        require_kind(individual, *self.kinds)
        values = list(individual.genotype)
        for i in self.positions(len(values)):
            values[i] = self.mutate_value(values[i], individual.characteristic_at(i))
        return individual.with_values(values)

    @abstractmethod
    def mutate_value(self, value, characteristic):
        """Return the new value for one locus."""


class BitFlipMutator(_LocusMutator):
    """Flip bits of a binary individual."""

    kinds = (GeneKind.BINARY,)

    def mutate_value(self, value: int, characteristic) -> int:
        return 1 - value


class BoundedPerturbationMutator(_LocusMutator):
    """
    Add a uniform delta in ``[-step, step]`` to real loci.

    Values leaving the interval are brought back by clamping or by
    reflecting at the violated bound.
    """

    kinds = (GeneKind.REAL,)

    def __init__(
        self,
        rng: RandomSource,
        step: float = 0.1,
        boundary: Literal["clamp", "reflect"] = "clamp",
        locus_probability: Optional[float] = None,
    ):
        super().__init__(rng, locus_probability)
        if step <= 0:
            raise ValueError(f"Step must be positive, got {step}")
        if boundary not in ("clamp", "reflect"):
            raise ValueError(f"Unknown boundary handling: {boundary}")
        self.step = step
        self.boundary = boundary

    def mutate_value(self, value: float, characteristic: RealCharacteristic) -> float:
        moved = value + uniform_between(self.rng, -self.step, self.step)
        if self.boundary == "reflect":
            return characteristic.reflect(moved)
        return characteristic.clamp(moved)


class UniformResetMutator(_LocusMutator):
    """Redraw real loci uniformly within their interval."""

    kinds = (GeneKind.REAL,)

    def mutate_value(self, value: float, characteristic: RealCharacteristic) -> float:
        return uniform_between(self.rng, characteristic.low, characteristic.high)


class RandomResettingMutator(_LocusMutator):
    """Redraw integer loci uniformly within their inclusive range."""

    kinds = (GeneKind.INTEGER,)

    def mutate_value(self, value: int, characteristic: IntegerCharacteristic) -> int:
        return characteristic.low + self.rng.next_index(characteristic.high - characteristic.low + 1)


class SwapMutator:
    """Swap two distinct loci of a permutation.

    The multiset of values is unchanged, so the result is still a
    permutation. ``swaps`` pairs are exchanged per call.
    """

    def __init__(self, rng: RandomSource, swaps: int = 1):
        if swaps < 1:
            raise ValueError(f"Swaps must be at least 1, got {swaps}")
        self.rng = rng
        self.swaps = swaps

    def mutate(self, individual: Individual) -> Individual:
        require_kind(individual, GeneKind.PERMUTATION)
        values = list(individual.genotype)
        if len(values) < 2:
            return individual.copy()
        for _ in range(self.swaps):
            i, j = sample_indices(self.rng, len(values), 2)
            values[i], values[j] = values[j], values[i]
        return individual.with_values(values)
