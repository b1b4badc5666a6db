"""
Generators for each representation.

Every generator draws from the supplied RandomSource and produces an
individual whose loci all satisfy their characteristic; permutation
generators additionally guarantee a bijection on the index domain.
"""

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from src.evolver.core.characteristic import (
    BinaryCharacteristic,
    IntegerCharacteristic,
    PermutationCharacteristic,
    RealCharacteristic,
)
from src.evolver.core.individual import Individual
from src.evolver.random_source import RandomSource, shuffle_in_place, uniform_between


class _GeneratorBase(ABC):
    """Shared ``generate_many`` for the concrete generators."""

    length: int

    @abstractmethod
    def generate(self) -> Individual:
        """Return a new random individual."""

    def generate_many(self, n: int) -> List[Individual]:
        return [self.generate() for _ in range(n)]

    @staticmethod
    def _check_length(length: int) -> int:
        if length <= 0:
            raise ValueError(f"Genotype length must be positive, got {length}")
        return length


class BinaryGenerator(_GeneratorBase):
    """Uniform random bit strings."""

    def __init__(self, length: int, rng: RandomSource):
        self.length = self._check_length(length)
        self.rng = rng
        self.characteristic = BinaryCharacteristic()

    def generate(self) -> Individual:
        bits = [self.rng.next_bit() for _ in range(self.length)]
        return Individual.from_values(bits, self.characteristic)


class RealGenerator(_GeneratorBase):
    """Uniform real vectors, one bounded interval per dimension."""

    def __init__(
        self,
        length: int,
        rng: RandomSource,
        lower: float = 0.0,
        upper: float = 1.0,
        bounds: Optional[Sequence[RealCharacteristic]] = None,
    ):
        self.length = self._check_length(length)
        self.rng = rng
        if bounds is not None:
            if len(bounds) != length:
                raise ValueError(f"Expected {length} bounds, got {len(bounds)}")
            self.characteristics = list(bounds)
        else:
            self.characteristics = [RealCharacteristic(lower, upper)] * length

    def generate(self) -> Individual:
        values = [uniform_between(self.rng, char.low, char.high) for char in self.characteristics]
        return Individual.from_values(values, self.characteristics)


class IntegerGenerator(_GeneratorBase):
    """Uniform integer vectors over an inclusive range."""

    def __init__(self, length: int, rng: RandomSource, lower: int, upper: int):
        self.length = self._check_length(length)
        self.rng = rng
        self.characteristic = IntegerCharacteristic(lower, upper)

    def generate(self) -> Individual:
        span = self.characteristic.high - self.characteristic.low + 1
        values = [self.characteristic.low + self.rng.next_index(span) for _ in range(self.length)]
        return Individual.from_values(values, self.characteristic)


class PermutationGenerator(_GeneratorBase):
    """Random permutations of 0..length-1 (Fisher-Yates)."""

    def __init__(self, length: int, rng: RandomSource):
        self.length = self._check_length(length)
        self.rng = rng
        self.characteristic = PermutationCharacteristic(length)

    def generate(self) -> Individual:
        values = list(range(self.length))
        shuffle_in_place(self.rng, values)
        return Individual.from_values(values, self.characteristic)

    def identity(self) -> Individual:
        return Individual.from_values(list(range(self.length)), self.characteristic)
