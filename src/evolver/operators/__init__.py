"""Generators, selectors, recombinators and mutators."""

from src.evolver.operators.base import Generator, Mutator, Recombinator, Selector
from src.evolver.operators.differential import (
    BinomialCrossover,
    DifferentialMutator,
    ExponentialCrossover,
)
from src.evolver.operators.generation import (
    BinaryGenerator,
    IntegerGenerator,
    PermutationGenerator,
    RealGenerator,
)
from src.evolver.operators.mutation import (
    BitFlipMutator,
    BoundedPerturbationMutator,
    RandomResettingMutator,
    SwapMutator,
    UniformResetMutator,
)
from src.evolver.operators.recombination import (
    ArithmeticRecombination,
    OnePointCrossover,
    PartiallyMappedCrossover,
    UniformCrossover,
    pmx,
)
from src.evolver.operators.selection import (
    RandomSelector,
    RankSelector,
    RouletteSelector,
    TournamentSelector,
)

__all__ = [
    "ArithmeticRecombination",
    "BinaryGenerator",
    "BinomialCrossover",
    "BitFlipMutator",
    "BoundedPerturbationMutator",
    "DifferentialMutator",
    "ExponentialCrossover",
    "Generator",
    "IntegerGenerator",
    "Mutator",
    "OnePointCrossover",
    "PartiallyMappedCrossover",
    "PermutationGenerator",
    "RandomResettingMutator",
    "RandomSelector",
    "RankSelector",
    "RealGenerator",
    "Recombinator",
    "RouletteSelector",
    "Selector",
    "SwapMutator",
    "TournamentSelector",
    "UniformCrossover",
    "UniformResetMutator",
    "pmx",
]
