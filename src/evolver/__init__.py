"""
Evolver: a generic evolutionary-computation framework.

Individuals are fixed-length genotypes over binary, real, integer or
permutation loci. An Environment scores and orders them; pluggable
generators, selectors, recombinators and mutators are driven by a single
parameterized control loop. The simple genetic algorithm, evolutionary
programming and differential evolution are preset configurations of it.
"""

from src.evolver.core import (
    AlgorithmConfig,
    AlgorithmState,
    BinaryCharacteristic,
    Comparison,
    DifferentialEvolution,
    Environment,
    EvolutionaryAlgorithm,
    GeneKind,
    GenerationReport,
    Individual,
    IntegerCharacteristic,
    Locus,
    OptimizationMode,
    OrderedPopulation,
    PermutationCharacteristic,
    Population,
    RealCharacteristic,
    RunResult,
    TerminationReason,
    create_default_config,
    create_test_config,
    differential_evolution,
    evolutionary_programming,
    simple_ga,
)
from src.evolver.exceptions import (
    EmptyPopulationError,
    EvolverError,
    InvalidConfigError,
    InvalidGeneError,
    PopulationOrderError,
    RepresentationMismatchError,
)
from src.evolver.random_source import NumpyRandomSource, RandomSource

__version__ = "1.0.0"

__all__ = [
    # Configuration
    "AlgorithmConfig",
    "create_default_config",
    "create_test_config",

    # Data model
    "BinaryCharacteristic",
    "GeneKind",
    "Individual",
    "IntegerCharacteristic",
    "Locus",
    "OrderedPopulation",
    "PermutationCharacteristic",
    "Population",
    "RealCharacteristic",

    # Fitness
    "Comparison",
    "Environment",
    "OptimizationMode",

    # Engine
    "AlgorithmState",
    "DifferentialEvolution",
    "EvolutionaryAlgorithm",
    "GenerationReport",
    "RunResult",
    "TerminationReason",
    "differential_evolution",
    "evolutionary_programming",
    "simple_ga",

    # Randomness
    "NumpyRandomSource",
    "RandomSource",

    # Errors
    "EmptyPopulationError",
    "EvolverError",
    "InvalidConfigError",
    "InvalidGeneError",
    "PopulationOrderError",
    "RepresentationMismatchError",
]
