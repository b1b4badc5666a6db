"""Core data model and control loop of the Evolver framework."""

from src.evolver.core.characteristic import (
    BinaryCharacteristic,
    Characteristic,
    GeneKind,
    IntegerCharacteristic,
    PermutationCharacteristic,
    RealCharacteristic,
)
from src.evolver.core.config import AlgorithmConfig, create_default_config, create_test_config
from src.evolver.core.engine import (
    AlgorithmState,
    DifferentialEvolution,
    EvolutionaryAlgorithm,
    GenerationReport,
    RunResult,
    TerminationReason,
    differential_evolution,
    evolutionary_programming,
    simple_ga,
)
from src.evolver.core.environment import Comparison, Environment, OptimizationMode
from src.evolver.core.individual import Individual, Locus
from src.evolver.core.population import OrderedPopulation, Population
from src.evolver.core.replacement import (
    GenerationalReplacement,
    MuCommaLambdaReplacement,
    MuPlusLambdaReplacement,
    OneToOneReplacement,
)

__all__ = [
    "AlgorithmConfig",
    "AlgorithmState",
    "BinaryCharacteristic",
    "Characteristic",
    "Comparison",
    "DifferentialEvolution",
    "Environment",
    "EvolutionaryAlgorithm",
    "GeneKind",
    "GenerationReport",
    "GenerationalReplacement",
    "Individual",
    "IntegerCharacteristic",
    "Locus",
    "MuCommaLambdaReplacement",
    "MuPlusLambdaReplacement",
    "OneToOneReplacement",
    "OptimizationMode",
    "OrderedPopulation",
    "PermutationCharacteristic",
    "Population",
    "RealCharacteristic",
    "RunResult",
    "TerminationReason",
    "create_default_config",
    "create_test_config",
    "differential_evolution",
    "evolutionary_programming",
    "simple_ga",
]
