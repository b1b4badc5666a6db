"""
PyTest configuration and fixtures for the Evolver framework.

This module provides shared test fixtures: seeded random sources, fitness
environments, sample individuals and configurations.
"""

import os
import sys
from typing import List

import pytest
import logfire

# Add project root to Python path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from src.core.config import settings
from src.evolver.core.characteristic import (
    BinaryCharacteristic,
    PermutationCharacteristic,
    RealCharacteristic,
)
from src.evolver.core.config import create_test_config
from src.evolver.core.environment import Environment, OptimizationMode
from src.evolver.core.individual import Individual
from src.evolver.random_source import NumpyRandomSource


# Override settings for testing
settings.environment = "testing"
settings.logfire_environment = "testing"

# Spans and events stay local during tests
logfire.configure(send_to_logfire=False, console=False)


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: end-to-end evolutionary runs")


# Fitness functions
def count_ones(individual: Individual) -> float:
    return float(sum(individual.genotype))


def square(individual: Individual) -> float:
    return individual.value_at(0) ** 2


def fixed_points(individual: Individual) -> float:
    return float(sum(1 for i, value in enumerate(individual.genotype) if value == i))


# Random sources
@pytest.fixture
def rng():
    """Seeded random source."""
    return NumpyRandomSource(seed=12345)


@pytest.fixture
def rng_factory():
    """Build independent seeded random sources."""
    def make(seed: int = 0) -> NumpyRandomSource:
        return NumpyRandomSource(seed=seed)
    return make


# Environments
@pytest.fixture
def onemax_environment():
    """Maximize the number of set bits."""
    return Environment(count_ones, OptimizationMode.MAXIMIZE, name="onemax")


@pytest.fixture
def square_environment():
    """Minimize x**2 for a one-dimensional real individual."""
    return Environment(square, OptimizationMode.MINIMIZE, name="square")


@pytest.fixture
def fixed_point_environment():
    """Maximize the number of positions holding their own index."""
    return Environment(fixed_points, OptimizationMode.MAXIMIZE, name="fixed_points")


# Individuals
@pytest.fixture
def binary_individuals() -> List[Individual]:
    """Bit strings with 0..4 set bits."""
    char = BinaryCharacteristic()
    return [
        Individual.from_values([1] * ones + [0] * (4 - ones), char)
        for ones in range(5)
    ]


@pytest.fixture
def real_individual() -> Individual:
    return Individual.from_values([0.5, -1.0, 2.0], RealCharacteristic(-5.0, 5.0))


@pytest.fixture
def permutation_pair():
    """Two permutations of 0..7."""
    char = PermutationCharacteristic(8)
    a = Individual.from_values([0, 1, 2, 3, 4, 5, 6, 7], char)
    b = Individual.from_values([3, 7, 5, 1, 6, 0, 2, 4], char)
    return a, b


# Configurations
@pytest.fixture
def test_config():
    """Small seeded configuration for fast runs."""
    return create_test_config()


@pytest.fixture
def mock_logfire(mocker):
    """Mock Logfire in the engine module for testing."""
    logfire_mock = mocker.patch("src.evolver.core.engine.logfire")
    return logfire_mock
