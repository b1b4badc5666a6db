"""
Environment: the fitness oracle and optimization-direction policy.

The environment wraps a caller-supplied fitness function and derives a total
order over individuals from it. It owns no individuals and does not cache
fitness itself; ``assess`` stores the value on the individual so callers
control caching.
"""

import functools
import logging
import math
from enum import Enum, IntEnum
from numbers import Real
from typing import Callable, Iterable, List, Optional

from src.evolver.core.individual import Individual
from src.evolver.exceptions import EmptyPopulationError

logger = logging.getLogger("evolver.environment")

FitnessFunction = Callable[[Individual], float]


class OptimizationMode(str, Enum):
    """Optimization direction."""
    MINIMIZE = "minimize"
    MAXIMIZE = "maximize"


class Comparison(IntEnum):
    """Result of ``Environment.compare``; LESS ranks first (better)."""
    LESS = -1
    EQUAL = 0
    GREATER = 1


class Environment:
    """Scores individuals and orders them by the configured mode."""

    def __init__(
        self,
        fitness_function: FitnessFunction,
        mode: OptimizationMode = OptimizationMode.MAXIMIZE,
        name: Optional[str] = None,
    ):
        self.fitness_function = fitness_function
        self._mode = OptimizationMode(mode)
        self.name = name or getattr(fitness_function, "__name__", "environment")
        self.evaluations = 0

    @property
    def mode(self) -> OptimizationMode:
        return self._mode

    def switch_mode(self, mode: OptimizationMode) -> None:
        """Change direction. Ordered populations must be resorted afterwards."""
        mode = OptimizationMode(mode)
        if mode != self._mode:
            logger.info("Environment %s switched from %s to %s", self.name, self._mode.value, mode.value)
        self._mode = mode

    def evaluate(self, individual: Individual) -> float:
        """Call the fitness function. Errors propagate unchanged."""
        value = self.fitness_function(individual)
        if not isinstance(value, Real) or isinstance(value, bool):
            raise TypeError(f"Fitness must be a real number, got {type(value).__name__}")
        value = float(value)
        if math.isnan(value):
            raise ValueError(f"Fitness of individual {individual.id} is NaN")
        self.evaluations += 1
        return value

    def assess(self, individual: Individual) -> float:
        """Evaluate unless already scored by this environment, caching on the individual."""
        if individual.evaluated_by is self:
            return individual.fitness
        fitness = self.evaluate(individual)
        individual.update_fitness(fitness, self)
        return fitness

    def assess_all(self, individuals: Iterable[Individual]) -> int:
        """Assess every pending individual; returns how many were evaluated."""
        pending = [ind for ind in individuals if ind.evaluated_by is not self]
        for individual in pending:
            self.assess(individual)
        return len(pending)

    def fitness_of(self, individual: Individual) -> float:
        if individual.evaluated_by is self:
            return individual.fitness
        return self.evaluate(individual)

    def compare_fitness(self, a: float, b: float) -> Comparison:
        if a == b:
            return Comparison.EQUAL
        a_first = a < b if self._mode is OptimizationMode.MINIMIZE else a > b
        return Comparison.LESS if a_first else Comparison.GREATER

    def compare(self, a: Individual, b: Individual) -> Comparison:
        """Order two individuals: LESS means ``a`` ranks better than ``b``."""
        return self.compare_fitness(self.fitness_of(a), self.fitness_of(b))

    def is_better(self, a: Individual, b: Individual) -> bool:
        return self.compare(a, b) is Comparison.LESS

    def is_better_fitness(self, a: float, b: float) -> bool:
        return self.compare_fitness(a, b) is Comparison.LESS

    def sort_key(self, individual: Individual) -> float:
        """Ascending key: smaller sorts first (better)."""
        fitness = self.fitness_of(individual)
        return fitness if self._mode is OptimizationMode.MINIMIZE else -fitness

    def rank(self, individuals: Iterable[Individual]) -> List[Individual]:
        """Return individuals best-first (stable for ties)."""
        return sorted(individuals, key=functools.cmp_to_key(self.compare))

    def best_of(self, individuals: Iterable[Individual]) -> Individual:
        best = None
        for individual in individuals:
            if best is None or self.is_better(individual, best):
                best = individual
        if best is None:
            raise EmptyPopulationError("Cannot pick the best of zero individuals")
        return best

    def __repr__(self) -> str:
        return f"Environment(name={self.name!r}, mode={self._mode.value})"
