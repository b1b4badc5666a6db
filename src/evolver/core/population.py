"""
Population management for the Evolver engine.

``Population`` is an unordered bag of individuals with a configured
capacity. ``OrderedPopulation`` additionally keeps its members sorted
best-first under an environment so elites and culls are cheap.
"""

import bisect
import statistics
from typing import Any, Dict, Iterable, Iterator, List, Optional

from src.evolver.core.environment import Environment, OptimizationMode
from src.evolver.core.individual import Individual
from src.evolver.exceptions import EmptyPopulationError, PopulationOrderError


class Population:
    """
    A collection of individuals under evolution in one generation.

    The population owns the list holding its members; operators receive
    individuals and return new ones rather than editing this list.
    """

    def __init__(self, capacity: int, individuals: Optional[Iterable[Individual]] = None):
        if capacity < 0:
            raise ValueError(f"Population capacity must be non-negative, got {capacity}")
        self.capacity = capacity
        self._individuals: List[Individual] = []
        if individuals is not None:
            self.extend(individuals)

    # Membership

    def add(self, individual: Individual) -> None:
        self._individuals.append(individual)

    def extend(self, individuals: Iterable[Individual]) -> None:
        for individual in individuals:
            self.add(individual)

    def remove(self, individual: Individual) -> None:
        for i, member in enumerate(self._individuals):
            if member is individual:
                del self._individuals[i]
                return
        raise ValueError(f"Individual {individual.id} is not in the population")

    def clear(self) -> None:
        self._individuals.clear()

    def size(self) -> int:
        return len(self._individuals)

    def __len__(self) -> int:
        return len(self._individuals)

    def __iter__(self) -> Iterator[Individual]:
        return iter(list(self._individuals))

    def __getitem__(self, index: int) -> Individual:
        return self._individuals[index]

    def __contains__(self, individual: object) -> bool:
        return any(member is individual for member in self._individuals)

    @property
    def individuals(self) -> List[Individual]:
        return list(self._individuals)

    @property
    def is_full(self) -> bool:
        return len(self._individuals) >= self.capacity

    # Queries

    def best(self, environment: Environment) -> Individual:
        if not self._individuals:
            raise EmptyPopulationError("Population is empty")
        return environment.best_of(self._individuals)

    def ranked(self, environment: Environment) -> List[Individual]:
        return environment.rank(self._individuals)

    def increment_ages(self) -> None:
        for individual in self._individuals:
            individual.increment_age()

    def count_distinct(self) -> int:
        return len({(ind.kind, ind.genotype) for ind in self._individuals})

    def calculate_statistics(self, environment: Environment) -> Dict[str, Any]:
        """Summary statistics over evaluated members."""
        fitnesses = [ind.fitness for ind in self._individuals if ind.evaluated_by is environment]
        if not fitnesses:
            return {"population_size": len(self._individuals), "evaluated_count": 0}

        if environment.mode is OptimizationMode.MINIMIZE:
            best, worst = min(fitnesses), max(fitnesses)
        else:
            best, worst = max(fitnesses), min(fitnesses)

        ages = [ind.age for ind in self._individuals]
        return {
            "population_size": len(self._individuals),
            "evaluated_count": len(fitnesses),
            "distinct_genotypes": self.count_distinct(),
            "best_fitness": best,
            "worst_fitness": worst,
            "avg_fitness": statistics.mean(fitnesses),
            "median_fitness": statistics.median(fitnesses),
            "fitness_std": statistics.stdev(fitnesses) if len(fitnesses) > 1 else 0.0,
            "fitness_sum": sum(fitnesses),
            "avg_age": statistics.mean(ages),
            "max_age": max(ages),
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(size={len(self)}, capacity={self.capacity})"


class OrderedPopulation(Population):
    """
    Population kept sorted best-first under an environment.

    Members are assessed on insertion. Iteration yields non-decreasing
    fitness when minimizing and non-increasing fitness when maximizing.
    If the environment switches mode the order goes stale; order-dependent
    calls then raise PopulationOrderError until ``resort`` is called.
    """

    def __init__(
        self,
        environment: Environment,
        capacity: int,
        individuals: Optional[Iterable[Individual]] = None,
    ):
        self.environment = environment
        self._keys: List[float] = []
        self._sorted_mode = environment.mode
        super().__init__(capacity, individuals)

    @property
    def is_stale(self) -> bool:
        return self.environment.mode is not self._sorted_mode

    def _require_fresh(self) -> None:
        if self.is_stale:
            raise PopulationOrderError(
                f"Population was ordered for {self._sorted_mode.value} but the environment "
                f"now {self.environment.mode.value}s; call resort()"
            )

    def add(self, individual: Individual) -> None:
        self._require_fresh()
        self.environment.assess(individual)
        key = self.environment.sort_key(individual)
        # bisect_right keeps insertion order among equal keys
        position = bisect.bisect_right(self._keys, key)
        self._keys.insert(position, key)
        self._individuals.insert(position, individual)

    def remove(self, individual: Individual) -> None:
        for i, member in enumerate(self._individuals):
            if member is individual:
                del self._individuals[i]
                del self._keys[i]
                return
        raise ValueError(f"Individual {individual.id} is not in the population")

    def clear(self) -> None:
        super().clear()
        self._keys.clear()

    def resort(self) -> None:
        """Re-establish the order under the environment's current mode."""
        self.environment.assess_all(self._individuals)
        members = sorted(self._individuals, key=self.environment.sort_key)
        self._individuals = members
        self._keys = [self.environment.sort_key(ind) for ind in members]
        self._sorted_mode = self.environment.mode

    def best(self, environment: Optional[Environment] = None) -> Individual:
        self._require_fresh()
        if not self._individuals:
            raise EmptyPopulationError("Population is empty")
        return self._individuals[0]

    def worst(self) -> Individual:
        self._require_fresh()
        if not self._individuals:
            raise EmptyPopulationError("Population is empty")
        return self._individuals[-1]

    def best_k(self, k: int) -> List[Individual]:
        self._require_fresh()
        return self._individuals[:max(k, 0)]

    def worst_k(self, k: int) -> List[Individual]:
        """The k worst members, worst first."""
        self._require_fresh()
        if k <= 0:
            return []
        return self._individuals[:-k - 1:-1]

    def remove_best(self, n: int) -> List[Individual]:
        self._require_fresh()
        n = min(max(n, 0), len(self._individuals))
        removed = self._individuals[:n]
        del self._individuals[:n]
        del self._keys[:n]
        return removed

    def remove_worst(self, n: int) -> List[Individual]:
        self._require_fresh()
        n = min(max(n, 0), len(self._individuals))
        if n == 0:
            return []
        removed = self._individuals[-n:]
        del self._individuals[-n:]
        del self._keys[-n:]
        return removed

    def truncate(self, size: int) -> None:
        """Keep only the best ``size`` members."""
        self.remove_worst(len(self._individuals) - size)

    def ranked(self, environment: Optional[Environment] = None) -> List[Individual]:
        self._require_fresh()
        return list(self._individuals)

    def is_sorted(self) -> bool:
        return all(self._keys[i] <= self._keys[i + 1] for i in range(len(self._keys) - 1))
