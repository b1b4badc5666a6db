"""
Parent selection policies.

Selectors draw with replacement and only ever return members of the
population they are given. Selecting from an empty population raises
EmptyPopulationError.
"""

from abc import ABC, abstractmethod
from typing import Iterable, List, Sequence

from src.evolver.core.environment import Environment, OptimizationMode
from src.evolver.core.individual import Individual
from src.evolver.exceptions import EmptyPopulationError
from src.evolver.random_source import RandomSource, choice, sample_indices


def _members(population: Iterable[Individual]) -> List[Individual]:
    members = list(population)
    if not members:
        raise EmptyPopulationError("Cannot select from an empty population")
    return members


class _SelectorBase(ABC):
    def __init__(self, rng: RandomSource):
        self.rng = rng

    def select(self, population: Sequence[Individual], environment: Environment) -> Individual:
        return self._select_from(_members(population), environment)

    def select_many(
        self, population: Sequence[Individual], environment: Environment, n: int
    ) -> List[Individual]:
        members = _members(population)
        return [self._select_from(members, environment) for _ in range(n)]

    @abstractmethod
    def _select_from(self, members: List[Individual], environment: Environment) -> Individual:
        """Pick one of the non-empty ``members``."""


class RandomSelector(_SelectorBase):
    """Uniform selection, ignoring fitness."""

    def _select_from(self, members: List[Individual], environment: Environment) -> Individual:
        return choice(self.rng, members)


class TournamentSelector(_SelectorBase):
    """
    Best of ``k`` distinct, uniformly drawn contestants.

    With ``k`` at least the population size every member competes, so the
    population's best individual always wins.
    """

    def __init__(self, rng: RandomSource, tournament_size: int = 3):
        super().__init__(rng)
        if tournament_size < 1:
            raise ValueError(f"Tournament size must be at least 1, got {tournament_size}")
        self.tournament_size = tournament_size

    def _select_from(self, members: List[Individual], environment: Environment) -> Individual:
        size = min(self.tournament_size, len(members))
        contestants = [members[i] for i in sample_indices(self.rng, len(members), size)]
        return environment.best_of(contestants)


class RouletteSelector(_SelectorBase):
    """
    Fitness-proportional (roulette wheel) selection.

    When maximizing non-negative fitness the raw values are the wheel
    weights. Otherwise fitness is shifted so the worst member weighs zero
    and better members weigh proportionally more (windowing). A flat
    population falls back to uniform selection.
    """

    def weights(self, members: List[Individual], environment: Environment) -> List[float]:
        fitnesses = [environment.fitness_of(ind) for ind in members]
        if environment.mode is OptimizationMode.MAXIMIZE:
            floor = min(fitnesses)
            if floor >= 0:
                return fitnesses
            return [f - floor for f in fitnesses]
        ceiling = max(fitnesses)
        return [ceiling - f for f in fitnesses]

    def _select_from(self, members: List[Individual], environment: Environment) -> Individual:
        weights = self.weights(members, environment)
        total = sum(weights)
        if total <= 0:
            return choice(self.rng, members)

        spin = self.rng.next_uniform_real() * total
        cumulative = 0.0
        for weight, individual in zip(weights, members):
            cumulative += weight
            if spin < cumulative:
                return individual
        # Float round-off can leave spin at the very top of the wheel
        return next(ind for weight, ind in zip(reversed(weights), reversed(members)) if weight > 0)


class RankSelector(_SelectorBase):
    """Linear ranking selection with pressure in [1, 2]."""

    def __init__(self, rng: RandomSource, pressure: float = 1.5):
        super().__init__(rng)
        if not 1.0 <= pressure <= 2.0:
            raise ValueError(f"Selection pressure must be in [1, 2], got {pressure}")
        self.pressure = pressure

    def _select_from(self, members: List[Individual], environment: Environment) -> Individual:
        n = len(members)
        if n == 1:
            return members[0]
        ranked = environment.rank(members)
        s = self.pressure
        # ranked[0] is best and carries the largest weight
        weights = [(2 - s) / n + 2 * (n - 1 - i) * (s - 1) / (n * (n - 1)) for i in range(n)]
        spin = self.rng.next_uniform_real() * sum(weights)
        cumulative = 0.0
        for weight, individual in zip(weights, ranked):
            cumulative += weight
            if spin < cumulative:
                return individual
        return ranked[0]
