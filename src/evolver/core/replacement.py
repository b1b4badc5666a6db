"""
Replacement policies: how the next population is assembled from the current
(parent) population and the offspring of one generation.

Each policy returns a brand-new ordered population; the parent population is
not modified.
"""

from typing import List, Optional, Protocol

from src.evolver.core.config import AlgorithmConfig
from src.evolver.core.environment import Environment
from src.evolver.core.individual import Individual
from src.evolver.core.population import OrderedPopulation
from src.evolver.exceptions import InvalidConfigError


class ReplacementPolicy(Protocol):
    """Strategy deciding which individuals survive into the next generation."""

    def offspring_needed(self, config: AlgorithmConfig) -> int:
        ...

    def replace(
        self,
        parents: OrderedPopulation,
        offspring: List[Individual],
        environment: Environment,
        config: AlgorithmConfig,
    ) -> OrderedPopulation:
        ...


class GenerationalReplacement:
    """
    Offspring replace the parents entirely.

    With ``elitism_count`` > 0 (taken from the config unless given) the best
    parents are carried over unchanged and only the rest is replaced.
    """

    def __init__(self, elitism_count: Optional[int] = None):
        self.elitism_count = elitism_count

    def elites(self, config: AlgorithmConfig) -> int:
        return config.elitism_count if self.elitism_count is None else self.elitism_count

    def offspring_needed(self, config: AlgorithmConfig) -> int:
        elites = self.elites(config)
        if elites >= config.population_size:
            raise InvalidConfigError(
                f"Elitism count ({elites}) must be less than population size ({config.population_size})"
            )
        return config.population_size - elites

    def replace(self, parents, offspring, environment, config):
        survivors = OrderedPopulation(environment, config.population_size)
        survivors.extend(parents.best_k(self.elites(config)))
        survivors.extend(offspring[:self.offspring_needed(config)])
        return survivors


class MuPlusLambdaReplacement:
    """(mu + lambda): the best mu of parents and offspring together survive."""

    def offspring_needed(self, config: AlgorithmConfig) -> int:
        return config.lambda_size

    def replace(self, parents, offspring, environment, config):
        pool = OrderedPopulation(environment, config.population_size + len(offspring))
        pool.extend(parents)
        pool.extend(offspring)
        return OrderedPopulation(environment, config.population_size, pool.best_k(config.population_size))


class MuCommaLambdaReplacement:
    """(mu, lambda): only the best mu offspring survive; parents are discarded."""

    def offspring_needed(self, config: AlgorithmConfig) -> int:
        if config.lambda_size < config.population_size:
            raise InvalidConfigError(
                f"(mu, lambda) replacement needs offspring_count ({config.lambda_size}) "
                f">= population_size ({config.population_size})"
            )
        return config.lambda_size

    def replace(self, parents, offspring, environment, config):
        pool = OrderedPopulation(environment, len(offspring), offspring)
        return OrderedPopulation(environment, config.population_size, pool.best_k(config.population_size))


class OneToOneReplacement:
    """
    Differential evolution survival: each trial competes only with its target.

    ``offspring[i]`` must be the trial built for the i-th parent in the
    parents' best-first order. The trial survives unless its target is
    strictly better.
    """

    def offspring_needed(self, config: AlgorithmConfig) -> int:
        return config.population_size

    def replace(self, parents, offspring, environment, config):
        targets = parents.individuals
        if len(offspring) != len(targets):
            raise InvalidConfigError(
                f"One-to-one replacement needs one trial per target, "
                f"got {len(offspring)} trials for {len(targets)} targets"
            )
        survivors = [
            target if environment.is_better(target, trial) else trial
            for target, trial in zip(targets, offspring)
        ]
        return OrderedPopulation(environment, config.population_size, survivors)
