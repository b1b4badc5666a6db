"""
Evolver Configuration Module.

This module defines the validated configuration for the evolutionary
control loop: population sizing, operator probabilities, elitism, the
optimization direction and the termination budget.
"""

import os
from datetime import timedelta
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from src.evolver.core.environment import OptimizationMode
from src.evolver.exceptions import InvalidConfigError


class AlgorithmConfig(BaseModel):
    """Parameters controlling one evolutionary run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Population parameters
    population_size: int = Field(
        default=50,
        ge=2,
        description="Number of individuals in the population (mu)"
    )
    offspring_count: Optional[int] = Field(
        default=None,
        ge=1,
        description="Offspring per generation for (mu+lambda)/(mu,lambda) replacement; defaults to population_size"
    )
    max_generations: int = Field(
        default=100,
        ge=0,
        description="Maximum number of generations to evolve"
    )

    # Genetic operators
    crossover_probability: float = Field(
        default=0.7,
        ge=0.0,
        le=1.0,
        description="Probability of recombining a selected pair of parents"
    )
    mutation_probability: float = Field(
        default=0.1,
        ge=0.0,
        le=1.0,
        description="Probability of mutating each offspring"
    )
    elitism_count: int = Field(
        default=0,
        ge=0,
        description="Best individuals carried unchanged into the next generation"
    )

    # Direction and termination
    mode: OptimizationMode = Field(
        default=OptimizationMode.MAXIMIZE,
        description="Whether lower (minimize) or higher (maximize) fitness is better"
    )
    target_fitness: Optional[float] = Field(
        default=None,
        description="Stop once the best fitness reaches this value"
    )
    stagnation_generations: Optional[int] = Field(
        default=None,
        ge=1,
        description="Stop after this many generations without improving the best individual"
    )
    max_runtime: Optional[timedelta] = Field(
        default=None,
        description="Wall-clock budget for the run"
    )

    # Execution
    evaluation_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Threads used to evaluate a generation; None or 1 evaluates sequentially"
    )
    random_seed: Optional[int] = Field(
        default=None,
        description="Seed for the default random source"
    )
    log_interval: int = Field(
        default=10,
        ge=1,
        description="Generations between progress log lines"
    )

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except ValidationError as exc:
            raise InvalidConfigError(f"Invalid algorithm configuration: {exc}") from exc

    @model_validator(mode="after")
    def validate_elitism(self) -> "AlgorithmConfig":
        """Ensure elitism leaves room for offspring."""
        if self.elitism_count >= self.population_size:
            raise ValueError(
                f"Elitism count ({self.elitism_count}) must be less than "
                f"population size ({self.population_size})"
            )
        return self

    @property
    def lambda_size(self) -> int:
        return self.offspring_count or self.population_size

    def with_changes(self, **changes: Any) -> "AlgorithmConfig":
        """Return a revalidated copy with the given fields replaced."""
        return type(self)(**{**self.model_dump(), **changes})

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(mode="json")

    @classmethod
    def from_env(cls, **overrides: Any) -> "AlgorithmConfig":
        """Create configuration from EVOLVER_* environment variables."""
        config_dict: Dict[str, Any] = {}

        if pop_size := os.getenv("EVOLVER_POPULATION_SIZE"):
            config_dict["population_size"] = int(pop_size)
        if generations := os.getenv("EVOLVER_MAX_GENERATIONS"):
            config_dict["max_generations"] = int(generations)
        if crossover := os.getenv("EVOLVER_CROSSOVER_PROBABILITY"):
            config_dict["crossover_probability"] = float(crossover)
        if mutation := os.getenv("EVOLVER_MUTATION_PROBABILITY"):
            config_dict["mutation_probability"] = float(mutation)
        if elitism := os.getenv("EVOLVER_ELITISM_COUNT"):
            config_dict["elitism_count"] = int(elitism)
        if mode := os.getenv("EVOLVER_MODE"):
            config_dict["mode"] = mode.lower()
        if seed := os.getenv("EVOLVER_RANDOM_SEED"):
            config_dict["random_seed"] = int(seed)
        if workers := os.getenv("EVOLVER_EVALUATION_WORKERS"):
            config_dict["evaluation_workers"] = int(workers)

        config_dict.update(overrides)
        return cls(**config_dict)


# Convenience functions
def create_default_config(**overrides: Any) -> AlgorithmConfig:
    """Create a default configuration suitable for most use cases."""
    return AlgorithmConfig(**overrides)


def create_test_config(**overrides: Any) -> AlgorithmConfig:
    """Create a configuration suitable for testing (smaller, faster, seeded)."""
    params: Dict[str, Any] = {
        "population_size": 20,
        "max_generations": 10,
        "crossover_probability": 0.7,
        "mutation_probability": 0.2,
        "elitism_count": 2,
        "random_seed": 42,
        "log_interval": 1,
    }
    params.update(overrides)
    return AlgorithmConfig(**params)
