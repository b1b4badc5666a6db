"""
Operator capability protocols.

Each capability is independent: an operator implements whichever of these it
supports and shares no base behavior with the others. Operators own no
individuals. Recombinators and mutators follow a copy policy: they return new,
unevaluated individuals and never modify their arguments.
"""

from typing import List, Protocol, Sequence, runtime_checkable

from src.evolver.core.environment import Environment
from src.evolver.core.individual import Individual


@runtime_checkable
class Generator(Protocol):
    """Produces new, valid individuals."""

    def generate(self) -> Individual:
        ...


@runtime_checkable
class Selector(Protocol):
    """Picks individuals for reproduction, with replacement."""

    def select(self, population: Sequence[Individual], environment: Environment) -> Individual:
        ...


@runtime_checkable
class Recombinator(Protocol):
    """Combines two parents into offspring of the same length and kind."""

    def recombine(self, parent_a: Individual, parent_b: Individual) -> List[Individual]:
        ...


@runtime_checkable
class Mutator(Protocol):
    """Returns a perturbed copy of an individual."""

    def mutate(self, individual: Individual) -> Individual:
        ...


def operator_name(operator: object) -> str:
    return type(operator).__name__
