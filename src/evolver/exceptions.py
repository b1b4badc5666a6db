"""
Error kinds raised by the Evolver framework.

All errors are local conditions raised synchronously at the point of
violation. None of them are retried internally. When one escapes an operator
inside the control loop the engine annotates it with the generation and the
operator that failed before re-raising it.
"""

from typing import Optional


class EvolverError(Exception):
    """Base class for all framework errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.generation: Optional[int] = None
        self.operator: Optional[str] = None

    def __str__(self) -> str:
        message = super().__str__()
        if self.operator is not None:
            return f"{message} (operator={self.operator}, generation={self.generation})"
        return message


class InvalidGeneError(EvolverError, ValueError):
    """A locus assignment violates its characteristic."""


class InvalidConfigError(EvolverError, ValueError):
    """Malformed algorithm configuration."""


class RepresentationMismatchError(EvolverError, TypeError):
    """An operator received individuals of incompatible representation or length."""


class EmptyPopulationError(EvolverError):
    """Selection attempted on a population with no individuals."""


class PopulationOrderError(EvolverError):
    """An ordered population was used after its environment changed direction."""
