"""
Gene value domains.

A characteristic describes the legal values of one locus. Characteristics are
immutable and may be shared by every locus of an individual. Gene values must
be totally ordered and support a numeric distance; all concrete domains here
are numeric.
"""

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from numbers import Integral, Real
from typing import Any, Dict, Optional


class GeneKind(Enum):
    """Representation families."""
    BINARY = "binary"
    REAL = "real"
    INTEGER = "integer"
    PERMUTATION = "permutation"


class Characteristic(ABC):
    """Legal-value domain for a locus."""

    kind: GeneKind

    @abstractmethod
    def is_valid(self, value: Any) -> bool:
        """Return True if ``value`` belongs to this domain."""

    @property
    def lower(self) -> Optional[float]:
        return None

    @property
    def upper(self) -> Optional[float]:
        return None

    def distance(self, a: Any, b: Any) -> float:
        return abs(float(a) - float(b))

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind.value, "lower": self.lower, "upper": self.upper}


def _is_int(value: Any) -> bool:
    return isinstance(value, Integral) and not isinstance(value, bool)


@dataclass(frozen=True)
class BinaryCharacteristic(Characteristic):
    """Domain {0, 1}."""

    kind = GeneKind.BINARY

    def is_valid(self, value: Any) -> bool:
        return _is_int(value) and value in (0, 1)

    @property
    def lower(self) -> int:
        return 0

    @property
    def upper(self) -> int:
        return 1


@dataclass(frozen=True)
class RealCharacteristic(Characteristic):
    """Closed interval [low, high] of finite floats."""

    low: float
    high: float

    kind = GeneKind.REAL

    def __post_init__(self):
        if not (math.isfinite(self.low) and math.isfinite(self.high)):
            raise ValueError("Real bounds must be finite")
        if self.high < self.low:
            raise ValueError(f"Upper bound {self.high} is below lower bound {self.low}")

    @property
    def lower(self) -> float:
        return self.low

    @property
    def upper(self) -> float:
        return self.high

    @property
    def width(self) -> float:
        return self.high - self.low

    def is_valid(self, value: Any) -> bool:
        if not isinstance(value, Real) or isinstance(value, bool):
            return False
        return self.low <= value <= self.high

    def clamp(self, value: float) -> float:
        return min(self.high, max(self.low, value))

    def reflect(self, value: float) -> float:
        """Mirror ``value`` back into the interval at its bounds."""
        width = self.width
        if width == 0:
            return self.low
        # Fold onto a period of 2*width and mirror the upper half
        offset = math.fmod(value - self.low, 2 * width)
        if offset < 0:
            offset += 2 * width
        if offset > width:
            offset = 2 * width - offset
        return self.clamp(self.low + offset)


@dataclass(frozen=True)
class IntegerCharacteristic(Characteristic):
    """Inclusive integer range [low, high]."""

    low: int
    high: int

    kind = GeneKind.INTEGER

    def __post_init__(self):
        if self.high < self.low:
            raise ValueError(f"Upper bound {self.high} is below lower bound {self.low}")

    @property
    def lower(self) -> int:
        return self.low

    @property
    def upper(self) -> int:
        return self.high

    def is_valid(self, value: Any) -> bool:
        return _is_int(value) and self.low <= value <= self.high


@dataclass(frozen=True)
class PermutationCharacteristic(Characteristic):
    """Index set {0, ..., size - 1}.

    Only membership is checked per locus. The requirement that every index
    appears exactly once is a property of the whole individual.
    """

    size: int

    kind = GeneKind.PERMUTATION

    def __post_init__(self):
        if self.size <= 0:
            raise ValueError(f"Permutation size must be positive, got {self.size}")

    @property
    def lower(self) -> int:
        return 0

    @property
    def upper(self) -> int:
        return self.size - 1

    def is_valid(self, value: Any) -> bool:
        return _is_int(value) and 0 <= value < self.size

    def to_dict(self) -> Dict[str, Any]:
        return {**super().to_dict(), "size": self.size}
