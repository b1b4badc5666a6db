"""
Random number source consumed by generators, selectors and variation operators.

Operators depend only on the narrow ``RandomSource`` protocol. The default
implementation is backed by a ``numpy.random.Generator`` so runs are
reproducible from a single seed.
"""

from typing import List, MutableSequence, Optional, Protocol, Sequence, TypeVar, runtime_checkable

import numpy as np

T = TypeVar("T")


@runtime_checkable
class RandomSource(Protocol):
    """Uniform random numbers."""

    def next_uniform_real(self) -> float:
        """Return a float in [0, 1)."""
        ...

    def next_index(self, bound: int) -> int:
        """Return an int in [0, bound)."""
        ...

    def next_bit(self) -> int:
        """Return 0 or 1."""
        ...


class NumpyRandomSource:
    """RandomSource over ``numpy.random.default_rng``.

    Not synchronized: keep one instance per thread. The engine only draws
    from it on the control-loop thread.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def next_uniform_real(self) -> float:
        return float(self._rng.random())

    def next_index(self, bound: int) -> int:
        if bound <= 0:
            raise ValueError(f"Index bound must be positive, got {bound}")
        return int(self._rng.integers(0, bound))

    def next_bit(self) -> int:
        return int(self._rng.integers(0, 2))

    def __repr__(self) -> str:
        return f"NumpyRandomSource(seed={self.seed})"


def bernoulli(rng: RandomSource, probability: float) -> bool:
    """Draw True with the given probability."""
    if probability >= 1.0:
        return True
    if probability <= 0.0:
        return False
    return rng.next_uniform_real() < probability


def uniform_between(rng: RandomSource, lower: float, upper: float) -> float:
    """Draw a float in [lower, upper)."""
    return lower + rng.next_uniform_real() * (upper - lower)


def shuffle_in_place(rng: RandomSource, items: MutableSequence[T]) -> None:
    """Fisher-Yates shuffle."""
    for i in range(len(items) - 1, 0, -1):
        j = rng.next_index(i + 1)
        items[i], items[j] = items[j], items[i]


def sample_indices(rng: RandomSource, bound: int, count: int) -> List[int]:
    """Draw ``count`` distinct indices from [0, bound) in random order."""
    if count > bound:
        raise ValueError(f"Cannot draw {count} distinct indices from {bound}")
    pool = list(range(bound))
    # Partial Fisher-Yates: only the first `count` slots are shuffled
    for i in range(count):
        j = i + rng.next_index(bound - i)
        pool[i], pool[j] = pool[j], pool[i]
    return pool[:count]


def choice(rng: RandomSource, items: Sequence[T]) -> T:
    """Pick one element uniformly."""
    return items[rng.next_index(len(items))]
