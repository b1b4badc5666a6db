"""
Individuals: fixed-length sequences of loci.

An individual owns its loci exclusively. Its length is fixed at construction
and never changes. Fitness is cached on the individual by the environment
that assessed it and is dropped whenever a gene is reassigned.
"""

import itertools
from functools import total_ordering
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple, Union

from src.evolver.core.characteristic import Characteristic, GeneKind
from src.evolver.exceptions import InvalidGeneError, RepresentationMismatchError

_id_counter = itertools.count()


@total_ordering
class Locus:
    """A single gene: a value constrained by a characteristic."""

    __slots__ = ("_value", "characteristic")

    def __init__(self, value: Any, characteristic: Characteristic):
        self.characteristic = characteristic
        self._value = None
        self.value = value

    @property
    def value(self) -> Any:
        return self._value

    @value.setter
    def value(self, value: Any) -> None:
        if not self.characteristic.is_valid(value):
            raise InvalidGeneError(
                f"Value {value!r} is outside the {self.characteristic.kind.value} domain "
                f"[{self.characteristic.lower}, {self.characteristic.upper}]"
            )
        self._value = value

    def copy(self) -> "Locus":
        return Locus(self._value, self.characteristic)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Locus):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other: "Locus") -> bool:
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return f"Locus({self._value!r})"


class Individual:
    """
    A candidate solution.

    Holds an ordered, fixed-length sequence of loci of a single
    representation kind, together with bookkeeping used by the engine:
    a unique id, an age in generations and the cached fitness.
    """

    def __init__(self, loci: Sequence[Locus]):
        if not loci:
            raise ValueError("An individual needs at least one locus")
        kinds = {locus.characteristic.kind for locus in loci}
        if len(kinds) != 1:
            raise RepresentationMismatchError(
                f"Loci of mixed kinds: {sorted(kind.value for kind in kinds)}"
            )
        self._loci: Tuple[Locus, ...] = tuple(loci)
        self.kind: GeneKind = kinds.pop()
        self.id: int = next(_id_counter)
        self.age: int = 0
        self.fitness: Optional[float] = None
        self.evaluated_by: Optional[object] = None

    @classmethod
    def from_values(
        cls,
        values: Sequence[Any],
        characteristics: Union[Characteristic, Sequence[Characteristic]],
    ) -> "Individual":
        """Build an individual from raw values and one shared or per-locus characteristic."""
        if isinstance(characteristics, Characteristic):
            characteristics = [characteristics] * len(values)
        if len(characteristics) != len(values):
            raise RepresentationMismatchError(
                f"{len(values)} values but {len(characteristics)} characteristics"
            )
        return cls([Locus(value, char) for value, char in zip(values, characteristics)])

    # Genotype access

    def __len__(self) -> int:
        return len(self._loci)

    def __iter__(self) -> Iterator[Locus]:
        return iter(self._loci)

    @property
    def loci(self) -> Tuple[Locus, ...]:
        return self._loci

    @property
    def characteristics(self) -> List[Characteristic]:
        return [locus.characteristic for locus in self._loci]

    @property
    def genotype(self) -> Tuple[Any, ...]:
        return tuple(locus.value for locus in self._loci)

    def value_at(self, index: int) -> Any:
        return self._loci[index].value

    def set_value_at(self, index: int, value: Any) -> None:
        """Assign a gene value, invalidating any cached fitness."""
        self._loci[index].value = value
        self.invalidate()

    def characteristic_at(self, index: int) -> Characteristic:
        return self._loci[index].characteristic

    # Fitness cache

    @property
    def evaluated(self) -> bool:
        return self.evaluated_by is not None

    def update_fitness(self, fitness: float, evaluator: object) -> None:
        self.fitness = fitness
        self.evaluated_by = evaluator

    def invalidate(self) -> None:
        self.fitness = None
        self.evaluated_by = None

    def increment_age(self) -> None:
        self.age += 1

    # Derivation

    def copy(self) -> "Individual":
        """Unevaluated clone with fresh loci and a new id."""
        return Individual([locus.copy() for locus in self._loci])

    def with_values(self, values: Sequence[Any]) -> "Individual":
        """New individual sharing this one's characteristics."""
        if len(values) != len(self._loci):
            raise RepresentationMismatchError(
                f"Expected {len(self._loci)} values, got {len(values)}"
            )
        return Individual(
            [Locus(value, locus.characteristic) for value, locus in zip(values, self._loci)]
        )

    def same_genotype(self, other: "Individual") -> bool:
        return self.kind == other.kind and self.genotype == other.genotype

    def is_compatible(self, other: "Individual") -> bool:
        return self.kind == other.kind and len(self) == len(other)

    def is_permutation(self) -> bool:
        """True if the genotype is a bijection on ``range(len(self))``."""
        return sorted(self.genotype) == list(range(len(self)))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "kind": self.kind.value,
            "genotype": list(self.genotype),
            "fitness": self.fitness,
            "age": self.age,
        }

    def __repr__(self) -> str:
        fitness = "unevaluated" if self.fitness is None else f"{self.fitness:.6g}"
        return f"Individual(id={self.id}, {fitness}, {list(self.genotype)})"


def require_compatible(*individuals: Individual) -> None:
    """Raise RepresentationMismatchError unless all individuals share kind and length."""
    first = individuals[0]
    for other in individuals[1:]:
        if not first.is_compatible(other):
            raise RepresentationMismatchError(
                f"Incompatible individuals: {first.kind.value}[{len(first)}] "
                f"vs {other.kind.value}[{len(other)}]"
            )


def require_kind(individual: Individual, *kinds: GeneKind) -> None:
    if individual.kind not in kinds:
        expected = ", ".join(kind.value for kind in kinds)
        raise RepresentationMismatchError(
            f"Expected a {expected} individual, got {individual.kind.value}"
        )


def require_permutation(individual: Individual) -> None:
    require_kind(individual, GeneKind.PERMUTATION)
    if not individual.is_permutation():
        raise InvalidGeneError(
            f"Genotype {list(individual.genotype)} is not a permutation of 0..{len(individual) - 1}"
        )
