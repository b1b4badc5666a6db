"""
Unit tests for mutation operators (Subtask 2.4).

Tests cover:
- Bit flipping
- Bounded real perturbation with clamping and reflection
- Uniform and integer resetting
- Permutation swap
- The copy policy shared by all mutators
"""

import pytest

from src.evolver.core.characteristic import (
    BinaryCharacteristic,
    IntegerCharacteristic,
    PermutationCharacteristic,
    RealCharacteristic,
)
from src.evolver.core.individual import Individual
from src.evolver.exceptions import RepresentationMismatchError
from src.evolver.operators.base import Mutator
from src.evolver.operators.generation import PermutationGenerator
from src.evolver.operators.mutation import (
    _LocusMutator,
    BitFlipMutator,
    BoundedPerturbationMutator,
    RandomResettingMutator,
    SwapMutator,
    UniformResetMutator,
)


def bits(*values):
    return Individual.from_values(list(values), BinaryCharacteristic())


class TestBitFlipMutator:
    """Test suite for bit flipping."""

    def test_single_locus_flip(self, rng):
        original = bits(0, 0, 0, 0, 0, 0)

        mutated = BitFlipMutator(rng).mutate(original)

        assert sum(mutated.genotype) == 1
        assert original.genotype == (0, 0, 0, 0, 0, 0)
        assert mutated is not original

    def test_every_locus_flip(self, rng):
        mutated = BitFlipMutator(rng, locus_probability=1.0).mutate(bits(1, 0, 1))

        assert mutated.genotype == (0, 1, 0)

    def test_zero_locus_probability_copies(self, rng):
        original = bits(1, 0, 1)
        original.update_fitness(2.0, evaluator=object())

        mutated = BitFlipMutator(rng, locus_probability=0.0).mutate(original)

        assert mutated.genotype == original.genotype
        assert not mutated.evaluated

    def test_rejects_other_kinds(self, rng, permutation_pair):
        with pytest.raises(RepresentationMismatchError):
            BitFlipMutator(rng).mutate(permutation_pair[0])

    def test_invalid_locus_probability(self, rng):
        with pytest.raises(ValueError):
            BitFlipMutator(rng, locus_probability=1.2)


class TestBoundedPerturbationMutator:
    """Test suite for real perturbation."""

    def test_delta_is_bounded(self, rng):
        char = RealCharacteristic(-10.0, 10.0)
        original = Individual.from_values([0.0, 0.0, 0.0], char)
        mutator = BoundedPerturbationMutator(rng, step=0.5, locus_probability=1.0)

        for _ in range(100):
            mutated = mutator.mutate(original)
            assert all(abs(v) <= 0.5 for v in mutated.genotype)

    def test_clamp_keeps_values_in_bounds(self, rng):
        char = RealCharacteristic(0.0, 1.0)
        original = Individual.from_values([1.0, 0.0], char)
        mutator = BoundedPerturbationMutator(rng, step=5.0, locus_probability=1.0)

        for _ in range(100):
            assert all(0.0 <= v <= 1.0 for v in mutator.mutate(original).genotype)

    def test_reflect_keeps_values_in_bounds(self, rng):
        char = RealCharacteristic(-1.0, 1.0)
        original = Individual.from_values([0.9, -0.9], char)
        mutator = BoundedPerturbationMutator(rng, step=3.0, boundary="reflect", locus_probability=1.0)

        for _ in range(100):
            assert all(-1.0 <= v <= 1.0 for v in mutator.mutate(original).genotype)

    def test_single_locus_by_default(self, rng):
        char = RealCharacteristic(-10.0, 10.0)
        original = Individual.from_values([0.0] * 5, char)

        mutated = BoundedPerturbationMutator(rng, step=1.0).mutate(original)

        assert sum(1 for v in mutated.genotype if v != 0.0) <= 1

    def test_invalid_arguments(self, rng):
        with pytest.raises(ValueError):
            BoundedPerturbationMutator(rng, step=0.0)
        with pytest.raises(ValueError):
            BoundedPerturbationMutator(rng, boundary="wrap")

    def test_rejects_binary(self, rng):
        with pytest.raises(RepresentationMismatchError):
            BoundedPerturbationMutator(rng).mutate(bits(0, 1))


class TestResetMutators:
    """Test suite for resetting mutators."""

    def test_uniform_reset_within_interval(self, rng):
        char = RealCharacteristic(5.0, 6.0)
        original = Individual.from_values([5.5, 5.5], char)
        mutator = UniformResetMutator(rng, locus_probability=1.0)

        for _ in range(50):
            assert all(5.0 <= v <= 6.0 for v in mutator.mutate(original).genotype)

    def test_random_resetting_within_range(self, rng):
        char = IntegerCharacteristic(-2, 2)
        original = Individual.from_values([0, 0, 0, 0], char)
        mutator = RandomResettingMutator(rng, locus_probability=1.0)
        seen = set()

        for _ in range(100):
            mutated = mutator.mutate(original)
            assert all(-2 <= v <= 2 for v in mutated.genotype)
            seen.update(mutated.genotype)

        assert seen == {-2, -1, 0, 1, 2}


class TestSwapMutator:
    """Test suite for permutation swap."""

    def test_swap_preserves_permutation(self, rng):
        generator = PermutationGenerator(10, rng)
        mutator = SwapMutator(rng, swaps=3)

        for _ in range(100):
            original = generator.generate()
            mutated = mutator.mutate(original)
            assert mutated.is_permutation()
            assert original.is_permutation()

    def test_single_swap_changes_two_positions(self, rng, permutation_pair):
        original = permutation_pair[0]

        mutated = SwapMutator(rng).mutate(original)
        changed = [k for k in range(len(original)) if mutated.value_at(k) != original.value_at(k)]

        assert len(changed) == 2
        i, j = changed
        assert mutated.value_at(i) == original.value_at(j)
        assert mutated.value_at(j) == original.value_at(i)

    def test_length_one_is_copied(self, rng):
        original = Individual.from_values([0], PermutationCharacteristic(1))

        mutated = SwapMutator(rng).mutate(original)

        assert mutated.genotype == (0,)
        assert mutated is not original

    def test_rejects_non_permutations(self, rng):
        with pytest.raises(RepresentationMismatchError):
            SwapMutator(rng).mutate(bits(0, 1, 1))

    def test_invalid_swaps(self, rng):
        with pytest.raises(ValueError):
            SwapMutator(rng, swaps=0)


class TestMutatorProtocol:
    """All mutators satisfy the capability protocol."""

    @pytest.mark.parametrize("mutator_cls", [
        BitFlipMutator,
        BoundedPerturbationMutator,
        UniformResetMutator,
        RandomResettingMutator,
        SwapMutator,
    ])
    def test_protocol(self, mutator_cls, rng):
        assert isinstance(mutator_cls(rng), Mutator)

    def test_locus_mutator_base_is_abstract(self, rng):
        with pytest.raises(TypeError):
            _LocusMutator(rng)
