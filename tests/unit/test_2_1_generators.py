"""
Unit tests for generators and the random source (Subtask 2.1).

Tests cover:
- Random source contract and helpers
- Validity of generated individuals for every representation
- Permutation generator bijection
- Repetition behaviour relative to the size of the domain
"""

import pytest

from src.evolver.core.characteristic import GeneKind, RealCharacteristic
from src.evolver.operators.base import Generator
from src.evolver.operators.generation import (
    _GeneratorBase,
    BinaryGenerator,
    IntegerGenerator,
    PermutationGenerator,
    RealGenerator,
)
from src.evolver.random_source import (
    NumpyRandomSource,
    RandomSource,
    bernoulli,
    choice,
    sample_indices,
    shuffle_in_place,
)


class TestRandomSource:
    """Test suite for the random source."""

    def test_protocol(self, rng):
        assert isinstance(rng, RandomSource)

    def test_ranges(self, rng):
        for _ in range(500):
            assert 0.0 <= rng.next_uniform_real() < 1.0
            assert 0 <= rng.next_index(7) < 7
            assert rng.next_bit() in (0, 1)

    def test_invalid_bound(self, rng):
        with pytest.raises(ValueError):
            rng.next_index(0)

    def test_seeded_sources_repeat(self):
        a, b = NumpyRandomSource(seed=3), NumpyRandomSource(seed=3)

        assert [a.next_index(100) for _ in range(20)] == [b.next_index(100) for _ in range(20)]

    def test_bernoulli_extremes(self, rng):
        assert all(bernoulli(rng, 1.0) for _ in range(50))
        assert not any(bernoulli(rng, 0.0) for _ in range(50))

    def test_sample_indices_are_distinct(self, rng):
        for _ in range(50):
            drawn = sample_indices(rng, 10, 4)
            assert len(set(drawn)) == 4
            assert all(0 <= i < 10 for i in drawn)

        assert sorted(sample_indices(rng, 5, 5)) == [0, 1, 2, 3, 4]

        with pytest.raises(ValueError):
            sample_indices(rng, 3, 4)

    def test_shuffle_keeps_elements(self, rng):
        items = list(range(20))
        shuffle_in_place(rng, items)

        assert sorted(items) == list(range(20))

    def test_choice(self, rng):
        items = ["a", "b", "c"]
        assert choice(rng, items) in items


class TestGenerators:
    """Test suite for generators."""

    def test_binary_generator(self, rng):
        generator = BinaryGenerator(16, rng)

        for individual in generator.generate_many(20):
            assert individual.kind is GeneKind.BINARY
            assert len(individual) == 16
            assert set(individual.genotype) <= {0, 1}
            assert not individual.evaluated

    def test_real_generator_respects_bounds(self, rng):
        generator = RealGenerator(3, rng, lower=-2.0, upper=3.0)

        for individual in generator.generate_many(50):
            assert all(-2.0 <= v <= 3.0 for v in individual.genotype)

    def test_real_generator_per_dimension_bounds(self, rng):
        bounds = [RealCharacteristic(0.0, 1.0), RealCharacteristic(100.0, 200.0)]
        generator = RealGenerator(2, rng, bounds=bounds)

        for individual in generator.generate_many(50):
            assert 0.0 <= individual.value_at(0) <= 1.0
            assert 100.0 <= individual.value_at(1) <= 200.0

        with pytest.raises(ValueError):
            RealGenerator(3, rng, bounds=bounds)

    def test_integer_generator(self, rng):
        generator = IntegerGenerator(10, rng, lower=-3, upper=3)
        seen = set()

        for individual in generator.generate_many(50):
            assert all(-3 <= v <= 3 for v in individual.genotype)
            seen.update(individual.genotype)

        assert seen == set(range(-3, 4))

    def test_permutation_generator_yields_bijections(self, rng):
        generator = PermutationGenerator(12, rng)

        for individual in generator.generate_many(100):
            assert individual.kind is GeneKind.PERMUTATION
            assert individual.is_permutation()

    def test_identity_permutation(self, rng):
        assert PermutationGenerator(5, rng).identity().genotype == (0, 1, 2, 3, 4)

    def test_non_positive_length_rejected(self, rng):
        with pytest.raises(ValueError):
            BinaryGenerator(0, rng)
        with pytest.raises(ValueError):
            PermutationGenerator(-1, rng)

    def test_generators_satisfy_protocol(self, rng):
        assert isinstance(BinaryGenerator(2, rng), Generator)
        assert isinstance(PermutationGenerator(2, rng), Generator)

    def test_base_generator_is_abstract(self):
        with pytest.raises(TypeError):
            _GeneratorBase()


class TestRepetitionBehaviour:
    """Repeated genotypes depend on how large the domain is."""

    def test_large_domain_rarely_repeats(self, rng):
        """100 permutations of 20 elements (20! possibilities) are all distinct."""
        generator = PermutationGenerator(20, rng)
        genotypes = {ind.genotype for ind in generator.generate_many(100)}

        assert len(genotypes) == 100

    def test_small_domain_must_repeat(self, rng):
        """More draws than the domain holds forces duplicates."""
        generator = BinaryGenerator(2, rng)
        genotypes = [ind.genotype for ind in generator.generate_many(50)]

        assert len(set(genotypes)) <= 4
        assert len(set(genotypes)) < len(genotypes)

    def test_small_domain_is_covered(self, rng):
        """Enough draws from a tiny domain reach every genotype."""
        generator = PermutationGenerator(3, rng)
        genotypes = {ind.genotype for ind in generator.generate_many(200)}

        assert len(genotypes) == 6
