"""
Unit tests for differential evolution operators (Subtask 2.5).

Tests cover:
- DE/rand and DE/best donor construction and bound clamping
- Binomial and exponential trial crossover
- One-to-one survivor replacement
"""

from itertools import permutations

import pytest

from src.evolver.core.characteristic import BinaryCharacteristic, RealCharacteristic
from src.evolver.core.config import create_test_config
from src.evolver.core.environment import Environment, OptimizationMode
from src.evolver.core.individual import Individual
from src.evolver.core.population import OrderedPopulation
from src.evolver.core.replacement import OneToOneReplacement
from src.evolver.exceptions import (
    EmptyPopulationError,
    InvalidConfigError,
    RepresentationMismatchError,
)
from src.evolver.operators.base import Recombinator
from src.evolver.operators.differential import (
    BinomialCrossover,
    DifferentialMutator,
    ExponentialCrossover,
)
from src.evolver.random_source import NumpyRandomSource

WIDE = RealCharacteristic(-100.0, 100.0)


def sphere(individual):
    return float(sum(value ** 2 for value in individual.genotype))


def vectors(environment, *rows, char=WIDE):
    individuals = [Individual.from_values(list(row), char) for row in rows]
    for individual in individuals:
        environment.assess(individual)
    return individuals


class TestDifferentialMutator:
    """Test suite for donor construction."""

    @pytest.mark.parametrize("seed", range(8))
    def test_rand_donor_uses_three_other_members(self, seed):
        """donor = x_base + F * (x_r1 - x_r2) with base, r1, r2 distinct and not the target."""
        environment = Environment(sphere, OptimizationMode.MINIMIZE)
        members = vectors(environment, (50.0, 50.0), (2.0, 2.0), (4.0, 0.0), (0.0, 8.0))
        mutator = DifferentialMutator(NumpyRandomSource(seed=seed), scale=0.5)

        donor = mutator.donor(members, 0, environment)

        expected = set()
        for r1, r2, base in permutations(members[1:], 3):
            expected.add(tuple(
                b + 0.5 * (x - y) for b, x, y in zip(base.genotype, r1.genotype, r2.genotype)
            ))
        assert donor.genotype in expected

    @pytest.mark.parametrize("seed", range(8))
    def test_best_donor_starts_from_best(self, seed):
        environment = Environment(sphere, OptimizationMode.MINIMIZE)
        members = vectors(environment, (0.0, 0.0), (4.0, 2.0), (2.0, 6.0))
        mutator = DifferentialMutator(NumpyRandomSource(seed=seed), scale=0.5, base="best")

        donor = mutator.donor(members, 1, environment)

        assert donor.genotype in {(-1.0, -3.0), (1.0, 3.0)}

    def test_donor_is_clamped_to_bounds(self, rng):
        char = RealCharacteristic(-1.0, 1.0)
        environment = Environment(lambda ind: ind.value_at(0), OptimizationMode.MAXIMIZE)
        members = vectors(environment, (0.9,), (-0.9,), (0.9,), char=char)
        mutator = DifferentialMutator(rng, scale=2.0, base="best")

        for _ in range(20):
            assert mutator.donor(members, 0, environment).value_at(0) in (1.0, -1.0)

    def test_donor_is_a_new_unevaluated_individual(self, rng):
        environment = Environment(sphere, OptimizationMode.MINIMIZE)
        members = vectors(environment, (1.0,), (2.0,), (3.0,), (4.0,))
        before = [member.genotype for member in members]

        donor = DifferentialMutator(rng).donor(members, 2, environment)

        assert all(donor is not member for member in members)
        assert donor.fitness is None
        assert [member.genotype for member in members] == before

    def test_members_needed(self, rng):
        assert DifferentialMutator(rng).members_needed == 3
        assert DifferentialMutator(rng, base="best").members_needed == 2
        assert DifferentialMutator(rng, base="best", differences=2).members_needed == 4

    def test_too_few_members(self, rng):
        environment = Environment(sphere, OptimizationMode.MINIMIZE)
        members = vectors(environment, (1.0,), (2.0,), (3.0,))

        with pytest.raises(InvalidConfigError):
            DifferentialMutator(rng).donor(members, 0, environment)
        with pytest.raises(EmptyPopulationError):
            DifferentialMutator(rng).donor([], 0, environment)

    def test_rejects_non_real(self, rng):
        environment = Environment(lambda ind: float(sum(ind.genotype)))
        members = [Individual.from_values([i % 2], BinaryCharacteristic()) for i in range(4)]

        with pytest.raises(RepresentationMismatchError):
            DifferentialMutator(rng).donor(members, 0, environment)

    def test_invalid_parameters(self, rng):
        with pytest.raises(ValueError):
            DifferentialMutator(rng, scale=0.0)
        with pytest.raises(ValueError):
            DifferentialMutator(rng, base="worst")
        with pytest.raises(ValueError):
            DifferentialMutator(rng, differences=0)


class TestTrialCrossover:
    """Test suite for binomial and exponential crossover."""

    def pair(self, length=6):
        return (
            Individual.from_values([0.0] * length, WIDE),
            Individual.from_values([1.0] * length, WIDE),
        )

    @pytest.mark.parametrize("crossover_cls", [BinomialCrossover, ExponentialCrossover])
    def test_full_rate_takes_donor(self, crossover_cls, rng):
        target, donor = self.pair()

        [trial] = crossover_cls(rng, crossover_rate=1.0).recombine(target, donor)

        assert trial.genotype == donor.genotype
        assert trial is not donor

    @pytest.mark.parametrize("crossover_cls", [BinomialCrossover, ExponentialCrossover])
    def test_zero_rate_takes_exactly_one_donor_locus(self, crossover_cls, rng):
        target, donor = self.pair()
        crossover = crossover_cls(rng, crossover_rate=0.0)

        for _ in range(20):
            [trial] = crossover.recombine(target, donor)
            assert sum(trial.genotype) == 1.0

    @pytest.mark.parametrize("seed", range(10))
    def test_exponential_run_is_contiguous(self, seed):
        target, donor = self.pair(length=8)
        crossover = ExponentialCrossover(NumpyRandomSource(seed=seed), crossover_rate=0.6)

        [trial] = crossover.recombine(target, donor)
        mask = [value == 1.0 for value in trial.genotype]
        # A wrapping run has at most one off-to-on edge
        run_starts = sum(1 for i in range(len(mask)) if mask[i] and not mask[i - 1])

        assert any(mask)
        assert run_starts <= 1

    def test_binomial_loci_come_from_either_vector(self, rng):
        target, donor = self.pair(length=10)

        [trial] = BinomialCrossover(rng, crossover_rate=0.5).recombine(target, donor)

        assert set(trial.genotype) <= {0.0, 1.0}
        assert target.genotype == (0.0,) * 10
        assert trial.fitness is None

    def test_rejects_incompatible_vectors(self, rng):
        short_target, _ = self.pair(3)
        _, long_donor = self.pair(4)

        with pytest.raises(RepresentationMismatchError):
            BinomialCrossover(rng).recombine(short_target, long_donor)
        with pytest.raises(RepresentationMismatchError):
            ExponentialCrossover(rng).recombine(
                Individual.from_values([0, 1], BinaryCharacteristic()),
                Individual.from_values([1, 0], BinaryCharacteristic()),
            )

    def test_invalid_rate(self, rng):
        with pytest.raises(ValueError):
            BinomialCrossover(rng, crossover_rate=1.5)

    @pytest.mark.parametrize("crossover_cls", [BinomialCrossover, ExponentialCrossover])
    def test_satisfies_protocol(self, crossover_cls, rng):
        assert isinstance(crossover_cls(rng), Recombinator)


class TestOneToOneReplacement:
    """Test suite for greedy target-versus-trial survival."""

    def test_trial_replaces_target_unless_worse(self):
        environment = Environment(sphere, OptimizationMode.MINIMIZE)
        config = create_test_config(population_size=3, elitism_count=0)
        parents = OrderedPopulation(environment, 3, vectors(environment, (1.0,), (2.0,), (3.0,)))
        trials = vectors(environment, (0.5,), (3.0,), (-3.0,))
        policy = OneToOneReplacement()

        assert policy.offspring_needed(config) == 3
        survivors = policy.replace(parents, trials, environment, config)

        assert [ind.value_at(0) for ind in survivors] == [0.5, 2.0, -3.0]
        assert trials[0] in survivors
        assert parents[1] in survivors
        # Ties go to the trial
        assert trials[2] in survivors

    def test_requires_one_trial_per_target(self):
        environment = Environment(sphere, OptimizationMode.MINIMIZE)
        config = create_test_config(population_size=3, elitism_count=0)
        parents = OrderedPopulation(environment, 3, vectors(environment, (1.0,), (2.0,), (3.0,)))

        with pytest.raises(InvalidConfigError):
            OneToOneReplacement().replace(parents, vectors(environment, (0.0,)), environment, config)
