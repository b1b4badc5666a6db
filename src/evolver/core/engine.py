"""
Evolutionary Algorithm Engine for the Evolver framework.

This module implements the single parameterized control loop that
orchestrates seeding, fitness evaluation, selection, recombination,
mutation, replacement and termination. The classic variants are factories
over the same loop: ``simple_ga``, ``evolutionary_programming`` and
``differential_evolution``.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Callable, Dict, Iterator, List, Optional

import logfire

from src.core.config import settings
from src.evolver.core.config import AlgorithmConfig
from src.evolver.core.environment import Environment, OptimizationMode
from src.evolver.core.individual import Individual
from src.evolver.core.population import OrderedPopulation
from src.evolver.core.replacement import (
    GenerationalReplacement,
    MuPlusLambdaReplacement,
    OneToOneReplacement,
    ReplacementPolicy,
)
from src.evolver.exceptions import EvolverError, InvalidConfigError
from src.evolver.operators.base import Generator, Mutator, Recombinator, Selector, operator_name
from src.evolver.operators.differential import BinomialCrossover, DifferentialMutator
from src.evolver.operators.selection import RandomSelector
from src.evolver.random_source import NumpyRandomSource, RandomSource, bernoulli


class AlgorithmState(str, Enum):
    """Lifecycle of an algorithm instance."""
    UNINITIALIZED = "uninitialized"
    RUNNING = "running"
    TERMINATED = "terminated"


class TerminationReason(str, Enum):
    """Why a run stopped."""
    MAX_GENERATIONS = "max_generations"
    TARGET_FITNESS = "target_fitness"
    STAGNATION = "stagnation"
    MAX_RUNTIME = "max_runtime"
    ERROR = "error"


@dataclass
class GenerationReport:
    """Snapshot handed to listeners after each generation."""
    generation: int
    best_fitness: float
    best_ever_fitness: float
    generation_found: int
    evaluations: int
    statistics: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "generation": self.generation,
            "best_fitness": self.best_fitness,
            "best_ever_fitness": self.best_ever_fitness,
            "generation_found": self.generation_found,
            "evaluations": self.evaluations,
            **{k: v for k, v in self.statistics.items() if k != "best_fitness"},
        }


@dataclass
class RunResult:
    """Outcome of a completed run."""
    best_individual: Individual
    best_fitness: float
    generation_found: int
    generations_run: int
    evaluations: int
    elapsed: timedelta
    termination_reason: Optional[TerminationReason]
    history: List[GenerationReport] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "best_individual": self.best_individual.to_dict(),
            "best_fitness": self.best_fitness,
            "generation_found": self.generation_found,
            "generations_run": self.generations_run,
            "evaluations": self.evaluations,
            "elapsed_seconds": self.elapsed.total_seconds(),
            "termination_reason": self.termination_reason.value if self.termination_reason else None,
            "history": [report.to_dict() for report in self.history],
        }

    def summary(self) -> str:
        return (
            f"Best fitness {self.best_fitness:.6g} found at generation {self.generation_found} "
            f"of {self.generations_run} ({self.evaluations} evaluations, "
            f"{self.elapsed.total_seconds():.2f}s)"
        )


GenerationListener = Callable[[GenerationReport], None]


def resolve_seed(config: AlgorithmConfig) -> Optional[int]:
    """The run seed, falling back to the process-wide default from settings."""
    if config.random_seed is not None:
        return config.random_seed
    return settings.default_random_seed


class EvolutionaryAlgorithm:
    """
    Main engine for running an evolutionary search.

    The algorithm owns its population. Operators are injected; the
    environment scores and orders individuals. Reproduction selects two
    parents, recombines them with ``crossover_probability`` (copying them
    otherwise) and mutates each child with ``mutation_probability``. Without
    a recombinator a single parent is selected and mutated. The replacement
    policy then builds the next population.
    """

    selects_parents = True

    def __init__(
        self,
        config: AlgorithmConfig,
        environment: Environment,
        generator: Generator,
        selector: Optional[Selector],
        mutator: Optional[Mutator] = None,
        recombinator: Optional[Recombinator] = None,
        replacement: Optional[ReplacementPolicy] = None,
        rng: Optional[RandomSource] = None,
        name: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Initialize the evolutionary algorithm.

        Args:
            config: Validated run parameters
            environment: Fitness oracle; its mode must match ``config.mode``
            generator: Produces the initial individuals
            selector: Parent selection policy; required unless the loop builds its own parents
            mutator: Optional mutation operator
            recombinator: Optional recombination operator
            replacement: Survivor policy, generational by default
            rng: Random source for the loop's own coin flips
            name: Label used in logs and spans
            logger: Optional logger instance
        """
        if OptimizationMode(environment.mode) is not OptimizationMode(config.mode):
            raise InvalidConfigError(
                f"Config mode {config.mode.value} does not match environment mode {environment.mode.value}"
            )
        if mutator is None and recombinator is None:
            raise InvalidConfigError("At least one of mutator and recombinator is required")
        if selector is None and self.selects_parents:
            raise InvalidConfigError("A parent selector is required")

        self.config = config
        self.environment = environment
        self.generator = generator
        self.selector = selector
        self.mutator = mutator
        self.recombinator = recombinator
        self.replacement = replacement or GenerationalReplacement()
        self.rng = rng or NumpyRandomSource(resolve_seed(config))
        self.name = name or type(self).__name__
        self.logger = logger or self._setup_logger()

        # Fail before seeding if the policy cannot work with this config
        self.offspring_count = self.replacement.offspring_needed(config)

        # State tracking
        self.state = AlgorithmState.UNINITIALIZED
        self.population: Optional[OrderedPopulation] = None
        self.generation = 0
        self.best_individual: Optional[Individual] = None
        self.best_fitness: Optional[float] = None
        self.generation_found = 0
        self.stagnation_counter = 0
        self.total_evaluations = 0
        self.termination_reason: Optional[TerminationReason] = None
        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.history: List[GenerationReport] = []
        self._listeners: List[GenerationListener] = []

        self.executor: Optional[ThreadPoolExecutor] = None
        if config.evaluation_workers and config.evaluation_workers > 1:
            self.executor = ThreadPoolExecutor(max_workers=config.evaluation_workers)

    def _setup_logger(self) -> logging.Logger:
        """Setup default logger."""
        logger = logging.getLogger("evolver.engine")
        logger.setLevel(getattr(logging, settings.log_level))

        if not logger.handlers:
            handler = logging.StreamHandler()
            formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            )
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        return logger

    def add_listener(self, listener: GenerationListener) -> None:
        """Register a callback invoked with a GenerationReport after each generation."""
        self._listeners.append(listener)

    # Lifecycle

    def start(self) -> None:
        """Seed and evaluate the initial population."""
        if self.state is not AlgorithmState.UNINITIALIZED:
            raise RuntimeError(f"Algorithm already started (state: {self.state.value})")

        self.start_time = datetime.now()
        self.state = AlgorithmState.RUNNING

        with logfire.span("Initialize Population", size=self.config.population_size):
            with self._stage(self.generator):
                individuals = [self.generator.generate() for _ in range(self.config.population_size)]
            self._evaluate(individuals)
            with self._stage("population"):
                self.population = OrderedPopulation(
                    self.environment, self.config.population_size, individuals
                )

        self.logger.info(
            f"{self.name}: initialized population with {len(self.population)} individuals"
        )
        self._after_generation()

    def step(self) -> None:
        """Run one generation."""
        if self.state is AlgorithmState.UNINITIALIZED:
            raise RuntimeError("Algorithm has not been started")
        if self.state is AlgorithmState.TERMINATED:
            raise RuntimeError("Algorithm has terminated")

        with logfire.span("Generation", generation=self.generation + 1):
            offspring = self._reproduce(self.offspring_count)
            self._evaluate(offspring)

            with self._stage(self.replacement):
                next_population = self.replacement.replace(
                    self.population, offspring, self.environment, self.config
                )
            next_population.increment_ages()
            self.population = next_population
            self.generation += 1

            self._after_generation()

    def run(self) -> RunResult:
        """Drive the loop until a termination predicate holds."""
        with logfire.span(
            "Evolution run",
            algorithm=self.name,
            population_size=self.config.population_size,
            max_generations=self.config.max_generations,
        ):
            self.logger.info(
                f"Starting {self.name} with population size {self.config.population_size}"
            )
            if self.state is AlgorithmState.UNINITIALIZED:
                self.start()
            while self.state is AlgorithmState.RUNNING:
                self.step()

            result = self.result()
            self.logger.info(f"{self.name} finished: {result.summary()}")
            return result

    def result(self) -> RunResult:
        if self.best_individual is None:
            raise RuntimeError("No individual has been evaluated yet")
        end = self.end_time or datetime.now()
        return RunResult(
            best_individual=self.best_individual,
            best_fitness=self.best_fitness,
            generation_found=self.generation_found,
            generations_run=self.generation,
            evaluations=self.total_evaluations,
            elapsed=end - self.start_time,
            termination_reason=self.termination_reason,
            history=list(self.history),
        )

    # Generation internals

    def _reproduce(self, count: int) -> List[Individual]:
        offspring: List[Individual] = []
        members = self.population.individuals

        while len(offspring) < count:
            if self.recombinator is not None:
                with self._stage(self.selector):
                    parent_a = self.selector.select(members, self.environment)
                    parent_b = self.selector.select(members, self.environment)
                if bernoulli(self.rng, self.config.crossover_probability):
                    with self._stage(self.recombinator):
                        children = self.recombinator.recombine(parent_a, parent_b)
                else:
                    children = [parent_a.copy(), parent_b.copy()]
            else:
                with self._stage(self.selector):
                    children = [self.selector.select(members, self.environment).copy()]

            for child in children:
                if self.mutator is not None and bernoulli(self.rng, self.config.mutation_probability):
                    with self._stage(self.mutator):
                        child = self.mutator.mutate(child)
                offspring.append(child)

        return offspring[:count]

    def _evaluate(self, individuals: List[Individual]) -> None:
        """Evaluate every individual not yet scored by the environment."""
        pending = [ind for ind in individuals if ind.evaluated_by is not self.environment]
        if not pending:
            return

        with logfire.span("Evaluate Population", size=len(pending)):
            try:
                if self.executor is not None:
                    fitnesses = list(self.executor.map(self.environment.evaluate, pending))
                    for individual, fitness in zip(pending, fitnesses):
                        individual.update_fitness(fitness, self.environment)
                else:
                    for individual in pending:
                        self.environment.assess(individual)
            except Exception:
                self.logger.error(
                    f"{self.name}: fitness evaluation failed at generation {self.generation}"
                )
                self._terminate(TerminationReason.ERROR)
                raise

            self.total_evaluations += len(pending)
            logfire.info(
                "Evaluated {count} individuals",
                count=len(pending),
                total_evaluations=self.total_evaluations,
            )

    def _after_generation(self) -> None:
        with self._stage("population"):
            self._update_best()
            report = self._record_history()

        if self.generation % self.config.log_interval == 0:
            self._log_progress(report)
        for listener in self._listeners:
            listener(report)

        reason = self._should_terminate()
        if reason is not None:
            self._terminate(reason)

    def _update_best(self) -> None:
        candidate = self.population.best()
        if self.best_individual is None or self.environment.is_better_fitness(
            candidate.fitness, self.best_fitness
        ):
            self.best_individual = candidate
            self.best_fitness = candidate.fitness
            self.generation_found = self.generation
            self.stagnation_counter = 0
        else:
            self.stagnation_counter += 1

    def _record_history(self) -> GenerationReport:
        report = GenerationReport(
            generation=self.generation,
            best_fitness=self.population.best().fitness,
            best_ever_fitness=self.best_fitness,
            generation_found=self.generation_found,
            evaluations=self.total_evaluations,
            statistics=self.population.calculate_statistics(self.environment),
        )
        self.history.append(report)
        return report

    def _should_terminate(self) -> Optional[TerminationReason]:
        """Check termination predicates in priority order."""
        target = self.config.target_fitness
        if target is not None:
            if self.environment.mode is OptimizationMode.MINIMIZE:
                reached = self.best_fitness <= target
            else:
                reached = self.best_fitness >= target
            if reached:
                self.logger.info(f"Target reached: {self.best_fitness} (target {target})")
                return TerminationReason.TARGET_FITNESS

        if self.generation >= self.config.max_generations:
            return TerminationReason.MAX_GENERATIONS

        stagnation = self.config.stagnation_generations
        if stagnation is not None and self.stagnation_counter >= stagnation:
            self.logger.warning(f"Stagnation detected (count: {self.stagnation_counter})")
            return TerminationReason.STAGNATION

        if self.config.max_runtime is not None:
            if datetime.now() - self.start_time >= self.config.max_runtime:
                self.logger.info("Terminating due to runtime limit")
                return TerminationReason.MAX_RUNTIME

        return None

    def _terminate(self, reason: TerminationReason) -> None:
        self.state = AlgorithmState.TERMINATED
        self.termination_reason = reason
        self.end_time = datetime.now()
        if self.executor is not None:
            self.executor.shutdown(wait=True)
            self.executor = None
        self.logger.info(
            f"{self.name} terminated at generation {self.generation} ({reason.value})"
        )

    def _log_progress(self, report: GenerationReport) -> None:
        """Log evolution progress."""
        stats = report.statistics
        self.logger.info(
            f"Generation {report.generation}: "
            f"Best: {report.best_fitness:.6g}, "
            f"Best ever: {report.best_ever_fitness:.6g}, "
            f"Avg: {stats.get('avg_fitness', 0):.6g}, "
            f"Distinct: {stats.get('distinct_genotypes', 0)}"
        )
        logfire.info("Evolution Progress", algorithm=self.name, **report.to_dict())

    @contextmanager
    def _stage(self, operator: Any) -> Iterator[None]:
        """Annotate framework errors raised inside an operator and terminate."""
        try:
            yield
        except EvolverError as exc:
            exc.generation = self.generation
            exc.operator = operator if isinstance(operator, str) else operator_name(operator)
            self.logger.error(f"{self.name}: {exc}")
            self._terminate(TerminationReason.ERROR)
            raise


def simple_ga(
    config: AlgorithmConfig,
    environment: Environment,
    generator: Generator,
    selector: Selector,
    recombinator: Recombinator,
    mutator: Mutator,
    rng: Optional[RandomSource] = None,
    logger: Optional[logging.Logger] = None,
) -> EvolutionaryAlgorithm:
    """Generational GA: recombination plus mutation, ``config.elitism_count`` elites kept."""
    return EvolutionaryAlgorithm(
        config,
        environment,
        generator,
        selector,
        mutator=mutator,
        recombinator=recombinator,
        replacement=GenerationalReplacement(),
        rng=rng,
        name="SimpleGA",
        logger=logger,
    )


def evolutionary_programming(
    config: AlgorithmConfig,
    environment: Environment,
    generator: Generator,
    mutator: Mutator,
    selector: Optional[Selector] = None,
    rng: Optional[RandomSource] = None,
    logger: Optional[logging.Logger] = None,
) -> EvolutionaryAlgorithm:
    """
    Evolutionary programming: mutation only with (mu + lambda) survival.

    Parents are drawn uniformly unless a selector is given; lambda is
    ``config.offspring_count`` (defaults to mu). Each offspring is mutated
    with ``config.mutation_probability``; classic EP uses 1.0.
    """
    rng = rng or NumpyRandomSource(resolve_seed(config))
    return EvolutionaryAlgorithm(
        config,
        environment,
        generator,
        selector or RandomSelector(rng),
        mutator=mutator,
        recombinator=None,
        replacement=MuPlusLambdaReplacement(),
        rng=rng,
        name="EvolutionaryProgramming",
        logger=logger,
    )


class DifferentialEvolution(EvolutionaryAlgorithm):
    """
    Differential evolution over real vectors.

    Every generation each member is the target exactly once. The
    differential mutator builds its donor from other members and the
    crossover mixes target and donor into one trial. The trial replaces its
    target unless the target is strictly better. The scale factor and crossover
    rate belong to the operators, so ``crossover_probability``,
    ``mutation_probability`` and ``elitism_count`` are not used.
    """

    selects_parents = False

    def __init__(
        self,
        config: AlgorithmConfig,
        environment: Environment,
        generator: Generator,
        mutator: DifferentialMutator,
        crossover: Recombinator,
        rng: Optional[RandomSource] = None,
        name: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if config.population_size <= mutator.members_needed:
            raise InvalidConfigError(
                f"DE/{mutator.base}/{mutator.differences} needs a population larger than "
                f"{mutator.members_needed}, got {config.population_size}"
            )
        super().__init__(
            config,
            environment,
            generator,
            None,
            recombinator=crossover,
            replacement=OneToOneReplacement(),
            rng=rng,
            name=name or "DifferentialEvolution",
            logger=logger,
        )
        self.differential = mutator

    def _reproduce(self, count: int) -> List[Individual]:
        # Trials line up with the targets' best-first order for OneToOneReplacement
        members = self.population.individuals
        trials: List[Individual] = []
        for index, target in enumerate(members):
            with self._stage(self.differential):
                donor = self.differential.donor(members, index, self.environment)
            with self._stage(self.recombinator):
                trials.append(self.recombinator.recombine(target, donor)[0])
        return trials


def differential_evolution(
    config: AlgorithmConfig,
    environment: Environment,
    generator: Generator,
    mutator: Optional[DifferentialMutator] = None,
    crossover: Optional[Recombinator] = None,
    rng: Optional[RandomSource] = None,
    logger: Optional[logging.Logger] = None,
) -> DifferentialEvolution:
    """
    Differential evolution, DE/rand/1/bin unless other operators are given.

    The defaults use scale factor 0.5 and crossover rate 0.9.
    """
    rng = rng or NumpyRandomSource(resolve_seed(config))
    return DifferentialEvolution(
        config,
        environment,
        generator,
        mutator or DifferentialMutator(rng),
        crossover or BinomialCrossover(rng),
        rng=rng,
        logger=logger,
    )
