"""
Evolution driver for grammar genomes.

The engine owns the population, the random source and the run history, and
runs generations strictly one after another. Within a generation, fitness
evaluations run concurrently up to ``evaluation.parallelism``.
"""
import math
import time
from typing import Any, Dict, List, Optional, Sequence, Tuple

from grammarevo.config import EvolutionParams, SelectionMethod
from grammarevo.constants import DIVERSITY_INTERVAL, META_OPTIMIZATION_INTERVAL, META_WINDOW
from grammarevo.evolution.diversity import genome_similarity, maintain_diversity
from grammarevo.evolution.fitness import FitnessEvaluator, StructuralFitnessEvaluator
from grammarevo.evolution.genome import GrammarGenome, GrammarPrimitive
from grammarevo.evolution.meta import MetaOptimizer
from grammarevo.evolution.population import PopulationManager
from grammarevo.evolution.random_source import RandomSource
from grammarevo.evolution.reproduction import GenomeFactory
from grammarevo.evolution.selection import select_parents, select_survivors
from grammarevo.evolution.statistics import EvolutionStats, compute_statistics
from grammarevo.utils.async_utils import call_async_safe, gather_bounded
from grammarevo.utils.errors import ConfigurationError, EvaluationError, EvolutionError
from grammarevo.utils.helpers import IdGenerator, format_duration
from grammarevo.utils.logging import logger
from grammarevo.version import __version__


class GrammarEvolutionEngine:
    """
    Evolves a population of grammar genomes.

    Typical use::

        engine = GrammarEvolutionEngine(EvolutionParams(seed=7))
        await engine.initialize(seed_primitives)
        best = await engine.evolve()
    """

    def __init__(
        self,
        params: Optional[EvolutionParams] = None,
        fitness_evaluator: Optional[FitnessEvaluator] = None,
        rng: Optional[RandomSource] = None,
        id_generator: Optional[IdGenerator] = None,
    ):
        """
        Initialize the engine.

        Args:
            params: Evolution parameters (copied; defaults if omitted)
            fitness_evaluator: Evaluator scoring genomes; a
                StructuralFitnessEvaluator if omitted
            rng: Random source; seeded from ``params.seed`` if omitted
            id_generator: Id source for genomes and their parts
        """
        self._params = (params or EvolutionParams()).model_copy(deep=True)
        self.evaluator = fitness_evaluator or StructuralFitnessEvaluator()
        self.rng = rng or RandomSource(self._params.seed)
        self.ids = id_generator or IdGenerator()

        self.factory = GenomeFactory(self._params, self.rng, self.ids)
        self.populations = PopulationManager(self._params, self.factory)
        self.meta = MetaOptimizer(self._params)

        self.generation = 0
        self.history: List[EvolutionStats] = []
        self.adaptation_history: List[float] = []
        self.termination_reason: Optional[str] = None
        self.initialized = False

        self.total_evaluations = 0
        self.total_evaluation_failures = 0

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    def _validate_configuration(self, seed_primitives: Sequence[GrammarPrimitive]) -> None:
        if not seed_primitives:
            raise ConfigurationError("At least one seed primitive is required")
        if self._params.population.size <= 0:
            raise ConfigurationError(
                "Population size must be positive",
                {"size": self._params.population.size},
            )
        if self._params.selection.method not in list(SelectionMethod):
            raise ConfigurationError(
                f"Unknown selection method: {self._params.selection.method}",
                {"allowed": [method.value for method in SelectionMethod]},
            )

    async def initialize(self, seed_primitives: Sequence[GrammarPrimitive]) -> None:
        """
        Create and evaluate the generation-0 population.

        Re-initializing discards the previous run's population and history.

        Args:
            seed_primitives: Primitives typing the genome nodes

        Raises:
            ConfigurationError: If the seeds are empty or the parameters are
                unusable
        """
        self._validate_configuration(seed_primitives)
        logger.set_level(self._params.transparency.log_level)

        self.generation = 0
        self.history = []
        self.adaptation_history = []
        self.termination_reason = None
        self.total_evaluations = 0
        self.total_evaluation_failures = 0
        self.factory.mutation_strength = self._params.mutation.parametric_rate

        genomes = self.populations.create_initial(seed_primitives)
        evaluated, failed = await self._evaluate_batch(genomes)
        self.populations.replace(genomes)
        self.initialized = True

        best = self.populations.best_genome
        logger.success(
            f"Initialized population of {len(genomes)} genomes",
            component="evolution",
            operation="initialize",
            context={
                "seed_primitives": len(seed_primitives),
                "best_fitness": best.fitness if best else None,
                "evaluations": evaluated,
                "failures": failed,
                "selection": self._params.selection.method,
            },
        )

    def _require_initialized(self, phase: str) -> None:
        if not self.initialized:
            raise EvolutionError("Engine has not been initialized", phase=phase)

    # ------------------------------------------------------------------
    # Evaluation
    # ------------------------------------------------------------------

    async def _evaluate_genome(self, genome: GrammarGenome) -> bool:
        try:
            metrics = await call_async_safe(self.evaluator.evaluate_fitness, genome)
            fitness = float(self.evaluator.calculate_aggregated_fitness(metrics))
            if not math.isfinite(fitness):
                raise ValueError(f"Aggregated fitness is not finite: {fitness}")
        except Exception as e:
            error = EvaluationError(f"Fitness evaluation failed: {e}", genome_id=genome.id)
            logger.error(
                error.message,
                component="evolution",
                operation="evaluate",
                context=error.details,
                exception=e,
                error_code=error.code,
            )
            genome.fitness = -math.inf
            genome.metrics = {}
            return False

        genome.metrics = dict(metrics)
        genome.fitness = fitness
        return True

    async def _evaluate_batch(self, genomes: List[GrammarGenome]) -> Tuple[int, int]:
        """Evaluate genomes concurrently, returning (evaluated, failed)."""
        results = await gather_bounded(
            [self._evaluate_genome(genome) for genome in genomes],
            self._params.evaluation.parallelism,
        )
        failed = sum(1 for ok in results if not ok)
        self.total_evaluations += len(genomes)
        self.total_evaluation_failures += failed
        return len(genomes), failed

    async def _pad_with_immigrants(self) -> Tuple[int, int, int]:
        """
        Top the population back up to its configured size with fresh,
        evaluated random genomes.

        Returns:
            Tuple of (immigrants added, evaluations, failures)
        """
        count = self.populations.shortfall
        if count == 0:
            return 0, 0, 0

        immigrants = self.populations.create_immigrants(count, self.generation)
        evaluated, failed = await self._evaluate_batch(immigrants)
        self.populations.replace(self.populations.population + immigrants)

        logger.debug(
            f"Added {count} immigrants",
            component="diversity",
            operation="diversity",
            context={"generation": self.generation},
        )
        return count, evaluated, failed

    # ------------------------------------------------------------------
    # Evolution
    # ------------------------------------------------------------------

    async def evolve_generation(self) -> EvolutionStats:
        """
        Run one generation.

        Returns:
            Statistics of the new generation

        Raises:
            EvolutionError: If the engine has not been initialized
        """
        self._require_initialized("generation")
        start_time = time.perf_counter()
        params = self._params
        next_generation = self.generation + 1

        strength = self.meta.adaptive_mutation_strength(self.history)
        self.factory.mutation_strength = strength
        self.adaptation_history.append(strength)

        population = self.populations.population
        parents = select_parents(population, params, self.populations.pareto_front, self.rng)
        logger.debug(
            f"Selected {len(parents)} parents",
            component="selection",
            operation="selection",
            context={"method": params.selection.method, "generation": next_generation},
        )
        offspring = self.factory.generate_offspring(parents, next_generation)
        evaluations, failures = await self._evaluate_batch(offspring)

        survivors = select_survivors(
            population + offspring,
            params.population.size,
            params.population.diversity_threshold,
            genome_similarity,
        )
        self.populations.replace(survivors)
        self.generation = next_generation

        _, padded_evaluations, padded_failures = await self._pad_with_immigrants()
        evaluations += padded_evaluations
        failures += padded_failures

        if self.generation % DIVERSITY_INTERVAL == 0:
            kept, removed = maintain_diversity(
                self.populations.population, params.population.diversity_threshold
            )
            if removed:
                self.populations.replace(kept)
                logger.info(
                    f"Diversity pass removed {len(removed)} genomes",
                    component="diversity",
                    operation="diversity",
                    context={
                        "generation": self.generation,
                        "threshold": params.population.diversity_threshold,
                    },
                )
                _, padded_evaluations, padded_failures = await self._pad_with_immigrants()
                evaluations += padded_evaluations
                failures += padded_failures

        success_rate = self.factory.mutation_success_rate(offspring)
        stats = compute_statistics(
            generation=self.generation,
            population=self.populations.population,
            history=self.history,
            current_rate=strength,
            effective_rate=strength * success_rate,
            adaptation_history=self.adaptation_history[-META_WINDOW:],
            generation_time=time.perf_counter() - start_time,
            evaluations=evaluations,
            evaluation_failures=failures,
        )
        self.history.append(stats)

        if self.generation % META_OPTIMIZATION_INTERVAL == 0:
            adjustment = self.meta.optimize(self.history)
            if adjustment is not None:
                logger.info(
                    f"Meta-optimization: {adjustment.direction}",
                    component="meta",
                    operation="meta_optimize",
                    context={
                        "average_improvement": adjustment.average_improvement,
                        "before": adjustment.before,
                        "after": adjustment.after,
                    },
                )

        if self.generation % params.transparency.report_interval == 0:
            self._report_progress(stats)

        return stats

    def _report_progress(self, stats: EvolutionStats) -> None:
        logger.info(
            f"Generation {stats.generation}: best={stats.population.best_fitness:.4f} "
            f"avg={stats.population.average_fitness:.4f} "
            f"diversity={stats.population.diversity:.3f}",
            component="evolution",
            operation="generation",
            context={
                "stagnation": stats.convergence.stagnation_count,
                "mutation_rate": stats.mutation.current_rate,
                "generation_time": format_duration(stats.performance.generation_time),
                "insights": list(stats.insights.emerged_patterns + stats.insights.dominant_strategies),
            },
        )

    async def evolve(self, max_generations: Optional[int] = None) -> Optional[GrammarGenome]:
        """
        Run generations until a termination condition holds.

        Args:
            max_generations: Generations to run at most in this call;
                ``termination.max_generations`` if omitted

        Returns:
            Copy of the best genome seen

        Raises:
            EvolutionError: If the engine has not been initialized
        """
        self._require_initialized("evolve")
        limit = max_generations
        if limit is None:
            limit = self._params.termination.max_generations
        logger.section(
            "Grammar evolution",
            subtitle=f"up to {limit} generations",
            component="evolution",
        )

        start_time = time.perf_counter()
        reason = None
        for _ in range(limit):
            reason = self.meta.termination_reason(
                self.generation, self.populations.best_genome, self.history
            )
            if reason:
                break
            await self.evolve_generation()

        if reason is None:
            reason = self.meta.termination_reason(
                self.generation, self.populations.best_genome, self.history
            )
        self.termination_reason = reason or "generation_limit"
        best = self.populations.best_genome
        logger.success(
            f"Evolution finished after {self.generation} generations ({self.termination_reason})",
            component="evolution",
            operation="terminate",
            context={
                "best_fitness": best.fitness if best else None,
                "elapsed": format_duration(time.perf_counter() - start_time),
            },
        )
        return self.get_best_genome()

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def params(self) -> EvolutionParams:
        """Copy of the current parameters, including meta adjustments."""
        return self._params.model_copy(deep=True)

    def get_current_population(self) -> List[GrammarGenome]:
        return [genome.copy() for genome in self.populations.population]

    def get_best_genome(self) -> Optional[GrammarGenome]:
        best = self.populations.best_genome
        return best.copy() if best is not None else None

    def get_pareto_front(self) -> List[GrammarGenome]:
        return [genome.copy() for genome in self.populations.pareto_front]

    def get_evolution_history(self) -> List[EvolutionStats]:
        return list(self.history)

    def get_current_generation(self) -> int:
        return self.generation

    def get_summary(self) -> Dict[str, Any]:
        """
        Headline numbers of the run.

        Returns:
            Dictionary summary
        """
        best = self.populations.best_genome
        latest = self.history[-1] if self.history else None
        return {
            "version": __version__,
            "generation": self.generation,
            "population_size": len(self.populations.population),
            "best_genome_id": best.id if best else None,
            "best_fitness": best.fitness if best else None,
            "average_fitness": latest.population.average_fitness if latest else None,
            "diversity": latest.population.diversity if latest else None,
            "pareto_front_size": len(self.populations.pareto_front),
            "evaluations": self.total_evaluations,
            "evaluation_failures": self.total_evaluation_failures,
            "termination_reason": self.termination_reason,
            "rates": {
                "structural": self._params.mutation.structural_rate,
                "parametric": self._params.mutation.parametric_rate,
                "crossover": self._params.crossover.rate,
            },
        }
