"""
Per-generation statistics and insight labels.
"""
import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from grammarevo.constants import (
    CONVERGENCE_WINDOW,
    FITNESS_JUMP,
    HIGH_COMPLEXITY_NODES,
    MINIMAL_STRUCTURE_NODES,
    PATTERN_RICH_COUNT,
    SIMPLE_STRUCTURE_COUNT,
    STAGNATION_IMPROVEMENT,
)
from grammarevo.evolution.diversity import population_diversity
from grammarevo.evolution.genome import GrammarGenome
from grammarevo.evolution.selection import sort_by_fitness


@dataclass(frozen=True)
class PopulationStats:
    size: int
    diversity: float
    average_fitness: float
    best_fitness: float
    worst_fitness: float


@dataclass(frozen=True)
class ConvergenceStats:
    rate: float
    stagnation_count: int
    fitness_variance: float


@dataclass(frozen=True)
class MutationStats:
    current_rate: float
    effective_rate: float
    adaptation_history: Tuple[float, ...]


@dataclass(frozen=True)
class PerformanceStats:
    generation_time: float
    generations_per_second: float
    evaluations: int
    evaluation_failures: int


@dataclass(frozen=True)
class Insights:
    emerged_patterns: Tuple[str, ...] = ()
    dominant_strategies: Tuple[str, ...] = ()
    unexpected_behaviors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class EvolutionStats:
    """
    Snapshot of one generation.

    Fitness aggregates are taken over genomes with finite fitness only; they
    are 0.0 when every evaluation in the population failed.
    """
    generation: int
    population: PopulationStats
    convergence: ConvergenceStats
    mutation: MutationStats
    performance: PerformanceStats
    insights: Insights

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary.

        Returns:
            Dictionary representation
        """
        return asdict(self)


def _best_series(history: Sequence[EvolutionStats], current_best: float) -> List[float]:
    return [stats.population.best_fitness for stats in history] + [current_best]


def convergence_rate(series: List[float]) -> float:
    """Average best-fitness change per entry over the recent window."""
    recent = series[-CONVERGENCE_WINDOW:]
    if len(recent) < 2:
        return 0.0
    return (recent[-1] - recent[0]) / len(recent)


def stagnation_count(series: List[float]) -> int:
    """Number of consecutive trailing generations without meaningful improvement."""
    count = 0
    for i in range(len(series) - 1, 0, -1):
        if series[i] - series[i - 1] < STAGNATION_IMPROVEMENT:
            count += 1
        else:
            break
    return count


def generate_insights(
    population: List[GrammarGenome],
    best_fitness: float,
    previous: Optional[EvolutionStats],
) -> Insights:
    """
    Label notable structural trends in a population.

    Args:
        population: Current population
        best_fitness: Best finite fitness of the population
        previous: Statistics of the previous generation, if any

    Returns:
        Insight labels
    """
    emerged = []
    if population:
        mean_nodes = sum(genome.node_count for genome in population) / len(population)
        if mean_nodes > HIGH_COMPLEXITY_NODES:
            emerged.append("high-complexity")
        elif mean_nodes < MINIMAL_STRUCTURE_NODES:
            emerged.append("minimal-structure")

    dominant = []
    if population:
        top = sort_by_fitness(population)[:max(1, len(population) // 10)]
        mean_patterns = sum(genome.pattern_count for genome in top) / len(top)
        if mean_patterns > PATTERN_RICH_COUNT:
            dominant.append("pattern-rich")
        elif mean_patterns < SIMPLE_STRUCTURE_COUNT:
            dominant.append("simple-structure")

    unexpected = []
    if previous is not None and best_fitness - previous.population.best_fitness > FITNESS_JUMP:
        unexpected.append("fitness-jump")

    return Insights(
        emerged_patterns=tuple(emerged),
        dominant_strategies=tuple(dominant),
        unexpected_behaviors=tuple(unexpected),
    )


def compute_statistics(
    generation: int,
    population: List[GrammarGenome],
    history: Sequence[EvolutionStats],
    current_rate: float,
    effective_rate: float,
    adaptation_history: Sequence[float],
    generation_time: float,
    evaluations: int,
    evaluation_failures: int,
) -> EvolutionStats:
    """
    Build the statistics record for a finished generation.

    Args:
        generation: Generation number
        population: Population after survivor selection
        history: Statistics of earlier generations
        current_rate: Mutation strength used this generation
        effective_rate: ``current_rate`` scaled by mutation success
        adaptation_history: Recent mutation strengths
        generation_time: Wall-clock seconds spent on the generation
        evaluations: Evaluator calls made this generation
        evaluation_failures: Evaluator calls that failed

    Returns:
        Frozen statistics record
    """
    fitnesses = [genome.fitness for genome in population if math.isfinite(genome.fitness)]
    if fitnesses:
        average = sum(fitnesses) / len(fitnesses)
        best = max(fitnesses)
        worst = min(fitnesses)
        variance = sum((f - average) ** 2 for f in fitnesses) / len(fitnesses)
    else:
        average = best = worst = variance = 0.0

    series = _best_series(history, best)
    previous = history[-1] if history else None

    return EvolutionStats(
        generation=generation,
        population=PopulationStats(
            size=len(population),
            diversity=population_diversity(population),
            average_fitness=average,
            best_fitness=best,
            worst_fitness=worst,
        ),
        convergence=ConvergenceStats(
            rate=convergence_rate(series),
            stagnation_count=stagnation_count(series),
            fitness_variance=variance,
        ),
        mutation=MutationStats(
            current_rate=current_rate,
            effective_rate=effective_rate,
            adaptation_history=tuple(adaptation_history),
        ),
        performance=PerformanceStats(
            generation_time=generation_time,
            generations_per_second=1.0 / generation_time if generation_time > 0 else 0.0,
            evaluations=evaluations,
            evaluation_failures=evaluation_failures,
        ),
        insights=generate_insights(population, best, previous),
    )
