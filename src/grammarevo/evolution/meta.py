"""
Meta-optimization of the search rates and termination checks.
"""
from dataclasses import dataclass
from typing import Dict, Optional, Sequence

from grammarevo.config import EvolutionParams
from grammarevo.constants import (
    ADAPTIVE_MIN_HISTORY,
    ADAPTIVE_WINDOW,
    CROSSOVER_RATE_BOUNDS,
    DECLINING_FACTOR,
    FAST_IMPROVEMENT,
    IMPROVING_FACTOR,
    META_WINDOW,
    MUTATION_RATE_BOUNDS,
    RATE_DECREASE_FACTOR,
    RATE_INCREASE_FACTOR,
    STAGNANT_FACTOR,
    STAGNATION_IMPROVEMENT,
    STAGNATION_RANGE,
    TREND_THRESHOLD,
)
from grammarevo.evolution.genome import GrammarGenome
from grammarevo.evolution.statistics import EvolutionStats
from grammarevo.utils.helpers import clamp


@dataclass(frozen=True)
class MetaAdjustment:
    """Rates before and after one meta-optimization step.

    ``direction`` is ``explore`` (search stalled, mutate more), ``exploit``
    (search improving fast, recombine more) or ``hold``.
    """
    direction: str
    average_improvement: float
    before: Dict[str, float]
    after: Dict[str, float]


class MetaOptimizer:
    """Adapts mutation and crossover rates from the run's history."""

    def __init__(self, params: EvolutionParams):
        self.params = params

    def _rates(self) -> Dict[str, float]:
        return {
            "structural_rate": self.params.mutation.structural_rate,
            "parametric_rate": self.params.mutation.parametric_rate,
            "crossover_rate": self.params.crossover.rate,
        }

    def adaptive_mutation_strength(self, history: Sequence[EvolutionStats]) -> float:
        """
        Parametric noise strength for the next generation.

        Improving runs get smaller steps, declining runs larger ones, and
        flat runs slightly larger ones.

        Args:
            history: Statistics so far

        Returns:
            Noise standard deviation
        """
        base = self.params.mutation.parametric_rate
        if len(history) < ADAPTIVE_MIN_HISTORY:
            return base

        recent = history[-ADAPTIVE_WINDOW:]
        trend = recent[-1].population.best_fitness - recent[0].population.best_fitness
        if trend > TREND_THRESHOLD:
            return base * IMPROVING_FACTOR
        if trend < -TREND_THRESHOLD:
            return base * DECLINING_FACTOR
        return base * STAGNANT_FACTOR

    def optimize(self, history: Sequence[EvolutionStats]) -> Optional[MetaAdjustment]:
        """
        Adjust rates from the average best-fitness improvement.

        Needs at least ``META_WINDOW`` statistics; returns None otherwise.
        Rates are modified in place on the shared parameters.

        Args:
            history: Statistics so far

        Returns:
            The adjustment made, or None if there was too little history
        """
        if len(history) < META_WINDOW:
            return None

        recent = history[-META_WINDOW:]
        improvements = [
            recent[i].population.best_fitness - recent[i - 1].population.best_fitness
            for i in range(1, len(recent))
        ]
        average_improvement = sum(improvements) / len(improvements)

        before = self._rates()
        mutation = self.params.mutation
        crossover = self.params.crossover

        if average_improvement < STAGNATION_IMPROVEMENT:
            direction = "explore"
            mutation_factor, crossover_factor = RATE_INCREASE_FACTOR, RATE_DECREASE_FACTOR
        elif average_improvement > FAST_IMPROVEMENT:
            direction = "exploit"
            mutation_factor, crossover_factor = RATE_DECREASE_FACTOR, RATE_INCREASE_FACTOR
        else:
            direction = "hold"
            mutation_factor = crossover_factor = 1.0

        mutation.structural_rate = clamp(mutation.structural_rate * mutation_factor, *MUTATION_RATE_BOUNDS)
        mutation.parametric_rate = clamp(mutation.parametric_rate * mutation_factor, *MUTATION_RATE_BOUNDS)
        crossover.rate = clamp(crossover.rate * crossover_factor, *CROSSOVER_RATE_BOUNDS)

        return MetaAdjustment(
            direction=direction,
            average_improvement=average_improvement,
            before=before,
            after=self._rates(),
        )

    def termination_reason(
        self,
        generation: int,
        best: Optional[GrammarGenome],
        history: Sequence[EvolutionStats],
    ) -> Optional[str]:
        """Name the condition that ends the run, or None to continue."""
        termination = self.params.termination
        if generation >= termination.max_generations:
            return "max_generations"
        if best is not None and best.fitness >= termination.fitness_threshold:
            return "fitness_threshold"
        if len(history) >= termination.stagnation_limit:
            recent = [stats.population.best_fitness for stats in history[-termination.stagnation_limit:]]
            if max(recent) - min(recent) < STAGNATION_RANGE:
                return "stagnation"
        return None

    def should_terminate(
        self,
        generation: int,
        best: Optional[GrammarGenome],
        history: Sequence[EvolutionStats],
    ) -> bool:
        """
        Check whether evolution should stop.

        Args:
            generation: Generations completed so far
            best: Best genome seen
            history: Statistics so far

        Returns:
            True if any termination condition holds
        """
        return self.termination_reason(generation, best, history) is not None
