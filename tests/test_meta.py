import pytest

from grammarevo.config import EvolutionParams
from grammarevo.evolution.meta import MetaOptimizer
from grammarevo.evolution.statistics import (
    ConvergenceStats,
    EvolutionStats,
    Insights,
    MutationStats,
    PerformanceStats,
    PopulationStats,
)


def stats_for(best_values):
    return [
        EvolutionStats(
            generation=i + 1,
            population=PopulationStats(10, 0.5, best / 2, best, 0.0),
            convergence=ConvergenceStats(0.0, 0, 0.0),
            mutation=MutationStats(0.2, 0.1, ()),
            performance=PerformanceStats(0.01, 100.0, 10, 0),
            insights=Insights(),
        )
        for i, best in enumerate(best_values)
    ]


class FakeGenome:
    def __init__(self, fitness):
        self.fitness = fitness


@pytest.fixture
def optimizer():
    return MetaOptimizer(EvolutionParams())


class TestAdaptiveStrength:
    def test_base_rate_with_short_history(self, optimizer):
        assert optimizer.adaptive_mutation_strength([]) == 0.2
        assert optimizer.adaptive_mutation_strength(stats_for([0.1, 0.9])) == 0.2

    def test_improving_shrinks(self, optimizer):
        assert optimizer.adaptive_mutation_strength(stats_for([0.1, 0.2, 0.3])) == pytest.approx(0.16)

    def test_declining_grows(self, optimizer):
        assert optimizer.adaptive_mutation_strength(stats_for([0.5, 0.4, 0.3])) == pytest.approx(0.26)

    def test_flat_grows_slightly(self, optimizer):
        assert optimizer.adaptive_mutation_strength(stats_for([0.5, 0.5, 0.505])) == pytest.approx(0.22)

    def test_uses_last_five(self, optimizer):
        # an early drop outside the window is ignored
        history = stats_for([0.9, 0.1, 0.2, 0.3, 0.4, 0.5])
        assert optimizer.adaptive_mutation_strength(history) == pytest.approx(0.16)


class TestOptimize:
    def test_needs_ten_entries(self, optimizer):
        assert optimizer.optimize(stats_for([0.1] * 9)) is None

    def test_stagnation_explores(self, optimizer):
        adjustment = optimizer.optimize(stats_for([0.5] * 10))
        assert adjustment.direction == "explore"
        assert optimizer.params.mutation.structural_rate == pytest.approx(0.33)
        assert optimizer.params.mutation.parametric_rate == pytest.approx(0.22)
        assert optimizer.params.crossover.rate == pytest.approx(0.63)
        assert adjustment.before["crossover_rate"] == pytest.approx(0.7)
        assert adjustment.after["crossover_rate"] == pytest.approx(0.63)

    def test_fast_improvement_exploits(self, optimizer):
        adjustment = optimizer.optimize(stats_for([i * 0.05 for i in range(10)]))
        assert adjustment.direction == "exploit"
        assert optimizer.params.mutation.structural_rate == pytest.approx(0.27)
        assert optimizer.params.crossover.rate == pytest.approx(0.77)

    def test_moderate_improvement_holds(self, optimizer):
        adjustment = optimizer.optimize(stats_for([i * 0.005 for i in range(10)]))
        assert adjustment.direction == "hold"
        assert adjustment.before == adjustment.after

    def test_rates_are_clamped(self):
        params = EvolutionParams(
            mutation={"structural_rate": 0.49, "parametric_rate": 0.5},
            crossover={"rate": 0.1},
        )
        optimizer = MetaOptimizer(params)
        for _ in range(5):
            optimizer.optimize(stats_for([0.5] * 10))
        assert params.mutation.structural_rate == 0.5
        assert params.mutation.parametric_rate == 0.5
        assert params.crossover.rate == 0.1

        for _ in range(60):
            optimizer.optimize(stats_for([i * 0.1 for i in range(10)]))
        assert params.mutation.structural_rate == 0.01
        assert params.crossover.rate == 0.9


class TestTermination:
    def test_generation_limit(self):
        optimizer = MetaOptimizer(EvolutionParams(termination={"max_generations": 3}))
        assert not optimizer.should_terminate(2, None, [])
        assert optimizer.should_terminate(3, None, [])
        assert optimizer.termination_reason(3, None, []) == "max_generations"

    def test_fitness_threshold(self, optimizer):
        assert optimizer.should_terminate(1, FakeGenome(0.95), [])
        assert not optimizer.should_terminate(1, FakeGenome(0.94), [])

    def test_stagnation(self):
        optimizer = MetaOptimizer(EvolutionParams(termination={"stagnation_limit": 4}))
        assert not optimizer.should_terminate(3, FakeGenome(0.5), stats_for([0.5] * 3))
        assert optimizer.should_terminate(4, FakeGenome(0.5), stats_for([0.2, 0.5, 0.5, 0.5, 0.5]))
        assert optimizer.termination_reason(4, FakeGenome(0.5), stats_for([0.5] * 4)) == "stagnation"
        assert not optimizer.should_terminate(4, FakeGenome(0.5), stats_for([0.4, 0.5, 0.5, 0.5]))
