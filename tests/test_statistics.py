import dataclasses
import math

import pytest

from grammarevo.evolution.genome import GenomePattern
from grammarevo.evolution.statistics import (
    compute_statistics,
    convergence_rate,
    generate_insights,
    stagnation_count,
)


def build(factory, seed_primitives, fitnesses):
    population = []
    for fitness in fitnesses:
        genome = factory.create_random_genome(seed_primitives)
        genome.fitness = fitness
        population.append(genome)
    return population


def compute(population, history=(), **overrides):
    arguments = dict(
        generation=len(history) + 1,
        population=population,
        history=list(history),
        current_rate=0.2,
        effective_rate=0.1,
        adaptation_history=[0.2],
        generation_time=0.5,
        evaluations=len(population),
        evaluation_failures=0,
    )
    arguments.update(overrides)
    return compute_statistics(**arguments)


def test_population_aggregates(factory, seed_primitives):
    population = build(factory, seed_primitives, [0.2, 0.4, 0.6])
    stats = compute(population)

    assert stats.generation == 1
    assert stats.population.size == 3
    assert stats.population.best_fitness == 0.6
    assert stats.population.worst_fitness == 0.2
    assert stats.population.average_fitness == pytest.approx(0.4)
    assert stats.convergence.fitness_variance == pytest.approx(((0.2 ** 2) * 2) / 3)
    assert stats.performance.generations_per_second == pytest.approx(2.0)
    assert stats.mutation.adaptation_history == (0.2,)


def test_failed_genomes_are_excluded(factory, seed_primitives):
    population = build(factory, seed_primitives, [0.5, -math.inf])
    stats = compute(population, evaluation_failures=1)
    assert stats.population.worst_fitness == 0.5
    assert stats.population.average_fitness == 0.5
    assert stats.performance.evaluation_failures == 1

    all_failed = compute(build(factory, seed_primitives, [-math.inf]))
    assert all_failed.population.best_fitness == 0.0


def test_stats_are_frozen(factory, seed_primitives):
    stats = compute(build(factory, seed_primitives, [0.5]))
    with pytest.raises(dataclasses.FrozenInstanceError):
        stats.generation = 3
    assert stats.to_dict()["population"]["best_fitness"] == 0.5


def test_convergence_helpers():
    assert convergence_rate([0.5]) == 0.0
    assert convergence_rate([0.0, 0.1, 0.2, 0.3, 0.4, 0.5]) == pytest.approx((0.5 - 0.1) / 5)
    assert stagnation_count([0.1, 0.5, 0.5, 0.5005]) == 2
    assert stagnation_count([0.1, 0.2]) == 0
    assert stagnation_count([]) == 0


def test_history_feeds_convergence(factory, seed_primitives):
    population = build(factory, seed_primitives, [0.5])
    first = compute(population)
    second = compute(population, history=[first])
    assert second.generation == 2
    assert second.convergence.stagnation_count == 1
    assert second.convergence.rate == 0.0


class TestInsights:
    def test_minimal_and_simple(self, factory, seed_primitives):
        population = build(factory, seed_primitives, [0.1, 0.2])
        for genome in population:
            genome.structure.nodes = genome.structure.nodes[:3]
        insights = generate_insights(population, 0.2, None)
        assert insights.emerged_patterns == ("minimal-structure",)
        assert insights.dominant_strategies == ("simple-structure",)
        assert insights.unexpected_behaviors == ()

    def test_complex_and_pattern_rich(self, factory, seed_primitives):
        population = build(factory, seed_primitives, [0.9, 0.1])
        for genome in population:
            while genome.node_count < 9:
                extra = genome.structure.nodes[0].copy()
                extra.id = f"{genome.id}_extra_{genome.node_count}"
                genome.structure.nodes.append(extra)
        best = population[0]
        members = [best.structure.nodes[0].id]
        best.structure.patterns = [
            GenomePattern(f"p{i}", "recursive", members) for i in range(4)
        ]
        insights = generate_insights(population, 0.9, None)
        assert insights.emerged_patterns == ("high-complexity",)
        assert insights.dominant_strategies == ("pattern-rich",)

    def test_fitness_jump(self, factory, seed_primitives):
        before = compute(build(factory, seed_primitives, [0.2]))
        after = compute(build(factory, seed_primitives, [0.5]), history=[before])
        assert after.insights.unexpected_behaviors == ("fitness-jump",)
