import asyncio
from typing import Dict

import pytest

from grammarevo.config import EvolutionParams
from grammarevo.evolution.fitness import WeightedFitnessEvaluator
from grammarevo.evolution.genome import GrammarGenome, GrammarPrimitive, PrimitiveType
from grammarevo.evolution.random_source import RandomSource
from grammarevo.evolution.reproduction import GenomeFactory
from grammarevo.utils.helpers import IdGenerator


class NodeCountEvaluator(WeightedFitnessEvaluator):
    """Deterministic evaluator: more nodes, edges and patterns score higher."""

    def __init__(self, delay: float = 0.0):
        super().__init__()
        self.delay = delay
        self.calls = 0
        self.active = 0
        self.max_active = 0

    async def evaluate_fitness(self, genome: GrammarGenome) -> Dict[str, float]:
        self.calls += 1
        self.active += 1
        self.max_active = max(self.max_active, self.active)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return {
                "nodes": min(1.0, genome.node_count / 20.0),
                "edges": min(1.0, genome.edge_count / 20.0),
                "patterns": min(1.0, genome.pattern_count / 10.0),
            }
        finally:
            self.active -= 1


class FailingEvaluator(WeightedFitnessEvaluator):
    """Fails on every call when ``fail_all`` is set, or on every ``fail_every``-th call."""

    def __init__(self, fail_all: bool = False, fail_every: int = 0):
        super().__init__()
        self.fail_all = fail_all
        self.fail_every = fail_every
        self.calls = 0

    async def evaluate_fitness(self, genome: GrammarGenome) -> Dict[str, float]:
        self.calls += 1
        if self.fail_all or (self.fail_every and self.calls % self.fail_every == 0):
            raise RuntimeError(f"evaluator exploded on {genome.id}")
        return {"nodes": genome.node_count / 10.0}


@pytest.fixture
def rng():
    return RandomSource(seed=1234)


@pytest.fixture
def seed_primitives():
    return [
        GrammarPrimitive(id="p_act", type=PrimitiveType.ACTION, name="move"),
        GrammarPrimitive(id="p_per", type=PrimitiveType.PERCEPT, name="observe"),
        GrammarPrimitive(id="p_mem", type=PrimitiveType.MEMORY, name="recall", complexity=0.7),
        GrammarPrimitive(id="p_dec", type=PrimitiveType.DECISION, name="choose"),
        GrammarPrimitive(id="p_goal", type=PrimitiveType.GOAL, name="achieve", dependencies=("p_dec",)),
    ]


@pytest.fixture
def small_params():
    return EvolutionParams(
        population={"size": 12, "elite_ratio": 0.2, "diversity_threshold": 0.8},
        termination={"max_generations": 6, "fitness_threshold": 1.0, "stagnation_limit": 50},
        transparency={"report_interval": 2, "log_level": "debug"},
        seed=99,
    )


@pytest.fixture
def factory(small_params, rng):
    return GenomeFactory(small_params, rng, IdGenerator())


@pytest.fixture
def node_count_evaluator():
    return NodeCountEvaluator()


@pytest.fixture
def failing_evaluator():
    return FailingEvaluator()
