"""
Fitness evaluation interface.

The engine only depends on :class:`FitnessEvaluator`. Evaluators score a
genome into a map of named metrics and reduce that map to one scalar.
"""
from abc import ABC, abstractmethod
from typing import Dict, Optional

import numpy as np

from grammarevo.evolution.genome import GrammarGenome


class FitnessEvaluator(ABC):
    """Abstract base class for genome fitness evaluators.

    ``evaluate_fitness`` may also be overridden with a plain method; the
    engine awaits its result only when it is awaitable.
    """

    @abstractmethod
    async def evaluate_fitness(self, genome: GrammarGenome) -> Dict[str, float]:
        """
        Score a genome.

        Args:
            genome: Genome to score

        Returns:
            Mapping of metric name to value
        """
        pass

    @abstractmethod
    def calculate_aggregated_fitness(self, metrics: Dict[str, float]) -> float:
        """
        Reduce a metric map to a scalar fitness.

        Args:
            metrics: Metric map returned by :meth:`evaluate_fitness`

        Returns:
            Scalar fitness, higher is better
        """
        pass


class WeightedFitnessEvaluator(FitnessEvaluator):
    """Aggregates metrics as a weighted mean.

    Metrics without an explicit weight count with weight 1.0.
    """

    def __init__(self, weights: Optional[Dict[str, float]] = None):
        self.weights = dict(weights or {})

    def calculate_aggregated_fitness(self, metrics: Dict[str, float]) -> float:
        if not metrics:
            return 0.0

        total_weight = 0.0
        total = 0.0
        for name, value in metrics.items():
            weight = self.weights.get(name, 1.0)
            total_weight += weight
            total += weight * value

        if total_weight <= 0:
            return 0.0
        return total / total_weight


class StructuralFitnessEvaluator(WeightedFitnessEvaluator):
    """
    Reference evaluator scoring a genome on its shape alone.

    Metrics, each in [0, 1]:
        structure: closeness of the node count to ``target_nodes``
        connectivity: edges per node relative to a spanning tree
        patterns: summed pattern applicability, saturating at three patterns
        balance: how evenly sized the parameter vectors are
    """

    DEFAULT_WEIGHTS = {
        "structure": 0.3,
        "connectivity": 0.25,
        "patterns": 0.25,
        "balance": 0.2,
    }

    def __init__(self, target_nodes: int = 8, weights: Optional[Dict[str, float]] = None):
        super().__init__(weights or self.DEFAULT_WEIGHTS)
        self.target_nodes = max(1, target_nodes)

    async def evaluate_fitness(self, genome: GrammarGenome) -> Dict[str, float]:
        node_count = genome.node_count

        structure = max(0.0, 1.0 - abs(node_count - self.target_nodes) / self.target_nodes)
        connectivity = min(1.0, genome.edge_count / max(1, node_count - 1))
        patterns = min(1.0, sum(p.applicability for p in genome.structure.patterns) / 3.0)

        magnitudes = [
            float(np.mean(np.abs(vector))) for vector in genome.parameters.as_dict().values()
        ]
        balance = 1.0 / (1.0 + float(np.std(magnitudes)) + float(np.mean(magnitudes)))

        return {
            "structure": structure,
            "connectivity": connectivity,
            "patterns": patterns,
            "balance": balance,
        }
