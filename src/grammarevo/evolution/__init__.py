"""
Grammar evolution package.

Genome model, genetic operators, selection, diversity control,
meta-optimization and the evolution driver.
"""

from grammarevo.evolution.genome import (
    PrimitiveType,
    GrammarPrimitive,
    GenomeNode,
    GenomeEdge,
    GenomePattern,
    GenomeStructure,
    GenomeParameters,
    GrammarGenome,
    validate_structure,
)
from grammarevo.evolution.random_source import RandomSource
from grammarevo.evolution.fitness import (
    FitnessEvaluator,
    WeightedFitnessEvaluator,
    StructuralFitnessEvaluator,
)
from grammarevo.evolution.reproduction import GenomeFactory
from grammarevo.evolution.diversity import (
    genome_similarity,
    maintain_diversity,
    population_diversity,
)
from grammarevo.evolution.selection import select_parents, select_survivors
from grammarevo.evolution.population import PopulationManager
from grammarevo.evolution.meta import MetaAdjustment, MetaOptimizer
from grammarevo.evolution.statistics import EvolutionStats
from grammarevo.evolution.engine import GrammarEvolutionEngine

__all__ = [
    "PrimitiveType",
    "GrammarPrimitive",
    "GenomeNode",
    "GenomeEdge",
    "GenomePattern",
    "GenomeStructure",
    "GenomeParameters",
    "GrammarGenome",
    "validate_structure",
    "RandomSource",
    "FitnessEvaluator",
    "WeightedFitnessEvaluator",
    "StructuralFitnessEvaluator",
    "GenomeFactory",
    "genome_similarity",
    "maintain_diversity",
    "population_diversity",
    "select_parents",
    "select_survivors",
    "PopulationManager",
    "MetaAdjustment",
    "MetaOptimizer",
    "EvolutionStats",
    "GrammarEvolutionEngine",
]
