"""
grammarevo - evolutionary optimization of agentic grammar rules.

A population-based genetic algorithm over graph-structured grammar genomes
with multi-strategy selection, diversity preservation and self-tuning
search rates.
"""

from grammarevo.version import __version__
from grammarevo.config import EvolutionParams, SelectionMethod, load_config, get_config
from grammarevo.evolution import (
    GrammarEvolutionEngine,
    GrammarGenome,
    GrammarPrimitive,
    PrimitiveType,
    FitnessEvaluator,
    StructuralFitnessEvaluator,
    EvolutionStats,
)
from grammarevo.utils.logging import logger, configure_logging

__all__ = [
    "__version__",
    "EvolutionParams",
    "SelectionMethod",
    "load_config",
    "get_config",
    "GrammarEvolutionEngine",
    "GrammarGenome",
    "GrammarPrimitive",
    "PrimitiveType",
    "FitnessEvaluator",
    "StructuralFitnessEvaluator",
    "EvolutionStats",
    "logger",
    "configure_logging",
]
