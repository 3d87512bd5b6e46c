"""
grammarevo Utilities Package.

This package provides error types, logging, async helpers and id generation
used throughout the grammar evolution engine.
"""

from grammarevo.utils.errors import (
    GrammarEvoError,
    ConfigurationError,
    StructuralIntegrityError,
    EvaluationError,
    EvolutionError,
)
from grammarevo.utils.helpers import IdGenerator, clamp, format_duration

# Import and expose logging utilities
from grammarevo.utils.logging import logger

__all__ = [
    # Errors
    "GrammarEvoError",
    "ConfigurationError",
    "StructuralIntegrityError",
    "EvaluationError",
    "EvolutionError",
    # Helpers
    "IdGenerator",
    "clamp",
    "format_duration",
    # Logging
    "logger",
]
