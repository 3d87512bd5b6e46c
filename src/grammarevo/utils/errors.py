"""
grammarevo Error Definitions.

This module defines custom error types used throughout the grammar evolution
engine to provide more specific error information and handling.
"""

from typing import Optional, Dict, Any


class GrammarEvoError(Exception):
    """Base exception class for all grammarevo-related errors."""

    def __init__(
        self, message: str, code: Optional[str] = None, details: Optional[Dict[str, Any]] = None
    ):
        """Initialize a GrammarEvoError with optional error code and details.

        Args:
            message: Human-readable error message
            code: Machine-readable error code
            details: Additional error context and details
        """
        self.message = message
        self.code = code
        self.details = details or {}
        super().__init__(message)


class ConfigurationError(GrammarEvoError):
    """Error raised when evolution parameters or seed data are unusable."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, "CONFIGURATION_ERROR", details)


class StructuralIntegrityError(GrammarEvoError):
    """Error raised when a genome references node ids it does not contain.

    This signals a defect in an operator, never a recoverable runtime state.
    """

    def __init__(
        self,
        message: str,
        genome_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if genome_id:
            error_details["genome_id"] = genome_id
        super().__init__(message, "STRUCTURAL_INTEGRITY_ERROR", error_details)


class EvaluationError(GrammarEvoError):
    """Error raised when the fitness evaluator fails for a genome."""

    def __init__(
        self,
        message: str,
        genome_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        error_details = details or {}
        if genome_id:
            error_details["genome_id"] = genome_id
        super().__init__(message, "EVALUATION_ERROR", error_details)


class EvolutionError(GrammarEvoError):
    """
    Exception raised for errors in the evolution driver.

    Attributes:
        message: Error message
        phase: Name of the phase that caused the error
        details: Additional error details
    """

    def __init__(
        self, message: str, phase: Optional[str] = None, details: Optional[Dict[str, Any]] = None
    ) -> None:
        super().__init__(
            message,
            code=f"EVOLUTION_{phase.upper()}_ERROR" if phase else "EVOLUTION_ERROR",
            details=details,
        )
        self.phase = phase
