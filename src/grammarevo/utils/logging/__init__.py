"""
grammarevo Logging Package.

This package provides rich-formatted logging for the grammar evolution
engine, plus a capture helper used by the test-suite.
"""

import logging
from typing import Dict, Any, Optional, List

from grammarevo.utils.logging.console import console
from grammarevo.utils.logging.logger import Logger
from grammarevo.utils.logging.formatter import (
    GrammarEvoLogRecord,
    SimpleLogFormatter,
    DetailedLogFormatter,
    RichLoggingHandler,
)

# Create a global logger instance for importing
logger = Logger("grammarevo")


def get_logger(name: str, component: Optional[str] = None) -> Logger:
    """Get a logger for a specific component.

    Args:
        name: Logger name (a child of ``grammarevo`` keeps handlers shared)
        component: Default component attached to every record

    Returns:
        Logger instance
    """
    return Logger(name, component=component)


def configure_logging(level: str = "info", show_path: bool = False) -> RichLoggingHandler:
    """Install the rich handler on the package logger.

    Calling this more than once replaces the previously installed handler.

    Args:
        level: Minimum level rendered by the handler
        show_path: Whether the rich handler shows source paths

    Returns:
        The installed handler
    """
    package_logger = logging.getLogger("grammarevo")
    for existing in list(package_logger.handlers):
        if isinstance(existing, RichLoggingHandler):
            package_logger.removeHandler(existing)

    handler = RichLoggingHandler(
        level=getattr(logging, level.upper(), logging.INFO),
        console=console,
        show_path=show_path,
        markup=False,
        rich_tracebacks=True,
    )
    package_logger.addHandler(handler)
    logger.set_level(level)
    return handler


def capture_logs(level: Optional[str] = None) -> "LogCapture":
    """Create a context manager to capture logs.

    Args:
        level: Minimum log level to capture

    Returns:
        Log capture context manager
    """
    return LogCapture(level)


class LogCapture:
    """Context manager for capturing logs emitted under ``grammarevo``."""

    def __init__(self, level: Optional[str] = None):
        self.level = level
        self.level_num = getattr(logging, self.level.upper(), 0) if self.level else 0
        self.logs: List[Dict[str, Any]] = []
        self.handler = self._create_handler()

    def _create_handler(self) -> logging.Handler:
        class CaptureHandler(logging.Handler):
            def __init__(self, capture):
                super().__init__()
                self.capture = capture

            def emit(self, record):
                if record.levelno < self.capture.level_num:
                    return

                self.capture.logs.append({
                    "level": record.levelname,
                    "message": record.getMessage(),
                    "name": record.name,
                    "component": getattr(record, "component", None),
                    "operation": getattr(record, "operation", None),
                    "context": getattr(record, "context", None),
                })

        return CaptureHandler(self)

    def __enter__(self) -> "LogCapture":
        logging.getLogger("grammarevo").addHandler(self.handler)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        logging.getLogger("grammarevo").removeHandler(self.handler)

    def get_logs(self, level: Optional[str] = None) -> List[Dict[str, Any]]:
        """Get captured logs, optionally filtered by minimum level."""
        if not level:
            return self.logs

        level_num = getattr(logging, level.upper(), 0)
        return [log for log in self.logs if getattr(logging, log["level"], 0) >= level_num]

    def get_messages(self, level: Optional[str] = None) -> List[str]:
        """Get captured log messages, optionally filtered by level."""
        return [log["message"] for log in self.get_logs(level)]

    def contains(self, text: str, level: Optional[str] = None) -> bool:
        """Check if captured logs contain a specific text."""
        return any(text in message for message in self.get_messages(level))


__all__ = [
    "console",
    "logger",
    "Logger",
    "get_logger",
    "configure_logging",
    "capture_logs",
    "LogCapture",
    "GrammarEvoLogRecord",
    "SimpleLogFormatter",
    "DetailedLogFormatter",
    "RichLoggingHandler",
]
