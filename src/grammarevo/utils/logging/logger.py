"""
Main Logger class for grammarevo.

This module provides the Logger facade used by every engine component. It
forwards to Python's logging system with component/operation extras that the
rich handler renders.
"""
import logging
from typing import Dict, List, Optional, Any, Tuple
from datetime import datetime

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from .console import console as default_console
from .emojis import get_emoji
from .themes import get_component_style

LEVEL_MAP = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "critical": logging.CRITICAL,
}


class Logger:
    """Logger facade with rich formatting for the grammar evolution engine."""

    def __init__(
        self,
        name: str = "grammarevo",
        console: Optional[Console] = None,
        level: str = "info",
        component: Optional[str] = None,
        capture_output: bool = False,
    ):
        """Initialize the logger.

        Args:
            name: Logger name
            console: Rich console to use for sections
            level: Initial log level
            component: Default component name
            capture_output: Whether to capture and store log output
        """
        self.name = name
        self.console = console or default_console
        self.component = component
        self.python_logger = logging.getLogger(name)
        self.python_logger.propagate = True
        self.captured_logs: Optional[List[Dict[str, Any]]] = [] if capture_output else None
        self.set_level(level)

    def set_level(self, level: str) -> None:
        """Set the log level.

        Args:
            level: Log level (debug, info, warning, error, critical)
        """
        self.level = level.lower()
        self.python_logger.setLevel(LEVEL_MAP.get(self.level, logging.INFO))

    def get_level(self) -> str:
        """Get the current log level."""
        return self.level

    def _log(
        self,
        level: str,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        emoji: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        exception_info: Optional[Tuple] = None,
    ) -> None:
        """Internal method to handle logging.

        Args:
            level: Log level
            message: Log message
            component: Engine component (evolution, selection, meta, etc.)
            operation: Operation being performed
            emoji: Custom emoji override
            context: Additional contextual data
            exception_info: Exception info tuple (type, value, traceback)
        """
        component = component or self.component

        if self.captured_logs is not None:
            self.captured_logs.append({
                "level": level,
                "message": message,
                "component": component,
                "operation": operation,
                "timestamp": datetime.now().isoformat(),
                "context": context,
            })

        log_func = getattr(self.python_logger, level if level != "success" else "info")
        extras = {
            "component": component,
            "operation": operation,
            "emoji": emoji,
            "context": context,
        }

        if exception_info and level in ("error", "critical"):
            log_func(message, exc_info=exception_info, extra=extras)
        else:
            log_func(message, extra=extras)

    def debug(
        self,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log a debug message."""
        self._log("debug", message, component, operation, context=context)

    def info(
        self,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log an info message."""
        self._log("info", message, component, operation, context=context)

    def success(
        self,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Log a success message (emitted at INFO level)."""
        self._log(
            "success", message, component, operation,
            emoji=get_emoji("level", "success"), context=context,
        )

    def warning(
        self,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        details: Optional[List[str]] = None,
    ) -> None:
        """Log a warning message.

        Args:
            message: Log message
            component: Engine component
            operation: Operation being performed
            context: Additional contextual data
            details: Optional list of detail points
        """
        warning_context = dict(context or {})
        if details:
            warning_context["details"] = details
        self._log("warning", message, component, operation, context=warning_context)

    def error(
        self,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
        error_code: Optional[str] = None,
    ) -> None:
        """Log an error message.

        Args:
            message: Log message
            component: Engine component
            operation: Operation being performed
            context: Additional contextual data
            exception: Optional exception that caused the error
            error_code: Optional error code for reference
        """
        error_context = dict(context or {})
        if error_code:
            error_context["error_code"] = error_code

        exc_info = None
        if exception is not None:
            exc_info = (type(exception), exception, exception.__traceback__)

        self._log(
            "error",
            message,
            component,
            operation,
            context=error_context,
            exception_info=exc_info,
        )

    def critical(
        self,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        exception: Optional[BaseException] = None,
    ) -> None:
        """Log a critical error message."""
        exc_info = None
        if exception is not None:
            exc_info = (type(exception), exception, exception.__traceback__)
        self._log("critical", message, component, operation, context=context, exception_info=exc_info)

    def section(
        self,
        title: str,
        subtitle: Optional[str] = None,
        component: Optional[str] = None,
    ) -> None:
        """Display a section header and log the section change.

        Args:
            title: Section title
            subtitle: Optional subtitle
            component: Engine component
        """
        component = component or self.component
        if self.python_logger.isEnabledFor(logging.INFO):
            style = get_component_style(component) if component else "bold"
            self.console.print(
                Panel(Text(title, style=style), subtitle=subtitle, expand=False)
            )
        self._log("info", f"Section: {title}", component, operation="section")

