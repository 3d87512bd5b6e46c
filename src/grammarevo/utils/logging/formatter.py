"""
Log formatters for the grammarevo logging system.

This module provides formatters that convert log records into Rich renderables
with consistent styling and visual elements.
"""
import time
import logging
from typing import Dict, Any, Optional, Tuple
from datetime import datetime

from rich.console import Console, ConsoleRenderable
from rich.text import Text
from rich.panel import Panel
from rich.table import Table
from rich.logging import RichHandler
from rich.traceback import Traceback
from rich.style import Style
from rich.columns import Columns

from .emojis import LEVEL_EMOJIS, UNKNOWN, get_emoji
from .themes import get_level_style, get_component_style


class GrammarEvoLogRecord:
    """Log record carrying the engine-specific component/operation fields."""

    def __init__(
        self,
        level: str,
        message: str,
        component: Optional[str] = None,
        operation: Optional[str] = None,
        emoji: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
        timestamp: Optional[float] = None,
        exception_info: Optional[Tuple] = None,
    ):
        """Initialize a log record.

        Args:
            level: Log level (info, debug, warning, error, critical, success)
            message: Log message
            component: Engine component (evolution, selection, meta, etc.)
            operation: Operation being performed
            emoji: Custom emoji override
            context: Additional contextual data
            timestamp: Unix timestamp (defaults to current time)
            exception_info: Exception info tuple (type, value, traceback)
        """
        self.level = level.lower()
        self.message = message
        self.component = component.lower() if component else None
        self.operation = operation.lower() if operation else None
        self.custom_emoji = emoji
        self.context = context or {}
        self.timestamp = timestamp or time.time()
        self.exception_info = exception_info

    @property
    def emoji(self) -> str:
        """Get the appropriate emoji for this log record."""
        if self.custom_emoji:
            return self.custom_emoji

        if self.operation:
            operation_emoji = get_emoji("operation", self.operation)
            if operation_emoji != UNKNOWN:
                return operation_emoji

        return LEVEL_EMOJIS.get(self.level, UNKNOWN)

    @property
    def style(self) -> Style:
        """Get the appropriate style for this log record."""
        return get_level_style(self.level)

    @property
    def component_style(self) -> Style:
        """Get the style for this record's component."""
        if not self.component:
            return self.style
        return get_component_style(self.component)

    @property
    def format_time(self) -> str:
        """Format the timestamp for display."""
        dt = datetime.fromtimestamp(self.timestamp)
        return dt.strftime("%H:%M:%S.%f")[:-3]  # Trim microseconds to milliseconds

    def has_exception(self) -> bool:
        """Check if this record contains exception information."""
        return self.exception_info is not None


class GrammarEvoLogFormatter:
    """Base formatter that converts records to Rich renderables."""

    def __init__(self, show_time: bool = True, show_level: bool = True, show_component: bool = True):
        self.show_time = show_time
        self.show_level = show_level
        self.show_component = show_component

    def format_header(self, record: GrammarEvoLogRecord) -> Text:
        """Build the single-line header shared by every formatter."""
        result = Text()

        if self.show_time:
            result.append(f"[{record.format_time}] ", style="timestamp")

        result.append(f"{record.emoji} ", style=record.style)

        if self.show_level:
            result.append(f"[{record.level.upper()}] ", style=record.style)

        if self.show_component and record.component:
            result.append(f"[{record.component}] ", style=record.component_style)

        if record.operation:
            result.append(f"{record.operation}: ", style="operation")

        result.append(record.message)
        return result

    def format_record(self, record: GrammarEvoLogRecord) -> ConsoleRenderable:
        """Format a record into a Rich renderable."""
        raise NotImplementedError("Subclasses must implement format_record")


class SimpleLogFormatter(GrammarEvoLogFormatter):
    """Simple single-line log formatter."""

    def format_record(self, record: GrammarEvoLogRecord) -> Text:
        return self.format_header(record)


class DetailedLogFormatter(GrammarEvoLogFormatter):
    """Multi-line formatter that can include context data and tracebacks."""

    def __init__(
        self,
        show_time: bool = True,
        show_level: bool = True,
        show_component: bool = True,
        show_context: bool = True,
    ):
        super().__init__(show_time, show_level, show_component)
        self.show_context = show_context

    def format_record(self, record: GrammarEvoLogRecord) -> ConsoleRenderable:
        """Format a record with detailed information.

        Args:
            record: The log record to format

        Returns:
            Formatted Panel, Columns or Text object
        """
        header = self.format_header(record)

        if not self.show_context or (not record.context and not record.has_exception()):
            return header

        elements = [header]

        if record.context:
            context_table = Table(box=None, expand=False, padding=(0, 1))
            context_table.add_column("Key", style="bright_black")
            context_table.add_column("Value")
            for key, value in record.context.items():
                if isinstance(value, float):
                    value = f"{value:.4f}"
                context_table.add_row(str(key), str(value))
            elements.append(context_table)

        if record.has_exception():
            exc_type, exc_value, exc_tb = record.exception_info
            elements.append(Traceback.from_exception(exc_type, exc_value, exc_tb))

        if record.level in ("error", "critical"):
            return Panel(
                Columns(elements, padding=(0, 1)),
                title=f"{record.level.upper()} in {record.component or 'grammarevo'}",
                border_style=record.style,
                padding=(1, 2),
            )

        return Columns(elements, padding=(0, 2))


class RichLoggingHandler(RichHandler):
    """Rich logging handler that renders records with the grammarevo formatters."""

    def __init__(
        self,
        level: int = logging.NOTSET,
        console: Optional[Console] = None,
        formatter: Optional[GrammarEvoLogFormatter] = None,
        **kwargs
    ):
        super().__init__(level=level, console=console, **kwargs)
        self.grammarevo_formatter = formatter or DetailedLogFormatter()

    def render(
        self,
        *,
        record: logging.LogRecord,
        traceback: Optional[Traceback],
        message_renderable: ConsoleRenderable,
    ) -> ConsoleRenderable:
        """Render a log record using the component/operation extras.

        Args:
            record: Standard logging record
            traceback: Exception traceback if any
            message_renderable: The rendered message

        Returns:
            Formatted renderable
        """
        evo_record = GrammarEvoLogRecord(
            level=record.levelname.lower(),
            message=record.getMessage(),
            component=getattr(record, "component", None),
            operation=getattr(record, "operation", None),
            emoji=getattr(record, "emoji", None),
            context=getattr(record, "context", None),
            timestamp=record.created,
            exception_info=(record.exc_info if record.exc_info else None),
        )
        return self.grammarevo_formatter.format_record(evo_record)
