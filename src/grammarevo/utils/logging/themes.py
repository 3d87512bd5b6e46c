"""
Color themes for the grammarevo logging system.

This module defines color schemes for log levels and engine components so
that generation reports stay visually consistent.
"""
from rich.theme import Theme
from rich.style import Style

# Base color definitions
COLORS = {
    # Main colors
    "primary": "bright_blue",
    "accent": "magenta",
    "success": "green",
    "warning": "yellow",
    "error": "red",
    "critical": "bright_red",
    "info": "bright_blue",
    "debug": "bright_black",

    # Component-specific colors
    "evolution": "magenta",
    "selection": "yellow",
    "reproduction": "cyan",
    "diversity": "bright_cyan",
    "meta": "bright_magenta",
    "config": "blue",

    # Misc
    "muted": "bright_black",
    "timestamp": "bright_black",
    "data": "bright_yellow",
}

# Style definitions (combining color with additional attributes)
STYLES = {
    # Base styles for log levels
    "info": Style(color=COLORS["info"]),
    "debug": Style(color=COLORS["debug"]),
    "warning": Style(color=COLORS["warning"], bold=True),
    "error": Style(color=COLORS["error"], bold=True),
    "critical": Style(color=COLORS["critical"], bold=True, reverse=True),
    "success": Style(color=COLORS["success"], bold=True),

    # Component styles
    "evolution": Style(color=COLORS["evolution"], bold=True),
    "selection": Style(color=COLORS["selection"], bold=True),
    "reproduction": Style(color=COLORS["reproduction"], bold=True),
    "diversity": Style(color=COLORS["diversity"], bold=True),
    "meta": Style(color=COLORS["meta"], bold=True),
    "config": Style(color=COLORS["config"], bold=True),

    # Operation style
    "operation": Style(color=COLORS["accent"], bold=True),

    # Misc styles
    "timestamp": Style(color=COLORS["timestamp"], dim=True),
    "data": Style(color=COLORS["data"]),
    "muted": Style(color=COLORS["muted"], dim=True),
}

# Rich theme that can be used directly with Rich Console
RICH_THEME = Theme({name: style for name, style in STYLES.items()})


def get_level_style(level: str) -> Style:
    """Get the Rich style for a specific log level.

    Args:
        level: The log level (info, debug, warning, error, critical, success)

    Returns:
        The corresponding Rich Style
    """
    return STYLES.get(level.lower(), STYLES["info"])


def get_component_style(component: str) -> Style:
    """Get the Rich style for a specific engine component.

    Args:
        component: The component name (evolution, selection, meta, etc.)

    Returns:
        The corresponding Rich Style
    """
    return STYLES.get(component.lower(), STYLES["info"])
