"""
Rich console configuration for the grammarevo logging system.
"""
from rich.console import Console

from .themes import RICH_THEME

# Configure global console with our theme
console = Console(
    theme=RICH_THEME,
    highlight=True,
    markup=True,
    emoji=True,
    record=False,
    width=None,  # Auto-width
    color_system="auto",
)
