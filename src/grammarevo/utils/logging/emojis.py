"""
Emoji definitions for the grammarevo logging system.
"""
from typing import Dict

# Log level emojis
INFO = "ℹ️"
DEBUG = "🔍"
WARNING = "⚠️"
ERROR = "❌"
CRITICAL = "🚨"
SUCCESS = "✅"

# Evolution operation emojis
INITIALIZE = "🌱"
GENERATION = "👪"
EVALUATE = "🧮"
SELECTION = "👍"
CROSSOVER = "✂️"
DIVERSITY = "🌈"
META_OPTIMIZE = "⚡"
TERMINATE = "🏁"
LOAD_CONFIG = "⚙️"

UNKNOWN = "❓"

# Convenience mapping for log levels
LEVEL_EMOJIS: Dict[str, str] = {
    "info": INFO,
    "debug": DEBUG,
    "warning": WARNING,
    "error": ERROR,
    "critical": CRITICAL,
    "success": SUCCESS,
}


def get_emoji(category: str, name: str) -> str:
    """Get an emoji by category and name.

    Args:
        category: The category of emoji ('level' or 'operation')
        name: The name of the emoji within that category

    Returns:
        The emoji string, or the unknown marker if not found
    """
    if category.lower() == "level":
        return LEVEL_EMOJIS.get(name.lower(), UNKNOWN)

    return globals().get(name.upper(), UNKNOWN)
