"""
Helper utilities for grammarevo.
"""
import itertools
import threading
from typing import Optional


class IdGenerator:
    """Monotonic, reproducible id source.

    Ids are ``{prefix}_{counter:06d}``; genome ids additionally carry the
    generation and a source tag (``gen3_mut_000042``).
    """

    def __init__(self, start: int = 0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_value(self) -> int:
        """Return the next counter value."""
        with self._lock:
            return next(self._counter)

    def next_id(self, prefix: str) -> str:
        """Return a new id with the given prefix.

        Args:
            prefix: Id prefix such as ``node`` or ``edge``

        Returns:
            Unique id string
        """
        return f"{prefix}_{self.next_value():06d}"

    def genome_id(self, generation: int, tag: str) -> str:
        """Return a new genome id encoding generation and source tag.

        Args:
            generation: Generation the genome is born in
            tag: Source tag (``rand``, ``cross``, ``mut``, ``imm``)

        Returns:
            Unique genome id
        """
        return f"gen{generation}_{tag}_{self.next_value():06d}"


def clamp(value: float, lower: float = 0.0, upper: float = 1.0) -> float:
    """Clamp a value into ``[lower, upper]``."""
    return max(lower, min(upper, value))


def format_duration(seconds: Optional[float]) -> str:
    """Format a duration in seconds as a human-readable string.

    Args:
        seconds: Duration in seconds

    Returns:
        Formatted duration string
    """
    if seconds is None:
        return "n/a"
    if seconds < 0.001:
        return f"{seconds * 1_000_000:.0f}µs"
    if seconds < 1:
        return f"{seconds * 1000:.1f}ms"
    if seconds < 60:
        return f"{seconds:.2f}s"

    minutes, secs = divmod(seconds, 60)
    if minutes < 60:
        return f"{int(minutes)}m {secs:.0f}s"

    hours, minutes = divmod(minutes, 60)
    return f"{int(hours)}h {int(minutes)}m"
