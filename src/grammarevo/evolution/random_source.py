"""
Seedable random source for the evolution engine.

Every random decision the engine makes goes through a single RandomSource
that is passed explicitly to the components that need it. Two runs built
from the same seed make identical choices.
"""
import random
from typing import Any, Dict, List, Optional, Sequence, TypeVar

import numpy as np

T = TypeVar('T')


class RandomSource:
    """Pairs a ``random.Random`` for discrete choices with a numpy Generator
    for tensor draws, both derived from one seed."""

    def __init__(self, seed: Optional[int] = None):
        """Initialize the random source.

        Args:
            seed: Seed for both generators; ``None`` seeds from OS entropy
        """
        self.seed = seed
        self._random = random.Random(seed)
        self._numpy = np.random.default_rng(seed)

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return self._random.random()

    def uniform(self, low: float, high: float) -> float:
        return self._random.uniform(low, high)

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in ``[low, high]`` inclusive."""
        return self._random.randint(low, high)

    def randrange(self, stop: int) -> int:
        return self._random.randrange(stop)

    def choice(self, items: Sequence[T]) -> T:
        return self._random.choice(items)

    def sample(self, items: Sequence[T], k: int) -> List[T]:
        """Choose ``k`` distinct items."""
        return self._random.sample(list(items), k)

    def chance(self, probability: float) -> bool:
        """Return True with the given probability."""
        return self._random.random() < probability

    def normal(self, scale: float, shape: Sequence[int]) -> np.ndarray:
        """Zero-mean gaussian noise of the given shape."""
        return self._numpy.normal(0.0, scale, size=tuple(shape))

    def get_state(self) -> Dict[str, Any]:
        """Snapshot both generators."""
        return {
            "random": self._random.getstate(),
            "numpy": self._numpy.bit_generator.state,
        }

    def set_state(self, state: Dict[str, Any]) -> None:
        """Restore a snapshot taken by :meth:`get_state`."""
        self._random.setstate(state["random"])
        self._numpy.bit_generator.state = state["numpy"]
