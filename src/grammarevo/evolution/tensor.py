"""
Tensor primitives over fixed-shape numpy vectors.

Genome activations and parameter vectors are plain ``numpy.ndarray`` values.
Operations here never modify their inputs.
"""
from typing import Sequence

import numpy as np

from grammarevo.evolution.random_source import RandomSource


def _check_shapes(a: np.ndarray, b: np.ndarray) -> None:
    if a.shape != b.shape:
        raise ValueError(f"Tensor shape mismatch: {a.shape} vs {b.shape}")


def random_tensor(shape: Sequence[int], scale: float, rng: RandomSource) -> np.ndarray:
    """Create a gaussian tensor.

    Args:
        shape: Tensor shape
        scale: Standard deviation of the values
        rng: Random source to draw from

    Returns:
        New tensor
    """
    return rng.normal(scale, shape)


def add_tensors(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Element-wise sum of two tensors of equal shape."""
    _check_shapes(a, b)
    return a + b


def scale_tensor(a: np.ndarray, factor: float) -> np.ndarray:
    return a * factor


def clone_tensor(a: np.ndarray) -> np.ndarray:
    return np.array(a, dtype=float, copy=True)


def cosine_similarity(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine of the angle between two tensors.

    Returns 0.0 if either tensor has zero norm.

    Raises:
        ValueError: If the shapes differ
    """
    _check_shapes(a, b)
    norm_a = float(np.linalg.norm(a))
    norm_b = float(np.linalg.norm(b))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0
    return float(np.dot(a.ravel(), b.ravel()) / (norm_a * norm_b))
