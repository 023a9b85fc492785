# MIT License (see LICENSE)
"""
Utility functions for numeric array conversion.

Normalizes array-like inputs for the body store. Vectors are
numpy arrays of shape (2,); batches of vectors are arrays of shape (N, 2).
"""
from __future__ import annotations

import numpy as np


def f64(x) -> np.ndarray:
    """
    Convert any array-like to a float64 numpy array.

    Used throughout the codebase to ensure consistent numeric precision
    and allow tuple/list inputs for positions and velocities.
    """
    return np.array(x, dtype=np.float64)


def vec2_array(x, n: int | None = None) -> np.ndarray:
    """
    Convert an array-like of 2D vectors to a float64 array of shape (N, 2).

    An empty input yields an array of shape (0, 2). If `n` is given the
    result must hold exactly `n` vectors.
    """
    arr = np.array(x, dtype=np.float64)
    if arr.size == 0:
        arr = arr.reshape(0, 2)
    if arr.ndim != 2 or arr.shape[1] != 2:
        raise ValueError(f"Expected an (N, 2) array of vectors, got shape {arr.shape}")
    if n is not None and arr.shape[0] != n:
        raise ValueError(f"Expected {n} vectors, got {arr.shape[0]}")
    return arr
