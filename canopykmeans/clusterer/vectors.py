# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Dense vector helpers.

Points are plain one-dimensional ``float64`` NumPy arrays. Operations that
combine two vectors require matching dimensions instead of broadcasting.
"""

from typing import Iterable, List, Optional

import numpy as np

from .errors import InvalidArgumentError


def as_vector(values, dimension: Optional[int] = None) -> np.ndarray:
    """
    Convert ``values`` to a dense vector.

    Parameters
    ----------
    values : array-like
        Coordinates. Spark ML vectors are accepted through ``toArray()``.
    dimension : int, optional
        Expected number of coordinates.

    Returns
    -------
    np.ndarray
        A new 1-D ``float64`` array.

    Raises
    ------
    InvalidArgumentError
        If ``values`` is not one-dimensional or has the wrong dimension.
    """
    if hasattr(values, "toArray"):
        values = values.toArray()
    vector = np.array(values, dtype=np.float64)
    if vector.ndim != 1:
        raise InvalidArgumentError(
            f"Expected a one-dimensional vector, got shape {vector.shape}"
        )
    if dimension is not None and vector.shape[0] != dimension:
        raise InvalidArgumentError(
            f"Expected a vector of dimension {dimension}, got {vector.shape[0]}"
        )
    return vector


def as_points(points: Iterable) -> List[np.ndarray]:
    """
    Copy a sequence of points into a list of vectors sharing one dimension.

    The caller's sequence is never modified.
    """
    result: List[np.ndarray] = []
    dimension = None
    for values in points:
        vector = as_vector(values, dimension)
        dimension = vector.shape[0]
        result.append(vector)
    return result


def check_same_dimension(a: np.ndarray, b: np.ndarray) -> None:
    """Raise InvalidArgumentError unless ``a`` and ``b`` have the same length."""
    if a.shape != b.shape:
        raise InvalidArgumentError(
            f"Dimension mismatch: {a.shape} vs {b.shape}"
        )


def filled(dimension: int, value: float) -> np.ndarray:
    """Return a vector of ``dimension`` coordinates all assigned ``value``."""
    if dimension < 1:
        raise InvalidArgumentError(f"dimension must be positive, got {dimension}")
    return np.full(dimension, float(value), dtype=np.float64)


def add(a: np.ndarray, b: np.ndarray) -> np.ndarray:
    """Elementwise sum of two vectors of the same dimension."""
    check_same_dimension(a, b)
    return a + b


def scale(vector: np.ndarray, factor: float) -> np.ndarray:
    """Multiply every coordinate by ``factor``."""
    return vector * float(factor)
