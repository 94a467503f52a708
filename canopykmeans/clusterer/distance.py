# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Distance measures.

A distance measure is any callable taking two vectors of the same dimension
and returning a non-negative float. The functions below cover the usual
choices; ``get_distance_measure`` resolves a registered name (the same
strings the Spark estimator accepts) or passes a callable through.

Measures are trusted: a callable that returns negative or non-finite values
makes threshold comparisons meaningless, and nothing here checks for it.
"""

from typing import Callable, Dict, Union

import numpy as np

from .errors import InvalidArgumentError

DistanceMeasure = Callable[[np.ndarray, np.ndarray], float]


def manhattan_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Sum of absolute coordinate differences (L1)."""
    return float(np.sum(np.abs(a - b)))


def euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Straight-line distance (L2)."""
    return float(np.linalg.norm(a - b))


def squared_euclidean_distance(a: np.ndarray, b: np.ndarray) -> float:
    """Squared L2 distance; cheaper than ``euclidean_distance`` and order-preserving."""
    diff = a - b
    return float(np.dot(diff, diff))


def cosine_distance(a: np.ndarray, b: np.ndarray) -> float:
    """
    One minus the cosine similarity.

    Two zero vectors are at distance 0; a zero vector and a non-zero vector
    are at distance 1.
    """
    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a < 1e-10 and norm_b < 1e-10:
        return 0.0
    if norm_a < 1e-10 or norm_b < 1e-10:
        return 1.0
    # rounding can push the ratio just above 1
    return max(0.0, 1.0 - float(np.dot(a, b)) / float(norm_a * norm_b))


def tanimoto_distance(a: np.ndarray, b: np.ndarray) -> float:
    """One minus the Tanimoto (extended Jaccard) coefficient."""
    dot = float(np.dot(a, b))
    denominator = float(np.dot(a, a)) + float(np.dot(b, b)) - dot
    if denominator < 1e-10:
        return 0.0
    return max(0.0, 1.0 - dot / denominator)


DISTANCE_MEASURES: Dict[str, DistanceMeasure] = {
    "manhattan": manhattan_distance,
    "euclidean": euclidean_distance,
    "squaredEuclidean": squared_euclidean_distance,
    "cosine": cosine_distance,
    "tanimoto": tanimoto_distance,
}


def get_distance_measure(measure: Union[str, DistanceMeasure]) -> DistanceMeasure:
    """
    Resolve a distance measure.

    Parameters
    ----------
    measure : str or callable
        A key of ``DISTANCE_MEASURES`` or a callable used as-is.

    Raises
    ------
    InvalidArgumentError
        If ``measure`` is an unknown name or not callable.
    """
    if callable(measure):
        return measure
    try:
        return DISTANCE_MEASURES[measure]
    except (KeyError, TypeError):
        raise InvalidArgumentError(
            f"Unknown distance measure {measure!r}; "
            f"expected one of {sorted(DISTANCE_MEASURES)} or a callable"
        ) from None
