# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Canopy generation.

Given a distance measure and two thresholds T1 > T2, canopies are built as
follows: start with the points in any order, pick the first point and measure
its distance to all remaining points. Every point within T1 joins the canopy;
every point within T2 is removed from the list. Repeat until the list is
empty.

A point farther than T2 but closer than T1 to a seed stays in the list, so it
may join later canopies as well. Canopies overlap.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Union

import numpy as np

from .distance import DistanceMeasure, get_distance_measure
from .errors import InvalidArgumentError
from .vectors import as_points

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Canopy:
    """
    A loosely bounded group of points around a seed.

    Attributes
    ----------
    id : int
        Creation index, starting at 0.
    center : np.ndarray
        Copy of the seed point. Never recomputed.
    num_points : int
        Points counted in this canopy, the seed included.
    point_total : np.ndarray
        Running sum of those points.
    """

    id: int
    center: np.ndarray
    num_points: int = 1
    point_total: np.ndarray = field(default=None, repr=False)

    def __post_init__(self):
        self.center = np.array(self.center, dtype=np.float64)
        if self.point_total is None:
            self.point_total = self.center.copy()

    def add_point(self, point: np.ndarray) -> None:
        self.num_points += 1
        self.point_total = self.point_total + point

    def centroid(self) -> np.ndarray:
        """Mean of the points counted so far (``center`` is left unchanged)."""
        return self.point_total / self.num_points

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "center": self.center.tolist(),
            "num_points": self.num_points,
        }


class CanopyBuilder:
    """
    Single-pass canopy generator.

    Parameters
    ----------
    measure : str or callable
        Distance measure (see ``distance.get_distance_measure``).
    t1 : float
        Membership threshold.
    t2 : float
        Removal threshold, ``0 <= t2 < t1``.

    Examples
    --------
    >>> builder = CanopyBuilder("manhattan", t1=3.0, t2=1.5)
    >>> canopies = builder.build([[0, 0], [0, 1], [10, 10], [10, 11]])
    >>> [(c.id, c.num_points) for c in canopies]
    [(0, 2), (1, 2)]
    """

    def __init__(self, measure: Union[str, DistanceMeasure], t1: float, t2: float):
        if not t1 > t2:
            raise InvalidArgumentError(f"t1 must be greater than t2, got t1={t1}, t2={t2}")
        if t2 < 0:
            raise InvalidArgumentError(f"t2 must be non-negative, got {t2}")
        self.measure = get_distance_measure(measure)
        self.t1 = float(t1)
        self.t2 = float(t2)

    def build(self, points: Sequence) -> List[Canopy]:
        """
        Partition ``points`` into canopies.

        The caller's sequence is copied, never consumed.

        Returns
        -------
        list of Canopy
            Canopies in creation order.

        Raises
        ------
        InvalidArgumentError
            If ``points`` is empty or mixes dimensions.
        """
        remaining = as_points(points)
        if not remaining:
            raise InvalidArgumentError("At least one point is required to build canopies")

        num_points = len(remaining)
        canopies: List[Canopy] = []
        while remaining:
            seed = remaining[0]
            canopy = Canopy(id=len(canopies), center=seed)
            survivors = []
            for point in remaining[1:]:
                distance = self.measure(seed, point)
                if distance < self.t1:
                    canopy.add_point(point)
                if distance >= self.t2:
                    survivors.append(point)
            logger.debug(
                f"Canopy {canopy.id}: {canopy.num_points} points, "
                f"{len(remaining) - 1 - len(survivors)} removed"
            )
            canopies.append(canopy)
            remaining = survivors

        logger.info(f"Built {len(canopies)} canopies from {num_points} points")
        return canopies


def build_canopies(
    points: Sequence,
    measure: Union[str, DistanceMeasure],
    t1: float,
    t2: float,
) -> List[Canopy]:
    """Build canopies over ``points``; see ``CanopyBuilder``."""
    return CanopyBuilder(measure, t1, t2).build(points)
