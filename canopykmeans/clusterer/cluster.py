# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Refinable clusters and their seeding from canopies.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

import numpy as np

from .canopy import Canopy
from .distance import DistanceMeasure
from .errors import InvalidArgumentError

logger = logging.getLogger(__name__)


@dataclass(eq=False)
class Cluster:
    """
    A centroid with per-pass accumulators.

    ``running_sum`` and ``num_points`` collect the points assigned during one
    pass. ``center`` only changes in ``recompute_center``. After a pass,
    ``size`` and ``std`` describe the points the pass assigned.

    Attributes
    ----------
    id : int
        Index of the cluster within its generation.
    center : np.ndarray
        Current center.
    previous_center : np.ndarray or None
        Center before the last update, None until one happens.
    size : int
        Points assigned in the last completed pass.
    std : float
        Root mean square distance of those points to the center they were
        assigned against. Informational only.
    converged : bool
        Result of the last convergence test.
    """

    id: int
    center: np.ndarray
    previous_center: Optional[np.ndarray] = None
    running_sum: np.ndarray = field(default=None, repr=False)
    num_points: int = 0
    std: float = 0.0
    size: int = 0
    converged: bool = False
    _squared_distance_total: float = field(default=0.0, repr=False)

    def __post_init__(self):
        self.center = np.array(self.center, dtype=np.float64)
        if self.running_sum is None:
            self.running_sum = np.zeros_like(self.center)

    @property
    def dimension(self) -> int:
        return self.center.shape[0]

    def add_point(self, point: np.ndarray, distance: float = 0.0) -> None:
        """Accumulate ``point``, assigned at ``distance`` from ``center``."""
        self.running_sum = self.running_sum + point
        self.num_points += 1
        self._squared_distance_total += distance * distance

    def pending_center(self) -> np.ndarray:
        """Center implied by the accumulated points; the current center if none."""
        if self.num_points == 0:
            return self.center.copy()
        return self.running_sum / self.num_points

    def compute_convergence(self, measure: DistanceMeasure, epsilon: float) -> bool:
        """Test whether the pending center lies within ``epsilon`` of ``center``."""
        self.converged = measure(self.pending_center(), self.center) < epsilon
        return self.converged

    def recompute_center(self) -> None:
        """Move ``center`` to the mean of the accumulated points."""
        self.previous_center = self.center
        if self.num_points == 0:
            logger.debug(f"Cluster {self.id} received no points; keeping its center")
            self.center = self.center.copy()
        else:
            self.center = self.running_sum / self.num_points

    def close_pass(self) -> None:
        """Record size and spread of the pass, then reset the accumulators."""
        self.size = self.num_points
        if self.num_points:
            self.std = math.sqrt(self._squared_distance_total / self.num_points)
        else:
            self.std = 0.0
        self.running_sum = np.zeros_like(self.center)
        self.num_points = 0
        self._squared_distance_total = 0.0

    def spawn(self) -> "Cluster":
        """Clone for the next generation: same id and center, fresh accumulators."""
        return Cluster(id=self.id, center=self.center.copy())

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "center": self.center.tolist(),
            "previous_center": (
                None if self.previous_center is None else self.previous_center.tolist()
            ),
            "size": self.size,
            "std": self.std,
            "converged": self.converged,
        }


def seed_clusters(
    canopies: Sequence[Canopy],
    num_points: int,
    population_fraction: float = 0.05,
) -> List[Cluster]:
    """
    Create one cluster per canopy holding more than a fraction of the points.

    Parameters
    ----------
    canopies : sequence of Canopy
        Output of the canopy builder. Not modified.
    num_points : int
        Size of the original point set.
    population_fraction : float, default=0.05
        A canopy is kept when ``canopy.num_points > population_fraction * num_points``.

    Returns
    -------
    list of Cluster
        Clusters in canopy order with ids ``0..k-1``; centers are copies.
    """
    if num_points < 1:
        raise InvalidArgumentError(f"num_points must be positive, got {num_points}")
    if not 0.0 <= population_fraction < 1.0:
        raise InvalidArgumentError(
            f"population_fraction must be in [0, 1), got {population_fraction}"
        )

    threshold = population_fraction * num_points
    clusters = [
        Cluster(id=index, center=canopy.center.copy())
        for index, canopy in enumerate(c for c in canopies if c.num_points > threshold)
    ]
    logger.info(
        f"Seeded {len(clusters)} clusters from {len(canopies)} canopies "
        f"(threshold {threshold:g} points)"
    )
    return clusters
