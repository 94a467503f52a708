# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Reference k-means refinement.

Starting from seed clusters, each generation is a fresh copy of the previous
one that receives a full assignment pass over the points. If every cluster's
center would move by less than ``epsilon`` the run has converged and the
generation keeps its centers; otherwise the centers move to the means of
their assigned points. Every generation is kept, seed included.
"""

import logging
from typing import Iterator, List, Sequence, Tuple, Union

import numpy as np

from .cluster import Cluster
from .distance import DistanceMeasure, get_distance_measure
from .errors import InvalidArgumentError
from .vectors import as_points

logger = logging.getLogger(__name__)


def nearest_cluster(
    point: np.ndarray,
    centers: Sequence[np.ndarray],
    measure: DistanceMeasure,
) -> Tuple[int, float]:
    """
    Index of and distance to the nearest center.

    Ties go to the first center in ``centers``.
    """
    best_index = -1
    best_distance = float("inf")
    for index, center in enumerate(centers):
        distance = measure(center, point)
        if best_index < 0 or distance < best_distance:
            best_index = index
            best_distance = distance
    return best_index, best_distance


def iterate_once(
    points: Sequence[np.ndarray],
    clusters: List[Cluster],
    measure: Union[str, DistanceMeasure],
    epsilon: float = 0.001,
) -> bool:
    """
    Run one assignment and update pass over ``clusters`` in place.

    Returns
    -------
    bool
        True if every cluster converged, in which case no center moved.

    Raises
    ------
    InvalidArgumentError
        If ``clusters`` is empty.
    """
    if not clusters:
        raise InvalidArgumentError("At least one cluster is required")
    measure = get_distance_measure(measure)

    # centers are frozen for the whole assignment phase
    centers = [cluster.center for cluster in clusters]
    for point in points:
        index, distance = nearest_cluster(point, centers, measure)
        clusters[index].add_point(point, distance)

    converged = True
    for cluster in clusters:
        if not cluster.compute_convergence(measure, epsilon):
            converged = False

    if not converged:
        for cluster in clusters:
            cluster.recompute_center()

    for cluster in clusters:
        cluster.close_pass()
    return converged


class IterativeRefiner:
    """
    Refine seed clusters until convergence or an iteration budget runs out.

    Parameters
    ----------
    measure : str or callable
        Distance measure used for assignment and convergence.
    max_iterations : int
        Maximum number of generations produced after the seed (>= 0).
    epsilon : float, default=0.001
        Per-cluster displacement below which a cluster counts as converged.

    Attributes
    ----------
    converged : bool
        Whether the last run converged.
    iterations : int
        Generations produced by the last run, the seed excluded.

    Examples
    --------
    >>> refiner = IterativeRefiner("euclidean", max_iterations=10)
    >>> history = refiner.refine(points, seeds)
    >>> final = history[-1]
    >>> refiner.converged, refiner.iterations
    (True, 2)
    """

    def __init__(
        self,
        measure: Union[str, DistanceMeasure],
        max_iterations: int,
        epsilon: float = 0.001,
    ):
        if max_iterations < 0:
            raise InvalidArgumentError(
                f"max_iterations must be non-negative, got {max_iterations}"
            )
        if epsilon < 0:
            raise InvalidArgumentError(f"epsilon must be non-negative, got {epsilon}")
        self.measure = get_distance_measure(measure)
        self.max_iterations = int(max_iterations)
        self.epsilon = float(epsilon)
        self.converged = False
        self.iterations = 0

    def generations(
        self, points: Sequence, seed_clusters: Sequence[Cluster]
    ) -> Iterator[List[Cluster]]:
        """
        Yield generation 0 (the seeds) and each refined generation in turn.

        Arguments are validated before the first generation is yielded.
        """
        points = as_points(points)
        seeds = list(seed_clusters)
        self._check_inputs(points, seeds)
        return self._generate(points, seeds)

    def refine(
        self, points: Sequence, seed_clusters: Sequence[Cluster]
    ) -> List[List[Cluster]]:
        """Run to completion and return every generation."""
        return list(self.generations(points, seed_clusters))

    def _check_inputs(self, points: List[np.ndarray], seeds: List[Cluster]) -> None:
        if not seeds:
            raise InvalidArgumentError("At least one seed cluster is required")
        dimension = seeds[0].dimension
        for cluster in seeds:
            if cluster.dimension != dimension:
                raise InvalidArgumentError(
                    f"Seed clusters mix dimensions {dimension} and {cluster.dimension}"
                )
        if points and points[0].shape[0] != dimension:
            raise InvalidArgumentError(
                f"Points have dimension {points[0].shape[0]}, clusters {dimension}"
            )

    def _generate(
        self, points: List[np.ndarray], seeds: List[Cluster]
    ) -> Iterator[List[Cluster]]:
        self.converged = False
        self.iterations = 0
        current = seeds
        yield current

        while not self.converged and self.iterations < self.max_iterations:
            current = [cluster.spawn() for cluster in current]
            self.converged = iterate_once(points, current, self.measure, self.epsilon)
            self.iterations += 1
            logger.debug(
                f"Generation {self.iterations}: sizes {[c.size for c in current]}, "
                f"converged={self.converged}"
            )
            yield current

        if self.converged:
            logger.info(f"Converged after {self.iterations} iterations")
        else:
            logger.info(
                f"Stopped after {self.iterations} iterations without converging"
            )


def refine(
    points: Sequence,
    seed_clusters: Sequence[Cluster],
    measure: Union[str, DistanceMeasure],
    max_iterations: int,
    epsilon: float = 0.001,
) -> List[List[Cluster]]:
    """Return every generation of refining ``seed_clusters`` over ``points``."""
    return IterativeRefiner(measure, max_iterations, epsilon).refine(points, seed_clusters)
