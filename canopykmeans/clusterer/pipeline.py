# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
End-to-end canopy-seeded k-means: canopies, seeding, refinement.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Union

import numpy as np

from .canopy import Canopy, CanopyBuilder
from .cluster import Cluster, seed_clusters
from .config import CanopyKMeansConfig
from .distance import DistanceMeasure, get_distance_measure
from .errors import InvalidArgumentError
from .refiner import IterativeRefiner, nearest_cluster
from .vectors import as_points, as_vector

logger = logging.getLogger(__name__)


@dataclass
class ClusteringResult:
    """Canopies and cluster generations of one run."""

    canopies: List[Canopy]
    generations: List[List[Cluster]]
    converged: bool
    num_points: int

    @property
    def clusters(self) -> List[Cluster]:
        """The final generation."""
        return self.generations[-1]

    @property
    def iterations(self) -> int:
        """Generations produced after the seed."""
        return len(self.generations) - 1

    def cluster_centers(self) -> np.ndarray:
        """Final centers as a ``k x d`` array."""
        return np.array([cluster.center for cluster in self.clusters])


def canopy_kmeans(
    points: Sequence,
    measure: Union[str, DistanceMeasure] = "manhattan",
    config: Optional[CanopyKMeansConfig] = None,
    **overrides,
) -> ClusteringResult:
    """
    Cluster ``points`` with canopy seeding followed by k-means refinement.

    Parameters
    ----------
    points : sequence of array-like
        Points of one dimension. Not modified.
    measure : str or callable, default="manhattan"
        Distance measure for both phases.
    config : CanopyKMeansConfig, optional
        Thresholds and budgets. Keyword ``overrides`` are applied on top, or
        form the whole config when ``config`` is None.

    Returns
    -------
    ClusteringResult

    Raises
    ------
    InvalidArgumentError
        On invalid configuration, empty input, or when no canopy is large
        enough to seed a cluster.

    Examples
    --------
    >>> result = canopy_kmeans(
    ...     [[0, 0], [0, 1], [10, 10], [10, 11]],
    ...     "manhattan", t1=3.0, t2=1.5, max_iterations=10,
    ... )
    >>> result.cluster_centers()
    array([[ 0. ,  0.5],
           [10. , 10.5]])
    """
    if config is None:
        config = CanopyKMeansConfig.from_dict(overrides)
    elif overrides:
        config = config.replace(**overrides)

    measure = get_distance_measure(measure)
    points = as_points(points)
    logger.debug(f"Clustering {len(points)} points with {config}")

    canopies = CanopyBuilder(measure, config.t1, config.t2).build(points)
    seeds = seed_clusters(canopies, len(points), config.population_fraction)
    if not seeds:
        raise InvalidArgumentError(
            f"No canopy holds more than {config.population_fraction:.1%} of "
            f"{len(points)} points; lower population_fraction or widen t1"
        )

    refiner = IterativeRefiner(measure, config.max_iterations, config.epsilon)
    generations = refiner.refine(points, seeds)
    return ClusteringResult(
        canopies=canopies,
        generations=generations,
        converged=refiner.converged,
        num_points=len(points),
    )


def predict(
    point,
    clusters: Sequence[Cluster],
    measure: Union[str, DistanceMeasure] = "manhattan",
) -> int:
    """Index of the cluster nearest to ``point``."""
    if not clusters:
        raise InvalidArgumentError("At least one cluster is required to predict")
    index, _ = nearest_cluster(
        as_vector(point, clusters[0].dimension),
        [cluster.center for cluster in clusters],
        get_distance_measure(measure),
    )
    return index
