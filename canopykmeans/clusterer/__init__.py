# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Canopy-seeded K-Means Clustering
================================

Two-phase clustering: a single threshold pass groups points into
overlapping canopies, and the large canopies seed reference k-means
refinement.

Classes:
    CanopyKMeans: PySpark Estimator wrapping the whole pipeline
    CanopyKMeansModel: Fitted Spark model
    CanopyBuilder: Single-pass canopy generator
    IterativeRefiner: Reference k-means over seed clusters

Example:
    >>> from canopykmeans.clusterer import canopy_kmeans
    >>>
    >>> points = [[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]]
    >>> result = canopy_kmeans(points, "manhattan", t1=3.0, t2=1.5, max_iterations=10)
    >>> len(result.canopies), len(result.clusters)
    (2, 2)
    >>> result.cluster_centers()
    array([[ 0. ,  0.5],
           [10. , 10.5]])
"""

from .canopy import Canopy, CanopyBuilder, build_canopies
from .cluster import Cluster, seed_clusters
from .config import CanopyKMeansConfig
from .distance import (
    DISTANCE_MEASURES,
    cosine_distance,
    euclidean_distance,
    get_distance_measure,
    manhattan_distance,
    squared_euclidean_distance,
    tanimoto_distance,
)
from .errors import InvalidArgumentError
from .io import JsonVectorWriter, read_vectors, write_clusters
from .pipeline import ClusteringResult, canopy_kmeans, predict
from .refiner import IterativeRefiner, iterate_once, nearest_cluster, refine
from .kmeans import CanopyKMeans, CanopyKMeansModel, CanopyKMeansSummary

__all__ = [
    "Canopy",
    "CanopyBuilder",
    "build_canopies",
    "Cluster",
    "seed_clusters",
    "CanopyKMeansConfig",
    "DISTANCE_MEASURES",
    "cosine_distance",
    "euclidean_distance",
    "get_distance_measure",
    "manhattan_distance",
    "squared_euclidean_distance",
    "tanimoto_distance",
    "InvalidArgumentError",
    "JsonVectorWriter",
    "read_vectors",
    "write_clusters",
    "ClusteringResult",
    "canopy_kmeans",
    "predict",
    "IterativeRefiner",
    "iterate_once",
    "nearest_cluster",
    "refine",
    "CanopyKMeans",
    "CanopyKMeansModel",
    "CanopyKMeansSummary",
]
