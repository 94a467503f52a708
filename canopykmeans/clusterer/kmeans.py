# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
PySpark ML estimator for canopy-seeded k-means.

The canopy pass is a single sequential scan, so fitting collects the features
column to the driver and runs the in-memory pipeline there. Prediction and
cost evaluation run on the executors against the frozen model centers.
"""

from typing import List, Optional

import numpy as np

from pyspark import keyword_only
from pyspark.ml import Estimator, Model
from pyspark.ml.linalg import Vector
from pyspark.ml.param import Param, Params, TypeConverters
from pyspark.ml.param.shared import (
    HasFeaturesCol,
    HasPredictionCol,
    HasMaxIter,
    HasTol,
)
from pyspark.ml.util import (
    DefaultParamsReadable,
    DefaultParamsReader,
    DefaultParamsWritable,
    DefaultParamsWriter,
    MLReadable,
    MLReader,
    MLWritable,
    MLWriter,
)
from pyspark.sql import DataFrame
from pyspark.sql.functions import col, udf
from pyspark.sql.types import DoubleType, IntegerType

from .config import CanopyKMeansConfig
from .distance import get_distance_measure
from .errors import InvalidArgumentError
from .pipeline import ClusteringResult, canopy_kmeans
from .refiner import nearest_cluster
from .vectors import as_vector


class CanopyKMeansParams(
    HasFeaturesCol,
    HasPredictionCol,
    HasMaxIter,
    HasTol,
):
    """
    Params for CanopyKMeans and CanopyKMeansModel.

    Parameters
    ----------
    t1 : float
        Canopy membership threshold (> t2). Required.

    t2 : float
        Canopy removal threshold (>= 0). Required.

    distanceMeasure : str, default="manhattan"
        Distance measure for canopies, assignment and convergence.
        Options: "manhattan", "euclidean", "squaredEuclidean", "cosine", "tanimoto"

    populationFraction : float, default=0.05
        Only canopies holding more than this fraction of the points seed a cluster.

    distanceCol : str, optional
        Column name for output distance to the nearest cluster center.

    featuresCol : str, default="features"
        Features column name.

    predictionCol : str, default="prediction"
        Prediction column name.

    maxIter : int, default=20
        Maximum number of refinement iterations (>= 0).

    tol : float, default=0.001
        Convergence tolerance for center movement.
    """

    t1 = Param(
        Params._dummy(),
        "t1",
        "Canopy membership threshold (must be > t2).",
        typeConverter=TypeConverters.toFloat,
    )

    t2 = Param(
        Params._dummy(),
        "t2",
        "Canopy removal threshold (must be >= 0).",
        typeConverter=TypeConverters.toFloat,
    )

    distanceMeasure = Param(
        Params._dummy(),
        "distanceMeasure",
        "Distance measure: manhattan, euclidean, squaredEuclidean, cosine, tanimoto",
        typeConverter=TypeConverters.toString,
    )

    populationFraction = Param(
        Params._dummy(),
        "populationFraction",
        "Minimum fraction of points a canopy must exceed to seed a cluster",
        typeConverter=TypeConverters.toFloat,
    )

    distanceCol = Param(
        Params._dummy(),
        "distanceCol",
        "Column name for distance to cluster center",
        typeConverter=TypeConverters.toString,
    )

    def __init__(self, *args):
        super(CanopyKMeansParams, self).__init__(*args)
        self._setDefault(
            distanceMeasure="manhattan",
            populationFraction=0.05,
            featuresCol="features",
            predictionCol="prediction",
            maxIter=20,
            tol=0.001,
        )

    def _getOptional(self, param: Param):
        if self.isDefined(param):
            return self.getOrDefault(param)
        return None

    def getT1(self) -> Optional[float]:
        """Gets the value of t1, or None if unset."""
        return self._getOptional(self.t1)

    def getT2(self) -> Optional[float]:
        """Gets the value of t2, or None if unset."""
        return self._getOptional(self.t2)

    def getDistanceMeasure(self) -> str:
        """Gets the value of distanceMeasure or its default value."""
        return self.getOrDefault(self.distanceMeasure)

    def getPopulationFraction(self) -> float:
        """Gets the value of populationFraction or its default value."""
        return self.getOrDefault(self.populationFraction)

    def getDistanceCol(self) -> Optional[str]:
        """Gets the value of distanceCol, or None if unset."""
        return self._getOptional(self.distanceCol)

    def _config(self) -> CanopyKMeansConfig:
        t1, t2 = self.getT1(), self.getT2()
        if t1 is None or t2 is None:
            raise InvalidArgumentError("Both t1 and t2 must be set before fitting")
        return CanopyKMeansConfig(
            t1=t1,
            t2=t2,
            max_iterations=self.getMaxIter(),
            epsilon=self.getTol(),
            population_fraction=self.getPopulationFraction(),
        )


class CanopyKMeans(
    Estimator, CanopyKMeansParams, DefaultParamsReadable, DefaultParamsWritable
):
    """
    Canopy-seeded k-means clustering.

    Points are first grouped into overlapping canopies with a cheap
    single-pass threshold rule. Every canopy holding more than
    ``populationFraction`` of the points seeds a cluster, and the clusters are
    refined with Lloyd iterations until no center moves by ``tol`` or more, or
    ``maxIter`` iterations have run. The number of clusters follows from the
    thresholds; there is no ``k``.

    Parameters
    ----------
    t1 : float
        Canopy membership threshold.

    t2 : float
        Canopy removal threshold, ``0 <= t2 < t1``.

    distanceMeasure : str, default="manhattan"
        One of "manhattan", "euclidean", "squaredEuclidean", "cosine", "tanimoto".

    maxIter : int, default=20
        Maximum number of refinement iterations.

    tol : float, default=0.001
        Convergence tolerance (maximum center movement).

    Examples
    --------
    >>> from canopykmeans.clusterer import CanopyKMeans
    >>> from pyspark.ml.linalg import Vectors
    >>>
    >>> data = spark.createDataFrame([
    ...     (Vectors.dense([0.0, 0.0]),),
    ...     (Vectors.dense([0.0, 1.0]),),
    ...     (Vectors.dense([10.0, 10.0]),),
    ...     (Vectors.dense([10.0, 11.0]),)
    ... ], ["features"])
    >>>
    >>> kmeans = CanopyKMeans(t1=3.0, t2=1.5, maxIter=10)
    >>> model = kmeans.fit(data)
    >>> model.numClusters
    2
    >>> model.transform(data).select("features", "prediction").show()

    Notes
    -----
    - Fitting collects the features column to the driver.
    - Canopy membership overlaps; only canopies above ``populationFraction``
      become clusters.

    See Also
    --------
    CanopyKMeansModel : The fitted model
    """

    @keyword_only
    def __init__(
        self,
        *,
        t1: Optional[float] = None,
        t2: Optional[float] = None,
        distanceMeasure: str = "manhattan",
        populationFraction: float = 0.05,
        distanceCol: Optional[str] = None,
        featuresCol: str = "features",
        predictionCol: str = "prediction",
        maxIter: int = 20,
        tol: float = 0.001,
    ):
        """
        Initialize CanopyKMeans estimator.
        """
        super(CanopyKMeans, self).__init__()
        kwargs = self._input_kwargs
        self.setParams(**kwargs)

    @keyword_only
    def setParams(
        self,
        *,
        t1: Optional[float] = None,
        t2: Optional[float] = None,
        distanceMeasure: str = "manhattan",
        populationFraction: float = 0.05,
        distanceCol: Optional[str] = None,
        featuresCol: str = "features",
        predictionCol: str = "prediction",
        maxIter: int = 20,
        tol: float = 0.001,
    ):
        """
        Set parameters for CanopyKMeans.
        """
        # None means unset
        kwargs = {k: v for k, v in self._input_kwargs.items() if v is not None}
        return self._set(**kwargs)

    def setT1(self, value: float):
        """Sets the value of t1."""
        return self._set(t1=value)

    def setT2(self, value: float):
        """Sets the value of t2."""
        return self._set(t2=value)

    def setDistanceMeasure(self, value: str):
        """Sets the value of distanceMeasure."""
        return self._set(distanceMeasure=value)

    def setPopulationFraction(self, value: float):
        """Sets the value of populationFraction."""
        return self._set(populationFraction=value)

    def setDistanceCol(self, value: str):
        """Sets the value of distanceCol."""
        return self._set(distanceCol=value)

    def setMaxIter(self, value: int):
        """Sets the value of maxIter."""
        return self._set(maxIter=value)

    def setTol(self, value: float):
        """Sets the value of tol."""
        return self._set(tol=value)

    def setFeaturesCol(self, value: str):
        """Sets the value of featuresCol."""
        return self._set(featuresCol=value)

    def setPredictionCol(self, value: str):
        """Sets the value of predictionCol."""
        return self._set(predictionCol=value)

    def _fit(self, dataset: DataFrame) -> "CanopyKMeansModel":
        config = self._config()

        rows = dataset.select(self.getFeaturesCol()).collect()
        result = canopy_kmeans(
            [row[0].toArray() for row in rows],
            self.getDistanceMeasure(),
            config,
        )

        model = CanopyKMeansModel(clusterCenters=result.cluster_centers())
        model._summary = CanopyKMeansSummary(result)
        return self._copyValues(model)


class CanopyKMeansModel(Model, CanopyKMeansParams, MLReadable, MLWritable):
    """
    Model fitted by CanopyKMeans.

    Attributes
    ----------
    clusterCenters : np.ndarray
        Array of cluster centers (k x d matrix where k = number of clusters,
        d = feature dimension).

    numClusters : int
        Number of clusters.

    numFeatures : int
        Number of features (dimension).

    Examples
    --------
    >>> centers = model.clusterCenters()
    >>> predictions = model.transform(test_data)
    >>> cluster = model.predict(Vectors.dense([2.0, 3.0]))
    >>> cost = model.computeCost(data)
    >>>
    >>> model.write().overwrite().save("path/to/model")
    >>> loaded_model = CanopyKMeansModel.load("path/to/model")
    """

    def __init__(self, clusterCenters=None):
        super(CanopyKMeansModel, self).__init__()
        if clusterCenters is None:
            self._clusterCenters = np.empty((0, 0))
        else:
            self._clusterCenters = np.array(clusterCenters, dtype=np.float64)
        self._summary = None

    def clusterCenters(self) -> np.ndarray:
        """
        Get the cluster centers as a NumPy array.

        Returns
        -------
        np.ndarray
            Array of shape (k, d).
        """
        return self._clusterCenters.copy()

    @property
    def numClusters(self) -> int:
        """Number of clusters."""
        return int(self._clusterCenters.shape[0])

    @property
    def numFeatures(self) -> int:
        """Number of features (dimension)."""
        return int(self._clusterCenters.shape[1]) if self._clusterCenters.ndim == 2 else 0

    def _nearest(self):
        centers = list(self._clusterCenters)
        dimension = self.numFeatures
        measure = get_distance_measure(self.getDistanceMeasure())

        def nearest(features):
            return nearest_cluster(as_vector(features, dimension), centers, measure)

        return nearest

    def predict(self, value: Vector) -> int:
        """
        Predict the cluster for a single data point.

        Parameters
        ----------
        value : Vector
            Feature vector to predict.

        Returns
        -------
        int
            The predicted cluster ID (0 to k-1).
        """
        if self.numClusters == 0:
            raise InvalidArgumentError("Model has no cluster centers")
        return self._nearest()(value)[0]

    def computeCost(self, dataset: DataFrame) -> float:
        """
        Sum of distances from each point to its nearest center, measured with
        the model's distance measure.

        Parameters
        ----------
        dataset : DataFrame
            Dataset to evaluate (must have features column).

        Returns
        -------
        float
            The cost.
        """
        nearest = self._nearest()
        return float(
            dataset.select(self.getFeaturesCol())
            .rdd.map(lambda row: float(nearest(row[0])[1]))
            .sum()
        )

    def _transform(self, dataset: DataFrame) -> DataFrame:
        nearest = self._nearest()
        features = col(self.getFeaturesCol())

        predict_udf = udf(lambda v: int(nearest(v)[0]), IntegerType())
        result = dataset.withColumn(self.getPredictionCol(), predict_udf(features))

        distance_col = self.getDistanceCol()
        if distance_col:
            distance_udf = udf(lambda v: float(nearest(v)[1]), DoubleType())
            result = result.withColumn(distance_col, distance_udf(features))
        return result

    def hasSummary(self) -> bool:
        """
        Check if training summary is available.

        Returns
        -------
        bool
            True if the model was fitted in this session (loaded models have none).
        """
        return self._summary is not None

    @property
    def summary(self) -> "CanopyKMeansSummary":
        """
        Get the training summary.

        Examples
        --------
        >>> if model.hasSummary():
        ...     print(model.summary.convergenceReport())
        """
        if self._summary is None:
            raise RuntimeError(
                f"No training summary available for this {self.__class__.__name__}"
            )
        return self._summary

    def write(self) -> MLWriter:
        return CanopyKMeansModelWriter(self)

    @classmethod
    def read(cls) -> MLReader:
        return CanopyKMeansModelReader(cls)


class CanopyKMeansModelWriter(MLWriter):
    """Saves params metadata with the cluster centers added to it."""

    def __init__(self, instance: CanopyKMeansModel):
        super(CanopyKMeansModelWriter, self).__init__()
        self.instance = instance

    def saveImpl(self, path: str) -> None:
        DefaultParamsWriter.saveMetadata(
            self.instance,
            path,
            self.sc,
            extraMetadata={"clusterCenters": self.instance.clusterCenters().tolist()},
        )


class CanopyKMeansModelReader(MLReader):
    """Loads models saved by CanopyKMeansModelWriter."""

    def __init__(self, cls):
        super(CanopyKMeansModelReader, self).__init__()
        self.cls = cls

    def load(self, path: str) -> CanopyKMeansModel:
        metadata = DefaultParamsReader.loadMetadata(path, self.sc)
        instance = self.cls(clusterCenters=metadata["clusterCenters"])
        instance._resetUid(metadata["uid"])
        DefaultParamsReader.getAndSetParams(instance, metadata)
        return instance


class CanopyKMeansSummary:
    """
    Training summary of a CanopyKMeans fit.

    Attributes
    ----------
    numPoints : int
        Number of training points.

    numCanopies : int
        Canopies built in the first phase.

    numClusters : int
        Clusters seeded from canopies.

    iterations : int
        Refinement iterations performed.

    converged : bool
        Whether refinement converged within maxIter.

    clusterSizes : List[int]
        Points assigned to each cluster in the last iteration.

    Examples
    --------
    >>> summary = model.summary
    >>> print(f"{summary.numCanopies} canopies -> {summary.numClusters} clusters")
    >>> print(f"Converged in {summary.iterations} iterations: {summary.converged}")
    """

    def __init__(self, result: ClusteringResult):
        self._result = result

    @property
    def numPoints(self) -> int:
        return self._result.num_points

    @property
    def numCanopies(self) -> int:
        return len(self._result.canopies)

    @property
    def numClusters(self) -> int:
        return len(self._result.clusters)

    @property
    def iterations(self) -> int:
        return self._result.iterations

    @property
    def converged(self) -> bool:
        return self._result.converged

    @property
    def clusterSizes(self) -> List[int]:
        return [cluster.size for cluster in self._result.clusters]

    @property
    def canopyCenters(self) -> np.ndarray:
        """Canopy seed points as a NumPy array."""
        return np.array([canopy.center for canopy in self._result.canopies])

    def generationCenters(self) -> List[np.ndarray]:
        """Cluster centers of every generation, the seed first."""
        return [
            np.array([cluster.center for cluster in generation])
            for generation in self._result.generations
        ]

    def convergenceReport(self) -> str:
        """Get a detailed convergence report as a string."""
        lines = [
            f"points={self.numPoints} canopies={self.numCanopies} "
            f"clusters={self.numClusters}",
            f"iterations={self.iterations} converged={self.converged}",
        ]
        for generation, clusters in enumerate(self._result.generations[1:], start=1):
            sizes = ", ".join(f"{c.size}" for c in clusters)
            spread = ", ".join(f"{c.std:.4f}" for c in clusters)
            lines.append(f"  iteration {generation}: sizes [{sizes}] std [{spread}]")
        return "\n".join(lines)
