#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Saving a canopy-seeded model and reading it back.

The fitted centers are stored next to the params in the model metadata, so a
saved model is a single small JSON document. The training summary (canopies,
generations) is not persisted: a loaded model can predict but has no summary.
"""

import shutil
import tempfile

import numpy as np
from pyspark.ml.linalg import Vectors
from pyspark.sql import SparkSession

from canopykmeans.clusterer import CanopyKMeans, CanopyKMeansModel


def canopy_data(spark, seed=7):
    """Three tight groups plus a few stragglers that form their own canopies."""
    rng = np.random.default_rng(seed)
    groups = [
        rng.normal([0.0, 0.0], 0.2, size=(40, 2)),
        rng.normal([4.0, 1.0], 0.2, size=(40, 2)),
        rng.normal([2.0, 5.0], 0.2, size=(40, 2)),
        np.array([[8.0, 8.0], [-5.0, 6.0]]),
    ]
    points = np.concatenate(groups)
    rng.shuffle(points)
    return spark.createDataFrame(
        [(Vectors.dense(p.tolist()),) for p in points], ["features"]
    )


def main():
    spark = (
        SparkSession.builder.appName("CanopyModelPersistence")
        .config("spark.ui.enabled", "false")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel("WARN")

    data = canopy_data(spark).cache()

    # stragglers make canopies of one point, below the 5% seeding cut
    model = CanopyKMeans(
        t1=2.0,
        t2=1.0,
        distanceMeasure="euclidean",
        populationFraction=0.05,
        distanceCol="distance",
    ).fit(data)

    summary = model.summary
    print(
        f"Fitted: {summary.numCanopies} canopies -> {summary.numClusters} clusters "
        f"in {summary.iterations} iterations (converged={summary.converged})"
    )
    print(f"Cluster sizes: {summary.clusterSizes}")

    temp_dir = tempfile.mkdtemp()
    model_path = f"{temp_dir}/canopy_model"
    try:
        model.write().overwrite().save(model_path)

        metadata = spark.read.json(f"{model_path}/metadata").first()
        print(f"\nSaved {metadata['class']}")
        print(f"  distanceMeasure = {metadata['paramMap']['distanceMeasure']}")
        print(f"  t1 = {metadata['paramMap']['t1']}, t2 = {metadata['paramMap']['t2']}")
        print("  centers stored in metadata:")
        for center in metadata["clusterCenters"]:
            print(f"    {np.round(center, 3)}")

        loaded = CanopyKMeansModel.load(model_path)
        print(f"\nLoaded model has summary: {loaded.hasSummary()}")
        print(f"Centers equal: {np.allclose(loaded.clusterCenters(), model.clusterCenters())}")

        before = model.transform(data).select("prediction", "distance").collect()
        after = loaded.transform(data).select("prediction", "distance").collect()
        print(f"Predictions equal: {before == after}")

        for straggler in ([8.0, 8.0], [-5.0, 6.0]):
            index = loaded.predict(Vectors.dense(straggler))
            print(f"Straggler {straggler} -> cluster {index}")
    finally:
        shutil.rmtree(temp_dir)

    spark.stop()


if __name__ == "__main__":
    main()
