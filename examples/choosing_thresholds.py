#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Choosing canopy thresholds: how T1 and T2 drive the number of clusters.
"""

from pyspark.sql import SparkSession
from pyspark.ml.linalg import Vectors
import matplotlib.pyplot as plt

from canopykmeans.clusterer import CanopyKMeans


def main():
    # Create Spark session
    spark = (
        SparkSession.builder.appName("ChoosingThresholds")
        .config("spark.ui.enabled", "false")
        .getOrCreate()
    )
    spark.sparkContext.setLogLevel("WARN")

    # Create data with 3 natural clusters
    data = spark.createDataFrame(
        [
            # Cluster 1: around (0, 0)
            (Vectors.dense([0.0, 0.0]),),
            (Vectors.dense([0.5, 0.5]),),
            (Vectors.dense([0.5, -0.5]),),
            (Vectors.dense([-0.5, 0.5]),),
            # Cluster 2: around (5, 5)
            (Vectors.dense([5.0, 5.0]),),
            (Vectors.dense([5.5, 5.0]),),
            (Vectors.dense([5.0, 5.5]),),
            (Vectors.dense([5.5, 5.5]),),
            # Cluster 3: around (10, 0)
            (Vectors.dense([10.0, 0.0]),),
            (Vectors.dense([10.5, 0.0]),),
            (Vectors.dense([10.0, 0.5]),),
            (Vectors.dense([10.5, 0.5]),),
        ],
        ["features"],
    ).cache()

    t2_values = [0.25, 0.5, 1.0, 1.5, 2.0, 4.0]
    print(f"Testing T2 in {t2_values} with T1 = 2 * T2...\n")

    results = []

    for t2 in t2_values:
        kmeans = CanopyKMeans(t1=2 * t2, t2=t2, maxIter=20)
        model = kmeans.fit(data)
        summary = model.summary

        results.append(
            {
                "t2": t2,
                "canopies": summary.numCanopies,
                "clusters": summary.numClusters,
                "cost": model.computeCost(data),
            }
        )

        print(f"T1={2 * t2}, T2={t2}:")
        print(f"  Canopies: {summary.numCanopies}")
        print(f"  Clusters: {summary.numClusters}")
        print(f"  Iterations: {summary.iterations} (converged={summary.converged})")
        print(f"  Cost: {results[-1]['cost']:.4f}")
        print()

    # Create visualizations
    t2s = [r["t2"] for r in results]

    fig, axes = plt.subplots(1, 2, figsize=(10, 4))

    axes[0].plot(t2s, [r["canopies"] for r in results], "bo-", label="canopies")
    axes[0].plot(t2s, [r["clusters"] for r in results], "go-", label="clusters")
    axes[0].set_xlabel("T2 (T1 = 2 * T2)")
    axes[0].set_ylabel("Count")
    axes[0].set_title("Canopies and Clusters")
    axes[0].legend()
    axes[0].grid(True)

    axes[1].plot(t2s, [r["cost"] for r in results], "ro-")
    axes[1].set_xlabel("T2 (T1 = 2 * T2)")
    axes[1].set_ylabel("Sum of distances")
    axes[1].set_title("Cost")
    axes[1].grid(True)

    plt.tight_layout()
    output_path = "/tmp/canopy_thresholds.png"
    plt.savefig(output_path, dpi=100, bbox_inches="tight")
    print(f"Visualization saved to: {output_path}")

    print("\n=== Recommendation ===")
    print("1. T2 below the within-group spread yields many small canopies")
    print("2. T2 above the between-group gaps merges groups into one canopy")
    print("3. Pick thresholds on the plateau where the cluster count is stable")

    spark.stop()


if __name__ == "__main__":
    main()
