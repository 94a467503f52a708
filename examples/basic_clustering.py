#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Basic canopy-seeded k-means on in-memory points with Manhattan distance.
"""

import logging

import numpy as np

from canopykmeans.clusterer import build_canopies, refine, seed_clusters, write_clusters


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

    # Sample data - three groups of different spread
    rng = np.random.default_rng(42)
    points = np.concatenate(
        [
            rng.normal([1.0, 1.0], 0.5, size=(100, 2)),
            rng.normal([1.0, 0.0], 0.3, size=(60, 2)),
            rng.normal([0.0, 2.0], 0.1, size=(60, 2)),
        ]
    )
    rng.shuffle(points)

    t1, t2 = 3.0, 1.5

    # Phase 1: canopies
    canopies = build_canopies(points, "manhattan", t1, t2)
    print(f"\nCanopies (T1={t1}, T2={t2}): {len(canopies)}")
    for canopy in canopies:
        print(f"  Canopy {canopy.id}: {canopy.num_points} points around {canopy.center}")

    # Phase 2: keep canopies above 5% of the population as seeds
    seeds = seed_clusters(canopies, len(points), population_fraction=0.05)
    print(f"\nSeed clusters (> 5% of population): {len(seeds)}")

    # Phase 3: refine
    history = refine(points, seeds, "manhattan", max_iterations=10)
    print(f"\nGenerations: {len(history)}")
    for generation, clusters in enumerate(history):
        centers = ", ".join(np.array2string(c.center, precision=3) for c in clusters)
        print(f"  Generation {generation}: {centers}")

    print("\nFinal clusters:")
    for cluster in history[-1]:
        print(
            f"  Cluster {cluster.id}: center={np.round(cluster.center, 3)} "
            f"size={cluster.size} std={cluster.std:.3f}"
        )

    # one JSON object per cluster per generation
    output_path = "/tmp/canopy_generations.jsonl"
    with open(output_path, "w") as fp:
        count = write_clusters(history, fp)
    print(f"\nWrote {count} cluster records to {output_path}")


if __name__ == "__main__":
    main()
