# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Tests for the iterative k-means refiner.
"""

import math
import unittest
import numpy as np

from canopykmeans.clusterer import (
    Cluster,
    InvalidArgumentError,
    IterativeRefiner,
    build_canopies,
    euclidean_distance,
    iterate_once,
    manhattan_distance,
    nearest_cluster,
    refine,
    seed_clusters,
)


def _seeds(*centers):
    return [Cluster(id=i, center=center) for i, center in enumerate(centers)]


class NearestClusterTest(unittest.TestCase):
    """Test cases for nearest-center lookup."""

    def test_nearest(self):
        centers = [np.array([0.0]), np.array([10.0])]
        self.assertEqual(nearest_cluster(np.array([7.0]), centers, manhattan_distance), (1, 3.0))

    def test_first_center_wins_ties(self):
        centers = [np.array([0.0]), np.array([2.0])]
        index, distance = nearest_cluster(np.array([1.0]), centers, manhattan_distance)
        self.assertEqual(index, 0)
        self.assertEqual(distance, 1.0)


class IterateOnceTest(unittest.TestCase):
    """Test cases for a single assignment and update pass."""

    def test_update_when_not_converged(self):
        points = [np.array([0.0]), np.array([1.0]), np.array([10.0])]
        clusters = _seeds([0.0], [10.0])

        self.assertFalse(iterate_once(points, clusters, manhattan_distance, 0.001))
        np.testing.assert_array_equal(clusters[0].center, [0.5])
        np.testing.assert_array_equal(clusters[0].previous_center, [0.0])
        np.testing.assert_array_equal(clusters[1].center, [10.0])
        self.assertEqual([c.size for c in clusters], [2, 1])
        self.assertEqual([c.num_points for c in clusters], [0, 0])

    def test_no_update_when_converged(self):
        points = [np.array([0.0]), np.array([1.0])]
        clusters = _seeds([0.4])

        self.assertTrue(iterate_once(points, clusters, manhattan_distance, 1.0))
        np.testing.assert_array_equal(clusters[0].center, [0.4])
        self.assertIsNone(clusters[0].previous_center)

    def test_assignment_uses_frozen_centers(self):
        """Points are assigned against the centers at the start of the pass."""
        points = [np.array([4.0]), np.array([6.0])]
        clusters = _seeds([0.0], [9.0])

        iterate_once(points, clusters, manhattan_distance, 0.001)
        self.assertEqual([c.size for c in clusters], [1, 1])
        np.testing.assert_array_equal(clusters[0].center, [4.0])
        np.testing.assert_array_equal(clusters[1].center, [6.0])

    def test_measure_by_name(self):
        points = [np.array([0.0]), np.array([1.0]), np.array([10.0])]
        clusters = _seeds([0.0], [10.0])

        self.assertFalse(iterate_once(points, clusters, "manhattan"))
        np.testing.assert_array_equal(clusters[0].center, [0.5])

    def test_requires_clusters(self):
        with self.assertRaises(InvalidArgumentError):
            iterate_once([np.array([1.0])], [], "manhattan")
        with self.assertRaises(InvalidArgumentError):
            iterate_once([np.array([1.0])], _seeds([0.0]), "no-such-measure")


class IterativeRefinerTest(unittest.TestCase):
    """Test cases for IterativeRefiner."""

    def setUp(self):
        self.points = [[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]]
        canopies = build_canopies(self.points, "manhattan", 3.0, 1.5)
        self.seeds = seed_clusters(canopies, len(self.points), 0.05)

    def test_four_point_example(self):
        refiner = IterativeRefiner("manhattan", max_iterations=10)
        history = refiner.refine(self.points, self.seeds)

        self.assertTrue(refiner.converged)
        self.assertEqual(refiner.iterations, 2)
        self.assertEqual(len(history), 3)
        self.assertIs(history[0][0], self.seeds[0])

        first = history[1]
        np.testing.assert_array_equal(first[0].center, [0.0, 0.5])
        np.testing.assert_array_equal(first[1].center, [10.0, 10.5])
        np.testing.assert_array_equal(first[0].previous_center, [0.0, 0.0])
        self.assertAlmostEqual(first[0].std, math.sqrt(0.5))

        final = history[-1]
        self.assertEqual([c.size for c in final], [2, 2])
        self.assertTrue(all(c.converged for c in final))
        np.testing.assert_array_equal(final[0].center, [0.0, 0.5])
        np.testing.assert_array_equal(final[1].center, [10.0, 10.5])
        self.assertAlmostEqual(final[0].std, 0.5)

    def test_assignments_stable_after_first_generation(self):
        history = refine(self.points, self.seeds, "manhattan", 10)
        self.assertEqual([c.size for c in history[1]], [c.size for c in history[-1]])

    def test_seeds_untouched(self):
        refine(self.points, self.seeds, "manhattan", 10)
        np.testing.assert_array_equal(self.seeds[0].center, [0.0, 0.0])
        self.assertEqual(self.seeds[0].num_points, 0)
        self.assertIsNone(self.seeds[0].previous_center)

    def test_large_epsilon_converges_in_one_generation(self):
        refiner = IterativeRefiner("manhattan", max_iterations=10, epsilon=100.0)
        history = refiner.refine(self.points, self.seeds)

        self.assertTrue(refiner.converged)
        self.assertEqual(len(history), 2)
        np.testing.assert_array_equal(history[1][0].center, [0.0, 0.0])

    def test_zero_iterations(self):
        refiner = IterativeRefiner("manhattan", max_iterations=0)
        history = refiner.refine(self.points, self.seeds)

        self.assertEqual(len(history), 1)
        self.assertFalse(refiner.converged)
        self.assertEqual(refiner.iterations, 0)

    def test_budget_exhausted(self):
        refiner = IterativeRefiner("manhattan", max_iterations=1)
        history = refiner.refine(self.points, self.seeds)

        self.assertEqual(len(history), 2)
        self.assertFalse(refiner.converged)

    def test_terminates_within_budget(self):
        rng = np.random.default_rng(11)
        points = rng.uniform(0.0, 20.0, size=(120, 2))
        seeds = _seeds(*points[:6])

        for max_iterations in [0, 1, 3, 25]:
            history = refine(points, seeds, "euclidean", max_iterations, epsilon=0.0)
            self.assertLessEqual(len(history), max_iterations + 1)

    def test_empty_cluster_keeps_center(self):
        points = [[0.0, 0.0], [1.0, 0.0]]
        refiner = IterativeRefiner(euclidean_distance, max_iterations=10)
        history = refiner.refine(points, _seeds([0.0, 0.0], [100.0, 100.0]))

        self.assertTrue(refiner.converged)
        for generation in history[1:]:
            np.testing.assert_array_equal(generation[1].center, [100.0, 100.0])
            self.assertEqual(generation[1].size, 0)
            self.assertEqual(generation[1].std, 0.0)
        np.testing.assert_array_equal(history[-1][0].center, [0.5, 0.0])

    def test_identical_points_collapse(self):
        points = [[2.0, 3.0]] * 5
        canopies = build_canopies(points, "euclidean", 1.0, 0.5)
        seeds = seed_clusters(canopies, len(points))
        refiner = IterativeRefiner("euclidean", max_iterations=10)
        history = refiner.refine(points, seeds)

        self.assertEqual(len(seeds), 1)
        self.assertTrue(refiner.converged)
        self.assertEqual(len(history), 2)
        final = history[-1][0]
        self.assertEqual(final.size, 5)
        self.assertEqual(final.std, 0.0)
        np.testing.assert_array_equal(final.center, [2.0, 3.0])

    def test_generations_are_lazy(self):
        refiner = IterativeRefiner("manhattan", max_iterations=10)
        generations = refiner.generations(self.points, self.seeds)

        self.assertIs(next(generations)[0], self.seeds[0])
        self.assertEqual(refiner.iterations, 0)
        next(generations)
        self.assertEqual(refiner.iterations, 1)
        self.assertEqual(len(list(generations)), 1)
        self.assertTrue(refiner.converged)

    def test_invalid_arguments(self):
        with self.assertRaises(InvalidArgumentError):
            IterativeRefiner("manhattan", max_iterations=-1)
        with self.assertRaises(InvalidArgumentError):
            IterativeRefiner("manhattan", max_iterations=5, epsilon=-1.0)

        refiner = IterativeRefiner("manhattan", max_iterations=5)
        with self.assertRaises(InvalidArgumentError):
            refiner.generations(self.points, [])
        with self.assertRaises(InvalidArgumentError):
            refiner.refine([[0.0, 0.0, 0.0]], self.seeds)
        with self.assertRaises(InvalidArgumentError):
            refiner.refine(self.points, _seeds([0.0, 0.0], [1.0]))


if __name__ == "__main__":
    unittest.main()
