#!/usr/bin/env python3
"""
Smoke test for the canopy-kmeans PySpark estimator.

Goals:
- Prove import & end-to-end fit/transform on local[*]
- Exercise a second distance measure (euclidean)
- Validate prediction schema/range, determinism, and model persistence
- Keep it FAST and self-contained for CI
"""

import os
import tempfile
import math
from pyspark.sql import SparkSession
from pyspark.ml.linalg import Vectors, VectorUDT
from pyspark.sql import Row


def _mk_spark():
    return (
        SparkSession.builder
        .appName("CanopyKMeans-Smoke")
        .master("local[*]")
        # Keep CI runs predictable & quick
        .config("spark.ui.enabled", "false")
        .config("spark.sql.shuffle.partitions", "4")
        .config("spark.executor.memory", "1g")
        .config("spark.driver.memory", "1g")
        .getOrCreate()
    )


def _assert(cond, msg):
    if not cond:
        raise AssertionError(msg)


def _collect_preds(df):
    return [r.prediction for r in df.select("prediction").collect()]


def main():
    print("Starting smoke test…")
    spark = _mk_spark()

    try:
        # 1) Import the wrapper (Python-facing API)
        try:
            from canopykmeans.clusterer import CanopyKMeans, CanopyKMeansModel
        except Exception as ie:
            raise ImportError(
                "Failed to import canopykmeans.clusterer.CanopyKMeans. "
                "Ensure the package is installed (pip install -e .)."
            ) from ie
        print("✓ Imported CanopyKMeans")

        # 2) Toy dataset
        base = [
            Row(features=Vectors.dense(0.0, 0.0)),
            Row(features=Vectors.dense(0.5, 0.6)),
            Row(features=Vectors.dense(8.9, 9.0)),
            Row(features=Vectors.dense(9.5, 9.4)),
        ]
        df = spark.createDataFrame(base)
        _assert("features" in df.columns, "Missing features column")
        _assert(isinstance(df.schema["features"].dataType, VectorUDT), "features must be VectorUDT")
        print("✓ Created test DataFrame")

        # 3) Fit Manhattan model
        kmeans = (
            CanopyKMeans()
            .setT1(3.0)
            .setT2(1.5)
            .setDistanceMeasure("manhattan")
            .setMaxIter(10)
        )
        model = kmeans.fit(df)
        print(f"✓ Fitted model with {model.numClusters} clusters")

        pred = model.transform(df)
        _assert("prediction" in pred.columns, "transform missing prediction column")
        preds = _collect_preds(pred)
        _assert(len(preds) == df.count(), "prediction count mismatch")
        _assert(all(p in (0, 1) for p in preds), f"predictions out of range: {preds}")
        cost = model.computeCost(df)
        _assert(math.isfinite(cost) and cost >= 0, f"cost invalid: {cost}")
        print(f"✓ cost={cost:.6f}")
        print(model.summary.convergenceReport())

        # 4) Determinism (canopies depend only on input order)
        preds2 = _collect_preds(kmeans.fit(df).transform(df))
        _assert(preds == preds2, "Determinism check failed: different predictions on refit")
        print("✓ Determinism OK")

        # 5) Euclidean path
        model_euc = kmeans.copy().setDistanceMeasure("euclidean").fit(df)
        preds_euc = _collect_preds(model_euc.transform(df))
        _assert(all(p in (0, 1) for p in preds_euc), f"euclidean predictions out of range: {preds_euc}")
        print("✓ Euclidean path OK")

        # 6) Persistence round-trip
        tmp = tempfile.mkdtemp(prefix="canopy_smoke_")
        save_path = os.path.join(tmp, "model")
        model.write().overwrite().save(save_path)
        model_loaded = CanopyKMeansModel.load(save_path)
        preds_loaded = _collect_preds(model_loaded.transform(df))
        _assert(preds_loaded == preds, "Loaded model predictions differ from original")
        print("✓ Persistence round-trip OK")

        print("\n✅ Smoke tests passed")
        return 0

    except Exception as e:
        import traceback
        print(f"\n❌ Smoke test failed: {e}")
        traceback.print_exc()
        return 1
    finally:
        spark.stop()


if __name__ == "__main__":
    raise SystemExit(main())
