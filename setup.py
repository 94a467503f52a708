#!/usr/bin/env python
# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Setup configuration for canopykmeans-clusterer package.
"""

from setuptools import setup, find_packages
import os

# Read version from package
with open(os.path.join("canopykmeans", "__init__.py")) as f:
    for line in f:
        if line.startswith("__version__"):
            version = line.split("=")[1].strip().strip('"').strip("'")
            break

# Read long description from README
long_description = """
# Canopy K-Means Clusterer

Canopy-seeded k-means clustering for NumPy and PySpark.

## Features

- **Canopy Seeding**: Single-pass T1/T2 threshold canopies pick the number of
  clusters and their starting centers
- **Reference K-Means**: Lloyd refinement with full generation history
- **Multiple Distance Measures**: Manhattan, Euclidean, Squared Euclidean,
  Cosine and Tanimoto, or any callable
- **Spark ML Integration**: Estimator/Model pattern with Pipeline support and
  model persistence

## Installation

```bash
pip install canopykmeans-clusterer
```

## Quick Start

```python
from canopykmeans.clusterer import canopy_kmeans

points = [[0.0, 0.0], [0.0, 1.0], [10.0, 10.0], [10.0, 11.0]]
result = canopy_kmeans(points, "manhattan", t1=3.0, t2=1.5, max_iterations=10)

print(f"{len(result.canopies)} canopies, {len(result.clusters)} clusters")
print(result.cluster_centers())
```

With Spark:

```python
from pyspark.ml.linalg import Vectors
from canopykmeans.clusterer import CanopyKMeans

data = spark.createDataFrame([
    (Vectors.dense([0.0, 0.0]),),
    (Vectors.dense([0.0, 1.0]),),
    (Vectors.dense([10.0, 10.0]),),
    (Vectors.dense([10.0, 11.0]),)
], ["features"])

model = CanopyKMeans(t1=3.0, t2=1.5, maxIter=10).fit(data)
model.transform(data).select("features", "prediction").show()
```
"""

setup(
    name="canopykmeans-clusterer",
    version=version,
    description="Canopy-seeded k-means clustering for NumPy and PySpark",
    long_description=long_description,
    long_description_content_type="text/markdown",
    author="MassiveDataScience",
    author_email="support@massivedatascience.com",
    license="Apache License 2.0",
    packages=find_packages(include=["canopykmeans", "canopykmeans.*"]),
    python_requires=">=3.8",
    install_requires=[
        "pyspark>=3.4.0",
        "numpy>=1.20.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
        ],
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=3.0.0",
            "black>=22.0.0",
            "flake8>=4.0.0",
            "mypy>=0.950",
        ],
        "examples": [
            "matplotlib>=3.5.0",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: Science/Research",
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Scientific/Engineering",
        "Topic :: Software Development :: Libraries",
    ],
    keywords="pyspark clustering kmeans canopy machine-learning",
)
