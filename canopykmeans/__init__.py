# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Canopy K-Means
==============

Canopy-seeded k-means clustering with pluggable distance measures.
"""

__version__ = "0.1.0"
__all__ = ["clusterer"]
