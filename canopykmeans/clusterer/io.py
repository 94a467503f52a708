# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
JSON-lines persistence for vectors and clustering results.

One JSON value per line: vectors are arrays of numbers, clusters are objects
carrying their generation number.
"""

import json
from typing import IO, Iterable, List, Sequence

import numpy as np

from .cluster import Cluster
from .vectors import as_vector


class JsonVectorWriter:
    """
    Write vectors to a text stream, one JSON array per line.

    Examples
    --------
    >>> with open("points.jsonl", "w") as fp, JsonVectorWriter(fp) as writer:
    ...     writer.write([[0.3, 1.5, 4.5], [1.3, 1.5, 3.5]])
    2
    """

    def __init__(self, fp: IO[str]):
        self._fp = fp
        self._closed = False

    def write(self, vectors: Iterable) -> int:
        """Write ``vectors`` and return how many were written."""
        if self._closed:
            raise ValueError("write to closed JsonVectorWriter")
        count = 0
        for values in vectors:
            self._fp.write(json.dumps(as_vector(values).tolist()))
            self._fp.write("\n")
            count += 1
        return count

    def close(self) -> None:
        """Flush the stream. The stream itself belongs to the caller."""
        if not self._closed:
            self._fp.flush()
            self._closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


def read_vectors(fp: IO[str]) -> List[np.ndarray]:
    """Read vectors written by ``JsonVectorWriter``; blank lines are skipped."""
    return [as_vector(json.loads(line)) for line in fp if line.strip()]


def write_clusters(generations: Sequence[Sequence[Cluster]], fp: IO[str]) -> int:
    """
    Write every cluster of every generation as one JSON object per line.

    Returns the number of lines written.
    """
    count = 0
    for generation, clusters in enumerate(generations):
        for cluster in clusters:
            record = cluster.to_dict()
            record["generation"] = generation
            fp.write(json.dumps(record))
            fp.write("\n")
            count += 1
    return count
