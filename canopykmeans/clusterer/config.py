# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""
Run configuration for canopy-seeded k-means.
"""

import dataclasses
from dataclasses import dataclass
from typing import Any, Mapping

from .errors import InvalidArgumentError


@dataclass(frozen=True)
class CanopyKMeansConfig:
    """
    Thresholds and budgets for one clustering run.

    Parameters
    ----------
    t1 : float
        Canopy membership threshold (> 0).
    t2 : float
        Canopy removal threshold (0 <= t2 < t1).
    max_iterations : int
        Refinement budget in generations (>= 0).
    epsilon : float, default=0.001
        Convergence tolerance on center displacement.
    population_fraction : float, default=0.05
        Canopies with no more than this fraction of the points seed no cluster.
    """

    t1: float
    t2: float
    max_iterations: int
    epsilon: float = 0.001
    population_fraction: float = 0.05

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        if not self.t1 > 0:
            raise InvalidArgumentError(f"t1 must be positive, got {self.t1}")
        if not 0 <= self.t2 < self.t1:
            raise InvalidArgumentError(
                f"t2 must satisfy 0 <= t2 < t1, got t1={self.t1}, t2={self.t2}"
            )
        if self.max_iterations < 0:
            raise InvalidArgumentError(
                f"max_iterations must be non-negative, got {self.max_iterations}"
            )
        if self.epsilon < 0:
            raise InvalidArgumentError(f"epsilon must be non-negative, got {self.epsilon}")
        if not 0 <= self.population_fraction < 1:
            raise InvalidArgumentError(
                f"population_fraction must be in [0, 1), got {self.population_fraction}"
            )

    @classmethod
    def from_dict(cls, values: Mapping[str, Any], strict: bool = True) -> "CanopyKMeansConfig":
        """
        Build a config from a mapping.

        Unknown keys raise InvalidArgumentError unless ``strict`` is False.
        """
        names = {f.name for f in dataclasses.fields(cls)}
        unknown = set(values) - names
        if unknown and strict:
            raise InvalidArgumentError(f"Unknown config keys: {sorted(unknown)}")
        missing = {"t1", "t2", "max_iterations"} - set(values)
        if missing:
            raise InvalidArgumentError(f"Missing config keys: {sorted(missing)}")
        return cls(**{k: v for k, v in values.items() if k in names})

    def replace(self, **changes) -> "CanopyKMeansConfig":
        """Return a validated copy with ``changes`` applied."""
        return dataclasses.replace(self, **changes)

    def to_dict(self) -> dict:
        return dataclasses.asdict(self)
