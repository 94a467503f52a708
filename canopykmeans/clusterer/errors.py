# Copyright (c) 2025 massivedatascience
# Licensed under the Apache License, Version 2.0

"""Exceptions raised by the clusterer."""


class InvalidArgumentError(ValueError):
    """Raised when a threshold, budget or input sequence violates a precondition."""
