"""Core data structures for autovario."""

from __future__ import annotations

from autovario.core.exceptions import (
    AutoVarioError,
    FitFailureError,
    InvalidInputError,
    ParseError,
    SingularSystemError,
)
from autovario.core.grid import CartesianGrid
from autovario.core.pointset import (
    BoundingBox,
    DedupPolicy,
    PointSet,
    Sample,
    unique_coords,
)

__all__ = [
    # Samples
    "Sample",
    "PointSet",
    "BoundingBox",
    "DedupPolicy",
    "unique_coords",
    # Grid
    "CartesianGrid",
    # Exceptions
    "AutoVarioError",
    "InvalidInputError",
    "FitFailureError",
    "SingularSystemError",
    "ParseError",
]
