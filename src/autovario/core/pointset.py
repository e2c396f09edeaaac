"""
Point-sampled spatial data.

This module provides the sample containers consumed by the variography
and estimation stages:

- :class:`Sample`: a single coordinate with attached attribute values
- :class:`PointSet`: an ordered, read-only collection of samples
- :class:`BoundingBox`: axis-aligned extent of a point set
- :func:`unique_coords`: collapse samples that share coordinates

Example
-------
>>> import numpy as np
>>> from autovario.core.pointset import PointSet, unique_coords
>>> ps = PointSet(
...     coords=np.array([[0.0, 0.0], [0.0, 0.0], [1.0, 0.0]]),
...     attributes={"Ca": np.array([1.0, 3.0, 5.0])},
... )
>>> ps.has_unique_coords
False
>>> unique_coords(ps).values("Ca")
array([2., 5.])
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType

import numpy as np
from numpy.typing import ArrayLike, NDArray

from autovario.core.exceptions import InvalidInputError

logger = logging.getLogger(__name__)


class DedupPolicy(Enum):
    """How attribute values of samples sharing a coordinate are combined."""

    MEAN = "mean"
    FIRST = "first"


@dataclass(frozen=True)
class Sample:
    """
    A single spatial measurement.

    Parameters
    ----------
    coords : tuple of float
        Location of the sample.
    values : Mapping[str, float]
        Attribute name to value. Missing values are NaN.
    """

    coords: tuple[float, ...]
    values: Mapping[str, float] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "coords", tuple(float(c) for c in self.coords))
        object.__setattr__(
            self, "values", MappingProxyType({k: float(v) for k, v in self.values.items()})
        )

    @property
    def ndim(self) -> int:
        """Number of spatial dimensions."""
        return len(self.coords)

    def __getitem__(self, name: str) -> float:
        return self.values[name]

    def __hash__(self) -> int:
        return hash((self.coords, tuple(sorted(self.values.items()))))


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned bounding box.

    Parameters
    ----------
    minimum : tuple of float
        Lower corner.
    maximum : tuple of float
        Upper corner.
    """

    minimum: tuple[float, ...]
    maximum: tuple[float, ...]

    def __post_init__(self) -> None:
        lo = tuple(float(v) for v in self.minimum)
        hi = tuple(float(v) for v in self.maximum)
        if len(lo) != len(hi):
            raise InvalidInputError(
                f"Corner dimensions differ: {len(lo)} != {len(hi)}"
            )
        if any(a > b for a, b in zip(lo, hi)):
            raise InvalidInputError(f"Minimum corner {lo} exceeds maximum corner {hi}")
        object.__setattr__(self, "minimum", lo)
        object.__setattr__(self, "maximum", hi)

    @classmethod
    def from_points(cls, points: ArrayLike) -> BoundingBox:
        """Build the box enclosing an ``(n, d)`` array of points."""
        pts = np.atleast_2d(np.asarray(points, dtype=np.float64))
        if pts.shape[0] == 0:
            raise InvalidInputError("Cannot compute bounding box of zero points")
        return cls(tuple(pts.min(axis=0)), tuple(pts.max(axis=0)))

    @property
    def ndim(self) -> int:
        """Number of spatial dimensions."""
        return len(self.minimum)

    @property
    def center(self) -> tuple[float, ...]:
        """Center of the box."""
        return tuple((a + b) / 2.0 for a, b in zip(self.minimum, self.maximum))

    def sides(self) -> tuple[float, ...]:
        """Side lengths along each axis."""
        return tuple(b - a for a, b in zip(self.minimum, self.maximum))

    def contains(self, point: Sequence[float]) -> bool:
        """Return True if *point* lies inside the box (boundary included)."""
        return all(a <= p <= b for p, a, b in zip(point, self.minimum, self.maximum))


def _readonly(arr: NDArray) -> NDArray:
    arr.setflags(write=False)
    return arr


class PointSet:
    """
    Ordered collection of samples stored column-wise.

    Coordinates are kept as an ``(n, d)`` float array and each attribute
    as an ``(n,)`` float array. All arrays are copied on construction and
    flagged read-only.

    Parameters
    ----------
    coords : array_like
        Sample locations, shape ``(n, d)``.
    attributes : Mapping[str, array_like], optional
        Attribute name to values, each of length ``n``.

    Raises
    ------
    InvalidInputError
        If shapes are inconsistent or coordinates are not finite.
    """

    def __init__(
        self,
        coords: ArrayLike,
        attributes: Mapping[str, ArrayLike] | None = None,
    ) -> None:
        xyz = np.array(coords, dtype=np.float64)
        if xyz.ndim == 1:
            xyz = xyz.reshape(-1, 1) if xyz.size else xyz.reshape(0, 1)
        if xyz.ndim != 2:
            raise InvalidInputError(f"Coordinates must be 2-D (n, d), got shape {xyz.shape}")
        if not np.all(np.isfinite(xyz)):
            raise InvalidInputError("Coordinates must be finite")

        n = xyz.shape[0]
        attrs: dict[str, NDArray[np.float64]] = {}
        for name, vals in (attributes or {}).items():
            arr = np.array(vals, dtype=np.float64).reshape(-1)
            if arr.shape[0] != n:
                raise InvalidInputError(
                    f"Attribute '{name}' has {arr.shape[0]} values for {n} samples"
                )
            attrs[name] = _readonly(arr)

        self._coords = _readonly(xyz)
        self._attributes = attrs

    @classmethod
    def from_samples(cls, samples: Sequence[Sample]) -> PointSet:
        """Build a point set from :class:`Sample` objects."""
        if not samples:
            return cls(np.empty((0, 0)))
        ndim = samples[0].ndim
        if any(s.ndim != ndim for s in samples):
            raise InvalidInputError("All samples must have the same number of dimensions")
        names: list[str] = []
        for s in samples:
            for name in s.values:
                if name not in names:
                    names.append(name)
        attrs = {
            name: [s.values.get(name, np.nan) for s in samples] for name in names
        }
        return cls([s.coords for s in samples], attrs)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def coords(self) -> NDArray[np.float64]:
        """Read-only ``(n, d)`` coordinate array."""
        return self._coords

    @property
    def ndim(self) -> int:
        """Number of spatial dimensions."""
        return int(self._coords.shape[1])

    @property
    def variables(self) -> tuple[str, ...]:
        """Attribute names in insertion order."""
        return tuple(self._attributes)

    @property
    def has_unique_coords(self) -> bool:
        """True if no two samples share identical coordinates."""
        if len(self) < 2:
            return True
        return len(np.unique(self._coords, axis=0)) == len(self)

    def values(self, name: str) -> NDArray[np.float64]:
        """Read-only value array of attribute *name*."""
        try:
            return self._attributes[name]
        except KeyError:
            raise InvalidInputError(
                f"Unknown attribute '{name}'. Available: {list(self._attributes)}"
            ) from None

    def bounding_box(self) -> BoundingBox:
        """Bounding box of the sample coordinates."""
        return BoundingBox.from_points(self._coords)

    def subset(self, indices: ArrayLike) -> PointSet:
        """Return a new point set with the samples at *indices* (or a mask)."""
        idx = np.asarray(indices)
        return PointSet(
            self._coords[idx],
            {name: vals[idx] for name, vals in self._attributes.items()},
        )

    def dropna(self, name: str) -> PointSet:
        """Return the samples where attribute *name* is defined."""
        mask = ~np.isnan(self.values(name))
        if mask.all():
            return self
        return self.subset(mask)

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return int(self._coords.shape[0])

    def __getitem__(self, index: int) -> Sample:
        coords = tuple(self._coords[index])
        values = {name: vals[index] for name, vals in self._attributes.items()}
        return Sample(coords, values)

    def __iter__(self) -> Iterator[Sample]:
        for i in range(len(self)):
            yield self[i]

    def __repr__(self) -> str:
        return (
            f"PointSet(n_samples={len(self)}, ndim={self.ndim}, "
            f"variables={list(self.variables)})"
        )


def unique_coords(
    pointset: PointSet,
    policy: str | DedupPolicy = DedupPolicy.MEAN,
) -> PointSet:
    """
    Collapse samples that share identical coordinates.

    Samples keep the order of the first occurrence of each coordinate.

    Parameters
    ----------
    pointset : PointSet
        Input samples, possibly with repeated coordinates.
    policy : str or DedupPolicy, default "mean"
        ``"mean"`` averages the defined (non-NaN) values of colliding
        samples per attribute; ``"first"`` keeps the first occurrence.

    Returns
    -------
    PointSet
        Samples with unique coordinates.
    """
    policy = DedupPolicy(policy)
    n = len(pointset)
    if n < 2:
        return pointset

    _, first, inverse = np.unique(
        pointset.coords, axis=0, return_index=True, return_inverse=True
    )
    inverse = inverse.reshape(-1)
    if len(first) == n:
        return pointset

    # Relabel groups by first occurrence so output order follows input order
    order = np.argsort(first)
    rank = np.empty_like(order)
    rank[order] = np.arange(len(order))
    group = rank[inverse]
    first = first[order]

    attrs: dict[str, NDArray[np.float64]] = {}
    for name in pointset.variables:
        vals = pointset.values(name)
        if policy is DedupPolicy.FIRST:
            attrs[name] = vals[first]
            continue
        defined = ~np.isnan(vals)
        sums = np.zeros(len(first))
        counts = np.zeros(len(first))
        np.add.at(sums, group[defined], vals[defined])
        np.add.at(counts, group[defined], 1.0)
        with np.errstate(invalid="ignore", divide="ignore"):
            attrs[name] = np.where(counts > 0, sums / np.maximum(counts, 1.0), np.nan)

    logger.debug("Collapsed %d samples to %d unique locations", n, len(first))
    return PointSet(pointset.coords[first], attrs)
