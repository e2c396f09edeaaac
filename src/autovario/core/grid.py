"""
Regular Cartesian estimation grids.

A :class:`CartesianGrid` divides a box into ``dims`` equal cells per axis.
Estimation locations are the cell centroids, enumerated with the first
axis varying fastest, so a flat array of estimates can be reshaped to
``dims`` with Fortran ordering (:meth:`CartesianGrid.reshape`).
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
from numpy.typing import ArrayLike, NDArray

from autovario.core.exceptions import InvalidInputError
from autovario.core.pointset import BoundingBox


@dataclass(frozen=True)
class CartesianGrid:
    """
    Regular grid of cells spanning ``[minimum, maximum]``.

    Parameters
    ----------
    minimum : tuple of float
        Lower corner of the grid.
    maximum : tuple of float
        Upper corner of the grid.
    dims : tuple of int
        Number of cells along each axis.

    Examples
    --------
    >>> grid = CartesianGrid((0.0, 0.0), (1.0, 2.0), dims=(2, 2))
    >>> grid.points()
    array([[0.25, 0.5 ],
           [0.75, 0.5 ],
           [0.25, 1.5 ],
           [0.75, 1.5 ]])
    """

    minimum: tuple[float, ...]
    maximum: tuple[float, ...]
    dims: tuple[int, ...]

    def __post_init__(self) -> None:
        lo = tuple(float(v) for v in self.minimum)
        hi = tuple(float(v) for v in self.maximum)
        dims = tuple(int(d) for d in self.dims)
        if not (len(lo) == len(hi) == len(dims)):
            raise InvalidInputError(
                f"Grid corners and dims must have the same length: "
                f"{len(lo)}, {len(hi)}, {len(dims)}"
            )
        if any(d < 1 for d in dims):
            raise InvalidInputError(f"Grid dims must be positive: {dims}")
        if any(a > b for a, b in zip(lo, hi)):
            raise InvalidInputError(f"Minimum corner {lo} exceeds maximum corner {hi}")
        object.__setattr__(self, "minimum", lo)
        object.__setattr__(self, "maximum", hi)
        object.__setattr__(self, "dims", dims)

    @classmethod
    def from_bounding_box(
        cls, bbox: BoundingBox, dims: Sequence[int] | int
    ) -> CartesianGrid:
        """Grid spanning *bbox*; an integer *dims* is used on every axis."""
        if isinstance(dims, int):
            dims = (dims,) * bbox.ndim
        return cls(bbox.minimum, bbox.maximum, tuple(dims))

    @property
    def ndim(self) -> int:
        """Number of spatial dimensions."""
        return len(self.dims)

    @property
    def shape(self) -> tuple[int, ...]:
        """Alias for :attr:`dims`."""
        return self.dims

    @property
    def n_points(self) -> int:
        """Total number of estimation locations."""
        return int(np.prod(self.dims))

    @property
    def spacing(self) -> tuple[float, ...]:
        """Cell size along each axis."""
        return tuple((b - a) / d for a, b, d in zip(self.minimum, self.maximum, self.dims))

    def axis_centers(self, axis: int) -> NDArray[np.float64]:
        """Cell-centroid coordinates along one axis."""
        lo, step, n = self.minimum[axis], self.spacing[axis], self.dims[axis]
        return lo + step * (np.arange(n) + 0.5)

    def points(self) -> NDArray[np.float64]:
        """Cell centroids, shape ``(n_points, ndim)``, first axis fastest."""
        axes = [self.axis_centers(i) for i in range(self.ndim)]
        mesh = np.meshgrid(*axes, indexing="ij")
        return np.column_stack([m.ravel(order="F") for m in mesh])

    def reshape(self, values: ArrayLike) -> NDArray:
        """Reshape a flat per-point array to ``dims``."""
        arr = np.asarray(values)
        if arr.shape[0] != self.n_points:
            raise InvalidInputError(
                f"Expected {self.n_points} values for grid {self.dims}, got {arr.shape[0]}"
            )
        return arr.reshape(self.dims, order="F")

    def __len__(self) -> int:
        return self.n_points

    def __repr__(self) -> str:
        return f"CartesianGrid(minimum={self.minimum}, maximum={self.maximum}, dims={self.dims})"
