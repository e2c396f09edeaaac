"""Theoretical variogram models.

This module provides the isotropic single-structure variogram models used
for fitting and kriging:

- Spherical, exponential and gaussian shapes (practical-range forms)
- Evaluation of gamma(h) and of its gradient with respect to the model
  parameters, used by the least squares fitter
- Distance matrices between point sets
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy.spatial.distance import cdist

from autovario.core.exceptions import InvalidInputError


class VariogramType(Enum):
    """Types of variogram models.

    Each member knows its normalised shape ``f(u)`` with ``u = h / range``
    (``f(0) = 0``, ``f -> 1`` as ``u`` grows) and the derivative ``f'(u)``.
    """

    SPHERICAL = "spherical"
    EXPONENTIAL = "exponential"
    GAUSSIAN = "gaussian"

    def shape(self, u: NDArray) -> NDArray:
        """Normalised structure ``f(u)``."""
        if self is VariogramType.SPHERICAL:
            return np.where(u < 1.0, 1.5 * u - 0.5 * u**3, 1.0)
        if self is VariogramType.EXPONENTIAL:
            return 1.0 - np.exp(-3.0 * u)
        return 1.0 - np.exp(-3.0 * u**2)

    def shape_derivative(self, u: NDArray) -> NDArray:
        """Derivative ``f'(u)``."""
        if self is VariogramType.SPHERICAL:
            return np.where(u < 1.0, 1.5 - 1.5 * u**2, 0.0)
        if self is VariogramType.EXPONENTIAL:
            return 3.0 * np.exp(-3.0 * u)
        return 6.0 * u * np.exp(-3.0 * u**2)


@dataclass(frozen=True)
class Variogram:
    """Isotropic variogram model.

    For ``h > 0``::

        gamma(h) = nugget + (sill - nugget) * f(h / range)

    and ``gamma(0) = 0``. ``sill`` is the total sill (the plateau) and
    ``range`` is the practical range, the distance at which the plateau is
    reached (95 % of it for the exponential and gaussian shapes).

    Parameters
    ----------
    variogram_type : str | VariogramType
        Shape family.
    range : float
        Practical range, must be positive.
    sill : float
        Total sill, must exceed the nugget.
    nugget : float
        Discontinuity at the origin, must be non-negative.

    Examples
    --------
    >>> vario = Variogram("spherical", range=10.0, sill=1.0, nugget=0.1)
    >>> vario.evaluate(np.array([0.0, 10.0, 20.0]))
    array([0., 1., 1.])
    """

    variogram_type: VariogramType
    range: float
    sill: float = 1.0
    nugget: float = 0.0

    def __post_init__(self) -> None:
        """Validate and convert variogram type."""
        try:
            vtype = VariogramType(self.variogram_type)
        except ValueError:
            raise InvalidInputError(
                f"Unknown variogram type: {self.variogram_type!r}. "
                f"Expected one of {[t.value for t in VariogramType]}"
            ) from None
        object.__setattr__(self, "variogram_type", vtype)

        if not self.range > 0:
            raise InvalidInputError(f"Range must be positive: {self.range}")
        if not self.nugget >= 0:
            raise InvalidInputError(f"Nugget must be non-negative: {self.nugget}")
        if not self.sill > self.nugget:
            raise InvalidInputError(
                f"Sill must exceed nugget: sill={self.sill}, nugget={self.nugget}"
            )

    @property
    def partial_sill(self) -> float:
        """Structured part of the sill (sill - nugget)."""
        return self.sill - self.nugget

    def evaluate(self, h: ArrayLike) -> NDArray | float:
        """Evaluate variogram at lag distances h.

        Parameters
        ----------
        h : array_like
            Lag distance(s).

        Returns
        -------
        NDArray | float
            Variogram value(s) gamma(h).
        """
        h = np.asarray(h, dtype=np.float64)
        scalar_input = h.ndim == 0
        h = np.atleast_1d(h)

        f = self.variogram_type.shape(h / self.range)
        gamma = np.where(h == 0, 0.0, self.nugget + self.partial_sill * f)

        if scalar_input:
            return float(gamma[0])
        return gamma

    def __call__(self, h: ArrayLike) -> NDArray | float:
        return self.evaluate(h)

    def gradient(self, h: ArrayLike) -> NDArray:
        """Partial derivatives of gamma(h) w.r.t. ``(nugget, sill, range)``.

        Parameters
        ----------
        h : array_like
            Lag distances, shape ``(m,)``.

        Returns
        -------
        NDArray
            Jacobian of shape ``(m, 3)``. Rows for ``h == 0`` are zero.
        """
        h = np.atleast_1d(np.asarray(h, dtype=np.float64))
        u = h / self.range
        f = self.variogram_type.shape(u)
        df = self.variogram_type.shape_derivative(u)

        jac = np.column_stack(
            [
                1.0 - f,
                f,
                -self.partial_sill * df * h / self.range**2,
            ]
        )
        jac[h == 0] = 0.0
        return jac

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary."""
        return {
            "variogram_type": self.variogram_type.value,
            "range": self.range,
            "sill": self.sill,
            "nugget": self.nugget,
        }

    @classmethod
    def from_dict(cls, d: dict[str, Any]) -> Variogram:
        """Create from dictionary."""
        return cls(
            variogram_type=d["variogram_type"],
            range=d["range"],
            sill=d.get("sill", 1.0),
            nugget=d.get("nugget", 0.0),
        )

    def __repr__(self) -> str:
        """Return string representation."""
        return (
            f"Variogram(type={self.variogram_type.value}, range={self.range:.4g}, "
            f"sill={self.sill:.4g}, nugget={self.nugget:.4g})"
        )


def distance_matrix(a: ArrayLike, b: ArrayLike | None = None) -> NDArray[np.float64]:
    """Euclidean distances between the rows of *a* and *b* (or *a* itself)."""
    pa = np.atleast_2d(np.asarray(a, dtype=np.float64))
    pb = pa if b is None else np.atleast_2d(np.asarray(b, dtype=np.float64))
    if pa.shape[1] != pb.shape[1]:
        raise InvalidInputError(
            f"Point dimensions differ: {pa.shape[1]} != {pb.shape[1]}"
        )
    return np.asarray(cdist(pa, pb))
