"""Inverse distance weighting."""

from __future__ import annotations

import numpy as np
from numpy.typing import ArrayLike, NDArray

from autovario.core.exceptions import InvalidInputError
from autovario.core.pointset import PointSet
from autovario.geostats.estimation import EstimationResult, EstimationSolver
from autovario.geostats.variogram import distance_matrix


class InverseDistanceWeighting(EstimationSolver):
    """Inverse distance weighting estimator.

    ``z(x0) = sum(w_i * z_i) / sum(w_i)`` with ``w_i = 1 / d_i**power``.
    A location that coincides with a sample takes that sample's value.

    Parameters
    ----------
    power : float
        Distance exponent, must be positive.
    chunk_size : int
        Number of locations processed per block.
    """

    name = "idw"

    def __init__(self, power: float = 2.0, chunk_size: int = 2048) -> None:
        if not power > 0:
            raise InvalidInputError(f"IDW power must be positive: {power}")
        if chunk_size < 1:
            raise InvalidInputError(f"chunk_size must be positive: {chunk_size}")
        self.power = power
        self.chunk_size = chunk_size

    def _estimate(
        self, coords: NDArray, values: NDArray, targets: NDArray
    ) -> NDArray[np.float64]:
        d = distance_matrix(targets, coords)
        exact = d == 0.0
        with np.errstate(divide="ignore"):
            w = 1.0 / d**self.power
        w[exact] = 0.0
        with np.errstate(invalid="ignore", divide="ignore"):
            estimate = (w @ values) / w.sum(axis=1)

        hit = exact.any(axis=1)
        if hit.any():
            estimate[hit] = values[np.argmax(exact[hit], axis=1)]
        return estimate

    def solve(
        self, data: PointSet, variable: str, locations: ArrayLike
    ) -> EstimationResult:
        """Interpolate *variable* at *locations*."""
        data = data.dropna(variable)
        if len(data) == 0:
            raise InvalidInputError(f"IDW requires at least one sample with '{variable}'")

        targets = np.atleast_2d(np.asarray(locations, dtype=np.float64))
        values = data.values(variable)
        parts = [
            self._estimate(data.coords, values, targets[start : start + self.chunk_size])
            for start in range(0, len(targets), self.chunk_size)
        ]
        estimate = np.concatenate(parts) if parts else np.empty(0)

        return EstimationResult(
            variable=variable,
            method=self.name,
            locations=targets,
            estimate=estimate,
            variance=None,
        )

    def __repr__(self) -> str:
        return f"InverseDistanceWeighting(power={self.power})"
