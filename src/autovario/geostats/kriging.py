"""Ordinary kriging.

The ordinary kriging system for ``n`` samples is::

    | G   1 | | lambda |   | g0 |
    | 1'  0 | |   mu   | = | 1  |

where ``G[i, j] = gamma(|x_i - x_j|)`` and ``g0[i] = gamma(|x_i - x0|)``.
The left-hand side only depends on the samples, so it is factorised once
per data set (:class:`KrigingSystem`) and reused for every estimation
location.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor

import numpy as np
from numpy.typing import ArrayLike, NDArray
from scipy import linalg

from autovario.core.exceptions import InvalidInputError, SingularSystemError
from autovario.core.pointset import PointSet
from autovario.geostats.estimation import EstimationResult, EstimationSolver
from autovario.geostats.variogram import Variogram, distance_matrix

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONDITION = 1e12
DEFAULT_CHUNK_SIZE = 2048


class KrigingSystem:
    """Factorised ordinary kriging system for a fixed set of samples.

    The factorisation is built in ``__init__`` and never modified
    afterwards, so one instance can serve queries from several threads.

    Parameters
    ----------
    coords : array_like
        Sample locations, shape ``(n, d)``.
    values : array_like
        Sample values, shape ``(n,)``.
    variogram : Variogram
        Variogram model.
    max_condition : float
        Largest accepted condition number of the system matrix.

    Raises
    ------
    InvalidInputError
        If there are no samples or shapes disagree.
    SingularSystemError
        If the system matrix is singular or too ill-conditioned
        (typically caused by duplicate sample locations).
    """

    def __init__(
        self,
        coords: ArrayLike,
        values: ArrayLike,
        variogram: Variogram,
        max_condition: float = DEFAULT_MAX_CONDITION,
    ) -> None:
        self.coords = np.atleast_2d(np.asarray(coords, dtype=np.float64))
        self.values = np.asarray(values, dtype=np.float64).reshape(-1)
        self.variogram = variogram

        n = len(self.values)
        if n == 0:
            raise InvalidInputError("Kriging requires at least one sample")
        if self.coords.shape[0] != n:
            raise InvalidInputError(
                f"{self.coords.shape[0]} locations given for {n} values"
            )

        # Build kriging matrix [G / sill, 1; 1', 0]; the sill scaling keeps the
        # conditioning independent of the units of the variable
        self._scale = variogram.sill
        K = np.zeros((n + 1, n + 1))
        K[:n, :n] = np.asarray(variogram.evaluate(distance_matrix(self.coords))) / self._scale
        K[:n, n] = 1.0
        K[n, :n] = 1.0

        condition = float(np.linalg.cond(K))
        if not np.isfinite(condition) or condition > max_condition:
            raise SingularSystemError(
                f"Kriging system is singular or ill-conditioned "
                f"(condition number {condition:.3g}); check for duplicate locations",
                condition=condition,
            )
        self.condition = condition
        self._lu = linalg.lu_factor(K, check_finite=False)

    @property
    def n_samples(self) -> int:
        """Number of conditioning samples."""
        return len(self.values)

    def _solve(self, locations: ArrayLike) -> tuple[NDArray, NDArray, NDArray]:
        """Return (weights, multipliers, gamma to samples) for *locations*."""
        targets = np.atleast_2d(np.asarray(locations, dtype=np.float64))
        n = self.n_samples

        g0 = np.asarray(self.variogram.evaluate(distance_matrix(self.coords, targets)))
        rhs = np.vstack([g0 / self._scale, np.ones((1, targets.shape[0]))])
        sol = linalg.lu_solve(self._lu, rhs, check_finite=False)

        # Weights are scale free, the multiplier carries the units of gamma
        return sol[:n].T, sol[n] * self._scale, g0.T

    def weights(self, locations: ArrayLike) -> tuple[NDArray, NDArray]:
        """Kriging weights and Lagrange multipliers.

        Parameters
        ----------
        locations : array_like
            Estimation locations, shape ``(m, d)``.

        Returns
        -------
        tuple[NDArray, NDArray]
            Weights of shape ``(m, n)`` (each row sums to one) and
            multipliers of shape ``(m,)``.
        """
        lam, mu, _ = self._solve(locations)
        return lam, mu

    def predict(self, locations: ArrayLike) -> tuple[NDArray, NDArray]:
        """Estimates and estimation variances at *locations*."""
        lam, mu, g0 = self._solve(locations)
        estimate = lam @ self.values
        variance = np.sum(lam * g0, axis=1) + mu
        return estimate, np.maximum(variance, 0.0)

    def __repr__(self) -> str:
        return f"KrigingSystem(n_samples={self.n_samples}, variogram={self.variogram!r})"


class OrdinaryKriging(EstimationSolver):
    """Ordinary kriging solver.

    Parameters
    ----------
    variogram : Variogram
        Fitted variogram model of the variable.
    max_condition : float
        Largest accepted condition number of the kriging matrix.
    chunk_size : int
        Number of locations solved per right-hand side block.
    n_workers : int
        Threads used to solve chunks concurrently.
    max_samples : int | None
        Refuse data sets larger than this (the factorisation is cubic).

    Examples
    --------
    >>> krig = OrdinaryKriging(Variogram("spherical", range=2.0))
    >>> result = krig.solve(data, "Ca", grid.points())
    """

    name = "kriging"

    def __init__(
        self,
        variogram: Variogram,
        max_condition: float = DEFAULT_MAX_CONDITION,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        n_workers: int = 1,
        max_samples: int | None = None,
    ) -> None:
        if chunk_size < 1:
            raise InvalidInputError(f"chunk_size must be positive: {chunk_size}")
        if n_workers < 1:
            raise InvalidInputError(f"n_workers must be positive: {n_workers}")
        self.variogram = variogram
        self.max_condition = max_condition
        self.chunk_size = chunk_size
        self.n_workers = n_workers
        self.max_samples = max_samples

    def system(self, data: PointSet, variable: str) -> KrigingSystem:
        """Build the factorised kriging system for *variable*."""
        data = data.dropna(variable)
        if self.max_samples is not None and len(data) > self.max_samples:
            raise InvalidInputError(
                f"{len(data)} samples exceed the limit of {self.max_samples} for kriging"
            )
        return KrigingSystem(data.coords, data.values(variable), self.variogram, self.max_condition)

    def solve(
        self, data: PointSet, variable: str, locations: ArrayLike
    ) -> EstimationResult:
        """Krige *variable* at *locations*."""
        targets = np.atleast_2d(np.asarray(locations, dtype=np.float64))
        system = self.system(data, variable)
        logger.debug("Kriging system for '%s': condition number %.3g", variable, system.condition)

        chunks = [
            targets[start : start + self.chunk_size]
            for start in range(0, len(targets), self.chunk_size)
        ]
        if self.n_workers > 1 and len(chunks) > 1:
            with ThreadPoolExecutor(max_workers=self.n_workers) as executor:
                parts = list(executor.map(system.predict, chunks))
        else:
            parts = [system.predict(chunk) for chunk in chunks]

        if parts:
            estimate = np.concatenate([p[0] for p in parts])
            variance = np.concatenate([p[1] for p in parts])
        else:
            estimate = np.empty(0)
            variance = np.empty(0)

        return EstimationResult(
            variable=variable,
            method=self.name,
            locations=targets,
            estimate=estimate,
            variance=variance,
        )

    def __repr__(self) -> str:
        return f"OrdinaryKriging(variogram={self.variogram!r})"
