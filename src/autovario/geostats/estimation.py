"""
Estimation problems, results and the solver interface.

An :class:`EstimationProblem` pairs sample data with a domain of
estimation locations and the variable to estimate. Solvers implementing
:class:`EstimationSolver` turn a problem into an :class:`EstimationResult`.

Example
-------
>>> from autovario.geostats.estimation import EstimationProblem, solve
>>> from autovario.geostats.kriging import OrdinaryKriging
>>> problem = EstimationProblem(data, grid, "Ca")
>>> result = solve(problem, OrdinaryKriging(variogram))
>>> estimate, variance = result.reshape(grid)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Sequence
from dataclasses import dataclass

import numpy as np
import pandas as pd
from numpy.typing import ArrayLike, NDArray

from autovario.core.exceptions import InvalidInputError
from autovario.core.grid import CartesianGrid
from autovario.core.pointset import PointSet

logger = logging.getLogger(__name__)


@dataclass
class EstimationResult:
    """Estimates of one variable at a set of locations.

    Attributes
    ----------
    variable : str
        Estimated attribute.
    method : str
        Name of the solver that produced the result.
    locations : NDArray[np.float64]
        Estimation locations, shape ``(m, d)``.
    estimate : NDArray[np.float64]
        Estimated values, shape ``(m,)``.
    variance : NDArray[np.float64] | None
        Estimation variance, or ``None`` for solvers without one.
    """

    variable: str
    method: str
    locations: NDArray[np.float64]
    estimate: NDArray[np.float64]
    variance: NDArray[np.float64] | None = None

    def __len__(self) -> int:
        return len(self.estimate)

    def reshape(
        self, grid: CartesianGrid
    ) -> tuple[NDArray[np.float64], NDArray[np.float64] | None]:
        """Estimate and variance reshaped to the grid dimensions."""
        variance = None if self.variance is None else grid.reshape(self.variance)
        return grid.reshape(self.estimate), variance

    def to_dataframe(self, coordnames: Sequence[str] | None = None) -> pd.DataFrame:
        """Tabulate locations, estimates and (if any) variances.

        Parameters
        ----------
        coordnames : Sequence[str] | None
            Column names for the coordinates. Defaults to ``x``, ``y``,
            ``z`` (or ``x0``, ``x1``, ... beyond three dimensions).
        """
        ndim = self.locations.shape[1]
        if coordnames is None:
            coordnames = ["x", "y", "z"][:ndim] if ndim <= 3 else [f"x{i}" for i in range(ndim)]
        if len(coordnames) != ndim:
            raise InvalidInputError(
                f"Expected {ndim} coordinate names, got {len(coordnames)}"
            )
        df = pd.DataFrame(self.locations, columns=list(coordnames))
        df[self.variable] = self.estimate
        if self.variance is not None:
            df[f"{self.variable}_variance"] = self.variance
        return df

    def __repr__(self) -> str:
        return (
            f"EstimationResult(variable={self.variable!r}, method={self.method!r}, "
            f"n_locations={len(self)}, has_variance={self.variance is not None})"
        )


class EstimationSolver(ABC):
    """Base class for spatial estimators."""

    name: str = "solver"

    @abstractmethod
    def solve(
        self, data: PointSet, variable: str, locations: ArrayLike
    ) -> EstimationResult:
        """Estimate *variable* at *locations* from *data*."""


@dataclass(frozen=True)
class EstimationProblem:
    """Data, estimation domain and target variable.

    Parameters
    ----------
    data : PointSet
        Conditioning samples.
    domain : CartesianGrid | array_like
        Grid or explicit ``(m, d)`` estimation locations.
    variable : str
        Attribute to estimate.
    """

    data: PointSet
    domain: CartesianGrid | NDArray[np.float64]
    variable: str

    def __post_init__(self) -> None:
        if self.variable not in self.data.variables:
            raise InvalidInputError(
                f"Unknown variable '{self.variable}'. Available: {list(self.data.variables)}"
            )
        if not isinstance(self.domain, CartesianGrid):
            object.__setattr__(
                self, "domain", np.atleast_2d(np.asarray(self.domain, dtype=np.float64))
            )
        if self.locations().shape[1] != self.data.ndim:
            raise InvalidInputError(
                f"Domain has {self.locations().shape[1]} dimensions, "
                f"data has {self.data.ndim}"
            )

    def locations(self) -> NDArray[np.float64]:
        """Estimation locations, shape ``(m, d)``."""
        if isinstance(self.domain, CartesianGrid):
            return self.domain.points()
        return self.domain


def solve(problem: EstimationProblem, solver: EstimationSolver) -> EstimationResult:
    """Solve an estimation problem with *solver*.

    Samples where the variable is missing are dropped before solving.
    """
    data = problem.data.dropna(problem.variable)
    locations = problem.locations()
    logger.info(
        "Solving '%s' with %s: %d samples, %d locations",
        problem.variable,
        solver.name,
        len(data),
        len(locations),
    )
    return solver.solve(data, problem.variable, locations)
