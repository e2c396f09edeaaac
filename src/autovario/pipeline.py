"""
Variography and estimation workflow.

Each stage takes and returns explicit values:

1. :func:`load_data` reads the table and removes repeated coordinates
2. :func:`fit_variograms` computes and fits one variogram per variable
3. :func:`run_workflow` builds the grid and solves the estimation
   problem with kriging and/or inverse distance weighting

Example
-------
>>> from autovario.config import WorkflowSettings
>>> from autovario.pipeline import run_workflow
>>> settings = WorkflowSettings(types={"Sand": "float", "Ca": "float"})
>>> result = run_workflow("data/data.csv", "Ca", settings)
>>> result.solutions["kriging"].estimate
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path

from autovario.config import WorkflowSettings
from autovario.core.exceptions import InvalidInputError
from autovario.core.grid import CartesianGrid
from autovario.core.pointset import BoundingBox, PointSet, unique_coords
from autovario.geostats.empirical import EmpiricalVariogram, compute_empirical_variogram
from autovario.geostats.estimation import (
    EstimationProblem,
    EstimationResult,
    EstimationSolver,
    solve,
)
from autovario.geostats.fitting import FitResult, fit_best_variogram
from autovario.geostats.idw import InverseDistanceWeighting
from autovario.geostats.kriging import OrdinaryKriging
from autovario.geostats.variogram import Variogram
from autovario.io.geotable import read_geotable

logger = logging.getLogger(__name__)

SOLVERS = ("kriging", "idw")


@dataclass(frozen=True)
class VariographyResult:
    """Empirical variogram and fitted model of one variable."""

    empirical: EmpiricalVariogram
    fit: FitResult

    @property
    def model(self) -> Variogram:
        """The fitted :class:`~autovario.geostats.variogram.Variogram`."""
        return self.fit.model


@dataclass
class WorkflowResult:
    """Everything produced by :func:`run_workflow`.

    Attributes
    ----------
    data : PointSet
        Samples after deduplication.
    bbox : BoundingBox
        Extent of the samples.
    maxlag : float
        Maximum lag used for the empirical variograms.
    variography : dict[str, VariographyResult]
        Variogram per fitted variable: ``settings.variables`` plus the
        estimated variable when kriging runs. Empty for IDW-only runs
        without ``settings.variables``.
    grid : CartesianGrid
        Estimation grid.
    variable : str
        Estimated variable.
    solutions : dict[str, EstimationResult]
        Estimation results keyed by solver name.
    """

    data: PointSet
    bbox: BoundingBox
    maxlag: float
    variography: dict[str, VariographyResult]
    grid: CartesianGrid
    variable: str
    solutions: dict[str, EstimationResult] = field(default_factory=dict)


def default_maxlag(pointset: PointSet) -> float:
    """Half of the smallest side of the bounding box."""
    if len(pointset) == 0:
        raise InvalidInputError("Cannot derive a maximum lag from an empty point set")
    return min(pointset.bounding_box().sides()) / 2.0


def load_data(filepath: Path | str, settings: WorkflowSettings | None = None) -> PointSet:
    """Read a table and remove repeated coordinates."""
    if settings is None:
        settings = WorkflowSettings()
    raw = read_geotable(filepath, settings.coordnames, settings.types)
    data = unique_coords(raw, settings.policy)
    if len(data) < len(raw):
        logger.info(
            "Removed %d repeated locations (%s policy)",
            len(raw) - len(data),
            settings.dedup_policy,
        )
    return data


def fit_variograms(
    pointset: PointSet,
    variables: Sequence[str] | None = None,
    settings: WorkflowSettings | None = None,
    maxlag: float | None = None,
) -> dict[str, VariographyResult]:
    """Compute and fit a variogram for each variable.

    Parameters
    ----------
    pointset : PointSet
        Deduplicated samples.
    variables : Sequence[str] | None
        Variables to fit; all attributes if ``None``.
    settings : WorkflowSettings | None
        Binning and fitting settings.
    maxlag : float | None
        Maximum lag; ``settings.maxlag`` or :func:`default_maxlag` if ``None``.

    Returns
    -------
    dict[str, VariographyResult]
        Results in the order of *variables*.

    Raises
    ------
    InvalidInputError
        For degenerate inputs.
    FitFailureError
        If a variable cannot be fitted. No partial results are returned.
    """
    if settings is None:
        settings = WorkflowSettings()
    if variables is None:
        variables = settings.variables or list(pointset.variables)
    if not variables:
        raise InvalidInputError("No variables to fit")
    if maxlag is None:
        maxlag = settings.maxlag if settings.maxlag is not None else default_maxlag(pointset)

    fit_config = settings.fit_config()

    def _one(variable: str) -> VariographyResult:
        empirical = compute_empirical_variogram(
            pointset,
            variable,
            maxlag=maxlag,
            nlags=settings.nlags,
            max_samples=settings.max_samples,
        )
        fit = fit_best_variogram(empirical, settings.variogram_types, fit_config)
        return VariographyResult(empirical=empirical, fit=fit)

    if settings.n_jobs > 1 and len(variables) > 1:
        with ThreadPoolExecutor(max_workers=settings.n_jobs) as executor:
            results = list(executor.map(_one, variables))
    else:
        results = [_one(v) for v in variables]

    return dict(zip(variables, results))


def make_solver(
    name: str,
    settings: WorkflowSettings,
    variography: VariographyResult | None = None,
) -> EstimationSolver:
    """Instantiate a solver by name (``"kriging"`` or ``"idw"``)."""
    if name == "kriging":
        if variography is None:
            raise InvalidInputError("Kriging requires a fitted variogram")
        return OrdinaryKriging(
            variography.model,
            max_condition=settings.max_condition,
            n_workers=settings.n_jobs,
            max_samples=settings.max_samples,
        )
    if name == "idw":
        return InverseDistanceWeighting(power=settings.idw_power)
    raise InvalidInputError(f"Unknown solver '{name}'. Expected one of {list(SOLVERS)}")


def run_workflow(
    source: Path | str | PointSet,
    variable: str,
    settings: WorkflowSettings | None = None,
    solvers: Sequence[str] = SOLVERS,
) -> WorkflowResult:
    """Run the full workflow for one variable.

    Parameters
    ----------
    source : Path | str | PointSet
        CSV file or already loaded samples (deduplicated here either way).
    variable : str
        Variable to estimate on the grid.
    settings : WorkflowSettings | None
        Workflow settings.
    solvers : Sequence[str]
        Solvers to run, any of ``"kriging"`` and ``"idw"``.

    Other attributes of the data are loaded but not fitted unless listed
    in ``settings.variables``.

    Returns
    -------
    WorkflowResult
        Data, variography, grid and solutions.
    """
    if settings is None:
        settings = WorkflowSettings()
    unknown = [s for s in solvers if s not in SOLVERS]
    if unknown:
        raise InvalidInputError(f"Unknown solvers {unknown}. Expected any of {list(SOLVERS)}")

    if isinstance(source, PointSet):
        data = unique_coords(source, settings.policy)
    else:
        data = load_data(source, settings)

    if variable not in data.variables:
        raise InvalidInputError(
            f"Unknown variable '{variable}'. Available: {list(data.variables)}"
        )

    bbox = data.bounding_box()
    maxlag = settings.maxlag if settings.maxlag is not None else default_maxlag(data)
    logger.info("Bounding box %s - %s, maximum lag %.4g", bbox.minimum, bbox.maximum, maxlag)

    # Only explicitly requested variables and the kriging target are fitted
    variables = list(settings.variables or [])
    if "kriging" in solvers and variable not in variables:
        variables.append(variable)
    variography = (
        fit_variograms(data, variables, settings, maxlag=maxlag) if variables else {}
    )

    grid = CartesianGrid.from_bounding_box(bbox, settings.dims)
    problem = EstimationProblem(data, grid, variable)

    solutions: dict[str, EstimationResult] = {}
    for name in solvers:
        solver = make_solver(name, settings, variography.get(variable))
        solutions[name] = solve(problem, solver)

    return WorkflowResult(
        data=data,
        bbox=bbox,
        maxlag=maxlag,
        variography=variography,
        grid=grid,
        variable=variable,
        solutions=solutions,
    )
