"""
autovario - automatic variography and spatial interpolation of point data.

This package provides tools for:
- Loading point-sampled tables and removing repeated coordinates
- Estimating empirical variograms and fitting variogram models
- Ordinary kriging and inverse distance weighting on regular grids
- Plotting variograms and estimation maps
"""

from __future__ import annotations

__version__ = "0.1.0"

from autovario.config import WorkflowSettings
from autovario.core.exceptions import (
    AutoVarioError,
    FitFailureError,
    InvalidInputError,
    ParseError,
    SingularSystemError,
)
from autovario.core.grid import CartesianGrid
from autovario.core.pointset import BoundingBox, PointSet, Sample, unique_coords
from autovario.geostats import (
    EmpiricalVariogram,
    EstimationProblem,
    EstimationResult,
    FitConfig,
    FitResult,
    InverseDistanceWeighting,
    OrdinaryKriging,
    Variogram,
    VariogramType,
    compute_empirical_variogram,
    fit_best_variogram,
    fit_variogram,
    solve,
)
from autovario.io import read_geotable
from autovario.pipeline import (
    VariographyResult,
    WorkflowResult,
    default_maxlag,
    fit_variograms,
    load_data,
    run_workflow,
)

__all__ = [
    "__version__",
    # Data
    "Sample",
    "PointSet",
    "BoundingBox",
    "CartesianGrid",
    "unique_coords",
    "read_geotable",
    # Variography
    "Variogram",
    "VariogramType",
    "EmpiricalVariogram",
    "compute_empirical_variogram",
    "FitConfig",
    "FitResult",
    "fit_variogram",
    "fit_best_variogram",
    # Estimation
    "EstimationProblem",
    "EstimationResult",
    "OrdinaryKriging",
    "InverseDistanceWeighting",
    "solve",
    # Workflow
    "WorkflowSettings",
    "VariographyResult",
    "WorkflowResult",
    "default_maxlag",
    "fit_variograms",
    "load_data",
    "run_workflow",
    # Exceptions
    "AutoVarioError",
    "InvalidInputError",
    "FitFailureError",
    "SingularSystemError",
    "ParseError",
]
