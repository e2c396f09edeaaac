"""Variography and spatial estimation."""

from __future__ import annotations

from autovario.geostats.empirical import EmpiricalVariogram, compute_empirical_variogram
from autovario.geostats.estimation import (
    EstimationProblem,
    EstimationResult,
    EstimationSolver,
    solve,
)
from autovario.geostats.fitting import (
    FitConfig,
    FitResult,
    fit_best_variogram,
    fit_variogram,
    weighted_error,
)
from autovario.geostats.idw import InverseDistanceWeighting
from autovario.geostats.kriging import KrigingSystem, OrdinaryKriging
from autovario.geostats.variogram import Variogram, VariogramType, distance_matrix

__all__ = [
    # Models
    "Variogram",
    "VariogramType",
    "distance_matrix",
    # Empirical variogram
    "EmpiricalVariogram",
    "compute_empirical_variogram",
    # Fitting
    "FitConfig",
    "FitResult",
    "fit_variogram",
    "fit_best_variogram",
    "weighted_error",
    # Estimation
    "EstimationProblem",
    "EstimationResult",
    "EstimationSolver",
    "solve",
    "OrdinaryKriging",
    "KrigingSystem",
    "InverseDistanceWeighting",
]
