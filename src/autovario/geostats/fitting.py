"""
Variogram model fitting.

Models are fitted to the non-empty bins of an
:class:`~autovario.geostats.empirical.EmpiricalVariogram` by bounded
weighted least squares (``scipy.optimize.curve_fit`` with the trust region
reflective method), each bin weighted by its pair count. The fit uses the
analytic gradient provided by :meth:`Variogram.gradient`.

The optimisation variables are ``(nugget, partial sill, range)`` so that the
constraints ``nugget >= 0``, ``sill > nugget`` and ``range > 0`` become
simple bounds.

Example
-------
>>> from autovario.geostats.fitting import fit_best_variogram
>>> result = fit_best_variogram(empirical)
>>> print(result.model, result.error)
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.optimize import OptimizeWarning, curve_fit

from autovario.core.exceptions import FitFailureError, InvalidInputError
from autovario.geostats.empirical import EmpiricalVariogram
from autovario.geostats.variogram import Variogram, VariogramType

logger = logging.getLogger(__name__)


@dataclass
class FitConfig:
    """Configuration for variogram fitting.

    Attributes
    ----------
    max_nfev : int
        Maximum number of model evaluations before the fit is declared
        non-convergent.
    fit_nugget : bool
        Fit a nugget effect. If False the nugget is fixed at zero.
    min_bins : int
        Minimum number of non-empty bins required.
    min_partial_sill : float
        Lower bound of ``sill - nugget`` relative to the largest empirical
        semivariance.
    min_range : float
        Lower bound of the range relative to the maximum lag.
    """

    max_nfev: int = 2000
    fit_nugget: bool = True
    min_bins: int = 3
    min_partial_sill: float = 1e-10
    min_range: float = 1e-6

    def __post_init__(self) -> None:
        if self.max_nfev < 1:
            raise InvalidInputError(f"max_nfev must be positive: {self.max_nfev}")
        if self.min_bins < 3:
            raise InvalidInputError(f"min_bins must be at least 3: {self.min_bins}")


@dataclass(frozen=True)
class FitResult:
    """Result of fitting one variogram family.

    Attributes
    ----------
    model : Variogram
        Fitted model.
    error : float
        Weighted squared error ``sum(count * (model - empirical)**2)``.
    nfev : int
        Number of model evaluations used by the optimiser.
    """

    model: Variogram
    error: float
    nfev: int

    @property
    def variogram_type(self) -> VariogramType:
        """Family of the fitted model."""
        return self.model.variogram_type


def weighted_error(model: Variogram, empirical: EmpiricalVariogram) -> float:
    """Pair-count weighted squared error of *model* over non-empty bins."""
    lags, gamma, counts = empirical.nonempty()
    resid = np.asarray(model.evaluate(lags)) - gamma
    return float(np.sum(counts * resid**2))


def fit_variogram(
    empirical: EmpiricalVariogram,
    variogram_type: str | VariogramType = VariogramType.SPHERICAL,
    config: FitConfig | None = None,
) -> FitResult:
    """Fit one variogram family to an empirical variogram.

    Initial guesses are the first non-empty bin for the nugget, the
    largest empirical semivariance for the sill and half the maximum lag
    for the range.

    Parameters
    ----------
    empirical : EmpiricalVariogram
        Binned semivariances.
    variogram_type : str | VariogramType
        Family to fit.
    config : FitConfig | None
        Fitting configuration. Uses defaults if ``None``.

    Returns
    -------
    FitResult
        Fitted model and its weighted error.

    Raises
    ------
    FitFailureError
        If fewer than ``config.min_bins`` bins are non-empty, the empirical
        variogram is identically zero, or the optimiser does not converge.
    """
    if config is None:
        config = FitConfig()
    vtype = VariogramType(variogram_type)

    lags, gamma, counts = empirical.nonempty()
    if len(lags) < config.min_bins:
        raise FitFailureError(
            f"Variogram of '{empirical.variable}' has {len(lags)} non-empty bins, "
            f"at least {config.min_bins} are required",
            model=vtype.value,
        )

    gamma_max = float(np.max(gamma))
    if gamma_max <= 0:
        raise FitFailureError(
            f"Empirical variogram of '{empirical.variable}' is identically zero",
            model=vtype.value,
        )

    # Fit in units of the largest semivariance so the result does not
    # depend on the units of the variable
    scale = gamma_max
    gamma_n = gamma / scale
    maxlag = empirical.maxlag
    psill_lb = config.min_partial_sill
    range_lb = config.min_range * maxlag

    nugget0 = float(gamma_n[0]) if config.fit_nugget else 0.0
    psill0 = max(1.0 - nugget0, psill_lb)
    range0 = maxlag / 2.0

    def to_model(nugget: float, psill: float, a: float) -> Variogram:
        return Variogram(vtype, range=a, sill=nugget + psill, nugget=nugget)

    if config.fit_nugget:

        def model_func(h: NDArray, nugget: float, psill: float, a: float) -> NDArray:
            return np.asarray(to_model(nugget, psill, a).evaluate(h))

        def jac_func(h: NDArray, nugget: float, psill: float, a: float) -> NDArray:
            g = to_model(nugget, psill, a).gradient(h)
            # sill = nugget + psill
            return np.column_stack([g[:, 0] + g[:, 1], g[:, 1], g[:, 2]])

        p0 = [nugget0, psill0, range0]
        bounds = ([0.0, psill_lb, range_lb], [np.inf, np.inf, np.inf])
    else:

        def model_func(h: NDArray, psill: float, a: float) -> NDArray:  # type: ignore[misc]
            return np.asarray(to_model(0.0, psill, a).evaluate(h))

        def jac_func(h: NDArray, psill: float, a: float) -> NDArray:  # type: ignore[misc]
            g = to_model(0.0, psill, a).gradient(h)
            return np.column_stack([g[:, 1], g[:, 2]])

        p0 = [psill0, range0]
        bounds = ([psill_lb, range_lb], [np.inf, np.inf])

    try:
        with warnings.catch_warnings():
            # An exact fit leaves the covariance undefined; only popt is used
            warnings.simplefilter("ignore", OptimizeWarning)
            popt, _, infodict, _, _ = curve_fit(
                model_func,
                lags,
                gamma_n,
                p0=p0,
                sigma=1.0 / np.sqrt(counts),
                jac=jac_func,
                bounds=bounds,
                method="trf",
                max_nfev=config.max_nfev,
                full_output=True,
            )
    except (RuntimeError, ValueError) as exc:
        raise FitFailureError(
            f"Fitting {vtype.value} model to '{empirical.variable}' failed: {exc}",
            model=vtype.value,
        ) from exc

    if config.fit_nugget:
        nugget, psill, a = (float(v) for v in popt)
    else:
        nugget = 0.0
        psill, a = (float(v) for v in popt)

    model = to_model(nugget * scale, psill * scale, a)
    result = FitResult(
        model=model,
        error=weighted_error(model, empirical),
        nfev=int(infodict.get("nfev", 0)),
    )
    logger.debug(
        "Fitted %s to '%s': %r (error=%.4g, nfev=%d)",
        vtype.value,
        empirical.variable,
        model,
        result.error,
        result.nfev,
    )
    return result


def fit_best_variogram(
    empirical: EmpiricalVariogram,
    variogram_types: Iterable[str | VariogramType] | None = None,
    config: FitConfig | None = None,
) -> FitResult:
    """Fit several families and keep the one with the lowest weighted error.

    Parameters
    ----------
    empirical : EmpiricalVariogram
        Binned semivariances.
    variogram_types : Iterable[str | VariogramType] | None
        Candidate families. All :class:`VariogramType` members if ``None``.
    config : FitConfig | None
        Fitting configuration.

    Returns
    -------
    FitResult
        Best fit among the candidates.

    Raises
    ------
    FitFailureError
        If every candidate fails.
    """
    candidates = list(VariogramType) if variogram_types is None else [
        VariogramType(t) for t in variogram_types
    ]
    if not candidates:
        raise InvalidInputError("At least one variogram type is required")

    best: FitResult | None = None
    failures: list[str] = []
    for vtype in candidates:
        try:
            result = fit_variogram(empirical, vtype, config)
        except FitFailureError as exc:
            logger.warning("%s", exc)
            failures.append(str(exc))
            continue
        if best is None or result.error < best.error:
            best = result

    if best is None:
        raise FitFailureError(
            f"No variogram model could be fitted to '{empirical.variable}': "
            + "; ".join(failures)
        )

    logger.info("Best model for '%s': %r", empirical.variable, best.model)
    return best
