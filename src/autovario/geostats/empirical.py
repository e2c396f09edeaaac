"""Empirical (experimental) variograms.

Example
-------
>>> from autovario.geostats.empirical import compute_empirical_variogram
>>> ev = compute_empirical_variogram(pointset, "Ca", maxlag=500.0, nlags=20)
>>> ev.bin_centers, ev.gamma, ev.counts
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray
from scipy.spatial.distance import pdist

from autovario.core.exceptions import InvalidInputError
from autovario.core.pointset import PointSet

logger = logging.getLogger(__name__)

DEFAULT_NLAGS = 20
DEFAULT_MAX_SAMPLES = 5000


@dataclass(frozen=True)
class EmpiricalVariogram:
    """Binned semivariances of one attribute.

    Attributes
    ----------
    variable : str
        Attribute the variogram was computed for.
    bin_edges : NDArray[np.float64]
        ``nlags + 1`` equally spaced edges from 0 to ``maxlag``.
    bin_centers : NDArray[np.float64]
        Midpoints of the bins.
    gamma : NDArray[np.float64]
        Mean of ``0.5 * (z_i - z_j)**2`` per bin, NaN where the bin is empty.
    counts : NDArray[np.int64]
        Number of pairs per bin.
    """

    variable: str
    bin_edges: NDArray[np.float64]
    bin_centers: NDArray[np.float64]
    gamma: NDArray[np.float64]
    counts: NDArray[np.int64]

    @property
    def maxlag(self) -> float:
        """Largest lag distance covered."""
        return float(self.bin_edges[-1])

    @property
    def nlags(self) -> int:
        """Number of bins."""
        return len(self.bin_centers)

    @property
    def n_pairs(self) -> int:
        """Total number of pairs within ``maxlag``."""
        return int(self.counts.sum())

    @property
    def valid(self) -> NDArray[np.bool_]:
        """Mask of non-empty bins."""
        return self.counts > 0

    def nonempty(self) -> tuple[NDArray, NDArray, NDArray]:
        """Centers, semivariances and counts of the non-empty bins."""
        mask = self.valid
        return self.bin_centers[mask], self.gamma[mask], self.counts[mask]

    def __repr__(self) -> str:
        return (
            f"EmpiricalVariogram(variable={self.variable!r}, nlags={self.nlags}, "
            f"maxlag={self.maxlag:.4g}, n_pairs={self.n_pairs})"
        )


def compute_empirical_variogram(
    pointset: PointSet,
    variable: str,
    maxlag: float,
    nlags: int = DEFAULT_NLAGS,
    max_samples: int | None = DEFAULT_MAX_SAMPLES,
) -> EmpiricalVariogram:
    """Compute the empirical variogram of one attribute.

    Every unordered pair of samples separated by at most *maxlag*
    contributes ``0.5 * (z_i - z_j)**2`` to the equal-width bin containing
    its distance. A pair at exactly *maxlag* falls in the last bin. Samples
    where the attribute is missing are ignored.

    Parameters
    ----------
    pointset : PointSet
        Samples (coordinates should be unique).
    variable : str
        Attribute name.
    maxlag : float
        Maximum lag distance.
    nlags : int
        Number of lag bins.
    max_samples : int | None
        Refuse inputs larger than this (pair enumeration is quadratic).
        ``None`` disables the check.

    Returns
    -------
    EmpiricalVariogram
        Lag centers, semivariance values, and pair counts.

    Raises
    ------
    InvalidInputError
        For fewer than 2 samples, a non-positive or non-finite *maxlag*,
        ``nlags < 1``, an unknown attribute or too many samples.
    """
    if not np.isfinite(maxlag) or maxlag <= 0:
        raise InvalidInputError(f"Maximum lag must be positive: {maxlag}")
    if nlags < 1:
        raise InvalidInputError(f"Number of lags must be at least 1: {nlags}")

    data = pointset.dropna(variable)
    n_points = len(data)
    if n_points < 2:
        raise InvalidInputError(
            f"At least 2 samples with '{variable}' are required, got {n_points}"
        )
    if max_samples is not None and n_points > max_samples:
        raise InvalidInputError(
            f"{n_points} samples exceed the limit of {max_samples} for variography"
        )

    values = data.values(variable)
    # pdist order matches np.triu_indices(n, k=1)
    distances = pdist(data.coords)
    i, j = np.triu_indices(n_points, k=1)
    semivar = 0.5 * (values[i] - values[j]) ** 2

    within = distances <= maxlag
    distances = distances[within]
    semivar = semivar[within]

    lag_edges = np.linspace(0.0, maxlag, nlags + 1)
    lag_centers = (lag_edges[:-1] + lag_edges[1:]) / 2
    bin_idx = np.minimum((distances / maxlag * nlags).astype(np.int64), nlags - 1)

    counts = np.bincount(bin_idx, minlength=nlags).astype(np.int64)
    sums = np.bincount(bin_idx, weights=semivar, minlength=nlags)

    gamma = np.full(nlags, np.nan)
    valid = counts > 0
    gamma[valid] = sums[valid] / counts[valid]

    logger.debug(
        "Empirical variogram of '%s': %d samples, %d pairs within %.4g, %d/%d bins filled",
        variable,
        n_points,
        int(counts.sum()),
        maxlag,
        int(valid.sum()),
        nlags,
    )

    return EmpiricalVariogram(
        variable=variable,
        bin_edges=lag_edges,
        bin_centers=lag_centers,
        gamma=gamma,
        counts=counts,
    )
