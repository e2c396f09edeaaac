"""Variogram and estimate plotting functions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402
import numpy as np  # noqa: E402
from matplotlib.axes import Axes  # noqa: E402
from matplotlib.figure import Figure  # noqa: E402

from autovario.core.exceptions import InvalidInputError  # noqa: E402
from autovario.visualization._plot_utils import (  # noqa: E402
    CHART_STYLE,
    SPATIAL_STYLE,
    _grid_layout,
    _with_style,
)

if TYPE_CHECKING:
    from autovario.core.grid import CartesianGrid
    from autovario.geostats.empirical import EmpiricalVariogram
    from autovario.geostats.estimation import EstimationResult
    from autovario.geostats.variogram import Variogram


@_with_style(CHART_STYLE)
def plot_variogram(
    empirical: EmpiricalVariogram,
    model: Variogram | None = None,
    ax: Axes | None = None,
    n_points: int = 200,
    show_counts: bool = False,
    figsize: tuple[float, float] = (6, 4),
) -> tuple[Figure, Axes]:
    """
    Plot an empirical variogram with an optional fitted model.

    Parameters
    ----------
    empirical : EmpiricalVariogram
        Binned semivariances. Empty bins are skipped.
    model : Variogram, optional
        Model curve drawn from 0 to the maximum lag.
    ax : Axes, optional
        Existing axes to plot on.
    n_points : int, default 200
        Number of points of the model curve.
    show_counts : bool, default False
        Annotate each bin with its pair count.
    figsize : tuple, default (6, 4)
        Figure size in inches.

    Returns
    -------
    tuple
        (Figure, Axes)
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=figsize)
    else:
        fig = ax.get_figure()  # type: ignore[assignment]

    lags, gamma, counts = empirical.nonempty()
    ax.scatter(lags, gamma, s=18, color="k", label="empirical", zorder=3)
    if show_counts:
        for h, g, c in zip(lags, gamma, counts):
            ax.annotate(str(c), (h, g), textcoords="offset points", xytext=(0, 5), fontsize=7)

    if model is not None:
        h = np.linspace(0.0, empirical.maxlag, n_points)
        ax.plot(h, model.evaluate(h), label=f"{model.variogram_type.value} model")

    ax.set_xlim(0.0, empirical.maxlag)
    ax.set_ylim(bottom=0.0)
    ax.set_xlabel("lag")
    ax.set_ylabel("semivariance")
    ax.set_title(empirical.variable)
    ax.legend(loc="lower right")
    return fig, ax  # type: ignore[return-value]


def plot_variograms(
    variography: Mapping[str, tuple[EmpiricalVariogram, Variogram | None]],
    figsize: tuple[float, float] | None = None,
) -> tuple[Figure, np.ndarray]:
    """
    Plot one variogram panel per variable.

    Parameters
    ----------
    variography : Mapping[str, tuple[EmpiricalVariogram, Variogram | None]]
        Empirical variogram and fitted model keyed by variable.
    figsize : tuple, optional
        Figure size; scales with the number of panels by default.

    Returns
    -------
    tuple
        (Figure, array of Axes)
    """
    if not variography:
        raise InvalidInputError("Nothing to plot")

    nrows, ncols = _grid_layout(len(variography))
    if figsize is None:
        figsize = (4.0 * ncols, 3.2 * nrows)
    fig, axes = plt.subplots(nrows, ncols, figsize=figsize, squeeze=False)

    flat = axes.ravel()
    for ax, (_, (empirical, model)) in zip(flat, variography.items()):
        plot_variogram(empirical, model, ax=ax)
    for ax in flat[len(variography) :]:
        ax.set_visible(False)

    fig.tight_layout()
    return fig, axes


@_with_style(SPATIAL_STYLE)
def plot_estimate(
    result: EstimationResult,
    grid: CartesianGrid,
    cmap: str = "viridis",
    show_variance: bool = True,
    figsize: tuple[float, float] | None = None,
) -> tuple[Figure, np.ndarray]:
    """
    Plot a 2-D estimation result (and its variance, when available).

    Parameters
    ----------
    result : EstimationResult
        Estimates at the grid points.
    grid : CartesianGrid
        Two-dimensional grid the result was computed on.
    cmap : str, default "viridis"
        Matplotlib colormap name.
    show_variance : bool, default True
        Add a variance panel if the result has one.
    figsize : tuple, optional
        Figure size in inches.

    Returns
    -------
    tuple
        (Figure, array of Axes)
    """
    if grid.ndim != 2:
        raise InvalidInputError(f"Only 2-D grids can be plotted, got {grid.ndim}-D")

    estimate, variance = result.reshape(grid)
    panels = [(estimate, result.variable)]
    if show_variance and variance is not None:
        panels.append((variance, f"{result.variable} variance"))

    if figsize is None:
        figsize = (4.5 * len(panels), 3.5)
    fig, axes = plt.subplots(1, len(panels), figsize=figsize, squeeze=False)

    extent = (grid.minimum[0], grid.maximum[0], grid.minimum[1], grid.maximum[1])
    for ax, (values, title) in zip(axes[0], panels):
        # values are indexed (x, y); imshow expects (row=y, col=x)
        image = ax.imshow(
            values.T, extent=extent, origin="lower", cmap=cmap, aspect="auto"
        )
        fig.colorbar(image, ax=ax)
        ax.set_title(f"{title} ({result.method})")
        ax.set_xlabel("x")
        ax.set_ylabel("y")

    fig.tight_layout()
    return fig, axes
