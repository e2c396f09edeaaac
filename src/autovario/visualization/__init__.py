"""Plotting of variograms and estimation results (matplotlib)."""

from __future__ import annotations

from autovario.visualization.plot_variogram import (
    plot_estimate,
    plot_variogram,
    plot_variograms,
)

__all__ = ["plot_variogram", "plot_variograms", "plot_estimate"]
