"""Pytest configuration and fixtures for autovario tests."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from autovario.core.pointset import PointSet
from autovario.geostats.variogram import Variogram


@pytest.fixture
def three_points() -> PointSet:
    """
    Three samples on the corners of a unit right triangle.

    Layout:
        (0,1)=15
          |
        (0,0)=10 --- (1,0)=20
    """
    return PointSet(
        coords=np.array([[0.0, 0.0], [1.0, 0.0], [0.0, 1.0]]),
        attributes={"Z": np.array([10.0, 20.0, 15.0])},
    )


@pytest.fixture
def spherical_model() -> Variogram:
    """Spherical model with unit sill and range 2."""
    return Variogram("spherical", range=2.0, sill=1.0, nugget=0.0)


@pytest.fixture
def synthetic_frame() -> pd.DataFrame:
    """
    80 scattered samples of a smooth field on [0, 20] x [0, 20].

    Columns: ``X``, ``Y``, ``Z`` (smooth field plus small noise) and
    ``W`` (a second, shorter-range field).
    """
    rng = np.random.default_rng(42)
    x = rng.uniform(0.0, 20.0, 80)
    y = rng.uniform(0.0, 20.0, 80)
    z = 10.0 + 3.0 * np.sin(x / 1.5) + 2.0 * np.cos(y / 2.0) + 0.1 * rng.standard_normal(80)
    w = 5.0 + np.sin((x + y) / 1.2) + 0.2 * rng.standard_normal(80)
    return pd.DataFrame({"X": x, "Y": y, "Z": z, "W": w})


@pytest.fixture
def synthetic_points(synthetic_frame: pd.DataFrame) -> PointSet:
    """Point set built from :func:`synthetic_frame`."""
    return PointSet(
        coords=synthetic_frame[["X", "Y"]].to_numpy(),
        attributes={"Z": synthetic_frame["Z"].to_numpy(), "W": synthetic_frame["W"].to_numpy()},
    )


@pytest.fixture
def synthetic_csv(tmp_path: Path, synthetic_frame: pd.DataFrame) -> Path:
    """CSV file with the synthetic samples."""
    path = tmp_path / "samples.csv"
    synthetic_frame.to_csv(path, index=False)
    return path
