"""
Configuration settings for the variography workflow.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator

from autovario.core.pointset import DedupPolicy
from autovario.geostats.fitting import FitConfig
from autovario.geostats.variogram import VariogramType

logger = logging.getLogger(__name__)


class WorkflowSettings(BaseModel):
    """Settings for loading, variography and estimation."""

    coordnames: tuple[str, ...] = Field(
        default=("POINT_X", "POINT_Y"), min_length=1, description="Coordinate columns"
    )
    variables: list[str] | None = Field(
        default=None,
        description="Variables to analyse (default: all, or the kriging target in a workflow)",
    )
    types: dict[str, str] | None = Field(
        default=None, description="Attribute columns to load and their types"
    )
    dedup_policy: Literal["mean", "first"] = Field(
        default="mean", description="How values at repeated coordinates are combined"
    )
    nlags: int = Field(default=20, ge=1, description="Number of lag bins")
    maxlag: float | None = Field(
        default=None, gt=0, description="Maximum lag (default: half the smallest bbox side)"
    )
    model: str = Field(default="best", description="Variogram family or 'best'")
    fit_nugget: bool = Field(default=True, description="Fit a nugget effect")
    max_nfev: int = Field(default=2000, ge=1, description="Optimiser evaluation budget")
    dims: tuple[int, ...] = Field(default=(100, 100), min_length=1, description="Grid cells per axis")
    idw_power: float = Field(default=2.0, gt=0, description="IDW distance exponent")
    max_samples: int = Field(default=5000, ge=2, description="Sample cap for quadratic stages")
    max_condition: float = Field(default=1e12, gt=1, description="Kriging condition number limit")
    n_jobs: int = Field(default=1, ge=1, description="Worker threads")

    model_config = {"extra": "forbid"}

    @field_validator("model")
    @classmethod
    def _check_model(cls, value: str) -> str:
        value = value.lower()
        if value != "best":
            VariogramType(value)
        return value

    @field_validator("dims")
    @classmethod
    def _check_dims(cls, value: tuple[int, ...]) -> tuple[int, ...]:
        if any(d < 1 for d in value):
            raise ValueError(f"Grid dims must be positive: {value}")
        return value

    @property
    def policy(self) -> DedupPolicy:
        """Deduplication policy as an enum."""
        return DedupPolicy(self.dedup_policy)

    @property
    def variogram_types(self) -> list[VariogramType]:
        """Families to try when fitting."""
        if self.model == "best":
            return list(VariogramType)
        return [VariogramType(self.model)]

    def fit_config(self) -> FitConfig:
        """Fitting configuration derived from these settings."""
        return FitConfig(max_nfev=self.max_nfev, fit_nugget=self.fit_nugget)

    @classmethod
    def from_json(cls, filepath: Path | str) -> WorkflowSettings:
        """Load settings from a JSON file."""
        filepath = Path(filepath)
        settings = cls.model_validate_json(filepath.read_text(encoding="utf-8"))
        logger.debug("Loaded settings from %s", filepath)
        return settings

    def to_json(self, filepath: Path | str) -> Path:
        """Write settings to a JSON file."""
        filepath = Path(filepath)
        filepath.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return filepath
