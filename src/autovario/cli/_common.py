"""
Arguments and settings handling shared by the CLI subcommands.
"""

from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Any

from autovario.config import WorkflowSettings


def add_common_arguments(p: argparse.ArgumentParser) -> None:
    """Register data, binning and fitting options."""
    p.add_argument(
        "--csv",
        type=Path,
        required=True,
        help="CSV file with coordinate and attribute columns",
    )
    p.add_argument(
        "--config",
        type=Path,
        default=None,
        metavar="FILE",
        help="JSON settings file (command line options take precedence)",
    )
    p.add_argument(
        "--coords",
        nargs="+",
        default=None,
        metavar="COLUMN",
        help="Coordinate columns (default: POINT_X POINT_Y)",
    )
    p.add_argument(
        "--dedup",
        choices=["mean", "first"],
        default=None,
        help="Policy for repeated coordinates (default: mean)",
    )
    p.add_argument("--nlags", type=int, default=None, help="Number of lag bins (default: 20)")
    p.add_argument(
        "--maxlag",
        type=float,
        default=None,
        help="Maximum lag (default: half the smallest side of the bounding box)",
    )
    p.add_argument(
        "--model",
        choices=["best", "spherical", "exponential", "gaussian"],
        default=None,
        help="Variogram family (default: best)",
    )
    p.add_argument("--jobs", type=int, default=None, help="Worker threads")
    p.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )


def configure_logging(args: argparse.Namespace) -> None:
    """Configure root logging for a CLI run."""
    log_level = logging.DEBUG if args.debug else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def build_settings(args: argparse.Namespace, **extra: Any) -> WorkflowSettings:
    """Merge the settings file (if any) with command line overrides."""
    base = WorkflowSettings.from_json(args.config) if args.config else WorkflowSettings()

    overrides: dict[str, Any] = {
        "coordnames": tuple(args.coords) if args.coords else None,
        "dedup_policy": args.dedup,
        "nlags": args.nlags,
        "maxlag": args.maxlag,
        "model": args.model,
        "n_jobs": args.jobs,
    }
    overrides.update(extra)
    overrides = {k: v for k, v in overrides.items() if v is not None}

    return WorkflowSettings.model_validate({**base.model_dump(), **overrides})
