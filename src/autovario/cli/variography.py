"""
``autovario variography`` subcommand.

Fits a variogram model to each requested variable.

Usage::

    autovario variography --csv data.csv --vars Sand Silt Clay Ca --output models.json
"""

from __future__ import annotations

import argparse
import json
import logging
import math
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from autovario.cli._common import add_common_arguments, build_settings, configure_logging
from autovario.core.exceptions import AutoVarioError

logger = logging.getLogger(__name__)


def add_variography_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    """Register the ``variography`` subcommand."""
    p = subparsers.add_parser(
        "variography",
        help="Fit variogram models to each variable",
        description="Compute empirical variograms and fit a model per variable.",
    )
    add_common_arguments(p)
    p.add_argument(
        "--vars",
        nargs="+",
        default=None,
        metavar="NAME",
        help="Variables to fit (default: all numeric columns)",
    )
    p.add_argument(
        "--output",
        type=Path,
        default=None,
        help="JSON file for the fitted models",
    )
    p.add_argument(
        "--plot",
        type=Path,
        default=None,
        help="Image file for the variogram plots",
    )
    p.set_defaults(func=run_variography)


def _summary(variography: dict[str, Any]) -> dict[str, Any]:
    out: dict[str, Any] = {}
    for name, res in variography.items():
        ev = res.empirical
        out[name] = {
            "model": res.model.to_dict(),
            "error": res.fit.error,
            "nfev": res.fit.nfev,
            "empirical": {
                "bin_centers": ev.bin_centers.tolist(),
                "gamma": [None if math.isnan(g) else g for g in ev.gamma.tolist()],
                "counts": ev.counts.tolist(),
            },
        }
    return out


def run_variography(args: argparse.Namespace) -> int:
    """Run the ``variography`` subcommand."""
    configure_logging(args)

    from autovario.pipeline import default_maxlag, fit_variograms, load_data

    extra: dict[str, Any] = {}
    if args.vars:
        extra["variables"] = list(args.vars)
    try:
        settings = build_settings(args, **extra)
        if args.vars and settings.types is None:
            settings = settings.model_copy(update={"types": {v: "float" for v in args.vars}})

        data = load_data(args.csv, settings)
        maxlag = settings.maxlag if settings.maxlag is not None else default_maxlag(data)
        variography = fit_variograms(data, settings.variables, settings, maxlag=maxlag)
    except (FileNotFoundError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except AutoVarioError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    for name, res in variography.items():
        print(f"{name}: {res.model!r}  (weighted error {res.fit.error:.4g})")

    if args.output:
        args.output.write_text(json.dumps(_summary(variography), indent=2), encoding="utf-8")
        logger.info("Wrote fitted models to %s", args.output)

    if args.plot:
        import matplotlib.pyplot as plt

        from autovario.visualization import plot_variograms

        fig, _ = plot_variograms({k: (v.empirical, v.model) for k, v in variography.items()})
        fig.savefig(args.plot, dpi=120)
        plt.close(fig)
        logger.info("Wrote variogram plot to %s", args.plot)

    return 0
