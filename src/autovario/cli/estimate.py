"""
``autovario estimate`` subcommand.

Interpolates one variable on a regular grid with kriging and/or IDW.

Usage::

    autovario estimate --csv data.csv --variable Ca --dims 100 100 --output ca.csv
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from pydantic import ValidationError

from autovario.cli._common import add_common_arguments, build_settings, configure_logging
from autovario.core.exceptions import AutoVarioError

logger = logging.getLogger(__name__)


def add_estimate_parser(subparsers: argparse._SubParsersAction) -> None:  # type: ignore[type-arg]
    """Register the ``estimate`` subcommand."""
    p = subparsers.add_parser(
        "estimate",
        help="Interpolate a variable on a grid",
        description="Solve a grid estimation problem with kriging and/or IDW.",
    )
    add_common_arguments(p)
    p.add_argument("--variable", required=True, help="Variable to interpolate")
    p.add_argument(
        "--solver",
        choices=["kriging", "idw", "both"],
        default="both",
        help="Estimator (default: both)",
    )
    p.add_argument(
        "--dims",
        type=int,
        nargs="+",
        default=None,
        help="Grid cells per axis (default: 100 100)",
    )
    p.add_argument("--power", type=float, default=None, help="IDW power (default: 2)")
    p.add_argument(
        "--output",
        type=Path,
        default=None,
        help="CSV file for the estimates (one file per solver when both run)",
    )
    p.add_argument(
        "--plot",
        type=Path,
        default=None,
        help="Image file for the estimate maps (2-D only)",
    )
    p.set_defaults(func=run_estimate)


def _output_path(base: Path, solver: str, n_solvers: int) -> Path:
    if n_solvers == 1:
        return base
    return base.with_name(f"{base.stem}_{solver}{base.suffix}")


def run_estimate(args: argparse.Namespace) -> int:
    """Run the ``estimate`` subcommand."""
    configure_logging(args)

    from autovario.pipeline import SOLVERS, run_workflow

    solvers = SOLVERS if args.solver == "both" else (args.solver,)
    try:
        settings = build_settings(
            args,
            dims=tuple(args.dims) if args.dims else None,
            idw_power=args.power,
        )
        if settings.types is None:
            loaded = [*(settings.variables or []), args.variable]
            types = {v: "float" for v in loaded}
            settings = settings.model_copy(update={"types": types})
        result = run_workflow(args.csv, args.variable, settings, solvers=solvers)
    except (FileNotFoundError, ValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except AutoVarioError as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    if args.variable in result.variography:
        print(f"{args.variable}: {result.variography[args.variable].model!r}")

    for name, sol in result.solutions.items():
        print(
            f"{name}: {len(sol)} estimates, min={sol.estimate.min():.4g}, "
            f"max={sol.estimate.max():.4g}"
        )
        if args.output:
            path = _output_path(args.output, name, len(result.solutions))
            sol.to_dataframe(settings.coordnames).to_csv(path, index=False)
            logger.info("Wrote %s estimates to %s", name, path)

    if args.plot:
        import matplotlib.pyplot as plt

        from autovario.visualization import plot_estimate

        for name, sol in result.solutions.items():
            path = _output_path(args.plot, name, len(result.solutions))
            fig, _ = plot_estimate(sol, result.grid)
            fig.savefig(path, dpi=120)
            plt.close(fig)
            logger.info("Wrote %s map to %s", name, path)

    return 0
