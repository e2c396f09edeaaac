"""
autovario command-line interface.

Usage:
    autovario variography [options]   Fit variogram models per variable
    autovario estimate [options]      Interpolate a variable on a grid
    python -m autovario <command>     Same as above
"""

from __future__ import annotations

import argparse


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="autovario",
        description="Automatic variography, kriging and IDW for point data.",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Register subcommands
    from autovario.cli.estimate import add_estimate_parser
    from autovario.cli.variography import add_variography_parser

    add_variography_parser(subparsers)
    add_estimate_parser(subparsers)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    # Dispatch to the subcommand handler
    result: int = args.func(args)
    return result


__all__ = ["main"]
