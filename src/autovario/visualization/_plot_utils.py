"""Shared plotting utilities for autovario visualization modules."""

from __future__ import annotations

import functools
from typing import Any, TypeVar

import matplotlib

matplotlib.use("Agg")  # Non-interactive backend for saving

from collections.abc import Callable  # noqa: E402

import matplotlib.pyplot as plt  # noqa: E402

# ---------------------------------------------------------------------------
# Styles and decorator
# ---------------------------------------------------------------------------

CHART_STYLE: dict[str, Any] = {
    "axes.grid": True,
    "grid.alpha": 0.3,
    "axes.spines.top": False,
    "axes.spines.right": False,
    "legend.frameon": False,
    "font.size": 9,
}

SPATIAL_STYLE: dict[str, Any] = {
    "axes.grid": False,
    "image.origin": "lower",
    "font.size": 9,
}

_F = TypeVar("_F", bound=Callable[..., Any])


def _with_style(style: dict[str, Any]) -> Callable[[_F], _F]:
    """Decorator that wraps a plotting function in ``plt.style.context``."""

    def decorator(func: _F) -> _F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            with plt.style.context(style):
                return func(*args, **kwargs)

        return wrapper  # type: ignore[return-value]

    return decorator


def _grid_layout(n: int) -> tuple[int, int]:
    """Rows and columns for *n* panels, at most three per row."""
    ncols = min(n, 3) if n > 0 else 1
    nrows = max(1, -(-n // ncols))
    return nrows, ncols
