"""Input readers for autovario."""

from __future__ import annotations

from autovario.io.geotable import geotable_from_dataframe, read_geotable

__all__ = ["read_geotable", "geotable_from_dataframe"]
