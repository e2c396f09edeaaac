"""
Reader for georeferenced tables.

Converts CSV files (or pandas DataFrames) with named coordinate columns
into a :class:`~autovario.core.pointset.PointSet`.

File format (comma-delimited, one header line)::

    POINT_X,POINT_Y,Sand,Silt,Clay,Ca
    312.5,88.0,41.2,30.1,28.7,5.2

Example
-------
>>> from autovario.io.geotable import read_geotable
>>> ps = read_geotable(
...     "data/data.csv",
...     coordnames=("POINT_X", "POINT_Y"),
...     types={"Sand": float, "Ca": float},
... )
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any

import numpy as np
import pandas as pd

from autovario.core.exceptions import InvalidInputError, ParseError
from autovario.core.pointset import PointSet

logger = logging.getLogger(__name__)

_NUMERIC_TYPES = {float, int, np.float64, np.float32, np.int64, np.int32}
_NUMERIC_NAMES = {"float", "float64", "float32", "int", "int64", "int32", "continuous"}


def _check_type(column: str, typ: Any) -> None:
    if typ in _NUMERIC_TYPES:
        return
    if isinstance(typ, str) and typ.lower() in _NUMERIC_NAMES:
        return
    raise InvalidInputError(f"Column '{column}' has unsupported type {typ!r}; only numeric types")


def _coerce_column(df: pd.DataFrame, column: str, allow_missing: bool) -> np.ndarray:
    """Convert one column to float, raising ParseError at the first bad cell."""
    raw = df[column]
    coerced = pd.to_numeric(raw, errors="coerce")
    bad = coerced.isna() & raw.notna()
    if not allow_missing:
        bad |= raw.isna()
    if bad.any():
        pos = int(np.flatnonzero(bad.to_numpy())[0])
        value = raw.iloc[pos]
        raise ParseError(
            f"Cannot convert value {value!r} in column '{column}' (data row {pos + 1}) to float",
            row=pos + 1,
            column=column,
        )
    return coerced.to_numpy(dtype=np.float64)


def geotable_from_dataframe(
    df: pd.DataFrame,
    coordnames: Sequence[str],
    types: Mapping[str, Any] | None = None,
) -> PointSet:
    """Build a point set from a DataFrame.

    Parameters
    ----------
    df : pd.DataFrame
        Table with at least the coordinate columns.
    coordnames : Sequence[str]
        Names of the coordinate columns, in axis order.
    types : Mapping[str, Any] | None
        Attribute columns to load and their (numeric) types. If ``None``,
        every numeric non-coordinate column is loaded.

    Returns
    -------
    PointSet
        Samples in table order. Empty attribute cells become NaN.

    Raises
    ------
    ParseError
        If a coordinate or typed column is missing, a coordinate is empty,
        or a value cannot be converted to float.
    """
    coordnames = list(coordnames)
    if not coordnames:
        raise InvalidInputError("At least one coordinate column is required")

    missing = [c for c in coordnames if c not in df.columns]
    if missing:
        raise ParseError(f"Missing coordinate columns: {missing}", column=missing[0])

    if types is None:
        candidates = df.drop(columns=coordnames).select_dtypes(include="number")
        attr_names = list(candidates.columns)
    else:
        attr_names = list(types)
        for name, typ in types.items():
            _check_type(name, typ)
        absent = [c for c in attr_names if c not in df.columns]
        if absent:
            raise ParseError(f"Missing attribute columns: {absent}", column=absent[0])

    coords = np.column_stack(
        [_coerce_column(df, c, allow_missing=False) for c in coordnames]
    )
    attributes = {name: _coerce_column(df, name, allow_missing=True) for name in attr_names}

    logger.debug(
        "Loaded %d samples with coordinates %s and attributes %s",
        len(df),
        coordnames,
        attr_names,
    )
    return PointSet(coords.reshape(len(df), len(coordnames)), attributes)


def read_geotable(
    filepath: Path | str,
    coordnames: Sequence[str],
    types: Mapping[str, Any] | None = None,
    **read_csv_kwargs: Any,
) -> PointSet:
    """Read a CSV file into a point set.

    Parameters
    ----------
    filepath : Path | str
        CSV file path.
    coordnames : Sequence[str]
        Names of the coordinate columns.
    types : Mapping[str, Any] | None
        Attribute columns to load (see :func:`geotable_from_dataframe`).
    **read_csv_kwargs
        Passed to :func:`pandas.read_csv`.

    Returns
    -------
    PointSet
        Loaded samples (duplicates not removed).
    """
    filepath = Path(filepath)
    if not filepath.exists():
        raise FileNotFoundError(f"Data file not found: {filepath}")

    try:
        df = pd.read_csv(filepath, **read_csv_kwargs)
    except (pd.errors.ParserError, pd.errors.EmptyDataError) as exc:
        raise ParseError(f"Cannot parse {filepath}: {exc}") from exc

    pointset = geotable_from_dataframe(df, coordnames, types)
    logger.info("Read %d samples from %s", len(pointset), filepath)
    return pointset
