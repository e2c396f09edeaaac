"""Unit tests for the georeferenced table reader."""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pandas as pd
import pytest

from autovario.core.exceptions import InvalidInputError, ParseError
from autovario.io.geotable import geotable_from_dataframe, read_geotable


def write_csv(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


SOIL_CSV = """POINT_X,POINT_Y,Sand,Silt,Clay,Ca,Label
312.5,88.0,41.2,30.1,28.7,5.2,a
300.0,95.5,38.0,33.0,29.0,,b
290.0,70.0,45.5,28.5,26.0,4.8,c
"""


class TestReadGeotable:
    """Tests for read_geotable."""

    def test_basic_read(self, tmp_path):
        """Test reading typed columns with named coordinates."""
        path = write_csv(tmp_path / "soil.csv", SOIL_CSV)
        ps = read_geotable(
            path,
            coordnames=("POINT_X", "POINT_Y"),
            types={"Sand": float, "Silt": float, "Clay": float, "Ca": float},
        )
        assert len(ps) == 3
        assert ps.variables == ("Sand", "Silt", "Clay", "Ca")
        np.testing.assert_allclose(ps.coords[0], [312.5, 88.0])
        assert ps.values("Sand")[2] == pytest.approx(45.5)

    def test_empty_cell_is_missing(self, tmp_path):
        """Test an empty attribute cell becomes NaN."""
        path = write_csv(tmp_path / "soil.csv", SOIL_CSV)
        ps = read_geotable(path, ("POINT_X", "POINT_Y"), {"Ca": "float"})
        assert np.isnan(ps.values("Ca")[1])

    def test_default_loads_numeric_columns(self, tmp_path):
        """Test all numeric non-coordinate columns load without types."""
        path = write_csv(tmp_path / "soil.csv", SOIL_CSV)
        ps = read_geotable(path, ("POINT_X", "POINT_Y"))
        assert ps.variables == ("Sand", "Silt", "Clay", "Ca")

    def test_file_not_found(self, tmp_path):
        """Test missing files raise FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            read_geotable(tmp_path / "nope.csv", ("X", "Y"))

    def test_empty_file_raises(self, tmp_path):
        """Test an empty file is a parse error."""
        path = write_csv(tmp_path / "empty.csv", "")
        with pytest.raises(ParseError):
            read_geotable(path, ("X", "Y"))

    def test_bad_value_reports_row_and_column(self, tmp_path):
        """Test non-numeric cells are located in the error."""
        text = "X,Y,Ca\n0,0,1.0\n1,0,2.0\n2,0,abc\n"
        path = write_csv(tmp_path / "bad.csv", text)
        with pytest.raises(ParseError, match="abc") as exc_info:
            read_geotable(path, ("X", "Y"), {"Ca": float})
        assert exc_info.value.row == 3
        assert exc_info.value.column == "Ca"

    def test_missing_coordinate_value_raises(self, tmp_path):
        """Test an empty coordinate is a parse error."""
        text = "X,Y,Ca\n0,0,1.0\n,1,2.0\n"
        path = write_csv(tmp_path / "bad.csv", text)
        with pytest.raises(ParseError) as exc_info:
            read_geotable(path, ("X", "Y"), {"Ca": float})
        assert exc_info.value.row == 2
        assert exc_info.value.column == "X"

    def test_read_csv_kwargs_forwarded(self, tmp_path):
        """Test extra keyword arguments reach pandas."""
        path = write_csv(tmp_path / "semi.csv", "X;Y;Ca\n0;0;1.5\n1;1;2.5\n")
        ps = read_geotable(path, ("X", "Y"), {"Ca": float}, sep=";")
        np.testing.assert_allclose(ps.values("Ca"), [1.5, 2.5])


class TestGeotableFromDataFrame:
    """Tests for geotable_from_dataframe."""

    def test_missing_coordinate_column(self):
        """Test absent coordinate columns are reported."""
        df = pd.DataFrame({"X": [0.0], "Ca": [1.0]})
        with pytest.raises(ParseError, match="Missing coordinate columns") as exc_info:
            geotable_from_dataframe(df, ("X", "Y"))
        assert exc_info.value.column == "Y"

    def test_missing_attribute_column(self):
        """Test absent typed columns are reported."""
        df = pd.DataFrame({"X": [0.0], "Y": [0.0]})
        with pytest.raises(ParseError, match="Missing attribute columns"):
            geotable_from_dataframe(df, ("X", "Y"), {"Ca": float})

    def test_unsupported_type(self):
        """Test non-numeric types are rejected."""
        df = pd.DataFrame({"X": [0.0], "Y": [0.0], "Label": ["a"]})
        with pytest.raises(InvalidInputError, match="unsupported type"):
            geotable_from_dataframe(df, ("X", "Y"), {"Label": str})

    def test_three_dimensional(self):
        """Test three coordinate columns give 3-D points."""
        df = pd.DataFrame({"X": [0.0, 1.0], "Y": [0.0, 1.0], "Z": [5.0, 6.0], "v": [1.0, 2.0]})
        ps = geotable_from_dataframe(df, ("X", "Y", "Z"))
        assert ps.ndim == 3
        assert ps.variables == ("v",)

    def test_integer_columns_become_float(self):
        """Test integer attributes are stored as floats."""
        df = pd.DataFrame({"X": [0, 1], "Y": [0, 1], "n": [3, 4]})
        ps = geotable_from_dataframe(df, ("X", "Y"), {"n": int})
        assert ps.values("n").dtype == np.float64
