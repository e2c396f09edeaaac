"""Unit tests for point sets, bounding boxes and deduplication."""

from __future__ import annotations

import dataclasses

import numpy as np
import pytest

from autovario.core.exceptions import InvalidInputError
from autovario.core.pointset import (
    BoundingBox,
    DedupPolicy,
    PointSet,
    Sample,
    unique_coords,
)


class TestSample:
    """Tests for the Sample dataclass."""

    def test_basic_creation(self):
        """Test coordinates and values are stored as floats."""
        s = Sample((1, 2), {"Ca": 3})
        assert s.coords == (1.0, 2.0)
        assert s["Ca"] == 3.0
        assert s.ndim == 2

    def test_hashable(self):
        """Test equal samples hash equally and work in sets."""
        a = Sample((0.0, 1.0), {"Ca": 2.0, "Sand": 40.0})
        b = Sample((0, 1), {"Sand": 40, "Ca": 2})
        assert a == b
        assert hash(a) == hash(b)
        assert len({a, b, Sample((1.0, 1.0), {"Ca": 2.0})}) == 2

    def test_immutable(self):
        """Test samples cannot be modified."""
        s = Sample((0.0, 0.0), {"Ca": 1.0})
        with pytest.raises(dataclasses.FrozenInstanceError):
            s.coords = (1.0, 1.0)  # type: ignore[misc]
        with pytest.raises(TypeError):
            s.values["Ca"] = 2.0  # type: ignore[index]


class TestPointSet:
    """Tests for PointSet construction and access."""

    def test_len_and_ndim(self, three_points):
        """Test size and dimensionality."""
        assert len(three_points) == 3
        assert three_points.ndim == 2
        assert three_points.variables == ("Z",)

    def test_arrays_are_read_only(self, three_points):
        """Test that coordinate and value arrays cannot be written."""
        with pytest.raises(ValueError):
            three_points.coords[0, 0] = 5.0
        with pytest.raises(ValueError):
            three_points.values("Z")[0] = 5.0

    def test_input_is_copied(self):
        """Test that later changes to the input do not leak in."""
        coords = np.array([[0.0, 0.0], [1.0, 1.0]])
        ps = PointSet(coords, {"a": [1.0, 2.0]})
        coords[0, 0] = 99.0
        assert ps.coords[0, 0] == 0.0

    def test_getitem_returns_sample(self, three_points):
        """Test indexing returns a Sample."""
        s = three_points[1]
        assert isinstance(s, Sample)
        assert s.coords == (1.0, 0.0)
        assert s["Z"] == 20.0

    def test_iteration(self, three_points):
        """Test iterating yields all samples in order."""
        values = [s["Z"] for s in three_points]
        assert values == [10.0, 20.0, 15.0]

    def test_from_samples(self):
        """Test building from Sample objects with sparse attributes."""
        ps = PointSet.from_samples(
            [Sample((0.0, 0.0), {"a": 1.0}), Sample((1.0, 0.0), {"b": 2.0})]
        )
        assert ps.variables == ("a", "b")
        assert np.isnan(ps.values("a")[1])
        assert np.isnan(ps.values("b")[0])

    def test_unknown_attribute_raises(self, three_points):
        """Test that unknown attributes raise InvalidInputError."""
        with pytest.raises(InvalidInputError, match="Unknown attribute"):
            three_points.values("missing")

    def test_length_mismatch_raises(self):
        """Test attribute length must match sample count."""
        with pytest.raises(InvalidInputError, match="has 2 values for 3 samples"):
            PointSet(np.zeros((3, 2)), {"a": [1.0, 2.0]})

    def test_non_finite_coords_raise(self):
        """Test NaN coordinates are rejected."""
        with pytest.raises(InvalidInputError, match="finite"):
            PointSet(np.array([[0.0, np.nan]]))

    def test_one_dimensional_coords(self):
        """Test a flat coordinate array is treated as 1-D points."""
        ps = PointSet([0.0, 1.0, 2.0], {"a": [1.0, 2.0, 3.0]})
        assert ps.ndim == 1
        assert len(ps) == 3

    def test_dropna(self):
        """Test dropping samples with missing values."""
        ps = PointSet(np.arange(6.0).reshape(3, 2), {"a": [1.0, np.nan, 3.0]})
        clean = ps.dropna("a")
        assert len(clean) == 2
        np.testing.assert_array_equal(clean.values("a"), [1.0, 3.0])

    def test_dropna_returns_self_when_complete(self, three_points):
        """Test dropna does not copy complete data."""
        assert three_points.dropna("Z") is three_points

    def test_has_unique_coords(self, three_points):
        """Test duplicate detection."""
        assert three_points.has_unique_coords
        dup = PointSet(np.array([[0.0, 0.0], [0.0, 0.0]]), {"a": [1.0, 2.0]})
        assert not dup.has_unique_coords


class TestBoundingBox:
    """Tests for BoundingBox."""

    def test_from_pointset(self, three_points):
        """Test the box enclosing the samples."""
        bbox = three_points.bounding_box()
        assert bbox.minimum == (0.0, 0.0)
        assert bbox.maximum == (1.0, 1.0)
        assert bbox.sides() == (1.0, 1.0)
        assert bbox.center == (0.5, 0.5)
        assert bbox.ndim == 2

    def test_contains(self):
        """Test point containment includes the boundary."""
        bbox = BoundingBox((0.0, 0.0), (2.0, 1.0))
        assert bbox.contains((2.0, 1.0))
        assert not bbox.contains((2.1, 0.5))

    def test_inverted_corners_raise(self):
        """Test minimum must not exceed maximum."""
        with pytest.raises(InvalidInputError, match="exceeds"):
            BoundingBox((1.0, 0.0), (0.0, 1.0))

    def test_empty_raises(self):
        """Test no box for zero points."""
        with pytest.raises(InvalidInputError):
            BoundingBox.from_points(np.empty((0, 2)))


class TestUniqueCoords:
    """Tests for deduplication of repeated coordinates."""

    @pytest.fixture
    def raw(self) -> PointSet:
        """Five rows, three distinct locations."""
        return PointSet(
            coords=np.array(
                [[1.0, 1.0], [0.0, 0.0], [1.0, 1.0], [2.0, 0.0], [0.0, 0.0]]
            ),
            attributes={
                "a": np.array([1.0, 10.0, 3.0, 7.0, np.nan]),
                "b": np.array([5.0, 6.0, 7.0, 8.0, 9.0]),
            },
        )

    def test_one_entry_per_coordinate(self, raw):
        """Test each distinct coordinate appears exactly once."""
        uniq = unique_coords(raw)
        assert len(uniq) == 3
        assert uniq.has_unique_coords
        distinct = {tuple(c) for c in raw.coords}
        assert {tuple(c) for c in uniq.coords} == distinct

    def test_first_occurrence_order(self, raw):
        """Test output follows the order of first occurrence."""
        uniq = unique_coords(raw)
        np.testing.assert_array_equal(uniq.coords, [[1.0, 1.0], [0.0, 0.0], [2.0, 0.0]])

    def test_mean_policy(self, raw):
        """Test averaging ignores missing values."""
        uniq = unique_coords(raw, "mean")
        np.testing.assert_allclose(uniq.values("a"), [2.0, 10.0, 7.0])
        np.testing.assert_allclose(uniq.values("b"), [6.0, 7.5, 8.0])

    def test_first_policy(self, raw):
        """Test keeping the first occurrence."""
        uniq = unique_coords(raw, DedupPolicy.FIRST)
        np.testing.assert_allclose(uniq.values("a"), [1.0, 10.0, 7.0])
        np.testing.assert_allclose(uniq.values("b"), [5.0, 6.0, 8.0])

    def test_all_missing_group_stays_missing(self):
        """Test a group with only missing values yields NaN."""
        ps = PointSet(np.zeros((2, 2)), {"a": [np.nan, np.nan]})
        uniq = unique_coords(ps)
        assert len(uniq) == 1
        assert np.isnan(uniq.values("a")[0])

    def test_already_unique_is_unchanged(self, three_points):
        """Test unique input is returned as is."""
        assert unique_coords(three_points) is three_points

    def test_invalid_policy_raises(self, raw):
        """Test unknown policies are rejected."""
        with pytest.raises(ValueError):
            unique_coords(raw, "median")
