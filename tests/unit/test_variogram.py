"""Unit tests for theoretical variogram models."""

from __future__ import annotations

import numpy as np
import pytest

from autovario.core.exceptions import InvalidInputError
from autovario.geostats.variogram import Variogram, VariogramType, distance_matrix


class TestVariogramType:
    """Tests for VariogramType enum."""

    def test_all_types(self):
        """Test all variogram types exist."""
        assert VariogramType.SPHERICAL.value == "spherical"
        assert VariogramType.EXPONENTIAL.value == "exponential"
        assert VariogramType.GAUSSIAN.value == "gaussian"

    @pytest.mark.parametrize("vtype", list(VariogramType))
    def test_shape_limits(self, vtype):
        """Test f(0) = 0 and f approaches 1."""
        assert vtype.shape(np.array([0.0]))[0] == 0.0
        assert vtype.shape(np.array([10.0]))[0] == pytest.approx(1.0, abs=1e-6)

    @pytest.mark.parametrize("vtype", list(VariogramType))
    def test_shape_derivative_matches_finite_difference(self, vtype):
        """Test analytic f'(u) against central differences."""
        u = np.array([0.1, 0.4, 0.8, 1.5])
        eps = 1e-6
        numeric = (vtype.shape(u + eps) - vtype.shape(u - eps)) / (2 * eps)
        np.testing.assert_allclose(vtype.shape_derivative(u), numeric, rtol=1e-5, atol=1e-8)


class TestVariogramCreation:
    """Tests for Variogram creation and validation."""

    def test_basic_creation(self):
        """Test basic variogram creation."""
        v = Variogram("exponential", range=1000, sill=1.0, nugget=0.1)
        assert v.variogram_type == VariogramType.EXPONENTIAL
        assert v.range == 1000
        assert v.sill == 1.0
        assert v.nugget == 0.1
        assert v.partial_sill == pytest.approx(0.9)

    def test_creation_with_enum(self):
        """Test creation with enum type."""
        v = Variogram(VariogramType.SPHERICAL, range=500, sill=2.0)
        assert v.variogram_type == VariogramType.SPHERICAL

    def test_unknown_type_raises(self):
        """Test unsupported families are rejected."""
        with pytest.raises(InvalidInputError, match="Unknown variogram type"):
            Variogram("matern", range=1.0)

    def test_invalid_range_raises(self):
        """Test that non-positive range raises error."""
        with pytest.raises(InvalidInputError, match="Range must be positive"):
            Variogram("exponential", range=0, sill=1.0)
        with pytest.raises(InvalidInputError, match="Range must be positive"):
            Variogram("exponential", range=-100, sill=1.0)

    def test_negative_nugget_raises(self):
        """Test that negative nugget raises error."""
        with pytest.raises(InvalidInputError, match="Nugget must be non-negative"):
            Variogram("exponential", range=1000, sill=1.0, nugget=-0.1)

    def test_sill_not_above_nugget_raises(self):
        """Test that the sill must exceed the nugget."""
        with pytest.raises(InvalidInputError, match="Sill must exceed nugget"):
            Variogram("spherical", range=10, sill=0.5, nugget=0.5)

    def test_is_frozen(self):
        """Test models are immutable."""
        v = Variogram("gaussian", range=10)
        with pytest.raises(AttributeError):
            v.sill = 3.0  # type: ignore[misc]


class TestVariogramModels:
    """Tests for variogram model evaluation."""

    def test_zero_lag_is_zero(self):
        """Test gamma(0) = 0 even with a nugget."""
        for vtype in VariogramType:
            v = Variogram(vtype, range=1000, sill=1.0, nugget=0.3)
            assert v.evaluate(0) == 0.0

    def test_nugget_discontinuity(self):
        """Test gamma jumps to the nugget just above zero."""
        v = Variogram("spherical", range=1000, sill=1.0, nugget=0.3)
        assert v.evaluate(1e-9) == pytest.approx(0.3)

    def test_spherical_at_range(self):
        """Test spherical model reaches the sill at the range."""
        v = Variogram("spherical", range=1000, sill=1.0, nugget=0.0)
        assert v.evaluate(1000) == pytest.approx(1.0)

    def test_spherical_midrange(self):
        """Test spherical model at half the range."""
        v = Variogram("spherical", range=2.0, sill=1.0)
        assert v.evaluate(1.0) == pytest.approx(0.6875)

    def test_spherical_beyond_range(self):
        """Test spherical model beyond range."""
        v = Variogram("spherical", range=1000, sill=1.1, nugget=0.1)
        assert v.evaluate(2000) == pytest.approx(1.1)

    def test_exponential_practical_range(self):
        """Test exponential reaches 95% of the structure at the range."""
        v = Variogram("exponential", range=1000, sill=1.0, nugget=0.0)
        assert v.evaluate(1000) == pytest.approx(1 - np.exp(-3))

    def test_gaussian_practical_range(self):
        """Test gaussian reaches 95% of the structure at the range."""
        v = Variogram("gaussian", range=1000, sill=2.0, nugget=0.0)
        assert v.evaluate(1000) == pytest.approx(2.0 * (1 - np.exp(-3)))

    def test_callable(self):
        """Test calling the model evaluates it."""
        v = Variogram("exponential", range=10)
        assert v(5.0) == v.evaluate(5.0)

    def test_evaluate_array(self):
        """Test evaluating at multiple distances."""
        v = Variogram("exponential", range=1000, sill=1.0, nugget=0.0)
        gamma = v.evaluate(np.array([0, 500, 1000, 2000]))
        assert gamma.shape == (4,)
        assert gamma[0] == 0.0
        assert np.all(np.diff(gamma) > 0)

    def test_evaluate_matrix(self):
        """Test evaluating a 2-D distance array keeps its shape."""
        v = Variogram("spherical", range=3.0)
        assert v.evaluate(np.ones((4, 5))).shape == (4, 5)


class TestVariogramGradient:
    """Tests for the parameter gradient."""

    @pytest.mark.parametrize("vtype", list(VariogramType))
    def test_matches_finite_differences(self, vtype):
        """Test the Jacobian against central differences."""
        nugget, sill, a = 0.2, 1.5, 4.0
        h = np.array([0.5, 1.7, 3.2, 6.0])
        jac = Variogram(vtype, range=a, sill=sill, nugget=nugget).gradient(h)
        assert jac.shape == (4, 3)

        eps = 1e-6
        params = np.array([nugget, sill, a])
        for k in range(3):
            up, down = params.copy(), params.copy()
            up[k] += eps
            down[k] -= eps
            g_up = Variogram(vtype, range=up[2], sill=up[1], nugget=up[0]).evaluate(h)
            g_down = Variogram(vtype, range=down[2], sill=down[1], nugget=down[0]).evaluate(h)
            np.testing.assert_allclose(jac[:, k], (g_up - g_down) / (2 * eps), atol=1e-6)

    def test_zero_lag_row_is_zero(self):
        """Test gamma(0) does not depend on the parameters."""
        jac = Variogram("exponential", range=1.0, sill=1.0, nugget=0.5).gradient([0.0, 1.0])
        np.testing.assert_array_equal(jac[0], [0.0, 0.0, 0.0])


class TestVariogramSerialization:
    """Tests for variogram serialization."""

    def test_to_dict(self):
        """Test converting to dictionary."""
        d = Variogram("exponential", range=1000, sill=0.8, nugget=0.2).to_dict()
        assert d == {
            "variogram_type": "exponential",
            "range": 1000,
            "sill": 0.8,
            "nugget": 0.2,
        }

    def test_roundtrip(self):
        """Test dict roundtrip preserves values."""
        v1 = Variogram("gaussian", range=2000, sill=0.5, nugget=0.05)
        assert Variogram.from_dict(v1.to_dict()) == v1

    def test_repr(self):
        """Test string representation."""
        r = repr(Variogram("exponential", range=1000, sill=1.0, nugget=0.1))
        assert "exponential" in r
        assert "1000" in r


class TestDistanceMatrix:
    """Tests for distance matrices."""

    def test_self_distances(self):
        """Test symmetric self-distance matrix."""
        d = distance_matrix(np.array([[0.0, 0.0], [3.0, 4.0]]))
        np.testing.assert_allclose(d, [[0.0, 5.0], [5.0, 0.0]])

    def test_two_sets(self):
        """Test distances between two sets."""
        d = distance_matrix(np.array([[0.0, 0.0], [100.0, 0.0]]), np.array([[50.0, 0.0]]))
        assert d.shape == (2, 1)
        np.testing.assert_allclose(d[:, 0], [50.0, 50.0])

    def test_dimension_mismatch_raises(self):
        """Test mismatched dimensions are rejected."""
        with pytest.raises(InvalidInputError, match="dimensions differ"):
            distance_matrix(np.zeros((2, 2)), np.zeros((2, 3)))
