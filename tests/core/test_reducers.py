"""
Tests for default reducers
"""

import numpy as np
import pytest

from trackenv.core.exceptions import QueryError
from trackenv.core.reducers import (
    DEFAULT_SMOOTH_FUN,
    DEFAULT_STAT_FUN,
    ols_slope,
    to_scalar,
    weighted_mean_square,
)


class TestWeightedMeanSquare:
    """Test the default smoothing reducer"""

    def test_value(self):
        """Test sum(x^2) / sum(x)"""
        assert weighted_mean_square(np.array([1.0, 3.0])) == pytest.approx(2.5)

    def test_ignores_missing(self):
        """Test NaN values are dropped"""
        assert weighted_mean_square(np.array([1.0, np.nan, 3.0])) == pytest.approx(2.5)

    def test_single_value(self):
        """Test a single value is returned unchanged"""
        assert weighted_mean_square(np.array([7.0])) == pytest.approx(7.0)

    def test_empty(self):
        """Test empty and all-missing neighborhoods give NaN"""
        assert np.isnan(weighted_mean_square(np.array([])))
        assert np.isnan(weighted_mean_square(np.array([np.nan, np.nan])))

    def test_is_default(self):
        """Test the default smoothing reducer"""
        assert DEFAULT_SMOOTH_FUN is weighted_mean_square


class TestOlsSlope:
    """Test the default trend statistic"""

    def test_linear(self):
        """Test slope of an exact line"""
        x = np.array([19723.0, 19726.0, 19731.0])
        assert ols_slope(x, 2 * x + 5) == pytest.approx(2.0)

    def test_noisy(self):
        """Test slope matches numpy polyfit"""
        x = np.array([0.0, 1.0, 2.0, 3.0])
        y = np.array([1.0, 2.5, 2.0, 4.0])
        assert ols_slope(x, y) == pytest.approx(np.polyfit(x, y, 1)[0])

    def test_identical_x(self):
        """Test undefined slope gives NaN"""
        assert np.isnan(ols_slope(np.array([3.0, 3.0]), np.array([1.0, 2.0])))

    def test_single_point(self):
        """Test a single point gives NaN"""
        assert np.isnan(ols_slope(np.array([1.0]), np.array([1.0])))

    def test_is_default(self):
        """Test the default trend statistic"""
        assert DEFAULT_STAT_FUN is ols_slope


class TestToScalar:
    """Test reducer result coercion"""

    @pytest.mark.parametrize("value", [3, 3.0, np.float32(3), np.array([3.0]), [3]])
    def test_scalar(self, value):
        """Test single numeric values are accepted"""
        assert to_scalar(value, "stat_fun") == 3.0

    def test_multiple_values(self):
        """Test arrays are rejected"""
        with pytest.raises(QueryError, match='"stat_fun" returned 2 values'):
            to_scalar(np.array([1.0, 2.0]), "stat_fun")

    def test_non_numeric(self):
        """Test non-numeric results are rejected"""
        with pytest.raises(QueryError, match="non-numeric"):
            to_scalar("abc", "smooth_fun")
        with pytest.raises(QueryError, match="non-numeric"):
            to_scalar(None, "smooth_fun")
