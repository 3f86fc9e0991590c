"""
Default reducers

Spatial smoothing reducers take a 1-D array of neighborhood values and
return a scalar. Trend statistics take (x, y) arrays, where x are layer
dates as days since 1970-01-01, and return a scalar.
"""

import numpy as np
from numpy.typing import NDArray
from scipy import stats

from trackenv.core.exceptions import QueryError


def weighted_mean_square(values: NDArray) -> float:
    """
    Value-weighted mean of a neighborhood: ``sum(x**2) / sum(x)``

    Missing values are ignored. An empty or all-missing neighborhood gives NaN.

    Examples:
        >>> weighted_mean_square(np.array([1.0, 3.0, np.nan]))
        2.5
    """
    values = np.asarray(values, dtype=np.float64)
    values = values[~np.isnan(values)]
    if values.size == 0:
        return np.nan
    with np.errstate(divide="ignore", invalid="ignore"):
        return float(np.sum(values * values) / values.sum())


def ols_slope(x: NDArray, y: NDArray) -> float:
    """
    Slope of the ordinary least-squares line of ``y`` on ``x``

    Returns NaN when every x is identical (slope undefined).

    Examples:
        >>> ols_slope(np.array([0.0, 1.0, 2.0]), np.array([1.0, 3.0, 5.0]))
        2.0
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    if x.size < 2 or np.ptp(x) == 0:
        return np.nan
    return float(stats.linregress(x, y).slope)


DEFAULT_SMOOTH_FUN = weighted_mean_square
DEFAULT_STAT_FUN = ols_slope


def to_scalar(result, name: str) -> float:
    """
    Coerce a reducer result to float

    Raises:
        QueryError: If the result is not a single numeric value
    """
    array = np.asarray(result)
    if array.size != 1:
        raise QueryError(f'"{name}" returned {array.size} values, expected a scalar')
    try:
        return float(array.reshape(-1)[0])
    except (TypeError, ValueError):
        raise QueryError(f'"{name}" returned a non-numeric value') from None
