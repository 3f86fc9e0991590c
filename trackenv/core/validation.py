"""
Precondition checks shared by the query engines.

Every check raises ValidationError with a one-line message naming the
offending argument, before any extraction work starts.
"""

import datetime
import math
import numbers
from typing import Any

import numpy as np
import pandas as pd
from numpy.typing import NDArray

from trackenv.core.exceptions import ValidationError


def as_dates(values: Any, name: str) -> NDArray:
    """
    Normalize a date vector to ``datetime64[D]``

    Accepts numpy datetime64 arrays, pandas DatetimeIndex / datetime Series,
    and sequences (including object Series such as ``df[col].dt.date``) of ``datetime.date``, ``datetime.datetime``,
    ``pandas.Timestamp`` or ``numpy.datetime64`` scalars. Strings and plain
    numbers are rejected.

    Args:
        values: Date vector
        name: Argument name used in error messages

    Returns:
        1-D ``datetime64[D]`` array

    Raises:
        ValidationError: If values is missing, not date-like, or contains NaT

    Examples:
        >>> as_dates(pd.date_range("2024-01-01", periods=3), "env_dates")
        array(['2024-01-01', '2024-01-02', '2024-01-03'], dtype='datetime64[D]')
    """
    if values is None:
        raise ValidationError(f'"{name}" is missing')

    if isinstance(values, (pd.Index, pd.Series)) and pd.api.types.is_datetime64_any_dtype(
        values.dtype
    ):
        index = pd.DatetimeIndex(values)
    elif isinstance(values, np.ndarray) and values.dtype.kind == "M":
        if values.ndim != 1:
            raise ValidationError(f'"{name}" should be one-dimensional')
        index = pd.DatetimeIndex(values)
    elif isinstance(values, (str, bytes)) or not hasattr(values, "__iter__"):
        raise ValidationError(f'"{name}" is not of a valid class')
    else:
        items = list(values)
        if not all(isinstance(v, (datetime.date, np.datetime64)) for v in items):
            raise ValidationError(f'"{name}" is not of a valid class')
        index = pd.DatetimeIndex(items)

    if index.tz is not None:
        index = index.tz_localize(None)
    if index.hasnans:
        raise ValidationError(f'"{name}" contains missing dates')

    return index.to_numpy().astype("datetime64[D]")


def check_function(fun: Any, name: str) -> None:
    """Raise if ``fun`` is given but not callable"""
    if fun is not None and not callable(fun):
        raise ValidationError(f'"{name}" is not a valid function')


def check_radius(radius: Any, name: str = "spatial_buffer") -> float | None:
    """
    Validate a spatial smoothing radius

    Returns:
        The radius as float, or None if not given
    """
    if radius is None:
        return None
    if isinstance(radius, bool) or not isinstance(radius, numbers.Real):
        raise ValidationError(f'"{name}" assigned but not numeric')
    radius = float(radius)
    if not math.isfinite(radius) or radius < 0:
        raise ValidationError(f'"{name}" should be a non-negative number')
    return radius


def check_min_count(min_count: Any) -> int:
    """Validate the minimum number of values required by a statistic"""
    if isinstance(min_count, bool) or not isinstance(min_count, numbers.Integral):
        raise ValidationError('"min_count" should be a positive integer')
    if min_count < 1:
        raise ValidationError('"min_count" should be a positive integer')
    return int(min_count)


def check_length(values: NDArray, expected: int, name: str, other: str) -> None:
    """Raise if a date vector does not match the size of what it describes"""
    if len(values) != expected:
        raise ValidationError(f'lengths of "{name}" and "{other}" differ')
