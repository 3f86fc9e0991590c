"""
Temporal window logic

Finds, for one observation date, the layers that fall inside an optional
(before, after) day window and the nearest of them in time. All functions
are pure: the observation date, the layer dates, the layer values and the
window are passed explicitly.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Any, Optional

import numpy as np
from numpy.typing import NDArray

from trackenv.core.exceptions import ValidationError


@dataclass(frozen=True)
class TimeWindow:
    """
    Inclusive search window around an observation date

    Attributes:
        before: Days before the observation date
        after: Days after the observation date

    Examples:
        >>> window = TimeWindow(30, 0)  # only the previous 30 days
        >>> window.bounds()
        (-30.0, 0.0)
    """

    before: float
    after: float

    @classmethod
    def parse(cls, value: Any, name: str = "time_buffer") -> Optional["TimeWindow"]:
        """
        Build a window from a two element numeric pair

        Args:
            value: None, a TimeWindow, or a (before, after) pair in days
            name: Argument name used in error messages

        Returns:
            TimeWindow, or None if value is None

        Raises:
            ValidationError: If value is not a two element numeric pair
        """
        if value is None or isinstance(value, cls):
            return value
        if isinstance(value, (str, bytes)):
            raise ValidationError(f'"{name}" is not numeric')
        try:
            items = list(np.asarray(value).ravel()) if isinstance(value, np.ndarray) else list(value)
        except TypeError:
            raise ValidationError(f'"{name}" is not numeric') from None
        for item in items:
            if isinstance(item, (bool, np.bool_)) or not isinstance(item, numbers.Real):
                raise ValidationError(f'"{name}" is not numeric')
            if not math.isfinite(item):
                raise ValidationError(f'"{name}" is not numeric')
        if len(items) != 2:
            raise ValidationError(f'"{name}" should be a two element vector')
        return cls(before=float(items[0]), after=float(items[1]))

    def bounds(self) -> tuple[float, float]:
        """Window bounds as day offsets relative to the observation date"""
        return (-self.before, self.after)

    def span_mask(self, obs_dates: NDArray, layer_dates: NDArray) -> NDArray:
        """
        Layers inside the union of all sample windows

        The union is ``[min(obs_dates) - before, max(obs_dates) + after]``.
        """
        if len(obs_dates) == 0:
            return np.zeros(len(layer_dates), dtype=bool)
        first = day_offsets(np.min(obs_dates), layer_dates)
        last = day_offsets(np.max(obs_dates), layer_dates)
        return (first >= -self.before) & (last <= self.after)


def day_offsets(obs_date: np.datetime64, layer_dates: NDArray) -> NDArray:
    """Signed distance in days from ``obs_date`` to each layer date"""
    return (layer_dates - obs_date).astype(np.float64)


def window_mask(
    obs_date: np.datetime64, layer_dates: NDArray, window: TimeWindow | None
) -> NDArray:
    """Layers whose date lies inside the window (all layers if no window)"""
    if window is None:
        return np.ones(len(layer_dates), dtype=bool)
    offsets = day_offsets(obs_date, layer_dates)
    start, end = window.bounds()
    return (offsets >= start) & (offsets <= end)


def eligible_mask(
    obs_date: np.datetime64,
    layer_dates: NDArray,
    values: NDArray,
    window: TimeWindow | None = None,
) -> NDArray:
    """Layers that are inside the window and hold a non-missing value"""
    return window_mask(obs_date, layer_dates, window) & ~np.isnan(values)


def nearest_layer(
    obs_date: np.datetime64,
    layer_dates: NDArray,
    values: NDArray,
    window: TimeWindow | None = None,
) -> int | None:
    """
    Index of the eligible layer closest in time to ``obs_date``

    Equidistant layers resolve to the first one in layer order.

    Args:
        obs_date: Sample observation date
        layer_dates: Layer acquisition dates
        values: Layer values for this sample (NaN = missing)
        window: Optional inclusive search window

    Returns:
        Layer index, or None if no layer is eligible

    Examples:
        >>> dates = np.array(["2024-01-01", "2024-01-09"], dtype="datetime64[D]")
        >>> nearest_layer(np.datetime64("2024-01-05"), dates, np.array([1.0, 2.0]))
        0
    """
    candidates = np.flatnonzero(eligible_mask(obs_date, layer_dates, values, window))
    if candidates.size == 0:
        return None
    distance = np.abs(day_offsets(obs_date, layer_dates[candidates]))
    return int(candidates[np.argmin(distance)])
