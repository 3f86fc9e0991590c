"""
trackenv Core Module

Temporal window logic, dated value matrices, samples, reducers and exceptions.
"""

from trackenv.core.exceptions import (
    ExtractionError,
    QueryError,
    TrackEnvError,
    ValidationError,
)
from trackenv.core.matrix import DatedValueMatrix
from trackenv.core.reducers import (
    DEFAULT_SMOOTH_FUN,
    DEFAULT_STAT_FUN,
    ols_slope,
    weighted_mean_square,
)
from trackenv.core.samples import Samples, as_samples, same_crs
from trackenv.core.window import TimeWindow, eligible_mask, nearest_layer, window_mask

__all__ = [
    # Classes
    "DatedValueMatrix",
    "Samples",
    "TimeWindow",
    # Functions
    "as_samples",
    "eligible_mask",
    "nearest_layer",
    "ols_slope",
    "same_crs",
    "weighted_mean_square",
    "window_mask",
    # Defaults
    "DEFAULT_SMOOTH_FUN",
    "DEFAULT_STAT_FUN",
    # Exceptions
    "ExtractionError",
    "QueryError",
    "TrackEnvError",
    "ValidationError",
]
