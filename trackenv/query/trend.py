"""
Directional change of environmental conditions in time

For every sample, gathers the non-missing layer values acquired inside a
(before, after) day window around the observation date and summarizes them
with a statistic of (time, value), by default the least-squares slope.
"""

import logging
from collections.abc import Callable
from functools import partial
from typing import Any

import numpy as np
import pandas as pd

from trackenv.core.exceptions import ValidationError
from trackenv.core.matrix import is_tabular
from trackenv.core.reducers import DEFAULT_STAT_FUN, to_scalar
from trackenv.core.validation import as_dates, check_function, check_min_count
from trackenv.core.window import TimeWindow, eligible_mask
from trackenv.query.source import load_matrix

logger = logging.getLogger(__name__)

DEFAULT_MIN_COUNT = 2
EPOCH = np.datetime64("1970-01-01", "D")


def time_dir(
    xy: Any = None,
    obs_dates: Any = None,
    env_data: Any = None,
    env_dates: Any = None,
    temporal_buffer: Any = None,
    stat_fun: Callable | None = None,
    min_count: int = DEFAULT_MIN_COUNT,
) -> pd.DataFrame:
    """
    Summarize how environmental conditions change in time around each sample

    For each sample, layers acquired within ``temporal_buffer`` of the
    observation date and holding a non-missing value are selected, and
    ``stat_fun(x, y)`` is applied with ``x`` the layer dates as days since
    1970-01-01 and ``y`` the values. ``temporal_buffer=(30, 0)`` describes
    how the landscape evolved over the 30 days up to the observation.

    Args:
        xy: Sample locations (GeoDataFrame, GeoSeries or Samples). Required
            when env_data is a raster.
        obs_dates: Observation date of each sample
        env_data: RasterStack, rasterio dataset, xarray DataArray, raster
            path(s), or a DataFrame / 2-D array with one row per sample and
            one column per layer
        env_dates: Acquisition date of each layer
        temporal_buffer: (before, after) window in days, inclusive
        stat_fun: Statistic of (x, y) returning a scalar (default: ols_slope)
        min_count: Minimum number of values required by stat_fun

    Returns:
        DataFrame with a ``value`` column, one row per sample in input order;
        NaN where fewer than ``min_count`` values are available

    Raises:
        ValidationError: If any input is missing, malformed or inconsistent
        ExtractionError: If the raster cannot be read
        QueryError: If stat_fun returns something other than a scalar

    Examples:
        >>> result = time_dir(
        ...     xy=tracks, obs_dates=tracks["date"], env_data=stack,
        ...     env_dates=dates, temporal_buffer=(30, 30),
        ... )
        >>> result["value"].describe()
    """
    obs = as_dates(obs_dates, "obs_dates")
    if temporal_buffer is None:
        raise ValidationError('"temporal_buffer" is missing')
    window = TimeWindow.parse(temporal_buffer, "temporal_buffer")
    check_function(stat_fun, "stat_fun")
    min_count = check_min_count(min_count)
    if stat_fun is None:
        stat_fun = DEFAULT_STAT_FUN

    # only layers some sample window can reach are read
    layer_filter = None if is_tabular(env_data) else partial(window.span_mask, obs)

    matrix = load_matrix(xy, obs, env_data, env_dates, layer_filter=layer_filter)
    times = (matrix.dates - EPOCH).astype(np.float64)

    result = np.full(len(obs), np.nan)
    for i, obs_date in enumerate(obs):
        row = matrix.row(i)
        keep = eligible_mask(obs_date, matrix.dates, row, window)
        if keep.sum() >= min_count:
            result[i] = to_scalar(stat_fun(times[keep], row[keep]), "stat_fun")

    logger.info(
        "Summarized %d samples over %d layers: %d defined",
        len(obs),
        matrix.n_layers,
        int((~np.isnan(result)).sum()),
    )
    return pd.DataFrame({"value": result})
