"""
Nearest-in-time environmental query

For every sample, picks the non-missing layer value acquired closest to the
sample observation date, optionally within a (before, after) day window.
"""

import logging
from collections.abc import Callable
from typing import Any

import numpy as np
import pandas as pd

from trackenv.core.reducers import DEFAULT_SMOOTH_FUN
from trackenv.core.validation import as_dates, check_function, check_radius
from trackenv.core.window import TimeWindow, nearest_layer
from trackenv.query.source import load_matrix

logger = logging.getLogger(__name__)


def data_query(
    xy: Any = None,
    obs_dates: Any = None,
    env_data: Any = None,
    env_dates: Any = None,
    time_buffer: Any = None,
    spatial_buffer: float | None = None,
    smooth_fun: Callable | None = None,
) -> pd.DataFrame:
    """
    Query environmental data for samples using the nearest non-missing value in time

    Within the window given by ``time_buffer`` the nearest non-missing value
    is returned for each sample. ``time_buffer=(30, 0)`` ignores layers
    acquired after the observation date and looks back at most 30 days;
    without a window every layer is considered. Equidistant layers resolve
    to the first one in layer order.

    With ``spatial_buffer`` the cells within that distance (in CRS units) of
    each sample are reduced with ``smooth_fun``, by default the weighted mean
    ``sum(x**2) / sum(x)``. Both are ignored for tabular ``env_data``.

    Args:
        xy: Sample locations (GeoDataFrame, GeoSeries or Samples). Optional
            when env_data is tabular.
        obs_dates: Observation date of each sample
        env_data: RasterStack, rasterio dataset, xarray DataArray, raster
            path(s), or a DataFrame / 2-D array with one row per sample and
            one column per layer
        env_dates: Acquisition date of each layer
        time_buffer: Optional (before, after) search window in days, inclusive
        spatial_buffer: Optional smoothing radius in CRS units
        smooth_fun: Optional smoothing reducer taking an array of values

    Returns:
        DataFrame with columns ``value`` and ``date``, one row per sample in
        input order; NaN / NaT where no eligible value exists

    Raises:
        ValidationError: If any input is missing, malformed or inconsistent
        ExtractionError: If the raster cannot be read

    Examples:
        >>> stack = RasterStack.open(files)
        >>> dates = parse_layer_dates(stack.names, "X%Y.%m.%d")
        >>> result = data_query(
        ...     xy=tracks, obs_dates=tracks["date"], env_data=stack,
        ...     env_dates=dates, time_buffer=(30, 30),
        ... )
        >>> result.columns.tolist()
        ['value', 'date']
    """
    obs = as_dates(obs_dates, "obs_dates")
    radius = check_radius(spatial_buffer)
    window = TimeWindow.parse(time_buffer, "time_buffer")

    if radius is None:
        if smooth_fun is not None:
            logger.debug("spatial_buffer not set; ignoring smooth_fun")
        smooth_fun = None
    else:
        check_function(smooth_fun, "smooth_fun")
        if smooth_fun is None:
            smooth_fun = DEFAULT_SMOOTH_FUN

    matrix = load_matrix(xy, obs, env_data, env_dates, radius=radius, reducer=smooth_fun)

    values = np.full(len(obs), np.nan)
    dates = np.full(len(obs), np.datetime64("NaT"), dtype="datetime64[D]")
    for i, obs_date in enumerate(obs):
        row = matrix.row(i)
        index = nearest_layer(obs_date, matrix.dates, row, window)
        if index is not None:
            values[i] = row[index]
            dates[i] = matrix.dates[index]

    logger.info(
        "Queried %d samples against %d layers: %d matched",
        len(obs),
        matrix.n_layers,
        int((~np.isnan(values)).sum()),
    )
    return pd.DataFrame({"value": values, "date": pd.to_datetime(dates)})
