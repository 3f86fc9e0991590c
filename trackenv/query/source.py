"""
Environmental source loading shared by the query engines
"""

import logging
from collections.abc import Callable
from typing import Any

import numpy as np
from numpy.typing import NDArray

from trackenv.core.exceptions import ValidationError
from trackenv.core.matrix import DatedValueMatrix, is_tabular
from trackenv.core.samples import as_samples, same_crs
from trackenv.core.validation import as_dates, check_length
from trackenv.io.raster import as_stack

logger = logging.getLogger(__name__)


def load_matrix(
    xy: Any,
    obs_dates: NDArray,
    env_data: Any,
    env_dates: Any,
    radius: float | None = None,
    reducer: Callable | None = None,
    layer_filter: Callable[[NDArray], NDArray] | None = None,
) -> DatedValueMatrix:
    """
    Validate the inputs and build the dated value matrix for one call

    Args:
        xy: Sample locations (required for raster sources)
        obs_dates: Normalized sample observation dates
        env_data: Raster source or table with one row per sample
        env_dates: Layer acquisition dates
        radius: Optional smoothing radius (raster sources only)
        reducer: Optional smoothing reducer (raster sources only)
        layer_filter: Optional function mapping layer dates to a boolean mask
            of layers worth reading (raster sources only)

    Returns:
        DatedValueMatrix with one row per sample

    Raises:
        ValidationError: On any precondition violation
        ExtractionError: If the raster cannot be read
    """
    if env_data is None:
        raise ValidationError('"env_data" is missing')

    if is_tabular(env_data):
        matrix = DatedValueMatrix.from_table(env_data, env_dates)
        if xy is not None:
            check_length(obs_dates, len(as_samples(xy)), "obs_dates", "xy")
        check_length(obs_dates, matrix.n_samples, "obs_dates", "env_data")
        if radius is not None:
            logger.debug("env_data is tabular; ignoring spatial_buffer")
        return matrix

    if xy is None:
        raise ValidationError('"env_data" is a raster object. Please define "xy"')
    samples = as_samples(xy)

    stack, owned = as_stack(env_data)
    try:
        if not same_crs(samples.crs, stack.crs):
            raise ValidationError('"xy" and "env_data" have different projections')
        dates = as_dates(env_dates, "env_dates")
        check_length(dates, stack.count, "env_dates", "env_data")
        check_length(obs_dates, len(samples), "obs_dates", "xy")

        selected = stack
        if layer_filter is not None:
            keep = np.flatnonzero(layer_filter(dates))
            logger.debug("Reading %d of %d layers", keep.size, stack.count)
            selected = stack.subset(keep)
            dates = dates[keep]

        return DatedValueMatrix.from_raster(
            selected, dates, samples.coords, radius=radius, reducer=reducer
        )
    finally:
        if owned:
            stack.close()
