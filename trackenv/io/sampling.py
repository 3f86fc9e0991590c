"""
Point sampling of raster stacks

Extracts a (samples x layers) value matrix at point locations, optionally
reducing the cells within a radius of each point to a single value.
"""

import logging
import math
from collections.abc import Callable

import numpy as np
from numpy.typing import NDArray
from rasterio.transform import rowcol
from rasterio.windows import Window

from trackenv.core.exceptions import ExtractionError
from trackenv.core.reducers import DEFAULT_SMOOTH_FUN, to_scalar
from trackenv.io.raster import RasterStack

logger = logging.getLogger(__name__)

# Largest window (in cells) read in one piece per layer; beyond it each
# sample reads its own window.
MAX_BLOCK_CELLS = 4096 * 4096


class _CellReader:
    """Reads cell ranges of one layer, from a shared block when it fits"""

    def __init__(self, layer, row_start: int, row_stop: int, col_start: int, col_stop: int):
        self.layer = layer
        self.row_start = row_start
        self.col_start = col_start
        self.block = None
        if (row_stop - row_start) * (col_stop - col_start) <= MAX_BLOCK_CELLS:
            self.block = layer.read(
                Window(col_start, row_start, col_stop - col_start, row_stop - row_start)
            )

    def cells(self, row_start: int, row_stop: int, col_start: int, col_stop: int) -> NDArray:
        if self.block is None:
            return self.layer.read(
                Window(col_start, row_start, col_stop - col_start, row_stop - row_start)
            )
        return self.block[
            row_start - self.row_start : row_stop - self.row_start,
            col_start - self.col_start : col_stop - self.col_start,
        ]


def _pixel_reach(transform, radius: float | None) -> tuple[int, int]:
    """Number of rows and columns a radius can span"""
    if not radius:
        return 0, 0
    return math.ceil(radius / abs(transform.e)), math.ceil(radius / abs(transform.a))


def _extract_layer(
    coords: NDArray,
    layer,
    radius: float | None,
    reducer: Callable,
) -> NDArray:
    transform = layer.transform
    if transform.b != 0 or transform.d != 0:
        raise ExtractionError(f"Rotated rasters are not supported (layer {layer.name})")

    result = np.full(coords.shape[0], np.nan)
    rows, cols = rowcol(transform, coords[:, 0], coords[:, 1])
    rows = np.asarray(rows, dtype=np.int64).reshape(-1)
    cols = np.asarray(cols, dtype=np.int64).reshape(-1)
    inside = (rows >= 0) & (rows < layer.height) & (cols >= 0) & (cols < layer.width)

    reach_rows, reach_cols = _pixel_reach(transform, radius)
    row_start = max(int(rows.min()) - reach_rows, 0)
    row_stop = min(int(rows.max()) + reach_rows + 1, layer.height)
    col_start = max(int(cols.min()) - reach_cols, 0)
    col_stop = min(int(cols.max()) + reach_cols + 1, layer.width)
    if row_stop <= row_start or col_stop <= col_start:
        return result

    reader = _CellReader(layer, row_start, row_stop, col_start, col_stop)

    if radius is None:
        for i in np.flatnonzero(inside):
            result[i] = reader.cells(rows[i], rows[i] + 1, cols[i], cols[i] + 1)[0, 0]
        return result

    for i, (x, y) in enumerate(coords):
        r0 = max(rows[i] - reach_rows, 0)
        r1 = min(rows[i] + reach_rows + 1, layer.height)
        c0 = max(cols[i] - reach_cols, 0)
        c1 = min(cols[i] + reach_cols + 1, layer.width)
        if r1 <= r0 or c1 <= c0:
            continue

        # cell centres of the candidate neighborhood
        centre_x = transform.c + (np.arange(c0, c1) + 0.5) * transform.a
        centre_y = transform.f + (np.arange(r0, r1) + 0.5) * transform.e
        distance = np.hypot(centre_x[np.newaxis, :] - x, centre_y[:, np.newaxis] - y)
        within = distance <= radius

        if within.any():
            values = reader.cells(r0, r1, c0, c1)[within]
        elif inside[i]:
            values = reader.cells(rows[i], rows[i] + 1, cols[i], cols[i] + 1).ravel()
        else:
            continue

        values = values[~np.isnan(values)]
        if values.size:
            result[i] = to_scalar(reducer(values), "smooth_fun")

    return result


def extract(
    coords: NDArray,
    stack: RasterStack,
    radius: float | None = None,
    reducer: Callable | None = None,
) -> NDArray:
    """
    Sample every layer of a stack at point locations

    Args:
        coords: Array of shape (n, 2) with x, y in the stack CRS
        stack: RasterStack to sample
        radius: Optional neighborhood radius in CRS units. Cells whose centre
            lies within the radius are reduced with ``reducer``; if no centre
            does, the cell containing the point is used.
        reducer: Neighborhood reducer (default: weighted_mean_square). Only
            used with ``radius``; receives the non-missing values.

    Returns:
        float64 array of shape (n, stack.count); NaN for nodata cells, points
        outside the raster and all-missing neighborhoods

    Raises:
        ExtractionError: If a layer cannot be read

    Examples:
        >>> with RasterStack.open(["ndvi.tif"]) as stack:
        ...     values = extract(samples.coords, stack, radius=500.0)
    """
    coords = np.asarray(coords, dtype=np.float64).reshape(-1, 2)
    if reducer is None:
        reducer = DEFAULT_SMOOTH_FUN

    values = np.full((coords.shape[0], stack.count), np.nan)
    if coords.shape[0] == 0:
        return values

    for j in range(stack.count):
        values[:, j] = _extract_layer(coords, stack.layer(j), radius, reducer)

    logger.debug(
        "Extracted %d samples x %d layers (radius=%s)", coords.shape[0], stack.count, radius
    )
    return values
