"""
trackenv - Relate animal-tracking samples to dated raster layers

Quick Start:
    >>> import geopandas as gpd
    >>> import trackenv as te
    >>>
    >>> tracks = gpd.read_file("tracks.gpkg")
    >>> stack = te.RasterStack.open(sorted(Path("ndvi").glob("*.tif")))
    >>> dates = te.parse_layer_dates(stack.names, "ndvi_%Y-%m-%d")
    >>>
    >>> # Nearest non-missing NDVI within 30 days of each observation
    >>> nearest = te.data_query(tracks, tracks["date"], stack, dates, time_buffer=(30, 30))
    >>>
    >>> # NDVI slope over the 30 days before each observation
    >>> trend = te.time_dir(tracks, tracks["date"], stack, dates, temporal_buffer=(30, 0))
"""

from trackenv.core import (
    DatedValueMatrix,
    ExtractionError,
    QueryError,
    Samples,
    TimeWindow,
    TrackEnvError,
    ValidationError,
    ols_slope,
    same_crs,
    weighted_mean_square,
)
from trackenv.io import RasterStack, extract, parse_layer_dates
from trackenv.query import data_query, time_dir

__version__ = "0.1.0"

__all__ = [
    "DatedValueMatrix",
    "ExtractionError",
    "QueryError",
    "RasterStack",
    "Samples",
    "TimeWindow",
    "TrackEnvError",
    "ValidationError",
    "__version__",
    "data_query",
    "extract",
    "ols_slope",
    "parse_layer_dates",
    "same_crs",
    "time_dir",
    "weighted_mean_square",
]
