"""
trackenv I/O Module

Raster stacks and point extraction.
"""

from trackenv.io.sampling import extract
from trackenv.io.raster import RasterStack, as_stack, parse_layer_dates

__all__ = ["RasterStack", "as_stack", "extract", "parse_layer_dates"]
