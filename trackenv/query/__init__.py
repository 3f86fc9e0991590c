"""
trackenv Query Module

Nearest-in-time queries and temporal trend summaries.
"""

from trackenv.query.nearest import data_query
from trackenv.query.trend import DEFAULT_MIN_COUNT, time_dir

__all__ = ["DEFAULT_MIN_COUNT", "data_query", "time_dir"]
