"""
trackenv Exceptions

Exception hierarchy for error handling.
"""


class TrackEnvError(Exception):
    """Base exception for trackenv"""

    pass


class ValidationError(TrackEnvError, ValueError):
    """Input validation failed"""

    pass


class ExtractionError(TrackEnvError):
    """Raster value extraction failed"""

    pass


class QueryError(TrackEnvError):
    """Query execution failed"""

    pass
