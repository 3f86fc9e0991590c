"""
Tests for exceptions
"""

import pytest

from trackenv.core.exceptions import (
    ExtractionError,
    QueryError,
    TrackEnvError,
    ValidationError,
)


class TestExceptions:
    """Test exception hierarchy"""

    def test_base_exception(self):
        """Test TrackEnvError"""
        with pytest.raises(TrackEnvError):
            raise TrackEnvError("Test error")

    def test_validation_error(self):
        """Test ValidationError inherits from TrackEnvError and ValueError"""
        with pytest.raises(TrackEnvError):
            raise ValidationError("Validation failed")

        with pytest.raises(ValueError):
            raise ValidationError("Validation failed")

    def test_extraction_error(self):
        """Test ExtractionError inherits from TrackEnvError"""
        with pytest.raises(TrackEnvError):
            raise ExtractionError("Extraction failed")

    def test_query_error(self):
        """Test QueryError inherits from TrackEnvError"""
        with pytest.raises(TrackEnvError):
            raise QueryError("Query failed")

    def test_exception_messages(self):
        """Test exception messages are preserved"""
        msg = '"xy" is missing'

        try:
            raise ValidationError(msg)
        except ValidationError as e:
            assert str(e) == msg
