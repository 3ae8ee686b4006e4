"""
Tests for decoding docker status lines.
"""

import pytest

from imagesync.exceptions import StreamDecodeError, StreamState
from imagesync.status import ErrorSignal, ProgressDetail, Status


class TestStatusDecode:
    """Test Status.from_json."""

    def test_full_line(self):
        """Test decoding a line with every field present."""
        status = Status.from_json(
            b'{"status":"Downloading","id":"a1b2","progressDetail":{"current":512,"total":2048}}'
        )

        assert status.message == "Downloading"
        assert status.id == "a1b2"
        assert status.progress_detail == ProgressDetail(current=512, total=2048)

    def test_missing_fields_default_to_zero(self):
        """Test that absent fields take zero values."""
        status = Status.from_json('{"status":"Pull complete"}')

        assert status.id == ""
        assert status.progress_detail.current == 0
        assert status.progress_detail.total == 0

    def test_null_and_empty_progress_detail(self):
        """Test that null and empty objects are accepted."""
        assert Status.from_json('{"status":null,"progressDetail":null}') == Status()
        assert Status.from_json('{"progressDetail":{}}') == Status()

    def test_invalid_json(self):
        """Test that malformed JSON raises a decode failure."""
        with pytest.raises(StreamDecodeError, match="unmarshal status") as exc_info:
            Status.from_json(b'{"status": "Downloading"')

        assert exc_info.value.state is StreamState.DECODE_FAILURE
        assert exc_info.value.__cause__ is not None

    def test_not_an_object(self):
        """Test that a JSON array is rejected."""
        with pytest.raises(StreamDecodeError, match="unmarshal status"):
            Status.from_json(b'["Downloading"]')

    def test_wrong_field_types(self):
        """Test that mistyped fields are rejected."""
        with pytest.raises(StreamDecodeError):
            Status.from_json('{"status": 3}')
        with pytest.raises(StreamDecodeError):
            Status.from_json('{"progressDetail": "half"}')
        with pytest.raises(StreamDecodeError):
            Status.from_json('{"progressDetail": {"current": "10"}}')
        with pytest.raises(StreamDecodeError):
            Status.from_json('{"progressDetail": {"total": true}}')

    def test_invalid_utf8(self):
        """Test that undecodable bytes raise a decode failure."""
        with pytest.raises(StreamDecodeError):
            Status.from_json(b'\xff\xfe{}')


class TestGetMessage:
    """Test Status.get_message."""

    @pytest.mark.parametrize("message", [
        "Pulling from library/nginx",
        "The push refers to repository [registry.example.com/app]",
    ])
    def test_started(self, message):
        """Test start phrases map to Started."""
        status = Status(message=message, progress_detail=ProgressDetail(current=1, total=10))

        assert status.get_message() == "Started"

    def test_progress(self):
        """Test that a known total reports bytes."""
        status = Status(message="Downloading", progress_detail=ProgressDetail(current=512, total=2048))

        assert status.get_message() == "Processing 512B of 2048B"

    @pytest.mark.parametrize("status", [
        Status(),
        Status(message="Pull complete"),
        Status(message="Something unexpected", progress_detail=ProgressDetail(current=5, total=0)),
    ])
    def test_default(self, status):
        """Test that anything else maps to Processing."""
        assert status.get_message() == "Processing"


class TestErrorSignal:
    """Test ErrorSignal.from_json."""

    def test_error_present(self):
        """Test decoding an error line."""
        signal = ErrorSignal.from_json(
            b'{"errorDetail":{"message":"manifest unknown"},"error":"manifest unknown"}'
        )

        assert signal.error == "manifest unknown"
        assert signal

    def test_no_error(self):
        """Test that a status line carries no error."""
        signal = ErrorSignal.from_json(b'{"status":"Downloading"}')

        assert signal.error == ""
        assert not signal

    def test_wrong_type(self):
        """Test that a non-string error is a decode failure."""
        with pytest.raises(StreamDecodeError, match="unmarshal error"):
            ErrorSignal.from_json(b'{"error":{"message":"boom"}}')
