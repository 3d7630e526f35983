"""Unit tests for engine stream decoding."""

import struct

import pytest

from mcp_docker_gateway.utils.errors import AuthenticationFailure, GenericBackendError, NotFound
from mcp_docker_gateway.utils.streams import (
    check_progress,
    demultiplex,
    is_multiplexed,
    progress_error,
    split_progress,
)


def _frame(stream: int, data: bytes) -> bytes:
    return bytes([stream, 0, 0, 0]) + struct.pack(">I", len(data)) + data


class TestDemultiplex:
    """Test stripping of stream frame headers."""

    def test_stdout_and_stderr_frames_joined(self):
        """Test interleaved stdout and stderr frames."""
        payload = _frame(1, b"hello\n") + _frame(2, b"warn\n") + _frame(1, b"bye\n")
        assert demultiplex(payload) == "hello\nwarn\nbye\n"

    def test_raw_tty_output_returned_as_is(self):
        """Test that TTY output without headers is decoded directly."""
        assert demultiplex(b"plain output\n") == "plain output\n"

    def test_empty_payload(self):
        """Test empty input."""
        assert demultiplex(b"") == ""

    def test_truncated_trailing_frame_kept(self):
        """Test that a short final frame still yields its bytes."""
        payload = _frame(1, b"complete\n") + bytes([1, 0, 0, 0]) + struct.pack(">I", 50) + b"part"
        assert demultiplex(payload) == "complete\npart"

    def test_invalid_utf8_replaced(self):
        """Test that undecodable bytes do not raise."""
        assert "�" in demultiplex(_frame(1, b"\xff\xfe"))


def test_is_multiplexed():
    """Test header detection."""
    assert is_multiplexed(_frame(1, b"x")) is True
    assert is_multiplexed(b"hello world") is False
    assert is_multiplexed(b"\x01\x00") is False


class TestProgress:
    """Test pull and push progress streams."""

    def test_split_keeps_non_json_lines(self):
        """Test line splitting of a mixed answer."""
        assert split_progress('{"status":"a"}\n\nplain\n') == [{"status": "a"}, "plain"]
        assert split_progress({"status": "one"}) == [{"status": "one"}]
        assert split_progress(None) == []

    @pytest.mark.parametrize(
        "message,kind",
        [
            ("manifest for nginx:nope not found: manifest unknown", NotFound),
            ("denied: requested access to the resource is denied", AuthenticationFailure),
            ("unexpected EOF", GenericBackendError),
        ],
    )
    def test_error_line_classified(self, message, kind):
        """Test the error kind chosen for in-stream failures."""
        error = progress_error([{"status": "Pulling"}, {"error": message}])
        assert isinstance(error, kind)
        assert error.message == message

    def test_error_detail_only(self):
        """Test an error carried only in errorDetail."""
        error = progress_error([{"errorDetail": {"message": "unexpected EOF"}}])
        assert isinstance(error, GenericBackendError)

    def test_check_progress_raises(self):
        """Test that a failed stream raises instead of returning text."""
        with pytest.raises(NotFound):
            check_progress('{"status":"Pulling"}\n{"error":"manifest unknown"}\n')

    def test_check_progress_text(self):
        """Test the rendered status lines of a clean stream."""
        stream = '{"status":"Pushing","id":"l1","progress":"[=>]"}\n{"status":"Pushed","id":"l1"}\n'
        assert check_progress(stream) == "l1: Pushed"
