"""Unit tests for the normalized error taxonomy."""

import json

import pytest
from hypothesis import given
from hypothesis import strategies as st

from mcp_docker_gateway.utils.errors import (
    DEFAULT_RETRY_AFTER_SECONDS,
    AuthenticationFailure,
    Conflict,
    ConnectionFailure,
    GatewayError,
    GenericBackendError,
    InternalUpstreamError,
    NotFound,
    RateLimitExceeded,
    UnexpectedError,
    ValidationFailure,
    describe_error_for_logging,
    error_from_status,
    extract_upstream_message,
    parse_retry_after,
)


class TestErrorFromStatus:
    """Test the status-to-kind mapping."""

    @pytest.mark.parametrize(
        "status,kind,code",
        [
            (400, ValidationFailure, "VALIDATION_ERROR"),
            (401, AuthenticationFailure, "AUTHENTICATION_FAILED"),
            (403, AuthenticationFailure, "AUTHENTICATION_FAILED"),
            (404, NotFound, "NOT_FOUND"),
            (409, Conflict, "CONFLICT"),
            (429, GenericBackendError, "DOCKER_ERROR"),
            (500, InternalUpstreamError, "INTERNAL_ERROR"),
            (502, InternalUpstreamError, "INTERNAL_ERROR"),
            (503, ConnectionFailure, "CONNECTION_ERROR"),
            (418, GenericBackendError, "DOCKER_ERROR"),
            (304, GenericBackendError, "DOCKER_ERROR"),
        ],
    )
    def test_mapping(self, status, kind, code):
        """Test each documented status."""
        error = error_from_status(status, json.dumps({"message": "boom"}))
        assert type(error) is kind
        assert error.code == code
        assert error.status_code == status
        assert error.message == "boom"

    @given(st.integers(min_value=300, max_value=599))
    def test_mapping_is_total(self, status: int) -> None:
        """Test that every non-2xx status maps to exactly one gateway error."""
        error = error_from_status(status, "")
        assert isinstance(error, GatewayError)
        assert error.status_code == status

    def test_validation_field_errors_extracted(self):
        """Test that structured field errors survive into the details."""
        body = json.dumps({"message": "invalid", "errors": {"name": "required"}})
        error = error_from_status(400, body)
        assert error.details()["details"] == {"name": "required"}


class TestRetryability:
    """Test which kinds are retryable."""

    @pytest.mark.parametrize(
        "error,retryable",
        [
            (ValidationFailure("x"), False),
            (AuthenticationFailure("x"), False),
            (NotFound("x"), False),
            (Conflict("x"), False),
            (RateLimitExceeded("x"), True),
            (InternalUpstreamError("x"), True),
            (ConnectionFailure("x"), True),
            (GenericBackendError("x"), False),
            (UnexpectedError("x"), False),
        ],
    )
    def test_flags(self, error, retryable):
        """Test the retryable flag of every kind."""
        assert error.retryable is retryable
        assert error.details()["retryable"] is retryable


class TestDetails:
    """Test the detail fields carried by failure envelopes."""

    def test_status_code_included_when_known(self):
        """Test statusCode presence."""
        assert NotFound("gone").details() == {
            "code": "NOT_FOUND",
            "retryable": False,
            "statusCode": 404,
        }

    def test_status_code_omitted_when_unknown(self):
        """Test that errors without a status leave statusCode out."""
        assert "statusCode" not in UnexpectedError("boom").details()

    def test_rate_limit_carries_retry_after(self):
        """Test retryAfterSeconds in rate limit details."""
        details = RateLimitExceeded("slow down", retry_after_seconds=30).details()
        assert details["retryAfterSeconds"] == 30
        assert details["statusCode"] == 429


class TestExtractUpstreamMessage:
    """Test pulling messages out of upstream error bodies."""

    @pytest.mark.parametrize(
        "body,expected",
        [
            ('{"message": "No such container: abc"}', "No such container: abc"),
            ('{"error": "bad"}', "bad"),
            ('{"detail": "object not found"}', "object not found"),
            ('{"message": "", "detail": "fallback"}', "fallback"),
            ("plain failure\n", "plain failure"),
            ("", "HTTP 500"),
        ],
    )
    def test_bodies(self, body, expected):
        """Test each body shape."""
        assert extract_upstream_message(body, 500) == expected


class TestParseRetryAfter:
    """Test Retry-After parsing."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("30", 30),
            (" 5 ", 5),
            ("0", 0),
            (None, DEFAULT_RETRY_AFTER_SECONDS),
            ("soon", DEFAULT_RETRY_AFTER_SECONDS),
            ("-4", DEFAULT_RETRY_AFTER_SECONDS),
        ],
    )
    def test_values(self, value, expected):
        """Test numeric, absent and invalid values."""
        assert parse_retry_after(value) == expected

    @given(st.integers(min_value=0, max_value=86400))
    def test_any_non_negative_integer(self, seconds: int) -> None:
        """Test that any non-negative integer round-trips."""
        assert parse_retry_after(str(seconds)) == seconds


def test_describe_error_for_logging():
    """Test flattening errors for structured logs."""
    record = describe_error_for_logging(Conflict("name in use"))
    assert record["name"] == "Conflict"
    assert record["code"] == "CONFLICT"
    assert record["message"] == "name in use"

    plain = describe_error_for_logging(RuntimeError("oops"))
    assert plain == {"name": "RuntimeError", "message": "oops"}
