"""Tests for error-body parsing and the error taxonomy."""

import json
from datetime import datetime, timedelta, timezone

import pytest

from bolddesk.errors import (
    BoldDeskApiError,
    BoldDeskAuthenticationError,
    BoldDeskRateLimitError,
    BoldDeskTimeoutError,
    BoldDeskValidationError,
    ErrorKind,
    ErrorType,
    classify_response,
    describe_error,
    parse_error_body,
)
from bolddesk.ratelimit import RateLimitInfo

VALIDATION_BODY = json.dumps({
    "message": "Invalid",
    "statusCode": 400,
    "errors": [{"field": "email", "errorMessage": "required", "errorType": "FieldRequired"}],
})


def test_validation_body_maps_field_errors():
    error = classify_response(400, VALIDATION_BODY)
    assert isinstance(error, BoldDeskValidationError)
    assert error.kind is ErrorKind.VALIDATION
    assert error.status_code == 400
    assert error.message == "Invalid"
    assert error.get_field_errors("email") == ["required"]
    assert error.has_field_errors()
    assert error.has_error_type(ErrorType.FIELD_REQUIRED)


def test_field_lookup_is_case_insensitive():
    error = classify_response(400, VALIDATION_BODY)
    assert error.has_field_error("EMAIL")
    assert error.get_field_error("Email").error_message == "required"
    assert not error.has_field_error("phone")


def test_get_field_errors_returns_a_copy():
    error = classify_response(400, VALIDATION_BODY)
    error.get_field_errors("email").append("tampered")
    assert error.get_field_errors("email") == ["required"]
    assert error.get_field_errors("missing") == []


def test_repeated_field_errors_accumulate():
    body = json.dumps({
        "message": "Validation failed",
        "errors": [
            {"field": "name", "errorMessage": "too long"},
            {"field": "name", "errorMessage": "invalid characters"},
            {"field": "", "errorMessage": "general problem"},
        ],
    })
    error = classify_response(400, body)
    assert error.field_errors == {"name": ["too long", "invalid characters"]}


def test_non_json_body_is_kept_verbatim():
    error = classify_response(502, "<html>Bad gateway</html>")
    assert isinstance(error, BoldDeskApiError)
    assert error.message == "<html>Bad gateway</html>"
    assert error.errors[0].error_type == ErrorType.UNKNOWN_ERROR
    assert error.errors[0].error_message == "<html>Bad gateway</html>"


def test_json_array_body_is_kept_verbatim():
    envelope = parse_error_body('["oops"]', 400)
    assert envelope.message == '["oops"]'
    assert envelope.status_code == 400
    assert len(envelope.errors) == 1


def test_null_error_type_keeps_field_errors():
    body = json.dumps({
        "message": "Invalid",
        "statusCode": 400,
        "errors": [{"field": "email", "errorMessage": "required", "errorType": None}],
    })
    error = classify_response(400, body)
    assert error.message == "Invalid"
    assert error.get_field_errors("email") == ["required"]
    assert error.errors[0].error_type == ""


def test_null_field_next_to_a_real_field():
    body = json.dumps({
        "message": "Invalid",
        "statusCode": None,
        "errors": [
            {"field": None, "errorMessage": "general problem"},
            {"field": "name", "errorMessage": "too long", "errorType": "LengthExceeds"},
        ],
    })
    error = classify_response(400, body)
    assert error.status_code == 400
    assert error.envelope.status_code == 400
    assert error.field_errors == {"name": ["too long"]}
    assert len(error.errors) == 2


def test_null_errors_list_keeps_message():
    body = json.dumps({"message": "Not allowed", "statusCode": 403, "errors": None})
    error = classify_response(403, body)
    assert isinstance(error, BoldDeskApiError)
    assert error.message == "Not allowed"
    assert error.errors == []


def test_malformed_entries_keep_server_message():
    envelope = parse_error_body(json.dumps({"message": "Bad", "errors": "oops"}), 400)
    assert envelope.message == "Bad"
    assert envelope.errors[0].error_type == ErrorType.UNKNOWN_ERROR


@pytest.mark.parametrize("status, error_class, message", [
    (401, BoldDeskAuthenticationError, "Authentication failed. Please verify your API key."),
    (403, BoldDeskApiError, "Access denied. Your API key may not have permission to access this resource."),
    (404, BoldDeskApiError, "Resource not found"),
    (405, BoldDeskApiError, "Method not allowed"),
    (415, BoldDeskApiError, "Unsupported media type"),
    (500, BoldDeskApiError, "Unable to process your request. Please try again later"),
    (429, BoldDeskRateLimitError, "Rate limit exceeded"),
])
def test_empty_body_defaults(status, error_class, message):
    error = classify_response(status, "")
    assert type(error) is error_class
    assert error.message == message
    assert error.status_code == status


def test_default_field_for_auth_errors():
    assert classify_response(401, "").errors[0].field == "User"
    assert classify_response(403, "").errors[0].field == "UserID"


def test_rate_limit_default_detail():
    error = classify_response(429, "   ")
    assert error.errors[0].error_message == "API calls quota exceeded"
    assert error.errors[0].error_type == ErrorType.API_CALL_QUOTA_EXCEEDED


def test_unknown_status_default_message():
    assert classify_response(418, "").message == "API request failed with status 418"


def test_envelope_without_message_gets_default():
    error = classify_response(404, json.dumps({"errors": []}))
    assert error.message == "Resource not found"


def test_rate_limit_error_carries_snapshot():
    now = datetime(2025, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
    info = RateLimitInfo(limit=100, remaining=0, reset=now + timedelta(seconds=30))
    error = classify_response(429, "", info)
    assert error.kind is ErrorKind.RATE_LIMIT
    assert error.remaining_calls == 0
    assert error.rate_limit_period == 100
    assert error.reset_time == now + timedelta(seconds=30)
    assert error.get_wait_time(now) == timedelta(seconds=30)
    assert error.get_wait_time(now + timedelta(minutes=1)) is None


def test_rate_limit_wait_time_unknown_without_reset():
    assert BoldDeskRateLimitError("Rate limit exceeded").get_wait_time() is None


def test_str_is_the_message():
    assert str(classify_response(404, "")) == "Resource not found"


def test_describe_validation_error():
    assert describe_error(classify_response(400, VALIDATION_BODY)) == [
        "Validation error: Invalid",
        "  - email: required",
    ]


def test_describe_authentication_error():
    lines = describe_error(classify_response(401, ""))
    assert lines[0] == "Authentication error: Authentication failed. Please verify your API key."


def test_describe_rate_limit_error():
    error = BoldDeskRateLimitError(
        "Rate limit exceeded",
        reset_time=datetime.now(timezone.utc) + timedelta(seconds=45),
    )
    lines = describe_error(error)
    assert lines[0] == "Rate limit exceeded: Rate limit exceeded"
    assert lines[1].startswith("  Try again in ")
    assert lines[1].endswith(" seconds.")


def test_describe_timeout_and_api_errors():
    timeout = BoldDeskTimeoutError("timed out", request_url="https://acme.bolddesk.com/api/v1.0/tickets", elapsed_ms=1500)
    assert describe_error(timeout) == ["Request timed out after 1500 ms: https://acme.bolddesk.com/api/v1.0/tickets"]
    assert describe_error(classify_response(404, "")) == ["API error (404): Resource not found"]
    assert describe_error(BoldDeskApiError("Network error")) == ["API error: Network error"]
