import json
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional, Dict, List

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .ratelimit import RateLimitInfo


class ErrorKind(str, Enum):
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    RATE_LIMIT = "rate_limit"
    TIMEOUT = "timeout"
    API = "api"


class ErrorType:
    """errorType values returned by the BoldDesk API."""
    NOT_EXIST = "NotExist"
    ALREADY_EXISTS = "AlreadyExists"
    FIELD_REQUIRED = "FieldRequired"
    INVALID_VALUE = "InvalidValue"
    LENGTH_EXCEEDS = "LengthExceeds"
    DETAILS_NOT_FOUND = "DetailsNotFound"
    UNAUTHORIZED = "Unauthorized"
    ACCESS_DENIED = "AccessDenied"
    NOT_FOUND = "NotFound"
    METHOD_NOT_ALLOWED = "MethodNotAllowed"
    UNSUPPORTED_MEDIA_TYPE = "UnsupportedMediaType"
    API_CALL_QUOTA_EXCEEDED = "APICallQuotaExceeded"
    UNKNOWN_ERROR = "UnknownError"


class ErrorDetail(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    field: str = ""
    error_message: str = Field("", alias="errorMessage")
    error_type: str = Field("", alias="errorType")

    @field_validator("field", "error_message", "error_type", mode="before")
    @classmethod
    def _none_is_blank(cls, v):
        return "" if v is None else v


class ErrorEnvelope(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    message: str = ""
    status_code: int = Field(0, alias="statusCode")
    errors: List[ErrorDetail] = Field(default_factory=list)

    @field_validator("message", mode="before")
    @classmethod
    def _none_is_blank(cls, v):
        return "" if v is None else v

    @field_validator("status_code", mode="before")
    @classmethod
    def _none_is_zero(cls, v):
        return 0 if v is None else v

    @field_validator("errors", mode="before")
    @classmethod
    def _none_is_empty(cls, v):
        if v is None:
            return []
        return [item for item in v if item is not None] if isinstance(v, list) else v


class BoldDeskError(Exception):
    """Base class for every failure surfaced by the client.

    ``kind`` identifies the variant so callers can dispatch on it without
    isinstance chains.
    """

    kind: ErrorKind = ErrorKind.API

    def __init__(self, message: str, *, status_code: int = 0, envelope: Optional[ErrorEnvelope] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.envelope = envelope

    @property
    def errors(self) -> List[ErrorDetail]:
        if self.envelope is None:
            return []
        return self.envelope.errors

    def has_field_error(self, field: str) -> bool:
        return self.get_field_error(field) is not None

    def get_field_error(self, field: str) -> Optional[ErrorDetail]:
        wanted = field.lower()
        return next((e for e in self.errors if e.field.lower() == wanted), None)

    def has_error_type(self, error_type: str) -> bool:
        return any(e.error_type == error_type for e in self.errors)

    def __str__(self) -> str:
        return self.message


class BoldDeskAuthenticationError(BoldDeskError):
    kind = ErrorKind.AUTHENTICATION


class BoldDeskValidationError(BoldDeskError):
    kind = ErrorKind.VALIDATION

    def __init__(self, message: str, *, status_code: int = 400, envelope: Optional[ErrorEnvelope] = None):
        super().__init__(message, status_code=status_code, envelope=envelope)
        self.field_errors: Dict[str, List[str]] = {}
        for detail in self.errors:
            if not detail.field:
                continue
            self.field_errors.setdefault(detail.field, []).append(detail.error_message)

    def get_field_errors(self, field: str) -> List[str]:
        return list(self.field_errors.get(field, []))

    def has_field_errors(self) -> bool:
        return bool(self.field_errors)


class BoldDeskRateLimitError(BoldDeskError):
    kind = ErrorKind.RATE_LIMIT

    def __init__(
        self,
        message: str,
        *,
        status_code: int = 429,
        envelope: Optional[ErrorEnvelope] = None,
        reset_time: Optional[datetime] = None,
        remaining_calls: Optional[int] = None,
        rate_limit_period: Optional[int] = None,
    ):
        super().__init__(message, status_code=status_code, envelope=envelope)
        self.reset_time = reset_time
        self.remaining_calls = remaining_calls
        self.rate_limit_period = rate_limit_period

    def get_wait_time(self, now: Optional[datetime] = None) -> Optional[timedelta]:
        if self.reset_time is None:
            return None
        now = now or datetime.now(timezone.utc)
        wait = self.reset_time - now
        return wait if wait > timedelta(0) else None


class BoldDeskTimeoutError(BoldDeskError):
    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, *, request_url: str = "", elapsed_ms: int = 0):
        super().__init__(message, status_code=0, envelope=None)
        self.request_url = request_url
        self.elapsed_ms = elapsed_ms


class BoldDeskApiError(BoldDeskError):
    kind = ErrorKind.API


# status -> (default message, default field, default errorType)
_DEFAULTS: Dict[int, tuple] = {
    400: ("Validation failed", "", ErrorType.INVALID_VALUE),
    401: ("Authentication failed. Please verify your API key.", "User", ErrorType.UNAUTHORIZED),
    403: ("Access denied. Your API key may not have permission to access this resource.", "UserID", ErrorType.ACCESS_DENIED),
    404: ("Resource not found", "", ErrorType.NOT_FOUND),
    405: ("Method not allowed", "", ErrorType.METHOD_NOT_ALLOWED),
    415: ("Unsupported media type", "", ErrorType.UNSUPPORTED_MEDIA_TYPE),
    429: ("Rate limit exceeded", "", ErrorType.API_CALL_QUOTA_EXCEEDED),
    500: ("Unable to process your request. Please try again later", "", ErrorType.UNKNOWN_ERROR),
    502: ("Unable to process your request. Please try again later", "", ErrorType.UNKNOWN_ERROR),
    503: ("Unable to process your request. Please try again later", "", ErrorType.UNKNOWN_ERROR),
    504: ("Unable to process your request. Please try again later", "", ErrorType.UNKNOWN_ERROR),
}


def _default_envelope(status_code: int) -> ErrorEnvelope:
    message, field, error_type = _DEFAULTS.get(
        status_code, (f"API request failed with status {status_code}", "", ErrorType.UNKNOWN_ERROR)
    )
    detail_message = "API calls quota exceeded" if status_code == 429 else message
    return ErrorEnvelope(
        message=message,
        status_code=status_code,
        errors=[ErrorDetail(field=field, error_message=detail_message, error_type=error_type)],
    )


def _raw_envelope(message: str, text: str, status_code: int) -> ErrorEnvelope:
    return ErrorEnvelope(
        message=message,
        status_code=status_code,
        errors=[ErrorDetail(field="", error_message=text, error_type=ErrorType.UNKNOWN_ERROR)],
    )


def parse_error_body(text: str, status_code: int) -> ErrorEnvelope:
    """Turn a non-2xx response body into an ErrorEnvelope.

    Never raises. Bodies that are not a JSON error object are kept verbatim
    as the envelope message with a single UnknownError entry.
    """
    if not text or not text.strip():
        return _default_envelope(status_code)
    try:
        payload = json.loads(text)
    except ValueError:
        payload = None
    if not isinstance(payload, dict):
        return _raw_envelope(text, text, status_code)
    try:
        envelope = ErrorEnvelope.model_validate(payload)
    except ValidationError:
        # Malformed entries; keep the server message when it has one.
        message = payload.get("message")
        return _raw_envelope(message if isinstance(message, str) and message else text, text, status_code)
    if not envelope.status_code:
        envelope.status_code = status_code
    return envelope


def classify_response(status_code: int, body_text: str, rate_limit: Optional[RateLimitInfo] = None) -> BoldDeskError:
    """Build the typed error for a failed HTTP response."""
    envelope = parse_error_body(body_text, status_code)
    default_message = _default_envelope(status_code).message
    message = envelope.message or default_message

    if status_code == 401:
        return BoldDeskAuthenticationError(message, status_code=status_code, envelope=envelope)
    if status_code == 400:
        return BoldDeskValidationError(message, status_code=status_code, envelope=envelope)
    if status_code == 429:
        info = rate_limit or RateLimitInfo()
        return BoldDeskRateLimitError(
            message,
            status_code=status_code,
            envelope=envelope,
            reset_time=info.reset,
            remaining_calls=info.remaining,
            rate_limit_period=info.limit,
        )
    return BoldDeskApiError(message, status_code=status_code, envelope=envelope)


def describe_error(error: BoldDeskError) -> List[str]:
    """Render an error as the lines shown to a terminal user."""
    lines: List[str] = []
    if error.kind is ErrorKind.AUTHENTICATION:
        lines.append(f"Authentication error: {error.message}")
        lines.extend(f"  - {e.field}: {e.error_message}" for e in error.errors if e.field)
    elif error.kind is ErrorKind.VALIDATION:
        lines.append(f"Validation error: {error.message}")
        for field, messages in getattr(error, "field_errors", {}).items():
            for msg in messages:
                lines.append(f"  - {field}: {msg}")
    elif error.kind is ErrorKind.RATE_LIMIT:
        lines.append(f"Rate limit exceeded: {error.message}")
        wait = error.get_wait_time()
        if wait is not None:
            lines.append(f"  Try again in {int(wait.total_seconds())} seconds.")
    elif error.kind is ErrorKind.TIMEOUT:
        lines.append(f"Request timed out after {error.elapsed_ms} ms: {error.request_url}")
    else:
        if error.status_code:
            lines.append(f"API error ({error.status_code}): {error.message}")
        else:
            lines.append(f"API error: {error.message}")
    return lines
