"""Error classification for Responses API failures.

Maps a failure description (transport error, HTTP status, or structured API
error payload) to one of six semantic error classes carrying retry metadata.
Classification is a pure function of the failure description.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

if TYPE_CHECKING:
    from collections.abc import Mapping


class ErrorClass(str, Enum):
    """Semantic error classification used for recovery decisions."""

    CONTAINER_EXPIRED = "container_expired"
    """Explicitly tagged container expiration."""

    API_CONTAINER_EXPIRED = "api_container_expired"
    """Structured API error whose message reports an expired container/session."""

    RETRYABLE_SERVER = "retryable_server"
    """Gateway failure (502/503/504) or a server error marked retryable."""

    RATE_LIMITED = "rate_limited"
    """HTTP 429."""

    TRANSIENT_HTTP = "transient_http"
    """Timeout, connection failure or generic send failure."""

    NON_RECOVERABLE = "non_recoverable"
    """Everything else: auth, validation, decode failures, unknown API errors."""

    @property
    def is_container_expired(self) -> bool:
        return self in (ErrorClass.CONTAINER_EXPIRED, ErrorClass.API_CONTAINER_EXPIRED)


class ErrorKind(str, Enum):
    """Concrete shape of a failure, as observed at the boundary."""

    CONTAINER_EXPIRED = "container_expired"
    API = "api"
    BAD_GATEWAY = "bad_gateway"
    SERVICE_UNAVAILABLE = "service_unavailable"
    GATEWAY_TIMEOUT = "gateway_timeout"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    AUTHENTICATION = "authentication"
    BAD_REQUEST = "bad_request"
    HTTP_STATUS = "http_status"
    TIMEOUT = "timeout"
    CONNECT = "connect"
    REQUEST = "request"
    TRANSPORT = "transport"
    JSON = "json"
    STREAM = "stream"
    INVALID_API_KEY = "invalid_api_key"
    API_KEY_NOT_FOUND = "api_key_not_found"
    CONTEXT_RECOVERY = "context_recovery"


# Message fragments that mark an API error as a container expiration
CONTAINER_EXPIRED_MARKERS: tuple[str, ...] = (
    "container is expired",
    "container expired",
    "session expired",
)

# Message fragments that make a 5xx error fatal
FATAL_SERVER_MARKERS: tuple[str, ...] = ("permanent", "invalid", "malformed")

_GATEWAY_KINDS = frozenset(
    {ErrorKind.BAD_GATEWAY, ErrorKind.SERVICE_UNAVAILABLE, ErrorKind.GATEWAY_TIMEOUT}
)

# Transport shapes eligible for retry. REQUEST (generic send failure) is
# recoverable but not transient.
_RECOVERABLE_TRANSPORT_KINDS = frozenset(
    {ErrorKind.TIMEOUT, ErrorKind.CONNECT, ErrorKind.REQUEST}
)
_TRANSIENT_TRANSPORT_KINDS = frozenset({ErrorKind.TIMEOUT, ErrorKind.CONNECT})

_DEFAULT_RETRY_AFTER: dict[ErrorKind, float] = {
    ErrorKind.BAD_GATEWAY: 30.0,
    ErrorKind.SERVICE_UNAVAILABLE: 60.0,
    ErrorKind.GATEWAY_TIMEOUT: 45.0,
    ErrorKind.RATE_LIMITED: 60.0,
    ErrorKind.CONTAINER_EXPIRED: 1.0,
    ErrorKind.TIMEOUT: 10.0,
    ErrorKind.CONNECT: 3.0,
}

_SERVER_ERROR_RETRY_AFTER = 5.0


@dataclass(frozen=True)
class Failure:
    """Immutable description of a single failure.

    Attributes:
        kind: Concrete failure shape
        message: Raw message (API error message, transport error text, ...)
        status_code: HTTP status, when the failure came from a response
        retryable: Server-error retryability (only meaningful for SERVER_ERROR)
        retry_after: Explicit delay from a Retry-After header, in seconds
        request_id: Request ID header, for diagnostics
        error_type: `type` field of a structured API error
        code: `code` field of a structured API error
        param: `param` field of a structured API error
    """

    kind: ErrorKind
    message: str = ""
    status_code: int | None = None
    retryable: bool = False
    retry_after: float | None = None
    request_id: str | None = None
    error_type: str | None = None
    code: str | None = None
    param: str | None = None


def mentions_container_expiry(message: str) -> bool:
    """Check whether a message reports an expired container or session."""
    lowered = message.lower()
    return any(marker in lowered for marker in CONTAINER_EXPIRED_MARKERS)


def is_server_error_retryable(message: str) -> bool:
    """A 5xx error is retryable unless its message marks it as fatal."""
    lowered = message.lower()
    return not any(marker in lowered for marker in FATAL_SERVER_MARKERS)


def classify(failure: Failure) -> ErrorClass:
    """Classify a failure into an ErrorClass.

    Rules are checked in priority order; the first match wins.

    Args:
        failure: Failure description

    Returns:
        The semantic error class (never raises)
    """
    kind = failure.kind
    if kind is ErrorKind.CONTAINER_EXPIRED:
        return ErrorClass.CONTAINER_EXPIRED
    if kind is ErrorKind.API and mentions_container_expiry(failure.message):
        return ErrorClass.API_CONTAINER_EXPIRED
    if kind in _GATEWAY_KINDS or (kind is ErrorKind.SERVER_ERROR and failure.retryable):
        return ErrorClass.RETRYABLE_SERVER
    if kind is ErrorKind.RATE_LIMITED:
        return ErrorClass.RATE_LIMITED
    if kind in _RECOVERABLE_TRANSPORT_KINDS:
        return ErrorClass.TRANSIENT_HTTP
    return ErrorClass.NON_RECOVERABLE


def is_recoverable(failure: Failure) -> bool:
    """Whether an automatic retry has a reasonable chance of succeeding."""
    error_class = classify(failure)
    if error_class is ErrorClass.NON_RECOVERABLE:
        return False
    if error_class is ErrorClass.TRANSIENT_HTTP:
        return failure.kind in _RECOVERABLE_TRANSPORT_KINDS
    return True


def is_transient(failure: Failure) -> bool:
    """Like is_recoverable, but excludes generic send failures."""
    if not is_recoverable(failure):
        return False
    if classify(failure) is ErrorClass.TRANSIENT_HTTP:
        return failure.kind in _TRANSIENT_TRANSPORT_KINDS
    return True


def retry_after(failure: Failure) -> float | None:
    """Delay before retrying, in seconds.

    An explicit header value wins; otherwise a per-kind default applies.
    """
    if failure.retry_after is not None:
        return failure.retry_after
    if failure.kind is ErrorKind.SERVER_ERROR:
        return _SERVER_ERROR_RETRY_AFTER if failure.retryable else None
    return _DEFAULT_RETRY_AFTER.get(failure.kind)


def _in_seconds(prefix: str, delay: float | None, fallback: str) -> str:
    if delay is None:
        return f"{prefix} {fallback}"
    return f"{prefix} in {delay:g} seconds."


def user_message(failure: Failure) -> str:
    """Friendly, complete sentence describing the failure."""
    kind = failure.kind
    delay = retry_after(failure)
    if kind is ErrorKind.CONTAINER_EXPIRED or (
        kind is ErrorKind.API and mentions_container_expiry(failure.message)
    ):
        return "Your code execution session expired. Please try again."
    if kind is ErrorKind.RATE_LIMITED:
        return _in_seconds("Rate limit exceeded. Please try again", delay, "shortly.")
    if kind is ErrorKind.BAD_GATEWAY:
        return _in_seconds(
            "The service is temporarily unreachable. Please try again", delay, "shortly."
        )
    if kind is ErrorKind.SERVICE_UNAVAILABLE:
        return _in_seconds(
            "The service is temporarily unavailable. Please try again", delay, "shortly."
        )
    if kind is ErrorKind.GATEWAY_TIMEOUT:
        return _in_seconds(
            "The service took too long to respond. Please try again", delay, "shortly."
        )
    if kind is ErrorKind.SERVER_ERROR:
        if failure.retryable:
            return "The service encountered a temporary error. Please try again."
        return "The service could not process this request. Please contact support if it persists."
    if kind is ErrorKind.AUTHENTICATION:
        return "Authentication failed. Please check your API key and permissions."
    if kind in (ErrorKind.BAD_REQUEST, ErrorKind.API):
        return "The request was rejected. Please check the request parameters."
    if kind is ErrorKind.TIMEOUT:
        return "The request timed out. Please try again."
    if kind is ErrorKind.CONNECT:
        return "Could not connect to the service. Please check your network connection."
    if kind in (ErrorKind.INVALID_API_KEY, ErrorKind.API_KEY_NOT_FOUND):
        return "No valid API key is configured. Please set your API key."
    if kind is ErrorKind.JSON:
        return "The service returned a response that could not be read. Please try again later."
    return "An unexpected error occurred. Please try again later."


class ApiErrorPayload(BaseModel):
    """Structured error body: `{"error": {"message", "type", "code", "param"}}`."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    message: str = ""
    error_type: str = Field(default="", alias="type")
    code: str | None = None
    param: str | None = None

    @classmethod
    def parse(cls, body: Any) -> ApiErrorPayload | None:
        """Parse the standard error envelope.

        Args:
            body: Decoded JSON body

        Returns:
            The payload, or None when the body does not have the expected shape
        """
        if not isinstance(body, dict):
            return None
        error = body.get("error")
        if not isinstance(error, dict) or not isinstance(error.get("message"), str):
            return None
        try:
            return cls.model_validate(error)
        except ValidationError:
            return None


def header_value(headers: Mapping[str, str] | None, *names: str) -> str | None:
    """Case-insensitive header lookup over a plain mapping."""
    if not headers:
        return None
    lowered = {key.lower(): value for key, value in headers.items()}
    for name in names:
        value = lowered.get(name.lower())
        if value:
            return value
    return None


def parse_retry_after(headers: Mapping[str, str] | None) -> float | None:
    """Read `Retry-After` as whole seconds; anything else is ignored."""
    raw = header_value(headers, "retry-after")
    if raw is None:
        return None
    try:
        seconds = int(raw.strip())
    except ValueError:
        return None
    return float(seconds) if seconds >= 0 else None


def parse_request_id(headers: Mapping[str, str] | None) -> str | None:
    return header_value(headers, "x-request-id", "request-id")


_STATUS_KINDS: dict[int, ErrorKind] = {
    502: ErrorKind.BAD_GATEWAY,
    503: ErrorKind.SERVICE_UNAVAILABLE,
    504: ErrorKind.GATEWAY_TIMEOUT,
    429: ErrorKind.RATE_LIMITED,
}


def classify_response(
    status_code: int,
    body: Any = None,
    headers: Mapping[str, str] | None = None,
) -> Failure:
    """Turn a non-success HTTP exchange into a Failure.

    Headers are read first; 502/503/504/429 are classified by status alone.

    Args:
        status_code: HTTP status code (must not be 2xx)
        body: Decoded JSON body, or None when it could not be decoded
        headers: Response headers

    Returns:
        Failure description for the response
    """
    delay = parse_retry_after(headers)
    request_id = parse_request_id(headers)
    payload = ApiErrorPayload.parse(body)

    if status_code in _STATUS_KINDS:
        return Failure(
            kind=_STATUS_KINDS[status_code],
            message=f"HTTP {status_code}",
            status_code=status_code,
            retry_after=delay,
            request_id=request_id,
        )

    if status_code in (401, 403):
        message = payload.message if payload else f"HTTP {status_code}"
        return Failure(
            kind=ErrorKind.AUTHENTICATION,
            message=message,
            status_code=status_code,
            request_id=request_id,
        )

    if status_code in (400, 422):
        if payload is not None:
            return Failure(
                kind=ErrorKind.API,
                message=payload.message,
                status_code=status_code,
                request_id=request_id,
                error_type=payload.error_type,
                code=payload.code,
                param=payload.param,
            )
        return Failure(
            kind=ErrorKind.BAD_REQUEST,
            message=f"Client error (HTTP {status_code})",
            status_code=status_code,
            request_id=request_id,
        )

    if 500 <= status_code < 600:
        if payload is not None:
            return Failure(
                kind=ErrorKind.SERVER_ERROR,
                message=payload.message,
                status_code=status_code,
                retryable=is_server_error_retryable(payload.message),
                retry_after=delay,
                request_id=request_id,
                error_type=payload.error_type,
                code=payload.code,
                param=payload.param,
            )
        return Failure(
            kind=ErrorKind.SERVER_ERROR,
            message=f"Server error (HTTP {status_code})",
            status_code=status_code,
            retryable=True,
            retry_after=delay,
            request_id=request_id,
        )

    if payload is not None:
        return Failure(
            kind=ErrorKind.API,
            message=payload.message,
            status_code=status_code,
            request_id=request_id,
            error_type=payload.error_type,
            code=payload.code,
            param=payload.param,
        )
    return Failure(
        kind=ErrorKind.HTTP_STATUS,
        message=f"HTTP {status_code}",
        status_code=status_code,
        request_id=request_id,
    )
