"""Base error classes for responses-lib-python.

Provides a layered error hierarchy:
- ResponsesLibError: Base class for all library errors
- ClassifiedError: Any API/transport failure, with semantic classification
- MaxRetriesExceededError: Automatic recovery gave up after retrying
"""

from __future__ import annotations

from contextlib import suppress
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any, TypeVar

import httpx

from responses_lib.errors import classification as _cls
from responses_lib.errors.classification import (
    ApiErrorPayload,
    ErrorClass,
    ErrorKind,
    Failure,
    classify_response,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from responses_lib.recovery.outcome import RecoveryOutcome

_E = TypeVar("_E", bound="ResponsesLibError")


@dataclass
class ErrorContext:
    """Structured error context for diagnostics."""

    field_path: str | None = None
    """Path to the problematic field (e.g., 'tools[0].container')"""

    details: dict[str, Any] = field(default_factory=dict)
    """Additional details about the error"""

    source: str | None = None
    """Error source (e.g., 'remote', 'transport', 'config')"""

    hint: str | None = None
    """Actionable hint for resolving the error"""

    def __str__(self) -> str:
        parts = []
        if self.source:
            parts.append(f"[{self.source}]")
        if self.field_path:
            parts.append(f"at '{self.field_path}'")
        if self.hint:
            parts.append(f"(hint: {self.hint})")
        return " ".join(parts)


class ResponsesLibError(Exception):
    """Base class for all responses-lib-python errors.

    Attributes:
        message: Human-readable error message
        context: Structured error context
    """

    def __init__(
        self,
        message: str,
        context: ErrorContext | None = None,
    ) -> None:
        self.message = message
        self.context = context or ErrorContext()
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = str(self.context)
        if ctx_str:
            return f"{self.message} {ctx_str}"
        return self.message

    def with_hint(self: _E, hint: str) -> _E:
        """Return a copy of this error carrying `hint`; the original is unchanged."""
        clone = type(self).__new__(type(self))
        clone.__dict__.update(self.__dict__)
        clone.context = replace(self.context, details=dict(self.context.details), hint=hint)
        clone.args = (clone._format_message(),)
        clone.__cause__ = self.__cause__
        return clone


def _decode_body(response: httpx.Response) -> Any:
    with suppress(ValueError, httpx.ResponseNotRead):
        return response.json()
    return None


_AUTH_HINT = "Check that your API key is valid and has access to this resource"

_SOURCES: dict[ErrorKind, str] = {
    ErrorKind.TIMEOUT: "transport",
    ErrorKind.CONNECT: "transport",
    ErrorKind.REQUEST: "transport",
    ErrorKind.TRANSPORT: "transport",
    ErrorKind.JSON: "decode",
    ErrorKind.STREAM: "stream",
    ErrorKind.INVALID_API_KEY: "config",
    ErrorKind.API_KEY_NOT_FOUND: "config",
    ErrorKind.CONTEXT_RECOVERY: "recovery",
}


class ClassifiedError(ResponsesLibError):
    """A failure together with its semantic classification.

    Constructed once where the raw failure is first observed and not
    modified afterwards. Recovery decisions only look at this object.

    Attributes:
        failure: Immutable failure description
        error_class: Derived semantic class
    """

    def __init__(self, failure: Failure, context: ErrorContext | None = None) -> None:
        if context is None:
            ctx = ErrorContext(source=_SOURCES.get(failure.kind, "remote"))
        else:
            ctx = replace(context, details=dict(context.details))
        ctx.details["kind"] = failure.kind.value
        if failure.status_code is not None:
            ctx.details["status_code"] = failure.status_code
        if failure.request_id:
            ctx.details["request_id"] = failure.request_id
        if failure.param and ctx.field_path is None:
            ctx.field_path = failure.param
        if failure.kind is ErrorKind.AUTHENTICATION and ctx.hint is None:
            ctx.hint = _AUTH_HINT
        self.failure = failure
        self.error_class: ErrorClass = _cls.classify(failure)
        super().__init__(self._describe(failure), ctx)

    @staticmethod
    def _describe(failure: Failure) -> str:
        kind = failure.kind
        if kind is ErrorKind.CONTAINER_EXPIRED:
            return f"Container expired: {failure.message}"
        if kind is ErrorKind.API:
            return (
                f"API error: {failure.message} "
                f"(type: {failure.error_type}, code: {failure.code})"
            )
        if kind is ErrorKind.RATE_LIMITED:
            return f"Rate limited: {failure.message}"
        if kind is ErrorKind.AUTHENTICATION:
            return f"Authentication failed: {failure.message}"
        return failure.message or kind.value.replace("_", " ")

    # -- convenience accessors -------------------------------------------

    @property
    def kind(self) -> ErrorKind:
        return self.failure.kind

    @property
    def status_code(self) -> int | None:
        return self.failure.status_code

    @property
    def request_id(self) -> str | None:
        return self.failure.request_id

    def is_container_expired(self) -> bool:
        return self.error_class.is_container_expired

    def is_recoverable(self) -> bool:
        return _cls.is_recoverable(self.failure)

    def is_transient(self) -> bool:
        return _cls.is_transient(self.failure)

    def retry_after(self) -> float | None:
        return _cls.retry_after(self.failure)

    def user_message(self) -> str:
        return _cls.user_message(self.failure)

    # -- constructors ----------------------------------------------------

    @classmethod
    def container_expired(cls, message: str) -> ClassifiedError:
        """Create an explicitly tagged container-expiration error."""
        return cls(Failure(kind=ErrorKind.CONTAINER_EXPIRED, message=message))

    @classmethod
    def from_api_error(
        cls,
        payload: ApiErrorPayload,
        *,
        status_code: int | None = None,
        request_id: str | None = None,
    ) -> ClassifiedError:
        """Create an error from a structured API error payload."""
        return cls(
            Failure(
                kind=ErrorKind.API,
                message=payload.message,
                status_code=status_code,
                request_id=request_id,
                error_type=payload.error_type,
                code=payload.code,
                param=payload.param,
            )
        )

    @classmethod
    def from_response(
        cls,
        status_code: int,
        body: Any = None,
        headers: Mapping[str, str] | None = None,
    ) -> ClassifiedError:
        """Create an error from a non-success HTTP response.

        Args:
            status_code: HTTP status code
            body: Response body (parsed JSON), None if it could not be decoded
            headers: Response headers

        Returns:
            ClassifiedError with appropriate classification
        """
        return cls(classify_response(status_code, body, headers))

    @classmethod
    def from_httpx_response(cls, response: httpx.Response) -> ClassifiedError:
        """Create an error from a completed non-success httpx response."""
        headers = dict(response.headers)
        return cls.from_response(response.status_code, _decode_body(response), headers)

    @classmethod
    def from_transport_error(
        cls, error: httpx.HTTPError, *, url: str | None = None
    ) -> ClassifiedError:
        """Create an error from an httpx exception.

        `HTTPStatusError` (from `raise_for_status()`) carries a completed
        response and is classified by status, headers and body.
        """
        if isinstance(error, httpx.HTTPStatusError):
            classified = cls.from_httpx_response(error.response)
            classified.__cause__ = error
            return classified
        if isinstance(error, httpx.TimeoutException):
            kind = ErrorKind.TIMEOUT
            text = f"Request timed out: {error}"
        elif isinstance(error, httpx.ConnectError):
            kind = ErrorKind.CONNECT
            text = f"Connection failed: {error}"
        elif isinstance(error, (httpx.NetworkError, httpx.RemoteProtocolError)):
            kind = ErrorKind.REQUEST
            text = f"Request failed: {error}"
        else:
            kind = ErrorKind.TRANSPORT
            text = f"HTTP error: {error}"
        ctx = ErrorContext(source="transport")
        if url:
            ctx.details["url"] = url
        classified = cls(Failure(kind=kind, message=text), ctx)
        classified.__cause__ = error
        return classified

    @classmethod
    def simple(cls, kind: ErrorKind, message: str) -> ClassifiedError:
        """Create an error of a kind that carries only a message."""
        return cls(Failure(kind=kind, message=message))


class MaxRetriesExceededError(ClassifiedError):
    """Automatic recovery exhausted its retry budget.

    Carries the same failure description as the last error, so its
    classification and predicates are identical to it.

    Attributes:
        attempts: Total number of attempts made (initial + retries)
        last_error: The most recent classified error
        outcome: Recovery metadata for the call
    """

    def __init__(
        self,
        last_error: ClassifiedError,
        attempts: int,
        outcome: RecoveryOutcome | None = None,
    ) -> None:
        ctx = ErrorContext(
            source="recovery",
            details=dict(last_error.context.details),
            hint=last_error.context.hint,
        )
        ctx.details["attempts"] = attempts
        super().__init__(last_error.failure, ctx)
        self.message = f"Maximum retry attempts exceeded ({attempts}): {last_error.message}"
        self.args = (self._format_message(),)
        self.attempts = attempts
        self.last_error = last_error
        self.outcome = outcome
        self.__cause__ = last_error
