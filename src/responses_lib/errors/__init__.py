"""Error hierarchy and failure classification for responses-lib-python."""

from responses_lib.errors.base import (
    ClassifiedError,
    ErrorContext,
    MaxRetriesExceededError,
    ResponsesLibError,
)
from responses_lib.errors.classification import (
    ApiErrorPayload,
    ErrorClass,
    ErrorKind,
    Failure,
    classify,
    classify_response,
    is_recoverable,
    is_transient,
    retry_after,
    user_message,
)

__all__ = [
    "ApiErrorPayload",
    "ClassifiedError",
    "ErrorClass",
    "ErrorContext",
    "ErrorKind",
    "Failure",
    "MaxRetriesExceededError",
    "ResponsesLibError",
    "classify",
    "classify_response",
    "is_recoverable",
    "is_transient",
    "retry_after",
    "user_message",
]
