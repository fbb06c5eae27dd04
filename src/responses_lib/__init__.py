"""responses-lib-python: Responses API client with automatic error recovery.

Failures are classified into a small set of semantic error classes, and a
configurable recovery policy retries recoverable ones, repairing requests
that reference expired execution containers.
"""
from __future__ import annotations

from responses_lib.client import Responses, ResponsesClient
from responses_lib.config import ClientConfig
from responses_lib.errors import (
    ClassifiedError,
    ErrorClass,
    ErrorKind,
    MaxRetriesExceededError,
    ResponsesLibError,
)
from responses_lib.recovery import (
    ContextPruner,
    RecoveryCallback,
    RecoveryOrchestrator,
    RecoveryOutcome,
    RecoveryPolicy,
    RecoveryResult,
    RetryScope,
)
from responses_lib.types import Container, KnownModel, Request, Response, Tool

__version__ = "0.1.0"

__all__ = [
    # Client
    "ClientConfig",
    "Responses",
    "ResponsesClient",
    # Errors
    "ClassifiedError",
    "ErrorClass",
    "ErrorKind",
    "MaxRetriesExceededError",
    "ResponsesLibError",
    # Recovery
    "ContextPruner",
    "RecoveryCallback",
    "RecoveryOrchestrator",
    "RecoveryOutcome",
    "RecoveryPolicy",
    "RecoveryResult",
    "RetryScope",
    # Types
    "Container",
    "KnownModel",
    "Request",
    "Response",
    "Tool",
    # Version
    "__version__",
]
