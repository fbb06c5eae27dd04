"""Per-call recovery metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class RecoveryOutcome:
    """What automatic recovery did for a single call.

    Attributes:
        attempted: Whether at least one retry happened
        retry_count: Number of retries performed
        successful: Whether the call ultimately succeeded
        original_error: Message of the first error, when retries occurred
    """

    attempted: bool = False
    retry_count: int = 0
    successful: bool = False
    original_error: str | None = None


@dataclass(frozen=True)
class RecoveryResult(Generic[T]):
    """A successful value together with its recovery outcome.

    Example:
        >>> result = await client.responses.create_with_recovery(request)
        >>> if result.had_recovery():
        ...     print(result.recovery_message())
        >>> print(result.value.output_text)
    """

    value: T
    outcome: RecoveryOutcome
    reset_message: str | None = None

    def had_recovery(self) -> bool:
        return self.outcome.attempted

    def recovery_message(self) -> str | None:
        """User-facing reset notice, if recovery happened and notification is on."""
        if not self.had_recovery():
            return None
        return self.reset_message
