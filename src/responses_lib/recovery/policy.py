"""
Recovery policy: how aggressively failed calls are retried and repaired.

Policies are immutable; the `with_*` methods return modified copies.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from responses_lib.errors import ErrorClass, ErrorContext, ResponsesLibError
from responses_lib.telemetry import get_logger

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = get_logger("responses_lib.recovery.policy")

ENV_PREFIX = "RESPONSES_RECOVERY_"

DEFAULT_RESET_MESSAGE = (
    "Your code execution session expired and was restarted. "
    "Earlier in-session state may be unavailable."
)

_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off"})


class RetryScope(str, Enum):
    """Which error classes automatic retry applies to."""

    ALL_RECOVERABLE = "all"
    CONTAINER_ONLY = "container"
    TRANSIENT_ONLY = "transient"

    @classmethod
    def parse(cls, value: str) -> RetryScope:
        """Parse a scope name case-insensitively.

        Raises:
            ValueError: If the name is not a known scope
        """
        return cls(value.strip().lower())

    def admits(self, error_class: ErrorClass) -> bool:
        if self is RetryScope.CONTAINER_ONLY:
            return error_class.is_container_expired
        if self is RetryScope.TRANSIENT_ONLY:
            return error_class in (ErrorClass.TRANSIENT_HTTP, ErrorClass.RETRYABLE_SERVER)
        return error_class is not ErrorClass.NON_RECOVERABLE


def parse_bool(value: str) -> bool:
    """Parse a boolean override.

    Raises:
        ValueError: If the value is not a recognised boolean
    """
    lowered = value.strip().lower()
    if lowered in _TRUE:
        return True
    if lowered in _FALSE:
        return False
    raise ValueError(f"not a boolean: {value!r}")


def parse_retries(value: str) -> int:
    """Parse a non-negative retry count.

    Raises:
        ValueError: If the value is not a non-negative integer
    """
    count = int(value.strip())
    if count < 0:
        raise ValueError(f"negative retry count: {count}")
    return count


# override key -> (policy field, parser)
_OVERRIDES: dict[str, tuple[str, Any]] = {
    "max_retries": ("max_retries", parse_retries),
    "auto_retry": ("auto_retry_on_expired_container", parse_bool),
    "auto_prune": ("auto_prune_expired_containers", parse_bool),
    "log_recovery": ("log_recovery_attempts", parse_bool),
    "retry_scope": ("retry_scope", RetryScope.parse),
}


# policy field -> accepted value types (bool is never accepted as a number)
_FIELD_TYPES: dict[str, tuple[type, ...]] = {
    "auto_retry_on_expired_container": (bool,),
    "notify_on_reset": (bool,),
    "max_retries": (int,),
    "auto_prune_expired_containers": (bool,),
    "reset_message": (str, type(None)),
    "log_recovery_attempts": (bool,),
    "retry_scope": (RetryScope,),
    "max_retry_delay": (int, float, type(None)),
}


def _has_field_type(field_name: str, value: Any) -> bool:
    accepted = _FIELD_TYPES[field_name]
    if isinstance(value, bool) and bool not in accepted:
        return False
    return isinstance(value, accepted)


@dataclass(frozen=True)
class RecoveryPolicy:
    """Configuration for automatic error recovery.

    Attributes:
        auto_retry_on_expired_container: Retry container-expiration failures
        notify_on_reset: Surface a reset message to callers after recovery
        max_retries: Maximum retries per call (0 = never retry)
        auto_prune_expired_containers: Prune stale container references before retrying
        reset_message: Custom user-facing reset message
        log_recovery_attempts: Log each recovery attempt
        retry_scope: Error classes eligible for automatic retry
        max_retry_delay: Upper bound on the wait before each retry, in seconds
    """

    auto_retry_on_expired_container: bool = True
    notify_on_reset: bool = False
    max_retries: int = 1
    auto_prune_expired_containers: bool = True
    reset_message: str | None = None
    log_recovery_attempts: bool = False
    retry_scope: RetryScope = RetryScope.ALL_RECOVERABLE
    max_retry_delay: float | None = 60.0

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be non-negative")
        if self.max_retry_delay is not None and self.max_retry_delay < 0:
            raise ValueError("max_retry_delay must be non-negative")

    # -- presets ---------------------------------------------------------

    @classmethod
    def default(cls) -> RecoveryPolicy:
        """One automatic retry, pruning on, no notification."""
        return cls()

    @classmethod
    def conservative(cls) -> RecoveryPolicy:
        """No automatic retry; the caller recovers manually."""
        return cls(
            auto_retry_on_expired_container=False,
            notify_on_reset=True,
            max_retries=0,
            auto_prune_expired_containers=False,
            log_recovery_attempts=True,
        )

    @classmethod
    def aggressive(cls) -> RecoveryPolicy:
        """Up to three retries with a custom reset message."""
        return cls(
            auto_retry_on_expired_container=True,
            notify_on_reset=True,
            max_retries=3,
            auto_prune_expired_containers=True,
            reset_message="Your session was refreshed to keep things running smoothly.",
            log_recovery_attempts=True,
        )

    # -- builders --------------------------------------------------------

    def with_auto_retry(self, enabled: bool) -> RecoveryPolicy:
        return replace(self, auto_retry_on_expired_container=enabled)

    def with_notify_on_reset(self, enabled: bool) -> RecoveryPolicy:
        return replace(self, notify_on_reset=enabled)

    def with_max_retries(self, max_retries: int) -> RecoveryPolicy:
        return replace(self, max_retries=max_retries)

    def with_auto_prune(self, enabled: bool) -> RecoveryPolicy:
        return replace(self, auto_prune_expired_containers=enabled)

    def with_reset_message(self, message: str | None) -> RecoveryPolicy:
        return replace(self, reset_message=message)

    def with_logging(self, enabled: bool) -> RecoveryPolicy:
        return replace(self, log_recovery_attempts=enabled)

    def with_retry_scope(self, scope: RetryScope) -> RecoveryPolicy:
        return replace(self, retry_scope=scope)

    def with_max_retry_delay(self, seconds: float | None) -> RecoveryPolicy:
        return replace(self, max_retry_delay=seconds)

    # -- derived ---------------------------------------------------------

    @property
    def effective_reset_message(self) -> str:
        return self.reset_message or DEFAULT_RESET_MESSAGE

    def admits(self, error_class: ErrorClass) -> bool:
        """Whether automatic retry applies to this class under this policy."""
        if not self.retry_scope.admits(error_class):
            return False
        if error_class.is_container_expired:
            return self.auto_retry_on_expired_container
        return True

    # -- loading ---------------------------------------------------------

    @classmethod
    def from_environment(cls, env: Mapping[str, str] | None = None) -> RecoveryPolicy:
        """Overlay environment overrides onto the default policy.

        Reads RESPONSES_RECOVERY_{MAX_RETRIES,AUTO_RETRY,AUTO_PRUNE,LOG_RECOVERY,RETRY_SCOPE}.
        Values that fail to parse are ignored with a warning.

        Args:
            env: Environment mapping (default: os.environ)
        """
        source = os.environ if env is None else env
        changes: dict[str, Any] = {}
        for key, (field_name, parser) in _OVERRIDES.items():
            var = f"{ENV_PREFIX}{key.upper()}"
            raw = source.get(var)
            if raw is None or raw.strip() == "":
                continue
            try:
                changes[field_name] = parser(raw)
            except ValueError:
                logger.warning("Ignoring malformed recovery override", variable=var, value=raw)
        return replace(cls.default(), **changes)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> RecoveryPolicy:
        """Build a policy from a mapping of override keys or field names.

        Unlike from_environment, invalid entries raise.

        Raises:
            ResponsesLibError: On unknown keys or malformed values
        """
        known = {f.name for f in fields(cls)}
        changes: dict[str, Any] = {}
        for key, value in data.items():
            if key in _OVERRIDES:
                field_name, parser = _OVERRIDES[key]
            elif key in known:
                field_name, parser = key, None
            else:
                raise ResponsesLibError(
                    f"Unknown recovery policy key: {key}",
                    ErrorContext(source="config", field_path=key),
                )
            if field_name == "retry_scope" and not isinstance(value, RetryScope):
                value = str(value)
                parser = RetryScope.parse
            try:
                if parser is not None and isinstance(value, str):
                    value = parser(value)
            except ValueError as e:
                raise ResponsesLibError(
                    f"Invalid value for {key}: {value!r}",
                    ErrorContext(source="config", field_path=key),
                ) from e
            if not _has_field_type(field_name, value):
                raise ResponsesLibError(
                    f"Invalid value for {key}: {value!r}",
                    ErrorContext(source="config", field_path=key),
                )
            changes[field_name] = value
        try:
            return replace(cls.default(), **changes)
        except (TypeError, ValueError) as e:
            raise ResponsesLibError(str(e), ErrorContext(source="config")) from e

    @classmethod
    def from_yaml(cls, path: str | Path) -> RecoveryPolicy:
        """Load a policy from a YAML file (a mapping at the top level).

        Raises:
            ResponsesLibError: If the file cannot be read or is not a mapping
        """
        path = Path(path)
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ResponsesLibError(
                f"Failed to load recovery policy: {e}",
                ErrorContext(source="config", details={"path": str(path)}),
            ) from e
        if data is None:
            return cls.default()
        if not isinstance(data, dict):
            raise ResponsesLibError(
                "Recovery policy file must contain a mapping",
                ErrorContext(source="config", details={"path": str(path)}),
            )
        return cls.from_dict(data)
