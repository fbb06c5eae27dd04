"""
Structured logging for responses-lib-python.

Loggers take keyword fields (``logger.info("Retrying", attempt=2)``) which are
rendered as JSON members or trailing ``key=value`` pairs. API keys are masked
in messages and fields. Fields bound with `bind_log_context` are attached to
every record emitted in the same async context.
"""

from __future__ import annotations

import json
import logging
import os
import re
import sys
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any, ClassVar, TextIO

if TYPE_CHECKING:
    from collections.abc import Iterator

LEVEL_ENV = "RESPONSES_LOG_LEVEL"
FORMAT_ENV = "RESPONSES_LOG_FORMAT"

REDACTED = "***REDACTED***"

_current_context: ContextVar[LogContext | None] = ContextVar("responses_log_context", default=None)


class LogLevel(str, Enum):
    """Log levels accepted by `configure_logging`."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"

    @classmethod
    def from_env(cls) -> LogLevel:
        """Level from RESPONSES_LOG_LEVEL; INFO when unset or unknown."""
        raw = os.getenv(LEVEL_ENV, "").strip().upper()
        return cls.__members__.get(raw, cls.INFO)

    @property
    def numeric(self) -> int:
        return logging.getLevelName(self.value)


@dataclass(frozen=True)
class LogContext:
    """Fields attached to every record in the current async context.

    Attributes:
        request_id: Server-assigned request ID of the call being handled
        response_id: Responses API object ID
        model: Model name
        extra: Any further fields
    """

    request_id: str | None = None
    response_id: str | None = None
    model: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data = {k: v for k, v in asdict(self).items() if k != "extra" and v is not None}
        data.update(self.extra)
        return data


def get_log_context() -> LogContext:
    return _current_context.get() or LogContext()


def set_log_context(context: LogContext) -> None:
    _current_context.set(context)


def clear_log_context() -> None:
    _current_context.set(None)


@contextmanager
def bind_log_context(**fields: Any) -> Iterator[LogContext]:
    """Temporarily add fields to the log context.

    Known fields (request_id, response_id, model) replace the current values;
    anything else is merged into `extra`.
    """
    current = get_log_context()
    known = {k: fields.pop(k) for k in ("request_id", "response_id", "model") if k in fields}
    merged = LogContext(
        request_id=known.get("request_id", current.request_id),
        response_id=known.get("response_id", current.response_id),
        model=known.get("model", current.model),
        extra={**current.extra, **fields},
    )
    token = _current_context.set(merged)
    try:
        yield merged
    finally:
        _current_context.reset(token)


class SensitiveDataMasker:
    """Redacts credentials from log text and structured fields."""

    PATTERNS: ClassVar[tuple[tuple[str, str], ...]] = (
        (r"sk-[A-Za-z0-9_-]{16,}", "sk-" + REDACTED),
        (r"(Bearer\s+)[^\s\"']+", r"\1" + REDACTED),
        (r"(OPENAI_API_KEY=)\S+", r"\1" + REDACTED),
    )

    KEY_MARKERS: ClassVar[tuple[str, ...]] = ("api_key", "authorization", "token", "secret")

    def __init__(self, patterns: tuple[tuple[str, str], ...] | None = None) -> None:
        self._rules = [
            (re.compile(pattern, re.IGNORECASE), replacement)
            for pattern, replacement in (patterns or self.PATTERNS)
        ]

    def mask(self, text: str) -> str:
        for rule, replacement in self._rules:
            text = rule.sub(replacement, text)
        return text

    def is_sensitive_key(self, key: str) -> bool:
        lowered = key.lower()
        return any(marker in lowered for marker in self.KEY_MARKERS)

    def mask_value(self, value: Any) -> Any:
        if isinstance(value, str):
            return self.mask(value)
        if isinstance(value, dict):
            return self.mask_dict(value)
        if isinstance(value, (list, tuple)):
            return [self.mask_value(item) for item in value]
        return value

    def mask_dict(self, data: dict[str, Any]) -> dict[str, Any]:
        """Mask nested values; values under credential-like keys are replaced."""
        return {
            key: REDACTED if self.is_sensitive_key(str(key)) else self.mask_value(value)
            for key, value in data.items()
        }


class _StructuredFormatter(logging.Formatter):
    """Shared field collection for the JSON and text formatters."""

    def __init__(self, masker: SensitiveDataMasker | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.masker = masker or SensitiveDataMasker()

    def fields(self, record: logging.LogRecord) -> dict[str, Any]:
        collected = get_log_context().to_dict()
        collected.update(getattr(record, "fields", {}))
        return self.masker.mask_dict(collected)


class JsonFormatter(_StructuredFormatter):
    """Renders each record as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "timestamp": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": self.masker.mask(record.getMessage()),
        }
        payload.update(self.fields(record))
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class TextFormatter(_StructuredFormatter):
    """``time | LEVEL | logger | message | key=value ...``"""

    def __init__(self, masker: SensitiveDataMasker | None = None) -> None:
        super().__init__(
            masker,
            fmt="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        line = super().formatMessage(record)
        line = self.masker.mask(line)
        if pairs := self.fields(record):
            line += " | " + " ".join(f"{key}={value}" for key, value in pairs.items())
        return line


def _make_formatter(fmt: str, masker: SensitiveDataMasker | None) -> logging.Formatter:
    if fmt == "json":
        return JsonFormatter(masker)
    return TextFormatter(masker)


class ResponsesLogger:
    """Logger accepting structured keyword fields.

    All library loggers share one handler, replaced by `configure`. They do
    not propagate to the root logger.

    Example:
        >>> logger = ResponsesLogger.get_logger("responses_lib.recovery")
        >>> logger.info("Recovering from failed request", error_class="rate_limited", attempt=1)
    """

    _registry: ClassVar[dict[str, logging.Logger]] = {}
    _handler: ClassVar[logging.Handler | None] = None
    _level: ClassVar[LogLevel | None] = None

    @classmethod
    def _shared_handler(cls) -> logging.Handler:
        if cls._handler is None:
            cls._handler = logging.StreamHandler(sys.stderr)
            cls._handler.setFormatter(
                _make_formatter(os.getenv(FORMAT_ENV, "text").strip().lower(), None)
            )
        return cls._handler

    @classmethod
    def configure(
        cls,
        level: LogLevel | None = None,
        format: str | None = None,
        stream: TextIO | None = None,
        masker: SensitiveDataMasker | None = None,
    ) -> None:
        """Replace the shared handler and level for every library logger.

        Args:
            level: Minimum level (default: RESPONSES_LOG_LEVEL, else INFO)
            format: 'json' or 'text' (default: RESPONSES_LOG_FORMAT, else text)
            stream: Destination (default: stderr)
            masker: Credential masker
        """
        cls._level = level or LogLevel.from_env()
        fmt = (format or os.getenv(FORMAT_ENV, "text")).strip().lower()
        cls._handler = logging.StreamHandler(stream or sys.stderr)
        cls._handler.setFormatter(_make_formatter(fmt, masker))
        for logger in cls._registry.values():
            cls._attach(logger)

    @classmethod
    def _attach(cls, logger: logging.Logger) -> None:
        logger.handlers[:] = [cls._shared_handler()]
        logger.setLevel((cls._level or LogLevel.from_env()).numeric)
        logger.propagate = False

    @classmethod
    def get_logger(cls, name: str) -> ResponsesLogger:
        logger = cls._registry.get(name)
        if logger is None:
            logger = logging.getLogger(name)
            cls._attach(logger)
            cls._registry[name] = logger
        return cls(logger)

    def __init__(self, logger: logging.Logger) -> None:
        self._logger = logger

    @property
    def stdlib_logger(self) -> logging.Logger:
        return self._logger

    def log(self, level: int, msg: str, *, exc_info: bool = False, **fields: Any) -> None:
        if self._logger.isEnabledFor(level):
            self._logger.log(level, msg, exc_info=exc_info, extra={"fields": fields})

    def debug(self, msg: str, **fields: Any) -> None:
        self.log(logging.DEBUG, msg, **fields)

    def info(self, msg: str, **fields: Any) -> None:
        self.log(logging.INFO, msg, **fields)

    def warning(self, msg: str, **fields: Any) -> None:
        self.log(logging.WARNING, msg, **fields)

    def error(self, msg: str, *, exc_info: bool = False, **fields: Any) -> None:
        self.log(logging.ERROR, msg, exc_info=exc_info, **fields)

    def exception(self, msg: str, **fields: Any) -> None:
        """Log at ERROR with the active traceback."""
        self.log(logging.ERROR, msg, exc_info=True, **fields)


def get_logger(name: str) -> ResponsesLogger:
    return ResponsesLogger.get_logger(name)


def configure_logging(
    level: LogLevel | None = None,
    format: str | None = None,
    stream: TextIO | None = None,
) -> None:
    """Configure output for every responses-lib logger."""
    ResponsesLogger.configure(level=level, format=format, stream=stream)
