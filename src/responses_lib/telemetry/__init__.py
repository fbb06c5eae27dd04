"""
Telemetry module for responses-lib-python.

Provides structured logging with API key masking.
"""

from responses_lib.telemetry.logger import (
    JsonFormatter,
    LogContext,
    LogLevel,
    ResponsesLogger,
    SensitiveDataMasker,
    TextFormatter,
    bind_log_context,
    clear_log_context,
    configure_logging,
    get_log_context,
    get_logger,
    set_log_context,
)

__all__ = [
    "JsonFormatter",
    "LogContext",
    "LogLevel",
    "ResponsesLogger",
    "SensitiveDataMasker",
    "TextFormatter",
    "bind_log_context",
    "clear_log_context",
    "configure_logging",
    "get_log_context",
    "get_logger",
    "set_log_context",
]
