"""Structured logging: records, formatters and level helpers."""

from .formatters import (
    LogError,
    LogRecord,
    ColoredConsoleFormatter,
    JSONFormatter,
    UvicornAccessFormatter,
    mask_sensitive_data,
    mask_sensitive_string,
    token_preview,
)

from .handlers import (
    LogEvent,
    init_logger,
    debug,
    info,
    warning,
    error,
)

__all__ = [
    "LogError",
    "LogRecord",
    "ColoredConsoleFormatter",
    "JSONFormatter",
    "UvicornAccessFormatter",
    "LogEvent",
    "init_logger",
    "debug",
    "info",
    "warning",
    "error",
    "mask_sensitive_data",
    "mask_sensitive_string",
    "token_preview",
]
