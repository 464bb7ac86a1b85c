"""
Utility modules for the RingCentral session gateway.

This package contains:
- Logging utilities with colored console output and JSON file formatting
- Masking helpers that keep OAuth material out of log sinks
"""

# Re-export commonly used logging functions
from .logging import (
    LogRecord, LogEvent, LogError,
    ColoredConsoleFormatter, JSONFormatter, UvicornAccessFormatter,
    init_logger, debug, info, warning, error,
    mask_sensitive_data, mask_sensitive_string, token_preview,
)

__all__ = [
    # Logging utilities
    "LogRecord", "LogEvent", "LogError",
    "ColoredConsoleFormatter", "JSONFormatter", "UvicornAccessFormatter",
    "init_logger", "debug", "info", "warning", "error",
    "mask_sensitive_data", "mask_sensitive_string", "token_preview",
]
