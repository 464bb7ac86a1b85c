"""Logging handlers and utility functions."""

import enum
import logging
import traceback
from typing import Optional

from .formatters import LogError, LogRecord


class LogEvent(enum.Enum):
    # System events
    FASTAPI_STARTUP_COMPLETE = "fastapi_startup_complete"
    FASTAPI_SHUTDOWN = "fastapi_shutdown"
    HTTP_REQUEST = "http_request"
    CONFIG_LOAD_FAILED = "config_load_failed"
    SERVICE_CONTEXT_READY = "service_context_ready"
    UNHANDLED_ERROR = "unhandled_error"

    # Authentication events (command API key)
    AUTH_SUCCESS = "auth_success"
    AUTH_FAILED = "auth_failed"
    AUTH_MISSING_TOKEN = "auth_missing_token"
    AUTH_INVALID_TOKEN = "auth_invalid_token"
    AUTH_API_KEY_SET = "auth_api_key_set"

    # Session events
    SESSION_CREATED = "session_created"

    # Token store events
    TOKEN_STORE_READ_FAILED = "token_store_read_failed"
    TOKEN_STORE_SAVED = "token_store_saved"
    TOKEN_STORE_CLEARED = "token_store_cleared"
    TOKEN_STORE_CLOSED = "token_store_closed"

    # OAuth events
    OAUTH_URL_GENERATED = "oauth_url_generated"
    OAUTH_LOGIN_PROMPT_SENT = "oauth_login_prompt_sent"
    OAUTH_ALREADY_LOGGED_IN = "oauth_already_logged_in"
    OAUTH_CALLBACK_RECEIVED = "oauth_callback_received"
    OAUTH_CALLBACK_INVALID = "oauth_callback_invalid"
    OAUTH_TOKEN_EXCHANGE_FAILED = "oauth_token_exchange_failed"
    OAUTH_EXCHANGE_SUCCESS = "oauth_exchange_success"
    OAUTH_TOKEN_EXPIRY = "oauth_token_expiry"
    OAUTH_TOKEN_NEEDS_REFRESH = "oauth_token_needs_refresh"
    OAUTH_TOKEN_REFRESHED = "oauth_token_refreshed"
    OAUTH_REFRESH_FAILED = "oauth_refresh_failed"
    OAUTH_REVOKE_FAILED = "oauth_revoke_failed"
    OAUTH_LOGOUT = "oauth_logout"
    OAUTH_LOGOUT_NOT_LOGGED_IN = "oauth_logout_not_logged_in"
    OAUTH_IDENTITY_UNAVAILABLE = "oauth_identity_unavailable"

    # Platform API events
    PLATFORM_REQUEST = "platform_request"
    PLATFORM_REQUEST_ERROR = "platform_request_error"
    PAGINATION_PAGE_FETCHED = "pagination_page_fetched"
    PAGINATION_LIMIT_REACHED = "pagination_limit_reached"

    # Directory cache events
    IDENTITY_CACHED = "identity_cached"
    DIRECTORY_CACHED = "directory_cached"
    DIRECTORY_FETCH_FAILED = "directory_fetch_failed"
    PHONE_NUMBERS_CACHED = "phone_numbers_cached"
    PHONE_NUMBERS_FETCH_FAILED = "phone_numbers_fetch_failed"
    ADDRESS_BOOK_SEARCH_FAILED = "address_book_search_failed"
    CACHE_INVALIDATED = "cache_invalidated"

    # Chat events
    CHAT_MESSAGE_SENT = "chat_message_sent"
    CHAT_MESSAGE_FAILED = "chat_message_failed"


# Initialize logger - will be set up when module is initialized
_logger = None


def init_logger(app_name: str = "rc-session-gateway"):
    """Initialize the logger for this module."""
    global _logger
    _logger = logging.getLogger(app_name)


def _log(level: int, record: LogRecord, exc: Optional[Exception] = None) -> None:
    """Internal logging function."""
    if _logger is None:
        init_logger()

    if exc:
        record.error = LogError(
            name=type(exc).__name__,
            message=str(exc),
            stack_trace="".join(
                traceback.format_exception(type(exc), exc, exc.__traceback__)
            ),
            args=exc.args,
        )
        if not record.message:
            record.message = str(exc) or "An unspecified error occurred"

    _logger.log(level=level, msg=record.message, extra={"log_record": record})


def debug(record: LogRecord):
    """Log a debug message."""
    _log(logging.DEBUG, record)


def info(record: LogRecord):
    """Log an info message."""
    _log(logging.INFO, record)


def warning(record: LogRecord, exc: Optional[Exception] = None):
    """Log a warning message."""
    _log(logging.WARNING, record, exc=exc)


def error(record: LogRecord, exc: Optional[Exception] = None):
    """Log an error message."""
    _log(logging.ERROR, record, exc=exc)
