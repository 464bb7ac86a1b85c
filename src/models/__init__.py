"""Pydantic models for platform records and API requests and responses."""

from .tokens import TokenData

from .directory import (
    SMS_FEATURE,
    Page,
    Identity,
    ExtensionDirectoryEntry,
    PhoneNumberEntry,
    Contact
)

from .requests import (
    BotCommandRequest,
    SearchRequest
)

from .responses import (
    LoginResponse,
    LogoutResponse,
    SearchResponse,
    SmsNumbersResponse,
    CallbackResponse
)

from .errors import (
    GatewayErrorType,
    ErrorDetail,
    ErrorResponse
)

__all__ = [
    # Tokens
    "TokenData",

    # Directory
    "SMS_FEATURE",
    "Page",
    "Identity",
    "ExtensionDirectoryEntry",
    "PhoneNumberEntry",
    "Contact",

    # Requests
    "BotCommandRequest",
    "SearchRequest",

    # Responses
    "LoginResponse",
    "LogoutResponse",
    "SearchResponse",
    "SmsNumbersResponse",
    "CallbackResponse",

    # Errors
    "GatewayErrorType",
    "ErrorDetail",
    "ErrorResponse"
]
