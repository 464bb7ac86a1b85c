"""
Exception hierarchy for the session gateway.

Everything the gateway raises on purpose derives from GatewayError so the HTTP
layer can map it to a response in one place.
"""

from typing import Optional


class GatewayError(Exception):
    """Base class for gateway errors."""

    error_type = "gateway_error"


class InvalidCallback(GatewayError):
    """The OAuth redirect carried a missing/malformed state or no code."""

    error_type = "invalid_callback"


class TokenExchangeFailure(GatewayError):
    """The platform rejected the authorization code."""

    error_type = "token_exchange_failed"


class ListFetchFailure(GatewayError):
    """A platform lookup (identity or a paginated listing) failed."""

    error_type = "fetch_failed"


class PlatformRequestError(ListFetchFailure):
    """Transport or HTTP error talking to the platform REST API."""

    error_type = "platform_request_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ChatDeliveryError(GatewayError):
    """A message could not be posted into the chat group."""

    error_type = "chat_delivery_failed"
