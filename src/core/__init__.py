"""
Core gateway modules.

This package contains:
- The exception hierarchy shared by every layer
- The service context wiring sessions, caches and the OAuth flow together
  (import it as core.context; it depends on the other packages)
"""

from .errors import (
    GatewayError,
    InvalidCallback,
    TokenExchangeFailure,
    ListFetchFailure,
    PlatformRequestError,
    ChatDeliveryError
)

__all__ = [
    "GatewayError", "InvalidCallback", "TokenExchangeFailure",
    "ListFetchFailure", "PlatformRequestError", "ChatDeliveryError"
]
