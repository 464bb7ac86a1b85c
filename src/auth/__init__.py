"""
Authentication module for the RingCentral session gateway.
"""

from .auth_manager import AuthManager, AuthConfig, DEFAULT_EXEMPT_PATHS
from .middleware import AuthenticationMiddleware

__all__ = [
    "AuthManager",
    "AuthConfig",
    "DEFAULT_EXEMPT_PATHS",
    "AuthenticationMiddleware"
]
