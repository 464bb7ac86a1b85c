"""
OAuth module.

This module handles the OAuth 2.0 login flow for bot users. It provides:
- State parameter encoding and validation
- Login URL issuance and already-logged-in detection
- Authorization code callback handling
- Logout with cache invalidation
"""

from .state import OAuthState
from .flow import OAuthFlowController, logged_in_notice

__all__ = ["OAuthState", "OAuthFlowController", "logged_in_notice"]
