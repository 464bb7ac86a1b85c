"""
Session module.

Holds one authenticated platform client per bot user and the token stores
that persist each user's OAuth tokens.
"""

from .token_store import (
    TokenStore, MemoryTokenStore, KeyringTokenStore, RedisTokenStore,
    create_token_store
)
from .registry import DEFAULT_TOKEN_NAMESPACE, Session, SessionRegistry, token_key

__all__ = [
    "TokenStore", "MemoryTokenStore", "KeyringTokenStore", "RedisTokenStore",
    "create_token_store",
    "DEFAULT_TOKEN_NAMESPACE", "Session", "SessionRegistry", "token_key"
]
