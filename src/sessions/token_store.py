"""
Token stores: per-session persistence for platform OAuth tokens.

Every store is a flat key-value map from a session key
("<namespace>:<botUserId>") to one serialized TokenData.
"""

import asyncio
import json
from typing import Dict, Optional, Protocol

import keyring
import keyring.errors
import redis.asyncio as redis

from models import TokenData
from utils import LogRecord, LogEvent, debug, info, warning


class TokenStore(Protocol):
    """Durable per-session token storage."""

    async def get(self, key: str) -> Optional[TokenData]:
        ...

    async def set(self, key: str, token: TokenData) -> None:
        ...

    async def clear(self, key: str) -> None:
        ...


def _decode(key: str, raw: Optional[str]) -> Optional[TokenData]:
    """Parse a stored token; unreadable entries count as absent."""
    if not raw:
        return None
    try:
        return TokenData.from_dict(json.loads(raw))
    except (ValueError, KeyError, TypeError) as e:
        warning(LogRecord(
            event=LogEvent.TOKEN_STORE_READ_FAILED.value,
            message=f"Ignoring unreadable token entry for {key}",
            data={"key": key},
        ), exc=e)
        return None


def _encode(token: TokenData) -> str:
    return json.dumps(token.to_dict())


class MemoryTokenStore:
    """Process-local store, used for development and tests."""

    def __init__(self):
        self._entries: Dict[str, str] = {}

    async def get(self, key: str) -> Optional[TokenData]:
        return _decode(key, self._entries.get(key))

    async def set(self, key: str, token: TokenData) -> None:
        self._entries[key] = _encode(token)

    async def clear(self, key: str) -> None:
        self._entries.pop(key, None)

    def __contains__(self, key: str) -> bool:
        return key in self._entries


class KeyringTokenStore:
    """Stores each session's token as one entry in the system keyring."""

    def __init__(self, service_name: str = "rc-session-gateway"):
        self.service_name = service_name

    async def get(self, key: str) -> Optional[TokenData]:
        raw = await asyncio.to_thread(keyring.get_password, self.service_name, key)
        return _decode(key, raw)

    async def set(self, key: str, token: TokenData) -> None:
        await asyncio.to_thread(keyring.set_password, self.service_name, key, _encode(token))
        debug(LogRecord(
            event=LogEvent.TOKEN_STORE_SAVED.value,
            message=f"Saved token for {key} to keyring",
            data={"key": key},
        ))

    async def clear(self, key: str) -> None:
        try:
            await asyncio.to_thread(keyring.delete_password, self.service_name, key)
        except keyring.errors.PasswordDeleteError:
            return
        debug(LogRecord(
            event=LogEvent.TOKEN_STORE_CLEARED.value,
            message=f"Removed token for {key} from keyring",
            data={"key": key},
        ))


class RedisTokenStore:
    """Stores each session's token as a JSON string under its key in Redis."""

    def __init__(self, client: redis.Redis):
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> "RedisTokenStore":
        return cls(redis.from_url(url, encoding="utf-8", decode_responses=True))

    async def get(self, key: str) -> Optional[TokenData]:
        return _decode(key, await self._client.get(key))

    async def set(self, key: str, token: TokenData) -> None:
        await self._client.set(key, _encode(token))
        debug(LogRecord(
            event=LogEvent.TOKEN_STORE_SAVED.value,
            message=f"Saved token for {key} to redis",
            data={"key": key},
        ))

    async def clear(self, key: str) -> None:
        await self._client.delete(key)
        debug(LogRecord(
            event=LogEvent.TOKEN_STORE_CLEARED.value,
            message=f"Removed token for {key} from redis",
            data={"key": key},
        ))

    async def close(self) -> None:
        await self._client.aclose()
        info(LogRecord(
            event=LogEvent.TOKEN_STORE_CLOSED.value,
            message="Redis token store connection closed",
        ))


def create_token_store(backend: str, service_name: str = "rc-session-gateway",
                       redis_url: Optional[str] = None) -> TokenStore:
    """Build the token store selected in configuration."""
    if backend == "memory":
        return MemoryTokenStore()
    if backend == "keyring":
        return KeyringTokenStore(service_name)
    if backend == "redis":
        if not redis_url:
            raise ValueError("token_store.redis_url (or REDIS_URL) is required for the redis backend")
        return RedisTokenStore.from_url(redis_url)
    raise ValueError(f"Unknown token store backend: {backend}")
