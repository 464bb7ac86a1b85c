"""OAuth token model persisted through the token store."""

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass
class TokenData:
    """OAuth token set for one bot user's platform account"""
    access_token: str
    refresh_token: Optional[str]
    expires_at: float  # Unix timestamp
    refresh_token_expires_at: Optional[float] = None  # Unix timestamp
    token_type: str = "bearer"
    scope: Optional[str] = None
    owner_id: Optional[str] = None

    def is_expired(self, buffer_seconds: int = 0) -> bool:
        """Check if the access token is expired or will expire within buffer_seconds"""
        return time.time() + buffer_seconds >= self.expires_at

    def can_refresh(self, buffer_seconds: int = 0) -> bool:
        """Check if the refresh token is present and still usable"""
        if not self.refresh_token:
            return False
        if self.refresh_token_expires_at is None:
            return True
        return time.time() + buffer_seconds < self.refresh_token_expires_at

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "access_token": self.access_token,
            "refresh_token": self.refresh_token,
            "expires_at": self.expires_at,
            "refresh_token_expires_at": self.refresh_token_expires_at,
            "token_type": self.token_type,
            "scope": self.scope,
            "owner_id": self.owner_id,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TokenData':
        """Create from dictionary"""
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=data["expires_at"],
            refresh_token_expires_at=data.get("refresh_token_expires_at"),
            token_type=data.get("token_type", "bearer"),
            scope=data.get("scope"),
            owner_id=data.get("owner_id"),
        )

    @classmethod
    def from_token_response(cls, data: Dict[str, Any], now: Optional[float] = None) -> 'TokenData':
        """Build from an OAuth token endpoint response (relative expiry in seconds)"""
        now = time.time() if now is None else now
        refresh_expires_in = data.get("refresh_token_expires_in")
        owner_id = data.get("owner_id")
        return cls(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_at=now + int(data.get("expires_in", 3600)),
            refresh_token_expires_at=now + int(refresh_expires_in) if refresh_expires_in is not None else None,
            token_type=data.get("token_type", "bearer"),
            scope=data.get("scope"),
            owner_id=str(owner_id) if owner_id is not None else None,
        )
