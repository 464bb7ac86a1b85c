"""
API key authentication for the bot command routes.

The chat bot backend calls the gateway with a shared key; the OAuth callback
is hit by end users' browsers and stays exempt.
"""

import secrets
from typing import Optional, List
from dataclasses import dataclass
from fastapi import HTTPException, status
from utils import LogRecord, LogEvent, info, warning, error, token_preview

DEFAULT_EXEMPT_PATHS = ["/", "/health", "/oauth/callback", "/docs", "/redoc", "/openapi.json"]


@dataclass
class AuthConfig:
    """Configuration for API authentication."""
    enabled: bool = False
    api_key: str = ""
    exempt_paths: List[str] = None

    def __post_init__(self):
        if self.exempt_paths is None:
            self.exempt_paths = list(DEFAULT_EXEMPT_PATHS)


class AuthManager:
    """Validates the shared API key sent by the bot backend."""

    def __init__(self, config: AuthConfig):
        self.config = config

    def is_enabled(self) -> bool:
        return self.config.enabled

    def is_path_exempt(self, path: str) -> bool:
        return path in self.config.exempt_paths

    def has_api_key(self) -> bool:
        return bool(self.config.api_key)

    def validate_token(self, token: str, request_id: Optional[str] = None) -> bool:
        if not token or not self.config.api_key:
            return False

        # bytes, since header values may carry non-ASCII characters
        is_valid = secrets.compare_digest(token.encode("utf-8"), self.config.api_key.encode("utf-8"))
        if is_valid:
            info(LogRecord(
                event=LogEvent.AUTH_SUCCESS.value,
                message="Authentication successful",
                request_id=request_id,
                data={"token_prefix": token_preview(token)}
            ))
        else:
            warning(LogRecord(
                event=LogEvent.AUTH_FAILED.value,
                message="Authentication failed - invalid API key",
                request_id=request_id,
                data={"token_prefix": token_preview(token)}
            ))
        return is_valid

    @staticmethod
    def extract_token_from_headers(api_key: Optional[str], authorization: Optional[str]) -> Optional[str]:
        """x-api-key wins over an Authorization header; Bearer prefix is optional."""
        if api_key:
            return api_key
        if authorization:
            if authorization.startswith("Bearer "):
                return authorization[7:]
            return authorization
        return None

    def authenticate_request(self, api_key: Optional[str], authorization: Optional[str],
                             path: str, request_id: Optional[str] = None) -> None:
        """Raise HTTPException(401) unless the request carries the configured key."""
        if not self.is_enabled() or self.is_path_exempt(path):
            return

        token = self.extract_token_from_headers(api_key, authorization)
        if not token:
            error(LogRecord(
                event=LogEvent.AUTH_MISSING_TOKEN.value,
                message="Authentication failed - missing API key",
                request_id=request_id,
                data={"path": path}
            ))
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Authentication required. Provide the gateway API key in the x-api-key or Authorization header."
            )

        if not self.validate_token(token, request_id):
            error(LogRecord(
                event=LogEvent.AUTH_INVALID_TOKEN.value,
                message="Authentication failed - invalid API key",
                request_id=request_id,
                data={"path": path}
            ))
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Invalid API key."
            )

    def set_api_key(self, api_key: str) -> None:
        self.config.api_key = api_key
        info(LogRecord(
            event=LogEvent.AUTH_API_KEY_SET.value,
            message="API key updated",
            data={"token_prefix": token_preview(api_key)}
        ))
