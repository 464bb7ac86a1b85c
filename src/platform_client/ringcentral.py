"""
RingCentral REST client bound to one bot user's token-store partition.

Handles the OAuth 2.0 authorization-code grant, token refresh and revocation,
and the directory endpoints the gateway caches.
"""

import time
import typing
from dataclasses import dataclass
from typing import Any, Dict, List, Optional
from urllib.parse import urlencode

import httpx

from core.errors import PlatformRequestError, TokenExchangeFailure
from models import Page, TokenData
from utils import LogRecord, LogEvent, debug, info, warning, error, mask_sensitive_string

# token store type hint only, sessions imports this package
if typing.TYPE_CHECKING:
    from sessions.token_store import TokenStore

AUTHORIZE_PATH = "/restapi/oauth/authorize"
TOKEN_PATH = "/restapi/oauth/token"
REVOKE_PATH = "/restapi/oauth/revoke"
EXTENSION_INFO_PATH = "/restapi/v1.0/account/~/extension/~"
EXTENSION_LIST_PATH = "/restapi/v1.0/account/~/extension"
PHONE_NUMBER_PATH = "/restapi/v1.0/account/~/extension/~/phone-number"
ADDRESS_BOOK_PATH = "/restapi/v1.0/account/~/extension/~/address-book/contact"


@dataclass
class PlatformConfig:
    """Connection settings for the RingCentral platform."""
    server_url: str = "https://platform.ringcentral.com"
    client_id: str = ""
    client_secret: str = ""
    redirect_uri: str = "http://localhost:8080/oauth/callback"
    timeout: float = 30.0
    token_expiry_buffer: int = 60
    page_size: int = 100
    max_pages: int = 50
    proxy: Optional[str] = None


class RingCentralClient:
    """Authenticated RingCentral client for a single session."""

    def __init__(self, config: PlatformConfig, token_store: "TokenStore", token_key: str,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.token_store = token_store
        self.token_key = token_key
        self._transport = transport

    def _client_kwargs(self) -> Dict[str, Any]:
        client_kwargs: Dict[str, Any] = {
            "base_url": self.config.server_url,
            "timeout": self.config.timeout,
        }
        if self.config.proxy:
            client_kwargs["proxy"] = self.config.proxy
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        return client_kwargs

    def _client_auth(self) -> httpx.BasicAuth:
        return httpx.BasicAuth(self.config.client_id, self.config.client_secret)

    # ===== OAUTH =====

    def authorize_url(self, redirect_uri: str, state: str, force: bool = True) -> str:
        """Build the authorization URL the user opens to link their account"""
        params = {
            "response_type": "code",
            "client_id": self.config.client_id,
            "redirect_uri": redirect_uri,
            "state": state,
        }
        if force:
            params["force"] = "true"

        url = f"{self.config.server_url}{AUTHORIZE_PATH}?{urlencode(params)}"
        info(LogRecord(
            event=LogEvent.OAUTH_URL_GENERATED.value,
            message=f"Generated authorization URL for {self.token_key}",
        ))
        return url

    async def exchange_code(self, code: str, redirect_uri: str) -> TokenData:
        """Exchange an authorization code for tokens and persist them"""
        form = {
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": redirect_uri,
        }
        try:
            async with httpx.AsyncClient(**self._client_kwargs()) as client:
                response = await client.post(TOKEN_PATH, data=form, auth=self._client_auth())
        except httpx.HTTPError as e:
            error(LogRecord(
                event=LogEvent.OAUTH_TOKEN_EXCHANGE_FAILED.value,
                message=f"Token exchange request failed for {self.token_key}: {e}",
            ))
            raise TokenExchangeFailure(f"Network/Connection error: {e}") from e

        if not response.is_success:
            detail = self._error_description(response)
            error(LogRecord(
                event=LogEvent.OAUTH_TOKEN_EXCHANGE_FAILED.value,
                message=f"Token exchange failed: {response.status_code} - {mask_sensitive_string(detail)}",
                data={"status_code": response.status_code, "key": self.token_key},
            ))
            raise TokenExchangeFailure(f"HTTP {response.status_code}: {detail}")

        try:
            token = TokenData.from_token_response(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            error(LogRecord(
                event=LogEvent.OAUTH_TOKEN_EXCHANGE_FAILED.value,
                message=f"Token exchange returned an unusable body for {self.token_key}",
                data={"status_code": response.status_code},
            ), exc=e)
            raise TokenExchangeFailure(f"Malformed token response: {e!r}") from e
        await self.token_store.set(self.token_key, token)

        info(LogRecord(
            event=LogEvent.OAUTH_EXCHANGE_SUCCESS.value,
            message=f"Exchanged authorization code for tokens ({self.token_key})",
        ))
        debug(LogRecord(
            event=LogEvent.OAUTH_TOKEN_EXPIRY.value,
            message=f"Token expires at: {time.strftime('%Y-%m-%d %H:%M:%S', time.localtime(token.expires_at))}",
        ))
        return token

    async def refresh(self, token: TokenData) -> TokenData:
        """Refresh the access token using the refresh token and persist the result"""
        form = {
            "grant_type": "refresh_token",
            "refresh_token": token.refresh_token,
        }
        try:
            async with httpx.AsyncClient(**self._client_kwargs()) as client:
                response = await client.post(TOKEN_PATH, data=form, auth=self._client_auth())
        except httpx.HTTPError as e:
            raise PlatformRequestError(f"Network/Connection error: {e}") from e

        if not response.is_success:
            raise PlatformRequestError(
                f"HTTP {response.status_code}: {self._error_description(response)}",
                status_code=response.status_code,
            )

        try:
            refreshed = TokenData.from_token_response(response.json())
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            raise PlatformRequestError(f"Malformed token response: {e!r}") from e
        if not refreshed.refresh_token:
            refreshed.refresh_token = token.refresh_token
            refreshed.refresh_token_expires_at = token.refresh_token_expires_at
        await self.token_store.set(self.token_key, refreshed)

        info(LogRecord(
            event=LogEvent.OAUTH_TOKEN_REFRESHED.value,
            message=f"Successfully refreshed token for {self.token_key}",
        ))
        return refreshed

    async def _current_token(self) -> Optional[TokenData]:
        """Stored token, refreshed if the access token has expired. None when unusable."""
        token = await self.token_store.get(self.token_key)
        if token is None:
            return None
        if not token.is_expired(self.config.token_expiry_buffer):
            return token
        if not token.can_refresh():
            return None

        info(LogRecord(
            event=LogEvent.OAUTH_TOKEN_NEEDS_REFRESH.value,
            message=f"Access token for {self.token_key} expired, refreshing",
        ))
        try:
            return await self.refresh(token)
        except PlatformRequestError as e:
            warning(LogRecord(
                event=LogEvent.OAUTH_REFRESH_FAILED.value,
                message=f"Token refresh failed for {self.token_key}",
            ), exc=e)
            return None

    async def has_valid_token(self) -> bool:
        """Probe for a usable token without calling any directory endpoint"""
        return await self._current_token() is not None

    async def logout(self) -> None:
        """Revoke the token remotely and drop it from the token store"""
        token = await self.token_store.get(self.token_key)
        if token is not None:
            try:
                async with httpx.AsyncClient(**self._client_kwargs()) as client:
                    response = await client.post(
                        REVOKE_PATH,
                        data={"token": token.access_token},
                        auth=self._client_auth(),
                    )
                if not response.is_success:
                    warning(LogRecord(
                        event=LogEvent.OAUTH_REVOKE_FAILED.value,
                        message=f"Token revoke returned HTTP {response.status_code} for {self.token_key}",
                        data={"status_code": response.status_code},
                    ))
            except httpx.HTTPError as e:
                warning(LogRecord(
                    event=LogEvent.OAUTH_REVOKE_FAILED.value,
                    message=f"Token revoke request failed for {self.token_key}",
                ), exc=e)

        await self.token_store.clear(self.token_key)

    # ===== REST =====

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        token = await self._current_token()
        if token is None:
            raise PlatformRequestError("Not logged in to RingCentral", status_code=401)

        debug(LogRecord(
            event=LogEvent.PLATFORM_REQUEST.value,
            message=f"GET {path}",
            data={"params": params},
        ))
        try:
            async with httpx.AsyncClient(**self._client_kwargs()) as client:
                response = await client.get(
                    path,
                    params=params,
                    headers={"Authorization": f"Bearer {token.access_token}"},
                )
        except httpx.HTTPError as e:
            error(LogRecord(
                event=LogEvent.PLATFORM_REQUEST_ERROR.value,
                message=f"GET {path} failed: {e}",
            ))
            raise PlatformRequestError(f"Network/Connection error: {e}") from e

        if not response.is_success:
            detail = self._error_description(response)
            error(LogRecord(
                event=LogEvent.PLATFORM_REQUEST_ERROR.value,
                message=f"GET {path} returned HTTP {response.status_code}: {detail}",
                data={"status_code": response.status_code},
            ))
            raise PlatformRequestError(f"HTTP {response.status_code}: {detail}", status_code=response.status_code)

        return response.json()

    async def get_extension(self) -> Dict[str, Any]:
        return await self._get(EXTENSION_INFO_PATH)

    async def list_extensions(self, page: int, per_page: int) -> Page:
        return Page.from_response(await self._get(EXTENSION_LIST_PATH, {"page": page, "perPage": per_page}))

    async def list_phone_numbers(self, page: int, per_page: int) -> Page:
        return Page.from_response(await self._get(PHONE_NUMBER_PATH, {"page": page, "perPage": per_page}))

    async def search_address_book(self, starts_with: str) -> List[Dict[str, Any]]:
        data = await self._get(ADDRESS_BOOK_PATH, {"startsWith": starts_with})
        return data.get("records") or []

    @staticmethod
    def _error_description(response: httpx.Response) -> str:
        try:
            body = response.json()
        except ValueError:
            return response.text[:200]
        if not isinstance(body, dict):
            return response.text[:200]
        return (
            body.get("error_description")
            or body.get("message")
            or body.get("error")
            or response.text[:200]
        )
