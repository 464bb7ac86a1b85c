"""
Tests for the RingCentral REST client, against httpx.MockTransport.
"""

import base64
import json
import time
from urllib.parse import parse_qs, urlparse

import httpx
import pytest

from core.errors import PlatformRequestError, TokenExchangeFailure
from models import TokenData
from platform_client import RingCentralClient
from sessions import MemoryTokenStore

KEY = "rc-token:glip-user:u1"

TOKEN_RESPONSE = {
    "access_token": "new-access-token",
    "refresh_token": "new-refresh-token",
    "expires_in": 3600,
    "refresh_token_expires_in": 604800,
    "token_type": "bearer",
    "owner_id": 42,
}


class RecordingHandler:
    """MockTransport handler that replays canned responses per path."""

    def __init__(self, routes):
        self.routes = routes
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get(request.url.path)
        if route is None:
            return httpx.Response(404, json={"message": "not found"})
        if callable(route):
            return route(request)
        status_code, body = route
        return httpx.Response(status_code, json=body)


def make_client(platform_config, routes, store=None):
    handler = RecordingHandler(routes)
    store = store or MemoryTokenStore()
    client = RingCentralClient(platform_config, store, KEY, transport=httpx.MockTransport(handler))
    return client, handler, store


def valid_token(**overrides) -> TokenData:
    values = {
        "access_token": "stored-access-token",
        "refresh_token": "stored-refresh-token",
        "expires_at": time.time() + 3600,
    }
    values.update(overrides)
    return TokenData(**values)


class TestAuthorization:

    def test_authorize_url(self, platform_config):
        client, _, _ = make_client(platform_config, {})
        url = urlparse(client.authorize_url("https://gw.example/cb", "u1:g1"))
        params = parse_qs(url.query)

        assert url.path == "/restapi/oauth/authorize"
        assert params["response_type"] == ["code"]
        assert params["client_id"] == ["test-client-id"]
        assert params["redirect_uri"] == ["https://gw.example/cb"]
        assert params["state"] == ["u1:g1"]
        assert params["force"] == ["true"]

    @pytest.mark.asyncio
    async def test_exchange_code_persists_token(self, platform_config):
        client, handler, store = make_client(platform_config, {"/restapi/oauth/token": (200, TOKEN_RESPONSE)})

        token = await client.exchange_code("c1", "https://gw.example/cb")

        request = handler.requests[0]
        form = parse_qs(request.content.decode())
        assert form == {"grant_type": ["authorization_code"], "code": ["c1"], "redirect_uri": ["https://gw.example/cb"]}
        expected_auth = base64.b64encode(b"test-client-id:test-client-secret").decode()
        assert request.headers["authorization"] == f"Basic {expected_auth}"

        assert token.access_token == "new-access-token"
        assert token.owner_id == "42"
        assert await store.get(KEY) == token

    @pytest.mark.asyncio
    async def test_exchange_code_rejected(self, platform_config):
        client, _, store = make_client(platform_config, {
            "/restapi/oauth/token": (400, {"error": "invalid_grant", "error_description": "Authorization code is expired"}),
        })

        with pytest.raises(TokenExchangeFailure) as exc_info:
            await client.exchange_code("stale", "https://gw.example/cb")

        assert "Authorization code is expired" in str(exc_info.value)
        assert await store.get(KEY) is None

    @pytest.mark.asyncio
    async def test_exchange_code_transport_error(self, platform_config):
        def unreachable(request):
            raise httpx.ConnectError("connection refused", request=request)

        client, _, _ = make_client(platform_config, {"/restapi/oauth/token": unreachable})
        with pytest.raises(TokenExchangeFailure):
            await client.exchange_code("c1", "https://gw.example/cb")

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"json": {"error": "weird"}},
        {"text": "<html>gateway timeout</html>"},
        {"json": ["access_token"]},
    ])
    async def test_exchange_code_unusable_body(self, platform_config, body):
        client, _, store = make_client(platform_config, {
            "/restapi/oauth/token": lambda request: httpx.Response(200, **body),
        })

        with pytest.raises(TokenExchangeFailure) as exc_info:
            await client.exchange_code("c1", "https://gw.example/cb")

        assert "Malformed token response" in str(exc_info.value)
        assert await store.get(KEY) is None


class TestTokenLifecycle:

    @pytest.mark.asyncio
    async def test_no_token(self, platform_config):
        client, handler, _ = make_client(platform_config, {})
        assert await client.has_valid_token() is False
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_valid_token_needs_no_request(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token())
        client, handler, _ = make_client(platform_config, {}, store)

        assert await client.has_valid_token() is True
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_expired_token_is_refreshed(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token(expires_at=time.time() - 10))
        client, handler, _ = make_client(platform_config, {"/restapi/oauth/token": (200, TOKEN_RESPONSE)}, store)

        assert await client.has_valid_token() is True

        form = parse_qs(handler.requests[0].content.decode())
        assert form == {"grant_type": ["refresh_token"], "refresh_token": ["stored-refresh-token"]}
        assert (await store.get(KEY)).access_token == "new-access-token"

    @pytest.mark.asyncio
    async def test_failed_refresh_means_logged_out(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token(expires_at=time.time() - 10))
        client, _, _ = make_client(platform_config, {"/restapi/oauth/token": (400, {"error": "invalid_grant"})}, store)

        assert await client.has_valid_token() is False

    @pytest.mark.asyncio
    async def test_refresh_with_unusable_body_means_logged_out(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token(expires_at=time.time() - 10))
        client, _, _ = make_client(platform_config, {"/restapi/oauth/token": (200, {"error": "weird"})}, store)

        assert await client.has_valid_token() is False

    @pytest.mark.asyncio
    async def test_expired_refresh_token(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token(expires_at=time.time() - 10, refresh_token_expires_at=time.time() - 5))
        client, handler, _ = make_client(platform_config, {}, store)

        assert await client.has_valid_token() is False
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_logout_revokes_and_clears(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token())
        client, handler, _ = make_client(platform_config, {"/restapi/oauth/revoke": (200, {})}, store)

        await client.logout()

        assert handler.requests[0].url.path == "/restapi/oauth/revoke"
        assert parse_qs(handler.requests[0].content.decode()) == {"token": ["stored-access-token"]}
        assert await store.get(KEY) is None

    @pytest.mark.asyncio
    async def test_logout_clears_even_if_revoke_fails(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token())
        client, _, _ = make_client(platform_config, {"/restapi/oauth/revoke": (500, {"message": "oops"})}, store)

        await client.logout()
        assert await store.get(KEY) is None


class TestRestEndpoints:

    @pytest.mark.asyncio
    async def test_requests_require_a_token(self, platform_config):
        client, handler, _ = make_client(platform_config, {})
        with pytest.raises(PlatformRequestError) as exc_info:
            await client.get_extension()
        assert exc_info.value.status_code == 401
        assert handler.requests == []

    @pytest.mark.asyncio
    async def test_get_extension(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token())
        record = {"id": 1, "name": "Alice", "extensionNumber": "101", "contact": {"email": "a@x.com"}}
        client, handler, _ = make_client(platform_config, {"/restapi/v1.0/account/~/extension/~": (200, record)}, store)

        assert await client.get_extension() == record
        assert handler.requests[0].headers["authorization"] == "Bearer stored-access-token"

    @pytest.mark.asyncio
    async def test_list_extensions_reads_paging(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token())
        body = {"records": [{"id": 1}, {"id": 2}], "paging": {"page": 2, "totalPages": 3, "perPage": 100}}
        client, handler, _ = make_client(platform_config, {"/restapi/v1.0/account/~/extension": (200, body)}, store)

        page = await client.list_extensions(2, 100)

        assert (page.page, page.total_pages) == (2, 3)
        assert page.records == [{"id": 1}, {"id": 2}]
        assert dict(handler.requests[0].url.params) == {"page": "2", "perPage": "100"}

    @pytest.mark.asyncio
    async def test_list_phone_numbers(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token())
        body = {"records": [{"id": 7, "phoneNumber": "+15550100", "features": ["SmsSender"]}],
                "paging": {"page": 1, "totalPages": 1}}
        client, _, _ = make_client(platform_config, {"/restapi/v1.0/account/~/extension/~/phone-number": (200, body)}, store)

        page = await client.list_phone_numbers(1, 100)
        assert page.records[0]["phoneNumber"] == "+15550100"

    @pytest.mark.asyncio
    async def test_search_address_book(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token())
        body = {"records": [{"firstName": "Alice", "lastName": "Liddell", "mobilePhone": "+15550199"}]}
        client, handler, _ = make_client(
            platform_config, {"/restapi/v1.0/account/~/extension/~/address-book/contact": (200, body)}, store
        )

        assert await client.search_address_book("Ali") == body["records"]
        assert handler.requests[0].url.params["startsWith"] == "Ali"

    @pytest.mark.asyncio
    async def test_http_error_raises_platform_request_error(self, platform_config):
        store = MemoryTokenStore()
        await store.set(KEY, valid_token())
        client, _, _ = make_client(
            platform_config, {"/restapi/v1.0/account/~/extension": (503, {"message": "Service unavailable"})}, store
        )

        with pytest.raises(PlatformRequestError) as exc_info:
            await client.list_extensions(1, 100)
        assert exc_info.value.status_code == 503
        assert "Service unavailable" in str(exc_info.value)

    def test_error_description_for_non_json(self):
        response = httpx.Response(502, text="Bad gateway")
        assert RingCentralClient._error_description(response) == "Bad gateway"

        response = httpx.Response(400, content=json.dumps(["unexpected"]).encode())
        assert RingCentralClient._error_description(response) == '["unexpected"]'
