"""Pytest configuration and fixtures for RingCentral session gateway tests."""

import sys
from pathlib import Path
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Add src to Python path
current_dir = Path(__file__).parent
src_dir = current_dir.parent / "src"
sys.path.insert(0, str(src_dir))

from core.context import ServiceContext
from core.errors import ChatDeliveryError
from directory import DirectoryConfig
from models import Page, TokenData
from platform_client import PlatformConfig
from sessions import MemoryTokenStore, token_key

REDIRECT_URI = "https://gateway.example.com/oauth/callback"

ALICE = {
    "id": 1001,
    "name": "Alice",
    "extensionNumber": "101",
    "contact": {"firstName": "Alice", "lastName": "Liddell", "email": "a@x.com"},
}


def make_pages(*pages: List[Dict[str, Any]]) -> List[Page]:
    """One Page per argument, with paging metadata filled in."""
    return [
        Page(records=records, page=index, total_pages=len(pages))
        for index, records in enumerate(pages, start=1)
    ]


def extension_record(ext_id: int, name: str, first_name: str, last_name: str, number: str) -> Dict[str, Any]:
    return {
        "id": ext_id,
        "name": name,
        "extensionNumber": number,
        "type": "User",
        "status": "Enabled",
        "contact": {"firstName": first_name, "lastName": last_name},
    }


class FakePlatformClient:
    """In-memory PlatformClient that records every call."""

    def __init__(self, key: str):
        self.key = key
        self.calls: List[Tuple[Any, ...]] = []
        self.token_valid = False
        self.extension: Dict[str, Any] = dict(ALICE)
        self.extension_error: Optional[Exception] = None
        self.exchange_error: Optional[Exception] = None
        self.extension_pages: List[Page] = make_pages([])
        self.extension_page_errors: Dict[int, Exception] = {}
        self.phone_pages: List[Page] = make_pages([])
        self.phone_page_errors: Dict[int, Exception] = {}
        self.address_book: List[Dict[str, Any]] = []
        self.address_book_error: Optional[Exception] = None

    def calls_to(self, name: str) -> List[Tuple[Any, ...]]:
        return [call for call in self.calls if call[0] == name]

    def authorize_url(self, redirect_uri: str, state: str, force: bool = True) -> str:
        self.calls.append(("authorize_url", redirect_uri, state, force))
        return f"https://platform.example.com/restapi/oauth/authorize?state={state}&force={str(force).lower()}"

    async def exchange_code(self, code: str, redirect_uri: str) -> TokenData:
        self.calls.append(("exchange_code", code, redirect_uri))
        if self.exchange_error is not None:
            raise self.exchange_error
        self.token_valid = True
        return TokenData(access_token="access-" + code, refresh_token="refresh-" + code, expires_at=4102444800)

    async def has_valid_token(self) -> bool:
        self.calls.append(("has_valid_token",))
        return self.token_valid

    async def logout(self) -> None:
        self.calls.append(("logout",))
        self.token_valid = False

    async def get_extension(self) -> Dict[str, Any]:
        self.calls.append(("get_extension",))
        if self.extension_error is not None:
            raise self.extension_error
        return self.extension

    async def list_extensions(self, page: int, per_page: int) -> Page:
        self.calls.append(("list_extensions", page, per_page))
        if page in self.extension_page_errors:
            raise self.extension_page_errors[page]
        return self.extension_pages[page - 1]

    async def list_phone_numbers(self, page: int, per_page: int) -> Page:
        self.calls.append(("list_phone_numbers", page, per_page))
        if page in self.phone_page_errors:
            raise self.phone_page_errors[page]
        return self.phone_pages[page - 1]

    async def search_address_book(self, starts_with: str) -> List[Dict[str, Any]]:
        self.calls.append(("search_address_book", starts_with))
        if self.address_book_error is not None:
            raise self.address_book_error
        return self.address_book


class FakePlatform:
    """Client factory handing out one FakePlatformClient per token-store key."""

    def __init__(self):
        self.clients: Dict[str, FakePlatformClient] = {}

    def __call__(self, key: str) -> FakePlatformClient:
        if key not in self.clients:
            self.clients[key] = FakePlatformClient(key)
        return self.clients[key]

    def client(self, bot_user_id: str) -> FakePlatformClient:
        return self(token_key(bot_user_id))

    @property
    def call_count(self) -> int:
        return sum(len(client.calls) for client in self.clients.values())


class RecordingChatGateway:
    """ChatGateway that keeps every message instead of posting it."""

    def __init__(self):
        self.messages: List[Tuple[str, str]] = []
        self.fail = False

    async def send_message(self, group_id: str, text: str) -> None:
        if self.fail:
            raise ChatDeliveryError("chat is down")
        self.messages.append((group_id, text))


@pytest.fixture
def platform() -> FakePlatform:
    return FakePlatform()


@pytest.fixture
def chat() -> RecordingChatGateway:
    return RecordingChatGateway()


@pytest.fixture
def token_store() -> MemoryTokenStore:
    return MemoryTokenStore()


@pytest.fixture
def platform_config() -> PlatformConfig:
    return PlatformConfig(
        server_url="https://platform.example.com",
        client_id="test-client-id",
        client_secret="test-client-secret",
        redirect_uri=REDIRECT_URI,
    )


@pytest.fixture
def directory_config() -> DirectoryConfig:
    return DirectoryConfig()


@pytest.fixture
def context(platform, chat, token_store, platform_config, directory_config) -> ServiceContext:
    """Service context wired to the fakes."""
    return ServiceContext.build(
        platform_config, token_store, chat,
        directory_config=directory_config,
        client_factory=platform,
    )


@pytest.fixture
def app(context, tmp_path):
    """FastAPI app with the fake context and an empty config file."""
    from main import create_app
    config_path = tmp_path / "config.yaml"
    config_path.write_text("settings:\n  log_level: WARNING\n")
    return create_app(str(config_path), context=context)


@pytest_asyncio.fixture
async def async_client(app) -> AsyncGenerator[AsyncClient, None]:
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client
