"""
Capability interface for the remote business-communications platform.

One PlatformClient instance is bound to one bot user's token-store partition;
all calls are made on behalf of that user.
"""

from typing import Any, Dict, List, Protocol

from models import Page, TokenData


class PlatformClient(Protocol):
    """Platform operations the gateway relies on"""

    def authorize_url(self, redirect_uri: str, state: str, force: bool = True) -> str:
        ...

    async def exchange_code(self, code: str, redirect_uri: str) -> TokenData:
        ...

    async def has_valid_token(self) -> bool:
        ...

    async def logout(self) -> None:
        ...

    async def get_extension(self) -> Dict[str, Any]:
        ...

    async def list_extensions(self, page: int, per_page: int) -> Page:
        ...

    async def list_phone_numbers(self, page: int, per_page: int) -> Page:
        ...

    async def search_address_book(self, starts_with: str) -> List[Dict[str, Any]]:
        ...
