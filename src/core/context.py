"""
Service context: the process-wide state shared by every request.

One context owns the token store, the session registry, the caches and the
OAuth flow controller. Routers receive it from create_app instead of reaching
for module globals.
"""

from dataclasses import dataclass
from typing import Callable, Optional

from chat import ChatGateway, GlipChatGateway
from directory import DirectoryCache, DirectoryConfig, IdentityCache, PaginatedFetcher
from oauth import OAuthFlowController
from platform_client import PlatformClient, PlatformConfig, RingCentralClient
from sessions import DEFAULT_TOKEN_NAMESPACE, SessionRegistry, TokenStore, create_token_store
from utils import LogRecord, LogEvent, info


@dataclass
class ServiceContext:
    token_store: TokenStore
    registry: SessionRegistry
    fetcher: PaginatedFetcher
    identities: IdentityCache
    directory: DirectoryCache
    chat: ChatGateway
    flow: OAuthFlowController

    @classmethod
    def build(cls, platform_config: PlatformConfig, token_store: TokenStore, chat: ChatGateway,
              directory_config: Optional[DirectoryConfig] = None,
              namespace: str = DEFAULT_TOKEN_NAMESPACE,
              client_factory: Optional[Callable[[str], PlatformClient]] = None) -> "ServiceContext":
        """
        Wire the components together.

        client_factory maps a token-store key to a platform client; it defaults
        to a RingCentralClient bound to that key.
        """
        directory_config = directory_config or DirectoryConfig()
        if client_factory is None:
            def client_factory(key: str) -> PlatformClient:
                return RingCentralClient(platform_config, token_store, key)

        registry = SessionRegistry(client_factory, namespace)
        fetcher = PaginatedFetcher(platform_config.page_size, platform_config.max_pages)
        identities = IdentityCache(registry)
        directory = DirectoryCache(registry, fetcher, directory_config)
        flow = OAuthFlowController(
            registry, identities, directory, chat,
            redirect_uri=platform_config.redirect_uri,
            invalidate_on_logout=directory_config.invalidate_on_logout,
        )
        return cls(
            token_store=token_store,
            registry=registry,
            fetcher=fetcher,
            identities=identities,
            directory=directory,
            chat=chat,
            flow=flow,
        )

    @classmethod
    def from_settings(cls, settings) -> "ServiceContext":
        """Build the production context from application settings."""
        token_store = create_token_store(
            settings.token_store_backend,
            service_name=settings.token_store_service_name,
            redis_url=settings.redis_url,
        )
        chat = GlipChatGateway(
            server_url=settings.platform.server_url,
            bot_token=settings.chat_bot_token,
            timeout=settings.platform.timeout,
        )
        context = cls.build(
            settings.platform, token_store, chat,
            directory_config=settings.directory,
            namespace=settings.token_store_namespace,
        )
        info(LogRecord(
            event=LogEvent.SERVICE_CONTEXT_READY.value,
            message=f"Service context ready (token store: {settings.token_store_backend})",
        ))
        return context

    async def close(self) -> None:
        close = getattr(self.token_store, "close", None)
        if close is not None:
            await close()
