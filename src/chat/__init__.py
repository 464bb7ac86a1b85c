"""Chat module: the outbound side of the bot conversation."""

from .gateway import ChatGateway, GlipChatGateway

__all__ = ["ChatGateway", "GlipChatGateway"]
