"""Outbound chat messages to Glip groups."""

from typing import Optional, Protocol

import httpx

from core.errors import ChatDeliveryError
from utils import LogRecord, LogEvent, debug, error

GLIP_POSTS_PATH = "/restapi/v1.0/glip/groups/{group_id}/posts"


class ChatGateway(Protocol):
    """Sends a text message into a chat group."""

    async def send_message(self, group_id: str, text: str) -> None:
        ...


class GlipChatGateway:
    """Posts messages as the bot through the Glip REST API."""

    def __init__(self, server_url: str, bot_token: str, timeout: float = 30.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.server_url = server_url
        self.bot_token = bot_token
        self.timeout = timeout
        self._transport = transport

    async def send_message(self, group_id: str, text: str) -> None:
        path = GLIP_POSTS_PATH.format(group_id=group_id)
        try:
            async with httpx.AsyncClient(base_url=self.server_url, timeout=self.timeout,
                                         transport=self._transport) as client:
                response = await client.post(
                    path,
                    json={"text": text},
                    headers={"Authorization": f"Bearer {self.bot_token}"},
                )
        except httpx.HTTPError as e:
            error(LogRecord(
                event=LogEvent.CHAT_MESSAGE_FAILED.value,
                message=f"Posting to group {group_id} failed: {e}",
                data={"group_id": group_id},
            ))
            raise ChatDeliveryError(f"Network/Connection error: {e}") from e

        if not response.is_success:
            error(LogRecord(
                event=LogEvent.CHAT_MESSAGE_FAILED.value,
                message=f"Posting to group {group_id} returned HTTP {response.status_code}",
                data={"group_id": group_id, "status_code": response.status_code},
            ))
            raise ChatDeliveryError(f"HTTP {response.status_code}: {response.text[:200]}")

        debug(LogRecord(
            event=LogEvent.CHAT_MESSAGE_SENT.value,
            message=f"Posted message to group {group_id}",
            data={"group_id": group_id},
        ))
