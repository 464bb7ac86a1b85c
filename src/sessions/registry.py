"""Process-local registry of authenticated platform sessions, one per bot user."""

from dataclasses import dataclass
from typing import Callable, Dict, Optional

from platform_client import PlatformClient
from utils import LogRecord, LogEvent, debug

DEFAULT_TOKEN_NAMESPACE = "rc-token:glip-user"


@dataclass
class Session:
    """The authenticated client and token-store partition for one bot user."""
    bot_user_id: str
    token_key: str
    client: PlatformClient


def token_key(bot_user_id: str, namespace: str = DEFAULT_TOKEN_NAMESPACE) -> str:
    """Token-store key for a bot user's session."""
    return f"{namespace}:{bot_user_id}"


class SessionRegistry:
    """
    Maps bot users to live sessions.

    Sessions are created lazily and kept for the lifetime of the process; a
    logout invalidates the token but the session is reused on the next login.
    """

    def __init__(self, client_factory: Callable[[str], PlatformClient],
                 namespace: str = DEFAULT_TOKEN_NAMESPACE):
        self._client_factory = client_factory
        self.namespace = namespace
        self._sessions: Dict[str, Session] = {}

    def get_or_create(self, bot_user_id: str) -> Session:
        session = self._sessions.get(bot_user_id)
        if session is None:
            key = token_key(bot_user_id, self.namespace)
            session = Session(
                bot_user_id=bot_user_id,
                token_key=key,
                client=self._client_factory(key),
            )
            self._sessions[bot_user_id] = session
            debug(LogRecord(
                event=LogEvent.SESSION_CREATED.value,
                message=f"Created session for bot user {bot_user_id}",
                data={"bot_user_id": bot_user_id, "token_key": key},
            ))
        return session

    def get(self, bot_user_id: str) -> Optional[Session]:
        return self._sessions.get(bot_user_id)

    def __contains__(self, bot_user_id: str) -> bool:
        return bot_user_id in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
