"""OAuth state parameter: identifies who started a login and where to report back."""

import re
from dataclasses import dataclass

from core.errors import InvalidCallback

STATE_PATTERN = re.compile(r"^.+:.+$")


@dataclass(frozen=True)
class OAuthState:
    bot_user_id: str
    group_id: str

    def encode(self) -> str:
        return f"{self.bot_user_id}:{self.group_id}"

    @classmethod
    def decode(cls, state: str) -> "OAuthState":
        """
        Parse a "<botUserId>:<groupId>" state value.

        The value splits on the first ":", so a group id may itself contain
        colons while a bot user id may not.
        """
        if not state or not STATE_PATTERN.match(state):
            raise InvalidCallback(f"Malformed OAuth state: {state!r}")
        bot_user_id, group_id = state.split(":", 1)
        if not bot_user_id or not group_id:
            raise InvalidCallback(f"Malformed OAuth state: {state!r}")
        return cls(bot_user_id=bot_user_id, group_id=group_id)
