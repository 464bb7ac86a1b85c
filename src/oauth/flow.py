"""
Login, callback and logout orchestration for bot users.

Every outcome the user should see is posted back to the chat group the
command came from; the return values are for the HTTP layer.
"""

from typing import Mapping, Optional

from chat import ChatGateway
from core.errors import ChatDeliveryError, InvalidCallback, ListFetchFailure, TokenExchangeFailure
from directory import DirectoryCache, IdentityCache
from models import Identity
from sessions import SessionRegistry
from utils import LogRecord, LogEvent, info, warning, error
from .state import OAuthState

LOGIN_PROMPT = "Please log into RingCentral at [here]({url})"
LOGGED_IN_NOTICE = "@{bot_user_id} The RingCentral account you logged in is {identity}."
LOGIN_FAILED = "Login failed: {error}"
IDENTITY_FAILED = "Login succeeded but the RingCentral account could not be loaded: {error}"
NOT_LOGGED_IN = "You are not logged in."
LOGOUT_SUCCESS = "Logout success."


def logged_in_notice(bot_user_id: str, identity: Identity) -> str:
    return LOGGED_IN_NOTICE.format(bot_user_id=bot_user_id, identity=identity.describe())


class OAuthFlowController:
    """Drives the authorization-code flow for one process."""

    def __init__(self, registry: SessionRegistry, identities: IdentityCache,
                 directory: DirectoryCache, chat: ChatGateway, redirect_uri: str,
                 invalidate_on_logout: bool = True):
        self.registry = registry
        self.identities = identities
        self.directory = directory
        self.chat = chat
        self.redirect_uri = redirect_uri
        self.invalidate_on_logout = invalidate_on_logout

    async def initiate_login(self, bot_user_id: str, group_id: str) -> Optional[str]:
        """
        Announce the linked account if the user already has a usable token,
        otherwise post a login link to the group.

        Returns the authorization URL when a login is required, None otherwise.
        """
        session = self.registry.get_or_create(bot_user_id)

        if await session.client.has_valid_token():
            try:
                identity = await self.identities.get_identity(bot_user_id)
            except ListFetchFailure as e:
                # token looked valid but the platform rejected it; ask for a fresh login
                warning(LogRecord(
                    event=LogEvent.OAUTH_IDENTITY_UNAVAILABLE.value,
                    message=f"Identity lookup failed for bot user {bot_user_id}, prompting login",
                    data={"bot_user_id": bot_user_id, "group_id": group_id},
                ), exc=e)
            else:
                await self.chat.send_message(group_id, logged_in_notice(bot_user_id, identity))
                info(LogRecord(
                    event=LogEvent.OAUTH_ALREADY_LOGGED_IN.value,
                    message=f"Bot user {bot_user_id} already logged in as {identity.describe()}",
                    data={"bot_user_id": bot_user_id, "group_id": group_id},
                ))
                return None

        state = OAuthState(bot_user_id=bot_user_id, group_id=group_id).encode()
        url = session.client.authorize_url(self.redirect_uri, state, force=True)
        await self.chat.send_message(group_id, LOGIN_PROMPT.format(url=url))
        info(LogRecord(
            event=LogEvent.OAUTH_LOGIN_PROMPT_SENT.value,
            message=f"Sent login link to bot user {bot_user_id}",
            data={"bot_user_id": bot_user_id, "group_id": group_id},
        ))
        return url

    async def handle_callback(self, query: Mapping[str, str]) -> OAuthState:
        """
        Complete a login from the authorization server's redirect.

        The query is validated before any platform call. Exchange and identity
        failures are reported to the originating group and re-raised.
        """
        raw_state = query.get("state") or ""
        code = query.get("code")
        info(LogRecord(
            event=LogEvent.OAUTH_CALLBACK_RECEIVED.value,
            message="OAuth callback received",
            data={"has_code": bool(code), "state": raw_state},
        ))

        try:
            state = OAuthState.decode(raw_state)
            if not code:
                raise InvalidCallback(
                    f"No auth code, {query.get('error')}, {query.get('error_description')}"
                )
        except InvalidCallback as e:
            warning(LogRecord(
                event=LogEvent.OAUTH_CALLBACK_INVALID.value,
                message=f"Rejected OAuth callback: {e}",
            ))
            raise

        session = self.registry.get_or_create(state.bot_user_id)
        try:
            await session.client.exchange_code(code, self.redirect_uri)
        except TokenExchangeFailure as e:
            try:
                await self.chat.send_message(state.group_id, LOGIN_FAILED.format(error=e))
            except ChatDeliveryError as delivery_error:
                warning(LogRecord(
                    event=LogEvent.CHAT_MESSAGE_FAILED.value,
                    message=f"Could not report failed login to group {state.group_id}",
                    data={"bot_user_id": state.bot_user_id, "group_id": state.group_id},
                ), exc=delivery_error)
            raise

        # the new login may belong to a different account
        self.identities.invalidate(state.bot_user_id)
        self.directory.invalidate(state.bot_user_id)

        try:
            identity = await self.identities.get_identity(state.bot_user_id)
        except ListFetchFailure as e:
            error(LogRecord(
                event=LogEvent.OAUTH_IDENTITY_UNAVAILABLE.value,
                message=f"Identity lookup after login failed for bot user {state.bot_user_id}",
                data={"bot_user_id": state.bot_user_id, "group_id": state.group_id},
            ), exc=e)
            await self.chat.send_message(state.group_id, IDENTITY_FAILED.format(error=e))
            raise

        await self.chat.send_message(state.group_id, logged_in_notice(state.bot_user_id, identity))
        return state

    async def logout(self, bot_user_id: str, group_id: str) -> bool:
        """Log the user out. Returns False when there was nothing to log out of."""
        session = self.registry.get(bot_user_id)
        if session is None or not await session.client.has_valid_token():
            await self.chat.send_message(group_id, NOT_LOGGED_IN)
            info(LogRecord(
                event=LogEvent.OAUTH_LOGOUT_NOT_LOGGED_IN.value,
                message=f"Logout requested by bot user {bot_user_id} without a session",
                data={"bot_user_id": bot_user_id, "group_id": group_id},
            ))
            return False

        await session.client.logout()

        if self.invalidate_on_logout:
            self.identities.invalidate(bot_user_id)
            self.directory.invalidate(bot_user_id)
            info(LogRecord(
                event=LogEvent.CACHE_INVALIDATED.value,
                message=f"Dropped cached identity and directory for bot user {bot_user_id}",
                data={"bot_user_id": bot_user_id},
            ))

        await self.chat.send_message(group_id, LOGOUT_SUCCESS)
        info(LogRecord(
            event=LogEvent.OAUTH_LOGOUT.value,
            message=f"Bot user {bot_user_id} logged out",
            data={"bot_user_id": bot_user_id, "group_id": group_id},
        ))
        return True
