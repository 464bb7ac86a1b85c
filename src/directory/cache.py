"""
Per-user caches of platform identity and directory data.

Entries are plain dicts keyed by bot user id with no TTL and no eviction.
Data is a snapshot taken on first access; invalidate() is the only way to
refresh it short of a restart.
"""

from dataclasses import dataclass
from typing import Dict, List

from core.errors import ListFetchFailure
from models import SMS_FEATURE, Contact, ExtensionDirectoryEntry, Identity, PhoneNumberEntry
from sessions import SessionRegistry
from utils import LogRecord, LogEvent, debug, info, warning, error
from .paging import PaginatedFetcher


@dataclass
class DirectoryConfig:
    """Cache policy settings."""
    # Cache an empty list when a directory or phone-number fetch fails
    cache_failed_lists: bool = True
    # Drop a user's identity and directory entries when they log out
    invalidate_on_logout: bool = True


class IdentityCache:
    """Resolved account identity per bot user."""

    def __init__(self, registry: SessionRegistry):
        self.registry = registry
        self._identities: Dict[str, Identity] = {}

    async def get_identity(self, bot_user_id: str) -> Identity:
        """
        Return the cached identity, fetching it on first access.

        Fetch failures propagate as ListFetchFailure and nothing is cached.
        """
        cached = self._identities.get(bot_user_id)
        if cached is not None:
            return cached

        client = self.registry.get_or_create(bot_user_id).client
        try:
            record = await client.get_extension()
        except ListFetchFailure:
            raise
        except Exception as e:
            raise ListFetchFailure(f"Identity lookup failed: {e}") from e

        identity = Identity.from_record(record)
        self._identities[bot_user_id] = identity
        debug(LogRecord(
            event=LogEvent.IDENTITY_CACHED.value,
            message=f"Cached identity {identity.describe()} for bot user {bot_user_id}",
            data={"bot_user_id": bot_user_id},
        ))
        return identity

    def invalidate(self, bot_user_id: str) -> bool:
        return self._identities.pop(bot_user_id, None) is not None

    def __contains__(self, bot_user_id: str) -> bool:
        return bot_user_id in self._identities


class DirectoryCache:
    """Extension directory and phone numbers per bot user, plus derived views."""

    def __init__(self, registry: SessionRegistry, fetcher: PaginatedFetcher,
                 config: DirectoryConfig = None):
        self.registry = registry
        self.fetcher = fetcher
        self.config = config or DirectoryConfig()
        self._directories: Dict[str, List[ExtensionDirectoryEntry]] = {}
        self._phone_numbers: Dict[str, List[PhoneNumberEntry]] = {}

    async def get_extension_directory(self, bot_user_id: str) -> List[ExtensionDirectoryEntry]:
        cached = self._directories.get(bot_user_id)
        if cached is not None:
            return cached

        client = self.registry.get_or_create(bot_user_id).client
        try:
            records = await self.fetcher.fetch_all(client.list_extensions, label="extension directory")
        except ListFetchFailure as e:
            error(LogRecord(
                event=LogEvent.DIRECTORY_FETCH_FAILED.value,
                message=f"Extension directory fetch failed for bot user {bot_user_id}",
                data={"bot_user_id": bot_user_id, "cached": self.config.cache_failed_lists},
            ), exc=e)
            entries: List[ExtensionDirectoryEntry] = []
            if self.config.cache_failed_lists:
                self._directories[bot_user_id] = entries
            return entries

        entries = [ExtensionDirectoryEntry.from_record(record) for record in records]
        self._directories[bot_user_id] = entries
        info(LogRecord(
            event=LogEvent.DIRECTORY_CACHED.value,
            message=f"Cached {len(entries)} directory entries for bot user {bot_user_id}",
            data={"bot_user_id": bot_user_id},
        ))
        return entries

    async def get_phone_numbers(self, bot_user_id: str) -> List[PhoneNumberEntry]:
        cached = self._phone_numbers.get(bot_user_id)
        if cached is not None:
            return cached

        client = self.registry.get_or_create(bot_user_id).client
        try:
            records = await self.fetcher.fetch_all(client.list_phone_numbers, label="phone numbers")
        except ListFetchFailure as e:
            error(LogRecord(
                event=LogEvent.PHONE_NUMBERS_FETCH_FAILED.value,
                message=f"Phone number fetch failed for bot user {bot_user_id}",
                data={"bot_user_id": bot_user_id, "cached": self.config.cache_failed_lists},
            ), exc=e)
            numbers: List[PhoneNumberEntry] = []
            if self.config.cache_failed_lists:
                self._phone_numbers[bot_user_id] = numbers
            return numbers

        numbers = [PhoneNumberEntry.from_record(record) for record in records]
        self._phone_numbers[bot_user_id] = numbers
        info(LogRecord(
            event=LogEvent.PHONE_NUMBERS_CACHED.value,
            message=f"Cached {len(numbers)} phone numbers for bot user {bot_user_id}",
            data={"bot_user_id": bot_user_id},
        ))
        return numbers

    async def get_sms_capable_numbers(self, bot_user_id: str) -> List[PhoneNumberEntry]:
        numbers = await self.get_phone_numbers(bot_user_id)
        return [number for number in numbers if number.has_feature(SMS_FEATURE)]

    async def search_contacts(self, bot_user_id: str, name: str) -> List[Contact]:
        """
        Directory entries whose name or first name equals `name`, followed by
        live address-book contacts whose name starts with it.

        The two sources are concatenated as-is; a person present in both
        appears twice.
        """
        directory = await self.get_extension_directory(bot_user_id)
        contacts = [
            Contact.from_extension(entry)
            for entry in directory
            if entry.name == name or entry.first_name == name
        ]

        client = self.registry.get_or_create(bot_user_id).client
        try:
            records = await client.search_address_book(name)
        except Exception as e:
            warning(LogRecord(
                event=LogEvent.ADDRESS_BOOK_SEARCH_FAILED.value,
                message=f"Address book search failed for bot user {bot_user_id}",
                data={"bot_user_id": bot_user_id},
            ), exc=e)
            records = []

        contacts.extend(Contact.from_address_book(record) for record in records)
        return contacts

    def invalidate(self, bot_user_id: str) -> bool:
        dropped_directory = self._directories.pop(bot_user_id, None) is not None
        dropped_numbers = self._phone_numbers.pop(bot_user_id, None) is not None
        return dropped_directory or dropped_numbers

    def __contains__(self, bot_user_id: str) -> bool:
        return bot_user_id in self._directories or bot_user_id in self._phone_numbers
