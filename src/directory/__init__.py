"""
Directory module.

Paginated list fetching and the per-user identity and directory caches built
on top of it.
"""

from .paging import ListEndpoint, PaginatedFetcher
from .cache import DirectoryConfig, IdentityCache, DirectoryCache

__all__ = [
    "ListEndpoint", "PaginatedFetcher",
    "DirectoryConfig", "IdentityCache", "DirectoryCache"
]
