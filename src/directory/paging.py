"""Walks a multi-page platform listing to completion."""

from typing import Any, Awaitable, Callable, Dict, List

from core.errors import ListFetchFailure
from models import Page
from utils import LogRecord, LogEvent, debug, warning

# (page, per_page) -> Page
ListEndpoint = Callable[[int, int], Awaitable[Page]]


class PaginatedFetcher:
    """
    Fetch every page of a list endpoint and concatenate the records.

    The server's paging metadata is authoritative: the walk continues with
    page + 1 while total_pages > page. max_pages caps the walk; when the cap is
    hit the records collected so far are returned and a warning is logged.
    """

    def __init__(self, page_size: int = 100, max_pages: int = 50):
        if page_size < 1 or max_pages < 1:
            raise ValueError("page_size and max_pages must be positive")
        self.page_size = page_size
        self.max_pages = max_pages

    async def fetch_all(self, list_endpoint: ListEndpoint, label: str = "list") -> List[Dict[str, Any]]:
        records: List[Dict[str, Any]] = []
        page_number = 1
        pages_fetched = 0

        while True:
            try:
                page = await list_endpoint(page_number, self.page_size)
            except ListFetchFailure:
                raise
            except Exception as e:
                raise ListFetchFailure(f"Fetching {label} page {page_number} failed: {e}") from e

            pages_fetched += 1
            records.extend(page.records)
            debug(LogRecord(
                event=LogEvent.PAGINATION_PAGE_FETCHED.value,
                message=f"Fetched {label} page {page.page}/{page.total_pages} ({len(page.records)} records)",
                data={"page": page.page, "total_pages": page.total_pages},
            ))

            if page.total_pages <= page.page:
                return records

            if pages_fetched >= self.max_pages:
                warning(LogRecord(
                    event=LogEvent.PAGINATION_LIMIT_REACHED.value,
                    message=f"Stopped {label} after {pages_fetched} pages; server reports {page.total_pages}",
                    data={"page": page.page, "total_pages": page.total_pages},
                ))
                return records

            page_number = page.page + 1
