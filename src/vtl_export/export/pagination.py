"""Pagination Engine — follow a cursor chain to the end.

WHY
───
Every AppSync listing is cursor-paginated: a page carries some items and,
when more remain, a ``nextToken``. The next request can only be issued once
the previous response has arrived, so the chain is strictly sequential.
Each page is awaited before the next is requested; no continuation is ever
scheduled without being awaited.

CONTRACT
────────
::

    collect_all(fetch_page, initial_cursor)
      ├── fetch_page(initial_cursor)  → Page(items, next_cursor)
      ├── fetch_page(next_cursor)     → ...
      └── stop when next_cursor is absent (None or "")

    - items are concatenated in page-arrival order
    - an empty page that still carries a cursor does NOT end the chain
    - a page without a cursor ends the chain, even if it has items
    - any fetch failure raises RemoteListError; no retries

Example::

    names = await collect_all(
        lambda cursor: api.list_types(api_id, "JSON", 25, cursor),
        label="types",
    )
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from vtl_export.core.errors import RemoteListError
from vtl_export.core.logging import get_logger
from vtl_export.core.models import Page

logger = get_logger(__name__)

T = TypeVar("T")

FetchPage = Callable[[str | None], Awaitable[Page[T]]]


async def collect_all(
    fetch_page: FetchPage[T],
    initial_cursor: str | None = None,
    *,
    label: str = "list",
) -> list[T]:
    """Fetch every page of a cursor-paginated listing.

    Args:
        fetch_page: Coroutine function ``(cursor) -> Page``.
        initial_cursor: Cursor for the first request (None for the start).
        label: Name used in logs and error messages.

    Returns:
        All items, in the order the pages arrived.

    Raises:
        RemoteListError: If any page fetch fails.
    """
    items: list[T] = []
    cursor = initial_cursor
    pages = 0

    while True:
        try:
            page = await fetch_page(cursor)
        except RemoteListError:
            raise
        except Exception as e:
            raise RemoteListError(
                f"Listing {label} failed on page {pages + 1}: {e}", cause=e
            ).with_context(cursor=cursor, pages_fetched=pages) from e

        pages += 1
        items.extend(page.items)

        if not page.next_cursor:
            break
        cursor = page.next_cursor

    logger.debug("pagination.complete", label=label, pages=pages, items=len(items))
    return items
