"""Type Enumerator — collect every schema type name of an API."""

from __future__ import annotations

from vtl_export.core.logging import get_logger
from vtl_export.core.settings import MAX_PAGE_SIZE
from vtl_export.export.pagination import collect_all
from vtl_export.remote.protocol import AppSyncApi

logger = get_logger(__name__)


async def list_all_types(
    api: AppSyncApi,
    api_id: str,
    page_size: int = MAX_PAGE_SIZE,
    format: str = "JSON",
) -> list[str]:
    """Return the names of all schema types, in listing order.

    Only names are kept; the next traversal level needs nothing else.

    Raises:
        RemoteListError: If any page of the type listing fails.
    """
    types = await collect_all(
        lambda cursor: api.list_types(api_id, format, page_size, cursor),
        label="types",
    )
    names = [t.name for t in types]
    logger.info("export.types_listed", count=len(names))
    return names
