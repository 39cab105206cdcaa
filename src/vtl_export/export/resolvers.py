"""Resolver Collector — collect every resolver attached to one type."""

from __future__ import annotations

from vtl_export.core.errors import RemoteListError
from vtl_export.core.logging import get_logger
from vtl_export.core.models import Resolver
from vtl_export.core.settings import MAX_PAGE_SIZE
from vtl_export.export.pagination import collect_all
from vtl_export.remote.protocol import AppSyncApi

logger = get_logger(__name__)


async def list_resolvers_for_type(
    api: AppSyncApi,
    api_id: str,
    type_name: str,
    page_size: int = MAX_PAGE_SIZE,
) -> list[Resolver]:
    """Return all resolvers of ``type_name``.

    Most types (inputs, enums, plain object types) have no resolvers; an
    empty list is a normal result, not an error.

    Raises:
        RemoteListError: If any page fails. Context carries ``type_name``.
    """
    try:
        resolvers = await collect_all(
            lambda cursor: api.list_resolvers(api_id, type_name, page_size, cursor),
            label=f"resolvers of {type_name}",
        )
    except RemoteListError as e:
        raise e.with_context(api_id=api_id, type_name=type_name)

    if not resolvers:
        logger.debug("export.type_has_no_resolvers", type_name=type_name)
    else:
        logger.info("export.resolvers_listed", type_name=type_name, count=len(resolvers))
    return resolvers
