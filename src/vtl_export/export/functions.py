"""Pipeline Function Resolver — fetch the functions a pipeline resolver uses.

Each function id is fetched independently and concurrently. Results come
back in the order of the input ids, so the writer can pair each function with
its position in the pipeline. Functions are not cached across resolvers: a
function used by N resolvers is fetched N times.

If any fetch fails, the call fails as a whole and nothing of the resolver is
written. Fetches that were still running are allowed to finish first, so no
orphaned task outlives the resolver.
"""

from __future__ import annotations

import asyncio
from collections.abc import Sequence

from vtl_export.core.errors import FunctionResolutionError
from vtl_export.core.logging import get_logger
from vtl_export.core.models import PipelineFunction
from vtl_export.remote.protocol import AppSyncApi

logger = get_logger(__name__)


async def resolve_functions(
    api: AppSyncApi,
    api_id: str,
    function_ids: Sequence[str],
) -> list[PipelineFunction]:
    """Fetch every function in ``function_ids``, preserving order.

    Raises:
        FunctionResolutionError: If one or more fetches fail. ``function_ids``
            on the error lists every id that failed.
    """
    if not function_ids:
        return []

    results = await asyncio.gather(
        *(api.get_function(api_id, function_id) for function_id in function_ids),
        return_exceptions=True,
    )

    failed = [
        (function_id, result)
        for function_id, result in zip(function_ids, results)
        if isinstance(result, BaseException)
    ]
    if failed:
        first_id, first_error = failed[0]
        for function_id, error in failed:
            logger.warning(
                "export.function_fetch_failed",
                function_id=function_id,
                error=str(error),
            )
        cause = first_error if isinstance(first_error, Exception) else None
        raise FunctionResolutionError(
            f"Could not fetch pipeline function(s): {', '.join(fid for fid, _ in failed)}",
            function_ids=[fid for fid, _ in failed],
            cause=cause,
        ).with_context(api_id=api_id, function_id=first_id)

    return list(results)
