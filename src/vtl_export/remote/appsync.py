"""AppSync API adapter backed by boto3.

boto3 is synchronous; every call is pushed to a worker thread with
``asyncio.to_thread`` so it suspends only the calling coroutine. A semaphore
bounds how many calls are in flight at once. It is held for exactly one call,
never across calls, so one resolver's work never waits on another's.

botocore exceptions propagate unchanged. The traversal layer wraps them into
``RemoteListError`` / ``FunctionResolutionError`` / ``SetupError`` depending on
which branch issued the call.
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import Any

import boto3
from botocore.config import Config

from vtl_export.core.logging import get_logger
from vtl_export.core.models import (
    Page,
    PipelineFunction,
    Resolver,
    ResolverKind,
    SchemaType,
)

logger = get_logger(__name__)


def create_appsync_client(
    profile: str | None = None,
    region: str = "us-east-1",
    max_pool_connections: int = 16,
) -> Any:
    """Create a boto3 AppSync client from a named credentials profile.

    With ``profile=None`` the default boto3 credential chain is used.
    """
    session = boto3.Session(profile_name=profile, region_name=region)
    client = session.client(
        "appsync",
        config=Config(
            max_pool_connections=max_pool_connections,
            retries={"mode": "standard"},
        ),
    )

    logger.info("appsync.client_initialized", profile=profile, region=region)
    return client


def _next_token(response: dict[str, Any]) -> str | None:
    # An empty token means the same as no token.
    return response.get("nextToken") or None


def resolver_from_response(data: dict[str, Any]) -> Resolver:
    """Map one entry of ``ListResolvers`` onto a Resolver."""
    pipeline_config = data.get("pipelineConfig") or {}
    return Resolver(
        type_name=data["typeName"],
        field_name=data["fieldName"],
        kind=ResolverKind(data.get("kind") or ResolverKind.UNIT.value),
        request_mapping_template=data.get("requestMappingTemplate"),
        response_mapping_template=data.get("responseMappingTemplate"),
        function_ids=tuple(pipeline_config.get("functions") or ()),
        data_source_name=data.get("dataSourceName"),
        resolver_arn=data.get("resolverArn"),
    )


def function_from_response(data: dict[str, Any]) -> PipelineFunction:
    """Map a ``functionConfiguration`` onto a PipelineFunction."""
    return PipelineFunction(
        function_id=data["functionId"],
        name=data["name"],
        request_mapping_template=data.get("requestMappingTemplate"),
        response_mapping_template=data.get("responseMappingTemplate"),
        data_source_name=data.get("dataSourceName"),
        function_arn=data.get("functionArn"),
    )


class Boto3AppSyncApi:
    """AppSyncApi implementation over a boto3 ``appsync`` client.

    Args:
        client: boto3 AppSync client (see :func:`create_appsync_client`).
        max_concurrency: Maximum in-flight calls; 0 means unbounded.
    """

    def __init__(self, client: Any, max_concurrency: int = 16):
        self.client = client
        self.max_concurrency = max_concurrency
        self._gate: asyncio.Semaphore | None = (
            asyncio.Semaphore(max_concurrency) if max_concurrency > 0 else None
        )

    async def _call(self, operation: str, **params: Any) -> dict[str, Any]:
        gate = self._gate if self._gate is not None else contextlib.nullcontext()
        async with gate:
            logger.debug("appsync.call", operation=operation, **params)
            method = getattr(self.client, operation)
            return await asyncio.to_thread(method, **params)

    async def get_schema_document(self, api_id: str, format: str = "SDL") -> str:
        response = await self._call("get_introspection_schema", apiId=api_id, format=format)
        body = response["schema"]
        # boto3 returns a StreamingBody for this blob
        raw = await asyncio.to_thread(body.read) if hasattr(body, "read") else body
        return raw.decode("utf-8") if isinstance(raw, bytes) else raw

    async def list_types(
        self, api_id: str, format: str, page_size: int, cursor: str | None
    ) -> Page[SchemaType]:
        params: dict[str, Any] = {"apiId": api_id, "format": format, "maxResults": page_size}
        if cursor:
            params["nextToken"] = cursor

        response = await self._call("list_types", **params)
        return Page(
            items=[SchemaType(name=t["name"]) for t in response.get("types", [])],
            next_cursor=_next_token(response),
        )

    async def list_resolvers(
        self, api_id: str, type_name: str, page_size: int, cursor: str | None
    ) -> Page[Resolver]:
        params: dict[str, Any] = {"apiId": api_id, "typeName": type_name, "maxResults": page_size}
        if cursor:
            params["nextToken"] = cursor

        response = await self._call("list_resolvers", **params)
        return Page(
            items=[resolver_from_response(r) for r in response.get("resolvers", [])],
            next_cursor=_next_token(response),
        )

    async def get_function(self, api_id: str, function_id: str) -> PipelineFunction:
        response = await self._call("get_function", apiId=api_id, functionId=function_id)
        return function_from_response(response["functionConfiguration"])
