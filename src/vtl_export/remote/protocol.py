"""Capability contract for the remote AppSync API.

The exporter only needs four read operations. Anything that implements this
protocol (the boto3 adapter, an in-memory fake in tests) can be crawled.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from vtl_export.core.models import Page, PipelineFunction, Resolver, SchemaType


@runtime_checkable
class AppSyncApi(Protocol):
    """Read-only view of an AppSync GraphQL API."""

    async def get_schema_document(self, api_id: str, format: str = "SDL") -> str:
        """Return the full schema in the requested textual format."""
        ...

    async def list_types(
        self, api_id: str, format: str, page_size: int, cursor: str | None
    ) -> Page[SchemaType]:
        """Return one page of schema types."""
        ...

    async def list_resolvers(
        self, api_id: str, type_name: str, page_size: int, cursor: str | None
    ) -> Page[Resolver]:
        """Return one page of resolvers attached to ``type_name``."""
        ...

    async def get_function(self, api_id: str, function_id: str) -> PipelineFunction:
        """Return a single pipeline function configuration."""
        ...
