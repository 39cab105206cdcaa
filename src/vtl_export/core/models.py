"""Domain models for the exported AppSync object graph."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Generic, TypeVar

T = TypeVar("T")


class ResolverKind(str, Enum):
    """How a resolver executes: a single data source, or a function pipeline."""

    UNIT = "UNIT"
    PIPELINE = "PIPELINE"


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a cursor-paginated listing.

    ``next_cursor`` is None on the last page.
    """

    items: list[T]
    next_cursor: str | None = None


@dataclass(frozen=True)
class SchemaType:
    name: str


@dataclass(frozen=True)
class Resolver:
    """A binding of request/response templates to one field of one type.

    Identity is ``(type_name, field_name)``. Templates are None when the
    remote defines none (e.g. JavaScript-runtime resolvers).
    """

    type_name: str
    field_name: str
    kind: ResolverKind = ResolverKind.UNIT
    request_mapping_template: str | None = None
    response_mapping_template: str | None = None
    function_ids: tuple[str, ...] = ()
    data_source_name: str | None = None
    resolver_arn: str | None = None

    @property
    def is_pipeline(self) -> bool:
        return self.kind is ResolverKind.PIPELINE


@dataclass(frozen=True)
class PipelineFunction:
    function_id: str
    name: str
    request_mapping_template: str | None = None
    response_mapping_template: str | None = None
    data_source_name: str | None = None
    function_arn: str | None = None


@dataclass
class MetadataRecord:
    """One line of the metadata log.

    ``record_type`` is ``"resolver"`` or ``"function"``. Field order in the
    serialized JSON is fixed so identical runs produce identical lines.
    """

    record_type: str
    type_name: str
    field_name: str
    artifacts: list[str] = field(default_factory=list)
    kind: str | None = None
    data_source_name: str | None = None
    resolver_arn: str | None = None
    function_ids: list[str] | None = None
    function_id: str | None = None
    function_name: str | None = None
    function_arn: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialise, dropping unset optional fields."""
        result: dict[str, Any] = {
            "recordType": self.record_type,
            "typeName": self.type_name,
            "fieldName": self.field_name,
        }
        optional = {
            "kind": self.kind,
            "dataSourceName": self.data_source_name,
            "resolverArn": self.resolver_arn,
            "functionIds": self.function_ids,
            "functionId": self.function_id,
            "functionName": self.function_name,
            "functionArn": self.function_arn,
        }
        result.update({k: v for k, v in optional.items() if v is not None})
        result["artifacts"] = list(self.artifacts)
        return result

    @classmethod
    def for_resolver(cls, resolver: Resolver, artifacts: list[str]) -> MetadataRecord:
        return cls(
            record_type="resolver",
            type_name=resolver.type_name,
            field_name=resolver.field_name,
            artifacts=artifacts,
            kind=resolver.kind.value,
            data_source_name=resolver.data_source_name,
            resolver_arn=resolver.resolver_arn,
            function_ids=list(resolver.function_ids) if resolver.is_pipeline else None,
        )

    @classmethod
    def for_function(
        cls, resolver: Resolver, function: PipelineFunction, artifacts: list[str]
    ) -> MetadataRecord:
        return cls(
            record_type="function",
            type_name=resolver.type_name,
            field_name=resolver.field_name,
            artifacts=artifacts,
            data_source_name=function.data_source_name,
            function_id=function.function_id,
            function_name=function.name,
            function_arn=function.function_arn,
        )
