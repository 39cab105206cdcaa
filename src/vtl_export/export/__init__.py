"""Export pipeline: pagination, traversal, writer, orchestrator."""

from vtl_export.export.functions import resolve_functions
from vtl_export.export.orchestrator import (
    ExportFailure,
    ExportOrchestrator,
    ExportReport,
    ExportState,
    export_api,
)
from vtl_export.export.pagination import collect_all
from vtl_export.export.resolvers import list_resolvers_for_type
from vtl_export.export.types import list_all_types
from vtl_export.export.writer import ExportWriter, MetadataLog

__all__ = [
    "collect_all",
    "list_all_types",
    "list_resolvers_for_type",
    "resolve_functions",
    "ExportWriter",
    "MetadataLog",
    "ExportFailure",
    "ExportOrchestrator",
    "ExportReport",
    "ExportState",
    "export_api",
]
