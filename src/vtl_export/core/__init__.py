"""Core primitives: models, errors, settings, logging."""

from vtl_export.core.errors import (
    ArtifactWriteError,
    ConfigError,
    ErrorCategory,
    ErrorContext,
    ExportError,
    FunctionResolutionError,
    InvalidTransitionError,
    MissingConfigError,
    RemoteListError,
    SetupError,
)
from vtl_export.core.logging import LogContext, configure_logging, get_logger
from vtl_export.core.models import (
    MetadataRecord,
    Page,
    PipelineFunction,
    Resolver,
    ResolverKind,
    SchemaType,
)

__all__ = [
    "ArtifactWriteError",
    "ConfigError",
    "ErrorCategory",
    "ErrorContext",
    "ExportError",
    "FunctionResolutionError",
    "InvalidTransitionError",
    "MissingConfigError",
    "RemoteListError",
    "SetupError",
    "LogContext",
    "configure_logging",
    "get_logger",
    "MetadataRecord",
    "Page",
    "PipelineFunction",
    "Resolver",
    "ResolverKind",
    "SchemaType",
]
