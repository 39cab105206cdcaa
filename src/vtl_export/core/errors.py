"""
Structured error types for vtl-export.

Every failure the exporter can report is an ``ExportError``. Each carries a
category, structured context (api id, type, field, function, path) and the
chained underlying exception, so that a branch failure can be logged and
aggregated into the run report without losing where it happened.

Architecture:
    ::

        ┌───────────────────────────────────────────────────────────┐
        │                       ExportError                          │
        │            (category, context, cause, to_dict)             │
        ├───────────────────────────────────────────────────────────┤
        │  SetupError             RemoteListError                    │
        │  (SETUP, fatal)         (REMOTE, fatal to its branch)      │
        │                                                            │
        │  FunctionResolutionError   ArtifactWriteError              │
        │  (REMOTE, one resolver)    (STORAGE, one artifact)         │
        │                                                            │
        │  ConfigError                                               │
        │  (CONFIG)                                                  │
        │       │                                                    │
        │  MissingConfigError                                        │
        └───────────────────────────────────────────────────────────┘

Propagation:
    - SetupError reaches the process boundary and aborts the run.
    - RemoteListError, FunctionResolutionError and ArtifactWriteError are
      caught at the branch boundary by the orchestrator and recorded as
      failures; sibling branches keep running.

Usage:
    from vtl_export.core.errors import RemoteListError

    try:
        page = await fetch_page(cursor)
    except Exception as e:
        raise RemoteListError("list resolvers failed", cause=e).with_context(
            type_name="Query"
        )
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCategory(str, Enum):
    """Classification used for logging and for the run report."""

    SETUP = "SETUP"
    REMOTE = "REMOTE"
    STORAGE = "STORAGE"
    CONFIG = "CONFIG"
    INTERNAL = "INTERNAL"


@dataclass
class ErrorContext:
    """
    Structured metadata attached to an error.

    Attributes:
        api_id: AppSync API being exported
        type_name: Schema type of the failing branch
        field_name: Resolver field of the failing branch
        function_id: Pipeline function id, for function fetch failures
        path: Artifact path, for write failures
        metadata: Additional key-value pairs
    """

    api_id: str | None = None
    type_name: str | None = None
    field_name: str | None = None
    function_id: str | None = None
    path: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    _FIELDS = ("api_id", "type_name", "field_name", "function_id", "path")

    def to_dict(self) -> dict[str, Any]:
        """Set fields plus metadata, flattened into one mapping."""
        fields = {name: getattr(self, name) for name in self._FIELDS}
        return {**{k: v for k, v in fields.items() if v is not None}, **self.metadata}


class ExportError(Exception):
    """
    Base exception for all exporter errors.

    Subclasses set ``default_category``. ``cause`` is chained as
    ``__cause__`` so tracebacks keep the original boto3 / OS error.
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.context = context or ErrorContext()
        self.cause = cause

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> ExportError:
        """Set context fields; unknown keys land in ``context.metadata``.

        Returns ``self`` so it can be chained onto a ``raise``.
        """
        for key, value in kwargs.items():
            if key in ErrorContext._FIELDS:
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def to_dict(self) -> dict[str, Any]:
        """JSON-safe form used by the run report and ``--json`` output."""
        data: dict[str, Any] = {
            "error_type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
        }
        if context := self.context.to_dict():
            data["context"] = context
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# -- setup ---------------------------------------------------------------------


class SetupError(ExportError):
    """
    Failure in one of the sequential setup steps.

    Directory creation, schema snapshot and metadata-log initialization.
    Always fatal: the run aborts before any traversal starts.
    """

    default_category = ErrorCategory.SETUP


# -- traversal -----------------------------------------------------------------


class RemoteListError(ExportError):
    """A paginated list call failed. Not retried."""

    default_category = ErrorCategory.REMOTE


class FunctionResolutionError(ExportError):
    """One or more pipeline functions of a resolver could not be fetched."""

    default_category = ErrorCategory.REMOTE

    def __init__(self, message: str, *, function_ids: list[str] | None = None, **kwargs: Any):
        super().__init__(message, **kwargs)
        self.function_ids = function_ids or []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.function_ids:
            result["function_ids"] = list(self.function_ids)
        return result


class ArtifactWriteError(ExportError):
    """Writing a single artifact failed. Earlier artifacts are not rolled back."""

    default_category = ErrorCategory.STORAGE


class InvalidTransitionError(ExportError):
    """The orchestrator was asked to move between states it cannot connect."""

    def __init__(self, current: str, target: str):
        self.current = current
        self.target = target
        super().__init__(f"Invalid export state transition: {current} → {target}")


# -- configuration -------------------------------------------------------------


class ConfigError(ExportError):
    """Configuration error."""

    default_category = ErrorCategory.CONFIG


class MissingConfigError(ConfigError):
    """A required setting (CLI flag or ``VTL_EXPORT_*`` variable) is unset."""

    def __init__(self, key: str, message: str | None = None):
        self.key = key
        super().__init__(message or f"{key} is required but was not set")


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "ExportError",
    "SetupError",
    "RemoteListError",
    "FunctionResolutionError",
    "ArtifactWriteError",
    "InvalidTransitionError",
    "ConfigError",
    "MissingConfigError",
]
