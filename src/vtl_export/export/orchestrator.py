"""Export Orchestrator — setup steps, then a concurrent crawl of the API.

STATES
──────
::

    INIT → DIRS_READY → SCHEMA_WRITTEN → METADATA_LOG_READY → TRAVERSING → DONE
      └──────────┴────────────┴──────────────────┴──────────────┴──→ FAILED

    INIT → DIRS_READY            create resolvers/Query, resolvers/Mutation
    DIRS_READY → SCHEMA_WRITTEN  fetch SDL schema, write schema.graphql
    SCHEMA_WRITTEN → LOG_READY   delete previous api-metadata.txt, open new
    LOG_READY → TRAVERSING       list all types
    TRAVERSING → DONE            every type / resolver branch has settled

Setup failures and a failed type listing are fatal: the state moves to
FAILED and the error propagates to the caller. Everything after that is a
branch: a failed resolver listing fails one type, a failed function fetch or
artifact write fails one resolver. Branch failures are logged, collected in
the :class:`ExportReport`, and never stop siblings. Successful writes are
never rolled back.

FAN-OUT
───────
::

    types ──┬── Query ────┬── getItem   (UNIT)      → write
            │             └── listItems (UNIT)      → write
            ├── Mutation ─┬── putItem   (PIPELINE)  → get_function × N → write
            └── Unused      (no resolvers, no-op)

Every type branch starts at once; every resolver branch starts as soon as its
type's listing completes. In-flight remote calls are bounded by the API
adapter's semaphore, not here.

Example::

    orchestrator = ExportOrchestrator(api, LocalArtifactStore("./out"), api_id="abc")
    report = await orchestrator.run()
    print(report.resolvers_exported, len(report.failures))
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any

from vtl_export.core.errors import (
    ExportError,
    InvalidTransitionError,
    SetupError,
)
from vtl_export.core.logging import LogContext, get_logger
from vtl_export.core.models import Resolver
from vtl_export.core.settings import MAX_PAGE_SIZE
from vtl_export.export.functions import resolve_functions
from vtl_export.export.resolvers import list_resolvers_for_type
from vtl_export.export.types import list_all_types
from vtl_export.export.writer import (
    RESOLVERS_DIR,
    SCHEMA_FILE,
    ExportWriter,
    MetadataLog,
)
from vtl_export.remote.protocol import AppSyncApi
from vtl_export.storage.base import ArtifactStore

logger = get_logger(__name__)

DEFAULT_TYPE_DIRS = ("Query", "Mutation")


class ExportState(str, Enum):
    INIT = "init"
    DIRS_READY = "dirs_ready"
    SCHEMA_WRITTEN = "schema_written"
    METADATA_LOG_READY = "metadata_log_ready"
    TRAVERSING = "traversing"
    DONE = "done"
    FAILED = "failed"


EXPORT_VALID_TRANSITIONS: dict[ExportState, frozenset[ExportState]] = {
    ExportState.INIT: frozenset({ExportState.DIRS_READY, ExportState.FAILED}),
    ExportState.DIRS_READY: frozenset({ExportState.SCHEMA_WRITTEN, ExportState.FAILED}),
    ExportState.SCHEMA_WRITTEN: frozenset({ExportState.METADATA_LOG_READY, ExportState.FAILED}),
    ExportState.METADATA_LOG_READY: frozenset({ExportState.TRAVERSING, ExportState.FAILED}),
    ExportState.TRAVERSING: frozenset({ExportState.DONE, ExportState.FAILED}),
    ExportState.DONE: frozenset(),  # terminal
    ExportState.FAILED: frozenset(),  # terminal
}


@dataclass
class ExportFailure:
    """One failed branch of the traversal."""

    scope: str  # "type" or "resolver"
    type_name: str
    field_name: str | None
    error_type: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_exception(
        cls, scope: str, type_name: str, field_name: str | None, error: Exception
    ) -> ExportFailure:
        details = error.to_dict() if isinstance(error, ExportError) else {}
        return cls(
            scope=scope,
            type_name=type_name,
            field_name=field_name,
            error_type=error.__class__.__name__,
            message=str(error),
            details=details,
        )

    @property
    def target(self) -> str:
        return f"{self.type_name}.{self.field_name}" if self.field_name else self.type_name

    def to_dict(self) -> dict[str, Any]:
        return {
            "scope": self.scope,
            "type_name": self.type_name,
            "field_name": self.field_name,
            "error_type": self.error_type,
            "message": self.message,
            "details": self.details,
        }


@dataclass
class ExportReport:
    """Aggregate outcome of one export run."""

    api_id: str
    state: ExportState = ExportState.INIT
    types_seen: int = 0
    empty_types: int = 0
    resolvers_exported: int = 0
    functions_exported: int = 0
    failures: list[ExportFailure] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def success(self) -> bool:
        return self.state is ExportState.DONE and not self.failures

    @property
    def duration_seconds(self) -> float | None:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds()
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialise for logging / CLI JSON output."""
        return {
            "api_id": self.api_id,
            "state": self.state.value,
            "success": self.success,
            "types_seen": self.types_seen,
            "empty_types": self.empty_types,
            "resolvers_exported": self.resolvers_exported,
            "functions_exported": self.functions_exported,
            "failure_count": len(self.failures),
            "failures": [f.to_dict() for f in self.failures],
            "duration_seconds": self.duration_seconds,
        }


class ExportOrchestrator:
    """Drives one export run of an AppSync API into an artifact store.

    Args:
        api: Remote API (see :class:`~vtl_export.remote.protocol.AppSyncApi`).
        store: Destination artifact store.
        api_id: AppSync API id.
        page_size: ``maxResults`` for type and resolver listings.
        type_dirs: Type directories created up front.
    """

    def __init__(
        self,
        api: AppSyncApi,
        store: ArtifactStore,
        api_id: str,
        page_size: int = MAX_PAGE_SIZE,
        type_dirs: tuple[str, ...] = DEFAULT_TYPE_DIRS,
    ) -> None:
        self.api = api
        self.store = store
        self.api_id = api_id
        self.page_size = page_size
        self.type_dirs = type_dirs
        self.report = ExportReport(api_id=api_id)

    @property
    def state(self) -> ExportState:
        return self.report.state

    def _transition(self, target: ExportState) -> None:
        current = self.report.state
        if target not in EXPORT_VALID_TRANSITIONS.get(current, frozenset()):
            raise InvalidTransitionError(current.value, target.value)
        self.report.state = target
        logger.debug("export.state", previous=current.value, state=target.value)

    # ── Setup steps ──────────────────────────────────────────────────

    async def _prepare_dirs(self) -> None:
        try:
            for type_name in self.type_dirs:
                await asyncio.to_thread(self.store.make_dirs, f"{RESOLVERS_DIR}/{type_name}")
        except (OSError, ValueError) as e:
            raise SetupError(f"Could not create output directories: {e}", cause=e)
        self._transition(ExportState.DIRS_READY)

    async def _write_schema(self) -> None:
        try:
            schema = await self.api.get_schema_document(self.api_id, "SDL")
            await asyncio.to_thread(self.store.write_text, SCHEMA_FILE, schema)
        except Exception as e:
            raise SetupError(f"Could not export schema: {e}", cause=e).with_context(
                api_id=self.api_id, path=SCHEMA_FILE
            )
        logger.info("export.schema_written", path=SCHEMA_FILE, size=len(schema))
        self._transition(ExportState.SCHEMA_WRITTEN)

    # ── Traversal branches ───────────────────────────────────────────

    def _record_failure(
        self, scope: str, type_name: str, field_name: str | None, error: Exception
    ) -> None:
        failure = ExportFailure.from_exception(scope, type_name, field_name, error)
        self.report.failures.append(failure)
        logger.error(
            "export.branch_failed",
            scope=scope,
            type_name=type_name,
            field_name=field_name,
            error_type=failure.error_type,
            error=failure.message,
        )

    async def _export_resolver(self, resolver: Resolver, writer: ExportWriter) -> None:
        try:
            functions = []
            if resolver.is_pipeline:
                functions = await resolve_functions(self.api, self.api_id, resolver.function_ids)
            await writer.write_resolver(resolver, functions)
        except Exception as e:
            self._record_failure("resolver", resolver.type_name, resolver.field_name, e)
            return

        self.report.resolvers_exported += 1
        self.report.functions_exported += len(functions)

    async def _export_type(self, type_name: str, writer: ExportWriter) -> None:
        try:
            resolvers = await list_resolvers_for_type(
                self.api, self.api_id, type_name, self.page_size
            )
        except Exception as e:
            self._record_failure("type", type_name, None, e)
            return

        if not resolvers:
            self.report.empty_types += 1
            return

        await asyncio.gather(*(self._export_resolver(r, writer) for r in resolvers))

    # ── Run ──────────────────────────────────────────────────────────

    async def run(self) -> ExportReport:
        """Execute the export.

        Returns:
            The report, in state DONE, with any branch failures listed.

        Raises:
            SetupError: If a setup step fails.
            RemoteListError: If the top-level type listing fails.
        """
        self.report.started_at = datetime.now(UTC)

        async with LogContext(api_id=self.api_id):
            logger.info("export.start", page_size=self.page_size)
            try:
                await self._prepare_dirs()
                await self._write_schema()

                async with MetadataLog(self.store) as log:
                    self._transition(ExportState.METADATA_LOG_READY)
                    writer = ExportWriter(self.store, log)

                    type_names = await list_all_types(self.api, self.api_id, self.page_size)
                    self.report.types_seen = len(type_names)
                    self._transition(ExportState.TRAVERSING)

                    await asyncio.gather(*(self._export_type(t, writer) for t in type_names))

            except Exception as e:
                self.report.state = ExportState.FAILED
                self.report.completed_at = datetime.now(UTC)
                logger.error(
                    "export.failed",
                    error_type=e.__class__.__name__,
                    error=str(e),
                )
                raise

            self._transition(ExportState.DONE)
            self.report.completed_at = datetime.now(UTC)

            logger.info(
                "export.complete",
                types=self.report.types_seen,
                resolvers=self.report.resolvers_exported,
                functions=self.report.functions_exported,
                failures=len(self.report.failures),
                duration_seconds=self.report.duration_seconds,
            )

        return self.report


async def export_api(
    api: AppSyncApi,
    store: ArtifactStore,
    api_id: str,
    page_size: int = MAX_PAGE_SIZE,
) -> ExportReport:
    """Convenience wrapper: build an orchestrator and run it."""
    return await ExportOrchestrator(api, store, api_id, page_size=page_size).run()
