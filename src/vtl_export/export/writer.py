"""Export Writer — materialise resolvers as VTL files plus metadata records.

LAYOUT
──────
::

    <root>/resolvers/api-metadata.txt                                   (JSON lines)
    <root>/resolvers/<Type>/<field>-requestMappingTemplate.vtl
    <root>/resolvers/<Type>/<field>-responseMappingTemplate.vtl
    <root>/resolvers/<Type>/<field>-fun-<fn>-requestMappingTemplate.vtl
    <root>/resolvers/<Type>/<field>-fun-<fn>-responseMappingTemplate.vtl

Paths depend only on type, field and function name, so re-exporting the same
field overwrites the same files.

CONSISTENCY
───────────
There is no all-or-nothing guarantee across the files of one resolver.
Artifacts are written one at a time; if a write fails (or the process dies)
part-way through, earlier artifacts of that resolver are current and later
ones are stale or missing. Callers must treat a resolver reported as failed
as possibly half-written.

Metadata records are appended only after every artifact of the resolver and
its functions has been written, so the log never lists a resolver whose
export failed.

Each record is one ``write()`` of a complete line plus a flush, run in a
worker thread while holding the log's ``asyncio.Lock``, so concurrent
exports never interleave partial lines.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Sequence
from typing import TextIO

from vtl_export.core.errors import ArtifactWriteError, SetupError
from vtl_export.core.logging import get_logger
from vtl_export.core.models import MetadataRecord, PipelineFunction, Resolver
from vtl_export.storage.base import ArtifactStore

logger = get_logger(__name__)

RESOLVERS_DIR = "resolvers"
SCHEMA_FILE = "schema.graphql"
METADATA_LOG = f"{RESOLVERS_DIR}/api-metadata.txt"
TEMPLATE_EXT = ".vtl"

REQUEST_TEMPLATE = "requestMappingTemplate"
RESPONSE_TEMPLATE = "responseMappingTemplate"


def resolver_prefix(type_name: str, field_name: str) -> str:
    return f"{RESOLVERS_DIR}/{type_name}/{field_name}"


def resolver_artifact_path(type_name: str, field_name: str, template: str) -> str:
    return f"{resolver_prefix(type_name, field_name)}-{template}{TEMPLATE_EXT}"


def function_artifact_path(
    type_name: str, field_name: str, function_name: str, template: str
) -> str:
    return f"{resolver_prefix(type_name, field_name)}-fun-{function_name}-{template}{TEMPLATE_EXT}"


class MetadataLog:
    """Append-only JSON-lines log shared by all concurrent exports.

    Opened once per run by the orchestrator with ``async with``; the previous
    log is deleted first so a new run replaces, rather than extends, it.

    Example::

        async with MetadataLog(store) as log:
            await log.append(record)
    """

    def __init__(self, store: ArtifactStore, path: str = METADATA_LOG):
        self.store = store
        self.path = path
        self._handle: TextIO | None = None
        self._lock = asyncio.Lock()
        self.records_written = 0

    async def open(self) -> None:
        try:
            deleted = await asyncio.to_thread(self.store.delete, self.path)
            self._handle = await asyncio.to_thread(self.store.open_append, self.path)
        except (OSError, ValueError) as e:
            raise SetupError(f"Could not initialise metadata log: {e}", cause=e).with_context(
                path=self.path
            )
        logger.info("metadata_log.opened", path=self.path, replaced_previous=deleted)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None
            logger.debug("metadata_log.closed", path=self.path, records=self.records_written)

    @staticmethod
    def _write_line(handle: TextIO, line: str) -> None:
        handle.write(line)
        handle.flush()

    async def append(self, record: MetadataRecord) -> None:
        """Append one record as a single line.

        Raises:
            ArtifactWriteError: If the log is closed or the write fails.
        """
        if self._handle is None:
            raise ArtifactWriteError("Metadata log is not open").with_context(path=self.path)

        line = json.dumps(record.to_dict(), ensure_ascii=False) + "\n"
        try:
            async with self._lock:
                await asyncio.to_thread(self._write_line, self._handle, line)
        except OSError as e:
            raise ArtifactWriteError(f"Could not append metadata record: {e}", cause=e).with_context(
                path=self.path,
                type_name=record.type_name,
                field_name=record.field_name,
            )
        self.records_written += 1

    async def __aenter__(self) -> MetadataLog:
        await self.open()
        return self

    async def __aexit__(self, *args) -> None:
        self.close()


class ExportWriter:
    """Writes one resolver (and its pipeline functions) to the artifact store.

    Templates the remote does not define are skipped; the metadata record
    lists only the artifacts actually written.
    """

    def __init__(self, store: ArtifactStore, log: MetadataLog):
        self.store = store
        self.log = log

    async def _write(self, path: str, content: str, resolver: Resolver) -> None:
        try:
            await asyncio.to_thread(self.store.write_text, path, content)
        except (OSError, ValueError) as e:
            raise ArtifactWriteError(f"Could not write {path}: {e}", cause=e).with_context(
                path=path,
                type_name=resolver.type_name,
                field_name=resolver.field_name,
            )

    async def _write_pair(
        self,
        resolver: Resolver,
        templates: Sequence[tuple[str, str | None]],
    ) -> list[str]:
        written = []
        for path, body in templates:
            if body is None:
                continue
            await self._write(path, body, resolver)
            written.append(path)
        return written

    async def write_resolver(
        self,
        resolver: Resolver,
        functions: Sequence[PipelineFunction] = (),
    ) -> None:
        """Write a resolver's templates and each function's, then their records.

        Records are appended only once every artifact is on disk.

        Raises:
            ArtifactWriteError: On the first failed write. Artifacts written
                before it are kept; no record is appended.
        """
        type_name, field_name = resolver.type_name, resolver.field_name

        written = await self._write_pair(
            resolver,
            [
                (
                    resolver_artifact_path(type_name, field_name, REQUEST_TEMPLATE),
                    resolver.request_mapping_template,
                ),
                (
                    resolver_artifact_path(type_name, field_name, RESPONSE_TEMPLATE),
                    resolver.response_mapping_template,
                ),
            ],
        )
        records = [MetadataRecord.for_resolver(resolver, written)]

        for function in functions:
            fn_written = await self._write_pair(
                resolver,
                [
                    (
                        function_artifact_path(type_name, field_name, function.name, REQUEST_TEMPLATE),
                        function.request_mapping_template,
                    ),
                    (
                        function_artifact_path(type_name, field_name, function.name, RESPONSE_TEMPLATE),
                        function.response_mapping_template,
                    ),
                ],
            )
            records.append(MetadataRecord.for_function(resolver, function, fn_written))

        for record in records:
            await self.log.append(record)

        logger.info(
            "writer.resolver_written",
            type_name=type_name,
            field_name=field_name,
            kind=resolver.kind.value,
            functions=len(functions),
        )
