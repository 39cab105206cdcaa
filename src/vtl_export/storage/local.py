"""Local filesystem artifact store."""

from pathlib import Path
from typing import TextIO

from vtl_export.core.logging import get_logger
from vtl_export.storage.base import ArtifactStore

logger = get_logger(__name__)


class LocalArtifactStore(ArtifactStore):
    """
    Local filesystem artifact store.

    Stores artifacts under a base directory with the path structure
    preserved. The base directory itself is created lazily by the first
    ``make_dirs``/``write_text`` call.
    """

    def __init__(self, base_path: str | Path = "./mappingTemplates"):
        self.base_path = Path(base_path).resolve()

    def _resolve_path(self, path: str) -> Path:
        """Resolve a store path to absolute filesystem path."""
        clean_path = Path(path).as_posix().lstrip("/")
        full_path = self.base_path / clean_path

        # Field and function names come from the remote; keep them inside the root.
        try:
            full_path.resolve().relative_to(self.base_path)
        except ValueError:
            raise ValueError(f"Invalid path: {path} (outside base directory)")

        return full_path

    def make_dirs(self, path: str) -> None:
        self._resolve_path(path).mkdir(parents=True, exist_ok=True)

    def write_text(self, path: str, content: str) -> None:
        """Write content to local filesystem."""
        full_path = self._resolve_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)

        data = content.encode("utf-8")
        full_path.write_bytes(data)

        logger.debug("file_written", path=path, size=len(data))

    def delete(self, path: str) -> bool:
        full_path = self._resolve_path(path)
        try:
            full_path.unlink()
        except FileNotFoundError:
            return False
        logger.debug("file_deleted", path=path)
        return True

    def open_append(self, path: str) -> TextIO:
        full_path = self._resolve_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        return full_path.open("a", encoding="utf-8")
