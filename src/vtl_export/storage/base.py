"""Base artifact store interface."""

from abc import ABC, abstractmethod
from typing import TextIO


class ArtifactStore(ABC):
    """Abstract base class for artifact stores.

    Paths are relative to the store root and use ``/`` separators.
    Stores are synchronous; async callers run them via ``asyncio.to_thread``.
    """

    @abstractmethod
    def make_dirs(self, path: str) -> None:
        """
        Create a directory and any missing parents.

        Existing directories are not an error.
        """
        ...

    @abstractmethod
    def write_text(self, path: str, content: str) -> None:
        """
        Write text to an artifact, replacing any previous content.

        Args:
            path: Store path (e.g., "resolvers/Query/getItem-requestMappingTemplate.vtl")
            content: Artifact body, written verbatim as UTF-8
        """
        ...

    @abstractmethod
    def delete(self, path: str) -> bool:
        """
        Delete an artifact if present.

        Returns:
            True if something was deleted, False if it did not exist
        """
        ...

    @abstractmethod
    def open_append(self, path: str) -> TextIO:
        """Open an artifact for appending text. Caller closes the handle."""
        ...
