"""Artifact store abstraction for exported files."""

from vtl_export.storage.base import ArtifactStore
from vtl_export.storage.local import LocalArtifactStore

__all__ = ["ArtifactStore", "LocalArtifactStore"]
