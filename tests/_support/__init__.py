"""
Test support utilities for vtl-export tests.

Helpers that don't fit as pytest fixtures but are used across test files.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any


def read_metadata_log(root: Path) -> list[dict[str, Any]]:
    """
    Parse every line of ``<root>/resolvers/api-metadata.txt``.

    Raises:
        FileNotFoundError: If the log doesn't exist
    """
    log_path = root / "resolvers" / "api-metadata.txt"
    if not log_path.exists():
        raise FileNotFoundError(f"Metadata log not found: {log_path}")

    with open(log_path, encoding="utf-8") as f:
        return [json.loads(line) for line in f if line.strip()]


def list_artifacts(root: Path) -> set[str]:
    """Return every ``.vtl`` file under ``root`` as a posix path relative to it."""
    return {p.relative_to(root).as_posix() for p in root.rglob("*.vtl")}
