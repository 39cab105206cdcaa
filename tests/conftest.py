"""
Shared pytest fixtures for vtl-export tests.

This module provides:
- Environment isolation for VTL_EXPORT_* settings
- structlog reset between tests
- The reference API used by the end-to-end scenario
- A LocalArtifactStore rooted in tmp_path
"""

import os
from pathlib import Path

import pytest
import structlog

from tests._support.fakes import (
    FakeAppSyncApi,
    pipeline_function,
    pipeline_resolver,
    unit_resolver,
)
from vtl_export.core.settings import reset_settings
from vtl_export.storage.local import LocalArtifactStore


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep VTL_EXPORT_* from the developer environment out of tests."""
    for key in list(os.environ):
        if key.startswith("VTL_EXPORT_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Drop any configuration pointing at a stream captured by an earlier test."""
    yield
    structlog.reset_defaults()
    structlog.contextvars.clear_contextvars()


@pytest.fixture
def scenario_api() -> FakeAppSyncApi:
    """Query.getItem (UNIT), Mutation.putItem (PIPELINE → validate), Unused (none)."""
    return FakeAppSyncApi(
        types=["Query", "Mutation", "Unused"],
        resolvers={
            "Query": [unit_resolver("Query", "getItem")],
            "Mutation": [pipeline_resolver("Mutation", "putItem", ["fn-validate"])],
        },
        functions=[pipeline_function("fn-validate", "validate")],
    )


@pytest.fixture
def output_root(tmp_path) -> Path:
    return tmp_path / "mappingTemplates"


@pytest.fixture
def store(output_root) -> LocalArtifactStore:
    return LocalArtifactStore(output_root)
