"""Configuration management using Pydantic Settings.

Values are read from ``VTL_EXPORT_*`` environment variables and an optional
``.env`` file. CLI flags are applied on top with :func:`ExportSettings.merge`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from vtl_export.core.errors import MissingConfigError

# AppSync caps maxResults for ListTypes / ListResolvers at 25.
MAX_PAGE_SIZE = 25


class ExportSettings(BaseSettings):
    """Settings for one export run."""

    model_config = SettingsConfigDict(
        env_prefix="VTL_EXPORT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Remote
    api_id: str | None = None
    profile: str | None = None
    region: str = "us-east-1"

    # Output
    output_dir: Path = Path("./mappingTemplates")

    # Traversal
    page_size: int = Field(default=MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE)
    max_concurrency: int = Field(default=16, ge=0)  # 0 = unbounded
    best_effort: bool = False

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    json_logs: bool | None = None  # None = auto-detect from TTY

    def merge(self, **overrides: Any) -> ExportSettings:
        """Return a validated copy with every non-None override applied."""
        values = self.model_dump()
        values.update({k: v for k, v in overrides.items() if v is not None})
        return ExportSettings(**values)

    def require_api_id(self) -> str:
        """Return the API id, raising MissingConfigError when unset."""
        if not self.api_id:
            raise MissingConfigError(
                "api_id", "Missing required option --api-id (or VTL_EXPORT_API_ID)"
            )
        return self.api_id


_settings: ExportSettings | None = None


def get_settings() -> ExportSettings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = ExportSettings()
    return _settings


def reset_settings() -> None:
    """Reset settings instance (for testing)."""
    global _settings
    _settings = None
