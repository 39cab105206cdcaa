"""vtl-export command-line interface."""

from vtl_export.cli.app import app

__all__ = ["app"]
