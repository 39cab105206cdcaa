"""
vtl-export - export AppSync resolvers and pipeline functions as VTL files.

- vtl_export.core: models, errors, settings, logging
- vtl_export.remote: AppSync API contract and boto3 adapter
- vtl_export.storage: artifact store contract and local filesystem store
- vtl_export.export: pagination, traversal, writer, orchestrator
- vtl_export.cli: typer command-line entry point
"""

__version__ = "0.1.0"
