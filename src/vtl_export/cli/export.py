"""
CLI: ``vtl-export export`` — download resolvers of one AppSync API.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from botocore.exceptions import BotoCoreError
from pydantic import ValidationError

from vtl_export.cli.utils import console, err_console, print_error, print_report
from vtl_export.core.errors import ConfigError, ExportError, SetupError
from vtl_export.core.logging import configure_logging
from vtl_export.core.settings import ExportSettings, get_settings
from vtl_export.export.orchestrator import ExportOrchestrator, ExportReport
from vtl_export.remote.appsync import Boto3AppSyncApi, create_appsync_client
from vtl_export.storage.local import LocalArtifactStore


def _load_settings(**overrides) -> ExportSettings:
    try:
        return get_settings().merge(**overrides)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}", cause=e)


async def run_export(settings: ExportSettings) -> ExportReport:
    """Build the boto3 adapter and local store from settings and run."""
    api_id = settings.require_api_id()
    try:
        client = create_appsync_client(
            profile=settings.profile,
            region=settings.region,
            max_pool_connections=max(settings.max_concurrency, 10),
        )
    except BotoCoreError as e:
        raise SetupError(f"Could not create AppSync client: {e}", cause=e)
    api = Boto3AppSyncApi(client, max_concurrency=settings.max_concurrency)
    store = LocalArtifactStore(settings.output_dir)
    orchestrator = ExportOrchestrator(api, store, api_id, page_size=settings.page_size)
    return await orchestrator.run()


def export(
    api_id: str | None = typer.Option(None, "--api-id", "-a", help="API ID of the AppSync API"),
    profile: str | None = typer.Option(None, "--profile", "-p", help="AWS credentials profile"),
    region: str | None = typer.Option(None, "--aws-region", "-r", help="AWS region [default: us-east-1]"),
    output_dir: Path | None = typer.Option(
        None, "--output-dir", "-o", help="Directory to save resolvers to [default: ./mappingTemplates]"
    ),
    page_size: int | None = typer.Option(None, "--page-size", help="Page size for list calls (1-25)"),
    max_concurrency: int | None = typer.Option(
        None, "--max-concurrency", help="Maximum in-flight AppSync calls (0 = unbounded)"
    ),
    best_effort: bool | None = typer.Option(
        None, "--best-effort/--strict", help="Exit 0 even if some resolvers failed"
    ),
    log_level: str | None = typer.Option(None, "--log-level", "-l"),
    json_logs: bool | None = typer.Option(None, "--json-logs/--console-logs"),
    json_out: bool = typer.Option(False, "--json", help="Print the report as JSON"),
) -> None:
    """Export schema, resolvers and pipeline functions as VTL files."""
    try:
        settings = _load_settings(
            api_id=api_id,
            profile=profile,
            region=region,
            output_dir=output_dir,
            page_size=page_size,
            max_concurrency=max_concurrency,
            best_effort=best_effort,
            log_level=log_level.upper() if log_level else None,
            json_logs=json_logs,
        )
        settings.require_api_id()
    except ConfigError as e:
        print_error(e)
        raise typer.Exit(code=1)

    configure_logging(level=settings.log_level, json_format=settings.json_logs)

    try:
        report = asyncio.run(run_export(settings))
    except ExportError as e:
        print_error(e)
        raise typer.Exit(code=1)

    print_report(report, as_json=json_out)

    if report.failures:
        if settings.best_effort:
            err_console.print(
                f"[yellow]![/yellow] {len(report.failures)} branch(es) failed; "
                "exiting 0 because --best-effort is set"
            )
            return
        raise typer.Exit(code=1)

    if not json_out:
        console.print(f"[green]✓[/green] Exported to {settings.output_dir}")
