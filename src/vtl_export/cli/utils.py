"""
CLI utility helpers — output formatting.
"""

from __future__ import annotations

import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from vtl_export.core.errors import ExportError
from vtl_export.export.orchestrator import ExportReport

console = Console()
err_console = Console(stderr=True)


def print_error(error: Exception) -> None:
    """Print a fatal error diagnostic to stderr."""
    if isinstance(error, ExportError):
        err_console.print(
            f"[bold red]Error[/bold red] ({error.category.value}): {escape(error.message)}"
        )
        if error.cause is not None:
            err_console.print(f"[dim]  caused by: {escape(str(error.cause))}[/dim]")
    else:
        err_console.print(f"[bold red]Error[/bold red]: {escape(str(error))}")


def print_report(report: ExportReport, *, as_json: bool = False) -> None:
    """Render an ``ExportReport`` to the terminal."""
    if as_json:
        console.print_json(json.dumps(report.to_dict(), default=str))
        return

    table = Table(title=f"Export {report.api_id}", show_header=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    table.add_row("State", report.state.value)
    table.add_row("Types", str(report.types_seen))
    table.add_row("Types without resolvers", str(report.empty_types))
    table.add_row("Resolvers exported", str(report.resolvers_exported))
    table.add_row("Functions exported", str(report.functions_exported))
    table.add_row("Failures", str(len(report.failures)))
    if report.duration_seconds is not None:
        table.add_row("Duration", f"{report.duration_seconds:.2f}s")
    console.print(table)

    for failure in report.failures:
        err_console.print(
            f"[bold red]✗[/bold red] {failure.target} ({failure.error_type}): {escape(failure.message)}"
        )
