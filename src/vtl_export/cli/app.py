"""
Root Typer application for the vtl-export CLI.
"""

from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

import typer
from typer import Typer

from vtl_export import __version__
from vtl_export.cli.export import export

app = Typer(
    name="vtl-export",
    help="vtl-export — export AppSync resolvers as VTL mapping templates.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    if value:
        try:
            v = pkg_version("vtl-export")
        except PackageNotFoundError:
            v = __version__
        typer.echo(f"vtl-export {v}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool | None = typer.Option(  # noqa: UP007
        None,
        "--version",
        "-V",
        help="Show version and exit.",
        callback=_version_callback,
        is_eager=True,
    ),
) -> None:
    """vtl-export CLI — export AppSync schema, resolvers and functions."""


app.command("export")(export)


if __name__ == "__main__":
    app()
