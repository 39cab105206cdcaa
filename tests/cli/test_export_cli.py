"""
Tests for the ``vtl-export`` CLI.

The boto3 layer is replaced: either ``run_export`` is patched out, or the
client factory is patched so the real orchestrator runs against a MagicMock
AppSync client.
"""

from __future__ import annotations

import io
import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from vtl_export import __version__
from vtl_export.cli.app import app
from vtl_export.core.errors import RemoteListError
from vtl_export.export.orchestrator import ExportFailure, ExportReport, ExportState

runner = CliRunner()


def _report(failures: int = 0) -> ExportReport:
    report = ExportReport(api_id="abc", state=ExportState.DONE, types_seen=2, resolvers_exported=3)
    report.failures = [
        ExportFailure(
            scope="resolver",
            type_name="Mutation",
            field_name=f"f{i}",
            error_type="FunctionResolutionError",
            message="function not found",
        )
        for i in range(failures)
    ]
    return report


def _appsync_client() -> MagicMock:
    client = MagicMock()
    client.get_introspection_schema.return_value = {"schema": io.BytesIO(b"type Query { a: String }")}
    client.list_types.return_value = {"types": [{"name": "Query"}]}
    client.list_resolvers.return_value = {
        "resolvers": [
            {
                "typeName": "Query",
                "fieldName": "a",
                "kind": "UNIT",
                "requestMappingTemplate": "req",
                "responseMappingTemplate": "res",
            }
        ]
    }
    return client


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "vtl-export" in result.output

    def test_version_falls_back_to_package_attribute(self):
        from importlib.metadata import PackageNotFoundError

        with patch("vtl_export.cli.app.pkg_version", side_effect=PackageNotFoundError):
            result = runner.invoke(app, ["-V"])
        assert __version__ in result.output


class TestExportCommand:
    def test_missing_api_id(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        result = runner.invoke(app, ["export"])
        assert result.exit_code == 1
        assert "--api-id" in result.output

    def test_invalid_page_size(self):
        result = runner.invoke(app, ["export", "-a", "abc", "--page-size", "99"])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_options_reach_settings(self, tmp_path):
        run_patch = patch("vtl_export.cli.export.run_export", new=AsyncMock(return_value=_report()))
        with run_patch as run, patch("vtl_export.cli.export.configure_logging") as configure:
            result = runner.invoke(
                app,
                [
                    "export",
                    "-a", "abc",
                    "-p", "dev",
                    "-r", "eu-west-1",
                    "-o", str(tmp_path / "out"),
                    "--page-size", "10",
                    "--max-concurrency", "4",
                    "--log-level", "debug",
                ],
            )

        assert result.exit_code == 0, result.output
        settings = run.await_args.args[0]
        assert settings.api_id == "abc"
        assert settings.profile == "dev"
        assert settings.region == "eu-west-1"
        assert settings.output_dir == tmp_path / "out"
        assert settings.page_size == 10
        assert settings.max_concurrency == 4
        configure.assert_called_once_with(level="DEBUG", json_format=None)

    def test_api_id_from_environment(self, monkeypatch):
        monkeypatch.setenv("VTL_EXPORT_API_ID", "from-env")
        with patch("vtl_export.cli.export.run_export", new=AsyncMock(return_value=_report())) as run:
            result = runner.invoke(app, ["export"])
        assert result.exit_code == 0, result.output
        assert run.await_args.args[0].api_id == "from-env"

    def test_success_output(self):
        with patch("vtl_export.cli.export.run_export", new=AsyncMock(return_value=_report())):
            result = runner.invoke(app, ["export", "-a", "abc"])
        assert result.exit_code == 0
        assert "Resolvers exported" in result.output
        assert "Exported to" in result.output

    def test_json_report(self):
        with patch("vtl_export.cli.export.run_export", new=AsyncMock(return_value=_report())):
            result = runner.invoke(app, ["export", "-a", "abc", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["api_id"] == "abc"
        assert data["resolvers_exported"] == 3
        assert data["success"] is True

    def test_branch_failures_exit_non_zero(self):
        with patch("vtl_export.cli.export.run_export", new=AsyncMock(return_value=_report(2))):
            result = runner.invoke(app, ["export", "-a", "abc"])
        assert result.exit_code == 1
        assert "Mutation.f0" in result.output

    def test_best_effort_exits_zero(self):
        with patch("vtl_export.cli.export.run_export", new=AsyncMock(return_value=_report(1))):
            result = runner.invoke(app, ["export", "-a", "abc", "--best-effort"])
        assert result.exit_code == 0
        assert "--best-effort" in result.output

    def test_fatal_error_exits_one(self):
        error = RemoteListError("list types failed", cause=ConnectionError("timeout"))
        with patch("vtl_export.cli.export.run_export", new=AsyncMock(side_effect=error)):
            result = runner.invoke(app, ["export", "-a", "abc"])
        assert result.exit_code == 1
        assert "REMOTE" in result.output
        assert "timeout" in result.output


class TestEndToEnd:
    def test_export_against_mock_client(self, tmp_path):
        out = tmp_path / "mappingTemplates"
        client = _appsync_client()

        with patch("vtl_export.cli.export.create_appsync_client", return_value=client) as factory:
            result = runner.invoke(app, ["export", "-a", "abc", "-o", str(out), "-p", "dev"])

        assert result.exit_code == 0, result.output
        factory.assert_called_once_with(profile="dev", region="us-east-1", max_pool_connections=16)
        assert (out / "schema.graphql").read_text() == "type Query { a: String }"
        assert (out / "resolvers/Query/a-requestMappingTemplate.vtl").read_text() == "req"
        assert (out / "resolvers/Query/a-responseMappingTemplate.vtl").read_text() == "res"
        assert (out / "resolvers/Mutation").is_dir()
        lines = (out / "resolvers/api-metadata.txt").read_text().splitlines()
        assert [json.loads(line)["fieldName"] for line in lines] == ["a"]

    def test_json_logs_through_real_logging(self, tmp_path):
        client = _appsync_client()

        with patch("vtl_export.cli.export.create_appsync_client", return_value=client):
            result = runner.invoke(
                app, ["export", "-a", "abc", "-o", str(tmp_path / "out"), "--json-logs", "-l", "info"]
            )

        assert result.exit_code == 0, result.output
        events = [json.loads(line) for line in result.output.splitlines() if line.startswith("{\"")]
        by_name = {e["event"]: e for e in events}
        assert {"export.start", "export.complete"} <= set(by_name)
        complete = by_name["export.complete"]
        assert complete["api_id"] == "abc"
        assert complete["logger"] == "vtl_export.export.orchestrator"
        assert complete["level"] == "info"
        assert complete["resolvers"] == 1

    def test_console_logs_through_real_logging(self, tmp_path):
        client = _appsync_client()

        with patch("vtl_export.cli.export.create_appsync_client", return_value=client):
            result = runner.invoke(
                app, ["export", "-a", "abc", "-o", str(tmp_path / "out"), "--console-logs"]
            )

        assert result.exit_code == 0, result.output
        assert "export.complete" in result.output

    def test_client_setup_failure(self, tmp_path):
        from botocore.exceptions import ProfileNotFound

        with patch(
            "vtl_export.cli.export.create_appsync_client",
            side_effect=ProfileNotFound(profile="missing"),
        ):
            result = runner.invoke(app, ["export", "-a", "abc", "-o", str(tmp_path), "-p", "missing"])

        assert result.exit_code == 1
        assert "SETUP" in result.output
