"""Tests for the covgate CLI commands."""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import AsyncMock, patch

from click.testing import CliRunner

from covgate.cli import cli
from covgate.config import CONFIG_FILE_NAME
from covgate.utils.subprocess_runner import SubprocessError, SubprocessResult

_LCOV_SCENARIO_A = "SF:src/a.js\nLF:100\nLH:95\nFNF:20\nFNH:19\nBRF:10\nBRH:9\nend_of_record\n"
_LCOV_SCENARIO_C = "SF:src/a.js\nLF:10\nLH:5\nend_of_record\n"


def _write_file(root: Path, rel: str, content: str = "") -> None:
    """Write *content* to a file under *root*."""
    f = root / rel
    f.parent.mkdir(parents=True, exist_ok=True)
    f.write_text(content, encoding="utf-8")


def _read_json(path: Path) -> dict[str, object]:
    return json.loads(path.read_text(encoding="utf-8"))


def test_version() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert "0.1.0" in result.output


def test_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])
    assert result.exit_code == 0
    assert "check" in result.output
    assert "parse" in result.output


# ── covgate check ────────────────────────────────────────────────


class TestCheck:
    def test_all_metrics_pass(self, tmp_path: Path) -> None:
        _write_file(tmp_path, "coverage/lcov.info", _LCOV_SCENARIO_A)

        runner = CliRunner()
        result = runner.invoke(cli, ["check", "--path", str(tmp_path), "--skip-tests"])

        assert result.exit_code == 0, result.output
        assert "✓ lines: 95% (>= 90%)" in result.output
        assert "✓ branches: 90% (>= 80%)" in result.output
        assert "Coverage validation passed" in result.output

        coverage_dir = tmp_path / "coverage"
        assert (coverage_dir / "coverage-summary.html").is_file()
        badge = _read_json(coverage_dir / "badge.json")
        assert badge["color"] == "brightgreen"
        report = _read_json(coverage_dir / "coverage-report.json")
        assert report["summary"] == {"total": 93.75, "passed": True}
        assert report["provenance"] == "measured"

    def test_no_data_estimates_and_fails(self, tmp_path: Path) -> None:
        for i in range(5):
            _write_file(tmp_path, f"src/scripts/mod{i}.js")

        runner = CliRunner()
        with patch("covgate.acquirer.run_subprocess", AsyncMock()) as mock_run:
            result = runner.invoke(cli, ["check", "--path", str(tmp_path)])

        mock_run.assert_not_called()
        assert result.exit_code == 1, result.output
        assert "ESTIMATED" in result.output
        assert "✗ lines: 0% (< 90%)" in result.output
        assert "Summary: 0/4 metrics passed" in result.output
        assert "Coverage validation failed" in result.output

        report = _read_json(tmp_path / "coverage" / "coverage-report.json")
        assert report["provenance"] == "estimated"
        assert report["summary"] == {"total": 0.0, "passed": False}

    def test_lines_only_lcov_fails(self, tmp_path: Path) -> None:
        _write_file(tmp_path, "coverage/lcov.info", _LCOV_SCENARIO_C)

        runner = CliRunner()
        result = runner.invoke(cli, ["check", "--path", str(tmp_path), "--skip-tests"])

        assert result.exit_code == 1
        assert "✗ lines: 50% (< 90%)" in result.output
        assert "✗ functions: 0% (< 90%)" in result.output
        assert "✗ branches: 0% (< 80%)" in result.output

    def test_missing_test_command_degrades(self, tmp_path: Path) -> None:
        _write_file(tmp_path, "tests/unit/a.test.js")
        _write_file(tmp_path, "src/scripts/a.js")
        error = SubprocessError(
            "Command not found: npm",
            result=SubprocessResult(returncode=-1, stdout="", stderr=""),
        )

        runner = CliRunner()
        with patch("covgate.acquirer.run_subprocess", AsyncMock(side_effect=error)):
            result = runner.invoke(cli, ["check", "--path", str(tmp_path)])

        assert result.exit_code == 1
        assert "Command not found: npm" in result.output
        assert "ESTIMATED" in result.output

    def test_artifacts_are_idempotent(self, tmp_path: Path) -> None:
        _write_file(tmp_path, "coverage/lcov.info", _LCOV_SCENARIO_A)
        report_path = tmp_path / "coverage" / "coverage-report.json"
        runner = CliRunner()

        runner.invoke(cli, ["check", "--path", str(tmp_path), "--skip-tests"])
        first = _read_json(report_path)
        runner.invoke(cli, ["check", "--path", str(tmp_path), "--skip-tests"])
        second = _read_json(report_path)

        for key in ("coverage", "thresholds", "summary"):
            assert first[key] == second[key]

    def test_thresholds_from_config(self, tmp_path: Path) -> None:
        _write_file(tmp_path, "coverage/lcov.info", _LCOV_SCENARIO_C)
        _write_file(
            tmp_path,
            CONFIG_FILE_NAME,
            "coverage:\n  thresholds:\n    lines: 50\n    functions: 0\n"
            "    branches: 0\n    statements: 50\n",
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["check", "--path", str(tmp_path), "--skip-tests"])

        assert result.exit_code == 0, result.output

    def test_partial_thresholds_still_gate_every_metric(self, tmp_path: Path) -> None:
        _write_file(
            tmp_path,
            "coverage/lcov.info",
            "LF:10\nLH:10\nFNF:10\nFNH:0\nBRF:10\nBRH:0\n",
        )
        _write_file(tmp_path, CONFIG_FILE_NAME, "coverage:\n  thresholds:\n    lines: 95\n")

        runner = CliRunner()
        result = runner.invoke(cli, ["check", "--path", str(tmp_path), "--skip-tests"])

        assert result.exit_code == 1
        assert "✓ lines: 100% (>= 95%)" in result.output
        assert "✗ functions: 0% (< 90%)" in result.output
        assert "✗ branches: 0% (< 80%)" in result.output

    def test_invalid_config_aborts(self, tmp_path: Path) -> None:
        _write_file(
            tmp_path, CONFIG_FILE_NAME, "coverage:\n  thresholds:\n    lines: 150\n"
        )

        runner = CliRunner()
        result = runner.invoke(cli, ["check", "--path", str(tmp_path), "--skip-tests"])

        assert result.exit_code == 1
        assert "must be between 0 and 100" in result.output

    def test_output_dir_option(self, tmp_path: Path) -> None:
        _write_file(tmp_path, "build/cov/lcov.info", _LCOV_SCENARIO_A)

        runner = CliRunner()
        result = runner.invoke(
            cli,
            ["check", "--path", str(tmp_path), "--skip-tests", "--output-dir", "build/cov"],
        )

        assert result.exit_code == 0, result.output
        assert (tmp_path / "build" / "cov" / "badge.json").is_file()

    def test_artifact_write_failure_is_shown(self, tmp_path: Path) -> None:
        _write_file(tmp_path, "coverage/lcov.info", _LCOV_SCENARIO_A)

        runner = CliRunner()
        with patch("covgate.reporters.writer.write_badge", side_effect=OSError("disk full")):
            result = runner.invoke(cli, ["check", "--path", str(tmp_path), "--skip-tests"])

        assert result.exit_code == 0, result.output
        assert "Could not write coverage report: disk full" in result.output
        assert "Coverage validation passed" in result.output

    def test_artifact_write_failure_in_ci_json(self, tmp_path: Path) -> None:
        _write_file(tmp_path, "coverage/lcov.info", _LCOV_SCENARIO_A)

        runner = CliRunner()
        with patch("covgate.reporters.writer.write_badge", side_effect=OSError("disk full")):
            result = runner.invoke(
                cli, ["--ci", "check", "--path", str(tmp_path), "--skip-tests"]
            )

        assert result.exit_code == 0
        payload = json.loads(result.stdout)
        assert payload["write_errors"] == ["Could not write coverage report: disk full"]
        assert len(payload["artifacts"]) == 2

    def test_fatal_error_exits_nonzero(self, tmp_path: Path) -> None:
        runner = CliRunner()
        with patch(
            "covgate.acquirer.count_test_files", side_effect=PermissionError("denied")
        ):
            result = runner.invoke(cli, ["check", "--path", str(tmp_path)])

        assert result.exit_code == 1
        assert "Coverage validation error: denied" in result.output

    def test_ci_mode_outputs_json(self, tmp_path: Path) -> None:
        _write_file(tmp_path, "coverage/lcov.info", _LCOV_SCENARIO_C)

        runner = CliRunner()
        result = runner.invoke(
            cli, ["--ci", "check", "--path", str(tmp_path), "--skip-tests"]
        )

        assert result.exit_code == 1
        payload = json.loads(result.stdout)
        assert payload["passed"] is False
        assert payload["source"] == "lcov"
        assert payload["coverage"]["lines"]["percentage"] == 50
        assert len(payload["artifacts"]) == 3

    def test_no_subcommand_runs_check(self, tmp_path: Path) -> None:
        runner = CliRunner()
        with runner.isolated_filesystem(temp_dir=tmp_path) as cwd:
            _write_file(Path(cwd), "coverage/lcov.info", _LCOV_SCENARIO_A)
            result = runner.invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert "Coverage validation passed" in result.output


# ── covgate parse ────────────────────────────────────────────────


class TestParse:
    def test_prints_metrics(self, tmp_path: Path) -> None:
        lcov = tmp_path / "lcov.info"
        lcov.write_text(_LCOV_SCENARIO_A, encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(cli, ["parse", str(lcov)])

        assert result.exit_code == 0, result.output
        assert "functions" in result.output
        assert "Average of 4 metrics: 93.8%" in result.output

    def test_ci_json(self, tmp_path: Path) -> None:
        lcov = tmp_path / "lcov.info"
        lcov.write_text(_LCOV_SCENARIO_C, encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(cli, ["--ci", "parse", str(lcov)])

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["lines"] == {"covered": 5, "total": 10, "percentage": 50}
        assert data["statements"] == data["lines"]

    def test_invalid_file_aborts(self, tmp_path: Path) -> None:
        lcov = tmp_path / "lcov.info"
        lcov.write_text("garbage\n", encoding="utf-8")

        runner = CliRunner()
        result = runner.invoke(cli, ["parse", str(lcov)])

        assert result.exit_code == 1
        assert "No LF/LH" in result.output
