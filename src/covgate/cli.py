"""Command-line interface for covgate."""

from __future__ import annotations

import asyncio
import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler

from covgate import __version__
from covgate.acquirer import CoverageAcquirer
from covgate.adapters.lcov import parse_lcov_file
from covgate.config import CovgateConfig, load_config, validate_config
from covgate.errors import ConfigError, CoverageParseError
from covgate.models import CoverageReport, MetricName, ValidationResult
from covgate.reporters.terminal import reporter
from covgate.reporters.writer import write_reports
from covgate.validator import all_passed, validate_thresholds

logger = logging.getLogger(__name__)


@dataclass
class CheckOutcome:
    """Everything one ``covgate check`` run produced."""

    report: CoverageReport
    results: list[ValidationResult]
    artifacts: list[Path]
    write_errors: list[str] = field(default_factory=list)

    @property
    def passed(self) -> bool:
        return all_passed(self.results)

    @property
    def exit_code(self) -> int:
        return 0 if self.passed else 1


def _configure_logging(*, verbose: bool, ci: bool) -> None:
    """Send log records to stderr through rich.

    Degradations are shown by the console reporter, so interactive runs only
    log errors unless ``--verbose`` is given. CI runs also log warnings since
    stdout carries JSON only.
    """
    if verbose:
        level = logging.DEBUG
    elif ci:
        level = logging.WARNING
    else:
        level = logging.ERROR
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _load_checked_config(path: str, output_dir: str | None) -> CovgateConfig:
    try:
        config = load_config(path)
    except ConfigError as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    if output_dir:
        config = dataclasses.replace(
            config, coverage=dataclasses.replace(config.coverage, output_dir=output_dir)
        )

    errors = validate_config(config)
    if errors:
        for error in errors:
            reporter.print_error(error)
        raise click.Abort
    return config


async def run_check(config: CovgateConfig, *, run_tests: bool = True) -> CheckOutcome:
    """Acquire coverage, validate it and write the report artifacts."""
    report = await CoverageAcquirer(config, run_tests=run_tests).acquire()
    results = validate_thresholds(report, config.coverage.thresholds)
    written = await write_reports(
        config.output_path,
        report,
        config.coverage.thresholds,
        exclude_empty=config.coverage.exclude_empty_from_average,
    )
    return CheckOutcome(
        report=report, results=results, artifacts=written.paths, write_errors=written.errors
    )


def _outcome_to_dict(outcome: CheckOutcome) -> dict[str, Any]:
    return {
        "passed": outcome.passed,
        "provenance": outcome.report.provenance.value,
        "source": outcome.report.source.value,
        "notes": list(outcome.report.notes),
        "coverage": outcome.report.to_dict(),
        "results": [result.to_dict() for result in outcome.results],
        "artifacts": [str(path) for path in outcome.artifacts],
        "write_errors": list(outcome.write_errors),
    }


def _display_outcome_console(outcome: CheckOutcome) -> None:
    reporter.print_provenance(outcome.report)
    reporter.print_coverage_table(outcome.report)
    reporter.print_validation_results(outcome.results)
    reporter.print_artifacts(outcome.artifacts)
    reporter.print_write_errors(outcome.write_errors)
    if outcome.passed:
        reporter.print_success("Coverage validation passed")
    else:
        reporter.print_error("Coverage validation failed")


@click.group(invoke_without_command=True)
@click.option(
    "--ci",
    is_flag=True,
    help="CI mode: machine-readable JSON output instead of the console view.",
)
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging.")
@click.version_option(version=__version__, prog_name="covgate")
@click.pass_context
def cli(ctx: click.Context, *, ci: bool, verbose: bool) -> None:
    """covgate: validate code coverage against configured thresholds.

    Runs 'check' in the current directory when no command is given.
    """
    ctx.ensure_object(dict)
    ctx.obj["ci"] = ci
    _configure_logging(verbose=verbose, ci=ci)
    if ctx.invoked_subcommand is None:
        ctx.invoke(check)


@cli.command()
@click.option(
    "--path",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Project root directory.",
)
@click.option(
    "--skip-tests",
    is_flag=True,
    help="Do not run the coverage command; use existing data or the estimate.",
)
@click.option(
    "--output-dir",
    default=None,
    help="Coverage directory relative to the project root (default: coverage).",
)
def check(path: str, *, skip_tests: bool, output_dir: str | None) -> None:
    """Acquire coverage, validate thresholds and write reports.

    Exits with status 1 when any metric is below its threshold.
    """
    ctx = click.get_current_context()
    ci_mode = ctx.obj.get("ci", False) if ctx.obj else False

    if not ci_mode:
        reporter.print_header("covgate check")

    config = _load_checked_config(path, output_dir)

    try:
        outcome = asyncio.run(run_check(config, run_tests=not skip_tests))
    except Exception as e:
        logger.debug("Coverage validation failed", exc_info=True)
        reporter.print_error(f"Coverage validation error: {e}")
        raise SystemExit(1) from e

    if ci_mode:
        click.echo(json.dumps(_outcome_to_dict(outcome), indent=2))
    else:
        _display_outcome_console(outcome)

    if outcome.exit_code:
        raise SystemExit(outcome.exit_code)


@cli.command()
@click.argument("lcov_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def parse(lcov_file: Path) -> None:
    """Print the aggregate metrics of an LCOV file without validating."""
    ctx = click.get_current_context()
    ci_mode = ctx.obj.get("ci", False) if ctx.obj else False

    try:
        report = parse_lcov_file(lcov_file)
    except CoverageParseError as e:
        reporter.print_error(str(e))
        raise click.Abort from e

    if ci_mode:
        click.echo(json.dumps(report.to_dict(), indent=2))
        return

    reporter.print_coverage_table(report)
    average = report.average_percentage()
    reporter.print_info(
        f"Average of {len(MetricName)} metrics: {average:.1f}% ({lcov_file.name})"
    )
