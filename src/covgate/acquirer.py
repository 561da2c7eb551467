"""Coverage acquisition.

Produces a CoverageReport by degrading through data-source tiers:

1. an LCOV file left behind by the test command (or a previous run),
2. the coverage summary printed by a successful run of the test command,
3. an estimate from test-to-source file ratios.

Acquisition never fails for lack of coverage data; every downgrade is
logged and recorded in ``CoverageReport.notes``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from covgate.adapters.console import parse_console_output
from covgate.adapters.lcov import parse_lcov_file
from covgate.errors import CoverageParseError
from covgate.estimator import estimate_coverage
from covgate.utils.files import count_source_files, count_test_files
from covgate.utils.subprocess_runner import SubprocessError, run_subprocess

if TYPE_CHECKING:
    from covgate.config import CovgateConfig
    from covgate.models import CoverageReport

logger = logging.getLogger(__name__)


@dataclass
class _TestRun:
    output: str = ""
    note: str = ""


class CoverageAcquirer:
    """Obtain coverage data for a project, falling back tier by tier."""

    def __init__(self, config: CovgateConfig, *, run_tests: bool = True) -> None:
        """Initialize the acquirer.

        Args:
            config: Loaded project configuration.
            run_tests: Invoke the configured test command before looking for data.
        """
        self._config = config
        self._run_tests = run_tests

    async def acquire(self) -> CoverageReport:
        """Return the best coverage report available."""
        root = self._config.root_path
        self._config.output_path.mkdir(parents=True, exist_ok=True)

        test_files = count_test_files(root, self._config.files)
        notes: list[str] = []

        run = _TestRun()
        if not self._run_tests:
            logger.info("Test run disabled; using existing coverage data only")
        elif test_files == 0:
            run.note = "No test files found, skipped coverage generation"
            logger.warning(run.note)
        else:
            run = await self._run_test_command()
        if run.note:
            notes.append(run.note)

        report = self._from_lcov(notes)
        if report is None and run.output:
            report = self._from_console(run.output, notes)
        if report is None:
            source_files = count_source_files(root, self._config.files)
            notes.append(
                f"No coverage data available, estimating from {test_files} test file(s) "
                f"and {source_files} source file(s)"
            )
            logger.warning(notes[-1])
            report = estimate_coverage(test_files, source_files)

        return report.with_notes(*notes)

    async def _run_test_command(self) -> _TestRun:
        coverage = self._config.coverage
        command = coverage.test_command
        logger.info("Running coverage command: %s", " ".join(command))
        try:
            result = await run_subprocess(
                command,
                cwd=self._config.root_path,
                timeout=coverage.test_timeout,
            )
        except (SubprocessError, ValueError) as e:
            note = f"Coverage command could not run: {e}"
            logger.warning(note)
            return _TestRun(note=note)

        if result.timed_out:
            note = f"Coverage command timed out after {coverage.test_timeout:g}s"
            logger.warning(note)
            return _TestRun(note=note)

        if not result.success:
            note = f"Coverage command exited with code {result.returncode}"
            logger.warning(note)
            return _TestRun(note=note)

        return _TestRun(output=result.stdout)

    def _from_lcov(self, notes: list[str]) -> CoverageReport | None:
        lcov_path = self._config.lcov_path
        if not lcov_path.is_file():
            logger.debug("No LCOV file at %s", lcov_path)
            return None
        try:
            report = parse_lcov_file(lcov_path)
        except CoverageParseError as e:
            notes.append(f"Could not parse {lcov_path.name}: {e}")
            logger.warning(notes[-1])
            return None
        logger.info("Using LCOV coverage from %s", lcov_path)
        return report

    def _from_console(self, output: str, notes: list[str]) -> CoverageReport | None:
        try:
            report = parse_console_output(output)
        except CoverageParseError as e:
            notes.append(f"Could not parse coverage command output: {e}")
            logger.warning(notes[-1])
            return None
        notes.append("No LCOV file found, using coverage parsed from command output")
        logger.warning(notes[-1])
        return report
