"""Persist the three coverage artifacts.

The JSON report, HTML page and badge descriptor are independent; they are
written concurrently and a failure in one never stops the others or
affects the verdict.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covgate.reporters.badge import write_badge
from covgate.reporters.html_reporter import HTMLReporter
from covgate.reporters.json_reporter import JSONReporter

if TYPE_CHECKING:
    from pathlib import Path

    from covgate.models import CoverageReport, ThresholdConfig

logger = logging.getLogger(__name__)

JSON_REPORT_NAME = "coverage-report.json"
HTML_REPORT_NAME = "coverage-summary.html"
BADGE_NAME = "badge.json"


@dataclass
class WrittenReports:
    """Artifacts written by one run, plus a message per artifact that failed."""

    paths: list[Path] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


async def write_reports(
    output_dir: Path,
    report: CoverageReport,
    thresholds: ThresholdConfig,
    *,
    exclude_empty: bool = False,
) -> WrittenReports:
    """Write all artifacts to *output_dir*, best-effort.

    Returns:
        The artifacts written successfully and the failures, one message each.
    """
    result = WrittenReports()
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        result.errors.append(f"Could not create report directory {output_dir}: {e}")
        logger.warning(result.errors[-1])
        return result

    json_reporter = JSONReporter(thresholds, exclude_empty=exclude_empty)
    html_reporter = HTMLReporter(thresholds, exclude_empty=exclude_empty)

    outcomes = await asyncio.gather(
        asyncio.to_thread(json_reporter.generate, output_dir / JSON_REPORT_NAME, report),
        asyncio.to_thread(html_reporter.generate, output_dir / HTML_REPORT_NAME, report),
        asyncio.to_thread(
            write_badge, output_dir / BADGE_NAME, report, exclude_empty=exclude_empty
        ),
        return_exceptions=True,
    )

    for outcome in outcomes:
        if isinstance(outcome, BaseException):
            result.errors.append(f"Could not write coverage report: {outcome}")
            logger.warning(result.errors[-1])
        else:
            result.paths.append(outcome)
    return result
