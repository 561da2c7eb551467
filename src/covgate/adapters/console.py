"""Loose parser for coverage summaries printed by a test command.

Handles the common shapes of coverage console output, e.g. Istanbul's
text-summary::

    Statements   : 95.5% ( 191/200 )
    Branches     : 80% ( 16/20 )

as well as single-line summaries such as ``# lines 87.50%``. Only
percentages are authoritative; counts are recorded when present.
"""

from __future__ import annotations

import logging
import re

from covgate.errors import ConsoleParseError
from covgate.models import CoverageMetric, CoverageReport, CoverageSource, MetricName

logger = logging.getLogger(__name__)

_PERCENT_RE = re.compile(r"(\d+(?:\.\d+)?)%")
_COUNTS_RE = re.compile(r"\(\s*(\d+)\s*/\s*(\d+)\s*\)")
_MAX_PERCENTAGE = 100.0


def _metric_for_line(line: str) -> MetricName | None:
    lowered = line.lower()
    for metric in MetricName:
        if metric.value in lowered:
            return metric
    return None


def parse_console_output(output: str) -> CoverageReport:
    """Extract per-metric percentages from coverage console output.

    A line contributes when it contains both a percentage and one of the
    metric keywords (``lines``, ``functions``, ``branches``,
    ``statements``; case-insensitive, checked in that order). Later lines
    override earlier ones for the same metric.

    Raises:
        ConsoleParseError: If no line mentions a metric with a percentage.
    """
    metrics: dict[MetricName, CoverageMetric] = {}

    for line in output.splitlines():
        percent_match = _PERCENT_RE.search(line)
        if not percent_match:
            continue
        metric = _metric_for_line(line)
        if metric is None:
            continue

        percentage = min(float(percent_match.group(1)), _MAX_PERCENTAGE)
        covered = total = 0
        counts_match = _COUNTS_RE.search(line)
        if counts_match:
            covered, total = int(counts_match.group(1)), int(counts_match.group(2))
        metrics[metric] = CoverageMetric(covered=covered, total=total, percentage=percentage)

    if not metrics:
        raise ConsoleParseError("No coverage percentages found in command output")

    logger.debug("Parsed %d metric(s) from console output", len(metrics))
    return CoverageReport(
        metrics={metric: metrics.get(metric, CoverageMetric()) for metric in MetricName},
        source=CoverageSource.CONSOLE,
    )
