"""LCOV adapter.

Aggregates the summary records of an lcov ``.info`` document (``LF``/``LH``,
``FNF``/``FNH``, ``BRF``/``BRH``) across every file section into a single
project-wide CoverageReport. Per-line records (``DA``, ``FN``, ``BRDA``, ...)
are ignored; only the summary counters matter for the gate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from covgate.errors import LcovParseError
from covgate.models import CoverageMetric, CoverageReport, CoverageSource, MetricName

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

# ── Constants ────────────────────────────────────────────────────

# LCOV summary record keys -> (metric, counter field)
_LCOV_SUMMARY_KEYS: dict[str, tuple[MetricName, str]] = {
    "LH": (MetricName.LINES, "covered"),
    "LF": (MetricName.LINES, "total"),
    "FNH": (MetricName.FUNCTIONS, "covered"),
    "FNF": (MetricName.FUNCTIONS, "total"),
    "BRH": (MetricName.BRANCHES, "covered"),
    "BRF": (MetricName.BRANCHES, "total"),
}

_LCOV_METRICS = (MetricName.LINES, MetricName.FUNCTIONS, MetricName.BRANCHES)


@dataclass
class _LcovTotals:
    covered: dict[MetricName, int] = field(
        default_factory=lambda: dict.fromkeys(_LCOV_METRICS, 0)
    )
    total: dict[MetricName, int] = field(default_factory=lambda: dict.fromkeys(_LCOV_METRICS, 0))
    records: int = 0
    skipped: list[int] = field(default_factory=list)


# ── Parsing ──────────────────────────────────────────────────────


def _parse_count(value: str) -> int | None:
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        return None
    return int(value)


def _build_metric(metric: MetricName, totals: _LcovTotals) -> CoverageMetric:
    covered = totals.covered[metric]
    total = totals.total[metric]
    if covered > total:
        logger.warning(
            "LCOV reports %d covered %s out of %d; clamping to total", covered, metric.value, total
        )
        covered = total
    return CoverageMetric.from_counts(covered, total)


def parse_lcov(content: str) -> CoverageReport:
    """Parse LCOV text into an aggregate CoverageReport.

    Counters are summed across all ``SF:`` sections. Statements are not
    tracked by LCOV, so the lines record is copied into ``statements``.

    Records whose value is not a non-negative integer are skipped with a
    warning instead of poisoning the sums.

    Raises:
        LcovParseError: If the document contains no valid summary record.
    """
    totals = _LcovTotals()

    for line_number, raw_line in enumerate(content.splitlines(), start=1):
        line = raw_line.strip()
        if ":" not in line:
            continue
        key, _, value = line.partition(":")
        target = _LCOV_SUMMARY_KEYS.get(key)
        if target is None:
            continue

        count = _parse_count(value)
        if count is None:
            logger.warning("Skipping malformed LCOV record on line %d: %r", line_number, line)
            totals.skipped.append(line_number)
            continue

        metric, counter = target
        getattr(totals, counter)[metric] += count
        totals.records += 1

    if totals.records == 0:
        raise LcovParseError("No LF/LH/FNF/FNH/BRF/BRH records found in LCOV data")

    metrics = {metric: _build_metric(metric, totals) for metric in _LCOV_METRICS}
    metrics[MetricName.STATEMENTS] = metrics[MetricName.LINES]

    notes: tuple[str, ...] = ()
    if totals.skipped:
        notes = (f"Skipped {len(totals.skipped)} malformed LCOV record(s)",)
    return CoverageReport(metrics=metrics, source=CoverageSource.LCOV, notes=notes)


def parse_lcov_file(path: Path) -> CoverageReport:
    """Read and parse an LCOV file.

    Raises:
        LcovParseError: If the file cannot be read or holds no summary records.
    """
    try:
        content = path.read_text(encoding="utf-8", errors="replace")
    except OSError as e:
        raise LcovParseError(f"Failed to read LCOV file {path}: {e}") from e
    logger.debug("Parsing LCOV file %s (%d bytes)", path, len(content))
    return parse_lcov(content)
