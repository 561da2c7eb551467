"""Data models shared by the parsers, estimator, validator and reporters."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class MetricName(Enum):
    """Aggregate coverage metrics, in reporting order."""

    LINES = "lines"
    FUNCTIONS = "functions"
    BRANCHES = "branches"
    STATEMENTS = "statements"


class CoverageSource(Enum):
    """Data-source tier that produced a coverage report."""

    LCOV = "lcov"
    CONSOLE = "console"
    ESTIMATE = "estimate"


class Provenance(Enum):
    """Whether coverage numbers were measured or estimated."""

    MEASURED = "measured"
    ESTIMATED = "estimated"


def floor_percentage(covered: int, total: int) -> int:
    """Return ``floor(covered / total * 100)``, or 0 when *total* is 0."""
    if total <= 0:
        return 0
    return covered * 100 // total


@dataclass(frozen=True)
class CoverageMetric:
    """Covered/total counts for one aggregate metric."""

    covered: int = 0
    """Units satisfied by tests."""

    total: int = 0
    """Total countable units."""

    percentage: float = 0.0
    """Coverage percentage (0.0-100.0)."""

    @classmethod
    def from_counts(cls, covered: int, total: int) -> CoverageMetric:
        """Build a metric whose percentage is derived from the counts."""
        return cls(covered=covered, total=total, percentage=floor_percentage(covered, total))

    def to_dict(self) -> dict[str, Any]:
        return {"covered": self.covered, "total": self.total, "percentage": self.percentage}


@dataclass(frozen=True)
class CoverageReport:
    """Aggregate coverage for a whole project.

    Every data source (LCOV, console output, the estimator) translates its
    input into this format. ``source`` records which tier produced it so a
    verdict resting on an estimate is never mistaken for a measurement.
    """

    metrics: dict[MetricName, CoverageMetric] = field(default_factory=dict)
    source: CoverageSource = CoverageSource.LCOV
    notes: tuple[str, ...] = ()
    """Degradation diagnostics collected while the report was acquired."""

    @property
    def provenance(self) -> Provenance:
        if self.source is CoverageSource.ESTIMATE:
            return Provenance.ESTIMATED
        return Provenance.MEASURED

    @property
    def is_estimated(self) -> bool:
        return self.provenance is Provenance.ESTIMATED

    def get(self, metric: MetricName) -> CoverageMetric:
        """Return the record for *metric*, or an empty metric if absent."""
        return self.metrics.get(metric, CoverageMetric())

    def percentage(self, metric: MetricName) -> float:
        return self.get(metric).percentage

    def average_percentage(self, *, exclude_empty: bool = False) -> float:
        """Return the unweighted mean of the four metric percentages.

        Metrics with no data count as 0% unless *exclude_empty* is set, in
        which case metrics whose total is 0 are left out of the mean.
        """
        values = [
            self.get(metric)
            for metric in MetricName
            if not (exclude_empty and self.get(metric).total == 0)
        ]
        if not values:
            return 0.0
        return sum(metric.percentage for metric in values) / len(values)

    def with_notes(self, *notes: str) -> CoverageReport:
        """Return a copy of this report with *notes* appended."""
        return CoverageReport(
            metrics=dict(self.metrics), source=self.source, notes=(*self.notes, *notes)
        )

    def to_dict(self) -> dict[str, dict[str, Any]]:
        return {metric.value: self.get(metric).to_dict() for metric in MetricName}


_DEFAULT_THRESHOLDS: dict[MetricName, float] = {
    MetricName.LINES: 90.0,
    MetricName.FUNCTIONS: 90.0,
    MetricName.BRANCHES: 80.0,
    MetricName.STATEMENTS: 90.0,
}


@dataclass(frozen=True)
class ThresholdConfig:
    """Required minimum percentage per metric.

    Iteration order is the declared order of ``minimums``; validation
    results follow it.
    """

    minimums: tuple[tuple[MetricName, float], ...] = tuple(_DEFAULT_THRESHOLDS.items())

    @classmethod
    def from_mapping(cls, mapping: dict[MetricName, float]) -> ThresholdConfig:
        return cls(minimums=tuple((metric, float(value)) for metric, value in mapping.items()))

    @classmethod
    def with_overrides(cls, overrides: dict[MetricName, float]) -> ThresholdConfig:
        """Overlay *overrides* on the default minimums.

        Overridden metrics come first, in the order given; metrics left
        out keep their default minimum and follow in reporting order.
        """
        merged = {metric: float(value) for metric, value in overrides.items()}
        for metric, value in _DEFAULT_THRESHOLDS.items():
            merged.setdefault(metric, value)
        return cls.from_mapping(merged)

    def items(self) -> tuple[tuple[MetricName, float], ...]:
        return self.minimums

    def get(self, metric: MetricName, default: float = 0.0) -> float:
        for name, value in self.minimums:
            if name is metric:
                return value
        return default

    def to_dict(self) -> dict[str, float]:
        return {metric.value: value for metric, value in self.minimums}


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of comparing one metric against its threshold."""

    metric: MetricName
    threshold: float
    actual: float
    passed: bool
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "metric": self.metric.value,
            "threshold": self.threshold,
            "actual": self.actual,
            "passed": self.passed,
            "message": self.message,
        }
