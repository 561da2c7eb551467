"""Threshold validation."""

from __future__ import annotations

from typing import TYPE_CHECKING

from covgate.models import ValidationResult

if TYPE_CHECKING:
    from covgate.models import CoverageReport, ThresholdConfig


def _format_value(value: float) -> str:
    return f"{value:g}"


def validate_thresholds(
    report: CoverageReport, thresholds: ThresholdConfig
) -> list[ValidationResult]:
    """Compare each configured metric against its minimum.

    Results follow the declared order of *thresholds*. Metrics absent from
    the report count as 0%.
    """
    results: list[ValidationResult] = []
    for metric, threshold in thresholds.items():
        actual = report.percentage(metric)
        passed = actual >= threshold
        if passed:
            message = (
                f"✓ {metric.value}: {_format_value(actual)}% (>= {_format_value(threshold)}%)"
            )
        else:
            message = (
                f"✗ {metric.value}: {_format_value(actual)}% (< {_format_value(threshold)}%)"
            )
        results.append(
            ValidationResult(
                metric=metric,
                threshold=threshold,
                actual=actual,
                passed=passed,
                message=message,
            )
        )
    return results


def all_passed(results: list[ValidationResult]) -> bool:
    """Return True when every metric met its threshold."""
    return all(result.passed for result in results)
