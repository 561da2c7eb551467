"""Machine-readable coverage summary (``coverage-report.json``)."""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

from covgate.validator import all_passed, validate_thresholds

if TYPE_CHECKING:
    from pathlib import Path

    from covgate.models import CoverageReport, ThresholdConfig

logger = logging.getLogger(__name__)


class JSONReporter:
    """Serialize coverage, thresholds and the verdict into one JSON document."""

    def __init__(self, thresholds: ThresholdConfig, *, exclude_empty: bool = False) -> None:
        self._thresholds = thresholds
        self._exclude_empty = exclude_empty

    def build(self, report: CoverageReport) -> dict[str, Any]:
        """Return the report structure as a JSON-compatible dict."""
        results = validate_thresholds(report, self._thresholds)
        return {
            "tool": "covgate",
            "timestamp": datetime.now(tz=UTC).isoformat(),
            "provenance": report.provenance.value,
            "source": report.source.value,
            "notes": list(report.notes),
            "coverage": report.to_dict(),
            "thresholds": self._thresholds.to_dict(),
            "results": [result.to_dict() for result in results],
            "summary": {
                "total": report.average_percentage(exclude_empty=self._exclude_empty),
                "passed": all_passed(results),
            },
        }

    def generate_string(self, report: CoverageReport) -> str:
        return json.dumps(self.build(report), indent=2, ensure_ascii=False)

    def generate(self, output_path: Path, report: CoverageReport) -> Path:
        """Write the JSON report to *output_path* and return it."""
        output_path.write_text(self.generate_string(report), encoding="utf-8")
        logger.info("JSON report written to %s", output_path)
        return output_path
