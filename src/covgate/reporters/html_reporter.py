"""Static coverage summary page (``coverage-summary.html``)."""

from __future__ import annotations

import html
import logging
from datetime import datetime
from typing import TYPE_CHECKING

from covgate.models import MetricName

if TYPE_CHECKING:
    from pathlib import Path

    from covgate.models import CoverageReport, ThresholdConfig

logger = logging.getLogger(__name__)


class HTMLReporter:
    """Render coverage against thresholds as a self-contained HTML page."""

    def __init__(
        self,
        thresholds: ThresholdConfig,
        *,
        title: str = "Code Coverage Report",
        exclude_empty: bool = False,
    ) -> None:
        self._thresholds = thresholds
        self._title = title
        self._exclude_empty = exclude_empty

    def generate(self, output_path: Path, report: CoverageReport) -> Path:
        """Write the HTML page to *output_path* and return it."""
        output_path.write_text(self.render(report), encoding="utf-8")
        logger.info("HTML report written to %s", output_path)
        return output_path

    def render(self, report: CoverageReport) -> str:
        """Render the HTML page.

        Args:
            report: Coverage to display.

        Returns:
            Complete HTML document as a string.
        """
        total = report.average_percentage(exclude_empty=self._exclude_empty)
        generated = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        title = html.escape(self._title)

        return f"""<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>{title}</title>
  <style>
    body {{ font-family: Arial, sans-serif; margin: 40px; }}
    .metric {{ margin: 10px 0; padding: 10px; border-radius: 4px; }}
    .passed {{ background-color: #d4edda; border: 1px solid #c3e6cb; }}
    .failed {{ background-color: #f8d7da; border: 1px solid #f5c6cb; }}
    .estimated {{ background-color: #fff3cd; border: 1px solid #ffeeba; padding: 10px; }}
    .summary {{ font-size: 18px; font-weight: bold; margin-bottom: 20px; }}
  </style>
</head>
<body>
  <h1>{title}</h1>
{self._render_provenance(report)}  <div class="summary">Overall Coverage: {total:.1f}%</div>
{self._render_metrics(report)}
  <p><em>Generated: {generated}</em></p>
</body>
</html>
"""

    def _render_provenance(self, report: CoverageReport) -> str:
        if not report.is_estimated:
            return ""
        return (
            '  <div class="estimated"><strong>Estimated coverage:</strong> '
            "no coverage data was available, these numbers are derived from "
            "test and source file counts.</div>\n"
        )

    def _render_metrics(self, report: CoverageReport) -> str:
        blocks: list[str] = []
        for metric in MetricName:
            data = report.get(metric)
            threshold = self._thresholds.get(metric)
            status = "passed" if data.percentage >= threshold else "failed"
            blocks.append(
                f'  <div class="metric {status}">\n'
                f"    <strong>{html.escape(metric.value.capitalize())}:</strong>\n"
                f"    {data.percentage:g}% ({data.covered}/{data.total})\n"
                f"    - Required: {threshold:g}%\n"
                "  </div>"
            )
        return "\n".join(blocks)
