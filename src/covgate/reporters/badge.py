"""Shields.io endpoint badge descriptor (``badge.json``)."""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from pathlib import Path

    from covgate.models import CoverageReport

logger = logging.getLogger(__name__)

_BRIGHTGREEN_THRESHOLD = 90
_YELLOW_THRESHOLD = 80
_ORANGE_THRESHOLD = 70


def badge_color(percentage: float) -> str:
    """Return the badge color for an overall coverage percentage."""
    if percentage >= _BRIGHTGREEN_THRESHOLD:
        return "brightgreen"
    if percentage >= _YELLOW_THRESHOLD:
        return "yellow"
    if percentage >= _ORANGE_THRESHOLD:
        return "orange"
    return "red"


def build_badge(report: CoverageReport, *, exclude_empty: bool = False) -> dict[str, Any]:
    total = report.average_percentage(exclude_empty=exclude_empty)
    return {
        "schemaVersion": 1,
        "label": "coverage",
        "message": f"{total:.1f}%",
        "color": badge_color(total),
    }


def write_badge(output_path: Path, report: CoverageReport, *, exclude_empty: bool = False) -> Path:
    badge = build_badge(report, exclude_empty=exclude_empty)
    output_path.write_text(json.dumps(badge, indent=2), encoding="utf-8")
    logger.info("Badge descriptor written to %s", output_path)
    return output_path
