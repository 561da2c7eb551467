"""Reporters for coverage validation output."""

from __future__ import annotations

from covgate.reporters.badge import badge_color, build_badge
from covgate.reporters.html_reporter import HTMLReporter
from covgate.reporters.json_reporter import JSONReporter
from covgate.reporters.terminal import reporter
from covgate.reporters.writer import WrittenReports, write_reports

__all__ = [
    "HTMLReporter",
    "JSONReporter",
    "WrittenReports",
    "badge_color",
    "build_badge",
    "reporter",
    "write_reports",
]
