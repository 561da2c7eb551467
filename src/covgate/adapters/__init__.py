"""Adapters that turn raw coverage data into a unified CoverageReport."""

from covgate.adapters.console import parse_console_output
from covgate.adapters.lcov import parse_lcov, parse_lcov_file

__all__ = [
    "parse_console_output",
    "parse_lcov",
    "parse_lcov_file",
]
