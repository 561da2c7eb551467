"""Exception hierarchy for covgate."""

from __future__ import annotations


class CovgateError(Exception):
    """Base class for all covgate errors."""


class ConfigError(CovgateError):
    """Raised when ``.covgate.yml`` cannot be read or is invalid."""


class CoverageParseError(CovgateError):
    """Raised when coverage data cannot be turned into a report."""


class LcovParseError(CoverageParseError):
    """Raised when an LCOV document holds no usable summary records."""


class ConsoleParseError(CoverageParseError):
    """Raised when coverage console output mentions no known metric."""
