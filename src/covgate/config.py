"""Configuration parsing from ``.covgate.yml``."""

from __future__ import annotations

import logging
import os
import re
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from covgate.errors import ConfigError
from covgate.models import MetricName, ThresholdConfig

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = ".covgate.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}")

_DEFAULT_TEST_COMMAND = ("npm", "run", "test:coverage")
_DEFAULT_TEST_TIMEOUT = 300.0


def _resolve_env_vars(value: str) -> str:
    """Replace ``${VAR_NAME}`` placeholders with environment variable values."""

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1)
        resolved = os.environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = _resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_env_vars(item) if isinstance(item, str) else item for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass(frozen=True)
class CoverageConfig:
    """Coverage thresholds and acquisition settings."""

    thresholds: ThresholdConfig = field(default_factory=ThresholdConfig)
    """Required minimum percentage per metric."""

    output_dir: str = "coverage"
    """Directory (relative to the project root) for lcov input and report output."""

    lcov_file: str = "lcov.info"
    """LCOV file name inside ``output_dir``."""

    test_command: tuple[str, ...] = _DEFAULT_TEST_COMMAND
    """Command that runs the test suite with coverage enabled."""

    test_timeout: float = _DEFAULT_TEST_TIMEOUT
    """Seconds to wait for the test command before giving up."""

    exclude_empty_from_average: bool = False
    """Leave metrics with no data (total == 0) out of the overall average."""


@dataclass(frozen=True)
class FilesConfig:
    """Where test and source files live, for the fallback estimate."""

    test_dirs: tuple[str, ...] = ("tests/unit", "tests/integration", "tests/performance")
    """Directories whose direct children are counted as test files."""

    test_suffixes: tuple[str, ...] = (".test.js",)
    """File name suffixes that mark a test file."""

    source_paths: tuple[str, ...] = ("install.js", "src/scripts")
    """Source files (each counts once) and directories (direct children counted)."""

    source_suffixes: tuple[str, ...] = (".js",)
    """File name suffixes that mark a source file inside a source directory."""


@dataclass(frozen=True)
class CovgateConfig:
    """Complete covgate configuration from ``.covgate.yml``."""

    root: str
    """Project root directory."""

    coverage: CoverageConfig = field(default_factory=CoverageConfig)
    """Coverage thresholds and acquisition settings."""

    files: FilesConfig = field(default_factory=FilesConfig)
    """Test/source file discovery settings."""

    @property
    def root_path(self) -> Path:
        return Path(self.root)

    @property
    def output_path(self) -> Path:
        return self.root_path / self.coverage.output_dir

    @property
    def lcov_path(self) -> Path:
        return self.output_path / self.coverage.lcov_file


def _section(raw: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw.get(name, {})
    if not isinstance(section, dict):
        return {}
    return section


def _string_tuple(value: Any, default: tuple[str, ...]) -> tuple[str, ...]:
    if value is None:
        return default
    if isinstance(value, str):
        return (value,)
    if isinstance(value, list):
        return tuple(str(item) for item in value)
    raise ConfigError(f"Expected a string or list of strings, got {type(value).__name__}")


def _parse_thresholds(raw: Any) -> ThresholdConfig:
    if raw is None:
        return ThresholdConfig()
    if not isinstance(raw, dict):
        raise ConfigError("coverage.thresholds must be a mapping of metric -> percentage")

    known = {metric.value: metric for metric in MetricName}
    minimums: dict[MetricName, float] = {}
    for name, value in raw.items():
        metric = known.get(str(name))
        if metric is None:
            raise ConfigError(
                f"Unknown coverage metric '{name}' (expected one of: {', '.join(known)})"
            )
        try:
            minimums[metric] = float(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(
                f"coverage.thresholds.{name} must be a number (got: {value!r})"
            ) from e
    return ThresholdConfig.with_overrides(minimums)


def _parse_test_command(value: Any) -> tuple[str, ...]:
    if value is None:
        return _DEFAULT_TEST_COMMAND
    if isinstance(value, str):
        return tuple(shlex.split(value))
    if isinstance(value, list):
        return tuple(str(part) for part in value)
    raise ConfigError("coverage.test_command must be a string or a list")


def _parse_coverage_config(raw: dict[str, Any]) -> CoverageConfig:
    """Parse coverage configuration from raw YAML."""
    coverage_raw = _section(raw, "coverage")
    try:
        test_timeout = float(coverage_raw.get("test_timeout", _DEFAULT_TEST_TIMEOUT))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"coverage.test_timeout must be a number: {e}") from e

    return CoverageConfig(
        thresholds=_parse_thresholds(coverage_raw.get("thresholds")),
        output_dir=str(coverage_raw.get("output_dir", "coverage")),
        lcov_file=str(coverage_raw.get("lcov_file", "lcov.info")),
        test_command=_parse_test_command(coverage_raw.get("test_command")),
        test_timeout=test_timeout,
        exclude_empty_from_average=bool(coverage_raw.get("exclude_empty_from_average", False)),
    )


def _parse_files_config(raw: dict[str, Any]) -> FilesConfig:
    """Parse file discovery configuration from raw YAML."""
    files_raw = _section(raw, "files")
    defaults = FilesConfig()
    return FilesConfig(
        test_dirs=_string_tuple(files_raw.get("test_dirs"), defaults.test_dirs),
        test_suffixes=_string_tuple(files_raw.get("test_suffixes"), defaults.test_suffixes),
        source_paths=_string_tuple(files_raw.get("source_paths"), defaults.source_paths),
        source_suffixes=_string_tuple(files_raw.get("source_suffixes"), defaults.source_suffixes),
    )


def load_config(root: str | Path) -> CovgateConfig:
    """Load and parse ``.covgate.yml`` from *root*.

    Falls back to the built-in defaults when the file is missing or
    incomplete.

    Raises:
        ConfigError: If the file is not valid YAML or a value has the wrong type.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILE_NAME

    raw: dict[str, Any] = {}
    if config_file.is_file():
        try:
            parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e
        if isinstance(parsed, dict):
            raw = _resolve_dict(parsed)
        logger.debug("Loaded configuration from %s", config_file)

    return CovgateConfig(
        root=str(root_path),
        coverage=_parse_coverage_config(raw),
        files=_parse_files_config(raw),
    )


def _validate_coverage_config(coverage: CoverageConfig) -> list[str]:
    """Validate coverage threshold and acquisition settings."""
    max_percentage = 100.0
    errors: list[str] = []

    for metric, threshold in coverage.thresholds.items():
        if not 0.0 <= threshold <= max_percentage:
            errors.append(
                f"coverage.thresholds.{metric.value} must be between 0 and 100 "
                f"(got: {threshold})"
            )

    if coverage.test_timeout <= 0:
        errors.append(f"coverage.test_timeout must be positive (got: {coverage.test_timeout})")

    if not coverage.test_command:
        errors.append("coverage.test_command must not be empty")

    if not coverage.output_dir:
        errors.append("coverage.output_dir must not be empty")

    return errors


def validate_config(config: CovgateConfig) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    errors: list[str] = []

    if not config.root:
        errors.append("root is required")

    errors.extend(_validate_coverage_config(config.coverage))

    if not config.files.test_suffixes:
        errors.append("files.test_suffixes must not be empty")

    return errors
