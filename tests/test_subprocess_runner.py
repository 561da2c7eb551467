"""Tests for the timeout-bounded subprocess runner."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

from covgate.utils.subprocess_runner import SubprocessError, SubprocessResult, run_subprocess

# ── Basic Execution Tests ────────────────────────────────────────────


@pytest.mark.asyncio
async def test_run_subprocess_success() -> None:
    result = await run_subprocess([sys.executable, "-c", "print('hello')"])

    assert result.success
    assert result.returncode == 0
    assert "hello" in result.stdout
    assert result.timed_out is False
    assert result.duration_ms > 0


@pytest.mark.asyncio
async def test_run_subprocess_with_working_directory(tmp_path: Path) -> None:
    (tmp_path / "marker.txt").write_text("content")

    result = await run_subprocess(
        [sys.executable, "-c", "import os; print(os.listdir('.'))"], cwd=tmp_path
    )

    assert result.success
    assert "marker.txt" in result.stdout


@pytest.mark.asyncio
async def test_run_subprocess_captures_stderr() -> None:
    result = await run_subprocess([sys.executable, "-c", "import sys; sys.stderr.write('oops')"])

    assert result.returncode == 0
    assert "oops" in result.stderr


@pytest.mark.asyncio
async def test_run_subprocess_nonzero_exit_code() -> None:
    """Non-zero exits are reported, not raised."""
    result = await run_subprocess([sys.executable, "-c", "import sys; sys.exit(3)"])

    assert not result.success
    assert result.returncode == 3


@pytest.mark.asyncio
async def test_run_subprocess_merges_environment() -> None:
    result = await run_subprocess(
        [sys.executable, "-c", "import os; print(os.environ['COVGATE_X'], 'PATH' in os.environ)"],
        env={"COVGATE_X": "42"},
    )

    assert result.stdout.split() == ["42", "True"]


# ── Error Handling Tests ──────────────────────────────────────────────


@pytest.mark.asyncio
async def test_run_subprocess_command_not_found() -> None:
    with pytest.raises(SubprocessError) as exc_info:
        await run_subprocess(["nonexistent_command_xyz123"])

    assert "Command not found" in str(exc_info.value)
    assert exc_info.value.result.returncode == -1


@pytest.mark.asyncio
async def test_run_subprocess_empty_command() -> None:
    with pytest.raises(ValueError, match="Command cannot be empty"):
        await run_subprocess([])


@pytest.mark.asyncio
async def test_run_subprocess_invalid_timeout() -> None:
    with pytest.raises(ValueError, match="Timeout must be positive"):
        await run_subprocess(["echo", "test"], timeout=0)


@pytest.mark.asyncio
async def test_run_subprocess_invalid_working_directory() -> None:
    with pytest.raises(ValueError, match="Working directory does not exist"):
        await run_subprocess(["echo", "test"], cwd=Path("/nonexistent/path/xyz"))


# ── Timeout Tests ─────────────────────────────────────────────────────


@pytest.mark.asyncio
async def test_run_subprocess_timeout() -> None:
    result = await run_subprocess(
        [sys.executable, "-c", "import time; time.sleep(10)"], timeout=0.2
    )

    assert not result.success
    assert result.timed_out is True
    assert result.returncode == -1
    assert "timed out" in result.stderr.lower()


def test_result_success_property() -> None:
    assert SubprocessResult(returncode=0, stdout="", stderr="").success
    assert not SubprocessResult(returncode=1, stdout="", stderr="").success
    assert not SubprocessResult(returncode=0, stdout="", stderr="", timed_out=True).success
