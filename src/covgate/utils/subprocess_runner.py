"""Timeout-bounded subprocess execution for the coverage command."""

from __future__ import annotations

import asyncio
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

logger = logging.getLogger(__name__)


@dataclass
class SubprocessResult:
    """Result of subprocess execution."""

    returncode: int
    """Exit code of the process (-1 when it was killed on timeout)."""

    stdout: str
    """Standard output captured from the process."""

    stderr: str
    """Standard error captured from the process."""

    timed_out: bool = False
    """True if the process was terminated due to timeout."""

    duration_ms: float = 0.0
    """Actual duration of execution in milliseconds."""

    @property
    def success(self) -> bool:
        """True if the process exited with 0 before the timeout."""
        return self.returncode == 0 and not self.timed_out


class SubprocessError(Exception):
    """Raised when a subprocess cannot be started at all."""

    def __init__(self, message: str, result: SubprocessResult) -> None:
        super().__init__(message)
        self.result = result


async def run_subprocess(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    timeout: float = 300.0,
    env: dict[str, str] | None = None,
) -> SubprocessResult:
    """Run *command* and capture its output, killing it after *timeout* seconds.

    A non-zero exit or a timeout is reported through the returned result,
    never raised.

    Args:
        command: Command and arguments (e.g. ``['npm', 'run', 'test:coverage']``).
        cwd: Working directory. Defaults to the current directory.
        timeout: Maximum seconds to wait for completion.
        env: Extra environment variables, merged over the current environment.

    Raises:
        SubprocessError: If the command does not exist or cannot be started.
        ValueError: If command is empty, timeout is not positive, or cwd is missing.
    """
    if not command:
        raise ValueError("Command cannot be empty")

    if timeout <= 0:
        raise ValueError(f"Timeout must be positive, got {timeout}")

    work_dir = cwd.resolve() if cwd else Path.cwd()
    if not work_dir.exists():
        raise ValueError(f"Working directory does not exist: {work_dir}")

    full_env = {**os.environ, **env} if env else None

    logger.debug(
        "Running subprocess: %s (cwd=%s, timeout=%s)",
        " ".join(str(c) for c in command),
        work_dir,
        timeout,
    )
    start_time = time.perf_counter()

    try:
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=work_dir,
            env=full_env,
        )
    except FileNotFoundError as exc:
        raise SubprocessError(
            f"Command not found: {command[0]}",
            result=SubprocessResult(returncode=-1, stdout="", stderr=str(exc)),
        ) from exc
    except OSError as exc:
        raise SubprocessError(
            f"Failed to start {command[0]}: {exc}",
            result=SubprocessResult(returncode=-1, stdout="", stderr=str(exc)),
        ) from exc

    timed_out = False
    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(process.communicate(), timeout=timeout)
    except TimeoutError:
        logger.warning("Subprocess timed out after %s seconds", timeout)
        timed_out = True
        try:
            process.kill()
        except ProcessLookupError:
            pass  # already exited
        await process.wait()
        stdout_bytes = b""
        stderr_bytes = b"Process timed out and was killed"

    duration_ms = (time.perf_counter() - start_time) * 1000
    returncode = -1 if timed_out else (process.returncode or 0)

    result = SubprocessResult(
        returncode=returncode,
        stdout=stdout_bytes.decode("utf-8", errors="replace"),
        stderr=stderr_bytes.decode("utf-8", errors="replace"),
        timed_out=timed_out,
        duration_ms=duration_ms,
    )
    logger.debug(
        "Subprocess completed: returncode=%d, duration=%.2fms, success=%s",
        returncode,
        duration_ms,
        result.success,
    )
    return result
