"""Test and source file counting for the fallback estimate."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from covgate.config import FilesConfig

logger = logging.getLogger(__name__)


def _count_children(directory: Path, suffixes: Iterable[str]) -> int:
    """Count regular files directly inside *directory* ending with a suffix.

    A missing directory counts as zero. Other OS errors propagate.
    """
    if not directory.is_dir():
        logger.debug("Skipping missing directory %s", directory)
        return 0
    suffixes = tuple(suffixes)
    return sum(
        1 for entry in directory.iterdir() if entry.is_file() and entry.name.endswith(suffixes)
    )


def count_test_files(root: Path, files: FilesConfig) -> int:
    """Count test files under the configured test directories."""
    count = sum(
        _count_children(root / test_dir, files.test_suffixes) for test_dir in files.test_dirs
    )
    logger.debug("Found %d test file(s) under %s", count, root)
    return count


def count_source_files(root: Path, files: FilesConfig) -> int:
    """Count source files at the configured source paths.

    A path naming a file counts once; a directory counts its direct children
    that carry a source suffix.
    """
    count = 0
    for source_path in files.source_paths:
        path = root / source_path
        if path.is_file():
            count += 1
        else:
            count += _count_children(path, files.source_suffixes)
    logger.debug("Found %d source file(s) under %s", count, root)
    return count
