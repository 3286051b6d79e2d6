"""Cleanup — delete build output."""

from __future__ import annotations

import glob
import logging
import shutil
from pathlib import Path
from typing import Callable, Iterable

from uibundle.core.engine.stream import expand_braces

logger = logging.getLogger(__name__)


def remove(patterns: str | Iterable[str], *, cwd: Path | None = None) -> Callable[[], int]:
    """Return a task deleting every file or directory matching ``patterns``.

    Nothing matching is not an error.
    """
    patterns = [patterns] if isinstance(patterns, str) else list(patterns)

    def run() -> int:
        root = Path(cwd or Path.cwd()).resolve()
        removed = 0
        for pattern in patterns:
            for expanded in expand_braces(pattern):
                for hit in sorted(glob.glob(expanded, root_dir=root, recursive=True)):
                    path = root / hit
                    if path.is_dir() and not path.is_symlink():
                        shutil.rmtree(path)
                    elif path.exists() or path.is_symlink():
                        path.unlink()
                    else:
                        continue  # already gone with a parent directory
                    logger.debug("Removed %s", path)
                    removed += 1
        logger.info("Removed %d path(s)", removed)
        return removed

    return run
