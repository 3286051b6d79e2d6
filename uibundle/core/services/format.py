"""Formatter — Prettier, then an ESLint fix pass, written back in place."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable

from uibundle.adapters.registry import AdapterRegistry
from uibundle.core.engine.stream import Stage, dest, drain, map_records, pipe, src
from uibundle.core.errors import ToolError
from uibundle.core.models.action import Action
from uibundle.core.models.file import FileRecord
from uibundle.core.services.lint.eslint import ESLintLinter

logger = logging.getLogger(__name__)


def prettier_eslint(registry: AdapterRegistry, *, root: Path) -> Stage:
    """Stage formatting every script with Prettier, then ``eslint --fix``."""
    linter = ESLintLinter(registry, root=root, fix=True)

    def run(record: FileRecord) -> FileRecord:
        if record.is_null():
            return record
        file_path = str(record.path)
        action = Action(
            id=f"prettier:format:{file_path}",
            adapter="prettier",
            args=["--stdin-filepath", file_path],
            stdin=record.text,
            cwd=str(linter.root),
        )
        receipt = registry.execute_action(action)
        if not receipt.ok:
            raise ToolError(f"prettier failed on {record.relative}: {receipt.error}")

        formatted = receipt.output
        result = linter.lint_text(formatted, file_path)
        if result.output is not None:
            formatted = result.output
        if formatted != record.text:
            logger.info("Formatted %s", record.relative)
        record.text = formatted
        return record

    return map_records(run)


def format_files(files: Iterable[str], *, root: Path, registry: AdapterRegistry) -> Callable[[], int]:
    """Return the task formatting ``files`` in place."""
    files = list(files)

    def run() -> int:
        written = drain(pipe(
            src(files, cwd=root, allow_empty=True),
            prettier_eslint(registry, root=root),
            dest(lambda record: record.base),
        ))
        return len(written)

    return run
