"""
Linter contract and ignore rules shared by the ESLint and Stylelint
adapters.

A Linter instance is created per pipeline run and handed to the
``lint()`` stage explicitly; nothing is cached at module level.
"""

from __future__ import annotations

import logging
import os
from abc import ABC, abstractmethod
from pathlib import Path

import pathspec

from uibundle.adapters.registry import AdapterRegistry
from uibundle.core.errors import LintError
from uibundle.core.models.action import Action, Receipt
from uibundle.core.models.lint import LintResult

logger = logging.getLogger(__name__)

NODE_MODULES_MESSAGE = "File ignored because it has a node_modules/** path"


class IgnoreRules:
    """gitignore-style exclusion rules read from a linter's ignore file.

    Anything under a ``node_modules/`` directory is always ignored.
    """

    def __init__(self, root: Path, ignore_file: str, patterns: list[str] | None = None):
        self.root = Path(root).resolve()
        self.ignore_file = ignore_file
        lines = list(patterns or [])
        path = self.root / ignore_file
        if path.is_file():
            lines.extend(path.read_text(encoding="utf-8").splitlines())
            logger.debug("Loaded %d ignore pattern(s) from %s", len(lines), path)
        self._spec = pathspec.GitIgnoreSpec.from_lines(lines)

    def reason(self, file_path: str | Path) -> str | None:
        """Why ``file_path`` is ignored, or None when it should be linted."""
        path = Path(file_path)
        if not path.is_absolute():
            path = self.root / path
        if "node_modules/" in path.as_posix():
            return NODE_MODULES_MESSAGE
        relative = Path(os.path.relpath(path, self.root)).as_posix()
        if relative.startswith("../"):
            return None
        if self._spec.match_file(relative):
            return f"File ignored because of {self.ignore_file} file"
        return None


class Linter(ABC):
    """An external linter reachable through the adapter registry."""

    name: str = ""
    ignore_file: str = ""

    def __init__(self, registry: AdapterRegistry, *, root: Path, fix: bool = False):
        self.registry = registry
        self.root = Path(root).resolve()
        self.fix = fix
        self.ignore_rules = IgnoreRules(self.root, self.ignore_file)

    def ignore_reason(self, file_path: str | Path) -> str | None:
        return self.ignore_rules.reason(file_path)

    def is_path_ignored(self, file_path: str | Path) -> bool:
        return self.ignore_reason(file_path) is not None

    @abstractmethod
    def lint_text(self, code: str, file_path: str) -> LintResult:
        """Lint ``code`` as if it were the contents of ``file_path``.

        Raises:
            LintError: When the linter cannot run or its report is unreadable.
        """

    def _run(self, verb: str, file_path: str, args: list[str], stdin: str | None = None) -> Receipt:
        action = Action(
            id=f"{self.name}:{verb}:{file_path}",
            adapter=self.name,
            args=args,
            stdin=stdin,
            cwd=str(self.root),
        )
        receipt = self.registry.execute_action(action)
        if not receipt.ok:
            raise LintError(self.name, f"{file_path}: {receipt.error}", file_path=file_path)
        return receipt
