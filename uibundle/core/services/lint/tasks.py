"""Lint task factories — JavaScript through ESLint, CSS through Stylelint."""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

from uibundle.adapters.registry import AdapterRegistry
from uibundle.core.engine.stream import drain, pipe, src
from uibundle.core.services.lint.eslint import ESLintLinter
from uibundle.core.services.lint.stages import fail_after_error, format_results, lint
from uibundle.core.services.lint.stylelint import StylelintLinter


def lint_js(files: Iterable[str], *, root: Path, registry: AdapterRegistry) -> Callable[[], None]:
    """Lint ``files`` with ESLint; fails when any error is reported."""
    files = list(files)

    def run() -> None:
        linter = ESLintLinter(registry, root=root)
        drain(pipe(
            src(files, cwd=root, allow_empty=True),
            lint(linter),
            format_results(),
            fail_after_error(linter.name),
        ))

    return run


def lint_css(files: Iterable[str], *, root: Path, registry: AdapterRegistry) -> Callable[[], None]:
    """Lint ``files`` with Stylelint; fails when any error is reported."""
    files = list(files)

    def run() -> None:
        linter = StylelintLinter(registry, root=root)
        drain(pipe(
            src(files, cwd=root, allow_empty=True),
            lint(linter),
            format_results(),
            fail_after_error(linter.name),
        ))

    return run
