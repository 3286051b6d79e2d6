"""Lint adapters: ESLint and Stylelint wired into file streams."""

from uibundle.core.services.lint.base import IgnoreRules, Linter
from uibundle.core.services.lint.eslint import ESLintLinter
from uibundle.core.services.lint.stages import (
    create_ignore_result,
    fail_after_error,
    format_results,
    lint,
    results,
)
from uibundle.core.services.lint.stylelint import StylelintLinter

__all__ = [
    "ESLintLinter",
    "IgnoreRules",
    "Linter",
    "StylelintLinter",
    "create_ignore_result",
    "fail_after_error",
    "format_results",
    "lint",
    "results",
]
