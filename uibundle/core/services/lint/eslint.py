"""
ESLint adapter — lints JavaScript through ``eslint --format json --stdin``.

With ``fix=True`` the run uses ``--fix-dry-run``: ESLint reports the
fixed source in the result's ``output`` field and the ``lint()`` stage
swaps it into the record.
"""

from __future__ import annotations

import json

from uibundle.core.errors import LintError
from uibundle.core.models.lint import LintMessage, LintResult
from uibundle.core.services.lint.base import Linter


class ESLintLinter(Linter):
    name = "eslint"
    ignore_file = ".eslintignore"

    def lint_text(self, code: str, file_path: str) -> LintResult:
        args = ["--format", "json", "--stdin", "--stdin-filename", file_path]
        if self.fix:
            args.append("--fix-dry-run")
        receipt = self._run("lint", file_path, args, stdin=code)
        return parse_eslint_report(receipt.output, file_path)


def parse_eslint_report(output: str, file_path: str) -> LintResult:
    """Turn ESLint's JSON report (one entry per file) into a LintResult."""
    try:
        report = json.loads(output)
        entry = report[0]
    except (ValueError, IndexError, KeyError, TypeError) as e:
        raise LintError("eslint", f"{file_path}: unreadable ESLint report ({e})", file_path=file_path) from e

    messages = [
        LintMessage(
            severity=int(m.get("severity", 1)),
            message=m.get("message", ""),
            line=m.get("line"),
            column=m.get("column"),
            rule_id=m.get("ruleId"),
            fatal=bool(m.get("fatal", False)),
        )
        for m in entry.get("messages", [])
    ]
    result = LintResult.from_messages(
        entry.get("filePath", file_path),
        messages,
        output=entry.get("output"),
    )
    # ESLint's own counts are authoritative when present
    result.error_count = entry.get("errorCount", result.error_count)
    result.warning_count = entry.get("warningCount", result.warning_count)
    return result
