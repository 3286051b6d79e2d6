"""
Stylelint adapter — lints CSS through ``stylelint --formatter json``.

Stylelint reports severities as strings; they are mapped onto the
numeric scale used by LintMessage. Files Stylelint itself skips come
back with ``ignored: true`` and no warnings.
"""

from __future__ import annotations

import json

from uibundle.core.errors import LintError
from uibundle.core.models.lint import ERROR, WARNING, LintMessage, LintResult
from uibundle.core.services.lint.base import Linter


class StylelintLinter(Linter):
    name = "stylelint"
    ignore_file = ".stylelintignore"

    def lint_text(self, code: str, file_path: str) -> LintResult:
        receipt = self._run(
            "lint", file_path, ["--formatter", "json", "--stdin-filename", file_path], stdin=code
        )
        # Newer releases print the report on stderr
        report = receipt.output.strip() or receipt.metadata.get("stderr", "")
        result = parse_stylelint_report(report, file_path)

        if self.fix and result.messages:
            fixed = self._run("fix", file_path, ["--fix", "--stdin-filename", file_path], stdin=code)
            if fixed.output and fixed.output != code:
                result.output = fixed.output
        return result


def parse_stylelint_report(output: str, file_path: str) -> LintResult:
    """Turn Stylelint's JSON report into a LintResult."""
    try:
        report = json.loads(output) if output else []
    except ValueError as e:
        raise LintError("stylelint", f"{file_path}: unreadable Stylelint report ({e})", file_path=file_path) from e

    messages: list[LintMessage] = []
    source = file_path
    for entry in report:
        source = entry.get("source") or source
        for w in entry.get("warnings", []):
            messages.append(
                LintMessage(
                    severity=ERROR if w.get("severity") == "error" else WARNING,
                    message=w.get("text", ""),
                    line=w.get("line"),
                    column=w.get("column"),
                    rule_id=w.get("rule"),
                )
            )
        for p in entry.get("parseErrors", []):
            messages.append(LintMessage(severity=ERROR, message=p.get("text", ""), line=p.get("line"),
                                        column=p.get("column"), rule_id=p.get("stylelintType"), fatal=True))

    return LintResult.from_messages(source, messages, source=source)
