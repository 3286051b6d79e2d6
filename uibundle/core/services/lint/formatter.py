"""
Stylish text formatter for lint results.

Output shape:

    /abs/path/to/file.js
      3:7  error    'x' is assigned a value but never used  no-unused-vars
      9:1  warning  Unexpected console statement            no-console

    ✖ 2 problems (1 error, 1 warning)
"""

from __future__ import annotations

from typing import Iterable

from uibundle.core.models.lint import LintResult


def _plural(count: int, word: str) -> str:
    return f"{count} {word}{'' if count == 1 else 's'}"


def format_stylish(results: Iterable[LintResult]) -> str:
    """Render results; returns an empty string when there is nothing to report."""
    blocks: list[str] = []
    errors = warnings = 0

    for result in results:
        if not result.messages:
            continue
        errors += result.error_count
        warnings += result.warning_count

        rows = []
        for m in result.messages:
            position = f"{m.line or 0}:{m.column or 0}"
            level = "error" if m.is_error else "warning"
            rows.append((position, level, m.message, m.rule_id or ""))

        widths = [max(len(row[i]) for row in rows) for i in range(3)]
        lines = [result.source or result.file_path]
        for position, level, message, rule in rows:
            line = (
                f"  {position.rjust(widths[0])}  {level.ljust(widths[1])}  "
                f"{message.ljust(widths[2])}  {rule}"
            )
            lines.append(line.rstrip())
        blocks.append("\n".join(lines))

    total = errors + warnings
    if not total:
        return ""

    summary = f"✖ {_plural(total, 'problem')} ({_plural(errors, 'error')}, {_plural(warnings, 'warning')})"
    return "\n\n".join(blocks) + "\n\n" + summary + "\n"
