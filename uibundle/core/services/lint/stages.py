"""
Lint stages — attach lint results to records and act on them at
stream end.

    pipe(
        src(files, cwd=root),
        lint(linter),               # attach results, apply fixes
        format_results(),           # log the stylish report
        fail_after_error("eslint"), # raise if any error was found
    )

Each consumer stage keeps its own running totals, so they can be
stacked in any order.
"""

from __future__ import annotations

import logging
from typing import Callable, Iterable, Iterator

from uibundle.core.engine.stream import Stage
from uibundle.core.errors import LintError
from uibundle.core.models.file import FileRecord
from uibundle.core.models.lint import WARNING, LintMessage, LintResult, LintSummary
from uibundle.core.services.lint.base import Linter
from uibundle.core.services.lint.formatter import format_stylish
from uibundle.core.services.sourcemap import apply_sourcemap

logger = logging.getLogger(__name__)


def create_ignore_result(file_path: str, reason: str) -> LintResult:
    """Synthetic result for an ignored file: no errors, one warning."""
    return LintResult(
        file_path=file_path,
        messages=[LintMessage(severity=WARNING, message=reason, fatal=False)],
        error_count=0,
        warning_count=1,
    )


def lint(linter: Linter) -> Stage:
    """Lint every buffered record with ``linter``.

    Null records pass through untouched; streaming records are rejected.
    """

    def stage(records: Iterable[FileRecord]) -> Iterator[FileRecord]:
        for record in records:
            if record.is_null():
                yield record
                continue

            if record.is_stream():
                raise LintError(
                    linter.name,
                    f"{linter.name} doesn't support files with Stream contents.",
                    file_path=str(record.path),
                )

            file_path = str(record.path)
            reason = linter.ignore_reason(file_path)
            if reason is not None:
                logger.debug("%s: %s", record.relative, reason)
                record.lint_results = [create_ignore_result(file_path, reason)]
                yield record
                continue

            result = linter.lint_text(record.text, file_path)
            if result.output is not None and result.output != record.text:
                record.text = result.output
                result.fixed = True

            if record.source_map is not None and record.source_map.mappings:
                record.lint_results = apply_sourcemap(result, record.source_map)
            else:
                record.lint_results = [result]
            yield record

    return stage


def results(action: Callable[[LintSummary], None]) -> Stage:
    """Collect every record's lint results; call ``action`` once the stream ends."""

    def stage(records: Iterable[FileRecord]) -> Iterator[FileRecord]:
        summary = LintSummary()
        for record in records:
            for result in record.lint_results:
                summary.add(result)
            yield record
        action(summary)

    return stage


def format_results(formatter: Callable[[list[LintResult]], str] = format_stylish) -> Stage:
    """Log all results at once through ``formatter`` when the stream ends."""

    def report(summary: LintSummary) -> None:
        if not len(summary):
            return
        message = formatter(summary.results)
        if message:
            logger.info("\n%s", message.rstrip("\n"))

    return results(report)


def fail_after_error(plugin: str) -> Stage:
    """Raise LintError at stream end if any lint error was recorded."""

    def check(summary: LintSummary) -> None:
        count = summary.error_count
        if count > 0:
            raise LintError(plugin, f"Failed with {count} {'error' if count == 1 else 'errors'}")

    return results(check)
