"""
Lint result models — what a linter attaches to a file record.

Severity follows the ESLint convention: 1 = warning, 2 = error.
Stylelint's "warning"/"error" strings are mapped onto it when results
are parsed.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

WARNING = 1
ERROR = 2


class LintMessage(BaseModel):
    """A single finding reported for a file."""

    severity: int = WARNING
    message: str
    line: int | None = None
    column: int | None = None
    rule_id: str | None = None
    fatal: bool = False

    @property
    def is_error(self) -> bool:
        return self.severity >= ERROR


class LintResult(BaseModel):
    """All findings for one file (or one original source after repositioning)."""

    file_path: str
    source: str | None = None
    messages: list[LintMessage] = Field(default_factory=list)
    error_count: int = 0
    warning_count: int = 0
    output: str | None = None       # fixed code, when the linter produced one
    fixed: bool = False

    @classmethod
    def from_messages(
        cls, file_path: str, messages: list[LintMessage], **kwargs
    ) -> LintResult:
        """Build a result, deriving the counts from the messages."""
        errors = sum(1 for m in messages if m.is_error)
        return cls(
            file_path=file_path,
            messages=messages,
            error_count=errors,
            warning_count=len(messages) - errors,
            **kwargs,
        )


class LintSummary(BaseModel):
    """Results collected over a whole stream, with running totals."""

    results: list[LintResult] = Field(default_factory=list)
    error_count: int = 0
    warning_count: int = 0

    def add(self, result: LintResult) -> None:
        self.results.append(result)
        self.error_count += result.error_count
        self.warning_count += result.warning_count

    def __len__(self) -> int:
        return len(self.results)
