"""
Domain models for the UI bundle builder.

    from uibundle.core.models import FileRecord, LintResult, BuildConfig, Action, Receipt
"""

from uibundle.core.models.action import Action, Receipt
from uibundle.core.models.config import BuildConfig
from uibundle.core.models.file import FileRecord
from uibundle.core.models.lint import LintMessage, LintResult, LintSummary

__all__ = [
    # action.py
    "Action",
    "Receipt",
    # config.py
    "BuildConfig",
    # file.py
    "FileRecord",
    # lint.py
    "LintMessage",
    "LintResult",
    "LintSummary",
]
