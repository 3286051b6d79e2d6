"""
Helpers shared by the test modules.
"""

import json
from pathlib import Path


def write(path: Path, text: str) -> Path:
    """Create ``path`` (and its parents) with ``text``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def eslint_report(file_path: str, messages: list[dict], output: str | None = None) -> str:
    """An ESLint JSON report for one file."""
    entry = {
        "filePath": file_path,
        "messages": messages,
        "errorCount": sum(1 for m in messages if m.get("severity") == 2),
        "warningCount": sum(1 for m in messages if m.get("severity") == 1),
    }
    if output is not None:
        entry["output"] = output
    return json.dumps([entry])
