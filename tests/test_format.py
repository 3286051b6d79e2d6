"""
Tests for the Prettier + ESLint format task.
"""

from pathlib import Path

import pytest

from tests.helpers import eslint_report, write
from uibundle.adapters.mock import MockAdapter
from uibundle.adapters.registry import AdapterRegistry
from uibundle.core.errors import ToolError
from uibundle.core.models.action import Action, Receipt
from uibundle.core.services.format import format_files


def _registry(tmp_path: Path, prettier, eslint_output: str | None = None) -> AdapterRegistry:
    def eslint(action: Action) -> str:
        name = action.args[action.args.index("--stdin-filename") + 1]
        return eslint_report(name, [], eslint_output)

    reg = AdapterRegistry(project_root=str(tmp_path))
    reg.register(MockAdapter(adapter_name="prettier", responder=prettier))
    reg.register(MockAdapter(adapter_name="eslint", responder=eslint))
    return reg


class TestFormatFiles:
    def test_prettier_then_eslint_fix(self, tmp_path: Path):
        path = write(tmp_path / "src" / "js" / "01-nav.js", "var  x=1")
        reg = _registry(tmp_path, lambda action: "var x = 1\n", eslint_output="const x = 1\n")

        count = format_files(["src/js/*.js"], root=tmp_path, registry=reg)()

        assert count == 1
        assert path.read_text() == "const x = 1\n"
        prettier_call = reg.get("prettier").call_log[0].action
        assert prettier_call.stdin == "var  x=1"
        assert prettier_call.args == ["--stdin-filepath", str(path.resolve())]
        eslint_call = reg.get("eslint").call_log[0].action
        assert eslint_call.stdin == "var x = 1\n"
        assert "--fix-dry-run" in eslint_call.args

    def test_prettier_output_kept_when_eslint_has_no_fixes(self, tmp_path: Path):
        path = write(tmp_path / "src" / "helpers" / "eq.js", "module.exports=(a,b)=>a===b")
        reg = _registry(tmp_path, lambda action: "module.exports = (a, b) => a === b\n")
        format_files(["src/{helpers,js}/**/*.js"], root=tmp_path, registry=reg)()
        assert path.read_text() == "module.exports = (a, b) => a === b\n"

    def test_prettier_failure(self, tmp_path: Path):
        write(tmp_path / "src" / "js" / "bad.js", "var = ;")
        reg = _registry(
            tmp_path,
            lambda action: Receipt.failure(adapter="prettier", action_id=action.id, error="SyntaxError"),
        )
        with pytest.raises(ToolError, match="SyntaxError"):
            format_files(["src/js/*.js"], root=tmp_path, registry=reg)()

    def test_no_files(self, tmp_path: Path):
        reg = _registry(tmp_path, lambda action: "")
        assert format_files(["src/js/*.js"], root=tmp_path, registry=reg)() == 0
