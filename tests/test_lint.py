"""
Tests for the lint adapters, ignore rules and lint stages.
"""

import io
import json
import logging
from pathlib import Path

import pytest

from tests.helpers import eslint_report, write
from uibundle.adapters.mock import MockAdapter
from uibundle.adapters.registry import AdapterRegistry
from uibundle.core.engine.stream import drain, pipe, src
from uibundle.core.errors import LintError
from uibundle.core.models.action import Action, Receipt
from uibundle.core.models.file import FileRecord
from uibundle.core.models.lint import ERROR, WARNING, LintMessage, LintResult
from uibundle.core.services.lint import (
    ESLintLinter,
    IgnoreRules,
    StylelintLinter,
    create_ignore_result,
    fail_after_error,
    format_results,
    lint,
)
from uibundle.core.services.lint.formatter import format_stylish
from uibundle.core.services.lint.stylelint import parse_stylelint_report
from uibundle.core.services.lint.tasks import lint_js
from uibundle.core.services.sourcemap import chunk_map

UNUSED = {"severity": 2, "message": "'x' is unused", "line": 1, "column": 5, "ruleId": "no-unused-vars"}
CONSOLE = {"severity": 1, "message": "Unexpected console", "line": 2, "column": 1, "ruleId": "no-console"}


def _stdin_filename(action: Action) -> str:
    return action.args[action.args.index("--stdin-filename") + 1]


def _registry(tmp_path: Path, tool: str, responder) -> AdapterRegistry:
    reg = AdapterRegistry(project_root=str(tmp_path))
    reg.register(MockAdapter(adapter_name=tool, responder=responder))
    return reg


def _eslint(tmp_path: Path, messages: list[dict], output: str | None = None, fix: bool = False):
    adapter = MockAdapter(
        adapter_name="eslint",
        responder=lambda action: eslint_report(_stdin_filename(action), messages, output),
    )
    reg = AdapterRegistry(project_root=str(tmp_path))
    reg.register(adapter)
    return ESLintLinter(reg, root=tmp_path, fix=fix), adapter


# ── Ignore rules ─────────────────────────────────────────────────────


class TestIgnoreRules:
    def test_ignore_file_patterns(self, tmp_path: Path):
        write(tmp_path / ".eslintignore", "src/js/vendor/\n")
        rules = IgnoreRules(tmp_path, ".eslintignore")
        assert rules.reason(tmp_path / "src/js/vendor/lib.js") == "File ignored because of .eslintignore file"
        assert rules.reason(tmp_path / "src/js/site.js") is None

    def test_node_modules_always_ignored(self, tmp_path: Path):
        rules = IgnoreRules(tmp_path, ".eslintignore")
        assert rules.reason("node_modules/pkg/index.js") == "File ignored because it has a node_modules/** path"

    def test_missing_ignore_file(self, tmp_path: Path):
        assert IgnoreRules(tmp_path, ".stylelintignore").reason("css/site.css") is None

    def test_extra_patterns(self, tmp_path: Path):
        rules = IgnoreRules(tmp_path, ".eslintignore", patterns=["*.min.js"])
        assert rules.reason("vendor/jquery.min.js") is not None


# ── Lint stage ───────────────────────────────────────────────────────


class TestLintStage:
    def test_attaches_results(self, tmp_path: Path):
        write(tmp_path / "a.js", "var x;")
        linter, adapter = _eslint(tmp_path, [UNUSED])
        record = drain(pipe(src("a.js", cwd=tmp_path), lint(linter)))[0]
        assert record.lint_results[0].error_count == 1
        assert adapter.call_log[0].action.stdin == "var x;"

    def test_ignored_file_is_one_warning(self, tmp_path: Path):
        write(tmp_path / ".eslintignore", "vendor/\n")
        write(tmp_path / "vendor" / "lib.js", "junk(")
        linter, adapter = _eslint(tmp_path, [UNUSED])
        record = drain(pipe(src("vendor/*.js", cwd=tmp_path), lint(linter)))[0]
        [result] = record.lint_results
        assert (result.error_count, result.warning_count) == (0, 1)
        assert result.messages[0].severity == WARNING
        assert adapter.call_count == 0

    def test_ignored_files_never_fail_the_run(self, tmp_path: Path):
        write(tmp_path / "node_modules" / "pkg" / "index.js", "junk(")
        linter, _ = _eslint(tmp_path, [UNUSED])
        records = drain(pipe(
            src("node_modules/**/*.js", cwd=tmp_path),
            lint(linter),
            fail_after_error("eslint"),
        ))
        assert records[0].lint_results[0].messages[0].message.startswith("File ignored because it has")

    def test_null_records_pass_through(self, tmp_path: Path):
        linter, adapter = _eslint(tmp_path, [])
        record = FileRecord(path=tmp_path / "a.js", base=tmp_path)
        assert drain(lint(linter)([record])) == [record]
        assert adapter.call_count == 0

    def test_stream_contents_rejected(self, tmp_path: Path):
        linter, _ = _eslint(tmp_path, [])
        record = FileRecord(path=tmp_path / "a.js", base=tmp_path, contents=io.BytesIO(b""))
        with pytest.raises(LintError, match="doesn't support files with Stream contents"):
            drain(lint(linter)([record]))

    def test_fix_replaces_contents(self, tmp_path: Path):
        write(tmp_path / "a.js", "var  x")
        linter, adapter = _eslint(tmp_path, [], output="var x;\n", fix=True)
        record = drain(pipe(src("a.js", cwd=tmp_path), lint(linter)))[0]
        assert record.text == "var x;\n"
        assert record.lint_results[0].fixed
        assert "--fix-dry-run" in adapter.call_log[0].action.args

    def test_linter_failure_names_the_file(self, tmp_path: Path):
        write(tmp_path / "a.js", "")
        reg = _registry(
            tmp_path, "eslint",
            lambda action: Receipt.failure(adapter="eslint", action_id=action.id, error="config missing"),
        )
        with pytest.raises(LintError, match="config missing") as exc:
            drain(pipe(src("a.js", cwd=tmp_path), lint(ESLintLinter(reg, root=tmp_path))))
        assert exc.value.file_path.endswith("a.js")

    def test_sourcemap_repositions_messages(self, tmp_path: Path):
        linter, _ = _eslint(tmp_path, [{**UNUSED, "line": 3, "column": 0}])
        record = FileRecord(
            path=tmp_path / "site.js",
            base=tmp_path,
            contents=b"a1\na2\nb1",
            source_map=chunk_map("site.js", [("js/a.js", "a1\na2", "a1\na2"), ("js/b.js", "b1", "b1")]),
        )
        [out] = drain(lint(linter)([record]))
        assert [r.source for r in out.lint_results] == ["js/b.js"]
        assert out.lint_results[0].messages[0].line == 1


class TestResultStages:
    def _record(self, tmp_path: Path, *results: LintResult) -> FileRecord:
        return FileRecord(path=tmp_path / "a.js", base=tmp_path, contents=b"", lint_results=list(results))

    def test_fail_after_one_error(self, tmp_path: Path):
        result = LintResult.from_messages("a.js", [LintMessage(severity=ERROR, message="x")])
        with pytest.raises(LintError, match="Failed with 1 error$"):
            drain(fail_after_error("eslint")([self._record(tmp_path, result)]))

    def test_fail_after_many_errors(self, tmp_path: Path):
        messages = [LintMessage(severity=ERROR, message="x"), LintMessage(severity=ERROR, message="y")]
        result = LintResult.from_messages("a.js", messages)
        with pytest.raises(LintError, match=r"\[eslint\] Failed with 2 errors"):
            drain(fail_after_error("eslint")([self._record(tmp_path, result)]))

    def test_warnings_do_not_fail(self, tmp_path: Path):
        result = create_ignore_result("a.js", "ignored")
        assert len(drain(fail_after_error("eslint")([self._record(tmp_path, result)]))) == 1

    def test_format_results_logs_report(self, tmp_path: Path, caplog):
        caplog.set_level(logging.INFO, logger="uibundle.core.services.lint")
        result = LintResult.from_messages("a.js", [LintMessage(severity=ERROR, message="bad thing", line=1)])
        drain(format_results()([self._record(tmp_path, result)]))
        assert "bad thing" in caplog.text
        assert "1 problem" in caplog.text


class TestFormatter:
    def test_stylish(self):
        result = LintResult.from_messages(
            "/p/a.js",
            [
                LintMessage(severity=ERROR, message="'x' is unused", line=1, column=5, rule_id="no-unused-vars"),
                LintMessage(severity=WARNING, message="Unexpected console", line=12, column=1, rule_id="no-console"),
            ],
        )
        text = format_stylish([result])
        assert text.startswith("/p/a.js\n")
        assert "error" in text and "no-unused-vars" in text
        assert text.rstrip().endswith("✖ 2 problems (1 error, 1 warning)")

    def test_nothing_to_report(self):
        assert format_stylish([LintResult(file_path="a.js")]) == ""


# ── Stylelint ────────────────────────────────────────────────────────


class TestStylelint:
    REPORT = json.dumps([{
        "source": "/p/css/site.css",
        "warnings": [
            {"line": 1, "column": 8, "rule": "color-no-invalid-hex", "severity": "error", "text": "Bad hex"},
            {"line": 2, "column": 1, "rule": "comment-empty-line-before", "severity": "warning", "text": "Meh"},
        ],
    }])

    def test_parse_severities(self):
        result = parse_stylelint_report(self.REPORT, "/p/css/site.css")
        assert (result.error_count, result.warning_count) == (1, 1)
        assert result.messages[0].rule_id == "color-no-invalid-hex"

    def test_parse_errors_are_fatal(self):
        report = json.dumps([{"source": "a.css", "warnings": [], "parseErrors": [{"text": "Unclosed block", "line": 3}]}])
        result = parse_stylelint_report(report, "a.css")
        assert result.messages[0].fatal
        assert result.error_count == 1

    def test_report_on_stderr(self, tmp_path: Path):
        reg = _registry(
            tmp_path, "stylelint",
            lambda action: Receipt.success(
                adapter="stylelint", action_id=action.id, output="", metadata={"stderr": self.REPORT}
            ),
        )
        result = StylelintLinter(reg, root=tmp_path).lint_text("a { color: #ggg; }", "/p/css/site.css")
        assert result.error_count == 1

    def test_fix_pass(self, tmp_path: Path):
        def respond(action: Action) -> str:
            return "a { color: #fff; }\n" if "--fix" in action.args else self.REPORT

        reg = _registry(tmp_path, "stylelint", respond)
        result = StylelintLinter(reg, root=tmp_path, fix=True).lint_text("a{color:#FFF}", "/p/css/site.css")
        assert result.output == "a { color: #fff; }\n"

    def test_unreadable_report(self):
        with pytest.raises(LintError):
            parse_stylelint_report("not json", "a.css")


# ── Task ─────────────────────────────────────────────────────────────


class TestLintTask:
    def test_fails_on_errors(self, tmp_path: Path):
        write(tmp_path / "src" / "js" / "01-a.js", "var x")
        linter_reg = _registry(tmp_path, "eslint", lambda action: eslint_report(_stdin_filename(action), [UNUSED]))
        run = lint_js(["src/{helpers,js}/**/*.js"], root=tmp_path, registry=linter_reg)
        with pytest.raises(LintError, match="Failed with 1 error"):
            run()

    def test_clean_run(self, tmp_path: Path):
        write(tmp_path / "src" / "js" / "01-a.js", "var x = 1;")
        reg = _registry(tmp_path, "eslint", lambda action: eslint_report(_stdin_filename(action), []))
        lint_js(["src/js/*.js"], root=tmp_path, registry=reg)()

    def test_no_files_is_fine(self, tmp_path: Path, registry):
        lint_js(["src/js/*.js"], root=tmp_path, registry=registry)()
