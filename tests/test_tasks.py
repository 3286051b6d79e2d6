"""
Tests for task creation, composition and the watch loop.
"""

import os
import threading
from pathlib import Path

import pytest

from uibundle.core.engine.tasks import (
    create_task,
    parallel,
    run_series,
    run_task,
    series,
    snapshot,
    watch,
)


def _noop():
    pass


def _boom():
    raise RuntimeError("boom")


class TestCreateTask:
    def test_name_desc_flags(self):
        task = create_task(name="build", desc="Build it", opts={"--watch": "loop"}, call=_noop)
        assert task.name == "build"
        assert task.description == "Build it"
        assert task.flags == {"--watch": "loop"}

    def test_default_name_is_function_name(self):
        assert create_task(call=_noop).name == "_noop"

    def test_series_label(self):
        task = create_task(name="bundle", call=series(create_task(name="a", call=_noop)))
        assert task.name == "bundle"
        assert task.label == "<series> bundle"
        assert [child.name for child in task.children] == ["a"]

    def test_loop_wraps_delegate(self, tmp_path: Path):
        task = create_task(name="preview", call=_noop, loop=["*.txt"], cwd=tmp_path)
        assert task.name == "preview"
        assert task.children[0].name == "preview:loop"


class TestRunning:
    def test_run_task_success(self):
        result = run_task(create_task(name="ok", call=_noop))
        assert result.ok
        assert result.status == "done"
        assert result.duration_ms >= 0

    def test_run_task_never_raises(self):
        result = run_task(create_task(name="bad", call=_boom))
        assert result.status == "error"
        assert result.error == "boom"
        assert isinstance(result.exception, RuntimeError)

    def test_series_stops_at_first_failure(self):
        calls = []
        tasks = [
            create_task(name="one", call=lambda: calls.append(1)),
            create_task(name="two", call=_boom),
            create_task(name="three", call=lambda: calls.append(3)),
        ]
        results = run_series(tasks)
        assert [r.status for r in results] == ["done", "error", "skipped"]
        assert calls == [1]

    def test_series_reraises(self):
        with pytest.raises(RuntimeError, match="boom"):
            series(create_task(name="bad", call=_boom))()

    def test_parallel_runs_everything_before_raising(self):
        calls = []
        task = parallel(create_task(name="bad", call=_boom), create_task(name="ok", call=lambda: calls.append(1)))
        with pytest.raises(RuntimeError):
            task()
        assert calls == [1]

    def test_to_dict(self):
        data = run_task(create_task(name="ok", call=_noop)).to_dict()
        assert data["name"] == "ok"
        assert data["status"] == "done"


class TestWatch:
    def test_snapshot(self, tmp_path: Path):
        (tmp_path / "a.txt").write_text("x")
        state = snapshot(["*.txt"], tmp_path)
        assert list(state) == [(tmp_path / "a.txt").resolve()]

    def test_initial_run(self, tmp_path: Path):
        calls = []
        runs = watch(["*.txt"], lambda: calls.append(1), cwd=tmp_path, interval=0.01, max_runs=1)
        assert runs == 1
        assert calls == [1]

    def test_stop_event(self, tmp_path: Path):
        stop = threading.Event()
        stop.set()
        runs = watch(["*.txt"], _noop, cwd=tmp_path, ignore_initial=True, stop=stop)
        assert runs == 0

    def test_failing_run_keeps_watching(self, tmp_path: Path):
        runs = watch(["*.txt"], _boom, cwd=tmp_path, interval=0.01, max_runs=1)
        assert runs == 1

    def test_change_triggers_run(self, tmp_path: Path):
        target = tmp_path / "a.txt"
        target.write_text("x")
        calls = []

        def task():
            calls.append(1)
            if len(calls) == 1:
                target.write_text("changed")
                os.utime(target, (target.stat().st_atime, target.stat().st_mtime + 10))

        runs = watch(["*.txt"], task, cwd=tmp_path, interval=0.01, max_runs=2)
        assert runs == 2
