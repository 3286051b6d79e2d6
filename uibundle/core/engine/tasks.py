"""
Tasks — named, zero-argument units of work and their composition.

Each service module exposes *task factories*: functions taking paths
and options and returning a zero-argument callable. ``create_task``
decorates such a callable with a display name, description and flags,
and optionally turns it into a watch loop.

Composition
───────────
  series(a, b, c)   — run in order; stop at the first failure,
                      remaining tasks are reported as skipped
  parallel(a, b)    — run concurrently; the first failure is re-raised
                      once every task has finished

Watch loop
──────────
  create_task(name="preview:build", call=fn, loop=["src/**/*"])

produces a task named ``preview:build`` that runs ``preview:build:loop``
once, then polls the watched files' mtimes and reruns it whenever one
changes (or a file appears/disappears). A failing run is logged and the
loop keeps going.
"""

from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

from uibundle.core.engine.stream import match_files

logger = logging.getLogger(__name__)

SERIES = "<series>"
PARALLEL = "<parallel>"


@dataclass
class Task:
    """A named zero-argument callable."""

    name: str
    fn: Callable[[], object]
    description: str = ""
    flags: dict[str, str] = field(default_factory=dict)
    label: str = ""                         # tree label: "<series> bundle"
    children: list[Task] = field(default_factory=list)

    def __call__(self) -> object:
        return self.fn()


@dataclass
class TaskResult:
    """Outcome of one task run."""

    name: str
    status: str = "pending"                 # "pending" | "done" | "error" | "skipped"
    duration_ms: int = 0
    error: str = ""
    exception: BaseException | None = field(default=None, repr=False)

    @property
    def ok(self) -> bool:
        return self.status == "done"

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "status": self.status,
            "duration_ms": self.duration_ms,
            "error": self.error,
        }


def _display_name(fn: Callable) -> str:
    if isinstance(fn, Task):
        return fn.name
    return getattr(fn, "__name__", repr(fn))


# ═══════════════════════════════════════════════════════════════════
#  Factory
# ═══════════════════════════════════════════════════════════════════


def create_task(
    *,
    call: Callable[[], object],
    name: str | None = None,
    desc: str | None = None,
    opts: dict[str, str] | None = None,
    loop: Iterable[str] | None = None,
    cwd: Path | None = None,
    interval: float = 1.0,
    stop: threading.Event | None = None,
) -> Task:
    """Wrap ``call`` as a Task.

    Args:
        call: Zero-argument callable (or Task, e.g. from ``series``).
        name: Display name; composed tasks get it appended to their label.
        desc: One-line description shown in task listings.
        opts: Flag name → help text, for task listings.
        loop: Glob patterns to watch; turns the task into a watch loop.
        cwd: Directory the ``loop`` globs are relative to.
        interval: Seconds between mtime polls.
        stop: Event that ends the watch loop (tests, signal handlers).
    """
    if isinstance(call, Task):
        task = call
        if name:
            if task.name in (SERIES, PARALLEL):
                task.label = f"{task.name} {name}"
            task.name = name
    else:
        task = Task(name=name or _display_name(call), fn=call)

    if loop:
        patterns = list(loop)
        delegate = task
        display = delegate.name
        delegate.name = f"{display}:loop"
        task = Task(
            name=display,
            fn=lambda: watch(patterns, delegate, cwd=cwd or Path.cwd(), interval=interval, stop=stop),
            children=[delegate],
        )

    if desc:
        task.description = desc
    if opts:
        task.flags = dict(opts)
    return task


# ═══════════════════════════════════════════════════════════════════
#  Running
# ═══════════════════════════════════════════════════════════════════


def run_task(task: Callable[[], object]) -> TaskResult:
    """Run one task, capturing status and timing. Never raises."""
    result = TaskResult(name=_display_name(task), status="running")
    start = time.monotonic()
    try:
        task()
        result.status = "done"
    except Exception as e:
        result.status = "error"
        result.error = str(e)
        result.exception = e
    result.duration_ms = int((time.monotonic() - start) * 1000)
    logger.debug("Task %s %s in %dms", result.name, result.status, result.duration_ms)
    return result


def run_series(tasks: Iterable[Callable[[], object]]) -> list[TaskResult]:
    """Run tasks in order, stopping at the first failure."""
    tasks = list(tasks)
    results: list[TaskResult] = []
    for idx, task in enumerate(tasks):
        result = run_task(task)
        results.append(result)
        if not result.ok:
            for rest in tasks[idx + 1:]:
                results.append(TaskResult(name=_display_name(rest), status="skipped"))
            break
    return results


def series(*tasks: Callable[[], object]) -> Task:
    """Compose tasks to run one after another."""

    def run() -> list[TaskResult]:
        results = run_series(tasks)
        for result in results:
            if result.exception is not None:
                raise result.exception
        return results

    return Task(name=SERIES, fn=run, label=SERIES, children=[t for t in tasks if isinstance(t, Task)])


def parallel(*tasks: Callable[[], object]) -> Task:
    """Compose tasks to run concurrently; all finish before any error is raised."""

    def run() -> list[TaskResult]:
        with ThreadPoolExecutor(max_workers=max(len(tasks), 1)) as pool:
            results = list(pool.map(run_task, tasks))
        for result in results:
            if result.exception is not None:
                raise result.exception
        return results

    return Task(name=PARALLEL, fn=run, label=PARALLEL, children=[t for t in tasks if isinstance(t, Task)])


# ═══════════════════════════════════════════════════════════════════
#  Watching
# ═══════════════════════════════════════════════════════════════════


def snapshot(patterns: Iterable[str], cwd: Path) -> dict[Path, float]:
    """Map every watched file to its current mtime."""
    state: dict[Path, float] = {}
    for path in match_files(list(patterns), cwd):
        try:
            state[path] = path.stat().st_mtime
        except OSError:
            continue  # deleted between glob and stat
    return state


def watch(
    patterns: Iterable[str],
    task: Callable[[], object],
    *,
    cwd: Path,
    interval: float = 1.0,
    ignore_initial: bool = False,
    stop: threading.Event | None = None,
    max_runs: int | None = None,
) -> int:
    """Run ``task`` whenever a watched file changes, until ``stop`` is set.

    Returns the number of runs performed.
    """
    patterns = list(patterns)
    stop = stop or threading.Event()
    runs = 0

    def fire() -> None:
        nonlocal runs
        runs += 1
        result = run_task(task)
        if result.ok:
            logger.info("Finished '%s' after %dms", result.name, result.duration_ms)
        else:
            logger.error("'%s' errored after %dms: %s", result.name, result.duration_ms, result.error)

    last = snapshot(patterns, cwd)
    if not ignore_initial:
        fire()

    logger.info("Watching %d file(s) for changes", len(last))
    while not stop.is_set() and (max_runs is None or runs < max_runs):
        if stop.wait(interval):
            break
        current = snapshot(patterns, cwd)
        if current != last:
            last = current
            fire()

    return runs
