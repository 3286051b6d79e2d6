"""
Task catalog — every named task of the UI build, wired from the config.

    clean           remove build output
    lint-css        Stylelint over css_files
    lint-js         ESLint over js_files
    lint            lint-css ∥ lint-js
    format          Prettier + ESLint fix over format_files
    build           build the UI into dest_dir
    build-preview   build (preview mode) ∥ preview pages; optional watch loop
    pack            zip dest_dir into build_dir/<bundle>-bundle.zip
    bundle          clean → lint → build → pack
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Callable

from uibundle.adapters.registry import AdapterRegistry
from uibundle.core.engine.tasks import Task, TaskResult, create_task, parallel, run_task, series
from uibundle.core.models.config import BuildConfig
from uibundle.core.services.build import build
from uibundle.core.services.format import format_files
from uibundle.core.services.lint.tasks import lint_css, lint_js
from uibundle.core.services.pack import pack
from uibundle.core.services.preview import build_preview_pages
from uibundle.core.services.remove import remove


def define_tasks(
    config: BuildConfig,
    registry: AdapterRegistry,
    *,
    on_pack: Callable[[str], None] | None = None,
    watch: bool = False,
    stop: threading.Event | None = None,
) -> dict[str, Task]:
    """Build the task catalog for one project.

    Args:
        on_pack: Called with the absolute archive path after ``pack``.
        watch: Make ``build-preview`` a watch loop over the sources.
        stop: Event ending the watch loop.
    """
    root = config.root

    clean = create_task(
        name="clean",
        desc="Clean files and folders generated by build",
        call=remove([config.build_dir, config.preview_dest_dir, config.dest_dir], cwd=root),
    )
    lint_css_task = create_task(
        name="lint-css",
        desc="Lint the CSS source files using Stylelint",
        call=lint_css(config.css_files, root=root, registry=registry),
    )
    lint_js_task = create_task(
        name="lint-js",
        desc="Lint the JavaScript source files using ESLint",
        call=lint_js(config.js_files, root=root, registry=registry),
    )
    lint_task = create_task(
        name="lint",
        desc="Lint the CSS and JavaScript source files",
        call=parallel(lint_css_task, lint_js_task),
    )
    format_task = create_task(
        name="format",
        desc="Format the JavaScript source files using Prettier and ESLint",
        call=format_files(config.format_files, root=root, registry=registry),
    )
    build_task = create_task(
        name="build",
        desc="Build and stage the UI assets for bundling",
        call=build(config.src, config.dest, config=config, registry=registry),
    )
    pack_task = create_task(
        name="pack",
        desc="Create a bundle of the staged UI assets for publishing",
        call=pack(config.dest, config.build, config.bundle_name, on_finish=on_pack),
    )
    bundle_task = create_task(
        name="bundle",
        desc="Clean, lint, build, and bundle the UI for publishing",
        call=series(clean, lint_task, build_task, pack_task),
    )

    preview_build = create_task(
        name="build-preview",
        desc="Process and stage the UI assets and generate pages for the preview",
        opts={"--watch": "Rebuild whenever a source file changes"},
        call=parallel(
            create_task(
                name="build:preview",
                call=build(config.src, config.dest, preview=True, config=config, registry=registry),
            ),
            create_task(
                name="preview:build-pages",
                call=build_preview_pages(config.src, config.preview_src, config.preview_dest),
            ),
        ),
        loop=[f"{config.src_dir}/**/*", f"{config.preview_src_dir}/**/*"] if watch else None,
        cwd=root,
        interval=config.watch_interval,
        stop=stop,
    )

    tasks = [
        clean, lint_css_task, lint_js_task, lint_task, format_task,
        build_task, preview_build, pack_task, bundle_task,
    ]
    return {task.name: task for task in tasks}


@dataclass
class RunOutcome:
    """Result of running one catalog task."""

    name: str
    result: TaskResult | None = None
    errors: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.result is not None and self.result.ok

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "ok": self.ok,
            "result": self.result.to_dict() if self.result else None,
            "errors": self.errors,
        }


def run_named(tasks: dict[str, Task], name: str) -> RunOutcome:
    """Run the task called ``name``; unknown names are reported, not raised."""
    outcome = RunOutcome(name=name)
    task = tasks.get(name)
    if task is None:
        outcome.errors.append(f"Unknown task '{name}'. Available: {', '.join(sorted(tasks))}")
        return outcome
    outcome.result = run_task(task)
    if not outcome.result.ok:
        outcome.errors.append(outcome.result.error)
    return outcome
