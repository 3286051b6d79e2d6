"""
Template registry — compiled Handlebars layouts, partials and helpers.

One registry is created per preview build and passed to the renderer;
nothing is registered globally. Layouts, partials and helpers may be
loaded concurrently; compilation itself is serialized.

Helpers are Python modules ``helpers/<name>.py`` exposing a callable
named ``<name>`` (or ``helper``). pybars calls helpers with the current
context first, then the template arguments:

    def eq(this, a, b):
        return a == b
"""

from __future__ import annotations

import importlib.util
import logging
import threading
from pathlib import Path
from typing import Any, Callable

from pybars import Compiler

from uibundle.core.errors import PageCompilationError

logger = logging.getLogger(__name__)

_PARTIAL_ATTR = "ui_template_partial"


def resolve_page_url(this: Any, spec: str | None = None, *args: Any, **kwargs: Any) -> str | None:
    """``component:module:topic/page.adoc`` → ``/topic/page.html``."""
    if not spec:
        return None
    name = spec.split(":")[-1]
    stem = name[: name.rfind(".")] if "." in name else name
    return f"/{stem}.html"


def resolve_page(this: Any, spec: str | None = None, *args: Any, **kwargs: Any) -> dict | None:
    if not spec:
        return None
    return {"pub": {"url": resolve_page_url(this, spec)}}


BUILTIN_HELPERS: dict[str, Callable] = {
    "resolvePage": resolve_page,
    "resolvePageURL": resolve_page_url,
}


def display_path(path: Path) -> str:
    """``path`` relative to the working directory when it lies below it."""
    path = Path(path).resolve()
    try:
        return path.relative_to(Path.cwd().resolve()).as_posix()
    except ValueError:
        return path.as_posix()


class TemplateRegistry:
    """Layouts, partials and helpers for one preview build."""

    def __init__(self, src: Path):
        self.src = Path(src).resolve()
        self.layouts: dict[str, Callable] = {}
        self.partials: dict[str, Callable] = {}
        self.helpers: dict[str, Callable] = dict(BUILTIN_HELPERS)
        self._compiler = Compiler()
        self._lock = threading.Lock()

    def template_path(self, kind: str, name: str) -> str:
        return f"{display_path(self.src)}/{kind}/{name}.hbs"

    # ── Loading ─────────────────────────────────────────────────────

    def compile(self, source: str, template_path: str) -> Callable:
        with self._lock:
            try:
                return self._compiler.compile(source)
            except Exception as e:
                raise PageCompilationError(
                    f"{e} in UI template {template_path}", template_path=template_path
                ) from e

    def compile_layouts(self) -> int:
        for path in sorted((self.src / "layouts").glob("*.hbs")):
            source = path.read_text(encoding="utf-8")
            self.layouts[path.stem] = self.compile(source, self.template_path("layouts", path.stem))
        logger.debug("Compiled %d layout(s)", len(self.layouts))
        return len(self.layouts)

    def register_partial(self, name: str, source: str) -> None:
        template = self.compile(source, self.template_path("partials", name))

        def partial(*args: Any, **kwargs: Any) -> Any:
            try:
                return template(*args, **kwargs)
            except Exception as e:
                if getattr(e, _PARTIAL_ATTR, None) is None:
                    setattr(e, _PARTIAL_ATTR, name)
                raise

        self.partials[name] = partial

    def register_partials(self) -> int:
        paths = sorted((self.src / "partials").glob("*.hbs"))
        for path in paths:
            self.register_partial(path.stem, path.read_text(encoding="utf-8"))
        return len(paths)

    def register_helper(self, name: str, fn: Callable) -> None:
        self.helpers[name] = fn

    def register_helpers(self) -> int:
        paths = sorted((self.src / "helpers").glob("*.py"))
        for path in paths:
            self.register_helper(path.stem, load_helper(path))
        logger.debug("Registered %d helper(s)", len(paths))
        return len(paths)

    # ── Rendering ───────────────────────────────────────────────────

    def render(self, layout: str, model: dict[str, Any]) -> str:
        """Render ``model`` with ``layout``.

        Raises:
            PageCompilationError: Unknown layout, or the template failed;
                the message names the partial or layout that was rendering.
        """
        template = self.layouts.get(layout)
        if template is None:
            path = self.template_path("layouts", layout)
            raise PageCompilationError(
                f"Layout '{layout}' not found in UI template {path}", template_path=path, layout=layout
            )
        try:
            return str(template(model, helpers=self.helpers, partials=self.partials))
        except Exception as e:
            partial = getattr(e, _PARTIAL_ATTR, None)
            path = self.template_path("partials", partial) if partial else self.template_path("layouts", layout)
            message = str(e)
            sep = "\n^ " if "\n" in message else " "
            raise PageCompilationError(
                f"{message}{sep}in UI template {path}", template_path=path, layout=layout
            ) from e


def load_helper(path: Path) -> Callable:
    """Import ``helpers/<name>.py`` and return its helper function."""
    module_name = f"uibundle_helper_{path.stem}"
    spec = importlib.util.spec_from_file_location(module_name, path)
    if spec is None or spec.loader is None:
        raise PageCompilationError(f"Cannot load helper {path}", template_path=str(path))
    module = importlib.util.module_from_spec(spec)
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        raise PageCompilationError(f"{e} in UI helper {path}", template_path=str(path)) from e

    fn = getattr(module, path.stem, None) or getattr(module, "helper", None)
    if not callable(fn):
        raise PageCompilationError(
            f"UI helper {path} defines no function '{path.stem}' or 'helper'", template_path=str(path)
        )
    return fn
