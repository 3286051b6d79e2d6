"""
Preview page compiler.

    setup (concurrent, all must succeed)
      ├── load ui-model.yml
      ├── compile layouts/*.hbs
      ├── register partials/*.hbs
      ├── register helpers/*.py (+ resolvePage, resolvePageURL)
      └── copy **/*.{png,svg} preview images
    render
      └── every **/*.adoc → <layout>(page model) → .html

One failing page aborts the task.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable

from uibundle.core.engine.stream import Stage, dest, drain, map_records, passthrough, pipe, src
from uibundle.core.models.file import FileRecord
from uibundle.core.services.preview import documents
from uibundle.core.services.preview.model import (
    NOT_FOUND_PAGE,
    NOT_FOUND_STEM,
    finalize_model,
    load_sample_ui_model,
    page_model,
)
from uibundle.core.services.preview.templates import TemplateRegistry

logger = logging.getLogger(__name__)


def copy_images(preview_src: Path, preview_dest: Path) -> int:
    written = drain(pipe(
        src("**/*.{png,svg}", cwd=preview_src, allow_empty=True),
        dest(preview_dest),
    ))
    return len(written)


def setup(src_dir: Path, preview_src: Path, preview_dest: Path) -> tuple[dict[str, Any], TemplateRegistry]:
    """Run every setup step concurrently; the first failure is re-raised."""
    registry = TemplateRegistry(src_dir)
    with ThreadPoolExecutor(max_workers=5) as pool:
        model_future = pool.submit(load_sample_ui_model, preview_src)
        futures = [
            model_future,
            pool.submit(registry.compile_layouts),
            pool.submit(registry.register_partials),
            pool.submit(registry.register_helpers),
            pool.submit(copy_images, preview_src, preview_dest),
        ]
    for future in futures:
        future.result()
    return model_future.result(), registry


def render_page(registry: TemplateRegistry, model: dict[str, Any], preview_src: Path) -> Callable:
    """Record transform rendering one ``.adoc`` record into HTML."""

    def run(record: FileRecord) -> FileRecord:
        ui_model = page_model(model, record.path, preview_src)
        if record.stem == NOT_FOUND_STEM:
            ui_model["page"] = dict(NOT_FOUND_PAGE)
        else:
            doc = documents.load(record.text)
            page = ui_model["page"]
            page["attributes"] = doc.page_attributes
            page["layout"] = doc.attribute("page-layout", "default")
            page["title"] = doc.title
            page["contents"] = doc.convert()

        record.extname = ".html"
        record.text = registry.render(ui_model["page"]["layout"], ui_model)
        logger.debug("Rendered %s", record.relative)
        return record

    return run


def build_preview_pages(
    src_dir: Path,
    preview_src: Path,
    preview_dest: Path,
    sink: Stage | None = None,
) -> Callable[[], list[FileRecord]]:
    """Return the task compiling every preview page into ``preview_dest``.

    ``sink`` sees the written pages (e.g. to notify a live-reload server).
    """
    src_dir = Path(src_dir).resolve()
    preview_src = Path(preview_src).resolve()
    preview_dest = Path(preview_dest).resolve()

    def run() -> list[FileRecord]:
        base_model, registry = setup(src_dir, preview_src, preview_dest)
        model = finalize_model(base_model)
        pages = drain(pipe(
            src("**/*.adoc", cwd=preview_src, allow_empty=True),
            map_records(render_page(registry, model, preview_src)),
            dest(preview_dest),
            sink or passthrough(),
        ))
        logger.info("Compiled %d preview page(s)", len(pages))
        return pages

    return run
