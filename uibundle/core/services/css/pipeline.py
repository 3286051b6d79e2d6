"""
CSS pipeline — the ordered plugin list and the stage that runs it.

    import → mtime → font urls → custom properties → calc (preview)
           → prefixer → minify (non-preview) → pseudo-elements

A plugin is ``fn(css, ctx) -> css``. ``CssContext`` carries the record
being processed and the files the import plugin pulled in, which the
mtime plugin and source map generation read back.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterable

import rcssmin

from uibundle.core.engine.stream import Stage, Stream
from uibundle.core.errors import CssError, StreamError
from uibundle.core.models.file import FileRecord
from uibundle.core.services.css.calc import reduce_calc
from uibundle.core.services.css.imports import resolve_imports
from uibundle.core.services.css.prefixer import autoprefix
from uibundle.core.services.css.properties import resolve_custom_properties
from uibundle.core.services.css.pseudo import normalize_pseudo_elements
from uibundle.core.services.css.urls import rewrite_font_urls
from uibundle.core.services.sourcemap import SourceMapBuilder, chunk_map

logger = logging.getLogger(__name__)


@dataclass
class CssContext:
    record: FileRecord
    dependencies: list[Path] = field(default_factory=list)
    origins: list[tuple[Path, int]] = field(default_factory=list)


CssPlugin = Callable[[str, CssContext], str]


# ═══════════════════════════════════════════════════════════════════
#  Plugins
# ═══════════════════════════════════════════════════════════════════


def import_plugin(node_modules: Path) -> CssPlugin:
    def run(css: str, ctx: CssContext) -> str:
        result = resolve_imports(css, ctx.record.path, node_modules=node_modules)
        ctx.dependencies.extend(result.dependencies)
        ctx.origins = result.origins
        return result.css

    run.__name__ = "postcss-import"
    return run


def mtime_plugin(css: str, ctx: CssContext) -> str:
    """Advance the record's mtime to the newest imported file."""
    for dep in ctx.dependencies:
        try:
            ctx.record.touch(dep.stat().st_mtime)
        except OSError:
            continue
    return css


def font_url_plugin(dest: Path, node_modules: Path) -> CssPlugin:
    def run(css: str, ctx: CssContext) -> str:
        return rewrite_font_urls(css, dest=dest, node_modules=node_modules)

    run.__name__ = "postcss-url"
    return run


def custom_properties_plugin(preserve: bool) -> CssPlugin:
    def run(css: str, ctx: CssContext) -> str:
        return resolve_custom_properties(css, preserve=preserve)

    run.__name__ = "postcss-custom-properties"
    return run


def calc_plugin(css: str, ctx: CssContext) -> str:
    return reduce_calc(css)


def prefixer_plugin(css: str, ctx: CssContext) -> str:
    return autoprefix(css)


def minify_plugin(css: str, ctx: CssContext) -> str:
    return rcssmin.cssmin(css, keep_bang_comments=True)


def pseudo_element_plugin(css: str, ctx: CssContext) -> str:
    return normalize_pseudo_elements(css)


def css_plugins(*, dest: Path, preview: bool, node_modules: Path) -> list[CssPlugin]:
    """The ordered plugin list for a build (``preview`` keeps output readable)."""
    plugins: list[CssPlugin] = [
        import_plugin(node_modules),
        mtime_plugin,
        font_url_plugin(dest, node_modules),
        custom_properties_plugin(preserve=preview),
    ]
    if preview:
        plugins.append(calc_plugin)
    plugins.append(prefixer_plugin)
    if not preview:
        plugins.append(minify_plugin)
    plugins.append(pseudo_element_plugin)
    return plugins


# ═══════════════════════════════════════════════════════════════════
#  Stage
# ═══════════════════════════════════════════════════════════════════


def postcss(plugins: list[CssPlugin]) -> Stage:
    """Run ``plugins`` in order over every stylesheet record.

    Raises:
        CssError: A plugin failed; the error names the stylesheet.
        StreamError: A record has streaming contents.
    """

    def stage(records: Iterable[FileRecord]) -> Stream:
        for record in records:
            if record.is_null():
                yield record
                continue
            if record.is_stream():
                raise StreamError(f"postcss: streaming is not supported ({record.path})")

            source_text = record.text
            ctx = CssContext(record=record)
            css = source_text
            for plugin in plugins:
                try:
                    css = plugin(css, ctx)
                except CssError as e:
                    if e.file_path is None:
                        e.file_path = str(record.path)
                    raise
                except Exception as e:
                    name = getattr(plugin, "__name__", "plugin")
                    raise CssError(f"{name}: {e}", file_path=str(record.path)) from e

            if record.source_map is not None:
                record.source_map = _build_map(record, source_text, css, ctx)
            record.text = css
            logger.debug("postcss %s (%d imports)", record.relative, len(ctx.dependencies))
            yield record

    return stage


def _build_map(record: FileRecord, source_text: str, css: str, ctx: CssContext):
    own = record.relative
    if not ctx.origins or css.count("\n") + 1 != len(ctx.origins):
        return chunk_map(record.basename, [(own, source_text, css)])

    builder = SourceMapBuilder(record.basename)
    builder.add_source(own, source_text)
    for gen_line, (origin, orig_line) in enumerate(ctx.origins, start=1):
        if origin == record.path.resolve():
            name = own
        else:
            name = Path(os.path.relpath(origin, record.base)).as_posix()
        builder.add(gen_line, 0, name, orig_line)
    return builder.build()
