"""
Build task — turn the UI source tree into the deployable UI directory.

    ui.yml                         copied when present
    js/<N>-*.js                    bundled/minified, concatenated → js/site.js
    js/vendor/<name>[.bundle].js   bundled, minified
    js/vendor/*.min.js             renamed → *.js
    css/site.css, css/vendor/*.css CSS pipeline
    font/, img/, helpers/, layouts/, partials/   copied (images optimized)
    static/**                      copied to the destination root

Every group is its own stream; the merged result goes to one sink.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable

from uibundle.adapters.registry import AdapterRegistry
from uibundle.core.config.loader import sourcemaps_enabled
from uibundle.core.engine.stream import dest, drain, merge, passthrough, pipe, src
from uibundle.core.models.config import BuildConfig
from uibundle.core.services.css import css_plugins, postcss
from uibundle.core.services.images import optimize_images
from uibundle.core.services.js_bundle import (
    Bundler,
    bundle,
    concat,
    minify,
    only_numbered,
    only_vendor_entries,
    strip_min_suffix,
)

logger = logging.getLogger(__name__)


def build(
    src_dir: Path,
    dest_dir: Path,
    *,
    preview: bool = False,
    config: BuildConfig,
    registry: AdapterRegistry,
) -> Callable[[], None]:
    """Return the build task for ``src_dir`` → ``dest_dir``.

    ``preview`` keeps CSS readable, skips image optimization and always
    writes source maps.
    """
    src_dir = Path(src_dir).resolve()
    dest_dir = Path(dest_dir).resolve()

    def run() -> None:
        maps = sourcemaps_enabled(config, preview=preview)
        bundler = Bundler(registry, src_dir)
        plugins = css_plugins(dest=dest_dir, preview=preview, node_modules=config.node_modules)
        opts = {"cwd": src_dir, "allow_empty": True}

        written = drain(pipe(
            merge(
                src("ui.yml", **opts),
                pipe(
                    src("js/[0-9]*-*.js", read=False, sourcemaps=maps, **opts),
                    only_numbered(),
                    bundle(bundler),
                    minify(),
                    concat("js/site.js"),
                ),
                pipe(
                    src("js/vendor/*.js", read=False, **opts),
                    only_vendor_entries(),
                    bundle(bundler),
                    minify(),
                ),
                pipe(src("js/vendor/*.min.js", **opts), strip_min_suffix()),
                pipe(src(["css/site.css", "css/vendor/*.css"], sourcemaps=maps, **opts), postcss(plugins)),
                src("font/*.{ttf,woff,woff2}", **opts),
                pipe(
                    src("img/**/*.{gif,ico,jpg,png,svg}", **opts),
                    passthrough() if preview else optimize_images(),
                ),
                src("helpers/*.{js,py}", **opts),
                src("layouts/*.hbs", **opts),
                src("partials/*.hbs", **opts),
                src("static/**/*[!~]", base=src_dir / "static", dot=True, **opts),
            ),
            dest(dest_dir, sourcemaps=config.sourcemap_mode if maps else None),
        ))
        logger.info("Built %d file(s) into %s", len(written), dest_dir)

    return run
