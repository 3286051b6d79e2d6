"""Font URL rewriting: copy fonts referenced from node_modules into the bundle."""

from __future__ import annotations

import logging
import re
import shutil
from pathlib import Path

from uibundle.core.errors import CssError
from uibundle.core.services.css.syntax import transform_function_calls

logger = logging.getLogger(__name__)

FONT_URL_RE = re.compile(r"^~[^/]*(?:font|typeface)[^/]*/.*/files/.+[.](?:ttf|woff2?)$")


def rewrite_font_urls(css: str, *, dest: Path, node_modules: Path) -> str:
    """Rewrite ``url(~<font package>/…/files/x.woff2)`` to ``url(../font/x.woff2)``.

    The font is copied to ``<dest>/font/`` unless a file of that name is
    already there.
    """

    def rewrite(args: str) -> str | None:
        raw = args.strip()
        quote = raw[0] if raw[:1] in ("'", '"') else ""
        url = raw[1:-1] if quote else raw
        pathname = url.split("?", 1)[0].split("#", 1)[0]
        if not FONT_URL_RE.match(pathname):
            return None

        source = Path(node_modules) / pathname[1:]
        target = Path(dest) / "font" / source.name
        if not target.exists():
            if not source.is_file():
                raise CssError(f"Font not found: {source}")
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copy2(source, target)
            logger.debug("Copied font %s", source.name)
        return f"url({quote}../font/{source.name}{url[len(pathname):]}{quote})"

    return transform_function_calls(css, "url", rewrite)
