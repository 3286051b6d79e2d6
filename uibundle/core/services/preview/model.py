"""Sample UI model: the site/page data every preview page is rendered with."""

from __future__ import annotations

import os
import posixpath
from pathlib import Path
from typing import Any

import yaml

from uibundle.core.errors import PageCompilationError

MODEL_FILE = "ui-model.yml"

NOT_FOUND_STEM = "404"
NOT_FOUND_PAGE = {"layout": "404", "title": "Page Not Found"}


def load_sample_ui_model(preview_src: Path) -> dict[str, Any]:
    """Read ``ui-model.yml`` from the preview source directory."""
    path = Path(preview_src) / MODEL_FILE
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise PageCompilationError(f"Cannot read UI model {path}: {e}", template_path=str(path)) from e
    except yaml.YAMLError as e:
        raise PageCompilationError(f"Invalid YAML in UI model {path}: {e}", template_path=str(path)) from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise PageCompilationError(f"Expected a YAML mapping in {path}", template_path=str(path))
    return data


def finalize_model(base: dict[str, Any], env: dict[str, str] | None = None) -> dict[str, Any]:
    """The model shared by every page: base model plus ``env``, minus ``asciidoc``."""
    asciidoc = {"extensions": []}
    site = base.get("site") or {}
    for component in site.get("components") or []:
        for version in component.get("versions") or []:
            version["asciidoc"] = asciidoc

    model = {**base, "env": dict(os.environ if env is None else env)}
    model.pop("asciidoc", None)
    return model


def root_paths(page_path: Path, preview_src: Path) -> tuple[str, str]:
    """(siteRootPath, uiRootPath) for a page; siteRootPath is '' at the root."""
    rel = os.path.relpath(Path(preview_src).resolve(), Path(page_path).resolve().parent)
    site_root = Path(rel).as_posix()
    if site_root == ".":
        site_root = ""
    return site_root, posixpath.join(site_root, "_")


def page_model(model: dict[str, Any], page_path: Path, preview_src: Path) -> dict[str, Any]:
    """A per-page copy of ``model`` with root paths set; ``page`` is copied too."""
    site_root, ui_root = root_paths(page_path, preview_src)
    page = dict(model.get("page") or {})
    return {**model, "page": page, "siteRootPath": site_root, "uiRootPath": ui_root}
