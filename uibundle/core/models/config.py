"""
Build configuration model — loaded from ui-build.yml.

Every field has a default matching the conventional UI project layout,
so a project without a config file builds out of the box.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


class BuildConfig(BaseModel):
    """Directory layout, lint targets and tool settings for one UI project."""

    src_dir: str = "src"
    dest_dir: str = "public/_"
    build_dir: str = "build"
    preview_src_dir: str = "preview-src"
    preview_dest_dir: str = "public"
    bundle_name: str = "ui"
    node_modules_dir: str = "node_modules"

    js_files: list[str] = Field(default_factory=lambda: ["src/{helpers,js}/**/*.js"])
    css_files: list[str] = Field(default_factory=lambda: ["src/css/**/*.css"])
    format_files: list[str] = Field(default_factory=lambda: ["src/{helpers,js}/**/*.js"])

    sourcemaps: bool = False
    sourcemap_mode: Literal["external", "inline"] = "external"

    npx: str = "npx"                # runner used for eslint, stylelint, prettier, browserify
    tool_timeout: int = 300         # seconds, per tool invocation
    watch_interval: float = 1.0     # seconds between mtime polls in --watch mode

    root: Path = Field(default_factory=Path.cwd, exclude=True)

    def path(self, relative: str) -> Path:
        """Resolve a configured directory against the project root."""
        return (self.root / relative).resolve()

    @property
    def src(self) -> Path:
        return self.path(self.src_dir)

    @property
    def dest(self) -> Path:
        return self.path(self.dest_dir)

    @property
    def build(self) -> Path:
        return self.path(self.build_dir)

    @property
    def preview_src(self) -> Path:
        return self.path(self.preview_src_dir)

    @property
    def preview_dest(self) -> Path:
        return self.path(self.preview_dest_dir)

    @property
    def node_modules(self) -> Path:
        return self.path(self.node_modules_dir)
