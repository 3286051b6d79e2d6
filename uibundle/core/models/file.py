"""
File record — the unit of work that flows through every pipeline stage.

A record is created by ``stream.src()``, mutated in place by each stage
(contents replaced, extension changed, path rewritten) and ends its life
in a sink (``stream.dest()``, an archive entry, or a discard).

Contents can be:
    bytes   — buffered file (the normal case)
    None    — metadata only (``src(read=False)``)
    IO      — a streaming payload; most stages reject these
"""

from __future__ import annotations

import io
import os
import posixpath
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from uibundle.core.models.lint import LintResult

if TYPE_CHECKING:
    from uibundle.core.services.sourcemap import SourceMap


@dataclass
class FileRecord:
    """A named, content-bearing, path-addressed file in flight."""

    path: Path
    base: Path
    contents: bytes | io.IOBase | None = None
    mtime: float = 0.0
    source_map: SourceMap | None = None
    lint_results: list[LintResult] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_disk(cls, path: Path, base: Path, *, read: bool = True) -> FileRecord:
        """Create a record for an existing file, stat'ing it for its mtime."""
        path = path.resolve()
        contents = path.read_bytes() if read else None
        return cls(
            path=path,
            base=base.resolve(),
            contents=contents,
            mtime=path.stat().st_mtime,
        )

    # ── Content kind ───────────────────────────────────────────────

    def is_null(self) -> bool:
        return self.contents is None

    def is_stream(self) -> bool:
        return isinstance(self.contents, io.IOBase)

    def is_buffer(self) -> bool:
        return isinstance(self.contents, (bytes, bytearray))

    # ── Path views ─────────────────────────────────────────────────

    @property
    def relative(self) -> str:
        """Path relative to ``base``, always with forward slashes."""
        return Path(os.path.relpath(self.path, self.base)).as_posix()

    @relative.setter
    def relative(self, value: str) -> None:
        self.path = self.base / value

    @property
    def basename(self) -> str:
        return self.path.name

    @property
    def stem(self) -> str:
        return self.path.stem

    @property
    def extname(self) -> str:
        return self.path.suffix

    @extname.setter
    def extname(self, value: str) -> None:
        self.path = self.path.with_suffix(value)

    @property
    def dirname(self) -> str:
        return posixpath.dirname(self.relative)

    # ── Contents ───────────────────────────────────────────────────

    @property
    def text(self) -> str:
        """Buffered contents decoded as UTF-8."""
        if not self.is_buffer():
            raise TypeError(f"{self.relative} has no buffered contents")
        return bytes(self.contents).decode("utf-8")

    @text.setter
    def text(self, value: str) -> None:
        self.contents = value.encode("utf-8")

    def read(self) -> None:
        """Load contents from disk for a metadata-only record."""
        self.contents = self.path.read_bytes()

    def touch(self, mtime: float) -> None:
        """Advance the record's mtime; never moves it backwards."""
        if mtime > self.mtime:
            self.mtime = mtime

    def __repr__(self) -> str:
        kind = "null" if self.is_null() else "stream" if self.is_stream() else "buffer"
        return f"<FileRecord {self.relative!r} {kind}>"
