"""
File streams — lazily evaluated pipelines of FileRecords.

A stream is any iterator of records. A stage is a callable that takes
an iterable of records and returns an iterator of records, so stages
compose with plain function application:

    pipe(src(["css/*.css"], cwd=src_dir), postcss(plugins), dest(out))

Nothing runs until the stream is consumed (``drain()``). Work happens
record by record; a stage that needs the whole stream (``concat``,
lint ``results``) simply consumes its input before yielding.

Glob syntax understood by ``src()``:
    *, ?, [..]     — fnmatch-style
    **             — any number of directories
    {a,b}          — alternatives (nestable)
    !pattern       — exclude matches of ``pattern``
"""

from __future__ import annotations

import glob
import itertools
import logging
import os
import shutil
from pathlib import Path
from typing import Callable, Iterable, Iterator, Literal

from uibundle.core.errors import StreamError
from uibundle.core.models.file import FileRecord

logger = logging.getLogger(__name__)

Stream = Iterator[FileRecord]
Stage = Callable[[Iterable[FileRecord]], Iterator[FileRecord]]

SourceMapMode = Literal["external", "inline"]


# ═══════════════════════════════════════════════════════════════════
#  Glob expansion
# ═══════════════════════════════════════════════════════════════════


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b}`` alternatives, innermost-first, into plain globs."""
    start = pattern.find("{")
    if start < 0:
        return [pattern]

    depth = 0
    for end in range(start, len(pattern)):
        if pattern[end] == "{":
            depth += 1
        elif pattern[end] == "}":
            depth -= 1
            if depth == 0:
                break
    else:
        return [pattern]  # unbalanced: treat literally

    body = pattern[start + 1:end]
    alternatives: list[str] = []
    depth = 0
    current = ""
    for char in body:
        if char == "," and depth == 0:
            alternatives.append(current)
            current = ""
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
        current += char
    alternatives.append(current)

    prefix, suffix = pattern[:start], pattern[end + 1:]
    expanded: list[str] = []
    for alt in alternatives:
        expanded.extend(expand_braces(prefix + alt + suffix))
    return expanded


def match_files(patterns: str | Iterable[str], cwd: Path, *, dot: bool = False) -> list[Path]:
    """Resolve glob patterns to existing files, in pattern order, sorted within each pattern."""
    if isinstance(patterns, str):
        patterns = [patterns]

    included: list[Path] = []
    excluded: set[Path] = set()
    for pattern in patterns:
        negate = pattern.startswith("!")
        raw = pattern[1:] if negate else pattern
        found: set[Path] = set()
        for expanded in expand_braces(raw):
            for hit in glob.glob(expanded, root_dir=cwd, recursive=True, include_hidden=dot):
                path = (cwd / hit).resolve()
                if path.is_file():
                    found.add(path)
        if negate:
            excluded |= found
        else:
            included.extend(sorted(p for p in found if p not in included))

    return [p for p in included if p not in excluded]


# ═══════════════════════════════════════════════════════════════════
#  Sources
# ═══════════════════════════════════════════════════════════════════


def src(
    patterns: str | Iterable[str],
    *,
    cwd: Path,
    base: Path | None = None,
    read: bool = True,
    dot: bool = False,
    allow_empty: bool = False,
    sourcemaps: bool = False,
) -> Stream:
    """Yield a FileRecord for every file matching ``patterns`` under ``cwd``.

    Args:
        patterns: One glob or a list of globs (relative to ``cwd``).
        base: Base for ``record.relative``; defaults to ``cwd``.
        read: Load contents (False leaves ``contents`` as None).
        dot: Let wildcards match hidden files and directories.
        allow_empty: Don't fail when nothing matches.
        sourcemaps: Initialise an empty source map on every record.

    Raises:
        StreamError: When nothing matches and ``allow_empty`` is False.
    """
    cwd = Path(cwd).resolve()
    base = Path(base).resolve() if base is not None else cwd
    files = match_files(patterns, cwd, dot=dot)
    if not files and not allow_empty:
        raise StreamError(f"File not found with singular glob: {patterns} (cwd: {cwd})")

    def generate() -> Stream:
        for path in files:
            record = FileRecord.from_disk(path, base, read=read)
            if sourcemaps:
                from uibundle.core.services.sourcemap import SourceMap

                record.source_map = SourceMap(file=record.basename, sources=[record.relative])
            yield record

    return generate()


# ═══════════════════════════════════════════════════════════════════
#  Composition
# ═══════════════════════════════════════════════════════════════════


def pipe(stream: Iterable[FileRecord], *stages: Stage) -> Stream:
    """Thread ``stream`` through ``stages`` in order."""
    result: Iterable[FileRecord] = stream
    for stage in stages:
        result = stage(result)
    return iter(result)


def merge(*streams: Iterable[FileRecord]) -> Stream:
    """Combine independent streams; each keeps its own ordering."""
    return itertools.chain.from_iterable(streams)


def map_records(fn: Callable[[FileRecord], FileRecord | None]) -> Stage:
    """Stage applying ``fn`` to every record; a None result drops the record."""

    def stage(records: Iterable[FileRecord]) -> Stream:
        for record in records:
            out = fn(record)
            if out is not None:
                yield out

    return stage


def passthrough() -> Stage:
    """Stage that forwards records untouched."""
    return map_records(lambda record: record)


def drain(stream: Iterable[FileRecord]) -> list[FileRecord]:
    """Consume a stream to the end and return the records it produced."""
    return list(stream)


# ═══════════════════════════════════════════════════════════════════
#  Sinks
# ═══════════════════════════════════════════════════════════════════


_MAP_COMMENTS = {
    ".css": "/*# sourceMappingURL={url} */",
    ".js": "//# sourceMappingURL={url}",
}


def dest(root: Path | Callable[[FileRecord], Path], *, sourcemaps: SourceMapMode | None = None) -> Stage:
    """Write every record under ``root`` at its relative path.

    The written file's mtime is set from the record, so freshness
    computed upstream survives on disk. Records are re-based onto the
    destination and passed on. Null records only create their directory.
    ``root`` may be a callable picking the destination per record.
    """

    def stage(records: Iterable[FileRecord]) -> Stream:
        for record in records:
            out_root = Path(root(record) if callable(root) else root).resolve()
            target = out_root / record.relative
            target.parent.mkdir(parents=True, exist_ok=True)

            if record.is_null():
                yield record
                continue

            if record.is_stream():
                with open(target, "wb") as fh:
                    shutil.copyfileobj(record.contents, fh)
            else:
                data = bytes(record.contents)
                if sourcemaps and record.source_map is not None:
                    data = _write_sourcemap(record, target, data, sourcemaps)
                target.write_bytes(data)

            if record.mtime:
                os.utime(target, (record.mtime, record.mtime))

            logger.debug("Wrote %s", target)
            record.base = out_root
            record.path = target
            yield record

    return stage


def _write_sourcemap(record: FileRecord, target: Path, data: bytes, mode: SourceMapMode) -> bytes:
    comment = _MAP_COMMENTS.get(target.suffix)
    source_map = record.source_map
    source_map.file = target.name
    if mode == "inline":
        url = source_map.to_data_uri()
    else:
        map_path = target.with_name(target.name + ".map")
        map_path.write_text(source_map.to_json(), encoding="utf-8")
        if record.mtime:
            os.utime(map_path, (record.mtime, record.mtime))
        url = map_path.name
    if comment is None:
        return data
    if not data.endswith(b"\n"):
        data += b"\n"
    return data + comment.format(url=url).encode("utf-8") + b"\n"
