"""
JavaScript bundle pipeline.

Entry files named ``*.bundle.js`` are bundled with browserify and the
flat packer; every other script is read as-is. Numbered site scripts
(``js/1-foo.js``, ``js/2-bar.js`` …) are minified and concatenated in
numeric order into ``js/site.js``. Vendor scripts are bundled and
minified individually, and prebuilt ``*.min.js`` files are renamed.

A bundled file's mtime is the newest mtime among the entry and every
module browserify pulled into it, so downstream freshness checks see
changes in any dependency.
"""

from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Iterable

import rjsmin

from uibundle.adapters.registry import AdapterRegistry
from uibundle.core.engine.stream import Stage, Stream, map_records
from uibundle.core.errors import BundleError, StreamError
from uibundle.core.models.action import Action
from uibundle.core.models.file import FileRecord
from uibundle.core.services.sourcemap import chunk_map

logger = logging.getLogger(__name__)

BUNDLE_EXT = ".bundle.js"

NUMBERED_ENTRY_RE = re.compile(r"^(\d+)-.*\.js$")
VENDOR_ENTRY_RE = re.compile(r"^[^.]+(?:\.bundle)?\.js$")
MIN_SUFFIX = ".min.js"


# ═══════════════════════════════════════════════════════════════════
#  Bundler
# ═══════════════════════════════════════════════════════════════════


class Bundler:
    """browserify (flat packer) reached through the adapter registry."""

    adapter = "browserify"

    def __init__(self, registry: AdapterRegistry, basedir: Path):
        self.registry = registry
        self.basedir = Path(basedir).resolve()

    def bundle(self, entry: str) -> str:
        """Bundle ``entry`` (relative to ``basedir``) and return the script."""
        args = [entry, "--no-detect-globals", "-p", "browser-pack-flat/plugin"]
        return self._run("bundle", entry, args)

    def dependencies(self, entry: str) -> list[Path]:
        """Every file browserify would include for ``entry``, entry first."""
        output = self._run("list", entry, [entry, "--no-detect-globals", "--list"])
        return [Path(line.strip()) for line in output.splitlines() if line.strip()]

    def _run(self, verb: str, entry: str, args: list[str]) -> str:
        action = Action(
            id=f"{self.adapter}:{verb}:{entry}",
            adapter=self.adapter,
            args=args,
            cwd=str(self.basedir),
        )
        receipt = self.registry.execute_action(action)
        if not receipt.ok:
            raise BundleError(receipt.error or f"{self.adapter} failed", file_path=entry)
        return receipt.output


def discover_bundle_entries(src_dir: Path) -> dict[str, Path]:
    """Entry name (minus ``.bundle.js``) → absolute path, for every entry under ``src_dir``."""
    return {
        path.name[: -len(BUNDLE_EXT)]: path.resolve()
        for path in sorted(Path(src_dir).rglob(f"*{BUNDLE_EXT}"))
    }


# ═══════════════════════════════════════════════════════════════════
#  Stages
# ═══════════════════════════════════════════════════════════════════


def bundle(bundler: Bundler, ext: str = BUNDLE_EXT) -> Stage:
    """Bundle ``*.bundle.js`` records; load every other record from disk."""

    def stage(records: Iterable[FileRecord]) -> Stream:
        for record in records:
            if record.is_stream():
                raise StreamError(f"bundle: streaming is not supported ({record.path})")
            if not record.relative.endswith(ext):
                if record.is_null():
                    record.read()
                yield record
                continue

            entry = record.relative
            record.text = bundler.bundle(entry)
            entry_path = record.path.resolve()
            for dep in bundler.dependencies(entry):
                dep = dep if dep.is_absolute() else bundler.basedir / dep
                if dep.resolve() == entry_path:
                    continue
                try:
                    record.touch(dep.stat().st_mtime)
                except OSError as e:
                    raise BundleError(f"Cannot stat bundled file {dep}: {e}", file_path=entry) from e
            record.path = record.path.with_name(record.basename[: -len(ext)] + ".js")
            logger.debug("Bundled %s", entry)
            yield record

    return stage


def minify() -> Stage:
    """Minify scripts, keeping ``/*! … */`` license banners."""

    def run(record: FileRecord) -> FileRecord:
        if record.is_null():
            return record
        before = record.text
        after = rjsmin.jsmin(before, keep_bang_comments=True)
        if record.source_map is not None:
            source = record.source_map.sources[0] if record.source_map.sources else record.relative
            record.source_map = chunk_map(record.basename, [(source, before, after)])
        record.text = after
        return record

    return map_records(run)


def _numeric_key(record: FileRecord) -> tuple[float, str]:
    m = NUMBERED_ENTRY_RE.match(record.basename)
    return (int(m.group(1)) if m else math.inf, record.basename)


def concat(path: str, separator: str = "\n") -> Stage:
    """Join every record, in ascending numeric prefix order, into one file at ``path``."""

    def stage(records: Iterable[FileRecord]) -> Stream:
        collected = sorted((r for r in records if not r.is_null()), key=_numeric_key)
        if not collected:
            return
        first = collected[0]
        texts = [r.text for r in collected]
        joined = FileRecord(
            path=first.base / path,
            base=first.base,
            contents=separator.join(texts).encode("utf-8"),
            mtime=max(r.mtime for r in collected),
        )
        if any(r.source_map is not None for r in collected):
            chunks = []
            for record, text in zip(collected, texts):
                source_map = record.source_map
                source = source_map.sources[0] if source_map and source_map.sources else record.relative
                content = source_map.sources_content[0] if source_map and source_map.sources_content else text
                chunks.append((source, content or text, text))
            joined.source_map = chunk_map(joined.basename, chunks, separator)
        logger.debug("Concatenated %d script(s) into %s", len(collected), path)
        yield joined

    return stage


def only_numbered() -> Stage:
    return map_records(lambda r: r if NUMBERED_ENTRY_RE.match(r.basename) else None)


def only_vendor_entries() -> Stage:
    return map_records(lambda r: r if VENDOR_ENTRY_RE.match(r.basename) else None)


def strip_min_suffix() -> Stage:
    """Rename ``x.min.js`` to ``x.js``."""

    def run(record: FileRecord) -> FileRecord:
        if record.basename.endswith(MIN_SUFFIX):
            record.path = record.path.with_name(record.basename[: -len(MIN_SUFFIX)] + ".js")
        return record

    return map_records(run)
