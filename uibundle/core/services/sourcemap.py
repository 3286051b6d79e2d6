"""
Source maps — Base64 VLQ codec, coarse map generation, and lint
warning repositioning.

Repositioning is a pure function over a decoded map:

    apply_sourcemap(result, source_map) -> [LintResult, ...]

so it can be tested without a file pipeline. Lines are 1-based and
columns 0-based, as in the source map v3 format consumers.

Generated maps are line-granular: each generated line points at the
start of the source line it came from (or the closest one). That is
enough for browser devtools to open the right file near the right
place after concatenation and import inlining.
"""

from __future__ import annotations

import base64
import bisect
import json
from dataclasses import dataclass, field
from typing import Iterable

from uibundle.core.models.lint import LintResult

_B64 = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_B64_INDEX = {c: i for i, c in enumerate(_B64)}

_VLQ_SHIFT = 5
_VLQ_BASE = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_BASE - 1
_VLQ_CONTINUATION = _VLQ_BASE


# ═══════════════════════════════════════════════════════════════════
#  VLQ codec
# ═══════════════════════════════════════════════════════════════════


def encode_vlq(value: int) -> str:
    """Encode one signed integer as a Base64 VLQ string."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    out = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        out.append(_B64[digit])
        if not vlq:
            return "".join(out)


def decode_vlq(segment: str) -> list[int]:
    """Decode a Base64 VLQ segment into its signed integers."""
    values: list[int] = []
    shift = 0
    acc = 0
    for char in segment:
        try:
            digit = _B64_INDEX[char]
        except KeyError:
            raise ValueError(f"Invalid base64 VLQ character {char!r}") from None
        acc += (digit & _VLQ_MASK) << shift
        if digit & _VLQ_CONTINUATION:
            shift += _VLQ_SHIFT
            continue
        values.append(-(acc >> 1) if acc & 1 else acc >> 1)
        acc = 0
        shift = 0
    if shift:
        raise ValueError("Truncated base64 VLQ segment")
    return values


# ═══════════════════════════════════════════════════════════════════
#  Source map model
# ═══════════════════════════════════════════════════════════════════


@dataclass(frozen=True)
class Mapping:
    generated_line: int         # 1-based
    generated_column: int       # 0-based
    source: str | None = None
    original_line: int | None = None    # 1-based
    original_column: int | None = None  # 0-based


@dataclass(frozen=True)
class OriginalPosition:
    source: str | None
    line: int | None
    column: int | None


@dataclass
class SourceMap:
    """A version 3 source map."""

    file: str = ""
    sources: list[str] = field(default_factory=list)
    sources_content: list[str | None] = field(default_factory=list)
    names: list[str] = field(default_factory=list)
    mappings: str = ""
    _lines: dict[int, list[Mapping]] | None = field(default=None, repr=False, compare=False)

    @classmethod
    def from_dict(cls, data: dict) -> SourceMap:
        if data.get("version", 3) != 3:
            raise ValueError(f"Unsupported source map version: {data.get('version')}")
        return cls(
            file=data.get("file", ""),
            sources=list(data.get("sources", [])),
            sources_content=list(data.get("sourcesContent", [])),
            names=list(data.get("names", [])),
            mappings=data.get("mappings", ""),
        )

    @classmethod
    def from_json(cls, text: str) -> SourceMap:
        return cls.from_dict(json.loads(text))

    def to_dict(self) -> dict:
        data = {
            "version": 3,
            "file": self.file,
            "sources": self.sources,
            "names": self.names,
            "mappings": self.mappings,
        }
        if self.sources_content:
            data["sourcesContent"] = self.sources_content
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    def to_data_uri(self) -> str:
        encoded = base64.b64encode(self.to_json().encode("utf-8")).decode("ascii")
        return f"data:application/json;charset=utf-8;base64,{encoded}"

    # ── Decoding ────────────────────────────────────────────────────

    def decoded(self) -> list[Mapping]:
        return [m for line in sorted(self._index()) for m in self._index()[line]]

    def _index(self) -> dict[int, list[Mapping]]:
        if self._lines is None:
            self._lines = _decode_mappings(self.mappings, self.sources)
        return self._lines

    def original_position_for(self, line: int, column: int) -> OriginalPosition:
        """Find the original position of a generated (line, column).

        Uses the greatest mapping at or before ``column`` on ``line``.
        Returns an all-None position when the line has no such mapping.
        """
        segments = self._index().get(line, [])
        columns = [m.generated_column for m in segments]
        idx = bisect.bisect_right(columns, column) - 1
        if idx < 0 or segments[idx].source is None:
            return OriginalPosition(None, None, None)
        m = segments[idx]
        return OriginalPosition(m.source, m.original_line, m.original_column)


def _decode_mappings(mappings: str, sources: list[str]) -> dict[int, list[Mapping]]:
    lines: dict[int, list[Mapping]] = {}
    source_idx = orig_line = orig_col = 0

    for line_no, line in enumerate(mappings.split(";"), start=1):
        gen_col = 0
        segments: list[Mapping] = []
        for segment in filter(None, line.split(",")):
            values = decode_vlq(segment)
            gen_col += values[0]
            if len(values) >= 4:
                source_idx += values[1]
                orig_line += values[2]
                orig_col += values[3]
                source = sources[source_idx] if 0 <= source_idx < len(sources) else None
                segments.append(Mapping(line_no, gen_col, source, orig_line + 1, orig_col))
            else:
                segments.append(Mapping(line_no, gen_col))
        if segments:
            segments.sort(key=lambda m: m.generated_column)
            lines[line_no] = segments
    return lines


# ═══════════════════════════════════════════════════════════════════
#  Generation
# ═══════════════════════════════════════════════════════════════════


class SourceMapBuilder:
    """Accumulates mappings and encodes them."""

    def __init__(self, file: str = ""):
        self.file = file
        self._sources: list[str] = []
        self._contents: list[str | None] = []
        self._mappings: list[Mapping] = []

    def add_source(self, name: str, content: str | None = None) -> None:
        if name not in self._sources:
            self._sources.append(name)
            self._contents.append(content)

    def add(self, generated_line: int, generated_column: int, source: str,
            original_line: int, original_column: int = 0) -> None:
        self.add_source(source)
        self._mappings.append(
            Mapping(generated_line, generated_column, source, original_line, original_column)
        )

    def add_chunk(self, source: str, source_text: str, output_text: str, first_line: int) -> int:
        """Map every line of ``output_text`` (starting at ``first_line``) to ``source``.

        Returns the number of generated lines the chunk occupies.
        """
        self.add_source(source, source_text)
        source_lines = max(source_text.count("\n") + 1, 1)
        output_lines = output_text.count("\n") + 1
        for offset in range(output_lines):
            self.add(first_line + offset, 0, source, min(offset, source_lines - 1) + 1)
        return output_lines

    def build(self) -> SourceMap:
        return SourceMap(
            file=self.file,
            sources=list(self._sources),
            sources_content=list(self._contents),
            mappings=_encode_mappings(self._mappings, self._sources),
        )


def _encode_mappings(mappings: Iterable[Mapping], sources: list[str]) -> str:
    by_line: dict[int, list[Mapping]] = {}
    for m in mappings:
        by_line.setdefault(m.generated_line, []).append(m)
    if not by_line:
        return ""

    out_lines: list[str] = []
    prev_source = prev_line = prev_col = 0
    for line_no in range(1, max(by_line) + 1):
        prev_gen_col = 0
        segments = []
        for m in sorted(by_line.get(line_no, []), key=lambda m: m.generated_column):
            source_idx = sources.index(m.source)
            orig_line = (m.original_line or 1) - 1
            orig_col = m.original_column or 0
            segments.append(
                encode_vlq(m.generated_column - prev_gen_col)
                + encode_vlq(source_idx - prev_source)
                + encode_vlq(orig_line - prev_line)
                + encode_vlq(orig_col - prev_col)
            )
            prev_gen_col = m.generated_column
            prev_source, prev_line, prev_col = source_idx, orig_line, orig_col
        out_lines.append(",".join(segments))
    return ";".join(out_lines)


def chunk_map(file: str, chunks: list[tuple[str, str, str]], separator: str = "\n") -> SourceMap:
    """Build a map for ``separator.join(outputs)`` from (source, source_text, output) chunks."""
    builder = SourceMapBuilder(file)
    line = 1
    for source, source_text, output in chunks:
        line += builder.add_chunk(source, source_text, output, line) - 1 + separator.count("\n")
    return builder.build()


# ═══════════════════════════════════════════════════════════════════
#  Lint repositioning
# ═══════════════════════════════════════════════════════════════════


def apply_sourcemap(result: LintResult, source_map: SourceMap) -> list[LintResult]:
    """Move every message of ``result`` to its original position.

    Messages are regrouped into one result per original source, in
    first-seen order. A message whose position has no mapping keeps its
    position and stays with the result's own source. A result without
    messages is returned unchanged.
    """
    if not result.messages:
        return [result]

    own_source = result.source or result.file_path
    grouped: dict[str, list] = {}
    for message in result.messages:
        pos = source_map.original_position_for(message.line or 1, message.column or 0)
        if pos.source is None:
            grouped.setdefault(own_source, []).append(message)
            continue
        moved = message.model_copy(update={"line": pos.line, "column": pos.column})
        grouped.setdefault(pos.source, []).append(moved)

    return [
        LintResult.from_messages(
            result.file_path,
            messages,
            source=source,
            output=result.output,
            fixed=result.fixed,
        )
        for source, messages in grouped.items()
    ]
