"""
Small CSS text utilities shared by the transform plugins.

The plugins work on stylesheet text rather than a parsed tree. These
helpers give them the few structural views they need: balanced
function calls, innermost declaration blocks, and top-level splitting
that respects parentheses, quotes and comments.
"""

from __future__ import annotations

import re
from typing import Callable, Iterator

_COMMENT_RE = re.compile(r"/\*.*?\*/", re.DOTALL)
_INNER_BLOCK_RE = re.compile(r"\{([^{}]*)\}")

DeclarationFn = Callable[[str, str], "list[tuple[str, str]] | None"]


def comment_spans(css: str) -> list[tuple[int, int]]:
    return [m.span() for m in _COMMENT_RE.finditer(css)]


def in_spans(pos: int, spans: list[tuple[int, int]]) -> bool:
    return any(start <= pos < end for start, end in spans)


def find_close_paren(text: str, open_idx: int) -> int:
    """Index of the parenthesis closing the one at ``open_idx``, or -1."""
    depth = 0
    quote = ""
    for idx in range(open_idx, len(text)):
        char = text[idx]
        if quote:
            if char == quote and text[idx - 1] != "\\":
                quote = ""
            continue
        if char in "\"'":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth -= 1
            if depth == 0:
                return idx
    return -1


def iter_function_calls(text: str, name: str) -> Iterator[tuple[int, int, str]]:
    """Yield (start, end, arguments) for each ``name(...)`` call, outermost only."""
    pattern = re.compile(rf"(?<![\w-]){re.escape(name)}\(", re.IGNORECASE)
    pos = 0
    while True:
        m = pattern.search(text, pos)
        if not m:
            return
        open_idx = m.end() - 1
        close_idx = find_close_paren(text, open_idx)
        if close_idx < 0:
            return
        yield m.start(), close_idx + 1, text[open_idx + 1:close_idx]
        pos = close_idx + 1


def transform_function_calls(text: str, name: str, fn: Callable[[str], str | None]) -> str:
    """Replace each ``name(args)`` call with ``fn(args)``; None keeps the call."""
    out: list[str] = []
    last = 0
    for start, end, args in iter_function_calls(text, name):
        replacement = fn(args)
        if replacement is None:
            continue
        out.append(text[last:start])
        out.append(replacement)
        last = end
    out.append(text[last:])
    return "".join(out)


def split_top_level(text: str, sep: str) -> list[str]:
    """Split on ``sep`` outside parentheses, quotes and comments."""
    parts: list[str] = []
    depth = 0
    quote = ""
    start = 0
    idx = 0
    while idx < len(text):
        char = text[idx]
        if quote:
            if char == quote and text[idx - 1] != "\\":
                quote = ""
        elif text.startswith("/*", idx):
            end = text.find("*/", idx + 2)
            idx = len(text) if end < 0 else end + 2
            continue
        elif char in "\"'":
            quote = char
        elif char == "(":
            depth += 1
        elif char == ")":
            depth = max(depth - 1, 0)
        elif char == sep and depth == 0:
            parts.append(text[start:idx])
            start = idx + 1
        idx += 1
    parts.append(text[start:])
    return parts


def transform_blocks(css: str, fn: Callable[[str], str]) -> str:
    """Apply ``fn`` to the body of every innermost ``{ … }`` block."""
    return _INNER_BLOCK_RE.sub(lambda m: "{" + fn(m.group(1)) + "}", css)


def map_declarations(body: str, fn: DeclarationFn) -> str:
    """Rewrite the declarations of one block body.

    ``fn(prop, value)`` returns a list of (prop, value) pairs to emit in
    place of the declaration, or None to keep it verbatim. Added
    declarations stay on the original's line, so line counts never change.
    """
    parts = split_top_level(body, ";")
    out: list[str] = []
    for part in parts:
        if ":" not in part or not part.strip() or part.strip().startswith("/*"):
            out.append(part)
            continue
        prop_raw, value_raw = part.split(":", 1)
        replacement = fn(prop_raw.strip(), value_raw.strip())
        if replacement is None:
            out.append(part)
            continue
        lead = prop_raw[: len(prop_raw) - len(prop_raw.lstrip())]
        colon = ": " if value_raw[:1].isspace() else ":"
        tail = value_raw[len(value_raw.rstrip()):]
        extra_lead = " " if "\n" in lead else lead
        rendered = [
            f"{lead if idx == 0 else extra_lead}{p}{colon}{v}" for idx, (p, v) in enumerate(replacement)
        ]
        out.append(";".join(rendered) + tail)
    return ";".join(out)
