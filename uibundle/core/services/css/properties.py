"""
Custom properties: resolve ``var(--x)`` against the ``:root`` declarations.

In preserve mode (preview builds) each declaration using ``var()`` gets
its resolved value emitted just before it, so browsers without custom
property support still have a usable value. Otherwise the ``var()``
references are replaced and the ``:root`` custom properties removed.
"""

from __future__ import annotations

import re

from uibundle.core.services.css.syntax import (
    iter_function_calls,
    map_declarations,
    split_top_level,
    transform_blocks,
    transform_function_calls,
)

_ROOT_BLOCK_RE = re.compile(r"(^|[}\s;])(:root)\s*\{([^{}]*)\}")
_EMPTY_ROOT_RE = re.compile(r"(^|[}\s;]):root\s*\{\s*\}\s*")

_MAX_DEPTH = 16


def collect_custom_properties(css: str) -> dict[str, str]:
    """Map ``--name`` to its value for every custom property declared on ``:root``."""
    props: dict[str, str] = {}
    for m in _ROOT_BLOCK_RE.finditer(css):
        for decl in split_top_level(m.group(3), ";"):
            if ":" not in decl:
                continue
            name, value = decl.split(":", 1)
            name = name.strip()
            if name.startswith("--"):
                props[name] = value.strip()
    return props


def resolve_value(value: str, props: dict[str, str], depth: int = 0) -> str | None:
    """Substitute every ``var()`` in ``value``; None when one cannot be resolved."""
    if depth > _MAX_DEPTH:
        return None
    unresolved = False

    def substitute(args: str) -> str:
        nonlocal unresolved
        name, _, fallback = args.partition(",")
        name = name.strip()
        if name in props:
            replacement = resolve_value(props[name], props, depth + 1)
        elif fallback.strip():
            replacement = resolve_value(fallback.strip(), props, depth + 1)
        else:
            replacement = None
        if replacement is None:
            unresolved = True
            return f"var({args})"
        return replacement

    resolved = transform_function_calls(value, "var", substitute)
    return None if unresolved else resolved


def resolve_custom_properties(css: str, *, preserve: bool) -> str:
    props = collect_custom_properties(css)

    def declaration(prop: str, value: str) -> list[tuple[str, str]] | None:
        if prop.startswith("--"):
            return None
        if next(iter_function_calls(value, "var"), None) is None:
            return None
        resolved = resolve_value(value, props)
        if resolved is None:
            return None
        if preserve:
            return [(prop, resolved), (prop, value)]
        return [(prop, resolved)]

    out = _transform_rule_blocks(css, declaration)
    if not preserve:
        out = _drop_root_properties(out)
    return out


def _transform_rule_blocks(css: str, fn) -> str:
    return transform_blocks(css, lambda body: map_declarations(body, fn))


def _drop_root_properties(css: str) -> str:
    def strip(m: re.Match) -> str:
        kept = [
            decl for decl in split_top_level(m.group(3), ";")
            if decl.strip() and not decl.strip().startswith("--")
        ]
        body = ";".join(kept)
        return f"{m.group(1)}{m.group(2)} {{{body}{';' if kept else ''}}}"

    out = _ROOT_BLOCK_RE.sub(strip, css)
    return _EMPTY_ROOT_RE.sub(lambda m: m.group(1), out)
