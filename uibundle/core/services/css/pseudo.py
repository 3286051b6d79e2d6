"""Normalize single-colon ``:before``/``:after`` to the double-colon pseudo-element form."""

from __future__ import annotations

import re

from uibundle.core.services.css.syntax import split_top_level

_PRELUDE_RE = re.compile(r"(^|[{};])([^{};]+)(?=\{)")
_PSEUDO_RE = re.compile(r"(^|[^:]):(before|after)$", re.IGNORECASE)


def normalize_pseudo_elements(css: str) -> str:
    """Rewrite ``a:before`` as ``a::before`` in every selector; at-rule preludes are skipped."""
    return _PRELUDE_RE.sub(_fix_prelude, css)


def _fix_prelude(m: re.Match) -> str:
    prelude = m.group(2)
    if prelude.strip().startswith("@"):
        return m.group(0)
    return m.group(1) + ",".join(fix_selector(s) for s in split_top_level(prelude, ","))


def fix_selector(selector: str) -> str:
    stripped = selector.rstrip()
    trailing = selector[len(stripped):]
    return _PSEUDO_RE.sub(r"\1::\2", stripped) + trailing
