"""Vendor prefixing for the properties current browsers still need prefixed."""

from __future__ import annotations

from uibundle.core.services.css.syntax import map_declarations, split_top_level, transform_blocks

# property -> prefixes to emit before the unprefixed declaration
PROPERTY_PREFIXES: dict[str, tuple[str, ...]] = {
    "appearance": ("-webkit-", "-moz-"),
    "backdrop-filter": ("-webkit-",),
    "box-decoration-break": ("-webkit-",),
    "hyphens": ("-webkit-",),
    "mask": ("-webkit-",),
    "mask-image": ("-webkit-",),
    "mask-position": ("-webkit-",),
    "mask-repeat": ("-webkit-",),
    "mask-size": ("-webkit-",),
    "print-color-adjust": ("-webkit-",),
    "text-size-adjust": ("-webkit-", "-moz-"),
    "user-select": ("-webkit-", "-moz-"),
}

# (property, value) -> prefixed values to emit first
VALUE_PREFIXES: dict[tuple[str, str], tuple[str, ...]] = {
    ("position", "sticky"): ("-webkit-sticky",),
}


def autoprefix(css: str) -> str:
    """Insert prefixed declarations ahead of unprefixed ones.

    A declaration is left alone when its block already carries one of
    the prefixed forms.
    """
    return transform_blocks(css, _prefix_block)


def _prefix_block(body: str) -> str:
    present = set()
    for decl in split_top_level(body, ";"):
        if ":" in decl:
            prop, value = decl.split(":", 1)
            present.add(prop.strip().lower())
            present.add((prop.strip().lower(), value.strip().lower()))

    def declaration(prop: str, value: str) -> list[tuple[str, str]] | None:
        key = prop.lower()
        extra: list[tuple[str, str]] = []
        for prefix in PROPERTY_PREFIXES.get(key, ()):
            if prefix + key not in present:
                extra.append((prefix + prop, value))
        for prefixed in VALUE_PREFIXES.get((key, value.lower()), ()):
            if (key, prefixed) not in present:
                extra.append((prop, prefixed))
        return [*extra, (prop, value)] if extra else None

    return map_declarations(body, declaration)
