"""
AsciiDoc documents for preview pages.

The header (document title and attribute entries) is read here; the
body is converted to HTML by the ``asciidoc`` package without its
header and footer, so the layout template supplies the page chrome.
"""

from __future__ import annotations

import io
import logging
import re
from dataclasses import dataclass, field

from asciidoc.api import AsciiDocAPI

logger = logging.getLogger(__name__)

ASCIIDOC_ATTRIBUTES = {
    "experimental": "",
    "icons": "font",
    "sectanchors": "",
    "source-highlighter": "highlight.js",
}

PAGE_ATTRIBUTE_PREFIX = "page-"

_TITLE_RE = re.compile(r"^=\s+(\S.*?)\s*$")
_ATTR_RE = re.compile(r"^:(!?)([\w][\w-]*)(!?):(?:\s+(.*?))?\s*$")


@dataclass
class Document:
    title: str | None = None
    attributes: dict[str, str] = field(default_factory=dict)
    source: str = ""

    def attribute(self, name: str, default: str | None = None) -> str | None:
        return self.attributes.get(name, default)

    @property
    def page_attributes(self) -> dict[str, str]:
        """``page-*`` attributes with the prefix stripped."""
        return {
            name[len(PAGE_ATTRIBUTE_PREFIX):]: value
            for name, value in self.attributes.items()
            if name.startswith(PAGE_ATTRIBUTE_PREFIX)
        }

    def convert(self) -> str:
        return convert(self.source)


def parse_header(text: str) -> tuple[str | None, dict[str, str]]:
    """Read the document title and header attribute entries.

    The header ends at the first blank line after the title, or at the
    first line that is neither an attribute entry nor a comment when
    there is no title.
    """
    title = None
    attributes: dict[str, str] = {}
    lines = text.splitlines()
    idx = 0
    while idx < len(lines) and (not lines[idx].strip() or lines[idx].startswith("//")):
        idx += 1

    pending: tuple[str, str] | None = None
    for line in lines[idx:]:
        if pending is not None:
            name, value = pending
            value += " " + line.strip().rstrip("\\").rstrip()
            if line.rstrip().endswith(" \\"):
                pending = (name, value)
            else:
                attributes[name] = value
                pending = None
            continue
        if not line.strip():
            break
        if line.startswith("//"):
            continue
        m = _TITLE_RE.match(line)
        if m and title is None:
            title = m.group(1)
            continue
        m = _ATTR_RE.match(line)
        if m:
            name = m.group(2)
            if m.group(1) or m.group(3):
                attributes.pop(name, None)
                continue
            value = m.group(4) or ""
            if value.endswith(" \\"):
                pending = (name, value[:-2].rstrip())
            else:
                attributes[name] = value
            continue
        if title is None:
            break
        continue  # author or revision line
    return title, attributes


def load(text: str) -> Document:
    title, attributes = parse_header(text)
    return Document(title=title, attributes={**ASCIIDOC_ATTRIBUTES, **attributes}, source=text)


def convert(text: str) -> str:
    """Convert an AsciiDoc document body to HTML5."""
    api = AsciiDocAPI()
    api.options("--no-header-footer")
    for name, value in ASCIIDOC_ATTRIBUTES.items():
        api.attributes[name] = value
    out = io.StringIO()
    api.execute(io.StringIO(text), out, backend="html5")
    for message in api.messages:
        logger.debug("asciidoc: %s", message)
    return out.getvalue().replace("\r\n", "\n")
