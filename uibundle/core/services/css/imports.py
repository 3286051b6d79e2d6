"""
@import inlining.

Each ``@import`` is replaced by the contents of the file it names,
resolved relative to the importing file first and then inside
``node_modules`` (a leading ``~`` is stripped). Remote imports stay as
they are. A media query on the import wraps the inlined rules in an
``@media`` block. A file already inlined anywhere in the tree is
inlined once only.

The result tracks, for every output line, the file and line it came
from; the import statement is replaced in place without adding lines,
so those origins stay accurate through later line-preserving plugins.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path

from uibundle.core.errors import CssError
from uibundle.core.services.css.syntax import comment_spans, in_spans

logger = logging.getLogger(__name__)

_IMPORT_RE = re.compile(
    r"""@import\s+(?:url\(\s*(['"]?)(?P<url>[^'")]+)\1\s*\)|(['"])(?P<str>[^'"]+)\3)\s*(?P<media>[^;]*);""",
    re.IGNORECASE,
)
_REMOTE_RE = re.compile(r"^(?:[a-z][a-z0-9+.-]*:|//)", re.IGNORECASE)


@dataclass
class ImportResult:
    css: str
    dependencies: list[Path] = field(default_factory=list)
    origins: list[tuple[Path, int]] = field(default_factory=list)   # per output line


def resolve_imports(css: str, file_path: Path, *, node_modules: Path) -> ImportResult:
    """Inline every local ``@import`` reachable from ``css``.

    Raises:
        CssError: When an imported file cannot be found or read.
    """
    file_path = Path(file_path).resolve()
    result = ImportResult(css="")
    seen = {file_path}
    lines = _inline(css, file_path, Path(node_modules), seen, result.dependencies)
    result.css = "\n".join(text for text, _, _ in lines)
    result.origins = [(origin, line) for _, origin, line in lines]
    return result


def _inline(
    css: str, file_path: Path, node_modules: Path, seen: set[Path], deps: list[Path]
) -> list[tuple[str, Path, int]]:
    comments = comment_spans(css)
    pieces: list[tuple[str, Path, int]] = [("", file_path, 1)]
    last = 0
    for m in _IMPORT_RE.finditer(css):
        if in_spans(m.start(), comments):
            continue
        spec = m.group("url") or m.group("str")
        media = " ".join(m.group("media").split())
        if _REMOTE_RE.match(spec):
            continue

        target = _resolve(spec, file_path.parent, node_modules)
        if target is None:
            raise CssError(f"Failed to find '{spec}'", file_path=str(file_path))

        _feed(pieces, css[last:m.start()], file_path, _line_at(css, last))
        last = m.end()
        if target in seen:
            logger.debug("Skipping duplicate import %s", target)
        else:
            seen.add(target)
            deps.append(target)
            try:
                text = target.read_text(encoding="utf-8")
            except OSError as e:
                raise CssError(f"Cannot read '{target}': {e}", file_path=str(file_path)) from e

            imported = _inline(text, target, node_modules, seen, deps)
            if media:
                _append(pieces, f"@media {media} {{ ")
            _append(pieces, imported[0][0])
            pieces[-1] = (pieces[-1][0], imported[0][1], imported[0][2])
            pieces.extend(imported[1:])
            if media:
                _append(pieces, " }")
        # a statement spanning lines leaves its line breaks behind
        _feed(pieces, "\n" * m.group(0).count("\n"), file_path, _line_at(css, m.start()))
    _feed(pieces, css[last:], file_path, _line_at(css, last))
    return pieces


def _line_at(css: str, offset: int) -> int:
    return css.count("\n", 0, offset) + 1


def _feed(pieces: list[tuple[str, Path, int]], text: str, origin: Path, first_line: int) -> None:
    """Append ``text``; each line break starts a new output line from ``origin``."""
    first, *rest = text.split("\n")
    _append(pieces, first)
    for idx, part in enumerate(rest, start=1):
        pieces.append((part, origin, first_line + idx))


def _append(pieces: list[tuple[str, Path, int]], text: str) -> None:
    current, origin, line = pieces[-1]
    pieces[-1] = (current + text, origin, line)


def _resolve(spec: str, base_dir: Path, node_modules: Path) -> Path | None:
    spec = spec.split("?", 1)[0].split("#", 1)[0]
    if spec.startswith("~"):
        spec = spec[1:]
        roots = [node_modules]
    elif spec.startswith(("./", "../", "/")):
        roots = [base_dir]
    else:
        roots = [base_dir, node_modules]

    for root in roots:
        found = _resolve_in(root / spec)
        if found is not None:
            return found
    return None


def _resolve_in(candidate: Path) -> Path | None:
    if candidate.is_file():
        return candidate.resolve()
    if candidate.suffix != ".css":
        with_ext = candidate.with_name(candidate.name + ".css")
        if with_ext.is_file():
            return with_ext.resolve()
    if candidate.is_dir():
        return _resolve_package(candidate)
    return None


def _resolve_package(package_dir: Path) -> Path | None:
    manifest = package_dir / "package.json"
    if manifest.is_file():
        try:
            data = json.loads(manifest.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            data = {}
        for key in ("style", "main"):
            entry = data.get(key)
            if isinstance(entry, str) and entry.endswith(".css") and (package_dir / entry).is_file():
                return (package_dir / entry).resolve()
    index = package_dir / "index.css"
    return index.resolve() if index.is_file() else None
