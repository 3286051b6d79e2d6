"""Archive packer — zip the built UI into ``<bundle-name>-bundle.zip``."""

from __future__ import annotations

import logging
import time
import zipfile
from pathlib import Path
from typing import Callable

from uibundle.core.engine.stream import drain, src
from uibundle.core.models.file import FileRecord

logger = logging.getLogger(__name__)


def archive_name(bundle_name: str) -> str:
    return f"{bundle_name}-bundle.zip"


def pack(
    src_dir: Path,
    dest_dir: Path,
    bundle_name: str,
    on_finish: Callable[[str], None] | None = None,
) -> Callable[[], Path]:
    """Return the task zipping every file under ``src_dir`` (hidden ones included).

    ``on_finish`` receives the absolute archive path once it is written.
    """

    def run() -> Path:
        target = (Path(dest_dir) / archive_name(bundle_name)).resolve()
        records = drain(src("**/*", cwd=src_dir, dot=True, read=False, allow_empty=True))
        target.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(target, "w", compression=zipfile.ZIP_DEFLATED) as archive:
            for record in records:
                if record.path == target:
                    continue
                archive.writestr(_zip_info(record), record.path.read_bytes())
        logger.info("Packed %d file(s) into %s", len(records), target)
        if on_finish is not None:
            on_finish(str(target))
        return target

    return run


def _zip_info(record: FileRecord) -> zipfile.ZipInfo:
    info = zipfile.ZipInfo(record.relative, date_time=_zip_time(record.mtime))
    info.compress_type = zipfile.ZIP_DEFLATED
    info.external_attr = (record.path.stat().st_mode & 0o777) << 16
    return info


def _zip_time(mtime: float) -> tuple[int, int, int, int, int, int]:
    # zip timestamps cannot predate 1980
    return max(time.localtime(mtime)[:6], (1980, 1, 1, 0, 0, 0))
