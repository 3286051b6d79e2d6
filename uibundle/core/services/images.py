"""Lossless image optimization with Pillow."""

from __future__ import annotations

import io
import logging

from PIL import Image

from uibundle.core.engine.stream import Stage, map_records
from uibundle.core.models.file import FileRecord

logger = logging.getLogger(__name__)

# extension → (Pillow format, save options)
_OPTIMIZERS: dict[str, tuple[str, dict]] = {
    ".png": ("PNG", {"optimize": True}),
    ".jpg": ("JPEG", {"optimize": True, "progressive": True, "quality": "keep"}),
    ".jpeg": ("JPEG", {"optimize": True, "progressive": True, "quality": "keep"}),
    ".gif": ("GIF", {"optimize": True}),
}


def optimize_image(data: bytes, ext: str) -> bytes:
    """Re-encode ``data`` losslessly; returns the original when that is not smaller.

    SVG, ICO and animated GIFs pass through untouched. A file Pillow
    cannot handle is logged and kept as-is.
    """
    fmt_opts = _OPTIMIZERS.get(ext.lower())
    if fmt_opts is None:
        return data
    fmt, opts = fmt_opts

    try:
        with Image.open(io.BytesIO(data)) as img:
            if getattr(img, "is_animated", False):
                return data
            buf = io.BytesIO()
            save_kwargs = dict(opts)
            if fmt == "PNG" and "transparency" in img.info:
                save_kwargs["transparency"] = img.info["transparency"]
            img.save(buf, format=fmt, **save_kwargs)
    except Exception as e:
        logger.warning(f"Image optimization failed, using original: {e}")
        return data

    optimized = buf.getvalue()
    if len(optimized) >= len(data):
        return data
    logger.debug(f"Image optimized: {len(data):,} → {len(optimized):,} bytes")
    return optimized


def optimize_images() -> Stage:
    def run(record: FileRecord) -> FileRecord:
        if record.is_buffer():
            record.contents = optimize_image(bytes(record.contents), record.extname)
        return record

    return map_records(run)
