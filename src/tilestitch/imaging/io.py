from __future__ import annotations

import contextlib
import os
from typing import TYPE_CHECKING, Any

from PIL import Image

from tilestitch.errors import CompositeError
from tilestitch.shared.constants import JPEG_QUALITY_DEFAULT

if TYPE_CHECKING:
    from pathlib import Path

# Форматы без альфа-канала: перед сохранением переводим в RGB
_NO_ALPHA_FORMATS = frozenset({'JPEG', 'BMP'})


def format_for_path(out_path: Path) -> str:
    """Pillow format name implied by the file extension."""
    ext = out_path.suffix.lower()
    fmt = Image.registered_extensions().get(ext)
    if not fmt:
        msg = f'unsupported output extension {ext!r} for {out_path}'
        raise CompositeError(msg)
    return fmt


def build_save_kwargs(fmt: str, quality: int = JPEG_QUALITY_DEFAULT) -> dict[str, Any]:
    """Build PIL.Image.save kwargs for ``fmt``."""
    if fmt == 'JPEG':
        q = max(10, min(100, int(quality)))
        return {
            'format': 'JPEG',
            'quality': q,
            'subsampling': 0,
            'optimize': True,
            'progressive': True,
        }
    if fmt == 'PNG':
        return {'format': 'PNG', 'optimize': True}
    if fmt == 'WEBP':
        return {'format': 'WEBP', 'lossless': True}
    if fmt == 'TIFF':
        return {'format': 'TIFF', 'compression': 'tiff_deflate'}
    return {'format': fmt}


def save_image(img: Image.Image, out_path: Path) -> None:
    """Save ``img`` in the format implied by ``out_path`` and fsync it."""
    fmt = format_for_path(out_path)
    save_kwargs = build_save_kwargs(fmt)
    to_save = img.convert('RGB') if fmt in _NO_ALPHA_FORMATS and img.mode != 'RGB' else img
    try:
        to_save.save(out_path, **save_kwargs)
        # Ensure data is written to disk
        fd = os.open(out_path, os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except (OSError, ValueError, KeyError) as e:
        msg = f'failed writing {out_path}: {e}'
        raise CompositeError(msg) from e
    finally:
        if to_save is not img:
            with contextlib.suppress(Exception):
                to_save.close()
