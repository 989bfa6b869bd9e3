"""Image composition utilities - tile placement and cropping."""

from __future__ import annotations

import contextlib
import logging
from io import BytesIO
from typing import TYPE_CHECKING

from PIL import Image, UnidentifiedImageError

from tilestitch.errors import CompositeError
from tilestitch.imaging.io import save_image
from tilestitch.shared.constants import PIL_DISABLE_LIMIT

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from tilestitch.domain.models import PlacedTile, TilePlan

logger = logging.getLogger(__name__)

if PIL_DISABLE_LIMIT:
    Image.MAX_IMAGE_PIXELS = None

TRANSPARENT = (0, 0, 0, 0)


def decode_tile(data: bytes, tile_size: int | None = None) -> Image.Image:
    """Decode a tile body to RGBA, scaling it to ``tile_size`` when the server sent another size."""
    try:
        with Image.open(BytesIO(data)) as src:
            img = src.convert('RGBA')
    except (UnidentifiedImageError, OSError) as e:
        msg = f'cannot decode tile image ({len(data)} bytes): {e}'
        raise CompositeError(msg) from e
    if tile_size is not None and img.size != (tile_size, tile_size):
        resized = img.resize((tile_size, tile_size), Image.Resampling.LANCZOS)
        img.close()
        img = resized
    return img


def compose_canvas(
    width: int,
    height: int,
    tiles: Iterable[PlacedTile],
    *,
    tile_size: int | None = None,
) -> Image.Image:
    """
    Paste every tile onto a fully transparent RGBA canvas.

    Tile footprints are disjoint, so paste order is irrelevant and a plain
    paste equals alpha-over on the empty background. Negative offsets clip.
    """
    try:
        canvas = Image.new('RGBA', (width, height), TRANSPARENT)
    except (ValueError, MemoryError) as e:
        msg = f'cannot allocate {width}x{height} canvas: {e}'
        raise CompositeError(msg) from e

    count = 0
    for tile in tiles:
        img = decode_tile(tile.image_bytes, tile_size)
        try:
            canvas.paste(img, (tile.left, tile.top))
        finally:
            img.close()
        count += 1
    logger.debug('Placed %d tiles on %dx%d canvas', count, width, height)
    return canvas


def crop_output(canvas: Image.Image, width: int, height: int) -> Image.Image:
    """Cut ``[0, 0, width, height]`` out of the canvas."""
    cw, ch = canvas.size
    if width < 1 or height < 1 or width > cw or height > ch:
        msg = f'crop {width}x{height} does not fit canvas {cw}x{ch}'
        raise CompositeError(msg)
    return canvas.crop((0, 0, width, height))


def compose_and_save(
    plan: TilePlan,
    tiles: Iterable[PlacedTile],
    out_path: Path,
) -> Path:
    """Composite ``tiles`` per ``plan`` and write the cropped raster to ``out_path``."""
    canvas = compose_canvas(
        plan.canvas_width,
        plan.canvas_height,
        tiles,
        tile_size=plan.tile_size,
    )
    try:
        result = crop_output(canvas, plan.output_width, plan.output_height)
    finally:
        canvas.close()
    try:
        save_image(result, out_path)
    finally:
        with contextlib.suppress(Exception):
            result.close()
    return out_path
