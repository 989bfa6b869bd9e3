"""
Tile grid planning: which tiles to fetch and where they land on the canvas.

All corner coordinates are computed once at ``PRECISION_BITS`` and then
reduced to the target zoom with integer shifts, so tile indices, sub-tile
alignment and the output raster size come from the same fixed-point value.
"""

from __future__ import annotations

import logging
import math

from tilestitch.domain.models import BoundingBox, TileCoordinate, TilePlan, round_half_up
from tilestitch.errors import InvalidGeometryError
from tilestitch.geo.geodesy import lat_lon_to_tile_coordinate
from tilestitch.shared.constants import (
    MAX_ZOOM,
    MERCATOR_MAX_LAT,
    PRECISION_BITS,
    SUBTILE_BITS,
    SUBTILE_DIVISIONS,
    SUBTILE_MASK,
    TILE_SIZE,
    WORLD_LAT_POLE_DEG,
    WORLD_LNG_HALF_SPAN_DEG,
)

logger = logging.getLogger(__name__)

_WORLD_EXTENT = 2**PRECISION_BITS


def validate_geometry(bbox: BoundingBox, zoom: int, tile_size: int) -> None:
    """Reject inputs for which the projection or the bit arithmetic break down."""
    if bbox.min_lat > bbox.max_lat:
        msg = f'min latitude {bbox.min_lat} is north of max latitude {bbox.max_lat}'
        raise InvalidGeometryError(msg)
    if bbox.min_lon > bbox.max_lon:
        msg = f'min longitude {bbox.min_lon} is east of max longitude {bbox.max_lon}'
        raise InvalidGeometryError(msg)
    for lat in (bbox.min_lat, bbox.max_lat):
        if not -WORLD_LAT_POLE_DEG < lat < WORLD_LAT_POLE_DEG:
            msg = f'latitude {lat} must be strictly between -90 and 90'
            raise InvalidGeometryError(msg)
    if bbox.min_lat >= MERCATOR_MAX_LAT or bbox.max_lat <= -MERCATOR_MAX_LAT:
        msg = (
            f'latitudes {bbox.min_lat}..{bbox.max_lat} lie outside the Web Mercator '
            f'range of +/-{MERCATOR_MAX_LAT}'
        )
        raise InvalidGeometryError(msg)
    for lon in (bbox.min_lon, bbox.max_lon):
        if not -WORLD_LNG_HALF_SPAN_DEG <= lon < WORLD_LNG_HALF_SPAN_DEG:
            msg = f'longitude {lon} must be in [-180, 180)'
            raise InvalidGeometryError(msg)
    if not 0 <= zoom <= MAX_ZOOM:
        msg = f'zoom {zoom} must be in [0, {MAX_ZOOM}]'
        raise InvalidGeometryError(msg)
    if tile_size < 1:
        msg = f'tile size must be positive, got {tile_size}'
        raise InvalidGeometryError(msg)


def _world_coordinate(lat: float, lon: float) -> TileCoordinate:
    """Project at full precision, pinned inside the Mercator square."""
    lat = max(-MERCATOR_MAX_LAT, min(MERCATOR_MAX_LAT, lat))
    coord = lat_lon_to_tile_coordinate(lat, lon, PRECISION_BITS)
    return TileCoordinate(coord.x, min(max(coord.y, 0.0), float(_WORLD_EXTENT)))


def _fixed_point(coord: TileCoordinate) -> tuple[int, int]:
    # the southern edge of the world belongs to the last tile row
    last = _WORLD_EXTENT - 1
    return min(math.floor(coord.x), last), min(math.floor(coord.y), last)


def plan_tiles(bbox: BoundingBox, zoom: int, tile_size: int = TILE_SIZE) -> TilePlan:
    """
    Compute the tile rectangle, alignment offsets and output size for ``bbox``.

    The northwest corner maps to the first tile and the southeast corner to
    the last one, since tile y grows southwards. Latitudes beyond the
    Mercator limit are clamped to the edge of the world.
    """
    validate_geometry(bbox, zoom, tile_size)

    nw = _world_coordinate(bbox.max_lat, bbox.min_lon)
    se = _world_coordinate(bbox.min_lat, bbox.max_lon)
    fx1, fy1 = _fixed_point(nw)
    fx2, fy2 = _fixed_point(se)

    tile_shift = PRECISION_BITS - zoom
    tx1, ty1 = fx1 >> tile_shift, fy1 >> tile_shift
    tx2, ty2 = fx2 >> tile_shift, fy2 >> tile_shift

    # 256 subdivisions per tile: position of the NW corner inside its tile
    sub_shift = tile_shift - SUBTILE_BITS
    scale = tile_size / SUBTILE_DIVISIONS
    pixel_offset_x = ((fx1 >> sub_shift) & SUBTILE_MASK) * scale
    pixel_offset_y = ((fy1 >> sub_shift) & SUBTILE_MASK) * scale

    sub_unit = float(2**sub_shift)
    output_width = round_half_up((se.x / sub_unit - nw.x / sub_unit) * scale)
    output_height = round_half_up((se.y / sub_unit - nw.y / sub_unit) * scale)

    plan = TilePlan(
        zoom=zoom,
        tile_size=tile_size,
        tx1=tx1,
        ty1=ty1,
        tx2=tx2,
        ty2=ty2,
        pixel_offset_x=pixel_offset_x,
        pixel_offset_y=pixel_offset_y,
        output_width=output_width,
        output_height=output_height,
    )
    logger.debug('Tile plan: %s', plan)
    return plan


def require_output_area(plan: TilePlan) -> None:
    """Fail before fetching anything when the crop would be empty."""
    if plan.output_width < 1 or plan.output_height < 1:
        msg = (
            f'bounding box is too small for zoom {plan.zoom}: '
            f'output raster would be {plan.output_width}x{plan.output_height}'
        )
        raise InvalidGeometryError(msg)
