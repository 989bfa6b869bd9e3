"""
Slippy-map and spherical Web Mercator transforms.

See https://wiki.openstreetmap.org/wiki/Slippy_map_tilenames
"""

from __future__ import annotations

import math

from tilestitch.domain.models import GeoPoint, ProjectedPoint, TileCoordinate
from tilestitch.shared.constants import (
    ORIGIN_SHIFT_M,
    WORLD_LNG_HALF_SPAN_DEG,
    WORLD_LNG_SPAN_DEG,
)


def lat_lon_to_tile_coordinate(
    lat: float,
    lon: float,
    zoom_precision_bits: int,
) -> TileCoordinate:
    """
    Forward slippy-map projection at zoom ``zoom_precision_bits``.

    The poles are not guarded: ``lat`` must stay strictly inside (-90, 90).
    """
    lat_rad = math.radians(lat)
    n = float(2**zoom_precision_bits)
    x = n * ((lon + WORLD_LNG_HALF_SPAN_DEG) / WORLD_LNG_SPAN_DEG)
    y = n * (1 - math.log(math.tan(lat_rad) + 1 / math.cos(lat_rad)) / math.pi) / 2
    return TileCoordinate(x, y)


def tile_coordinate_to_lat_lon(
    coord: TileCoordinate,
    zoom_precision_bits: int,
) -> GeoPoint:
    """Inverse of :func:`lat_lon_to_tile_coordinate`."""
    n = float(2**zoom_precision_bits)
    lon = coord.x / n * WORLD_LNG_SPAN_DEG - WORLD_LNG_HALF_SPAN_DEG
    lat = math.degrees(math.atan(math.sinh(math.pi * (1 - 2 * coord.y / n))))
    return GeoPoint(lat, lon)


def lat_lon_to_projected(lat: float, lon: float) -> ProjectedPoint:
    """WGS84 degrees -> EPSG:3857 metres."""
    x = lon * ORIGIN_SHIFT_M / 180.0
    y = math.log(math.tan((90 + lat) * math.pi / 360.0)) / (math.pi / 180.0)
    y = y * ORIGIN_SHIFT_M / 180.0
    return ProjectedPoint(x, y)
