"""Geo module - coordinate transforms."""

from .geodesy import (
    lat_lon_to_projected,
    lat_lon_to_tile_coordinate,
    tile_coordinate_to_lat_lon,
)

__all__ = [
    'lat_lon_to_projected',
    'lat_lon_to_tile_coordinate',
    'tile_coordinate_to_lat_lon',
]
