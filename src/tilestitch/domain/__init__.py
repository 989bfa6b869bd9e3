"""Domain value types."""

from tilestitch.domain.models import (
    BoundingBox,
    GeoPoint,
    PlacedTile,
    ProjectedPoint,
    StitchResult,
    TileCoordinate,
    TileFetchOutcome,
    TilePlan,
    TileRequest,
    round_half_up,
)

__all__ = [
    'BoundingBox',
    'GeoPoint',
    'PlacedTile',
    'ProjectedPoint',
    'StitchResult',
    'TileCoordinate',
    'TileFetchOutcome',
    'TilePlan',
    'TileRequest',
    'round_half_up',
]
