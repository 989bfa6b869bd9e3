"""Tile planning and fetching.

This module provides:
- plan_tiles: bounding box -> TilePlan (tile rectangle, alignment, output size)
- TileFetcher: bounded-concurrency downloader producing TileFetchOutcome
"""

from tilestitch.tiles.coverage import plan_tiles, require_output_area, validate_geometry
from tilestitch.tiles.fetcher import TileFetcher, format_tile_url, placed_tiles

__all__ = [
    'TileFetcher',
    'format_tile_url',
    'placed_tiles',
    'plan_tiles',
    'require_output_area',
    'validate_geometry',
]
