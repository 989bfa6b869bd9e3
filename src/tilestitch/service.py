"""
Stitching service: plan the tile grid, fetch tiles, composite and write.

Geometry is computed once; compositing starts only after every fetch
attempt has finished.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from tilestitch.domain.models import StitchResult, TileCoordinate, TilePlan
from tilestitch.geo.geodesy import lat_lon_to_projected, tile_coordinate_to_lat_lon
from tilestitch.imaging.composer import compose_and_save
from tilestitch.infrastructure.http.client import fetch_tile_bytes, make_http_session
from tilestitch.shared.progress import ConsoleProgress
from tilestitch.tiles.coverage import plan_tiles, require_output_area
from tilestitch.tiles.fetcher import TileFetcher, placed_tiles

if TYPE_CHECKING:
    from tilestitch.domain.models import BoundingBox
    from tilestitch.settings import StitchSettings
    from tilestitch.tiles.fetcher import FetchBytes

logger = logging.getLogger(__name__)


def log_plan_diagnostics(bbox: BoundingBox, plan: TilePlan) -> None:
    """Human-readable geometry summary; not meant to be parsed."""
    sw = lat_lon_to_projected(bbox.min_lat, bbox.min_lon)
    ne = lat_lon_to_projected(bbox.max_lat, bbox.max_lon)
    logger.info(
        '==Geodetic Bounds  (EPSG:4326): %s,%s to %s,%s',
        bbox.min_lat, bbox.min_lon, bbox.max_lat, bbox.max_lon,
    )
    logger.info('==Projected Bounds (EPSG:3857): %s,%s to %s,%s', sw.y, sw.x, ne.y, ne.x)
    logger.info('==Zoom Level: %d', plan.zoom)
    logger.info('==Upper Left Tile: x:%d y:%d', plan.tx1, plan.ty1)
    logger.info('==Lower Right Tile: x:%d y:%d', plan.tx2, plan.ty2)
    nw = tile_coordinate_to_lat_lon(TileCoordinate(plan.tx1, plan.ty1), plan.zoom)
    se = tile_coordinate_to_lat_lon(TileCoordinate(plan.tx2 + 1, plan.ty2 + 1), plan.zoom)
    logger.info(
        '==Tile Coverage: %.6f,%.6f to %.6f,%.6f',
        se.latitude, nw.longitude, nw.latitude, se.longitude,
    )
    logger.info(
        '==Tiles: %dx%d (%d), canvas %dx%d',
        plan.tiles_width, plan.tiles_height, plan.tile_count,
        plan.canvas_width, plan.canvas_height,
    )
    logger.info('==Raster Size: %dx%d', plan.output_width, plan.output_height)
    if plan.output_width > 0 and plan.output_height > 0:
        px = (ne.x - sw.x) / plan.output_width
        py = abs(ne.y - sw.y) / plan.output_height
        logger.info('==Pixel Size: x:%s y:%s', px, py)


def prepare_plan(settings: StitchSettings) -> TilePlan:
    """Plan and validate the run; raises InvalidGeometryError before any I/O."""
    bbox = settings.bbox
    plan = plan_tiles(bbox, settings.zoom, settings.tile_size)
    log_plan_diagnostics(bbox, plan)
    require_output_area(plan)
    return plan


async def stitch(
    settings: StitchSettings,
    *,
    fetch_bytes: FetchBytes | None = None,
) -> StitchResult:
    """
    Run one stitch end to end.

    ``fetch_bytes`` replaces the HTTP capability (tests, alternative
    transports); by default an aiohttp session is opened for the run.
    Per-tile failures are tolerated; CompositeError propagates.
    """
    plan = prepare_plan(settings)
    progress = ConsoleProgress(plan.tile_count, label='Tiles')

    if fetch_bytes is None:
        async with make_http_session(
            user_agent=settings.user_agent,
            timeout_s=settings.timeout,
            limit=settings.concurrency,
        ) as client:

            async def _http_fetch(url: str) -> tuple[int, bytes]:
                return await fetch_tile_bytes(client, url)

            fetcher = TileFetcher(_http_fetch, concurrency=settings.concurrency)
            outcomes = await fetcher.fetch_many(
                plan, settings.url, on_complete=progress.on_tile
            )
    else:
        fetcher = TileFetcher(fetch_bytes, concurrency=settings.concurrency)
        outcomes = await fetcher.fetch_many(plan, settings.url, on_complete=progress.on_tile)

    tiles = placed_tiles(outcomes)
    failed = len(outcomes) - len(tiles)
    if failed:
        logger.warning('%d of %d tiles could not be fetched; left transparent', failed, len(outcomes))

    compose_and_save(plan, tiles, settings.output)
    logger.info('Success: %s (%dx%d)', settings.output, plan.output_width, plan.output_height)
    return StitchResult(
        plan=plan,
        output_path=str(settings.output),
        fetched=len(tiles),
        failed=failed,
    )
