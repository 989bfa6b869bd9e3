"""Immutable value types shared by the planner, fetcher and compositor."""

from __future__ import annotations

import math
from dataclasses import dataclass

from tilestitch.errors import TileFetchError


@dataclass(frozen=True)
class GeoPoint:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class BoundingBox:
    """Geographic box in WGS84 degrees; latitude grows northwards."""

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    @property
    def northwest(self) -> GeoPoint:
        return GeoPoint(self.max_lat, self.min_lon)

    @property
    def southeast(self) -> GeoPoint:
        return GeoPoint(self.min_lat, self.max_lon)


@dataclass(frozen=True)
class TileCoordinate:
    """Continuous slippy-map coordinate, valid only for the zoom it was computed at."""

    x: float
    y: float


@dataclass(frozen=True)
class ProjectedPoint:
    """Spherical Web Mercator (EPSG:3857) coordinate in metres."""

    x: float
    y: float


@dataclass(frozen=True)
class TileRequest:
    tx: int
    ty: int


@dataclass(frozen=True)
class PlacedTile:
    """Raw tile body positioned in canvas pixel coordinates."""

    image_bytes: bytes
    left: int
    top: int


@dataclass(frozen=True)
class TilePlan:
    """
    Geometry of one stitching run.

    Tile bounds are inclusive. The canvas spans whole tiles; the output
    raster is the ``[0, 0, output_width, output_height]`` crop of it, which
    lines up with the requested box because every tile is shifted left/up
    by the sub-tile alignment offset when it is placed.
    """

    zoom: int
    tile_size: int
    tx1: int
    ty1: int
    tx2: int
    ty2: int
    pixel_offset_x: float
    pixel_offset_y: float
    output_width: int
    output_height: int

    @property
    def tiles_width(self) -> int:
        return self.tx2 - self.tx1 + 1

    @property
    def tiles_height(self) -> int:
        return self.ty2 - self.ty1 + 1

    @property
    def tile_count(self) -> int:
        return self.tiles_width * self.tiles_height

    @property
    def canvas_width(self) -> int:
        return self.tiles_width * self.tile_size

    @property
    def canvas_height(self) -> int:
        return self.tiles_height * self.tile_size

    def tile_requests(self) -> list[TileRequest]:
        """All tiles of the rectangle in row-major order."""
        return [
            TileRequest(tx, ty)
            for ty in range(self.ty1, self.ty2 + 1)
            for tx in range(self.tx1, self.tx2 + 1)
        ]

    def placement(self, request: TileRequest) -> tuple[int, int]:
        """Top-left corner of ``request`` on the canvas (may be negative)."""
        left = (request.tx - self.tx1) * self.tile_size - self.pixel_offset_x
        top = (request.ty - self.ty1) * self.tile_size - self.pixel_offset_y
        return round_half_up(left), round_half_up(top)


@dataclass(frozen=True)
class TileFetchOutcome:
    """Result of one fetch task: either a placed tile or the error that dropped it."""

    index: int
    request: TileRequest
    placed: PlacedTile | None = None
    error: TileFetchError | None = None

    @property
    def ok(self) -> bool:
        return self.placed is not None


@dataclass(frozen=True)
class StitchResult:
    plan: TilePlan
    output_path: str
    fetched: int
    failed: int


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves towards +inf."""
    return math.floor(value + 0.5)
