"""Error kinds raised while stitching tiles."""

from __future__ import annotations


class TileStitchError(Exception):
    """Base class for every stitching failure."""


class InvalidGeometryError(TileStitchError, ValueError):
    """Bounding box, zoom or tile size cannot produce a meaningful raster."""


class TileFetchError(TileStitchError):
    """A single tile could not be retrieved.

    Recovered locally by the fetch pipeline: the tile is left out of the
    canvas and the run continues.
    """

    def __init__(self, message: str, *, url: str, status: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status = status


class CompositeError(TileStitchError):
    """Canvas allocation, tile decoding, cropping or writing failed."""
