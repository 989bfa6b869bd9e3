"""tilestitch - stitch slippy-map tiles for a bounding box into one raster."""

__version__ = '1.0.0'
