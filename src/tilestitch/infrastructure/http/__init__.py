"""HTTP client infrastructure."""
from tilestitch.infrastructure.http.client import fetch_tile_bytes, make_http_session

__all__ = [
    'fetch_tile_bytes',
    'make_http_session',
]
