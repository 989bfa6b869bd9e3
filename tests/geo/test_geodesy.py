"""Tests for geo.geodesy module."""

import math

import pytest

from tilestitch.domain.models import TileCoordinate
from tilestitch.geo.geodesy import (
    lat_lon_to_projected,
    lat_lon_to_tile_coordinate,
    tile_coordinate_to_lat_lon,
)
from tilestitch.shared.constants import ORIGIN_SHIFT_M, PRECISION_BITS


class TestLatLonToTileCoordinate:
    """Tests for the forward slippy-map projection."""

    def test_origin_at_zoom_one(self):
        """Equator/prime meridian sits on the centre of the 2x2 world."""
        coord = lat_lon_to_tile_coordinate(0.0, 0.0, 1)
        assert coord.x == pytest.approx(1.0)
        assert coord.y == pytest.approx(1.0)

    def test_antimeridian_is_left_edge(self):
        coord = lat_lon_to_tile_coordinate(0.0, -180.0, 5)
        assert coord.x == 0.0

    def test_north_is_smaller_y(self):
        """Tile y grows southwards."""
        north = lat_lon_to_tile_coordinate(60.0, 10.0, 10)
        south = lat_lon_to_tile_coordinate(-60.0, 10.0, 10)
        assert north.y < south.y

    def test_mercator_limit_maps_to_top_edge(self):
        coord = lat_lon_to_tile_coordinate(85.0511287798066, 0.0, 0)
        assert coord.y == pytest.approx(0.0, abs=1e-9)

    def test_known_tile_berlin(self):
        """Berlin at zoom 10 falls into the well-known tile 550/335."""
        coord = lat_lon_to_tile_coordinate(52.52, 13.405, 10)
        assert (math.floor(coord.x), math.floor(coord.y)) == (550, 335)

    def test_high_precision_matches_scaled_low_precision(self):
        low = lat_lon_to_tile_coordinate(40.7, -74.0, 15)
        high = lat_lon_to_tile_coordinate(40.7, -74.0, PRECISION_BITS)
        scale = 2 ** (PRECISION_BITS - 15)
        assert high.x / scale == pytest.approx(low.x)
        assert high.y / scale == pytest.approx(low.y)


class TestRoundTrip:
    """Forward then inverse transform recovers the input."""

    @pytest.mark.parametrize(
        ('lat', 'lon'),
        [
            (0.0, 0.0),
            (40.71, -74.01),
            (-33.86, 151.21),
            (84.9, 179.9),
            (-84.9, -179.9),
            (89.5, 12.0),
        ],
    )
    def test_round_trip(self, lat, lon):
        coord = lat_lon_to_tile_coordinate(lat, lon, PRECISION_BITS)
        point = tile_coordinate_to_lat_lon(coord, PRECISION_BITS)
        assert point.latitude == pytest.approx(lat, abs=1e-9)
        assert point.longitude == pytest.approx(lon, abs=1e-9)

    def test_inverse_of_tile_corner(self):
        point = tile_coordinate_to_lat_lon(TileCoordinate(0.0, 0.0), 0)
        assert point.longitude == -180.0
        assert point.latitude == pytest.approx(85.0511287798066)


class TestLatLonToProjected:
    """Tests for spherical Web Mercator projection."""

    def test_origin(self):
        p = lat_lon_to_projected(0.0, 0.0)
        assert p.x == 0.0
        assert p.y == pytest.approx(0.0, abs=1e-6)

    def test_antimeridian_x(self):
        assert lat_lon_to_projected(0.0, 180.0).x == pytest.approx(ORIGIN_SHIFT_M)
        assert lat_lon_to_projected(0.0, -180.0).x == pytest.approx(-ORIGIN_SHIFT_M)

    def test_mercator_limit_y(self):
        p = lat_lon_to_projected(85.0511287798066, 0.0)
        assert p.y == pytest.approx(ORIGIN_SHIFT_M, rel=1e-9)

    def test_symmetry(self):
        north = lat_lon_to_projected(45.0, 10.0)
        south = lat_lon_to_projected(-45.0, 10.0)
        assert north.y == pytest.approx(-south.y)
