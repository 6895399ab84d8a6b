# tests/test_projection.py

import math

import numpy as np
import pytest

from planet_generator.exceptions import ConfigurationError
from planet_generator.projection import EQUAL_AREA, EQUIRECTANGULAR, MapProjection, projection_named


class TestMapProjection:
    def setup_method(self):
        rng = np.random.default_rng(21)
        self.lat = rng.uniform(-math.pi / 2 + 1e-6, math.pi / 2 - 1e-6, 500)
        self.lon = rng.uniform(-math.pi, math.pi - 1e-6, 500)

    def test_equirectangular_dimensions(self):
        assert EQUIRECTANGULAR.dimensions(90) == (180, 90)

    def test_equal_area_aspect_ratio(self):
        width, height = EQUAL_AREA.dimensions(100)
        assert height == 100
        assert width == int(math.floor(100 * math.pi))

    @pytest.mark.parametrize("projection", [
        EQUIRECTANGULAR,
        EQUAL_AREA,
        MapProjection(central_meridian=1.0, equal_area=True, standard_parallel=0.5),
    ])
    def test_round_trip_within_one_pixel(self, projection):
        resolution = 64
        x, y = projection.lat_lon_to_pixel(self.lat, self.lon, resolution)
        lat, lon = projection.pixel_to_lat_lon(x, y, resolution)
        dlat, dlon = projection.pixel_angular_resolution(y, resolution)
        lon_error = np.abs((lon - self.lon + math.pi) % (2 * math.pi) - math.pi)
        assert np.all(np.abs(lat - self.lat) <= dlat + 1e-9)
        assert np.all(lon_error <= dlon + 1e-9)

    def test_grid_covers_the_globe(self):
        lat, lon = EQUIRECTANGULAR.lat_lon_grid(30)
        assert lat.shape == (30, 60)
        assert lat[0, 0] > 0 > lat[-1, 0]
        assert lon[0, 0] < 0 < lon[0, -1]

    def test_continuous_coordinates_hit_pixel_centres(self):
        lat, lon = EQUIRECTANGULAR.pixel_to_lat_lon(12, 7, 30)
        x, y = EQUIRECTANGULAR.lat_lon_to_coordinates(lat, lon, 30)
        assert x == pytest.approx(12)
        assert y == pytest.approx(7)

    def test_out_of_range_options_are_clamped(self):
        projection = MapProjection(central_parallel=4.0, range=10.0)
        assert projection.central_parallel == pytest.approx(math.pi / 2)
        assert projection.latitude_range == pytest.approx(math.pi)

    def test_key_distinguishes_projections(self):
        assert EQUIRECTANGULAR.key != EQUAL_AREA.key


class TestProjectionNamed:
    def test_lookup(self):
        assert projection_named("equal_area") is EQUAL_AREA
        assert projection_named(EQUIRECTANGULAR) is EQUIRECTANGULAR

    def test_unknown_name(self):
        with pytest.raises(ConfigurationError):
            projection_named("mercator")
