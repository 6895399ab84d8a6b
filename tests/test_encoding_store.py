# tests/test_encoding_store.py

import asyncio
import json
import os

import numpy as np

from planet_generator import config as DEFAULTS
from planet_generator.biomes import BiomeType
from planet_generator.climate import ClimateField
from planet_generator.encoding import decode, encode
from planet_generator.projection import EQUIRECTANGULAR
from planet_generator.store import MANIFEST_FILENAME, AsyncRasterStore, RasterStore, raster_key


class TestEncoding:
    def test_elevation_uses_the_full_range(self, earthlike_planet):
        values = encode(np.array([[-1.0, 0.0, 1.0]]), ClimateField.ELEVATION, earthlike_planet)
        assert values.dtype == np.uint16
        assert values[0, 0] == 0
        assert values[0, 2] == DEFAULTS.ENCODING_MAX_VALUE

    def test_out_of_range_values_are_clipped(self, earthlike_planet):
        values = encode(np.array([-50.0, 5000.0]), "temperature", earthlike_planet)
        assert list(values) == [0, DEFAULTS.ENCODING_MAX_VALUE]

    def test_decode_within_one_step(self, earthlike_planet):
        raster = np.linspace(150.0, 350.0, 64).reshape(8, 8)
        restored = decode(encode(raster, ClimateField.TEMPERATURE, earthlike_planet),
                          ClimateField.TEMPERATURE, earthlike_planet)
        step = DEFAULTS.MAX_ENCODED_TEMPERATURE / DEFAULTS.ENCODING_MAX_VALUE
        assert np.max(np.abs(restored - raster)) <= step

    def test_precipitation_scales_to_the_planet(self, earthlike_planet):
        top = earthlike_planet.atmosphere.max_precipitation
        values = encode(np.array([top / 2]), ClimateField.PRECIPITATION, earthlike_planet)
        assert abs(int(values[0]) - DEFAULTS.ENCODING_MAX_VALUE // 2) <= 1

    def test_categories_are_stored_unscaled(self, earthlike_planet):
        biomes = np.array([[BiomeType.SEA, BiomeType.RAIN_FOREST]], dtype=np.float64)
        values = encode(biomes, ClimateField.BIOME, earthlike_planet)
        assert values.tolist() == [[BiomeType.SEA, BiomeType.RAIN_FOREST]]
        assert np.array_equal(decode(values, "biome", earthlike_planet), biomes)

    def test_sea_ice_spans_the_year(self, earthlike_planet):
        values = encode(np.array([0.0, 0.5, 1.0]), ClimateField.SEA_ICE, earthlike_planet)
        assert values[0] == 0 and values[2] == DEFAULTS.ENCODING_MAX_VALUE
        assert abs(int(values[1]) - DEFAULTS.ENCODING_MAX_VALUE // 2) <= 1


class TestRasterStore:
    def setup_method(self):
        self.grid = np.arange(12, dtype=np.uint16).reshape(3, 4) * 1000

    def test_save_and_load(self, tmp_path):
        store = RasterStore(str(tmp_path))
        path = store.save(self.grid, "terra_annual")
        assert path is not None and os.path.exists(path)
        assert np.array_equal(store.load(path), self.grid)
        assert np.array_equal(store.load_key("terra_annual"), self.grid)

    def test_identical_rasters_share_a_file(self, tmp_path):
        store = RasterStore(str(tmp_path))
        first = store.save(self.grid, "winter")
        second = store.save(self.grid.copy(), "summer")
        assert first == second
        with open(tmp_path / MANIFEST_FILENAME) as f:
            manifest = json.load(f)
        assert set(manifest["rasters"]) == {"winter", "summer"}

    def test_missing_raster_is_a_miss(self, tmp_path):
        store = RasterStore(str(tmp_path))
        assert store.load(str(tmp_path / "absent.png")) is None
        assert store.load(None) is None
        assert store.load_key("never-saved") is None

    def test_corrupt_raster_is_a_miss(self, tmp_path):
        store = RasterStore(str(tmp_path))
        path = store.save(self.grid, "terra")
        with open(path, "wb") as f:
            f.write(b"not a png")
        assert store.load(path) is None
        assert not os.path.exists(path)
        assert store.save(self.grid, "terra") == path
        assert np.array_equal(store.load_key("terra"), self.grid)

    def test_corrupt_manifest_is_ignored(self, tmp_path):
        (tmp_path / MANIFEST_FILENAME).write_text("{ nope")
        store = RasterStore(str(tmp_path))
        assert store.lookup("terra") is None
        assert store.save(self.grid, "terra") is not None
        assert store.lookup("terra") is not None

    def test_non_grid_is_not_saved(self, tmp_path):
        assert RasterStore(str(tmp_path)).save(np.zeros(5), "flat") is None

    def test_async_facade(self, tmp_path):
        store = AsyncRasterStore(RasterStore(str(tmp_path)))

        async def roundtrip():
            path = await store.save(self.grid, "terra")
            return path, await store.load(path), await store.load_key("terra")

        path, by_path, by_key = asyncio.run(roundtrip())
        assert path is not None
        assert np.array_equal(by_path, self.grid)
        assert np.array_equal(by_key, self.grid)


class TestRasterKey:
    def test_key_names_every_setting(self, earthlike_planet):
        key = raster_key(earthlike_planet, ClimateField.SNOWFALL, 90, EQUIRECTANGULAR, 0.25)
        assert key.startswith("Terra_42_snowfall_90_")
        assert key.endswith("_0.250000")
        assert raster_key(earthlike_planet, "snowfall", 90, EQUIRECTANGULAR).endswith("_annual")
