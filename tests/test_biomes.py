# tests/test_biomes.py

import numpy as np
import pytest

from planet_generator import config as DEFAULTS
from planet_generator.biomes import (
    BiomeType, ClimateType, HumidityType, biome_types, climate_types, humidity_types, ice_proportion,
    sea_ice_range,
)


def mm_per_year(value):
    return value / DEFAULTS.HOURS_PER_YEAR


class TestClimateTypes:
    @pytest.mark.parametrize("low,high,expected", [
        (230.0, 270.0, ClimateType.POLAR),
        (250.0, 278.0, ClimateType.SUBPOLAR),
        (255.0, 285.0, ClimateType.BOREAL),
        (275.0, 293.0, ClimateType.COOL_TEMPERATE),
        (278.0, 300.0, ClimateType.WARM_TEMPERATE),
        (288.0, 303.0, ClimateType.SUBTROPICAL),
        (295.0, 305.0, ClimateType.TROPICAL),
        (345.0, 360.0, ClimateType.SUPERTROPICAL),
    ])
    def test_zones(self, low, high, expected):
        assert climate_types(low, high) == expected

    def test_works_on_rasters(self):
        zones = climate_types(np.array([[230.0, 295.0]]), np.array([[270.0, 305.0]]))
        assert zones.tolist() == [[ClimateType.POLAR, ClimateType.TROPICAL]]


class TestHumidityTypes:
    def test_classes_by_annual_rainfall(self):
        rates = mm_per_year(np.array([50.0, 200.0, 400.0, 800.0, 1500.0, 3000.0, 6000.0, 9000.0]))
        assert humidity_types(rates).tolist() == [int(h) for h in HumidityType if h]

    def test_limit_belongs_to_the_wetter_class(self):
        assert humidity_types(mm_per_year(125.0)) == HumidityType.PERARID


class TestBiomeTypes:
    def test_sea_wins_everywhere_below_sea_level(self):
        assert biome_types(ClimateType.TROPICAL, HumidityType.HUMID, -0.2) == BiomeType.SEA
        assert biome_types(ClimateType.POLAR, HumidityType.ARID, 0.0) == BiomeType.SEA

    def test_cold_highlands_turn_alpine(self):
        assert biome_types(ClimateType.POLAR, HumidityType.ARID, 0.05) == BiomeType.POLAR
        assert biome_types(ClimateType.POLAR, HumidityType.ARID, 0.2) == BiomeType.ALPINE
        assert biome_types(ClimateType.SUBPOLAR, HumidityType.ARID, 0.05) == BiomeType.TUNDRA
        assert biome_types(ClimateType.SUBPOLAR, HumidityType.ARID, 0.2) == BiomeType.SUBALPINE

    @pytest.mark.parametrize("climate,humidity,expected", [
        (ClimateType.BOREAL, HumidityType.ARID, BiomeType.LICHEN_WOODLAND),
        (ClimateType.BOREAL, HumidityType.HUMID, BiomeType.CONIFEROUS_FOREST),
        (ClimateType.COOL_TEMPERATE, HumidityType.PERARID, BiomeType.COLD_DESERT),
        (ClimateType.COOL_TEMPERATE, HumidityType.ARID, BiomeType.STEPPE),
        (ClimateType.COOL_TEMPERATE, HumidityType.SEMIARID, BiomeType.MIXED_FOREST),
        (ClimateType.WARM_TEMPERATE, HumidityType.SUPERARID, BiomeType.HOT_DESERT),
        (ClimateType.WARM_TEMPERATE, HumidityType.ARID, BiomeType.SHRUBLAND),
        (ClimateType.WARM_TEMPERATE, HumidityType.PERHUMID, BiomeType.DECIDUOUS_FOREST),
        (ClimateType.SUBTROPICAL, HumidityType.ARID, BiomeType.SAVANNA),
        (ClimateType.SUBTROPICAL, HumidityType.SUBHUMID, BiomeType.MONSOON_FOREST),
        (ClimateType.SUBTROPICAL, HumidityType.HUMID, BiomeType.RAIN_FOREST),
        (ClimateType.TROPICAL, HumidityType.SEMIARID, BiomeType.SAVANNA),
        (ClimateType.TROPICAL, HumidityType.SUBHUMID, BiomeType.MONSOON_FOREST),
        (ClimateType.TROPICAL, HumidityType.SUPERHUMID, BiomeType.RAIN_FOREST),
        (ClimateType.SUPERTROPICAL, HumidityType.SUPERHUMID, BiomeType.HOT_DESERT),
    ])
    def test_land_biomes(self, climate, humidity, expected):
        assert biome_types(climate, humidity, 0.05) == expected

    def test_broadcasts_over_rasters(self):
        climate = np.array([[ClimateType.TROPICAL, ClimateType.BOREAL]])
        humidity = np.array([[HumidityType.HUMID, HumidityType.SUPERARID]])
        elevation = np.array([[0.1, -0.1]])
        assert biome_types(climate, humidity, elevation).tolist() == [[BiomeType.RAIN_FOREST, BiomeType.SEA]]


class TestSeaIce:
    def test_frozen_all_year(self):
        start, end = sea_ice_range(1.2, 240.0, 260.0, -0.1)
        assert (start, end) == (0.0, 1.0)
        assert ice_proportion(start, end) == 1.0

    def test_open_water_and_land_have_no_ice(self):
        start, end = sea_ice_range(np.array([0.0, 1.2]), np.array([290.0, 240.0]),
                                   np.array([300.0, 260.0]), np.array([-0.1, 0.1]))
        assert np.all(np.isnan(start)) and np.all(np.isnan(end))
        assert np.all(ice_proportion(start, end) == 0)

    def test_seasonal_ice_wraps_the_northern_winter(self):
        # Below freezing for half of the temperature range.
        start, end = sea_ice_range(1.0, 261.35, 281.35, -0.1)
        proportion = 0.5 * DEFAULTS.SEA_ICE_FREEZE_SCALE - DEFAULTS.SEA_ICE_FREEZE_OFFSET
        assert start == pytest.approx(1 - proportion / 4)
        assert end == pytest.approx(proportion * 3 / 4)
        assert ice_proportion(start, end) == pytest.approx(proportion)

    def test_southern_ice_is_half_a_year_later(self):
        north = sea_ice_range(1.0, 261.35, 281.35, -0.1)
        south = sea_ice_range(-1.0, 281.35, 261.35, -0.1)
        assert south[0] == pytest.approx((north[0] + 0.5) % 1.0)
        assert south[1] == pytest.approx((north[1] + 0.5) % 1.0)
        assert ice_proportion(*south) == pytest.approx(ice_proportion(*north))

    def test_barely_freezing_water_stays_open(self):
        start, _ = sea_ice_range(1.0, 271.0, 290.0, -0.1)
        assert np.isnan(start)
