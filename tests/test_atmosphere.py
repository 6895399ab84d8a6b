# tests/test_atmosphere.py

import pytest

from planet_generator import config as DEFAULTS
from planet_generator import thermal
from planet_generator.archetypes import PlanetType
from planet_generator.atmosphere import Atmosphere, scaled_requirement
from planet_generator.generator import PlanetGenerator


class TestAtmosphere:
    def setup_method(self):
        self.atmosphere = Atmosphere(100.0, {"N2": 0.8, "O2": 0.2})

    def test_set_proportion_rescales_the_rest(self):
        self.atmosphere.set_proportion("CO2", 0.5)
        assert self.atmosphere.composition["CO2"] == pytest.approx(0.5)
        assert self.atmosphere.composition["N2"] == pytest.approx(0.4)
        assert self.atmosphere.composition["O2"] == pytest.approx(0.1)

    def test_set_proportion_on_empty_air(self):
        atmosphere = Atmosphere(100.0, {})
        atmosphere.set_proportion("N2", 0.3)
        assert atmosphere.composition == {"N2": 1.0}

    def test_breathable_air_excludes_ozone(self):
        self.atmosphere.set_proportion("O3", 0.01)
        breathable = self.atmosphere.breathable_composition()
        assert "O3" not in breathable
        assert sum(breathable.values()) == pytest.approx(1.0)

    def test_empty_atmosphere(self):
        assert Atmosphere.empty().is_empty
        assert Atmosphere(0.0, {"N2": 1.0}).is_empty

    def test_requirements_scale_with_pressure(self):
        half = DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE / 2
        assert scaled_requirement(0.1, 0.2, half) == pytest.approx((0.2, 0.4))
        assert scaled_requirement(0.1, None, half) == (pytest.approx(0.2), None)


class TestAtmosphereSolver:
    def test_earthlike_air_is_closed(self, earthlike_planet):
        atmosphere = earthlike_planet.atmosphere
        assert sum(atmosphere.composition.values()) == pytest.approx(1.0, abs=1e-4)
        assert atmosphere.pressure == pytest.approx(DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE)
        assert atmosphere.composition["N2"] > atmosphere.composition["O2"] > 0.1

    def test_derived_values_follow_the_planet(self, earthlike_planet):
        atmosphere = earthlike_planet.atmosphere
        expected_mass = (thermal.FOUR_PI * earthlike_planet.radius ** 2 * atmosphere.pressure * 1000
                         / earthlike_planet.surface_gravity)
        assert atmosphere.mass == pytest.approx(expected_mass)
        assert atmosphere.scale_height > 0
        assert atmosphere.height > atmosphere.scale_height
        assert atmosphere.max_snowfall == pytest.approx(atmosphere.max_precipitation * DEFAULTS.SNOW_TO_RAIN_RATIO)

    def test_refresh_of_empty_air_clears_derived_values(self, earthlike_planet):
        atmosphere = Atmosphere(0.0, {})
        atmosphere.mass = 5.0
        atmosphere.refresh(earthlike_planet)
        assert atmosphere.mass == 0.0
        assert atmosphere.greenhouse_factor == 1.0

    def test_giants_have_deep_hydrogen_air(self, test_logger):
        planet = PlanetGenerator({'seed': 3}, test_logger).generate(PlanetType.GAS_GIANT, seed=5)
        assert planet.atmosphere.pressure == DEFAULTS.GIANT_ATMOSPHERIC_PRESSURE
        assert planet.atmosphere.composition["H2"] > 0.7
        assert planet.hydrosphere.is_empty

    def test_same_seed_same_air(self, test_logger):
        a = PlanetGenerator({'seed': 3}, test_logger).generate(PlanetType.TERRESTRIAL, seed=9)
        b = PlanetGenerator({'seed': 3}, test_logger).generate(PlanetType.TERRESTRIAL, seed=9)
        assert a.atmosphere.pressure == b.atmosphere.pressure
        assert a.atmosphere.composition == b.atmosphere.composition
