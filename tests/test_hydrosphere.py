# tests/test_hydrosphere.py

import numpy as np
import pytest

from planet_generator import config as DEFAULTS
from planet_generator.archetypes import PlanetType
from planet_generator.composition import CompositionBuilder
from planet_generator.hydrosphere import Hydrosphere, HydrosphereModel
from planet_generator.params import PlanetParams
from planet_generator.planet import Planet


def planet_with(planet_type=PlanetType.TERRESTRIAL, **params):
    planet = Planet(name="Test", seed=1, planet_type=planet_type,
                    params=PlanetParams.earthlike(**params) if planet_type == PlanetType.TERRESTRIAL
                    else PlanetParams(**params))
    CompositionBuilder().build(planet, np.random.default_rng(1))
    return planet


class TestHydrosphereModel:
    def setup_method(self):
        self.model = HydrosphereModel()
        self.rng = np.random.default_rng(11)

    def test_dry_planet_has_no_water(self):
        hydrosphere = self.model.generate(planet_with(water_ratio=0.0), 288.0, self.rng)
        assert hydrosphere.is_empty
        assert hydrosphere.mass == 0.0
        assert hydrosphere.normalized_sea_level == DEFAULTS.EMPTY_SEA_LEVEL

    def test_waterless_archetype_has_no_water(self):
        hydrosphere = self.model.generate(planet_with(PlanetType.IRON, water_ratio=0.9), 288.0, self.rng)
        assert hydrosphere.is_empty

    def test_earthlike_oceans(self):
        hydrosphere = self.model.generate(planet_with(), 288.0, self.rng)
        assert hydrosphere.mass > 0
        assert 0.0 < hydrosphere.normalized_sea_level < 1.0
        assert sum(hydrosphere.composition.values()) == pytest.approx(1.0)
        assert hydrosphere.composition["seawater"] > hydrosphere.composition["H2O"]
        assert sum(layer.proportion for layer in hydrosphere.layers) == pytest.approx(1.0)

    def test_global_ocean_covers_everything(self):
        hydrosphere = self.model.generate(planet_with(water_ratio=1.5), 288.0, self.rng)
        assert hydrosphere.normalized_sea_level == pytest.approx(1.5)

    def test_frozen_surface_over_deep_water_is_a_subsurface_ocean(self):
        hydrosphere = self.model.generate(planet_with(water_ratio=1.5), 200.0, self.rng)
        assert len(hydrosphere.layers) == 2
        top, bottom = hydrosphere.layers
        assert top.inner_radius == pytest.approx(bottom.outer_radius)
        assert bottom.temperature == DEFAULTS.DEEP_OCEAN_TEMPERATURE
        assert top.proportion + bottom.proportion == pytest.approx(1.0)


class TestHydrosphere:
    def setup_method(self):
        self.hydrosphere = Hydrosphere(mass=1000.0, normalized_sea_level=0.1,
                                       composition={"seawater": 0.9, "H2O": 0.1})

    def test_add_condensed_mass(self):
        self.hydrosphere.add("CO2", 1000.0)
        assert self.hydrosphere.mass == pytest.approx(2000.0)
        assert self.hydrosphere.composition["CO2"] == pytest.approx(0.5)
        assert self.hydrosphere.composition["seawater"] == pytest.approx(0.45)

    def test_nothing_is_added_to_an_empty_hydrosphere(self):
        empty = Hydrosphere()
        empty.add("CO2", 1000.0)
        assert empty.is_empty

    def test_remove_returns_removed_mass(self):
        removed = self.hydrosphere.remove("H2O")
        assert removed == pytest.approx(100.0)
        assert self.hydrosphere.mass == pytest.approx(900.0)
        assert self.hydrosphere.composition == {"seawater": 1.0}

    def test_removing_everything_empties_it(self):
        self.hydrosphere.remove("seawater", "H2O")
        assert self.hydrosphere.is_empty
        assert self.hydrosphere.normalized_sea_level == DEFAULTS.EMPTY_SEA_LEVEL

    def test_ice_fraction(self):
        assert self.hydrosphere.ice_fraction(200.0, 101.325) == pytest.approx(1.0)
        assert self.hydrosphere.ice_fraction(300.0, 101.325) == 0.0
