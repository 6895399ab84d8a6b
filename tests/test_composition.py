# tests/test_composition.py

import math

import numpy as np
import pytest

from planet_generator import config as DEFAULTS
from planet_generator.archetypes import PlanetType
from planet_generator.composition import CompositionBuilder
from planet_generator.params import PlanetParams
from planet_generator.planet import Planet


def build(planet_type, params=None, seed=3):
    planet = Planet(name="Test", seed=seed, planet_type=planet_type, params=params or PlanetParams())
    CompositionBuilder().build(planet, np.random.default_rng(seed))
    return planet


class TestCompositionBuilder:
    @pytest.mark.parametrize("planet_type", [
        PlanetType.TERRESTRIAL, PlanetType.IRON, PlanetType.CARBON, PlanetType.LAVA,
        PlanetType.GAS_GIANT, PlanetType.ICE_GIANT, PlanetType.DWARF,
    ])
    def test_layer_masses_add_up_to_the_planet(self, planet_type):
        planet = build(planet_type)
        total = sum(layer.mass for layer in planet.layers)
        assert total == pytest.approx(planet.mass, rel=1e-6)

    def test_layers_are_ordered_outwards(self):
        planet = build(PlanetType.TERRESTRIAL)
        assert planet.layers[0].inner_radius == 0.0
        for inner, outer in zip(planet.layers, planet.layers[1:]):
            assert inner.outer_radius == pytest.approx(outer.inner_radius)
        assert planet.layers[-1].outer_radius == pytest.approx(planet.radius)

    def test_layer_compositions_are_normalized(self):
        planet = build(PlanetType.CARBON)
        for layer in planet.layers:
            assert sum(layer.composition.values()) == pytest.approx(1.0)

    def test_tiny_radius_is_clamped(self):
        planet = build(PlanetType.TERRESTRIAL, PlanetParams(radius=1000.0))
        assert planet.radius == DEFAULTS.MIN_PLANET_RADIUS

    def test_radius_and_mass_are_kept(self):
        planet = build(PlanetType.TERRESTRIAL, PlanetParams(radius=6.0e6, mass=5.0e24, surface_gravity=20.0))
        assert planet.radius == pytest.approx(6.0e6)
        assert planet.mass == pytest.approx(5.0e24)

    def test_radius_and_gravity_give_mass(self):
        planet = build(PlanetType.TERRESTRIAL, PlanetParams(radius=6.0e6, surface_gravity=9.0))
        assert planet.surface_gravity == pytest.approx(9.0)

    def test_gravity_and_mass_give_radius(self):
        planet = build(PlanetType.TERRESTRIAL, PlanetParams(mass=6.0e24, surface_gravity=9.0))
        expected = math.sqrt(DEFAULTS.GRAVITATIONAL_CONSTANT * 6.0e24 / 9.0)
        assert planet.radius == pytest.approx(expected)

    def test_random_mass_respects_archetype_range(self):
        low, high = build(PlanetType.TERRESTRIAL).rules.mass_range
        for seed in range(5):
            assert low <= build(PlanetType.TERRESTRIAL, seed=seed).mass <= high

    def test_max_mass_caps_the_draw(self):
        planet = build(PlanetType.TERRESTRIAL, PlanetParams(max_mass=1e23))
        assert planet.mass <= 1e23

    def test_giants_have_no_crust_or_relief(self):
        planet = build(PlanetType.GAS_GIANT)
        assert all(not layer.name.startswith("crust") for layer in planet.layers)
        assert planet.max_elevation == 0.0

    def test_max_elevation_scales_with_gravity(self):
        planet = build(PlanetType.TERRESTRIAL, PlanetParams.earthlike())
        expected = DEFAULTS.MAX_ELEVATION_FACTOR / planet.surface_gravity
        assert planet.max_elevation == pytest.approx(expected)

    @pytest.mark.parametrize("planet_type", [PlanetType.COMET, PlanetType.ASTEROID_C,
                                             PlanetType.ASTEROID_M, PlanetType.ASTEROID_S])
    def test_small_bodies_are_a_single_irregular_layer(self, planet_type):
        planet = build(planet_type)
        assert len(planet.layers) == 1
        layer = planet.layers[0]
        assert layer.mass == pytest.approx(planet.mass)
        assert sum(layer.composition.values()) == pytest.approx(1.0)
