# tests/test_habitability.py

import dataclasses

from planet_generator import config as DEFAULTS
from planet_generator.habitability import (
    HUMAN, HabitabilityRequirements, SubstanceRequirement, UninhabitabilityReason,
    has_liquid_water, is_breathable, is_habitable,
)
from planet_generator.atmosphere import Atmosphere


class TestSubstanceRequirement:
    def setup_method(self):
        self.oxygen = SubstanceRequirement("O2", 0.07, 0.53)

    def test_met_at_one_atmosphere(self):
        assert self.oxygen.is_met(0.21, DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE)
        assert not self.oxygen.is_met(0.05, DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE)
        assert not self.oxygen.is_met(0.6, DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE)

    def test_thinner_air_needs_a_richer_mix(self):
        half = DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE / 2
        assert not self.oxygen.is_met(0.1, half)
        assert self.oxygen.is_met(0.2, half)

    def test_open_ended_maximum(self):
        assert SubstanceRequirement("N2", 0.1).is_met(1.0, 500.0)


class TestHabitability:
    def test_target_temperature(self):
        assert HUMAN.target_temperature == (236.0 + 308.0) / 2
        assert HabitabilityRequirements(min_temperature=250.0).target_temperature == 250.0
        assert HabitabilityRequirements().target_temperature is None

    def test_earthlike_planet_is_habitable(self, earthlike_planet):
        assert has_liquid_water(earthlike_planet)
        assert is_breathable(earthlike_planet.atmosphere, HUMAN.atmospheric_requirements)
        assert is_habitable(earthlike_planet, HUMAN) == UninhabitabilityReason.NONE

    def test_reasons_accumulate(self, earthlike_planet):
        strict = HabitabilityRequirements(min_pressure=500.0, min_gravity=20.0)
        reason = is_habitable(earthlike_planet, strict)
        assert UninhabitabilityReason.LOW_PRESSURE in reason
        assert UninhabitabilityReason.LOW_GRAVITY in reason
        assert UninhabitabilityReason.HIGH_PRESSURE not in reason

    def test_inhospitable_star(self, earthlike_planet):
        planet = dataclasses.replace(earthlike_planet, is_inhospitable=True)
        assert UninhabitabilityReason.INHOSPITABLE in is_habitable(planet, HabitabilityRequirements())

    def test_airless_planet_is_unbreathable(self):
        assert not is_breathable(Atmosphere.empty(), HUMAN.atmospheric_requirements)
        assert is_breathable(Atmosphere.empty(), ())
