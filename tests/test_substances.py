# tests/test_substances.py

import math

import pytest

from planet_generator import substances
from planet_generator.substances import Phase


class TestSubstances:
    def test_normalize_drops_non_positive_entries(self):
        result = substances.normalize({"N2": 3.0, "O2": 1.0, "Ar": 0.0, "CO2": -1.0})
        assert set(result) == {"N2", "O2"}
        assert result["N2"] == pytest.approx(0.75)
        assert sum(result.values()) == pytest.approx(1.0)

    def test_normalize_of_nothing_is_empty(self):
        assert substances.normalize({}) == {}
        assert substances.normalize({"N2": 0.0}) == {}

    def test_water_boils_near_one_atmosphere(self):
        water = substances.get("H2O")
        assert 90.0 < water.vapor_pressure(372.0) < 105.0

    def test_vapor_pressure_outside_antoine_range(self):
        water = substances.get("H2O")
        assert water.vapor_pressure(200.0) == 0.0
        assert math.isinf(water.vapor_pressure(400.0))
        assert substances.get("rock").vapor_pressure(5000.0) == 0.0

    def test_water_phases(self):
        water = substances.get("H2O")
        assert water.phase(250.0, 101.325) == Phase.SOLID
        assert water.phase(300.0, 101.325) == Phase.LIQUID
        assert water.phase(300.0, 1.0) == Phase.GAS

    def test_greenhouse_potential_is_proportion_weighted(self):
        assert substances.greenhouse_potential({"CO2": 0.5, "N2": 0.5}) == pytest.approx(0.5)
        assert substances.greenhouse_potential({"N2": 1.0}) == 0.0

    def test_mixture_density_is_harmonic(self):
        density = substances.mixture_density({"H2O": 0.5, "seawater": 0.5})
        assert 1000.0 < density < 1025.0
        assert substances.mixture_density({}) == 0.0
