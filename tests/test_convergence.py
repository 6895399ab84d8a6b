# tests/test_convergence.py

import math

import pytest

from planet_generator import config as DEFAULTS
from planet_generator.archetypes import PlanetType
from planet_generator.convergence import ConvergenceController, ConvergenceReport, ConvergenceState
from planet_generator.generator import PlanetGenerator
from planet_generator.habitability import HUMAN
from planet_generator.params import PlanetParams


def recomputed_delta(planet) -> float:
    """Target minus achieved for the state the planet was left in."""
    controller = ConvergenceController(atmosphere_solver=None)
    target_equatorial = planet.target_surface_temperature * DEFAULTS.EQUATORIAL_TARGET_FACTOR
    return controller.temperature_delta(planet, target_equatorial, planet.average_elevation)


class TestConvergenceController:
    def test_report_is_attached(self, earthlike_planet):
        report = earthlike_planet.convergence_report
        assert report is not None
        assert 1 <= report.pass_count <= DEFAULTS.MAX_CONVERGENCE_PASSES
        assert report.state in (ConvergenceState.CONVERGED, ConvergenceState.EXHAUSTED)
        assert earthlike_planet.approximate == (not report.converged)

    def test_earthlike_planet_converges_within_tolerance(self, earthlike_planet):
        report = earthlike_planet.convergence_report
        assert report.converged
        assert not earthlike_planet.approximate
        assert abs(report.kept_delta) <= DEFAULTS.CONVERGENCE_TOLERANCE_K
        assert earthlike_planet.mean_surface_temperature == pytest.approx(289.0, abs=DEFAULTS.CONVERGENCE_TOLERANCE_K)

    def test_warmer_target_moves_the_planet_inwards(self, earthlike_planet, test_logger):
        generator = PlanetGenerator({'seed': 7}, test_logger)
        warm = generator.generate(PlanetType.TERRESTRIAL, PlanetParams.earthlike(surface_temperature=339.0),
                                  name="Terra", seed=42)
        assert warm.orbit.semi_major_axis < earthlike_planet.orbit.semi_major_axis

    def test_delta_shrinks_across_seeds(self, test_logger):
        generator = PlanetGenerator({'seed': 13}, test_logger)
        seeds = range(60)
        converged = 0
        for seed in seeds:
            planet = generator.generate(PlanetType.TERRESTRIAL, PlanetParams(surface_temperature=280.0), seed=seed)
            report = planet.convergence_report
            assert abs(report.kept_delta) <= abs(report.first_delta)
            converged += report.converged
        assert converged >= 0.75 * len(seeds)

    def test_fixed_year_keeps_the_orbit(self, test_logger):
        params = PlanetParams.earthlike(revolution_period=DEFAULTS.EARTH_REVOLUTION_PERIOD)
        planet = PlanetGenerator({'seed': 7}, test_logger).generate(PlanetType.TERRESTRIAL, params, seed=42)
        assert planet.orbit.period == pytest.approx(DEFAULTS.EARTH_REVOLUTION_PERIOD, rel=1e-9)

    def test_only_planets_with_a_goal_are_converged(self, test_logger):
        planet = PlanetGenerator({'seed': 7}, test_logger).generate(PlanetType.TERRESTRIAL, seed=42)
        assert not ConvergenceController.applies_to(planet)
        assert planet.convergence_report is None

    def test_illegal_transition_raises(self):
        controller = ConvergenceController(atmosphere_solver=None)
        report = ConvergenceReport(target=289.0)
        with pytest.raises(RuntimeError):
            controller._advance(report, ConvergenceState.CONVERGED)
        controller._advance(report, ConvergenceState.COMPOSITION_BUILT)
        assert report.state == ConvergenceState.COMPOSITION_BUILT


class TestFixedYearAlbedo:
    """With the year fixed the surface albedo is the only free parameter."""

    def generate(self, test_logger, surface_temperature):
        params = PlanetParams.earthlike(revolution_period=DEFAULTS.EARTH_REVOLUTION_PERIOD,
                                        surface_temperature=surface_temperature)
        return PlanetGenerator({'seed': 7}, test_logger).generate(PlanetType.TERRESTRIAL, params, seed=42)

    def test_warmer_target_darkens_the_planet(self, test_logger):
        mild = self.generate(test_logger, 289.0)
        warm = self.generate(test_logger, 339.0)
        assert warm.albedo < mild.albedo
        assert warm.mean_surface_temperature > mild.mean_surface_temperature

    def test_albedo_moves_from_the_first_pass(self, test_logger):
        planet = self.generate(test_logger, 339.0)
        report = planet.convergence_report
        assert report.passes[0].albedo != pytest.approx(DEFAULTS.EARTH_ALBEDO)

    def test_albedos_stay_physical(self, test_logger):
        for target in (150.0, 339.0, 600.0):
            planet = self.generate(test_logger, target)
            assert 0.0 <= planet.surface_albedo <= 1.0
            assert 0.0 <= planet.albedo <= 1.0
            for record in planet.convergence_report.passes:
                assert 0.0 <= record.albedo <= 1.0


class TestClosestState:
    """A planet that misses the tolerance keeps its best pass, not its last."""

    CASES = [(PlanetType.TERRESTRIAL, seed) for seed in range(8)] + \
            [(PlanetType.CARBON, seed) for seed in range(4)] + \
            [(PlanetType.OCEAN, seed) for seed in range(4)]

    @pytest.mark.parametrize("planet_type,seed", CASES)
    def test_kept_delta_is_the_smallest(self, test_logger, planet_type, seed):
        generator = PlanetGenerator({'seed': 3}, test_logger)
        planet = generator.generate(planet_type, PlanetParams(surface_temperature=265.0), seed=seed)
        report = planet.convergence_report
        smallest = min(abs(record.delta) for record in report.passes)
        assert abs(report.kept_delta) == pytest.approx(smallest)
        assert abs(recomputed_delta(planet)) <= smallest + 1e-6
        assert planet.approximate == (smallest > DEFAULTS.CONVERGENCE_TOLERANCE_K)

    @pytest.mark.parametrize("seed", range(6))
    def test_habitable_search_leaves_bounded_orbits(self, test_logger, seed):
        planet = PlanetGenerator({'seed': seed}, test_logger).generate(
            PlanetType.TERRESTRIAL, PlanetParams(), requirements=HUMAN, seed=seed)
        for record in planet.convergence_report.passes:
            assert math.isfinite(record.distance)
            assert DEFAULTS.MIN_ORBITAL_DISTANCE <= record.distance <= DEFAULTS.MAX_ORBITAL_DISTANCE

    def test_exhausted_run_restores_the_best_pass(self, test_logger, monkeypatch):
        monkeypatch.setattr(DEFAULTS, 'CONVERGENCE_TOLERANCE_K', 1e-9)
        params = PlanetParams.earthlike(revolution_period=DEFAULTS.EARTH_REVOLUTION_PERIOD)
        planet = PlanetGenerator({'seed': 7}, test_logger).generate(PlanetType.TERRESTRIAL, params, seed=42)
        report = planet.convergence_report
        assert report.state == ConvergenceState.EXHAUSTED
        assert planet.approximate
        kept = report.passes[report.kept_index]
        assert planet.albedo == pytest.approx(kept.albedo)
        assert abs(recomputed_delta(planet)) == pytest.approx(abs(kept.delta), abs=1e-6)
