# planet_generator/generator.py

"""
================================================================================
CORE PLANET GENERATOR
================================================================================
This module contains the main PlanetGenerator class, which turns a planet type
and an optional wish list of parameters into a complete, internally
consistent planet.

Data Contract:
---------------
- Inputs (on initialization):
    - config (dict): A dictionary of generation parameters which can override
      the internal defaults. Expected keys include 'seed' and the seed offsets.
    - logger: A configured Python logging object for runtime messages.
- Outputs (from methods):
    - Planet instances with composition, hydrosphere and atmosphere built and,
      where a temperature target exists, converged.
- Side Effects: Logs messages using the provided logger.
- Invariants: Given the same seed, inputs and configuration, the output is
  deterministic.
================================================================================
"""

import logging
import math
import time

import numpy as np

from . import config as DEFAULTS
from .archetypes import PlanetType, rules_for
from .atmosphere import AtmosphereSolver
from .composition import CompositionBuilder
from .convergence import ConvergenceController
from .habitability import HUMAN, UninhabitabilityReason, is_habitable
from .hydrosphere import HydrosphereModel
from .orbit import SOLAR_MASS, SUN, Orbit
from .params import PlanetParams
from .planet import Planet

logger = logging.getLogger(__name__)

_MAX_SEED = 2 ** 31 - 1


class PlanetGenerator:
    """
    Generates planets. One generator may produce many planets; each gets its
    own seed, drawn from the master seed unless given.
    """
    def __init__(self, config: dict = None, logger: logging.Logger = logger):
        """
        Initializes the planet generator.

        Args:
            config (dict): User-defined parameters to override defaults.
            logger (logging.Logger): The logger instance for all output.
        """
        self.logger = logger
        self.user_config = config or {}
        self.logger.info("PlanetGenerator initializing...")

        # --- Consolidate Configuration ---
        self.settings = {
            'seed': self.user_config.get('seed', DEFAULTS.DEFAULT_SEED),
            'composition_seed_offset': self.user_config.get('composition_seed_offset', DEFAULTS.COMPOSITION_SEED_OFFSET),
            'atmosphere_seed_offset': self.user_config.get('atmosphere_seed_offset', DEFAULTS.ATMOSPHERE_SEED_OFFSET),
            'hydrosphere_seed_offset': self.user_config.get('hydrosphere_seed_offset', DEFAULTS.HYDROSPHERE_SEED_OFFSET),
            'orbit_seed_offset': self.user_config.get('orbit_seed_offset', DEFAULTS.ORBIT_SEED_OFFSET),
            'default_orbital_distance': self.user_config.get('default_orbital_distance', DEFAULTS.DEFAULT_ORBITAL_DISTANCE),
            'max_habitable_attempts': self.user_config.get('max_habitable_attempts', DEFAULTS.MAX_HABITABLE_ATTEMPTS),
            'raster_resolution': self.user_config.get('raster_resolution', DEFAULTS.DEFAULT_RASTER_RESOLUTION),
            'season_steps': self.user_config.get('season_steps', DEFAULTS.DEFAULT_SEASON_STEPS),
        }

        # --- Seeded master stream for per-planet seeds ---
        self._seed_stream = np.random.default_rng(self.settings['seed'])

        # --- Stage builders, sharing this generator's logger ---
        self.composition_builder = CompositionBuilder(self.logger)
        self.hydrosphere_model = HydrosphereModel(self.logger)
        self.atmosphere_solver = AtmosphereSolver(self.hydrosphere_model, self.logger)
        self.convergence_controller = ConvergenceController(self.atmosphere_solver, self.logger)

        self.logger.info(f"PlanetGenerator initialized with master seed {self.settings['seed']}.")

    def next_seed(self) -> int:
        return int(self._seed_stream.integers(0, _MAX_SEED))

    def generate(self, planet_type=PlanetType.TERRESTRIAL, params: PlanetParams = None, requirements=None,
                 star=SUN, orbit=None, name: str = None, seed: int = None) -> Planet:
        """
        Generates one planet.

        Args:
            planet_type (PlanetType | str): The kind of body to build.
            params (PlanetParams): Optional wish list; unset values are drawn.
            requirements (HabitabilityRequirements): Optional bounds to build
                the temperature, pressure and atmosphere towards.
            star: The star the planet orbits, or None for a starless body.
            orbit: An orbit to use as given, instead of generating one.
            name (str): Defaults to one derived from the seed.
            seed (int): Defaults to the next seed from the master stream.
        """
        start_time = time.perf_counter()
        rules = rules_for(planet_type)
        planet_type = PlanetType(planet_type)
        params = params or PlanetParams()
        if seed is None:
            seed = self.next_seed()

        # Independent sub-streams per stage.
        rng = np.random.default_rng(seed)
        composition_rng = np.random.default_rng(seed + self.settings['composition_seed_offset'])
        orbit_rng = np.random.default_rng(seed + self.settings['orbit_seed_offset'])
        hydrosphere_rng = np.random.default_rng(seed + self.settings['hydrosphere_seed_offset'])
        atmosphere_rng = np.random.default_rng(seed + self.settings['atmosphere_seed_offset'])

        planet = Planet(name=name or f"{planet_type.value}-{seed}", seed=seed, planet_type=planet_type,
                        params=params, requirements=requirements)
        planet.noise_seeds = tuple(int(s) for s in rng.integers(0, _MAX_SEED, size=DEFAULTS.NOISE_SEED_COUNT))
        self.logger.info(f"Generating {planet_type.value} planet '{planet.name}' (seed {seed})...")

        # --- Surface and interior heat ---
        if params.albedo is not None:
            planet.surface_albedo = min(1.0, max(0.0, params.albedo))
        else:
            planet.surface_albedo = rng.uniform(*rules.albedo_range)
        planet.albedo = planet.surface_albedo
        if rules.surface_temperature_range is not None:
            planet.internal_temperature = rng.uniform(*rules.surface_temperature_range)

        # --- Orbit ---
        planet.star = star
        planet.orbit = orbit if orbit is not None else self._generate_orbit(planet, orbit_rng)
        planet.refresh_temperatures()

        # --- Composition, then the rotation which depends on it ---
        self.composition_builder.build(planet, composition_rng)
        planet.rotational_period = self._rotational_period(planet, orbit_rng)
        planet.axial_tilt = self._axial_tilt(planet, orbit_rng)
        planet.refresh_temperatures()

        # --- Hydrosphere and magnetosphere ---
        planet.hydrosphere = self.hydrosphere_model.generate(planet, planet.target_surface_temperature,
                                                            hydrosphere_rng)
        planet.has_magnetosphere = self._has_magnetosphere(planet, rng)

        # --- Atmosphere, converged on the temperature target when there is one ---
        if ConvergenceController.applies_to(planet):
            self.convergence_controller.run(planet, atmosphere_rng)
        else:
            self.atmosphere_solver.generate(planet, atmosphere_rng)

        planet.is_inhospitable = star is not None and not star.is_hospitable

        elapsed = time.perf_counter() - start_time
        self.logger.info(f"Generated '{planet.name}' in {elapsed:.2f} seconds: "
                         f"mean surface temperature {planet.mean_surface_temperature:.1f} K, "
                         f"pressure {planet.atmosphere.pressure:.3f} kPa"
                         f"{' (approximate)' if planet.approximate else ''}.")
        return planet

    def generate_habitable(self, planet_type=PlanetType.TERRESTRIAL, params: PlanetParams = None,
                           requirements=HUMAN, star=SUN, orbit=None, name: str = None,
                           max_attempts: int = None) -> Planet:
        """
        Generates planets with fresh seeds until one meets the requirements.
        When none does within the attempt budget, the last one is returned.
        """
        max_attempts = max_attempts or self.settings['max_habitable_attempts']
        planet = None
        reason = UninhabitabilityReason.NONE
        for attempt in range(1, max_attempts + 1):
            planet = self.generate(planet_type, params, requirements, star, orbit, name)
            reason = is_habitable(planet, requirements)
            if reason == UninhabitabilityReason.NONE:
                self.logger.info(f"Found a habitable planet after {attempt} attempt(s).")
                return planet
            self.logger.debug(f"Attempt {attempt} is uninhabitable: {reason!r}")
        self.logger.warning(f"No habitable planet after {max_attempts} attempts; "
                            f"returning the last one ({reason!r}).")
        return planet

    # --- Orbit & rotation ---

    def _eccentricity(self, planet, rng: np.random.Generator) -> float:
        if planet.params.eccentricity is not None:
            return min(max(planet.params.eccentricity, 0.0), DEFAULTS.MAX_ECCENTRICITY)
        if planet.planet_type == PlanetType.COMET:
            return rng.uniform(0.0, DEFAULTS.MAX_ECCENTRICITY)
        if planet.rules.is_small_body:
            return rng.uniform(0.0, DEFAULTS.ASTEROID_MAX_ECCENTRICITY)
        return min(abs(rng.normal(0.0, DEFAULTS.ECCENTRICITY_SIGMA)), DEFAULTS.MAX_ECCENTRICITY)

    def _generate_orbit(self, planet, rng: np.random.Generator):
        star = planet.star
        if star is None:
            return None
        eccentricity = self._eccentricity(planet, rng)
        orbited_mass = getattr(star, 'mass', SOLAR_MASS)
        true_anomaly = rng.uniform(0.0, 2 * math.pi)
        if planet.params.revolution_period is not None:
            orbit = Orbit.for_period(planet.params.revolution_period, orbited_mass, eccentricity)
            return Orbit(orbit.semi_major_axis, eccentricity, orbited_mass, true_anomaly)
        return Orbit(self.settings['default_orbital_distance'], eccentricity, orbited_mass, true_anomaly)

    def _rotational_period(self, planet, rng: np.random.Generator) -> float:
        if planet.params.rotational_period is not None:
            return max(0.0, planet.params.rotational_period)

        orbit = planet.orbit
        if orbit is not None:
            # Bodies close enough to what they orbit for long enough are tidally locked.
            years = max(0.0, rng.logistic(0.0, 1.0)) * DEFAULTS.TIDAL_REFERENCE_AGE
            rigidity = DEFAULTS.COMET_RIGIDITY if planet.planet_type == PlanetType.COMET else DEFAULTS.RIGIDITY
            lock_distance = (years / DEFAULTS.TIDAL_LOCK_DIVISOR * planet.mass * orbit.orbited_mass ** 2
                             / (planet.radius * rigidity)) ** (1 / 6)
            if lock_distance >= orbit.semi_major_axis:
                self.logger.debug(f"'{planet.name}' is tidally locked.")
                return 2 * math.pi * math.sqrt(orbit.semi_major_axis ** 3 / (
                    DEFAULTS.GRAVITATIONAL_CONSTANT * (orbit.orbited_mass + planet.mass)))

        terrestrial = planet.rules.is_terrestrial
        if rng.uniform() <= DEFAULTS.EXTREME_ROTATION_CHANCE:
            low, high = DEFAULTS.TERRESTRIAL_EXTREME_ROTATION_RANGE if terrestrial else DEFAULTS.EXTREME_ROTATION_RANGE
        else:
            low, high = DEFAULTS.TERRESTRIAL_ROTATION_RANGE if terrestrial else DEFAULTS.ROTATION_RANGE
        return rng.uniform(low, high)

    def _axial_tilt(self, planet, rng: np.random.Generator) -> float:
        if planet.params.axial_tilt is not None:
            return planet.params.axial_tilt % math.pi
        if rng.uniform() <= DEFAULTS.EXTREME_TILT_CHANCE:
            return rng.uniform(math.pi / 4, math.pi)
        return rng.uniform(0.0, math.pi / 4)

    def _has_magnetosphere(self, planet, rng: np.random.Generator) -> bool:
        if planet.rotational_period <= 0:
            return True
        factor = DEFAULTS.MAGNETOSPHERE_TYPE_FACTORS.get(planet.planet_type.value, 1.0)
        chance = planet.mass * DEFAULTS.MAGNETOSPHERE_FACTOR / planet.rotational_period * factor
        return rng.uniform() <= chance
