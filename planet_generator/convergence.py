# planet_generator/convergence.py

"""
================================================================================
TEMPERATURE CONVERGENCE CONTROLLER
================================================================================
Greenhouse warming, ice and cloud albedo and volatile phase changes make the
surface temperature a non-invertible function of orbital distance. This
controller iterates: it places the planet (or re-tints its surface when the
orbit is fixed), regenerates the atmosphere when needed, measures the
resulting temperature and corrects, until it lands within tolerance or runs
out of passes.

Data Contract:
---------------
- Inputs:
    - A planet whose composition and hydrosphere are built and which has a
      star, an orbit and a temperature target (params surface temperature or
      habitability temperature bounds).
    - An AtmosphereSolver and a seeded np.random.Generator.
- Outputs:
    - A ConvergenceReport. The planet is left in the evaluated state with
      the smallest |delta| (its pass is report.kept_index), with
      planet.approximate set when the tolerance was not met.
- Invariants:
    - At most MAX_CONVERGENCE_PASSES passes; exhaustion is never an error.
    - A correction whose delta changes sign is damped by CONVERGENCE_DAMPING.
    - Guesses stay between the hottest guess known to land too cold and the
      coldest known to land too hot, above MIN_EFFECTIVE_TEMPERATURE_K. Orbits
      stay within MIN_ORBITAL_DISTANCE..MAX_ORBITAL_DISTANCE and albedos
      within [0, 1].
    - A same-sign delta that grows discards the atmosphere and retargets
      from the original estimate. This takes precedence over damping and
      does not reset the pass count.
================================================================================
"""

import enum
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from . import config as DEFAULTS
from . import substances
from . import thermal

logger = logging.getLogger(__name__)


class ConvergenceState(enum.Enum):
    INITIAL = "initial"
    COMPOSITION_BUILT = "composition_built"
    ATMOSPHERE_GENERATED = "atmosphere_generated"
    TEMPERATURE_EVALUATED = "temperature_evaluated"
    ADJUSTING = "adjusting"
    CONVERGED = "converged"
    EXHAUSTED = "exhausted"


# Legal transitions of the controller's state machine.
TRANSITIONS = {
    ConvergenceState.INITIAL: {ConvergenceState.COMPOSITION_BUILT},
    ConvergenceState.COMPOSITION_BUILT: {ConvergenceState.ATMOSPHERE_GENERATED},
    ConvergenceState.ATMOSPHERE_GENERATED: {ConvergenceState.TEMPERATURE_EVALUATED},
    ConvergenceState.TEMPERATURE_EVALUATED: {ConvergenceState.CONVERGED, ConvergenceState.ADJUSTING,
                                             ConvergenceState.EXHAUSTED},
    ConvergenceState.ADJUSTING: {ConvergenceState.ATMOSPHERE_GENERATED},
    ConvergenceState.CONVERGED: set(),
    ConvergenceState.EXHAUSTED: set(),
}


@dataclass
class ConvergencePass:
    index: int
    state: ConvergenceState
    delta: float            # K, target minus achieved
    adjustment: float       # K removed by damping
    distance: float         # m, semi-major axis used for the pass
    albedo: float
    discarded: bool = False


@dataclass
class ConvergenceReport:
    target: float
    state: ConvergenceState = ConvergenceState.INITIAL
    passes: list = field(default_factory=list)
    kept_index: Optional[int] = None

    @property
    def converged(self) -> bool:
        return self.state == ConvergenceState.CONVERGED

    @property
    def pass_count(self) -> int:
        return len(self.passes)

    @property
    def first_delta(self) -> Optional[float]:
        return self.passes[0].delta if self.passes else None

    @property
    def kept_delta(self) -> Optional[float]:
        """Delta of the pass whose state the planet was left in."""
        return self.passes[self.kept_index].delta if self.kept_index is not None else None


@dataclass
class PlanetSnapshot:
    """The parts of a planet a convergence pass changes."""
    index: int
    delta: float
    orbit: object
    albedo: float
    surface_albedo: float
    atmosphere: object
    hydrosphere: object

    @classmethod
    def capture(cls, planet, index: int, delta: float) -> "PlanetSnapshot":
        return cls(index, delta, planet.orbit, planet.albedo, planet.surface_albedo,
                   planet.atmosphere.copy(), planet.hydrosphere.copy())

    def restore(self, planet):
        planet.orbit = self.orbit
        planet.albedo = self.albedo
        planet.surface_albedo = self.surface_albedo
        planet.atmosphere = self.atmosphere.copy()
        planet.hydrosphere = self.hydrosphere.copy()
        planet.refresh_temperatures()


class ConvergenceController:
    """Drives a planet's surface temperature towards its target."""

    def __init__(self, atmosphere_solver, logger: logging.Logger = logger):
        self.atmosphere_solver = atmosphere_solver
        self.logger = logger
        self.max_passes = DEFAULTS.MAX_CONVERGENCE_PASSES
        self.tolerance = DEFAULTS.CONVERGENCE_TOLERANCE_K
        self.damping = DEFAULTS.CONVERGENCE_DAMPING

    @staticmethod
    def applies_to(planet) -> bool:
        """Only a lit planet with a temperature goal needs correcting."""
        if planet.star is None or planet.orbit is None:
            return False
        if planet.params.surface_temperature is not None:
            return True
        requirements = planet.requirements
        return requirements is not None and (requirements.min_temperature is not None
                                             or requirements.max_temperature is not None)

    def _advance(self, report: ConvergenceReport, state: ConvergenceState):
        if state not in TRANSITIONS[report.state]:
            raise RuntimeError(f"Illegal convergence transition {report.state.name} -> {state.name}")
        report.state = state

    def initial_greenhouse_effect(self, planet, total_effective_temperature: float) -> float:
        """A first guess at greenhouse warming, refined from params where possible."""
        params = planet.params
        if params.atmospheric_pressure is None or (params.water_vapor_ratio is None and params.water_ratio is None):
            return DEFAULTS.INITIAL_GREENHOUSE_GUESS_K
        pressure = params.atmospheric_pressure
        if pressure <= 0:
            return 0.0
        if params.water_vapor_ratio is not None:
            vapor_ratio = params.water_vapor_ratio
        else:
            vapor_ratio = (substances.get("H2O").vapor_pressure(total_effective_temperature) / pressure
                           * DEFAULTS.SATURATED_HUMIDITY_FACTOR)
        vapor_ratio = min(1.0, vapor_ratio)
        atmosphere_mass = thermal.FOUR_PI * planet.radius ** 2 * pressure * 1000 / planet.surface_gravity
        insolation = thermal.insolation_factor(atmosphere_mass, planet.mass)
        factor = thermal.greenhouse_factor(vapor_ratio, pressure)
        return thermal.greenhouse_effect(planet, insolation, factor)

    def temperature_delta(self, planet, target_equatorial: float, average_elevation: float) -> float:
        """Target minus achieved, for whichever constraint governs."""
        if planet.params.surface_temperature is not None:
            achieved = thermal.temperature_at_elevation(
                planet, thermal.average_surface_temperature(planet), average_elevation)
            return target_equatorial - achieved

        requirements = planet.requirements
        if requirements.min_temperature is not None:
            coolest = thermal.min_equator_temperature(planet)
            if coolest < requirements.min_temperature:
                goal = requirements.max_temperature if requirements.max_temperature is not None \
                    else requirements.min_temperature
                return goal - coolest
        if requirements.max_temperature is not None:
            warmest = thermal.max_polar_temperature(planet)
            if warmest > requirements.max_temperature:
                return requirements.max_temperature - warmest
        return 0.0

    def run(self, planet, rng: np.random.Generator) -> ConvergenceReport:
        target = planet.target_surface_temperature
        report = ConvergenceReport(target=target)
        self._advance(report, ConvergenceState.COMPOSITION_BUILT)

        # An average surface temperature corresponds to a warmer equator.
        target_equatorial = target * DEFAULTS.EQUATORIAL_TARGET_FACTOR
        average_elevation = planet.average_elevation
        total_effective = target_equatorial + average_elevation * thermal.lapse_rate_dry(planet.surface_gravity)
        floor = planet.internal_temperature + DEFAULTS.MIN_EFFECTIVE_TEMPERATURE_K
        target_effective = max(floor, total_effective - self.initial_greenhouse_effect(planet, total_effective))
        current = target_effective

        original_hydrosphere = planet.hydrosphere.copy()
        new_atmosphere = True
        # Effective temperatures known to land too cold (low) or too hot (high).
        low, high = floor, math.inf
        anchor = None
        previous = None
        closest = None
        for index in range(self.max_passes):
            placed = current
            self._place(planet, placed)
            planet.refresh_temperatures()

            # Undo runaway evaporation or freezing from the last pass.
            planet.hydrosphere = original_hydrosphere.copy()
            if new_atmosphere:
                self.atmosphere_solver.generate(planet, rng)
                new_atmosphere = False
            else:
                planet.atmosphere.refresh(planet)
                self.atmosphere_solver.hydrosphere_model.fraction(
                    planet.hydrosphere, planet, thermal.average_surface_temperature(planet))
            self._advance(report, ConvergenceState.ATMOSPHERE_GENERATED)
            self._advance(report, ConvergenceState.TEMPERATURE_EVALUATED)

            delta = self.temperature_delta(planet, target_equatorial, average_elevation)
            if closest is None or abs(delta) < abs(closest.delta):
                closest = PlanetSnapshot.capture(planet, index, delta)
            if delta > 0:
                low = max(low, placed)
            elif delta < 0:
                high = min(high, placed)

            adjustment = 0.0
            discarded = (previous is not None and (delta >= 0) == (previous >= 0)
                         and abs(delta) > abs(previous))
            if discarded:
                # Drifting the wrong way: start over from the first estimate
                # with a fresh atmosphere, which invalidates what was learned.
                new_atmosphere = True
                current = target_effective
                low, high = floor, math.inf
                anchor = None
            else:
                step = delta / self._gain(anchor, placed, delta)
                if previous is not None and np.sign(delta) != np.sign(previous):
                    adjustment = step * self.damping
                current = self._bracket(placed + step - adjustment, low, high)
                anchor = (placed, delta)
            previous = delta

            if abs(delta) <= self.tolerance:
                outcome = ConvergenceState.CONVERGED
            elif index == self.max_passes - 1:
                outcome = ConvergenceState.EXHAUSTED
            else:
                outcome = ConvergenceState.ADJUSTING
            record = ConvergencePass(index, outcome, delta, adjustment,
                                     planet.orbit.semi_major_axis, planet.albedo, discarded)
            report.passes.append(record)
            self.logger.debug(f"Convergence pass {index}: delta {delta:+.3f} K, adjustment {adjustment:+.3f} K, "
                              f"distance {record.distance:.4e} m, albedo {record.albedo:.4f}"
                              f"{' (discarded)' if discarded else ''}")
            self._advance(report, outcome)
            if outcome != ConvergenceState.ADJUSTING:
                break

        if closest.index != report.passes[-1].index:
            closest.restore(planet)
            self.logger.debug(f"Restored the state of pass {closest.index} (delta {closest.delta:+.3f} K).")
        report.kept_index = closest.index

        planet.approximate = not report.converged
        planet.convergence_report = report
        if report.converged:
            self.logger.info(f"Surface temperature converged in {report.pass_count} passes "
                             f"(delta {report.kept_delta:+.3f} K).")
        else:
            self.logger.warning(f"Surface temperature did not converge after {report.pass_count} passes; "
                                f"keeping pass {closest.index} (delta {report.kept_delta:+.3f} K).")
        return report

    @staticmethod
    def _gain(anchor, placed: float, delta: float) -> float:
        """
        Achieved kelvin per kelvin of effective temperature, estimated from
        the last two passes. Defaults to 1 until there are two.
        """
        if anchor is None or placed == anchor[0]:
            return 1.0
        gain = (anchor[1] - delta) / (placed - anchor[0])
        if not gain > 0:
            return 1.0
        return min(DEFAULTS.CONVERGENCE_MAX_GAIN, max(DEFAULTS.CONVERGENCE_MIN_GAIN, gain))

    @staticmethod
    def _bracket(proposed: float, low: float, high: float) -> float:
        """Keeps the next guess strictly between the known cold and hot guesses."""
        if low < proposed < high:
            return proposed
        if math.isinf(high):
            return low + abs(proposed - low)
        return (low + high) / 2

    def _place(self, planet, temperature: float):
        """Sets the free parameter for an effective blackbody temperature."""
        heating = max(temperature - planet.internal_temperature, DEFAULTS.MIN_EFFECTIVE_TEMPERATURE_K)
        if planet.params.revolution_period is not None:
            # The orbit is fixed, so tint the surface, keeping whatever ice
            # and cloud add on top of it.
            reflective_delta = planet.albedo - planet.surface_albedo
            surface_albedo = thermal.surface_albedo_for_temperature(planet, heating)
            planet.surface_albedo = min(1.0, max(0.0, surface_albedo))
            planet.albedo = min(1.0, max(0.0, planet.surface_albedo + reflective_delta))
            return
        orbit = planet.orbit
        distance = thermal.distance_for_temperature(planet, heating) / (1 + orbit.eccentricity ** 2 / 2)
        distance = min(DEFAULTS.MAX_ORBITAL_DISTANCE, max(DEFAULTS.MIN_ORBITAL_DISTANCE, distance))
        planet.orbit = orbit.recompute(distance)
