# planet_generator/atmosphere.py

"""
================================================================================
ATMOSPHERE SOLVER
================================================================================
Builds a planet's atmosphere from its archetype recipe, then brings its
volatiles into phase equilibrium with the surface: gases condense into (or
evaporate out of) the hydrosphere, humid worlds lose their CO2 to the
carbon-silicate cycle, and ice and cloud cover feed back into the albedo.

Data Contract:
---------------
- Inputs:
    - A planet (see planet.py) with its hydrosphere and blackbody
      temperatures already set.
    - A seeded np.random.Generator.
- Outputs:
    - An Atmosphere, also assigned to planet.atmosphere. The planet's
      hydrosphere and albedo may be updated in place.
- Invariants:
    - Composition fractions sum to 1 (+/- 1e-4) whenever the atmosphere is
      non-empty.
    - Every derived value (mass, greenhouse factor, scale height, height,
      density, precipitation) is recomputed by refresh() after any change.
    - The albedo feedback loop runs at most MAX_EQUILIBRATION_PASSES times.
================================================================================
"""

import copy
import logging
import math
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from . import config as DEFAULTS
from . import substances
from . import thermal
from .archetypes import PlanetType
from .hydrosphere import HydrosphereModel
from .substances import Phase

logger = logging.getLogger(__name__)


@dataclass
class Atmosphere:
    pressure: float = 0.0                       # kPa at the surface
    composition: dict = field(default_factory=dict)
    # Derived values, set by refresh().
    mass: float = 0.0                           # kg
    greenhouse_factor: float = 1.0
    scale_height: float = 0.0                   # m
    height: float = 0.0                         # m
    density: float = 0.0                        # kg/m³ at the surface
    water_ratio: float = 0.0
    average_precipitation: float = 0.0          # mm/hr
    max_precipitation: float = 0.0              # mm/hr
    max_snowfall: float = 0.0                   # mm/hr

    @property
    def is_empty(self) -> bool:
        return self.pressure <= 0 or not self.composition

    def proportion(self, *keys) -> float:
        return sum(self.composition.get(k, 0.0) for k in keys)

    def contains(self, key: str) -> bool:
        return self.composition.get(key, 0.0) > 0

    def set_proportion(self, key: str, value: float):
        """Sets one constituent, rescaling the others to fill the remainder."""
        value = min(1.0, max(0.0, value))
        others = {k: v for k, v in self.composition.items() if k != key}
        total = sum(others.values())
        if total <= 0:
            self.composition = {key: 1.0} if value > 0 else {}
            return
        updated = {k: v * (1 - value) / total for k, v in others.items()}
        updated[key] = value
        self.composition = substances.normalize(updated)

    def remove(self, key: str):
        self.composition = substances.normalize(
            {k: v for k, v in self.composition.items() if k != key})

    def breathable_composition(self) -> dict:
        """The tropospheric mix, without gases held in the upper atmosphere."""
        return substances.normalize({k: v for k, v in self.composition.items()
                                     if k not in substances.STRATOSPHERIC_GASES})

    def condensed_fraction(self, temperature: float, pressure: float) -> float:
        """Fraction of the air which is liquid or solid at the given conditions."""
        return sum(v for k, v in self.composition.items()
                   if substances.get(k).phase(temperature, pressure) != Phase.GAS)

    def copy(self) -> "Atmosphere":
        return copy.deepcopy(self)

    def refresh(self, planet):
        """Recomputes every derived value for the planet's current state."""
        if self.is_empty:
            self.mass = self.scale_height = self.height = self.density = 0.0
            self.water_ratio = 0.0
            self.greenhouse_factor = 1.0
            self.average_precipitation = self.max_precipitation = self.max_snowfall = 0.0
            return

        gravity = planet.surface_gravity
        pressure_pa = self.pressure * 1000
        self.mass = thermal.FOUR_PI * planet.radius ** 2 * pressure_pa / gravity
        self.greenhouse_factor = thermal.greenhouse_factor(
            substances.greenhouse_potential(self.composition), self.pressure)
        self.water_ratio = self.proportion("H2O")

        blackbody = max(planet.average_blackbody_temperature, 1e-3)
        self.scale_height = pressure_pa / gravity / (pressure_pa / (DEFAULTS.R_SPECIFIC_DRY_AIR * blackbody))

        insolation = thermal.insolation_factor(self.mass, planet.mass)
        surface_temperature = max(blackbody * insolation
                                  + max(0.0, blackbody * insolation * self.greenhouse_factor - blackbody), 1e-3)
        self.density = pressure_pa / (DEFAULTS.R_SPECIFIC_DRY_AIR * surface_temperature)
        self.height = max(0.0, math.log(DEFAULTS.ATMOSPHERE_TOP_PRESSURE / self.pressure)
                          * DEFAULTS.GAS_CONSTANT * surface_temperature / (-gravity * DEFAULTS.MOLAR_MASS_AIR))

        wetness = self.water_ratio * self.mass / DEFAULTS.WETNESS_MASS_DIVISOR
        self.average_precipitation = (wetness * self.density * self.height / DEFAULTS.STANDARD_HEIGHT_DENSITY
                                      * DEFAULTS.AVERAGE_PRECIPITATION_SCALE)
        self.max_precipitation = self.average_precipitation * DEFAULTS.MAX_PRECIPITATION_FACTOR
        self.max_snowfall = self.max_precipitation * DEFAULTS.SNOW_TO_RAIN_RATIO

    @classmethod
    def empty(cls) -> "Atmosphere":
        return cls()


def scaled_requirement(minimum: float, maximum: Optional[float], pressure: float):
    """Converts a proportion required at 1 atm to the same partial pressure at `pressure`."""
    if pressure <= 0:
        return minimum, maximum
    scale = DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE / pressure
    return minimum * scale, None if maximum is None else maximum * scale


class AtmosphereSolver:
    """Generates atmospheres and equilibrates them with the surface."""

    def __init__(self, hydrosphere_model: Optional[HydrosphereModel] = None, logger: logging.Logger = logger):
        self.logger = logger
        self.hydrosphere_model = hydrosphere_model or HydrosphereModel(logger)

    # --- Generation ---

    def generate(self, planet, rng: np.random.Generator) -> Atmosphere:
        rules = planet.rules
        if rules.is_small_body:
            atmosphere = self._small_body_atmosphere(rng)
        elif rules.is_giant:
            atmosphere = self._giant_atmosphere(rng)
        elif not rules.is_terrestrial:
            atmosphere = self._dwarf_atmosphere(planet, rng)
        elif planet.average_blackbody_temperature >= self.thin_atmosphere_temperature(planet):
            atmosphere = self._trace_atmosphere(planet, rng)
        else:
            atmosphere = self._thick_atmosphere(planet, rng)

        planet.atmosphere = atmosphere
        atmosphere.refresh(planet)

        if rules.atmosphere == "dwarf":
            # Frost deposited from the air brightens the surface.
            temperature = planet.crust_temperature
            ice = atmosphere.proportion(*[k for k in atmosphere.composition
                                          if substances.get(k).phase(temperature, atmosphere.pressure) == Phase.SOLID])
            self._apply_reflectivity(planet, ice)
        if not rules.is_terrestrial:
            return atmosphere

        adjusted_pressure = atmosphere.pressure
        hydrosphere = planet.hydrosphere
        if any(hydrosphere.contains(k) for k in substances.WATER_KEYS) or atmosphere.contains("H2O"):
            # Water first, at the intended temperature, to settle how much
            # surface water survives and whether it draws down the CO2.
            adjusted_pressure = self.phase_mix(planet, "H2O", planet.target_surface_temperature, adjusted_pressure, rng)
            self.hydrosphere_model.fraction(hydrosphere, planet, thermal.average_surface_temperature(planet))
            adjusted_pressure = self.phase_mix(
                planet, "H2O", thermal.average_surface_temperature(planet), adjusted_pressure, rng)

        self.enforce_requirements(planet)
        adjusted_pressure = self.equilibrate(planet, rng, adjusted_pressure)
        self.hydrosphere_model.fraction(hydrosphere, planet, thermal.average_surface_temperature(planet))

        if not planet.params.is_set("atmospheric_pressure") and planet.requirements is None:
            atmosphere.pressure = max(0.0, adjusted_pressure)
            if atmosphere.pressure <= 0:
                atmosphere.composition = {}
            atmosphere.refresh(planet)

        self.logger.debug(f"Atmosphere: {atmosphere.pressure:.3f} kPa, greenhouse factor "
                          f"{atmosphere.greenhouse_factor:.4f}, {len(atmosphere.composition)} constituents.")
        return atmosphere

    def thin_atmosphere_temperature(self, planet) -> float:
        """Blackbody temperature above which a rocky world keeps only a trace atmosphere."""
        return (2 * DEFAULTS.GRAVITATIONAL_CONSTANT * planet.mass
                * DEFAULTS.THIN_ATMOSPHERE_ESCAPE_FACTOR / planet.radius)

    def _thick_pressure(self, planet, rng: np.random.Generator) -> float:
        params = planet.params
        if params.atmospheric_pressure is not None:
            return max(0.0, params.atmospheric_pressure)
        if params.earthlike_atmosphere:
            return DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE
        requirements = planet.requirements
        if requirements is not None and (requirements.min_pressure is not None
                                         or requirements.max_pressure is not None):
            if requirements.min_pressure is None:
                return 0.0
            if requirements.max_pressure is None:
                # Half-normal above the minimum.
                return requirements.min_pressure + abs(rng.normal(0.0, requirements.min_pressure / 3))
            return rng.uniform(requirements.min_pressure, requirements.max_pressure)

        # Light worlds without a magnetosphere lose most of their air.
        if planet.mass >= DEFAULTS.MAGNETOSPHERE_FREE_MASS or planet.has_magnetosphere:
            mean, sigma, low, high = (DEFAULTS.ATMOSPHERE_MASS_DIVISOR_MEAN, DEFAULTS.ATMOSPHERE_MASS_DIVISOR_SIGMA,
                                      DEFAULTS.ATMOSPHERE_MASS_DIVISOR_MIN, DEFAULTS.ATMOSPHERE_MASS_DIVISOR_MAX)
        else:
            mean, sigma, low, high = DEFAULTS.THIN_ATMOSPHERE_MASS_DIVISOR
        divisor = float(np.clip(rng.normal(mean, sigma), low, high))
        return (planet.mass / divisor) * planet.surface_gravity / (1000 * thermal.FOUR_PI * planet.radius ** 2)

    def _noble_split(self, n2: float, rng: np.random.Generator, ranges) -> dict:
        """Carves noble gases out of the nitrogen share."""
        nobles = {}
        for key, (low, high) in zip(substances.NOBLE_GASES, ranges):
            value = max(0.0, n2 * rng.uniform(low, high))
            nobles[key] = value
            n2 -= value
        nobles["N2"] = n2
        return nobles

    def _thick_atmosphere(self, planet, rng: np.random.Generator) -> Atmosphere:
        pressure = self._thick_pressure(planet, rng)
        if planet.params.earthlike_atmosphere:
            composition = {
                "H2": 3.8e-8, "He": 7.24e-6, "CH4": 2.9e-6, "CO": 2.5e-7, "SO2": 1e-7,
                "CO2": 5.3e-4, "H2O": DEFAULTS.EARTH_WATER_VAPOR_RATIO, "O2": 0.23133,
                "Ar": 1.288e-3, "Kr": 3.3e-6, "Xe": 8.7e-8, "Ne": 1.267e-5,
            }
            composition["O3"] = composition["O2"] * 4.5e-5
            composition["N2"] = 1 - sum(composition.values())
            return Atmosphere(pressure, substances.normalize(composition))

        h = rng.uniform(1e-8, 2e-7)
        he = rng.uniform(2.6e-7, 1e-5)
        # Each has an even chance of being absent.
        traces = {key: max(0.0, rng.uniform(-0.5, 0.5)) for key in ("CH4", "CO", "SO2")}
        trace_total = sum(traces.values())
        trace = rng.uniform(1e-6, 2.5e-4) if trace_total > 0 else 0.0
        if trace_total > 0:
            traces = {k: v * trace / trace_total for k, v in traces.items()}

        # CO2 makes up the bulk until water draws it down.
        co2 = rng.uniform(0.97, 0.99) - trace

        hydrosphere = planet.hydrosphere
        surface_water = any(hydrosphere.contains(k) for k in substances.WATER_KEYS)
        water_vapor = 0.0
        if not planet.rules.waterless and not surface_water:
            water_vapor = max(0.0, rng.uniform(-0.05, 0.001))
        o2 = 0.0
        if planet.planet_type != PlanetType.CARBON:
            if water_vapor > 0:
                o2 = water_vapor * DEFAULTS.WATER_OXYGEN_RATIO
            elif surface_water:
                o2 = rng.uniform(0.0, 0.002)

        n2 = 1 - (h + he + co2 + water_vapor + o2 + trace)
        composition = {"H2": h, "He": he, "CO2": co2, "H2O": water_vapor, "O2": o2, **traces}
        composition.update(self._noble_split(
            n2, rng, ((-0.02, 0.04), (-2.5e-4, 5e-4), (-1.8e-5, 3.5e-5), (-1.8e-5, 3.5e-5))))
        return Atmosphere(pressure, substances.normalize(composition))

    def _trace_atmosphere(self, planet, rng: np.random.Generator) -> Atmosphere:
        h = rng.uniform(5e-8, 2e-7)
        he = rng.uniform(2.6e-7, 1e-5)
        gases = {key: max(0.0, rng.uniform(-0.5, 0.5)) for key in ("CH4", "CO", "SO2", "N2")}
        n2 = gases.pop("N2")
        if n2 > 0:
            nobles = self._noble_split(n2, rng, ((-0.02, 0.04),) * 3)
            nobles.pop("Ne", None)
            gases.update(nobles)
        # Carbon monoxide implies some carbon dioxide.
        gases["CO2"] = rng.uniform(0.0, 0.5) if gases["CO"] > 0 else max(0.0, rng.uniform(-0.5, 0.5))

        water_vapor = 0.0
        if not planet.rules.waterless and not any(planet.hydrosphere.contains(k) for k in substances.WATER_KEYS):
            water_vapor = max(0.0, rng.uniform(-0.05, 0.001))
        gases["H2O"] = water_vapor
        if planet.planet_type != PlanetType.CARBON:
            gases["O2"] = (water_vapor * DEFAULTS.WATER_OXYGEN_RATIO if water_vapor > 0
                           else max(0.0, rng.uniform(-0.05, 0.5)))

        total = sum(gases.values())
        if total <= 0:
            # Hydrogen and helium alone escape entirely.
            self.logger.debug("Trace atmosphere lost to escape.")
            return Atmosphere.empty()
        ratio = (1 - h - he) / total
        composition = {k: v * ratio for k, v in gases.items()}
        composition.update({"H2": h, "He": he})
        return Atmosphere(rng.uniform(0.0, DEFAULTS.TRACE_MAX_ATMOSPHERIC_PRESSURE), substances.normalize(composition))

    def _giant_atmosphere(self, rng: np.random.Generator) -> Atmosphere:
        trace = rng.uniform(0.0, 0.025)
        h = rng.uniform(0.75, 0.97)
        he = 1 - h - trace
        ch4 = rng.uniform() * trace
        trace -= ch4
        shares = {
            "C2H6": max(0.0, rng.uniform(-0.5, 0.5)),
            "NH3": max(0.0, rng.uniform(-0.5, 0.5)),
            "H2O": max(0.0, rng.uniform(-0.5, 0.5)),
            "NH4SH": rng.uniform(),
        }
        share_total = sum(shares.values())
        composition = {"H2": h, "He": he, "CH4": ch4}
        if share_total > 0:
            composition.update({k: v * trace / share_total for k, v in shares.items()})
        return Atmosphere(DEFAULTS.GIANT_ATMOSPHERIC_PRESSURE, substances.normalize(composition))

    def _small_body_atmosphere(self, rng: np.random.Generator) -> Atmosphere:
        """A thin coma of sublimated ices and dust."""
        water = rng.uniform(0.75, 0.9)
        co = rng.uniform(0.05, 0.15)
        dust = 1.0 - water - co
        if dust < 0:
            water -= 0.1
            dust += 0.1
        composition = {"H2O": water, "CO": co}
        for key, high in (("CO2", 0.01), ("NH3", 0.01), ("CH4", 0.01), ("H2S", 0.01), ("SO2", 0.001)):
            composition[key] = rng.uniform(0.0, high)
            dust -= composition[key]
        composition["dust"] = max(0.0, dust)
        return Atmosphere(DEFAULTS.SMALL_BODY_ATMOSPHERIC_PRESSURE, substances.normalize(composition))

    def _dwarf_atmosphere(self, planet, rng: np.random.Generator) -> Atmosphere:
        """Sublimated crust ices, if the crust holds any."""
        crust = planet.crust_composition
        ices = {"H2O": crust.get("water_ice", 0.0)}
        ices.update({key: crust.get(key, 0.0) for key in ("N2", "CH4", "CO", "CO2", "NH3")})
        composition = substances.normalize(ices)
        if not composition:
            return Atmosphere.empty()
        return Atmosphere(rng.uniform(0.0, DEFAULTS.DWARF_MAX_ATMOSPHERIC_PRESSURE), composition)

    # --- Requirements ---

    def enforce_requirements(self, planet) -> bool:
        """
        Moves every gas outside a required range to the middle of that range
        (or its minimum when open-ended). Returns whether anything changed.
        """
        atmosphere = planet.atmosphere
        requirements = list(planet.params.atmospheric_requirements)
        if planet.requirements is not None:
            requirements = [(r.key, r.minimum, r.maximum) for r in planet.requirements.atmospheric_requirements] \
                + requirements
        modified = False
        for key, minimum, maximum in requirements:
            minimum, maximum = scaled_requirement(minimum, maximum, atmosphere.pressure)
            value = atmosphere.proportion(key)
            if value < minimum or (maximum is not None and value > maximum):
                atmosphere.set_proportion(key, (minimum + maximum) / 2 if maximum is not None else minimum)
                modified = True
        if modified:
            self.logger.debug("Atmosphere adjusted to meet gas requirements.")
            atmosphere.refresh(planet)
        return modified

    # --- Phase equilibrium ---

    def phase_mix(self, planet, key: str, temperature: float, adjusted_pressure: float,
                  rng: np.random.Generator) -> float:
        """
        Condenses or evaporates one volatile at the given surface temperature.
        Returns the adjusted surface pressure.
        """
        atmosphere, hydrosphere = planet.atmosphere, planet.hydrosphere
        is_water = key == "H2O"
        hydro = hydrosphere.proportion(*substances.WATER_KEYS) if is_water else hydrosphere.proportion(key)
        vapor = atmosphere.proportion(key)
        substance = substances.get(key)
        vapor_pressure = substance.vapor_pressure(temperature)

        if temperature < substance.antoine_min or (
                temperature <= substance.antoine_max and atmosphere.pressure > vapor_pressure):
            adjusted_pressure = self._condense(planet, key, temperature, hydro, vapor, vapor_pressure,
                                               adjusted_pressure)
        elif hydro > 0:
            adjusted_pressure = self._evaporate(planet, key, hydro, vapor, adjusted_pressure, rng)

        if is_water and not planet.params.earthlike_atmosphere:
            self._reduce_co2(planet, vapor_pressure, rng)
        atmosphere.refresh(planet)
        return adjusted_pressure

    def _condense(self, planet, key, temperature, hydro, vapor, vapor_pressure, adjusted_pressure) -> float:
        atmosphere = planet.atmosphere
        previous_mass = atmosphere.mass

        if temperature < substances.get(key).melting_point:
            # Frozen out entirely.
            atmosphere.remove(key)
            if not atmosphere.composition:
                adjusted_pressure = 0.0
            else:
                adjusted_pressure -= adjusted_pressure * vapor
            new_vapor = 0.0
        else:
            if key == "H2O" and planet.params.water_vapor_ratio is not None:
                new_vapor = planet.params.water_vapor_ratio
            else:
                # Saturation, averaged over the column.
                pressure_ratio = min(1.0, max(0.0, vapor_pressure / atmosphere.pressure))
                new_vapor = (hydro + vapor) * pressure_ratio * DEFAULTS.SATURATED_HUMIDITY_FACTOR
            previous, current = vapor, new_vapor
            if new_vapor > 0:
                atmosphere.set_proportion(key, new_vapor)
                if (key == "H2O" and not planet.params.earthlike_atmosphere
                        and planet.planet_type != PlanetType.CARBON):
                    o2 = atmosphere.proportion("O2")
                    previous += o2
                    o2 = max(o2, new_vapor * DEFAULTS.WATER_OXYGEN_RATIO)
                    current += o2
                    atmosphere.set_proportion("O2", o2)
            else:
                atmosphere.remove(key)
            adjusted_pressure += adjusted_pressure * (current - previous)

        condensed = (vapor - new_vapor) * previous_mass
        if condensed > 0:
            planet.hydrosphere.add(key, condensed)
        return adjusted_pressure

    def _evaporate(self, planet, key, hydro, vapor, adjusted_pressure, rng: np.random.Generator) -> float:
        atmosphere, hydrosphere = planet.atmosphere, planet.hydrosphere
        ratio = 0.0
        if atmosphere.mass > 0:
            ratio = min(1.0, hydrosphere.mass / atmosphere.mass)
        gas = hydro * ratio
        previous = vapor

        if key == "H2O":
            hydrosphere.remove(*substances.WATER_KEYS)
            # Photodissociation leaves only a trace of the vapor.
            water_vapor = min(gas, rng.uniform(0.0, DEFAULTS.MAX_EVAPORATED_WATER_VAPOR))
            previous += atmosphere.proportion("O2")
            o2 = water_vapor * DEFAULTS.WATER_OXYGEN_RATIO
            gas = water_vapor + o2
            atmosphere.set_proportion("H2O", water_vapor)
            if planet.planet_type != PlanetType.CARBON:
                atmosphere.set_proportion("O2", o2)
        else:
            hydrosphere.remove(key)
            atmosphere.set_proportion(key, gas)

        if hydrosphere.is_empty:
            hydrosphere.empty()
        return adjusted_pressure + adjusted_pressure * (gas - previous)

    def _reduce_co2(self, planet, vapor_pressure: float, rng: np.random.Generator):
        """Humid air draws CO2 down to a trace gas (carbon-silicate cycle)."""
        atmosphere = planet.atmosphere
        if atmosphere.proportion("H2O") * atmosphere.pressure < DEFAULTS.CO2_REDUCTION_HUMIDITY * vapor_pressure:
            return
        co2 = atmosphere.proportion("CO2")
        if co2 < DEFAULTS.CO2_TRACE_THRESHOLD:
            return

        reduced = rng.uniform(*DEFAULTS.CO2_REDUCED_RANGE)
        n2 = atmosphere.proportion("N2") + co2 - reduced
        composition = dict(atmosphere.composition)
        composition["CO2"] = reduced
        for key, (low, high) in zip(substances.NOBLE_GASES,
                                    ((-0.02, 0.04), (-2.5e-4, 5e-4), (-1.8e-5, 3.5e-5), (-1.8e-5, 3.5e-5))):
            value = max(composition.get(key, 0.0), n2 * rng.uniform(low, high))
            n2 -= value - composition.get(key, 0.0)
            composition[key] = value
        composition["N2"] = max(0.0, n2)
        atmosphere.composition = substances.normalize(composition)
        self.logger.debug(f"CO2 drawn down to {reduced:.2e} by surface water.")

    def equilibrate(self, planet, rng: np.random.Generator, adjusted_pressure: Optional[float] = None) -> float:
        """
        Brings every condensable volatile into phase equilibrium at the
        average surface temperature, then applies ice and cloud albedo.
        Repeats while the albedo shifts the temperature by more than the
        threshold, up to MAX_EQUILIBRATION_PASSES. Returns the adjusted
        surface pressure.
        """
        atmosphere, hydrosphere = planet.atmosphere, planet.hydrosphere
        if adjusted_pressure is None:
            adjusted_pressure = atmosphere.pressure

        for counter in range(DEFAULTS.MAX_EQUILIBRATION_PASSES + 1):
            temperature = thermal.average_surface_temperature(planet)
            for key in substances.CONDENSABLE_VOLATILES:
                adjusted_pressure = self.phase_mix(planet, key, temperature, adjusted_pressure, rng)
            # Water already had its first pass during generation.
            if counter > 0 and (any(hydrosphere.contains(k) for k in substances.WATER_KEYS)
                                or atmosphere.contains("H2O")):
                adjusted_pressure = self.phase_mix(planet, "H2O", temperature, adjusted_pressure, rng)

            surface = hydrosphere.ice_fraction(temperature, adjusted_pressure)
            cloud = 0.0
            if not atmosphere.is_empty:
                cloud = (atmosphere.pressure * atmosphere.condensed_fraction(temperature, adjusted_pressure)
                         / DEFAULTS.CLOUD_COVER_DIVISOR)
            if not self._apply_reflectivity(planet, max(surface, cloud)):
                break
            if abs(temperature - thermal.average_surface_temperature(planet)) <= DEFAULTS.EQUILIBRATION_THRESHOLD_K:
                break
            self.logger.debug(f"Equilibration pass {counter + 1}: albedo now {planet.albedo:.3f}.")
        return adjusted_pressure

    def _apply_reflectivity(self, planet, reflective: float) -> bool:
        """
        Applies ice and cloud reflectivity. With a fixed total albedo the
        surface albedo is solved for instead. Returns True when the total
        albedo (and so the temperature) may have changed.
        """
        reflective = min(1.0, max(0.0, reflective))
        if planet.params.albedo is not None:
            if reflective < 1:
                planet.surface_albedo = min(1.0, max(0.0, (planet.albedo - DEFAULTS.REFLECTIVE_SURFACE_ALBEDO
                                                           * reflective) / (1 - reflective)))
            return False
        planet.albedo = min(1.0, max(0.0, planet.surface_albedo * (1 - reflective)
                                     + DEFAULTS.REFLECTIVE_SURFACE_ALBEDO * reflective))
        planet.refresh_temperatures()
        if planet.atmosphere is not None:
            planet.atmosphere.refresh(planet)
        return True
