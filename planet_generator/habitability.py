# planet_generator/habitability.py

"""
================================================================================
HABITABILITY
================================================================================
Requirements a world must meet to be habitable, and the pure query which
reports every reason a planet falls short of them.

Data Contract:
---------------
- Inputs: a generated planet and a HabitabilityRequirements value.
- Outputs: an UninhabitabilityReason bit set; NONE means habitable.
- Invariants:
    - Gas requirements are expressed as proportions at one standard
      atmosphere and are scaled to the same partial pressure at the planet's
      surface pressure before comparison.
- Side Effects: None.
================================================================================
"""

import enum
from dataclasses import dataclass
from typing import Optional

from . import config as DEFAULTS
from . import substances
from . import thermal
from .substances import Phase


class UninhabitabilityReason(enum.IntFlag):
    NONE = 0
    INHOSPITABLE = 1
    NO_WATER = 2
    UNBREATHABLE_ATMOSPHERE = 4
    TOO_COLD = 8
    TOO_HOT = 16
    LOW_PRESSURE = 32
    HIGH_PRESSURE = 64
    LOW_GRAVITY = 128
    HIGH_GRAVITY = 256


@dataclass(frozen=True)
class SubstanceRequirement:
    key: str
    minimum: float = 0.0
    maximum: Optional[float] = None

    def is_met(self, proportion: float, pressure: float) -> bool:
        scale = DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE / pressure if pressure > 0 else 1.0
        if proportion < self.minimum * scale:
            return False
        return self.maximum is None or proportion <= self.maximum * scale


@dataclass(frozen=True)
class HabitabilityRequirements:
    min_temperature: Optional[float] = None     # K
    max_temperature: Optional[float] = None     # K
    min_pressure: Optional[float] = None        # kPa
    max_pressure: Optional[float] = None        # kPa
    min_gravity: Optional[float] = None         # m/s²
    max_gravity: Optional[float] = None         # m/s²
    require_liquid_water: bool = False
    atmospheric_requirements: tuple = ()

    @property
    def target_temperature(self) -> Optional[float]:
        """Midpoint of the temperature range, or its minimum when open-ended."""
        if self.min_temperature is None:
            return None
        if self.max_temperature is None:
            return self.min_temperature
        return (self.min_temperature + self.max_temperature) / 2


HUMAN = HabitabilityRequirements(
    min_temperature=236.0,
    max_temperature=308.0,
    min_pressure=6.18,
    max_pressure=4980.0,
    max_gravity=14.7,
    require_liquid_water=True,
    atmospheric_requirements=(
        SubstanceRequirement("O2", 0.07, 0.53),
        SubstanceRequirement("NH3", 0.0, 5e-5),
        SubstanceRequirement("NH4SH", 0.0, 1e-6),
        SubstanceRequirement("CO", 0.0, 5e-5),
        SubstanceRequirement("CO2", 0.0, 0.005),
        SubstanceRequirement("H2S", 0.0, 0.0),
        SubstanceRequirement("CH4", 0.0, 0.001),
        SubstanceRequirement("O3", 0.0, 1e-7),
        SubstanceRequirement("SO2", 0.0, 2e-6),
    ),
)


def has_liquid_water(planet) -> bool:
    """Liquid water anywhere on the surface, judged at the extremes and the average."""
    hydrosphere, atmosphere = planet.hydrosphere, planet.atmosphere
    if hydrosphere is None or hydrosphere.is_empty:
        return False
    pressure = 0.0 if atmosphere is None else atmosphere.pressure
    temperatures = (thermal.max_surface_temperature(planet),
                    thermal.min_surface_temperature(planet),
                    thermal.average_surface_temperature(planet))
    return any(hydrosphere.contains_phase(key, Phase.LIQUID, temperature, pressure)
               for temperature in temperatures for key in substances.WATER_KEYS)


def is_breathable(atmosphere, requirements) -> bool:
    if not requirements:
        return True
    if atmosphere is None or atmosphere.is_empty:
        return False
    # Judged on the air at ground level.
    composition = atmosphere.breathable_composition()
    return all(r.is_met(composition.get(r.key, 0.0), atmosphere.pressure) for r in requirements)


def is_habitable(planet, requirements: HabitabilityRequirements = HUMAN) -> UninhabitabilityReason:
    reason = UninhabitabilityReason.NONE
    if planet.is_inhospitable:
        reason |= UninhabitabilityReason.INHOSPITABLE
    if requirements.require_liquid_water and not has_liquid_water(planet):
        reason |= UninhabitabilityReason.NO_WATER
    if not is_breathable(planet.atmosphere, requirements.atmospheric_requirements):
        reason |= UninhabitabilityReason.UNBREATHABLE_ATMOSPHERE

    # The warm equator at its coldest, and the cold poles at their warmest.
    if requirements.min_temperature is not None and \
            thermal.min_equator_temperature(planet) < requirements.min_temperature:
        reason |= UninhabitabilityReason.TOO_COLD
    if requirements.max_temperature is not None and \
            thermal.max_polar_temperature(planet) > requirements.max_temperature:
        reason |= UninhabitabilityReason.TOO_HOT

    pressure = 0.0 if planet.atmosphere is None else planet.atmosphere.pressure
    if requirements.min_pressure is not None and pressure < requirements.min_pressure:
        reason |= UninhabitabilityReason.LOW_PRESSURE
    if requirements.max_pressure is not None and pressure > requirements.max_pressure:
        reason |= UninhabitabilityReason.HIGH_PRESSURE

    gravity = planet.surface_gravity
    if requirements.min_gravity is not None and gravity < requirements.min_gravity:
        reason |= UninhabitabilityReason.LOW_GRAVITY
    if requirements.max_gravity is not None and gravity > requirements.max_gravity:
        reason |= UninhabitabilityReason.HIGH_GRAVITY
    return reason
