# planet_generator/params.py

"""
================================================================================
PLANET PARAMETERS (WISH LIST)
================================================================================
A sparse set of optional constraints on a generated planet. Every field is
optional; None means "not requested" and the generator chooses a value.

Data Contract:
---------------
- PlanetParams.is_set(name) reports the presence of a constraint.
- from_dict() accepts the JSON shape used by configuration files and ignores
  unknown keys.
- Side Effects: None.
================================================================================
"""

from dataclasses import dataclass, fields, replace
from typing import Optional

from . import config as DEFAULTS


@dataclass(frozen=True)
class PlanetParams:
    albedo: Optional[float] = None
    atmospheric_pressure: Optional[float] = None       # kPa
    axial_tilt: Optional[float] = None                 # radians
    earthlike_atmosphere: bool = False
    eccentricity: Optional[float] = None
    mass: Optional[float] = None                       # kg
    max_mass: Optional[float] = None                   # kg
    radius: Optional[float] = None                     # m
    revolution_period: Optional[float] = None          # s
    rotational_period: Optional[float] = None          # s
    surface_gravity: Optional[float] = None            # m/s²
    surface_temperature: Optional[float] = None        # K
    water_ratio: Optional[float] = None
    water_vapor_ratio: Optional[float] = None
    # (substance key, minimum, maximum) proportions required at 1 atm.
    atmospheric_requirements: tuple = ()

    def is_set(self, name: str) -> bool:
        value = getattr(self, name)
        if isinstance(value, bool):
            return value
        if isinstance(value, tuple):
            return len(value) > 0
        return value is not None

    @classmethod
    def from_dict(cls, data: dict) -> "PlanetParams":
        names = {f.name for f in fields(cls)}
        values = {k: v for k, v in (data or {}).items() if k in names}
        if 'atmospheric_requirements' in values:
            values['atmospheric_requirements'] = tuple(tuple(r) for r in values['atmospheric_requirements'])
        return cls(**values)

    @classmethod
    def earthlike(cls, **overrides) -> "PlanetParams":
        """Parameters which reproduce an Earth-like world."""
        params = cls(
            albedo=DEFAULTS.EARTH_ALBEDO,
            atmospheric_pressure=DEFAULTS.EARTH_ATMOSPHERIC_PRESSURE,
            axial_tilt=DEFAULTS.EARTH_AXIAL_TILT,
            earthlike_atmosphere=True,
            eccentricity=DEFAULTS.EARTH_ECCENTRICITY,
            mass=DEFAULTS.EARTH_MASS,
            radius=DEFAULTS.EARTH_RADIUS,
            rotational_period=DEFAULTS.EARTH_ROTATION_PERIOD,
            surface_temperature=DEFAULTS.EARTH_SURFACE_TEMPERATURE,
            water_ratio=DEFAULTS.EARTH_WATER_RATIO,
            water_vapor_ratio=DEFAULTS.EARTH_WATER_VAPOR_RATIO,
        )
        return replace(params, **overrides)
