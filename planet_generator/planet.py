# planet_generator/planet.py

"""
================================================================================
PLANET STATE
================================================================================
The generated body: bulk properties, its layered interior, and the atmosphere
and hydrosphere it exclusively owns. Builders replace those parts wholesale;
nothing else holds references to them.

Data Contract:
---------------
- Planet.layers are ordered from the core outward with strictly increasing
  radii; their masses sum to Planet.mass.
- Cached blackbody temperatures are refreshed by refresh_temperatures()
  whenever albedo, orbit or star change.
- normalized_sea_level is relative to max_elevation; -1.1 means no surface
  liquid.
================================================================================
"""

import math
from dataclasses import dataclass, field
from typing import Optional

from . import config as DEFAULTS
from . import thermal
from .archetypes import ArchetypeRules, PlanetType, rules_for
from .atmosphere import Atmosphere
from .hydrosphere import Hydrosphere
from .params import PlanetParams


@dataclass(frozen=True)
class Shape:
    """An ellipsoid given by its three semi-axes (m)."""
    axes: tuple

    @property
    def radius(self) -> float:
        return max(self.axes)

    @property
    def flattening(self) -> float:
        return 1 - min(self.axes) / max(self.axes)

    @property
    def volume(self) -> float:
        a, b, c = self.axes
        return 4 / 3 * math.pi * a * b * c

    @classmethod
    def oblate(cls, radius: float, flattening: float = 0.0) -> "Shape":
        return cls((radius, radius, radius * (1 - flattening)))


@dataclass
class MaterialLayer:
    name: str
    composition: dict
    mass: float             # kg
    inner_radius: float     # m
    outer_radius: float     # m
    temperature: float      # K

    @property
    def volume(self) -> float:
        return 4 / 3 * math.pi * (self.outer_radius ** 3 - self.inner_radius ** 3)

    @property
    def density(self) -> float:
        volume = self.volume
        return self.mass / volume if volume > 0 else 0.0


@dataclass
class Planet:
    name: str
    seed: int
    planet_type: PlanetType
    params: PlanetParams = field(default_factory=PlanetParams)
    # Habitability requirements the planet was generated against, if any.
    requirements: Optional[object] = None
    mass: float = 0.0
    shape: Shape = field(default_factory=lambda: Shape.oblate(DEFAULTS.MIN_PLANET_RADIUS))
    layers: list = field(default_factory=list)
    atmosphere: Atmosphere = field(default_factory=Atmosphere)
    hydrosphere: Hydrosphere = field(default_factory=Hydrosphere)
    rotational_period: float = DEFAULTS.EARTH_ROTATION_PERIOD
    axial_tilt: float = 0.0
    orbit: Optional[object] = None
    star: Optional[object] = None
    albedo: float = 0.0
    surface_albedo: float = 0.0
    internal_temperature: float = DEFAULTS.COSMIC_BACKGROUND_TEMPERATURE
    max_elevation: float = 0.0
    has_magnetosphere: bool = False
    noise_seeds: tuple = ()
    is_inhospitable: bool = False
    approximate: bool = False
    convergence_report: Optional[object] = None
    # Cached by refresh_temperatures().
    blackbody_temperature: float = 0.0
    periapsis_temperature: float = 0.0
    apoapsis_temperature: float = 0.0
    average_blackbody_temperature: float = 0.0

    @property
    def rules(self) -> ArchetypeRules:
        return rules_for(self.planet_type)

    @property
    def radius(self) -> float:
        return self.shape.radius

    @property
    def volume(self) -> float:
        return self.shape.volume

    @property
    def density(self) -> float:
        return self.mass / self.volume

    @property
    def surface_gravity(self) -> float:
        return DEFAULTS.GRAVITATIONAL_CONSTANT * self.mass / (self.radius * self.radius)

    @property
    def normalized_sea_level(self) -> float:
        return self.hydrosphere.normalized_sea_level

    @property
    def sea_level(self) -> float:
        """Sea level in metres relative to mean elevation."""
        return self.normalized_sea_level * self.max_elevation

    @property
    def crust_composition(self) -> dict:
        return self.layers[-1].composition if self.layers else {}

    @property
    def crust_temperature(self) -> float:
        return self.layers[-1].temperature if self.layers else self.average_blackbody_temperature

    @property
    def average_elevation(self) -> float:
        return self.max_elevation * DEFAULTS.AVERAGE_ELEVATION_FACTOR

    @property
    def target_surface_temperature(self) -> float:
        """
        The surface temperature the planet is being built for: the requested
        one, else the middle of the habitable range, else the blackbody
        average.
        """
        if self.params.surface_temperature is not None:
            return self.params.surface_temperature
        if self.requirements is not None and self.requirements.target_temperature is not None:
            return self.requirements.target_temperature
        return self.average_blackbody_temperature

    @property
    def mean_surface_temperature(self) -> float:
        """Average surface temperature at typical elevation, over the whole globe."""
        equatorial = thermal.temperature_at_elevation(
            self, thermal.average_surface_temperature(self), self.average_elevation)
        return equatorial / DEFAULTS.EQUATORIAL_TARGET_FACTOR

    def refresh_temperatures(self):
        thermal.set_blackbody_temperatures(self)
