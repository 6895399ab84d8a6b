# planet_generator/orbit.py

"""
================================================================================
ORBIT AND STAR COLLABORATORS
================================================================================
The planet core consumes orbit geometry and stellar luminosity but never
builds orbital mechanics itself. This module defines the interfaces it expects
and a pair of small default implementations.

Data Contract:
---------------
- OrbitCollaborator: supplies semi_major_axis, eccentricity, orbited_mass,
  true_anomaly, periapsis, apoapsis, mean_distance, distance_at(true_anomaly)
  and answers recompute(semi_major_axis) with a new orbit at that distance.
- StarCollaborator: supplies luminosity (W), position (m) and whether the star
  is hospitable to life.
- Side Effects: None. Orbits are immutable; recompute() returns a new one.
================================================================================
"""

import math
from dataclasses import dataclass, replace
from typing import Protocol

from . import config as DEFAULTS

SOLAR_MASS = 1.98847e30


class OrbitCollaborator(Protocol):
    semi_major_axis: float
    eccentricity: float
    orbited_mass: float
    true_anomaly: float

    @property
    def periapsis(self) -> float: ...

    @property
    def apoapsis(self) -> float: ...

    @property
    def mean_distance(self) -> float: ...

    def distance_at(self, true_anomaly: float) -> float: ...

    def recompute(self, semi_major_axis: float) -> "OrbitCollaborator": ...


class StarCollaborator(Protocol):
    luminosity: float
    position: tuple
    is_hospitable: bool


@dataclass(frozen=True)
class Star:
    luminosity: float = DEFAULTS.SOLAR_LUMINOSITY
    position: tuple = (0.0, 0.0, 0.0)
    is_hospitable: bool = True
    name: str = "Star"
    mass: float = SOLAR_MASS


# A Sun-like star, used when no star is given.
SUN = Star(name="Sun")


@dataclass(frozen=True)
class Orbit:
    semi_major_axis: float
    eccentricity: float = 0.0
    orbited_mass: float = SOLAR_MASS
    true_anomaly: float = 0.0

    @property
    def periapsis(self) -> float:
        return self.semi_major_axis * (1 - self.eccentricity)

    @property
    def apoapsis(self) -> float:
        return self.semi_major_axis * (1 + self.eccentricity)

    @property
    def period(self) -> float:
        return 2 * math.pi * math.sqrt(self.semi_major_axis ** 3 / (DEFAULTS.GRAVITATIONAL_CONSTANT * self.orbited_mass))

    @property
    def mean_distance(self) -> float:
        """Orbital distance averaged over time."""
        return self.semi_major_axis * (1 + self.eccentricity ** 2 / 2)

    def distance_at(self, true_anomaly: float) -> float:
        e = self.eccentricity
        return self.semi_major_axis * (1 - e * e) / (1 + e * math.cos(true_anomaly))

    def true_anomaly_at(self, proportion_of_year: float) -> float:
        """
        Converts a fraction of the orbital period (measured from periapsis)
        to a true anomaly by solving Kepler's equation.
        """
        e = self.eccentricity
        mean_anomaly = 2 * math.pi * (proportion_of_year % 1.0)
        eccentric_anomaly = mean_anomaly if e < 0.8 else math.pi
        for _ in range(30):
            delta = (eccentric_anomaly - e * math.sin(eccentric_anomaly) - mean_anomaly) / (1 - e * math.cos(eccentric_anomaly))
            eccentric_anomaly -= delta
            if abs(delta) < 1e-12:
                break
        return 2 * math.atan2(math.sqrt(1 + e) * math.sin(eccentric_anomaly / 2),
                              math.sqrt(1 - e) * math.cos(eccentric_anomaly / 2))

    def recompute(self, semi_major_axis: float) -> "Orbit":
        return replace(self, semi_major_axis=max(semi_major_axis, 1.0))

    @classmethod
    def for_period(cls, period: float, orbited_mass: float = SOLAR_MASS, eccentricity: float = 0.0) -> "Orbit":
        semi_major_axis = (DEFAULTS.GRAVITATIONAL_CONSTANT * orbited_mass * period ** 2 / (4 * math.pi ** 2)) ** (1 / 3)
        return cls(semi_major_axis, eccentricity, orbited_mass)
