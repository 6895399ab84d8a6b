# planet_generator/hydrosphere.py

"""
================================================================================
HYDROSPHERE MODEL
================================================================================
Surface liquids and ices: total mass, sea level relative to mean elevation and
a depth-fractionated shell structure (a surface layer and, when the surface
freezes over deep water, a subsurface ocean).

Data Contract:
---------------
- Inputs:
    - The planet (type rules, radius, max_elevation, params.water_ratio).
    - A surface temperature in K and a seeded np.random.Generator.
- Outputs:
    - A Hydrosphere value. Layers are ordered from the surface downward.
- Invariants:
    - mass == 0 implies normalized_sea_level == -1.1 (sea level pinned at
      -1.1 x max elevation) and no layers.
    - Layer proportions sum to 1 for a non-empty hydrosphere.
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
from .archetypes import PlanetType
from .substances import Phase

logger = logging.getLogger(__name__)


@dataclass
class HydrosphereLayer:
    proportion: float       # of total hydrosphere mass
    temperature: float      # K
    inner_radius: float     # m
    outer_radius: float     # m


@dataclass
class Hydrosphere:
    mass: float = 0.0
    normalized_sea_level: float = DEFAULTS.EMPTY_SEA_LEVEL
    composition: dict = field(default_factory=dict)
    layers: list = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return self.mass <= 0 or not self.composition

    @property
    def surface(self) -> Optional[HydrosphereLayer]:
        return self.layers[0] if self.layers else None

    @property
    def temperature(self) -> float:
        """Mass-weighted average temperature of the layers."""
        return sum(layer.proportion * layer.temperature for layer in self.layers)

    @property
    def density(self) -> float:
        return substances.mixture_density(self.composition)

    def proportion(self, *keys) -> float:
        return sum(self.composition.get(k, 0.0) for k in keys)

    def contains(self, key: str) -> bool:
        return self.composition.get(key, 0.0) > 0

    def contains_phase(self, key: str, phase: Phase, temperature: float, pressure: float) -> bool:
        return self.contains(key) and substances.get(key).phase(temperature, pressure) == phase

    def ice_fraction(self, temperature: float, pressure: float) -> float:
        """Fraction of the surface layer frozen at the given conditions."""
        if self.is_empty:
            return 0.0
        return min(1.0, sum(v for k, v in self.composition.items()
                            if substances.get(k).phase(temperature, pressure) == Phase.SOLID))

    def copy(self) -> "Hydrosphere":
        return copy.deepcopy(self)

    def empty(self):
        self.mass = 0.0
        self.composition = {}
        self.layers = []
        self.normalized_sea_level = DEFAULTS.EMPTY_SEA_LEVEL

    def remove(self, *keys) -> float:
        """Removes the given substances, returning the mass removed."""
        removed = self.proportion(*keys)
        if removed <= 0:
            return 0.0
        removed_mass = self.mass * removed
        self.composition = substances.normalize({k: v for k, v in self.composition.items() if k not in keys})
        self.mass *= (1 - removed)
        if self.is_empty:
            self.empty()
        return removed_mass

    def add(self, key: str, mass: float):
        """Adds condensed mass of a substance to an existing hydrosphere."""
        if mass <= 0 or self.is_empty:
            return
        total = self.mass + mass
        updated = {k: v * self.mass / total for k, v in self.composition.items()}
        updated[key] = updated.get(key, 0.0) + mass / total
        self.composition = substances.normalize(updated)
        self.mass = total


def _layer_temperature(depth: float, surface_temperature: float) -> float:
    """Water temperature at depth, relaxing towards the deep-ocean value."""
    if depth > DEFAULTS.DEEP_OCEAN_DEPTH:
        return DEFAULTS.DEEP_OCEAN_TEMPERATURE
    if depth < DEFAULTS.SHALLOW_OCEAN_DEPTH:
        return surface_temperature
    weight = (depth - DEFAULTS.SHALLOW_OCEAN_DEPTH) / (DEFAULTS.DEEP_OCEAN_DEPTH - DEFAULTS.SHALLOW_OCEAN_DEPTH)
    return surface_temperature + (DEFAULTS.DEEP_OCEAN_TEMPERATURE - surface_temperature) * weight


class HydrosphereModel:
    """Generates and re-fractions a planet's hydrosphere."""

    def __init__(self, logger: logging.Logger = logger):
        self.logger = logger

    def water_ratio(self, planet, rng: np.random.Generator) -> float:
        if planet.params.water_ratio is not None:
            return float(planet.params.water_ratio)
        if planet.planet_type == PlanetType.OCEAN:
            return 1 + rng.normal(DEFAULTS.OCEAN_WATER_RATIO_MEAN, DEFAULTS.OCEAN_WATER_RATIO_SIGMA)
        return rng.uniform(0.0, 1.0)

    def generate(self, planet, surface_temperature: float, rng: np.random.Generator) -> Hydrosphere:
        rules = planet.rules
        hydrosphere = Hydrosphere()
        if rules.waterless or not rules.is_terrestrial:
            return hydrosphere

        ratio = self.water_ratio(planet, rng)
        max_elevation = planet.max_elevation
        seawater = substances.get("seawater")
        if ratio <= 0 or max_elevation <= 0:
            return hydrosphere

        if ratio >= 1:
            sea_level = ratio
            inner = planet.radius
            outer = planet.radius + max_elevation * ratio
            mass = 4 / 3 * math.pi * (outer ** 3 - inner ** 3) * seawater.density
        else:
            variance = (math.exp(abs(ratio - 0.5)) - 1) * DEFAULTS.RANDOM_MAP_ELEVATION_FACTOR
            sea_level = variance if ratio > 0.5 else -variance
            volume = DEFAULTS.HYDROSPHERE_HALF_VOLUME * (1 + sea_level)
            mass = volume * max_elevation * seawater.density

        if mass <= 0:
            return hydrosphere

        # Surface water is mostly salt water.
        seawater_proportion = float(np.clip(
            rng.normal(DEFAULTS.SEAWATER_PROPORTION_MEAN, DEFAULTS.SEAWATER_PROPORTION_SIGMA), 0.0, 1.0))
        hydrosphere.mass = mass
        hydrosphere.normalized_sea_level = sea_level
        hydrosphere.composition = substances.normalize({"seawater": seawater_proportion, "H2O": 1 - seawater_proportion})
        return self.fraction(hydrosphere, planet, surface_temperature)

    def outer_radius(self, hydrosphere: Hydrosphere, radius: float) -> float:
        density = hydrosphere.density or substances.get("seawater").density
        return (3 * (hydrosphere.mass / density + 4 / 3 * math.pi * radius ** 3) / (4 * math.pi)) ** (1 / 3)

    def fraction(self, hydrosphere: Hydrosphere, planet, temperature: float) -> Hydrosphere:
        """
        Rebuilds the shell structure for the given surface temperature. A
        frozen surface over water deep enough to stay liquid yields a
        subsurface ocean.
        """
        if hydrosphere.is_empty:
            hydrosphere.empty()
            return hydrosphere

        inner = planet.radius
        outer = self.outer_radius(hydrosphere, inner)
        melting_point = substances.get("seawater").melting_point
        depth = hydrosphere.normalized_sea_level * planet.max_elevation + planet.max_elevation / 2

        if depth > 0:
            top_liquid = temperature >= melting_point
            bottom_temperature = _layer_temperature(depth, temperature)
            bottom_liquid = bottom_temperature >= melting_point
            top_proportion = min(1.0, DEFAULTS.DEEP_OCEAN_DEPTH / depth)
            if top_liquid != bottom_liquid and top_proportion < 1.0:
                boundary = inner + (outer - inner) * (1 - top_proportion)
                hydrosphere.layers = [
                    HydrosphereLayer(top_proportion, (DEFAULTS.DEEP_OCEAN_TEMPERATURE + temperature) / 2, boundary, outer),
                    HydrosphereLayer(1 - top_proportion, DEFAULTS.DEEP_OCEAN_TEMPERATURE, inner, boundary),
                ]
                self.logger.debug(f"Subsurface ocean below {depth * top_proportion:.0f} m of surface water.")
                return hydrosphere

        average_depth = (outer - inner) / 2
        hydrosphere.layers = [HydrosphereLayer(1.0, _layer_temperature(average_depth, temperature), inner, outer)]
        return hydrosphere
