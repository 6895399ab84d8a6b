# planet_generator/composition.py

"""
================================================================================
COMPOSITION BUILDER
================================================================================
Resolves a planet's bulk dimensions (mass, radius, shape) from whichever
constraint is authoritative, then lays out its interior as nested material
shells with a geothermal temperature profile.

Data Contract:
---------------
- Inputs:
    - A planet with planet_type, params and cached blackbody temperatures.
    - A seeded np.random.Generator.
- Outputs:
    - (layers, shape). build() also sets planet.mass, planet.shape,
      planet.layers and planet.max_elevation.
- Invariants:
    - Exactly one dimension is authoritative: radius, then gravity, then mass.
    - Layer masses sum to the planet mass; radii strictly increase outward.
    - Radius is never below the hydrostatic-equilibrium minimum (600 km)
      except for asteroids and comets.
- Side Effects: Logs clamped constraints at warning level.
================================================================================
"""

import logging
import math

import numpy as np
from scipy.stats import truncnorm

from . import config as DEFAULTS
from . import substances
from .archetypes import PlanetType
from .planet import MaterialLayer, Shape

logger = logging.getLogger(__name__)

FOUR_THIRDS_PI = 4 / 3 * math.pi


def radius_for_mass(mass: float, density: float) -> float:
    return (mass / density / FOUR_THIRDS_PI) ** (1 / 3)


def radius_for_gravity(mass: float, gravity: float) -> float:
    return math.sqrt(DEFAULTS.GRAVITATIONAL_CONSTANT * mass / gravity)


def mass_for_gravity(gravity: float, radius: float) -> float:
    return gravity * radius * radius / DEFAULTS.GRAVITATIONAL_CONSTANT


def _truncated_normal(rng: np.random.Generator, mean: float, sigma: float, low: float, high: float) -> float:
    a, b = (low - mean) / sigma, (high - mean) / sigma
    return float(truncnorm.rvs(a, b, loc=mean, scale=sigma, random_state=rng))


class CompositionBuilder:
    """Builds bulk dimensions and interior layers for every archetype."""

    def __init__(self, logger: logging.Logger = logger):
        self.logger = logger

    # --- Bulk dimensions ---

    def density(self, rules, rng: np.random.Generator) -> float:
        low, high = rules.density_range
        return low if low == high else rng.uniform(low, high)

    def _clamp_radius(self, radius: float) -> float:
        if radius < DEFAULTS.MIN_PLANET_RADIUS:
            self.logger.warning(f"Radius {radius:.0f} m is below hydrostatic equilibrium; "
                                f"clamped to {DEFAULTS.MIN_PLANET_RADIUS:.0f} m.")
            return DEFAULTS.MIN_PLANET_RADIUS
        return radius

    def dimensions(self, planet, density: float, rng: np.random.Generator):
        """
        Returns (radius, mass) from the authoritative constraint. A mass of
        None means it follows from the density and final shape.
        """
        params = planet.params
        if params.radius is not None:
            radius = self._clamp_radius(params.radius)
            if params.mass is not None:
                return radius, params.mass
            if params.surface_gravity is not None:
                return radius, mass_for_gravity(params.surface_gravity, radius)
            return radius, None

        if params.surface_gravity is not None:
            if params.mass is not None:
                return self._clamp_radius(radius_for_gravity(params.mass, params.surface_gravity)), params.mass
            # g = 4/3 pi G rho R for a uniform sphere.
            radius = self._clamp_radius(
                3 * params.surface_gravity / (4 * math.pi * DEFAULTS.GRAVITATIONAL_CONSTANT * density))
            return radius, mass_for_gravity(params.surface_gravity, radius)

        if params.mass is not None:
            mass = params.mass
        else:
            low, high = planet.rules.mass_range
            if params.max_mass is not None:
                high = max(low, min(high, params.max_mass))
            mass = math.exp(rng.uniform(math.log(low), math.log(high)))
        return self._clamp_radius(radius_for_mass(mass, density)), mass

    # --- Layers ---

    def proportions(self, rules, radius: float, rng: np.random.Generator) -> dict:
        """Mass proportions of core, mantle and crust. Non-positive shares are dropped."""
        core = rules.core_proportion
        if isinstance(core, tuple):
            core = rng.uniform(*core)
        crust = 0.0
        if rules.has_crust:
            crust = DEFAULTS.CRUST_PROPORTION_NUMERATOR / radius ** DEFAULTS.CRUST_PROPORTION_EXPONENT
        shares = {"core": core, "mantle": 1 - core - crust, "crust": crust}
        if rules.mantle == "none":
            shares["mantle"] = 0.0
        dropped = [k for k, v in shares.items() if v <= 0]
        if dropped and len(dropped) < 3:
            self.logger.debug(f"Dropped empty layers {dropped}; redistributing their share.")
        return substances.normalize(shares)

    def build(self, planet, rng: np.random.Generator):
        rules = planet.rules
        if rules.is_small_body:
            layers, shape = self._build_small_body(planet, rng)
        else:
            density = self.density(rules, rng)
            radius, mass = self.dimensions(planet, density, rng)
            flattening = rng.uniform(0.0, DEFAULTS.MAX_FLATTENING)
            shape = Shape.oblate(radius, flattening)
            if mass is None:
                mass = density * shape.volume
            planet.mass = mass
            planet.shape = shape
            layers = self._build_layers(planet, rng)

        planet.shape = shape
        planet.layers = layers
        planet.max_elevation = 0.0 if rules.is_giant else min(
            DEFAULTS.MAX_ELEVATION_FACTOR / planet.surface_gravity, planet.radius)
        self.logger.info(f"Composition: {planet.mass:.3e} kg, radius {planet.radius / 1000:.1f} km, "
                         f"density {planet.density:.0f} kg/m³, {len(layers)} layers.")
        return layers, shape

    def _build_small_body(self, planet, rng: np.random.Generator):
        rules = planet.rules
        params = planet.params
        density = self.density(rules, rng)
        if planet.planet_type == PlanetType.COMET:
            radius = params.radius or _truncated_normal(rng, 10000.0, 4500.0, 1.0, 50000.0)
            mass = params.mass or FOUR_THIRDS_PI * radius ** 3 * density
            irregularity = 1.0
            axis = radius
        else:
            low, high = rules.mass_range
            if params.max_mass is not None:
                high = max(low, min(high, params.max_mass))
            mass = params.mass or _truncated_normal(rng, low, (high - low) / 3, low, high)
            axis = (0.75 * mass / (density * math.pi)) ** (1 / 3)
            irregularity = rng.uniform(0.5, 1.0)
        shape = Shape((axis, axis * irregularity, axis / irregularity))
        planet.mass = mass
        planet.shape = shape
        layer = MaterialLayer(rules.core, self._small_body_composition(planet.planet_type, rng),
                              mass, 0.0, shape.radius, planet.target_surface_temperature)
        return [layer], shape

    def _small_body_composition(self, planet_type: PlanetType, rng: np.random.Generator) -> dict:
        if planet_type == PlanetType.ASTEROID_C:
            clay = rng.uniform(0.1, 0.2)
            ice = rng.uniform(0.0, 0.22)
            return substances.normalize({"clay": clay, "water_ice": ice, "chondrite": 1 - clay - ice})
        if planet_type == PlanetType.ASTEROID_M:
            rock = rng.uniform(0.0, 0.2)
            gold = rng.uniform(0.0, 0.05)
            return substances.normalize({"iron_nickel": 0.95 - rock, "rock": rock,
                                         "gold": gold, "platinum": 0.05 - gold})
        if planet_type == PlanetType.ASTEROID_S:
            gold = rng.uniform(0.0, 0.005)
            return substances.normalize({"chondrite": 0.427, "iron_nickel": 0.568,
                                         "gold": gold, "platinum": 0.005 - gold})
        # Comet nucleus: dirty snowball.
        composition = {"water_ice": rng.uniform(0.35, 0.55), "CO": rng.uniform(0.02, 0.1),
                       "CO2": rng.uniform(0.01, 0.05), "NH3": rng.uniform(0.0, 0.01)}
        composition["dust"] = 1 - sum(composition.values())
        return substances.normalize(composition)

    def _build_layers(self, planet, rng: np.random.Generator) -> list:
        rules = planet.rules
        radius, mass = planet.radius, planet.mass
        shares = self.proportions(rules, radius, rng)
        core, mantle, crust = (shares.get(k, 0.0) for k in ("core", "mantle", "crust"))

        core_radius = radius * core
        crust_inner = radius * (1 - crust)
        surface_temperature = planet.target_surface_temperature
        boundary_temperature = surface_temperature + (radius - crust_inner) * DEFAULTS.MANTLE_BOUNDARY_GRADIENT
        core_temperature = boundary_temperature + (crust_inner - core_radius) * DEFAULTS.CORE_GEOTHERMAL_GRADIENT

        layers = []
        if core > 0:
            layers += self._split("core", self._core_parts(rules.core, rng), mass * core,
                                  0.0, core_radius, core_temperature, core_temperature)
        if mantle > 0:
            layers += self._split("mantle", self._mantle_parts(rules.mantle, rng), mass * mantle,
                                  core_radius, crust_inner, core_temperature, boundary_temperature)
        if crust > 0:
            layers.append(MaterialLayer("crust", self._crust_composition(rules.crust, rng), mass * crust,
                                        crust_inner, radius, surface_temperature))
        return layers

    def _split(self, name, parts, mass, inner, outer, inner_temperature, outer_temperature) -> list:
        """Divides a shell into sublayers (innermost first) by mass share."""
        layers = []
        start = 0.0
        for index, (share, composition) in enumerate(parts):
            end = start + share
            lower = inner + (outer - inner) * start
            upper = inner + (outer - inner) * end
            midpoint = (start + end) / 2
            temperature = inner_temperature + (outer_temperature - inner_temperature) * midpoint
            label = name if len(parts) == 1 else f"{name}_{index}"
            layers.append(MaterialLayer(label, composition, mass * share, lower, upper, temperature))
            start = end
        return layers

    def _core_parts(self, kind: str, rng: np.random.Generator) -> list:
        if kind == "carbon_steel":
            # Some steel forms naturally in the carbon-rich environment.
            steel = rng.uniform(0.0, 0.945)
            return [(1.0, substances.normalize({"iron": 0.945 - steel, "carbon_steel": steel, "nickel": 0.055}))]
        if kind == "giant":
            inner = rng.uniform(0.02, 0.2)
            return [(inner, {"iron_nickel": 1.0}), (1 - inner, {"chondrite": 1.0})]
        return [(1.0, {"iron_nickel": 1.0})]

    def _mantle_parts(self, kind: str, rng: np.random.Generator) -> list:
        if kind == "gas_giant":
            metallic = max(0.0, rng.uniform(-0.1, 0.55))
            upper = {"H2": 0.71, "He": 0.24}
            extras = {k: rng.uniform() for k in ("Ne", "CH4", "NH3", "C2H6", "H2O")}
            extra_total = sum(extras.values())
            upper.update({k: v * 0.05 / extra_total for k, v in extras.items()})
            parts = [(1 - metallic, substances.normalize(upper))]
            if metallic > 0:
                parts.insert(0, (metallic, {"metallic_hydrogen": 1.0}))
            return parts
        if kind == "ice_giant":
            diamond = max(0.0, rng.uniform(-0.5, 0.5))
            upper = {"H2O": 1.0}
            ch4, nh3 = max(0.0, rng.uniform(-0.1, 0.1)), max(0.0, rng.uniform(-0.1, 0.1))
            if ch4 > 0 or nh3 > 0:
                upper = substances.normalize({"H2O": 1 - ch4 - nh3, "CH4": ch4, "NH3": nh3})
            parts = [(1 - diamond, upper)]
            if diamond > 0:
                parts.insert(0, (diamond, {"diamond": 1.0}))
            return parts
        if kind == "carbon":
            lower = rng.uniform(0.3, 0.7)
            return [(lower, {"silicon_carbide": 1.0}), (1 - lower, {"diamond": 1.0})]
        if kind == "icy":
            return [(1.0, {"H2O": 1.0})]
        if kind == "molten":
            return [(1.0, {"magma": 1.0})]
        return [(1.0, {"peridotite": 1.0})]

    def _ores(self, rng: np.random.Generator) -> dict:
        return {key: rng.uniform(0.0, maximum) for key, maximum in substances.CRUST_ORES.items()}

    def _crust_composition(self, kind: str, rng: np.random.Generator) -> dict:
        if kind == "icy":
            ices = {"dust": rng.uniform()}
            # Each ice has an even chance of being absent.
            ices.update({k: max(0.0, rng.uniform(-0.5, 0.5)) for k in ("water_ice", "N2", "CH4", "CO", "CO2", "NH3")})
            return substances.normalize(ices)
        if kind == "molten":
            return {"magma": 1.0}
        ores = self._ores(rng)
        if kind == "carbon":
            graphite = rng.uniform(0.5, 0.9)
            composition = {"graphite": graphite, "diamond": 1 - graphite - sum(ores.values()), **ores}
            return substances.normalize(composition)
        return substances.normalize({"rock": 1 - sum(ores.values()), **ores})
