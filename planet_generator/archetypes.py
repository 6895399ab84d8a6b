# planet_generator/archetypes.py

"""
================================================================================
PLANET ARCHETYPES
================================================================================
The mutually exclusive planet categories and the strategy table holding every
per-type generation rule in one place. Builders in composition.py and
atmosphere.py dispatch on the rule values found here instead of branching on
the planet type.

Data Contract:
---------------
- ARCHETYPES maps every PlanetType to an ArchetypeRules row.
- Ranges are (minimum, maximum) tuples in SI units.
- Side Effects: None.
================================================================================
"""

import enum
from dataclasses import dataclass
from typing import Optional

from .exceptions import ConfigurationError


class Archetype(enum.Enum):
    TERRESTRIAL = "terrestrial"
    GIANT = "giant"
    DWARF = "dwarf"
    ASTEROID = "asteroid"
    COMET = "comet"


class PlanetType(enum.Enum):
    TERRESTRIAL = "terrestrial"
    CARBON = "carbon"
    IRON = "iron"
    LAVA = "lava"
    OCEAN = "ocean"
    GAS_GIANT = "gas_giant"
    ICE_GIANT = "ice_giant"
    DWARF = "dwarf"
    ROCKY_DWARF = "rocky_dwarf"
    LAVA_DWARF = "lava_dwarf"
    ASTEROID_C = "asteroid_c"
    ASTEROID_M = "asteroid_m"
    ASTEROID_S = "asteroid_s"
    COMET = "comet"


@dataclass(frozen=True)
class ArchetypeRules:
    archetype: Archetype
    density_range: tuple
    mass_range: tuple
    # Core proportion, as a fixed value or a (min, max) range.
    core_proportion: object
    core: str
    mantle: str
    crust: Optional[str]
    atmosphere: str
    waterless: bool = False
    has_crust: bool = True
    # Fixed surface temperature range for molten worlds.
    surface_temperature_range: Optional[tuple] = None
    albedo_range: tuple = (0.1, 0.6)

    @property
    def is_giant(self) -> bool:
        return self.archetype == Archetype.GIANT

    @property
    def is_small_body(self) -> bool:
        return self.archetype in (Archetype.ASTEROID, Archetype.COMET)

    @property
    def is_terrestrial(self) -> bool:
        return self.archetype == Archetype.TERRESTRIAL


_TERRESTRIAL_MASS = (2e22, 6e25)
_DWARF_MASS = (3.4e20, 6e25)
_GIANT_MASS = (6e25, 2.5e28)
_ASTEROID_MASS = (5.9e8, 3.4e20)

ARCHETYPES = {
    PlanetType.TERRESTRIAL: ArchetypeRules(
        Archetype.TERRESTRIAL, (3750.0, 6000.0), _TERRESTRIAL_MASS, 0.15,
        core="iron_nickel", mantle="rocky", crust="rocky", atmosphere="terrestrial"),
    PlanetType.OCEAN: ArchetypeRules(
        Archetype.TERRESTRIAL, (3750.0, 6000.0), _TERRESTRIAL_MASS, 0.15,
        core="iron_nickel", mantle="rocky", crust="rocky", atmosphere="terrestrial"),
    PlanetType.IRON: ArchetypeRules(
        Archetype.TERRESTRIAL, (5250.0, 8000.0), _TERRESTRIAL_MASS, 0.4,
        core="iron_nickel", mantle="rocky", crust="rocky", atmosphere="terrestrial",
        waterless=True),
    PlanetType.CARBON: ArchetypeRules(
        Archetype.TERRESTRIAL, (3750.0, 6000.0), _TERRESTRIAL_MASS, 0.4,
        core="carbon_steel", mantle="carbon", crust="carbon", atmosphere="terrestrial",
        waterless=True),
    PlanetType.LAVA: ArchetypeRules(
        Archetype.TERRESTRIAL, (3750.0, 6000.0), _TERRESTRIAL_MASS, 0.15,
        core="iron_nickel", mantle="molten", crust="molten", atmosphere="terrestrial",
        waterless=True, surface_temperature_range=(974.0, 1574.0)),
    PlanetType.GAS_GIANT: ArchetypeRules(
        Archetype.GIANT, (1100.0, 1650.0), _GIANT_MASS, 0.15,
        core="giant", mantle="gas_giant", crust=None, atmosphere="giant",
        has_crust=False, albedo_range=(0.275, 0.35)),
    PlanetType.ICE_GIANT: ArchetypeRules(
        Archetype.GIANT, (1100.0, 1650.0), _GIANT_MASS, 0.15,
        core="giant", mantle="ice_giant", crust=None, atmosphere="giant",
        has_crust=False, albedo_range=(0.275, 0.35)),
    PlanetType.DWARF: ArchetypeRules(
        Archetype.DWARF, (2000.0, 2000.0), _DWARF_MASS, (0.2, 0.55),
        core="iron_nickel", mantle="icy", crust="icy", atmosphere="dwarf"),
    PlanetType.ROCKY_DWARF: ArchetypeRules(
        Archetype.DWARF, (3750.0, 6000.0), _DWARF_MASS, (0.2, 0.55),
        core="iron_nickel", mantle="rocky", crust="rocky", atmosphere="dwarf",
        waterless=True),
    PlanetType.LAVA_DWARF: ArchetypeRules(
        Archetype.DWARF, (3750.0, 6000.0), _DWARF_MASS, (0.2, 0.55),
        core="iron_nickel", mantle="molten", crust="molten", atmosphere="dwarf",
        waterless=True, surface_temperature_range=(974.0, 1574.0)),
    PlanetType.ASTEROID_C: ArchetypeRules(
        Archetype.ASTEROID, (1380.0, 1380.0), _ASTEROID_MASS, 1.0,
        core="asteroid_c", mantle="none", crust=None, atmosphere="small_body",
        waterless=True, has_crust=False, albedo_range=(0.03, 0.1)),
    PlanetType.ASTEROID_M: ArchetypeRules(
        Archetype.ASTEROID, (5320.0, 5320.0), _ASTEROID_MASS, 1.0,
        core="asteroid_m", mantle="none", crust=None, atmosphere="small_body",
        waterless=True, has_crust=False, albedo_range=(0.1, 0.2)),
    PlanetType.ASTEROID_S: ArchetypeRules(
        Archetype.ASTEROID, (2710.0, 2710.0), _ASTEROID_MASS, 1.0,
        core="asteroid_s", mantle="none", crust=None, atmosphere="small_body",
        waterless=True, has_crust=False, albedo_range=(0.1, 0.22)),
    PlanetType.COMET: ArchetypeRules(
        Archetype.COMET, (300.0, 700.0), (1e10, 1e16), 1.0,
        core="comet", mantle="none", crust=None, atmosphere="small_body",
        waterless=True, has_crust=False, albedo_range=(0.025, 0.055)),
}


def rules_for(planet_type) -> ArchetypeRules:
    """Accepts a PlanetType or its value, e.g. "gas_giant"."""
    try:
        return ARCHETYPES[PlanetType(planet_type)]
    except ValueError:
        raise ConfigurationError(f"Unknown planet type: {planet_type!r}") from None
