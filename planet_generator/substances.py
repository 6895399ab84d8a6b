# planet_generator/substances.py

"""
================================================================================
SUBSTANCE TABLE
================================================================================
Static physical properties of every substance that can appear in a planet's
layers, atmosphere or hydrosphere.

Data Contract:
---------------
- Substances are referenced everywhere by their string key (e.g. "H2O").
- vapor_pressure(T) uses Antoine's equation within its valid range. Below the
  range the substance never evaporates (0 kPa); above it, it always does
  (infinite vapor pressure).
- Side Effects: None.
================================================================================
"""

import enum
import math
from dataclasses import dataclass
from typing import Optional


class Phase(enum.Enum):
    SOLID = "solid"
    LIQUID = "liquid"
    GAS = "gas"


@dataclass(frozen=True)
class Substance:
    key: str
    name: str
    melting_point: float
    # Antoine coefficients (A, B, C) for pressure in bar and temperature in K.
    antoine: Optional[tuple] = None
    antoine_min: float = math.inf
    antoine_max: float = math.inf
    greenhouse_potential: float = 0.0
    density: float = 1000.0  # kg/m³, condensed phase

    def vapor_pressure(self, temperature: float) -> float:
        """Vapor pressure in kPa."""
        if self.antoine is None or temperature < self.antoine_min:
            return 0.0
        if temperature > self.antoine_max:
            return math.inf
        a, b, c = self.antoine
        return 10 ** (a - (b / (c + temperature))) * 100

    def phase(self, temperature: float, pressure: float) -> Phase:
        if temperature < self.melting_point:
            return Phase.SOLID
        if pressure > self.vapor_pressure(temperature):
            return Phase.LIQUID
        return Phase.GAS


def _s(key, name, melting_point, antoine=None, antoine_range=(math.inf, math.inf), greenhouse=0.0, density=1000.0):
    return Substance(key, name, melting_point, antoine, antoine_range[0], antoine_range[1], greenhouse, density)


SUBSTANCES = {s.key: s for s in [
    # Atmospheric volatiles
    _s("H2", "Hydrogen", 14.01, (3.54314, 99.395, 7.726), (21.01, 32.27), density=70.85),
    _s("He", "Helium", 0.95, (1.6836, 8.1548, 0.5), (1.8, 4.2), density=125.0),
    _s("CH4", "Methane", 91.15, (3.7687, 395.744, -6.469), (90.7, 120.6), 34.0, 422.6),
    _s("C2H6", "Ethane", 90.15, (3.95405, 663.72, -16.469), (130.4, 198.2), density=544.0),
    _s("NH3", "Ammonia", 195.42, (3.18757, 506.713, -80.78), (164.0, 239.6), density=681.9),
    _s("NH4SH", "Ammonium Hydrosulfide", 329.8, (6.09146, 1598.378, -43.805), (222.1, 306.4), density=1170.0),
    _s("H2S", "Hydrogen Sulfide", 191.15, (4.52887, 958.587, -0.539), (212.8, 349.5), density=993.0),
    _s("CO", "Carbon Monoxide", 68.15, (3.81912, 291.743, -5.151), (68.2, 88.1), density=789.0),
    _s("CO2", "Carbon Dioxide", 195.15, (6.93556, 1347.786, -0.15), (153.2, 203.3), 1.0, 1562.0),
    _s("N2", "Nitrogen", 63.15, (3.61947, 255.68, -6.6), (63.2, 83.7), density=808.0),
    _s("O2", "Oxygen", 54.36, (3.81634, 319.01, -6.453), (62.6, 97.2), density=1141.0),
    _s("O3", "Ozone", 81.15, (4.23637, 712.487, 6.982), (92.8, 162.0), density=1349.0),
    _s("SO2", "Sulphur Dioxide", 202.15, (4.40718, 999.90, -35.96), (210.0, 279.5), density=1460.0),
    _s("Ar", "Argon", 83.8, (3.29555, 215.24, -22.233), (83.78, 150.72), density=1395.4),
    _s("Kr", "Krypton", 115.75, (4.2064, 539.004, 8.855), (126.68, 208.0), density=2413.0),
    _s("Xe", "Xenon", 161.35, (3.80675, 577.661, -13.0), (161.7, 184.7), density=2942.0),
    _s("Ne", "Neon", 24.55, (3.75641, 95.599, -1.503), (15.9, 27.0), density=1207.0),
    # Water
    _s("H2O", "Water", 273.15, (4.6543, 1435.264, -64.848), (255.9, 373.0), 1.0, 1000.0),
    _s("seawater", "Seawater", 271.35, (4.6543, 1435.264, -62.848), (255.9, 373.0), 1.0, 1025.0),
    # Rock and dust
    _s("dust", "Cosmic Dust", 2033.15, density=1500.0),
    _s("rock", "Rock", 1473.15, density=2650.0),
    _s("basalt", "Basalt", 1257.15, density=3000.0),
    _s("peridotite", "Peridotite", 1673.15, density=3300.0),
    _s("magma", "Magma", 1473.15, density=2600.0),
    _s("chondrite", "Chondritic Rock", 1473.15, density=3500.0),
    _s("clay", "Clay", 1523.15, density=1760.0),
    _s("water_ice", "Water Ice", 273.15, density=917.0),
    # Metals and ores
    _s("iron_nickel", "Iron-Nickel Alloy", 1728.15, density=8000.0),
    _s("iron", "Iron", 1811.15, density=7874.0),
    _s("nickel", "Nickel", 1728.15, density=8908.0),
    _s("carbon_steel", "Carbon Steel", 1698.15, density=7850.0),
    _s("chalcopyrite", "Chalcopyrite", 1223.15, density=4190.0),
    _s("hematite", "Hematite", 1838.15, density=5260.0),
    _s("cassiterite", "Cassiterite", 1903.15, density=6950.0),
    _s("galena", "Galena", 1386.15, density=7600.0),
    _s("sphalerite", "Sphalerite", 2103.15, density=4100.0),
    _s("bauxite", "Bauxite", 2273.15, density=2600.0),
    _s("gold", "Gold", 1337.15, density=19300.0),
    _s("platinum", "Platinum", 2041.35, density=21450.0),
    _s("silver", "Silver", 1234.95, density=10490.0),
    _s("uraninite", "Uraninite", 3138.15, density=10970.0),
    # Exotic
    _s("metallic_hydrogen", "Metallic Hydrogen", 14.01, density=1300.0),
    _s("diamond", "Diamond", 3823.15, density=3510.0),
    _s("graphite", "Graphite", 3900.15, density=2260.0),
    _s("silicon_carbide", "Silicon Carbide", 3003.15, density=3210.0),
]}

# Volatiles considered by phase equilibrium, in evaluation order. Water is
# handled separately since it may already be present on the surface.
CONDENSABLE_VOLATILES = ["CH4", "CO", "CO2", "N2", "O2", "SO2"]
WATER_KEYS = ("H2O", "seawater")
NOBLE_GASES = ["Ar", "Kr", "Xe", "Ne"]
# Gases held above the troposphere; excluded when judging breathability.
STRATOSPHERIC_GASES = ("O3",)

# Trace ores added to rocky crusts: key -> maximum proportion.
CRUST_ORES = {
    "chalcopyrite": 0.0012,
    "hematite": 0.01,
    "cassiterite": 0.0006,
    "galena": 0.0006,
    "sphalerite": 0.0006,
    "bauxite": 0.004,
    "gold": 1e-6,
    "silver": 3e-6,
    "uraninite": 2e-6,
}


def get(key: str) -> Substance:
    return SUBSTANCES[key]


def normalize(composition: dict) -> dict:
    """Drops non-positive entries and rescales the remainder to sum to one."""
    positive = {k: v for k, v in composition.items() if v > 0}
    total = sum(positive.values())
    if total <= 0:
        return {}
    return {k: v / total for k, v in positive.items()}


def greenhouse_potential(composition: dict) -> float:
    return sum(SUBSTANCES[k].greenhouse_potential * v for k, v in composition.items())


def mixture_density(composition: dict) -> float:
    """Density of a mixture given mass fractions (harmonic mean)."""
    inverse = sum(v / SUBSTANCES[k].density for k, v in composition.items() if v > 0)
    return 1.0 / inverse if inverse > 0 else 0.0
