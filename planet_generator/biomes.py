# planet_generator/biomes.py

"""
================================================================================
CLIMATE, HUMIDITY AND BIOME CLASSIFICATION
================================================================================
Turns continuous climate values into categorical zones with thresholded
lookups over whole rasters, and works out when the sea freezes.

Data Contract:
---------------
- Inputs: NumPy arrays (or scalars) of annual minimum, maximum and average
  temperature (K), precipitation (mm/hr) and normalized elevation above sea
  level.
- Outputs: integer arrays of ClimateType, HumidityType and BiomeType values
  (0 where undefined), and sea ice (start, end) proportions of the year.
- Invariants:
    - Every cell at or below sea level is BiomeType.SEA.
    - Sea ice proportions lie in [0, 1]; a cell frozen all year is (0, 1)
      and a cell never frozen is NaN.
================================================================================
"""

import enum

import numpy as np

from . import config as DEFAULTS
from . import substances


class ClimateType(enum.IntEnum):
    NONE = 0
    POLAR = 1
    SUBPOLAR = 2
    BOREAL = 3
    COOL_TEMPERATE = 4
    WARM_TEMPERATE = 5
    SUBTROPICAL = 6
    TROPICAL = 7
    SUPERTROPICAL = 8


class HumidityType(enum.IntEnum):
    NONE = 0
    SUPERARID = 1
    PERARID = 2
    ARID = 3
    SEMIARID = 4
    SUBHUMID = 5
    HUMID = 6
    PERHUMID = 7
    SUPERHUMID = 8


class BiomeType(enum.IntEnum):
    NONE = 0
    SEA = 1
    POLAR = 2
    ALPINE = 3
    TUNDRA = 4
    SUBALPINE = 5
    LICHEN_WOODLAND = 6
    CONIFEROUS_FOREST = 7
    COLD_DESERT = 8
    STEPPE = 9
    MIXED_FOREST = 10
    HOT_DESERT = 11
    SHRUBLAND = 12
    DECIDUOUS_FOREST = 13
    SAVANNA = 14
    MONSOON_FOREST = 15
    RAIN_FOREST = 16


def climate_types(min_temperature, max_temperature, average_temperature=None) -> np.ndarray:
    """Climate zones from a location's annual temperature range."""
    low = np.asarray(min_temperature, dtype=np.float64)
    high = np.asarray(max_temperature, dtype=np.float64)
    average = (low + high) / 2 if average_temperature is None else np.asarray(average_temperature, dtype=np.float64)
    conditions = [
        high < DEFAULTS.WATER_FREEZING_POINT,
        high < DEFAULTS.SUBPOLAR_MAX_TEMPERATURE,
        (low <= DEFAULTS.BOREAL_MIN_TEMPERATURE) & (high < DEFAULTS.BOREAL_MAX_TEMPERATURE),
        (low <= DEFAULTS.TEMPERATE_MIN_TEMPERATURE) & (high <= DEFAULTS.COOL_TEMPERATE_MAX_TEMPERATURE),
        low <= DEFAULTS.TEMPERATE_MIN_TEMPERATURE,
        low < DEFAULTS.SUBTROPICAL_MIN_TEMPERATURE,
        average <= DEFAULTS.TROPICAL_MAX_AVERAGE_TEMPERATURE,
    ]
    choices = [ClimateType.POLAR, ClimateType.SUBPOLAR, ClimateType.BOREAL, ClimateType.COOL_TEMPERATE,
               ClimateType.WARM_TEMPERATE, ClimateType.SUBTROPICAL, ClimateType.TROPICAL]
    return np.select(conditions, choices, default=ClimateType.SUPERTROPICAL).astype(np.int64)


def humidity_types(precipitation) -> np.ndarray:
    """Humidity classes from a precipitation rate in mm/hr."""
    limits = np.asarray(DEFAULTS.HUMIDITY_CLASS_LIMITS_MM) / DEFAULTS.HOURS_PER_YEAR
    # searchsorted with side='right' puts a value equal to a limit in the wetter class.
    classes = np.searchsorted(limits, np.asarray(precipitation, dtype=np.float64), side='right')
    return (classes + HumidityType.SUPERARID).astype(np.int64)


# Land biomes by climate: ((highest humidity class, biome), ...), driest first.
# The last entry applies to every wetter class.
_LAND_BIOMES = {
    ClimateType.BOREAL: ((HumidityType.ARID, BiomeType.LICHEN_WOODLAND),
                         (HumidityType.SUPERHUMID, BiomeType.CONIFEROUS_FOREST)),
    ClimateType.COOL_TEMPERATE: ((HumidityType.PERARID, BiomeType.COLD_DESERT),
                                 (HumidityType.ARID, BiomeType.STEPPE),
                                 (HumidityType.SUPERHUMID, BiomeType.MIXED_FOREST)),
    ClimateType.WARM_TEMPERATE: ((HumidityType.PERARID, BiomeType.HOT_DESERT),
                                 (HumidityType.ARID, BiomeType.SHRUBLAND),
                                 (HumidityType.SUPERHUMID, BiomeType.DECIDUOUS_FOREST)),
    ClimateType.SUBTROPICAL: ((HumidityType.PERARID, BiomeType.HOT_DESERT),
                              (HumidityType.ARID, BiomeType.SAVANNA),
                              (HumidityType.SUBHUMID, BiomeType.MONSOON_FOREST),
                              (HumidityType.SUPERHUMID, BiomeType.RAIN_FOREST)),
    ClimateType.TROPICAL: ((HumidityType.PERARID, BiomeType.HOT_DESERT),
                           (HumidityType.SEMIARID, BiomeType.SAVANNA),
                           (HumidityType.SUBHUMID, BiomeType.MONSOON_FOREST),
                           (HumidityType.SUPERHUMID, BiomeType.RAIN_FOREST)),
}


def biome_types(climate, humidity, elevation) -> np.ndarray:
    """
    Biomes from climate zone, humidity class and normalized elevation above
    sea level. Cold climates turn alpine above ALPINE_ELEVATION; anything the
    table does not cover (supertropical land) is hot desert.
    """
    climate = np.asarray(climate)
    humidity = np.asarray(humidity)
    elevation = np.asarray(elevation, dtype=np.float64)
    shape = np.broadcast(climate, humidity, elevation).shape
    biomes = np.full(shape, BiomeType.HOT_DESERT, dtype=np.int64)
    high = elevation >= DEFAULTS.ALPINE_ELEVATION

    biomes[np.broadcast_to(climate == ClimateType.POLAR, shape)] = BiomeType.POLAR
    biomes[np.broadcast_to((climate == ClimateType.POLAR) & high, shape)] = BiomeType.ALPINE
    biomes[np.broadcast_to(climate == ClimateType.SUBPOLAR, shape)] = BiomeType.TUNDRA
    biomes[np.broadcast_to((climate == ClimateType.SUBPOLAR) & high, shape)] = BiomeType.SUBALPINE

    for zone, bands in _LAND_BIOMES.items():
        in_zone = climate == zone
        # Wettest first, so drier bands overwrite.
        for ceiling, biome in reversed(bands):
            biomes[np.broadcast_to(in_zone & (humidity <= ceiling), shape)] = biome

    biomes[np.broadcast_to(elevation <= 0, shape)] = BiomeType.SEA
    return biomes


def sea_ice_range(latitude, winter_temperature, summer_temperature, elevation):
    """
    The part of the year during which the sea is frozen, as (start, end)
    proportions of the year from the northern winter solstice. The range
    wraps through the solstice when start > end. Land cells and open water
    are NaN; water frozen all year is (0, 1).
    """
    melting_point = substances.get("seawater").melting_point
    winter = np.asarray(winter_temperature, dtype=np.float64)
    summer = np.asarray(summer_temperature, dtype=np.float64)
    latitude = np.asarray(latitude, dtype=np.float64)
    elevation = np.asarray(elevation, dtype=np.float64)
    shape = np.broadcast(latitude, winter, summer, elevation).shape
    low = np.broadcast_to(np.minimum(winter, summer), shape)
    high = np.broadcast_to(np.maximum(winter, summer), shape)

    with np.errstate(divide='ignore', invalid='ignore'):
        below = (melting_point - low) / (high - low)
    proportion = below * DEFAULTS.SEA_ICE_FREEZE_SCALE - DEFAULTS.SEA_ICE_FREEZE_OFFSET

    start = 1 - proportion / 4
    end = proportion * 3 / 4
    # Southern seasons are half a year out of step.
    south = np.broadcast_to(latitude < 0, shape)
    start = np.where(south, (start + 0.5) % 1.0, start)
    end = np.where(south, (end + 0.5) % 1.0, end)

    sea = np.broadcast_to(elevation <= 0, shape)
    frozen = sea & (high < melting_point)
    seasonal = sea & ~frozen & (low < melting_point) & (proportion > 0)
    start = np.where(frozen, 0.0, np.where(seasonal, start, np.nan))
    end = np.where(frozen, 1.0, np.where(seasonal, end, np.nan))
    return start, end


def ice_proportion(start, end) -> np.ndarray:
    """The share of the year covered by a sea ice range; 0 where there is none."""
    start = np.asarray(start, dtype=np.float64)
    end = np.asarray(end, dtype=np.float64)
    span = np.where(end >= start, end - start, 1 - start + end)
    return np.nan_to_num(span, nan=0.0)
