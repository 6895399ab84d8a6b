# planet_generator/encoding.py

"""
================================================================================
RASTER ENCODING
================================================================================
Converts climate rasters to and from single-channel 16-bit luminosity values,
and to and from Pillow images.

Data Contract:
---------------
- elevation: [-1, 1] of max elevation maps linearly to [0, 65535], sea level
  at the midpoint.
- temperature: absolute, [0, MAX_ENCODED_TEMPERATURE] K.
- precipitation and snowfall: relative to the atmosphere's maximum capacity
  for each.
- humidity: [0, MAX_ENCODED_HUMIDITY]; sea_ice: [0, 1] of the year.
- climate and biome: the enum value itself, unscaled.
- Values outside a field's range are clipped.
================================================================================
"""

import numpy as np
from PIL import Image

from . import config as DEFAULTS
from .climate import CATEGORICAL_FIELDS, ClimateField, climate_field


def _field_range(field: ClimateField, planet) -> tuple[float, float]:
    if field == ClimateField.ELEVATION:
        return -1.0, 1.0
    if field == ClimateField.TEMPERATURE:
        return 0.0, DEFAULTS.MAX_ENCODED_TEMPERATURE
    if field == ClimateField.HUMIDITY:
        return 0.0, DEFAULTS.MAX_ENCODED_HUMIDITY
    if field == ClimateField.SEA_ICE:
        return 0.0, 1.0
    atmosphere = planet.atmosphere
    if field == ClimateField.PRECIPITATION:
        return 0.0, atmosphere.max_precipitation
    return 0.0, atmosphere.max_snowfall


def encode(raster, field, planet) -> np.ndarray:
    """Scales a float raster to uint16."""
    field = climate_field(field)
    raster = np.asarray(raster, dtype=np.float64)
    if field in CATEGORICAL_FIELDS:
        return np.clip(np.round(raster), 0, DEFAULTS.ENCODING_MAX_VALUE).astype(np.uint16)
    low, high = _field_range(field, planet)
    if high <= low:
        return np.zeros(raster.shape, dtype=np.uint16)
    scaled = np.clip((raster - low) / (high - low), 0.0, 1.0)
    return np.round(scaled * DEFAULTS.ENCODING_MAX_VALUE).astype(np.uint16)


def decode(values, field, planet) -> np.ndarray:
    """The inverse of encode, to within one quantization step."""
    field = climate_field(field)
    if field in CATEGORICAL_FIELDS:
        return np.asarray(values, dtype=np.float64)
    low, high = _field_range(field, planet)
    scaled = np.asarray(values, dtype=np.float64) / DEFAULTS.ENCODING_MAX_VALUE
    return low + scaled * (high - low)


def to_image(values) -> Image.Image:
    return Image.fromarray(np.ascontiguousarray(values, dtype=np.uint16))


def from_image(image: Image.Image) -> np.ndarray:
    # 16-bit PNGs may open as "I;16" or as 32-bit "I", depending on Pillow.
    return np.asarray(image).astype(np.uint16)
