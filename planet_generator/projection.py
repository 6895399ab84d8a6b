# planet_generator/projection.py

"""
================================================================================
MAP PROJECTIONS
================================================================================
Bidirectional mapping between (latitude, longitude) and raster pixel
coordinates for the equirectangular and cylindrical equal-area projections.

Data Contract:
---------------
- Inputs:
    - resolution: the vertical resolution (number of rows) of the raster.
    - Latitudes in [-pi/2, pi/2] (north positive), longitudes in [-pi, pi].
- Outputs:
    - Pixel indices with (0, 0) at the north-west corner; pixel (x, y)
      covers [x, x+1) x [y, y+1). lat_lon_to_coordinates gives continuous
      positions with pixel centres at whole numbers, for resampling.
- Side Effects: None.
- Invariants: pixel_to_lat_lon(lat_lon_to_pixel(lat, lon)) is within one
  pixel's angular resolution of (lat, lon).
================================================================================
"""

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

from .exceptions import ConfigurationError

HALF_PI = math.pi / 2


def _wrap_longitude(lon):
    return (np.asarray(lon) + math.pi) % (2 * math.pi) - math.pi


@dataclass(frozen=True)
class MapProjection:
    """
    Options for a cylindrical map projection.

    ``range`` limits the latitude span shown (radians, at most pi); the
    equal-area variant scales by the cosine of the standard parallel (or of
    the central parallel when no standard parallel is given).
    """
    central_meridian: float = 0.0
    central_parallel: float = 0.0
    standard_parallel: Optional[float] = None
    range: Optional[float] = None
    equal_area: bool = False

    def __post_init__(self):
        # Clamp to valid angles rather than rejecting them.
        object.__setattr__(self, 'central_meridian', min(max(self.central_meridian, -math.pi), math.pi))
        object.__setattr__(self, 'central_parallel', min(max(self.central_parallel, -HALF_PI), HALF_PI))
        if self.standard_parallel is not None:
            object.__setattr__(self, 'standard_parallel', min(max(self.standard_parallel, -HALF_PI), HALF_PI))
        if self.range is not None:
            object.__setattr__(self, 'range', min(max(self.range, 0.0), math.pi))

    @property
    def scale_factor(self) -> float:
        parallel = self.standard_parallel if self.standard_parallel is not None else self.central_parallel
        return max(math.cos(parallel), 1e-6)

    @property
    def aspect_ratio(self) -> float:
        if self.equal_area:
            return math.pi * self.scale_factor ** 2
        return 2.0

    @property
    def latitude_range(self) -> float:
        if self.range is None or self.range <= 0:
            return math.pi
        return self.range

    @property
    def key(self) -> str:
        """A stable identifier used for caching rasters."""
        kind = "cea" if self.equal_area else "eqr"
        sp = "none" if self.standard_parallel is None else f"{self.standard_parallel:.6f}"
        return (f"{kind}_cm{self.central_meridian:.6f}_cp{self.central_parallel:.6f}"
                f"_sp{sp}_r{self.latitude_range:.6f}")

    def dimensions(self, resolution: int) -> tuple[int, int]:
        """Returns (width, height) for the given vertical resolution."""
        width = max(1, int(math.floor(resolution * self.aspect_ratio)))
        return width, int(resolution)

    def _vertical_extent(self) -> float:
        # Equal-area rows are spaced evenly in sin(latitude) / scale factor.
        if self.equal_area:
            return 2 * math.sin(self.latitude_range / 2) / self.scale_factor
        return self.latitude_range

    def pixel_to_lat_lon(self, x, y, resolution: int):
        """
        Converts (possibly fractional) pixel indices to latitude/longitude at
        the pixel centres. Accepts scalars or NumPy arrays.
        """
        width, height = self.dimensions(resolution)
        cell = self._vertical_extent() / height
        v = (height / 2 - (np.asarray(y, dtype=np.float64) + 0.5)) * cell
        u = (np.asarray(x, dtype=np.float64) + 0.5 - width / 2) * cell
        if self.equal_area:
            lat = np.arcsin(np.clip(v * self.scale_factor, -1.0, 1.0)) + self.central_parallel
            lon = u / self.scale_factor + self.central_meridian
        else:
            lat = v + self.central_parallel
            lon = u + self.central_meridian
        lat = np.clip(lat, -HALF_PI, HALF_PI)
        return lat, _wrap_longitude(lon)

    def lat_lon_to_coordinates(self, lat, lon, resolution: int):
        """Continuous pixel coordinates, with pixel centres at whole numbers."""
        width, height = self.dimensions(resolution)
        cell = self._vertical_extent() / height
        dlon = _wrap_longitude(np.asarray(lon, dtype=np.float64) - self.central_meridian)
        dlat = np.asarray(lat, dtype=np.float64) - self.central_parallel
        if self.equal_area:
            v = np.sin(dlat) / self.scale_factor
            u = dlon * self.scale_factor
        else:
            v = dlat
            u = dlon
        return u / cell + width / 2 - 0.5, height / 2 - v / cell - 0.5

    def lat_lon_to_pixel(self, lat, lon, resolution: int):
        """
        Converts latitude/longitude to integer pixel indices, clamped to the
        raster bounds.
        """
        width, height = self.dimensions(resolution)
        x, y = self.lat_lon_to_coordinates(lat, lon, resolution)
        x = np.floor(x + 0.5)
        y = np.floor(y + 0.5)
        x = np.clip(x, 0, width - 1).astype(np.int64)
        y = np.clip(y, 0, height - 1).astype(np.int64)
        return x, y

    def pixel_angular_resolution(self, y, resolution: int):
        """
        Returns the (latitude, longitude) angular size of the pixel(s) in the
        given row(s).
        """
        width, height = self.dimensions(resolution)
        cell = self._vertical_extent() / height
        y = np.asarray(y, dtype=np.float64)
        top, _ = self.pixel_to_lat_lon(0, y - 0.5, resolution)
        bottom, _ = self.pixel_to_lat_lon(0, y + 0.5, resolution)
        dlat = np.abs(top - bottom)
        dlon = cell / self.scale_factor if self.equal_area else cell
        return dlat, np.full_like(dlat, dlon)

    def lat_lon_grid(self, resolution: int):
        """Returns (lat, lon) arrays of shape (height, width) at pixel centres."""
        width, height = self.dimensions(resolution)
        xs, ys = np.meshgrid(np.arange(width), np.arange(height))
        return self.pixel_to_lat_lon(xs, ys, resolution)


EQUIRECTANGULAR = MapProjection()
EQUAL_AREA = MapProjection(equal_area=True)

PROJECTIONS = {
    "equirectangular": EQUIRECTANGULAR,
    "equal_area": EQUAL_AREA,
}


def projection_named(name) -> MapProjection:
    """Resolves a projection given by name; MapProjection instances pass through."""
    if isinstance(name, MapProjection):
        return name
    try:
        return PROJECTIONS[str(name).lower()]
    except KeyError:
        raise ConfigurationError(f"Unknown projection: {name!r}") from None
