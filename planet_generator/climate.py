# planet_generator/climate.py

"""
================================================================================
CLIMATE RASTER SYNTHESIZER
================================================================================
Produces elevation, temperature, precipitation, snowfall and humidity
rasters for a generated planet, and year-long climate, biome and sea ice
maps. Every pixel is inverted through the map projection to a latitude and
longitude, turned into a unit vector about the planet's tilted
rotation axis, and fed to the planet's seeded noise fields. Latitude terms
(insolation, Hadley circulation) are closed-form.

Data Contract:
---------------
- Inputs:
    - A generated Planet (noise_seeds, atmosphere, orbit and temperatures set).
    - A field, a vertical resolution, a MapProjection and an optional
      proportion of the year (0 is the northern winter solstice).
- Outputs:
    - float64 arrays of shape (height, width):
        - elevation: normalized to [-1, 1] of max elevation.
        - temperature: Kelvin.
        - precipitation and snowfall: mm/hr.
        - humidity: precipitation relative to the atmosphere's average.
        - climate and biome: ClimateType and BiomeType values.
        - sea_ice: proportion of the year the sea is frozen.
    - WeatherMaps from weather_maps(), with humidity classes and sea ice
      (start, end) ranges as well.
- Invariants:
    - Identical inputs produce bit-identical rasters.
    - Noise samplers are owned by a synthesizer instance; pool workers build
      their own.
================================================================================
"""

import enum
import logging
import math
import multiprocessing
import os
import time
from dataclasses import dataclass

import numpy as np
from scipy.ndimage import map_coordinates
from tqdm import tqdm

from . import biomes
from . import config as DEFAULTS
from . import thermal
from .biomes import BiomeType, ClimateType
from .exceptions import ConfigurationError
from .noise import NoiseField, NoiseMode
from .projection import EQUIRECTANGULAR, projection_named

logger = logging.getLogger(__name__)


class ClimateField(enum.Enum):
    ELEVATION = "elevation"
    TEMPERATURE = "temperature"
    PRECIPITATION = "precipitation"
    SNOWFALL = "snowfall"
    HUMIDITY = "humidity"
    CLIMATE = "climate"
    BIOME = "biome"
    SEA_ICE = "sea_ice"


# Fields classified over the whole year rather than per season.
ANNUAL_FIELDS = frozenset({ClimateField.CLIMATE, ClimateField.BIOME, ClimateField.SEA_ICE})
# Fields whose values are enum members rather than measurements.
CATEGORICAL_FIELDS = frozenset({ClimateField.CLIMATE, ClimateField.BIOME})


def climate_field(name) -> ClimateField:
    """Resolves a field given by name; ClimateField members pass through."""
    if isinstance(name, ClimateField):
        return name
    try:
        return ClimateField(str(name).lower())
    except ValueError:
        raise ConfigurationError(f"Unknown climate field: {name!r}") from None


def _hadley_values(latitude):
    """
    Relative humidity contribution of the circulation cells: wet near the
    equator, dry through the subtropics to about pi/5, moist in the temperate
    band and dry again towards the poles.
    """
    return (np.cos(1.25 * math.pi * latitude + math.pi)
            + np.maximum(0.0, 1 / (10 * (latitude + 0.015)) - 2))


@dataclass
class WeatherMaps:
    """Year-long categorical maps of a planet, and its overall classification."""
    climate: ClimateType
    biome: BiomeType
    climate_map: np.ndarray         # ClimateType values
    humidity_map: np.ndarray        # HumidityType values
    biome_map: np.ndarray           # BiomeType values
    sea_ice_start: np.ndarray       # proportion of the year; NaN without ice
    sea_ice_end: np.ndarray

    @property
    def sea_ice_proportion(self) -> np.ndarray:
        return biomes.ice_proportion(self.sea_ice_start, self.sea_ice_end)


class ClimateRasterSynthesizer:
    """Synthesizes climate rasters for a single planet."""

    def __init__(self, planet, logger: logging.Logger = logger):
        self.planet = planet
        self.logger = logger
        if len(planet.noise_seeds) < DEFAULTS.NOISE_SEED_COUNT:
            raise ConfigurationError(
                f"Planet '{planet.name}' carries {len(planet.noise_seeds)} noise seeds; "
                f"{DEFAULTS.NOISE_SEED_COUNT} are required.")

        persistence = DEFAULTS.NOISE_PERSISTENCE
        lacunarity = DEFAULTS.NOISE_LACUNARITY
        seeds = planet.noise_seeds
        self.base_noise = NoiseField(seeds[0], NoiseMode.FRACTAL, *DEFAULTS.ELEVATION_BASE_NOISE,
                                     persistence, lacunarity)
        self.mountain_noise = NoiseField(seeds[1], NoiseMode.BILLOW, *DEFAULTS.ELEVATION_MOUNTAIN_NOISE,
                                         persistence, lacunarity)
        self.mask_noise = NoiseField(seeds[2], NoiseMode.SIMPLEX, *DEFAULTS.ELEVATION_MASK_NOISE)
        self.broad_noise = NoiseField(seeds[3], NoiseMode.SIMPLEX, *DEFAULTS.PRECIPITATION_BROAD_NOISE)
        self.detail_noise = NoiseField(seeds[4], NoiseMode.FRACTAL, *DEFAULTS.PRECIPITATION_DETAIL_NOISE,
                                       persistence, lacunarity)

    # --- Geometry ---

    def surface_vectors(self, lat, lon):
        """Unit vectors for latitude/longitude, tilted with the rotation axis."""
        lat = np.asarray(lat, dtype=np.float64)
        lon = np.asarray(lon, dtype=np.float64)
        cos_lat = np.cos(lat)
        x = cos_lat * np.cos(lon)
        y = cos_lat * np.sin(lon)
        z = np.sin(lat)
        tilt = self.planet.axial_tilt
        cos_t, sin_t = math.cos(tilt), math.sin(tilt)
        return x, y * cos_t - z * sin_t, y * sin_t + z * cos_t

    # --- Per-field samplers ---

    def elevation(self, lat, lon):
        """Normalized elevation in [-1, 1]. Flat where the planet has no relief."""
        lat = np.asarray(lat, dtype=np.float64)
        if self.planet.max_elevation <= 0:
            return np.zeros(np.broadcast(lat, np.asarray(lon)).shape)
        x, y, z = self.surface_vectors(lat, lon)
        n1 = self.base_noise.sample(x, y, z)
        n2 = self.mountain_noise.sample(x, y, z)
        n3 = self.mask_noise.sample(x, y, z)

        # Broad basins and plains, interrupted by sparse ridged mountains.
        mountains = (-n2 - 0.25) * 4 / 3
        base = n1 * (0.25 + mountains * 0.0625) - 0.04
        mountains = mountains * np.clip(n3 + 1, 0.0, 1.0)
        mountains = np.sign(mountains) * mountains * mountains * (0.525 + n1 * 0.13125)
        return np.clip(base + mountains, -1.0, 1.0)

    def elevation_above_sea_level(self, elevation):
        """Metres above sea level, rounded to the elevation step."""
        planet = self.planet
        metres = np.maximum(0.0, np.asarray(elevation) * planet.max_elevation - planet.sea_level)
        step = DEFAULTS.ELEVATION_ROUNDING_M
        return np.round(metres / step) * step

    def season_state(self, proportion_of_year=None):
        """Returns (blackbody temperature, solar declination) for a time of year."""
        planet = self.planet
        if proportion_of_year is None:
            return planet.average_blackbody_temperature, 0.0
        proportion = proportion_of_year % 1.0
        true_anomaly = planet.orbit.true_anomaly_at(proportion) if planet.orbit is not None else 0.0
        blackbody = thermal.temperature_at_true_anomaly(planet, true_anomaly)
        return blackbody, thermal.solar_declination(planet.axial_tilt, proportion)

    def temperature(self, lat, elevation, proportion_of_year=None):
        """Surface air temperature (K) for latitudes and normalized elevations."""
        blackbody, declination = self.season_state(proportion_of_year)
        seasonal_lat = thermal.seasonal_latitude(lat, declination)
        surface = thermal.seasonal_surface_temperature(self.planet, blackbody, seasonal_lat)
        return thermal.temperature_at_elevation(
            self.planet, surface, self.elevation_above_sea_level(elevation))

    def humidity(self, lat, lon, temperature, proportion_of_year=None):
        """
        Relative humidity: precipitation as a multiple of the atmosphere's
        average. Zero everywhere without an atmosphere that rains.
        """
        atmosphere = self.planet.atmosphere
        lat = np.asarray(lat, dtype=np.float64)
        if atmosphere is None or atmosphere.average_precipitation <= 0:
            return np.zeros(np.broadcast(lat, np.asarray(temperature)).shape)

        _, declination = self.season_state(proportion_of_year)
        seasonal_lat = thermal.seasonal_latitude(lat, declination)
        x, y, z = self.surface_vectors(lat, lon)

        # Broad regional wetness, with minor local variation.
        broad = 0.5 + self.broad_noise.sample(x, y, z) * 1.5
        detail = self.detail_noise.sample(x, y, z) * 0.1 + 0.9
        noise = broad * detail

        latitude = np.round(np.maximum(0.0, np.abs(seasonal_lat) - DEFAULTS.HADLEY_LATITUDE_OFFSET), 3)
        humidity = noise + _hadley_values(latitude)
        humidity = humidity * np.clip(
            (temperature - DEFAULTS.PRECIPITATION_CUTOFF_TEMPERATURE) / DEFAULTS.PRECIPITATION_FADE_RANGE_K,
            0.0, 1.0)

        # The tropics are wetter, with spikes along the convergence zone.
        tropical = latitude < DEFAULTS.ITCZ_LATITUDE
        humidity = np.where(
            tropical, humidity + broad * (DEFAULTS.ITCZ_LATITUDE - latitude) / DEFAULTS.ITCZ_LATITUDE, humidity)
        spike = tropical & (latitude < DEFAULTS.ITCZ_LATITUDE / 2) & (humidity > 0)
        humidity = np.where(spike, humidity * (1 + (detail - 0.9) * 40), humidity)

        # Polar desert.
        humidity = np.where(np.abs(seasonal_lat) > DEFAULTS.ARCTIC_LATITUDE,
                            np.minimum(humidity, DEFAULTS.POLAR_MAX_HUMIDITY), humidity)
        return np.maximum(humidity, 0.0)

    def precipitation(self, lat, lon, temperature, proportion_of_year=None):
        """Returns (precipitation, snowfall) in mm/hr."""
        atmosphere = self.planet.atmosphere
        humidity = self.humidity(lat, lon, temperature, proportion_of_year)
        if atmosphere is None:
            return humidity, humidity.copy()
        precipitation = max(atmosphere.average_precipitation, 0.0) * humidity
        snowfall = np.where(np.asarray(temperature) <= DEFAULTS.WATER_FREEZING_POINT,
                            precipitation * DEFAULTS.SNOW_TO_RAIN_RATIO, 0.0)
        return precipitation, snowfall

    def weather_maps(self, resolution: int = DEFAULTS.DEFAULT_RASTER_RESOLUTION,
                     projection=EQUIRECTANGULAR) -> "WeatherMaps":
        """
        Year-long categorical maps: climate zones from the solstice
        temperatures, humidity classes and biomes from the annual
        precipitation, and the sea ice season. Also classifies the planet as
        a whole.
        """
        projection = projection_named(projection)
        lat, lon = projection.lat_lon_grid(resolution)
        elevation = self.elevation(lat, lon)
        winter = self.temperature(lat, elevation, 0.0)
        summer = self.temperature(lat, elevation, 0.5)
        precipitation, _ = self.precipitation(lat, lon, self.temperature(lat, elevation))
        low, high = np.minimum(winter, summer), np.maximum(winter, summer)
        above_sea = elevation - self.planet.normalized_sea_level

        climate_map = biomes.climate_types(low, high)
        humidity_map = biomes.humidity_types(precipitation)
        biome_map = biomes.biome_types(climate_map, humidity_map, above_sea)
        sea_ice_start, sea_ice_end = biomes.sea_ice_range(lat, winter, summer, above_sea)

        climate = biomes.climate_types(low.min(), high.max(), ((low + high) / 2).mean())
        humidity = biomes.humidity_types(precipitation.mean())
        biome = biomes.biome_types(climate, humidity, above_sea.mean())
        maps = WeatherMaps(ClimateType(int(climate)), BiomeType(int(biome)), climate_map, humidity_map,
                           biome_map, sea_ice_start, sea_ice_end)
        self.logger.debug(f"Weather maps for '{self.planet.name}': {maps.climate.name.lower()} climate, "
                          f"{maps.biome.name.lower()} biome.")
        return maps

    # --- Rasters ---

    def rasterize(self, field, resolution: int = DEFAULTS.DEFAULT_RASTER_RESOLUTION,
                  projection=EQUIRECTANGULAR, season=None) -> np.ndarray:
        """
        Builds a full raster for one field.

        Args:
            field (ClimateField | str): Which field to synthesize.
            resolution (int): Vertical resolution in rows.
            projection (MapProjection | str): Projection of the output grid.
            season (float | None): Proportion of the year; None gives the
                annual average. Year-long fields (climate, biome, sea ice)
                ignore it.
        """
        field = climate_field(field)
        projection = projection_named(projection)
        if field in ANNUAL_FIELDS:
            maps = self.weather_maps(resolution, projection)
            if field == ClimateField.CLIMATE:
                return maps.climate_map.astype(np.float64)
            if field == ClimateField.BIOME:
                return maps.biome_map.astype(np.float64)
            return maps.sea_ice_proportion
        lat, lon = projection.lat_lon_grid(resolution)

        elevation = self.elevation(lat, lon)
        if field == ClimateField.ELEVATION:
            return elevation
        temperature = self.temperature(lat, elevation, season)
        if field == ClimateField.TEMPERATURE:
            return temperature
        if field == ClimateField.HUMIDITY:
            return self.humidity(lat, lon, temperature, season)
        precipitation, snowfall = self.precipitation(lat, lon, temperature, season)
        return precipitation if field == ClimateField.PRECIPITATION else snowfall

    def rasterize_seasons(self, field, resolution: int = DEFAULTS.DEFAULT_RASTER_RESOLUTION,
                          projection=EQUIRECTANGULAR, steps: int = DEFAULTS.DEFAULT_SEASON_STEPS,
                          processes=None, show_progress: bool = True, only=None) -> list:
        """
        Synthesizes `steps` rasters evenly spaced through the year, the first
        at the winter solstice. Steps run in a process pool unless a single
        process is requested. When `only` names step indices, the other steps
        are skipped and left as None.
        """
        field = climate_field(field)
        projection = projection_named(projection)
        steps = max(1, int(steps))
        tasks = [(index, field, resolution, projection, index / steps) for index in range(steps)
                 if only is None or index in only]
        if processes is None:
            processes = max(1, multiprocessing.cpu_count() - 1)

        start_time = time.perf_counter()
        rasters = [None] * steps
        if not tasks:
            return rasters
        desc = f"Synthesizing {field.value} seasons"
        if field in ANNUAL_FIELDS:
            # The same map for every step.
            raster = self.rasterize(field, resolution, projection)
            for index, *_ in tasks:
                rasters[index] = raster.copy()
        elif processes == 1 or len(tasks) == 1:
            for index, _, res, proj, proportion in tqdm(tasks, total=len(tasks), desc=desc, disable=not show_progress):
                rasters[index] = self.rasterize(field, res, proj, proportion)
        else:
            self.logger.info(f"Starting seasonal synthesis with {processes} worker processes...")
            with multiprocessing.Pool(processes=processes, initializer=init_worker,
                                      initargs=(self.planet,)) as pool:
                results = pool.imap_unordered(process_season, tasks)
                for index, raster in tqdm(results, total=len(tasks), desc=desc, disable=not show_progress):
                    rasters[index] = raster

        self.logger.info(f"Synthesized {len(tasks)} {field.value} rasters in "
                         f"{time.perf_counter() - start_time:.2f} seconds.")
        return rasters


def interpolate(rasters, proportion_of_year: float) -> np.ndarray:
    """Linear blend between the two season steps either side of a time of year."""
    if not rasters:
        raise ConfigurationError("At least one seasonal raster is required.")
    count = len(rasters)
    position = (proportion_of_year % 1.0) * count
    index = int(math.floor(position)) % count
    weight = position - math.floor(position)
    following = rasters[(index + 1) % count]
    return rasters[index] + (following - rasters[index]) * weight


def resample(raster, source_projection, target_projection, resolution: int) -> np.ndarray:
    """
    Reprojects (and rescales) a raster by bilinear sampling at the target
    grid's pixel centres.
    """
    source = projection_named(source_projection)
    target = projection_named(target_projection)
    raster = np.asarray(raster, dtype=np.float64)
    lat, lon = target.lat_lon_grid(resolution)
    x, y = source.lat_lon_to_coordinates(lat, lon, raster.shape[0])
    return map_coordinates(raster, [y, x], order=1, mode='nearest')


# --- Pool workers ---

# Global variables for each worker process.
worker_synthesizer = None
worker_logger = None


def init_worker(planet):
    """
    Initializer for each worker process. Builds a synthesizer, and with it
    independent noise samplers, once per process.
    """
    global worker_synthesizer, worker_logger
    worker_logger = logging.getLogger(f"Worker-{os.getpid()}")
    worker_synthesizer = ClimateRasterSynthesizer(planet, logger=worker_logger)
    worker_logger.debug("Worker initialized.")


def process_season(task):
    """Synthesizes one seasonal step. Returns (index, raster)."""
    index, field, resolution, projection, proportion = task
    raster = worker_synthesizer.rasterize(field, resolution, projection, proportion)
    return index, raster
