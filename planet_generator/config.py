# planet_generator/config.py

"""
================================================================================
INTERNAL DEFAULT CONFIGURATION
================================================================================
This module contains the default, fallback internal constants for the planet
generator. These values are used if they are not explicitly provided by the
user's configuration.

DO NOT MODIFY THIS FILE FOR A SPECIFIC SIMULATION.
Instead, pass a configuration dictionary to the PlanetGenerator instance.
================================================================================
"""

import math

from scipy import constants as _constants

# --- Seeds ---
DEFAULT_SEED = 1337
# Large prime numbers used to offset seeds for the different generation
# stages, ensuring they are unique but deterministic from the master seed.
COMPOSITION_SEED_OFFSET = 12347
ATMOSPHERE_SEED_OFFSET = 98761
HYDROSPHERE_SEED_OFFSET = 54321
ORBIT_SEED_OFFSET = 25391
# Number of independent noise seeds carried by every planet (elevation uses
# three, precipitation two).
NOISE_SEED_COUNT = 5

# --- Physical Constants (SI) ---
GRAVITATIONAL_CONSTANT = _constants.G
STEFAN_BOLTZMANN = _constants.Stefan_Boltzmann
GAS_CONSTANT = _constants.R
ASTRONOMICAL_UNIT = _constants.au
MOLAR_MASS_AIR = 0.0289644              # kg/mol
R_SPECIFIC_DRY_AIR = 287.058            # J/(kg·K)
CP_DRY_AIR = 1005.0                     # J/(kg·K)
CP_TIMES_R_SPECIFIC_DRY_AIR = CP_DRY_AIR * R_SPECIFIC_DRY_AIR
DELTA_HVAP_WATER = 2501000.0            # J/kg
R_SPECIFIC_RATIO_DRY_AIR_TO_WATER = 0.6219800858985514
SOLAR_LUMINOSITY = 3.828e26             # W

# --- Earth Reference Values ---
EARTH_ALBEDO = 0.325
EARTH_ATMOSPHERIC_PRESSURE = 101.325    # kPa
EARTH_AXIAL_TILT = 0.41                 # radians
EARTH_ECCENTRICITY = 0.0167
EARTH_MASS = 5.97e24                    # kg
EARTH_RADIUS = 6371000.0                # m
EARTH_SURFACE_GRAVITY = 9.807           # m/s²
EARTH_SURFACE_TEMPERATURE = 289.0       # K
EARTH_WATER_RATIO = 0.709
EARTH_WATER_VAPOR_RATIO = 0.0025
EARTH_REVOLUTION_PERIOD = 31558150.0    # s
EARTH_ROTATION_PERIOD = 86164.0         # s

# --- Body Construction ---
# Minimum radius of a body in hydrostatic equilibrium. Anything smaller is
# clamped up to this value (asteroids and comets excepted).
MIN_PLANET_RADIUS = 600000.0            # m
MAX_FLATTENING = 0.1
# The crust proportion is CRUST_PROPORTION_NUMERATOR / radius^CRUST_PROPORTION_EXPONENT.
CRUST_PROPORTION_NUMERATOR = 400000.0
CRUST_PROPORTION_EXPONENT = 1.6
# Temperature increase with depth towards the core boundary.
MANTLE_BOUNDARY_GRADIENT = 0.025        # K per m of crust
CORE_GEOTHERMAL_GRADIENT = 0.001        # K per m of mantle
# Ambient temperature of a body with no internal heat source.
COSMIC_BACKGROUND_TEMPERATURE = 2.725   # K
# Max elevation is MAX_ELEVATION_FACTOR / surface gravity.
MAX_ELEVATION_FACTOR = 200000.0

# --- Atmosphere ---
GIANT_ATMOSPHERIC_PRESSURE = 1000.0     # kPa
SMALL_BODY_ATMOSPHERIC_PRESSURE = 1e-8  # kPa
DWARF_MAX_ATMOSPHERIC_PRESSURE = 2.5    # kPa
TRACE_MAX_ATMOSPHERIC_PRESSURE = 25.0   # kPa
# Mass divisor (normal distribution) for a thick atmosphere generated from
# the planet's mass.
ATMOSPHERE_MASS_DIVISOR_MEAN = 1158568.0
ATMOSPHERE_MASS_DIVISOR_SIGMA = 38600.0
ATMOSPHERE_MASS_DIVISOR_MIN = 579300.0
ATMOSPHERE_MASS_DIVISOR_MAX = 1737900.0
# Factor used with 2GM/R to find the blackbody temperature above which only a
# trace atmosphere is retained.
THIN_ATMOSPHERE_ESCAPE_FACTOR = 7.0594833834763e-5
# Pressure at the top of the atmosphere, in kPa.
ATMOSPHERE_TOP_PRESSURE = 0.0005
# Greenhouse factor fit: A + B * exp(C * potential) * (D + ln(pressure)).
GREENHOUSE_FACTOR_A = 0.933835
GREENHOUSE_FACTOR_B = 0.0441533
GREENHOUSE_FACTOR_C = 1.79077
GREENHOUSE_FACTOR_D = 1.11169
# Insolation factor: (INSOLATION_CONSTANT * atmosphere mass * transmission / planet mass)^0.25
INSOLATION_CONSTANT = 1320000.0
ATMOSPHERIC_TRANSMISSION = 0.7
INSOLATION_AIR_MASS_EXPONENT = 0.678
COS_POLAR_LATITUDE = 0.095
# Averaged humidity applied when a volatile is saturated.
SATURATED_HUMIDITY_FACTOR = 0.25
# Oxygen accompanying water vapor on non-carbon worlds.
WATER_OXYGEN_RATIO = 1e-4
MAX_EVAPORATED_WATER_VAPOR = 0.001
# Carbon-silicate cycle: humidity threshold (fraction of water's vapor
# pressure) and the CO2 level considered already trace.
CO2_REDUCTION_HUMIDITY = 0.01
CO2_TRACE_THRESHOLD = 1e-3
CO2_REDUCED_RANGE = (15e-6, 0.001)
REFLECTIVE_SURFACE_ALBEDO = 0.9
CLOUD_COVER_DIVISOR = 100.0
# Precipitation constants (mm/hr).
WETNESS_MASS_DIVISOR = 1.287e16
STANDARD_HEIGHT_DENSITY = 124191.6
AVERAGE_PRECIPITATION_SCALE = 0.11293634496919917
MAX_PRECIPITATION_FACTOR = 7.0806859149236827
SNOW_TO_RAIN_RATIO = 13.0
# Maximum number of re-entries of the phase equilibrium and the temperature
# change which triggers one.
MAX_EQUILIBRATION_PASSES = 10
EQUILIBRATION_THRESHOLD_K = 5.0

# --- Hydrosphere ---
EMPTY_SEA_LEVEL = -1.1                  # normalized to max elevation
# Proportion of max elevation of a random elevation map * 1/(e-1).
RANDOM_MAP_ELEVATION_FACTOR = 0.33975352675545284
# Empirical sum of random map pixel columns with zero sea level.
HYDROSPHERE_HALF_VOLUME = 85183747862278.266
SEAWATER_PROPORTION_MEAN = 0.945
SEAWATER_PROPORTION_SIGMA = 0.015
DEEP_OCEAN_TEMPERATURE = 277.0          # K
DEEP_OCEAN_DEPTH = 1000.0               # m
SHALLOW_OCEAN_DEPTH = 200.0             # m
OCEAN_WATER_RATIO_MEAN = 1.0
OCEAN_WATER_RATIO_SIGMA = 0.2

# --- Orbit, Rotation & Magnetosphere ---
DEFAULT_ORBITAL_DISTANCE = ASTRONOMICAL_UNIT
ECCENTRICITY_SIGMA = 0.05
ASTEROID_MAX_ECCENTRICITY = 0.4
MAX_ECCENTRICITY = 0.99
TERRESTRIAL_ROTATION_RANGE = (40000.0, 6500000.0)            # s
TERRESTRIAL_EXTREME_ROTATION_RANGE = (6500000.0, 22000000.0)
ROTATION_RANGE = (8000.0, 100000.0)
EXTREME_ROTATION_RANGE = (100000.0, 1100000.0)
EXTREME_ROTATION_CHANCE = 0.05
EXTREME_TILT_CHANCE = 0.2
# Tidal locking: an orbit age drawn from a logistic distribution times
# TIDAL_REFERENCE_AGE, against the body's rigidity.
TIDAL_REFERENCE_AGE = 4.6e9             # years
TIDAL_LOCK_DIVISOR = 6e11
RIGIDITY = 3e10
COMET_RIGIDITY = 4e9
MAGNETOSPHERE_FACTOR = 2.88e-19
# Planet types with a more (or less) likely magnetosphere.
MAGNETOSPHERE_TYPE_FACTORS = {"iron": 5.0, "ocean": 0.5}
# Light worlds without a magnetosphere keep a much thinner atmosphere.
MAGNETOSPHERE_FREE_MASS = 1.5e24        # kg
THIN_ATMOSPHERE_MASS_DIVISOR = (7723785.0, 258000.0, 3862000.0, 11586000.0)

# --- Habitable Planet Search ---
MAX_HABITABLE_ATTEMPTS = 100

# --- Temperature Convergence ---
MAX_CONVERGENCE_PASSES = 10
CONVERGENCE_TOLERANCE_K = 0.5
# Fraction of the correction removed when the delta changes sign.
CONVERGENCE_DAMPING = 0.5
# Converts a target average surface temperature to an equatorial target.
EQUATORIAL_TARGET_FACTOR = 1.06
# Typical average elevation as a proportion of max elevation.
AVERAGE_ELEVATION_FACTOR = 0.04
INITIAL_GREENHOUSE_GUESS_K = 30.0
# Bounds on the achieved-per-effective kelvin gain estimated between passes.
CONVERGENCE_MIN_GAIN = 0.25
CONVERGENCE_MAX_GAIN = 4.0
# Lowest stellar heating (K above internal) a guess may ask for.
MIN_EFFECTIVE_TEMPERATURE_K = 10.0
# Orbits the controller may place a planet on (m).
MIN_ORBITAL_DISTANCE = 1.0e9
MAX_ORBITAL_DISTANCE = 1.0e14

# --- Rotation ---
# Rotation periods (s) separating the area ratios used for blackbody
# temperature: fast rotators spread heat over the whole sphere.
FAST_ROTATION_PERIOD = 2500.0
AREA_RATIO_THRESHOLDS = ((75000.0, 4.0), (150000.0, 3.0), (300000.0, 2.0))
DIURNAL_PERIOD_RANGE = 595000.0

# --- Climate Rasters ---
DEFAULT_RASTER_RESOLUTION = 90          # rows
DEFAULT_SEASON_STEPS = 12
ARCTIC_LATITUDE_RANGE = math.pi / 16
ARCTIC_LATITUDE = math.pi / 2 - ARCTIC_LATITUDE_RANGE
# Latitudes within this distance of the seasonal equator share its humidity.
HADLEY_LATITUDE_OFFSET = math.pi / 36
# Ceiling on relative humidity inside the polar cap.
POLAR_MAX_HUMIDITY = 0.5
ITCZ_LATITUDE = math.pi / 8
# Below this temperature (K) there is no precipitation at all; it fades in
# over PRECIPITATION_FADE_RANGE_K.
PRECIPITATION_CUTOFF_TEMPERATURE = 273.15 - 48.0
PRECIPITATION_FADE_RANGE_K = 16.0
WATER_FREEZING_POINT = 273.15
# Elevations used for temperature rasters are rounded to this step (m).
ELEVATION_ROUNDING_M = 100.0

# --- Climate and Biome Classification ---
# Annual temperature bounds (K) separating climate zones.
SUBPOLAR_MAX_TEMPERATURE = 280.15
BOREAL_MIN_TEMPERATURE = 263.15
BOREAL_MAX_TEMPERATURE = 288.15
TEMPERATE_MIN_TEMPERATURE = 283.15
COOL_TEMPERATE_MAX_TEMPERATURE = 295.15
SUBTROPICAL_MIN_TEMPERATURE = 291.15
TROPICAL_MAX_AVERAGE_TEMPERATURE = 341.15
# Upper bounds of the humidity classes, in mm of precipitation per year.
HUMIDITY_CLASS_LIMITS_MM = (125.0, 250.0, 500.0, 1000.0, 2000.0, 4000.0, 8000.0)
HOURS_PER_YEAR = 8766.0
# Normalized height above sea level where cold climates turn alpine.
ALPINE_ELEVATION = 0.15
# Sea ice forms over this share of the part of the year spent below freezing.
SEA_ICE_FREEZE_SCALE = 0.8
SEA_ICE_FREEZE_OFFSET = 0.1

# Noise layer settings: (frequency, octaves)
ELEVATION_BASE_NOISE = (0.8, 6)
ELEVATION_MOUNTAIN_NOISE = (0.6, 6)
ELEVATION_MASK_NOISE = (1.2, 1)
PRECIPITATION_BROAD_NOISE = (1.0, 1)
PRECIPITATION_DETAIL_NOISE = (3.0, 3)
NOISE_PERSISTENCE = 0.5
NOISE_LACUNARITY = 2.0

# --- Raster Encoding ---
MAX_ENCODED_TEMPERATURE = 1000.0        # K
MAX_ENCODED_HUMIDITY = 10.0           # relative to average precipitation
ENCODING_MAX_VALUE = 65535

# --- Baking ---
DEFAULT_BAKE_DIRECTORY = "baked_planets"
DEFAULT_BAKE_FIELDS = ["elevation", "temperature", "precipitation", "snowfall"]
