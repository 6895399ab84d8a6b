# planet_generator/thermal.py

"""
================================================================================
THERMAL MODEL
================================================================================
Blackbody, insolation, greenhouse and lapse-rate calculations shared by the
atmosphere solver, the convergence controller and the climate rasters.

Every function is pure apart from set_blackbody_temperatures(), which caches
the periapsis/apoapsis blackbody temperatures on the planet.

Data Contract:
---------------
- Inputs: a planet exposing mass, radius, surface_gravity, albedo,
  rotational_period, internal_temperature, axial_tilt, max_elevation, orbit,
  star and atmosphere (see planet.py and atmosphere.py).
- Outputs: temperatures in K, distances in m, rates in K/m.
- Invariants:
    - A planet with an empty atmosphere has an insolation factor of 1 and no
      greenhouse effect.
    - Without a star or orbit, every blackbody temperature equals the
      planet's internal temperature.
================================================================================
"""

import math

import numpy as np

from . import config as DEFAULTS

FOUR_PI = 4 * math.pi
HALF_PI = math.pi / 2


# --- Blackbody ---

def area_ratio(rotational_period: float) -> float:
    """Fraction of the sphere effectively heated, by rotation speed."""
    if rotational_period <= DEFAULTS.FAST_ROTATION_PERIOD:
        return 1.0
    for threshold, ratio in DEFAULTS.AREA_RATIO_THRESHOLDS:
        if rotational_period <= threshold:
            return ratio
    return 1.0


def blackbody_temperature(luminosity, distance, albedo, rotational_period, internal_temperature=0.0):
    if albedo >= 1 or luminosity <= 0 or distance <= 0:
        return internal_temperature
    flux_term = (luminosity / (distance * distance)) ** 0.25
    absorption = ((1 - albedo) / (FOUR_PI * DEFAULTS.STEFAN_BOLTZMANN * area_ratio(rotational_period))) ** 0.25
    return internal_temperature + flux_term * absorption


def set_blackbody_temperatures(planet):
    """Caches current, periapsis, apoapsis and orbit-averaged blackbody temperatures."""
    internal = planet.internal_temperature
    star, orbit = planet.star, planet.orbit
    if star is None or orbit is None:
        planet.blackbody_temperature = internal
        planet.periapsis_temperature = internal
        planet.apoapsis_temperature = internal
        planet.average_blackbody_temperature = internal
        return

    def at(distance):
        return blackbody_temperature(star.luminosity, distance, planet.albedo, planet.rotational_period, internal)

    e = orbit.eccentricity
    current_distance = orbit.distance_at(orbit.true_anomaly)
    planet.blackbody_temperature = at(current_distance)
    planet.periapsis_temperature = at(orbit.periapsis)
    planet.apoapsis_temperature = at(orbit.apoapsis)
    planet.average_blackbody_temperature = (
        planet.periapsis_temperature * (1 + e) + planet.apoapsis_temperature * (1 - e)) / 2


def distance_for_temperature(planet, temperature: float) -> float:
    """Distance from the star at which the blackbody temperature (above ambient) is reached."""
    temperature = max(temperature, 1e-3)
    return math.sqrt(
        planet.star.luminosity * (1 - planet.albedo)
        / (temperature ** 4 * FOUR_PI * DEFAULTS.STEFAN_BOLTZMANN * area_ratio(planet.rotational_period)))


def surface_albedo_for_temperature(planet, temperature: float) -> float:
    """
    The surface albedo giving the requested blackbody temperature (above
    ambient) at the mean orbital distance, keeping the current difference
    between total and surface albedo.
    """
    distance = planet.orbit.mean_distance
    value = 1 - (distance ** 2 * max(temperature, 0.0) ** 4 * FOUR_PI * DEFAULTS.STEFAN_BOLTZMANN
                 * area_ratio(planet.rotational_period) / planet.star.luminosity)
    return max(0.0, value - (planet.albedo - planet.surface_albedo))


# --- Atmospheric effects ---

def greenhouse_factor(greenhouse_potential: float, pressure: float) -> float:
    if abs(greenhouse_potential) < 1e-12 or pressure <= 0:
        return 1.0
    return (DEFAULTS.GREENHOUSE_FACTOR_A
            + DEFAULTS.GREENHOUSE_FACTOR_B * math.exp(DEFAULTS.GREENHOUSE_FACTOR_C * greenhouse_potential)
            * (DEFAULTS.GREENHOUSE_FACTOR_D + math.log(pressure)))


def polar_air_mass(radius: float, scale_height: float) -> float:
    r = radius / scale_height
    r_cos_lat = r * DEFAULTS.COS_POLAR_LATITUDE
    return math.sqrt(r_cos_lat * r_cos_lat + 2 * r + 1) - r_cos_lat


def insolation_factor(atmosphere_mass, planet_mass, radius=None, scale_height=None, polar=False) -> float:
    if atmosphere_mass <= 0 or planet_mass <= 0:
        return 1.0
    transmission = DEFAULTS.ATMOSPHERIC_TRANSMISSION
    if polar and scale_height:
        transmission = transmission ** (polar_air_mass(radius, scale_height) ** DEFAULTS.INSOLATION_AIR_MASS_EXPONENT)
    return (DEFAULTS.INSOLATION_CONSTANT * atmosphere_mass * transmission / planet_mass) ** 0.25


def equatorial_insolation_factor(planet) -> float:
    atmosphere = planet.atmosphere
    if atmosphere is None or atmosphere.is_empty:
        return 1.0
    return insolation_factor(atmosphere.mass, planet.mass)


def polar_insolation_factor(planet) -> float:
    atmosphere = planet.atmosphere
    if atmosphere is None or atmosphere.is_empty:
        return 1.0
    return insolation_factor(atmosphere.mass, planet.mass, planet.radius, atmosphere.scale_height, polar=True)


def latitude_insolation_factor(planet, latitude):
    """Blends polar and equatorial insolation by (seasonal) latitude. Accepts arrays."""
    polar = polar_insolation_factor(planet)
    equatorial = equatorial_insolation_factor(planet)
    tilt = planet.axial_tilt
    angle = np.maximum(0.0, np.abs(2 * np.asarray(latitude)) * (HALF_PI + tilt) / HALF_PI - tilt)
    return polar + (equatorial - polar) * (0.5 + np.cos(angle) / 2)


def greenhouse_effect(planet, insolation=None, factor=None) -> float:
    atmosphere = planet.atmosphere
    if insolation is None:
        insolation = equatorial_insolation_factor(planet)
    if factor is None:
        factor = 1.0 if atmosphere is None else atmosphere.greenhouse_factor
    average = planet.average_blackbody_temperature
    return max(0.0, average * insolation * factor - average)


# --- Surface temperatures ---

def average_surface_temperature(planet) -> float:
    """Average equatorial surface temperature over the orbit."""
    return planet.average_blackbody_temperature * equatorial_insolation_factor(planet) + greenhouse_effect(planet)


def diurnal_temperature_variation(planet) -> float:
    internal = planet.internal_temperature
    time_factor = min(1.0, max(0.0, 1 - (planet.rotational_period - DEFAULTS.FAST_ROTATION_PERIOD)
                               / DEFAULTS.DIURNAL_PERIOD_RANGE))
    dark_surface = ((planet.average_blackbody_temperature * equatorial_insolation_factor(planet) - internal)
                    * time_factor + internal + greenhouse_effect(planet))
    return average_surface_temperature(planet) - dark_surface


def max_surface_temperature(planet) -> float:
    """Equatorial temperature at periapsis."""
    return planet.periapsis_temperature * equatorial_insolation_factor(planet) + greenhouse_effect(planet)


def min_surface_temperature(planet) -> float:
    """Polar night-side temperature at apoapsis."""
    return (planet.apoapsis_temperature * polar_insolation_factor(planet) + greenhouse_effect(planet)
            - diurnal_temperature_variation(planet))


def max_polar_temperature(planet) -> float:
    """Polar temperature at periapsis: the coldest region at the hottest time."""
    return planet.periapsis_temperature * polar_insolation_factor(planet) + greenhouse_effect(planet)


def min_equator_temperature(planet) -> float:
    """Equatorial night-side temperature at apoapsis."""
    return (planet.apoapsis_temperature * equatorial_insolation_factor(planet) + greenhouse_effect(planet)
            - diurnal_temperature_variation(planet))


def temperature_at_true_anomaly(planet, true_anomaly: float) -> float:
    if planet.orbit is None:
        return planet.blackbody_temperature
    true_anomaly = true_anomaly % (2 * math.pi)
    weight = true_anomaly / math.pi if true_anomaly <= math.pi else 2 - true_anomaly / math.pi
    return planet.periapsis_temperature + (planet.apoapsis_temperature - planet.periapsis_temperature) * weight


def seasonal_surface_temperature(planet, blackbody, seasonal_latitude):
    """Surface temperature for a blackbody temperature at the given seasonal latitude(s)."""
    greenhouse = greenhouse_effect(planet)
    temperature = blackbody * latitude_insolation_factor(planet, seasonal_latitude) + greenhouse
    atmosphere = planet.atmosphere
    if atmosphere is None or atmosphere.is_empty:
        return temperature
    # Convection pulls higher latitudes towards the equatorial value.
    equatorial = blackbody * equatorial_insolation_factor(planet) + greenhouse
    weight = np.sin(2.5 * np.sqrt(np.abs(seasonal_latitude))) / 1.75
    return temperature + (equatorial - temperature) * weight


# --- Elevation ---

def lapse_rate_dry(surface_gravity: float) -> float:
    return surface_gravity / DEFAULTS.CP_DRY_AIR


def lapse_rate(planet, surface_temperature):
    """Moist adiabatic lapse rate when the air holds water, dry otherwise. Accepts arrays."""
    atmosphere = planet.atmosphere
    water_ratio = 0.0 if atmosphere is None else atmosphere.water_ratio
    if water_ratio <= 0:
        return lapse_rate_dry(planet.surface_gravity)
    t2 = np.asarray(surface_temperature, dtype=np.float64) ** 2
    numerator = DEFAULTS.R_SPECIFIC_DRY_AIR * t2 + DEFAULTS.DELTA_HVAP_WATER * water_ratio * surface_temperature
    denominator = (DEFAULTS.CP_TIMES_R_SPECIFIC_DRY_AIR * t2
                   + DEFAULTS.DELTA_HVAP_WATER ** 2 * water_ratio * DEFAULTS.R_SPECIFIC_RATIO_DRY_AIR_TO_WATER)
    return planet.surface_gravity * numerator / denominator


def temperature_at_elevation(planet, surface_temperature, elevation, surface=True):
    """
    Adjusts surface temperature(s) for elevation(s) in metres. Scalars in,
    scalar out; arrays broadcast.
    """
    scalar = np.isscalar(surface_temperature) and np.isscalar(elevation)
    temperature = np.asarray(surface_temperature, dtype=np.float64)
    elevation = np.asarray(elevation, dtype=np.float64)
    atmosphere = planet.atmosphere
    if atmosphere is None or atmosphere.is_empty:
        # No air, no lapse.
        result = np.broadcast_to(temperature, np.broadcast(temperature, elevation).shape)
        return float(result) if scalar else np.array(result)

    value = temperature - elevation * lapse_rate(planet, temperature)
    value = temperature - elevation * lapse_rate(planet, value)
    if surface and planet.max_elevation > 0:
        # Near-surface convection keeps low ground close to the surface value.
        weight = np.minimum(1.0, elevation * 4 / planet.max_elevation)
        value = temperature + (value - temperature) * weight

    result = np.where(elevation <= 0, temperature, value)
    result = np.where(elevation >= atmosphere.height, planet.average_blackbody_temperature, result)
    return float(result) if scalar else result


def pressure_at_elevation(planet, temperature, elevation):
    """Barometric pressure (kPa) at elevation(s) above sea level."""
    atmosphere = planet.atmosphere
    if atmosphere is None or atmosphere.is_empty:
        return np.zeros_like(np.asarray(elevation, dtype=np.float64))
    elevation = np.maximum(np.asarray(elevation, dtype=np.float64), 0.0)
    exponent = -planet.surface_gravity * DEFAULTS.MOLAR_MASS_AIR * elevation / (DEFAULTS.GAS_CONSTANT * np.asarray(temperature))
    return atmosphere.pressure * np.exp(exponent)


# --- Seasons ---

def solar_declination(axial_tilt: float, proportion_of_year: float) -> float:
    """Declination of the sun, with the northern winter solstice at the start of the year."""
    return -axial_tilt * math.cos(2 * math.pi * proportion_of_year)


def seasonal_latitude(latitude, declination):
    """Offsets latitude(s) by the solar declination, folded back within +/- pi/2."""
    value = np.asarray(latitude, dtype=np.float64) - declination
    value = np.where(value > HALF_PI, math.pi - value, value)
    return np.where(value < -HALF_PI, -value - math.pi, value)
