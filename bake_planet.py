# bake_planet.py

"""
================================================================================
OFFLINE PLANET BAKER SCRIPT
================================================================================
This script is a command-line tool for generating a planet from a JSON
configuration and pre-rendering its seasonal climate rasters to a directory of
16-bit PNG images ("baking"). Seasonal steps are synthesized in parallel;
identical rasters are stored once, under the hash of their content.

Usage:
    python bake_planet.py --config path/to/your/config.json
    bake-planet --config path/to/your/config.json --output baked_planets/earth
================================================================================
"""
import os
import sys
import json
import logging
import argparse
import time

from planet_generator import config as DEFAULTS
from planet_generator.climate import ClimateRasterSynthesizer, climate_field
from planet_generator.encoding import encode
from planet_generator.exceptions import ConfigurationError
from planet_generator.generator import PlanetGenerator
from planet_generator.habitability import HUMAN, HabitabilityRequirements, SubstanceRequirement, is_habitable
from planet_generator.params import PlanetParams
from planet_generator.projection import projection_named
from planet_generator.store import RasterStore, raster_key


def load_requirements(value):
    """'human', null, or a dict of HabitabilityRequirements fields."""
    if value is None:
        return None
    if isinstance(value, str):
        if value.lower() == "human":
            return HUMAN
        raise ConfigurationError(f"Unknown habitability preset: {value!r}")
    values = dict(value)
    values['atmospheric_requirements'] = tuple(
        SubstanceRequirement(*r) for r in values.get('atmospheric_requirements', ()))
    return HabitabilityRequirements(**values)


def load_params(planet_params: dict) -> PlanetParams:
    if planet_params.get('earthlike', False):
        return PlanetParams.earthlike(**planet_params.get('params', {}))
    return PlanetParams.from_dict(planet_params.get('params', {}))


def summarize(planet, requirements) -> dict:
    """A JSON-friendly record of the generated planet's bulk properties."""
    reason = is_habitable(planet, requirements or HUMAN)
    return {
        'name': planet.name,
        'seed': planet.seed,
        'planet_type': planet.planet_type.value,
        'mass_kg': planet.mass,
        'radius_m': planet.radius,
        'surface_gravity_m_s2': planet.surface_gravity,
        'atmospheric_pressure_kpa': planet.atmosphere.pressure,
        'atmosphere_composition': planet.atmosphere.composition,
        'mean_surface_temperature_k': planet.mean_surface_temperature,
        'max_elevation_m': planet.max_elevation,
        'normalized_sea_level': planet.normalized_sea_level,
        'star': None if planet.star is None else {'luminosity_w': planet.star.luminosity,
                                                  'position_m': list(planet.star.position)},
        'semi_major_axis_m': planet.orbit.semi_major_axis if planet.orbit is not None else None,
        'albedo': planet.albedo,
        'approximate': planet.approximate,
        'uninhabitability': [flag.name for flag in type(reason) if flag and flag in reason],
    }


# --- Main Baking Function ---
def bake_planet(config_path: str, output_dir: str = None):
    """
    Loads a configuration, generates the planet, and saves every requested
    field's seasonal rasters as 16-bit PNG images with a manifest.
    """
    # 1. --- Setup Logging ---
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
        stream=sys.stdout
    )
    logger = logging.getLogger("Baker")

    # 2. --- Load Configuration ---
    logger.info(f"Loading configuration from: {config_path}")
    try:
        with open(config_path, 'r') as f:
            config = json.load(f)
    except (FileNotFoundError, json.JSONDecodeError) as e:
        logger.critical(f"Failed to load or parse config file: {e}")
        return

    planet_params = config.get('planet_generation_parameters', {})
    seed = planet_params.get('seed', DEFAULTS.DEFAULT_SEED)
    try:
        params = load_params(planet_params)
        requirements = load_requirements(planet_params.get('requirements'))
        fields = [climate_field(name) for name in planet_params.get('fields', DEFAULTS.DEFAULT_BAKE_FIELDS)]
        projection = projection_named(planet_params.get('projection', 'equirectangular'))
    except (ConfigurationError, TypeError) as e:
        logger.critical(f"Invalid planet configuration: {e}")
        return

    start_time = time.perf_counter()

    # 3. --- Generate the Planet ---
    generator = PlanetGenerator(config=planet_params, logger=logger)
    planet_type = planet_params.get('planet_type', 'terrestrial')
    try:
        if planet_params.get('habitable', False):
            planet = generator.generate_habitable(planet_type, params, requirements or HUMAN,
                                                  name=planet_params.get('name'))
        else:
            planet = generator.generate(planet_type, params, requirements,
                                        name=planet_params.get('name'), seed=seed)
    except ConfigurationError as e:
        logger.critical(f"Invalid planet configuration: {e}")
        return
    generation_time = time.perf_counter() - start_time

    # 4. --- Prepare Output ---
    base_output_dir = output_dir or os.path.join(DEFAULTS.DEFAULT_BAKE_DIRECTORY, f"seed_{planet.seed}")
    os.makedirs(base_output_dir, exist_ok=True)
    store = RasterStore(base_output_dir, logger)
    resolution = generator.settings['raster_resolution']
    steps = generator.settings['season_steps']
    processes = planet_params.get('processes')

    # 5. --- Main Baking Loop (Parallelized per field) ---
    # Seasons already on disk are reused; only missing or unreadable ones are synthesized.
    synthesizer = ClimateRasterSynthesizer(planet, logger)
    saved_paths = {}
    failed = 0
    cached = 0
    for field in fields:
        keys = [raster_key(planet, field, resolution, projection, index / steps) for index in range(steps)]
        missing = set()
        for index, key in enumerate(keys):
            if store.load_key(key) is None:
                missing.add(index)
            else:
                cached += 1
                saved_paths.setdefault(field.value, set()).add(store.lookup(key))
        if not missing:
            logger.info(f"All {steps} {field.value} rasters found in {base_output_dir}; skipping.")
            continue

        rasters = synthesizer.rasterize_seasons(field, resolution, projection, steps, processes, only=missing)
        for index in sorted(missing):
            path = store.save(encode(rasters[index], field, planet), keys[index])
            if path is None:
                failed += 1
            else:
                saved_paths.setdefault(field.value, set()).add(path)

    # --- Finalization ---
    # The "birth certificate": everything needed to regenerate this planet.
    gen_config_path = os.path.join(base_output_dir, "generation_config.json")
    with open(gen_config_path, 'w') as f:
        json.dump({'settings': generator.settings,
                   'planet_generation_parameters': planet_params,
                   'planet': summarize(planet, requirements)}, f, indent=4)

    end_time = time.perf_counter()
    logger.info(f"Baking complete! Total time: {end_time - start_time:.2f} seconds "
                f"(generation {generation_time:.2f} seconds).")
    logger.info("--- Deduplication Stats ---")
    for field in fields:
        unique_count = len(saved_paths.get(field.value, ()))
        logger.info(f"  - {field.value.capitalize()}: {steps} seasons -> {unique_count} unique rasters saved")
    if cached:
        logger.info(f"Reused {cached} cached rasters.")
    if failed:
        logger.warning(f"{failed} rasters could not be saved.")
    logger.info(f"Baked planet and manifest.json saved to: {base_output_dir}")


# --- Command-Line Interface ---
def main():
    parser = argparse.ArgumentParser(description="Offline Planet Baker for the procedural planet generator.")
    parser.add_argument(
        "--config",
        type=str,
        required=True,
        help="Path to the JSON configuration file for the planet to be baked."
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Output directory. Defaults to baked_planets/seed_<seed>."
    )
    args = parser.parse_args()

    bake_planet(args.config, args.output)


if __name__ == "__main__":
    main()
