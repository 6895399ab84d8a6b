# planet_generator/exceptions.py

"""Errors raised at the package's API seams. The physics itself never raises."""


class PlanetGeneratorError(Exception):
    """Base class for every error raised by planet_generator."""


class ConfigurationError(PlanetGeneratorError, ValueError):
    """An unknown archetype, raster field or projection name was requested."""
