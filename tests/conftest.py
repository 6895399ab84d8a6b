# tests/conftest.py

import logging

import pytest

from planet_generator.archetypes import PlanetType
from planet_generator.generator import PlanetGenerator
from planet_generator.params import PlanetParams


@pytest.fixture(scope="session")
def test_logger():
    return logging.getLogger("planet_generator.tests")


@pytest.fixture(scope="session")
def earthlike_planet(test_logger):
    """An Earth-like planet around a Sun-like star. Shared: do not mutate."""
    generator = PlanetGenerator(config={'seed': 7}, logger=test_logger)
    return generator.generate(PlanetType.TERRESTRIAL, PlanetParams.earthlike(), name="Terra", seed=42)
