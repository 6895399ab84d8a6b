# tests/test_generator.py

import json
import os

import pytest
from PIL import Image

from bake_planet import bake_planet, load_requirements
from planet_generator.archetypes import PlanetType
from planet_generator.climate import ClimateRasterSynthesizer
from planet_generator.exceptions import ConfigurationError
from planet_generator.generator import PlanetGenerator
from planet_generator.habitability import HUMAN
from planet_generator.params import PlanetParams
from planet_generator.store import MANIFEST_FILENAME


class TestPlanetGenerator:
    @pytest.fixture(autouse=True)
    def generator(self, test_logger):
        self.generator = PlanetGenerator({'seed': 21}, test_logger)

    def test_same_seed_same_planet(self, test_logger):
        a = self.generator.generate(PlanetType.ICE_GIANT, seed=99)
        b = PlanetGenerator({'seed': 21}, test_logger).generate(PlanetType.ICE_GIANT, seed=99)
        assert a.mass == b.mass
        assert a.radius == b.radius
        assert a.noise_seeds == b.noise_seeds
        assert a.orbit == b.orbit

    def test_master_seed_drives_planet_seeds(self, test_logger):
        first = PlanetGenerator({'seed': 4}, test_logger).generate("dwarf")
        again = PlanetGenerator({'seed': 4}, test_logger).generate("dwarf")
        assert first.seed == again.seed
        assert first.name == f"dwarf-{first.seed}"

    def test_unknown_type_raises(self):
        with pytest.raises(ConfigurationError):
            self.generator.generate("black_hole")

    def test_starless_planet(self):
        planet = self.generator.generate(PlanetType.TERRESTRIAL, PlanetParams(surface_temperature=280.0),
                                         star=None, seed=5)
        assert planet.orbit is None
        assert planet.convergence_report is None
        assert not planet.is_inhospitable

    def test_parameters_are_honoured(self):
        params = PlanetParams(axial_tilt=0.3, rotational_period=50000.0, eccentricity=0.2)
        planet = self.generator.generate(PlanetType.ROCKY_DWARF, params, seed=6)
        assert planet.axial_tilt == pytest.approx(0.3)
        assert planet.rotational_period == 50000.0
        assert planet.orbit.eccentricity == pytest.approx(0.2)

    @pytest.mark.parametrize("planet_type", list(PlanetType))
    def test_every_archetype_generates(self, planet_type):
        planet = self.generator.generate(planet_type, seed=12)
        assert planet.mass > 0
        assert planet.radius > 0
        assert 0.0 <= planet.axial_tilt < 3.1416
        assert planet.atmosphere is not None

    def test_habitable_search_returns_a_planet(self):
        planet = self.generator.generate_habitable(PlanetType.TERRESTRIAL, PlanetParams.earthlike(),
                                                   max_attempts=2)
        assert planet is not None
        assert planet.requirements is HUMAN


class TestBakeCommand:
    def write_config(self, tmp_path, **overrides):
        values = {
            "seed": 1337, "name": "Terra", "earthlike": True, "requirements": "human",
            "fields": ["elevation", "temperature"], "raster_resolution": 8,
            "season_steps": 2, "processes": 1,
        }
        values.update(overrides)
        path = tmp_path / "planet.json"
        path.write_text(json.dumps({"planet_generation_parameters": values}))
        return str(path)

    def test_bake_writes_rasters_and_records(self, tmp_path):
        output = tmp_path / "out"
        bake_planet(self.write_config(tmp_path), str(output))
        with open(output / MANIFEST_FILENAME) as f:
            manifest = json.load(f)
        assert len(manifest["rasters"]) == 4
        for filename in manifest["rasters"].values():
            assert os.path.exists(output / filename)
        with open(output / "generation_config.json") as f:
            record = json.load(f)
        assert record["planet"]["name"] == "Terra"
        assert record["settings"]["season_steps"] == 2
        assert record["planet"]["star"]["position_m"] == [0.0, 0.0, 0.0]

    def test_bad_field_stops_the_bake(self, tmp_path):
        output = tmp_path / "out"
        bake_planet(self.write_config(tmp_path, fields=["wind"]), str(output))
        assert not output.exists()

    def test_rebake_reuses_cached_rasters(self, tmp_path, monkeypatch):
        output = tmp_path / "out"
        config = self.write_config(tmp_path)
        bake_planet(config, str(output))

        def fail(*args, **kwargs):
            raise AssertionError("cached seasons were synthesized again")

        monkeypatch.setattr(ClimateRasterSynthesizer, "rasterize", fail)
        bake_planet(config, str(output))
        with open(output / MANIFEST_FILENAME) as f:
            assert len(json.load(f)["rasters"]) == 4

    def test_corrupt_raster_is_rebuilt(self, tmp_path):
        output = tmp_path / "out"
        config = self.write_config(tmp_path, fields=["temperature"], season_steps=1)
        bake_planet(config, str(output))
        with open(output / MANIFEST_FILENAME) as f:
            filename = next(iter(json.load(f)["rasters"].values()))
        path = output / filename
        original = path.read_bytes()
        path.write_bytes(b"not a png")

        bake_planet(config, str(output))
        assert path.read_bytes() == original
        with Image.open(path) as image:
            assert image.size[1] == 8

    def test_missing_config_stops_the_bake(self, tmp_path):
        output = tmp_path / "out"
        bake_planet(str(tmp_path / "absent.json"), str(output))
        assert not output.exists()

    def test_requirement_presets(self):
        assert load_requirements("human") is HUMAN
        assert load_requirements(None) is None
        custom = load_requirements({"min_pressure": 10.0, "atmospheric_requirements": [["O2", 0.1, 0.3]]})
        assert custom.min_pressure == 10.0
        assert custom.atmospheric_requirements[0].key == "O2"
        with pytest.raises(ConfigurationError):
            load_requirements("martian")
