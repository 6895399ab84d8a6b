# planet_generator/store.py

"""
================================================================================
RASTER STORE
================================================================================
Persists encoded (uint16) rasters as 16-bit PNG files named by the SHA-256
hash of their content, so identical rasters are written once. A manifest maps
cache keys to those files.

Data Contract:
---------------
- save(grid, key) -> path | None
- load(path) -> grid | None; an unreadable file is removed so the next save
  rewrites it.
- load_key(key) -> grid | None, looked up through the manifest.
- Absence or corruption of anything on disk is a cache miss (None) with a
  logged warning, never an error.
- AsyncRasterStore offers the same operations as coroutines, run in a thread.
================================================================================
"""

import asyncio
import hashlib
import json
import logging
import os

import numpy as np
from PIL import Image, UnidentifiedImageError

from . import config as DEFAULTS
from .encoding import from_image, to_image

logger = logging.getLogger(__name__)

MANIFEST_FILENAME = "manifest.json"


def raster_key(planet, field, resolution: int, projection, season=None) -> str:
    """A cache key unique to a planet, field and raster configuration."""
    season_part = "annual" if season is None else f"{season:.6f}"
    field_name = getattr(field, "value", field)
    return f"{planet.name}_{planet.seed}_{field_name}_{resolution}_{projection.key}_{season_part}"


class RasterStore:
    def __init__(self, directory: str = DEFAULTS.DEFAULT_BAKE_DIRECTORY, logger: logging.Logger = logger):
        self.directory = directory
        self.logger = logger
        self.manifest_path = os.path.join(directory, MANIFEST_FILENAME)

    def _read_manifest(self) -> dict:
        try:
            with open(self.manifest_path, 'r') as f:
                manifest = json.load(f)
        except FileNotFoundError:
            return {"rasters": {}}
        except (OSError, json.JSONDecodeError) as e:
            self.logger.warning(f"Ignoring unreadable manifest {self.manifest_path}: {e}")
            return {"rasters": {}}
        if not isinstance(manifest, dict) or not isinstance(manifest.get("rasters"), dict):
            self.logger.warning(f"Ignoring malformed manifest {self.manifest_path}.")
            return {"rasters": {}}
        return manifest

    def lookup(self, key: str):
        """Returns the stored path for a key, or None."""
        filename = self._read_manifest()["rasters"].get(key)
        if not filename:
            return None
        return os.path.join(self.directory, filename)

    def save(self, grid, key: str):
        """Writes an encoded grid and records it under key. Returns the path, or None on failure."""
        try:
            values = np.ascontiguousarray(grid, dtype=np.uint16)
            if values.ndim != 2:
                raise ValueError(f"expected a 2-D grid, got shape {values.shape}")
            os.makedirs(self.directory, exist_ok=True)
            content_hash = hashlib.sha256(values.tobytes() + repr(values.shape).encode()).hexdigest()
            filename = f"{content_hash}.png"
            path = os.path.join(self.directory, filename)
            if not os.path.exists(path):
                to_image(values).save(path)

            manifest = self._read_manifest()
            manifest["rasters"][key] = filename
            with open(self.manifest_path, 'w') as f:
                json.dump(manifest, f)
        except (OSError, ValueError) as e:
            self.logger.warning(f"Could not save raster '{key}': {e}")
            return None
        self.logger.debug(f"Saved raster '{key}' to {path}.")
        return path

    def load(self, path):
        """Reads an encoded grid. Returns None when the file is missing or corrupt."""
        if path is None:
            return None
        try:
            with Image.open(path) as image:
                return from_image(image)
        except FileNotFoundError:
            self.logger.debug(f"No raster at {path}.")
            return None
        except (OSError, ValueError, UnidentifiedImageError) as e:
            self.logger.warning(f"Discarding unreadable raster {path}: {e}")
            self._discard(path)
            return None

    def _discard(self, path):
        # Content-named files are only rewritten when absent.
        try:
            os.remove(path)
        except OSError as e:
            self.logger.warning(f"Could not remove unreadable raster {path}: {e}")

    def load_key(self, key: str):
        return self.load(self.lookup(key))


class AsyncRasterStore:
    """Runs RasterStore I/O off the event loop."""

    def __init__(self, store: RasterStore):
        self.store = store

    async def save(self, grid, key: str):
        return await asyncio.to_thread(self.store.save, grid, key)

    async def load(self, path):
        return await asyncio.to_thread(self.store.load, path)

    async def load_key(self, key: str):
        return await asyncio.to_thread(self.store.load_key, key)
