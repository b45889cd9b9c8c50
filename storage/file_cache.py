"""
Local JSON file cache: one file per key, <cache_dir>/<key>.json.

Writes are atomic (temp file in the same directory + os.replace) so a
concurrent reader never sees a partially written state.

IMPORTANT: No unicode in code or messages (Windows charmap).
"""

import json
import logging
import os
import re
import tempfile

from physics.body import Body
from storage import SimulationStore, StoreError

log = logging.getLogger(__name__)

# Keys become file names: only date/time characters allowed
KEY_PATTERN = re.compile(r"^[0-9A-Za-z_-]+$")


class FileCacheStore(SimulationStore):

    name = "file"

    def __init__(self, cache_dir):
        self.cache_dir = cache_dir

    def path_for(self, key):
        """Return the cache file path for `key`."""
        if not KEY_PATTERN.match(key):
            raise StoreError("invalid cache key: {}".format(key))
        return os.path.join(self.cache_dir, key + ".json")

    def find(self, key):
        path = self.path_for(key)
        if not os.path.isfile(path):
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = json.load(f)
            if not isinstance(raw, list):
                raise ValueError("cache file is not a list")
            bodies = [Body.from_dict(item) for item in raw]
        except (OSError, ValueError) as e:
            raise StoreError("could not read cache file {}: {}".format(path, e))
        log.info("Loaded state from cache file %s", path)
        return bodies or None

    def save(self, key, bodies):
        path = self.path_for(key)
        try:
            os.makedirs(self.cache_dir, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(dir=self.cache_dir, prefix=".tmp_", suffix=".json")
        except OSError as e:
            raise StoreError("could not prepare cache directory {}: {}".format(self.cache_dir, e))
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump([b.to_dict() for b in bodies], f, indent=2)
            os.replace(tmp_path, path)
        except OSError as e:
            try:
                os.unlink(tmp_path)
            except OSError:
                pass
            raise StoreError("could not write cache file {}: {}".format(path, e))
        log.info("Saved state to cache file %s", path)
