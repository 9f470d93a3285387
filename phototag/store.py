# phototag/store.py
"""
Saves and loads the registry as a single JSON file.

Structure:
    {
        "version": "1.0",
        "registry": {
            "last_chosen_directory": ...,
            "tags": [{"name": ..., "images": [[directory, base_name], ...]}],
            "directories": [{"path": ..., "images": [...]}]
        }
    }
"""

import json
import logging
import os
import tempfile
from pathlib import Path

from .errors import RegistryLoadError
from .registry import Registry

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"


class RegistryStore:
    """
    JSON persistence for a Registry.
    """

    def __init__(self, save_path: Path | str):
        self.save_path = Path(save_path)

    def exists(self) -> bool:
        return self.save_path.exists()

    def load(self) -> Registry:
        """
        Load the saved registry.

        Returns a new, empty registry if nothing has been saved yet.

        Raises:
            RegistryLoadError: If the save file cannot be parsed
        """
        if not self.save_path.exists():
            logger.debug(f"No saved registry at {self.save_path}, starting empty")
            return Registry()

        try:
            with open(self.save_path) as f:
                data = json.load(f)
            registry = Registry.from_dict(data["registry"])
        except (OSError, json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Failed to load registry from {self.save_path}: {e}")
            raise RegistryLoadError(f"Cannot load registry from {self.save_path}: {e}") from e

        logger.debug(
            f"Loaded registry: {len(registry.directory_indexes)} directories, "
            f"{len(registry.tag_store)} tags"
        )
        return registry

    def save(self, registry: Registry) -> None:
        """Write the registry, replacing the previous save atomically."""
        data = {
            "version": FORMAT_VERSION,
            "registry": registry.to_dict(),
        }
        self.save_path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=self.save_path.parent, prefix=f".{self.save_path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.save_path)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise
        logger.info(f"Saved registry to {self.save_path}")
