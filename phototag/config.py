# phototag/config.py
"""
Settings for the tagger, optionally read from a YAML file.

Example phototag.yaml:

    save_path: ~/photos/.phototag.json
    log_path: ~/photos/History.log
    log_level: DEBUG
    extensions: [.jpg, .jpeg, .png]
"""

import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml

from .ingest import IMAGE_EXTENSIONS

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_NAME = "phototag.yaml"
DEFAULT_HOME = Path("~/.phototag")


@dataclass
class Settings:
    """
    Tagger settings.

    Attributes:
        save_path: JSON file the registry is saved to
        log_path: History log file (None disables it)
        log_level: Level name for the root logger
        extensions: Recognised image extensions (case-sensitive)
    """
    save_path: Path = field(default_factory=lambda: (DEFAULT_HOME / "registry.json").expanduser())
    log_path: Optional[Path] = field(default_factory=lambda: (DEFAULT_HOME / "History.log").expanduser())
    log_level: str = "INFO"
    extensions: List[str] = field(default_factory=lambda: list(IMAGE_EXTENSIONS))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

        settings = cls()
        if "save_path" in data:
            settings.save_path = Path(data["save_path"]).expanduser()
        if "log_path" in data:
            settings.log_path = Path(data["log_path"]).expanduser() if data["log_path"] else None
        if "log_level" in data:
            settings.log_level = str(data["log_level"]).upper()
        if "extensions" in data:
            extensions = data["extensions"]
            if not isinstance(extensions, list) or not all(isinstance(e, str) for e in extensions):
                raise ValueError("extensions must be a list of strings")
            settings.extensions = [e if e.startswith(".") else f".{e}" for e in extensions]
        return settings


def load_settings(config_path: Path | str = None) -> Settings:
    """
    Load settings.

    Uses ``config_path`` if given, else ./phototag.yaml if it exists, else
    the defaults.
    """
    if config_path is None:
        candidate = Path.cwd() / DEFAULT_CONFIG_NAME
        if not candidate.exists():
            return Settings()
        config_path = candidate

    config_path = Path(config_path)
    with open(config_path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {config_path} must contain a mapping")
    logger.debug(f"Loaded settings from {config_path}")
    return Settings.from_dict(data)
