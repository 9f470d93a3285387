# phototag - Tag image files by encoding tags into their file names
#
# Tags live in the file name itself ("photo @beach @2020.jpg"), while an
# in-memory registry tracks every tag an image has carried, with
# timestamped history and the ability to revert to any earlier state.
#
# Core concepts:
# - Tag: A named label; TagStore holds one Tag per name
# - Image: Identity (base name + directory), current tags, version log
# - DirectoryIndex: The images anchored to one directory
# - Registry: Root of all state (indexes + tag store)
# - Ingestor: Builds the registry from a directory tree
# - SyncEngine: Moves files and renames them to match their tags

from .errors import (
    PhotoTagError,
    InvalidTagName,
    InvalidDirectory,
    IndexOutOfRange,
    FilesystemError,
    RegistryLoadError,
    UnknownTag,
    UnknownImage,
)
from .tags import Tag, TagStore, validate_tag_name
from .image import Image, VersionEntry, parse_file_name
from .directory import DirectoryIndex
from .registry import Registry
from .ingest import Ingestor, IngestStats, is_image_file, IMAGE_EXTENSIONS
from .sync import SyncEngine
from .store import RegistryStore
from .config import Settings, load_settings
from .session import Session

__all__ = [
    # Errors
    "PhotoTagError",
    "InvalidTagName",
    "InvalidDirectory",
    "IndexOutOfRange",
    "FilesystemError",
    "RegistryLoadError",
    "UnknownTag",
    "UnknownImage",
    # Model
    "Tag",
    "TagStore",
    "validate_tag_name",
    "Image",
    "VersionEntry",
    "parse_file_name",
    "DirectoryIndex",
    "Registry",
    # Filesystem
    "Ingestor",
    "IngestStats",
    "is_image_file",
    "IMAGE_EXTENSIONS",
    "SyncEngine",
    "RegistryStore",
    # Application
    "Settings",
    "load_settings",
    "Session",
]

__version__ = "0.1.0"
