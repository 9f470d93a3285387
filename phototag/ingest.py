# phototag/ingest.py
"""
Directory tree ingestion.

Walks a directory recursively and registers every image file found. Tags
already encoded in a file name ("photo @beach @2020.jpg") are parsed and
attached, so a tree tagged in an earlier session is picked up as-is.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Tuple

from .errors import FilesystemError, InvalidDirectory, InvalidTagName
from .image import Image, parse_file_name
from .registry import Registry
from .registry.registry import normalize_path
from .tags import Tag, TagStore

logger = logging.getLogger(__name__)

# Recognised image extensions (case-sensitive)
IMAGE_EXTENSIONS: Tuple[str, ...] = (".gif", ".jpg", ".jpeg", ".tiff", ".png")


def is_image_file(name: str, extensions: Iterable[str] = IMAGE_EXTENSIONS) -> bool:
    """Check whether a file name ends with a recognised image extension."""
    return any(name.endswith(ext) for ext in extensions)


@dataclass
class IngestStats:
    """Counts from one ingestion run."""
    directories: int = 0
    images: int = 0
    replaced: int = 0
    dropped_tokens: int = 0


class Ingestor:
    """
    Populates a registry from a directory tree.

    Directories already indexed are reused. An image already indexed under
    the same base name and directory is replaced by the freshly parsed one.
    """

    def __init__(self, extensions: Iterable[str] = IMAGE_EXTENSIONS):
        self.extensions = tuple(extensions)

    def ingest(self, root: Path | str, registry: Registry) -> IngestStats:
        """
        Ingest every directory under ``root``.

        Raises:
            InvalidDirectory: If root is not a directory
            FilesystemError: If a directory cannot be listed
        """
        root = normalize_path(root)
        if not root.is_dir():
            raise InvalidDirectory(root)

        stats = IngestStats()
        self._walk(root, registry, stats)
        logger.info(
            f"Ingested {root}: {stats.images} images in {stats.directories} directories"
        )
        return stats

    def _walk(self, directory: Path, registry: Registry, stats: IngestStats) -> None:
        try:
            entries = sorted(directory.iterdir())
        except OSError as e:
            raise FilesystemError(f"Cannot read directory {directory}: {e}", source=directory) from e

        index = registry.get_or_create_index(directory)
        stats.directories += 1

        for entry in entries:
            try:
                is_dir = entry.is_dir()
                is_link = is_dir and entry.is_symlink()
            except OSError as e:
                raise FilesystemError(f"Cannot stat {entry}: {e}", source=entry) from e

            if is_dir:
                if is_link:
                    logger.debug(f"Skipping symlinked directory {entry}")
                    continue
                self._walk(entry, registry, stats)
            elif is_image_file(entry.name, self.extensions):
                tags = self.parse_tags(entry.name, registry.tag_store, stats)
                image = Image.from_path(entry, tags)
                replaced = index.add_image(image, replace=True)
                if replaced is not None:
                    replaced.detach()
                    stats.replaced += 1
                stats.images += 1

    def parse_tags(self, file_name: str, tag_store: TagStore, stats: IngestStats = None) -> List[Tag]:
        """
        Get the tags encoded in a file name, creating unknown ones.

        Tokens that are not valid tag names are dropped.
        """
        _, tokens, _ = parse_file_name(file_name)
        tags = []
        for token in tokens:
            try:
                tag = tag_store.get_or_create(token)
            except InvalidTagName:
                logger.warning(f"Ignoring malformed tag {token!r} in {file_name!r}")
                if stats is not None:
                    stats.dropped_tokens += 1
                continue
            if tag not in tags:
                tags.append(tag)
        return tags
