# phototag/sync.py
"""
Keeps files on disk in step with the in-memory registry.

Two operations touch the filesystem:
- move: relocate an image's file to another directory and re-home the
  image in that directory's index
- flush: rename every dirty image's file to its canonical name

In-memory state is only changed after the filesystem call succeeded, so a
failure leaves the registry describing what is actually on disk.
"""

import logging
import shutil
from pathlib import Path
from typing import Iterable, List, Optional

from .errors import FilesystemError, InvalidDirectory
from .image import Image
from .registry import Registry
from .registry.registry import normalize_path

logger = logging.getLogger(__name__)


class SyncEngine:
    """
    Performs moves and renames for a registry.
    """

    def __init__(self, registry: Registry):
        self.registry = registry

    def move(self, image: Image, new_directory: Path | str) -> Path:
        """
        Move an image's file into another directory.

        The index for the new directory is created if none exists yet. The
        image is marked dirty so its name is re-synced on the next flush.

        Returns:
            The new file path

        Raises:
            InvalidDirectory: If new_directory is not an existing directory
            FilesystemError: If the file cannot be moved, or the target
                directory already indexes an image with the same base name
        """
        target_dir = normalize_path(new_directory)
        if not target_dir.is_dir():
            logger.warning(f"Tried to move {image.base_name} to invalid directory {new_directory}")
            raise InvalidDirectory(new_directory)

        source = image.file_path
        if target_dir == image.directory:
            return source

        existing = self.registry.find_image(target_dir, image.base_name)
        if existing is not None:
            raise FilesystemError(
                f"Cannot move {image.base_name}: {target_dir} already holds {existing.file_name}",
                source=source, destination=existing.file_path,
            )

        destination = target_dir / source.name
        if destination.exists():
            raise FilesystemError(
                f"Cannot move {source.name}: {destination} already exists",
                source=source, destination=destination,
            )

        try:
            shutil.move(str(source), str(destination))
        except OSError as e:
            raise FilesystemError(
                f"Failed to move {source} to {target_dir}: {e}",
                source=source, destination=destination,
            ) from e

        old_index = self.registry.index_of(image)
        if old_index is not None:
            old_index.remove_image(image)

        image.directory = target_dir
        image.file_path = destination

        new_index = self.registry.get_or_create_index(target_dir)
        new_index.add_image(image)
        image.mark_dirty()

        logger.info(
            f"Moved {image.base_name} from {old_index or source.parent} to {new_index}"
        )
        return destination

    def flush(self, images: Optional[Iterable[Image]] = None) -> List[Image]:
        """
        Rename dirty images' files to match their current tags.

        Every image is attempted. Images that could not be renamed stay
        dirty so a later flush retries them.

        Args:
            images: Images to sync (default: all dirty images in the registry)

        Returns:
            The images that were synced

        Raises:
            FilesystemError: If any rename failed (after trying the rest)
        """
        if images is None:
            images = self.registry.dirty_images()

        synced = []
        failed = []
        for image in images:
            if not image.dirty:
                continue
            try:
                image.rename_on_disk()
            except FilesystemError as e:
                logger.warning(f"Rename failed for {image.base_name}: {e}")
                failed.append(image)
                continue
            image.dirty = False
            synced.append(image)

        if synced:
            logger.debug(f"Synced {len(synced)} file names")
        if failed:
            names = [image.file_name for image in failed]
            raise FilesystemError(
                f"{len(failed)} file(s) could not be renamed: {', '.join(names)}",
                failed=names,
            )
        return synced
