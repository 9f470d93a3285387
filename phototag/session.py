# phototag/session.py
"""
A tagging session: the one mutator of a registry.

Front ends (CLI, GUI) go through a Session rather than touching the model
directly. It resolves tag names, marks changed images dirty, and on save
renames files before the registry is written, so the saved state always
matches what is on disk.
"""

import logging
from pathlib import Path
from typing import Iterable, List, Optional

from .config import Settings
from .directory import DirectoryIndex
from .errors import FilesystemError, UnknownImage, UnknownTag
from .image import Image
from .ingest import IMAGE_EXTENSIONS, IngestStats, Ingestor
from .registry import Registry
from .registry.registry import normalize_path
from .store import RegistryStore
from .sync import SyncEngine
from .tags import Tag

logger = logging.getLogger(__name__)


class Session:
    """
    Operations on a registry, with load/save at the boundaries.
    """

    def __init__(
        self,
        registry: Registry = None,
        store: RegistryStore = None,
        extensions: Iterable[str] = IMAGE_EXTENSIONS,
    ):
        """
        Args:
            registry: State to operate on (default: empty registry)
            store: Where save() writes the registry (None: not persisted)
            extensions: Image extensions recognised when ingesting
        """
        self.registry = registry if registry is not None else Registry()
        self.store = store
        self.ingestor = Ingestor(extensions)
        self.sync = SyncEngine(self.registry)

    @classmethod
    def open(cls, settings: Settings) -> "Session":
        """Load the saved registry named by the settings."""
        store = RegistryStore(settings.save_path)
        return cls(store.load(), store=store, extensions=settings.extensions)

    @property
    def tag_store(self):
        return self.registry.tag_store

    # Directories

    def ingest(self, path: Path | str) -> IngestStats:
        """Read a directory tree into the registry."""
        stats = self.ingestor.ingest(path, self.registry)
        self.registry.last_chosen_directory = normalize_path(path)
        return stats

    def directories(self) -> List[DirectoryIndex]:
        return list(self.registry.directory_indexes)

    # Tags

    def _lookup(self, tag: Tag | str) -> Optional[Tag]:
        name = tag.name if isinstance(tag, Tag) else tag
        return self.tag_store.get(name)

    def require_tag(self, tag: Tag | str) -> Tag:
        found = self._lookup(tag)
        if found is None:
            raise UnknownTag(tag.name if isinstance(tag, Tag) else tag)
        return found

    def all_tags(self) -> List[Tag]:
        return self.tag_store.list()

    def tagged_images(self, tag: Tag | str) -> List[Image]:
        return list(self.require_tag(tag).tagged_images)

    def create_tag(self, name: str) -> Optional[Tag]:
        """
        Create a tag without attaching it.

        Returns:
            The new tag, or None if one with this name already exists
        """
        return self.tag_store.create(name)

    def add_tag(self, image: Image, name: str) -> Optional[Tag]:
        """
        Attach a tag to an image by name, creating the tag if needed.

        Returns:
            The tag if it was newly attached, None if the image already had it
        """
        tag = self.tag_store.get_or_create(name)
        if image.add_tag(tag):
            return tag
        return None

    def untag(self, image: Image, tag: Tag | str) -> bool:
        """Remove one tag from an image. Unknown tags are ignored."""
        found = self._lookup(tag)
        if found is None:
            return False
        return image.remove_tag(found)

    def untag_all(self, tag: Tag | str) -> List[Image]:
        """Remove a tag from every image but keep it available."""
        return self.require_tag(tag).untag_all_images()

    def delete_tag(self, tag: Tag | str) -> List[Image]:
        """Delete a tag, removing it from every image."""
        return self.tag_store.delete(self.require_tag(tag))

    # Images

    def find_image(self, directory: Path | str, base_name: str) -> Optional[Image]:
        return self.registry.find_image(normalize_path(directory), base_name)

    def image_at(self, path: Path | str) -> Optional[Image]:
        return self.registry.image_at(path)

    def require_image(self, path: Path | str) -> Image:
        image = self.registry.image_at(path)
        if image is None:
            raise UnknownImage(path)
        return image

    def remove_all_tags(self, image: Image) -> None:
        image.remove_all_tags()

    def revert(self, image: Image, index: int) -> None:
        """Restore an image's tags from its version log."""
        image.revert_to(index, tag_store=self.tag_store)

    def move(self, image: Image, new_directory: Path | str) -> Path:
        return self.sync.move(image, new_directory)

    # Persistence

    def save(self) -> None:
        """
        Rename dirty files, then write the registry.

        The registry is written even when some renames failed (those images
        stay dirty); the rename error is raised afterwards.
        """
        error = None
        try:
            self.sync.flush()
        except FilesystemError as e:
            error = e
        if self.store is not None:
            self.store.save(self.registry)
        if error is not None:
            raise error
