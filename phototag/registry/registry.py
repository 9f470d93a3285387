# phototag/registry/registry.py
"""
Registry of tagged images.

The registry owns:
- One DirectoryIndex per known directory
- The TagStore shared by all images
- The directory the user last chose

It is the single serializable root; to_dict/from_dict rebuild the whole
object graph, including the Tag <-> Image back-references.
"""

from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ..directory import DirectoryIndex
from ..image import Image, parse_file_name
from ..tags import Tag, TagStore


def normalize_path(path: Path | str) -> Path:
    """Absolute, symlink-free form of a path, used to key directories."""
    return Path(path).expanduser().resolve()


class Registry:
    """
    The root of tagger state.

    Attributes:
        directory_indexes: Known directories, in the order they were added
        tag_store: Every tag created so far
        last_chosen_directory: Directory last picked by the user (or None)
    """

    def __init__(self, tag_store: TagStore = None):
        self.directory_indexes: List[DirectoryIndex] = []
        self.tag_store = tag_store if tag_store is not None else TagStore()
        self.last_chosen_directory: Optional[Path] = None

    def add_index(self, index: DirectoryIndex) -> DirectoryIndex:
        """
        Add a directory index.

        Returns the index already anchored at the same path if there is one.
        """
        existing = self.index_for(index.directory_path)
        if existing is not None:
            return existing
        self.directory_indexes.append(index)
        return index

    def index_for(self, directory: Path | str) -> Optional[DirectoryIndex]:
        """Get the index anchored at a directory."""
        directory = Path(directory)
        for index in self.directory_indexes:
            if index.directory_path == directory:
                return index
        return None

    def get_or_create_index(self, directory: Path | str) -> DirectoryIndex:
        """Get the index anchored at a directory, creating it if needed."""
        index = self.index_for(directory)
        if index is None:
            index = DirectoryIndex(directory)
            self.directory_indexes.append(index)
        return index

    def index_of(self, image: Image) -> Optional[DirectoryIndex]:
        """Get the index holding an image."""
        index = self.index_for(image.directory)
        if index is not None and image in index:
            return index
        return None

    def find_image(self, directory: Path | str, base_name: str) -> Optional[Image]:
        """Find an image by directory and base name."""
        index = self.index_for(directory)
        if index is None:
            return None
        return index.get(base_name)

    def image_at(self, path: Path | str) -> Optional[Image]:
        """
        Find the image for a file path.

        The path may carry any tags; only its directory and base name are
        used to look the image up.
        """
        path = normalize_path(path)
        base_name, _, _ = parse_file_name(path.name)
        return self.find_image(path.parent, base_name)

    def images(self) -> Iterator[Image]:
        """Iterate over every image in every directory."""
        for index in self.directory_indexes:
            yield from index.images

    def dirty_images(self) -> List[Image]:
        """Images whose file names on disk lag behind their tags."""
        return [image for image in self.images() if image.dirty]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "last_chosen_directory": (
                str(self.last_chosen_directory) if self.last_chosen_directory else None
            ),
            "tags": [
                {
                    "name": tag.name,
                    "images": [list(image.key) for image in tag.tagged_images],
                }
                for tag in self.tag_store
            ],
            "directories": [
                {
                    "path": str(index.directory_path),
                    "images": [image.to_dict() for image in index.images],
                }
                for index in self.directory_indexes
            ],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Registry":
        """
        Rebuild a registry from to_dict() output.

        Tags are relinked to the same Image objects held by the directory
        indexes. Tag names found only in version logs (deleted tags) become
        detached Tag objects, one per name.
        """
        registry = cls()
        store = registry.tag_store
        for tag_data in data.get("tags", []):
            store.add(Tag(tag_data["name"]))

        detached: Dict[str, Tag] = {}

        def resolve(name: str) -> Tag:
            tag = store.get(name)
            if tag is None:
                tag = detached.setdefault(name, Tag(name))
            return tag

        by_key: Dict[tuple, Image] = {}
        for index_data in data.get("directories", []):
            index = registry.get_or_create_index(index_data["path"])
            for image_data in index_data.get("images", []):
                image = Image.from_dict(image_data, resolve)
                index.add_image(image)
                by_key[image.key] = image

        for tag_data in data.get("tags", []):
            tag = store.get(tag_data["name"])
            for key in tag_data.get("images", []):
                image = by_key.get(tuple(key))
                if image is not None:
                    tag.tag_image(image)

        # Images may carry tags the tag entries did not list
        for image in by_key.values():
            for tag in image.current_tags:
                tag.tag_image(image)

        last = data.get("last_chosen_directory")
        registry.last_chosen_directory = Path(last) if last else None
        return registry

    def __len__(self) -> int:
        return sum(len(index) for index in self.directory_indexes)

    def __iter__(self) -> Iterator[DirectoryIndex]:
        return iter(self.directory_indexes)
