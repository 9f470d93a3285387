# phototag/directory.py
"""
The set of images anchored to one physical directory.
"""

from pathlib import Path
from typing import Iterator, List, Optional

from .image import Image


class DirectoryIndex:
    """
    Images found in a single directory.

    Attributes:
        directory_path: The directory (absolute)
        display_name: Last segment of the path
        images: Images in this directory, unique by identity
    """

    def __init__(self, directory_path: Path | str):
        self.directory_path = Path(directory_path)
        self.display_name = self.directory_path.name or str(self.directory_path)
        self.images: List[Image] = []

    def add_image(self, image: Image, replace: bool = False) -> Optional[Image]:
        """
        Add an image to the index.

        Args:
            image: Image whose directory is this index's directory
            replace: If an equal image is already indexed, swap it for this
                one. Otherwise the existing image is kept.

        Returns:
            The image that was replaced, if any
        """
        if image.directory != self.directory_path:
            raise ValueError(
                f"Image {image.base_name} belongs to {image.directory}, not {self.directory_path}"
            )
        for i, existing in enumerate(self.images):
            if existing == image:
                if replace and existing is not image:
                    self.images[i] = image
                    return existing
                return None
        self.images.append(image)
        return None

    def remove_image(self, image: Image) -> bool:
        """Remove an image. Returns False if it was not indexed."""
        for i, existing in enumerate(self.images):
            if existing is image or existing == image:
                del self.images[i]
                return True
        return False

    def get(self, base_name: str) -> Optional[Image]:
        """Get an image by base name."""
        for image in self.images:
            if image.base_name == base_name:
                return image
        return None

    def __contains__(self, image: Image) -> bool:
        return image in self.images

    def __len__(self) -> int:
        return len(self.images)

    def __iter__(self) -> Iterator[Image]:
        return iter(self.images)

    def __str__(self) -> str:
        return self.display_name

    def __repr__(self) -> str:
        return f"DirectoryIndex({str(self.directory_path)!r}, images={len(self.images)})"
