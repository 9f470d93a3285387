# phototag/tags.py
"""
Tags and the tag store.

A Tag is a bare name. Tags are equal when their names are equal, and the
TagStore holds at most one Tag per name. Each Tag keeps a back-reference
list of the images currently wearing it; Image is responsible for keeping
both sides in step.
"""

import logging
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional

from .errors import InvalidTagName

if TYPE_CHECKING:
    from .image import Image

logger = logging.getLogger(__name__)

# Marks the start of a tag inside a file name: "photo @beach @2020.jpg"
TAG_MARKER = "@"


def validate_tag_name(name: str) -> str:
    """
    Check a tag name against the naming rules.

    A name must be non-empty and may not contain a space or the tag marker.

    Returns:
        The name, unchanged

    Raises:
        InvalidTagName: If the name breaks a rule
    """
    if not isinstance(name, str) or not name or " " in name or TAG_MARKER in name:
        raise InvalidTagName(name)
    return name


class Tag:
    """
    A named label attachable to images.

    Attributes:
        name: The tag name (immutable)
        tagged_images: Images currently carrying this tag
    """

    def __init__(self, name: str):
        self._name = validate_tag_name(name)
        self.tagged_images: List["Image"] = []

    @property
    def name(self) -> str:
        return self._name

    @property
    def label(self) -> str:
        """The tag as it appears in a file name."""
        return f"{TAG_MARKER}{self._name}"

    # Back-references compare by identity: a re-ingested image is equal to
    # the one it replaces but must not share its slot.
    def is_tagging(self, image: "Image") -> bool:
        return any(i is image for i in self.tagged_images)

    def tag_image(self, image: "Image") -> None:
        if not self.is_tagging(image):
            self.tagged_images.append(image)

    def untag_image(self, image: "Image") -> None:
        self.tagged_images = [i for i in self.tagged_images if i is not image]

    def untag_all_images(self) -> List["Image"]:
        """
        Remove this tag from every image carrying it.

        Each image records one version log entry. The tag itself stays
        wherever it is stored.

        Returns:
            The images that were untagged
        """
        images = list(self.tagged_images)
        self.tagged_images.clear()
        for image in images:
            image.remove_tag(self, detach_from_tag=False)
        return images

    def __eq__(self, other) -> bool:
        return isinstance(other, Tag) and other._name == self._name

    def __hash__(self) -> int:
        return hash(self._name)

    def __str__(self) -> str:
        return self.label

    def __repr__(self) -> str:
        return f"Tag({self._name!r})"


class TagStore:
    """
    The deduplicated set of every tag created in a registry.

    Tags keep their creation order for listing.
    """

    def __init__(self):
        self._tags: Dict[str, Tag] = {}

    def get(self, name: str) -> Optional[Tag]:
        """Get a tag by name."""
        return self._tags.get(name)

    def create(self, name: str) -> Optional[Tag]:
        """
        Create and store a new tag.

        Returns:
            The new Tag, or None if a tag with this name already exists

        Raises:
            InvalidTagName: If the name is not a valid tag name
        """
        validate_tag_name(name)
        if name in self._tags:
            return None
        tag = Tag(name)
        self._tags[name] = tag
        logger.info(f"Tag created: {tag}")
        return tag

    def get_or_create(self, name: str) -> Tag:
        """
        Get the stored tag with this name, creating it on first use.

        Raises:
            InvalidTagName: If the name is not a valid tag name
        """
        existing = self._tags.get(name)
        if existing is not None:
            return existing
        return self.create(name)

    def add(self, tag: Tag) -> Tag:
        """
        Store a tag unless an equal one is already stored.

        Used to bring back a tag recorded in an image's history after it
        was deleted, and when loading a saved registry.

        Returns:
            The stored tag equal to ``tag``
        """
        existing = self._tags.get(tag.name)
        if existing is not None:
            return existing
        self._tags[tag.name] = tag
        logger.debug(f"Tag stored: {tag}")
        return tag

    def delete(self, tag: Tag) -> List["Image"]:
        """
        Delete a tag permanently.

        The tag is detached from every image carrying it first. The images
        themselves are kept, and each records one version log entry.

        Returns:
            The images the tag was removed from
        """
        stored = self._tags.get(tag.name, tag)
        images = list(stored.tagged_images)
        for image in images:
            image.remove_tag(stored, detach_from_tag=False)
        stored.tagged_images.clear()
        self._tags.pop(stored.name, None)
        logger.info(f"Tag deleted: {stored} (was on {len(images)} images)")
        return images

    def list(self) -> List[Tag]:
        """List all tags in creation order."""
        return list(self._tags.values())

    def __contains__(self, item) -> bool:
        name = item.name if isinstance(item, Tag) else item
        return name in self._tags

    def __len__(self) -> int:
        return len(self._tags)

    def __iter__(self) -> Iterator[Tag]:
        return iter(self._tags.values())
