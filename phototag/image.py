# phototag/image.py
"""
Images and their tag history.

An Image is identified by its base name and directory. Its tags are encoded
into the file name on disk:

    <base_name> @<tag> @<tag>.<extension>

Every change to the current tags appends a snapshot to the version log, so
the history can be listed and any earlier state restored.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any, Callable, Dict, Iterable, List, Optional, Tuple

from .errors import FilesystemError, IndexOutOfRange
from .tags import TAG_MARKER, Tag

if TYPE_CHECKING:
    from .tags import TagStore

logger = logging.getLogger(__name__)

# Separates base name and tags in a file name stem
TAG_SEPARATOR = f" {TAG_MARKER}"


def _now() -> str:
    return datetime.now().isoformat()


def parse_file_name(file_name: str) -> Tuple[str, List[str], str]:
    """
    Split a file name into base name, tag tokens and extension.

    "photo @vacation @2020.jpg" -> ("photo", ["vacation", "2020"], "jpg")

    Tokens are returned raw; callers validate them as tag names.
    """
    stem, dot, extension = file_name.rpartition(".")
    if not dot:
        stem, extension = file_name, ""
    base_name, *tokens = stem.split(TAG_SEPARATOR)
    return base_name, tokens, extension


@dataclass
class VersionEntry:
    """One snapshot in an image's version log."""
    timestamp: str
    tags: List[Tag] = field(default_factory=list)

    @property
    def tag_names(self) -> List[str]:
        return [t.name for t in self.tags]


class Image:
    """
    An image file tracked by the tagger.

    Attributes:
        base_name: File name stem without tags
        extension: File extension without the dot
        directory: Directory holding the file
        current_tags: Tags in display/encoding order
        version_log: Append-only history of tag snapshots
        file_path: Where the file is on disk as of the last rename or move
        dirty: True when the file name on disk lags behind current_tags
    """

    def __init__(
        self,
        base_name: str,
        extension: str,
        directory: Path | str,
        tags: Optional[Iterable[Tag]] = None,
        file_path: Path | str = None,
    ):
        self.base_name = base_name
        self.extension = extension
        self.directory = Path(directory)
        self.current_tags: List[Tag] = []
        self.version_log: List[VersionEntry] = []
        self.dirty = False

        for tag in tags or []:
            if tag not in self.current_tags:
                self.current_tags.append(tag)
                tag.tag_image(self)
        self._record()

        self.file_path = Path(file_path) if file_path else self.directory / self.file_name

    @classmethod
    def from_path(cls, path: Path | str, tags: Optional[Iterable[Tag]] = None) -> "Image":
        """
        Create an Image for a file on disk.

        The base name and extension come from the file name; tags already
        encoded in the name are not parsed here (see Ingestor).
        """
        path = Path(path).absolute()
        base_name, _, extension = parse_file_name(path.name)
        return cls(base_name, extension, path.parent, tags=tags, file_path=path)

    @property
    def key(self) -> Tuple[str, str]:
        """Identity of the image: (directory, base_name)."""
        return (str(self.directory), self.base_name)

    @property
    def file_name(self) -> str:
        """Canonical file name for the current tags."""
        return self.name_for(self.current_tags)

    def compute_file_name(self) -> str:
        return self.file_name

    def name_for(self, tags: Iterable[Tag]) -> str:
        """File name this image would have with the given tags."""
        parts = [self.base_name]
        parts.extend(t.label for t in tags)
        name = " ".join(parts)
        if self.extension:
            name = f"{name}.{self.extension}"
        return name

    def _record(self) -> None:
        self.version_log.append(VersionEntry(timestamp=_now(), tags=list(self.current_tags)))

    def mark_dirty(self) -> None:
        self.dirty = True

    def has_tag(self, tag: Tag) -> bool:
        return tag in self.current_tags

    def add_tag(self, tag: Tag) -> bool:
        """
        Attach a tag.

        Returns:
            False if the tag was already attached, True otherwise
        """
        if tag in self.current_tags:
            return False
        self.current_tags.append(tag)
        tag.tag_image(self)
        self._record()
        self.mark_dirty()
        logger.debug(f"Added {tag} to {self.base_name}")
        return True

    def remove_tag(self, tag: Tag, update_log: bool = True, detach_from_tag: bool = True) -> bool:
        """
        Detach a tag.

        Args:
            tag: Tag to remove
            update_log: Record a version log entry for the removal
            detach_from_tag: Also drop this image from the tag's
                back-references. Pass False when the tag is iterating its
                own tagged_images.

        Returns:
            True if the tag was attached
        """
        if tag not in self.current_tags:
            return False
        self.current_tags.remove(tag)
        if detach_from_tag:
            tag.untag_image(self)
        if update_log:
            self._record()
        self.mark_dirty()
        logger.debug(f"Removed {tag} from {self.base_name}")
        return True

    def remove_all_tags(self) -> None:
        """Detach every tag, recording a single version log entry."""
        for tag in self.current_tags:
            tag.untag_image(self)
        self.current_tags.clear()
        self._record()
        self.mark_dirty()

    def detach(self) -> None:
        """Drop this image from its tags' back-references, keeping its own state."""
        for tag in self.current_tags:
            tag.untag_image(self)

    def revert_to(self, index: int, tag_store: "TagStore" = None) -> None:
        """
        Restore the tags recorded at ``index`` in the version log.

        History is never rewritten: the restored state is appended as a new
        entry. Back-references are reconciled so tags leaving the image
        forget it and tags returning to it remember it. When ``tag_store``
        is given, snapshot tags are resolved to the stored instances.

        Raises:
            IndexOutOfRange: If there is no entry at ``index``
        """
        if not isinstance(index, int) or not 0 <= index < len(self.version_log):
            raise IndexOutOfRange(index, len(self.version_log))

        restored: List[Tag] = []
        for tag in self.version_log[index].tags:
            if tag_store is not None:
                tag = tag_store.add(tag)
            if tag not in restored:
                restored.append(tag)

        for tag in self.current_tags:
            if tag not in restored:
                tag.untag_image(self)
        for tag in restored:
            tag.tag_image(self)

        self.current_tags = restored
        self._record()
        self.mark_dirty()
        logger.debug(f"Reverted {self.base_name} to version {index}")

    def rename_on_disk(self) -> Path:
        """
        Rename the file so its name matches the current tags.

        file_path is only updated once the rename succeeded.

        Returns:
            The new file path

        Raises:
            FilesystemError: If the rename fails or the target already exists
        """
        source = self.file_path
        target = self.directory / self.file_name
        if source == target:
            return target
        if target.exists():
            raise FilesystemError(
                f"Cannot rename {source.name}: {target} already exists",
                source=source, destination=target,
            )
        try:
            source.rename(target)
        except OSError as e:
            raise FilesystemError(
                f"Failed to rename {source} to {target.name}: {e}",
                source=source, destination=target,
            ) from e
        self.file_path = target
        logger.debug(f"Renamed {source.name} -> {target.name}")
        return target

    def name_history(self) -> List[str]:
        """One line per version log entry: "timestamp: name"."""
        return [f"{entry.timestamp}: {self.name_for(entry.tags)}" for entry in self.version_log]

    def change_log(self) -> List[str]:
        """One line per transition: "timestamp: old name -> new name"."""
        lines = []
        for previous, entry in zip(self.version_log, self.version_log[1:]):
            lines.append(
                f"{entry.timestamp}: {self.name_for(previous.tags)} -> {self.name_for(entry.tags)}"
            )
        return lines

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_name": self.base_name,
            "extension": self.extension,
            "directory": str(self.directory),
            "file_path": str(self.file_path),
            "current_tags": [t.name for t in self.current_tags],
            "version_log": [
                {"timestamp": e.timestamp, "tags": e.tag_names}
                for e in self.version_log
            ],
            "dirty": self.dirty,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], resolve: Callable[[str], Tag]) -> "Image":
        """
        Rebuild an image from to_dict() output.

        Tag names are turned back into Tag objects with ``resolve``.
        Back-references on the tags are not touched; the caller links them.
        """
        image = cls.__new__(cls)
        image.base_name = data["base_name"]
        image.extension = data.get("extension", "")
        image.directory = Path(data["directory"])
        image.current_tags = [resolve(name) for name in data.get("current_tags", [])]
        image.version_log = [
            VersionEntry(timestamp=e["timestamp"], tags=[resolve(n) for n in e.get("tags", [])])
            for e in data.get("version_log", [])
        ]
        if not image.version_log:
            image._record()
        image.dirty = data.get("dirty", False)
        file_path = data.get("file_path")
        image.file_path = Path(file_path) if file_path else image.directory / image.file_name
        return image

    def __eq__(self, other) -> bool:
        return (
            isinstance(other, Image)
            and other.base_name == self.base_name
            and other.directory == self.directory
        )

    def __hash__(self) -> int:
        return hash((self.base_name, self.directory))

    def __str__(self) -> str:
        return self.file_name

    def __repr__(self) -> str:
        return f"Image({self.base_name!r}, directory={str(self.directory)!r}, tags={[t.name for t in self.current_tags]})"
