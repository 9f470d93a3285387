# phototag/errors.py
"""
Error kinds raised by the tagging core.

Validation errors (bad tag name, bad directory, bad history index) are
raised before any state is touched. Filesystem errors wrap the OSError
that caused them.
"""

from pathlib import Path
from typing import List, Optional


class PhotoTagError(Exception):
    """Base class for all phototag errors."""


class InvalidTagName(PhotoTagError, ValueError):
    """A tag name is empty, contains a space, or contains the tag marker."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Invalid tag name: {name!r}")


class InvalidDirectory(PhotoTagError, ValueError):
    """A path that should be an existing directory is not one."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Not a valid directory: {self.path}")


class IndexOutOfRange(PhotoTagError, IndexError):
    """A version log index does not exist."""

    def __init__(self, index: int, size: int):
        self.index = index
        self.size = size
        super().__init__(f"History index {index} out of range (log has {size} entries)")


class FilesystemError(PhotoTagError, OSError):
    """
    A rename or move failed on disk.

    Attributes:
        source: Path the file was being moved from (if known)
        destination: Path the file was being moved to (if known)
        failed: Display names of images that could not be synced (flush only)
    """

    def __init__(
        self,
        message: str,
        source: Optional[Path] = None,
        destination: Optional[Path] = None,
        failed: Optional[List[str]] = None,
    ):
        super().__init__(message)
        self.source = source
        self.destination = destination
        self.failed = failed or []

    def __str__(self) -> str:
        return self.args[0]


class RegistryLoadError(PhotoTagError):
    """A saved registry file exists but cannot be read."""


class UnknownTag(PhotoTagError, LookupError):
    """No tag with this name exists."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"No such tag: {name}")


class UnknownImage(PhotoTagError, LookupError):
    """No tracked image matches a path."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Not a tracked image: {self.path}")
