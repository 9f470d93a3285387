# phototag/registry/__init__.py
"""
Photo tag registry.

The registry is the root of all tagger state: one DirectoryIndex per
directory that has been ingested or moved into, plus the TagStore shared
by every image. Everything else is reachable only through it.

Example:
    registry = Registry()
    Ingestor().ingest("/path/to/photos", registry)

    image = registry.image_at("/path/to/photos/cat.jpg")
    image.add_tag(registry.tag_store.get_or_create("animal"))
"""

from .registry import Registry

__all__ = ["Registry"]
