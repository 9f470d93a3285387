#!/usr/bin/env python3
"""
phototag CLI

Tag image files by encoding tags into their names:
  phototag ingest <dir>                 - Read a directory tree
  phototag tag <image> <name>...        - Add tags to an image
  phototag untag <image> <name>...      - Remove tags from an image
  phototag history <image>              - Show every name the image has had
  phototag revert <image> <index>       - Restore an earlier set of tags
  phototag move <image> <dir>           - Move an image to another directory

Usage:
  phototag ingest ~/Pictures
  phototag tag "~/Pictures/cat.jpg" animal pet
  phototag tagged animal
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional

from .config import Settings, load_settings
from .errors import PhotoTagError
from .launch import open_path
from .registry.registry import normalize_path
from .session import Session

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(settings: Settings, verbose: bool = False) -> None:
    """Log warnings to stderr and the session history to the log file."""
    console = logging.StreamHandler()
    console.setLevel(logging.DEBUG if verbose else logging.WARNING)
    handlers = [console]

    if settings.log_path is not None:
        settings.log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(settings.log_path))

    logging.basicConfig(
        level=logging.DEBUG if verbose else settings.log_level,
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def print_list(items: Iterable, empty: str = "(none)") -> None:
    """Print a numbered list."""
    items = list(items)
    if not items:
        print(f"  {empty}")
    for i, item in enumerate(items, 1):
        print(f"  {i}. {item}")


def cmd_ingest(session: Session, args) -> bool:
    """Read a directory tree."""
    stats = session.ingest(Path(args.path))
    print(f"Ingested {stats.images} images in {stats.directories} directories")
    if stats.replaced:
        print(f"  {stats.replaced} already known images were re-read")
    if stats.dropped_tokens:
        print(f"  {stats.dropped_tokens} malformed tags ignored")
    return True


def cmd_dirs(session: Session, args) -> bool:
    """List known directories."""
    print("Directories:")
    print_list(f"{index} ({len(index)} images) {index.directory_path}" for index in session.directories())
    return False


def cmd_images(session: Session, args) -> bool:
    """List images, optionally in one directory."""
    if args.directory:
        index = session.registry.index_for(normalize_path(args.directory))
        images = index.images if index else []
    else:
        images = session.registry.images()
    print_list(image.file_path for image in images)
    return False


def cmd_tags(session: Session, args) -> bool:
    """List all tags."""
    print("Tags:")
    print_list(f"{tag.name} ({len(tag.tagged_images)} images)" for tag in session.all_tags())
    return False


def cmd_tagged(session: Session, args) -> bool:
    """List images carrying a tag."""
    print(f"Images tagged {args.tag}:")
    print_list(image.file_path for image in session.tagged_images(args.tag))
    return False


def cmd_create_tag(session: Session, args) -> bool:
    if session.create_tag(args.name) is None:
        print(f"Tag {args.name} already exists")
        return False
    print(f"Created tag {args.name}")
    return True


def cmd_delete_tag(session: Session, args) -> bool:
    images = session.delete_tag(args.name)
    print(f"Deleted tag {args.name} from {len(images)} images")
    return True


def cmd_show(session: Session, args) -> bool:
    """Show an image's name, location and tags."""
    image = session.require_image(args.image)
    print(f"Name:      {image.file_name}")
    print(f"Directory: {image.directory}")
    print(f"File:      {image.file_path}")
    if image.dirty:
        print("           (rename pending)")
    print("Tags:")
    print_list(tag.name for tag in image.current_tags)
    return False


def cmd_tag(session: Session, args) -> bool:
    image = session.require_image(args.image)
    changed = False
    for name in args.names:
        if session.add_tag(image, name) is not None:
            changed = True
        else:
            print(f"{image.base_name} already has tag {name}")
    return changed


def cmd_untag(session: Session, args) -> bool:
    image = session.require_image(args.image)
    changed = False
    for name in args.names:
        if session.untag(image, name):
            changed = True
        else:
            print(f"{image.base_name} does not have tag {name}")
    return changed


def cmd_untag_all(session: Session, args) -> bool:
    session.remove_all_tags(session.require_image(args.image))
    return True


def cmd_history(session: Session, args) -> bool:
    """Show every name an image has had, indexed for revert."""
    image = session.require_image(args.image)
    for i, line in enumerate(image.name_history()):
        print(f"  [{i}] {line}")
    return False


def cmd_log(session: Session, args) -> bool:
    """Show an image's name changes."""
    image = session.require_image(args.image)
    print_list(image.change_log(), empty="(no changes)")
    return False


def cmd_revert(session: Session, args) -> bool:
    image = session.require_image(args.image)
    session.revert(image, args.index)
    print(f"Reverted to: {image.file_name}")
    return True


def cmd_move(session: Session, args) -> bool:
    image = session.require_image(args.image)
    destination = session.move(image, Path(args.destination))
    print(f"Moved to {destination.parent}")
    return True


def cmd_open(session: Session, args) -> bool:
    image = session.require_image(args.image)
    open_path(image.directory if args.folder else image.file_path)
    return False


COMMANDS = {
    "ingest": cmd_ingest,
    "dirs": cmd_dirs,
    "images": cmd_images,
    "tags": cmd_tags,
    "tagged": cmd_tagged,
    "create-tag": cmd_create_tag,
    "delete-tag": cmd_delete_tag,
    "show": cmd_show,
    "tag": cmd_tag,
    "untag": cmd_untag,
    "untag-all": cmd_untag_all,
    "history": cmd_history,
    "log": cmd_log,
    "revert": cmd_revert,
    "move": cmd_move,
    "open": cmd_open,
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="phototag",
        description="Tag images by encoding tags into their file names",
    )
    parser.add_argument("--config", help="Settings YAML file (default: ./phototag.yaml)")
    parser.add_argument("--save-path", help="Registry JSON file (overrides config)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    ingest_parser = subparsers.add_parser("ingest", help="Read a directory tree")
    ingest_parser.add_argument("path", help="Directory to ingest")

    subparsers.add_parser("dirs", help="List known directories")

    images_parser = subparsers.add_parser("images", help="List images")
    images_parser.add_argument("directory", nargs="?", help="Only list this directory")

    subparsers.add_parser("tags", help="List all tags")

    tagged_parser = subparsers.add_parser("tagged", help="List images carrying a tag")
    tagged_parser.add_argument("tag", help="Tag name")

    create_parser = subparsers.add_parser("create-tag", help="Create a tag")
    create_parser.add_argument("name", help="Tag name (no spaces or @)")

    delete_parser = subparsers.add_parser("delete-tag", help="Delete a tag from everything")
    delete_parser.add_argument("name", help="Tag name")

    for name, help_text in [
        ("show", "Show an image"),
        ("untag-all", "Remove every tag from an image"),
        ("history", "Show an image's name history"),
        ("log", "Show an image's name changes"),
    ]:
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("image", help="Image file path")

    tag_parser = subparsers.add_parser("tag", help="Add tags to an image")
    tag_parser.add_argument("image", help="Image file path")
    tag_parser.add_argument("names", nargs="+", help="Tag names")

    untag_parser = subparsers.add_parser("untag", help="Remove tags from an image")
    untag_parser.add_argument("image", help="Image file path")
    untag_parser.add_argument("names", nargs="+", help="Tag names")

    revert_parser = subparsers.add_parser("revert", help="Restore an earlier version")
    revert_parser.add_argument("image", help="Image file path")
    revert_parser.add_argument("index", type=int, help="Index from 'history'")

    move_parser = subparsers.add_parser("move", help="Move an image to another directory")
    move_parser.add_argument("image", help="Image file path")
    move_parser.add_argument("destination", help="Destination directory")

    open_parser = subparsers.add_parser("open", help="Open an image or its folder")
    open_parser.add_argument("image", help="Image file path")
    open_parser.add_argument("--folder", action="store_true", help="Open the containing folder")

    return parser


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    try:
        settings = load_settings(args.config)
    except (OSError, ValueError) as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    if args.save_path:
        settings.save_path = Path(args.save_path).expanduser()
    configure_logging(settings, args.verbose)

    try:
        session = Session.open(settings)
        changed = COMMANDS[args.command](session, args)
        if changed:
            session.save()
    except PhotoTagError as e:
        logger.debug(f"{args.command} failed", exc_info=True)
        print(f"error: {e}", file=sys.stderr)
        return 1
    except FileNotFoundError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
