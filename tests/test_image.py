# tests/test_image.py
"""Tests for images, their file names and version logs."""

import tempfile
from pathlib import Path

import pytest

from phototag.errors import FilesystemError, IndexOutOfRange
from phototag.image import Image, parse_file_name
from phototag.tags import Tag, TagStore


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def image():
    return Image("photo", "jpg", "/photos")


class TestParseFileName:
    """Test splitting file names."""

    def test_plain_name(self):
        assert parse_file_name("photo.jpg") == ("photo", [], "jpg")

    def test_tagged_name(self):
        assert parse_file_name("photo @vacation @2020.jpg") == ("photo", ["vacation", "2020"], "jpg")

    def test_extension_is_last_suffix(self):
        """Dots before the extension stay in the stem."""
        assert parse_file_name("my.photo @x.jpeg") == ("my.photo", ["x"], "jpeg")

    def test_marker_without_space_is_part_of_base_name(self):
        assert parse_file_name("me@home.png") == ("me@home", [], "png")

    def test_malformed_tokens_returned_raw(self):
        assert parse_file_name("photo @ @two words.gif") == ("photo", ["", "two words"], "gif")


class TestImageCreation:
    """Test Image construction."""

    def test_initial_state(self, image):
        """A new image has no tags and one empty log entry."""
        assert image.current_tags == []
        assert len(image.version_log) == 1
        assert image.version_log[0].tags == []
        assert not image.dirty
        assert image.file_path == Path("/photos/photo.jpg")

    def test_seeded_tags(self):
        """Seeded tags are attached and recorded as the first entry."""
        beach = Tag("beach")
        image = Image("photo", "jpg", "/photos", tags=[beach, Tag("beach")])
        assert image.current_tags == [beach]
        assert beach.is_tagging(image)
        assert len(image.version_log) == 1
        assert image.version_log[0].tag_names == ["beach"]

    def test_from_path(self):
        """from_path splits base name and extension and keeps the real path."""
        image = Image.from_path("/photos/photo @old.png")
        assert image.base_name == "photo"
        assert image.extension == "png"
        assert image.directory == Path("/photos")
        assert image.file_path == Path("/photos/photo @old.png")


class TestImageIdentity:
    """Test Image equality."""

    def test_equal_regardless_of_tags(self):
        """Same base name and directory means the same image."""
        first = Image("photo", "jpg", "/photos")
        second = Image("photo", "png", "/photos", tags=[Tag("beach")])
        assert first == second
        assert hash(first) == hash(second)

    def test_different_directory(self):
        assert Image("photo", "jpg", "/a") != Image("photo", "jpg", "/b")

    def test_different_base_name(self):
        assert Image("photo", "jpg", "/a") != Image("other", "jpg", "/a")


class TestFileName:
    """Test canonical file names."""

    def test_no_tags(self, image):
        assert image.file_name == "photo.jpg"
        assert image.compute_file_name() == "photo.jpg"

    def test_tags_in_order(self, image):
        image.add_tag(Tag("vacation"))
        image.add_tag(Tag("2020"))
        assert image.file_name == "photo @vacation @2020.jpg"
        assert str(image) == "photo @vacation @2020.jpg"


class TestTagging:
    """Test adding and removing tags."""

    def test_add_tag(self, image):
        tag = Tag("beach")
        assert image.add_tag(tag) is True
        assert image.current_tags == [tag]
        assert tag.tagged_images == [image]
        assert len(image.version_log) == 2
        assert image.dirty

    def test_add_existing_tag_is_noop(self, image):
        tag = Tag("beach")
        image.add_tag(tag)
        assert image.add_tag(Tag("beach")) is False
        assert len(image.version_log) == 2

    def test_add_then_remove(self, image):
        """Add + remove restores the tags and leaves three log entries."""
        tag = Tag("beach")
        image.add_tag(tag)
        assert image.remove_tag(tag) is True

        assert image.current_tags == []
        assert tag.tagged_images == []
        assert len(image.version_log) == 3
        assert len(image.name_history()) == 3
        assert len(image.change_log()) == 2

    def test_remove_missing_tag(self, image):
        assert image.remove_tag(Tag("beach")) is False
        assert len(image.version_log) == 1
        assert not image.dirty

    def test_remove_without_log_or_detach(self, image):
        tag = Tag("beach")
        image.add_tag(tag)
        image.remove_tag(tag, update_log=False, detach_from_tag=False)
        assert image.current_tags == []
        assert len(image.version_log) == 2
        assert tag.tagged_images == [image]

    def test_remove_all_tags_records_once(self, image):
        """Removing all tags appends a single log entry."""
        first, second = Tag("a"), Tag("b")
        image.add_tag(first)
        image.add_tag(second)
        assert len(image.version_log) == 3

        image.remove_all_tags()

        assert image.current_tags == []
        assert len(image.version_log) == 4
        assert first.tagged_images == []
        assert second.tagged_images == []

    def test_snapshots_are_copies(self, image):
        """Later changes do not alter earlier snapshots."""
        image.add_tag(Tag("a"))
        image.add_tag(Tag("b"))
        assert image.version_log[1].tag_names == ["a"]
        assert image.version_log[2].tag_names == ["a", "b"]


class TestRevert:
    """Test restoring earlier versions."""

    def test_revert_to_initial(self, image):
        """Reverting to 0 after one add restores the empty set."""
        tag = Tag("beach")
        image.add_tag(tag)

        image.revert_to(0)

        assert image.current_tags == []
        assert len(image.version_log) == 3
        assert image.version_log[2].tags == []
        assert image.dirty

    def test_revert_reconciles_back_references(self, image):
        """Tags leaving or re-entering an image update their references."""
        a, b = Tag("a"), Tag("b")
        image.add_tag(a)
        image.remove_tag(a)
        image.add_tag(b)

        image.revert_to(1)

        assert image.current_tags == [a]
        assert a.tagged_images == [image]
        assert b.tagged_images == []

    def test_revert_never_rewrites_history(self, image):
        image.add_tag(Tag("a"))
        before = list(image.version_log)
        image.revert_to(0)
        assert image.version_log[:2] == before

    @pytest.mark.parametrize("index", [-1, 2, 99])
    def test_revert_out_of_range(self, image, index):
        """Invalid indexes raise and change nothing."""
        image.add_tag(Tag("a"))
        with pytest.raises(IndexOutOfRange):
            image.revert_to(index)
        assert [t.name for t in image.current_tags] == ["a"]
        assert len(image.version_log) == 2

    def test_revert_restores_deleted_tag_into_store(self, image):
        """A deleted tag comes back to the store when reverted to."""
        store = TagStore()
        tag = store.create("beach")
        image.add_tag(tag)
        store.delete(tag)
        assert "beach" not in store

        image.revert_to(1, tag_store=store)

        assert store.get("beach") is not None
        assert image.current_tags == [store.get("beach")]
        assert store.get("beach").tagged_images == [image]

    def test_revert_uses_recreated_tag(self, image):
        """A tag recreated after deletion is the one restored."""
        store = TagStore()
        old = store.create("beach")
        image.add_tag(old)
        store.delete(old)
        new = store.create("beach")

        image.revert_to(1, tag_store=store)

        assert image.current_tags[0] is new
        assert new.is_tagging(image)


class TestHistory:
    """Test name history and change log."""

    def test_name_history(self, image):
        image.add_tag(Tag("a"))
        history = image.name_history()
        assert len(history) == 2
        assert history[0].endswith(": photo.jpg")
        assert history[1].endswith(": photo @a.jpg")
        assert history[1].startswith(image.version_log[1].timestamp)

    def test_change_log(self, image):
        image.add_tag(Tag("a"))
        image.add_tag(Tag("b"))
        log = image.change_log()
        assert len(log) == 2
        assert log[0].endswith(": photo.jpg -> photo @a.jpg")
        assert log[1].endswith(": photo @a.jpg -> photo @a @b.jpg")
        assert log[1].startswith(image.version_log[2].timestamp)

    def test_change_log_empty_for_new_image(self, image):
        assert image.change_log() == []


class TestRenameOnDisk:
    """Test renaming files to match tags."""

    def test_rename(self, temp_dir):
        path = temp_dir / "photo.jpg"
        path.write_bytes(b"jpeg")
        image = Image.from_path(path)
        image.add_tag(Tag("beach"))

        new_path = image.rename_on_disk()

        assert new_path == temp_dir / "photo @beach.jpg"
        assert new_path.exists()
        assert not path.exists()
        assert image.file_path == new_path

    def test_rename_noop_when_in_sync(self, temp_dir):
        path = temp_dir / "photo.jpg"
        path.write_bytes(b"jpeg")
        image = Image.from_path(path)
        assert image.rename_on_disk() == path
        assert path.exists()

    def test_rename_missing_file(self, temp_dir):
        """A failed rename raises and keeps the old file_path."""
        image = Image.from_path(temp_dir / "gone.jpg")
        image.add_tag(Tag("beach"))

        with pytest.raises(FilesystemError):
            image.rename_on_disk()
        assert image.file_path == temp_dir / "gone.jpg"

    def test_rename_refuses_to_overwrite(self, temp_dir):
        path = temp_dir / "photo.jpg"
        path.write_bytes(b"one")
        (temp_dir / "photo @beach.jpg").write_bytes(b"two")
        image = Image.from_path(path)
        image.add_tag(Tag("beach"))

        with pytest.raises(FilesystemError):
            image.rename_on_disk()
        assert (temp_dir / "photo @beach.jpg").read_bytes() == b"two"
        assert path.exists()


class TestSerialization:
    """Test to_dict/from_dict."""

    def test_round_trip_keeps_history(self, image):
        tags = {"a": Tag("a"), "b": Tag("b")}
        image.add_tag(tags["a"])
        image.add_tag(tags["b"])
        image.remove_tag(tags["a"])

        restored = Image.from_dict(image.to_dict(), tags.__getitem__)

        assert restored == image
        assert restored.current_tags == [tags["b"]]
        assert [e.tag_names for e in restored.version_log] == [[], ["a"], ["a", "b"], ["b"]]
        assert [e.timestamp for e in restored.version_log] == [e.timestamp for e in image.version_log]
        assert restored.dirty
        assert restored.file_path == image.file_path
