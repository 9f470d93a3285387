# tests/test_config.py
"""Tests for settings loading."""

import os
import tempfile
from pathlib import Path

import pytest

from phototag.config import Settings, load_settings
from phototag.ingest import IMAGE_EXTENSIONS


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir).resolve()


@pytest.fixture
def in_temp_dir(temp_dir):
    """Run the test with temp_dir as the working directory."""
    cwd = os.getcwd()
    os.chdir(temp_dir)
    try:
        yield temp_dir
    finally:
        os.chdir(cwd)


class TestSettings:
    """Test Settings defaults and parsing."""

    def test_defaults(self):
        settings = Settings()
        assert settings.save_path.name == "registry.json"
        assert settings.log_path.name == "History.log"
        assert settings.log_level == "INFO"
        assert settings.extensions == list(IMAGE_EXTENSIONS)

    def test_from_dict(self):
        settings = Settings.from_dict({
            "save_path": "/data/reg.json",
            "log_path": None,
            "log_level": "debug",
            "extensions": ["jpg", ".png"],
        })
        assert settings.save_path == Path("/data/reg.json")
        assert settings.log_path is None
        assert settings.log_level == "DEBUG"
        assert settings.extensions == [".jpg", ".png"]

    def test_expands_user(self):
        settings = Settings.from_dict({"save_path": "~/reg.json"})
        assert "~" not in str(settings.save_path)

    def test_unknown_key(self):
        with pytest.raises(ValueError):
            Settings.from_dict({"save_pth": "/x"})

    def test_bad_extensions(self):
        with pytest.raises(ValueError):
            Settings.from_dict({"extensions": ".jpg"})


class TestLoadSettings:
    """Test load_settings file lookup."""

    def test_explicit_file(self, temp_dir):
        config = temp_dir / "custom.yaml"
        config.write_text("save_path: /data/reg.json\nextensions: [.jpg]\n")
        settings = load_settings(config)
        assert settings.save_path == Path("/data/reg.json")
        assert settings.extensions == [".jpg"]

    def test_default_file_in_cwd(self, in_temp_dir):
        (in_temp_dir / "phototag.yaml").write_text("log_level: WARNING\n")
        assert load_settings().log_level == "WARNING"

    def test_no_file_gives_defaults(self, in_temp_dir):
        assert load_settings() == Settings()

    def test_empty_file(self, temp_dir):
        config = temp_dir / "empty.yaml"
        config.write_text("")
        assert load_settings(config) == Settings()

    def test_non_mapping(self, temp_dir):
        config = temp_dir / "list.yaml"
        config.write_text("- a\n- b\n")
        with pytest.raises(ValueError):
            load_settings(config)
