"""Tests for persistent preferences (config.toml)."""

import logging
import os
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

from keyspec.core.config import (
    configure_logging,
    load_config,
    save_config,
)
from keyspec.core.errors import ConfigurationError
from keyspec.core.templates import aes256_gcm, default_template


@pytest.fixture(autouse=True)
def _no_env_override():
    with patch.dict(os.environ):
        os.environ.pop("KEYSPEC_CONFIG", None)
        yield


class TestSaveLoadConfig:
    """Test config save/load roundtrip."""

    def test_save_and_load_roundtrip(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                save_config({"default_template": "AES256_GCM", "debug": True})
                loaded = load_config()
                assert loaded == {"default_template": "AES256_GCM", "debug": True}

    def test_missing_file_returns_empty(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "nonexistent" / "config.toml"
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                assert load_config() == {}

    def test_save_creates_directory(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "nested" / "config.toml"
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                save_config({"debug": False})
                assert cfg_file.is_file()

    def test_invalid_keys_skipped(self, caplog):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            cfg_file.write_text('unknown_key = "value"\ndefault_template = "AES128_GCM"\n')
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                loaded = load_config()
                assert "unknown_key" not in loaded
                assert loaded["default_template"] == "AES128_GCM"
        assert "unknown key 'unknown_key'" in caplog.text

    def test_unknown_template_skipped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            cfg_file.write_text('default_template = "DES_CBC"\ndebug = yes\n')
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                loaded = load_config()
                assert "default_template" not in loaded
                assert loaded["debug"] is True

    def test_boolean_parsing(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            for raw, expected in [("true", True), ("no", False), ("1", True), ("off", False)]:
                cfg_file.write_text(f"debug = {raw}\n")
                with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                    assert load_config()["debug"] is expected

    def test_invalid_boolean_skipped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            cfg_file.write_text("debug = maybe\n")
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                assert load_config() == {}

    def test_comments_and_malformed_lines_ignored(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            cfg_file.write_text("# comment\n\nnot a pair\ndefault_template = 'aes256_gcm'\n")
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                assert load_config() == {"default_template": "aes256_gcm"}

    def test_trailing_comments_stripped(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            cfg_file.write_text(
                'default_template = "AES256_GCM"   # catalog name served by default_template()\n'
                "debug = true                      # enable DEBUG logging via configure_logging()\n"
            )
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                assert load_config() == {"default_template": "AES256_GCM", "debug": True}

    def test_hash_inside_quotes_kept(self, caplog):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            cfg_file.write_text('default_template = "AES#GCM"  # not a template\n')
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                assert load_config() == {}
        assert "unknown template 'AES#GCM'" in caplog.text

    def test_env_override(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "custom.toml"
            cfg_file.write_text('default_template = "AES256_GCM"\n')
            with patch.dict(os.environ, {"KEYSPEC_CONFIG": str(cfg_file)}):
                assert load_config() == {"default_template": "AES256_GCM"}

    def test_file_permissions(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                save_config({"default_template": "AES128_GCM"})
                mode = oct(os.stat(cfg_file).st_mode & 0o777)
                assert mode == "0o600"


class TestSaveValidation:
    """Tests that save_config rejects invalid preferences."""

    def test_unknown_template_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown template"):
            save_config({"default_template": "ROT13"})

    def test_non_boolean_debug_rejected(self):
        with pytest.raises(ConfigurationError, match="boolean"):
            save_config({"debug": "yes"})

    def test_unknown_key_rejected(self):
        with pytest.raises(ConfigurationError, match="Unknown preference"):
            save_config({"cipher": "AES-256-GCM"})


class TestConfigDrivenBehaviour:
    """Tests for behaviour driven by the preferences file."""

    def test_default_template_reads_file(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            cfg_file = Path(tmpdir) / "config.toml"
            cfg_file.write_text('default_template = "AES256_GCM"\n')
            with patch("keyspec.core.config._CONFIG_FILE", cfg_file):
                assert default_template() == aes256_gcm()

    def test_configure_logging(self):
        logger = logging.getLogger("keyspec")
        previous = logger.level
        try:
            configure_logging({"debug": True})
            assert logger.level == logging.DEBUG
            configure_logging({})
            assert logger.level == logging.WARNING
        finally:
            logger.setLevel(previous)
