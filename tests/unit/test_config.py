"""
Unit tests for cipherslip.config module.

Created by orpheus497

Tests defaults, TOML merging, environment overrides and validation.
"""

from pathlib import Path

import pytest

from cipherslip.config import DEFAULT_CONFIG, Config
from cipherslip.errors import ConfigError, ErrorCode


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep the caller's CIPHERSLIP_* variables out of these tests."""
    import os

    for name in list(os.environ):
        if name.startswith("CIPHERSLIP_"):
            monkeypatch.delenv(name)


class TestDefaults:
    """Missing config files fall back to defaults."""

    def test_defaults_without_file(self, temp_dir: Path):
        config = Config(temp_dir / "config.toml")

        assert config.get("storage", "backend") == "file"
        assert config.get("logging", "level") == "WARNING"
        assert config.get("qr", "box_size") == 10

    def test_defaults_are_not_shared(self, temp_dir: Path):
        config = Config(temp_dir / "config.toml")
        config.data["qr"]["border"] = 0

        assert DEFAULT_CONFIG["qr"]["border"] == 4
        assert Config(temp_dir / "config.toml").get("qr", "border") == 4

    def test_get_default_for_unknown_key(self, temp_dir: Path):
        config = Config(temp_dir / "config.toml")
        assert config.get("nope", "missing", "fallback") == "fallback"


class TestFileLoading:
    """TOML files are merged over defaults."""

    def test_file_overrides_defaults(self, temp_dir: Path):
        path = temp_dir / "config.toml"
        path.write_text('[logging]\nlevel = "debug"\n\n[qr]\nerror_correction = "H"\n')

        config = Config(path)

        assert config.get("logging", "level") == "DEBUG"
        assert config.get("qr", "error_correction") == "H"
        assert config.get("qr", "box_size") == 10

    def test_file_values_keep_their_types(self, temp_dir: Path):
        path = temp_dir / "config.toml"
        path.write_text('[storage]\nbackend = "memory"\n\n[logging]\nfile_logging = true\n')

        config = Config(path)

        assert config.get("storage", "backend") == "memory"
        assert config.get("logging", "file_logging") is True

    def test_invalid_toml(self, temp_dir: Path):
        path = temp_dir / "config.toml"
        path.write_text("[logging\nlevel = ")

        with pytest.raises(ConfigError) as excinfo:
            Config(path)
        assert excinfo.value.code == ErrorCode.E704_CONFIG_PARSE_ERROR

    @pytest.mark.parametrize(
        "content",
        [
            '[storage]\nbackend = "cloud"\n',
            '[logging]\nlevel = "LOUD"\n',
            '[qr]\nerror_correction = "Z"\n',
            "[qr]\nbox_size = -1\n",
            '[qr]\nborder = "wide"\n',
        ],
    )
    def test_invalid_values(self, temp_dir: Path, content: str):
        path = temp_dir / "config.toml"
        path.write_text(content)

        with pytest.raises(ConfigError) as excinfo:
            Config(path)
        assert excinfo.value.code == ErrorCode.E703_INVALID_CONFIG


class TestEnvironmentOverrides:
    """CIPHERSLIP_<SECTION>_<KEY> variables win over files."""

    def test_string_override(self, temp_dir: Path, monkeypatch):
        monkeypatch.setenv("CIPHERSLIP_STORAGE_BACKEND", "memory")
        assert Config(temp_dir / "config.toml").get("storage", "backend") == "memory"

    def test_typed_overrides(self, temp_dir: Path, monkeypatch):
        monkeypatch.setenv("CIPHERSLIP_QR_BOX_SIZE", "3")
        monkeypatch.setenv("CIPHERSLIP_LOGGING_FILE_LOGGING", "yes")

        config = Config(temp_dir / "config.toml")

        assert config.get("qr", "box_size") == 3
        assert config.get("logging", "file_logging") is True

    def test_bad_integer_override(self, temp_dir: Path, monkeypatch):
        monkeypatch.setenv("CIPHERSLIP_QR_BORDER", "wide")

        with pytest.raises(ConfigError) as excinfo:
            Config(temp_dir / "config.toml")
        assert excinfo.value.details["variable"] == "CIPHERSLIP_QR_BORDER"
