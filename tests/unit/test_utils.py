"""
Unit tests for cipherslip.utils module.

Created by orpheus497

Tests base64 helpers, key validation and formatting helpers.
"""

import base64
import os
from pathlib import Path

import pytest

from cipherslip.utils import (
    from_base64,
    is_valid_public_key_text,
    resolve_data_dir,
    to_base64,
    truncate_string,
)


class TestBase64:
    """Test the base64 helpers shared by keys and tokens."""

    def test_encoding_is_url_safe_and_unpadded(self):
        """Output uses '-' and '_' and never '='."""
        text = to_base64(b"\xfb\xff\xfe")
        assert text == "-__-"
        assert to_base64(b"a") == "YQ"

    def test_decoding_accepts_both_alphabets(self):
        """URL-safe and standard text decode to the same bytes."""
        data = os.urandom(48)
        assert from_base64(to_base64(data)) == data
        assert from_base64(base64.b64encode(data).decode()) == data

    def test_decoding_accepts_optional_padding(self):
        """Padding may be present or absent."""
        assert from_base64("YQ") == b"a"
        assert from_base64("YQ==") == b"a"

    def test_decoding_rejects_invalid_text(self):
        """Empty, mixed-alphabet and non-alphabet text is rejected."""
        for text in ("", "a b", "YQ=a", "-+AA", "Y", "YQ\n", "Y:Q"):
            with pytest.raises(ValueError):
                from_base64(text)

    def test_decoding_rejects_non_strings(self):
        """Only text is decoded."""
        with pytest.raises(ValueError):
            from_base64(b"YQ")


class TestPublicKeyValidation:
    """Test public key text validation."""

    def test_valid_key(self):
        """32 bytes of base64 is a valid key."""
        assert is_valid_public_key_text(to_base64(os.urandom(32))) is True

    def test_invalid_keys(self):
        """Wrong sizes and non-base64 text are rejected."""
        assert is_valid_public_key_text(to_base64(os.urandom(31))) is False
        assert is_valid_public_key_text(to_base64(os.urandom(33))) is False
        assert is_valid_public_key_text("not a key") is False
        assert is_valid_public_key_text("") is False


class TestFormatting:
    """Test formatting helpers."""

    def test_truncate_string(self):
        """Long strings are cut with a suffix, short ones left alone."""
        assert truncate_string("short", 10) == "short"
        assert truncate_string("a" * 20, 10) == "aaaaaaa..."
        assert len(truncate_string("a" * 20, 10)) == 10

    def test_resolve_data_dir(self, temp_dir: Path):
        """An explicit directory wins over the default."""
        assert resolve_data_dir(str(temp_dir)) == temp_dir.resolve()
        assert resolve_data_dir(None) == (Path.home() / ".cipherslip").resolve()
