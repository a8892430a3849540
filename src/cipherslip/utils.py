"""
Cipherslip - Utility functions.

Created by orpheus497
Version: 1.0.0

Provides base64 helpers shared by the crypto engine and envelope codec,
plus formatting and validation helpers used by the CLI.
"""

import base64
import binascii
import logging
import re
from pathlib import Path
from typing import Optional

from .constants import DEFAULT_DATA_DIR, KEY_SIZE

logger = logging.getLogger(__name__)

# Either base64 alphabet, optional trailing padding, nothing else
_BASE64_PATTERN = re.compile(r"[A-Za-z0-9+/\-_]+={0,2}")


def to_base64(data: bytes) -> str:
    """
    Encode bytes as URL-safe base64 without padding.

    This is libsodium's default ``to_base64`` variant, so keys and tokens
    produced here can be pasted into other libsodium-based clients.

    Args:
        data: Raw bytes

    Returns:
        Base64 text (never contains ':', '=' or whitespace)
    """
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def from_base64(text: str) -> bytes:
    """
    Decode base64 text in either alphabet, with or without padding.

    Args:
        text: Base64 text

    Returns:
        Decoded bytes

    Raises:
        ValueError: If the text is empty or not valid base64
    """
    if not isinstance(text, str) or not _BASE64_PATTERN.fullmatch(text):
        raise ValueError("not valid base64 text")

    body = text.rstrip("=")
    if "+" in body or "/" in body:
        if "-" in body or "_" in body:
            raise ValueError("mixed base64 alphabets")
        altchars = None
    else:
        altchars = b"-_"

    padded = body + "=" * (-len(body) % 4)
    try:
        return base64.b64decode(padded, altchars=altchars, validate=True)
    except binascii.Error as e:
        raise ValueError(f"not valid base64 text: {e}") from e


def is_valid_public_key_text(text: str) -> bool:
    """
    Check whether text decodes to a key of the expected size.

    Args:
        text: Base64 public key text

    Returns:
        True if the text is base64 for exactly KEY_SIZE bytes
    """
    try:
        return len(from_base64(text)) == KEY_SIZE
    except ValueError:
        return False


def truncate_string(s: str, max_length: int, suffix: str = "...") -> str:
    """
    Truncate a string to a maximum length.

    Args:
        s: String to truncate
        max_length: Maximum length
        suffix: Suffix to add if truncated

    Returns:
        Truncated string
    """
    if len(s) <= max_length:
        return s
    return s[: max_length - len(suffix)] + suffix


def resolve_data_dir(data_dir: Optional[str] = None) -> Path:
    """
    Resolve the data directory, falling back to the default location.

    Args:
        data_dir: User-supplied directory (optional)

    Returns:
        Absolute path of the data directory
    """
    return Path(data_dir or DEFAULT_DATA_DIR).expanduser().resolve()
