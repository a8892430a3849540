"""
Cipherslip - Envelope codec.

Created by orpheus497

A token is the only artifact that crosses the system boundary:

    base64(sender public key) : base64(nonce) : base64(ciphertext)

The base64 alphabet excludes ':', so the separator never needs escaping,
and the whole token survives copy/paste and QR encoding unchanged. The
codec only checks structure; authentication is the crypto engine's job.
"""

import logging
from dataclasses import dataclass

from .constants import TOKEN_FIELD_COUNT, TOKEN_SEPARATOR
from .errors import MalformedEnvelopeError
from .utils import from_base64, to_base64

logger = logging.getLogger(__name__)

FIELD_NAMES = ("sender_public_key", "nonce", "ciphertext")


@dataclass(frozen=True)
class Envelope:
    """Decoded token fields, all raw bytes."""

    sender_public_key: bytes
    nonce: bytes
    ciphertext: bytes

    def encode(self) -> str:
        """Serialize this envelope as token text."""
        return encode(self.sender_public_key, self.nonce, self.ciphertext)


def encode(sender_public_key: bytes, nonce: bytes, ciphertext: bytes) -> str:
    """
    Join the three fields, each base64-encoded, with ':'.

    Args:
        sender_public_key: Sender's raw public key
        nonce: Nonce used for sealing
        ciphertext: Sealed message

    Returns:
        Token text
    """
    return TOKEN_SEPARATOR.join(to_base64(part) for part in (sender_public_key, nonce, ciphertext))


def decode(text: str) -> Envelope:
    """
    Split token text into its three fields.

    Args:
        text: Token text

    Returns:
        Envelope with raw field bytes

    Raises:
        MalformedEnvelopeError: Unless there are exactly three non-empty
            fields and each one is valid base64
    """
    if not isinstance(text, str):
        raise MalformedEnvelopeError("Token must be text")

    parts = text.split(TOKEN_SEPARATOR)
    if len(parts) != TOKEN_FIELD_COUNT:
        raise MalformedEnvelopeError(
            "Invalid message format",
            {"expected_fields": TOKEN_FIELD_COUNT, "fields": len(parts)},
        )

    decoded = []
    for name, part in zip(FIELD_NAMES, parts):
        if not part:
            raise MalformedEnvelopeError("Invalid message format", {"empty_field": name})
        try:
            decoded.append(from_base64(part))
        except ValueError:
            raise MalformedEnvelopeError(
                "Invalid message format", {"invalid_field": name}
            ) from None

    logger.debug(f"Decoded token: {len(decoded[2])} ciphertext bytes")
    return Envelope(*decoded)
