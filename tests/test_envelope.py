"""
Cipherslip - Envelope codec tests.

Created by orpheus497

Tests for token encoding and structural validation.
"""

import base64
import os

import pytest

from cipherslip import envelope
from cipherslip.errors import ErrorCode, MalformedEnvelopeError


def _fields():
    return os.urandom(32), os.urandom(24), os.urandom(40)


def test_encode_produces_three_fields():
    """Tokens are three base64 fields joined by ':'."""
    sender, nonce, ciphertext = _fields()
    token = envelope.encode(sender, nonce, ciphertext)

    assert token.count(":") == 2
    parts = token.split(":")
    assert all(parts)
    assert "=" not in token
    assert not any(c.isspace() for c in token)


def test_decode_returns_fields_in_order():
    """Decoding gives back sender key, nonce and ciphertext in that order."""
    sender, nonce, ciphertext = _fields()

    decoded = envelope.decode(envelope.encode(sender, nonce, ciphertext))

    assert decoded == envelope.Envelope(sender, nonce, ciphertext)
    assert decoded.sender_public_key == sender
    assert decoded.nonce == nonce
    assert decoded.ciphertext == ciphertext


def test_envelope_encode_method():
    """Envelope.encode() matches the module-level encoder."""
    sealed = envelope.Envelope(*_fields())
    assert sealed.encode() == envelope.encode(sealed.sender_public_key, sealed.nonce, sealed.ciphertext)


def test_decode_accepts_padded_standard_base64():
    """Fields written by standard base64 encoders are accepted too."""
    sender, nonce, ciphertext = b"\xfb\xff" * 16, b"\xfe" * 24, b"\xff\xfe\xfd" * 5 + b"!"
    token = ":".join(base64.b64encode(part).decode() for part in (sender, nonce, ciphertext))
    assert "+" in token or "/" in token

    decoded = envelope.decode(token)

    assert decoded == envelope.Envelope(sender, nonce, ciphertext)


@pytest.mark.parametrize(
    "token",
    [
        "",
        "onlyonefield",
        "two:fields",
        "a:b:c:d",
        "AAAA:AAAA:AAAA:",
        "::",
        ":AAAA:AAAA",
        "AAAA::AAAA",
        "AAAA:AAAA:",
    ],
)
def test_decode_rejects_wrong_field_count_or_empty_fields(token):
    """Anything other than three non-empty fields is malformed."""
    with pytest.raises(MalformedEnvelopeError) as excinfo:
        envelope.decode(token)

    assert excinfo.value.code == ErrorCode.E206_MALFORMED_ENVELOPE


@pytest.mark.parametrize(
    "field",
    [
        "AA AA",
        "AA*A",
        "A",
        "AAAAA",
        "AA=A",
        "AAAA\n",
        "äöü",
        "AA-A+A",
    ],
)
def test_decode_rejects_invalid_base64(field):
    """A field that is not base64 makes the token malformed."""
    for position in range(3):
        parts = ["AAAA", "AAAA", "AAAA"]
        parts[position] = field
        with pytest.raises(MalformedEnvelopeError):
            envelope.decode(":".join(parts))


def test_decode_rejects_non_text():
    """Bytes are not tokens."""
    with pytest.raises(MalformedEnvelopeError):
        envelope.decode(b"AAAA:AAAA:AAAA")


def test_decode_does_no_crypto_validation():
    """Structurally valid garbage decodes; rejecting it is the crypto engine's job."""
    decoded = envelope.decode("AAAA:AAAA:AAAA")
    assert decoded == envelope.Envelope(b"\x00\x00\x00", b"\x00\x00\x00", b"\x00\x00\x00")
