"""
Cipherslip - Public-key authenticated encryption.

Created by orpheus497

This module implements the crypto engine behind every token:
- Curve25519 keypairs for identities
- NaCl box (X25519 key agreement + XSalsa20 + Poly1305) for sealing
- A fresh 24-byte nonce from the operating system CSPRNG for every seal
- SHA-256 fingerprints for comparing keys out of band

All cryptographic operations use well-tested, open-source libraries:
- PyNaCl, bindings to libsodium (Apache 2.0 License)
- cryptography library (Apache 2.0/BSD License)
"""

import logging
from typing import Dict, Optional, Tuple

from cryptography.hazmat.primitives import hashes
from nacl.exceptions import CryptoError as NaClCryptoError
from nacl.public import Box, PrivateKey, PublicKey
from nacl.utils import random as random_bytes

from .constants import FINGERPRINT_GROUPS, KEY_SIZE, NONCE_SIZE
from .errors import CryptoError, DecryptionFailedError, ErrorCode
from .utils import from_base64, to_base64

logger = logging.getLogger(__name__)


class KeyPair:
    """
    Represents a local identity key pair for box encryption.

    Curve25519 provides:
    - 128-bit security level
    - Small key size (32 bytes each)
    - Resistance to timing attacks

    The private key is only reachable through ``private_key`` and
    ``to_dict``; it is left out of ``repr`` and of every shareable form.
    """

    def __init__(self, private_key: Optional[PrivateKey] = None):
        if private_key is None:
            private_key = PrivateKey.generate()
        self._private_key = private_key
        self._public_key = private_key.public_key

    @property
    def public_key(self) -> bytes:
        """Raw 32-byte public key."""
        return bytes(self._public_key)

    @property
    def private_key(self) -> bytes:
        """Raw 32-byte private key."""
        return bytes(self._private_key)

    @property
    def public_key_text(self) -> str:
        """Base64 public key, the payload shared with contacts."""
        return to_base64(self.public_key)

    def to_dict(self) -> Dict[str, str]:
        """Export key pair to dictionary for storage."""
        return {
            "publicKey": to_base64(self.public_key),
            "privateKey": to_base64(self.private_key),
        }

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "KeyPair":
        """
        Import key pair from dictionary.

        The public key is recomputed from the private key and must match
        the stored one.

        Raises:
            CryptoError: If a key is missing, not base64, or inconsistent
        """
        try:
            private_bytes = from_base64(data["privateKey"])
            public_bytes = from_base64(data["publicKey"])
        except (KeyError, TypeError, ValueError) as e:
            raise CryptoError(ErrorCode.E103_INVALID_KEY, f"Invalid stored key pair: {e}") from e

        if len(private_bytes) != KEY_SIZE or len(public_bytes) != KEY_SIZE:
            raise CryptoError(ErrorCode.E103_INVALID_KEY, "Stored keys have the wrong length")

        keypair = KeyPair(PrivateKey(private_bytes))
        if keypair.public_key != public_bytes:
            raise CryptoError(
                ErrorCode.E103_INVALID_KEY, "Stored public key does not match private key"
            )
        return keypair

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyPair):
            return NotImplemented
        return self.private_key == other.private_key

    def __hash__(self) -> int:
        return hash(self.public_key)

    def __repr__(self) -> str:
        return f"KeyPair(public_key={self.public_key_text!r})"


def generate_keypair() -> KeyPair:
    """
    Generate a fresh Curve25519 keypair from the system CSPRNG.

    Raises:
        CryptoError: If the entropy source or key generation fails
    """
    try:
        keypair = KeyPair()
    except (NaClCryptoError, OSError) as e:
        raise CryptoError(
            ErrorCode.E104_KEY_GENERATION_FAILED, f"Key generation failed: {e}"
        ) from e

    logger.debug(f"Generated keypair {generate_fingerprint(keypair.public_key)[:9]}")
    return keypair


def generate_nonce() -> bytes:
    """Return NONCE_SIZE fresh random bytes from the operating system CSPRNG."""
    return random_bytes(NONCE_SIZE)


def seal(
    plaintext: bytes, recipient_public_key: bytes, sender_private_key: bytes
) -> Tuple[bytes, bytes]:
    """
    Encrypt and authenticate plaintext for one recipient.

    A new nonce is drawn for every call, so sealing the same plaintext
    twice yields two different, independently valid ciphertexts.

    Args:
        plaintext: Message bytes (may be empty)
        recipient_public_key: Recipient's raw 32-byte public key
        sender_private_key: Sender's raw 32-byte private key

    Returns:
        Tuple of (nonce, ciphertext); ciphertext includes the 16-byte tag

    Raises:
        CryptoError: If either key is not a valid 32-byte key
    """
    if not isinstance(plaintext, (bytes, bytearray)):
        raise CryptoError(ErrorCode.E101_ENCRYPTION_FAILED, "Plaintext must be bytes")

    try:
        box = Box(PrivateKey(bytes(sender_private_key)), PublicKey(bytes(recipient_public_key)))
    except (NaClCryptoError, TypeError, ValueError) as e:
        raise CryptoError(ErrorCode.E103_INVALID_KEY, f"Invalid key for encryption: {e}") from e

    nonce = generate_nonce()
    encrypted = box.encrypt(bytes(plaintext), nonce)
    return nonce, encrypted.ciphertext


def open_sealed(
    ciphertext: bytes, nonce: bytes, sender_public_key: bytes, recipient_private_key: bytes
) -> bytes:
    """
    Verify and decrypt a sealed message.

    Every failure, whatever its cause, raises the same DecryptionFailedError
    so a caller probing with forged tokens learns nothing beyond rejection.

    Args:
        ciphertext: Ciphertext produced by seal()
        nonce: Nonce returned alongside it
        sender_public_key: Sender's raw 32-byte public key
        recipient_private_key: Recipient's raw 32-byte private key

    Returns:
        The original plaintext bytes

    Raises:
        DecryptionFailedError: On any authentication or input failure
    """
    try:
        box = Box(PrivateKey(bytes(recipient_private_key)), PublicKey(bytes(sender_public_key)))
        return box.decrypt(bytes(ciphertext), bytes(nonce))
    except (NaClCryptoError, TypeError, ValueError):
        raise DecryptionFailedError() from None


def generate_fingerprint(public_key_bytes: bytes) -> str:
    """
    Generate a human-readable fingerprint from a public key using SHA-256.

    Users compare fingerprints through a trusted channel (phone call, in
    person) before trusting a contact's key. Only the first
    FINGERPRINT_GROUPS groups of four hex digits are kept.

    Returns:
        Fingerprint such as ``3f2a-91c0-...``
    """
    digest = hashes.Hash(hashes.SHA256())
    digest.update(public_key_bytes)
    hex_digest = digest.finalize().hex()
    return "-".join(hex_digest[i : i + 4] for i in range(0, FINGERPRINT_GROUPS * 4, 4))
