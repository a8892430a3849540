"""
Cipherslip - Encrypted messages as self-contained text tokens

Generate a keypair, exchange public keys with contacts, and pass
authenticated, confidential messages as tokens that can be copied,
pasted, or carried in a QR code. No server, no transport.

Author: orpheus497
Version: 1.0.0
License: MIT
"""

__version__ = "1.0.0"
__author__ = "orpheus497"
__license__ = "MIT"

# Import core modules for easy access
from .config import Config
from .constants import APP_NAME, VERSION
from .crypto import KeyPair, generate_keypair, open_sealed, seal
from .envelope import Envelope
from .errors import (
    CipherslipError,
    ConfigError,
    ContactError,
    CorruptStateError,
    CryptoError,
    DecryptionFailedError,
    ErrorCode,
    IdentityError,
    InvalidContactError,
    InvalidRecipientError,
    MalformedEnvelopeError,
    NoIdentityError,
    QRCodeError,
    StorageError,
)
from .keystore import Contact, KeyStore
from .session import Outcome, Session
from .storage import JsonFileStore, KeyValueStore, MemoryStore

__all__ = [
    "APP_NAME",
    "VERSION",
    "CipherslipError",
    "Config",
    "ConfigError",
    "Contact",
    "ContactError",
    "CorruptStateError",
    "CryptoError",
    "DecryptionFailedError",
    "Envelope",
    "ErrorCode",
    "IdentityError",
    "InvalidContactError",
    "InvalidRecipientError",
    "JsonFileStore",
    "KeyPair",
    "KeyStore",
    "KeyValueStore",
    "MalformedEnvelopeError",
    "MemoryStore",
    "NoIdentityError",
    "Outcome",
    "QRCodeError",
    "Session",
    "StorageError",
    "generate_keypair",
    "open_sealed",
    "seal",
    "__author__",
    "__license__",
    "__version__",
]
