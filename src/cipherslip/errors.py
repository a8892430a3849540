"""
Cipherslip - Custom Exception Classes and Error Codes

This module defines all custom exceptions and error codes used throughout
the Cipherslip package. Each error has a unique code for logging and
debugging, and every failure a caller must branch on has its own class.

Author: orpheus497
Version: 1.0.0
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(Enum):
    """Enumeration of all Cipherslip error codes."""

    # General Errors (E001-E099)
    E001_UNKNOWN_ERROR = "E001"
    E002_INVALID_ARGUMENT = "E002"
    E003_FILE_NOT_FOUND = "E003"
    E004_PERMISSION_DENIED = "E004"
    E005_OPERATION_FAILED = "E005"

    # Crypto Errors (E100-E199)
    E100_CRYPTO_ERROR = "E100"
    E101_ENCRYPTION_FAILED = "E101"
    E102_DECRYPTION_FAILED = "E102"
    E103_INVALID_KEY = "E103"
    E104_KEY_GENERATION_FAILED = "E104"

    # Envelope Errors (E200-E299)
    E206_MALFORMED_ENVELOPE = "E206"

    # Identity Errors (E300-E399)
    E300_IDENTITY_ERROR = "E300"
    E301_IDENTITY_NOT_FOUND = "E301"
    E302_IDENTITY_ALREADY_EXISTS = "E302"
    E303_CORRUPT_STATE = "E303"

    # Contact Errors (E400-E499)
    E400_CONTACT_ERROR = "E400"
    E405_INVALID_CONTACT = "E405"
    E406_INVALID_RECIPIENT = "E406"

    # Config Errors (E700-E799)
    E700_CONFIG_ERROR = "E700"
    E701_CONFIG_LOAD_FAILED = "E701"
    E703_INVALID_CONFIG = "E703"
    E704_CONFIG_PARSE_ERROR = "E704"

    # QR Code Errors (E900-E999)
    E901_QR_UNAVAILABLE = "E901"
    E902_QR_GENERATION_FAILED = "E902"
    E903_QR_SCAN_FAILED = "E903"


class CipherslipError(Exception):
    """Base exception class for all Cipherslip errors.

    All custom exceptions in Cipherslip inherit from this class.
    Provides standardized error handling and logging.

    Attributes:
        code: Error code from ErrorCode enum
        message: Human-readable error message
        details: Additional error details (optional)
    """

    def __init__(self, code: ErrorCode, message: str, details: Optional[Dict[str, Any]] = None):
        """Initialize a Cipherslip error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            details: Additional error context (optional)
        """
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary for serialization.

        Returns:
            Dictionary containing error information
        """
        return {"code": self.code.value, "message": self.message, "details": self.details}


class CryptoError(CipherslipError):
    """Exception raised for cryptographic operation failures."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.E100_CRYPTO_ERROR,
        message: str = "Cryptographic operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code, message, details)


class DecryptionFailedError(CryptoError):
    """Raised when a token cannot be opened.

    Wrong recipient, wrong sender key, corrupted ciphertext and malformed
    nonces all produce this same error with the same message. No details
    are attached.
    """

    MESSAGE = "Failed to decrypt message. It may not be intended for you or is corrupted."

    def __init__(self):
        super().__init__(ErrorCode.E102_DECRYPTION_FAILED, self.MESSAGE)


class MalformedEnvelopeError(CipherslipError):
    """Raised when a token does not parse into three base64 fields."""

    def __init__(
        self,
        message: str = "Invalid message format",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.E206_MALFORMED_ENVELOPE, message, details)


class IdentityError(CipherslipError):
    """Exception raised for identity management failures."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.E300_IDENTITY_ERROR,
        message: str = "Identity operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code, message, details)


class NoIdentityError(IdentityError):
    """Raised when an operation needs a local keypair that was never generated."""

    def __init__(self, message: str = "No local keypair found. Generate keys first."):
        super().__init__(ErrorCode.E301_IDENTITY_NOT_FOUND, message)


class IdentityExistsError(IdentityError):
    """Raised when generation would silently replace an existing keypair."""

    def __init__(self, message: str = "A local keypair already exists"):
        super().__init__(ErrorCode.E302_IDENTITY_ALREADY_EXISTS, message)


class ContactError(CipherslipError):
    """Exception raised for contact management failures."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.E400_CONTACT_ERROR,
        message: str = "Contact operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code, message, details)


class InvalidContactError(ContactError):
    """Raised when a contact is missing its name or public key."""

    def __init__(
        self,
        message: str = "Name and public key are required",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.E405_INVALID_CONTACT, message, details)


class InvalidRecipientError(ContactError):
    """Raised when the selected recipient does not resolve to a usable contact."""

    def __init__(
        self,
        message: str = "Select a recipient first",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.E406_INVALID_RECIPIENT, message, details)


class StorageError(CipherslipError):
    """Exception raised when the persistence backend cannot be read or written."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.E005_OPERATION_FAILED,
        message: str = "Storage operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code, message, details)


class CorruptStateError(CipherslipError):
    """Exception raised when a stored record is not a valid serialized record."""

    def __init__(
        self,
        message: str = "Stored data is corrupted",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(ErrorCode.E303_CORRUPT_STATE, message, details)


class ConfigError(CipherslipError):
    """Exception raised for configuration failures.

    This includes loading, parsing, and validating configuration files.
    """

    def __init__(
        self,
        code: ErrorCode = ErrorCode.E700_CONFIG_ERROR,
        message: str = "Configuration operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code, message, details)


class QRCodeError(CipherslipError):
    """Exception raised when QR rendering or scanning fails or is unavailable."""

    def __init__(
        self,
        code: ErrorCode = ErrorCode.E902_QR_GENERATION_FAILED,
        message: str = "QR code operation failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(code, message, details)
