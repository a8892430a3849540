"""
Cipherslip - Global Constants and Configuration Values

This module defines all constants used throughout the Cipherslip package.
All magic numbers and configuration defaults are centralized here.

Author: orpheus497
Version: 1.0.0
"""

# Version Information
VERSION = "1.0.0"
APP_NAME = "Cipherslip"
AUTHOR = "orpheus497"

# Cryptography Constants (NaCl crypto_box)
KEY_SIZE = 32  # Curve25519 public and private keys
NONCE_SIZE = 24  # XSalsa20 nonce
MAC_SIZE = 16  # Poly1305 tag
FINGERPRINT_GROUPS = 8  # 4-hex-digit groups shown to the user

# Token Format
TOKEN_SEPARATOR = ":"
TOKEN_FIELD_COUNT = 3

# Message Limits

# Persistence Record Names
IDENTITY_RECORD = "identity"
CONTACTS_RECORD = "contacts"

# File Paths
DEFAULT_DATA_DIR = "~/.cipherslip"
CONFIG_FILENAME = "config.toml"
LOGS_DIR = "logs"
LOG_FILENAME = "cipherslip.log"

# Storage Backends
STORAGE_BACKEND_FILE = "file"
STORAGE_BACKEND_MEMORY = "memory"

# Logging Configuration
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_MAX_BYTES = 1024 * 1024  # 1 MB
LOG_BACKUP_COUNT = 3

# QR Code Defaults
QR_ERROR_CORRECTION = "M"
QR_BOX_SIZE = 10
QR_BORDER = 4
