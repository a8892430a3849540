"""
Cipherslip - Configuration Management

This module handles loading, merging, and managing configuration from
TOML files and environment variables. Missing settings fall back to
defaults and every value is validated on load.

Author: orpheus497
Version: 1.0.0
"""

import os
import sys
from pathlib import Path
from typing import Any, Dict, Optional

# Python 3.11+ has tomllib built-in, older versions need tomli
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from .constants import (
    CONFIG_FILENAME,
    DEFAULT_DATA_DIR,
    QR_BORDER,
    QR_BOX_SIZE,
    QR_ERROR_CORRECTION,
    STORAGE_BACKEND_FILE,
    STORAGE_BACKEND_MEMORY,
)
from .errors import ConfigError, ErrorCode

ENV_PREFIX = "CIPHERSLIP"

# Default configuration dictionary
DEFAULT_CONFIG: Dict[str, Any] = {
    "storage": {
        "backend": STORAGE_BACKEND_FILE,
    },
    "logging": {
        "level": "WARNING",
        "file_logging": False,
        "console_logging": True,
    },
    "qr": {
        "error_correction": QR_ERROR_CORRECTION,
        "box_size": QR_BOX_SIZE,
        "border": QR_BORDER,
    },
}

VALID_BACKENDS = (STORAGE_BACKEND_FILE, STORAGE_BACKEND_MEMORY)
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
VALID_ERROR_CORRECTION = ("L", "M", "Q", "H")


class Config:
    """Configuration manager for Cipherslip.

    Loads configuration from TOML files, merges with defaults,
    and applies environment variable overrides. Settings are read once,
    when the instance is created.

    Attributes:
        config_path: Path to the configuration file
        data: Configuration dictionary
    """

    def __init__(self, config_path: Optional[Path] = None):
        """Initialize configuration manager.

        Args:
            config_path: Path to configuration file (optional)
                If not provided, uses default location
        """
        if config_path is None:
            data_dir = Path(DEFAULT_DATA_DIR).expanduser()
            config_path = data_dir / CONFIG_FILENAME

        self.config_path = Path(config_path)
        self.data = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load configuration from file and merge with defaults.

        Returns:
            Merged configuration dictionary

        Raises:
            ConfigError: If configuration loading, parsing or validation fails
        """
        # Start with default configuration
        config = self._merge_config({}, DEFAULT_CONFIG)

        # Load from file if it exists
        if self.config_path.exists():
            try:
                with open(self.config_path, "rb") as f:
                    file_config = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise ConfigError(
                    ErrorCode.E704_CONFIG_PARSE_ERROR,
                    f"Failed to parse configuration file: {e}",
                    {"path": str(self.config_path), "error": str(e)},
                ) from e
            except OSError as e:
                raise ConfigError(
                    ErrorCode.E701_CONFIG_LOAD_FAILED,
                    f"Failed to read configuration file: {e}",
                    {"path": str(self.config_path), "error": str(e)},
                ) from e

            # Merge file config with defaults
            config = self._merge_config(config, file_config)

        # Apply environment variable overrides
        config = self._apply_env_overrides(config)

        self._validate(config)
        return config

    def _merge_config(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge override config into base config.

        Args:
            base: Base configuration dictionary
            override: Override configuration dictionary

        Returns:
            Merged configuration dictionary
        """
        result = base.copy()

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                # Recursively merge nested dictionaries
                result[key] = self._merge_config(result[key], value)
            elif isinstance(value, dict):
                result[key] = self._merge_config({}, value)
            else:
                # Override the value
                result[key] = value

        return result

    def _apply_env_overrides(self, config: Dict[str, Any]) -> Dict[str, Any]:
        """Apply environment variable overrides to configuration.

        Environment variables follow the pattern: CIPHERSLIP_SECTION_KEY
        For example: CIPHERSLIP_LOGGING_LEVEL=DEBUG

        Args:
            config: Base configuration dictionary

        Returns:
            Configuration with environment overrides applied

        Raises:
            ConfigError: If an override cannot be converted to the setting's type
        """
        result = self._merge_config({}, config)

        for section, settings in config.items():
            if not isinstance(settings, dict):
                continue

            for key in settings:
                env_var = f"{ENV_PREFIX}_{section.upper()}_{key.upper()}"
                env_value = os.environ.get(env_var)

                if env_value is None:
                    continue

                # Convert environment variable to appropriate type
                original_type = type(settings[key])
                try:
                    if original_type == bool:
                        result[section][key] = env_value.lower() in ("true", "1", "yes")
                    elif original_type == int:
                        result[section][key] = int(env_value)
                    elif original_type == float:
                        result[section][key] = float(env_value)
                    else:
                        result[section][key] = env_value
                except ValueError as e:
                    raise ConfigError(
                        ErrorCode.E703_INVALID_CONFIG,
                        f"Invalid value for {env_var}: {env_value!r}",
                        {"variable": env_var, "error": str(e)},
                    ) from e

        return result

    def _validate(self, config: Dict[str, Any]) -> None:
        """Reject values the rest of the package cannot act on.

        Raises:
            ConfigError: If a setting is out of range
        """
        checks = (
            ("storage", "backend", VALID_BACKENDS),
            ("logging", "level", VALID_LOG_LEVELS),
            ("qr", "error_correction", VALID_ERROR_CORRECTION),
        )
        for section, key, allowed in checks:
            value = config.get(section, {}).get(key)
            if isinstance(value, str) and key == "level":
                value = value.upper()
                config[section][key] = value
            if value not in allowed:
                raise ConfigError(
                    ErrorCode.E703_INVALID_CONFIG,
                    f"Invalid {section}.{key}: {value!r}",
                    {"section": section, "key": key, "allowed": list(allowed)},
                )

        for key in ("box_size", "border"):
            value = config["qr"].get(key)
            if isinstance(value, bool) or not isinstance(value, int) or value < 0:
                raise ConfigError(
                    ErrorCode.E703_INVALID_CONFIG,
                    f"Invalid qr.{key}: {value!r}",
                    {"section": "qr", "key": key},
                )

    def get(self, section: str, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        Args:
            section: Configuration section name
            key: Configuration key name
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        return self.data.get(section, {}).get(key, default)

