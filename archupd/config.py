"""
Configuration management for archupd.
"""

# SPDX-License-Identifier: GPL-3.0-or-later

import json
import os
from typing import Any, Optional

from .constants import MAX_CONFIG_FILE_SIZE, PRIVILEGE_COMMANDS, get_default_config_path
from .exceptions import ConfigurationError
from .models import AppConfig
from .utils.logger import get_logger

logger = get_logger(__name__)

_EXPECTED_TYPES = {
    "news_url": str,
    "pacman_log_path": str,
    "state_file": str,
    "privilege_command": str,
    "pacman_command": str,
    "alpm_marker": str,
    "news_queue_size": int,
    "request_timeout": int,
    "color": bool,
    "debug_mode": bool,
    "log_file": (str, type(None)),
}


def validate_config_json(data: Any) -> None:
    """
    Validate the structure of a loaded configuration document.

    Raises:
        ConfigurationError: If the document is not a valid configuration
    """
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration must be a JSON object")

    for key, value in data.items():
        if key not in _EXPECTED_TYPES:
            logger.warning(f"Ignoring unknown configuration key: {key}")
            continue
        expected = _EXPECTED_TYPES[key]
        # bool is an int subclass; don't accept it for numeric settings
        if isinstance(value, bool) and expected is int:
            raise ConfigurationError(f"Invalid type for {key}: expected int")
        if not isinstance(value, expected):
            raise ConfigurationError(f"Invalid type for {key}: {type(value).__name__}")

    for key in ("news_queue_size", "request_timeout"):
        if key in data and data[key] <= 0:
            raise ConfigurationError(f"{key} must be positive")

    privilege = data.get("privilege_command")
    if privilege is not None and os.path.basename(privilege) not in PRIVILEGE_COMMANDS:
        raise ConfigurationError(f"Unsupported privilege command: {privilege}")


class Config:
    """Manages configuration for archupd."""

    def __init__(self, config_file: Optional[str] = None) -> None:
        """
        Initialize configuration.

        Args:
            config_file: Path to configuration file
        """
        self.config_file = config_file or str(get_default_config_path())
        self._app_config = self._load_config()

    @property
    def app_config(self) -> AppConfig:
        return self._app_config

    def _load_config(self) -> AppConfig:
        """
        Load configuration from file, falling back to defaults.

        Returns:
            AppConfig instance
        """
        if not os.path.exists(self.config_file):
            logger.debug(f"No configuration file at {self.config_file}, using defaults")
            return AppConfig()

        try:
            file_size = os.path.getsize(self.config_file)
            if file_size > MAX_CONFIG_FILE_SIZE:
                raise ConfigurationError(f"Config file too large: {file_size} bytes")

            with open(self.config_file, "r", encoding="utf-8") as f:
                data = json.load(f)

            validate_config_json(data)
            logger.info(f"Loaded configuration from {self.config_file}")
            return AppConfig.from_dict(data)

        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in config file {self.config_file}: {e}")
        except PermissionError as e:
            logger.error(f"Permission denied reading config file {self.config_file}: {e}")
        except OSError as e:
            logger.error(f"Error reading config file {self.config_file}: {e}")
        except ConfigurationError as e:
            logger.error(f"Invalid configuration structure: {e}")

        logger.info("Using default configuration")
        return AppConfig()
