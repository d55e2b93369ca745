"""Configuration loading and management.

This module loads configuration from YAML files and validates it. Each
loader is owned by the component that starts the service.

The loading hierarchy is:
1. Default values from Pydantic models
2. Configuration file (YAML)
3. Environment variables (through ${VAR} substitution)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .exceptions import (
    ConfigurationFileError,
    ConfigurationValidationError,
)
from .models import Config


class ConfigurationLoader:
    """Handles loading and validation of configuration from various sources."""

    def __init__(self) -> None:
        """Initialize configuration loader."""
        self._config_file_path: Path | None = None

    def load_from_file(self, config_path: str | Path) -> Config:
        """Load configuration from a YAML file.

        Args:
            config_path: Path to the YAML configuration file

        Returns:
            Loaded and validated configuration

        Raises:
            ConfigurationFileError: If file cannot be read or parsed
            ConfigurationValidationError: If configuration validation fails
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationFileError(
                f"Configuration file not found: {config_path}",
                file_path=str(config_path),
            )

        if not config_path.is_file():
            raise ConfigurationFileError(
                f"Configuration path is not a file: {config_path}",
                file_path=str(config_path),
            )

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationFileError(
                f"Failed to parse YAML configuration: {e}",
                file_path=str(config_path),
            ) from e
        except OSError as e:
            raise ConfigurationFileError(
                f"Failed to read configuration file: {e}",
                file_path=str(config_path),
            ) from e

        if config_data is None:
            config_data = {}
        if not isinstance(config_data, dict):
            raise ConfigurationFileError(
                "Configuration file must contain a mapping at the top level",
                file_path=str(config_path),
            )

        config = self._build(config_data)
        self._config_file_path = config_path.resolve()
        return config

    def load_from_dict(self, config_data: dict[str, Any]) -> Config:
        """Load configuration from a dictionary.

        Raises:
            ConfigurationValidationError: If configuration validation fails
        """
        self._config_file_path = None
        return self._build(config_data)

    def load_default(self) -> Config:
        """Load configuration from defaults and the environment only.

        GitHub credentials are required, so this reads them from
        ``GITHUB_TOKEN`` or ``GITHUB_APP_ID`` / ``GITHUB_PRIVATE_KEY`` /
        ``GITHUB_INSTALLATION_ID``, and the webhook secret from
        ``GITHUB_WEBHOOK_SECRET``.

        Raises:
            ConfigurationValidationError: If the environment lacks credentials
        """
        github: dict[str, Any] = {
            "token": os.getenv("GITHUB_TOKEN"),
            "app_id": os.getenv("GITHUB_APP_ID"),
            "private_key": os.getenv("GITHUB_PRIVATE_KEY"),
            "private_key_path": os.getenv("GITHUB_PRIVATE_KEY_PATH"),
            "installation_id": os.getenv("GITHUB_INSTALLATION_ID"),
            "webhook_secret": os.getenv("GITHUB_WEBHOOK_SECRET"),
        }
        return self.load_from_dict(
            {"github": {k: v for k, v in github.items() if v is not None}}
        )

    def _build(self, config_data: dict[str, Any]) -> Config:
        try:
            return Config(**config_data)
        except ValidationError as e:
            raise ConfigurationValidationError(
                f"Configuration validation failed: {e}",
                validation_errors=e.errors(),
            ) from e
        except ValueError as e:
            raise ConfigurationValidationError(
                f"Configuration validation failed: {e}"
            ) from e

    def find_config_file(self, filename: str = "config.yaml") -> Path | None:
        """Find configuration file in standard locations.

        Search order:
        1. Current working directory
        2. PRSENTRY_CONFIG_PATH environment variable
        3. ~/.prsentry/
        4. /etc/prsentry/

        Args:
            filename: Configuration filename to search for

        Returns:
            Path to found configuration file, or None if not found
        """
        search_paths = [Path.cwd() / filename]

        env_path_str = os.getenv("PRSENTRY_CONFIG_PATH")
        if env_path_str:
            env_path = Path(env_path_str)
            if env_path.is_file():
                search_paths.append(env_path)
            else:
                search_paths.append(env_path / filename)

        search_paths.append(Path.home() / ".prsentry" / filename)
        search_paths.append(Path("/etc/prsentry") / filename)

        for path in search_paths:
            if path.exists() and path.is_file():
                return path

        return None

    def auto_load(self, config_filename: str = "config.yaml") -> Config:
        """Load from the first standard location, falling back to defaults.

        Raises:
            ConfigurationValidationError: If configuration validation fails
        """
        config_path = self.find_config_file(config_filename)

        if config_path is None:
            return self.load_default()

        return self.load_from_file(config_path)

    @property
    def config_file_path(self) -> Path | None:
        """Get the path to the loaded configuration file."""
        return self._config_file_path

