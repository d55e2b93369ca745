"""Configuration management for the prsentry webhook service.

This module provides type-safe configuration management with support for:
- YAML configuration files with environment variable substitution
- Pydantic-based validation and type safety

Example usage:
    from prsentry.config import ConfigurationLoader

    config = ConfigurationLoader().load_from_file("config.yaml")
    label = config.automation.conflict_label
"""

from .exceptions import (
    ConfigurationError,
    ConfigurationFileError,
    ConfigurationValidationError,
)
from .loader import ConfigurationLoader
from .models import (
    AnalysisConfig,
    AutomationConfig,
    Config,
    GitHubConfig,
    LogLevel,
    ServerConfig,
    SystemConfig,
)

__all__ = [
    "AnalysisConfig",
    "AutomationConfig",
    "Config",
    "ConfigurationError",
    "ConfigurationFileError",
    "ConfigurationLoader",
    "ConfigurationValidationError",
    "GitHubConfig",
    "LogLevel",
    "ServerConfig",
    "SystemConfig",
]
