"""Configuration-related exceptions.

Raised while loading and validating the service configuration.
"""

from typing import Any


class ConfigurationError(Exception):
    """Base exception for all configuration-related errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        """Initialize configuration error.

        Args:
            message: Human-readable error message
            details: Optional dictionary with additional error details
        """
        super().__init__(message)
        self.details = details or {}


class ConfigurationFileError(ConfigurationError):
    """Exception raised when configuration file cannot be read or parsed."""

    def __init__(
        self,
        message: str,
        file_path: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.file_path = file_path


class ConfigurationValidationError(ConfigurationError):
    """Exception raised when configuration validation fails."""

    def __init__(
        self,
        message: str,
        validation_errors: list[Any] | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message, details)
        self.validation_errors = validation_errors or []
