"""Pydantic configuration models for the prsentry webhook service.

This module defines the configuration schema with type safety, validation,
and environment variable substitution support. Models are organized by
component:

- Config: Root configuration containing all sections
- SystemConfig: Logging and environment settings
- GitHubConfig: Platform credentials and webhook secret
- AnalysisConfig: External analysis service
- AutomationConfig: Bot detection and the conflict label
- ServerConfig: HTTP listener

Database settings are not part of this file; they come from
``prsentry.database.DatabaseConfig`` (``DATABASE_*`` environment variables).

Environment variables are substituted using the format ${VAR_NAME} with
optional defaults: ${VAR_NAME:default_value}
"""

import os
import re
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class LogLevel(str, Enum):
    """Supported logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class BaseConfigModel(BaseModel):
    """Base configuration model with environment variable substitution."""

    model_config = ConfigDict(
        validate_assignment=True,
        extra="forbid",  # Prevent extra fields
    )

    @model_validator(mode="before")
    @classmethod
    def substitute_env_vars(cls, values: Any) -> Any:
        """Substitute environment variables in string values.

        Supports formats:
        - ${VAR_NAME} - Required environment variable
        - ${VAR_NAME:default} - Optional with default value

        Raises:
            ValueError: If required environment variable is missing
        """
        if not isinstance(values, dict):
            return values

        def substitute_value(value: Any) -> Any:
            if isinstance(value, str):
                # Pattern: ${VAR_NAME} or ${VAR_NAME:default}
                pattern = r"\$\{([^}:]+)(?::([^}]*))?\}"

                def replacer(match: re.Match[str]) -> str:
                    var_name = match.group(1)
                    default_value = match.group(2)

                    env_value = os.getenv(var_name)
                    if env_value is not None:
                        return env_value
                    elif default_value is not None:
                        return default_value
                    else:
                        raise ValueError(
                            f"Required environment variable '{var_name}' not found"
                        )

                return re.sub(pattern, replacer, value)
            elif isinstance(value, dict):
                return {k: substitute_value(v) for k, v in value.items()}
            elif isinstance(value, list):
                return [substitute_value(item) for item in value]
            else:
                return value

        return {key: substitute_value(value) for key, value in values.items()}


class SystemConfig(BaseConfigModel):
    """Core system configuration settings."""

    log_level: LogLevel = Field(
        default=LogLevel.INFO, description="System-wide logging level"
    )

    environment: str = Field(
        default="development",
        description="Deployment environment (development, staging, production)",
    )

    debug_mode: bool = Field(
        default=False, description="Enable debug mode with verbose logging"
    )


class GitHubConfig(BaseConfigModel):
    """GitHub API access and webhook verification.

    Either a static ``token`` or the GitHub App triple (``app_id``, a private
    key and ``installation_id``) must be provided.
    """

    api_url: str = Field(
        default="https://api.github.com", description="GitHub API base URL"
    )

    token: str | None = Field(
        default=None, description="Personal access or CI token"
    )

    app_id: str | None = Field(default=None, description="GitHub App ID")

    private_key: str | None = Field(
        default=None, description="GitHub App private key (PEM)"
    )

    private_key_path: str | None = Field(
        default=None, description="Path to the GitHub App private key file"
    )

    installation_id: int | None = Field(
        default=None, description="GitHub App installation ID"
    )

    webhook_secret: str | None = Field(
        default=None,
        description="Secret used to verify X-Hub-Signature-256 (unverified if unset)",
    )

    timeout: int = Field(
        default=30, ge=1, le=300, description="API request timeout in seconds"
    )

    max_retries: int = Field(
        default=3, ge=0, le=10, description="Retries for transient API failures"
    )

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate GitHub API URL."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid GitHub API URL: {v}")
        return v.rstrip("/")

    @model_validator(mode="after")
    def validate_credentials(self) -> "GitHubConfig":
        """Ensure one complete set of credentials is configured."""
        if self.token:
            return self

        has_key = bool(self.private_key or self.private_key_path)
        if self.app_id and has_key and self.installation_id is not None:
            return self

        raise ValueError(
            "GitHub credentials required: set 'token', or 'app_id', "
            "'private_key' (or 'private_key_path') and 'installation_id'"
        )

    @property
    def uses_app_auth(self) -> bool:
        """Whether the service authenticates as a GitHub App."""
        return not self.token

    def load_private_key(self) -> str:
        """Return the App private key, reading it from disk when needed."""
        if self.private_key:
            # Keys passed through env vars often carry escaped newlines
            return self.private_key.replace("\\n", "\n")
        if self.private_key_path:
            return Path(self.private_key_path).expanduser().read_text(encoding="utf-8")
        raise ValueError("No GitHub App private key configured")


class AnalysisConfig(BaseConfigModel):
    """External analysis service configuration."""

    base_url: str = Field(
        default="http://localhost:8080",
        description="Base URL of the conflict/difficulty/prioritization service",
    )

    api_key: str | None = Field(
        default=None, description="Bearer token for the analysis service"
    )

    timeout: int = Field(
        default=120, ge=1, le=900, description="Analysis request timeout in seconds"
    )

    conflict_marker: str = Field(
        default="Conflicts Detected",
        min_length=1,
        description="Text marking a positive verdict when no flag is returned",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Validate analysis service URL."""
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Invalid analysis service URL: {v}")
        return v.rstrip("/")


class AutomationConfig(BaseConfigModel):
    """Automation identity detection and conflict labelling."""

    bot_markers: list[str] = Field(
        default_factory=lambda: ["bot"],
        description="Substrings identifying automation accounts by login",
    )

    bot_account_types: list[str] = Field(
        default_factory=lambda: ["Bot"],
        description="Account types identifying automation accounts",
    )

    conflict_label: str = Field(
        default="semantic-conflict",
        min_length=1,
        description="Label applied when a reviewer confirms a conflict",
    )


class ServerConfig(BaseConfigModel):
    """HTTP server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind address")  # nosec B104

    port: int = Field(default=3000, ge=1, le=65535, description="Bind port")

    webhook_path: str = Field(
        default="/api/webhook", description="Path receiving GitHub deliveries"
    )

    delivery_retention_hours: int = Field(
        default=72,
        ge=1,
        description="How long delivery GUIDs are remembered to skip redeliveries",
    )

    @field_validator("webhook_path")
    @classmethod
    def validate_webhook_path(cls, v: str) -> str:
        """Webhook path must be absolute."""
        if not v.startswith("/"):
            raise ValueError("Webhook path must start with '/'")
        return v


class Config(BaseConfigModel):
    """Root configuration model containing all sections."""

    system: SystemConfig = Field(default_factory=SystemConfig)
    github: GitHubConfig
    analysis: AnalysisConfig = Field(default_factory=AnalysisConfig)
    automation: AutomationConfig = Field(default_factory=AutomationConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
