"""Database configuration module.

Provides type-safe database configuration with environment variable support
and connection pool settings.
"""

import os
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabasePoolConfig(BaseModel):
    """Database connection pool configuration."""

    pool_size: int = Field(
        default=10, description="Number of connections to maintain in the pool"
    )
    max_overflow: int = Field(
        default=20,
        description="Number of additional connections to create when pool is exhausted",
    )
    pool_pre_ping: bool = Field(
        default=True, description="Enable connection health checks before use"
    )
    pool_recycle: int = Field(
        default=3600,
        description="Number of seconds after which a connection is recreated",
    )
    pool_timeout: int = Field(
        default=30, description="Timeout in seconds to get a connection from the pool"
    )


class DatabaseConfig(BaseSettings):
    """Database configuration with environment variable support.

    Environment variables:
    - DATABASE_URL: Full database connection URL
    - DATABASE_HOST: Database host (default: localhost)
    - DATABASE_PORT: Database port (default: 5432)
    - DATABASE_DATABASE: Database name (default: prsentry)
    - DATABASE_USERNAME: Database user (default: postgres)
    - DATABASE_PASSWORD: Database password
    - DATABASE_ECHO_SQL: Log SQL statements (default: false)
    """

    database_url: str | None = Field(
        default=None,
        description="Complete database URL (overrides individual components)",
    )
    host: str = Field(default="localhost", description="Database host")
    port: int = Field(default=5432, description="Database port")
    database: str = Field(default="prsentry", description="Database name")
    username: str = Field(default="postgres", description="Database user")
    password: str | None = Field(
        default=None,
        description="Database password (required unless DATABASE_URL provided)",
    )

    pool: DatabasePoolConfig = Field(default_factory=DatabasePoolConfig)

    echo_sql: bool = Field(
        default=False, description="Enable SQL query logging (development only)"
    )
    connect_timeout: int = Field(
        default=10, description="Connection timeout in seconds"
    )
    command_timeout: int = Field(default=60, description="Command timeout in seconds")

    model_config = SettingsConfigDict(
        env_prefix="DATABASE_",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v: Any) -> Any:
        """Validate database URL if provided."""
        if v:
            parsed = urlparse(v)
            if not parsed.scheme:
                raise ValueError("Invalid database URL format")
            # File-based SQLite URLs have no host component
            if not parsed.scheme.startswith("sqlite") and not parsed.hostname:
                raise ValueError("Invalid database URL format")
        return v

    @model_validator(mode="after")
    def construct_database_url(self) -> "DatabaseConfig":
        """Construct database URL from components if not explicitly provided."""
        if not self.database_url and self.password:
            self.database_url = (
                f"postgresql+asyncpg://{self.username}:{self.password}"
                f"@{self.host}:{self.port}/{self.database}"
            )
        return self

    @property
    def is_sqlite(self) -> bool:
        """Whether the configured database is SQLite."""
        return bool(self.database_url and self.database_url.startswith("sqlite"))

    def get_sqlalchemy_url(self) -> str:
        """Get SQLAlchemy-compatible database URL."""
        if not self.database_url:
            raise ValueError(
                "No database URL available - provide either database_url or password"
            )
        return self.database_url

    def get_alembic_url(self) -> str:
        """Get Alembic-compatible database URL (sync driver)."""
        return self.get_sqlalchemy_url().replace("+asyncpg", "").replace(
            "+aiosqlite", ""
        )

    def is_production(self) -> bool:
        """Check if running in production environment."""
        return os.getenv("ENVIRONMENT", "development").lower() == "production"

    def should_echo_sql(self) -> bool:
        """Determine if SQL should be echoed (never in production)."""
        return self.echo_sql and not self.is_production()
