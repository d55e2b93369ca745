"""
Unit tests for database configuration.

Why: The same service runs on PostgreSQL in production and on SQLite in
     development and tests; the URL handling must pick the right driver.

What: Tests DatabaseConfig URL construction, validation and helpers.

How: Builds configs with explicit values and a cleaned DATABASE_* environment.
"""

import pytest
from pydantic import ValidationError

from prsentry.database import DatabaseConfig

DATABASE_ENV_VARS = (
    "DATABASE_URL",
    "DATABASE_HOST",
    "DATABASE_PORT",
    "DATABASE_DATABASE",
    "DATABASE_USERNAME",
    "DATABASE_PASSWORD",
    "DATABASE_ECHO_SQL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in DATABASE_ENV_VARS + ("ENVIRONMENT",):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestDatabaseConfig:
    """Test DatabaseConfig."""

    def test_url_from_components(self) -> None:
        """Test an asyncpg URL is assembled when a password is given."""
        config = DatabaseConfig(password="pw", host="db", database="reviews")

        assert config.get_sqlalchemy_url() == (
            "postgresql+asyncpg://postgres:pw@db:5432/reviews"
        )
        assert config.get_alembic_url() == "postgresql://postgres:pw@db:5432/reviews"
        assert not config.is_sqlite

    def test_url_from_environment(self, clean_env: pytest.MonkeyPatch) -> None:
        """Test DATABASE_URL is read from the environment."""
        clean_env.setenv("DATABASE_URL", "sqlite+aiosqlite:///./prsentry.db")

        config = DatabaseConfig()

        assert config.is_sqlite
        assert config.get_alembic_url() == "sqlite:///./prsentry.db"

    def test_missing_url(self) -> None:
        """Test a config without URL or password cannot produce a URL."""
        with pytest.raises(ValueError, match="No database URL available"):
            DatabaseConfig().get_sqlalchemy_url()

    @pytest.mark.parametrize("url", ["not a url", "postgresql+asyncpg:///nohost"])
    def test_invalid_url(self, url: str) -> None:
        """Test malformed URLs are rejected."""
        with pytest.raises(ValidationError, match="Invalid database URL"):
            DatabaseConfig(database_url=url)

    def test_echo_sql_disabled_in_production(
        self, clean_env: pytest.MonkeyPatch
    ) -> None:
        """Test SQL echo is never enabled in production."""
        config = DatabaseConfig(database_url="sqlite+aiosqlite://", echo_sql=True)
        assert config.should_echo_sql()

        clean_env.setenv("ENVIRONMENT", "production")
        assert not config.should_echo_sql()
