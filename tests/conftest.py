"""
Test configuration and shared fixtures.

Provides in-memory SQLite databases for store-level tests, mock gateways for
workflow tests and webhook payload builders.
"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from prsentry.analysis import AnalysisGateway, ConflictVerdict
from prsentry.database import DatabaseConfig, DatabaseConnectionManager
from prsentry.platform import PlatformGateway

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest.fixture
def database_config() -> DatabaseConfig:
    """
    Why: Store tests must not depend on a running PostgreSQL server
    What: Provides a DatabaseConfig pointing at an in-memory SQLite database
    How: Passes the URL explicitly so DATABASE_* variables cannot leak in
    """
    return DatabaseConfig(database_url=TEST_DATABASE_URL)


@pytest_asyncio.fixture
async def connection_manager(
    database_config: DatabaseConfig,
) -> AsyncGenerator[DatabaseConnectionManager, None]:
    """
    Why: Trackers and lifecycle managers need a real unit of work to verify
         commit/rollback and constraint behavior
    What: Provides a connection manager with the full schema created
    How: Creates tables on a fresh in-memory database and disposes it afterwards
    """
    manager = DatabaseConnectionManager(database_config)
    await manager.create_schema()
    yield manager
    await manager.close()


@pytest.fixture
def analysis_gateway() -> AsyncMock:
    """
    Why: The analysis engines are external; workflow tests control their answers
    What: Provides an AsyncMock honoring the AnalysisGateway interface
    How: Defaults to "no conflicts" and a difficulty score of 3.5
    """
    gateway = AsyncMock(spec=AnalysisGateway)
    gateway.detect_conflicts.return_value = ConflictVerdict(
        text="No semantic conflicts found.", conflicts_detected=False
    )
    gateway.score_difficulty.return_value = 3.5
    return gateway


@pytest.fixture
def platform_gateway() -> AsyncMock:
    """
    Why: Comment and label side effects must be counted, never sent
    What: Provides an AsyncMock honoring the PlatformGateway interface
    How: Every call succeeds and is recorded on the mock
    """
    return AsyncMock(spec=PlatformGateway)
