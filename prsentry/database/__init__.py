"""Database infrastructure module.

Provides database configuration and connection management for the
pull request conflict-validation service.
"""

from .config import DatabaseConfig, DatabasePoolConfig
from .connection import DatabaseConnectionManager

__all__ = [
    "DatabaseConfig",
    "DatabaseConnectionManager",
    "DatabasePoolConfig",
]
