"""Persistence-layer exceptions."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


class PersistenceError(Exception):
    """Raised when a store operation fails.

    Wraps the underlying SQLAlchemy error together with the operation
    (``create``, ``read``, ``update``, ``delete``) and the entity it targeted.
    """

    def __init__(self, operation: str, entity: str, cause: BaseException):
        """Initialize persistence error.

        Args:
            operation: Store operation that failed
            entity: Human-readable name of the record kind
            cause: Underlying exception
        """
        super().__init__(f"Error during {operation} of {entity}: {cause}")
        self.operation = operation
        self.entity = entity
        self.cause = cause

    @property
    def is_integrity_violation(self) -> bool:
        """Whether the failure was a constraint violation (e.g. duplicate key)."""
        return isinstance(self.cause, IntegrityError)


@asynccontextmanager
async def persistence_operation(operation: str, entity: str) -> AsyncIterator[None]:
    """Log and wrap SQLAlchemy errors raised inside the block.

    Usage:
        async with persistence_operation("create", "pull request"):
            await repo.create(...)
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(
            f"Failed to {operation} {entity}",
            extra={"operation": operation, "entity": entity, "error": str(e)},
        )
        raise PersistenceError(operation, entity, e) from e
