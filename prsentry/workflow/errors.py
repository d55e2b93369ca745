"""Workflow exceptions and error rendering for handler logs."""

from typing import Any

UNKNOWN_ERROR_MESSAGE = "An unknown error occurred"


class EventValidationError(Exception):
    """Raised when a webhook payload does not match its event schema."""

    def __init__(
        self,
        message: str,
        event_name: str | None = None,
        errors: list[Any] | None = None,
    ):
        super().__init__(message)
        self.event_name = event_name
        self.errors = errors or []


def describe_error(exc: BaseException) -> str:
    """Render an exception the way handler failures are logged.

    API errors carry a ``status_code`` and are rendered with it; anything
    else falls back to its message.
    """
    message = getattr(exc, "message", None) or str(exc)
    status = getattr(exc, "status_code", None)
    if status is not None:
        return f"Error! Status: {status}. Message: {message}"
    return message or UNKNOWN_ERROR_MESSAGE
