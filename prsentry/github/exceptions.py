"""GitHub API client exceptions."""

from typing import Any


class GitHubError(Exception):
    """Base exception for GitHub API errors.

    ``status_code`` is set whenever the failure came from an HTTP response,
    which is what the webhook handlers use to tell API errors apart from
    generic ones when logging.
    """

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_data: dict[str, Any] | None = None,
    ):
        """Initialize GitHub error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_data: Response data from GitHub API
        """
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_data = response_data or {}

    @property
    def is_retryable(self) -> bool:
        """Whether repeating the request may succeed."""
        return False


class GitHubAuthenticationError(GitHubError):
    """Raised when authentication fails."""


class GitHubRateLimitError(GitHubError):
    """Raised when rate limit is exceeded."""

    def __init__(
        self,
        message: str,
        status_code: int | None = 403,
        reset_time: int | None = None,
    ):
        """Initialize rate limit error.

        Args:
            message: Error message
            status_code: HTTP status code
            reset_time: Unix timestamp when rate limit resets
        """
        super().__init__(message, status_code)
        self.reset_time = reset_time


class GitHubNotFoundError(GitHubError):
    """Raised when resource is not found."""


class GitHubValidationError(GitHubError):
    """Raised when request validation fails (HTTP 422)."""


class GitHubServerError(GitHubError):
    """Raised when GitHub server returns 5xx error."""

    @property
    def is_retryable(self) -> bool:
        return True


class GitHubConnectionError(GitHubError):
    """Raised when connection to GitHub fails."""

    @property
    def is_retryable(self) -> bool:
        return True


class GitHubTimeoutError(GitHubError):
    """Raised when request times out."""

    @property
    def is_retryable(self) -> bool:
        return True


def error_for_status(
    status: int,
    data: dict[str, Any],
    headers: dict[str, str] | None = None,
) -> GitHubError:
    """Build the exception matching an error response."""
    message = str(data.get("message") or f"HTTP {status}")
    headers = headers or {}

    if status == 401:
        return GitHubAuthenticationError(message, status, data)
    if status in (403, 429):
        if status == 429 or "rate limit" in message.lower():
            reset_time = headers.get("X-RateLimit-Reset")
            return GitHubRateLimitError(
                message,
                status_code=status,
                reset_time=int(reset_time) if reset_time else None,
            )
        return GitHubAuthenticationError(message, status, data)
    if status == 404:
        return GitHubNotFoundError(message, status, data)
    if status == 422:
        return GitHubValidationError(message, status, data)
    if 500 <= status < 600:
        return GitHubServerError(message, status, data)
    return GitHubError(message, status, data)
