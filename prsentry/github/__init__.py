"""GitHub API client package."""

from .auth import AuthProvider, AuthToken, GitHubAppAuth, TokenAuth
from .client import GitHubClient, GitHubClientConfig
from .exceptions import (
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubError,
    GitHubNotFoundError,
    GitHubRateLimitError,
    GitHubServerError,
    GitHubTimeoutError,
    GitHubValidationError,
    error_for_status,
)

__all__ = [
    "AuthProvider",
    "AuthToken",
    "GitHubAppAuth",
    "GitHubAuthenticationError",
    "GitHubClient",
    "GitHubClientConfig",
    "GitHubConnectionError",
    "GitHubError",
    "GitHubNotFoundError",
    "GitHubRateLimitError",
    "GitHubServerError",
    "GitHubTimeoutError",
    "GitHubValidationError",
    "TokenAuth",
    "error_for_status",
]
