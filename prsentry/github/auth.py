"""GitHub authentication handlers."""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime

import aiohttp
import jwt

from .exceptions import GitHubAuthenticationError, error_for_status

logger = logging.getLogger(__name__)


@dataclass
class AuthToken:
    """Authentication token with metadata."""

    token: str
    token_type: str = "Bearer"
    expires_at: int | None = None

    @property
    def is_expired(self) -> bool:
        """Check if token is expired (with a one minute safety margin)."""
        if self.expires_at is None:
            return False
        return time.time() >= self.expires_at - 60

    def to_header(self) -> dict[str, str]:
        """Convert to authorization header."""
        return {"Authorization": f"{self.token_type} {self.token}"}


class AuthProvider(ABC):
    """Abstract base class for authentication providers."""

    @abstractmethod
    async def get_token(self) -> AuthToken:
        """Get authentication token."""

    @abstractmethod
    async def refresh_token(self) -> AuthToken:
        """Refresh authentication token."""


class TokenAuth(AuthProvider):
    """Static token authentication (personal access token or CI token)."""

    DEFAULT_TOKEN_TYPE = "Bearer"  # nosec B105

    def __init__(self, token: str, token_type: str | None = None):
        """Initialize token authentication.

        Args:
            token: Authentication token
            token_type: Type of token (Bearer, token, etc.). Uses Bearer by default.
        """
        if not token:
            raise GitHubAuthenticationError("Authentication token is required")
        self._token = AuthToken(token=token, token_type=token_type or self.DEFAULT_TOKEN_TYPE)

    async def get_token(self) -> AuthToken:
        """Get authentication token."""
        return self._token

    async def refresh_token(self) -> AuthToken:
        """Static tokens don't refresh."""
        return self._token


class GitHubAppAuth(AuthProvider):
    """GitHub App authentication provider.

    Signs a short-lived RS256 JWT with the app's private key and exchanges it
    for an installation access token, which is cached until it expires.
    """

    def __init__(
        self,
        app_id: str,
        private_key: str,
        installation_id: int,
        base_url: str = "https://api.github.com",
        timeout: int = 30,
    ):
        """Initialize GitHub App authentication.

        Args:
            app_id: GitHub App ID
            private_key: PEM private key for JWT signing
            installation_id: Installation the service acts for
            base_url: GitHub API base URL
            timeout: Token exchange timeout in seconds
        """
        self.app_id = app_id
        self.private_key = private_key
        self.installation_id = installation_id
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._current_token: AuthToken | None = None
        self._lock = asyncio.Lock()

    def generate_jwt(self) -> str:
        """Generate JWT for GitHub App authentication."""
        now = int(time.time())
        payload = {
            "iat": now - 60,  # Issued at time (60 seconds in the past)
            "exp": now + 600,  # JWT expiration (10 minutes)
            "iss": self.app_id,
        }

        try:
            return jwt.encode(payload, self.private_key, algorithm="RS256")
        except Exception as e:
            raise GitHubAuthenticationError(f"Failed to generate JWT: {e}") from e

    def app_token(self) -> AuthToken:
        """Token authenticating as the app itself (not an installation)."""
        return AuthToken(token=self.generate_jwt(), expires_at=int(time.time()) + 600)

    async def get_token(self) -> AuthToken:
        """Get a valid installation token, refreshing it when needed."""
        if self._current_token and not self._current_token.is_expired:
            return self._current_token

        async with self._lock:
            if self._current_token and not self._current_token.is_expired:
                return self._current_token
            return await self.refresh_token()

    async def refresh_token(self) -> AuthToken:
        """Exchange the app JWT for a fresh installation access token."""
        url = (
            f"{self.base_url}/app/installations/{self.installation_id}/access_tokens"
        )
        headers = {
            "Accept": "application/vnd.github+json",
            **self.app_token().to_header(),
        }

        timeout = aiohttp.ClientTimeout(total=self.timeout)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.post(url, headers=headers) as response:
                data = await response.json(content_type=None)
                if response.status != 201:
                    raise error_for_status(response.status, data or {})

        self._current_token = AuthToken(
            token=data["token"],
            token_type="token",  # nosec B106
            expires_at=_parse_expiry(data.get("expires_at")),
        )
        logger.info(
            "Obtained installation token",
            extra={"installation_id": self.installation_id},
        )
        return self._current_token


def _parse_expiry(value: str | None) -> int | None:
    if not value:
        return None
    return int(datetime.fromisoformat(value.replace("Z", "+00:00")).timestamp())
