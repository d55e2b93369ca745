"""GitHub API client with authentication and retries."""

import asyncio
import json
import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any

import aiohttp

from .auth import AuthProvider, AuthToken, GitHubAppAuth
from .exceptions import (
    GitHubAuthenticationError,
    GitHubConnectionError,
    GitHubError,
    GitHubTimeoutError,
    error_for_status,
)

logger = logging.getLogger(__name__)

IDEMPOTENT_METHODS = frozenset({"GET", "HEAD", "PUT", "DELETE"})


@dataclass
class GitHubClientConfig:
    """Configuration for GitHub client."""

    base_url: str = "https://api.github.com"
    timeout: int = 30
    max_retries: int = 3
    retry_backoff_factor: float = 2.0
    user_agent: str = "prsentry/0.1"
    max_concurrent_requests: int = 10


class GitHubClient:
    """Async GitHub API client.

    Only the handful of endpoints the webhook handlers need are wrapped as
    convenience methods; anything else can go through ``get``/``post``.
    Server errors, timeouts and connection failures of idempotent requests
    are retried with exponential backoff. Writes such as comment and label
    POSTs are sent once. Every other error response is raised immediately.
    """

    def __init__(
        self,
        auth: AuthProvider,
        config: GitHubClientConfig | None = None,
    ) -> None:
        """Initialize GitHub client.

        Args:
            auth: Authentication provider
            config: Client configuration
        """
        self.auth = auth
        self.config = config or GitHubClientConfig()

        # HTTP session will be initialized on first use
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()
        self._request_semaphore = asyncio.Semaphore(self.config.max_concurrent_requests)

    async def __aenter__(self) -> "GitHubClient":
        """Async context manager entry."""
        await self._ensure_session()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        """Async context manager exit."""
        await self.close()

    async def _ensure_session(self) -> None:
        """Ensure HTTP session is initialized."""
        if self._session is None or self._session.closed:
            async with self._session_lock:
                if self._session is None or self._session.closed:
                    timeout = aiohttp.ClientTimeout(total=self.config.timeout)
                    self._session = aiohttp.ClientSession(
                        timeout=timeout,
                        headers={
                            "User-Agent": self.config.user_agent,
                            "Accept": "application/vnd.github+json",
                        },
                    )

    async def close(self) -> None:
        """Close HTTP session and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    def _url(self, path: str) -> str:
        return f"{self.config.base_url.rstrip('/')}/{path.lstrip('/')}"

    async def _make_request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        data: Any = None,
        token: AuthToken | None = None,
    ) -> Any:
        """Make HTTP request with retry logic and error handling.

        Args:
            method: HTTP method
            path: API path (e.g. '/repos/owner/repo/pulls')
            params: Query parameters
            data: JSON request body
            token: Token to send instead of the provider's current one

        Returns:
            Decoded JSON body, or None for empty responses

        Raises:
            GitHubError: Various GitHub API errors
        """
        correlation_id = str(uuid.uuid4())[:8]
        url = self._url(path)

        await self._ensure_session()
        if not self._session:
            raise GitHubConnectionError("Failed to initialize HTTP session")

        # A lost response to a write may still have been applied
        retry_allowed = method in IDEMPOTENT_METHODS
        last_exception: GitHubError | None = None
        for attempt in range(self.config.max_retries + 1):
            auth_token = token or await self.auth.get_token()
            request_kwargs: dict[str, Any] = {
                "params": params,
                "headers": auth_token.to_header(),
            }
            if data is not None:
                request_kwargs["json"] = data

            try:
                async with self._request_semaphore:
                    start_time = time.time()
                    logger.debug(
                        f"GitHub API request [{correlation_id}] {method} {url} "
                        f"(attempt {attempt + 1})"
                    )

                    async with self._session.request(
                        method, url, **request_kwargs
                    ) as response:
                        logger.debug(
                            f"GitHub API response [{correlation_id}] "
                            f"{response.status} in {time.time() - start_time:.2f}s"
                        )
                        body = await self._read_body(response)
                        if 200 <= response.status < 300:
                            return body

                        error_data = body if isinstance(body, dict) else {}
                        error = error_for_status(
                            response.status, error_data, dict(response.headers)
                        )
                        logger.warning(
                            f"GitHub API error [{correlation_id}] "
                            f"{response.status}: {error.message}"
                        )

                # Installation tokens can be revoked before they expire
                if (
                    isinstance(error, GitHubAuthenticationError)
                    and error.status_code == 401
                    and token is None
                    and attempt == 0
                    and isinstance(self.auth, GitHubAppAuth)
                ):
                    await self.auth.refresh_token()
                    last_exception = error
                    continue

                if not error.is_retryable or not retry_allowed:
                    raise error
                last_exception = error

            except TimeoutError:
                last_exception = GitHubTimeoutError(
                    f"Request timeout for {method} {url}"
                )
            except aiohttp.ClientError as e:
                last_exception = GitHubConnectionError(
                    f"Connection error for {method} {url}: {e}"
                )

            if not retry_allowed:
                raise last_exception

            if attempt < self.config.max_retries:
                backoff_time = self.config.retry_backoff_factor**attempt
                logger.warning(
                    f"Request [{correlation_id}] failed (attempt {attempt + 1}), "
                    f"retrying in {backoff_time:.1f}s: {last_exception}"
                )
                await asyncio.sleep(backoff_time)

        if last_exception:
            raise last_exception
        raise GitHubError(f"Request failed after {self.config.max_retries} retries")

    @staticmethod
    async def _read_body(response: aiohttp.ClientResponse) -> Any:
        if response.status == 204:
            return None
        text = await response.text()
        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return {"message": text}

    async def get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """Make GET request to GitHub API."""
        return await self._make_request("GET", path, params)

    async def post(
        self,
        path: str,
        data: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Make POST request to GitHub API."""
        return await self._make_request("POST", path, params, data)

    # Convenience methods for the endpoints the service uses

    async def create_issue_comment(
        self, owner: str, repo: str, issue_number: int, body: str
    ) -> dict[str, Any]:
        """Create a comment on an issue or pull request.

        Args:
            owner: Repository owner
            repo: Repository name
            issue_number: Issue or pull request number
            body: Markdown comment body

        Returns:
            Created comment data
        """
        return await self.post(
            f"/repos/{owner}/{repo}/issues/{issue_number}/comments",
            data={"body": body},
        )

    async def add_issue_labels(
        self, owner: str, repo: str, issue_number: int, labels: list[str]
    ) -> list[dict[str, Any]]:
        """Add labels to an issue or pull request.

        Returns:
            The full label list of the issue after the change
        """
        return await self.post(
            f"/repos/{owner}/{repo}/issues/{issue_number}/labels",
            data={"labels": labels},
        )

    async def compare_commits(
        self, owner: str, repo: str, base: str, head: str
    ) -> dict[str, Any]:
        """Compare two refs (branches or commits).

        Returns:
            Comparison data including the changed ``files`` list
        """
        return await self.get(f"/repos/{owner}/{repo}/compare/{base}...{head}")

    async def get_app(self) -> dict[str, Any]:
        """Get the authenticated GitHub App.

        Only available with app authentication, since the endpoint requires
        the app JWT rather than an installation token.
        """
        if not isinstance(self.auth, GitHubAppAuth):
            raise GitHubAuthenticationError(
                "GitHub App authentication is required to fetch app details"
            )
        return await self._make_request("GET", "/app", token=self.auth.app_token())
