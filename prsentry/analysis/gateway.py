"""Analysis gateway backed by GitHub diffs and an HTTP analysis service."""

import asyncio
import json
import logging
from dataclasses import asdict
from typing import Any

import aiohttp

from prsentry.config import AnalysisConfig
from prsentry.github import GitHubClient

from .exceptions import AnalysisServiceError
from .interfaces import (
    AnalysisGateway,
    ChangeSetPurpose,
    ConflictVerdict,
    FileChange,
    FileChangeSet,
)

logger = logging.getLogger(__name__)


class ServiceAnalysisGateway(AnalysisGateway):
    """Reads diffs from the GitHub compare API and delegates analysis.

    The analysis service exposes three endpoints:

    - ``POST {base_url}/conflicts`` returns ``{"verdict": str,
      "conflicts_detected": bool}``; when the flag is missing the verdict
      text is searched for the configured conflict marker.
    - ``POST {base_url}/difficulty`` returns ``{"score": float}``.
    - ``POST {base_url}/prioritize`` returns nothing of interest.
    """

    def __init__(self, github: GitHubClient, config: AnalysisConfig) -> None:
        self.github = github
        self.config = config
        self._session: aiohttp.ClientSession | None = None
        self._session_lock = asyncio.Lock()

    async def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            async with self._session_lock:
                if self._session is None or self._session.closed:
                    headers = {"Accept": "application/json"}
                    if self.config.api_key:
                        headers["Authorization"] = f"Bearer {self.config.api_key}"
                    self._session = aiohttp.ClientSession(
                        timeout=aiohttp.ClientTimeout(total=self.config.timeout),
                        headers=headers,
                    )
        return self._session

    async def close(self) -> None:
        """Close HTTP session and cleanup resources."""
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None

    async def fetch_changed_files(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        base_ref: str,
        head_ref: str,
        purpose: ChangeSetPurpose,
    ) -> FileChangeSet:
        """Fetch the compare diff and shape it for ``purpose``."""
        comparison = await self.github.compare_commits(owner, repo, base_ref, head_ref)
        raw_files = comparison.get("files") or []

        files = []
        for item in raw_files:
            patch = item.get("patch")
            if purpose is ChangeSetPurpose.CONFLICTS and not patch:
                # Binary and oversized files carry no patch to reason about
                continue
            files.append(
                FileChange(
                    filename=item["filename"],
                    status=item.get("status", "modified"),
                    additions=item.get("additions", 0),
                    deletions=item.get("deletions", 0),
                    changes=item.get("changes", 0),
                    patch=patch if purpose is ChangeSetPurpose.CONFLICTS else None,
                    previous_filename=item.get("previous_filename"),
                )
            )

        logger.debug(
            "Fetched change set",
            extra={
                "owner": owner,
                "repo": repo,
                "pr_number": pr_number,
                "purpose": purpose.value,
                "files": len(files),
            },
        )

        return FileChangeSet(
            owner=owner,
            repo=repo,
            pr_number=pr_number,
            base_ref=base_ref,
            head_ref=head_ref,
            purpose=purpose,
            files=files,
        )

    async def detect_conflicts(self, change_set: FileChangeSet) -> ConflictVerdict:
        """Ask the analysis service for a conflict verdict."""
        data = await self._post("/conflicts", _change_set_payload(change_set))

        text = data.get("verdict")
        if not isinstance(text, str):
            raise AnalysisServiceError("Conflict analysis returned no verdict text")

        flag = data.get("conflicts_detected")
        if isinstance(flag, bool):
            detected = flag
        else:
            detected = self.config.conflict_marker in text

        return ConflictVerdict(text=text, conflicts_detected=detected)

    async def score_difficulty(self, change_set: FileChangeSet) -> float:
        """Ask the analysis service for a review difficulty score."""
        data = await self._post("/difficulty", _change_set_payload(change_set))

        try:
            return float(data["score"])
        except (KeyError, TypeError, ValueError) as e:
            raise AnalysisServiceError(
                f"Difficulty scoring returned an invalid score: {data!r}"
            ) from e

    async def prioritize(self, owner: str, repo: str, pr_number: int) -> None:
        """Ask the analysis service to reprioritize reviewers."""
        await self._post(
            "/prioritize", {"owner": owner, "repo": repo, "pr_number": pr_number}
        )

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        session = await self._ensure_session()
        url = f"{self.config.base_url}{path}"

        try:
            async with session.post(url, json=payload) as response:
                text = await response.text()
                if response.status >= 400:
                    raise AnalysisServiceError(
                        _error_message(text, response.status),
                        status_code=response.status,
                    )
        except TimeoutError as e:
            raise AnalysisServiceError(f"Analysis request timed out: {url}") from e
        except aiohttp.ClientError as e:
            raise AnalysisServiceError(f"Analysis service unreachable: {e}") from e

        if not text:
            return {}
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise AnalysisServiceError(
                f"Analysis service returned invalid JSON from {path}",
                status_code=response.status,
            ) from e
        return data if isinstance(data, dict) else {}


def _change_set_payload(change_set: FileChangeSet) -> dict[str, Any]:
    return {
        "owner": change_set.owner,
        "repo": change_set.repo,
        "pr_number": change_set.pr_number,
        "base_ref": change_set.base_ref,
        "head_ref": change_set.head_ref,
        "files": [asdict(f) for f in change_set.files],
    }


def _error_message(text: str, status: int) -> str:
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        return text or f"HTTP {status}"
    if isinstance(data, dict) and data.get("message"):
        return str(data["message"])
    return f"HTTP {status}"
