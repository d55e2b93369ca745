"""
Unit tests for the service-backed analysis gateway.

Why: The workflow trusts the gateway to shape diffs per purpose and to turn
     every analysis service failure into a single, loggable error type.

What: Tests ServiceAnalysisGateway change-set shaping, verdict decoding,
      difficulty parsing and HTTP error mapping.

How: Fakes GitHub with an AsyncMock client and the analysis service with
     aioresponses.
"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock

import aiohttp
import pytest
import pytest_asyncio
from aioresponses import aioresponses

from prsentry.analysis import (
    AnalysisServiceError,
    ChangeSetPurpose,
    FileChange,
    FileChangeSet,
    ServiceAnalysisGateway,
)
from prsentry.config import AnalysisConfig
from prsentry.github import GitHubClient

SERVICE = "http://analysis.test"

COMPARISON = {
    "files": [
        {
            "filename": "pricing/rules.py",
            "status": "modified",
            "additions": 12,
            "deletions": 3,
            "changes": 15,
            "patch": "@@ -1,3 +1,12 @@",
        },
        {
            "filename": "assets/logo.png",
            "status": "added",
            "additions": 0,
            "deletions": 0,
            "changes": 0,
        },
        {
            "filename": "pricing/legacy.py",
            "status": "renamed",
            "additions": 1,
            "deletions": 1,
            "changes": 2,
            "patch": "@@ -5 +5 @@",
            "previous_filename": "pricing/old.py",
        },
    ]
}


@pytest.fixture
def github() -> AsyncMock:
    client = AsyncMock(spec=GitHubClient)
    client.compare_commits.return_value = COMPARISON
    return client


@pytest_asyncio.fixture
async def gateway(github: AsyncMock) -> AsyncGenerator[ServiceAnalysisGateway, None]:
    gateway = ServiceAnalysisGateway(
        github, AnalysisConfig(base_url=SERVICE, api_key="analysis-key")
    )
    yield gateway
    await gateway.close()


@pytest.fixture
def change_set() -> FileChangeSet:
    return FileChangeSet(
        owner="octo-org",
        repo="widgets",
        pr_number=42,
        base_ref="main",
        head_ref="feature/pricing",
        purpose=ChangeSetPurpose.CONFLICTS,
        files=[FileChange(filename="a.py", status="modified", patch="@@")],
    )


class TestFetchChangedFiles:
    """Test change-set shaping per purpose."""

    async def test_conflict_change_set_keeps_patched_files(
        self, gateway: ServiceAnalysisGateway, github: AsyncMock
    ) -> None:
        """
        Why: Conflict detection reasons over patches only
        What: Tests files without a patch are dropped and patches kept
        How: Fetches the sample comparison for CONFLICTS
        """
        change_set = await gateway.fetch_changed_files(
            "octo-org", "widgets", 42, "main", "feature/pricing",
            ChangeSetPurpose.CONFLICTS,
        )

        github.compare_commits.assert_awaited_once_with(
            "octo-org", "widgets", "main", "feature/pricing"
        )
        assert [f.filename for f in change_set.files] == [
            "pricing/rules.py",
            "pricing/legacy.py",
        ]
        assert change_set.files[0].patch == "@@ -1,3 +1,12 @@"
        assert change_set.files[1].previous_filename == "pricing/old.py"
        assert change_set.purpose is ChangeSetPurpose.CONFLICTS
        assert change_set.pr_number == 42

    async def test_difficulty_change_set_keeps_every_file(
        self, gateway: ServiceAnalysisGateway
    ) -> None:
        """
        Why: Difficulty depends on the overall size of the change
        What: Tests every file is kept without its patch
        How: Fetches the sample comparison for DIFFICULTY
        """
        change_set = await gateway.fetch_changed_files(
            "octo-org", "widgets", 42, "main", "feature/pricing",
            ChangeSetPurpose.DIFFICULTY,
        )

        assert len(change_set.files) == 3
        assert all(f.patch is None for f in change_set.files)
        assert change_set.total_changes == 17

    async def test_empty_comparison(
        self, gateway: ServiceAnalysisGateway, github: AsyncMock
    ) -> None:
        """Test a comparison without files yields an empty change set."""
        github.compare_commits.return_value = {"files": None}

        change_set = await gateway.fetch_changed_files(
            "octo-org", "widgets", 42, "main", "main", ChangeSetPurpose.DIFFICULTY
        )

        assert change_set.is_empty


class TestDetectConflicts:
    """Test conflict verdict decoding."""

    async def test_structured_verdict(
        self, gateway: ServiceAnalysisGateway, change_set: FileChangeSet
    ) -> None:
        """
        Why: The explicit flag is the decision the workflow branches on
        What: Tests the flag wins over the verdict text
        How: Returns a flag of False with the marker present in the text
        """
        with aioresponses() as mocked:
            mocked.post(
                f"{SERVICE}/conflicts",
                payload={
                    "verdict": "No Conflicts Detected in pricing rules",
                    "conflicts_detected": False,
                },
            )

            verdict = await gateway.detect_conflicts(change_set)

        assert verdict.text == "No Conflicts Detected in pricing rules"
        assert verdict.conflicts_detected is False
        request = next(iter(mocked.requests.values()))[0]
        assert request.kwargs["json"]["files"][0]["filename"] == "a.py"
        assert request.kwargs["json"]["head_ref"] == "feature/pricing"

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("### Conflicts Detected\n- pricing/rules.py", True),
            ("No semantic conflicts found.", False),
        ],
    )
    async def test_marker_fallback(
        self,
        gateway: ServiceAnalysisGateway,
        change_set: FileChangeSet,
        text: str,
        expected: bool,
    ) -> None:
        """
        Why: Older analysis services return only the report text
        What: Tests the conflict marker decides when no flag is returned
        How: Returns verdict text only
        """
        with aioresponses() as mocked:
            mocked.post(f"{SERVICE}/conflicts", payload={"verdict": text})

            verdict = await gateway.detect_conflicts(change_set)

        assert verdict.conflicts_detected is expected

    async def test_missing_verdict(
        self, gateway: ServiceAnalysisGateway, change_set: FileChangeSet
    ) -> None:
        """Test a response without verdict text is an error."""
        with aioresponses() as mocked:
            mocked.post(f"{SERVICE}/conflicts", payload={"conflicts_detected": True})

            with pytest.raises(AnalysisServiceError, match="no verdict"):
                await gateway.detect_conflicts(change_set)


class TestScoreDifficulty:
    """Test difficulty score parsing."""

    async def test_score(
        self, gateway: ServiceAnalysisGateway, change_set: FileChangeSet
    ) -> None:
        """Test numeric scores are returned as floats."""
        with aioresponses() as mocked:
            mocked.post(f"{SERVICE}/difficulty", payload={"score": 7})

            assert await gateway.score_difficulty(change_set) == 7.0

    @pytest.mark.parametrize("payload", [{}, {"score": None}, {"score": "hard"}])
    async def test_invalid_score(
        self,
        gateway: ServiceAnalysisGateway,
        change_set: FileChangeSet,
        payload: dict[str, object],
    ) -> None:
        """Test missing or non-numeric scores raise AnalysisServiceError."""
        with aioresponses() as mocked:
            mocked.post(f"{SERVICE}/difficulty", payload=payload)

            with pytest.raises(AnalysisServiceError, match="invalid score"):
                await gateway.score_difficulty(change_set)


class TestServiceErrors:
    """Test HTTP and transport error mapping."""

    async def test_prioritize_posts_pr_identity(
        self, gateway: ServiceAnalysisGateway
    ) -> None:
        """Test prioritize sends the PR identity with the API key."""
        with aioresponses() as mocked:
            mocked.post(f"{SERVICE}/prioritize", status=204)

            await gateway.prioritize("octo-org", "widgets", 42)

        request = next(iter(mocked.requests.values()))[0]
        assert request.kwargs["json"] == {
            "owner": "octo-org",
            "repo": "widgets",
            "pr_number": 42,
        }

    async def test_http_error_carries_status(
        self, gateway: ServiceAnalysisGateway, change_set: FileChangeSet
    ) -> None:
        """
        Why: Error logs show the status and message of failed calls
        What: Tests 4xx/5xx responses become AnalysisServiceError with status
        How: Returns a 503 with a JSON message
        """
        with aioresponses() as mocked:
            mocked.post(
                f"{SERVICE}/conflicts",
                status=503,
                payload={"message": "model is warming up"},
            )

            with pytest.raises(AnalysisServiceError) as exc_info:
                await gateway.detect_conflicts(change_set)

        assert exc_info.value.status_code == 503
        assert str(exc_info.value) == "model is warming up"

    async def test_connection_error(
        self, gateway: ServiceAnalysisGateway, change_set: FileChangeSet
    ) -> None:
        """Test transport failures become AnalysisServiceError."""
        with aioresponses() as mocked:
            mocked.post(
                f"{SERVICE}/difficulty",
                exception=aiohttp.ClientConnectionError("refused"),
            )

            with pytest.raises(AnalysisServiceError, match="unreachable"):
                await gateway.score_difficulty(change_set)

    async def test_invalid_json(
        self, gateway: ServiceAnalysisGateway, change_set: FileChangeSet
    ) -> None:
        """Test non-JSON success bodies are rejected."""
        with aioresponses() as mocked:
            mocked.post(f"{SERVICE}/difficulty", body="<html>oops</html>")

            with pytest.raises(AnalysisServiceError, match="invalid JSON"):
                await gateway.score_difficulty(change_set)
