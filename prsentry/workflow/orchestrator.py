"""Conflict analysis orchestration for newly opened pull requests."""

import asyncio
import logging
from dataclasses import dataclass

from prsentry.analysis import AnalysisGateway, ChangeSetPurpose, ConflictVerdict
from prsentry.platform import PlatformGateway

from .errors import describe_error
from .messages import VALIDATION_PROMPT
from .tracker import ConflictValidationTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AnalysisOutcome:
    """What one analysis run produced."""

    verdict: ConflictVerdict
    difficulty: float

    @property
    def conflicts_detected(self) -> bool:
        return self.verdict.conflicts_detected


class ConflictAnalysisOrchestrator:
    """Runs difficulty scoring and conflict detection for a pull request.

    When conflicts are found the verdict and a validation prompt are posted
    to the pull request. Either way the outcome is tracked, and the tracking
    record is written even if posting the comments failed: it describes what
    the analysis found, not whether GitHub accepted the comments.
    """

    def __init__(
        self,
        analysis: AnalysisGateway,
        platform: PlatformGateway,
        tracker: ConflictValidationTracker,
    ) -> None:
        self.analysis = analysis
        self.platform = platform
        self.tracker = tracker

    async def run(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        base_ref: str,
        head_ref: str,
    ) -> AnalysisOutcome:
        """Analyze a pull request and act on the verdict.

        Raises:
            AnalysisServiceError: If a change set or an analysis fails
            GitHubError: If the diff cannot be fetched
            PersistenceError: If the tracking record cannot be written
        """
        difficulty_set, conflict_set = await asyncio.gather(
            self.analysis.fetch_changed_files(
                owner, repo, pr_number, base_ref, head_ref, ChangeSetPurpose.DIFFICULTY
            ),
            self.analysis.fetch_changed_files(
                owner, repo, pr_number, base_ref, head_ref, ChangeSetPurpose.CONFLICTS
            ),
        )

        verdict, difficulty = await asyncio.gather(
            self.analysis.detect_conflicts(conflict_set),
            self.analysis.score_difficulty(difficulty_set),
        )

        logger.info(
            "Analyzed pull request",
            extra={
                "repository": f"{owner}/{repo}",
                "pr_number": pr_number,
                "conflicts_detected": verdict.conflicts_detected,
                "difficulty": difficulty,
            },
        )

        if verdict.conflicts_detected:
            await self._post_findings(owner, repo, pr_number, verdict)

        await self.tracker.record_analysis(
            pr_number=pr_number,
            owner=owner,
            repo=repo,
            conflicts_detected=verdict.conflicts_detected,
            validation_form_posted=verdict.conflicts_detected,
        )

        return AnalysisOutcome(verdict=verdict, difficulty=difficulty)

    async def _post_findings(
        self, owner: str, repo: str, pr_number: int, verdict: ConflictVerdict
    ) -> None:
        # The prompt only makes sense below the verdict, so stop at the first failure
        try:
            await self.platform.create_comment(owner, repo, pr_number, verdict.text)
            await self.platform.create_comment(
                owner, repo, pr_number, VALIDATION_PROMPT
            )
        except Exception as e:
            logger.error(
                describe_error(e),
                extra={"repository": f"{owner}/{repo}", "pr_number": pr_number},
            )
