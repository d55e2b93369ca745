"""Contract between the webhook workflow and the analysis engines.

The conflict detector, difficulty scorer and reviewer prioritizer are
external collaborators. This module defines the data they exchange with the
workflow and the abstract gateway the workflow depends on, so the engines can
be replaced (or faked in tests) without touching the orchestration code.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum


class ChangeSetPurpose(Enum):
    """Which analysis a change set is fetched for.

    The two variants are tuned independently: difficulty scoring looks at
    every changed file and its size, conflict detection needs the patches.
    """

    DIFFICULTY = "difficulty"
    CONFLICTS = "conflicts"


@dataclass(frozen=True)
class FileChange:
    """A single changed file between two refs."""

    filename: str
    status: str  # 'added', 'modified', 'removed', 'renamed', ...
    additions: int = 0
    deletions: int = 0
    changes: int = 0
    patch: str | None = None
    previous_filename: str | None = None


@dataclass(frozen=True)
class FileChangeSet:
    """Changed files of a pull request, keyed by the quadruple it came from."""

    owner: str
    repo: str
    pr_number: int
    base_ref: str
    head_ref: str
    purpose: ChangeSetPurpose
    files: list[FileChange] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        """Check if the change set contains no files."""
        return not self.files

    @property
    def total_changes(self) -> int:
        """Sum of added and deleted lines across all files."""
        return sum(f.additions + f.deletions for f in self.files)


@dataclass(frozen=True)
class ConflictVerdict:
    """Result of semantic conflict detection.

    ``text`` is the human-readable report posted to the pull request;
    ``conflicts_detected`` is the decision the workflow branches on.
    """

    text: str
    conflicts_detected: bool


class AnalysisGateway(ABC):
    """Abstract gateway to the analysis engines."""

    @abstractmethod
    async def fetch_changed_files(
        self,
        owner: str,
        repo: str,
        pr_number: int,
        base_ref: str,
        head_ref: str,
        purpose: ChangeSetPurpose,
    ) -> FileChangeSet:
        """Fetch the files changed between ``base_ref`` and ``head_ref``.

        Args:
            owner: Repository owner login
            repo: Repository name
            pr_number: Pull request number
            base_ref: Base branch or commit
            head_ref: Head branch or commit
            purpose: Which analysis the change set is for

        Returns:
            Change set tuned for ``purpose``
        """
        pass

    @abstractmethod
    async def detect_conflicts(self, change_set: FileChangeSet) -> ConflictVerdict:
        """Run semantic conflict detection over a change set."""
        pass

    @abstractmethod
    async def score_difficulty(self, change_set: FileChangeSet) -> float:
        """Compute the review difficulty score for a change set."""
        pass

    @abstractmethod
    async def prioritize(self, owner: str, repo: str, pr_number: int) -> None:
        """Trigger reviewer prioritization for a pull request."""
        pass
