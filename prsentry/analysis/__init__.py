"""Analysis engine gateway."""

from .exceptions import AnalysisServiceError
from .gateway import ServiceAnalysisGateway
from .interfaces import (
    AnalysisGateway,
    ChangeSetPurpose,
    ConflictVerdict,
    FileChange,
    FileChangeSet,
)

__all__ = [
    "AnalysisGateway",
    "AnalysisServiceError",
    "ChangeSetPurpose",
    "ConflictVerdict",
    "FileChange",
    "FileChangeSet",
    "ServiceAnalysisGateway",
]
