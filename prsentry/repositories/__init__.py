"""Repository implementations for data access layer."""

from .base import BaseRepository
from .conflict_analysis import ConflictAnalysisRepository, ConflictFeedbackRepository
from .exceptions import PersistenceError, persistence_operation
from .pull_request import PullRequestRepository
from .repository import RepositoryRepository
from .review_request import ReviewRequestRepository
from .webhook_delivery import WebhookDeliveryRepository

__all__ = [
    "BaseRepository",
    "ConflictAnalysisRepository",
    "ConflictFeedbackRepository",
    "PersistenceError",
    "PullRequestRepository",
    "RepositoryRepository",
    "ReviewRequestRepository",
    "WebhookDeliveryRepository",
    "persistence_operation",
]
