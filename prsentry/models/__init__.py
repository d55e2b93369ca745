"""SQLAlchemy models for the pull request conflict-validation service."""

from .base import Base, BaseModel
from .conflict_analysis import ConflictAnalysis, ConflictFeedback
from .enums import PRState, ValidationState
from .pull_request import PullRequest
from .repository import Repository, ReviewerFrequencySummary
from .review_request import ReviewRequest
from .webhook_delivery import WebhookDelivery

__all__ = [
    # Base classes
    "Base",
    "BaseModel",
    # Enums
    "PRState",
    "ValidationState",
    # Core models
    "Repository",
    "ReviewerFrequencySummary",
    "PullRequest",
    "ReviewRequest",
    # Conflict validation
    "ConflictAnalysis",
    "ConflictFeedback",
    # Delivery deduplication
    "WebhookDelivery",
]
