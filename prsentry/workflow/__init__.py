"""Webhook event workflow: dispatch, analysis orchestration and feedback."""

from .comments import CommentInterpreter, CommentOutcome, Directive, parse_directive
from .deliveries import DeliveryLedger
from .dispatcher import AutomationIdentityFilter, EventDispatcher
from .errors import EventValidationError, describe_error
from .events import WebhookEvent, parse_event
from .lifecycle import PullRequestLifecycleManager
from .orchestrator import AnalysisOutcome, ConflictAnalysisOrchestrator
from .tracker import ConflictValidationTracker

__all__ = [
    "AnalysisOutcome",
    "AutomationIdentityFilter",
    "CommentInterpreter",
    "CommentOutcome",
    "ConflictAnalysisOrchestrator",
    "ConflictValidationTracker",
    "DeliveryLedger",
    "Directive",
    "EventDispatcher",
    "EventValidationError",
    "PullRequestLifecycleManager",
    "WebhookEvent",
    "describe_error",
    "parse_directive",
    "parse_event",
]
