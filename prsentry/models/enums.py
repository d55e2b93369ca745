"""Enums for database models and the conflict-validation workflow."""

import enum


class PRState(str, enum.Enum):
    """Pull request state enum."""

    OPEN = "open"
    CLOSED = "closed"


class ValidationState(str, enum.Enum):
    """Conflict-validation lifecycle of a single pull request.

    The orchestrator moves a PR into one of the ``ANALYZED_*`` states; a
    reviewer directive comment moves a prompted PR into ``RESOLVED_*``.
    """

    NOT_ANALYZED = "not_analyzed"
    ANALYZED_NO_PROMPT = "analyzed_no_prompt"
    ANALYZED_PROMPTED = "analyzed_prompted"
    RESOLVED_CONFIRMED = "resolved_confirmed"
    RESOLVED_DENIED = "resolved_denied"

