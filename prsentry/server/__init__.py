"""HTTP surface of the webhook service."""

from .app import HEALTH_PAYLOAD, create_app, verify_github_signature

__all__ = ["HEALTH_PAYLOAD", "create_app", "verify_github_signature"]
