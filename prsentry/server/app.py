"""FastAPI application receiving GitHub webhook deliveries."""

import hashlib
import hmac
import json
import logging
from typing import Any

from fastapi import BackgroundTasks, FastAPI, Header, HTTPException, Request
from fastapi.responses import JSONResponse

from prsentry.workflow import EventDispatcher, EventValidationError, parse_event

logger = logging.getLogger(__name__)

HEALTH_PAYLOAD = {"status": "App is running!"}


def verify_github_signature(payload: bytes, signature: str | None, secret: str) -> bool:
    """Verify a GitHub ``X-Hub-Signature-256`` header."""
    if not signature:
        return False
    expected = hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(f"sha256={expected}", signature)


def create_app(
    dispatcher: EventDispatcher,
    webhook_secret: str | None = None,
    webhook_path: str = "/api/webhook",
) -> FastAPI:
    """Build the webhook application.

    Args:
        dispatcher: Receives every accepted event, after the response is sent
        webhook_secret: Secret for signature verification; unverified if None
        webhook_path: Path GitHub delivers to
    """
    app = FastAPI(title="prsentry", docs_url=None, redoc_url=None)

    if not webhook_secret:
        logger.warning("No webhook secret configured, signatures are not verified")

    @app.post(webhook_path, status_code=202)
    async def github_webhook_endpoint(
        request: Request,
        background_tasks: BackgroundTasks,
        x_github_event: str = Header(...),
        x_github_delivery: str | None = Header(default=None),
        x_hub_signature_256: str | None = Header(default=None),
    ) -> Any:
        """GitHub webhook endpoint."""
        payload_bytes = await request.body()

        if webhook_secret and not verify_github_signature(
            payload_bytes, x_hub_signature_256, webhook_secret
        ):
            logger.warning(f"Invalid signature for delivery {x_github_delivery}")
            raise HTTPException(status_code=401, detail="Invalid signature")

        try:
            payload = json.loads(payload_bytes)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"Invalid JSON payload for delivery {x_github_delivery}")
            raise HTTPException(status_code=400, detail="Invalid JSON") from e

        if not isinstance(payload, dict):
            raise HTTPException(status_code=400, detail="Payload must be an object")

        try:
            event = parse_event(x_github_event, payload)
        except EventValidationError as e:
            logger.warning(
                f"Rejected delivery {x_github_delivery}: {e}",
                extra={"event": x_github_event},
            )
            raise HTTPException(status_code=400, detail=str(e)) from e

        if event is None:
            return JSONResponse(
                {"status": "ignored", "delivery_id": x_github_delivery},
                status_code=202,
            )

        logger.info(
            f"Accepted {event.kind} (ID: {x_github_delivery})",
            extra={"repository": event.repository.full_name},
        )
        background_tasks.add_task(dispatcher.dispatch, event, x_github_delivery)
        return {"status": "accepted", "delivery_id": x_github_delivery}

    @app.get("/health")
    async def health_check() -> dict[str, str]:
        """Health check endpoint."""
        return HEALTH_PAYLOAD

    return app
