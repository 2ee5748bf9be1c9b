"""
Sink for completion notifications pushed by the analysis service.

Deliveries are logged and acknowledged. Session outcomes are decided by
polling alone, so a lost or duplicated delivery changes nothing.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Tuple

from expert_system.schemas import WebhookAcknowledgement

logger = logging.getLogger(__name__)


def record_delivery(payload: Any) -> WebhookAcknowledgement:
    """Log an already-decoded delivery and return the acknowledgement."""
    task_id = payload.get("task_id") if isinstance(payload, dict) else None
    logger.info(
        "Analysis webhook received: %s",
        json.dumps(payload, indent=2, default=str),
        extra={"task_id": task_id},
    )
    return WebhookAcknowledgement()


def handle_raw_delivery(body: bytes | str | None) -> Tuple[int, dict]:
    """Decode and record a raw body; returns ``(status_code, response_body)``."""
    try:
        payload = json.loads(body or b"")
    except (TypeError, ValueError) as exc:
        logger.error("Error processing analysis webhook: %s", exc)
        return 500, {"error": str(exc) or "Unknown error"}
    return 200, record_delivery(payload).model_dump()


__all__ = ["handle_raw_delivery", "record_delivery"]
