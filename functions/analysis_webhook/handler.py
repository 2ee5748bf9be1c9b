"""
AWS Lambda entrypoint for analysis service webhook deliveries.
"""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any, Dict

from expert_system.core.logging import configure_logging
from expert_system.services.webhook_sink import handle_raw_delivery

logger = logging.getLogger(__name__)

CORS_HEADERS: Dict[str, str] = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
}

configure_logging()


def _request_method(event: Dict[str, Any]) -> str:
    method = event.get("httpMethod")
    if not method:
        method = event.get("requestContext", {}).get("http", {}).get("method", "POST")
    return str(method).upper()


def _response(status_code: int, body: Dict[str, Any] | None) -> Dict[str, Any]:
    headers = dict(CORS_HEADERS)
    if body is None:
        return {"statusCode": status_code, "headers": headers, "body": ""}
    headers["Content-Type"] = "application/json"
    return {"statusCode": status_code, "headers": headers, "body": json.dumps(body)}


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    AWS Lambda handler invoked through an HTTP API (payload v1 or v2).

    Answers CORS preflights, logs JSON deliveries, and reports a 500 with the
    parse error when the body is not JSON.
    """
    if _request_method(event) == "OPTIONS":
        return _response(200, None)

    body = event.get("body")
    if body and event.get("isBase64Encoded"):
        try:
            body = base64.b64decode(body)
        except (binascii.Error, ValueError) as exc:
            logger.error("Error decoding analysis webhook body: %s", exc)
            return _response(500, {"error": str(exc)})

    status_code, content = handle_raw_delivery(body)
    return _response(status_code, content)


__all__ = ["CORS_HEADERS", "lambda_handler"]
