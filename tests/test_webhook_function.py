"""Tests for the standalone webhook function."""

from __future__ import annotations

import base64
import json

from functions.analysis_webhook import handler


def test_options_preflight_returns_cors_headers() -> None:
    response = handler.lambda_handler({"httpMethod": "OPTIONS"}, None)

    assert response["statusCode"] == 200
    assert response["body"] == ""
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"


def test_json_delivery_is_acknowledged() -> None:
    event = {
        "requestContext": {"http": {"method": "POST"}},
        "body": json.dumps({"task_id": "task-1", "status": "COMPLETED"}),
    }

    response = handler.lambda_handler(event, None)

    assert response["statusCode"] == 200
    assert response["headers"]["Content-Type"] == "application/json"
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"
    assert json.loads(response["body"]) == {
        "success": True,
        "message": "Webhook processed successfully",
    }


def test_base64_encoded_delivery_is_decoded() -> None:
    body = base64.b64encode(json.dumps({"task_id": "task-2"}).encode("utf-8"))
    event = {"httpMethod": "POST", "body": body.decode("ascii"), "isBase64Encoded": True}

    response = handler.lambda_handler(event, None)

    assert response["statusCode"] == 200


def test_invalid_body_returns_error_with_cors_headers() -> None:
    response = handler.lambda_handler({"httpMethod": "POST", "body": "{oops"}, None)

    assert response["statusCode"] == 500
    assert "error" in json.loads(response["body"])
    assert response["headers"]["Access-Control-Allow-Origin"] == "*"


def test_missing_body_is_an_error() -> None:
    response = handler.lambda_handler({"httpMethod": "POST"}, None)

    assert response["statusCode"] == 500
