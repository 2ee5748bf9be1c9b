"""HTTP utilities translating httpx failures into domain errors."""

from __future__ import annotations

from typing import Awaitable, Callable

import httpx

from expert_system.core.errors import ServiceResponseError


async def request_or_raise(
    func: Callable[..., Awaitable[httpx.Response]],
    *args,
    error_cls: type[ServiceResponseError],
    action: str,
    **kwargs,
) -> httpx.Response:
    """Issue a single request; no retry is attempted on any failure.

    ``action`` prefixes the error message (e.g. ``"Failed to kickoff"``). For
    HTTP errors the raw response text is appended and kept on the exception.
    """
    try:
        response = await func(*args, **kwargs)
    except httpx.HTTPError as exc:
        raise error_cls(f"{action}: {exc}") from exc

    if response.is_error:
        body = response.text
        reason = response.reason_phrase or str(response.status_code)
        message = f"{action}: {reason}"
        if body:
            message = f"{message} - {body}"
        raise error_cls(message, status_code=response.status_code, body=body)
    return response


__all__ = ["request_or_raise"]
