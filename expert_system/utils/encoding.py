"""Base64 helpers for moving transcripts inside JSON bodies."""

from __future__ import annotations

import base64


def strip_data_uri_prefix(value: str) -> str:
    """Drop a ``data:<mime>;base64,`` prefix, returning the bare payload."""
    if value.startswith("data:"):
        _, sep, payload = value.partition(",")
        if sep:
            return payload
    return value


def encode_file_to_base64(content: bytes | str) -> str:
    """Return the base64 text of ``content`` suitable for JSON transport.

    A string argument is treated as an already-encoded data URI or payload and
    only has its prefix removed.
    """
    if isinstance(content, str):
        return strip_data_uri_prefix(content)
    return base64.b64encode(content).decode("ascii")


def encode_text_to_base64(text: str) -> str:
    """Encode a plain-text transcript as UTF-8 then base64."""
    return encode_file_to_base64(text.encode("utf-8"))


def decode_base64(payload: str) -> bytes:
    """Inverse of :func:`encode_file_to_base64`; raises ``ValueError`` on bad input."""
    try:
        return base64.b64decode(strip_data_uri_prefix(payload), validate=True)
    except (ValueError, TypeError) as exc:
        raise ValueError("Payload is not valid base64.") from exc


__all__ = [
    "decode_base64",
    "encode_file_to_base64",
    "encode_text_to_base64",
    "strip_data_uri_prefix",
]
