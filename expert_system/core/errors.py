"""Base exceptions shared by every failure the application surfaces."""

from __future__ import annotations


class ExpertSystemError(Exception):
    """Root of the error taxonomy; each attempt ends on one of its subclasses."""


class ServiceResponseError(ExpertSystemError):
    """Raised when a remote service call fails at the transport or HTTP level."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


__all__ = ["ExpertSystemError", "ServiceResponseError"]
