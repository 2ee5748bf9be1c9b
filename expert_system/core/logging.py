"""
Logging utilities for the FastAPI application, the CLI scripts, and the
webhook function.

Identifiers passed through ``extra={...}`` (task, session, meeting) are
appended to the line so a single analysis can be followed across polls.
"""

import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

CONTEXT_FIELDS = ("session_id", "task_id", "meeting_id", "polls", "entries")


class ContextFormatter(logging.Formatter):
    """Pipe-separated formatter that renders known ``extra`` identifiers."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        line = super().format(record)
        context = [
            f"{key}={getattr(record, key)}"
            for key in CONTEXT_FIELDS
            if getattr(record, key, None) is not None
        ]
        if not context:
            return line
        return f"{line} | {' '.join(context)}"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging with the shared format."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ContextFormatter(LOG_FORMAT))
    logging.basicConfig(level=level.upper(), handlers=[handler])
    # Request lines from httpx would otherwise repeat every status check.
    logging.getLogger("httpx").setLevel(logging.WARNING)


__all__ = ["CONTEXT_FIELDS", "ContextFormatter", "configure_logging"]
