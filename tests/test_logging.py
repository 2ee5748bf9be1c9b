"""Tests for the shared log formatter."""

from __future__ import annotations

import logging

from expert_system.core.logging import LOG_FORMAT, ContextFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="expert_system.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="Analysis task accepted",
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_context_fields_are_appended() -> None:
    formatter = ContextFormatter(LOG_FORMAT)

    line = formatter.format(_record(task_id="task-1", polls=3))

    assert line.endswith("| INFO | expert_system.test | Analysis task accepted | task_id=task-1 polls=3")


def test_plain_records_are_unchanged() -> None:
    formatter = ContextFormatter(LOG_FORMAT)

    line = formatter.format(_record(client_name="Acme"))

    assert line.endswith("| INFO | expert_system.test | Analysis task accepted")
