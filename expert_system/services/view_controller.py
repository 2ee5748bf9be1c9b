"""Four-screen presentation state machine for one analysis session."""

from __future__ import annotations

from typing import Optional

from expert_system.core.errors import ExpertSystemError
from expert_system.schemas import (
    AnalysisReport,
    ErrorHintPayload,
    PhasePayload,
    SessionSnapshot,
    TaskStatus,
    TaskStatusResponse,
    ViewState,
)
from expert_system.services.error_hints import hint_for_error
from expert_system.services.progress import current_phase


class InvalidTransitionError(ExpertSystemError):
    """Raised when an action is not allowed from the current screen."""

    def __init__(self, action: str, state: ViewState) -> None:
        super().__init__(f"Cannot {action} while in the {state.value} view.")
        self.action = action
        self.state = state


class ViewController:
    """Track which screen a session shows and the data that screen needs.

    Transitions: ``start`` (form to processing), ``succeed`` / ``fail``
    (processing to success / error), ``retry`` (error to form) and
    ``new_analysis`` (success or error to form).
    """

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        self._state = ViewState.FORM
        self._clear()

    def _clear(self) -> None:
        self.task_id: Optional[str] = None
        self.status: Optional[TaskStatus] = None
        self.progress: float = 0.0
        self.error_message: Optional[str] = None
        self.error_detail: Optional[str] = None
        self.report: Optional[AnalysisReport] = None

    @property
    def state(self) -> ViewState:
        return self._state

    def _require(self, action: str, *allowed: ViewState) -> None:
        if self._state not in allowed:
            raise InvalidTransitionError(action, self._state)

    def start(self) -> None:
        self._require("start an analysis", ViewState.FORM)
        self._clear()
        self._state = ViewState.PROCESSING

    def attach_task(self, task_id: str) -> None:
        self._require("attach a task", ViewState.PROCESSING)
        self.task_id = task_id

    def update_progress(self, snapshot: TaskStatusResponse) -> None:
        self._require("update progress", ViewState.PROCESSING)
        self.status = snapshot.status
        self.progress = snapshot.progress or 0.0

    def succeed(self, report: AnalysisReport) -> None:
        self._require("show a result", ViewState.PROCESSING)
        self.report = report
        self._state = ViewState.SUCCESS

    def fail(self, message: str, *, detail: str | None = None) -> None:
        self._require("show an error", ViewState.PROCESSING)
        self.error_message = message
        self.error_detail = detail
        self._state = ViewState.ERROR

    def retry(self) -> None:
        self._require("retry", ViewState.ERROR)
        self._clear()
        self._state = ViewState.FORM

    def new_analysis(self) -> None:
        self._require("start over", ViewState.SUCCESS, ViewState.ERROR)
        self._clear()
        self._state = ViewState.FORM

    def snapshot(self) -> SessionSnapshot:
        phase = None
        if self._state is ViewState.PROCESSING:
            index, current = current_phase(self.progress)
            phase = PhasePayload(
                index=index, name=current.name, description=current.description
            )

        hint_payload = None
        if self._state is ViewState.ERROR:
            hint = hint_for_error(self.error_detail or self.error_message)
            if hint is not None:
                hint_payload = ErrorHintPayload(
                    category=hint.category, message=hint.message, tip=hint.tip
                )

        return SessionSnapshot(
            session_id=self.session_id,
            view=self._state,
            task_id=self.task_id,
            status=self.status,
            progress=self.progress,
            phase=phase,
            error_message=self.error_message,
            error_detail=self.error_detail,
            error_hint=hint_payload,
            report=self.report,
        )


__all__ = ["InvalidTransitionError", "ViewController"]
