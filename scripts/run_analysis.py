"""Run one call analysis from the terminal and follow it to completion."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from datetime import date, datetime
from pathlib import Path
from typing import Sequence

import httpx
from pydantic import ValidationError

from expert_system.clients import (
    AnalysisServiceClient,
    FetchError,
    PollingError,
    PreferencesStore,
    SubmissionError,
    TaskFailedError,
    TranscriptionClient,
)
from expert_system.core.config import AppSettings, get_settings
from expert_system.core.logging import configure_logging
from expert_system.schemas import (
    CONSULTANTS,
    AnalysisSubmission,
    TaskStatusResponse,
    TranscriptFile,
)
from expert_system.services import (
    InputValidationError,
    TranscriptAcquisitionService,
    build_report,
    current_phase,
    friendly_error_message,
    hint_for_error,
    prepare_request,
)
from expert_system.utils.encoding import encode_file_to_base64

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_TASK_FAILED = 3
EXIT_TRANSPORT_ERROR = 4


def _timestamp() -> str:
    return datetime.now().strftime("%H:%M:%S")


def _print_status(status: TaskStatusResponse) -> None:
    progress = status.progress or 0.0
    index, phase = current_phase(progress)
    print(
        f"[{_timestamp()}] TASK {status.task_id} {status.status.value}"
        f" | {progress:.0f}% | phase {index + 1}: {phase.name} {phase.description}"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Submit a call transcript for expert analysis and wait for the report."
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="Transcript document (.docx).")
    source.add_argument("--meeting-url", help="Meeting link to fetch the transcript from.")
    parser.add_argument("--client", dest="client_name", help="Client or project name.")
    parser.add_argument(
        "--consultant",
        dest="consultant_name",
        choices=CONSULTANTS,
        help="Responsible consultant.",
    )
    parser.add_argument("--notes", help="Optional consultant observations.")
    parser.add_argument(
        "--date",
        dest="reference_date",
        type=date.fromisoformat,
        default=date.today(),
        help="Reference date (YYYY-MM-DD, default: today).",
    )
    parser.add_argument(
        "--api-key",
        help="Transcription provider key; remembered for later runs.",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=None,
        help="Seconds between status checks (default from settings).",
    )
    return parser


async def run(
    args: argparse.Namespace,
    settings: AppSettings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> int:
    store = PreferencesStore(settings.preferences_db_path)
    if args.api_key:
        store.update(transcription_api_key=args.api_key)
    preferences = store.load()

    acquisition = TranscriptAcquisitionService(
        transcription_client=TranscriptionClient(
            settings.transcription, transport=transport
        ),
        upload_settings=settings.uploads,
    )
    fields: dict = {
        "notes": args.notes,
        "client_name": args.client_name or preferences.client_name or "",
        "consultant_name": args.consultant_name or preferences.consultant_name or "",
        "reference_date": args.reference_date,
    }

    try:
        if args.file is not None:
            acquisition.validate_upload(args.file.name, args.file.stat().st_size)
            fields["file"] = TranscriptFile(
                filename=args.file.name,
                file_b64=encode_file_to_base64(args.file.read_bytes()),
            )
        else:
            fields["transcription"] = await acquisition.fetch_linked_transcript(
                args.meeting_url, preferences
            )
            fields["transcription_reference"] = args.meeting_url
        source, request = prepare_request(AnalysisSubmission(**fields), acquisition)
    except (InputValidationError, ValidationError, OSError) as exc:
        print(f"Invalid input: {exc}", file=sys.stderr)
        return EXIT_VALIDATION_ERROR
    except FetchError as exc:
        print(f"Could not fetch transcript: {exc}", file=sys.stderr)
        return EXIT_TRANSPORT_ERROR

    store.update(
        client_name=request.client_name, consultant_name=request.consultant_name
    )

    client = AnalysisServiceClient(settings.analysis, transport=transport)
    try:
        handle = await client.submit(request)
        print(f"[{_timestamp()}] SUBMITTED task={handle.task_id}")
        final_status = await client.poll_until_terminal(
            handle.task_id, _print_status, interval_seconds=args.interval
        )
    except TaskFailedError as exc:
        print(friendly_error_message(str(exc), "Task failed"), file=sys.stderr)
        hint = hint_for_error(str(exc))
        if hint is not None:
            print(f"Tip: {hint.tip}", file=sys.stderr)
        return EXIT_TASK_FAILED
    except (SubmissionError, PollingError) as exc:
        print(str(exc), file=sys.stderr)
        return EXIT_TRANSPORT_ERROR

    report = build_report(request=request, source=source, final_status=final_status)
    print(json.dumps(report.model_dump(mode="json"), indent=2, ensure_ascii=False))
    return EXIT_OK


def main(argv: Sequence[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    return asyncio.run(run(args, settings))


if __name__ == "__main__":  # pragma: no cover - manual execution path
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nStopped waiting; the task keeps running on the service.")
        sys.exit(1)
