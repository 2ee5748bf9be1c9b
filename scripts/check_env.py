"""Verify that an environment file configures the analysis front end.

Loads ``AppSettings`` with the given ``.env`` applied so a missing analysis
service URL or bearer token shows up before the API or the CLI starts, then
prints the endpoints the application will talk to.

Example usage::

    python -m scripts.check_env --env-file .env
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from pydantic import ValidationError

from expert_system.core.config import MEBIBYTE, AppSettings, _load_env_file

EXIT_OK = 0
EXIT_VALIDATION_ERROR = 2
EXIT_RUNTIME_ERROR = 3


def _validate_settings(env_file: Path) -> AppSettings:
    """Load settings with ``env_file`` applied on top of the process environment."""
    _load_env_file(str(env_file))
    return AppSettings()  # type: ignore[call-arg]


def _describe(settings: AppSettings) -> None:
    webhook = settings.analysis.webhook_url
    print(f"Environment:      {settings.environment}")
    print(f"Analysis service: {settings.analysis.root_url}")
    print(f"Poll interval:    {settings.analysis.poll_interval_seconds:g}s")
    print(f"Webhook:          {webhook if webhook else '(not configured)'}")
    print(f"Transcription:    {settings.transcription.root_url}")
    print(
        "Uploads:          "
        f"{', '.join(settings.uploads.allowed_extensions)} "
        f"up to {settings.uploads.max_bytes / MEBIBYTE:g} MiB"
    )
    print(f"Preferences DB:   {settings.preferences_db_path}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate analysis front-end settings and print the resolved endpoints."
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        type=Path,
        help="Path to the environment file (default: .env).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    env_file: Path = args.env_file

    if not env_file.exists():
        print(f"Environment file {env_file} does not exist.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    try:
        settings = _validate_settings(env_file)
    except ValidationError as exc:
        print(
            "Settings validation failed. Missing or invalid values detected:\n"
            f"{exc}",
            file=sys.stderr,
        )
        return EXIT_VALIDATION_ERROR

    _describe(settings)
    return EXIT_OK


if __name__ == "__main__":  # pragma: no cover - script entry point
    sys.exit(main())
