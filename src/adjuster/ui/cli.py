from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from adjuster.app import discard_changeset, find_changeset, list_changesets, migrate
from adjuster.config import configure_logging
from adjuster.domain.adjustments.codec import decode_changes

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from adjuster.domain.model import Changeset

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Inspect and manage pending adjustments")
    subparsers = parser.add_subparsers(dest="command", required=True)

    migrate_parser = subparsers.add_parser("migrate", help="Create or upgrade the changeset table")
    migrate_parser.add_argument(
        "--database-uri",
        type=str,
        help="Database URI to migrate (defaults to DATABASE_URI or the local data dir)",
    )

    subparsers.add_parser("list", help="List all pending changesets")

    for name, help_text in (
        ("show", "Show the pending changeset of a subject"),
        ("discard", "Discard the pending changeset of a subject"),
    ):
        sub = subparsers.add_parser(name, help=help_text)
        sub.add_argument("subject_id", type=str, help="Identifier of the adjusted subject")
        sub.add_argument(
            "--type",
            dest="subject_type",
            type=str,
            help="Subject type tag (required for polymorphic tables)",
        )

    return parser.parse_args(list(argv))


def _validate_subject_id(value: str) -> str:
    normalized = value.strip()
    if not normalized:
        raise ValueError("Subject id must not be blank")
    return normalized


def _describe(changeset: Changeset) -> str:
    subject = changeset.subject_id
    if changeset.subject_type is not None:
        subject = f"{changeset.subject_type}:{subject}"
    changes = ", ".join(
        f"{name}={value!r}" for name, value in sorted(decode_changes(changeset.changes).items())
    )
    return f"{subject} -> {changes or '(no changes)'}"


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    configure_logging()
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    try:
        parsed_args = _parse_args(args_list)
        subject_id = (
            _validate_subject_id(parsed_args.subject_id)
            if parsed_args.command in {"show", "discard"}
            else None
        )
    except ValueError:
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "migrate":
            migrate(database_uri=parsed_args.database_uri)
            log.info("Changeset table is up to date")
        elif parsed_args.command == "list":
            changesets = list_changesets()
            for changeset in changesets:
                log.info("%s", _describe(changeset))
            log.info("%s pending changeset(s)", len(changesets))
        elif parsed_args.command == "show" and subject_id is not None:
            changeset = find_changeset(subject_id, parsed_args.subject_type)
            if changeset is None:
                log.info("No pending changeset for %s", subject_id)
            else:
                log.info("%s", _describe(changeset))
        elif parsed_args.command == "discard" and subject_id is not None:
            if not discard_changeset(subject_id, parsed_args.subject_type):
                log.info("Nothing to discard for %s", subject_id)
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error while managing adjustments")
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


if __name__ == "__main__":
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()
