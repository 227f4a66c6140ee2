"""
Manual harness for the notification pipeline.

Runs the same dispatcher the HTTP triggers use, without going through them:

    python -m app.harness single --user-id <uuid> [--date 2024-03-14] [--dry-run]
    python -m app.harness batch [--date 2024-03-14] [--dry-run]

--dry-run logs the rendered emails instead of sending them. Deliveries are
still recorded, so a dry run suppresses a later real send for the same day.
"""
import argparse
import asyncio
import json
import logging
import sys
from datetime import date

from app.core.config import settings
from app.core.errors import ConfigurationError
from app.core.utils import yesterday
from app.db.session import SessionLocal
from app.schemas.notification import TriggerKind
from app.services.email_service import LoggingEmailSender
from app.services.notification_dispatcher import build_dispatcher

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="python -m app.harness",
        description="Run the mood-check notification pipeline by hand.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    single = subparsers.add_parser("single", help="Evaluate and notify one user")
    single.add_argument("--user-id", required=True)

    subparsers.add_parser("batch", help="Evaluate every user with support contacts")

    for sub in subparsers.choices.values():
        sub.add_argument(
            "--date",
            type=date.fromisoformat,
            default=None,
            help="Reference date (YYYY-MM-DD); defaults to yesterday",
        )
        sub.add_argument("--dry-run", action="store_true", help="Log emails instead of sending")
    return parser


async def _run(args: argparse.Namespace) -> dict:
    reference_date = args.date or yesterday(settings.NOTIFICATION_TIMEZONE)
    email_sender = LoggingEmailSender() if args.dry_run else None
    dispatcher = build_dispatcher(settings, SessionLocal, email_sender=email_sender)
    try:
        if args.command == "single":
            result = await dispatcher.run_single(args.user_id, reference_date, TriggerKind.EVENT)
        else:
            result = await dispatcher.run_batch(reference_date)
    finally:
        await dispatcher.aclose()
    return result.model_dump(mode="json")


def main(argv=None) -> int:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")
    args = _build_parser().parse_args(argv)
    try:
        result = asyncio.run(_run(args))
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 2
    print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
