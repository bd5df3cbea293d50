from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from datetime import timedelta
from signal import SIGINT, SIGTERM, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from bookingsync.app import build_synchronizer, run_forever, sync_all_properties, sync_property
from bookingsync.config import ConfigurationError, configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

    from bookingsync.domain.data_integration import BookingSynchronizer

log = logging.getLogger(__name__)


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Synchronise property calendars into bookings")
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("sync", help="Run one sync pass over every active property")

    single = subparsers.add_parser("sync-property", help="Sync a single property on demand")
    single.add_argument("property_id", type=str, help="Identifier of the property to sync")

    run = subparsers.add_parser("run", help="Run sync passes on a schedule until interrupted")
    run.add_argument(
        "--interval-minutes",
        type=float,
        help="Minutes between passes (defaults to config)",
    )

    return parser.parse_args(list(argv))


def _interval(args: argparse.Namespace) -> timedelta | None:
    minutes = getattr(args, "interval_minutes", None)
    if minutes is None:
        return None
    if minutes <= 0:
        raise ValueError("Interval minutes must be positive")
    return timedelta(minutes=minutes)


async def _run_until_signalled(
    synchronizer: BookingSynchronizer,
    interval: timedelta | None,
) -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for signum in (SIGINT, SIGTERM):
        loop.add_signal_handler(signum, stop.set)
    await run_forever(stop, interval=interval, synchronizer=synchronizer)


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    parsed_args: argparse.Namespace
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)
    try:
        interval = _interval(parsed_args)
        synchronizer = build_synchronizer()
    except (ValueError, ConfigurationError):
        log.exception("CLI validation error")
        sys.exit(2)

    try:
        if parsed_args.command == "sync":
            summary = sync_all_properties(synchronizer)
        elif parsed_args.command == "sync-property":
            summary = sync_property(parsed_args.property_id, synchronizer)
        elif parsed_args.command == "run":
            asyncio.run(_run_until_signalled(synchronizer, interval))
            return
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301
    except Exception:
        log.exception("Fatal error during sync")
        sys.exit(1)

    if summary.failed_sources or summary.failed_batches:
        log.warning(
            "Sync finished with errors: failed_sources=%s failed_batches=%s",
            len(summary.failed_sources),
            summary.failed_batches,
        )


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
