"""Synchronization defaults for the calendar sync engine."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from .env import env_float, env_int

DEFAULT_FETCH_CONCURRENCY = 5
DEFAULT_DEBOUNCE_WINDOW = timedelta(minutes=5)
DEFAULT_STABILITY_WINDOW = timedelta(minutes=5)
DEFAULT_BATCH_SIZE = 500
DEFAULT_FETCH_TIMEOUT_SECONDS = 30.0
DEFAULT_SYNC_INTERVAL = timedelta(hours=1)


@dataclass(frozen=True, slots=True)
class SyncConfig:
    fetch_concurrency: int = DEFAULT_FETCH_CONCURRENCY
    debounce_window: timedelta = DEFAULT_DEBOUNCE_WINDOW
    stability_window: timedelta = DEFAULT_STABILITY_WINDOW
    batch_size: int = DEFAULT_BATCH_SIZE
    fetch_timeout_seconds: float = DEFAULT_FETCH_TIMEOUT_SECONDS
    sync_interval: timedelta = DEFAULT_SYNC_INTERVAL


def get_sync_config() -> SyncConfig:
    """Build a ``SyncConfig`` honouring ``BOOKINGSYNC_*`` environment overrides."""

    return SyncConfig(
        fetch_concurrency=env_int("BOOKINGSYNC_FETCH_CONCURRENCY", DEFAULT_FETCH_CONCURRENCY),
        debounce_window=timedelta(
            seconds=env_float(
                "BOOKINGSYNC_DEBOUNCE_SECONDS", DEFAULT_DEBOUNCE_WINDOW.total_seconds()
            )
        ),
        stability_window=timedelta(
            seconds=env_float(
                "BOOKINGSYNC_STABILITY_SECONDS", DEFAULT_STABILITY_WINDOW.total_seconds()
            )
        ),
        batch_size=env_int("BOOKINGSYNC_BATCH_SIZE", DEFAULT_BATCH_SIZE),
        fetch_timeout_seconds=env_float(
            "BOOKINGSYNC_FETCH_TIMEOUT_SECONDS", DEFAULT_FETCH_TIMEOUT_SECONDS, minimum=0.001
        ),
        sync_interval=timedelta(
            seconds=env_float(
                "BOOKINGSYNC_INTERVAL_SECONDS",
                DEFAULT_SYNC_INTERVAL.total_seconds(),
                minimum=1.0,
            )
        ),
    )
