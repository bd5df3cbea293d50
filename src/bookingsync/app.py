"""Application orchestration entry points."""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING

from bookingsync.adapters.ical import IcalFeedFetcher
from bookingsync.adapters.mission_automation import build_mission_automation
from bookingsync.adapters.sqlalchemy.unit_of_work import (
    SqlAlchemyBookingUnitOfWork,
    is_started,
    startup,
)
from bookingsync.config.sync import get_sync_config
from bookingsync.domain.clock import utcnow
from bookingsync.domain.data_integration import BookingSynchronizer, SyncSummary

if TYPE_CHECKING:
    from datetime import timedelta

    from bookingsync.config.sync import SyncConfig
    from bookingsync.domain.clock import Clock
    from bookingsync.domain.ports.automation import MissionAutomation
    from bookingsync.domain.ports.fetching import CalendarFeedFetcher
    from bookingsync.domain.reconciliation.persist import UnitOfWorkFactory


log = getLogger(__name__)


def build_synchronizer(
    *,
    fetcher: CalendarFeedFetcher | None = None,
    unit_of_work_factory: UnitOfWorkFactory | None = None,
    automation: MissionAutomation | None = None,
    config: SyncConfig | None = None,
    clock: Clock | None = None,
) -> BookingSynchronizer:
    """Wire a ``BookingSynchronizer`` from the configured adapters."""

    if unit_of_work_factory is None and not is_started():
        startup()
    effective_config = config or get_sync_config()
    log.debug("Building synchronizer: %s", effective_config)
    return BookingSynchronizer(
        fetcher=fetcher or IcalFeedFetcher(),
        unit_of_work_factory=unit_of_work_factory or SqlAlchemyBookingUnitOfWork,
        automation=automation or build_mission_automation(),
        config=effective_config,
        clock=clock or utcnow,
    )


def sync_all_properties(synchronizer: BookingSynchronizer | None = None) -> SyncSummary:
    """Run one full sync pass and wait for its automation hooks to finish."""

    effective = synchronizer or build_synchronizer()

    async def _run() -> SyncSummary:
        summary = await effective.synchronize_all()
        await effective.drain()
        return summary

    summary = asyncio.run(_run())
    log.info(
        "Finished calendar sync: totalUpserted=%s totalModified=%s totalOperations=%s",
        summary.total_upserted,
        summary.total_modified,
        summary.total_operations,
    )
    return summary


def sync_property(
    property_id: str,
    synchronizer: BookingSynchronizer | None = None,
) -> SyncSummary:
    """Sync one property on demand."""

    effective = synchronizer or build_synchronizer()

    async def _run() -> SyncSummary:
        summary = await effective.synchronize_property(property_id)
        await effective.drain()
        return summary

    summary = asyncio.run(_run())
    log.info(
        "Finished calendar sync for %s: upserted=%s modified=%s",
        property_id,
        summary.total_upserted,
        summary.total_modified,
    )
    return summary


async def run_forever(
    stop: asyncio.Event,
    *,
    interval: timedelta | None = None,
    synchronizer: BookingSynchronizer | None = None,
) -> None:
    """Run scheduled passes until ``stop`` is set."""

    effective = synchronizer or build_synchronizer()
    await effective.run_scheduled(stop, interval=interval)
