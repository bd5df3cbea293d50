from __future__ import annotations

import asyncio
from datetime import date
from typing import TYPE_CHECKING

from bookingsync.app import build_synchronizer, sync_all_properties
from bookingsync.config.sync import SyncConfig
from bookingsync.domain.model import CalendarSource, Property
from tests.helpers.calendars import (
    FakeClock,
    FakeFeedFetcher,
    RecordingAutomation,
    event,
    utc,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from bookingsync.adapters.sqlalchemy.unit_of_work import SqlAlchemyBookingUnitOfWork
    from bookingsync.domain.data_integration import SyncSummary

FEED_URL = "https://airbnb.example/ical/p1.ics"


def _seed(uow_factory: Callable[[], SqlAlchemyBookingUnitOfWork]) -> None:
    with uow_factory() as uow:
        uow.session.add(
            Property(
                id="p1",
                name="Seaside flat",
                calendar_sources=[CalendarSource(url=FEED_URL, label="Airbnb")],
            )
        )
        uow.commit()


def test_promoted_booking_is_persisted_once(
    sqlite_unit_of_work: Callable[[], SqlAlchemyBookingUnitOfWork],
) -> None:
    _seed(sqlite_unit_of_work)
    fetcher = FakeFeedFetcher(
        feeds={FEED_URL: [event("evt-1", date(2024, 6, 8), date(2024, 6, 12), summary="Jane")]}
    )
    clock = FakeClock(utc(2024, 6, 1, 8))
    synchronizer = build_synchronizer(
        fetcher=fetcher,
        unit_of_work_factory=sqlite_unit_of_work,
        automation=RecordingAutomation(),
        config=SyncConfig(),
        clock=clock,
    )

    async def scenario() -> list[SyncSummary]:
        summaries = []
        for _ in range(3):
            summaries.append(await synchronizer.synchronize_all())
            clock.advance(minutes=6)
        await synchronizer.drain()
        return summaries

    summaries = asyncio.run(scenario())

    assert [summary.total_upserted for summary in summaries] == [0, 1, 0]
    assert [summary.total_modified for summary in summaries] == [0, 0, 0]

    with sqlite_unit_of_work() as uow:
        (booking,) = uow.repositories.bookings.list_for_property("p1")
    assert booking.external_id == "evt-1"
    assert booking.source == "Airbnb"
    assert (booking.start, booking.end) == (utc(2024, 6, 8), utc(2024, 6, 12))
    assert booking.guest_label == "Jane"


def test_sync_all_properties_runs_one_pass(
    sqlite_unit_of_work: Callable[[], SqlAlchemyBookingUnitOfWork],
) -> None:
    _seed(sqlite_unit_of_work)
    fetcher = FakeFeedFetcher()
    automation = RecordingAutomation()
    synchronizer = build_synchronizer(
        fetcher=fetcher,
        unit_of_work_factory=sqlite_unit_of_work,
        automation=automation,
    )

    summary = sync_all_properties(synchronizer)

    assert summary.total_operations == 0
    assert fetcher.calls == [FEED_URL]
    assert automation.upcoming == 1
    assert automation.recently_ended == 1
