from __future__ import annotations

import logging

import pytest

from bookingsync.domain.model import DEFAULT_GUEST_LABEL, Interval
from bookingsync.domain.ports.persistence import BookingUpsert
from bookingsync.domain.reconciliation import BookingWriter, build_upsert, synthetic_external_id
from tests.helpers.calendars import InMemoryBookingStore, InMemoryUnitOfWork, utc

NOW = utc(2024, 6, 1, 9)


def _upsert(index: int) -> BookingUpsert:
    return BookingUpsert(
        property_id=f"p{index}",
        external_id=f"evt-{index}",
        source="Airbnb",
        start=utc(2024, 6, 8),
        end=utc(2024, 6, 12),
        guest_label="Guest",
        synced_at=NOW,
    )


def test_build_upsert_uses_uid_summary_and_feed_stamp() -> None:
    stamp = utc(2024, 5, 30, 7)
    interval = Interval(
        utc(2024, 6, 8),
        utc(2024, 6, 12),
        "Booking",
        uid="evt-1",
        summary="  Jane Doe ",
        last_modified=stamp,
    )

    upsert = build_upsert("p1", interval, now=NOW)

    assert upsert.key == ("p1", "evt-1", "Booking")
    assert upsert.guest_label == "Jane Doe"
    assert upsert.last_modified == stamp
    assert upsert.synced_at == NOW


def test_build_upsert_falls_back_to_synthetic_id_and_default_label() -> None:
    interval = Interval(utc(2024, 6, 8), utc(2024, 6, 12), "Booking", summary="   ")

    upsert = build_upsert("p1", interval, now=NOW)

    assert upsert.external_id == synthetic_external_id("p1", utc(2024, 6, 8))
    assert upsert.external_id == "p1:2024-06-08T00:00:00+00:00"
    assert upsert.guest_label == DEFAULT_GUEST_LABEL
    assert upsert.last_modified is None


def test_writer_splits_into_batches() -> None:
    store = InMemoryBookingStore()
    writer = BookingWriter(lambda: InMemoryUnitOfWork(store), batch_size=500)

    result = writer.write([_upsert(index) for index in range(1200)])

    assert store.commits == 3
    assert result.upserted == 1200
    assert result.operations == 1200
    assert result.failed_batches == 0
    assert len(store.bookings) == 1200


def test_writer_reports_unchanged_on_repeat() -> None:
    store = InMemoryBookingStore()
    writer = BookingWriter(lambda: InMemoryUnitOfWork(store), batch_size=10)
    upserts = [_upsert(index) for index in range(3)]
    writer.write(upserts)

    result = writer.write(upserts)

    assert result.upserted == 0
    assert result.modified == 0
    assert result.unchanged == 3
    assert result.operations == 0


def test_failed_batch_does_not_stop_later_batches(caplog: pytest.LogCaptureFixture) -> None:
    store = InMemoryBookingStore(poisoned_external_ids={"evt-3"})
    writer = BookingWriter(lambda: InMemoryUnitOfWork(store), batch_size=2)

    with caplog.at_level(logging.ERROR):
        result = writer.write([_upsert(index) for index in range(6)])

    # batch 2 holds evt-2 and evt-3 and is rolled back as a whole
    assert result.failed_batches == 1
    assert result.upserted == 4
    assert store.rollbacks == 1
    assert set(store.bookings) == {
        ("p0", "evt-0", "Airbnb"),
        ("p1", "evt-1", "Airbnb"),
        ("p4", "evt-4", "Airbnb"),
        ("p5", "evt-5", "Airbnb"),
    }
    assert "Booking batch 2 failed" in caplog.text


def test_writer_with_nothing_to_write_opens_no_unit_of_work() -> None:
    store = InMemoryBookingStore()
    writer = BookingWriter(lambda: InMemoryUnitOfWork(store))

    result = writer.write([])

    assert result.operations == 0
    assert store.commits == 0
