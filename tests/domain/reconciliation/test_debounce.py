from __future__ import annotations

from datetime import timedelta

from bookingsync.domain.model import Interval
from bookingsync.domain.reconciliation import DebounceLedger
from tests.helpers.calendars import FakeClock, utc


def test_unknown_source_is_never_skipped() -> None:
    ledger = DebounceLedger(clock=FakeClock(utc(2024, 6, 1)))

    assert not ledger.should_skip("p1", "Airbnb")
    assert ledger.last_interval("p1", "Airbnb") is None


def test_skips_within_window_and_fetches_after() -> None:
    clock = FakeClock(utc(2024, 6, 1))
    ledger = DebounceLedger(window=timedelta(minutes=5), clock=clock)
    ledger.record_success("p1", "Airbnb", None)

    clock.advance(minutes=4, seconds=59)
    assert ledger.should_skip("p1", "Airbnb")

    clock.advance(seconds=1)
    assert not ledger.should_skip("p1", "Airbnb")


def test_keys_are_per_property_and_source() -> None:
    clock = FakeClock(utc(2024, 6, 1))
    ledger = DebounceLedger(clock=clock)
    ledger.record_success("p1", "Airbnb", None)

    assert ledger.should_skip("p1", "Airbnb")
    assert not ledger.should_skip("p1", "Booking")
    assert not ledger.should_skip("p2", "Airbnb")


def test_remembers_last_interval_and_fetch_time() -> None:
    clock = FakeClock(utc(2024, 6, 1, 9))
    ledger = DebounceLedger(clock=clock)
    interval = Interval(utc(2024, 6, 8), utc(2024, 6, 12), "Airbnb")

    ledger.record_success("p1", "Airbnb", interval)

    assert ledger.last_interval("p1", "Airbnb") is interval
    assert ledger.last_fetched_at("p1", "Airbnb") == utc(2024, 6, 1, 9)
    assert len(ledger) == 1

    ledger.clear()
    assert len(ledger) == 0
    assert not ledger.should_skip("p1", "Airbnb")
