"""Interval extraction per source and dominant-interval selection per property."""

from __future__ import annotations

from typing import TYPE_CHECKING

from bookingsync.domain.model import Interval

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import datetime

    from bookingsync.domain.model import ParsedEvent


def _ordering_key(interval: Interval) -> tuple[datetime, datetime, str]:
    # label is a last resort so that equal windows from two sources resolve the
    # same way regardless of fetch completion order
    return (interval.end, interval.start, interval.source)


def extract_interval(
    events: Iterable[ParsedEvent],
    *,
    source: str,
    now: datetime,
) -> Interval | None:
    """Return the single representative future interval published by ``source``.

    Events missing a start or an end, and events that already ended, are dropped.
    Of the remainder the one ending last wins, ties going to the later start.
    """

    upcoming: list[Interval] = []
    for event in events:
        if event.start is None or event.end is None:
            continue
        if event.end < now:
            continue
        upcoming.append(
            Interval(
                start=event.start,
                end=event.end,
                source=source,
                uid=event.uid,
                summary=event.summary,
                last_modified=event.last_modified,
            )
        )

    if not upcoming:
        return None
    return max(upcoming, key=lambda interval: (interval.end, interval.start))


def select_dominant(intervals: Iterable[Interval | None]) -> Interval | None:
    """Pick the interval that represents the property this pass.

    Latest end wins, then latest start. ``None`` entries (sources without a
    future booking) are ignored; with nothing left the result is ``None``.
    """

    candidates = [interval for interval in intervals if interval is not None]
    if not candidates:
        return None
    return max(candidates, key=_ordering_key)


__all__ = ["extract_interval", "select_dominant"]
