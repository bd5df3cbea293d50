"""Domain model for calendar-driven booking synchronisation."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from datetime import datetime

DEFAULT_GUEST_LABEL = "Reservation"


class BookingStatus(StrEnum):
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    PENDING = "pending"


@dataclass(eq=False)
class CalendarSource:
    """One external calendar feed attached to a property."""

    url: str
    label: str
    active: bool = True
    id: int | None = None


@dataclass(eq=False)
class Property:
    """A rentable unit exposing its calendar feeds in priority order."""

    id: str
    name: str
    is_active: bool = True
    calendar_sources: list[CalendarSource] = field(default_factory=list["CalendarSource"])

    def active_sources(self) -> list[CalendarSource]:
        return [source for source in self.calendar_sources if source.active]


@dataclass(frozen=True, slots=True)
class ParsedEvent:
    """A single event record read from a calendar feed."""

    uid: str | None
    start: datetime | None
    end: datetime | None
    summary: str | None = None
    last_modified: datetime | None = None


@dataclass(frozen=True, slots=True)
class Interval:
    """Representative booking window for one source, or for a whole property."""

    start: datetime
    end: datetime
    source: str
    uid: str | None = None
    summary: str | None = None
    last_modified: datetime | None = None

    def same_window(self, other: Interval | None) -> bool:
        """Compare by start, end and source; uid and summary do not matter."""

        if other is None:
            return False
        return (self.start, self.end, self.source) == (other.start, other.end, other.source)


def same_window(left: Interval | None, right: Interval | None) -> bool:
    """``None``-aware window equality; two absent intervals are equal."""

    if left is None or right is None:
        return left is None and right is None
    return left.same_window(right)


@dataclass(eq=False)
class Booking:
    """Persisted occupancy record, unique per property, external id and source."""

    property_id: str
    start: datetime
    end: datetime
    source: str
    external_id: str
    guest_label: str = DEFAULT_GUEST_LABEL
    status: BookingStatus = BookingStatus.CONFIRMED
    synced_at: datetime | None = None
    last_modified: datetime | None = None
    created_at: datetime | None = None
    id: int | None = None


__all__ = [
    "DEFAULT_GUEST_LABEL",
    "Booking",
    "BookingStatus",
    "CalendarSource",
    "Interval",
    "ParsedEvent",
    "Property",
    "same_window",
]
