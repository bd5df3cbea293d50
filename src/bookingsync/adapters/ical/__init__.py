"""Public interface for the iCalendar feed adapter."""

from __future__ import annotations

from .client import CalendarFeedError, IcalFeedFetcher
from .schema import EventPayload
from .translator import CalendarParseError, parse_calendar, parse_event_payload

__all__ = [
    "CalendarFeedError",
    "CalendarParseError",
    "EventPayload",
    "IcalFeedFetcher",
    "parse_calendar",
    "parse_event_payload",
]
