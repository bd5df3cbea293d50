"""Translate iCalendar documents into domain ``ParsedEvent`` records."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

from icalendar import Calendar
from pydantic import ValidationError

from bookingsync.domain.model import ParsedEvent

from .schema import EventPayload

if TYPE_CHECKING:
    from icalendar.cal import Component

log = getLogger(__name__)


class CalendarParseError(ValueError):
    """Raised when a feed body is not a readable iCalendar document."""


def _moment(component: Component, name: str) -> object:
    prop = component.get(name)
    return getattr(prop, "dt", None)


def _text(component: Component, name: str) -> str | None:
    prop = component.get(name)
    return None if prop is None else str(prop)


def parse_event_payload(component: Component) -> EventPayload:
    return EventPayload.model_validate(
        {
            "uid": _text(component, "UID"),
            "start": _moment(component, "DTSTART"),
            "end": _moment(component, "DTEND"),
            "summary": _text(component, "SUMMARY"),
            "last_modified": _moment(component, "LAST-MODIFIED"),
        }
    )


def parse_calendar(body: str | bytes) -> list[ParsedEvent]:
    """Parse a feed body; only VEVENT records are returned, other components are ignored.

    A VEVENT that cannot be validated is skipped with a warning rather than failing
    the whole feed.
    """

    try:
        calendar = Calendar.from_ical(body)
    except ValueError as exc:
        raise CalendarParseError(f"Invalid iCalendar document: {exc}") from exc

    events: list[ParsedEvent] = []
    for component in calendar.walk("VEVENT"):
        try:
            payload = parse_event_payload(component)
        except ValidationError as exc:
            log.warning("Skipping unreadable VEVENT %s: %s", _text(component, "UID"), exc)
            continue
        events.append(
            ParsedEvent(
                uid=payload.uid,
                start=payload.start,
                end=payload.end,
                summary=payload.summary,
                last_modified=payload.last_modified,
            )
        )
    return events


__all__ = ["CalendarParseError", "parse_calendar", "parse_event_payload"]
