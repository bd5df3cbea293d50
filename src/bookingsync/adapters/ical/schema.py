"""Pydantic models describing VEVENT records read from iCalendar feeds."""

from __future__ import annotations

from datetime import UTC, date, datetime, time

from pydantic import BaseModel, ConfigDict, field_validator


def _blank_to_none(value: object) -> object:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return value


def _to_utc_datetime(value: object) -> object:
    # DATE values (all-day bookings, the usual OTA format) start at midnight UTC
    if isinstance(value, datetime):
        if value.tzinfo is None:
            return value.replace(tzinfo=UTC)
        return value.astimezone(UTC)
    if isinstance(value, date):
        return datetime.combine(value, time.min, tzinfo=UTC)
    return value


class EventPayload(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    uid: str | None = None
    start: datetime | None = None
    end: datetime | None = None
    summary: str | None = None
    last_modified: datetime | None = None

    _normalize_text = field_validator("uid", "summary", mode="before")(_blank_to_none)
    _normalize_moments = field_validator("start", "end", "last_modified", mode="before")(
        _to_utc_datetime
    )


__all__ = ["EventPayload"]
