"""Ports for fetching external calendar data."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from bookingsync.domain.model import ParsedEvent


@runtime_checkable
class CalendarFeedFetcher(Protocol):
    """Async callable port returning the events published by one calendar feed.

    Implementations raise on network or parse failure; callers isolate the error
    to the source being fetched.
    """

    async def __call__(self, url: str) -> Sequence[ParsedEvent]: ...


__all__ = ["CalendarFeedFetcher"]
