"""Per (property, source) record of the last successful feed fetch."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from logging import getLogger
from typing import TYPE_CHECKING

from bookingsync.config.sync import DEFAULT_DEBOUNCE_WINDOW
from bookingsync.domain.clock import Clock, utcnow

if TYPE_CHECKING:
    from datetime import datetime

    from bookingsync.domain.model import Interval

log = getLogger(__name__)

type DebounceKey = tuple[str, str]


@dataclass(frozen=True, slots=True)
class DebounceEntry:
    fetched_at: datetime
    interval: Interval | None


@dataclass(slots=True)
class DebounceLedger:
    """Skip re-fetching a source too soon after it was last fetched successfully.

    The ledger also remembers the interval extracted on that fetch so a skipped
    source keeps reporting what it last published instead of looking empty.
    """

    window: timedelta = DEFAULT_DEBOUNCE_WINDOW
    clock: Clock = utcnow
    _entries: dict[DebounceKey, DebounceEntry] = field(
        default_factory=dict["DebounceKey", "DebounceEntry"]
    )

    def should_skip(self, property_id: str, source: str) -> bool:
        entry = self._entries.get((property_id, source))
        if entry is None:
            return False
        if self.clock() - entry.fetched_at < self.window:
            log.debug(
                "Skipping feed fetch due to debounce: property=%s source=%s", property_id, source
            )
            return True
        return False

    def record_success(self, property_id: str, source: str, interval: Interval | None) -> None:
        self._entries[(property_id, source)] = DebounceEntry(
            fetched_at=self.clock(), interval=interval
        )

    def last_interval(self, property_id: str, source: str) -> Interval | None:
        entry = self._entries.get((property_id, source))
        return entry.interval if entry is not None else None

    def last_fetched_at(self, property_id: str, source: str) -> datetime | None:
        entry = self._entries.get((property_id, source))
        return entry.fetched_at if entry is not None else None

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


__all__ = ["DebounceEntry", "DebounceLedger"]
