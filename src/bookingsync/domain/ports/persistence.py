"""Ports for reading properties and persisting bookings."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from datetime import datetime

    from bookingsync.domain.model import Booking, Property


class UpsertOutcome(StrEnum):
    INSERTED = "inserted"
    MODIFIED = "modified"
    UNCHANGED = "unchanged"


@dataclass(frozen=True, slots=True)
class BookingUpsert:
    """Idempotent write keyed by ``(property_id, external_id, source)``."""

    property_id: str
    external_id: str
    source: str
    start: datetime
    end: datetime
    guest_label: str
    synced_at: datetime
    last_modified: datetime | None = None

    @property
    def key(self) -> tuple[str, str, str]:
        return (self.property_id, self.external_id, self.source)


@runtime_checkable
class PropertyRepository(Protocol):
    """Read-only access to the property store."""

    def list_active(self) -> list[Property]: ...

    def get(self, property_id: str) -> Property | None: ...


@runtime_checkable
class BookingRepository(Protocol):
    """Persistence contract for bookings; the sync engine never deletes."""

    def upsert(self, upsert: BookingUpsert) -> UpsertOutcome: ...

    def get_by_key(self, *, property_id: str, external_id: str, source: str) -> Booking | None: ...

    def list_for_property(self, property_id: str) -> list[Booking]: ...


__all__ = [
    "BookingRepository",
    "BookingUpsert",
    "PropertyRepository",
    "UpsertOutcome",
]
