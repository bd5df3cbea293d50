"""Repository implementations backed by SQLAlchemy sessions."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select

from bookingsync.adapters.sqlalchemy.mappings import booking_table, property_table
from bookingsync.domain.model import Booking, BookingStatus, Property
from bookingsync.domain.ports.persistence import UpsertOutcome

if TYPE_CHECKING:
    from sqlalchemy.orm import Session

    from bookingsync.domain.ports.persistence import BookingUpsert


class SqlAlchemyPropertyRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    def list_active(self) -> list[Property]:
        stmt = (
            select(Property)
            .where(property_table.c.is_active.is_(True))
            .order_by(property_table.c.id)
        )
        return list(self.session.execute(stmt).scalars().all())

    def get(self, property_id: str) -> Property | None:
        return self.session.get(Property, property_id)


class SqlAlchemyBookingRepository:
    """Upsert bookings keyed by ``(property_id, external_id, source)``.

    ``synced_at`` is refreshed on every upsert, but only a change to the booking
    content counts as a modification. Creation-time fields are written on insert
    and left alone afterwards.
    """

    def __init__(self, session: Session) -> None:
        self.session = session

    def upsert(self, upsert: BookingUpsert) -> UpsertOutcome:
        existing = self.get_by_key(
            property_id=upsert.property_id,
            external_id=upsert.external_id,
            source=upsert.source,
        )
        if existing is None:
            self.session.add(
                Booking(
                    property_id=upsert.property_id,
                    start=upsert.start,
                    end=upsert.end,
                    source=upsert.source,
                    external_id=upsert.external_id,
                    guest_label=upsert.guest_label,
                    status=BookingStatus.CONFIRMED,
                    synced_at=upsert.synced_at,
                    last_modified=upsert.last_modified or upsert.synced_at,
                    created_at=upsert.synced_at,
                )
            )
            # flush so a later upsert for the same key in this batch finds the row
            self.session.flush()
            return UpsertOutcome.INSERTED

        changed = (
            existing.start != upsert.start
            or existing.end != upsert.end
            or existing.guest_label != upsert.guest_label
            or (
                upsert.last_modified is not None
                and existing.last_modified != upsert.last_modified
            )
        )
        existing.start = upsert.start
        existing.end = upsert.end
        existing.guest_label = upsert.guest_label
        if upsert.last_modified is not None:
            existing.last_modified = upsert.last_modified
        existing.synced_at = upsert.synced_at
        return UpsertOutcome.MODIFIED if changed else UpsertOutcome.UNCHANGED

    def get_by_key(self, *, property_id: str, external_id: str, source: str) -> Booking | None:
        stmt = (
            select(Booking)
            .where(booking_table.c.property_id == property_id)
            .where(booking_table.c.external_id == external_id)
            .where(booking_table.c.source == source)
        )
        return self.session.execute(stmt).scalar_one_or_none()

    def list_for_property(self, property_id: str) -> list[Booking]:
        stmt = (
            select(Booking)
            .where(booking_table.c.property_id == property_id)
            .order_by(booking_table.c.start)
        )
        return list(self.session.execute(stmt).scalars().all())
