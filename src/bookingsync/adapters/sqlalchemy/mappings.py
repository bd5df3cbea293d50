"""SQLAlchemy mapping metadata for the bookingsync domain model."""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from functools import cache
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Dialect,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    TypeDecorator,
    UniqueConstraint,
    orm,
)
from sqlalchemy.orm import configure_mappers, relationship

from bookingsync.domain.model import Booking, BookingStatus, CalendarSource, Property

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

log = logging.getLogger(__name__)


class UTCDateTime(TypeDecorator[datetime]):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=UTC)
        return value.astimezone(UTC)

    def process_result_value(self, value: datetime | None, dialect: Dialect) -> datetime | None:
        _ = dialect
        if value is None:
            return None
        return value if value.tzinfo else value.replace(tzinfo=UTC)


mapper_registry = orm.registry()
mapper_registry.metadata.naming_convention = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_label)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_label)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

# Property store (owned elsewhere, read-only for the sync engine) --------------

property_table = Table(
    "property",
    mapper_registry.metadata,
    Column("id", String, primary_key=True),
    Column("name", String, nullable=False),
    Column("is_active", Boolean, nullable=False, default=True),
)

calendar_source_table = Table(
    "calendar_source",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column(
        "property_id",
        String,
        ForeignKey("property.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("url", String, nullable=False),
    Column("label", String, nullable=False),
    Column("active", Boolean, nullable=False, default=True),
)

# Bookings ---------------------------------------------------------------------

booking_table = Table(
    "booking",
    mapper_registry.metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("property_id", String, ForeignKey("property.id"), nullable=False),
    Column("start", UTCDateTime, nullable=False),
    Column("end", UTCDateTime, nullable=False),
    Column("guest_label", String, nullable=True),
    Column("source", String, nullable=False),
    Column("external_id", String, nullable=False),
    Column("status", Enum(BookingStatus, native_enum=False), nullable=False),
    Column("synced_at", UTCDateTime, nullable=True),
    Column("last_modified", UTCDateTime, nullable=True),
    Column("created_at", UTCDateTime, nullable=True),
    UniqueConstraint("property_id", "external_id", "source"),
    Index("ix_booking_property_end_status", "property_id", "end", "status"),
)


@cache
def start_mappers() -> orm.registry:
    """Configure SQLAlchemy mappers for the domain model."""

    log.info("Starting SQLAlchemy mappers")

    mapper_registry.map_imperatively(CalendarSource, calendar_source_table)

    mapper_registry.map_imperatively(
        Property,
        property_table,
        properties={
            "calendar_sources": relationship(
                CalendarSource,
                order_by=calendar_source_table.c.id,
                cascade="all, delete-orphan",
                lazy="selectin",
            ),
        },
    )

    mapper_registry.map_imperatively(Booking, booking_table)

    configure_mappers()
    return mapper_registry


def create_all_tables(engine: Engine) -> None:
    """Create database tables for the mapped metadata."""

    log.info("Creating all tables")
    mapper_registry.metadata.create_all(engine)


__all__ = [
    "UTCDateTime",
    "booking_table",
    "calendar_source_table",
    "create_all_tables",
    "mapper_registry",
    "property_table",
    "start_mappers",
]
