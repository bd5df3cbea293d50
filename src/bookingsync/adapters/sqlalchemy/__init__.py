"""SQLAlchemy adapter package for bookingsync."""

from __future__ import annotations

from .mappings import create_all_tables, mapper_registry, start_mappers
from .repositories import SqlAlchemyBookingRepository, SqlAlchemyPropertyRepository
from .unit_of_work import (
    SqlAlchemyBookingUnitOfWork,
    StartupError,
    is_started,
    shutdown,
    startup,
)

__all__ = [
    "SqlAlchemyBookingRepository",
    "SqlAlchemyBookingUnitOfWork",
    "SqlAlchemyPropertyRepository",
    "StartupError",
    "create_all_tables",
    "is_started",
    "mapper_registry",
    "shutdown",
    "start_mappers",
    "startup",
]
