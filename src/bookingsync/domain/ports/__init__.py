"""Domain port definitions for adapters."""

from __future__ import annotations

from .automation import MissionAutomation
from .fetching import CalendarFeedFetcher
from .persistence import BookingRepository, BookingUpsert, PropertyRepository, UpsertOutcome
from .unit_of_work import (
    BookingRepositories,
    BookingUnitOfWork,
    RepositoryCollection,
    UnitOfWork,
)

__all__ = [
    "BookingRepositories",
    "BookingRepository",
    "BookingUnitOfWork",
    "BookingUpsert",
    "CalendarFeedFetcher",
    "MissionAutomation",
    "PropertyRepository",
    "RepositoryCollection",
    "UnitOfWork",
    "UpsertOutcome",
]
