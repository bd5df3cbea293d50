"""Port for the downstream mission automation collaborator."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MissionAutomation(Protocol):
    """Idempotent hooks that re-derive mission state from the booking store."""

    async def process_upcoming_bookings(self) -> None: ...

    async def process_recently_ended_bookings(self) -> None: ...


__all__ = ["MissionAutomation"]
