"""Per-property occupancy state machine.

Each sync pass hands the reconciler one dominant interval per property. A new
value has to be observed unchanged for the stability window before it replaces
the active booking, which keeps feeds that update out of step with each other
(or briefly drop an event) from churning bookings or announcing false releases.

A pending candidate may itself be ``None``: that is a property whose active
booking disappeared and which is waiting to be released.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import timedelta
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from bookingsync.config.sync import DEFAULT_STABILITY_WINDOW
from bookingsync.domain.clock import Clock, utcnow
from bookingsync.domain.model import same_window

if TYPE_CHECKING:
    from datetime import datetime

    from bookingsync.domain.model import Interval

log = getLogger(__name__)


class SyncPhase(StrEnum):
    EMPTY = "empty"
    CANDIDATE_PENDING = "candidate_pending"
    ACTIVE = "active"
    RELEASE_PENDING = "release_pending"


@dataclass(slots=True)
class PropertySyncState:
    active_booking: Interval | None = None
    candidate: Interval | None = None
    candidate_since: datetime | None = None
    last_active_booking: Interval | None = None

    @property
    def has_candidate(self) -> bool:
        return self.candidate_since is not None

    @property
    def phase(self) -> SyncPhase:
        if self.has_candidate:
            if self.candidate is None and self.active_booking is not None:
                return SyncPhase.RELEASE_PENDING
            return SyncPhase.CANDIDATE_PENDING
        if self.active_booking is not None:
            return SyncPhase.ACTIVE
        return SyncPhase.EMPTY

    def clear_candidate(self) -> None:
        self.candidate = None
        self.candidate_since = None


@dataclass(frozen=True, slots=True)
class ReconcileOutcome:
    """What one reconciliation step decided for a property."""

    property_id: str
    active: Interval | None
    previous: Interval | None
    phase: SyncPhase
    promoted: bool = False

    @property
    def released(self) -> bool:
        return self.promoted and self.previous is not None and self.active is None


@dataclass(slots=True)
class Reconciler:
    """Own the sync state of every property seen by this process."""

    stability_window: timedelta = DEFAULT_STABILITY_WINDOW
    clock: Clock = utcnow
    _states: dict[str, PropertySyncState] = field(
        default_factory=dict[str, "PropertySyncState"]
    )

    def reconcile(self, property_id: str, dominant: Interval | None) -> ReconcileOutcome:
        state = self._states.setdefault(property_id, PropertySyncState())
        previous = state.active_booking

        if same_window(dominant, state.active_booking):
            if state.has_candidate:
                log.debug("Dropping pending candidate for %s: active booking observed", property_id)
                state.clear_candidate()
            return ReconcileOutcome(property_id, state.active_booking, previous, state.phase)

        since = state.candidate_since
        if since is not None and same_window(dominant, state.candidate):
            elapsed = self.clock() - since
            if elapsed < self.stability_window:
                return ReconcileOutcome(property_id, state.active_booking, previous, state.phase)
            state.last_active_booking = state.active_booking
            state.active_booking = dominant
            state.clear_candidate()
            log.info(
                "Promoted booking for %s after %ss: %s -> %s",
                property_id,
                int(elapsed.total_seconds()),
                _describe(previous),
                _describe(dominant),
            )
            return ReconcileOutcome(
                property_id, state.active_booking, previous, state.phase, promoted=True
            )

        state.candidate = dominant
        state.candidate_since = self.clock()
        log.debug("New candidate for %s: %s", property_id, _describe(dominant))
        return ReconcileOutcome(property_id, state.active_booking, previous, state.phase)

    def state_for(self, property_id: str) -> PropertySyncState | None:
        return self._states.get(property_id)

    def snapshot(self) -> dict[str, SyncPhase]:
        return {property_id: state.phase for property_id, state in self._states.items()}

    def reset(self, property_id: str | None = None) -> None:
        if property_id is None:
            self._states.clear()
        else:
            self._states.pop(property_id, None)


def _describe(interval: Interval | None) -> str:
    if interval is None:
        return "none"
    return f"{interval.source}[{interval.start.isoformat()} -> {interval.end.isoformat()}]"


__all__ = ["PropertySyncState", "ReconcileOutcome", "Reconciler", "SyncPhase"]
