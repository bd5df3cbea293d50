"""Calendar reconciliation: from parsed feeds to stable per-property occupancy."""

from __future__ import annotations

from .debounce import DebounceEntry, DebounceLedger
from .engine import PropertySyncState, ReconcileOutcome, Reconciler, SyncPhase
from .intervals import extract_interval, select_dominant
from .persist import BookingWriter, PersistenceResult, build_upsert, synthetic_external_id
from .triggers import DownstreamTrigger

__all__ = [
    "BookingWriter",
    "DebounceEntry",
    "DebounceLedger",
    "DownstreamTrigger",
    "PersistenceResult",
    "PropertySyncState",
    "ReconcileOutcome",
    "Reconciler",
    "SyncPhase",
    "build_upsert",
    "extract_interval",
    "select_dominant",
    "synthetic_external_id",
]
