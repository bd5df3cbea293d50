"""Turn reconciled occupancy into batched, idempotent booking upserts."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import batched
from logging import getLogger
from typing import TYPE_CHECKING

from bookingsync.config.sync import DEFAULT_BATCH_SIZE
from bookingsync.domain.model import DEFAULT_GUEST_LABEL
from bookingsync.domain.ports.persistence import BookingUpsert, UpsertOutcome

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence
    from datetime import datetime

    from bookingsync.domain.model import Interval
    from bookingsync.domain.ports.unit_of_work import BookingUnitOfWork

type UnitOfWorkFactory = Callable[[], BookingUnitOfWork]

log = getLogger(__name__)


def synthetic_external_id(property_id: str, start: datetime) -> str:
    return f"{property_id}:{start.isoformat()}"


def build_upsert(property_id: str, interval: Interval, *, now: datetime) -> BookingUpsert:
    summary = (interval.summary or "").strip()
    return BookingUpsert(
        property_id=property_id,
        external_id=interval.uid or synthetic_external_id(property_id, interval.start),
        source=interval.source,
        start=interval.start,
        end=interval.end,
        guest_label=summary or DEFAULT_GUEST_LABEL,
        synced_at=now,
        last_modified=interval.last_modified,
    )


@dataclass(slots=True)
class PersistenceResult:
    upserted: int = 0
    modified: int = 0
    unchanged: int = 0
    failed_batches: int = 0

    @property
    def operations(self) -> int:
        return self.upserted + self.modified


@dataclass(slots=True)
class BookingWriter:
    """Execute upserts in fixed-size batches, one unit of work per batch.

    Batches run one after the other. A failing batch is rolled back and logged;
    the batches after it still run, so a pass never fails as a whole.
    """

    unit_of_work_factory: UnitOfWorkFactory
    batch_size: int = DEFAULT_BATCH_SIZE

    def write(self, upserts: Sequence[BookingUpsert]) -> PersistenceResult:
        result = PersistenceResult()
        if not upserts:
            log.info("No booking changes to persist")
            return result

        for number, batch in enumerate(batched(upserts, self.batch_size), start=1):
            try:
                counts = self._write_batch(batch)
            except Exception:  # noqa: BLE001
                result.failed_batches += 1
                log.exception("Booking batch %s failed (%s operations)", number, len(batch))
                continue
            result.upserted += counts[UpsertOutcome.INSERTED]
            result.modified += counts[UpsertOutcome.MODIFIED]
            result.unchanged += counts[UpsertOutcome.UNCHANGED]
            log.debug(
                "Booking batch %s written: upserted=%s modified=%s",
                number,
                counts[UpsertOutcome.INSERTED],
                counts[UpsertOutcome.MODIFIED],
            )
        return result

    def _write_batch(self, batch: Sequence[BookingUpsert]) -> dict[UpsertOutcome, int]:
        counts = dict.fromkeys(UpsertOutcome, 0)
        with self.unit_of_work_factory() as uow:
            repository = uow.repositories.bookings
            for upsert in batch:
                counts[repository.upsert(upsert)] += 1
            uow.commit()
        return counts


__all__ = [
    "BookingWriter",
    "PersistenceResult",
    "UnitOfWorkFactory",
    "build_upsert",
    "synthetic_external_id",
]
