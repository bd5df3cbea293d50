"""Application service that synchronises property calendars into bookings."""

from __future__ import annotations

import asyncio
from collections import defaultdict
from dataclasses import dataclass, field
from enum import StrEnum
from logging import getLogger
from typing import TYPE_CHECKING

from bookingsync.config.sync import SyncConfig
from bookingsync.domain.clock import Clock, utcnow
from bookingsync.domain.reconciliation import (
    BookingWriter,
    DebounceLedger,
    DownstreamTrigger,
    Reconciler,
    build_upsert,
    extract_interval,
    select_dominant,
)

if TYPE_CHECKING:
    from collections.abc import Iterable
    from datetime import timedelta

    from bookingsync.domain.model import CalendarSource, Interval, Property
    from bookingsync.domain.ports.automation import MissionAutomation
    from bookingsync.domain.ports.fetching import CalendarFeedFetcher
    from bookingsync.domain.ports.persistence import BookingUpsert
    from bookingsync.domain.reconciliation import PersistenceResult, ReconcileOutcome
    from bookingsync.domain.reconciliation.persist import UnitOfWorkFactory

log = getLogger(__name__)


class UnknownPropertyError(LookupError):
    """Raised when an on-demand sync names a property that is missing or inactive."""


class SourceStatus(StrEnum):
    FETCHED = "fetched"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class SourceSyncResult:
    """What happened to one (property, source) pair during a pass."""

    property_id: str
    source: str
    status: SourceStatus
    interval: Interval | None = None
    event_count: int = 0
    error: str | None = None


@dataclass(slots=True)
class SyncSummary:
    """Outcome of a sync pass."""

    total_upserted: int = 0
    total_modified: int = 0
    failed_batches: int = 0
    source_results: list[SourceSyncResult] = field(default_factory=list["SourceSyncResult"])
    released: list[str] = field(default_factory=list[str])

    @property
    def total_operations(self) -> int:
        return self.total_upserted + self.total_modified

    @property
    def failed_sources(self) -> list[SourceSyncResult]:
        return [result for result in self.source_results if result.status is SourceStatus.FAILED]


@dataclass(slots=True)
class _PropertyPass:
    property_id: str
    sources: list[SourceSyncResult]
    outcome: ReconcileOutcome


@dataclass
class BookingSynchronizer:
    """Fetch, reconcile and persist every property's calendar feeds.

    The instance owns all cross-pass state (reconciler, debounce ledger) and must
    live for as long as the process keeps syncing.
    """

    fetcher: CalendarFeedFetcher
    unit_of_work_factory: UnitOfWorkFactory
    automation: MissionAutomation
    config: SyncConfig = field(default_factory=SyncConfig)
    clock: Clock = utcnow

    reconciler: Reconciler = field(init=False)
    ledger: DebounceLedger = field(init=False)
    writer: BookingWriter = field(init=False)
    trigger: DownstreamTrigger = field(init=False)
    _loop: asyncio.AbstractEventLoop | None = field(init=False, default=None, repr=False)
    _limiter: asyncio.Semaphore = field(init=False, repr=False)
    _property_locks: defaultdict[str, asyncio.Lock] = field(init=False, repr=False)
    _inflight: asyncio.Task[SyncSummary] | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        self.reconciler = Reconciler(stability_window=self.config.stability_window, clock=self.clock)
        self.ledger = DebounceLedger(window=self.config.debounce_window, clock=self.clock)
        self.writer = BookingWriter(self.unit_of_work_factory, batch_size=self.config.batch_size)
        self.trigger = DownstreamTrigger(self.automation)
        self._reset_primitives()

    async def synchronize_all(self) -> SyncSummary:
        """Run one full pass, or join the pass already in flight."""

        self._bind_running_loop()
        if self._inflight is None or self._inflight.done():
            self._inflight = asyncio.get_running_loop().create_task(
                self._run_pass(), name="booking-sync-pass"
            )
        else:
            log.info("Sync pass already running, waiting for it instead of starting another")
        return await asyncio.shield(self._inflight)

    async def synchronize_property(self, property_id: str) -> SyncSummary:
        """Sync a single property on demand; automation hooks fire only on release."""

        self._bind_running_loop()
        prop = await asyncio.to_thread(self._load_property, property_id)
        if prop is None or not prop.is_active:
            raise UnknownPropertyError(f"No active property with id {property_id!r}")

        property_pass = await self._sync_property(prop)
        return await self._persist([property_pass])

    async def run_scheduled(
        self,
        stop: asyncio.Event,
        *,
        interval: timedelta | None = None,
    ) -> None:
        """Run full passes every ``interval`` until ``stop`` is set."""

        period = (interval or self.config.sync_interval).total_seconds()
        log.info("Scheduled calendar sync started: interval=%ss", period)
        while not stop.is_set():
            try:
                await self.synchronize_all()
            except Exception:  # noqa: BLE001
                log.exception("Scheduled calendar sync pass failed")
            try:
                await asyncio.wait_for(stop.wait(), timeout=period)
            except TimeoutError:
                pass
        await self.trigger.drain()
        log.info("Scheduled calendar sync stopped")

    async def drain(self) -> None:
        await self.trigger.drain()

    def _bind_running_loop(self) -> None:
        # asyncio primitives belong to the loop that first waits on them; every
        # asyncio.run() in the entry points brings a fresh loop
        loop = asyncio.get_running_loop()
        if self._loop is not loop:
            self._loop = loop
            self._reset_primitives()

    def _reset_primitives(self) -> None:
        self._limiter = asyncio.Semaphore(self.config.fetch_concurrency)
        self._property_locks = defaultdict(asyncio.Lock)
        self._inflight = None

    async def _run_pass(self) -> SyncSummary:
        log.info("Starting calendar sync for all properties")
        try:
            properties = await asyncio.to_thread(self._load_properties)
        except Exception:  # noqa: BLE001
            log.exception("Could not load properties, nothing synchronised this pass")
            properties = []

        passes = await asyncio.gather(*(self._sync_property(prop) for prop in properties))
        summary = await self._persist(passes)

        log.info(
            "Calendar sync complete: properties=%s upserted=%s modified=%s operations=%s "
            "failed_sources=%s failed_batches=%s",
            len(properties),
            summary.total_upserted,
            summary.total_modified,
            summary.total_operations,
            len(summary.failed_sources),
            summary.failed_batches,
        )
        self.trigger.on_pass_complete()
        return summary

    def _load_properties(self) -> list[Property]:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.properties.list_active()

    def _load_property(self, property_id: str) -> Property | None:
        with self.unit_of_work_factory() as uow:
            return uow.repositories.properties.get(property_id)

    async def _sync_property(self, prop: Property) -> _PropertyPass:
        async with self._property_locks[prop.id]:
            sources = await asyncio.gather(
                *(self._sync_source(prop.id, source) for source in prop.active_sources())
            )
            dominant = select_dominant(result.interval for result in sources)
            outcome = self.reconciler.reconcile(prop.id, dominant)
        if outcome.released:
            self.trigger.on_release(prop.id)
        return _PropertyPass(property_id=prop.id, sources=list(sources), outcome=outcome)

    async def _sync_source(self, property_id: str, source: CalendarSource) -> SourceSyncResult:
        if self.ledger.should_skip(property_id, source.label):
            remembered = self.ledger.last_interval(property_id, source.label)
            if remembered is not None and remembered.end < self.clock():
                remembered = None
            return SourceSyncResult(
                property_id, source.label, SourceStatus.SKIPPED, interval=remembered
            )

        try:
            async with self._limiter, asyncio.timeout(self.config.fetch_timeout_seconds):
                events = await self.fetcher(source.url)
        except TimeoutError:
            error = f"timed out after {self.config.fetch_timeout_seconds}s"
            log.error(
                "Calendar fetch timed out: property=%s source=%s", property_id, source.label
            )
            return SourceSyncResult(property_id, source.label, SourceStatus.FAILED, error=error)
        except Exception as exc:  # noqa: BLE001
            log.error(
                "Failed to fetch calendar events: property=%s source=%s error=%s",
                property_id,
                source.label,
                exc,
            )
            return SourceSyncResult(property_id, source.label, SourceStatus.FAILED, error=str(exc))

        interval = extract_interval(events, source=source.label, now=self.clock())
        self.ledger.record_success(property_id, source.label, interval)
        log.debug(
            "Fetched calendar: property=%s source=%s events=%s interval=%s",
            property_id,
            source.label,
            len(events),
            interval,
        )
        return SourceSyncResult(
            property_id,
            source.label,
            SourceStatus.FETCHED,
            interval=interval,
            event_count=len(events),
        )

    async def _persist(self, passes: Iterable[_PropertyPass]) -> SyncSummary:
        now = self.clock()
        summary = SyncSummary()
        upserts: list[BookingUpsert] = []
        for property_pass in passes:
            summary.source_results.extend(property_pass.sources)
            outcome = property_pass.outcome
            if outcome.released:
                summary.released.append(property_pass.property_id)
            if outcome.active is not None:
                upserts.append(build_upsert(property_pass.property_id, outcome.active, now=now))

        # batches stay sequential inside the worker thread
        result: PersistenceResult = await asyncio.to_thread(self.writer.write, upserts)
        summary.total_upserted = result.upserted
        summary.total_modified = result.modified
        summary.failed_batches = result.failed_batches
        return summary


__all__ = [
    "BookingSynchronizer",
    "SourceStatus",
    "SourceSyncResult",
    "SyncSummary",
    "UnknownPropertyError",
]
