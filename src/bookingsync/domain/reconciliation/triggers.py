"""Detached invocation of the mission automation hooks."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from bookingsync.domain.ports.automation import MissionAutomation

log = getLogger(__name__)


@dataclass(slots=True)
class DownstreamTrigger:
    """Fire automation hooks as background tasks that never affect the caller.

    Hooks are idempotent on the receiving side, so redundant calls are harmless.
    Failures are logged from inside the task; nothing propagates to the pass.
    """

    automation: MissionAutomation
    _pending: set[asyncio.Task[None]] = field(default_factory=set["asyncio.Task[None]"])

    def on_release(self, property_id: str) -> None:
        log.info("Booking released for %s, triggering recently-ended pipeline", property_id)
        self._spawn("recently-ended", self.automation.process_recently_ended_bookings)

    def on_pass_complete(self) -> None:
        self._spawn("upcoming", self.automation.process_upcoming_bookings)
        self._spawn("recently-ended", self.automation.process_recently_ended_bookings)

    async def drain(self) -> None:
        """Wait for every hook spawned so far (shutdown and tests)."""

        while self._pending:
            await asyncio.gather(*tuple(self._pending), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._pending)

    def _spawn(self, name: str, hook: Callable[[], Awaitable[None]]) -> None:
        task = asyncio.get_running_loop().create_task(_run_hook(name, hook), name=f"hook-{name}")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


async def _run_hook(name: str, hook: Callable[[], Awaitable[None]]) -> None:
    try:
        await hook()
    except Exception:  # noqa: BLE001
        log.exception("Mission automation hook %s failed", name)
    else:
        log.debug("Mission automation hook %s completed", name)


__all__ = ["DownstreamTrigger"]
