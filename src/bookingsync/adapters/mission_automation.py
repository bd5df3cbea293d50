"""Adapters delivering booking-change hooks to the mission automation service."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from bookingsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from bookingsync.config.mission_automation import (
    MissionAutomationConfig,
    get_mission_automation_config,
)
from bookingsync.domain.ports.automation import MissionAutomation

if TYPE_CHECKING:
    from collections.abc import Callable

log = getLogger(__name__)

UPCOMING_PATH = "process-upcoming"
RECENTLY_ENDED_PATH = "process-recently-ended"


class MissionAutomationError(RuntimeError):
    """Raised when the mission automation service rejects or misses a hook call."""


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class HttpMissionAutomation:
    """POST argument-less hook calls to ``<base_url>/<hook>``."""

    config: MissionAutomationConfig = field(default_factory=get_mission_automation_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def process_upcoming_bookings(self) -> None:
        await self._post(UPCOMING_PATH)

    async def process_recently_ended_bookings(self) -> None:
        await self._post(RECENTLY_ENDED_PATH)

    def _resilience(self) -> ResilienceConfig:
        if not self.config.base_url:
            raise MissionAutomationError("Mission automation URL is not configured")
        return ResilienceConfig(
            name="mission-automation",
            base_url=self.config.base_url.rstrip("/") + "/",
            timeout_seconds=self.config.timeout_seconds,
        )

    async def _post(self, path: str) -> None:
        async with self.client_factory(self._resilience()) as client:
            try:
                response = await client.post(path)
                response.raise_for_status()
            except httpx.HTTPError as exc:
                msg = f"Mission automation hook {path} failed: {exc}"
                raise MissionAutomationError(msg) from exc
        log.debug("Mission automation hook %s accepted (%s)", path, response.status_code)


@dataclass(slots=True)
class LoggingMissionAutomation:
    """Stand-in used when no automation endpoint is configured."""

    async def process_upcoming_bookings(self) -> None:
        log.info("Mission automation not configured; skipping upcoming-bookings hook")

    async def process_recently_ended_bookings(self) -> None:
        log.info("Mission automation not configured; skipping recently-ended hook")


def build_mission_automation(
    config: MissionAutomationConfig | None = None,
) -> MissionAutomation:
    effective = config or get_mission_automation_config()
    if effective.base_url:
        return HttpMissionAutomation(config=effective)
    return LoggingMissionAutomation()


if TYPE_CHECKING:
    _http_check: MissionAutomation = HttpMissionAutomation()
    _logging_check: MissionAutomation = LoggingMissionAutomation()
