"""HTTP fetcher for iCalendar booking feeds."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from bookingsync.adapters.http_resilience import ResilienceConfig, ResilientClient
from bookingsync.domain.ports.fetching import CalendarFeedFetcher

from .translator import CalendarParseError, parse_calendar

if TYPE_CHECKING:
    from collections.abc import Callable

    from bookingsync.domain.model import ParsedEvent

log = getLogger(__name__)

_DEFAULT_TIMEOUT_SECONDS = 20.0
_ACCEPT_HEADER = "text/calendar, text/plain;q=0.9, */*;q=0.5"


def _default_resilience_config() -> ResilienceConfig:
    return ResilienceConfig(
        name="ical",
        timeout_seconds=_DEFAULT_TIMEOUT_SECONDS,
        default_headers={"Accept": _ACCEPT_HEADER},
    )


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


def _redact(url: str) -> str:
    """Keep scheme and host, plus the leading segment of longer paths; tokens live in the rest."""

    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL:
        return "<invalid url>"
    segments = [segment for segment in parsed.path.split("/") if segment]
    shown = f"/{segments[0]}" if len(segments) > 1 else ""
    hidden = "/..." if segments or parsed.query else ""
    return f"{parsed.scheme}://{parsed.host}{shown}{hidden}"


class CalendarFeedError(RuntimeError):
    """Raised when a calendar feed cannot be downloaded or parsed."""

    def __init__(self, message: str, *, url: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.url = url
        self.status_code = status_code


@dataclass(slots=True)
class IcalFeedFetcher:
    resilience: ResilienceConfig = field(default_factory=_default_resilience_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def __call__(self, url: str) -> list[ParsedEvent]:
        async with self.client_factory(self.resilience) as client:
            body = await self._download(client, url)

        try:
            events = parse_calendar(body)
        except CalendarParseError as exc:
            raise CalendarFeedError(
                f"Failed to parse iCal from {_redact(url)}: {exc}", url=url
            ) from exc

        log.debug("Fetched %s events from %s", len(events), _redact(url))
        return events

    async def _download(self, client: ResilientClient, url: str) -> bytes:
        try:
            response = await client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise CalendarFeedError(
                f"Failed to fetch iCal from {_redact(url)}: HTTP {exc.response.status_code}",
                url=url,
                status_code=exc.response.status_code,
            ) from exc
        except httpx.HTTPError as exc:
            raise CalendarFeedError(
                f"Failed to fetch iCal from {_redact(url)}: {exc}", url=url
            ) from exc
        return response.content


if TYPE_CHECKING:
    _fetcher_check: CalendarFeedFetcher = IcalFeedFetcher()
