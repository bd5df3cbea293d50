from __future__ import annotations

import asyncio
import logging

import pytest

from bookingsync.domain.reconciliation import DownstreamTrigger
from tests.helpers.calendars import RecordingAutomation


def test_pass_complete_fires_both_hooks() -> None:
    automation = RecordingAutomation()

    async def scenario() -> None:
        trigger = DownstreamTrigger(automation)
        trigger.on_pass_complete()
        await trigger.drain()
        assert trigger.pending == 0

    asyncio.run(scenario())

    assert automation.upcoming == 1
    assert automation.recently_ended == 1


def test_release_fires_recently_ended_only() -> None:
    automation = RecordingAutomation()

    async def scenario() -> None:
        trigger = DownstreamTrigger(automation)
        trigger.on_release("p1")
        await trigger.drain()

    asyncio.run(scenario())

    assert automation.upcoming == 0
    assert automation.recently_ended == 1


def test_hooks_are_detached_from_the_caller() -> None:
    started = []

    class _SlowAutomation:
        async def process_upcoming_bookings(self) -> None:
            started.append("upcoming")
            await asyncio.sleep(0.05)

        async def process_recently_ended_bookings(self) -> None:
            started.append("recently-ended")
            await asyncio.sleep(0.05)

    async def scenario() -> None:
        trigger = DownstreamTrigger(_SlowAutomation())
        trigger.on_pass_complete()
        # spawning returns before any hook has run
        assert started == []
        assert trigger.pending == 2
        await trigger.drain()

    asyncio.run(scenario())

    assert sorted(started) == ["recently-ended", "upcoming"]


def test_hook_failures_are_logged_not_raised(caplog: pytest.LogCaptureFixture) -> None:
    automation = RecordingAutomation(fail_with=RuntimeError("automation down"))

    async def scenario() -> None:
        trigger = DownstreamTrigger(automation)
        trigger.on_pass_complete()
        trigger.on_release("p1")
        await trigger.drain()

    with caplog.at_level(logging.ERROR):
        asyncio.run(scenario())

    assert automation.upcoming == 1
    assert automation.recently_ended == 2
    assert "Mission automation hook upcoming failed" in caplog.text
