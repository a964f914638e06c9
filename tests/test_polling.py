"""Tests for the status poller."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from switchbot_bridge.services.polling import StatusPoller


@pytest.fixture
def fake_registry() -> MagicMock:
    registry = MagicMock()
    registry.refresh_all = AsyncMock()
    return registry


class TestStatusPoller:
    """Tests for StatusPoller."""

    def test_rejects_non_positive_interval(self, fake_registry: MagicMock) -> None:
        with pytest.raises(ValueError):
            StatusPoller(fake_registry, interval_seconds=0)

    async def test_trigger_runs_refresh(self, fake_registry: MagicMock) -> None:
        poller = StatusPoller(fake_registry)

        task = poller.trigger()
        assert task is not None
        await task

        fake_registry.refresh_all.assert_awaited_once()
        assert poller.ticks == 1

    async def test_trigger_skips_while_refresh_running(self, fake_registry: MagicMock) -> None:
        """Overlapping ticks are skipped, not queued."""
        release = asyncio.Event()
        fake_registry.refresh_all = AsyncMock(side_effect=release.wait)
        poller = StatusPoller(fake_registry)

        first = poller.trigger()
        await asyncio.sleep(0)
        assert poller.trigger() is None
        assert poller.ticks == 1

        release.set()
        await first
        assert poller.trigger() is not None
        assert poller.ticks == 2

    async def test_refresh_errors_are_logged(self, fake_registry: MagicMock) -> None:
        """A failing refresh does not kill the poller."""
        fake_registry.refresh_all = AsyncMock(side_effect=RuntimeError("boom"))
        poller = StatusPoller(fake_registry)

        await poller.trigger()

        assert poller.trigger() is not None

    async def test_periodic_refresh(self, fake_registry: MagicMock) -> None:
        poller = StatusPoller(fake_registry, interval_seconds=0.01)

        poller.start()
        assert poller.is_running
        await asyncio.sleep(0.1)
        await poller.stop()

        assert not poller.is_running
        assert fake_registry.refresh_all.await_count >= 2

    async def test_start_twice_is_noop(self, fake_registry: MagicMock) -> None:
        poller = StatusPoller(fake_registry, interval_seconds=60)

        poller.start()
        task = poller._loop_task
        poller.start()

        assert poller._loop_task is task
        await poller.stop()

    async def test_stop_waits_for_in_flight_refresh(self, fake_registry: MagicMock) -> None:
        """Stopping cancels the timer but lets a running refresh finish."""
        started = asyncio.Event()
        release = asyncio.Event()
        finished: list[bool] = []

        async def slow_refresh() -> None:
            started.set()
            await release.wait()
            finished.append(True)

        fake_registry.refresh_all = AsyncMock(side_effect=slow_refresh)
        poller = StatusPoller(fake_registry, interval_seconds=60)
        poller.start()
        poller.trigger()
        await started.wait()

        stop_task = asyncio.create_task(poller.stop())
        await asyncio.sleep(0.01)
        assert not poller.is_running
        assert not stop_task.done()

        release.set()
        await stop_task

        assert finished == [True]

    async def test_stop_without_wait(self, fake_registry: MagicMock) -> None:
        release = asyncio.Event()
        fake_registry.refresh_all = AsyncMock(side_effect=release.wait)
        poller = StatusPoller(fake_registry, interval_seconds=60)
        task = poller.trigger()
        await asyncio.sleep(0)

        await poller.stop(wait=False)

        assert not task.done()
        release.set()
        await task

    async def test_stop_when_not_started(self, fake_registry: MagicMock) -> None:
        poller = StatusPoller(fake_registry)
        await poller.stop()
        assert not poller.is_running
