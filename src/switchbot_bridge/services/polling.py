"""Status poller - periodically refreshes every device in the registry.

The poller owns only the timer. Each tick runs the registry's bulk refresh as
its own task so stopping the poller never interrupts a refresh in flight.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from switchbot_bridge.services.switchbot.registry import DeviceRegistry

logger = structlog.get_logger()


class StatusPoller:
    """Triggers DeviceRegistry.refresh_all() at a fixed interval.

    A tick is skipped while the previous refresh is still running, so slow
    API responses do not pile up overlapping refreshes.
    """

    def __init__(self, registry: DeviceRegistry, interval_seconds: float = 30.0) -> None:
        """Initialize the poller.

        Args:
            registry: Registry to refresh
            interval_seconds: Seconds between refreshes
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")

        self.registry = registry
        self.interval_seconds = interval_seconds

        self._loop_task: asyncio.Task[None] | None = None
        self._refresh_task: asyncio.Task[None] | None = None
        self._ticks = 0

    @property
    def is_running(self) -> bool:
        """Check if periodic refreshes are scheduled."""
        return self._loop_task is not None and not self._loop_task.done()

    @property
    def ticks(self) -> int:
        """Number of refreshes started since creation."""
        return self._ticks

    def start(self) -> None:
        """Begin periodic refreshes. No-op if already running."""
        if self.is_running:
            logger.debug("Status poller already running")
            return

        self._loop_task = asyncio.create_task(self._poll_loop())
        logger.info("Started polling device status", interval_seconds=self.interval_seconds)

    async def stop(self, wait: bool = True) -> None:
        """Stop scheduling refreshes.

        Args:
            wait: Wait for a refresh already in flight to complete.
        """
        if self._loop_task is not None:
            self._loop_task.cancel()
            try:
                await self._loop_task
            except asyncio.CancelledError:
                pass
            self._loop_task = None

        if wait and self._refresh_task is not None and not self._refresh_task.done():
            logger.debug("Waiting for in-flight refresh to finish")
            await asyncio.shield(self._refresh_task)

        logger.info("Stopped polling device status", ticks=self._ticks)

    def trigger(self) -> asyncio.Task[None] | None:
        """Start a refresh now unless one is already running.

        Returns:
            The refresh task, or None if skipped.
        """
        if self._refresh_task is not None and not self._refresh_task.done():
            logger.debug("Previous refresh still running, skipping tick")
            return None

        self._ticks += 1
        self._refresh_task = asyncio.create_task(self._refresh())
        return self._refresh_task

    async def _poll_loop(self) -> None:
        """Background task that triggers a refresh every interval."""
        while True:
            await asyncio.sleep(self.interval_seconds)
            self.trigger()

    async def _refresh(self) -> None:
        try:
            await self.registry.refresh_all()
        except Exception as e:
            logger.error("Status refresh failed", error=str(e))
