"""SwitchBot bridge service.

Wires the API client, device registry and status poller together for a host
platform. The host starts the bridge once, reads and commands devices through
``bridge.registry`` and shuts it down on exit.
"""

from __future__ import annotations

from typing import Any

import structlog

from switchbot_bridge.config import Settings, SwitchBotSettings, get_settings
from switchbot_bridge.services.polling import StatusPoller
from switchbot_bridge.services.switchbot.client import SwitchBotClient, SwitchBotError
from switchbot_bridge.services.switchbot.models import ManagedDevice
from switchbot_bridge.services.switchbot.registry import DeviceRegistry

logger = structlog.get_logger()


class SwitchBotNotConfiguredError(SwitchBotError):
    """Raised when the SwitchBot token or secret is missing."""

    pass


class SwitchBotBridge:
    """One registry and poller per configured credential pair.

    Example:
        async with SwitchBotBridge.from_settings() as bridge:
            for device in bridge.registry.get_all():
                print(device.name, bridge.registry.get_supported_commands(device.id))
    """

    def __init__(
        self,
        client: SwitchBotClient,
        poll_interval_seconds: float = 30.0,
        enforce_command_validation: bool = False,
    ) -> None:
        self.client = client
        self.registry = DeviceRegistry(
            client,
            enforce_command_validation=enforce_command_validation,
        )
        self.poller = StatusPoller(self.registry, interval_seconds=poll_interval_seconds)
        self._started = False

    @classmethod
    def from_settings(cls, settings: Settings | SwitchBotSettings | None = None) -> SwitchBotBridge:
        """Build a bridge from application settings.

        Raises:
            SwitchBotNotConfiguredError: If token or secret is missing.
        """
        settings = settings or get_settings()
        sb = settings.switchbot if isinstance(settings, Settings) else settings

        if not sb.is_configured:
            raise SwitchBotNotConfiguredError(
                "SwitchBot token and secret are required in the configuration"
            )

        client = SwitchBotClient(
            token=sb.token.get_secret_value(),
            secret=sb.secret.get_secret_value(),
            base_url=sb.base_url,
            timeout=sb.request_timeout,
        )
        return cls(
            client,
            poll_interval_seconds=sb.poll_interval_seconds,
            enforce_command_validation=sb.enforce_command_validation,
        )

    @property
    def started(self) -> bool:
        """Check if the bridge has been started."""
        return self._started

    async def __aenter__(self) -> SwitchBotBridge:
        await self.start()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.shutdown()

    async def start(self) -> list[ManagedDevice]:
        """Discover devices, refresh their status once and start polling.

        Returns:
            The discovered devices.

        Raises:
            DiscoveryError, SwitchBotTransportError: Discovery failed; nothing
                is started and the caller may retry.
        """
        await self.client.connect()

        try:
            devices = await self.registry.discover()
        except Exception as e:
            logger.error("SwitchBot bridge failed to start", error=str(e))
            await self.client.close()
            raise

        await self.registry.refresh_all()
        self.poller.start()
        self._started = True
        logger.info("SwitchBot bridge started", devices=len(devices))
        return devices

    async def shutdown(self) -> None:
        """Stop polling and close the API client."""
        await self.poller.stop()
        await self.client.close()
        self._started = False
        logger.info("SwitchBot bridge shut down")
