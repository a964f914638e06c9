"""Device registry for SwitchBot devices.

Owns the authoritative in-memory set of discovered devices and mediates every
read, status refresh and command dispatch.

Concurrency model (asyncio):
- Discovery builds a new mapping and swaps it in with one assignment, so
  readers see either the previous or the new device set, never a partial one.
- A status refresh replaces a device's StatusSnapshot with one assignment.
- No lock is held across network calls.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import UTC, datetime
from typing import Any

from switchbot_bridge.services.switchbot import capabilities
from switchbot_bridge.services.switchbot.client import (
    SwitchBotClient,
    SwitchBotError,
    SwitchBotTransportError,
)
from switchbot_bridge.services.switchbot.models import (
    CapabilityFlag,
    CommandRequest,
    DeviceStatus,
    ManagedDevice,
    Scene,
    StatusSnapshot,
)

logger = logging.getLogger(__name__)


class DiscoveryError(SwitchBotError):
    """Raised when the API reports a failure while listing devices."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"Failed to get devices: {message}")
        self.status_code = status_code
        self.message = message


class DeviceRegistry:
    """Registry of SwitchBot devices keyed by device ID.

    Example:
        registry = DeviceRegistry(client)
        await registry.discover()
        for device in registry.get_by_capability("brightness"):
            if registry.is_command_supported(device.id, "setBrightness"):
                await registry.send_command(device.id, "setBrightness", "50")
    """

    def __init__(
        self,
        client: SwitchBotClient,
        enforce_command_validation: bool = False,
    ) -> None:
        """Initialize the registry.

        Args:
            client: SwitchBot API client
            enforce_command_validation: Reject commands the device does not
                support before sending them. Off by default, in which case
                callers validate with is_command_supported().
        """
        self._client = client
        self._enforce_command_validation = enforce_command_validation
        self._devices: dict[str, ManagedDevice] = {}

    def __len__(self) -> int:
        return len(self._devices)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._devices

    # =========================================================================
    # Discovery
    # =========================================================================

    async def discover(self) -> list[ManagedDevice]:
        """Discover and categorize all SwitchBot devices.

        Replaces the whole registry on success.

        Returns:
            The new device list.

        Raises:
            DiscoveryError: The API reported a failure; registry unchanged.
            SwitchBotTransportError: The request failed; registry unchanged.
        """
        logger.info("Starting device discovery...")

        try:
            response = await self._client.list_devices()
        except SwitchBotTransportError as e:
            logger.error("Device discovery failed: %s", e)
            raise

        if not response.ok:
            logger.error("Device discovery failed: %s", response.message)
            raise DiscoveryError(response.status_code, response.message)

        body = response.body if isinstance(response.body, dict) else {}
        physical = body.get("deviceList") or []
        infrared = body.get("infraredRemoteList") or []

        devices: dict[str, ManagedDevice] = {}
        for record in physical:
            device = self._parse_physical(record)
            devices[device.id] = device
            logger.info("Discovered physical device: %s (%s)", device.name, device.type)

        for record in infrared:
            device = self._parse_infrared(record)
            devices[device.id] = device
            logger.info("Discovered infrared device: %s (%s)", device.name, device.type)

        self._devices = devices
        logger.info(
            "Discovery complete: %d physical, %d infrared devices",
            len(physical),
            len(infrared),
        )
        return list(devices.values())

    def _parse_physical(self, record: dict[str, Any]) -> ManagedDevice:
        """Parse a deviceList entry."""
        device_type = record.get("deviceType") or ""
        return ManagedDevice(
            id=record.get("deviceId") or "",
            name=record.get("deviceName") or "",
            type=device_type,
            is_infrared=False,
            hub_device_id=record.get("hubDeviceId") or None,
            capabilities=capabilities.classify(device_type, is_infrared=False),
        )

    def _parse_infrared(self, record: dict[str, Any]) -> ManagedDevice:
        """Parse an infraredRemoteList entry."""
        remote_type = record.get("remoteType") or ""
        return ManagedDevice(
            id=record.get("deviceId") or "",
            name=record.get("deviceName") or "",
            type=remote_type,
            is_infrared=True,
            hub_device_id=record.get("hubDeviceId") or None,
            capabilities=capabilities.classify(remote_type, is_infrared=True),
        )

    # =========================================================================
    # Reads
    # =========================================================================

    def get_all(self) -> list[ManagedDevice]:
        """Get all managed devices."""
        return list(self._devices.values())

    def get(self, device_id: str) -> ManagedDevice | None:
        """Get a device by ID, or None if unknown."""
        return self._devices.get(device_id)

    def list_device_ids(self) -> list[str]:
        """List IDs of all managed devices."""
        return list(self._devices.keys())

    def get_by_type(self, device_type: str) -> list[ManagedDevice]:
        """Get devices whose type contains the given string (case-insensitive)."""
        query = device_type.lower()
        return [d for d in self._devices.values() if query in d.type.lower()]

    def get_by_capability(self, flag: str | CapabilityFlag) -> list[ManagedDevice]:
        """Get devices with a specific capability.

        Raises:
            ValueError: If the capability name is unknown.
        """
        flag = CapabilityFlag(flag)
        return [d for d in self._devices.values() if d.capabilities.supports(flag)]

    def get_supported_commands(self, device_id: str) -> list[str]:
        """Get supported commands for a device (empty if unknown)."""
        device = self._devices.get(device_id)
        if device is None:
            return []
        return capabilities.supported_commands(device)

    def is_command_supported(self, device_id: str, command: str) -> bool:
        """Validate if a command is supported by a device."""
        return command in self.get_supported_commands(device_id)

    # =========================================================================
    # Status refresh
    # =========================================================================

    async def refresh_status(self, device_id: str) -> DeviceStatus | None:
        """Fetch and store the current status of one device.

        Failures are logged, never raised, and leave the device untouched.

        Returns:
            The new DeviceStatus, or None if the device is unknown or the
            refresh failed.
        """
        device = self._devices.get(device_id)
        if device is None:
            logger.warning("Device %s not found", device_id)
            return None

        try:
            response = await self._client.get_device_status(device_id)
        except SwitchBotTransportError as e:
            logger.error("Error updating status for %s: %s", device.name, e)
            return None

        if not response.ok:
            logger.warning("Failed to get status for %s: %s", device.name, response.message)
            return None

        body = response.body if isinstance(response.body, dict) else {}
        status = DeviceStatus(raw=dict(body))
        device.snapshot = StatusSnapshot(status=status, updated_at=datetime.now(UTC))
        logger.debug("Updated status for %s", device.name)
        return status

    async def refresh_all(self) -> None:
        """Refresh every device concurrently.

        Waits for all refreshes to settle. One device failing never cancels
        or aborts the others, and this method never raises.
        """
        device_ids = list(self._devices.keys())
        if not device_ids:
            return

        results = await asyncio.gather(
            *(self.refresh_status(device_id) for device_id in device_ids),
            return_exceptions=True,
        )

        for device_id, result in zip(device_ids, results):
            if isinstance(result, Exception):
                logger.error("Unexpected error refreshing %s: %s", device_id, result)

        refreshed = sum(1 for r in results if isinstance(r, DeviceStatus))
        logger.debug("Refreshed %d/%d device statuses", refreshed, len(device_ids))

    # =========================================================================
    # Commands
    # =========================================================================

    async def send_command(
        self,
        device_id: str,
        command: str,
        parameter: str | None = None,
    ) -> bool:
        """Send a command to a device.

        Args:
            device_id: Target device ID
            command: Command name (e.g. "turnOn", "setBrightness")
            parameter: Optional command parameter

        Returns:
            True if the API accepted the command.

        Raises:
            SwitchBotTransportError: The request failed.
        """
        device = self._devices.get(device_id)
        if device is None:
            logger.warning("Device %s not found", device_id)
            return False

        if self._enforce_command_validation and not capabilities.is_command_supported(
            device, command
        ):
            logger.warning("Command '%s' is not supported by %s", command, device.name)
            return False

        request = CommandRequest(
            command=command,
            parameter=parameter,
            command_type=device.command_type,
        )

        try:
            response = await self._client.send_command(device_id, request)
        except SwitchBotTransportError as e:
            logger.error("Error sending command to %s: %s", device.name, e)
            raise

        if response.ok:
            logger.info("Command '%s' sent successfully to %s", command, device.name)
            return True

        logger.error("Command failed for %s: %s", device.name, response.message)
        return False

    # =========================================================================
    # Scenes
    # =========================================================================

    async def list_scenes(self) -> list[Scene]:
        """Get manual scenes (empty on API failure)."""
        response = await self._client.list_scenes()
        if not response.ok:
            logger.warning("Failed to get scenes: %s", response.message)
            return []

        records = response.body if isinstance(response.body, list) else []
        return [
            Scene(scene_id=r.get("sceneId", ""), scene_name=r.get("sceneName", ""))
            for r in records
            if isinstance(r, dict)
        ]

    async def execute_scene(self, scene_id: str) -> bool:
        """Execute a manual scene.

        Returns:
            True if the API accepted the request.
        """
        response = await self._client.execute_scene(scene_id)
        if response.ok:
            logger.info("Scene %s executed", scene_id)
            return True

        logger.error("Scene %s failed: %s", scene_id, response.message)
        return False
