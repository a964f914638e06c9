"""Shared fixtures for SwitchBot Bridge tests."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from switchbot_bridge.services.switchbot.client import SwitchBotClient
from switchbot_bridge.services.switchbot.models import ApiResponse
from switchbot_bridge.services.switchbot.registry import DeviceRegistry


def ok(body: Any) -> ApiResponse:
    """Build a successful API response."""
    return ApiResponse(status_code=100, message="success", body=body)


def failed(message: str = "error", status_code: int = 190) -> ApiResponse:
    """Build a vendor-reported failure."""
    return ApiResponse(status_code=status_code, message=message, body={})


@pytest.fixture
def device_list_body() -> dict[str, Any]:
    """A /v1.1/devices body with physical devices and infrared remotes."""
    return {
        "deviceList": [
            {
                "deviceId": "D1",
                "deviceName": "Desk Bot",
                "deviceType": "Bot",
                "enableCloudService": True,
                "hubDeviceId": "HUB1",
            },
            {
                "deviceId": "D3",
                "deviceName": "Front Door",
                "deviceType": "Lock Pro",
                "enableCloudService": True,
                "hubDeviceId": "",
            },
            {
                "deviceId": "D4",
                "deviceName": "Living Room Bulb",
                "deviceType": "Color Bulb",
                "enableCloudService": True,
            },
            {
                "deviceId": "D5",
                "deviceName": "Bedroom Meter",
                "deviceType": "Meter",
                "enableCloudService": True,
                "hubDeviceId": "HUB1",
            },
        ],
        "infraredRemoteList": [
            {
                "deviceId": "D2",
                "deviceName": "Living Room TV",
                "remoteType": "TV",
                "hubDeviceId": "HUB1",
            },
        ],
    }


@pytest.fixture
def mock_client(device_list_body: dict[str, Any]) -> MagicMock:
    """A SwitchBotClient double whose calls succeed by default."""
    client = MagicMock(spec=SwitchBotClient)
    client.list_devices = AsyncMock(return_value=ok(device_list_body))
    client.get_device_status = AsyncMock(
        side_effect=lambda device_id: ok({"deviceId": device_id, "power": "on", "battery": 90})
    )
    client.send_command = AsyncMock(return_value=ok({}))
    client.list_scenes = AsyncMock(return_value=ok([]))
    client.execute_scene = AsyncMock(return_value=ok({}))
    client.connect = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def registry(mock_client: MagicMock) -> DeviceRegistry:
    """An empty registry backed by the mock client."""
    return DeviceRegistry(mock_client)


@pytest.fixture
async def discovered_registry(registry: DeviceRegistry) -> DeviceRegistry:
    """A registry populated from device_list_body."""
    await registry.discover()
    return registry
