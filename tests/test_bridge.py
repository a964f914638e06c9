"""Tests for the SwitchBot bridge service."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
from conftest import failed
from pydantic import SecretStr

from switchbot_bridge.config import Settings, SwitchBotSettings
from switchbot_bridge.services.bridge import SwitchBotBridge, SwitchBotNotConfiguredError
from switchbot_bridge.services.switchbot.client import SwitchBotClient
from switchbot_bridge.services.switchbot.registry import DiscoveryError

# =============================================================================
# Construction Tests
# =============================================================================


class TestFromSettings:
    """Tests for SwitchBotBridge.from_settings()."""

    def test_requires_credentials(self) -> None:
        with pytest.raises(SwitchBotNotConfiguredError):
            SwitchBotBridge.from_settings(
                SwitchBotSettings(token=SecretStr(""), secret=SecretStr(""))
            )

    def test_builds_client(self) -> None:
        settings = SwitchBotSettings(
            token=SecretStr("tok"),
            secret=SecretStr("sec"),
            base_url="https://api.example.test/",
            poll_interval_seconds=5,
            enforce_command_validation=True,
        )

        bridge = SwitchBotBridge.from_settings(settings)

        assert isinstance(bridge.client, SwitchBotClient)
        assert bridge.client.base_url == "https://api.example.test"
        assert bridge.poller.interval_seconds == 5
        assert bridge.registry._enforce_command_validation is True

    def test_accepts_app_settings(self) -> None:
        settings = Settings(
            switchbot=SwitchBotSettings(token=SecretStr("tok"), secret=SecretStr("sec"))
        )

        bridge = SwitchBotBridge.from_settings(settings)

        assert bridge.poller.interval_seconds == 30.0


# =============================================================================
# Lifecycle Tests
# =============================================================================


class TestLifecycle:
    """Tests for start() and shutdown()."""

    async def test_start_discovers_and_refreshes(self, mock_client: MagicMock) -> None:
        bridge = SwitchBotBridge(mock_client, poll_interval_seconds=60)

        devices = await bridge.start()

        assert len(devices) == 5
        assert bridge.started
        assert bridge.poller.is_running
        mock_client.connect.assert_awaited_once()
        assert all(d.last_status is not None for d in bridge.registry.get_all())

        await bridge.shutdown()

        assert not bridge.started
        assert not bridge.poller.is_running
        mock_client.close.assert_awaited_once()

    async def test_start_failure_closes_client(self, mock_client: MagicMock) -> None:
        """Discovery failure leaves nothing running."""
        mock_client.list_devices = AsyncMock(return_value=failed("unauthorized", 401))
        bridge = SwitchBotBridge(mock_client, poll_interval_seconds=60)

        with pytest.raises(DiscoveryError):
            await bridge.start()

        assert not bridge.started
        assert not bridge.poller.is_running
        mock_client.close.assert_awaited_once()

    async def test_unexpected_start_error_closes_client(self, mock_client: MagicMock) -> None:
        """Any startup failure closes the HTTP client before propagating."""
        mock_client.list_devices = AsyncMock(side_effect=RuntimeError("bad payload"))
        bridge = SwitchBotBridge(mock_client, poll_interval_seconds=60)

        with pytest.raises(RuntimeError):
            await bridge.start()

        assert not bridge.started
        assert not bridge.poller.is_running
        mock_client.close.assert_awaited_once()

    async def test_context_manager(self, mock_client: MagicMock) -> None:
        async with SwitchBotBridge(mock_client, poll_interval_seconds=60) as bridge:
            assert bridge.started
            assert "D1" in bridge.registry

        assert not bridge.started
        mock_client.close.assert_awaited_once()
