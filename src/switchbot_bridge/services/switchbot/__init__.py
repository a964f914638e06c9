"""SwitchBot integration service.

Provides:
- SwitchBotClient for signed API communication
- Capability classification and command derivation
- DeviceRegistry for discovery, status refresh and command dispatch
"""

from switchbot_bridge.services.switchbot.capabilities import (
    classify,
    derive_commands,
    is_command_supported,
    supported_commands,
)
from switchbot_bridge.services.switchbot.client import (
    SwitchBotClient,
    SwitchBotError,
    SwitchBotTransportError,
    build_auth_headers,
)
from switchbot_bridge.services.switchbot.commands import CommandParameterError
from switchbot_bridge.services.switchbot.models import (
    ApiResponse,
    CapabilityFlag,
    CommandRequest,
    CommandType,
    DeviceCapabilities,
    DeviceStatus,
    ManagedDevice,
    Scene,
    StatusSnapshot,
)
from switchbot_bridge.services.switchbot.registry import DeviceRegistry, DiscoveryError

__all__ = [
    "ApiResponse",
    "CapabilityFlag",
    "CommandParameterError",
    "CommandRequest",
    "CommandType",
    "DeviceCapabilities",
    "DeviceRegistry",
    "DeviceStatus",
    "DiscoveryError",
    "ManagedDevice",
    "Scene",
    "StatusSnapshot",
    "SwitchBotClient",
    "SwitchBotError",
    "SwitchBotTransportError",
    "build_auth_headers",
    "classify",
    "derive_commands",
    "is_command_supported",
    "supported_commands",
]
