"""Device capability classification for SwitchBot devices.

Maps a device's declared type (and whether it is an infrared remote) to the
control capabilities it supports, and derives the commands that can be sent
to it. This enables:
- Filtering devices by what they can do
- Rejecting invalid commands (e.g. "setBrightness" on a plug)

Classification is a pure function of (type, is_infrared): two devices with the
same type and origin always get the same capabilities.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from switchbot_bridge.services.switchbot.models import CapabilityFlag, DeviceCapabilities

if TYPE_CHECKING:
    from switchbot_bridge.services.switchbot.models import ManagedDevice

NO_CAPABILITIES = DeviceCapabilities()

_POWER = DeviceCapabilities(power=True)
_POWER_BATTERY = DeviceCapabilities(power=True, battery=True)

# Physical devices, keyed by lower-cased deviceType
PHYSICAL_CAPABILITIES: dict[str, DeviceCapabilities] = {
    "bot": _POWER_BATTERY,
    # Plugs
    "plug": _POWER,
    "plug mini (us)": _POWER,
    "plug mini (jp)": _POWER,
    # Lights
    "color bulb": DeviceCapabilities(
        power=True, brightness=True, color=True, color_temperature=True
    ),
    "strip light": DeviceCapabilities(power=True, brightness=True, color=True),
    "strip light 3": DeviceCapabilities(power=True, brightness=True, color=True),
    "ceiling light": DeviceCapabilities(power=True, brightness=True, color_temperature=True),
    # Covers
    "curtain": DeviceCapabilities(power=True, position=True, battery=True),
    "roller shade": DeviceCapabilities(power=True, position=True, battery=True),
    # Environmental sensors
    "meter": DeviceCapabilities(temperature=True, humidity=True, battery=True),
    "meter plus": DeviceCapabilities(temperature=True, humidity=True, battery=True),
    "meter pro": DeviceCapabilities(temperature=True, humidity=True, battery=True),
    "outdoor meter": DeviceCapabilities(temperature=True, humidity=True, battery=True),
    # Air
    "humidifier": DeviceCapabilities(power=True, humidity=True),
    "evaporative humidifier": DeviceCapabilities(power=True, humidity=True),
    "air purifier": _POWER,
    "air purifier voc": _POWER,
    "air purifier table voc": _POWER,
    "air purifier pm2.5": _POWER,
    # Locks
    "lock": _POWER_BATTERY,
    "lock pro": _POWER_BATTERY,
    "lock ultra": _POWER_BATTERY,
    "lock lite": _POWER_BATTERY,
    # Battery-only sensors
    "motion sensor": DeviceCapabilities(battery=True),
    "contact sensor": DeviceCapabilities(battery=True),
    "water leak detector": DeviceCapabilities(battery=True),
    # Robot cleaners
    "robot vacuum cleaner s1": _POWER_BATTERY,
    "robot vacuum cleaner s1 plus": _POWER_BATTERY,
    "robot vacuum cleaner k10+": _POWER_BATTERY,
    "robot vacuum cleaner k10+ pro": _POWER_BATTERY,
    "robot vacuum cleaner s10": _POWER_BATTERY,
    "robot vacuum cleaner s20": _POWER_BATTERY,
    "robot vacuum cleaner k20+ pro": _POWER_BATTERY,
}

# Infrared remotes only expose power: remote-code playback gives no feedback
INFRARED_CAPABILITIES: dict[str, DeviceCapabilities] = {
    remote_type: _POWER
    for remote_type in (
        "air conditioner",
        "tv",
        "light",
        "fan",
        "projector",
        "speaker",
        "water heater",
        "air purifier",
        "set top box",
        "dvd",
        "camera",
    )
}

# Base commands per capability, in the order they are offered
CAPABILITY_COMMANDS: list[tuple[CapabilityFlag, tuple[str, ...]]] = [
    (CapabilityFlag.POWER, ("turnOn", "turnOff")),
    (CapabilityFlag.BRIGHTNESS, ("setBrightness",)),
    (CapabilityFlag.COLOR, ("setColor",)),
    (CapabilityFlag.COLOR_TEMPERATURE, ("setColorTemperature",)),
    (CapabilityFlag.POSITION, ("setPosition", "pause")),
]

# Extra commands for physical devices whose type contains the key
TYPE_COMMANDS: list[tuple[str, tuple[str, ...]]] = [
    ("lock", ("lock", "unlock")),
    ("robot vacuum", ("start", "stop", "dock")),
    ("humidifier", ("setMode",)),
]


def normalize_type(device_type: str) -> str:
    """Normalize a device type string for matching."""
    return device_type.strip().lower()


def classify(device_type: str, is_infrared: bool) -> DeviceCapabilities:
    """Determine device capabilities based on type.

    Args:
        device_type: SwitchBot deviceType (physical) or remoteType (infrared)
        is_infrared: Whether the device is an infrared remote

    Returns:
        DeviceCapabilities; all flags False for unrecognized types.
    """
    table = INFRARED_CAPABILITIES if is_infrared else PHYSICAL_CAPABILITIES
    return table.get(normalize_type(device_type), NO_CAPABILITIES)


def derive_commands(
    capabilities: DeviceCapabilities,
    device_type: str,
    is_infrared: bool,
) -> list[str]:
    """Derive the ordered list of commands a device accepts.

    Infrared remotes only get the power pair. Type-specific extensions apply
    to recognized physical devices only, so an unmapped type never gains
    commands.
    """
    commands: list[str] = []

    for flag, flag_commands in CAPABILITY_COMMANDS:
        if is_infrared and flag is not CapabilityFlag.POWER:
            continue
        if capabilities.supports(flag):
            commands.extend(flag_commands)

    type_lower = normalize_type(device_type)
    if not is_infrared and type_lower in PHYSICAL_CAPABILITIES:
        for fragment, extra in TYPE_COMMANDS:
            if fragment in type_lower:
                commands.extend(extra)

    return commands


def supported_commands(device: ManagedDevice) -> list[str]:
    """Get supported commands for a device."""
    return derive_commands(device.capabilities, device.type, device.is_infrared)


def is_command_supported(device: ManagedDevice, command: str) -> bool:
    """Validate if a command is supported by a device."""
    return command in supported_commands(device)
