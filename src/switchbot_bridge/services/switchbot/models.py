"""SwitchBot data models.

Models for the device-abstraction layer:
- Capabilities (what a device can be asked to do)
- Managed devices (registry records)
- Device status (raw vendor payload with typed accessors)
- Commands and scenes
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import datetime
from enum import Enum
from typing import Any

SUCCESS_STATUS_CODE = 100


class CapabilityFlag(str, Enum):
    """Capability flags a device may declare."""

    POWER = "power"
    BRIGHTNESS = "brightness"
    COLOR = "color"
    COLOR_TEMPERATURE = "color_temperature"
    POSITION = "position"
    TEMPERATURE = "temperature"
    HUMIDITY = "humidity"
    BATTERY = "battery"


class CommandType(str, Enum):
    """SwitchBot commandType values."""

    COMMAND = "command"
    CUSTOMIZE = "customize"


@dataclass(frozen=True)
class DeviceCapabilities:
    """Control capabilities of a device.

    Derived solely from device type and origin; never recomputed.
    """

    power: bool = False
    brightness: bool = False
    color: bool = False
    color_temperature: bool = False
    position: bool = False
    temperature: bool = False
    humidity: bool = False
    battery: bool = False

    def supports(self, flag: str | CapabilityFlag) -> bool:
        """Check if a capability flag is set.

        Raises:
            ValueError: If the capability name is unknown.
        """
        return bool(getattr(self, CapabilityFlag(flag).value))

    def enabled(self) -> list[str]:
        """Get names of all enabled capabilities."""
        return [f.name for f in fields(self) if getattr(self, f.name)]

    def to_dict(self) -> dict[str, bool]:
        """Convert to dict for API response."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class DeviceStatus:
    """Last status payload reported by the SwitchBot cloud.

    The vendor schema differs per device family, so the payload is kept as an
    opaque mapping. Accessors cover only the fields consumers read.
    """

    raw: dict[str, Any] = field(default_factory=dict)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a raw field."""
        return self.raw.get(key, default)

    @property
    def device_type(self) -> str | None:
        return self.raw.get("deviceType")

    @property
    def hub_device_id(self) -> str | None:
        return self.raw.get("hubDeviceId")

    @property
    def power(self) -> str | None:
        """Power state string ("on" / "off")."""
        value = self.raw.get("power")
        return str(value).lower() if value is not None else None

    @property
    def is_on(self) -> bool | None:
        """Check if the device reports power on. None when not reported."""
        power = self.power
        if power is None:
            return None
        return power == "on"

    @property
    def brightness(self) -> int | None:
        return _as_int(self.raw.get("brightness"))

    @property
    def color_temperature(self) -> int | None:
        return _as_int(self.raw.get("colorTemperature"))

    @property
    def battery(self) -> int | None:
        return _as_int(self.raw.get("battery"))

    @property
    def temperature(self) -> float | None:
        return _as_float(self.raw.get("temperature"))

    @property
    def humidity(self) -> float | None:
        return _as_float(self.raw.get("humidity"))

    @property
    def slide_position(self) -> int | None:
        """Curtain / roller shade position (0 = open, 100 = closed)."""
        return _as_int(self.raw.get("slidePosition"))

    @property
    def lock_state(self) -> str | None:
        return self.raw.get("lockState")


@dataclass(frozen=True)
class StatusSnapshot:
    """A status payload together with the time it was fetched.

    Replaced as a whole so readers never see a status from one refresh
    paired with the timestamp of another.
    """

    status: DeviceStatus
    updated_at: datetime


@dataclass
class ManagedDevice:
    """A SwitchBot device tracked by the registry.

    Physical devices are addressed natively; infrared devices are remotes
    whose codes are played back through a hub.
    """

    id: str
    name: str
    type: str
    is_infrared: bool
    capabilities: DeviceCapabilities
    hub_device_id: str | None = None
    snapshot: StatusSnapshot | None = None

    @property
    def last_status(self) -> DeviceStatus | None:
        """Most recent status, or None before the first successful refresh."""
        return self.snapshot.status if self.snapshot else None

    @property
    def last_updated(self) -> datetime | None:
        """Time of the most recent successful refresh."""
        return self.snapshot.updated_at if self.snapshot else None

    @property
    def command_type(self) -> CommandType:
        """commandType to send with commands for this device."""
        return CommandType.CUSTOMIZE if self.is_infrared else CommandType.COMMAND

    def to_dict(self) -> dict[str, Any]:
        """Convert to dict for API response."""
        return {
            "id": self.id,
            "name": self.name,
            "type": self.type,
            "is_infrared": self.is_infrared,
            "hub_device_id": self.hub_device_id,
            "capabilities": self.capabilities.to_dict(),
            "last_status": self.last_status.raw if self.last_status else None,
            "last_updated": self.last_updated.isoformat() if self.last_updated else None,
        }


@dataclass
class CommandRequest:
    """Body of a device command request."""

    command: str
    parameter: str | None = None
    command_type: CommandType | None = None

    def to_payload(self) -> dict[str, Any]:
        """Build the JSON body, omitting unset fields."""
        payload: dict[str, Any] = {"command": self.command}
        if self.parameter is not None:
            payload["parameter"] = self.parameter
        if self.command_type is not None:
            payload["commandType"] = self.command_type.value
        return payload


@dataclass
class Scene:
    """A manual scene configured in the SwitchBot app."""

    scene_id: str
    scene_name: str


@dataclass
class ApiResponse:
    """Normalized SwitchBot response envelope."""

    status_code: int
    message: str
    body: Any = None

    @property
    def ok(self) -> bool:
        """Check the vendor success sentinel."""
        return self.status_code == SUCCESS_STATUS_CODE


def _as_int(value: Any) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _as_float(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
