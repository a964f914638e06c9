"""Command parameter builders.

SwitchBot commands take their argument as a single string whose format depends
on the command. These helpers convert host-side values (percentages, RGB
triples, protocol levels) into that format and reject out-of-range input
before anything is sent.
"""

from __future__ import annotations

MIN_COLOR_TEMPERATURE_K = 2700
MAX_COLOR_TEMPERATURE_K = 6500


class CommandParameterError(ValueError):
    """Raised when a command parameter is out of range."""

    pass


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise CommandParameterError(f"{name} must be between {low} and {high}, got {value}")


def level_to_brightness(level: int, max_level: int = 254) -> int:
    """Convert a protocol dimming level (0..max_level) to a percentage."""
    if max_level <= 0:
        raise CommandParameterError(f"max_level must be positive, got {max_level}")
    _check_range("level", level, 0, max_level)
    return round(level / max_level * 100)


def brightness_parameter(percent: int) -> str:
    """Build the setBrightness parameter (1-100)."""
    _check_range("brightness", percent, 1, 100)
    return str(percent)


def color_parameter(red: int, green: int, blue: int) -> str:
    """Build the setColor parameter ("r:g:b", each 0-255)."""
    for name, value in (("red", red), ("green", green), ("blue", blue)):
        _check_range(name, value, 0, 255)
    return f"{red}:{green}:{blue}"


def mireds_to_kelvin(mireds: int) -> int:
    """Convert a color temperature in mireds to kelvin (rounded)."""
    if mireds <= 0:
        raise CommandParameterError(f"mireds must be positive, got {mireds}")
    return round(1_000_000 / mireds)


def color_temperature_parameter(kelvin: int) -> str:
    """Build the setColorTemperature parameter (2700-6500 K)."""
    _check_range("color temperature", kelvin, MIN_COLOR_TEMPERATURE_K, MAX_COLOR_TEMPERATURE_K)
    return str(kelvin)


def position_parameter(percent: int, mode: str = "ff") -> str:
    """Build the setPosition parameter for curtains.

    Args:
        percent: Target position, 0 (open) to 100 (closed)
        mode: "0" performance, "1" silent, "ff" default
    """
    _check_range("position", percent, 0, 100)
    if mode not in ("0", "1", "ff"):
        raise CommandParameterError(f"Invalid curtain mode: {mode}")
    return f"0,{mode},{percent}"
