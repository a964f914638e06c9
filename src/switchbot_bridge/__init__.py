"""SwitchBot Bridge - device discovery, status polling and control for SwitchBot cloud devices."""

__version__ = "0.1.0"
