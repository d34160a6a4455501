"""Error taxonomy for telemetry acquisition.

Battery failures are fatal to a sample; every other ``TelemetryError`` is
recovered by the collector. ``BatteryError`` subclasses ``TelemetryError`` so
``except TelemetryError`` catches both families.
"""
from __future__ import annotations


class TelemetryError(Exception):
    """Base class for all telemetry acquisition failures."""


class CommandFailedError(TelemetryError):
    """``returncode`` is None when the command could not be started at all."""

    def __init__(self, command: str, message: str, returncode: int | None = None) -> None:
        self.command = command
        self.message = message
        self.returncode = returncode
        super().__init__(f"Command failed: {command} - {message}")


class TelemetryParseError(TelemetryError):
    def __init__(self, context: str, message: str) -> None:
        self.context = context
        self.message = message
        super().__init__(f"Parse error in {context}: {message}")


class TelemetryPermissionError(TelemetryError):
    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(f"Permission denied: {resource}")


class ResourceUnavailableError(TelemetryError):
    def __init__(self, resource: str) -> None:
        self.resource = resource
        super().__init__(f"Resource unavailable: {resource}")


class TelemetryIOError(TelemetryError):
    def __init__(self, path: str, message: str) -> None:
        self.path = path
        self.message = message
        super().__init__(f"IO error: {path}: {message}")


class SerializationError(TelemetryError):
    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(f"Serialization error: {message}")


class BatteryError(TelemetryError):
    """Base class for battery acquisition failures."""


class BatteryNotFoundError(BatteryError):
    def __init__(self) -> None:
        super().__init__("Battery not found")


class BatteryChargingError(BatteryError):
    """The battery is charging, so power draw cannot be measured."""

    def __init__(self, source: str | None = None) -> None:
        self.source = source
        message = "Battery is charging"
        if source:
            message = f"{message} (reported by {source})"
        super().__init__(message)


class BatteryParseError(BatteryError):
    def __init__(self, field: str, value: str) -> None:
        self.field = field
        self.value = value
        super().__init__(f"Failed to parse {field}: {value}")


class BatteryPermissionError(BatteryError):
    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"Permission denied accessing battery via {tool}")


class BatteryToolUnavailableError(BatteryError):
    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(f"Battery tool not available: {tool}")
