"""Stub adapter for platforms other than FreeBSD and Linux."""
from __future__ import annotations

import platform

from batlab.errors import BatteryNotFoundError, ResourceUnavailableError
from batlab.models import BatteryCapacity, BatteryInfo
from batlab.platform_base import PlatformTelemetry


class UnsupportedTelemetry(PlatformTelemetry):
    name = "unsupported"
    label = "Unknown"

    def get_battery_info(self) -> BatteryInfo:
        raise BatteryNotFoundError()

    def get_battery_capacity(self) -> BatteryCapacity | None:
        return None

    def get_cpu_load(self) -> float:
        raise ResourceUnavailableError(f"CPU load on {platform.system() or 'this platform'}")

    def get_memory_usage(self) -> float:
        raise ResourceUnavailableError(f"Memory usage on {platform.system() or 'this platform'}")

    def get_temperature(self) -> float:
        raise ResourceUnavailableError(
            f"Temperature sensors on {platform.system() or 'this platform'}"
        )
