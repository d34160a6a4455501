"""batlab battery and system telemetry acquisition."""

from batlab.collector import TelemetryCollector, collect_telemetry, create_telemetry
from batlab.config import AppConfig, default_config, load_config
from batlab.errors import (
    BatteryChargingError,
    BatteryError,
    BatteryNotFoundError,
    TelemetryError,
)
from batlab.models import BatteryCapacity, BatteryInfo, RunMetadata, SystemInfo, TelemetrySample
from batlab.parsing import contains_charging_state, parse_field
from batlab.schema import validate_payload

__all__ = [
    "AppConfig",
    "BatteryCapacity",
    "BatteryChargingError",
    "BatteryError",
    "BatteryInfo",
    "BatteryNotFoundError",
    "RunMetadata",
    "SystemInfo",
    "TelemetryCollector",
    "TelemetryError",
    "TelemetrySample",
    "collect_telemetry",
    "contains_charging_state",
    "create_telemetry",
    "default_config",
    "load_config",
    "parse_field",
    "validate_payload",
]
