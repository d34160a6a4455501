from __future__ import annotations

from datetime import datetime, timezone
import logging
import platform
from typing import Callable

from batlab.config import AppConfig, default_config
from batlab.errors import TelemetryError
from batlab.freebsd import FreeBSDTelemetry
from batlab.linux import LinuxTelemetry
from batlab.models import BatteryCapacity, RunMetadata, SystemInfo, TelemetrySample
from batlab.platform_base import PlatformTelemetry
from batlab.sysinfo import generate_auto_config_name, generate_run_id, get_system_info
from batlab.unsupported import UnsupportedTelemetry

UNAVAILABLE = 0.0

_ADAPTERS: dict[str, type[PlatformTelemetry]] = {
    "freebsd": FreeBSDTelemetry,
    "linux": LinuxTelemetry,
}


def create_telemetry(
    config: AppConfig | None = None, system: str | None = None
) -> PlatformTelemetry:
    """Pick the adapter for ``system`` (default: the running platform)."""
    system_name = (system if system is not None else platform.system()).lower()
    adapter = _ADAPTERS.get(system_name, UnsupportedTelemetry)
    return adapter(config or default_config())


class TelemetryCollector:
    def __init__(
        self,
        config: AppConfig | None = None,
        telemetry: PlatformTelemetry | None = None,
    ) -> None:
        self.config = config or default_config()
        self.telemetry = telemetry or create_telemetry(self.config)
        self.logger = logging.getLogger(self.__class__.__name__)

    def collect(self) -> TelemetrySample:
        """Take one sample.

        Battery failures propagate. CPU load, memory and temperature failures
        are logged and reported as 0.0.
        """
        self.logger.debug("Collecting telemetry sample via %s.", self.telemetry.name)
        timestamp = datetime.now(timezone.utc)
        battery = self.telemetry.get_battery_info()

        sample = TelemetrySample(
            timestamp=timestamp,
            percentage=battery.percentage,
            watts=battery.watts,
            cpu_load=self._recover("CPU load", self.telemetry.get_cpu_load),
            ram_pct=self._recover("memory usage", self.telemetry.get_memory_usage),
            temp_c=self._recover("temperature", self.telemetry.get_temperature),
            source=battery.source,
        )
        self.logger.debug("Completed telemetry sample: %s", sample)
        return sample

    def battery_capacity(self) -> BatteryCapacity | None:
        return self.telemetry.get_battery_capacity()

    def system_info(self) -> SystemInfo:
        return get_system_info(self.telemetry)

    def run_metadata(
        self,
        config_name: str | None = None,
        workload: str | None = None,
        sampling_hz: float | None = None,
    ) -> RunMetadata:
        run = self.config.run
        system = self.system_info()
        config_name = config_name or run.config_name or generate_auto_config_name(
            self.telemetry.name, system.cpu
        )
        workload = workload or run.workload
        start_time = datetime.now(timezone.utc)
        try:
            capacity = self.battery_capacity()
        except TelemetryError as exc:
            self.logger.warning("Battery capacity unavailable: %s", exc)
            capacity = None
        return RunMetadata(
            run_id=generate_run_id(
                config_name, workload, system.hostname, self.telemetry.label, start_time
            ),
            system=system,
            config=config_name,
            workload=workload,
            start_time=start_time,
            sampling_hz=sampling_hz if sampling_hz is not None else run.sampling_hz,
            battery_capacity=capacity,
        )

    def _recover(self, metric: str, reader: Callable[[], float]) -> float:
        try:
            return reader()
        except TelemetryError as exc:
            self.logger.warning("%s unavailable, recording %.1f: %s", metric, UNAVAILABLE, exc)
            return UNAVAILABLE


def collect_telemetry(config: AppConfig | None = None) -> TelemetrySample:
    return TelemetryCollector(config).collect()
