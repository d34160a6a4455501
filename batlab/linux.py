"""Linux telemetry via ``upower``, sysfs and procfs.

Battery sources, in priority order:

1. ``upower -e`` / ``upower -i <device>``
2. ``/sys/class/power_supply/BAT*``
"""
from __future__ import annotations

from pathlib import Path

from batlab.chain import HardStop, Outcome, SoftFail, Source, Success, run_chain, run_optional_chain
from batlab.errors import (
    BatteryChargingError,
    BatteryError,
    BatteryNotFoundError,
    BatteryParseError,
    BatteryPermissionError,
    BatteryToolUnavailableError,
    CommandFailedError,
    ResourceUnavailableError,
    TelemetryParseError,
    TelemetryPermissionError,
)
from batlab.models import BatteryCapacity, BatteryInfo
from batlab.parsing import (
    contains_charging_state,
    is_charging_status,
    parse_field,
    parse_load_average,
    parse_meminfo,
    parse_optional_field,
)
from batlab.platform_base import PlatformTelemetry
from batlab.units import (
    clamp_percentage,
    memory_usage_pct,
    millicelsius_to_celsius,
    uah_to_wh,
    uv_ua_to_w,
    uw_to_w,
    uwh_to_wh,
)


class LinuxTelemetry(PlatformTelemetry):
    name = "linux"
    label = "Linux"

    def get_battery_info(self) -> BatteryInfo:
        return run_chain(
            [
                Source("upower", self._upower_battery),
                Source("sysfs", self._sysfs_battery),
            ]
        )

    def get_battery_capacity(self) -> BatteryCapacity | None:
        return run_optional_chain(
            [
                Source("upower", self._upower_capacity),
                Source("sysfs", self._sysfs_capacity),
            ]
        )

    def get_cpu_load(self) -> float:
        path = self.config.paths.loadavg_path
        return parse_load_average(self._read_file(path), path)

    def get_memory_usage(self) -> float:
        path = self.config.paths.meminfo_path
        meminfo = parse_meminfo(self._read_file(path))
        for key in ("MemTotal", "MemAvailable"):
            if key not in meminfo:
                raise TelemetryParseError(path, f"{key} not found")
        return memory_usage_pct(meminfo["MemTotal"], meminfo["MemAvailable"])

    def get_temperature(self) -> float:
        """First populated thermal zone, then the first populated hwmon input."""
        paths = self.config.paths
        candidates = [
            *sorted(Path(paths.thermal_dir).glob("thermal_zone*/temp")),
            *sorted(Path(paths.hwmon_dir).glob("hwmon*/temp*_input")),
        ]
        for sensor in candidates:
            raw = self._read_number(sensor)
            if raw is None:
                continue
            if raw > 0:
                return millicelsius_to_celsius(raw)
            self.logger.debug("Skipping unpopulated temperature sensor %s", sensor)
        raise ResourceUnavailableError("thermal zones and hwmon sensors")

    def describe_os(self) -> str:
        content = self._read_optional(self.config.paths.os_release_path)
        for line in (content or "").splitlines():
            if line.startswith("PRETTY_NAME="):
                return line.split("=", 1)[1].strip().strip('"')
        return super().describe_os()

    def describe_cpu(self) -> str:
        content = self._read_optional(self.config.paths.cpuinfo_path)
        for line in (content or "").splitlines():
            if line.startswith("model name"):
                return line.split(":", 1)[1].strip() if ":" in line else "unknown"
        return "unknown"

    def _upower(self, *args: str) -> str:
        try:
            return self._run_command([self.config.tools.upower_path, *args])
        except CommandFailedError as exc:
            raise BatteryToolUnavailableError("upower") from exc
        except TelemetryPermissionError as exc:
            raise BatteryPermissionError("upower") from exc

    def _upower_device_info(self) -> str:
        devices = self._upower("-e")
        device = next(
            (line.strip() for line in devices.splitlines() if "BAT" in line), None
        )
        if device is None:
            raise BatteryNotFoundError()
        return self._upower("-i", device)

    def _upower_battery(self) -> Outcome[BatteryInfo]:
        try:
            info = self._upower_device_info()
        except BatteryError as exc:
            return SoftFail(str(exc), exc)

        # Only the "state:" line counts; history entries never match.
        if contains_charging_state(info):
            return HardStop(BatteryChargingError("upower"))

        try:
            percentage = parse_field(info, "percentage")
        except BatteryParseError as exc:
            return SoftFail(str(exc), exc)

        # upower already reports the rate in W
        watts = parse_optional_field(info, "energy-rate") or 0.0

        return Success(
            BatteryInfo(
                percentage=clamp_percentage(percentage),
                watts=max(watts, 0.0),
                source="upower",
            )
        )

    def _upower_capacity(self) -> Outcome[BatteryCapacity]:
        try:
            info = self._upower_device_info()
        except BatteryError as exc:
            return SoftFail(str(exc), exc)

        # The colon keeps "energy-full" from matching "energy-full-design".
        capacity = BatteryCapacity(
            design_wh=parse_optional_field(info, "energy-full-design:"),
            full_wh=parse_optional_field(info, "energy-full:"),
        )
        if capacity.is_empty:
            return SoftFail("upower reported no energy-full fields")
        return Success(capacity)

    def _battery_dirs(self) -> list[Path]:
        root = Path(self.config.paths.power_supply_dir)
        try:
            entries = sorted(root.iterdir())
        except OSError:
            return []
        return [entry for entry in entries if entry.name.startswith("BAT")]

    def _sysfs_battery(self) -> Outcome[BatteryInfo]:
        batteries = self._battery_dirs()
        if not batteries:
            return SoftFail(f"no BAT* entries in {self.config.paths.power_supply_dir}")

        for battery in batteries:
            outcome = self._sysfs_battery_info(battery)
            if not isinstance(outcome, SoftFail):
                return outcome
            self.logger.debug("Skipping %s: %s", battery.name, outcome.reason)
        return SoftFail("no readable battery in sysfs")

    def _sysfs_battery_info(self, battery: Path) -> Outcome[BatteryInfo]:
        capacity_path = battery / "capacity"
        raw = self._read_optional(capacity_path)
        if raw is None:
            error: BatteryError = BatteryPermissionError(str(capacity_path))
            return SoftFail(str(error), error)
        try:
            percentage = float(raw)
        except ValueError:
            error = BatteryParseError("capacity", raw)
            return SoftFail(str(error), error)

        status = self._read_optional(battery / "status")
        if status is not None and is_charging_status(status):
            return HardStop(BatteryChargingError("sysfs"))

        return Success(
            BatteryInfo(
                percentage=clamp_percentage(percentage),
                watts=self._sysfs_power_watts(battery),
                source="sysfs",
            )
        )

    def _sysfs_power_watts(self, battery: Path) -> float:
        power_uw = self._read_number(battery / "power_now")
        if power_uw is not None:
            return uw_to_w(power_uw)

        voltage_uv = self._read_number(battery / "voltage_now")
        current_ua = self._read_number(battery / "current_now")
        if voltage_uv is not None and current_ua is not None:
            return uv_ua_to_w(voltage_uv, current_ua)

        return 0.0

    def _sysfs_capacity(self) -> Outcome[BatteryCapacity]:
        batteries = self._battery_dirs()
        if not batteries:
            return SoftFail(f"no BAT* entries in {self.config.paths.power_supply_dir}")

        battery = batteries[0]
        design_wh = uwh_to_wh(self._read_number(battery / "energy_full_design"))
        full_wh = uwh_to_wh(self._read_number(battery / "energy_full"))

        # Batteries without energy_* attributes report charge in uAh instead.
        if design_wh is None and full_wh is None:
            voltage_uv = self._read_number(battery / "voltage_min_design")
            design_wh = uah_to_wh(self._read_number(battery / "charge_full_design"), voltage_uv)
            full_wh = uah_to_wh(self._read_number(battery / "charge_full"), voltage_uv)

        capacity = BatteryCapacity(design_wh=design_wh, full_wh=full_wh)
        if capacity.is_empty:
            return SoftFail(f"{battery.name} reports no capacity attributes")
        return Success(capacity)
