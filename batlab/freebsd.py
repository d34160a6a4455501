"""FreeBSD telemetry via ``acpiconf`` and ``sysctl``.

Battery sources, in priority order:

1. ``acpiconf -i <unit>`` (ACPI battery interface)
2. ``sysctl hw.acpi.battery.*``
"""
from __future__ import annotations

from batlab.chain import HardStop, Outcome, SoftFail, Source, Success, run_chain, run_optional_chain
from batlab.errors import (
    BatteryChargingError,
    BatteryError,
    BatteryParseError,
    BatteryPermissionError,
    BatteryToolUnavailableError,
    CommandFailedError,
    ResourceUnavailableError,
    TelemetryError,
    TelemetryParseError,
    TelemetryPermissionError,
)
from batlab.models import BatteryCapacity, BatteryInfo
from batlab.parsing import (
    contains_charging_state,
    parse_field,
    parse_load_average,
    parse_number,
    parse_optional_field,
    parse_temperature,
)
from batlab.platform_base import PlatformTelemetry
from batlab.units import clamp_percentage, memory_usage_pct, mw_to_w, mwh_to_wh

# hw.acpi.battery.state bit set while the battery charges
ACPI_BATTERY_STATE_CHARGING = 0x2

CPU_TEMPERATURE_SYSCTL = "dev.cpu.0.temperature"
THERMAL_ZONE_SYSCTLS = (
    "hw.acpi.thermal.tz0.temperature",
    "hw.acpi.thermal.tz1.temperature",
    "dev.acpi_tz.0.temperature",
)


class FreeBSDTelemetry(PlatformTelemetry):
    name = "freebsd"
    label = "FreeBSD"

    def get_battery_info(self) -> BatteryInfo:
        return run_chain(
            [
                Source("acpiconf", self._acpiconf_battery),
                Source("sysctl", self._sysctl_battery),
            ]
        )

    def get_battery_capacity(self) -> BatteryCapacity | None:
        # hw.acpi.battery.* carries no capacity figures, so acpiconf is the only source.
        return run_optional_chain([Source("acpiconf", self._acpiconf_capacity)])

    def get_cpu_load(self) -> float:
        return parse_load_average(self._sysctl("vm.loadavg"), "vm.loadavg")

    def get_memory_usage(self) -> float:
        total_pages = self._sysctl_int("vm.stats.vm.v_page_count")
        free_pages = self._sysctl_int("vm.stats.vm.v_free_count")
        return memory_usage_pct(total_pages, free_pages)

    def get_temperature(self) -> float:
        """CPU core 0 sensor first, then the ACPI thermal zones."""
        for name in (CPU_TEMPERATURE_SYSCTL, *THERMAL_ZONE_SYSCTLS):
            try:
                temp_c = parse_temperature(self._sysctl(name), name)
            except TelemetryError as exc:
                self.logger.debug("Temperature sensor %s unavailable: %s", name, exc)
                continue
            if temp_c > 0:
                return temp_c
            self.logger.debug("Skipping unpopulated temperature sensor %s", name)
        raise ResourceUnavailableError("thermal sensors")

    def describe_os(self) -> str:
        try:
            version = self._run_command([self.config.tools.freebsd_version_path]).strip()
        except TelemetryError:
            return super().describe_os()
        return f"FreeBSD {version}" if version else "FreeBSD"

    def describe_cpu(self) -> str:
        try:
            return self._sysctl("hw.model") or "unknown"
        except TelemetryError:
            return "unknown"

    def _acpiconf_info(self) -> str:
        tools = self.config.tools
        try:
            return self._run_command([tools.acpiconf_path, "-i", str(tools.acpiconf_unit)])
        except CommandFailedError as exc:
            raise BatteryToolUnavailableError("acpiconf") from exc
        except TelemetryPermissionError as exc:
            raise BatteryPermissionError("acpiconf") from exc

    def _acpiconf_battery(self) -> Outcome[BatteryInfo]:
        try:
            info = self._acpiconf_info()
        except BatteryError as exc:
            return SoftFail(str(exc), exc)

        if contains_charging_state(info):
            return HardStop(BatteryChargingError("acpiconf"))

        try:
            percentage = parse_field(info, "Remaining capacity")
        except BatteryParseError as exc:
            return SoftFail(str(exc), exc)

        # "Present rate: unknown" while idle
        try:
            rate_mw: float | None = parse_field(info, "Present rate")
        except BatteryParseError:
            rate_mw = None

        return Success(
            BatteryInfo(
                percentage=clamp_percentage(percentage),
                watts=mw_to_w(rate_mw),
                source="acpiconf",
            )
        )

    def _acpiconf_capacity(self) -> Outcome[BatteryCapacity]:
        try:
            info = self._acpiconf_info()
        except BatteryError as exc:
            return SoftFail(str(exc), exc)

        capacity = BatteryCapacity(
            design_wh=mwh_to_wh(parse_optional_field(info, "Design capacity")),
            full_wh=mwh_to_wh(parse_optional_field(info, "Last full capacity")),
        )
        if capacity.is_empty:
            return SoftFail("acpiconf reported no capacity fields")
        return Success(capacity)

    def _sysctl_battery(self) -> Outcome[BatteryInfo]:
        try:
            life = self._sysctl_float("hw.acpi.battery.life")
        except TelemetryError as exc:
            return SoftFail(str(exc), BatteryToolUnavailableError("sysctl battery"))
        if life < 0:
            return SoftFail("hw.acpi.battery.life reports no battery")

        try:
            state = int(self._sysctl_float("hw.acpi.battery.state"))
        except TelemetryError:
            state = 0
        # -1 means the state is unknown
        if state > 0 and state & ACPI_BATTERY_STATE_CHARGING:
            return HardStop(BatteryChargingError("sysctl"))

        try:
            rate_mw: float | None = self._sysctl_float("hw.acpi.battery.rate")
        except TelemetryError:
            rate_mw = None

        return Success(
            BatteryInfo(
                percentage=clamp_percentage(life),
                watts=mw_to_w(rate_mw),
                source="sysctl",
            )
        )

    def _sysctl(self, name: str) -> str:
        try:
            output = self._run_command([self.config.tools.sysctl_path, "-n", name])
        except CommandFailedError as exc:
            if exc.returncode is None:
                raise
            raise ResourceUnavailableError(name) from exc
        return output.strip()

    def _sysctl_float(self, name: str) -> float:
        value = self._sysctl(name)
        number = parse_number(value)
        if number is None:
            raise TelemetryParseError(name, f"Cannot parse as number: {value}")
        return number

    def _sysctl_int(self, name: str) -> int:
        value = self._sysctl(name)
        try:
            return int(value)
        except ValueError as exc:
            raise TelemetryParseError(name, f"Cannot parse as integer: {value}") from exc
