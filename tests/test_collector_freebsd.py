"""Tests for FreeBSD battery and system telemetry."""
from __future__ import annotations

from dataclasses import replace
from unittest.mock import Mock, patch
import pytest

from batlab.errors import (
    BatteryChargingError,
    BatteryNotFoundError,
    CommandFailedError,
    ResourceUnavailableError,
    TelemetryParseError,
)
from batlab.freebsd import FreeBSDTelemetry

ACPICONF_DISCHARGING = """Design capacity:        57040 mWh
Last full capacity:     53200 mWh
Technology:             secondary (rechargeable)
Design voltage:         11400 mV
Capacity (warn):        2660 mWh
Capacity (low):         1000 mWh
Model number:           01AV430
Serial number:          1234
Type:                   LiP
OEM info:               SMP
State:                  discharging
Remaining capacity:     85%
Remaining time:         3:45
Present rate:           12500 mW
Present voltage:        11800 mV
"""

ACPICONF_CHARGING = ACPICONF_DISCHARGING.replace(
    "State:                  discharging", "State:                  charging"
)

ACPICONF_IDLE = """Design capacity:        57040 mWh
Last full capacity:     53200 mWh
State:                  high
Remaining capacity:     100%
Remaining time:         unknown
Present rate:           unknown
Present voltage:        12600 mV
"""


def fake_commands(responses):
    """Build a _run_command side effect from {command tuple: output or exception}."""

    def run(command):
        key = tuple(command)
        if key not in responses:
            raise CommandFailedError(" ".join(command), "unknown oid", returncode=1)
        result = responses[key]
        if isinstance(result, Exception):
            raise result
        return result

    return run


def acpiconf_missing():
    return CommandFailedError("acpiconf -i 0", "command not found")


@pytest.fixture
def telemetry(app_config):
    """Create a FreeBSDTelemetry instance."""
    return FreeBSDTelemetry(app_config)


@pytest.mark.freebsd
class TestFreeBSDBattery:
    """Battery source chain: acpiconf, then sysctl."""

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_acpiconf_battery(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {("acpiconf", "-i", "0"): ACPICONF_DISCHARGING}
        )

        info = telemetry.get_battery_info()

        assert info.percentage == 85.0
        assert info.watts == 12.5
        assert info.source == "acpiconf"

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_acpiconf_unknown_rate_is_idle(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {("acpiconf", "-i", "0"): ACPICONF_IDLE}
        )

        info = telemetry.get_battery_info()

        assert info.percentage == 100.0
        assert info.watts == 0.0

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_charging_stops_chain(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("acpiconf", "-i", "0"): ACPICONF_CHARGING,
                ("sysctl", "-n", "hw.acpi.battery.life"): "85\n",
                ("sysctl", "-n", "hw.acpi.battery.rate"): "12500\n",
            }
        )

        with pytest.raises(BatteryChargingError):
            telemetry.get_battery_info()

        called = [call.args[0][0] for call in mock_run_command.call_args_list]
        assert "sysctl" not in called

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_falls_back_to_sysctl(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("acpiconf", "-i", "0"): acpiconf_missing(),
                ("sysctl", "-n", "hw.acpi.battery.life"): "64\n",
                ("sysctl", "-n", "hw.acpi.battery.state"): "1\n",
                ("sysctl", "-n", "hw.acpi.battery.rate"): "7500\n",
            }
        )

        info = telemetry.get_battery_info()

        assert info.percentage == 64.0
        assert info.watts == 7.5
        assert info.source == "sysctl"

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_sysctl_unknown_rate(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("acpiconf", "-i", "0"): acpiconf_missing(),
                ("sysctl", "-n", "hw.acpi.battery.life"): "64\n",
                ("sysctl", "-n", "hw.acpi.battery.state"): "-1\n",
                ("sysctl", "-n", "hw.acpi.battery.rate"): "-1\n",
            }
        )

        info = telemetry.get_battery_info()

        assert info.watts == 0.0
        assert info.source == "sysctl"

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_sysctl_charging_state(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("acpiconf", "-i", "0"): acpiconf_missing(),
                ("sysctl", "-n", "hw.acpi.battery.life"): "64\n",
                ("sysctl", "-n", "hw.acpi.battery.state"): "2\n",
            }
        )

        with pytest.raises(BatteryChargingError):
            telemetry.get_battery_info()

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_no_battery(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("acpiconf", "-i", "0"): acpiconf_missing(),
                ("sysctl", "-n", "hw.acpi.battery.life"): "-1\n",
            }
        )

        with pytest.raises(BatteryNotFoundError):
            telemetry.get_battery_info()

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_malformed_acpiconf_falls_through(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("acpiconf", "-i", "0"): "acpiconf: no such battery\n",
                ("sysctl", "-n", "hw.acpi.battery.life"): "50\n",
            }
        )

        info = telemetry.get_battery_info()

        assert info.source == "sysctl"
        assert info.watts == 0.0

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_battery_capacity(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {("acpiconf", "-i", "0"): ACPICONF_DISCHARGING}
        )

        capacity = telemetry.get_battery_capacity()

        assert capacity is not None
        assert capacity.design_wh == pytest.approx(57.04)
        assert capacity.full_wh == pytest.approx(53.2)

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_battery_capacity_without_acpiconf(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {("acpiconf", "-i", "0"): acpiconf_missing()}
        )

        assert telemetry.get_battery_capacity() is None

    @patch("subprocess.run")
    def test_acpiconf_unit_from_config(self, mock_run, app_config):
        config = replace(app_config, tools=replace(app_config.tools, acpiconf_unit=1))
        telemetry = FreeBSDTelemetry(config)
        mock_run.return_value = Mock(
            returncode=0, stdout=ACPICONF_DISCHARGING.encode(), stderr=b""
        )

        telemetry.get_battery_info()

        assert mock_run.call_args.args[0] == ["acpiconf", "-i", "1"]


@pytest.mark.freebsd
class TestFreeBSDMetrics:
    """CPU load, memory and temperature via sysctl."""

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_cpu_load(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {("sysctl", "-n", "vm.loadavg"): "{ 0.15 0.20 0.18 }\n"}
        )

        assert telemetry.get_cpu_load() == 0.15

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_cpu_load_unreadable(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands({})

        with pytest.raises(ResourceUnavailableError):
            telemetry.get_cpu_load()

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_memory_usage(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("sysctl", "-n", "vm.stats.vm.v_page_count"): "4096000\n",
                ("sysctl", "-n", "vm.stats.vm.v_free_count"): "1024000\n",
            }
        )

        assert telemetry.get_memory_usage() == pytest.approx(75.0)

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_memory_usage_zero_pages(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("sysctl", "-n", "vm.stats.vm.v_page_count"): "0\n",
                ("sysctl", "-n", "vm.stats.vm.v_free_count"): "0\n",
            }
        )

        assert telemetry.get_memory_usage() == 0.0

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_memory_usage_invalid(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("sysctl", "-n", "vm.stats.vm.v_page_count"): "lots\n",
                ("sysctl", "-n", "vm.stats.vm.v_free_count"): "0\n",
            }
        )

        with pytest.raises(TelemetryParseError):
            telemetry.get_memory_usage()

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_cpu_temperature(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {("sysctl", "-n", "dev.cpu.0.temperature"): "45.0C\n"}
        )

        assert telemetry.get_temperature() == 45.0

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_thermal_zone_fallback(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {("sysctl", "-n", "hw.acpi.thermal.tz1.temperature"): "52.0C\n"}
        )

        assert telemetry.get_temperature() == 52.0

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_zero_reading_is_skipped(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("sysctl", "-n", "dev.cpu.0.temperature"): "0.0C\n",
                ("sysctl", "-n", "hw.acpi.thermal.tz0.temperature"): "0.0C\n",
                ("sysctl", "-n", "dev.acpi_tz.0.temperature"): "48.5C\n",
            }
        )

        assert telemetry.get_temperature() == 48.5

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_kelvin_reading(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {("sysctl", "-n", "dev.cpu.0.temperature"): "318.15K\n"}
        )

        assert telemetry.get_temperature() == pytest.approx(45.0)

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_no_thermal_sensors(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands({})

        with pytest.raises(ResourceUnavailableError):
            telemetry.get_temperature()

    @patch("batlab.freebsd.FreeBSDTelemetry._run_command")
    def test_describe_host(self, mock_run_command, telemetry):
        mock_run_command.side_effect = fake_commands(
            {
                ("freebsd-version",): "14.1-RELEASE\n",
                ("sysctl", "-n", "hw.model"): "Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz\n",
            }
        )

        assert telemetry.describe_os() == "FreeBSD 14.1-RELEASE"
        assert telemetry.describe_cpu() == "Intel(R) Core(TM) i7-8550U CPU @ 1.80GHz"
