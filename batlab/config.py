from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
import configparser


@dataclass(frozen=True)
class ToolsConfig:
    acpiconf_path: str
    acpiconf_unit: int
    sysctl_path: str
    upower_path: str
    freebsd_version_path: str


@dataclass(frozen=True)
class PathsConfig:
    power_supply_dir: str
    thermal_dir: str
    hwmon_dir: str
    loadavg_path: str
    meminfo_path: str
    cpuinfo_path: str
    os_release_path: str


@dataclass(frozen=True)
class RunConfig:
    config_name: str | None
    workload: str | None
    sampling_hz: float


@dataclass(frozen=True)
class AppConfig:
    tools: ToolsConfig
    paths: PathsConfig
    run: RunConfig


def _get_optional(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value if value else None


def _build_config(parser: configparser.ConfigParser) -> AppConfig:
    # parser.get with fallback so any section may be missing
    tools = ToolsConfig(
        acpiconf_path=parser.get("tools", "acpiconf_path", fallback="acpiconf"),
        acpiconf_unit=parser.getint("tools", "acpiconf_unit", fallback=0),
        sysctl_path=parser.get("tools", "sysctl_path", fallback="sysctl"),
        upower_path=parser.get("tools", "upower_path", fallback="upower"),
        freebsd_version_path=parser.get(
            "tools", "freebsd_version_path", fallback="freebsd-version"
        ),
    )

    paths = PathsConfig(
        power_supply_dir=parser.get(
            "paths", "power_supply_dir", fallback="/sys/class/power_supply"
        ),
        thermal_dir=parser.get("paths", "thermal_dir", fallback="/sys/class/thermal"),
        hwmon_dir=parser.get("paths", "hwmon_dir", fallback="/sys/class/hwmon"),
        loadavg_path=parser.get("paths", "loadavg_path", fallback="/proc/loadavg"),
        meminfo_path=parser.get("paths", "meminfo_path", fallback="/proc/meminfo"),
        cpuinfo_path=parser.get("paths", "cpuinfo_path", fallback="/proc/cpuinfo"),
        os_release_path=parser.get("paths", "os_release_path", fallback="/etc/os-release"),
    )

    run = RunConfig(
        config_name=_get_optional(parser.get("run", "config_name", fallback=None)),
        workload=_get_optional(parser.get("run", "workload", fallback=None)),
        sampling_hz=parser.getfloat("run", "sampling_hz", fallback=0.0167),
    )

    return AppConfig(tools=tools, paths=paths, run=run)


def default_config() -> AppConfig:
    """Built-in defaults, as if an empty config file had been loaded."""
    return _build_config(configparser.ConfigParser())


def load_config(path: str | Path) -> AppConfig:
    parser = configparser.ConfigParser()
    read_files = parser.read(path)
    if not read_files:
        raise FileNotFoundError(f"Config file not found: {path}")
    return _build_config(parser)
