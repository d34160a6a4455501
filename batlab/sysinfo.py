"""Host description and run identifiers for experiment metadata."""
from __future__ import annotations

from datetime import datetime, timezone
import platform
import socket
import time

import psutil

from batlab.models import SystemInfo
from batlab.platform_base import PlatformTelemetry

# Checked in order; the first marker found in the lowercased CPU model wins.
_INTEL_MODELS = ("i3", "i5", "i7", "i9")


def get_system_info(telemetry: PlatformTelemetry) -> SystemInfo:
    return SystemInfo(
        hostname=socket.gethostname() or "unknown",
        os=telemetry.describe_os(),
        kernel=platform.release() or "unknown",
        cpu=telemetry.describe_cpu(),
        machine=platform.machine() or "unknown",
        uptime_s=int(time.time() - psutil.boot_time()),
    )


def generate_auto_config_name(platform_name: str, cpu: str) -> str:
    """Derive a configuration name such as ``linux-intel-i7`` or ``freebsd-amd-ryzen``."""
    os_part = platform_name if platform_name in ("freebsd", "linux") else "unknown"
    cpu_lower = cpu.lower()
    if "intel" in cpu_lower:
        hw_part = next(
            (f"intel-{model}" for model in _INTEL_MODELS if model in cpu_lower), "intel"
        )
    elif "amd" in cpu_lower:
        hw_part = "amd-ryzen" if "ryzen" in cpu_lower else "amd"
    else:
        hw_part = "generic"
    return f"{os_part}-{hw_part}"


def generate_run_id(
    config: str,
    workload: str | None,
    hostname: str,
    os_label: str,
    now: datetime | None = None,
) -> str:
    """Format: ``YYYY-MM-DDTHH:MM:SSZ_hostname_os_config[_workload]``."""
    moment = now or datetime.now(timezone.utc)
    parts = [moment.strftime("%Y-%m-%dT%H:%M:%SZ"), hostname, os_label, config]
    if workload:
        parts.append(workload)
    return "_".join(parts)
