"""Capability interface shared by the platform adapters."""
from __future__ import annotations

from abc import ABC, abstractmethod
import logging
from pathlib import Path
import platform
import subprocess

from batlab.config import AppConfig
from batlab.errors import (
    CommandFailedError,
    ResourceUnavailableError,
    TelemetryIOError,
    TelemetryPermissionError,
)
from batlab.logging_utils import TRACE_LEVEL
from batlab.models import BatteryCapacity, BatteryInfo
from batlab.parsing import parse_number


class PlatformTelemetry(ABC):
    """One adapter per operating system.

    Battery operations raise ``BatteryError``; the metric readers raise
    ``TelemetryError`` and leave it to the caller to substitute defaults.
    """

    name = "unknown"
    label = "Unknown"

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def get_battery_info(self) -> BatteryInfo:
        ...

    @abstractmethod
    def get_battery_capacity(self) -> BatteryCapacity | None:
        ...

    @abstractmethod
    def get_cpu_load(self) -> float:
        ...

    @abstractmethod
    def get_memory_usage(self) -> float:
        ...

    @abstractmethod
    def get_temperature(self) -> float:
        ...

    def describe_os(self) -> str:
        return f"{platform.system()} {platform.release()}".strip() or "Unknown"

    def describe_cpu(self) -> str:
        return platform.processor() or "unknown"

    def _run_command(self, command: list[str]) -> str:
        """Run ``command`` and return its stdout.

        Output is decoded as UTF-8 with undecodable bytes replaced. Raises
        ``CommandFailedError`` when the tool is missing or exits non-zero
        (``returncode`` is None in the first case).
        """
        display = " ".join(command)
        try:
            result = subprocess.run(
                command,
                check=False,
                capture_output=True,
            )
        except FileNotFoundError as exc:
            self.logger.debug("Command not found: %s", command[0])
            raise CommandFailedError(display, "command not found") from exc
        except PermissionError as exc:
            raise TelemetryPermissionError(command[0]) from exc
        stdout = result.stdout.decode("utf-8", errors="replace")
        stderr = result.stderr.decode("utf-8", errors="replace")
        if stderr:
            self.logger.log(TRACE_LEVEL, "stderr: %s", stderr.strip())
        if result.returncode != 0:
            self.logger.debug("Command failed (%s): %s", result.returncode, display)
            raise CommandFailedError(
                display,
                stderr.strip() or f"exit status {result.returncode}",
                returncode=result.returncode,
            )
        self.logger.log(TRACE_LEVEL, "stdout: %s", stdout.strip())
        return stdout

    def _read_file(self, path: str | Path) -> str:
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace")
        except FileNotFoundError as exc:
            raise ResourceUnavailableError(str(path)) from exc
        except PermissionError as exc:
            raise TelemetryPermissionError(str(path)) from exc
        except OSError as exc:
            raise TelemetryIOError(str(path), exc.strerror or str(exc)) from exc

    def _read_optional(self, path: str | Path) -> str | None:
        """Read a pseudo-file, returning stripped content or None."""
        try:
            return Path(path).read_text(encoding="utf-8", errors="replace").strip()
        except OSError:
            return None

    def _read_number(self, path: str | Path) -> float | None:
        raw = self._read_optional(path)
        if raw is None:
            return None
        return parse_number(raw)
