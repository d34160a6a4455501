from __future__ import annotations

from dataclasses import dataclass, asdict
from datetime import datetime
from typing import Any

from batlab.errors import SerializationError


@dataclass(frozen=True)
class BatteryInfo:
    percentage: float
    watts: float
    source: str


@dataclass(frozen=True)
class BatteryCapacity:
    design_wh: float | None = None
    full_wh: float | None = None

    @property
    def is_empty(self) -> bool:
        return self.design_wh is None and self.full_wh is None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TelemetrySample:
    """One point-in-time reading.

    ``cpu_load``, ``ram_pct`` and ``temp_c`` are 0.0 when their source was
    unavailable.
    """
    timestamp: datetime
    percentage: float
    watts: float
    cpu_load: float
    ram_pct: float
    temp_c: float
    source: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "t": self.timestamp.isoformat(),
            "pct": self.percentage,
            "watts": self.watts,
            "cpu_load": self.cpu_load,
            "ram_pct": self.ram_pct,
            "temp_c": self.temp_c,
            "src": self.source,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> TelemetrySample:
        try:
            return cls(
                timestamp=datetime.fromisoformat(data["t"]),
                percentage=float(data["pct"]),
                watts=float(data["watts"]),
                cpu_load=float(data["cpu_load"]),
                ram_pct=float(data["ram_pct"]),
                temp_c=float(data["temp_c"]),
                source=str(data["src"]),
            )
        except KeyError as exc:
            raise SerializationError(f"missing sample field {exc.args[0]!r}") from exc
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"invalid sample: {exc}") from exc


@dataclass(frozen=True)
class SystemInfo:
    hostname: str
    os: str
    kernel: str
    cpu: str
    machine: str
    uptime_s: int


@dataclass(frozen=True)
class RunMetadata:
    run_id: str
    system: SystemInfo
    config: str
    workload: str | None
    start_time: datetime
    sampling_hz: float
    battery_capacity: BatteryCapacity | None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"run_id": self.run_id}
        payload.update(asdict(self.system))
        payload.update(
            {
                "config": self.config,
                "workload": self.workload,
                "start_time": self.start_time.isoformat(),
                "sampling_hz": self.sampling_hz,
                "battery_capacity": (
                    self.battery_capacity.to_dict()
                    if self.battery_capacity is not None
                    else None
                ),
            }
        )
        return payload
