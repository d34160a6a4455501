"""Conversions into the canonical units: watts, watt-hours, Celsius, percent."""
from __future__ import annotations

KELVIN_OFFSET = 273.15


def mw_to_w(value: float | None) -> float:
    """Milliwatts to watts. Absent, zero or negative rates are an idle 0.0."""
    if value is None or value <= 0:
        return 0.0
    return value / 1000.0


def uw_to_w(value: float | None) -> float:
    """Microwatts to watts. Absent, zero or negative rates are an idle 0.0."""
    if value is None or value <= 0:
        return 0.0
    return value / 1_000_000.0


def uv_ua_to_w(voltage_uv: float, current_ua: float) -> float:
    # Some drivers report current_now as negative while discharging.
    return abs(voltage_uv * current_ua) / 1_000_000_000_000.0


def mwh_to_wh(value: float | None) -> float | None:
    if value is None:
        return None
    return value / 1000.0


def uwh_to_wh(value: float | None) -> float | None:
    if value is None:
        return None
    return value / 1_000_000.0


def uah_to_wh(charge_uah: float | None, voltage_uv: float | None) -> float | None:
    """Charge in microamp-hours at a voltage in microvolts, as watt-hours."""
    if charge_uah is None or not voltage_uv:
        return None
    return charge_uah * voltage_uv / 1_000_000_000_000.0


def millicelsius_to_celsius(value: float) -> float:
    return value / 1000.0


def kelvin_to_celsius(value: float) -> float:
    return value - KELVIN_OFFSET


def clamp_percentage(value: float) -> float:
    return max(0.0, min(100.0, value))


def memory_usage_pct(total: int, available: int) -> float:
    """Used share of ``total`` in percent.

    ``available`` larger than ``total`` (an inconsistent reading) saturates to
    zero usage, and an empty ``total`` reports 0.0 instead of dividing by zero.
    """
    if total <= 0:
        return 0.0
    used = max(total - available, 0)
    return clamp_percentage(used / total * 100.0)
