"""Parsers for the semi-structured text emitted by battery and sysctl tools.

Command output such as ``acpiconf -i 0`` or ``upower -i <device>`` is a list
of ``label: value unit`` lines rather than a structured document, so fields
are located by label and the value is taken as the first numeric token on
that line.
"""
from __future__ import annotations

import re

from batlab.errors import BatteryParseError, TelemetryParseError
from batlab.units import kelvin_to_celsius, millicelsius_to_celsius

_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")
_UNIT_SUFFIX_RE = re.compile(r"[%°µA-Za-z]+$")

CHARGING_TOKEN = "charging"

# Bare sysctl temperatures above this are in millidegrees
MILLICELSIUS_THRESHOLD = 200


def parse_number(token: str) -> float | None:
    """Parse ``token`` as a number once a trailing unit suffix is removed.

    ``"85%"`` -> 85.0, ``"12500"`` -> 12500.0, ``"45.0C"`` -> 45.0.
    Returns None for anything that is not a plain decimal number.
    """
    cleaned = _UNIT_SUFFIX_RE.sub("", token.strip())
    if not _NUMBER_RE.fullmatch(cleaned):
        return None
    return float(cleaned)


def parse_field(document: str, field_name: str) -> float:
    """Return the numeric value of ``field_name`` in a ``label: value`` listing.

    Only the first line containing the label is consulted. A missing label and
    a non-numeric value both raise ``BatteryParseError``.
    """
    for line in document.splitlines():
        if field_name not in line:
            continue
        for token in line.split():
            value = parse_number(token)
            if value is not None:
                return value
        raise BatteryParseError(field_name, f"no numeric value in {line.strip()!r}")
    raise BatteryParseError(field_name, "not found")


def contains_charging_state(document: str) -> bool:
    """True when a ``state:`` line reports the exact token ``charging``.

    ``state: discharging`` and ``State: high`` are not charging.
    """
    for line in document.splitlines():
        label, sep, value = line.partition(":")
        if not sep or label.strip().lower() != "state":
            continue
        if CHARGING_TOKEN in value.lower().split():
            return True
    return False


def is_charging_status(status: str) -> bool:
    """sysfs ``status`` attribute check: only ``Charging`` itself counts."""
    return status.strip().lower() == CHARGING_TOKEN


def parse_load_average(text: str, context: str) -> float:
    """1-minute load from ``{ 0.15 0.20 0.18 }`` or ``0.15 0.20 0.18 1/123 456``."""
    tokens = text.strip().strip("{}").split()
    if tokens and _NUMBER_RE.fullmatch(tokens[0]):
        return float(tokens[0])
    raise TelemetryParseError(context, f"Invalid format: {text.strip()}")


def parse_meminfo(text: str) -> dict[str, int]:
    """Parse ``/proc/meminfo`` into kB values keyed by field name."""
    result: dict[str, int] = {}
    for line in text.splitlines():
        parts = line.split()
        if len(parts) >= 2:
            key = parts[0].rstrip(":")
            try:
                result[key] = int(parts[1])
            except ValueError:
                pass
    return result


def parse_temperature(text: str, context: str) -> float:
    """Parse a sysctl temperature such as ``45.0C`` or ``318.1K`` into Celsius.

    Only a ``K`` suffix marks Kelvin. A bare value above 200 is millicelsius.
    """
    raw = text.strip()
    value = parse_number(raw)
    if value is None:
        raise TelemetryParseError(context, f"Invalid temperature format: {raw}")
    if raw.endswith("K"):
        return kelvin_to_celsius(value)
    if raw[-1:].isdigit() and value > MILLICELSIUS_THRESHOLD:
        return millicelsius_to_celsius(value)
    return value


def parse_optional_field(document: str, field_name: str) -> float | None:
    """``parse_field`` for supplementary fields: absent or invalid is None."""
    try:
        return parse_field(document, field_name)
    except BatteryParseError:
        return None
