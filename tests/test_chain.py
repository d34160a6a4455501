"""Tests for the ordered source chain driver."""
from __future__ import annotations

import logging
from unittest.mock import Mock

import pytest

from batlab.chain import HardStop, SoftFail, Source, Success, run_chain, run_optional_chain
from batlab.errors import (
    BatteryChargingError,
    BatteryNotFoundError,
    BatteryToolUnavailableError,
)
from batlab.models import BatteryInfo


def _source(name, outcome):
    return Source(name, Mock(return_value=outcome))


class TestRunChain:
    def test_first_success_wins(self):
        first = _source("upower", Success(BatteryInfo(80.0, 10.0, "upower")))
        second = _source("sysfs", Success(BatteryInfo(79.0, 9.0, "sysfs")))

        info = run_chain([first, second])

        assert info.source == "upower"
        second.probe.assert_not_called()

    def test_soft_failure_falls_through(self):
        first = _source("acpiconf", SoftFail("missing", BatteryToolUnavailableError("acpiconf")))
        second = _source("sysctl", Success(BatteryInfo(64.0, 7.5, "sysctl")))

        info = run_chain([first, second])

        assert info == BatteryInfo(64.0, 7.5, "sysctl")

    def test_hard_stop_skips_later_sources(self):
        error = BatteryChargingError("upower")
        first = _source("upower", HardStop(error))
        second = _source("sysfs", Success(BatteryInfo(79.0, 9.0, "sysfs")))

        with pytest.raises(BatteryChargingError) as excinfo:
            run_chain([first, second])

        assert excinfo.value is error
        second.probe.assert_not_called()

    def test_exhaustion_collapses_to_not_found(self):
        sources = [
            _source("acpiconf", SoftFail("missing", BatteryToolUnavailableError("acpiconf"))),
            _source("sysctl", SoftFail("no battery")),
        ]

        with pytest.raises(BatteryNotFoundError):
            run_chain(sources)

    def test_soft_failure_logs_underlying_error(self, caplog):
        error = BatteryToolUnavailableError("acpiconf")
        sources = [
            _source("acpiconf", SoftFail("missing", error)),
            _source("sysctl", SoftFail("no battery")),
        ]

        with caplog.at_level(logging.DEBUG, logger="batlab.chain"):
            with pytest.raises(BatteryNotFoundError):
                run_chain(sources)

        records = [r for r in caplog.records if "unavailable" in r.getMessage()]
        assert records[0].exc_info[1] is error
        assert records[1].exc_info is None

    def test_empty_chain(self):
        with pytest.raises(BatteryNotFoundError):
            run_chain([])


class TestRunOptionalChain:
    def test_exhaustion_is_none(self):
        assert run_optional_chain([_source("acpiconf", SoftFail("missing"))]) is None

    def test_success(self):
        assert run_optional_chain([_source("sysfs", Success(42))]) == 42
