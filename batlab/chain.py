"""Ordered source chains with one priority-breaking condition.

Each source returns a tagged outcome instead of raising: ``Success`` ends the
chain with a value, ``SoftFail`` moves on to the next source, and ``HardStop``
ends the chain with its error even if later sources could have answered.
"""
from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable, Generic, Sequence, TypeVar, Union

from batlab.errors import BatteryError, BatteryNotFoundError

T = TypeVar("T")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Success(Generic[T]):
    value: T


@dataclass(frozen=True)
class SoftFail:
    reason: str
    error: BatteryError | None = None


@dataclass(frozen=True)
class HardStop:
    error: BatteryError


Outcome = Union[Success[T], SoftFail, HardStop]


@dataclass(frozen=True)
class Source(Generic[T]):
    name: str
    probe: Callable[[], Outcome[T]]


def run_chain(sources: Sequence[Source[T]]) -> T:
    """Return the first successful value or raise.

    A ``HardStop`` error is raised unchanged. If every source soft-fails the
    chain raises ``BatteryNotFoundError`` and the per-source reasons are only
    logged.
    """
    for source in sources:
        outcome = source.probe()
        if isinstance(outcome, Success):
            logger.debug("Source %s succeeded.", source.name)
            return outcome.value
        if isinstance(outcome, HardStop):
            logger.debug("Source %s stopped the chain: %s", source.name, outcome.error)
            raise outcome.error
        logger.debug(
            "Source %s unavailable: %s", source.name, outcome.reason, exc_info=outcome.error
        )
    raise BatteryNotFoundError()


def run_optional_chain(sources: Sequence[Source[T]]) -> T | None:
    """Like ``run_chain`` but exhaustion yields None instead of an error."""
    try:
        return run_chain(sources)
    except BatteryNotFoundError:
        return None
