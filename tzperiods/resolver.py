"""Find the period in effect for an instant in a zone's transition table.

A transition table is scanned from the most recent record to the oldest. The
most recent record may carry a recurring rule instead of being the final word
on the zone, in which case the resolvers return `ExtrapolationNeeded` and the
caller synthesizes concrete transitions for the target year to scan instead.

Wall clock resolution compares the given local time against the same UTC
instant shifted by both the new and the previous period's offsets. When clocks
move forward the wall times in between never occur (a gap), and when clocks
move back the wall times in between occur twice (ambiguous).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from .exceptions import ZoneDataError
from .instant import seconds_to_civil_datetime
from .model import (
    Ambiguous,
    Gap,
    GapBoundary,
    Period,
    RecurringRule,
    TransitionTable,
    Unambiguous,
    WallResolution,
)

__all__ = [
    "ExtrapolationNeeded",
    "find_utc_period",
    "find_wall_period",
]

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExtrapolationNeeded:
    """The scan reached a record whose later transitions follow a rule pair."""

    utc_offset: int
    """The standard offset used as the base for evaluating the rules."""

    recurring_rule: RecurringRule


def find_utc_period(
    secs: int, table: TransitionTable
) -> Period | ExtrapolationNeeded:
    """Return the period in effect at the UTC instant in gregorian seconds."""
    if not table:
        raise ZoneDataError("Unable to resolve period from an empty table")
    for record in table:
        if record.from_secs is not None and secs < record.from_secs:
            continue
        if record.recurring_rule is not None:
            return ExtrapolationNeeded(record.period.utc_offset, record.recurring_rule)
        return record.period
    # Zone histories are left truncated, so use the oldest known period
    _LOGGER.debug("Instant %s precedes all transitions, using oldest period", secs)
    return table[-1].period


def find_wall_period(
    secs: int, table: TransitionTable
) -> WallResolution | ExtrapolationNeeded:
    """Return the period(s) for the wall clock time in gregorian seconds."""
    if not table:
        raise ZoneDataError("Unable to resolve period from an empty table")
    for record in table:
        period = record.period
        if record.from_secs is None:
            if record.recurring_rule is not None:
                return ExtrapolationNeeded(period.utc_offset, record.recurring_rule)
            return Unambiguous(period)
        previous = record.previous_period or period
        transition_wall = record.from_secs + period.total_offset
        previous_wall = record.from_secs + previous.total_offset
        if secs < transition_wall:
            if secs >= previous_wall:
                return Gap(
                    GapBoundary(previous, seconds_to_civil_datetime(previous_wall)),
                    GapBoundary(period, seconds_to_civil_datetime(transition_wall)),
                )
            continue
        if secs < previous_wall:
            return Ambiguous(previous, period)
        if record.recurring_rule is not None:
            return ExtrapolationNeeded(period.utc_offset, record.recurring_rule)
        return Unambiguous(period)
    _LOGGER.debug("Wall time %s precedes all transitions, using oldest period", secs)
    return Unambiguous(table[-1].period)
