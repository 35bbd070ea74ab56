"""Data model for resolving time zone periods."""

from __future__ import annotations

import datetime
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Optional, TypeAlias

from .instant import CivilDateTime

__all__ = [
    "Period",
    "RecurringRule",
    "TransitionRecord",
    "TransitionTable",
    "Unambiguous",
    "GapBoundary",
    "Gap",
    "Ambiguous",
    "WallResolution",
]


@dataclass(frozen=True)
class Period:
    """The offsets and abbreviation in effect for a span of time in a zone."""

    utc_offset: int
    """Number of seconds added to UTC to determine local standard time."""

    std_offset: int
    """Number of seconds of daylight savings added on top of standard time."""

    zone_abbr: str
    """A short designation for the period e.g. PST."""

    @property
    def total_offset(self) -> int:
        """Number of seconds added to UTC to determine wall clock time."""
        return self.utc_offset + self.std_offset

    @property
    def utcoffset(self) -> datetime.timedelta:
        """Return the wall clock offset from UTC as a timedelta."""
        return datetime.timedelta(seconds=self.total_offset)

    @property
    def dst(self) -> datetime.timedelta:
        """Return the daylight savings adjustment as a timedelta."""
        return datetime.timedelta(seconds=self.std_offset)


@dataclass(frozen=True)
class RecurringRule:
    """A reference to an annual rule pair for computing future transitions."""

    rule_id: str
    """The identifier of the rule pair in the rule store."""

    abbr_format: str
    """A template for the zone abbreviation e.g. E%sT, GMT/BST, or %z."""


@dataclass(frozen=True)
class TransitionRecord:
    """An individual transition in a zone's period table."""

    from_secs: Optional[int]
    """Gregorian seconds (UTC) when this record takes effect, None for always."""

    period: Period
    """The period in effect from this transition onward."""

    previous_period: Optional[Period] = None
    """The period in effect immediately before this transition."""

    recurring_rule: Optional[RecurringRule] = None
    """Set on the most recent record only, when later transitions follow rules."""


TransitionTable: TypeAlias = Sequence[TransitionRecord]
"""Transition records for a zone ordered from the most recent to the oldest."""


@dataclass(frozen=True)
class Unambiguous:
    """A wall clock time that occurs exactly once."""

    period: Period


@dataclass(frozen=True)
class GapBoundary:
    """One side of a gap in wall clock time."""

    period: Period
    at: CivilDateTime
    """Wall clock time of the transition instant as reckoned by this period."""


@dataclass(frozen=True)
class Gap:
    """A wall clock time that never occurred because clocks moved forward."""

    departing: GapBoundary
    arriving: GapBoundary


@dataclass(frozen=True)
class Ambiguous:
    """A wall clock time that occurred twice because clocks moved back."""

    former: Period
    latter: Period


WallResolution: TypeAlias = Unambiguous | Gap | Ambiguous
