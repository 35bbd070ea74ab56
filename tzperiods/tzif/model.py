"""Data model for the tzif library."""

from dataclasses import dataclass
from typing import Optional

from .tz_rule import Rule


@dataclass(frozen=True)
class LocalTimeType:
    """A local time type record referenced by transitions."""

    utoff: int
    """Number of seconds added to UTC to determine local time."""

    dst: bool
    """Determines if local time is Daylight Savings Time (else Standard time)."""

    designation: str
    """A designation string."""


@dataclass
class Transition:
    """An individual item in the Datablock."""

    transition_time: int
    """A transition time (unix seconds) at which the rules for computing local time may change."""

    local_time_type: LocalTimeType
    """The local time type in effect after the transition."""


@dataclass
class TimezoneInfo:
    """The results of parsing the TZif file."""

    transitions: list[Transition]
    """Local time changes."""

    initial_time_type: LocalTimeType
    """Local time type for timestamps before the first transition."""

    tz_string: Optional[str] = None
    """The TZ string footer for computing local time after the last transition."""

    rule: Optional[Rule] = None
    """A rule for computing local time changes after the last transition."""
