"""Library for building transition tables from zone lines and dated rules.

A zone line describes a span of time where a zone has a fixed standard offset
and optionally follows a named set of daylight savings rules. Each rule record
is a single dated instance of a rule e.g. "DST starts 2023-03-12 02:00 wall
time, saving one hour with letter D". The builder walks the rule records in
order and emits a period for each change of offset or abbreviation.

Rule times may be given in one of three reckonings (the time modifier):
  - wall: local time as observed, including the current daylight savings
  - standard: local standard time, ignoring daylight savings
  - utc: universal time
"""

from __future__ import annotations

import datetime
import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Optional, Self

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from .instant import civil_datetime_to_seconds
from .model import Period, RecurringRule, TransitionRecord, TransitionTable

__all__ = [
    "TimeModifier",
    "RuleRecord",
    "ZoneLine",
    "BuildMode",
    "BuiltPeriod",
    "build_periods",
    "periods_to_records",
    "format_abbreviation",
]

_LOGGER = logging.getLogger(__name__)

# Offsets beyond a day are never valid for a zone or rule
_MAX_OFFSET_SECONDS = 24 * 60 * 60


class TimeModifier(str, enum.Enum):
    """The reckoning used for the time of day of a rule."""

    WALL = "wall"
    STANDARD = "standard"
    UTC = "utc"


class BuildMode(enum.Enum):
    """Determines how the state before the first rule record is derived."""

    AUTHORITATIVE = "authoritative"
    """Rule records are a complete history, starting from standard time."""

    DYNAMIC_FAR_FUTURE = "dynamic_far_future"
    """Rule records are a window of an alternating annual cycle of rules.

    The state before the first record is the one set by the last record, and
    the result is never linked back to a recurring rule.
    """


def _verify_offset(value: int) -> int:
    if abs(value) >= _MAX_OFFSET_SECONDS:
        raise ValueError(f"Offset must be less than a day: {value}")
    return value


class RuleRecord(BaseModel):
    """A single dated instance of a daylight savings rule."""

    model_config = ConfigDict(frozen=True)

    name: str
    """The name of the rule set this record belongs to."""

    local_start: datetime.datetime
    """Date and time of day the rule takes effect, reckoned by time_modifier."""

    time_modifier: TimeModifier = TimeModifier.WALL

    save: int
    """Seconds of daylight savings added to standard time while in effect."""

    letter: str = ""
    """Variable part of the abbreviation substituted into the zone format."""

    @field_validator("local_start")
    @classmethod
    def verify_local_start(cls, value: datetime.datetime) -> datetime.datetime:
        """Validate that the start is a local time with no offset attached."""
        if value.tzinfo is not None:
            raise ValueError(f"Rule start must be a naive local time: {value}")
        return value

    @field_validator("save")
    @classmethod
    def verify_save(cls, value: int) -> int:
        """Validate the daylight savings amount."""
        return _verify_offset(value)


class ZoneLine(BaseModel):
    """A span of time with a fixed standard offset for a zone."""

    model_config = ConfigDict(frozen=True)

    start_secs: Optional[int] = None
    """Gregorian seconds (UTC) when the line starts, or None since always."""

    until_secs: Optional[int] = None
    """Gregorian seconds (UTC) when the line ends, or None if ongoing."""

    rules: Optional[str] = None
    """Name of the rule set followed during this line, if any."""

    abbr_format: str
    """Template for the zone abbreviation."""

    std_offset: int
    """Seconds added to UTC to determine local standard time."""

    @field_validator("std_offset")
    @classmethod
    def verify_std_offset(cls, value: int) -> int:
        """Validate the standard offset."""
        return _verify_offset(value)

    @model_validator(mode="after")
    def verify_span(self) -> Self:
        """Validate that the line starts before it ends."""
        if (
            self.start_secs is not None
            and self.until_secs is not None
            and self.start_secs >= self.until_secs
        ):
            raise ValueError(
                f"Zone line must start before it ends: {self.start_secs} >= {self.until_secs}"
            )
        return self


@dataclass(frozen=True)
class BuiltPeriod:
    """A period with its span, in the builder's chronological form."""

    from_secs: Optional[int]
    until_secs: Optional[int]
    period: Period
    recurring_rule: Optional[RecurringRule] = None


def format_abbreviation(template: str, save: int, letter: str, utc_offset: int) -> str:
    """Return the zone abbreviation for a format template.

    The template may select between standard and daylight names (GMT/BST),
    substitute the rule letter (E%sT), or render the numeric offset (%z).
    """
    if "/" in template:
        std_name, dst_name = template.split("/", 1)
        return std_name if save == 0 else dst_name
    if "%s" in template:
        return template.replace("%s", letter)
    if "%z" in template:
        return template.replace("%z", _format_numeric_offset(utc_offset + save))
    return template


def _format_numeric_offset(offset: int) -> str:
    sign = "-" if offset < 0 else "+"
    minutes, seconds = divmod(abs(offset), 60)
    hours, minutes = divmod(minutes, 60)
    result = f"{sign}{hours:02}"
    if minutes or seconds:
        result += f"{minutes:02}"
    if seconds:
        result += f"{seconds:02}"
    return result


def _initial_state(rules: list[RuleRecord], mode: BuildMode) -> tuple[int, str]:
    """Return the (save, letter) in effect before the first rule record."""
    if not rules:
        return (0, "")
    if mode == BuildMode.DYNAMIC_FAR_FUTURE:
        return (rules[-1].save, rules[-1].letter)
    letter = next((rule.letter for rule in rules if rule.save == 0), "")
    return (0, letter)


def _rule_utc_secs(rule: RuleRecord, std_offset: int, current_save: int) -> int:
    """Return gregorian seconds (UTC) for when the rule record takes effect."""
    local_secs = civil_datetime_to_seconds(rule.local_start)
    if rule.time_modifier == TimeModifier.UTC:
        return local_secs
    if rule.time_modifier == TimeModifier.STANDARD:
        return local_secs - std_offset
    return local_secs - (std_offset + current_save)


def _zone_line_periods(
    zone_line: ZoneLine,
    rules: list[RuleRecord],
    mode: BuildMode,
    is_last: bool,
) -> list[BuiltPeriod]:
    """Return the periods for a single zone line."""
    save, letter = _initial_state(rules, mode)

    def new_period(save: int, letter: str) -> Period:
        return Period(
            zone_line.std_offset,
            save,
            format_abbreviation(zone_line.abbr_format, save, letter, zone_line.std_offset),
        )

    current = new_period(save, letter)
    start = zone_line.start_secs
    periods: list[BuiltPeriod] = []
    for rule in rules:
        utc_secs = _rule_utc_secs(rule, zone_line.std_offset, current.std_offset)
        if zone_line.until_secs is not None and utc_secs >= zone_line.until_secs:
            break
        period = new_period(rule.save, rule.letter)
        if start is not None and utc_secs <= start:
            # Rule took effect before the line started, it only sets the state
            current = period
            continue
        if period == current:
            continue
        periods.append(BuiltPeriod(start, utc_secs, current))
        start = utc_secs
        current = period

    recurring_rule = None
    if (
        mode == BuildMode.AUTHORITATIVE
        and is_last
        and zone_line.until_secs is None
        and zone_line.rules is not None
    ):
        recurring_rule = RecurringRule(zone_line.rules, zone_line.abbr_format)
    periods.append(BuiltPeriod(start, zone_line.until_secs, current, recurring_rule))
    return periods


def build_periods(
    zone_lines: Iterable[ZoneLine],
    rule_records: Iterable[RuleRecord],
    mode: BuildMode = BuildMode.AUTHORITATIVE,
) -> list[BuiltPeriod]:
    """Return periods in chronological order for the zone lines and rules.

    In authoritative mode the final period of an ongoing zone line that
    follows rules references those rules for computing later transitions.
    """
    lines = list(zone_lines)
    records = sorted(rule_records, key=lambda record: record.local_start)
    _LOGGER.debug(
        "Building periods (%s) for %d zone lines and %d rules",
        mode.value,
        len(lines),
        len(records),
    )
    periods: list[BuiltPeriod] = []
    for index, zone_line in enumerate(lines):
        rules = (
            [record for record in records if record.name == zone_line.rules]
            if zone_line.rules
            else []
        )
        periods.extend(
            _zone_line_periods(zone_line, rules, mode, index == len(lines) - 1)
        )
    return periods


def periods_to_records(periods: Iterable[BuiltPeriod]) -> TransitionTable:
    """Return a transition table, most recent first, for chronological periods."""
    records: list[TransitionRecord] = []
    previous: Optional[Period] = None
    for built in periods:
        records.append(
            TransitionRecord(built.from_secs, built.period, previous, built.recurring_rule)
        )
        previous = built.period
    records.reverse()
    return records
