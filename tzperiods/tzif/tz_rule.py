"""Library for parsing TZ rules.

TZ supports these two formats

No DST: std offset
  - std: Name of the timezone
  - offset: Time added to local time to get UTC
  Example: EST+5

DST: std offset dst [offset],start[/time],end[/time]
  - dst: Name of the Daylight savings time timezone
  - offset: Defaults to 1 hour ahead of STD offset if not specified
  - start & end: Time period when DST is in effect. The start/end have
    the following formats:
      Jn: A julian day between 1 and 365 (Feb 29th never counted)
      n: A julian day between 0 and 365 (Feb 29th is counted in leap years)
      Mm.w.d:
          m: Month between 1 and 12
          d: Between 0 (Sunday) and 6 (Saturday)
          w: Between 1 and 5. Week 1 is first week d occurs
      The time field is in hh:mm:ss. The hour can be 167 to -167.

The start and end of a DST rule make an alternating pair of annual rules
that can be evaluated for any year to extrapolate future transitions.
"""

from __future__ import annotations

import calendar
import datetime
import re
from dataclasses import dataclass
from typing import Any, Optional, Union

from dateutil import rrule

from tzperiods.builder import RuleRecord, TimeModifier

__all__ = [
    "RuleDay",
    "RuleOrdinalDay",
    "RuleDate",
    "RuleOccurrence",
    "Rule",
    "AnnualRule",
    "parse_tz_rule",
]

_ZERO = datetime.timedelta(seconds=0)
_DEFAULT_TIME_DELTA = datetime.timedelta(hours=2)
_MAX_TIME_HOURS = 167
# Day 60 of a year is Feb 29th in a leap year
_LEAP_DAY_OF_YEAR = 60


def _parse_time(values: dict[str, Any]) -> datetime.timedelta | None:
    """Convert an offset from [+/-]hh[:mm[:ss]] to a timedelta."""
    if (hour := values["hour"]) is None:
        return None
    sign = 1
    if hour.startswith("+"):
        hour = hour[1:]
    elif hour.startswith("-"):
        sign = -1
        hour = hour[1:]
    if int(hour) > _MAX_TIME_HOURS:
        raise ValueError(f"Hour must be between -167 and 167: {values['hour']}")
    minutes = values.get("minutes") or "0"
    seconds = values.get("seconds") or "0"
    return datetime.timedelta(
        seconds=sign * (int(hour) * 60 * 60 + int(minutes) * 60 + int(seconds))
    )


@dataclass
class RuleDay:
    """A date referenced in a timezone rule for a julian day."""

    day_of_year: int
    """A day of the year between 1 and 365, leap days never supported."""

    time: datetime.timedelta
    """Offset of time in current local time when the rule goes into effect, default of 02:00:00."""

    def local_start(self, year: int) -> datetime.datetime:
        """Return the local date and time the rule goes into effect in the year."""
        day_index = self.day_of_year - 1
        if calendar.isleap(year) and self.day_of_year >= _LEAP_DAY_OF_YEAR:
            day_index += 1
        return datetime.datetime(year, 1, 1) + datetime.timedelta(days=day_index) + self.time


@dataclass
class RuleOrdinalDay:
    """A date referenced in a timezone rule for a zero based day of the year."""

    day_index: int
    """A day of the year between 0 and 365, leap days are counted."""

    time: datetime.timedelta
    """Offset of time in current local time when the rule goes into effect, default of 02:00:00."""

    def local_start(self, year: int) -> datetime.datetime:
        """Return the local date and time the rule goes into effect in the year."""
        return (
            datetime.datetime(year, 1, 1)
            + datetime.timedelta(days=self.day_index)
            + self.time
        )


@dataclass
class RuleDate:
    """A date referenced in a timezone rule."""

    month: int
    """A month between 1 and 12."""

    day_of_week: int
    """A day of the week between 0 (Sunday) and 6 (Saturday)."""

    week_of_month: int
    """A week number of the month (1 to 5) based on the first occurrence of day_of_week."""

    time: datetime.timedelta
    """Offset of time in current local time when the rule goes into effect, default of 02:00:00."""

    def as_rrule(self, dtstart: datetime.datetime | None = None) -> rrule.rrule:
        """Return a recurrence rule for the dates of this timezone occurrence."""
        return rrule.rrule(
            freq=rrule.YEARLY,
            bymonth=self.month,
            byweekday=self._rrule_byday(self._rrule_week_of_month),
            dtstart=dtstart,
        )

    def local_start(self, year: int) -> datetime.datetime:
        """Return the local date and time the rule goes into effect in the year.

        The time of day is applied after finding the date since it may be
        more than a day or negative, moving the start into an adjacent day.
        """
        date = next(iter(self.as_rrule(datetime.datetime(year, 1, 1))))
        return date + self.time

    @property
    def _rrule_byday(self) -> rrule.weekday:
        """Return the dateutil weekday for this rule based on day_of_week."""
        return rrule.weekdays[(self.day_of_week - 1) % 7]

    @property
    def _rrule_week_of_month(self) -> int:
        """Return the byday modifier for the week of the month."""
        if self.week_of_month == 5:
            return -1
        return self.week_of_month


RuleDateType = Union[RuleDate, RuleDay, RuleOrdinalDay]


@dataclass
class RuleOccurrence:
    """A TimeZone rule occurrence."""

    name: str
    """The name of the timezone occurrence e.g. EST."""

    offset: datetime.timedelta
    """UTC offset for this timezone occurrence (not time added to local time)."""

    def __post_init__(self) -> None:
        """Convert the offset from time added to local time to get UTC to a UTC offset."""
        self.offset = _ZERO - self.offset


@dataclass(frozen=True)
class AnnualRule:
    """One of an alternating pair of rules that apply every year."""

    name: str
    """The identifier of the rule pair."""

    date: RuleDateType
    """When in each year the rule takes effect."""

    save: int
    """Seconds of daylight savings added to standard time while in effect."""

    letter: str
    """Abbreviation substituted into the zone format while in effect."""

    time_modifier: TimeModifier = TimeModifier.WALL

    def for_year(self, year: int) -> RuleRecord:
        """Return the dated instance of this rule for the year."""
        return RuleRecord(
            name=self.name,
            local_start=self.date.local_start(year),
            time_modifier=self.time_modifier,
            save=self.save,
            letter=self.letter,
        )


@dataclass
class Rule:
    """A rule for evaluating future timezone transitions."""

    std: RuleOccurrence
    """An occurrence of a timezone transition for standard time."""

    dst: Optional[RuleOccurrence] = None
    """An occurrence of a timezone transition for daylight savings time."""

    dst_start: Optional[RuleDateType] = None
    """Describes when dst goes into effect."""

    dst_end: Optional[RuleDateType] = None
    """Describes when dst ends (std starts)."""

    @property
    def has_transitions(self) -> bool:
        """Return True if the rule alternates between standard and dst."""
        return bool(self.dst and self.dst_start and self.dst_end)

    def annual_rules(self, rule_id: str) -> tuple[AnnualRule, AnnualRule]:
        """Return the pair of rules for when dst starts and ends each year."""
        if not self.dst or not self.dst_start or not self.dst_end:
            raise ValueError(f"TZ rule has no daylight savings transitions: {rule_id}")
        save = int((self.dst.offset - self.std.offset).total_seconds())
        return (
            AnnualRule(rule_id, self.dst_start, save, self.dst.name),
            AnnualRule(rule_id, self.dst_end, 0, self.std.name),
        )


# Regexp for parsing the TZ string
_OFFSET_RE_PATTERN: re.Pattern[str] = re.compile(
    r"(?P<name>(\<[+\-]?\d+\>|[a-zA-Z]+))"  # name
    r"((?P<hour>[+-]?\d+)(?::(?P<minutes>\d{1,2})(?::(?P<seconds>\d{1,2}))?)?)?"  # offset
)
_START_END_RE_PATTERN = re.compile(
    # days in either julian (J prefix), zero based, or month.week.day (M prefix) format
    r",(J(?P<day_of_year>\d+)|(?P<day_index>\d+)|M(?P<month>\d{1,2})\.(?P<week_of_month>\d)\.(?P<day_of_week>\d))"
    # time
    r"(\/(?P<hour>[+-]?\d+)(?::(?P<minutes>\d{1,2})(?::(?P<seconds>\d{1,2}))?)?)?"
)


def _rule_occurrence_from_match(match: re.Match[str]) -> RuleOccurrence:
    """Create a rule occurrence from a regex match."""
    return RuleOccurrence(
        name=match.group("name").strip("<>"),
        offset=_parse_time(match.groupdict()) or _ZERO,
    )


def _rule_date_from_match(match: re.Match[str]) -> RuleDateType:
    """Create a rule date from a regex match."""
    time = _parse_time(match.groupdict())
    if time is None:
        time = _DEFAULT_TIME_DELTA
    if match["day_of_year"] is not None:
        day_of_year = int(match.group("day_of_year"))
        if not 1 <= day_of_year <= 365:
            raise ValueError(f"Julian day must be between 1 and 365: {day_of_year}")
        return RuleDay(day_of_year=day_of_year, time=time)
    if match["day_index"] is not None:
        day_index = int(match.group("day_index"))
        if not 0 <= day_index <= 365:
            raise ValueError(f"Day of year must be between 0 and 365: {day_index}")
        return RuleOrdinalDay(day_index=day_index, time=time)
    month = int(match.group("month"))
    week_of_month = int(match.group("week_of_month"))
    day_of_week = int(match.group("day_of_week"))
    if not 1 <= month <= 12 or not 1 <= week_of_month <= 5 or not 0 <= day_of_week <= 6:
        raise ValueError(f"Invalid month.week.day in TZ rule: {match.group(0)}")
    return RuleDate(
        month=month,
        week_of_month=week_of_month,
        day_of_week=day_of_week,
        time=time,
    )


def parse_tz_rule(tz_str: str) -> Rule:
    """Parse the TZ string into a Rule object."""
    buffer = tz_str
    if (std_match := _OFFSET_RE_PATTERN.match(buffer)) is None:
        raise ValueError(f"Unable to parse TZ string: {tz_str}")
    buffer = buffer[std_match.end() :]
    if (dst_match := _OFFSET_RE_PATTERN.match(buffer)) is not None:
        buffer = buffer[dst_match.end() :]
    if (std_start := _START_END_RE_PATTERN.match(buffer)) is not None:
        buffer = buffer[std_start.end() :]
    if (std_end := _START_END_RE_PATTERN.match(buffer)) is not None:
        buffer = buffer[std_end.end() :]
    if (std_start is None) != (std_end is None):
        raise ValueError(
            f"Unable to parse TZ string, should have both or neither start and end dates: {tz_str}"
        )
    if buffer:
        raise ValueError(
            f"Unable to parse TZ string, unexpected trailing data: {tz_str}"
        )
    std = _rule_occurrence_from_match(std_match)
    dst = None
    if dst_match:
        dst = _rule_occurrence_from_match(dst_match)
        if dst_match.group("hour") is None:
            # If the dst offset is omitted, it defaults to one hour ahead of standard time.
            dst.offset = std.offset + datetime.timedelta(hours=1)
    return Rule(
        std=std,
        dst=dst,
        dst_start=_rule_date_from_match(std_start) if std_start else None,
        dst_end=_rule_date_from_match(std_end) if std_end else None,
    )
