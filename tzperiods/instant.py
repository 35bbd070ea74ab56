"""Library for converting between instant representations.

All resolution happens on "gregorian seconds": an integer count of seconds
since 0000-01-01T00:00:00 in the proleptic Gregorian calendar. Instants arrive
at the boundary in one of three forms:

  - A day count plus a fraction of the day in arbitrary units (`IsoDays`)
  - Civil date and time fields (`CivilDateTime` or a naive `datetime`)
  - A single integer count of seconds since the unix epoch

Python's `datetime` can't represent year 0, so civil values use a small
dataclass with pure arithmetic conversions that are total for any year.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import NamedTuple, Self

__all__ = [
    "CivilDateTime",
    "IsoDays",
    "days_and_day_fraction_to_seconds",
    "civil_datetime_to_seconds",
    "seconds_to_civil_datetime",
    "unix_to_gregorian_seconds",
    "gregorian_to_unix_seconds",
]

SECONDS_PER_DAY = 86_400
MICROSECONDS_PER_DAY = SECONDS_PER_DAY * 1_000_000

# Days in a 400 year cycle of the Gregorian calendar
_DAYS_PER_ERA = 146_097

# Days from 0000-01-01 to 0000-03-01 (year 0 is a leap year)
_DAYS_BEFORE_MARCH = 60

UNIX_EPOCH_GREGORIAN_SECONDS = 62_167_219_200
"""Gregorian seconds at 1970-01-01T00:00:00."""


@dataclass(frozen=True, order=True)
class CivilDateTime:
    """A wall clock date and time in the proleptic Gregorian calendar."""

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0

    @classmethod
    def from_datetime(cls, value: datetime.datetime) -> Self:
        """Create a civil value from the fields of a datetime (microseconds dropped)."""
        return cls(
            value.year, value.month, value.day, value.hour, value.minute, value.second
        )

    def to_datetime(self) -> datetime.datetime:
        """Return a naive datetime, only valid for years supported by datetime."""
        return datetime.datetime(
            self.year, self.month, self.day, self.hour, self.minute, self.second
        )

    def __str__(self) -> str:
        return (
            f"{self.year:04}-{self.month:02}-{self.day:02}"
            f"T{self.hour:02}:{self.minute:02}:{self.second:02}"
        )


class IsoDays(NamedTuple):
    """An absolute instant as days since year 0 and a fraction of a day.

    The fraction is counted in ticks where `fraction_unit` ticks make a day,
    e.g. a fraction unit of 86400 is seconds of the day.
    """

    days: int
    fraction: int
    fraction_unit: int

    @classmethod
    def from_datetime(cls, value: datetime.datetime) -> IsoDays:
        """Create from an aware datetime, or a naive datetime assumed to be UTC."""
        if value.tzinfo is not None:
            value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
        days = _days_from_civil(value.year, value.month, value.day)
        micros = (
            (value.hour * 60 + value.minute) * 60 + value.second
        ) * 1_000_000 + value.microsecond
        return cls(days, micros, MICROSECONDS_PER_DAY)


def days_and_day_fraction_to_seconds(
    days: int, fraction: int, fraction_unit: int
) -> int:
    """Return gregorian seconds for a day count and a fraction of a day."""
    if fraction_unit <= 0:
        raise ValueError(f"Fraction unit must be positive: {fraction_unit}")
    return (days * fraction_unit + fraction) * SECONDS_PER_DAY // fraction_unit


def civil_datetime_to_seconds(value: CivilDateTime | datetime.datetime) -> int:
    """Return gregorian seconds for a wall clock date and time.

    Years before year 0 are clamped to the epoch.
    """
    if isinstance(value, datetime.datetime):
        if value.tzinfo is not None:
            raise ValueError(f"Expected a naive local datetime: {value}")
        value = CivilDateTime.from_datetime(value)
    if value.year < 0:
        return 0
    days = _days_from_civil(value.year, value.month, value.day)
    return days * SECONDS_PER_DAY + (value.hour * 60 + value.minute) * 60 + value.second


def seconds_to_civil_datetime(seconds: int) -> CivilDateTime:
    """Return the wall clock date and time for gregorian seconds."""
    days, secs_of_day = divmod(seconds, SECONDS_PER_DAY)
    year, month, day = _civil_from_days(days)
    minutes, second = divmod(secs_of_day, 60)
    hour, minute = divmod(minutes, 60)
    return CivilDateTime(year, month, day, hour, minute, second)


def unix_to_gregorian_seconds(unix_seconds: int) -> int:
    """Return gregorian seconds for seconds since the unix epoch."""
    return unix_seconds + UNIX_EPOCH_GREGORIAN_SECONDS


def gregorian_to_unix_seconds(seconds: int) -> int:
    """Return seconds since the unix epoch for gregorian seconds."""
    return seconds - UNIX_EPOCH_GREGORIAN_SECONDS


def _days_from_civil(year: int, month: int, day: int) -> int:
    """Return days since 0000-01-01 for a date.

    Years are counted from March so the leap day is the last day of the year.
    """
    y = year - 1 if month <= 2 else year
    era = y // 400
    year_of_era = y - era * 400
    month_from_march = (month + 9) % 12
    day_of_year = (153 * month_from_march + 2) // 5 + day - 1
    day_of_era = (
        year_of_era * 365 + year_of_era // 4 - year_of_era // 100 + day_of_year
    )
    return era * _DAYS_PER_ERA + day_of_era + _DAYS_BEFORE_MARCH


def _civil_from_days(days: int) -> tuple[int, int, int]:
    """Return the (year, month, day) for days since 0000-01-01."""
    days -= _DAYS_BEFORE_MARCH
    era = days // _DAYS_PER_ERA
    day_of_era = days - era * _DAYS_PER_ERA
    year_of_era = (
        day_of_era
        - day_of_era // 1460
        + day_of_era // 36524
        - day_of_era // (_DAYS_PER_ERA - 1)
    ) // 365
    day_of_year = day_of_era - (
        365 * year_of_era + year_of_era // 4 - year_of_era // 100
    )
    month_from_march = (5 * day_of_year + 2) // 153
    day = day_of_year - (153 * month_from_march + 2) // 5 + 1
    month = month_from_march + 3 if month_from_march < 10 else month_from_march - 9
    year = year_of_era + era * 400
    if month <= 2:
        year += 1
    return (year, month, day)
