"""An implementation of tzinfo based on resolving periods of a zone.

This adapts the period resolution to python's datetime time zone interface,
following PEP 495 for wall clock times that are ambiguous or fall in a gap:

  - An ambiguous time with fold=0 uses the earlier period, fold=1 the later one
  - A time in a gap with fold=0 uses the period before the gap, fold=1 after
"""

from __future__ import annotations

import datetime
from typing import assert_never

from .database import TimeZoneDatabase
from .instant import IsoDays
from .model import Ambiguous, Gap, Period, Unambiguous

__all__ = [
    "PeriodTzInfo",
]


class PeriodTzInfo(datetime.tzinfo):
    """An implementation of tzinfo for a zone in a TimeZoneDatabase."""

    def __init__(self, zone_id: str, database: TimeZoneDatabase | None = None) -> None:
        """Initialize PeriodTzInfo."""
        self._zone_id = zone_id
        self._database = database or TimeZoneDatabase()

    @property
    def zone_id(self) -> str:
        """Return the identifier of the zone."""
        return self._zone_id

    def _wall_period(self, dt: datetime.datetime) -> Period:
        """Return the period for the wall clock time of the datetime."""
        result = self._database.resolve_period_for_wall_instant(
            dt.replace(tzinfo=None), self._zone_id
        )
        match result:
            case Unambiguous(period=period):
                return period
            case Ambiguous(former=former, latter=latter):
                return latter if dt.fold else former
            case Gap(departing=departing, arriving=arriving):
                return arriving.period if dt.fold else departing.period
            case _:
                assert_never(result)

    def utcoffset(self, dt: datetime.datetime | None) -> datetime.timedelta | None:
        """Return offset of local time from UTC, as a timedelta object."""
        if dt is None:
            return None
        return self._wall_period(dt).utcoffset

    def tzname(self, dt: datetime.datetime | None) -> str | None:
        """Return the time zone abbreviation for the datetime."""
        if dt is None:
            return None
        return self._wall_period(dt).zone_abbr

    def dst(self, dt: datetime.datetime | None) -> datetime.timedelta | None:
        """Return the daylight saving time (DST) adjustment, if applicable."""
        if dt is None:
            return None
        return self._wall_period(dt).dst

    def fromutc(self, dt: datetime.datetime) -> datetime.datetime:
        """Convert a UTC time (with tzinfo of self) to local wall clock time."""
        if dt.tzinfo is not self:
            raise ValueError("fromutc: dt.tzinfo is not self")
        utc = dt.replace(tzinfo=None)
        period = self._database.resolve_period_for_utc_instant(
            IsoDays.from_datetime(utc), self._zone_id
        )
        local = utc + period.utcoffset
        result = self._database.resolve_period_for_wall_instant(local, self._zone_id)
        fold = int(isinstance(result, Ambiguous) and result.latter == period)
        return local.replace(tzinfo=self, fold=fold)

    def __str__(self) -> str:
        """Return the string representation of the timezone."""
        return self._zone_id

    def __repr__(self) -> str:
        """Return the string representation of the timezone."""
        return f"PeriodTzInfo({self._zone_id})"
