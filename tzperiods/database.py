"""Resolve the period in effect for an instant in a time zone.

This is the entry point of the library, combining a period store (a static
transition table for each zone) and a rule store (annual rule pairs for
extrapolating past the end of each table).

Example usage:
```python
import datetime

from tzperiods.database import resolve_period_for_wall_instant
from tzperiods.model import Gap

result = resolve_period_for_wall_instant(
    datetime.datetime(2023, 3, 12, 2, 30), "America/New_York"
)
assert isinstance(result, Gap)
print(result.departing.at, result.arriving.at)
```
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Callable, Mapping
from functools import cache
from typing import Protocol, TypeVar

from .dynamic import generate_dynamic_periods
from .exceptions import ExtrapolationError, UnknownZoneError, ZoneDataError
from .instant import (
    CivilDateTime,
    IsoDays,
    civil_datetime_to_seconds,
    days_and_day_fraction_to_seconds,
)
from .model import Period, TransitionTable, WallResolution
from .resolver import ExtrapolationNeeded, find_utc_period, find_wall_period
from .tzif.store import PosixRuleStore, TzifPeriodStore
from .tzif.tz_rule import AnnualRule

__all__ = [
    "PeriodStore",
    "RuleStore",
    "InMemoryPeriodStore",
    "InMemoryRuleStore",
    "TimeZoneDatabase",
    "resolve_period_for_utc_instant",
    "resolve_period_for_utc_datetime",
    "resolve_period_for_wall_instant",
]

_LOGGER = logging.getLogger(__name__)

_T = TypeVar("_T")


class PeriodStore(Protocol):
    """Provides the static transition table for a zone."""

    def periods(self, zone_id: str) -> TransitionTable:
        """Return the transition table for the zone, most recent first."""


class RuleStore(Protocol):
    """Provides the alternating pair of annual rules for a rule identifier."""

    def rules(self, rule_id: str) -> tuple[AnnualRule, AnnualRule]:
        """Return the pair of annual rules."""


class InMemoryPeriodStore:
    """A period store holding prebuilt transition tables."""

    def __init__(self, tables: Mapping[str, TransitionTable]) -> None:
        """Initialize InMemoryPeriodStore."""
        self._tables = dict(tables)

    def periods(self, zone_id: str) -> TransitionTable:
        """Return the transition table for the zone."""
        if (table := self._tables.get(zone_id)) is None:
            raise UnknownZoneError(zone_id)
        return table


class InMemoryRuleStore:
    """A rule store holding prebuilt rule pairs."""

    def __init__(self, rules: Mapping[str, tuple[AnnualRule, AnnualRule]]) -> None:
        """Initialize InMemoryRuleStore."""
        self._rules = dict(rules)

    def rules(self, rule_id: str) -> tuple[AnnualRule, AnnualRule]:
        """Return the pair of annual rules."""
        if (rules := self._rules.get(rule_id)) is None:
            raise ZoneDataError(f"Unable to find rules: {rule_id}")
        return rules


class TimeZoneDatabase:
    """Resolves periods for UTC and wall clock instants in a zone.

    Both stores default to reading the TZif files from the tzdata package
    or the system.
    """

    def __init__(
        self,
        period_store: PeriodStore | None = None,
        rule_store: RuleStore | None = None,
    ) -> None:
        """Initialize TimeZoneDatabase."""
        self._period_store = (
            period_store if period_store is not None else TzifPeriodStore()
        )
        self._rule_store = rule_store if rule_store is not None else PosixRuleStore()

    def resolve_period_for_utc_instant(
        self, instant: IsoDays | tuple[int, int, int], zone_id: str
    ) -> Period:
        """Return the period in effect at an absolute instant in the zone."""
        secs = days_and_day_fraction_to_seconds(*instant)
        table = self._period_store.periods(zone_id)
        return self._find_period(secs, table, find_utc_period)

    def resolve_period_for_utc_datetime(
        self, value: datetime.datetime, zone_id: str
    ) -> Period:
        """Return the period in effect at an aware (or naive UTC) datetime."""
        return self.resolve_period_for_utc_instant(IsoDays.from_datetime(value), zone_id)

    def resolve_period_for_wall_instant(
        self, value: CivilDateTime | datetime.datetime, zone_id: str
    ) -> WallResolution:
        """Return the period(s) for a wall clock time in the zone."""
        secs = civil_datetime_to_seconds(value)
        table = self._period_store.periods(zone_id)
        return self._find_period(secs, table, find_wall_period)

    def _find_period(
        self,
        secs: int,
        table: TransitionTable,
        resolver: Callable[[int, TransitionTable], _T | ExtrapolationNeeded],
    ) -> _T:
        """Resolve against the static table, then once against generated periods."""
        result = resolver(secs, table)
        if not isinstance(result, ExtrapolationNeeded):
            return result
        _LOGGER.debug(
            "Extrapolating periods for %s from rules %s",
            secs,
            result.recurring_rule.rule_id,
        )
        dynamic_table = generate_dynamic_periods(
            secs, result.utc_offset, result.recurring_rule, self._rule_store
        )
        result = resolver(secs, dynamic_table)
        if isinstance(result, ExtrapolationNeeded):
            raise ExtrapolationError(
                f"Generated periods require further extrapolation: {result.recurring_rule.rule_id}"
            )
        return result


@cache
def _default_database() -> TimeZoneDatabase:
    """Return the database backed by TZif files."""
    return TimeZoneDatabase()


def resolve_period_for_utc_instant(
    instant: IsoDays | tuple[int, int, int], zone_id: str
) -> Period:
    """Return the period in effect at an absolute instant in the zone."""
    return _default_database().resolve_period_for_utc_instant(instant, zone_id)


def resolve_period_for_utc_datetime(value: datetime.datetime, zone_id: str) -> Period:
    """Return the period in effect at an aware (or naive UTC) datetime."""
    return _default_database().resolve_period_for_utc_datetime(value, zone_id)


def resolve_period_for_wall_instant(
    value: CivilDateTime | datetime.datetime, zone_id: str
) -> WallResolution:
    """Return the period(s) for a wall clock time in the zone."""
    return _default_database().resolve_period_for_wall_instant(value, zone_id)
