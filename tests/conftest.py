"""Test fixtures."""

import datetime
import zoneinfo
from collections.abc import Callable, Generator

import pytest

from tzperiods.database import (
    InMemoryPeriodStore,
    InMemoryRuleStore,
    TimeZoneDatabase,
)
from tzperiods.instant import civil_datetime_to_seconds
from tzperiods.model import Period, RecurringRule, TransitionRecord, TransitionTable
from tzperiods.tzif.tz_rule import AnnualRule, RuleDate

EST = Period(-18000, 0, "EST")
EDT = Period(-18000, 3600, "EDT")
US_RULE = RecurringRule("US", "E%sT")
TEST_ZONE = "Test/New_York"


def _secs(*args: int) -> int:
    return civil_datetime_to_seconds(datetime.datetime(*args))


@pytest.fixture(name="us_rules")
def mock_us_rules() -> tuple[AnnualRule, AnnualRule]:
    """Fixture for the rules of US daylight savings since 2007."""
    return (
        AnnualRule(
            "US",
            RuleDate(
                month=3,
                day_of_week=0,
                week_of_month=2,
                time=datetime.timedelta(hours=2),
            ),
            save=3600,
            letter="D",
        ),
        AnnualRule(
            "US",
            RuleDate(
                month=11,
                day_of_week=0,
                week_of_month=1,
                time=datetime.timedelta(hours=2),
            ),
            save=0,
            letter="S",
        ),
    )


@pytest.fixture(name="new_york_table")
def mock_new_york_table() -> TransitionTable:
    """Fixture for a New York table with 2022-2023 transitions, then US rules."""
    return [
        TransitionRecord(_secs(2023, 11, 5, 6), EST, EDT, US_RULE),
        TransitionRecord(_secs(2023, 3, 12, 7), EDT, EST),
        TransitionRecord(_secs(2022, 11, 6, 6), EST, EDT),
        TransitionRecord(_secs(2022, 3, 13, 7), EDT, EST),
        TransitionRecord(None, EST),
    ]


@pytest.fixture(name="database")
def mock_database(
    new_york_table: TransitionTable, us_rules: tuple[AnnualRule, AnnualRule]
) -> TimeZoneDatabase:
    """Fixture for a database with in memory stores."""
    return TimeZoneDatabase(
        InMemoryPeriodStore({TEST_ZONE: new_york_table}),
        InMemoryRuleStore({"US": us_rules}),
    )


@pytest.fixture(name="tzdata_zoneinfo")
def mock_tzdata_zoneinfo() -> (
    Generator[Callable[[str], zoneinfo.ZoneInfo], None, None]
):
    """Fixture for zoneinfo reading only from the tzdata package.

    Zones are read from tzdata first, so zoneinfo comparisons must not pick up
    a system database with a different release.
    """
    zoneinfo.reset_tzpath([])
    try:
        yield zoneinfo.ZoneInfo.no_cache
    finally:
        zoneinfo.reset_tzpath()
