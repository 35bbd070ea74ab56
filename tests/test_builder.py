"""Tests for building transition tables from zone lines and rules."""

import datetime

import pytest
from pydantic import ValidationError

from tzperiods.builder import (
    BuildMode,
    BuiltPeriod,
    RuleRecord,
    TimeModifier,
    ZoneLine,
    build_periods,
    format_abbreviation,
    periods_to_records,
)
from tzperiods.instant import civil_datetime_to_seconds
from tzperiods.model import Period, RecurringRule, TransitionRecord, TransitionTable
from tzperiods.tzif.tz_rule import AnnualRule

EST = Period(-18000, 0, "EST")
EDT = Period(-18000, 3600, "EDT")

NEW_YORK = ZoneLine(rules="US", abbr_format="E%sT", std_offset=-18000)


def secs(*args: int) -> int:
    """Return gregorian seconds for datetime arguments."""
    return civil_datetime_to_seconds(datetime.datetime(*args))


def rule_records(
    rules: tuple[AnnualRule, AnnualRule], years: list[int]
) -> list[RuleRecord]:
    """Return the dated rule records for each of the years."""
    return [rule.for_year(year) for year in years for rule in rules]


@pytest.mark.parametrize(
    "template,save,letter,utc_offset,expected",
    [
        ("E%sT", 3600, "D", -18000, "EDT"),
        ("E%sT", 0, "S", -18000, "EST"),
        ("GMT/BST", 0, "", 0, "GMT"),
        ("GMT/BST", 3600, "", 0, "BST"),
        ("IST/GMT", -3600, "", 3600, "GMT"),
        ("%z", 0, "", 19800, "+0530"),
        ("%z", 3600, "", -14400, "-03"),
        ("%z", 0, "", 0, "+00"),
        ("%z", 0, "", -17762, "-045602"),
        ("LMT", 0, "", -17762, "LMT"),
    ],
)
def test_format_abbreviation(
    template: str, save: int, letter: str, utc_offset: int, expected: str
) -> None:
    """Test zone abbreviation format templates."""
    assert format_abbreviation(template, save, letter, utc_offset) == expected


def test_build_authoritative(
    us_rules: tuple[AnnualRule, AnnualRule], new_york_table: TransitionTable
) -> None:
    """Test building a table for an ongoing zone line that follows rules."""
    periods = build_periods([NEW_YORK], rule_records(us_rules, [2022, 2023]))
    assert periods == [
        BuiltPeriod(None, secs(2022, 3, 13, 7), EST),
        BuiltPeriod(secs(2022, 3, 13, 7), secs(2022, 11, 6, 6), EDT),
        BuiltPeriod(secs(2022, 11, 6, 6), secs(2023, 3, 12, 7), EST),
        BuiltPeriod(secs(2023, 3, 12, 7), secs(2023, 11, 5, 6), EDT),
        BuiltPeriod(secs(2023, 11, 5, 6), None, EST, RecurringRule("US", "E%sT")),
    ]
    assert periods_to_records(periods) == new_york_table


def test_build_dynamic(us_rules: tuple[AnnualRule, AnnualRule]) -> None:
    """Test building a window of periods from an alternating rule cycle."""
    periods = build_periods(
        [NEW_YORK],
        rule_records(us_rules, [2022]),
        BuildMode.DYNAMIC_FAR_FUTURE,
    )
    assert periods == [
        BuiltPeriod(None, secs(2022, 3, 13, 7), EST),
        BuiltPeriod(secs(2022, 3, 13, 7), secs(2022, 11, 6, 6), EDT),
        BuiltPeriod(secs(2022, 11, 6, 6), None, EST),
    ]


def test_build_dynamic_southern_hemisphere() -> None:
    """Test the state before the window is taken from the last rule."""
    zone_line = ZoneLine(rules="AN", abbr_format="%s", std_offset=36000)
    records = [
        RuleRecord(
            name="AN",
            local_start=datetime.datetime(2023, 4, 2, 3),
            save=0,
            letter="AEST",
        ),
        RuleRecord(
            name="AN",
            local_start=datetime.datetime(2023, 10, 1, 2),
            save=3600,
            letter="AEDT",
        ),
    ]
    periods = build_periods([zone_line], records, BuildMode.DYNAMIC_FAR_FUTURE)
    aedt = Period(36000, 3600, "AEDT")
    aest = Period(36000, 0, "AEST")
    assert periods == [
        BuiltPeriod(None, secs(2023, 4, 1, 16), aedt),
        BuiltPeriod(secs(2023, 4, 1, 16), secs(2023, 9, 30, 16), aest),
        BuiltPeriod(secs(2023, 9, 30, 16), None, aedt),
    ]


@pytest.mark.parametrize(
    "time_modifier,local_start,expected",
    [
        (TimeModifier.WALL, datetime.datetime(2022, 11, 6, 2), secs(2022, 11, 6, 6)),
        (
            TimeModifier.STANDARD,
            datetime.datetime(2022, 11, 6, 1),
            secs(2022, 11, 6, 6),
        ),
        (TimeModifier.UTC, datetime.datetime(2022, 11, 6, 6), secs(2022, 11, 6, 6)),
    ],
)
def test_time_modifier(
    time_modifier: TimeModifier,
    local_start: datetime.datetime,
    expected: int,
) -> None:
    """Test the reckoning of rule times while daylight savings is in effect."""
    records = [
        RuleRecord(
            name="US",
            local_start=datetime.datetime(2022, 3, 13, 2),
            save=3600,
            letter="D",
        ),
        RuleRecord(
            name="US",
            local_start=local_start,
            time_modifier=time_modifier,
            save=0,
            letter="S",
        ),
    ]
    periods = build_periods([NEW_YORK], records)
    assert [period.from_secs for period in periods] == [
        None,
        secs(2022, 3, 13, 7),
        expected,
    ]


def test_zone_line_bounds(us_rules: tuple[AnnualRule, AnnualRule]) -> None:
    """Test rules outside of a zone line set the state or are ignored."""
    zone_line = ZoneLine(
        start_secs=secs(2022, 6, 1),
        until_secs=secs(2023, 6, 1),
        rules="US",
        abbr_format="E%sT",
        std_offset=-18000,
    )
    periods = build_periods([zone_line], rule_records(us_rules, [2022, 2023]))
    assert periods == [
        BuiltPeriod(secs(2022, 6, 1), secs(2022, 11, 6, 6), EDT),
        BuiltPeriod(secs(2022, 11, 6, 6), secs(2023, 3, 12, 7), EST),
        BuiltPeriod(secs(2023, 3, 12, 7), secs(2023, 6, 1), EDT),
    ]


def test_multiple_zone_lines(us_rules: tuple[AnnualRule, AnnualRule]) -> None:
    """Test a zone that changes from local mean time to following rules."""
    lmt = ZoneLine(until_secs=secs(2022, 1, 1), abbr_format="LMT", std_offset=-17762)
    zone_line = NEW_YORK.model_copy(update={"start_secs": secs(2022, 1, 1)})
    records = periods_to_records(
        build_periods([lmt, zone_line], rule_records(us_rules, [2022]))
    )
    lmt_period = Period(-17762, 0, "LMT")
    assert records == [
        TransitionRecord(
            secs(2022, 11, 6, 6), EST, EDT, RecurringRule("US", "E%sT")
        ),
        TransitionRecord(secs(2022, 3, 13, 7), EDT, EST),
        TransitionRecord(secs(2022, 1, 1), EST, lmt_period),
        TransitionRecord(None, lmt_period),
    ]


def test_no_change_is_dropped() -> None:
    """Test rule records that don't change the period are not transitions."""
    records = [
        RuleRecord(
            name="US",
            local_start=datetime.datetime(2022, 1, 1),
            save=0,
            letter="S",
        ),
    ]
    assert build_periods([NEW_YORK], records) == [
        BuiltPeriod(None, None, EST, RecurringRule("US", "E%sT")),
    ]


def test_rule_record_validation() -> None:
    """Test validation of rule records."""
    with pytest.raises(ValidationError, match="naive local time"):
        RuleRecord(
            name="US",
            local_start=datetime.datetime(2022, 1, 1, tzinfo=datetime.timezone.utc),
            save=0,
        )
    with pytest.raises(ValidationError, match="less than a day"):
        RuleRecord(name="US", local_start=datetime.datetime(2022, 1, 1), save=86400)


def test_zone_line_validation() -> None:
    """Test validation of zone lines."""
    with pytest.raises(ValidationError, match="start before it ends"):
        ZoneLine(start_secs=10, until_secs=10, abbr_format="UTC", std_offset=0)
    with pytest.raises(ValidationError, match="less than a day"):
        ZoneLine(abbr_format="UTC", std_offset=-86400)
