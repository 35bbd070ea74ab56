"""Tests for converting between instant representations."""

import datetime

import pytest

from tzperiods.instant import (
    UNIX_EPOCH_GREGORIAN_SECONDS,
    CivilDateTime,
    IsoDays,
    civil_datetime_to_seconds,
    days_and_day_fraction_to_seconds,
    gregorian_to_unix_seconds,
    seconds_to_civil_datetime,
    unix_to_gregorian_seconds,
)

DAY = 86400


def test_unix_epoch() -> None:
    """Test the gregorian seconds of the unix epoch."""
    assert civil_datetime_to_seconds(datetime.datetime(1970, 1, 1)) == 62167219200
    assert UNIX_EPOCH_GREGORIAN_SECONDS == 62167219200
    assert unix_to_gregorian_seconds(0) == 62167219200
    assert gregorian_to_unix_seconds(62167219200 + 60) == 60


def test_year_zero() -> None:
    """Test the epoch of gregorian seconds in year 0, a leap year."""
    assert civil_datetime_to_seconds(CivilDateTime(0, 1, 1)) == 0
    assert civil_datetime_to_seconds(CivilDateTime(0, 2, 29)) == 59 * DAY
    assert civil_datetime_to_seconds(CivilDateTime(0, 3, 1)) == 60 * DAY
    assert civil_datetime_to_seconds(CivilDateTime(1, 1, 1)) == 366 * DAY
    assert seconds_to_civil_datetime(0) == CivilDateTime(0, 1, 1)
    assert seconds_to_civil_datetime(366 * DAY - 1) == CivilDateTime(
        0, 12, 31, 23, 59, 59
    )


@pytest.mark.parametrize(
    "value",
    [
        CivilDateTime(-1, 12, 31, 23, 59, 59),
        CivilDateTime(-4000, 6, 15),
    ],
)
def test_negative_year_clamped(value: CivilDateTime) -> None:
    """Test that years before year 0 clamp to the epoch."""
    assert civil_datetime_to_seconds(value) == 0


@pytest.mark.parametrize(
    "value",
    [
        datetime.datetime(1, 1, 1),
        datetime.datetime(1600, 2, 29, 12, 0, 0),
        datetime.datetime(1883, 11, 18, 12, 3, 58),
        datetime.datetime(1900, 3, 1),
        datetime.datetime(2000, 2, 29, 23, 59, 59),
        datetime.datetime(2023, 3, 12, 2, 30, 0),
        datetime.datetime(9999, 12, 31, 23, 59, 59),
    ],
)
def test_matches_datetime_ordinal(value: datetime.datetime) -> None:
    """Test conversions agree with the proleptic calendar of datetime."""
    seconds_of_day = value.hour * 3600 + value.minute * 60 + value.second
    expected = (value.toordinal() + 365) * DAY + seconds_of_day
    assert civil_datetime_to_seconds(value) == expected
    assert seconds_to_civil_datetime(expected) == CivilDateTime.from_datetime(value)
    assert seconds_to_civil_datetime(expected).to_datetime() == value


def test_beyond_datetime_range() -> None:
    """Test civil values outside of what datetime can represent."""
    value = CivilDateTime(12000, 2, 29, 1, 2, 3)
    assert seconds_to_civil_datetime(civil_datetime_to_seconds(value)) == value


def test_microseconds_dropped() -> None:
    """Test that sub-second precision of a datetime is truncated."""
    value = datetime.datetime(2023, 3, 12, 2, 30, 0, 999999)
    assert civil_datetime_to_seconds(value) == civil_datetime_to_seconds(
        value.replace(microsecond=0)
    )


def test_aware_datetime_rejected() -> None:
    """Test that wall clock times must not have an offset."""
    with pytest.raises(ValueError, match="naive"):
        civil_datetime_to_seconds(
            datetime.datetime(2023, 1, 1, tzinfo=datetime.timezone.utc)
        )


@pytest.mark.parametrize(
    "days,fraction,fraction_unit,expected",
    [
        (719528, 0, 1, 62167219200),
        (719528, 43200, 86400, 62167219200 + 43200),
        (719528, 500_000, 1_000_000, 62167219200 + 43200),
        (719528, 86_399_999_999, 86_400_000_000, 62167219200 + 86399),
        (0, 1, 86_400_000, 0),
        (-1, 0, 86400, -86400),
    ],
)
def test_days_and_day_fraction(
    days: int, fraction: int, fraction_unit: int, expected: int
) -> None:
    """Test converting a day count and fraction of day to seconds."""
    assert days_and_day_fraction_to_seconds(days, fraction, fraction_unit) == expected


def test_invalid_fraction_unit() -> None:
    """Test that the fraction unit must be positive."""
    with pytest.raises(ValueError, match="must be positive"):
        days_and_day_fraction_to_seconds(1, 0, 0)


def test_iso_days_from_datetime() -> None:
    """Test creating an absolute instant from aware and naive datetimes."""
    value = IsoDays.from_datetime(
        datetime.datetime(
            2023,
            1,
            1,
            tzinfo=datetime.timezone(datetime.timedelta(hours=-5)),
        )
    )
    assert value == IsoDays(
        civil_datetime_to_seconds(datetime.datetime(2023, 1, 1)) // DAY,
        5 * 3600 * 1_000_000,
        86_400_000_000,
    )
    assert days_and_day_fraction_to_seconds(*value) == civil_datetime_to_seconds(
        datetime.datetime(2023, 1, 1, 5)
    )

    naive = IsoDays.from_datetime(datetime.datetime(1970, 1, 1, 0, 0, 1, 500))
    assert days_and_day_fraction_to_seconds(*naive) == 62167219201


def test_civil_datetime_str() -> None:
    """Test the string representation of civil values."""
    assert str(CivilDateTime(2023, 3, 12, 2)) == "2023-03-12T02:00:00"
    assert str(CivilDateTime(0, 1, 1)) == "0000-01-01T00:00:00"
