"""Period and rule stores backed by TZif files.

This package follows the same approach as zoneinfo for loading timezone
data, except that it prefers the tzdata python package and falls back to
the system TZPATH (the order can be swapped with
`tzperiods.config.prefer_system_tzpath`).

The TZ string footer of a TZif file is used as the identifier of the
recurring rule pair that applies after the last transition in the file.
"""

from __future__ import annotations

import logging
import os
import zoneinfo
from collections.abc import Callable
from functools import cache
from importlib import resources

from tzperiods import config
from tzperiods.exceptions import UnknownZoneError, ZoneDataError
from tzperiods.instant import unix_to_gregorian_seconds
from tzperiods.model import Period, RecurringRule, TransitionRecord, TransitionTable

from .model import LocalTimeType, TimezoneInfo
from .tz_rule import AnnualRule, parse_tz_rule
from .tzif import read_tzif

__all__ = [
    "TzifPeriodStore",
    "PosixRuleStore",
    "read",
    "periods_from_timezoneinfo",
]

_LOGGER = logging.getLogger(__name__)

# TZ string periods use the abbreviation from the rule as the letter
_TZ_STRING_ABBR_FORMAT = "%s"

# Daylight savings amount assumed when a zone has no standard time to compare
_DEFAULT_DST_SECONDS = 3600


@cache
def _read_system_timezones() -> set[str]:
    """Read and cache the set of system and tzdata timezones."""
    return zoneinfo.available_timezones()


@cache
def _find_tzfile(key: str) -> str | None:
    """Retrieve the path to a TZif file from a key."""
    for search_path in zoneinfo.TZPATH:
        filepath = os.path.join(search_path, key)
        if os.path.isfile(filepath):
            return filepath

    return None


@cache
def _read_tzdata_timezones() -> set[str]:
    """Returns the set of valid timezones from tzdata only."""
    try:
        with resources.files("tzdata").joinpath("zones").open(
            "r", encoding="utf-8"
        ) as zones_file:
            return {line.strip() for line in zones_file.readlines()}
    except ModuleNotFoundError:
        return set()


def _iana_key_to_resource(key: str) -> tuple[str, str]:
    """Returns the package and resource file for the specified timezone."""
    if "/" not in key:
        return "tzdata.zoneinfo", key
    package_loc, resource = key.rsplit("/", 1)
    package = "tzdata.zoneinfo." + package_loc.replace("/", ".")
    return package, resource


def _read_tzdata_package(key: str) -> TimezoneInfo | None:
    """Read the TZif file for the key from the tzdata package, if present."""
    (package, resource) = _iana_key_to_resource(key)
    try:
        with resources.files(package).joinpath(resource).open("rb") as tzdata_file:
            content = tzdata_file.read()
    except (ModuleNotFoundError, FileNotFoundError):
        return None
    try:
        return read_tzif(content)
    except ValueError as err:
        raise ZoneDataError(f"Unable to load tzdata module: {key}") from err


def _read_system_tzpath(key: str) -> TimezoneInfo | None:
    """Read the TZif file for the key from the system TZPATH, if present."""
    if (tzfile := _find_tzfile(key)) is None:
        return None
    with open(tzfile, "rb") as tzfile_file:
        try:
            return read_tzif(tzfile_file.read())
        except ValueError as err:
            raise ZoneDataError(f"Unable to load tzdata file: {key}") from err


def read(key: str) -> TimezoneInfo:
    """Read the TZif file for a zone and return timezone records."""
    _LOGGER.debug("Reading timezone: %s", key)
    return _read_cache(key, config.is_system_tzpath_preferred())


@cache
def _read_cache(key: str, system_tzpath_preferred: bool) -> TimezoneInfo:
    # Keys are joined to file paths, so reject anything that isn't a zone name
    if key not in _read_system_timezones() and key not in _read_tzdata_timezones():
        raise UnknownZoneError(key)

    readers: list[Callable[[str], TimezoneInfo | None]] = [
        _read_tzdata_package,
        _read_system_tzpath,
    ]
    if system_tzpath_preferred:
        readers.reverse()
    for reader in readers:
        if (result := reader(key)) is not None:
            return result

    raise ZoneDataError(f"Unable to find timezone data for {key}")


def _std_offsets(
    time_types: list[LocalTimeType], final_std: int | None = None
) -> list[int]:
    """Return the standard offset from UTC for each time type in sequence.

    TZif only records the total offset and whether it is daylight savings, so
    the standard offset of a daylight savings type is taken from the nearest
    standard time type before it, or otherwise after it.

    The footer rule states the standard offset after the last transition, so
    when given as `final_std` it is used for the last time type and for any
    daylight savings types with no standard type before them.
    """
    result: list[int | None] = [
        None if time_type.dst else time_type.utoff for time_type in time_types
    ]
    last_std: int | None = None
    for index, time_type in enumerate(time_types):
        if not time_type.dst:
            last_std = time_type.utoff
        elif last_std is not None:
            result[index] = last_std
    next_std = final_std
    for index in reversed(range(len(time_types))):
        if not time_types[index].dst:
            next_std = time_types[index].utoff
        elif result[index] is None:
            result[index] = (
                next_std
                if next_std is not None
                else time_types[index].utoff - _DEFAULT_DST_SECONDS
            )
    if final_std is not None:
        result[-1] = final_std
    return [value for value in result if value is not None]


def periods_from_timezoneinfo(info: TimezoneInfo) -> TransitionTable:
    """Return the transition table, most recent first, for TZif records."""
    recurring_rule: RecurringRule | None = None
    final_std: int | None = None
    if info.rule is not None and info.rule.has_transitions and info.tz_string:
        recurring_rule = RecurringRule(info.tz_string, _TZ_STRING_ABBR_FORMAT)
        final_std = int(info.rule.std.offset.total_seconds())

    time_types = [info.initial_time_type] + [
        transition.local_time_type for transition in info.transitions
    ]
    periods = [
        Period(std_offset, time_type.utoff - std_offset, time_type.designation)
        for (time_type, std_offset) in zip(
            time_types, _std_offsets(time_types, final_std)
        )
    ]
    records = [TransitionRecord(None, periods[0])]
    for transition, period in zip(info.transitions, periods[1:]):
        previous = records[-1].period
        if period == previous:
            continue
        records.append(
            TransitionRecord(
                unix_to_gregorian_seconds(transition.transition_time), period, previous
            )
        )

    if recurring_rule is not None:
        last = records[-1]
        records[-1] = TransitionRecord(
            last.from_secs, last.period, last.previous_period, recurring_rule
        )
    records.reverse()
    return records


class TzifPeriodStore:
    """A period store that reads transition tables from TZif files."""

    def periods(self, zone_id: str) -> TransitionTable:
        """Return the transition table for the zone."""
        return _periods_cache(zone_id, config.is_system_tzpath_preferred())


@cache
def _periods_cache(zone_id: str, system_tzpath_preferred: bool) -> TransitionTable:
    _LOGGER.debug("Building transition table: %s", zone_id)
    info = _read_cache(zone_id, system_tzpath_preferred)
    return tuple(periods_from_timezoneinfo(info))


class PosixRuleStore:
    """A rule store where rule identifiers are POSIX TZ strings."""

    def rules(self, rule_id: str) -> tuple[AnnualRule, AnnualRule]:
        """Return the pair of annual rules for when dst starts and ends."""
        return _rule_pair(rule_id)


@cache
def _rule_pair(rule_id: str) -> tuple[AnnualRule, AnnualRule]:
    try:
        return parse_tz_rule(rule_id).annual_rules(rule_id)
    except ValueError as err:
        raise ZoneDataError(f"Unable to load TZ rule: {rule_id}") from err
