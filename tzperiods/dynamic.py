"""Generate transitions past the end of a zone's static table.

The static table of a zone ends with a record that references an annual rule
pair (e.g. when DST starts and ends). For an instant past that record, both
rules are evaluated for the target year and the years on either side of it,
since the offsets of a rule near a year boundary can move its effective
instant into the adjacent year. The resulting six rule records are built into
a short table covering just that window.
"""

from __future__ import annotations

import datetime
import logging
from typing import TYPE_CHECKING

from .builder import BuildMode, ZoneLine, build_periods, periods_to_records
from .exceptions import ExtrapolationError
from .instant import seconds_to_civil_datetime
from .model import RecurringRule, TransitionTable

if TYPE_CHECKING:
    from .database import RuleStore

__all__ = [
    "generate_dynamic_periods",
]

_LOGGER = logging.getLogger(__name__)


def generate_dynamic_periods(
    secs: int,
    utc_offset: int,
    recurring_rule: RecurringRule,
    rule_store: RuleStore,
) -> TransitionTable:
    """Return a transition table for the year of the instant from a rule pair."""
    year = seconds_to_civil_datetime(secs).year
    if year - 1 < datetime.MINYEAR or year + 1 > datetime.MAXYEAR:
        raise ExtrapolationError(
            f"Unable to evaluate rules {recurring_rule.rule_id} for year {year}"
        )
    _LOGGER.debug(
        "Generating periods for year %d from rules %s", year, recurring_rule.rule_id
    )

    (rule1, rule2) = rule_store.rules(recurring_rule.rule_id)
    rule_records = [
        rule.for_year(rule_year)
        for rule_year in (year - 1, year, year + 1)
        for rule in (rule2, rule1)
    ]
    zone_line = ZoneLine(
        start_secs=None,
        until_secs=None,
        rules=recurring_rule.rule_id,
        abbr_format=recurring_rule.abbr_format,
        std_offset=utc_offset,
    )
    periods = build_periods([zone_line], rule_records, BuildMode.DYNAMIC_FAR_FUTURE)
    return periods_to_records(periods)
