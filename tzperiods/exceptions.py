"""Exceptions for tzperiods library."""


class TimeZoneError(Exception):
    """Base exception for all tzperiods errors."""


class UnknownZoneError(TimeZoneError):
    """Exception raised when a zone is not present in the period store.

    The 'zone_id' attribute contains the zone identifier that was requested.
    This is a data availability error and callers may retry after refreshing
    the period store.
    """

    def __init__(self, zone_id: str) -> None:
        """Initialize the UnknownZoneError with the requested zone."""
        super().__init__(f"Unable to find time zone: {zone_id}")
        self.zone_id = zone_id


class ZoneDataError(TimeZoneError):
    """Exception raised when zone or rule data is unreadable or malformed."""


class ExtrapolationError(ZoneDataError):
    """Exception raised when transitions can't be extrapolated from rules.

    Rules are evaluated to synthesize a short table of transitions around
    the requested year. If resolving against that table asks for rules
    again, the rule data is malformed or self referential. This is kept
    distinct from other data errors so that a bad zone id can be told
    apart from corrupt rule data.
    """
