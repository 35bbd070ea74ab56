"""Library for reading TZif files.

The TZif format (rfc8536) is the compiled form of the time zone database. A
file starts with a data block of 32-bit transition times. Version 2 and later
files follow it with a second header, a block of 64-bit transition times that
supersedes the first, and a footer TZ string with the rules that apply after
the last transition.

Only what is needed to build a transition table is read: the transitions with
their local time types, the local time type in effect before the first
transition, and the footer. Leap second records and the standard/wall and
UT/local indicators are skipped since they have no effect on the offsets of a
zone.
"""

import logging
import struct
from dataclasses import dataclass
from typing import Optional

from .model import LocalTimeType, TimezoneInfo, Transition
from .tz_rule import parse_tz_rule

_LOGGER = logging.getLogger(__name__)

_MAGIC = b"TZif"
_V1 = b"\x00"
_VERSIONS = (_V1, b"2", b"3", b"4")

# magic, version, 15 unused octets, then the record counts of the data block
_HEADER = struct.Struct(">4sc15x6l")

# utoff, is dst, index of the designation
_LOCAL_TIME_TYPE = struct.Struct(">l?B")

# Size and struct format of a transition time in a data block
_V1_TIME = (4, "l")
_V2_TIME = (8, "q")

_LEAP_CORRECTION_SIZE = 4


@dataclass(frozen=True)
class _BlockCounts:
    """Number of records of each kind in a data block, from its header."""

    isutcnt: int
    isstdcnt: int
    leapcnt: int
    timecnt: int
    typecnt: int
    charcnt: int

    def size(self, time_size: int) -> int:
        """Return the length in octets of the data block."""
        return (
            self.timecnt * (time_size + 1)
            + self.typecnt * _LOCAL_TIME_TYPE.size
            + self.charcnt
            + self.leapcnt * (time_size + _LEAP_CORRECTION_SIZE)
            + self.isstdcnt
            + self.isutcnt
        )


def _read_header(content: bytes, offset: int) -> tuple[bytes, _BlockCounts]:
    """Return the version and record counts from the header at the offset."""
    if len(content) < offset + _HEADER.size:
        raise ValueError("zoneinfo file header was truncated")
    (magic, version, *counts) = _HEADER.unpack_from(content, offset)
    if magic != _MAGIC:
        raise ValueError("zoneinfo file did not contain magic header")
    if version not in _VERSIONS:
        raise ValueError(f"zoneinfo file has unsupported version {version!r}")
    block = _BlockCounts(*counts)
    if block.isutcnt not in (0, block.typecnt):
        raise ValueError(
            f"UTC/local indicators in datablock mismatched ({block.isutcnt}, {block.typecnt})"
        )
    if block.isstdcnt not in (0, block.typecnt):
        raise ValueError(
            f"standard/wall indicators in datablock mismatched ({block.isstdcnt}, {block.typecnt})"
        )
    return (version, block)


def _designation(designations: bytes, index: int) -> str:
    """Return the NUL terminated designation starting at the index."""
    end = designations.find(b"\x00", index)
    if end < 0:
        raise ValueError(f"Time zone designation at {index} is not terminated")
    return designations[index:end].decode("utf-8")


def _read_block(
    content: bytes, offset: int, block: _BlockCounts, time: tuple[int, str]
) -> tuple[list[Transition], LocalTimeType]:
    """Return the transitions and initial local time type of a data block."""
    if block.typecnt == 0:
        raise ValueError("Local time records in block is zero")
    if block.charcnt == 0:
        raise ValueError("Total number of octets is zero")
    (time_size, time_format) = time
    if len(content) < offset + block.size(time_size):
        raise ValueError("zoneinfo data block was truncated")

    times = struct.unpack_from(f">{block.timecnt}{time_format}", content, offset)
    offset += block.timecnt * time_size
    type_indexes = struct.unpack_from(f">{block.timecnt}B", content, offset)
    offset += block.timecnt
    records = [
        _LOCAL_TIME_TYPE.unpack_from(content, offset + index * _LOCAL_TIME_TYPE.size)
        for index in range(block.typecnt)
    ]
    offset += block.typecnt * _LOCAL_TIME_TYPE.size
    designations = content[offset : offset + block.charcnt]

    local_time_types = [
        LocalTimeType(utoff, dst, _designation(designations, index))
        for (utoff, dst, index) in records
    ]
    transitions: list[Transition] = []
    for transition_time, type_index in zip(times, type_indexes):
        if type_index >= len(local_time_types):
            raise ValueError(
                f"transition_type out of bounds {type_index} >= {len(local_time_types)}"
            )
        transitions.append(Transition(transition_time, local_time_types[type_index]))
    return (transitions, local_time_types[0])


def _read_footer(footer: bytes) -> Optional[str]:
    """Return the TZ string between the newlines of the footer, if any."""
    parts = footer.decode("utf-8").split("\n")
    if len(parts) != 3 or parts[0] or parts[2]:
        raise ValueError("Failed to read TZ footer")
    return parts[1] or None


def read_tzif(content: bytes) -> TimezoneInfo:
    """Read the TZif file and parse and return the timezone records."""
    (version, block) = _read_header(content, 0)
    offset = _HEADER.size
    if version == _V1:
        (transitions, initial_time_type) = _read_block(content, offset, block, _V1_TIME)
        _LOGGER.debug("Read v1 TZif with %d transitions", len(transitions))
        return TimezoneInfo(transitions, initial_time_type)

    # The 32-bit block is superseded by the 64-bit block that follows it
    offset += block.size(_V1_TIME[0])
    (_, block) = _read_header(content, offset)
    offset += _HEADER.size
    (transitions, initial_time_type) = _read_block(content, offset, block, _V2_TIME)
    tz_string = _read_footer(content[offset + block.size(_V2_TIME[0]) :])
    rule = parse_tz_rule(tz_string) if tz_string else None
    _LOGGER.debug(
        "Read TZif with %d transitions and TZ string %s", len(transitions), tz_string
    )
    return TimezoneInfo(transitions, initial_time_type, tz_string=tz_string, rule=rule)
