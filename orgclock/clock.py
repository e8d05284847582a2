# orgclock/clock.py
from __future__ import annotations

import datetime as dt
import enum
import re
from dataclasses import dataclass, replace
from typing import Optional, Tuple

from .util.duration import format_hhmm, parse_signed_hhmm
from .util.tz import localize, to_utc, tz_for_date


class ClockParseError(ValueError):
    """A line has the shape of a clock but its date/time fields are invalid."""


class TimestampType(enum.Enum):
    ACTIVE = "active"      # <2022-12-12 Mon 10:45>
    INACTIVE = "inactive"  # [2022-12-12 Mon 10:45]

    @classmethod
    def from_mark(cls, mark: str) -> "TimestampType":
        return cls.ACTIVE if mark == "<" else cls.INACTIVE

    @property
    def open(self) -> str:
        return "<" if self is TimestampType.ACTIVE else "["

    @property
    def close(self) -> str:
        return ">" if self is TimestampType.ACTIVE else "]"


CLOCK_RE = re.compile(
    r"""
    ^\s*clock:\s*
    ([\[<])                             # timestamp type
    ([0-9]{4})-([0-9]{2})-([0-9]{2})    # yyyy-mm-dd
    \s+\w+\s+                           # day of week (may be localized, unchecked)
    ([0-9]{2}):([0-9]{2})               # HH:MM
    [\]>]
    (?:\s*--\s*
        [\[<]
        ([0-9]{4})-([0-9]{2})-([0-9]{2})
        \s+\w+\s+
        ([0-9]{2}):([0-9]{2})
        [\]>]
    )?
    (?:\s*=>\s*
        (-?[0-9]{1,2}:[0-9]{2})         # recorded duration
    )?
    """,
    re.IGNORECASE | re.VERBOSE,
)

# Day names are always written in English, independent of the process locale.
_DOW = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


def format_timestamp(d: dt.datetime) -> str:
    return f"{d:%Y-%m-%d} {_DOW[d.weekday()]} {d:%H:%M}"


@dataclass(frozen=True)
class Clock:
    line: int
    parent: int
    start: dt.datetime
    end: Optional[dt.datetime] = None
    duration_string: Optional[str] = None
    timestamp_type: TimestampType = TimestampType.INACTIVE

    def __str__(self) -> str:
        o = self.timestamp_type.open
        c = self.timestamp_type.close
        out = f"{o}{format_timestamp(self.start)}{c}"
        if self.end is not None:
            out += f"--{o}{format_timestamp(self.end)}{c} => {self.duration_formatted():>5}"
        return out

    def to_line(self) -> str:
        return f"CLOCK: {self}"

    def is_running(self) -> bool:
        return self.end is None

    def duration(self) -> dt.timedelta:
        if self.end is None:
            return dt.timedelta(0)
        return self.end - self.start

    def duration_formatted(self) -> str:
        return format_hhmm(self.duration())

    def interval(self, now: Optional[dt.datetime] = None) -> Tuple[dt.datetime, dt.datetime]:
        """UTC instants of [start, end); both ends use the zone of the start date.

        A running clock ends at `now` (naive local time, default: current time).
        """
        tz = tz_for_date(self.start.date())
        end = self.end if self.end is not None else (now or dt.datetime.now())
        return to_utc(self.start, tz), to_utc(end, tz)

    def effective_end(self, now: Optional[dt.datetime] = None) -> dt.datetime:
        if self.end is not None:
            return self.end
        return now or dt.datetime.now()

    def matches_duration(self) -> bool:
        """Does the recorded "=> H:MM" match start->end?"""
        if self.is_running():
            return True
        recorded = parse_signed_hhmm(self.duration_string)
        if recorded is None:
            return False
        start, end = self.interval()
        return recorded == end - start

    def overlaps(self, other: "Clock", now: Optional[dt.datetime] = None) -> bool:
        start, end = self.interval(now)
        other_start, other_end = other.interval(now)
        return not (end <= other_start or start >= other_end)

    def with_bounds(self, start: dt.datetime, end: Optional[dt.datetime]) -> "Clock":
        """Copy with new bounds; the recorded duration follows the new bounds."""
        duration_string = None if end is None else format_hhmm(end - start)
        return replace(self, start=start, end=end, duration_string=duration_string)


def _datetime(year: str, month: str, day: str, hour: str, minute: str) -> dt.datetime:
    naive = dt.datetime(int(year), int(month), int(day), int(hour), int(minute))
    # Rejects wall times that do not exist in the zone for that date.
    localize(naive, tz_for_date(naive.date()), strict=True)
    return naive


def parse_clock(line: str) -> Optional[Clock]:
    """Parse one line as a clock record.

    Returns None when the line is not a clock at all. Raises ClockParseError
    when the line matches the clock grammar but does not name a valid time.
    The returned clock has line=0 and parent=0; the caller fills them in.
    """
    m = CLOCK_RE.match(line)
    if not m:
        return None

    full = m.group(0)
    try:
        start = _datetime(*m.group(2, 3, 4, 5, 6))
    except ValueError as ex:
        raise ClockParseError(f"error parsing start: {full.strip()!r} ({ex})") from ex

    end = None
    if m.group(7) is not None:
        try:
            end = _datetime(*m.group(7, 8, 9, 10, 11))
        except ValueError as ex:
            raise ClockParseError(f"error parsing end: {full.strip()!r} ({ex})") from ex

    return Clock(
        line=0,
        parent=0,
        start=start,
        end=end,
        duration_string=m.group(12),
        timestamp_type=TimestampType.from_mark(m.group(1)),
    )


__all__ = [
    "CLOCK_RE",
    "Clock",
    "ClockParseError",
    "TimestampType",
    "format_timestamp",
    "parse_clock",
]
