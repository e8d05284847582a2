# orgclock/util/duration.py
from __future__ import annotations

import datetime as dt
import re
from typing import Optional

# Org clock durations: "H:MM", "HH:MM", optionally negative ("-1:10").
_HHMM_RE = re.compile(r"^(-?)(\d+):(\d{2})$")


def _int_or_zero(s: str) -> int:
    try:
        return int(s)
    except ValueError:
        return 0


def parse_signed_hhmm(s: Optional[str]) -> Optional[dt.timedelta]:
    """Parse a recorded clock duration like " 1:33" or "-1:10".

    The sign on the hour part applies to the whole value, so "-0:30" is
    minus thirty minutes. Returns None when there is no ':' at all.
    """
    if s is None:
        return None
    h, sep, m = s.strip().partition(":")
    if not sep:
        return None
    negative = h.startswith("-")
    td = dt.timedelta(hours=abs(_int_or_zero(h)), minutes=_int_or_zero(m))
    return -td if negative else td


def format_hhmm(td: dt.timedelta) -> str:
    total_min = int(td.total_seconds() / 60)
    sign = "-" if total_min < 0 else ""
    hours, minutes = divmod(abs(total_min), 60)
    return f"{sign}{hours}:{minutes:02d}"


def parse_duration_arg(s: str) -> dt.timedelta:
    """Strict "H:MM" parser for command-line values (no sign allowed)."""
    m = _HHMM_RE.match((s or "").strip())
    if not m or m.group(1):
        raise ValueError(f"Invalid duration (expected H:MM): {s!r}")
    hours = int(m.group(2))
    minutes = int(m.group(3))
    if minutes > 59:
        raise ValueError(f"Invalid duration (minutes > 59): {s!r}")
    return dt.timedelta(hours=hours, minutes=minutes)
