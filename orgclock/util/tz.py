# orgclock/util/tz.py
from __future__ import annotations

import datetime as dt
import os
import re
from functools import lru_cache
from typing import Optional, Tuple

try:
    from zoneinfo import ZoneInfo  # py3.9+
except Exception:  # pragma: no cover
    ZoneInfo = None  # type: ignore

_OFFSET_RE = re.compile(r"^([+-])(\d{2}):?(\d{2})$")

# Clocks dated before the cutoff were recorded in the first zone, later ones
# in the second. Both can be overridden through the environment.
TZ_CUTOFF_DATE = dt.date(2019, 5, 1)
DEFAULT_TZ_BEFORE_CUTOFF = "America/Los_Angeles"
DEFAULT_TZ_AFTER_CUTOFF = "Europe/Berlin"


def normalize_tz_name(name: Optional[str]) -> str:
    """Normalize a timezone identifier.

    Supported forms:
      - None/"" -> "local"
      - "local" / "system" -> "local" (resolve to the machine's local timezone)
      - "UTC" / "Z" / "GMT" -> "UTC"
      - IANA names, e.g. "Europe/Berlin"
      - Fixed offsets: "+02:00", "+0200", "-08:00"
    """
    if name is None:
        return "local"
    s = str(name).strip()
    if not s:
        return "local"

    low = s.lower()
    if low in {"local", "system", "native"}:
        return "local"
    if low in {"utc", "z", "gmt", "utc0", "utc+0"}:
        return "UTC"
    return s


def resolve_tz(name: Optional[str]) -> dt.tzinfo:
    """Resolve a timezone name into a tzinfo.

    Raises ValueError for invalid timezone identifiers.
    """
    tz_name = normalize_tz_name(name)

    if tz_name == "UTC":
        return dt.timezone.utc

    if tz_name == "local":
        tz = dt.datetime.now().astimezone().tzinfo
        return tz or dt.timezone.utc

    m = _OFFSET_RE.match(tz_name)
    if m:
        sign_s, hh_s, mm_s = m.groups()
        hh = int(hh_s)
        mm = int(mm_s)
        if hh > 23 or mm > 59:
            raise ValueError(f"Invalid timezone offset: {tz_name!r}")
        sign = 1 if sign_s == "+" else -1
        return dt.timezone(dt.timedelta(minutes=sign * (hh * 60 + mm)))

    if ZoneInfo is not None:
        try:
            return ZoneInfo(tz_name)  # type: ignore[misc]
        except Exception as ex:
            raise ValueError(f"Invalid timezone identifier: {tz_name!r}") from ex

    raise ValueError(f"Invalid timezone identifier: {tz_name!r} (zoneinfo unavailable)")


@lru_cache(maxsize=None)
def cutoff_zones() -> Tuple[dt.tzinfo, dt.tzinfo]:
    """Return the (before, after) zones, resolved once per process."""
    before = os.getenv("ORGCLOCK_TZ_BEFORE") or DEFAULT_TZ_BEFORE_CUTOFF
    after = os.getenv("ORGCLOCK_TZ_AFTER") or DEFAULT_TZ_AFTER_CUTOFF
    return resolve_tz(before), resolve_tz(after)


def tz_for_date(d: dt.date) -> dt.tzinfo:
    before, after = cutoff_zones()
    return before if d < TZ_CUTOFF_DATE else after


def localize(naive: dt.datetime, tz: dt.tzinfo, *, strict: bool = True) -> dt.datetime:
    """Attach `tz` to a naive wall-clock time.

    An ambiguous time (clocks turned back) resolves to its earliest instant,
    falling back to the latest. A time inside a gap (clocks turned forward)
    has no valid reading: with `strict` this raises ValueError, otherwise
    zoneinfo's shifted reading is returned.
    """
    for fold in (0, 1):
        aware = naive.replace(tzinfo=tz, fold=fold)
        back = aware.astimezone(dt.timezone.utc).astimezone(tz)
        if back.replace(tzinfo=None) == naive:
            return aware
    if strict:
        raise ValueError(f"{naive.isoformat()} does not exist in {tz}")
    return naive.replace(tzinfo=tz, fold=0)


def to_utc(naive: dt.datetime, tz: dt.tzinfo, *, strict: bool = False) -> dt.datetime:
    # Same-zone aware datetimes compare by wall time in Python; compare instants in UTC.
    return localize(naive, tz, strict=strict).astimezone(dt.timezone.utc)
