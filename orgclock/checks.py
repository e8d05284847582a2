# orgclock/checks.py
from __future__ import annotations

import datetime as dt
import enum
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

from .document import OrgDocument

DEFAULT_LONG_DURATION = dt.timedelta(hours=10)


class FindingKind(enum.Enum):
    DURATION_MISMATCH = "duration_mismatch"
    LONG_DURATION = "long_duration"
    RUNNING_CLOCK = "running_clock"
    NEGATIVE_DURATION = "negative_duration"
    ZERO_DURATION = "zero_duration"


@dataclass(frozen=True)
class KnownLongDuration:
    """A long clock that is legitimate and should not be reported."""

    file: str       # matched as a suffix of the document path
    duration: str   # formatted "H:MM"
    title: str


@dataclass(frozen=True)
class CheckOptions:
    duration_mismatch: bool = True
    long_duration: bool = True
    running_clock: bool = True
    negative_duration: bool = True
    zero_clocks: bool = True
    long_duration_limit: dt.timedelta = DEFAULT_LONG_DURATION
    known_long: Sequence[KnownLongDuration] = field(default_factory=tuple)


@dataclass(frozen=True)
class Finding:
    kind: FindingKind
    file: Path
    line: int
    title: str
    message: str

    def render(self) -> str:
        return f"[{self.file}:{self.line}] {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "file": str(self.file),
            "line": self.line,
            "title": self.title,
            "message": self.message,
        }


def load_known_long(path: Path) -> List[KnownLongDuration]:
    """Load a JSON allowlist: [{"file": ..., "duration": "H:MM", "title": ...}, ...]."""
    obj = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(obj, list):
        raise ValueError(f"known-long file must contain a JSON list; got {type(obj).__name__}")
    out: List[KnownLongDuration] = []
    for i, item in enumerate(obj):
        if not isinstance(item, dict):
            raise ValueError(f"known-long entry #{i} must be an object")
        try:
            out.append(
                KnownLongDuration(
                    file=str(item["file"]),
                    duration=str(item["duration"]),
                    title=str(item["title"]),
                )
            )
        except KeyError as ex:
            raise ValueError(f"known-long entry #{i} is missing {ex.args[0]!r}") from ex
    return out


def _is_known_long(known: Sequence[KnownLongDuration], file_name: str, title: str, duration: str) -> bool:
    return any(file_name.endswith(k.file) and k.title == title and k.duration == duration for k in known)


def check_document(doc: OrgDocument, options: Optional[CheckOptions] = None) -> List[Finding]:
    """Per-clock sanity checks for one parsed document, in clock order."""
    opts = options or CheckOptions()
    findings: List[Finding] = []
    zero = dt.timedelta(0)

    for clock in doc.clocks:
        title = doc.headline_of(clock).title
        duration = clock.duration()
        formatted = clock.duration_formatted()

        def add(kind: FindingKind, message: str) -> None:
            findings.append(Finding(kind=kind, file=doc.file, line=clock.line, title=title, message=message))

        if opts.duration_mismatch and not clock.matches_duration():
            add(
                FindingKind.DURATION_MISMATCH,
                f"DURATION STRING DOES NOT MATCH: {title!r} ({clock.duration_string or ''} vs {formatted})",
            )

        if opts.long_duration and duration > opts.long_duration_limit:
            if not _is_known_long(opts.known_long, doc.file_name, title, formatted):
                add(FindingKind.LONG_DURATION, f"LONG DURATION: {formatted} in {title!r}")

        if opts.running_clock and clock.is_running():
            add(FindingKind.RUNNING_CLOCK, f"RUNNING CLOCK {title!r}")

        if opts.negative_duration and duration < zero:
            add(FindingKind.NEGATIVE_DURATION, f"NEGATIVE DURATION {title!r}: {formatted}")

        if opts.zero_clocks and duration == zero and not clock.is_running():
            add(FindingKind.ZERO_DURATION, f"ZERO DURATION {title!r}: {formatted}")

    return findings
