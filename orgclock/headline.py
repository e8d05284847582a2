# orgclock/headline.py
from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Optional

HEADLINE_RE = re.compile(r"^(\*+)\s*(.+)$")
TITLE_TAGS_RE = re.compile(r"^(.+?)\s+(:[^\s]+:)\s*$")


@dataclass(frozen=True)
class Headline:
    line: int
    parent: Optional[int]
    level: int
    title: str
    tags_string: Optional[str] = None

    @property
    def tags(self) -> tuple[str, ...]:
        if not self.tags_string:
            return ()
        return tuple(t for t in self.tags_string.split(":") if t)


def parse_headline(line: str) -> Optional[Headline]:
    """Parse "** Title :tag1:tag2:" into a Headline (line/parent left for the caller)."""
    m = HEADLINE_RE.match(line)
    if not m:
        return None
    level = len(m.group(1))
    title = m.group(2)
    tags_string = None

    tm = TITLE_TAGS_RE.match(title)
    if tm:
        title, tags_string = tm.group(1), tm.group(2)

    return Headline(line=0, parent=None, level=level, title=title, tags_string=tags_string)
