# orgclock/block.py
from __future__ import annotations

import re
from dataclasses import dataclass, replace
from typing import Optional

BLOCK_START_RE = re.compile(r"^\s*#\+begin_(\S+)", re.IGNORECASE)
BLOCK_END_RE = re.compile(r"^\s*#\+end_(\S+)", re.IGNORECASE)


@dataclass(frozen=True)
class Block:
    """A #+begin_<kind> ... #+end_<kind> region; its lines are opaque."""

    start_line: int
    kind: str
    end_line: Optional[int] = None

    def closed_by(self, line: str) -> bool:
        m = BLOCK_END_RE.match(line)
        return bool(m) and m.group(1).lower() == self.kind.lower()

    def close(self, line_no: int) -> "Block":
        return replace(self, end_line=line_no)


def parse_block_start(line: str) -> Optional[Block]:
    m = BLOCK_START_RE.match(line)
    if not m:
        return None
    return Block(start_line=0, kind=m.group(1))
