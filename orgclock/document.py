# orgclock/document.py
from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import List, Optional, Tuple, Union

from .block import Block, parse_block_start
from .clock import Clock, ClockParseError, parse_clock
from .headline import Headline, parse_headline
from .util.console import eprint, obs_enabled
from .util.textlines import split_physical_lines, split_terminator

FileId = Union[str, Path]


@dataclass(frozen=True)
class OrgDocument:
    file: Path
    headlines: Tuple[Headline, ...]
    clocks: Tuple[Clock, ...]
    blocks: Tuple[Block, ...] = ()

    @classmethod
    def parse(cls, file: FileId, content: str) -> "OrgDocument":
        return parse_document(file, content)

    @property
    def file_name(self) -> str:
        return str(self.file)

    def headline_of(self, clock: Clock) -> Headline:
        return self.headlines[clock.parent]


def parse_document(file: FileId, content: str) -> OrgDocument:
    """Single pass over `content`, one physical line at a time.

    Priority per line: inside an open block only its end marker counts;
    then block start, headline, clock. Everything else is ignored.
    Headlines get the nearest shallower headline as parent; clocks belong to
    the innermost open headline.
    """
    path = Path(file)
    headlines: List[Headline] = []
    clocks: List[Clock] = []
    blocks: List[Block] = []
    parents: List[Tuple[int, int]] = []  # (headline index, level)
    current_block: Optional[Block] = None

    for i, raw in enumerate(split_physical_lines(content)):
        line_no = i + 1
        line, _ = split_terminator(raw)

        if current_block is not None:
            if current_block.closed_by(line):
                blocks.append(current_block.close(line_no))
                current_block = None
            continue

        block = parse_block_start(line)
        if block is not None:
            current_block = replace(block, start_line=line_no)
            continue

        headline = parse_headline(line)
        if headline is not None:
            while parents and parents[-1][1] >= headline.level:
                parents.pop()
            parent = parents[-1][0] if parents else None
            parents.append((len(headlines), headline.level))
            headlines.append(replace(headline, line=line_no, parent=parent))
            continue

        try:
            clock = parse_clock(line)
        except ClockParseError as ex:
            eprint(f"[orgclock.document] ERROR: {path}:{line_no}: {ex}")
            continue
        if clock is None:
            continue

        if not parents:
            eprint(f"[orgclock.document] WARN: {path}:{line_no}: clock outside of any headline; dropped")
            continue

        index = parents[-1][0]
        if clocks:
            last = clocks[-1]
            if last.parent == index and last.line != line_no - 1:
                eprint(
                    f"[orgclock.document] WARN: {path}:{line_no}: clock is not adjacent to "
                    f"the previous clock of the same headline (line {last.line})"
                )
        clocks.append(replace(clock, line=line_no, parent=index))

    if current_block is not None:
        eprint(
            f"[orgclock.document] WARN: {path}:{current_block.start_line}: "
            f"#+begin_{current_block.kind} is never closed; rest of file ignored"
        )

    if obs_enabled():
        eprint(f"[orgclock.document] parse.ok file={path} headlines={len(headlines)} clocks={len(clocks)}")

    return OrgDocument(file=path, headlines=tuple(headlines), clocks=tuple(clocks), blocks=tuple(blocks))
