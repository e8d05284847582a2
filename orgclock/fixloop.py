# orgclock/fixloop.py
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Set

from .changes import apply_changes, group_by_file
from .conflict import ClockConflict, ConflictResolution, iter_conflicts
from .files import load_documents, read_org_text, write_org_text

Chooser = Callable[[ClockConflict, List[ConflictResolution]], Optional[ConflictResolution]]


@dataclass
class FixSummary:
    applied: int = 0
    skipped: int = 0
    cancelled: bool = False


def fix_conflicts(
    files: Sequence[Path],
    choose: Chooser,
    *,
    read_text: Callable[[Path], str] = read_org_text,
    write_text: Callable[[Path, str], None] = write_org_text,
    report: Optional[Callable[[ClockConflict], None]] = None,
    now: Optional[dt.datetime] = None,
) -> FixSummary:
    """Resolve conflicts one at a time until none is left unresolved.

    After every resolution that edits text, all files are parsed again and the
    search starts over: earlier edits shift line numbers and may remove or
    create overlaps. Skipped conflicts are remembered by fingerprint. `choose`
    returning None stops the loop.
    """
    summary = FixSummary()
    skipped: Set[tuple] = set()
    paths = [Path(p) for p in files]

    while True:
        docs = load_documents(paths, read_text)
        edited = False
        for conflict in iter_conflicts(docs, now):
            fp = conflict.fingerprint()
            if fp in skipped:
                continue
            if report is not None:
                report(conflict)

            choice = choose(conflict, conflict.resolution_options(now))
            if choice is None:
                summary.cancelled = True
                return summary

            changes = conflict.resolve(choice, now)
            if not changes:
                skipped.add(fp)
                summary.skipped += 1
                continue

            for batch in group_by_file(changes):
                apply_changes(batch, read_text=read_text, write_text=write_text)
            summary.applied += 1
            edited = True
            break

        if not edited:
            return summary


def prompt_resolution(
    conflict: ClockConflict,
    options: List[ConflictResolution],
    *,
    input_fn: Optional[Callable[[str], str]] = None,
    print_fn: Callable[[str], None] = print,
) -> Optional[ConflictResolution]:
    """Ask on the console which resolution to use; None on end of input."""
    read = input_fn or input
    print_fn("Select resolution:")
    for i, option in enumerate(options):
        print_fn(f"  {i}) {option.explanation}")
    while True:
        try:
            raw = read("> ")
        except EOFError:
            return None
        try:
            selected = int(raw.strip())
        except ValueError:
            selected = -1
        if 0 <= selected < len(options):
            return options[selected]
        print_fn("invalid input")
