# orgclock/conflict.py
from __future__ import annotations

import datetime as dt
import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Set, Tuple

from .changes import FileChange
from .clock import Clock
from .document import OrgDocument
from .headline import Headline


class InvalidResolutionError(RuntimeError):
    """A resolution was requested that the conflict does not offer."""


class ConflictResolution(enum.Enum):
    SHRINK_EARLIER = "shrink-earlier"
    SHRINK_LATER = "shrink-later"
    SPLIT_CONTAINING = "split-containing"
    REMOVE_INNER = "remove-inner"
    AUTO = "auto"
    SKIP = "skip"

    @property
    def explanation(self) -> str:
        return _EXPLANATIONS[self]


_EXPLANATIONS = {
    ConflictResolution.SHRINK_EARLIER: "Shrink earlier timestamp",
    ConflictResolution.SHRINK_LATER: "Shrink later timestamp",
    ConflictResolution.SPLIT_CONTAINING: "Split the outer timestamp",
    ConflictResolution.REMOVE_INNER: "Remove the inner timestamp",
    ConflictResolution.AUTO: "Merge timestamps",
    ConflictResolution.SKIP: "Skip",
}

ConflictIdentity = Tuple[Tuple[str, int], Tuple[str, int]]


@dataclass(frozen=True, eq=False)
class ClockConflict:
    """Two overlapping clocks, each with its file and owning headline.

    Equality and hashing ignore which clock came first.
    """

    file1: Path
    headline1: Headline
    clock1: Clock
    file2: Path
    headline2: Headline
    clock2: Clock

    def identity(self) -> ConflictIdentity:
        a = (str(self.file1), self.clock1.line)
        b = (str(self.file2), self.clock2.line)
        return (a, b) if a <= b else (b, a)

    def fingerprint(self) -> tuple:
        """Identity plus clock contents; survives re-parsing of unchanged text."""
        a = (str(self.file1), self.clock1.line, str(self.clock1))
        b = (str(self.file2), self.clock2.line, str(self.clock2))
        return (a, b) if a <= b else (b, a)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ClockConflict):
            return NotImplemented
        return self.identity() == other.identity()

    def __hash__(self) -> int:
        return hash(self.identity())

    def report(self) -> str:
        return (
            f"  {self.clock1} {self.headline1.title!r} {self.file1}:{self.clock1.line}\n"
            f"  {self.clock2} {self.headline2.title!r} {self.file2}:{self.clock2.line}"
        )

    # --- classification -----------------------------------------------------

    def is_same_headline(self) -> bool:
        return self.file1 == self.file2 and self.headline1.line == self.headline2.line

    def _ordered(self) -> Tuple[Clock, Path, Clock, Path]:
        if self.clock1.start <= self.clock2.start:
            return self.clock1, self.file1, self.clock2, self.file2
        return self.clock2, self.file2, self.clock1, self.file1

    def resolution_options(self, now: Optional[dt.datetime] = None) -> List[ConflictResolution]:
        R = ConflictResolution
        if self.is_same_headline():
            return [R.AUTO, R.SKIP]

        now = now or dt.datetime.now()
        earlier, _, later, _ = self._ordered()

        if earlier.effective_end(now) < later.effective_end(now):
            if earlier.is_running():
                return [R.SHRINK_EARLIER, R.SKIP]
            return [R.SHRINK_EARLIER, R.SHRINK_LATER, R.SKIP]

        # earlier contains later
        if later.is_running():
            return [R.REMOVE_INNER, R.SKIP]
        return [R.REMOVE_INNER, R.SPLIT_CONTAINING, R.SKIP]

    # --- resolution ---------------------------------------------------------

    def resolve(self, resolution: ConflictResolution, now: Optional[dt.datetime] = None) -> List[FileChange]:
        """Edits that apply `resolution`; SKIP yields none."""
        R = ConflictResolution
        if resolution is R.SKIP:
            return []

        now = now or dt.datetime.now()
        if resolution not in self.resolution_options(now):
            raise InvalidResolutionError(f"invalid resolution {resolution.name} for conflict:\n{self.report()}")

        if resolution is R.AUTO:
            if self.clock1.line <= self.clock2.line:
                keep, drop = self.clock1, self.clock2
            else:
                keep, drop = self.clock2, self.clock1
            start = min(keep.start, drop.start)
            end = None if keep.is_running() or drop.is_running() else max(keep.end, drop.end)  # type: ignore[type-var]
            return [
                FileChange.update(self.file1, keep.with_bounds(start, end)),
                FileChange.delete(self.file2, drop),
            ]

        earlier, earlier_file, later, later_file = self._ordered()

        if resolution is R.SHRINK_EARLIER:
            return [FileChange.update(earlier_file, earlier.with_bounds(earlier.start, later.start))]
        if resolution is R.SHRINK_LATER:
            return [FileChange.update(later_file, later.with_bounds(earlier.end, later.end))]  # type: ignore[arg-type]
        if resolution is R.SPLIT_CONTAINING:
            head = earlier.with_bounds(earlier.start, later.start)
            tail = earlier.with_bounds(later.end, earlier.end)  # type: ignore[arg-type]
            return [
                FileChange.update(earlier_file, head),
                FileChange.add(earlier_file, tail),
            ]
        # REMOVE_INNER
        return [FileChange.delete(later_file, later)]


def _entries(documents: Iterable[OrgDocument]) -> List[Tuple[Path, Headline, Clock]]:
    return [(doc.file, doc.headline_of(clock), clock) for doc in documents for clock in doc.clocks]


def iter_conflicts(documents: Iterable[OrgDocument], now: Optional[dt.datetime] = None) -> Iterator[ClockConflict]:
    """Yield every overlapping pair of clocks once, across all documents.

    Pairwise comparison over all clocks in document order; a pair found
    again in reverse order is not reported twice.
    """
    now = now or dt.datetime.now()
    entries = _entries(documents)
    spans = [clock.interval(now) for _, _, clock in entries]
    seen: Set[ConflictIdentity] = set()

    for i, (file1, headline1, clock1) in enumerate(entries):
        start1, end1 = spans[i]
        for j, (file2, headline2, clock2) in enumerate(entries):
            if i == j:
                continue
            if file1 == file2 and clock1.line == clock2.line:
                continue
            start2, end2 = spans[j]
            if end1 <= start2 or start1 >= end2:
                continue
            conflict = ClockConflict(file1, headline1, clock1, file2, headline2, clock2)
            key = conflict.identity()
            if key in seen:
                continue
            seen.add(key)
            yield conflict


def find_conflicts(documents: Iterable[OrgDocument], now: Optional[dt.datetime] = None) -> List[ClockConflict]:
    return list(iter_conflicts(documents, now))
