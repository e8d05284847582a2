# orgclock/changes.py
"""Line-addressed edits of clock lines and their application to file text.

A batch of edits always targets one file. Edits are applied from the highest
line number down, so an applied edit never moves a line that is still
waiting for its own edit.
"""

from __future__ import annotations

import enum
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Union

from .clock import Clock
from .headline import Headline
from .util.textlines import split_physical_lines, split_terminator

_INDENT_RE = re.compile(r"^[ \t]*")


class ChangeBatchError(ValueError):
    """A batch of changes cannot be applied (mixed files, line out of range)."""


class ChangeContractError(RuntimeError):
    """A fixup was asked to move a headline that is itself being edited."""


class ChangeKind(enum.Enum):
    ADD = "add"
    DELETE = "delete"
    UPDATE = "update"


@dataclass(frozen=True)
class FileChange:
    kind: ChangeKind
    file: Path
    clock: Clock

    @classmethod
    def add(cls, file: Union[str, Path], clock: Clock) -> "FileChange":
        return cls(kind=ChangeKind.ADD, file=Path(file), clock=clock)

    @classmethod
    def delete(cls, file: Union[str, Path], clock: Clock) -> "FileChange":
        return cls(kind=ChangeKind.DELETE, file=Path(file), clock=clock)

    @classmethod
    def update(cls, file: Union[str, Path], clock: Clock) -> "FileChange":
        return cls(kind=ChangeKind.UPDATE, file=Path(file), clock=clock)

    @property
    def line(self) -> int:
        return self.clock.line

    def describe(self) -> str:
        return f"{self.kind.value} {self.file}:{self.line} {self.clock}"

    # --- line bookkeeping ---------------------------------------------------

    def fixup_headline(self, headline: Headline) -> Headline:
        """Line number of `headline` (parsed from the pre-edit text) after this edit."""
        if headline.line < self.line:
            return headline
        if headline.line == self.line:
            raise ChangeContractError(
                f"{self.kind.value} at {self.file}:{self.line} would modify the line of headline {headline.title!r}"
            )
        if self.kind is ChangeKind.DELETE:
            return replace(headline, line=headline.line - 1)
        if self.kind is ChangeKind.ADD:
            return replace(headline, line=headline.line + 1)
        return headline

    def fixup_clock(self, clock: Clock) -> Optional[Clock]:
        """Like fixup_headline; a clock on a deleted line disappears (None)."""
        if clock.line < self.line:
            return clock
        if self.kind is ChangeKind.DELETE:
            if clock.line == self.line:
                return None
            return replace(clock, line=clock.line - 1)
        if self.kind is ChangeKind.ADD:
            return replace(clock, line=clock.line + 1)
        return clock

    # --- text editing -------------------------------------------------------

    def _clock_line(self, template: str, terminator: str) -> str:
        indent = _INDENT_RE.match(template).group(0)  # type: ignore[union-attr]
        return f"{indent}{self.clock.to_line()}{terminator}"

    def apply_to_lines(self, lines: List[str]) -> None:
        """Apply this edit in place to physical lines (terminators included)."""
        idx = self.line - 1
        upper = len(lines) + 1 if self.kind is ChangeKind.ADD else len(lines)
        if idx < 0 or idx >= upper:
            raise ChangeBatchError(f"{self.file}: line {self.line} out of range (file has {len(lines)} lines)")

        if self.kind is ChangeKind.DELETE:
            del lines[idx]
            return

        if idx == len(lines):
            # ADD just past the last line
            if lines and not lines[-1].endswith("\n"):
                lines[-1] += "\n"
            lines.append(self._clock_line(lines[-1] if lines else "", "\n"))
            return

        body, terminator = split_terminator(lines[idx])
        if self.kind is ChangeKind.UPDATE:
            lines[idx] = self._clock_line(body, terminator)
        else:
            lines.insert(idx, self._clock_line(body, terminator or "\n"))


def _sort_key(change: FileChange) -> tuple:
    # At equal lines ADD sorts first, so after reversing it is applied last:
    # an UPDATE of line N happens before a new line is pushed in at N.
    return (change.line, 0 if change.kind is ChangeKind.ADD else 1, change.kind.value, change.clock.to_line())


def order_changes(changes: Iterable[FileChange]) -> List[FileChange]:
    """Application order: descending line number."""
    return sorted(changes, key=_sort_key, reverse=True)


def apply_to_string(changes: Iterable[FileChange], content: str) -> str:
    """Apply a batch of changes for one file to that file's text.

    Returns `content` itself when there is nothing to apply. Raises
    ChangeBatchError if the changes target different files or a line that
    does not exist.
    """
    batch = list(changes)
    if not batch:
        return content

    file = batch[0].file
    for c in batch[1:]:
        if c.file != file:
            raise ChangeBatchError(f"changes don't point to the same file: {file} vs {c.file}")

    lines = split_physical_lines(content)
    for c in order_changes(batch):
        c.apply_to_lines(lines)
    return "".join(lines)


def apply_changes(
    changes: Iterable[FileChange],
    *,
    read_text: Callable[[Path], str],
    write_text: Callable[[Path, str], None],
) -> bool:
    """Read the batch's file, apply the batch and write the result back.

    Returns False (and touches nothing) for an empty batch.
    """
    batch = list(changes)
    if not batch:
        return False
    file = batch[0].file
    content = read_text(file)
    write_text(file, apply_to_string(batch, content))
    return True


def group_by_file(changes: Iterable[FileChange]) -> List[List[FileChange]]:
    """Split mixed changes into per-file batches, first-seen file order."""
    groups: dict[Path, List[FileChange]] = {}
    for c in changes:
        groups.setdefault(c.file, []).append(c)
    return list(groups.values())
