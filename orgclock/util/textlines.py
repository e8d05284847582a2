# orgclock/util/textlines.py
from __future__ import annotations

from typing import List, Tuple


def split_physical_lines(text: str) -> List[str]:
    """Split on "\\n" only, keeping each line's terminator.

    A trailing newline does not start an extra empty line, so the result
    lines up with 1-based line numbers as an editor shows them.
    """
    if not text:
        return []
    parts = text.split("\n")
    lines = [p + "\n" for p in parts[:-1]]
    if parts[-1]:
        lines.append(parts[-1])
    return lines


def split_terminator(line: str) -> Tuple[str, str]:
    """Return (body, terminator) where terminator is "\\r\\n", "\\n" or ""."""
    if line.endswith("\r\n"):
        return line[:-2], "\r\n"
    if line.endswith("\n"):
        return line[:-1], "\n"
    return line, ""
