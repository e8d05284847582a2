"""orgclock.api

Stable *library* entrypoint for orgclock.

Policy:
  - Only names listed in __all__ are considered public API.
  - Everything else is internal and may change without notice.
"""

from __future__ import annotations

from orgclock.block import Block
from orgclock.changes import (
    ChangeBatchError,
    ChangeContractError,
    ChangeKind,
    FileChange,
    apply_changes,
    apply_to_string,
)
from orgclock.checks import CheckOptions, Finding, FindingKind, KnownLongDuration, check_document
from orgclock.clock import Clock, ClockParseError, TimestampType, parse_clock
from orgclock.conflict import (
    ClockConflict,
    ConflictResolution,
    InvalidResolutionError,
    find_conflicts,
    iter_conflicts,
)
from orgclock.document import OrgDocument, parse_document
from orgclock.files import discover_org_files, read_org_text, write_org_text
from orgclock.fixloop import FixSummary, fix_conflicts
from orgclock.headline import Headline, parse_headline

__all__ = [
    "Block",
    "ChangeBatchError",
    "ChangeContractError",
    "ChangeKind",
    "CheckOptions",
    "Clock",
    "ClockConflict",
    "ClockParseError",
    "ConflictResolution",
    "FileChange",
    "Finding",
    "FindingKind",
    "FixSummary",
    "Headline",
    "InvalidResolutionError",
    "KnownLongDuration",
    "OrgDocument",
    "TimestampType",
    "apply_changes",
    "apply_to_string",
    "check_document",
    "discover_org_files",
    "find_conflicts",
    "fix_conflicts",
    "iter_conflicts",
    "parse_clock",
    "parse_document",
    "parse_headline",
    "read_org_text",
    "write_org_text",
]
