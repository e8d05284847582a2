from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any, List

try:
    import orjson  # type: ignore
except Exception:  # pragma: no cover
    orjson = None  # type: ignore

from .checks import DEFAULT_LONG_DURATION, CheckOptions, check_document, load_known_long
from .conflict import ClockConflict, find_conflicts
from .files import default_org_dir, discover_org_files, load_documents
from .fixloop import fix_conflicts, prompt_resolution
from .util.duration import format_hhmm, parse_duration_arg


def _die(msg: str, rc: int = 2) -> int:
    print(f"[orgclock] ERROR: {msg}", file=sys.stderr)
    return rc


def _dumps(obj: Any) -> str:
    if orjson is not None:
        return orjson.dumps(obj, option=orjson.OPT_INDENT_2).decode("utf-8")
    return json.dumps(obj, ensure_ascii=False, indent=2)


def _conflict_dict(c: ClockConflict) -> dict[str, Any]:
    return {
        "clocks": [
            {"file": str(c.file1), "line": c.clock1.line, "title": c.headline1.title, "clock": str(c.clock1)},
            {"file": str(c.file2), "line": c.clock2.line, "title": c.headline2.title, "clock": str(c.clock2)},
        ],
        "options": [r.value for r in c.resolution_options()],
    }


def _print_conflict(c: ClockConflict) -> None:
    print("OVERLAPPING TIME")
    print(c.report())


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="orgclock", description="Check org files for clock problems and overlapping clocks.")
    ap.add_argument("files", nargs="*", help="Org files to check (default: *.org in --dir)")
    ap.add_argument(
        "--dir",
        default=None,
        help="Directory scanned for *.org files when no files are given (default: env ORGCLOCK_DIR or ~/org)",
    )
    ap.add_argument("--no-duration-mismatch", action="store_true", help="Do not report recorded durations that disagree with start/end")
    ap.add_argument("--no-long-duration", action="store_true", help="Do not report clocks longer than --long-duration")
    ap.add_argument("--no-running-clock", action="store_true", help="Do not report running clocks")
    ap.add_argument("--no-negative-duration", action="store_true", help="Do not report clocks that end before they start")
    ap.add_argument("--no-zero-clocks", action="store_true", help="Do not report zero-length clocks")
    ap.add_argument("--no-clock-conflicts", action="store_true", help="Do not report overlapping clocks")
    ap.add_argument("--fix-clock-conflicts", action="store_true", help="Interactively resolve overlapping clocks (rewrites files)")
    ap.add_argument(
        "--long-duration",
        default=format_hhmm(DEFAULT_LONG_DURATION),
        help="Threshold for long clocks as H:MM (default: 10:00)",
    )
    ap.add_argument("--known-long", default=None, help="JSON allowlist of long clocks that are fine")
    ap.add_argument("--json", action="store_true", help="Print findings and conflicts as JSON")
    return ap


def main(argv: List[str] | None = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        long_limit = parse_duration_arg(args.long_duration)
    except ValueError as e:
        return _die(f"Invalid --long-duration value: {e}")

    known_long = ()
    if args.known_long:
        try:
            known_long = tuple(load_known_long(Path(args.known_long)))
        except (OSError, ValueError) as e:
            return _die(f"Failed to load known-long file: {e}")

    if args.files:
        files = [Path(f) for f in args.files]
    else:
        org_dir = Path(args.dir).expanduser() if args.dir else default_org_dir()
        try:
            files = discover_org_files(org_dir)
        except OSError as e:
            return _die(f"Cannot list org directory '{org_dir}': {e}")

    try:
        docs = load_documents(files)
    except (OSError, UnicodeDecodeError) as e:
        return _die(f"Failed to read org file: {e}")

    options = CheckOptions(
        duration_mismatch=not args.no_duration_mismatch,
        long_duration=not args.no_long_duration,
        running_clock=not args.no_running_clock,
        negative_duration=not args.no_negative_duration,
        zero_clocks=not args.no_zero_clocks,
        long_duration_limit=long_limit,
        known_long=known_long,
    )
    findings = [f for doc in docs for f in check_document(doc, options)]

    if args.fix_clock_conflicts:
        for f in findings:
            print(f.render())
        summary = fix_conflicts(files, prompt_resolution, report=_print_conflict)
        print(f"[orgclock] fixed={summary.applied} skipped={summary.skipped}" + (" (cancelled)" if summary.cancelled else ""))
        return 0

    conflicts = [] if args.no_clock_conflicts else find_conflicts(docs)

    if args.json:
        print(_dumps({"findings": [f.to_dict() for f in findings], "conflicts": [_conflict_dict(c) for c in conflicts]}))
        return 0

    for f in findings:
        print(f.render())
    if not args.no_clock_conflicts:
        print("finding clock conflicts...")
        for c in conflicts:
            _print_conflict(c)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
