from __future__ import annotations

import datetime as dt
import unittest
from pathlib import Path
from typing import Dict, List

from orgclock.conflict import ConflictResolution
from orgclock.fixloop import fix_conflicts, prompt_resolution

NOW = dt.datetime(2022, 12, 14, 12, 0)

OVERLAP = (
    "* A\n"
    "CLOCK: [2022-12-12 Mon 10:00]--[2022-12-12 Mon 12:00] =>  2:00\n"
    "* B\n"
    "CLOCK: [2022-12-12 Mon 11:00]--[2022-12-12 Mon 13:00] =>  2:00\n"
)


class _Store:
    def __init__(self, files: Dict[str, str]) -> None:
        self.files = {Path(k): v for k, v in files.items()}
        self.writes: List[Path] = []

    def read(self, path: Path) -> str:
        return self.files[Path(path)]

    def write(self, path: Path, text: str) -> None:
        self.writes.append(Path(path))
        self.files[Path(path)] = text


class TestFixLoopContract(unittest.TestCase):
    def _run(self, store: _Store, choose):
        return fix_conflicts(list(store.files), choose, read_text=store.read, write_text=store.write, now=NOW)

    def test_chosen_resolution_is_written(self) -> None:
        store = _Store({"a.org": OVERLAP})
        offered: List[List[ConflictResolution]] = []

        def choose(conflict, options):
            offered.append(options)
            return ConflictResolution.SHRINK_EARLIER

        summary = self._run(store, choose)

        self.assertEqual((summary.applied, summary.skipped, summary.cancelled), (1, 0, False))
        self.assertEqual(
            offered,
            [[ConflictResolution.SHRINK_EARLIER, ConflictResolution.SHRINK_LATER, ConflictResolution.SKIP]],
        )
        self.assertEqual(
            store.files[Path("a.org")].splitlines()[1],
            "CLOCK: [2022-12-12 Mon 10:00]--[2022-12-12 Mon 11:00] =>  1:00",
        )

    def test_skip_is_remembered_and_nothing_written(self) -> None:
        store = _Store({"a.org": OVERLAP})
        calls = []

        def choose(conflict, options):
            calls.append(conflict)
            return ConflictResolution.SKIP

        summary = self._run(store, choose)
        self.assertEqual((summary.applied, summary.skipped, summary.cancelled), (0, 1, False))
        self.assertEqual(len(calls), 1)
        self.assertEqual(store.writes, [])
        self.assertEqual(store.files[Path("a.org")], OVERLAP)

    def test_no_choice_cancels(self) -> None:
        store = _Store({"a.org": OVERLAP})
        summary = self._run(store, lambda conflict, options: None)
        self.assertTrue(summary.cancelled)
        self.assertEqual(store.writes, [])

    def test_restarts_after_each_edit(self) -> None:
        store = _Store(
            {
                "a.org": (
                    "* A\n"
                    "CLOCK: [2022-12-13 Tue 09:00]--[2022-12-13 Tue 11:00] =>  2:00\n"
                    "CLOCK: [2022-12-13 Tue 10:00]--[2022-12-13 Tue 12:00] =>  2:00\n"
                    "CLOCK: [2022-12-13 Tue 11:30]--[2022-12-13 Tue 13:00] =>  1:30\n"
                )
            }
        )
        reported = []
        summary = fix_conflicts(
            [Path("a.org")],
            lambda conflict, options: ConflictResolution.AUTO,
            read_text=store.read,
            write_text=store.write,
            report=reported.append,
            now=NOW,
        )
        self.assertEqual(summary.applied, 2)
        self.assertEqual(len(reported), 2)
        self.assertEqual(
            store.files[Path("a.org")],
            "* A\nCLOCK: [2022-12-13 Tue 09:00]--[2022-12-13 Tue 13:00] =>  4:00\n",
        )

    def test_conflicts_across_files(self) -> None:
        store = _Store(
            {
                "a.org": "* A\nCLOCK: [2022-12-12 Mon 10:00]--[2022-12-12 Mon 14:00] =>  4:00\n",
                "b.org": "* B\nCLOCK: [2022-12-12 Mon 11:00]--[2022-12-12 Mon 12:00] =>  1:00\n",
            }
        )
        summary = self._run(store, lambda conflict, options: ConflictResolution.REMOVE_INNER)
        self.assertEqual(summary.applied, 1)
        self.assertEqual(store.writes, [Path("b.org")])
        self.assertEqual(store.files[Path("b.org")], "* B\n")


class TestPromptResolutionContract(unittest.TestCase):
    def test_reprompts_on_invalid_input(self) -> None:
        answers = iter(["x", "7", "1"])
        printed: List[str] = []
        options = [ConflictResolution.SHRINK_EARLIER, ConflictResolution.SHRINK_LATER, ConflictResolution.SKIP]
        choice = prompt_resolution(None, options, input_fn=lambda _p: next(answers), print_fn=printed.append)  # type: ignore[arg-type]
        self.assertIs(choice, ConflictResolution.SHRINK_LATER)
        self.assertEqual(
            printed,
            [
                "Select resolution:",
                "  0) Shrink earlier timestamp",
                "  1) Shrink later timestamp",
                "  2) Skip",
                "invalid input",
                "invalid input",
            ],
        )

    def test_end_of_input_returns_none(self) -> None:
        def eof(_prompt: str) -> str:
            raise EOFError

        self.assertIsNone(prompt_resolution(None, [ConflictResolution.SKIP], input_fn=eof, print_fn=lambda _s: None))  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main(verbosity=2)
