from __future__ import annotations

import unittest

from orgclock.conflict import ClockConflict, find_conflicts, iter_conflicts
from orgclock.document import parse_document

C_1045_1055 = "CLOCK: [2022-12-12 Mon 10:45]--[2022-12-12 Mon 10:55] =>  0:10"
C_1040_1050 = "CLOCK: [2022-12-12 Mon 10:40]--[2022-12-12 Mon 10:50] =>  0:10"
C_1042_1048 = "CLOCK: [2022-12-12 Mon 10:42]--[2022-12-12 Mon 10:48] =>  0:06"
C_1055_1100 = "CLOCK: [2022-12-12 Mon 10:55]--[2022-12-12 Mon 11:00] =>  0:05"


class TestConflictDetectionContract(unittest.TestCase):
    def test_same_heading_pair_is_found_once(self) -> None:
        doc = parse_document("test.org", "\n* fooo\n" + C_1045_1055 + "\n" + C_1040_1050 + "\n")
        conflicts = find_conflicts([doc])
        self.assertEqual(len(conflicts), 1)
        c = conflicts[0]
        self.assertEqual((c.clock1.line, c.clock2.line), (3, 4))
        self.assertTrue(c.is_same_headline())

    def test_three_mutually_overlapping_clocks(self) -> None:
        text = "* a\n" + C_1045_1055 + "\n* b\n" + C_1040_1050 + "\n* c\n" + C_1042_1048 + "\n"
        conflicts = find_conflicts([parse_document("t.org", text)])
        self.assertEqual(len(conflicts), 3)
        self.assertEqual(len(set(conflicts)), 3)
        self.assertEqual(
            sorted(c.identity() for c in conflicts),
            [
                (("t.org", 2), ("t.org", 4)),
                (("t.org", 2), ("t.org", 6)),
                (("t.org", 4), ("t.org", 6)),
            ],
        )

    def test_adjacent_clocks_do_not_conflict(self) -> None:
        doc = parse_document("t.org", "* a\n" + C_1045_1055 + "\n" + C_1055_1100 + "\n")
        self.assertEqual(find_conflicts([doc]), [])

    def test_conflicts_across_documents(self) -> None:
        a = parse_document("a.org", "* work\n" + C_1045_1055 + "\n")
        b = parse_document("b.org", "* play\n" + C_1040_1050 + "\n")
        conflicts = find_conflicts([a, b])
        self.assertEqual(len(conflicts), 1)
        c = conflicts[0]
        self.assertEqual((str(c.file1), str(c.file2)), ("a.org", "b.org"))
        self.assertFalse(c.is_same_headline())

    def test_same_title_in_different_files_is_not_same_heading(self) -> None:
        a = parse_document("a.org", "* fooo\n" + C_1045_1055 + "\n")
        b = parse_document("b.org", "* fooo\n" + C_1040_1050 + "\n")
        (c,) = find_conflicts([a, b])
        self.assertFalse(c.is_same_headline())

    def test_identity_is_order_independent(self) -> None:
        doc = parse_document("t.org", "* a\n" + C_1045_1055 + "\n* b\n" + C_1040_1050 + "\n")
        (c,) = find_conflicts([doc])
        swapped = ClockConflict(c.file2, c.headline2, c.clock2, c.file1, c.headline1, c.clock1)
        self.assertEqual(c, swapped)
        self.assertEqual(hash(c), hash(swapped))
        self.assertEqual(c.fingerprint(), swapped.fingerprint())
        self.assertEqual(len({c, swapped}), 1)

    def test_same_document_twice_never_pairs_a_clock_with_itself(self) -> None:
        doc = parse_document("t.org", "* a\n" + C_1045_1055 + "\n* b\n" + C_1040_1050 + "\n")
        conflicts = find_conflicts([doc, doc])
        self.assertEqual(len(conflicts), 1)

        single = parse_document("s.org", "* a\n" + C_1045_1055 + "\n")
        self.assertEqual(find_conflicts([single, single]), [])

    def test_iterator_matches_list(self) -> None:
        text = "* a\n" + C_1045_1055 + "\n* b\n" + C_1040_1050 + "\n* c\n" + C_1042_1048 + "\n"
        doc = parse_document("t.org", text)
        self.assertEqual(list(iter_conflicts([doc])), find_conflicts([doc]))

    def test_report_is_two_stable_lines(self) -> None:
        doc = parse_document("test.org", "* fooo :work:\n" + C_1045_1055 + "\n* bar\n" + C_1040_1050 + "\n")
        (c,) = find_conflicts([doc])
        report = c.report()
        self.assertEqual(
            report.split("\n"),
            [
                "  [2022-12-12 Mon 10:45]--[2022-12-12 Mon 10:55] =>  0:10 'fooo' test.org:2",
                "  [2022-12-12 Mon 10:40]--[2022-12-12 Mon 10:50] =>  0:10 'bar' test.org:4",
            ],
        )
        self.assertEqual(report, c.report())


if __name__ == "__main__":
    unittest.main(verbosity=2)
