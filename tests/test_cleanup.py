"""Tests for readlater.cleanup: completed items are pruned unless completed today."""

import unittest
from datetime import date, datetime

from readlater.cleanup import cleanup_completed, is_stale_completed_line

TODAY = date(2024, 1, 2)


class CleanupCompletedTests(unittest.TestCase):
    def test_completed_yesterday_is_removed(self) -> None:
        result = cleanup_completed("- [x] task ✅ 2024-01-01", TODAY)
        self.assertEqual(result.content, "")
        self.assertEqual(result.removed, 1)

    def test_completed_today_is_kept(self) -> None:
        content = "- [x] task ✅ 2024-01-02"
        result = cleanup_completed(content, TODAY)
        self.assertEqual(result.content, content)
        self.assertFalse(result.changed)

    def test_completed_without_date_is_removed(self) -> None:
        self.assertTrue(is_stale_completed_line("- [x] [Read](https://a.com/x) [site:: a.com] ➕ 2024-01-01", TODAY))

    def test_only_complete_marker_lines_are_touched(self) -> None:
        content = "\n".join(
            [
                "---",
                "feeds: []",
                "---",
                "# Heading ✅ 2023-01-01",
                "- [ ] open item ✅ 2023-01-01",
                "  - [x] indented complete ✅ 2023-01-01",
                "* [x] other bullet ✅ 2023-01-01",
                "- [X] capital x ✅ 2023-01-01",
                "Note text - [x] inline",
                "- [x] stale ✅ 2023-01-01",
                "",
            ]
        )
        result = cleanup_completed(content, TODAY)
        self.assertEqual(result.removed, 1)
        self.assertNotIn("- [x] stale", result.content)
        self.assertEqual(result.content, content.replace("- [x] stale ✅ 2023-01-01\n", ""))

    def test_trailing_newline_is_preserved(self) -> None:
        result = cleanup_completed("# Later\n- [x] old ✅ 2024-01-01\n- [ ] new\n", TODAY)
        self.assertEqual(result.content, "# Later\n- [ ] new\n")

    def test_unchanged_content_is_returned_as_is(self) -> None:
        content = "# Later\r\n- [ ] item\r\n"
        result = cleanup_completed(content, TODAY)
        self.assertIs(result.content, content)
        self.assertEqual(result.removed, 0)

    def test_datetime_uses_its_date(self) -> None:
        result = cleanup_completed("- [x] task ✅ 2024-01-02", datetime(2024, 1, 2, 23, 59))
        self.assertFalse(result.changed)


if __name__ == "__main__":
    unittest.main()
