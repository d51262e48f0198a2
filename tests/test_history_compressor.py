import unittest

from runcoach.history_compressor import build_adaptation_context, summarize_week_for_history


class WeekDigestTests(unittest.TestCase):
    def test_digest_never_exceeds_seven_lines(self):
        table = {
            "headers": ["Week", "Day", "Workout Type", "Details"],
            "rows": [["Week 1", f"Day {n}", "Easy", f"{n} mi"] for n in range(10)],
        }

        digest = summarize_week_for_history([table, table], 1)
        lines = digest.split("\n")

        self.assertEqual(lines[0], "Week 1 Summary:")
        self.assertEqual(len(lines) - 1, 7)
        self.assertEqual(lines[1], "- Day 0: Easy (0 mi)")

    def test_rows_from_other_weeks_are_skipped(self):
        table = {
            "headers": ["Week", "Day", "Workout Type", "Details"],
            "rows": [
                ["Week 2", "Monday", "Easy", ""],
                ["Week 3", "Tuesday", "Tempo", "20 min"],
                ["", "Sunday", "Long Run", "8 mi"],
            ],
        }

        digest = summarize_week_for_history([table], 2)

        self.assertEqual(digest, "Week 2 Summary:\n- Monday: Easy\n- Sunday: Long Run (8 mi)")

    def test_missing_columns_use_defaults(self):
        digest = summarize_week_for_history([{"headers": ["Notes"], "rows": [["anything"]]}], 4)
        self.assertEqual(digest, "Week 4 Summary:\n- Day: Run")

    def test_empty_week_has_heading_only(self):
        self.assertEqual(summarize_week_for_history([], 5), "Week 5 Summary:")


class AdaptationContextTests(unittest.TestCase):
    def _checkin(self, rpe, soreness, sleep, notes=""):
        return {
            "completed_at": "2024-06-04T07:50:00",
            "rpe": rpe,
            "soreness": soreness,
            "sleep_quality": sleep,
            "notes": notes,
        }

    def test_no_checkins(self):
        self.assertEqual(
            build_adaptation_context("plan-1", {}),
            "No completed workouts or check-ins recorded yet.",
        )

    def test_averages_only_active_plan(self):
        completions = {
            "plan-1:week-1:monday": self._checkin(6, 4, 3, "legs heavy"),
            "plan-1:week-1:tuesday": self._checkin(8, 6, 2, "  "),
            "plan-2:week-1:monday": self._checkin(1, 1, 5, "other plan"),
        }

        context = build_adaptation_context("plan-1", completions)

        self.assertIn("Completed workouts with check-ins: 2.", context)
        self.assertIn("Average RPE: 7.0 / 10.", context)
        self.assertIn("Average soreness: 5.0 / 10.", context)
        self.assertIn("Average sleep quality: 2.5 / 5.", context)
        self.assertIn("Recent subjective notes:\n- legs heavy", context)
        self.assertNotIn("other plan", context)

    def test_without_active_plan_uses_every_checkin(self):
        completions = {
            "plan-1:week-1:monday": self._checkin(4, 2, 4),
            "plan-2:week-1:monday": self._checkin(6, 4, 2),
        }

        context = build_adaptation_context(None, completions)

        self.assertIn("Completed workouts with check-ins: 2.", context)
        self.assertIn("Recent subjective notes: none.", context)


if __name__ == "__main__":
    unittest.main()
