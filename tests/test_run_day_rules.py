import copy
import unittest

from runcoach.plan_tables import PLAN_HEADERS, is_rest_like
from runcoach.run_day_rules import (
    clamp_to_run_day_cap,
    clamp_week_to_run_day_cap,
    count_planned_run_days,
    parse_run_day_cap,
    with_run_day_correction,
)


def _week_table(workouts):
    return {
        "headers": list(PLAN_HEADERS),
        "rows": [["Week 1", day, workout, "details", "why"] for day, workout in workouts],
    }


class RunDayCapTests(unittest.TestCase):
    def test_parse_run_day_cap_clamps_and_defaults(self):
        self.assertEqual(parse_run_day_cap(" 3 "), 3)
        self.assertEqual(parse_run_day_cap("0"), 1)
        self.assertEqual(parse_run_day_cap("9"), 7)
        self.assertEqual(parse_run_day_cap("four"), 4)
        self.assertEqual(parse_run_day_cap(None), 4)

    def test_parse_run_day_cap_reads_leading_integer(self):
        self.assertEqual(parse_run_day_cap("5 days"), 5)
        self.assertEqual(parse_run_day_cap("5.5"), 5)
        self.assertEqual(parse_run_day_cap(6), 6)
        self.assertEqual(parse_run_day_cap("-2"), 1)
        self.assertEqual(parse_run_day_cap("days: 5"), 4)

    def test_rest_like_detection(self):
        self.assertTrue(is_rest_like("Rest Day"))
        self.assertTrue(is_rest_like("Day OFF"))
        self.assertFalse(is_rest_like("Easy Run"))
        self.assertFalse(is_rest_like(None))

    def test_count_planned_run_days_counts_distinct_days(self):
        table = _week_table([
            ("Monday", "Easy Run"),
            ("Monday", "Strides"),
            ("Tuesday", "Rest Day"),
            ("Wednesday", "Tempo"),
        ])
        self.assertEqual(count_planned_run_days([table]), 2)

    def test_count_skips_tables_without_day_or_workout(self):
        self.assertEqual(count_planned_run_days([{"headers": ["Day"], "rows": [["Monday"]]}]), 0)


class ClampTests(unittest.TestCase):
    def setUp(self):
        self.table = _week_table([
            ("Monday", "Easy Run"),
            ("Tuesday", "Tempo Run"),
            ("Wednesday", "Easy Run"),
            ("Thursday", "Recovery Run"),
            ("Friday", "Easy Run"),
            ("Saturday", "Easy Run"),
            ("Sunday", "Long Run"),
            ("Sunday", "Shakeout"),
        ])

    def test_keeps_long_run_and_quality_within_cap(self):
        original = copy.deepcopy(self.table)

        clamped = clamp_to_run_day_cap(self.table, 4, "Sunday")

        kept = [row for row in clamped["rows"] if not is_rest_like(row[2])]
        self.assertEqual(len(kept), 4)
        self.assertIn(["Week 1", "Sunday", "Long Run", "details", "why"], kept)
        self.assertIn(["Week 1", "Tuesday", "Tempo Run", "details", "why"], kept)
        for row in kept:
            self.assertIn(row, original["rows"])

        self.assertEqual(len(clamped["rows"]), len(original["rows"]))
        self.assertEqual([row[1] for row in clamped["rows"]], [row[1] for row in original["rows"]])
        self.assertTrue(all(len(row) == len(PLAN_HEADERS) for row in clamped["rows"]))
        self.assertEqual(self.table, original)

    def test_demoted_rows_are_rewritten_as_rest(self):
        clamped = clamp_to_run_day_cap(self.table, 4, "Sunday")

        demoted = clamped["rows"][3]
        self.assertEqual(demoted, ["Week 1", "Thursday", "Rest Day", "Recovery / optional mobility",
                                   "Respect 4 training days/week"])

    def test_unknown_long_run_day_defaults_to_sunday(self):
        clamped = clamp_to_run_day_cap(self.table, 1, "Funday")
        kept = [row for row in clamped["rows"] if not is_rest_like(row[2])]
        self.assertEqual(kept, [["Week 1", "Sunday", "Long Run", "details", "why"]])

    def test_within_cap_is_unchanged(self):
        table = _week_table([("Monday", "Easy"), ("Wednesday", "Tempo"), ("Friday", "Rest")])
        self.assertEqual(clamp_to_run_day_cap(table, 2, "Sunday"), table)
        self.assertEqual(clamp_week_to_run_day_cap([table], 2, "Sunday"), [table])

    def test_correction_prompt_appends_critical_fixes(self):
        prompt = with_run_day_correction("BASE", 3, 4)

        self.assertTrue(prompt.startswith("BASE\n"))
        self.assertIn("Critical Fix: Rewrite Week 3 so it has EXACTLY 4 run days.", prompt)
        self.assertIn("Critical Fix: The other 3 days must be Rest or non-running cross-training.", prompt)
        self.assertIn("Critical Fix: Return ONLY corrected JSON", prompt)


if __name__ == "__main__":
    unittest.main()
