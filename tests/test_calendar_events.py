import unittest
from datetime import date, datetime, timedelta

from runcoach.calendar_events import (
    estimated_duration_minutes,
    next_monday,
    parse_plan_start,
    to_calendar_events,
)


DISPLAY_HEADERS = ["Day", "Workout Type", "Details (Distance/Pace/Zone)", "Rationale"]


class NextMondayTests(unittest.TestCase):
    def test_is_strictly_after_today(self):
        self.assertEqual(next_monday(date(2024, 6, 3)), date(2024, 6, 10))
        self.assertEqual(next_monday(date(2024, 6, 5)), date(2024, 6, 10))
        self.assertEqual(next_monday(date(2024, 6, 9)), date(2024, 6, 10))


class PlanStartParsingTests(unittest.TestCase):
    def test_accepts_dates_and_iso_strings(self):
        self.assertEqual(parse_plan_start(date(2024, 6, 3)), date(2024, 6, 3))
        self.assertEqual(parse_plan_start(datetime(2024, 6, 3, 9, 30)), date(2024, 6, 3))
        self.assertEqual(parse_plan_start("2024-06-03"), date(2024, 6, 3))
        self.assertEqual(parse_plan_start("2024-06-03T00:00:00.000Z"), date(2024, 6, 3))


class DurationTests(unittest.TestCase):
    def test_duration_by_workout_type(self):
        self.assertEqual(estimated_duration_minutes("Long Easy Run"), 90)
        self.assertEqual(estimated_duration_minutes("Intervals"), 70)
        self.assertEqual(estimated_duration_minutes("Tempo Run"), 70)
        self.assertEqual(estimated_duration_minutes("Speed Work"), 70)
        self.assertEqual(estimated_duration_minutes("Recovery Jog"), 50)
        self.assertEqual(estimated_duration_minutes("Easy Run"), 50)
        self.assertEqual(estimated_duration_minutes("Strength & Mobility"), 45)
        self.assertEqual(estimated_duration_minutes("Cross Training"), 60)


class CalendarEventTests(unittest.TestCase):
    def test_week_two_wednesday_interval(self):
        tables = [{
            "title": "Week 2",
            "headers": DISPLAY_HEADERS,
            "rows": [
                ["Monday", "Rest Day", "Recovery", "Load management"],
                ["Wednesday", "Interval Session", "6x400m", "VO2 stimulus"],
            ],
        }]

        events = to_calendar_events(tables, "2024-06-03")

        self.assertEqual(len(events), 1)
        event = events[0]
        self.assertEqual(event["start"], datetime(2024, 6, 12, 7, 0))
        self.assertEqual(event["end"] - event["start"], timedelta(minutes=70))
        self.assertEqual(event["title"], "Frunna W2: Interval Session")
        self.assertEqual(event["notes"], "6x400m\nVO2 stimulus")

    def test_plain_tables_use_position_for_week(self):
        tables = [
            {"headers": ["Week", "Day", "Workout Type"], "rows": [["Week 1", "Sun", "Long Run"]]},
            {"headers": ["Week", "Day", "Workout Type"], "rows": [["Week 2", "Mon", "Easy Run"]]},
        ]

        events = to_calendar_events(tables, date(2024, 6, 3), app_name="Coach")

        self.assertEqual([event["start"] for event in events], [datetime(2024, 6, 9, 7, 0), datetime(2024, 6, 10, 7, 0)])
        self.assertEqual(events[1]["title"], "Coach W2: Easy Run")
        self.assertEqual(events[0]["notes"], "")

    def test_unknown_days_rest_rows_and_incomplete_tables_are_skipped(self):
        tables = [
            {
                "title": "Week 1",
                "headers": DISPLAY_HEADERS,
                "rows": [
                    ["Someday", "Tempo", "", ""],
                    ["Friday", "Day Off", "", ""],
                    ["Saturday", "Easy Run", "3 mi", ""],
                ],
            },
            {"title": "Week 2", "headers": ["Day", "Notes"], "rows": [["Monday", "Easy"]]},
        ]

        events = to_calendar_events(tables, "2024-06-03")

        self.assertEqual(len(events), 1)
        self.assertEqual(events[0]["start"], datetime(2024, 6, 8, 7, 0))
        self.assertEqual(events[0]["notes"], "3 mi")

    def test_defaults_to_next_monday(self):
        tables = [{"title": "Week 1", "headers": DISPLAY_HEADERS, "rows": [["Monday", "Easy Run", "", ""]]}]

        events = to_calendar_events(tables)

        self.assertEqual(events[0]["start"].date(), next_monday())
        self.assertEqual(events[0]["start"].date().weekday(), 0)


if __name__ == "__main__":
    unittest.main()
