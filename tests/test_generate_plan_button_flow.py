import unittest
from datetime import datetime

from pages.calendar_sync import events_dataframe
from pages.generate_plan import should_start_plan_generation
from pages.view_plans import saved_plan_label
from runcoach.ui_utils import table_to_dataframe


class GeneratePlanButtonFlowTest(unittest.TestCase):
    def test_starts_when_clicked_and_not_in_progress(self):
        self.assertTrue(should_start_plan_generation(True, False))

    def test_does_not_start_when_already_in_progress(self):
        self.assertFalse(should_start_plan_generation(True, True))

    def test_does_not_start_without_click(self):
        self.assertFalse(should_start_plan_generation(False, False))

    def test_does_not_start_without_health_export(self):
        self.assertFalse(should_start_plan_generation(True, False, health_file_exists=False))


class PageHelperTests(unittest.TestCase):
    def test_table_to_dataframe_pads_short_rows(self):
        df = table_to_dataframe({"headers": ["Day", "Workout Type", "Details"], "rows": [["Monday", "Easy"]]})

        self.assertEqual(list(df.columns), ["Day", "Workout Type", "Details"])
        self.assertEqual(df.iloc[0].tolist(), ["Monday", "Easy", ""])

    def test_events_dataframe(self):
        events = [{
            "title": "Frunna W1: Tempo",
            "start": datetime(2024, 6, 4, 7, 0),
            "end": datetime(2024, 6, 4, 8, 10),
            "notes": "",
        }]

        df = events_dataframe(events)

        self.assertEqual(df.iloc[0].tolist(), ["Tue Jun 04", "07:00", 70, "Frunna W1: Tempo"])
        self.assertTrue(events_dataframe([]).empty)

    def test_saved_plan_label(self):
        plan = {"goal": "10K", "plan_length_weeks": 8, "created_at": "2024-06-01T12:00:00"}
        self.assertEqual(saved_plan_label(plan), "10K · 8 weeks · Jun 01, 2024")


if __name__ == "__main__":
    unittest.main()
