import os
import tempfile
import unittest
from datetime import datetime
from unittest.mock import MagicMock

from runcoach.calendar_sync import CalendarSync
from runcoach.errors import PermissionDenied


EVENTS = [
    {
        "title": "Frunna W1: Easy Run",
        "start": datetime(2024, 6, 3, 7, 0),
        "end": datetime(2024, 6, 3, 7, 50),
        "notes": "3 mi",
    },
    {
        "title": "Frunna W1: Long Run",
        "start": datetime(2024, 6, 9, 7, 0),
        "end": datetime(2024, 6, 9, 8, 30),
        "notes": "",
    },
]


class CalendarSyncTests(unittest.TestCase):
    def _connected_sync(self):
        sync = CalendarSync(credentials_file="credentials.json", token_file="token.json", calendar_id="runs")
        sync.service = MagicMock()
        return sync

    def test_request_access_without_credentials_returns_false(self):
        with tempfile.TemporaryDirectory() as tmpdir:
            sync = CalendarSync(
                credentials_file=os.path.join(tmpdir, "credentials.json"),
                token_file=os.path.join(tmpdir, "token.json"),
            )
            self.assertFalse(sync.request_access())
        self.assertIsNone(sync.service)

    def test_sync_requires_access(self):
        sync = CalendarSync(credentials_file="credentials.json")
        with self.assertRaises(PermissionDenied) as ctx:
            sync.sync_events(EVENTS)
        self.assertEqual(str(ctx.exception), "Calendar permission was not granted.")
        with self.assertRaises(PermissionDenied):
            sync.remove_events(["a"])

    def test_empty_event_list_is_rejected(self):
        sync = self._connected_sync()
        with self.assertRaises(ValueError) as ctx:
            sync.sync_events([])
        self.assertEqual(str(ctx.exception), "No runnable workout rows found to sync.")

    def test_sync_inserts_one_event_per_workout(self):
        sync = self._connected_sync()
        events_api = sync.service.events.return_value
        events_api.insert.return_value.execute.side_effect = [{"id": "evt-1"}, {"id": "evt-2"}]

        ids = sync.sync_events(EVENTS)

        self.assertEqual(ids, ["evt-1", "evt-2"])
        first_call = events_api.insert.call_args_list[0].kwargs
        self.assertEqual(first_call["calendarId"], "runs")
        self.assertEqual(first_call["body"]["summary"], "Frunna W1: Easy Run")
        self.assertEqual(first_call["body"]["description"], "3 mi")
        self.assertTrue(first_call["body"]["start"]["dateTime"].startswith("2024-06-03T07:00:00"))

    def test_remove_events_deletes_each_id(self):
        sync = self._connected_sync()
        events_api = sync.service.events.return_value

        removed = sync.remove_events(["evt-1", "evt-2"])

        self.assertEqual(removed, 2)
        self.assertEqual(
            [call.kwargs["eventId"] for call in events_api.delete.call_args_list],
            ["evt-1", "evt-2"],
        )


if __name__ == "__main__":
    unittest.main()
