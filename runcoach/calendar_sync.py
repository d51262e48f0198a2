"""
Sync plan workouts to Google Calendar.
"""

import os

from googleapiclient.discovery import build
from google.auth.transport.requests import Request
from google.oauth2.credentials import Credentials
from google_auth_oauthlib.flow import InstalledAppFlow

from runcoach.errors import PermissionDenied

SCOPES = ['https://www.googleapis.com/auth/calendar.events']

CALENDAR_DENIED_MESSAGE = "Calendar permission was not granted."


class CalendarSync:
    """Creates and removes plan workout events in a Google Calendar."""

    def __init__(self, credentials_file, token_file='token.json', calendar_id='primary', interactive=True):
        """
        Initialize the CalendarSync.

        Args:
            credentials_file: Path to the OAuth client secrets JSON
            token_file: Path where the user's access/refresh token is cached
            calendar_id: Target calendar (default: 'primary')
            interactive: Allow the browser consent flow when no token exists
        """
        self.credentials_file = credentials_file
        self.token_file = token_file
        self.calendar_id = calendar_id
        self.interactive = interactive
        self.service = None

    def _load_credentials(self):
        creds = None
        if os.path.exists(self.token_file):
            creds = Credentials.from_authorized_user_file(self.token_file, SCOPES)

        if creds and creds.valid:
            return creds

        if creds and creds.expired and creds.refresh_token:
            creds.refresh(Request())
        else:
            if not self.interactive or not os.path.exists(self.credentials_file):
                return None
            flow = InstalledAppFlow.from_client_secrets_file(self.credentials_file, SCOPES)
            creds = flow.run_local_server(port=0)

        # Save the credentials for the next run
        with open(self.token_file, 'w') as token:
            token.write(creds.to_json())
        return creds

    def request_access(self):
        """
        Authenticate with the Google Calendar API.

        Returns:
            True when calendar access is available, False otherwise
        """
        if self.service:
            return True

        creds = self._load_credentials()
        if not creds:
            print("⚠ Calendar access not available (no credentials or token).")
            return False

        self.service = build('calendar', 'v3', credentials=creds)
        print("✓ Successfully authenticated with Google Calendar")
        return True

    def _require_service(self):
        if not self.service:
            raise PermissionDenied(CALENDAR_DENIED_MESSAGE)

    def sync_events(self, events):
        """
        Create one calendar event per workout event.

        Args:
            events: Events from calendar_events.to_calendar_events

        Returns:
            List of created event ids
        """
        self._require_service()
        if not events:
            raise ValueError("No runnable workout rows found to sync.")

        created_ids = []
        for event in events:
            body = {
                'summary': event['title'],
                'description': event['notes'],
                'start': {'dateTime': event['start'].astimezone().isoformat()},
                'end': {'dateTime': event['end'].astimezone().isoformat()},
            }
            created = self.service.events().insert(calendarId=self.calendar_id, body=body).execute()
            created_ids.append(created['id'])

        print(f"✓ Synced {len(created_ids)} workouts to calendar")
        return created_ids

    def remove_events(self, event_ids):
        """
        Delete previously synced events.

        Returns:
            Number of events removed
        """
        self._require_service()
        removed = 0
        for event_id in event_ids:
            self.service.events().delete(calendarId=self.calendar_id, eventId=event_id).execute()
            removed += 1

        print(f"✓ Removed {removed} synced events")
        return removed
