"""
Calendar page - push plan workouts to Google Calendar
"""

import os

import pandas as pd
import streamlit as st

from runcoach.calendar_events import to_calendar_events
from runcoach.calendar_sync import CalendarSync
from runcoach.config import ROOT_DIR
from runcoach.errors import PermissionDenied
from runcoach.ui_utils import current_display_tables, get_app_config, render_page_header


def events_dataframe(events):
    return pd.DataFrame(
        [
            {
                "Date": event["start"].strftime("%a %b %d"),
                "Start": event["start"].strftime("%H:%M"),
                "Minutes": int((event["end"] - event["start"]).total_seconds() // 60),
                "Workout": event["title"],
            }
            for event in events
        ],
        columns=["Date", "Start", "Minutes", "Workout"],
    )


def _calendar_client(config):
    calendar_config = config["calendar"]
    return CalendarSync(
        credentials_file=os.path.join(ROOT_DIR, calendar_config["credentials_file"]),
        token_file=os.path.join(ROOT_DIR, calendar_config["token_file"]),
        calendar_id=calendar_config["calendar_id"],
    )


def show():
    """Render the calendar sync page"""

    render_page_header("Calendar", "Add your plan to Google Calendar", "📅")

    display_tables = current_display_tables()
    if not display_tables:
        st.info("No plan yet. Generate one first.")
        return

    config = get_app_config()
    events = to_calendar_events(
        display_tables,
        st.session_state.plan_start_date,
        app_name=config["planner"].get("app_name", "Frunna"),
    )
    st.caption(f"Plan starts {st.session_state.plan_start_date[:10]} · {len(events)} workouts at 07:00")
    st.dataframe(events_dataframe(events), hide_index=True, use_container_width=True)

    col1, col2 = st.columns(2)
    with col1:
        if st.button("📅 Sync to calendar", type="primary", use_container_width=True):
            calendar = _calendar_client(config)
            try:
                calendar.request_access()
                with st.spinner("Syncing workouts..."):
                    st.session_state.synced_event_ids = calendar.sync_events(events)
                st.success(f"✅ Synced {len(st.session_state.synced_event_ids)} workouts")
            except (PermissionDenied, ValueError) as e:
                st.error(f"❌ {e}")
            except Exception as e:
                st.error(f"❌ Calendar sync failed: {str(e)}")
    with col2:
        if st.button(
            "🗑️ Remove synced events",
            use_container_width=True,
            disabled=not st.session_state.synced_event_ids,
        ):
            calendar = _calendar_client(config)
            try:
                calendar.request_access()
                removed = calendar.remove_events(st.session_state.synced_event_ids)
                st.session_state.synced_event_ids = []
                st.success(f"✅ Removed {removed} events")
            except PermissionDenied as e:
                st.error(f"❌ {e}")
            except Exception as e:
                st.error(f"❌ Could not remove events: {str(e)}")
