"""
Today page - today's workout, check-in and plan progress
"""

from datetime import date

import streamlit as st

from runcoach.plan_progress import (
    completion_key,
    plan_progress_summary,
    record_checkin,
    today_workout,
)
from runcoach.ui_utils import current_display_tables, get_app_config, get_store, render_page_header


def render_progress(summary):
    col1, col2, col3 = st.columns(3)
    col1.metric("Completed", f"{summary['completed']} / {summary['planned']}")
    col2.metric("Adherence", f"{summary['adherence_percent']}%")
    col3.metric("Avg RPE", summary["avg_rpe"])
    st.progress(summary["adherence_percent"] / 100)
    st.caption(
        f"Avg soreness {summary['avg_soreness']} / 10 · Avg sleep quality {summary['avg_sleep_quality']} / 5"
    )


def show():
    """Render the today page"""

    render_page_header("Today", date.today().strftime("%A, %B %d"), "📆")

    display_tables = current_display_tables()
    plan_id = st.session_state.active_plan_id
    if not display_tables or not plan_id:
        st.info("No active plan. Generate one or pick a saved plan.")
        return

    config = get_app_config()
    store = get_store(config)
    try:
        completions = store.load_completions()
        workout = today_workout(display_tables, st.session_state.plan_start_date)

        if workout is None:
            st.info("Nothing scheduled today. Your plan starts on "
                    f"{st.session_state.plan_start_date[:10]}.")
        else:
            st.markdown(f"### Week {workout['week']} · {workout['day']}")
            st.markdown(f"**{workout['workout_type']}**")
            if workout["details"]:
                st.write(workout["details"])
            if workout["rationale"]:
                st.caption(workout["rationale"])

            key = completion_key(plan_id, workout["week"], workout["day"])
            existing = completions.get(key)
            if existing:
                st.success(
                    f"✅ Checked in · RPE {existing['rpe']} · soreness {existing['soreness']} · "
                    f"sleep {existing['sleep_quality']}"
                )

            with st.form("checkin_form"):
                st.markdown("#### Check in")
                rpe = st.slider("RPE", 1, 10, existing["rpe"] if existing else 6)
                soreness = st.slider("Soreness", 1, 10, existing["soreness"] if existing else 4)
                sleep_quality = st.slider("Sleep quality", 1, 5, existing["sleep_quality"] if existing else 3)
                notes = st.text_area("Notes", value=existing["notes"] if existing else "")
                if st.form_submit_button("Save check-in", type="primary"):
                    completions = record_checkin(completions, key, rpe, soreness, sleep_quality, notes)
                    if store.save_completions(completions):
                        st.success("✅ Check-in saved")
                    else:
                        st.warning("⚠ Check-in recorded for this session only; it could not be saved.")

        st.markdown("---")
        st.markdown("### 📈 Plan progress")
        render_progress(plan_progress_summary(display_tables, plan_id, completions))
    finally:
        store.close()
