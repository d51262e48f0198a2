"""
View Plans page - saved plans, week grid, plan tables and follow-up questions
"""

from datetime import datetime

import streamlit as st

from runcoach.plan_generator import PlanGenerator
from runcoach.plan_tables import build_calendar_week_rows, visible_tables
from runcoach.ui_utils import (
    current_display_tables,
    get_app_api_key,
    get_app_config,
    get_store,
    load_plan_into_session,
    render_page_header,
    render_plan_tables,
)

SEGMENTS = {
    "Weeks 1-4": "weeks1to4",
    "Weeks 5+": "weeks5to8",
}


def saved_plan_label(plan):
    created = plan.get("created_at", "")
    try:
        created = datetime.fromisoformat(created).strftime("%b %d, %Y")
    except ValueError:
        pass
    return f"{plan['goal']} · {plan['plan_length_weeks']} weeks · {created}"


def render_week_grid(display_tables):
    """Monday..Sunday grid, one row per week."""
    for week_row in build_calendar_week_rows(display_tables):
        st.markdown(f"**{week_row['title']}**")
        columns = st.columns(7)
        for column, day_cell in zip(columns, week_row["cells"]):
            with column:
                st.caption(day_cell["day_name"][:3])
                if day_cell["is_rest"]:
                    st.markdown(f"😴 {day_cell['workout_type']}")
                else:
                    st.markdown(f"🏃 **{day_cell['workout_type']}**")
                    if day_cell["details"]:
                        st.caption(day_cell["details"])


def render_plan_assistant(config, display_tables):
    st.markdown("### 💬 Ask about your plan")
    question = st.text_input("Question", placeholder="Can I swap Tuesday and Wednesday?")
    if not st.button("Ask"):
        return

    api_key = get_app_api_key(config)
    if not api_key:
        st.error("❌ API key not found. Please check your .env file or Streamlit secrets.")
        return

    try:
        with st.spinner("Thinking..."):
            answer = PlanGenerator(api_key=api_key, config=config).ask_about_plan(question, display_tables)
        st.markdown(answer)
    except ValueError as e:
        st.warning(str(e))
    except Exception as e:
        st.error(f"❌ Error: {str(e)}")


def show():
    """Render the view plans page"""

    render_page_header("Your Plans", "Saved plans and the week-by-week schedule", "📋")

    config = get_app_config()
    store = get_store(config)
    saved_plans = store.load_saved_plans()
    store.close()

    if saved_plans:
        labels = {plan["id"]: saved_plan_label(plan) for plan in saved_plans}
        ids = list(labels)
        current = st.session_state.active_plan_id
        selected = st.selectbox(
            "Saved plans",
            ids,
            index=ids.index(current) if current in ids else 0,
            format_func=labels.get,
        )
        if selected != current:
            load_plan_into_session(next(plan for plan in saved_plans if plan["id"] == selected))

    display_tables = current_display_tables()
    if not display_tables:
        st.info("No plan yet. Generate one first.")
        return

    segment = SEGMENTS[st.radio("Show", list(SEGMENTS), horizontal=True)]
    shown = visible_tables(display_tables, segment)

    grid_tab, table_tab, text_tab = st.tabs(["📅 Calendar", "📋 Tables", "📝 Coach notes"])
    with grid_tab:
        render_week_grid(shown)
    with table_tab:
        render_plan_tables(shown)
    with text_tab:
        st.markdown(st.session_state.plan_response or "_No notes._")

    st.markdown("---")
    render_plan_assistant(config, display_tables)
