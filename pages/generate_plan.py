"""
Generate Plan page - build a multi-week running plan from health data
"""

import os
from datetime import datetime

import streamlit as st

from runcoach.calendar_events import next_monday
from runcoach.config import ROOT_DIR
from runcoach.errors import PermissionDenied
from runcoach.health_summary import build_plan_input, load_health_summary
from runcoach.history_compressor import build_adaptation_context
from runcoach.plan_generator import PlanGenerator
from runcoach.plan_progress import duration_seconds_from_parts, format_duration, prediction_range
from runcoach.plan_store import new_saved_plan
from runcoach.plan_tables import build_display_tables
from runcoach.prompt_builder import parse_duration_to_seconds
from runcoach.ui_utils import (
    get_app_api_key,
    get_app_config,
    get_store,
    load_plan_into_session,
    render_page_header,
    render_plan_tables,
)

LOOKBACK_OPTIONS = [14, 30, 60, 90]
PLAN_LENGTH_OPTIONS = [8, 10, 12]
GOAL_OPTIONS = ["5K", "10K", "Half Marathon", "Marathon"]
LEVEL_OPTIONS = ["Beginner", "Intermediate", "Advanced", "Elite"]
LONG_RUN_OPTIONS = ["Saturday", "Sunday"]
UNIT_OPTIONS = ["km", "miles"]


def should_start_plan_generation(clicked, in_progress, health_file_exists=True):
    """Return whether a Generate click should start a new generation run."""
    return bool(clicked and not in_progress and health_file_exists)


def _option_index(options, value, default=0):
    return options.index(value) if value in options else default


def collect_preferences(defaults):
    """Render the preference inputs and return the planner preferences dict."""
    col1, col2 = st.columns(2)
    with col1:
        lookback_days = st.selectbox(
            "Health lookback (days)",
            LOOKBACK_OPTIONS,
            index=_option_index(LOOKBACK_OPTIONS, int(defaults["lookback_days"]), 1),
        )
        goal = st.selectbox("Goal", GOAL_OPTIONS, index=_option_index(GOAL_OPTIONS, defaults["goal"]))
        running_level = st.selectbox(
            "Running level",
            LEVEL_OPTIONS,
            index=_option_index(LEVEL_OPTIONS, defaults["running_level"], 1),
        )
        run_days_per_week = st.text_input("Run days per week", value=str(defaults["run_days_per_week"]))
    with col2:
        plan_length_weeks = st.selectbox(
            "Plan length (weeks)",
            PLAN_LENGTH_OPTIONS,
            index=_option_index(PLAN_LENGTH_OPTIONS, int(defaults["plan_length_weeks"])),
        )
        long_run_day = st.selectbox(
            "Long run day",
            LONG_RUN_OPTIONS,
            index=_option_index(LONG_RUN_OPTIONS, defaults["long_run_day"], 1),
        )
        distance_unit = st.radio(
            "Distance unit",
            UNIT_OPTIONS,
            index=_option_index(UNIT_OPTIONS, defaults["distance_unit"], 1),
            horizontal=True,
        )

    st.markdown("**Target time**")
    t1, t2, t3 = st.columns(3)
    hours = t1.text_input("Hours", value="", placeholder="0")
    minutes = t2.text_input("Minutes", value="", placeholder="24")
    seconds = t3.text_input("Seconds", value="", placeholder="30")
    target_seconds = duration_seconds_from_parts(hours, minutes, seconds)

    return {
        "lookback_days": lookback_days,
        "plan_length_weeks": plan_length_weeks,
        "goal": goal,
        "running_level": running_level,
        "target_time": format_duration(target_seconds) if target_seconds else "",
        "run_days_per_week": run_days_per_week,
        "long_run_day": long_run_day,
        "distance_unit": distance_unit,
    }


def show():
    """Render the generate plan page"""

    render_page_header("Generate Running Plan", "Adaptive plan built week by week from your health trends", "🏃")

    config = get_app_config()
    preferences = collect_preferences(config["planner"])

    target_seconds = parse_duration_to_seconds(preferences["target_time"])
    st.info(
        f"Estimated {preferences['goal']} time in {preferences['plan_length_weeks']} weeks: "
        f"**{prediction_range(target_seconds, preferences['plan_length_weeks'], preferences['run_days_per_week'], preferences['running_level'])}**"
    )

    health_file = st.text_input(
        "Health summary export",
        value=config["health"]["export_file"],
        help="JSON export from your phone's health bridge.",
    )
    health_path = health_file if os.path.isabs(health_file) else os.path.join(ROOT_DIR, health_file)

    clicked = st.button(
        "🤖 Generate Plan",
        type="primary",
        use_container_width=True,
        disabled=st.session_state.plan_generation_in_progress,
    )
    if clicked and not os.path.exists(health_path):
        st.error("❌ Health permission was not granted. Export your health summary first.")

    if not should_start_plan_generation(clicked, st.session_state.plan_generation_in_progress, os.path.exists(health_path)):
        return

    api_key = get_app_api_key(config)
    if not api_key:
        st.error("❌ API key not found. Please check your .env file or Streamlit secrets.")
        return

    st.session_state.plan_generation_in_progress = True
    status = st.empty()
    partial = st.container()

    def on_progress(progress):
        status.info(f"⏳ Week {progress['week']} of {preferences['plan_length_weeks']} ready...")
        st.session_state.plan_tables = progress["tables"]
        st.session_state.plan_response = progress["combined"]
        with partial:
            week_title = f"Week {progress['week']}"
            render_plan_tables([t for t in build_display_tables(progress["tables"]) if t["title"] == week_title])

    store = get_store(config)
    try:
        summary = load_health_summary(health_path, preferences["lookback_days"])
        saved_plans = store.load_saved_plans()
        active_plan_id = st.session_state.active_plan_id or (saved_plans[0]["id"] if saved_plans else None)
        adaptation_context = build_adaptation_context(active_plan_id, store.load_completions())
        plan_input = build_plan_input(summary, preferences, adaptation_context=adaptation_context)

        generator = PlanGenerator(api_key=api_key, config=config)
        result = generator.build_weekly_plan(plan_input, on_progress=on_progress)

        saved = new_saved_plan(result["combined"], result["tables"], preferences, next_monday(), now=datetime.now())
        store.save_plan(saved)
        load_plan_into_session(saved)
        st.session_state.debug_prompts = result["debug_prompts"]

        status.success("✅ Plan ready!")
        st.session_state.current_page = "today"
    except PermissionDenied as e:
        st.error(f"❌ {e}")
    except ValueError as e:
        st.error(f"❌ {e}")
    except Exception as e:
        st.error(f"❌ Error: {str(e)}")
        if st.session_state.plan_tables:
            st.warning("Weeks generated before the failure are shown above but were not saved.")
        import traceback
        with st.expander("View Error Details"):
            st.code(traceback.format_exc())
    finally:
        store.close()
        st.session_state.plan_generation_in_progress = False

    if st.session_state.debug_prompts:
        with st.expander("Debug prompts"):
            for item in st.session_state.debug_prompts:
                st.markdown(f"**Week {item['week']} ({item['mode']})**")
                st.code(item["prompt"])
