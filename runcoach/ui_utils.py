"""
Shared helpers for the Streamlit pages.
"""

import os

import pandas as pd
import streamlit as st
from dotenv import load_dotenv

from runcoach.calendar_events import next_monday
from runcoach.config import ROOT_DIR, load_config, storage_path
from runcoach.plan_store import PlanStore
from runcoach.plan_tables import build_display_tables


SESSION_DEFAULTS = {
    "current_page": "generate",
    "plan_response": "",
    "plan_tables": [],
    "active_plan_id": None,
    "plan_start_date": None,
    "synced_event_ids": [],
    "debug_prompts": [],
    "plan_generation_in_progress": False,
}


def init_session_state():
    for key, value in SESSION_DEFAULTS.items():
        if key not in st.session_state:
            st.session_state[key] = list(value) if isinstance(value, list) else value
    if st.session_state.plan_start_date is None:
        st.session_state.plan_start_date = next_monday().isoformat()


def render_page_header(title, subtitle=None, title_icon=""):
    """
    Render standardized page header with title and optional subtitle.

    Args:
        title: Main page title
        subtitle: Optional subtitle text
        title_icon: Optional emoji/icon before title
    """
    icon_text = f"{title_icon} " if title_icon else ""
    st.markdown(f"## {icon_text}{title}")
    if subtitle:
        st.caption(subtitle)


@st.cache_resource
def get_app_config():
    return load_config()


def get_app_api_key(config):
    """Streamlit secrets first (deployed), then the environment (local .env)."""
    load_dotenv(os.path.join(ROOT_DIR, ".env"))
    try:
        if "ANTHROPIC_API_KEY" in st.secrets:
            return st.secrets["ANTHROPIC_API_KEY"]
    except FileNotFoundError:
        pass
    return os.getenv(config["claude"]["api_key_env"])


def get_store(config):
    return PlanStore(storage_path(config))


def load_plan_into_session(plan):
    """Make a saved plan the active one."""
    st.session_state.plan_response = plan["response"]
    st.session_state.plan_tables = plan["tables"]
    st.session_state.active_plan_id = plan["id"]
    st.session_state.plan_start_date = plan["plan_start_date"]
    st.session_state.synced_event_ids = []


def current_display_tables():
    return build_display_tables(st.session_state.plan_tables)


def table_to_dataframe(table):
    """Display table -> DataFrame, padding short rows to the header width."""
    width = len(table["headers"])
    rows = [list(row[:width]) + [""] * (width - len(row)) for row in table["rows"]]
    return pd.DataFrame(rows, columns=table["headers"])


def render_plan_tables(display_tables):
    for table in display_tables:
        st.markdown(f"#### {table['title']}")
        st.dataframe(table_to_dataframe(table), hide_index=True, use_container_width=True)
