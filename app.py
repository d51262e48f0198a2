#!/usr/bin/env python3
"""
Adaptive Running Coach - Streamlit Web Interface
Main entry point for the web application.
"""

import importlib
import os
import sys

import streamlit as st

# Ensure pages directory is in Python path
sys.path.insert(0, os.path.dirname(__file__))

# Only reload modules in development mode (set DEV_MODE=1 in environment)
DEV_MODE = os.environ.get('DEV_MODE', '0') == '1'

try:
    generate_plan = importlib.import_module('pages.generate_plan')
    view_plans = importlib.import_module('pages.view_plans')
    today = importlib.import_module('pages.today')
    calendar_sync = importlib.import_module('pages.calendar_sync')

    # Reload modules only in dev mode to pick up code changes
    if DEV_MODE:
        importlib.reload(generate_plan)
        importlib.reload(view_plans)
        importlib.reload(today)
        importlib.reload(calendar_sync)
except ImportError as e:
    st.error(f"Critical error loading pages: {e}")
    st.code(f"Python path: {sys.path}")
    st.stop()

from runcoach.errors import ConfigError
from runcoach.ui_utils import get_app_config, init_session_state

# Configure the page
st.set_page_config(
    page_title="🏃 Frunna Running Coach",
    page_icon="🏃",
    layout="wide",
    initial_sidebar_state="expanded"
)

init_session_state()

try:
    config = get_app_config()
except ConfigError as e:
    st.error(f"❌ {e}")
    st.stop()

PAGES = [
    ("generate", "🤖 Generate Plan", generate_plan),
    ("today", "📆 Today", today),
    ("plans", "📋 View Plan", view_plans),
    ("calendar", "📅 Calendar", calendar_sync),
]

# Sidebar navigation
with st.sidebar:
    st.markdown(f"# 🏃 {config['planner'].get('app_name', 'Frunna')}")
    st.markdown("---")

    for page_key, label, _ in PAGES:
        if st.button(label, use_container_width=True, key=f"nav_{page_key}",
                     type="primary" if st.session_state.current_page == page_key else "secondary"):
            st.session_state.current_page = page_key
            st.rerun()

    st.markdown("---")
    planner = config['planner']
    st.markdown(f"**Goal:** {planner['goal']}")
    st.markdown(f"**Run days:** {planner['run_days_per_week']} / week")

    with st.expander("💡 Quick Tips"):
        st.markdown("""
        **Generating:**
        - Export your health summary JSON first
        - Each week appears as soon as it is ready

        **Adapting:**
        - Check in after each workout
        - Your RPE, soreness and sleep shape the next plan
        """)

# Main content area - route to different pages
for page_key, _, page in PAGES:
    if st.session_state.current_page == page_key:
        page.show()
        break
