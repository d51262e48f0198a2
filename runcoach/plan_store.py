"""
SQLite persistence for saved plans and workout check-ins.

Values are JSON documents in a single key-value table, so the same keys can
be read back by any front end (CLI or Streamlit) sharing the database file.
"""

import json
import os
import sqlite3
import time
from contextlib import contextmanager
from datetime import datetime


SAVED_PLANS_KEY = "frunna_saved_plans_v1"
COMPLETIONS_KEY = "frunna_completions_v1"
MAX_SAVED_PLANS = 12


class PlanStore:
    """Small SQLite key-value wrapper."""

    def __init__(self, db_path):
        self.db_path = db_path
        self.persistent = True
        try:
            parent = os.path.dirname(db_path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self.conn = sqlite3.connect(db_path)
            self.conn.row_factory = sqlite3.Row
            self.init_schema()
        except (OSError, sqlite3.Error) as e:
            # Session-only store; nothing written here survives the process.
            print(f"⚠ Could not open plan store at {db_path} ({e}); plans will not be saved.")
            self.persistent = False
            self.conn = sqlite3.connect(":memory:")
            self.conn.row_factory = sqlite3.Row
            self.init_schema()

    def close(self):
        self.conn.close()

    @contextmanager
    def transaction(self):
        """Context manager for atomic write operations."""
        try:
            yield
            self.conn.commit()
        except Exception:
            self.conn.rollback()
            raise

    def init_schema(self):
        """Create the key-value table if it does not already exist."""
        self.conn.executescript(
            """
            CREATE TABLE IF NOT EXISTS kv_store (
                key TEXT PRIMARY KEY,
                value TEXT NOT NULL,
                updated_at TEXT NOT NULL DEFAULT (datetime('now'))
            );
            """
        )
        self.conn.commit()

    def get(self, key):
        row = self.conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)).fetchone()
        return row["value"] if row else None

    def set(self, key, value):
        with self.transaction():
            self.conn.execute(
                """
                INSERT INTO kv_store (key, value, updated_at)
                VALUES (?, ?, datetime('now'))
                ON CONFLICT(key) DO UPDATE SET
                    value = excluded.value,
                    updated_at = excluded.updated_at
                """,
                (key, value),
            )

    def remove(self, key):
        with self.transaction():
            self.conn.execute("DELETE FROM kv_store WHERE key = ?", (key,))

    def _load_json(self, key, default):
        try:
            raw = self.get(key)
            if raw is None:
                return default
            value = json.loads(raw)
        except (sqlite3.Error, ValueError) as e:
            print(f"⚠ Could not read {key}: {e}")
            return default
        return value if isinstance(value, type(default)) else default

    def _save_json(self, key, value):
        try:
            self.set(key, json.dumps(value))
        except sqlite3.Error as e:
            print(f"⚠ Could not save {key}: {e}")
            return False
        return True

    def load_saved_plans(self):
        """Saved plans, newest first ([] when nothing usable is stored)."""
        return self._load_json(SAVED_PLANS_KEY, [])

    def save_plan(self, plan):
        """
        Prepend a plan to the saved list, keeping the newest 12.

        Returns:
            The updated list of saved plans
        """
        plans = [plan] + [item for item in self.load_saved_plans() if item.get("id") != plan["id"]]
        plans = plans[:MAX_SAVED_PLANS]
        self._save_json(SAVED_PLANS_KEY, plans)
        return plans

    def load_completions(self):
        return self._load_json(COMPLETIONS_KEY, {})

    def save_completions(self, completions):
        return self._save_json(COMPLETIONS_KEY, completions)


def new_saved_plan(response, tables, preferences, plan_start_date, now=None):
    """
    Build a saved plan record.

    Args:
        response: Combined plan text
        tables: Accumulated plan tables
        preferences: Planner preferences used for the run
        plan_start_date: Monday the plan starts on (date or ISO string)
        now: Creation time (defaults to the current time)

    Returns:
        Saved plan dict
    """
    now = now or datetime.now()
    start = plan_start_date.isoformat() if hasattr(plan_start_date, "isoformat") else str(plan_start_date)
    return {
        "id": f"plan-{int(time.mktime(now.timetuple()) * 1000 + now.microsecond // 1000)}",
        "created_at": now.isoformat(),
        "goal": preferences["goal"],
        "plan_length_weeks": int(preferences["plan_length_weeks"]),
        "run_days_per_week": str(preferences["run_days_per_week"]),
        "long_run_day": preferences["long_run_day"],
        "distance_unit": preferences["distance_unit"],
        "plan_start_date": start,
        "response": response,
        "tables": tables,
    }
