"""
Health data loading and trend summaries for the planning prompt.

The health export is the JSON summary produced by the phone's health bridge:
one list of per-day rows per metric plus a list of workouts. Any series may be
missing when the user did not authorize it.
"""

import json
import os
from collections import Counter
from datetime import date, timedelta

from runcoach.errors import PermissionDenied
from runcoach.prompt_builder import KM_TO_MILES, parse_duration_to_seconds


# internal series name -> (export key, value field)
SERIES_FIELDS = {
    "steps": ("steps", "steps"),
    "resting_heart_rate": ("restingHeartRate", "restingBpm"),
    "heart_rate": ("heartRate", "avgBpm"),
    "sleep": ("sleep", "hoursAsleep"),
    "hrv": ("hrv", "hrvMs"),
    "vo2_max": ("vo2Max", "vo2Max"),
    "active_energy": ("activeEnergy", "activeKilocalories"),
    "distance": ("distanceWalkingRunning", "distanceKm"),
}

MAX_RECENT_SESSIONS = 6


def _to_float(value):
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _row_date(row):
    try:
        return date.fromisoformat(str(row.get("date") or "")[:10])
    except ValueError:
        return None


def normalize_summary(raw):
    """
    Convert a raw health export into per-series lists of {"date", "value"}.

    Missing or malformed series default to empty lists.
    """
    raw = raw or {}
    summary = {}
    for name, (export_key, value_field) in SERIES_FIELDS.items():
        rows = raw.get(export_key)
        if rows is None and name == "distance":
            rows = raw.get("distance")
        if not isinstance(rows, list):
            rows = []
        summary[name] = [
            {"date": str(row.get("date") or ""), "value": _to_float(row.get(value_field))}
            for row in rows
            if isinstance(row, dict)
        ]
        # trend lines compare the earlier half against the later half
        summary[name].sort(key=lambda row: row["date"])

    workouts = raw.get("workouts") if isinstance(raw.get("workouts"), list) else []
    summary["workouts"] = [
        {
            "date": str(row.get("date") or ""),
            "activity_type": str(row.get("activityType") or "Workout"),
            "duration_minutes": _to_float(row.get("durationMinutes")),
            "energy_kcal": _to_float(row.get("energyKilocalories")),
        }
        for row in workouts
        if isinstance(row, dict)
    ]
    summary["workouts"].sort(key=lambda row: row["date"], reverse=True)
    return summary


def _within_lookback(rows, days):
    dated = [_row_date(row) for row in rows]
    known = [value for value in dated if value is not None]
    if not known:
        return rows
    cutoff = max(known) - timedelta(days=days - 1)
    return [row for row, value in zip(rows, dated) if value is None or value >= cutoff]


def load_health_summary(path, days):
    """
    Load the health export and keep the last `days` days of every series.

    Args:
        path: JSON export file
        days: Lookback window, 1..365

    Returns:
        Normalized summary dict
    """
    if not 1 <= int(days) <= 365:
        raise ValueError("Lookback days must be between 1 and 365.")
    if not path or not os.path.exists(path):
        raise PermissionDenied("Health permission was not granted.")

    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    summary = normalize_summary(raw)
    return {name: _within_lookback(rows, int(days)) for name, rows in summary.items()}


def average(values):
    if not values:
        return 0.0
    return sum(values) / len(values)


def trend_line(label, values, unit):
    """Describe the recent half of a series against the earlier half."""
    if not values:
        return f"{label}: no data"

    midpoint = len(values) // 2
    if midpoint < 1:
        return f"{label}: {average(values):.1f} {unit} (not enough data for trend)"

    previous = average(values[:midpoint])
    recent = average(values[midpoint:])
    if previous == 0:
        return f"{label}: {recent:.1f} {unit} recent avg"

    delta_percent = (recent - previous) / previous * 100
    direction = "up" if delta_percent >= 0 else "down"
    return f"{label}: {recent:.1f} {unit} recent avg ({direction} {abs(delta_percent):.1f}% vs prior period)"


def summarize_workouts(summary, lookback_days):
    """Short narrative of logged workouts for the "Recent Workouts" block."""
    workouts = summary.get("workouts") or []
    if not workouts:
        return ["No workouts logged in this period."]

    total_minutes = sum(workout["duration_minutes"] for workout in workouts)
    total_kcal = sum(workout["energy_kcal"] for workout in workouts)
    avg_minutes = total_minutes / len(workouts)

    counts = Counter(workout["activity_type"] for workout in workouts)
    top_activities = ", ".join(f"{activity} x{count}" for activity, count in counts.most_common(3))

    recent_sessions = [
        f"{workout['date'][:10]}: {workout['activity_type']}, "
        f"{workout['duration_minutes']:g}min, {workout['energy_kcal']:g}kcal"
        for workout in workouts[:MAX_RECENT_SESSIONS]
    ]

    return [
        f"{len(workouts)} workouts completed over {lookback_days} days.",
        f"Total workout time {total_minutes:g} min (avg {avg_minutes:.0f} min per session).",
        f"Total workout energy {total_kcal:g} kcal.",
        f"Most frequent sessions: {top_activities or 'none'}.",
        "Recent sessions:",
    ] + recent_sessions


def _positive(summary, name):
    return [row["value"] for row in summary.get(name, []) if row["value"] > 0]


def build_plan_input(summary, preferences, adaptation_context=None):
    """
    Assemble the prompt builder's input from a health summary and preferences.

    Args:
        summary: Normalized health summary
        preferences: Planner preferences (config "planner" section shape)
        adaptation_context: Optional execution feedback text

    Returns:
        Plan input dict
    """
    lookback_days = int(preferences["lookback_days"])
    unit = preferences["distance_unit"]
    distances = _positive(summary, "distance")
    if unit == "miles":
        distances = [value * KM_TO_MILES for value in distances]

    target_time = (preferences.get("target_time") or "").strip() or None

    return {
        "lookback_days": lookback_days,
        "plan_length_weeks": int(preferences["plan_length_weeks"]),
        "goal": preferences["goal"],
        "running_level": preferences["running_level"],
        "target_time": target_time,
        "target_time_seconds": parse_duration_to_seconds(target_time),
        "run_days_per_week": str(preferences["run_days_per_week"]),
        "long_run_day": preferences["long_run_day"],
        "distance_unit": unit,
        "resting_hr_trend": trend_line("Resting HR", _positive(summary, "resting_heart_rate"), "bpm"),
        "sleep_trend": trend_line("Sleep duration", _positive(summary, "sleep"), "hours"),
        "hrv_trend": trend_line("HRV", _positive(summary, "hrv"), "ms"),
        "vo2_trend": trend_line("VO2 max", _positive(summary, "vo2_max"), "ml/kg/min"),
        "distance_trend": trend_line("Walking/running distance", distances, unit),
        "step_trend": trend_line("Daily steps", _positive(summary, "steps"), "steps"),
        "workout_narrative": summarize_workouts(summary, lookback_days),
        "adaptation_context": adaptation_context,
    }
