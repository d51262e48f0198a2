"""
Plan progress: check-ins, today's workout, adherence and goal-time prediction.
"""

from datetime import date, datetime

from runcoach.calendar_events import parse_plan_start
from runcoach.plan_tables import cell, extract_week_number, is_rest_like, plan_columns
from runcoach.response_parser import WEEKDAY_NAMES, normalize_day_name
from runcoach.run_day_rules import parse_run_day_cap


LEVEL_ADJUSTMENT = {
    "Beginner": 1.03,
    "Intermediate": 1.0,
    "Advanced": 0.985,
    "Elite": 0.97,
}

EMPTY_PREDICTION = "--:--:-- - --:--:--"


def completion_key(plan_id, week, day):
    return f"{plan_id}:week-{week}:{str(day).lower()}"


def _bounded_int(value, low, high, default):
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return default
    return max(low, min(high, number))


def record_checkin(completions, key, rpe, soreness, sleep_quality, notes="", now=None):
    """
    Record a workout check-in.

    Args:
        completions: Existing completion map (not modified)
        key: Completion key from completion_key()
        rpe: Effort 1-10
        soreness: Soreness 1-10
        sleep_quality: Sleep quality 1-5
        notes: Free-text notes

    Returns:
        New completion map including the check-in
    """
    now = now or datetime.now()
    updated = dict(completions)
    updated[key] = {
        "completed_at": now.isoformat(),
        "rpe": _bounded_int(rpe, 1, 10, 6),
        "soreness": _bounded_int(soreness, 1, 10, 4),
        "sleep_quality": _bounded_int(sleep_quality, 1, 5, 3),
        "notes": (notes or "").strip(),
    }
    return updated


def current_week_number(plan_start_date, today=None):
    today = today or date.today()
    elapsed_days = (today - parse_plan_start(plan_start_date)).days
    if elapsed_days < 0:
        return 1
    return elapsed_days // 7 + 1


def today_workout(display_tables, plan_start_date, today=None):
    """
    Find today's workout in the plan.

    Picks the current week's table, then the row for today's weekday, falling
    back to the week's first non-rest row.

    Returns:
        Dict with week, day, workout_type, details, rationale; or None
    """
    today = today or date.today()
    week_number = current_week_number(plan_start_date, today)
    day_name = WEEKDAY_NAMES[today.weekday()]

    table = next(
        (
            table for index, table in enumerate(display_tables)
            if extract_week_number(table.get("title"), index + 1) == week_number
        ),
        None,
    )
    if table is None:
        return None

    columns = plan_columns(table["headers"])
    row = next(
        (row for row in table["rows"] if normalize_day_name(cell(row, columns["day"])) == day_name),
        None,
    )
    if row is None:
        row = next(
            (row for row in table["rows"] if not is_rest_like(cell(row, columns["workout"]))),
            None,
        )
    if row is None:
        return None

    return {
        "week": week_number,
        "day": cell(row, columns["day"], day_name),
        "workout_type": cell(row, columns["workout"], "Rest Day"),
        "details": cell(row, columns["details"]),
        "rationale": cell(row, columns["rationale"]),
    }


def plan_progress_summary(display_tables, plan_id, completions):
    """Planned vs completed workouts and average check-in scores for a plan."""
    planned = 0
    for table in display_tables:
        workout_col = plan_columns(table["headers"])["workout"]
        if workout_col == -1:
            continue
        planned += sum(1 for row in table["rows"] if not is_rest_like(cell(row, workout_col)))

    entries = []
    if plan_id:
        prefix = f"{plan_id}:"
        entries = [value for key, value in completions.items() if key.startswith(prefix)]

    completed = len(entries)
    adherence = min(100, round(completed / planned * 100)) if planned else 0

    def _avg(field):
        if not entries:
            return "0.0"
        return f"{sum(entry[field] for entry in entries) / len(entries):.1f}"

    return {
        "planned": planned,
        "completed": completed,
        "adherence_percent": adherence,
        "avg_rpe": _avg("rpe"),
        "avg_soreness": _avg("soreness"),
        "avg_sleep_quality": _avg("sleep_quality"),
    }


def duration_seconds_from_parts(hours, minutes, seconds):
    """Seconds from separate hour/minute/second inputs; None when blank, invalid or zero."""
    texts = [str(value or "").strip() for value in (hours, minutes, seconds)]
    if not any(texts):
        return None

    try:
        parts = [int(text) if text else 0 for text in texts]
    except ValueError:
        return None
    if any(part < 0 for part in parts):
        return None

    total = parts[0] * 3600 + parts[1] * 60 + parts[2]
    return total if total > 0 else None


def format_duration(total_seconds):
    bounded = max(0, round(total_seconds))
    hours = bounded // 3600
    minutes = (bounded % 3600) // 60
    seconds = bounded % 60
    return f"{hours}:{minutes:02d}:{seconds:02d}"


def prediction_range(target_seconds, plan_length_weeks, run_days_per_week, running_level):
    """
    Estimated goal time range after the plan.

    Training lift is weeks * 0.5 + run days * 0.6 percent, bounded to 2..12,
    then scaled by running level; the range is +/- 1%.
    """
    if not target_seconds:
        return EMPTY_PREDICTION

    lift_percent = max(2, min(12, int(plan_length_weeks) * 0.5 + parse_run_day_cap(run_days_per_week) * 0.6))
    predicted = target_seconds * (1 - lift_percent / 100) * LEVEL_ADJUSTMENT.get(running_level, 1.0)
    return f"{format_duration(predicted * 0.99)} - {format_duration(predicted * 1.01)}"
