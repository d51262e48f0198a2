"""
Derive dated calendar events from plan tables.
"""

from datetime import date, datetime, time, timedelta

from runcoach.plan_tables import cell, extract_week_number, is_rest_like, plan_columns
from runcoach.response_parser import day_index


WORKOUT_START_TIME = time(7, 0)
DEFAULT_APP_NAME = "Frunna"


def next_monday(today=None):
    """Return the Monday strictly after today (a week out when today is Monday)."""
    today = today or date.today()
    days_until_monday = (7 - today.weekday()) % 7 or 7
    return today + timedelta(days=days_until_monday)


def parse_plan_start(value):
    """Accept a date, datetime, or ISO date/datetime string and return a date."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        return date.fromisoformat(text[:10])


def estimated_duration_minutes(workout_type):
    value = (workout_type or "").lower()
    if "long" in value:
        return 90
    if "interval" in value or "tempo" in value or "speed" in value:
        return 70
    if "recovery" in value or "easy" in value:
        return 50
    if "strength" in value:
        return 45
    return 60


def to_calendar_events(tables, plan_start_date=None, app_name=DEFAULT_APP_NAME):
    """
    Build one 07:00 local event per non-rest plan row.

    Args:
        tables: Display tables ("title" gives the week) or plain plan tables
            (week taken from table position)
        plan_start_date: Monday the plan starts on; next Monday when omitted
        app_name: Prefix for event titles

    Returns:
        List of {"title", "start", "end", "notes"} with naive local datetimes
    """
    anchor = parse_plan_start(plan_start_date) if plan_start_date else next_monday()
    events = []

    for table_index, table in enumerate(tables):
        week_number = extract_week_number(table.get("title"), table_index + 1)
        week_offset = (week_number - 1) * 7
        columns = plan_columns(table["headers"])
        if columns["day"] == -1 or columns["workout"] == -1:
            continue

        for row in table["rows"]:
            day_offset = day_index(cell(row, columns["day"]))
            if day_offset is None:
                continue

            workout_type = cell(row, columns["workout"], "Run")
            if is_rest_like(workout_type):
                continue

            start = datetime.combine(anchor + timedelta(days=week_offset + day_offset), WORKOUT_START_TIME)
            end = start + timedelta(minutes=estimated_duration_minutes(workout_type))
            notes = [
                part for part in (cell(row, columns["details"]), cell(row, columns["rationale"])) if part
            ]
            events.append({
                "title": f"{app_name} W{week_number}: {workout_type}",
                "start": start,
                "end": end,
                "notes": "\n".join(notes),
            })

    return events
