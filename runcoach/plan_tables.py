"""
Canonical plan tables: projection, week tagging and display grouping.

A plan table is the dict {"headers": [...], "rows": [[...], ...]}; it is the
shape persisted in saved plans and consumed by the calendar and progress code.
"""

import re

from runcoach.response_parser import (
    WEEKDAY_NAMES,
    default_rest_day,
    normalize_day_name,
)


PLAN_HEADERS = ["Week", "Day", "Workout Type", "Details (Distance/Pace/Zone)", "Rationale"]

WEEK_NUMBER_RE = re.compile(r"week\s+(\d+)", re.IGNORECASE)

# Column name -> True when the header must match exactly, False for substring.
COLUMN_MATCH = {
    "week": True,
    "day": True,
    "workout": False,
    "details": False,
    "rationale": False,
}


def is_rest_like(workout_type):
    """Rest-like rows mention "rest" or "off" anywhere in the workout type."""
    value = (workout_type or "").lower()
    return "rest" in value or "off" in value


def find_column(headers, name):
    """Return the index of a plan column by case-insensitive name, or -1."""
    exact = COLUMN_MATCH.get(name, True)
    for index, header in enumerate(headers):
        value = (header or "").lower()
        if (exact and value == name) or (not exact and name in value):
            return index
    return -1


def plan_columns(headers):
    return {name: find_column(headers, name) for name in COLUMN_MATCH}


def cell(row, index, default=""):
    if index == -1 or index >= len(row):
        return default
    value = row[index]
    return default if value is None else value


def extract_week_number(title, fallback):
    match = WEEK_NUMBER_RE.search(title or "")
    if not match:
        return fallback
    return int(match.group(1))


def structured_week_to_table(week_plan):
    """Project a structured week onto the canonical 5-column table."""
    week_label = f"Week {week_plan['week']}"
    return {
        "headers": list(PLAN_HEADERS),
        "rows": [
            [week_label, day["day"], day["workout_type"], day["details"], day["rationale"]]
            for day in week_plan["days"]
        ],
    }


def enforce_expected_week(tables, week_number):
    """
    Stamp every row with "Week {week_number}".

    The week the model reports for itself is never trusted during generation;
    tables without a Week column get one prepended.
    """
    label = f"Week {week_number}"
    stamped = []
    for table in tables:
        week_index = find_column(table["headers"], "week")
        if week_index == -1:
            stamped.append({
                "headers": ["Week"] + list(table["headers"]),
                "rows": [[label] + list(row) for row in table["rows"]],
            })
            continue

        rows = []
        for row in table["rows"]:
            next_row = list(row)
            next_row[week_index] = label
            rows.append(next_row)
        stamped.append({"headers": list(table["headers"]), "rows": rows})
    return stamped


def normalize_week_tables(parsed, week_number):
    """Turn a ParsedWeek into the week's tagged table list (empty when parsing failed)."""
    if parsed.kind == "structured":
        return enforce_expected_week([structured_week_to_table(parsed.week)], week_number)
    if parsed.kind == "tables":
        return enforce_expected_week(parsed.tables, week_number)
    return []


def table_to_structured_week(table, fallback_week):
    columns = plan_columns(table["headers"])

    week_number = fallback_week
    if columns["week"] != -1:
        first_label = next(
            (row[columns["week"]] for row in table["rows"] if cell(row, columns["week"])),
            f"Week {fallback_week}",
        )
        week_number = extract_week_number(first_label, fallback_week)

    by_day = {}
    for row in table["rows"]:
        day = normalize_day_name(cell(row, columns["day"]))
        if not day or day in by_day:
            continue
        by_day[day] = {
            "day": day,
            "workout_type": cell(row, columns["workout"], "Rest Day"),
            "details": cell(row, columns["details"]),
            "rationale": cell(row, columns["rationale"]),
        }

    return {
        "week": week_number,
        "verdict": "Maintenance",
        "reasoning": "Generated via fallback parsing.",
        "days": [by_day.get(day) or default_rest_day(day) for day in WEEKDAY_NAMES],
    }


def build_display_tables(tables):
    """
    Group accumulated tables into one titled table per week.

    Rows are grouped by their Week cell (first-seen order) and the Week
    column is dropped. Tables without a Week column become "Plan N".
    """
    output = []
    for table_index, table in enumerate(tables):
        week_index = find_column(table["headers"], "week")
        if week_index == -1:
            output.append({
                "title": f"Plan {table_index + 1}",
                "headers": list(table["headers"]),
                "rows": [list(row) for row in table["rows"]],
            })
            continue

        grouped = {}
        for row in table["rows"]:
            week_key = cell(row, week_index) or f"Week {table_index + 1}"
            grouped.setdefault(week_key, []).append(row)

        headers = [h for i, h in enumerate(table["headers"]) if i != week_index]
        for title, rows in grouped.items():
            output.append({
                "title": title,
                "headers": headers,
                "rows": [[value for i, value in enumerate(row) if i != week_index] for row in rows],
            })
    return output


def visible_tables(display_tables, segment):
    """Filter display tables to the "weeks1to4" or "weeks5to8" segment."""
    visible = []
    for table_index, table in enumerate(display_tables):
        week_number = extract_week_number(table.get("title"), table_index + 1)
        if segment == "weeks1to4" and week_number <= 4:
            visible.append(table)
        elif segment != "weeks1to4" and week_number >= 5:
            visible.append(table)
    return visible


def build_calendar_week_rows(display_tables):
    """One Monday..Sunday row of cells per display table, for the week grid."""
    week_rows = []
    for idx, table in enumerate(display_tables):
        week = table_to_structured_week(table, idx + 1)
        cells = [
            {
                "day_name": day["day"],
                "workout_type": day["workout_type"],
                "details": day["details"],
                "is_rest": is_rest_like(day["workout_type"]),
            }
            for day in week["days"]
        ]
        week_rows.append({"title": table.get("title", ""), "cells": cells})
    return week_rows


def table_to_markdown(table):
    """Render a plan table as a markdown pipe table."""
    headers = table["headers"]
    lines = [
        "| " + " | ".join(headers) + " |",
        "| " + " | ".join("---" for _ in headers) + " |",
    ]
    for row in table["rows"]:
        lines.append("| " + " | ".join(row) + " |")
    return "\n".join(lines)
