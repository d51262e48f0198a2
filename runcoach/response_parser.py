"""
Parse one week's raw model output into a structured week or markdown tables.

The model is asked for a JSON week object but regularly answers with fenced
JSON, prose around the JSON, or a markdown pipe table instead. Structured
parsing is tried first and markdown parsing second; neither raises.
"""

import json
import re
from collections import namedtuple


WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

DAY_INDEX = {
    "monday": 0,
    "mon": 0,
    "tuesday": 1,
    "tue": 1,
    "tues": 1,
    "wednesday": 2,
    "wed": 2,
    "thursday": 3,
    "thu": 3,
    "thurs": 3,
    "friday": 4,
    "fri": 4,
    "saturday": 5,
    "sat": 5,
    "sunday": 6,
    "sun": 6,
}

DEFAULT_REST_DAY = {
    "workout_type": "Rest Day",
    "details": "Recovery / mobility",
    "rationale": "Load management",
}
DEFAULT_VERDICT = "Maintenance"
DEFAULT_REASONING = "Balanced load and recovery."

LEADING_FENCE_RE = re.compile(r"^```(?:json)?", re.IGNORECASE)
TRAILING_FENCE_RE = re.compile(r"```$")

ParsedWeek = namedtuple("ParsedWeek", ["kind", "week", "tables"])


def day_index(value):
    """Return the Monday=0..Sunday=6 ordinal for a day label, or None."""
    return DAY_INDEX.get((value or "").strip().lower())


def normalize_day_name(value):
    """Map 'tues', 'THU', 'sunday' etc. to a canonical weekday name, or None."""
    index = day_index(value)
    if index is None:
        return None
    return WEEKDAY_NAMES[index]


def default_rest_day(day):
    return {"day": day, **DEFAULT_REST_DAY}


def _clean_text(value, default):
    if value is None:
        return default
    text = str(value).strip()
    return text or default


def _coerce_week(value, expected_week):
    # bool is an int subclass; "true" is not a week number
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return expected_week
    if value != value or value in (float("inf"), float("-inf")):
        return expected_week
    return int(value)


def _strip_code_fence(text):
    stripped = LEADING_FENCE_RE.sub("", text, count=1)
    stripped = TRAILING_FENCE_RE.sub("", stripped, count=1)
    return stripped.strip()


def parse_structured_week(text, expected_week):
    """
    Parse a JSON week object out of raw model text.

    Args:
        text: Raw model response
        expected_week: Week number used when the payload has no usable week

    Returns:
        Structured week dict with exactly 7 days (Monday..Sunday), or None
        when no JSON object with a "days" list can be recovered.
    """
    trimmed = (text or "").strip()
    if not trimmed:
        return None

    candidate = _strip_code_fence(trimmed)
    first_brace = candidate.find("{")
    last_brace = candidate.rfind("}")
    if first_brace == -1 or last_brace == -1 or last_brace <= first_brace:
        return None

    try:
        parsed = json.loads(candidate[first_brace:last_brace + 1])
    except (ValueError, RecursionError):
        return None

    if not isinstance(parsed, dict) or not isinstance(parsed.get("days"), list):
        return None

    by_day = {}
    for entry in parsed["days"]:
        if not isinstance(entry, dict):
            continue
        day = normalize_day_name(str(entry.get("day") or ""))
        if not day or day in by_day:
            continue
        by_day[day] = {
            "day": day,
            "workout_type": _clean_text(entry.get("workoutType"), DEFAULT_REST_DAY["workout_type"]),
            "details": _clean_text(entry.get("details"), DEFAULT_REST_DAY["details"]),
            "rationale": _clean_text(entry.get("rationale"), DEFAULT_REST_DAY["rationale"]),
        }

    days = [by_day.get(day) or default_rest_day(day) for day in WEEKDAY_NAMES]

    return {
        "week": _coerce_week(parsed.get("week"), expected_week),
        "verdict": _clean_text(parsed.get("verdict"), DEFAULT_VERDICT),
        "reasoning": _clean_text(parsed.get("reasoning"), DEFAULT_REASONING),
        "days": days,
    }


def _is_table_line(line):
    return line.startswith("|") and line.endswith("|")


def parse_cells(line):
    return [cell.strip() for cell in line[1:-1].split("|")]


def _fit_row(row, width):
    if len(row) == width:
        return row
    if len(row) > width:
        return row[:width - 1] + [" | ".join(row[width - 1:])]
    return row + [""] * (width - len(row))


def parse_markdown_tables(text):
    """
    Extract every markdown pipe table from text.

    A block of consecutive '|...|' lines counts as a table when it has at
    least three lines and its second line is a '---' separator. Rows are
    forced to the header width: overflow cells are merged into the last
    column, short rows are padded with empty strings.

    Returns:
        List of {"headers": [...], "rows": [[...], ...]} in appearance order
    """
    lines = [line.strip() for line in (text or "").split("\n")]
    tables = []
    index = 0

    while index < len(lines):
        if not _is_table_line(lines[index]):
            index += 1
            continue

        block = []
        while index < len(lines) and _is_table_line(lines[index]):
            block.append(lines[index])
            index += 1

        if len(block) < 3 or "---" not in block[1]:
            continue

        headers = parse_cells(block[0])
        rows = [_fit_row(parse_cells(line), len(headers)) for line in block[2:]]
        rows = [row for row in rows if len(row) == len(headers)]

        if rows:
            tables.append({"headers": headers, "rows": rows})

    return tables


def parse_week_response(text, expected_week):
    """
    Decode one week's response into a tagged result.

    Returns:
        ParsedWeek(kind, week, tables) where kind is "structured" (week set),
        "tables" (tables set) or "failed" (neither).
    """
    week = parse_structured_week(text, expected_week)
    if week is not None:
        return ParsedWeek("structured", week, [])

    tables = parse_markdown_tables(text)
    if tables:
        return ParsedWeek("tables", None, tables)

    return ParsedWeek("failed", None, [])
