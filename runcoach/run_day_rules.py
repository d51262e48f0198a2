"""
Hard cap on training days per week.

The model does not reliably honor "run N days per week", so after one
corrective request the week is clamped deterministically: the highest-value
sessions are kept and the rest are demoted to Rest Day.
"""

import re

from runcoach.plan_tables import cell, find_column, is_rest_like, plan_columns
from runcoach.response_parser import day_index


DEFAULT_RUN_DAY_CAP = 4
UNKNOWN_DAY_ORDER = 7
SUNDAY = 6

QUALITY_RE = re.compile(r"(interval|tempo|threshold|hill|speed)", re.IGNORECASE)
LONG_RE = re.compile(r"long", re.IGNORECASE)
LEADING_INT_RE = re.compile(r"\s*([+-]?\d+)")

DEMOTED_WORKOUT = "Rest Day"
DEMOTED_DETAILS = "Recovery / optional mobility"


def parse_run_day_cap(value):
    """Parse the runs-per-week preference, clamped to 1..7 (default 4)."""
    # leading integer only: "5 days" -> 5, "5.5" -> 5
    match = LEADING_INT_RE.match(str(value))
    if not match:
        return DEFAULT_RUN_DAY_CAP
    return min(max(int(match.group(1)), 1), 7)


def count_planned_run_days(tables):
    """Count distinct weekdays that carry a non-rest workout across the tables."""
    run_days = set()
    for table in tables:
        day_col = find_column(table["headers"], "day")
        workout_col = find_column(table["headers"], "workout")
        if day_col == -1 or workout_col == -1:
            continue
        for row in table["rows"]:
            day = cell(row, day_col).strip().lower()
            if not day or is_rest_like(cell(row, workout_col)):
                continue
            run_days.add(day)
    return len(run_days)


def _row_score(workout, day, idx, long_run_day_index):
    day_order = day_index(day)
    if day_order is None:
        day_order = UNKNOWN_DAY_ORDER
    is_long = bool(LONG_RE.search(workout))
    is_long_on_preferred_day = is_long and day_order == long_run_day_index
    is_quality = bool(QUALITY_RE.search(workout))
    return (
        (100 if is_long_on_preferred_day else 0)
        + (50 if is_quality else 0)
        + (25 if is_long else 0)
        - day_order * 0.1
        - idx * 0.01
    )


def clamp_to_run_day_cap(table, run_day_cap, long_run_day):
    """
    Demote excess non-rest rows so at most run_day_cap remain.

    Rows are scored: +100 for a long run on the preferred long-run day, +50 for
    quality work (interval/tempo/threshold/hill/speed), +25 for any long run,
    minus small day-of-week and row-position penalties so earlier rows win
    ties. The top run_day_cap rows are kept; the other non-rest rows become
    Rest Day in place. Row order and table width never change.
    """
    columns = plan_columns(table["headers"])
    day_col = columns["day"]
    workout_col = columns["workout"]
    if day_col == -1 or workout_col == -1:
        return table

    active = [
        idx for idx, row in enumerate(table["rows"])
        if not is_rest_like(cell(row, workout_col))
    ]
    if len(active) <= run_day_cap:
        return table

    long_run_day_index = day_index(long_run_day)
    if long_run_day_index is None:
        long_run_day_index = SUNDAY

    scored = sorted(
        active,
        key=lambda idx: _row_score(
            cell(table["rows"][idx], workout_col),
            cell(table["rows"][idx], day_col),
            idx,
            long_run_day_index,
        ),
        reverse=True,
    )
    keep = set(scored[:run_day_cap])

    rows = []
    for idx, row in enumerate(table["rows"]):
        if idx in keep or is_rest_like(cell(row, workout_col)):
            rows.append(row)
            continue
        demoted = list(row)
        demoted[workout_col] = DEMOTED_WORKOUT
        if columns["details"] != -1:
            demoted[columns["details"]] = DEMOTED_DETAILS
        if columns["rationale"] != -1:
            demoted[columns["rationale"]] = f"Respect {run_day_cap} training days/week"
        rows.append(demoted)

    return {"headers": table["headers"], "rows": rows}


def clamp_week_to_run_day_cap(tables, run_day_cap, long_run_day):
    return [clamp_to_run_day_cap(table, run_day_cap, long_run_day) for table in tables]


def with_run_day_correction(prompt, week_number, run_day_cap):
    """Append the corrective directives used after a run-day cap violation."""
    return "\n".join([
        prompt,
        "",
        f"Critical Fix: Rewrite Week {week_number} so it has EXACTLY {run_day_cap} run days.",
        f"Critical Fix: The other {7 - run_day_cap} days must be Rest or non-running cross-training.",
        "Critical Fix: Return ONLY corrected JSON for that week using the same schema.",
    ])
