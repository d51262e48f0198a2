"""
Token-bounded context for later weeks' prompts.

Each finished week is compressed to a digest of at most 7 lines, so prompt
size does not grow with plan length. Check-ins are compressed the same way
into an execution-feedback block.
"""

from runcoach.plan_tables import cell, find_column


MAX_DIGEST_LINES = 7
MAX_RECENT_NOTES = 5


def summarize_week_for_history(tables, week_number):
    """
    Compress one week's tables into a short digest for later prompts.

    Args:
        tables: The week's normalized plan tables
        week_number: Week being summarized

    Returns:
        "Week N Summary:" followed by up to 7 "- Day: Workout (details)" lines
    """
    week_tag = f"week {week_number}"
    lines = []

    for table in tables:
        week_col = find_column(table["headers"], "week")
        day_col = find_column(table["headers"], "day")
        workout_col = find_column(table["headers"], "workout")
        details_col = find_column(table["headers"], "details")

        for row in table["rows"]:
            week_cell = cell(row, week_col)
            if week_col != -1 and week_cell and week_tag not in week_cell.lower():
                continue

            day = cell(row, day_col, "Day")
            workout = cell(row, workout_col, "Run")
            details = cell(row, details_col)
            line = f"- {day}: {workout}"
            if details:
                line += f" ({details})"
            lines.append(line)

    return "\n".join([f"Week {week_number} Summary:"] + lines[:MAX_DIGEST_LINES])


def build_adaptation_context(active_plan_id, completions):
    """
    Summarize recorded check-ins for the "Execution Feedback" prompt block.

    Only check-ins for active_plan_id are used (all of them when no plan is
    active).
    """
    if active_plan_id:
        prefix = f"{active_plan_id}:"
        entries = [value for key, value in completions.items() if key.startswith(prefix)]
    else:
        entries = list(completions.values())

    if not entries:
        return "No completed workouts or check-ins recorded yet."

    count = len(entries)
    avg_rpe = sum(entry["rpe"] for entry in entries) / count
    avg_soreness = sum(entry["soreness"] for entry in entries) / count
    avg_sleep = sum(entry["sleep_quality"] for entry in entries) / count

    recent_notes = [
        f"- {entry['notes'].strip()}"
        for entry in entries[-MAX_RECENT_NOTES:]
        if (entry.get("notes") or "").strip()
    ]
    notes_block = (
        "Recent subjective notes:\n" + "\n".join(recent_notes)
        if recent_notes
        else "Recent subjective notes: none."
    )

    return "\n".join([
        f"Completed workouts with check-ins: {count}.",
        f"Average RPE: {avg_rpe:.1f} / 10.",
        f"Average soreness: {avg_soreness:.1f} / 10.",
        f"Average sleep quality: {avg_sleep:.1f} / 5.",
        notes_block,
    ])
