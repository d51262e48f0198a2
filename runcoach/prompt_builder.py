"""
Prompt construction for week-by-week plan generation.
"""

import re


MAX_PLAN_WEEKS = 12
WEEK_PARTS = [f"week{n}" for n in range(1, MAX_PLAN_WEEKS + 1)]

GOAL_DISTANCE_KM = {
    "5K": 5,
    "10K": 10,
    "Half Marathon": 21.0975,
    "Marathon": 42.195,
}

KM_TO_MILES = 0.621371
COMPACT_NARRATIVE_LINES = 3


def parse_duration_to_seconds(value):
    """
    Parse a target time string into seconds.

    "25" is minutes; "MM:SS" when the second part is >= 60 is read as
    minutes+seconds, otherwise two parts are "HH:MM"; three parts are
    "HH:MM:SS". Returns None when the value cannot be read.
    """
    cleaned = (value or "").strip()
    if not cleaned:
        return None

    if re.fullmatch(r"\d+", cleaned):
        minutes = int(cleaned)
        return minutes * 60 if minutes > 0 else None

    parts = [part.strip() for part in cleaned.split(":")]
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return None
    if any(number < 0 for number in numbers):
        return None

    if len(numbers) == 2:
        first, second = numbers
        if second >= 60:
            return first * 60 + second
        return first * 3600 + second * 60

    if len(numbers) == 3:
        hours, minutes, seconds = numbers
        return hours * 3600 + minutes * 60 + seconds

    return None


def format_pace(seconds_per_unit):
    minutes = int(seconds_per_unit // 60)
    seconds = int(round(seconds_per_unit % 60))
    if seconds == 60:
        minutes, seconds = minutes + 1, 0
    return f"{minutes}:{seconds:02d}"


def _pace_range(low, high):
    return f"{format_pace(low)}-{format_pace(high)}"


def build_pace_guardrails(plan_input):
    """Pace bounds derived from goal distance and target time."""
    distance_km = GOAL_DISTANCE_KM.get(plan_input.get("goal"))
    total_seconds = plan_input.get("target_time_seconds") or parse_duration_to_seconds(
        plan_input.get("target_time")
    )
    if not distance_km or not total_seconds or total_seconds <= 0:
        return ["Target Pace Context: unavailable (no valid target time provided)."]

    per_km = total_seconds / distance_km
    per_mile = total_seconds / (distance_km * KM_TO_MILES)

    return [
        f"Target Pace Context: goal pace is about {format_pace(per_km)}/km ({format_pace(per_mile)}/mile).",
        f"Easy pace guardrail: roughly {_pace_range(per_km + 45, per_km + 90)}/km "
        f"({_pace_range(per_mile + 75, per_mile + 150)}/mile).",
        f"Threshold/tempo guardrail: {_pace_range(per_km + 8, per_km + 25)}/km "
        f"({_pace_range(per_mile + 13, per_mile + 40)}/mile).",
        f"Interval guardrail (short repeats only): {_pace_range(per_km - 10, per_km + 12)}/km "
        f"({_pace_range(per_mile - 16, per_mile + 19)}/mile).",
        f"Hard guardrail: continuous efforts longer than 1 mile must not be faster than "
        f"{format_pace(per_km + 8)}/km ({format_pace(per_mile + 13)}/mile).",
        "Validation rule: if any prescribed pace breaks these bounds, rewrite the session before returning the final table.",
        "Safety guardrail: keep pace prescriptions realistic for current goal and injury prevention.",
    ]


def _optional_block(title, text):
    text = (text or "").strip()
    if not text:
        return ""
    return f"{title}\n{text}\n"


def build_base_prompt(plan_input):
    """Shared context + constraints section used by every week's prompt."""
    goal = plan_input["goal"]
    unit = plan_input["distance_unit"]
    target_time = plan_input.get("target_time")

    lines = [
        f"Role: You are an elite running coach specializing in {goal} performance and injury prevention.",
        "",
        "My Context:",
        f"Goal: Improve {goal} speed while staying injury-free.",
        f"Running Level: {plan_input['running_level']}",
        f"Target Time: {target_time}" if target_time else "Target Time: not specified",
        "Current Phase: Base Building.",
        f"Schedule Constraints: I can run {plan_input['run_days_per_week']} days per week. "
        f"Long runs are on {plan_input['long_run_day']}.",
        f"Distance Unit Preference: {unit}.",
        "",
        f"The Data (Last {plan_input['lookback_days']} Days):",
        "",
        "Recovery Trends:",
        f"Resting HR: {plan_input['resting_hr_trend']}",
        f"Sleep: {plan_input['sleep_trend']}",
        f"HRV: {plan_input['hrv_trend']}",
        "",
        "Workload:",
        f"VO2 Max: {plan_input['vo2_trend']}",
        f"Distance: {plan_input['distance_trend']}",
        f"Steps: {plan_input['step_trend']}",
        "",
        "Recent Workouts:",
    ]
    lines += [f"- {line}" for line in plan_input.get("workout_narrative") or []]
    lines += [
        "",
        _optional_block("Prior Plan Context (already generated):", plan_input.get("history_context")),
        _optional_block(
            "Execution Feedback (completed workouts + check-ins):",
            plan_input.get("adaptation_context"),
        ),
        "Your Task: Based on my Recovery Trends (HRV/RHR), prior plan context, and schedule constraints, "
        "determine progression and write the next week schedule.",
        "",
        "Global Constraints:",
        "Constraint: Ensure easy runs are actually easy (Zone 2).",
        "Constraint: If Push week, include one speed session (Intervals or Tempo).",
        "Constraint: If Deload week, remove all speed work and focus on Zone 1/2.",
        "Constraint: Keep Details and Rationale concise (max 12 words each).",
        f"Constraint: Use {unit} for all distance prescriptions.",
        "Constraint: Do not prescribe more run days than schedule allows.",
        "Constraint: Weekly load progression should be conservative "
        "(roughly <=10% increase vs prior week when context exists).",
    ]
    lines += [f"Constraint: {line}" for line in build_pace_guardrails(plan_input)]
    lines.append("")
    return "\n".join(lines)


def build_coach_prompt(plan_input, week):
    """
    Build the full prompt for one week of the plan.

    Args:
        plan_input: Plan input dict (preferences, trend lines, narrative, contexts)
        week: Week number, 1..12

    Returns:
        Prompt string asking for a single JSON week object
    """
    if f"week{week}" not in WEEK_PARTS:
        raise ValueError(f"Unsupported week prompt key: week{week}")

    if week == 1:
        assumption = "No prior weeks planned yet."
    else:
        assumption = f"Assume Weeks 1-{week - 1} are already planned. Continue progression appropriately."

    return "\n".join([
        build_base_prompt(plan_input),
        f"Output Required (Part {week}):",
        assumption,
        "The Verdict: state Push, Maintenance, or Deload.",
        "The Reasoning: one sentence.",
        "Pace Check: verify every pace obeys the guardrails before finalizing.",
        f"The Plan (Week {week} only): Return ONLY valid JSON (no markdown, no prose) with this exact shape:",
        "{",
        f'  "week": {week},',
        '  "verdict": "Push|Maintenance|Deload",',
        '  "reasoning": "one sentence",',
        '  "days": [',
        '    { "day": "Monday", "workoutType": "...", "details": "...", "rationale": "..." }',
        "  ]",
        "}",
        "JSON Rules: include exactly 7 day objects; keep non-running days as Rest Day; "
        "use only day names Monday..Sunday.",
    ])


def to_compact_input(plan_input):
    """Reduced-detail input used after a context-window failure."""
    compact = dict(plan_input)
    compact["workout_narrative"] = list(plan_input.get("workout_narrative") or [])[:COMPACT_NARRATIVE_LINES]
    compact["vo2_trend"] = f"VO2: {plan_input['vo2_trend']}"
    compact["distance_trend"] = f"Distance: {plan_input['distance_trend']}"
    compact["step_trend"] = f"Steps: {plan_input['step_trend']}"
    return compact


def build_followup_prompt(question, display_tables, app_name="Frunna"):
    """Prompt for answering a question about the current plan."""
    sections = []
    for table in display_tables:
        rows = [
            ", ".join(
                f"{header}: {row[index] if index < len(row) else ''}"
                for index, header in enumerate(table["headers"])
            )
            for row in table["rows"][:7]
        ]
        sections.append("\n".join([table.get("title", "")] + rows))

    return "\n".join([
        f"You are {app_name}, a running coach.",
        "Answer using only the current plan context.",
        "Keep it concise and actionable.",
        "",
        "Plan Context:",
        "\n\n".join(sections),
        "",
        f"Question: {question}",
    ])
