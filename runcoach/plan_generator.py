"""
AI-powered multi-week running plan generation using Claude API.
"""

import json
import os
from datetime import datetime

import anthropic

from runcoach.history_compressor import summarize_week_for_history
from runcoach.plan_tables import normalize_week_tables, table_to_markdown
from runcoach.prompt_builder import (
    MAX_PLAN_WEEKS,
    build_coach_prompt,
    build_followup_prompt,
    to_compact_input,
)
from runcoach.response_parser import parse_week_response
from runcoach.run_day_rules import (
    clamp_week_to_run_day_cap,
    count_planned_run_days,
    parse_run_day_cap,
    with_run_day_correction,
)


CONTEXT_WINDOW_MARKERS = ("context window", "model size", "token")

# A week is tried with the full prompt first; only a capacity failure moves
# it to the compact prompt. Each mode may add one corrective request.
WEEK_MODES = ("full", "compact")


def looks_like_context_window_error(error):
    """True when an error message suggests the prompt was too large for the model."""
    message = str(error).lower()
    return any(marker in message for marker in CONTEXT_WINDOW_MARKERS)


def combine_week_responses(responses):
    """Join raw week responses under "## Week N" headings."""
    return "\n\n".join(
        f"## Week {week}\n{text}" for week, text in enumerate(responses, start=1)
    )


class PlanGenerator:
    """Generates adaptive multi-week running plans with Claude, one week at a time."""

    def __init__(self, api_key, config, model=None, max_tokens=None, timeout=None, client=None):
        """
        Initialize the plan generator.

        Args:
            api_key: Anthropic API key
            config: Full configuration dictionary
            model: Claude model to use (defaults to config value)
            max_tokens: Maximum tokens for each week's response (defaults to config value)
            timeout: Client timeout in seconds (defaults to config value)
            client: Pre-built client exposing messages.create (used by tests)
        """
        self.client = client or anthropic.Anthropic(
            api_key=api_key,
            timeout=timeout or config['claude'].get('timeout', 120)
        )
        self.model = model or config['claude']['model']
        self.max_tokens = max_tokens or config['claude']['max_tokens']
        self.config = config

    def generate(self, prompt):
        """Send one prompt and return the concatenated text of the reply."""
        message = self.client.messages.create(
            model=self.model,
            max_tokens=self.max_tokens,
            messages=[
                {
                    "role": "user",
                    "content": prompt
                }
            ]
        )
        return "".join(
            block.text for block in message.content if getattr(block, "type", "text") == "text"
        )

    def _request_week(self, prompt, week, run_day_cap, mode, debug_prompts):
        """
        One week in one mode: request, parse, and at most one corrective retry.

        Returns:
            (response_text, tables, parse_kind, corrected)
        """
        debug_prompts.append({"week": week, "mode": mode, "prompt": prompt})
        text = self.generate(prompt)
        parsed = parse_week_response(text, week)
        tables = normalize_week_tables(parsed, week)

        planned = count_planned_run_days(tables)
        if planned <= run_day_cap:
            return text, tables, parsed.kind, False

        print(f"  Week {week}: {planned} run days planned (cap {run_day_cap}), requesting correction...")
        correction_prompt = with_run_day_correction(prompt, week, run_day_cap)
        debug_prompts.append({"week": week, "mode": f"{mode}-corrective", "prompt": correction_prompt})
        text = self.generate(correction_prompt)
        parsed = parse_week_response(text, week)
        return text, normalize_week_tables(parsed, week), parsed.kind, True

    def _plan_week(self, plan_input, compact_input, week, history, run_day_cap, debug_prompts):
        """Run the full -> compact state machine for one week."""
        history_context = "\n\n".join(history)

        for mode in WEEK_MODES:
            source = plan_input if mode == "full" else compact_input
            prompt = build_coach_prompt(dict(source, history_context=history_context), week)
            try:
                text, tables, parse_kind, corrected = self._request_week(
                    prompt, week, run_day_cap, mode, debug_prompts
                )
            except Exception as exc:
                if mode == "full" and looks_like_context_window_error(exc):
                    print(f"  Week {week}: prompt too large ({exc}), retrying with compact context...")
                    continue
                raise

            tables = clamp_week_to_run_day_cap(tables, run_day_cap, plan_input["long_run_day"])
            if parse_kind == "failed":
                print(f"  ⚠ Week {week}: no plan table could be parsed from the response; week left empty.")
            return {
                "week": week,
                "mode": mode,
                "corrected": corrected,
                "parse": parse_kind,
                "text": text,
                "tables": tables,
            }

    def build_weekly_plan(self, plan_input, on_progress=None):
        """
        Generate the plan sequentially, one request per week.

        Each week's prompt carries the digests of the weeks before it. After
        every completed week, on_progress (if given) receives the partial
        combined text and accumulated tables. Any request failure other than
        a context-window failure of the full prompt stops the run and
        propagates; weeks already published are not rolled back.

        Args:
            plan_input: Prompt builder input (see health_summary.build_plan_input)
            on_progress: Optional callable receiving a progress dict per week

        Returns:
            Dict with combined, tables, debug_prompts, week_log
        """
        plan_length = int(plan_input["plan_length_weeks"])
        if not 1 <= plan_length <= MAX_PLAN_WEEKS:
            raise ValueError(f"Plan length must be between 1 and {MAX_PLAN_WEEKS} weeks.")

        print(f"\n🤖 Generating your {plan_length}-week running plan with Claude AI...")

        run_day_cap = parse_run_day_cap(plan_input["run_days_per_week"])
        compact_input = to_compact_input(plan_input)
        responses = []
        accumulated_tables = []
        history = []
        debug_prompts = []
        week_log = []

        for week in range(1, plan_length + 1):
            result = self._plan_week(plan_input, compact_input, week, history, run_day_cap, debug_prompts)

            responses.append(result["text"])
            accumulated_tables.extend(result["tables"])
            history.append(summarize_week_for_history(result["tables"], week))
            week_log.append({key: result[key] for key in ("week", "mode", "corrected", "parse")})
            print(f"  ✓ Week {week} planned ({result['mode']}{', corrected' if result['corrected'] else ''})")

            if on_progress:
                on_progress({
                    "week": week,
                    "combined": combine_week_responses(responses),
                    "tables": list(accumulated_tables),
                    "debug_prompts": list(debug_prompts),
                })

        print("✓ Running plan generated successfully!\n")
        return {
            "combined": combine_week_responses(responses),
            "tables": list(accumulated_tables),
            "debug_prompts": debug_prompts,
            "week_log": week_log,
        }

    def ask_about_plan(self, question, display_tables):
        """Answer a follow-up question using only the given plan tables as context."""
        question = (question or "").strip()
        if not question:
            raise ValueError("Ask a specific question about your plan first.")
        if not display_tables:
            raise ValueError("Generate a plan first, then ask follow-up questions.")

        app_name = self.config.get('planner', {}).get('app_name', 'Frunna')
        return self.generate(build_followup_prompt(question, display_tables, app_name=app_name))

    def save_plan(self, plan, tables=None, output_folder="output", format="markdown"):
        """
        Save the combined plan text (and its tables) to a file.

        Args:
            plan: Combined plan narrative
            tables: Accumulated plan tables (optional)
            output_folder: Folder to save the plan
            format: "markdown" or "json"

        Returns:
            Path of the written file, or None when there is nothing to save
        """
        if not plan:
            print("No plan to save.")
            return None

        os.makedirs(output_folder, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")

        if format == "json":
            filepath = os.path.join(output_folder, f"running_plan_{timestamp}.json")
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump({"response": plan, "tables": tables or []}, f, indent=2)
        else:
            filepath = os.path.join(output_folder, f"running_plan_{timestamp}.md")
            sections = [plan]
            if tables:
                sections.append("# Plan Tables")
                sections.extend(table_to_markdown(table) for table in tables)
            with open(filepath, 'w', encoding='utf-8') as f:
                f.write("\n\n".join(sections) + "\n")

        print(f"✓ Plan saved to: {filepath}")
        return filepath
