#!/usr/bin/env python3
"""
Adaptive Running Coach
Command-line entry point: health export in, multi-week running plan out.
"""

import argparse
import sys

from runcoach.calendar_events import next_monday, to_calendar_events
from runcoach.calendar_sync import CalendarSync
from runcoach.config import get_api_key, load_config, storage_path
from runcoach.errors import ConfigError, PermissionDenied
from runcoach.health_summary import build_plan_input, load_health_summary
from runcoach.history_compressor import build_adaptation_context
from runcoach.plan_generator import PlanGenerator
from runcoach.plan_progress import prediction_range
from runcoach.plan_store import PlanStore, new_saved_plan
from runcoach.plan_tables import build_display_tables, table_to_markdown


def print_banner():
    """Print welcome banner."""
    banner = """
╔══════════════════════════════════════════════════════════════╗
║                                                              ║
║        ADAPTIVE RUNNING COACH                                ║
║        Powered by Claude AI                                  ║
║                                                              ║
╚══════════════════════════════════════════════════════════════╝
    """
    print(banner)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Generate an adaptive multi-week running plan.")
    parser.add_argument("--config", default=None, help="Path to config.yaml.")
    parser.add_argument("--health-file", default=None, help="Health summary JSON export.")
    parser.add_argument("--weeks", type=int, default=None, help="Plan length in weeks (1-12).")
    parser.add_argument("--lookback-days", type=int, default=None, help="Health lookback window in days.")
    parser.add_argument("--goal", default=None, help="5K, 10K, Half Marathon or Marathon.")
    parser.add_argument("--target-time", default=None, help='Goal time as HH:MM:SS, e.g. "0:24:30".')
    parser.add_argument("--run-days", default=None, help="Run days per week (1-7).")
    parser.add_argument("--output", default="output", help="Folder for the saved plan file.")
    parser.add_argument(
        "--format",
        choices=["markdown", "json"],
        default="markdown",
        help="Saved plan file format.",
    )
    parser.add_argument("--sync-calendar", action="store_true", help="Add workouts to Google Calendar.")
    parser.add_argument("--show-prompts", action="store_true", help="Print every week prompt sent.")
    return parser.parse_args(argv)


def resolve_preferences(config, args):
    preferences = dict(config['planner'])
    overrides = {
        'plan_length_weeks': args.weeks,
        'lookback_days': args.lookback_days,
        'goal': args.goal,
        'target_time': args.target_time,
        'run_days_per_week': args.run_days,
    }
    for key, value in overrides.items():
        if value is not None:
            preferences[key] = value
    return preferences


def print_week_progress(progress):
    print("\n" + "=" * 60)
    print(f"WEEK {progress['week']} READY")
    print("=" * 60)
    week_title = f"Week {progress['week']}"
    for table in build_display_tables(progress['tables']):
        if table['title'] == week_title:
            print(table_to_markdown(table))


def main(argv=None):
    """Main application flow."""
    args = parse_args(argv)
    print_banner()

    print("Loading configuration...")
    try:
        config = load_config(args.config)
        api_key = get_api_key(config)
    except ConfigError as e:
        print(f"\n❌ Error: {e}")
        print("\nPlease:")
        print("1. Copy .env.example to .env")
        print("2. Add your Anthropic API key to .env")
        print("3. Get your API key from: https://console.anthropic.com/")
        sys.exit(1)

    preferences = resolve_preferences(config, args)
    app_name = preferences.get('app_name', 'Frunna')

    # Step 1: Health data
    print("\n" + "=" * 60)
    print("READING HEALTH DATA")
    print("=" * 60)
    health_file = args.health_file or config['health']['export_file']
    try:
        summary = load_health_summary(health_file, int(preferences['lookback_days']))
    except (PermissionDenied, ValueError) as e:
        print(f"\n❌ Error reading health data: {e}")
        sys.exit(1)
    print(f"✓ Loaded health summary from {health_file}")

    # Step 2: Execution feedback from prior plans
    store = PlanStore(storage_path(config))
    saved_plans = store.load_saved_plans()
    active_plan_id = saved_plans[0]['id'] if saved_plans else None
    adaptation_context = build_adaptation_context(active_plan_id, store.load_completions())

    plan_input = build_plan_input(summary, preferences, adaptation_context=adaptation_context)

    # Step 3: Generate week by week
    print("\n" + "=" * 60)
    print("GENERATING RUNNING PLAN")
    print("=" * 60)

    generator = PlanGenerator(api_key=api_key, config=config)
    try:
        result = generator.build_weekly_plan(plan_input, on_progress=print_week_progress)
    except ValueError as e:
        print(f"\n❌ {e}")
        sys.exit(1)
    except Exception as e:
        print(f"\n❌ Failed to generate running plan: {e}")
        sys.exit(1)

    if args.show_prompts:
        for item in result['debug_prompts']:
            print(f"\n--- Week {item['week']} ({item['mode']}) ---\n{item['prompt']}")

    # Step 4: Save
    generator.save_plan(result['combined'], result['tables'], output_folder=args.output, format=args.format)

    plan_start = next_monday()
    saved = new_saved_plan(result['combined'], result['tables'], preferences, plan_start)
    store.save_plan(saved)
    print(f"✓ Plan stored as {saved['id']} (starts {plan_start.isoformat()})")

    estimate = prediction_range(
        plan_input['target_time_seconds'],
        plan_input['plan_length_weeks'],
        plan_input['run_days_per_week'],
        plan_input['running_level'],
    )
    print(f"Estimated {plan_input['goal']} time in {plan_input['plan_length_weeks']} weeks: {estimate}")

    # Step 5: Optional calendar sync
    if args.sync_calendar:
        calendar_config = config['calendar']
        calendar = CalendarSync(
            credentials_file=calendar_config['credentials_file'],
            token_file=calendar_config['token_file'],
            calendar_id=calendar_config['calendar_id'],
        )
        calendar.request_access()
        events = to_calendar_events(build_display_tables(result['tables']), plan_start, app_name=app_name)
        try:
            calendar.sync_events(events)
        except (PermissionDenied, ValueError) as e:
            print(f"⚠ Calendar sync skipped: {e}")

    store.close()
    print("\n✓ Done!")


if __name__ == "__main__":
    main()
