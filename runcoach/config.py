"""
Configuration loading from config.yaml and .env.
"""

import copy
import os

import yaml
from dotenv import load_dotenv

from runcoach.errors import ConfigError


ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
DEFAULT_CONFIG_PATH = os.path.join(ROOT_DIR, "config.yaml")

DEFAULTS = {
    "claude": {
        "api_key_env": "ANTHROPIC_API_KEY",
        "model": "claude-sonnet-4-5",
        "max_tokens": 2000,
        "timeout": 120,
    },
    "planner": {
        "app_name": "Frunna",
        "lookback_days": 30,
        "plan_length_weeks": 8,
        "goal": "5K",
        "running_level": "Intermediate",
        "target_time": "",
        "run_days_per_week": "4",
        "long_run_day": "Sunday",
        "distance_unit": "miles",
    },
    "health": {
        "export_file": "data/health_summary.json",
    },
    "calendar": {
        "credentials_file": "credentials.json",
        "token_file": "token.json",
        "calendar_id": "primary",
    },
    "storage": {
        "path": "data/runcoach.db",
    },
}


def _merge(base, override):
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(path=None):
    """
    Load config.yaml merged over the built-in defaults.

    Args:
        path: Optional path to a YAML file (defaults to config.yaml at the repo root)

    Returns:
        Configuration dictionary
    """
    config_path = path or DEFAULT_CONFIG_PATH
    if not os.path.exists(config_path):
        raise ConfigError(f"{config_path} not found!")

    with open(config_path, "r") as f:
        try:
            raw = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigError(f"Could not parse {config_path}: {exc}") from exc

    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a mapping at the top level.")

    return _merge(DEFAULTS, raw)


def get_api_key(config):
    """Return the Anthropic API key named by claude.api_key_env."""
    load_dotenv()
    api_key_env = config["claude"]["api_key_env"]
    api_key = os.getenv(api_key_env)
    if not api_key:
        raise ConfigError(f"{api_key_env} not found in environment variables!")
    return api_key


def storage_path(config):
    """SQLite file for saved plans; relative paths are anchored at the repository root."""
    return os.path.join(ROOT_DIR, config["storage"]["path"])
