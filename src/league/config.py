"""
Named configuration values for scheduling and the knockout stage.

Settings are a plain dict. Values stored in ``settings.yaml`` are merged over
``get_default_settings()`` so every key is always present.
"""
import os
from typing import Dict, Optional

import yaml

from .errors import ValidationError


BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
DATA_DIR = os.environ.get('LEAGUE_DATA_DIR', os.path.join(BASE_DIR, 'data'))

_POSITIVE_INT_KEYS = (
    'matches_per_day',
    'min_rest_days',
    'max_schedule_horizon_days',
    'max_retries',
    'max_consecutive_failures',
)


def get_default_settings() -> Dict:
    """Return default settings."""
    return {
        'matches_per_day': 3,
        'daily_slots': ['13:30', '14:45', '16:00'],
        'min_rest_days': 2,
        'max_schedule_horizon_days': 30,
        'max_retries': 10,
        'max_consecutive_failures': 5,
        'teams_per_group': 6,
        'venue': 'Main Stadium',
        'knockout_groups': ['A', 'B', 'C', 'D'],
    }


def settings_file_path(data_dir: Optional[str] = None) -> str:
    """Location of the settings file, honouring LEAGUE_SETTINGS_FILE."""
    env_path = os.environ.get('LEAGUE_SETTINGS_FILE')
    if env_path:
        return env_path
    return os.path.join(data_dir or DATA_DIR, 'settings.yaml')


def merge_settings(overrides: Optional[Dict] = None) -> Dict:
    """Defaults with ``overrides`` applied on top (unknown keys are kept)."""
    settings = get_default_settings()
    if overrides:
        settings.update(overrides)
    return settings


def load_settings(path: Optional[str] = None) -> Dict:
    """Load settings from YAML file, merging with defaults."""
    path = path or settings_file_path()
    if not os.path.exists(path):
        return get_default_settings()
    with open(path, 'r', encoding='utf-8') as f:
        data = yaml.safe_load(f)
    if not data:
        return get_default_settings()
    if not isinstance(data, dict):
        raise ValidationError(f'Settings file {path} must contain a mapping')
    return merge_settings(data)


def save_settings(path: str, settings: Dict):
    """Save settings to YAML file."""
    with open(path, 'w', encoding='utf-8') as f:
        yaml.dump(settings, f, default_flow_style=False)


def validate_settings(settings: Dict) -> Dict:
    """Check settings for values the scheduler cannot work with.

    Returns the settings unchanged so the call can be chained.
    """
    for key in _POSITIVE_INT_KEYS:
        value = settings.get(key)
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise ValidationError(f"Setting '{key}' must be a positive integer, got {value!r}")

    slots = settings.get('daily_slots') or []
    if not slots:
        raise ValidationError("Setting 'daily_slots' must list at least one time slot")
    if len(slots) < settings['matches_per_day']:
        raise ValidationError(
            f"Only {len(slots)} daily slots for {settings['matches_per_day']} matches per day"
        )

    teams_per_group = settings.get('teams_per_group')
    if teams_per_group is not None and (not isinstance(teams_per_group, int) or teams_per_group < 2):
        raise ValidationError(f"Setting 'teams_per_group' must be at least 2, got {teams_per_group!r}")

    return settings
