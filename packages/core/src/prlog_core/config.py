import os
from datetime import date, timedelta
from pathlib import Path
from typing import Optional

import yaml

from prlog_core.records import parse_date

DEFAULT_CONFIG: dict = {
    "org": None,
    "vault": None,  # None = default_vault_path() for the current year
    "lookback_days": 7,
    "search_limit": 100,  # results kept per search query
}

_ENV_KEYS = {
    "org": "GITHUB_ORG",
    "vault": "VAULT_PATH",
}


def default_vault_path(today: Optional[date] = None) -> str:
    year = (today or date.today()).year
    return str(Path("~") / "Documents" / "Obsidian Vault" / str(year) / "Work" / "PR Log")


def load_config(config_path: str = ".prlog.yml", cli_overrides: Optional[dict] = None) -> dict:
    """
    Load configuration by merging (in order of precedence):
      1. Built-in defaults
      2. .prlog.yml in the current directory
      3. GITHUB_ORG / VAULT_PATH environment variables
      4. CLI argument overrides
    """
    config = dict(DEFAULT_CONFIG)

    path = Path(config_path)
    if path.exists():
        with open(path) as f:
            file_config = yaml.safe_load(f) or {}
        config.update(file_config)

    for key, env_name in _ENV_KEYS.items():
        value = os.environ.get(env_name)
        if value:
            config[key] = value

    if cli_overrides:
        for key, value in cli_overrides.items():
            if value is not None:
                config[key] = value

    if not config.get("vault"):
        config["vault"] = default_vault_path()

    return config


def resolve_date_range(
    from_date=None,
    to_date=None,
    lookback_days: int = 7,
    today: Optional[date] = None,
) -> tuple[date, date]:
    """
    Return the inclusive ``(from, to)`` sync window.

    ``to`` defaults to today and ``from`` to ``lookback_days`` before ``to``.
    Raises ValueError for a malformed date or a reversed range.
    """
    try:
        end = parse_date(to_date) if to_date else (today or date.today())
        start = parse_date(from_date) if from_date else end - timedelta(days=lookback_days)
    except ValueError:
        raise ValueError("Invalid date. Use a real calendar date in YYYY-MM-DD format.")
    if start > end:
        raise ValueError(f"Start date {start} is after end date {end}.")
    return start, end
