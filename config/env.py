"""Environment variable loading helpers.

Rundeck action secrets and settings can be provided through dotenv-style
files for local runs. Variables read from the environment:

Secrets (read by the run_rundeck_action command when not passed as flags):
- RUNDECK_API_TOKEN: sent as X-Rundeck-Auth-Token on the job request
- PAGERDUTY_API_KEY: PagerDuty REST API key, needed when a dedup key is given
- SLACK_WEBHOOK_URL: incoming webhook, needed when no dedup key is given

Settings (read by config/settings.py):
- RUNDECK_ACTION_HTTP_TIMEOUT: socket timeout in seconds (default 30)
- RUNDECK_ACTION_PAGERDUTY_API_URL: PagerDuty REST base URL
- RUNDECK_ACTION_DEFAULT_API_VERSION: Rundeck API version (default 24)
- LOG_LEVEL: level of the apps.rundeck loggers (default INFO)
- DJANGO_SECRET_KEY, DJANGO_DEBUG, DJANGO_ALLOWED_HOSTS: usual Django knobs
- DJANGO_ENV: "dev" also loads .env.dev

Load order (first found wins; existing process env vars are never overridden):
- .env
- .env.dev (only when DJANGO_ENV=dev)

In production, prefer real environment variables instead of dotenv files.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv


def _should_load_dev_env() -> bool:
    return os.environ.get("DJANGO_ENV", "").lower() in {"dev", "development", "local"}


def load_env(base_dir: Path | None = None) -> None:
    """Load .env files into process environment.

    Safe to call multiple times.

    Args:
        base_dir: Project root directory. Defaults to config/.., the same
            BASE_DIR used by config/settings.py.
    """

    if base_dir is None:
        base_dir = Path(__file__).resolve().parent.parent

    load_dotenv(base_dir / ".env", override=False)

    if _should_load_dev_env():
        load_dotenv(base_dir / ".env.dev", override=False)


def env_bool(name: str, default: bool = False) -> bool:
    """Read a boolean flag from the environment ("1", "true", "yes", "on")."""
    value = os.environ.get(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}
