"""Django settings for the rundeck action project."""

from __future__ import annotations

import os
from pathlib import Path

from config.env import env_bool, load_env

BASE_DIR = Path(__file__).resolve().parent.parent

load_env(BASE_DIR)

SECRET_KEY = os.environ.get("DJANGO_SECRET_KEY", "insecure-dev-key-change-me")
DEBUG = env_bool("DJANGO_DEBUG", False)
ALLOWED_HOSTS = [h for h in os.environ.get("DJANGO_ALLOWED_HOSTS", "").split(",") if h]

INSTALLED_APPS = [
    "apps.rundeck",
]

# The connector keeps no state between invocations.
DATABASES: dict = {}

USE_TZ = True
TIME_ZONE = "UTC"

# ---------------------------------------------------------------------------
# Rundeck action
# ---------------------------------------------------------------------------

RUNDECK_ACTION_HTTP_TIMEOUT = float(os.environ.get("RUNDECK_ACTION_HTTP_TIMEOUT", "30"))
RUNDECK_ACTION_PAGERDUTY_API_URL = os.environ.get(
    "RUNDECK_ACTION_PAGERDUTY_API_URL", "https://api.pagerduty.com"
)
RUNDECK_ACTION_DEFAULT_API_VERSION = int(os.environ.get("RUNDECK_ACTION_DEFAULT_API_VERSION", "24"))

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO").upper()

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "verbose": {
            "format": "{asctime} | {levelname:<8} | {name} | {message}",
            "style": "{",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "verbose",
        },
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
    "loggers": {
        "apps.rundeck": {
            "handlers": ["console"],
            "level": LOG_LEVEL,
            "propagate": False,
        },
    },
}
