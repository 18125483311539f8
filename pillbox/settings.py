# -*- coding: utf-8 -*-
import os

from dotenv import find_dotenv, load_dotenv

# Environment variables
# Check for and load environment variables from a .env file.

load_dotenv(find_dotenv())

# Build paths inside the project like this: os.path.join(BASE_DIR, ...)

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


# Required settings

ALLOWED_HOSTS = os.environ.get("ALLOWED_HOSTS", "*").split(",")
SECRET_KEY = os.environ.get("SECRET_KEY") or "pillbox-insecure-development-key"
DEBUG = bool(os.environ.get("DEBUG") or False)


# Applications
# https://docs.djangoproject.com/en/stable/ref/applications/

INSTALLED_APPS = [
    "regimen.apps.RegimenConfig",
    "django.contrib.contenttypes",
    "django.contrib.auth",
]


# Database
# https://docs.djangoproject.com/en/stable/ref/settings/#databases

DATABASES = {
    "default": {
        "ENGINE": os.environ.get("DB_ENGINE") or "django.db.backends.sqlite3",
        "NAME": os.environ.get("PILLBOX_DB_PATH")
        or os.path.join(BASE_DIR, "db.sqlite3"),
    }
}

DEFAULT_AUTO_FIELD = "django.db.models.AutoField"


# Internationalization
# https://docs.djangoproject.com/en/stable/topics/i18n/

LANGUAGE_CODE = "en-US"

TIME_ZONE = os.environ.get("TIME_ZONE") or "UTC"

USE_I18N = True

USE_TZ = True


# Logging
# https://docs.djangoproject.com/en/stable/topics/logging/

LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "simple": {"format": "{levelname} {name}: {message}", "style": "{"},
    },
    "handlers": {
        "console": {"class": "logging.StreamHandler", "formatter": "simple"},
    },
    "loggers": {
        "regimen": {
            "handlers": ["console"],
            "level": os.environ.get("PILLBOX_LOG_LEVEL") or "INFO",
        },
    },
}


# Scheduling engine
# Tunables read through pillbox.site_settings.ScheduleSettings.

PILLBOX_HORIZON_DAYS = int(os.environ.get("PILLBOX_HORIZON_DAYS") or 365)
PILLBOX_PENDING_LOOKBACK_DAYS = int(
    os.environ.get("PILLBOX_PENDING_LOOKBACK_DAYS") or 30
)
PILLBOX_PENDING_EXCLUDE_PLAIN_DAILY = (
    os.environ.get("PILLBOX_PENDING_EXCLUDE_PLAIN_DAILY", "true").lower() == "true"
)
PILLBOX_STOCK_MAX_YEARS = int(os.environ.get("PILLBOX_STOCK_MAX_YEARS") or 20)
PILLBOX_INTAKE_HOUR = int(os.environ.get("PILLBOX_INTAKE_HOUR") or 12)
