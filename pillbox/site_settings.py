# -*- coding: utf-8 -*-
from django.conf import settings


class ScheduleSettings:
    """
    Engine tunables with their defaults. Values are read from Django settings
    on every access so `override_settings` applies in tests.
    """

    # Generation never looks less than this many days ahead.
    MIN_HORIZON_DAYS = 30
    MAX_REMAINING_DOSES = 9999

    @staticmethod
    def horizon_days():
        return getattr(settings, "PILLBOX_HORIZON_DAYS", 365)

    @staticmethod
    def pending_lookback_days():
        return getattr(settings, "PILLBOX_PENDING_LOOKBACK_DAYS", 30)

    @staticmethod
    def pending_exclude_plain_daily():
        return getattr(settings, "PILLBOX_PENDING_EXCLUDE_PLAIN_DAILY", True)

    @staticmethod
    def stock_max_years():
        return getattr(settings, "PILLBOX_STOCK_MAX_YEARS", 20)

    @staticmethod
    def intake_hour():
        return min(max(getattr(settings, "PILLBOX_INTAKE_HOUR", 12), 0), 23)
