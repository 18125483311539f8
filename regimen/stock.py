# -*- coding: utf-8 -*-
import logging

from django.utils import timezone

from pillbox.site_settings import ScheduleSettings
from regimen.recurrence import clamped_month_day, iter_due_days
from regimen.storage import write_batch
from regimen.utils import day_key

logger = logging.getLogger(__name__)


def estimated_run_out_date(
    medication, remaining_doses=None, reference_day=None, max_years=None
):
    """
    Walk forward from `reference_day` consuming one dose per due day and
    return the day the last dose is taken.
    :param medication: a Medication instance.
    :param remaining_doses: doses left; defaults to the medication's stock.
    :param reference_day: first day a dose may be consumed; today if omitted.
    :param max_years: how far to look before giving up.
    :returns: a date instance, or None when unknown.
    """
    if remaining_doses is None:
        remaining_doses = medication.remaining_doses
    if not medication.is_scheduled or not remaining_doses or remaining_doses < 0:
        return None

    reference_day = day_key(reference_day or timezone.localdate())
    years = max_years or ScheduleSettings.stock_max_years()
    limit = clamped_month_day(
        reference_day.year + years, reference_day.month, reference_day.day
    )

    left = remaining_doses
    for day in iter_due_days(medication, reference_day, limit):
        left -= 1
        if left == 0:
            return day
    logger.debug(
        "No run out date for %r within %d years", getattr(medication, "name", None), years
    )
    return None


def increment_remaining_doses(medication):
    current = medication.remaining_doses or 0
    medication.remaining_doses = min(current + 1, ScheduleSettings.MAX_REMAINING_DOSES)
    with write_batch(medication):
        medication.save(update_fields=["remaining_doses"])
    return medication.remaining_doses


def decrement_remaining_doses(medication):
    """Decrease the stock counter; decreasing an empty counter clears it."""
    current = medication.remaining_doses or 0
    medication.remaining_doses = current - 1 if current > 0 else None
    with write_batch(medication):
        medication.save(update_fields=["remaining_doses"])
    return medication.remaining_doses
