# -*- coding: utf-8 -*-
"""
Missed doses over a lookback window.

A medication is pending when its most recent untaken log in the window is
not followed by a taken log on or before the reference day.
"""
import datetime

from django.utils import timezone

from pillbox.site_settings import ScheduleSettings
from regimen.recurrence import is_plain_daily, iter_due_days
from regimen.utils import day_key


def is_eligible_for_pending(medication, exclude_plain_daily=None):
    """
    Whether missed doses of `medication` are tracked at all.

    Occasional medications and medications without an anchor never are. An
    every-day cadence with no end date is considered always current and is
    left out while `PILLBOX_PENDING_EXCLUDE_PLAIN_DAILY` is on. A medication
    with an end date needs at least one due day strictly between its anchor
    and its end.
    """
    if exclude_plain_daily is None:
        exclude_plain_daily = ScheduleSettings.pending_exclude_plain_daily()
    if medication.start_date is None or not medication.is_scheduled:
        return False
    if exclude_plain_daily and is_plain_daily(medication):
        return False
    if medication.end_date:
        one_day = datetime.timedelta(days=1)
        first = day_key(medication.start_date) + one_day
        last = day_key(medication.end_date) - one_day
        return next(iter_due_days(medication, first, last), None) is not None
    return True


def pending_medications(medications, logs, reference_day=None, lookback_days=None):
    """
    Latest unabsorbed missed day per eligible medication.
    :param medications: an iterable of Medication instances.
    :param logs: an iterable of IntakeLog instances.
    :param reference_day: the day the window ends on (excluded); today when
        omitted.
    :param lookback_days: window length in days, counting the reference day.
    :returns: a dict mapping medication pk to its latest missed day.
    """
    reference_day = day_key(reference_day or timezone.localdate())
    if lookback_days is None:
        lookback_days = ScheduleSettings.pending_lookback_days()
    window_start = reference_day - datetime.timedelta(days=max(1, lookback_days) - 1)

    eligible = {
        medication.pk for medication in medications if is_eligible_for_pending(medication)
    }
    latest_missed = {}
    latest_taken = {}
    for log in logs:
        if log.medication_id not in eligible:
            continue
        day = day_key(log.date_key)
        if log.is_taken:
            if day <= reference_day and day > latest_taken.get(
                log.medication_id, datetime.date.min
            ):
                latest_taken[log.medication_id] = day
            continue
        if window_start <= day < reference_day and day > latest_missed.get(
            log.medication_id, datetime.date.min
        ):
            latest_missed[log.medication_id] = day

    return {
        pk: missed
        for pk, missed in latest_missed.items()
        if latest_taken.get(pk, datetime.date.min) <= missed
    }


def pending_medication_count(medications, logs, reference_day=None, lookback_days=None):
    """Number of distinct medications with an outstanding missed dose."""
    return len(
        pending_medications(
            medications,
            logs,
            reference_day=reference_day,
            lookback_days=lookback_days,
        )
    )
