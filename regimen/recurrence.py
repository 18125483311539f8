# -*- coding: utf-8 -*-
"""
Due-date rules for medications.

A medication's anchor (`start_date`), `repeat_unit` and `interval` describe an
infinite stream of due days; `end_date` (inclusive) and `skipped_days` cut
days out of it. Every other module asks `is_due` rather than re-deriving the
cadence.
"""
import calendar
import datetime

from regimen.utils import day_key, daterange


def clamped_month_day(year, month, day):
    """
    Return the date for `day` in the given month, clamped to the month's last
    valid day (e.g. day 31 in April gives April 30).
    """
    last_day = calendar.monthrange(year, month)[1]
    return datetime.date(year, month, min(max(day, 1), last_day))


def month_index(day):
    return day.year * 12 + day.month


def is_due(medication, day):
    """
    Decide whether `medication` is due on `day`.
    :param medication: a Medication instance (saved or not).
    :param day: a date or datetime instance.
    :returns: a boolean. Never raises for missing recurrence data.
    """
    anchor = medication.start_date
    if anchor is None:
        return False
    anchor = day_key(anchor)
    day = day_key(day)
    if day < anchor:
        return False

    if medication.kind == medication.KIND_OCCASIONAL:
        return day == anchor

    if medication.is_skipped(day):
        return False
    if medication.end_date and day > day_key(medication.end_date):
        return False

    interval = max(1, medication.interval or 1)

    if medication.repeat_unit == medication.UNIT_MONTH:
        months = month_index(day) - month_index(anchor)
        if months < 0 or months % interval != 0:
            return False
        return day == clamped_month_day(day.year, day.month, anchor.day)

    return (day - anchor).days % interval == 0


def is_plain_daily(medication):
    """True for an every-single-day cadence with no end date."""
    return (
        medication.repeat_unit == medication.UNIT_DAY
        and max(1, medication.interval or 1) == 1
        and medication.end_date is None
    )


def iter_due_days(medication, start, end):
    """Yield the days between `start` and `end` (inclusive) on which `medication` is due."""
    for day in daterange(start, end):
        if is_due(medication, day):
            yield day
