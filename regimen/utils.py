# -*- coding: utf-8 -*-
import datetime

from django.utils import timezone


def day_key(value):
    """
    Normalize a date or datetime to its calendar day in the current timezone.
    :param value: a date or (naive or aware) datetime instance.
    :returns: a date instance.
    """
    if isinstance(value, datetime.datetime):
        if timezone.is_aware(value):
            value = timezone.localtime(value)
        return value.date()
    return value


def start_of_day(day):
    """Aware datetime for midnight of `day` in the current timezone."""
    return timezone.make_aware(datetime.datetime.combine(day_key(day), datetime.time.min))


def midday(day, hour=12):
    """Aware datetime for `day` at `hour` o'clock in the current timezone."""
    return timezone.make_aware(
        datetime.datetime.combine(day_key(day), datetime.time(hour=hour))
    )


def daterange(start, end):
    """Yield every day from `start` to `end`, both inclusive."""
    day = day_key(start)
    end = day_key(end)
    while day <= end:
        yield day
        day += datetime.timedelta(days=1)


def is_today(day, now=None):
    now = now or timezone.localtime()
    return day_key(day) == day_key(now)
