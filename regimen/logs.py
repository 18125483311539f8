# -*- coding: utf-8 -*-
import collections
import datetime
import logging

from django.utils import timezone

from regimen import signals
from regimen.models import Intake, IntakeLog, Medication
from regimen.recurrence import is_due
from regimen.scheduling import (
    deduplicate_scheduled_intakes,
    generate_initial_intakes,
    horizon_days_or_default,
    regenerate_future_intakes,
    scheduled_at_for,
    scheduled_intakes_on,
    taken_intake_ids,
)
from regimen.storage import write_batch
from regimen.utils import day_key, daterange, is_today, start_of_day

logger = logging.getLogger(__name__)


def _active(medications):
    if medications is None:
        return list(Medication.objects.filter(is_active=True))
    return [medication for medication in medications if medication.is_active]


def ensure_logs(day, medications=None):
    """
    Insert an untaken log for every active medication due on `day` that has
    none yet. Existing logs are never modified.
    :param day: a date or datetime instance.
    :param medications: Medication instances to consider; all active
        medications when omitted.
    :returns: a list of the created IntakeLog instances.
    """
    return ensure_logs_range(day, day, medications=medications)


def ensure_logs_range(start_day, end_day, medications=None):
    """
    Same as `ensure_logs` for every day between `start_day` and `end_day`,
    both inclusive. The bounds may be given in either order.
    """
    start, end = sorted((day_key(start_day), day_key(end_day)))

    with write_batch():
        medications = _active(medications)
        if not medications:
            return []
        existing = set(
            IntakeLog.objects.filter(
                medication__in=medications, date_key__range=(start, end)
            ).values_list("medication_id", "date_key")
        )
        created = [
            IntakeLog(medication=medication, date_key=day, is_taken=False)
            for day in daterange(start, end)
            for medication in medications
            if (medication.pk, day) not in existing and is_due(medication, day)
        ]
        if created:
            IntakeLog.objects.bulk_create(created)
            signals.send_on_commit(signals.intake_logs_changed, sender=IntakeLog)

    logger.debug("Created %d logs between %s and %s", len(created), start, end)
    return created


def ensure_logs_for_intakes(intakes):
    """
    Make sure every intake has a log for its day. A log without an intake
    for the same medication and day (written before intakes existed) is
    linked to the intake instead of inserting a second one.
    :param intakes: an iterable of Intake instances.
    :returns: a list of the created IntakeLog instances.
    """
    intakes = list(intakes)
    if not intakes:
        return []

    with write_batch():
        logs = IntakeLog.objects.filter(
            medication_id__in={intake.medication_id for intake in intakes},
            date_key__in={intake.day for intake in intakes},
        )
        linked = set()
        unlinked = collections.defaultdict(list)
        for log in logs:
            if log.intake_id is None:
                unlinked[(log.medication_id, log.date_key)].append(log)
            else:
                linked.add((log.intake_id, log.date_key))
        for candidates in unlinked.values():
            candidates.sort(key=lambda log: (not log.is_taken, log.pk))

        created = []
        adopted = 0
        for intake in intakes:
            key = (intake.pk, intake.day)
            if key in linked:
                continue
            linked.add(key)
            candidates = unlinked.get((intake.medication_id, intake.day))
            if candidates:
                log = candidates.pop(0)
                log.intake = intake
                log.save(update_fields=["intake"])
                adopted += 1
                continue
            created.append(
                IntakeLog(
                    medication_id=intake.medication_id,
                    intake=intake,
                    date_key=intake.day,
                    is_taken=False,
                )
            )
        if created:
            IntakeLog.objects.bulk_create(created)
        if created or adopted:
            signals.send_on_commit(signals.intake_logs_changed, sender=IntakeLog)

    if adopted:
        logger.info("Linked %d existing logs to their intakes", adopted)
    return created


def ensure_intake_logs(start_day, end_day=None):
    """Run `ensure_logs_for_intakes` for every intake scheduled in a day range."""
    start, end = sorted((day_key(start_day), day_key(end_day or start_day)))
    intakes = Intake.objects.filter(
        scheduled_at__gte=start_of_day(start),
        scheduled_at__lt=start_of_day(end + datetime.timedelta(days=1)),
    )
    return ensure_logs_for_intakes(intakes)


def set_taken(log, taken, override_time=None, now=None):
    """
    Mark a log as taken or not taken and save it.

    A confirmation for today records the current time; a confirmation for any
    other day leaves the time unspecified unless `override_time` is given.
    :param log: an IntakeLog instance.
    :param taken: the new taken state.
    :param override_time: an aware datetime to record as the taken time.
    :param now: the current time; defaults to the local clock.
    :returns: the updated log.
    """
    now = now or timezone.localtime()
    log.is_taken = taken
    if not taken:
        log.taken_at = None
    elif override_time is not None:
        log.taken_at = override_time
    elif is_today(log.date_key, now):
        log.taken_at = now
    else:
        log.taken_at = None

    with write_batch():
        log.save()
        signals.send_on_commit(signals.intake_logs_changed, sender=IntakeLog)
    return log


def add_manual_intake(medication, day, taken=False, now=None):
    """
    Record an intake the user added by hand, with its log. Manual intakes are
    outside the recurrence and are never deduplicated or regenerated.
    :returns: a (Intake, IntakeLog) tuple.
    """
    day = day_key(day)
    with write_batch(medication):
        intake = Intake.objects.create(
            medication=medication,
            scheduled_at=scheduled_at_for(day),
            source=Intake.SOURCE_MANUAL,
        )
        log = IntakeLog(medication=medication, intake=intake, date_key=day)
        set_taken(log, taken, now=now)
    return intake, log


def skip_day(medication, day):
    """
    Take one day out of a scheduled medication's recurrence. The day's
    untaken scheduled intakes and untaken logs are removed; taken logs, and
    the intakes they point to, stay as history.
    """
    if not medication.is_scheduled:
        return
    day = day_key(day)
    with write_batch(medication):
        medication.set_skipped(True, day)
        medication.save(update_fields=["skipped_days"])
        scheduled_intakes_on(medication, day).exclude(
            pk__in=taken_intake_ids(medication)
        ).delete()
        medication.logs.filter(date_key=day, is_taken=False).delete()
        signals.send_on_commit(
            signals.schedule_changed, sender=Medication, medication=medication
        )
        signals.send_on_commit(signals.intake_logs_changed, sender=IntakeLog)


def unskip_day(medication, day, horizon_days=None):
    """Put a skipped day back into the recurrence and generate its intake."""
    if not medication.is_scheduled:
        return []
    day = day_key(day)
    with write_batch(medication):
        medication.set_skipped(False, day)
        medication.save(update_fields=["skipped_days"])
        return generate_initial_intakes(
            medication, reference_day=day, horizon_days=horizon_days
        )


def shift_schedule_after_late_dose(
    medication, selected_day, taken_on_day, now=None, horizon_days=None
):
    """
    The dose due on `selected_day` was taken late, on `taken_on_day`. The
    anchor moves forward by the same number of days, the selected day's log
    becomes the taken log of `taken_on_day`, and everything after today is
    rebuilt from the shifted cadence. Past logs are left as they are.
    :returns: the taken IntakeLog, or None when nothing had to move.
    """
    now = now or timezone.localtime()
    selected = day_key(selected_day)
    taken_on = day_key(taken_on_day)
    offset = (taken_on - selected).days
    if offset <= 0 or medication.start_date is None:
        return None

    today = day_key(now)
    taken_at = now if taken_on == today else None

    with write_batch(medication):
        medication.start_date = day_key(medication.start_date) + datetime.timedelta(
            days=offset
        )
        medication.save(update_fields=["start_date"])

        # Logs of manual intakes are separate doses and never move.
        by_day = {}
        for log in (
            medication.logs.filter(date_key__in=[selected, taken_on])
            .exclude(intake__source=Intake.SOURCE_MANUAL)
            .order_by("-is_taken", "id")
        ):
            by_day.setdefault(log.date_key, log)
        selected_log = by_day.get(selected)
        moved = by_day.get(taken_on)
        if moved is not None:
            if selected_log is not None:
                selected_log.delete()
        elif selected_log is not None:
            moved = selected_log
            moved.date_key = taken_on
        else:
            moved = IntakeLog(medication=medication, date_key=taken_on)
        moved.is_taken = True
        moved.taken_at = taken_at
        if moved.intake is not None and moved.intake.day != taken_on:
            moved.intake.reschedule(taken_on)
            moved.intake.save(update_fields=["scheduled_at"])
        moved.save()

        scheduled_intakes_on(medication, selected).exclude(
            pk__in=taken_intake_ids(medication)
        ).delete()
        deduplicate_scheduled_intakes(medication)

        medication.logs.filter(
            date_key__gt=today, date_key__gte=taken_on, is_taken=False
        ).exclude(pk=moved.pk).delete()

        tomorrow = today + datetime.timedelta(days=1)
        last = today + datetime.timedelta(days=horizon_days_or_default(horizon_days))
        if medication.end_date:
            last = min(last, day_key(medication.end_date))
        if tomorrow <= last:
            ensure_logs_range(tomorrow, last, medications=[medication])
        regenerate_future_intakes(medication, tomorrow, horizon_days=horizon_days)
        signals.send_on_commit(signals.intake_logs_changed, sender=IntakeLog)

    logger.info(
        "Shifted %r by %d days after a late dose on %s",
        medication.name,
        offset,
        taken_on,
    )
    return moved
