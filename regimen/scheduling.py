# -*- coding: utf-8 -*-
import collections
import datetime
import logging

from django.utils import timezone

from pillbox.site_settings import ScheduleSettings
from regimen import signals
from regimen.models import Intake, IntakeLog, Medication
from regimen.recurrence import is_due
from regimen.storage import write_batch
from regimen.utils import day_key, daterange, midday, start_of_day

logger = logging.getLogger(__name__)

ONE_DAY = datetime.timedelta(days=1)

IntakeRank = collections.namedtuple("IntakeRank", ["untaken", "created_at", "pk"])


def rank_intake(intake, taken_intake_ids):
    """
    Rank a scheduled intake among duplicates sharing its day. The lowest rank
    survives: an intake linked to a taken log first, then the earliest
    created, then the lowest id.
    :param intake: an Intake instance.
    :param taken_intake_ids: ids of intakes linked to a taken log.
    :returns: an IntakeRank tuple.
    """
    return IntakeRank(
        untaken=intake.pk not in taken_intake_ids,
        created_at=intake.created_at,
        pk=intake.pk,
    )


def scheduled_at_for(day):
    return midday(day, hour=ScheduleSettings.intake_hour())


def horizon_days_or_default(horizon_days):
    if horizon_days is None:
        horizon_days = ScheduleSettings.horizon_days()
    return max(ScheduleSettings.MIN_HORIZON_DAYS, horizon_days)


def taken_intake_ids(medication):
    return set(
        IntakeLog.objects.filter(
            medication=medication, is_taken=True, intake__isnull=False
        ).values_list("intake_id", flat=True)
    )


def scheduled_intakes_on(medication, day):
    day = day_key(day)
    return medication.intakes.filter(
        source=Intake.SOURCE_SCHEDULED,
        scheduled_at__gte=start_of_day(day),
        scheduled_at__lt=start_of_day(day + ONE_DAY),
    )


def generate_initial_intakes(medication, reference_day=None, horizon_days=None):
    """
    Insert the scheduled intakes of `medication` from max(anchor,
    reference_day) up to reference_day + horizon, stopping early at the
    inclusive end date. Days that already hold a scheduled intake are left
    alone, so repeating the call creates nothing.
    :param medication: a saved Medication instance.
    :param reference_day: first day to consider; defaults to today.
    :param horizon_days: days to look ahead, never less than 30.
    :returns: a list of the created Intake instances.
    :raises StorageUnavailable: if the batch could not be written.
    """
    if not medication.is_active or not medication.is_scheduled:
        return []
    if medication.start_date is None:
        return []

    reference_day = day_key(reference_day or timezone.localdate())
    start = max(day_key(medication.start_date), reference_day)
    end = reference_day + datetime.timedelta(
        days=horizon_days_or_default(horizon_days)
    )
    if medication.end_date:
        end = min(end, day_key(medication.end_date))
    if start > end:
        return []

    with write_batch(medication):
        existing = {
            intake.day
            for intake in medication.intakes.filter(
                source=Intake.SOURCE_SCHEDULED, scheduled_at__gte=start_of_day(start)
            )
        }
        created = [
            Intake(
                medication=medication,
                scheduled_at=scheduled_at_for(day),
                source=Intake.SOURCE_SCHEDULED,
            )
            for day in daterange(start, end)
            if day not in existing and is_due(medication, day)
        ]
        if created:
            Intake.objects.bulk_create(created)
            signals.send_on_commit(
                signals.schedule_changed, sender=Medication, medication=medication
            )
        deduplicate_scheduled_intakes(medication)

    logger.debug(
        "Generated %d intakes for %r between %s and %s",
        len(created),
        medication.name,
        start,
        end,
    )
    return created


def deduplicate_scheduled_intakes(medication):
    """
    Leave at most one scheduled intake per day for `medication`. Intakes
    linked to a taken log are never removed, even when two of them share a
    day. Manual intakes are not considered.
    :returns: the number of intakes removed.
    """
    with write_batch(medication):
        taken = taken_intake_ids(medication)
        by_day = collections.defaultdict(list)
        for intake in medication.intakes.filter(source=Intake.SOURCE_SCHEDULED):
            by_day[intake.day].append(intake)

        doomed = []
        for day, duplicates in by_day.items():
            if len(duplicates) < 2:
                continue
            keep = min(duplicates, key=lambda intake: rank_intake(intake, taken))
            doomed.extend(
                intake.pk
                for intake in duplicates
                if intake.pk != keep.pk and intake.pk not in taken
            )

        if doomed:
            Intake.objects.filter(pk__in=doomed).delete()
            signals.send_on_commit(
                signals.schedule_changed, sender=Medication, medication=medication
            )

    if doomed:
        logger.info(
            "Removed %d duplicate intakes for %r", len(doomed), medication.name
        )
    return len(doomed)


def drop_off_cadence_logs(medication, pivot_day):
    """
    Delete the untaken logs of `medication` dated on or after `pivot_day` on
    days the current recurrence no longer has. Taken logs and logs of manual
    intakes are kept.
    :returns: the number of logs removed.
    """
    pivot_day = day_key(pivot_day)
    with write_batch(medication):
        doomed = [
            log.pk
            for log in medication.logs.filter(date_key__gte=pivot_day, is_taken=False)
            .exclude(intake__source=Intake.SOURCE_MANUAL)
            if not is_due(medication, log.date_key)
        ]
        if doomed:
            IntakeLog.objects.filter(pk__in=doomed).delete()
            signals.send_on_commit(signals.intake_logs_changed, sender=IntakeLog)
    return len(doomed)


def regenerate_future_intakes(medication, pivot_day, horizon_days=None):
    """
    Drop the untaken scheduled intakes on or after `pivot_day`, and the
    untaken logs the current recurrence no longer has, then generate the
    intakes again. Run after any change to the anchor, unit, interval, end
    date or active flag; an inactive medication only loses its future
    intakes.
    :returns: a list of the created Intake instances.
    :raises StorageUnavailable: if the batch could not be written.
    """
    if not medication.is_scheduled:
        return []
    pivot_day = day_key(pivot_day)

    with write_batch(medication):
        deleted, _ = (
            medication.intakes.filter(
                source=Intake.SOURCE_SCHEDULED,
                scheduled_at__gte=start_of_day(pivot_day),
            )
            .exclude(pk__in=taken_intake_ids(medication))
            .delete()
        )
        if deleted:
            signals.send_on_commit(
                signals.schedule_changed, sender=Medication, medication=medication
            )
        dropped = drop_off_cadence_logs(medication, pivot_day)
        created = generate_initial_intakes(
            medication, reference_day=pivot_day, horizon_days=horizon_days
        )

    logger.debug(
        "Regenerated intakes for %r from %s: %d removed, %d logs dropped, "
        "%d created",
        medication.name,
        pivot_day,
        deleted,
        dropped,
        len(created),
    )
    return created


def move_intake_and_reflow(medication, intake, new_day, horizon_days=None):
    """
    Move one intake to `new_day` and shift the rest of the schedule with it.

    {anchor, unit, interval} seed an infinite stream of due days. Moving one
    scheduled intake re-seeds that stream at `new_day`: the anchor becomes
    `new_day`, the moved intake is the stream's first point, and every
    untaken scheduled intake after it is regenerated from the new seed.
    Intakes before `new_day` and intakes linked to taken logs are kept.
    Occasional medications only have the intake (and its logs) moved.

    :param medication: the saved Medication owning `intake`.
    :param intake: the Intake being moved.
    :param new_day: a date or datetime instance.
    :param horizon_days: days to look ahead when regenerating.
    :returns: a list of the created Intake instances.
    :raises ValueError: if `intake` belongs to another medication.
    :raises StorageUnavailable: if the batch could not be written; the
        in-memory fields of `medication` and `intake` are restored.
    """
    if intake.medication_id != medication.pk:
        raise ValueError(
            "Intake {} does not belong to medication {}".format(intake.pk, medication.pk)
        )
    new_day = day_key(new_day)
    previous = (intake.scheduled_at, medication.start_date, medication.skipped_days)

    try:
        with write_batch(medication):
            intake.reschedule(new_day)
            intake.save(update_fields=["scheduled_at"])
            for log in intake.logs.all():
                log.move_to(new_day)
                log.save(update_fields=["date_key", "taken_at"])
            signals.send_on_commit(signals.intake_logs_changed, sender=IntakeLog)

            if not medication.is_scheduled:
                return []

            medication.start_date = new_day
            medication.set_skipped(False, new_day)
            medication.save(update_fields=["start_date", "skipped_days"])

            scheduled_intakes_on(medication, new_day).exclude(pk=intake.pk).exclude(
                pk__in=taken_intake_ids(medication)
            ).delete()

            created = regenerate_future_intakes(
                medication, new_day + ONE_DAY, horizon_days=horizon_days
            )
    except Exception:
        intake.scheduled_at, medication.start_date, medication.skipped_days = previous
        raise

    logger.info("Re-anchored %r on %s", medication.name, new_day)
    return created


def bootstrap_scheduled_intakes(reference_day=None, horizon_days=None):
    """
    Generate intakes for every active scheduled medication. Run on start up
    and whenever the set of medications changes.
    :returns: a list of the created Intake instances.
    """
    created = []
    with write_batch():
        medications = Medication.objects.filter(
            is_active=True,
            kind=Medication.KIND_SCHEDULED,
            start_date__isnull=False,
        )
        for medication in medications:
            created.extend(
                generate_initial_intakes(
                    medication, reference_day=reference_day, horizon_days=horizon_days
                )
            )
    return created
