# -*- coding: utf-8 -*-
import datetime
import logging

from django.core.exceptions import ValidationError
from django.core.validators import MaxValueValidator
from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from pillbox.site_settings import ScheduleSettings
from regimen import recurrence
from regimen.utils import day_key

logger = logging.getLogger(__name__)


def validate_end_date(start_date, end_date, field_name):
    """
    Confirm that an inclusive end date does not come before its start date.
    :param start_date: the anchor date instance, or None.
    :param end_date: the inclusive end date instance, or None.
    :param field_name: the name of the field being checked.
    :return:
    """
    if start_date and end_date and end_date < start_date:
        raise ValidationError(
            {field_name: _("End date can not be before the start date.")},
            code="end_before_start",
        )


def validate_taken_at(is_taken, taken_at, field_name):
    """
    Confirm that a taken time is only recorded for taken entries.
    :param is_taken: whether the entry is marked as taken.
    :param taken_at: a timezone aware datetime instance, or None.
    :param field_name: the name of the field being checked.
    :return:
    """
    if taken_at and not is_taken:
        raise ValidationError(
            {field_name: _("Taken time requires the entry to be taken.")},
            code="taken_at_without_taken",
        )


class Medication(models.Model):
    model_name = "medication"

    KIND_SCHEDULED = "scheduled"
    KIND_OCCASIONAL = "occasional"
    KIND_CHOICES = [
        (KIND_SCHEDULED, _("Scheduled")),
        (KIND_OCCASIONAL, _("Occasional")),
    ]

    UNIT_DAY = "day"
    UNIT_MONTH = "month"
    UNIT_CHOICES = [
        (UNIT_DAY, _("Days")),
        (UNIT_MONTH, _("Months")),
    ]

    name = models.CharField(max_length=255, verbose_name=_("Name"))
    note = models.TextField(blank=True, null=True, verbose_name=_("Note"))
    kind = models.CharField(
        max_length=20,
        choices=KIND_CHOICES,
        default=KIND_SCHEDULED,
        verbose_name=_("Kind"),
    )
    is_active = models.BooleanField(default=True, verbose_name=_("Active"))

    # Recurrence
    repeat_unit = models.CharField(
        max_length=20,
        choices=UNIT_CHOICES,
        default=UNIT_DAY,
        verbose_name=_("Repeat unit"),
    )
    interval = models.PositiveIntegerField(
        default=1,
        verbose_name=_("Interval"),
        help_text=_("1 = every day / every month"),
    )
    start_date = models.DateField(
        blank=True, null=True, verbose_name=_("Start date")
    )
    end_date = models.DateField(
        blank=True,
        null=True,
        verbose_name=_("End date"),
        help_text=_("Last day included in the schedule"),
    )
    skipped_days = models.JSONField(
        blank=True, default=list, verbose_name=_("Skipped days")
    )

    sort_order = models.IntegerField(
        blank=True, null=True, verbose_name=_("Sort order")
    )
    in_shopping_cart = models.BooleanField(
        default=False, verbose_name=_("In shopping cart")
    )
    remaining_doses = models.PositiveIntegerField(
        blank=True,
        null=True,
        validators=[MaxValueValidator(ScheduleSettings.MAX_REMAINING_DOSES)],
        verbose_name=_("Remaining doses"),
    )
    created_at = models.DateTimeField(
        default=timezone.now, editable=False, verbose_name=_("Created at")
    )

    objects = models.Manager()

    class Meta:
        default_permissions = ("view", "add", "change", "delete")
        ordering = ["sort_order", "name"]
        verbose_name = _("Medication")
        verbose_name_plural = _("Medications")

    def __str__(self):
        return self.name

    def save(self, *args, **kwargs):
        if self.interval is None or self.interval < 1:
            logger.warning(
                "Clamping interval %r of medication %r to 1", self.interval, self.name
            )
            self.interval = 1
        if self.kind == self.KIND_OCCASIONAL:
            self.end_date = None
        super(Medication, self).save(*args, **kwargs)

    def clean(self):
        validate_end_date(self.start_date, self.end_date, "end_date")

    @property
    def is_scheduled(self):
        return self.kind == self.KIND_SCHEDULED

    def is_due(self, day):
        return recurrence.is_due(self, day)

    def is_skipped(self, day):
        return day_key(day).isoformat() in (self.skipped_days or [])

    def set_skipped(self, skipped, day):
        """
        Add or remove a day from the skip list. The instance is not saved.
        :param skipped: True to exclude the day from the schedule.
        :param day: a date or datetime instance.
        :return:
        """
        key = day_key(day).isoformat()
        days = [d for d in (self.skipped_days or []) if d != key]
        if skipped:
            days.append(key)
        self.skipped_days = sorted(days)

    def estimated_run_out_date(self, reference_day=None):
        from regimen.stock import estimated_run_out_date

        return estimated_run_out_date(self, reference_day=reference_day)


class Intake(models.Model):
    model_name = "intake"

    SOURCE_SCHEDULED = "scheduled"
    SOURCE_MANUAL = "manual"
    SOURCE_CHOICES = [
        (SOURCE_SCHEDULED, _("Scheduled")),
        (SOURCE_MANUAL, _("Manual")),
    ]

    medication = models.ForeignKey(
        "Medication",
        on_delete=models.CASCADE,
        related_name="intakes",
        verbose_name=_("Medication"),
    )
    scheduled_at = models.DateTimeField(
        blank=False, null=False, verbose_name=_("Scheduled at")
    )
    source = models.CharField(
        max_length=20,
        choices=SOURCE_CHOICES,
        default=SOURCE_SCHEDULED,
        verbose_name=_("Source"),
    )
    created_at = models.DateTimeField(
        default=timezone.now, editable=False, verbose_name=_("Created at")
    )

    objects = models.Manager()

    class Meta:
        default_permissions = ("view", "add", "change", "delete")
        ordering = ["scheduled_at", "id"]
        verbose_name = _("Intake")
        verbose_name_plural = _("Intakes")

    def __str__(self):
        return str(_("Intake"))

    @property
    def day(self):
        return day_key(self.scheduled_at)

    def reschedule(self, day):
        """Move the intake to `day`, keeping its time of day."""
        local = timezone.localtime(self.scheduled_at)
        self.scheduled_at = timezone.make_aware(
            datetime.datetime.combine(day_key(day), local.time())
        )


class IntakeLog(models.Model):
    model_name = "intakelog"
    medication = models.ForeignKey(
        "Medication",
        on_delete=models.CASCADE,
        related_name="logs",
        verbose_name=_("Medication"),
    )
    intake = models.ForeignKey(
        "Intake",
        on_delete=models.SET_NULL,
        blank=True,
        null=True,
        related_name="logs",
        verbose_name=_("Intake"),
    )
    date_key = models.DateField(
        blank=False, default=timezone.localdate, null=False, verbose_name=_("Date")
    )
    is_taken = models.BooleanField(default=False, verbose_name=_("Taken"))
    taken_at = models.DateTimeField(blank=True, null=True, verbose_name=_("Taken at"))

    objects = models.Manager()

    class Meta:
        default_permissions = ("view", "add", "change", "delete")
        ordering = ["-date_key", "id"]
        verbose_name = _("Intake log")
        verbose_name_plural = _("Intake logs")

    def __str__(self):
        return str(_("Intake log"))

    def clean(self):
        validate_taken_at(self.is_taken, self.taken_at, "taken_at")

    def move_to(self, day):
        """Move the entry to `day`, keeping the time of day of `taken_at`."""
        day = day_key(day)
        self.date_key = day
        if self.taken_at:
            local = timezone.localtime(self.taken_at)
            self.taken_at = timezone.make_aware(
                datetime.datetime.combine(day, local.time())
            )
