# -*- coding: utf-8 -*-
import datetime

from django.core.management.base import BaseCommand, CommandError
from django.utils import timezone

from regimen import logs, scheduling
from regimen.storage import StorageUnavailable


class Command(BaseCommand):
    help = (
        "Generates scheduled intakes for active medications and makes sure the "
        "given day has a log for every due medication and intake."
    )

    def add_arguments(self, parser):
        parser.add_argument(
            "--date",
            dest="date",
            default=None,
            help="Day to reconcile, as YYYY-MM-DD (default: today)",
        )
        parser.add_argument(
            "--horizon-days",
            dest="horizon_days",
            type=int,
            default=None,
            help="Days ahead to generate intakes for (minimum 30)",
        )

    def handle(self, *args, **kwargs):
        verbosity = int(kwargs["verbosity"])
        day = timezone.localdate()
        if kwargs["date"]:
            try:
                day = datetime.date.fromisoformat(kwargs["date"])
            except ValueError:
                raise CommandError("Invalid date: {}".format(kwargs["date"]))

        try:
            intakes = scheduling.bootstrap_scheduled_intakes(
                reference_day=day, horizon_days=kwargs["horizon_days"]
            )
            day_logs = logs.ensure_logs(day)
            intake_logs = logs.ensure_intake_logs(day)
        except StorageUnavailable as e:
            raise CommandError("Storage unavailable: {}".format(e))

        if verbosity > 0:
            self.stdout.write(
                self.style.SUCCESS(
                    "Created {} intakes and {} logs for {}.".format(
                        len(intakes), len(day_logs) + len(intake_logs), day
                    )
                )
            )
