# -*- coding: utf-8 -*-
import datetime
from io import StringIO

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import TestCase

from regimen import models
from regimen.storage import StorageUnavailable

from unittest import mock


class SyncIntakesTestCase(TestCase):
    def setUp(self):
        self.daily = models.Medication.objects.create(
            name="Daily", start_date=datetime.date(2024, 1, 1)
        )
        models.Medication.objects.create(
            name="Painkiller",
            kind=models.Medication.KIND_OCCASIONAL,
            start_date=datetime.date(2024, 1, 1),
        )

    def test_sync_intakes(self):
        out = StringIO()
        call_command("sync_intakes", date="2024-01-01", horizon_days=30, stdout=out)
        self.assertEqual(self.daily.intakes.count(), 31)
        self.assertEqual(models.IntakeLog.objects.count(), 2)
        day_log = self.daily.logs.get(date_key=datetime.date(2024, 1, 1))
        self.assertIsNotNone(day_log.intake)
        self.assertIn("Created 31 intakes and 2 logs for 2024-01-01.", out.getvalue())

    def test_sync_intakes_twice(self):
        call_command("sync_intakes", date="2024-01-01", horizon_days=30, verbosity=0)
        out = StringIO()
        call_command("sync_intakes", date="2024-01-01", horizon_days=30, stdout=out)
        self.assertEqual(self.daily.intakes.count(), 31)
        self.assertIn("Created 0 intakes and 0 logs", out.getvalue())

    def test_invalid_date(self):
        with self.assertRaises(CommandError):
            call_command("sync_intakes", date="01/01/2024", verbosity=0)

    @mock.patch("regimen.scheduling.bootstrap_scheduled_intakes")
    def test_storage_unavailable(self, bootstrap):
        bootstrap.side_effect = StorageUnavailable("disk I/O error")
        with self.assertRaises(CommandError):
            call_command("sync_intakes", date="2024-01-01", verbosity=0)
