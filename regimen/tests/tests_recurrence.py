# -*- coding: utf-8 -*-
import datetime

from django.test import TestCase
from django.utils import timezone

from regimen import models, recurrence


def d(value):
    return datetime.date.fromisoformat(value)


class IsDueDayUnitTestCase(TestCase):
    def setUp(self):
        self.medication = models.Medication(
            name="Every third day",
            repeat_unit=models.Medication.UNIT_DAY,
            interval=3,
            start_date=d("2024-01-01"),
        )

    def test_every_third_day(self):
        for day in ["2024-01-01", "2024-01-04", "2024-01-07"]:
            self.assertTrue(recurrence.is_due(self.medication, d(day)), day)
        for day in ["2024-01-02", "2024-01-03", "2024-01-05"]:
            self.assertFalse(recurrence.is_due(self.medication, d(day)), day)

    def test_interval_cadence_over_a_year(self):
        anchor = d("2024-01-01")
        for interval in [1, 2, 5, 7]:
            self.medication.interval = interval
            for offset in range(366):
                day = anchor + datetime.timedelta(days=offset)
                self.assertEqual(
                    recurrence.is_due(self.medication, day),
                    offset % interval == 0,
                    "interval {} offset {}".format(interval, offset),
                )

    def test_before_anchor(self):
        self.assertFalse(recurrence.is_due(self.medication, d("2023-12-29")))

    def test_no_anchor(self):
        self.medication.start_date = None
        self.assertFalse(recurrence.is_due(self.medication, d("2024-01-01")))

    def test_end_date_is_inclusive(self):
        self.medication.end_date = d("2024-01-07")
        self.assertTrue(recurrence.is_due(self.medication, d("2024-01-07")))
        self.assertFalse(recurrence.is_due(self.medication, d("2024-01-10")))

    def test_skipped_day(self):
        self.medication.set_skipped(True, d("2024-01-04"))
        self.assertFalse(recurrence.is_due(self.medication, d("2024-01-04")))
        self.assertTrue(recurrence.is_due(self.medication, d("2024-01-07")))

    def test_interval_below_one_is_treated_as_daily(self):
        self.medication.interval = 0
        self.assertTrue(recurrence.is_due(self.medication, d("2024-01-02")))

    def test_accepts_datetimes(self):
        moment = timezone.make_aware(datetime.datetime(2024, 1, 4, 18, 30))
        self.assertTrue(recurrence.is_due(self.medication, moment))

    def test_medication_method_delegates(self):
        self.assertTrue(self.medication.is_due(d("2024-01-04")))
        self.assertFalse(self.medication.is_due(d("2024-01-05")))


class IsDueMonthUnitTestCase(TestCase):
    def setUp(self):
        self.medication = models.Medication(
            name="Monthly",
            repeat_unit=models.Medication.UNIT_MONTH,
            interval=1,
            start_date=d("2024-01-31"),
        )

    def due_days(self, start, end):
        return list(recurrence.iter_due_days(self.medication, d(start), d(end)))

    def test_clamps_to_month_end(self):
        self.assertEqual(
            self.due_days("2024-01-01", "2024-04-30"),
            [d("2024-01-31"), d("2024-02-29"), d("2024-03-31"), d("2024-04-30")],
        )

    def test_non_leap_february(self):
        self.medication.start_date = d("2023-01-31")
        self.assertTrue(recurrence.is_due(self.medication, d("2023-02-28")))
        self.assertFalse(recurrence.is_due(self.medication, d("2023-02-27")))

    def test_interval_skips_months(self):
        self.medication.interval = 2
        self.assertEqual(
            self.due_days("2024-01-01", "2024-06-30"),
            [d("2024-01-31"), d("2024-03-31"), d("2024-05-31")],
        )

    def test_mid_month_anchor(self):
        self.medication.start_date = d("2024-01-15")
        self.assertTrue(recurrence.is_due(self.medication, d("2024-02-15")))
        self.assertFalse(recurrence.is_due(self.medication, d("2024-02-14")))
        self.assertFalse(recurrence.is_due(self.medication, d("2024-02-29")))

    def test_clamped_month_day(self):
        self.assertEqual(recurrence.clamped_month_day(2024, 4, 31), d("2024-04-30"))
        self.assertEqual(recurrence.clamped_month_day(2024, 2, 30), d("2024-02-29"))
        self.assertEqual(recurrence.clamped_month_day(2025, 2, 29), d("2025-02-28"))


class IsDueOccasionalTestCase(TestCase):
    def test_due_only_on_anchor(self):
        medication = models.Medication(
            name="Painkiller",
            kind=models.Medication.KIND_OCCASIONAL,
            start_date=d("2024-03-10"),
        )
        self.assertTrue(recurrence.is_due(medication, d("2024-03-10")))
        self.assertFalse(recurrence.is_due(medication, d("2024-03-11")))
        self.assertFalse(recurrence.is_due(medication, d("2024-04-10")))


class PlainDailyTestCase(TestCase):
    def test_is_plain_daily(self):
        medication = models.Medication(name="Daily", start_date=d("2024-01-01"))
        self.assertTrue(recurrence.is_plain_daily(medication))
        medication.end_date = d("2024-02-01")
        self.assertFalse(recurrence.is_plain_daily(medication))
        medication.end_date = None
        medication.interval = 2
        self.assertFalse(recurrence.is_plain_daily(medication))
        medication.interval = 1
        medication.repeat_unit = models.Medication.UNIT_MONTH
        self.assertFalse(recurrence.is_plain_daily(medication))
