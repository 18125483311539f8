import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Medication",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("name", models.CharField(max_length=255, verbose_name="Name")),
                ("note", models.TextField(blank=True, null=True, verbose_name="Note")),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("scheduled", "Scheduled"),
                            ("occasional", "Occasional"),
                        ],
                        default="scheduled",
                        max_length=20,
                        verbose_name="Kind",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="Active")),
                (
                    "repeat_unit",
                    models.CharField(
                        choices=[("day", "Days"), ("month", "Months")],
                        default="day",
                        max_length=20,
                        verbose_name="Repeat unit",
                    ),
                ),
                (
                    "interval",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="1 = every day / every month",
                        verbose_name="Interval",
                    ),
                ),
                (
                    "start_date",
                    models.DateField(blank=True, null=True, verbose_name="Start date"),
                ),
                (
                    "end_date",
                    models.DateField(
                        blank=True,
                        help_text="Last day included in the schedule",
                        null=True,
                        verbose_name="End date",
                    ),
                ),
                (
                    "skipped_days",
                    models.JSONField(
                        blank=True, default=list, verbose_name="Skipped days"
                    ),
                ),
                (
                    "sort_order",
                    models.IntegerField(blank=True, null=True, verbose_name="Sort order"),
                ),
                (
                    "in_shopping_cart",
                    models.BooleanField(default=False, verbose_name="In shopping cart"),
                ),
                (
                    "remaining_doses",
                    models.PositiveIntegerField(
                        blank=True,
                        null=True,
                        validators=[django.core.validators.MaxValueValidator(9999)],
                        verbose_name="Remaining doses",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        editable=False,
                        verbose_name="Created at",
                    ),
                ),
            ],
            options={
                "verbose_name": "Medication",
                "verbose_name_plural": "Medications",
                "ordering": ["sort_order", "name"],
                "default_permissions": ("view", "add", "change", "delete"),
            },
        ),
        migrations.CreateModel(
            name="Intake",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                ("scheduled_at", models.DateTimeField(verbose_name="Scheduled at")),
                (
                    "source",
                    models.CharField(
                        choices=[("scheduled", "Scheduled"), ("manual", "Manual")],
                        default="scheduled",
                        max_length=20,
                        verbose_name="Source",
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        default=django.utils.timezone.now,
                        editable=False,
                        verbose_name="Created at",
                    ),
                ),
                (
                    "medication",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="intakes",
                        to="regimen.medication",
                        verbose_name="Medication",
                    ),
                ),
            ],
            options={
                "verbose_name": "Intake",
                "verbose_name_plural": "Intakes",
                "ordering": ["scheduled_at", "id"],
                "default_permissions": ("view", "add", "change", "delete"),
            },
        ),
        migrations.CreateModel(
            name="IntakeLog",
            fields=[
                (
                    "id",
                    models.AutoField(
                        auto_created=True,
                        primary_key=True,
                        serialize=False,
                        verbose_name="ID",
                    ),
                ),
                (
                    "date_key",
                    models.DateField(
                        default=django.utils.timezone.localdate, verbose_name="Date"
                    ),
                ),
                ("is_taken", models.BooleanField(default=False, verbose_name="Taken")),
                (
                    "taken_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="Taken at"),
                ),
                (
                    "intake",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="logs",
                        to="regimen.intake",
                        verbose_name="Intake",
                    ),
                ),
                (
                    "medication",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="logs",
                        to="regimen.medication",
                        verbose_name="Medication",
                    ),
                ),
            ],
            options={
                "verbose_name": "Intake log",
                "verbose_name_plural": "Intake logs",
                "ordering": ["-date_key", "id"],
                "default_permissions": ("view", "add", "change", "delete"),
            },
        ),
    ]
