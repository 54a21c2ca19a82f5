import uuid
from decimal import Decimal

import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="BusinessSettings",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "business_name",
                    models.CharField(
                        blank=True, help_text="Display name of the salon", max_length=255
                    ),
                ),
                (
                    "time_zone",
                    models.CharField(
                        help_text="IANA time zone every civil date of the business is expressed in",
                        max_length=64,
                    ),
                ),
                (
                    "default_commission_percent",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Commission applied to staff members without their own percentage",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00")),
                            django.core.validators.MaxValueValidator(Decimal("100.00")),
                        ],
                    ),
                ),
                (
                    "phone_digits_required",
                    models.PositiveSmallIntegerField(
                        default=10,
                        help_text="Exact number of digits a new client's phone number must contain",
                    ),
                ),
                (
                    "loyalty_points_per_service",
                    models.PositiveIntegerField(
                        default=1, help_text="Loyalty points credited to a client per service unit"
                    ),
                ),
                (
                    "points_redeem_default",
                    models.PositiveIntegerField(
                        default=10, help_text="Points suggested for a redemption"
                    ),
                ),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Business Settings",
                "verbose_name_plural": "Business Settings",
                "db_table": "business_settings",
            },
        ),
        migrations.CreateModel(
            name="CommissionDefaultChange",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                (
                    "percent",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Default commission percentage",
                        max_digits=5,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00")),
                            django.core.validators.MaxValueValidator(Decimal("100.00")),
                        ],
                    ),
                ),
                (
                    "effective_from",
                    models.BigIntegerField(
                        help_text="Epoch milliseconds from which this default applies"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "verbose_name": "Commission Default Change",
                "verbose_name_plural": "Commission Default Changes",
                "db_table": "commission_default_changes",
                "ordering": ["-effective_from"],
                "indexes": [
                    models.Index(fields=["effective_from"], name="commission_effective_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="StaffMember",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the staff member",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(help_text="Display name", max_length=255)),
                (
                    "commission_percent",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Commission override; the business default applies when empty",
                        max_digits=5,
                        null=True,
                        validators=[
                            django.core.validators.MinValueValidator(Decimal("0.00")),
                            django.core.validators.MaxValueValidator(Decimal("100.00")),
                        ],
                    ),
                ),
                (
                    "hidden_months",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Months hidden from this staff member's views: [{year, month}]",
                    ),
                ),
                (
                    "hidden_windows",
                    models.JSONField(
                        blank=True,
                        default=list,
                        help_text="Day windows hidden from this staff member's views: "
                        "[{year, month, start_day, end_day}]",
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Staff Member",
                "verbose_name_plural": "Staff Members",
                "db_table": "staff_members",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["is_active", "name"], name="staff_active_name_idx")
                ],
            },
        ),
    ]
