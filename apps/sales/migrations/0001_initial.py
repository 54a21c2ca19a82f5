import uuid
from decimal import Decimal

import django.core.validators
import django.db.models.deletion
import django_fsm
from django.db import migrations, models

PAYMENT_METHOD_CHOICES = [
    ("cash", "Cash"),
    ("voucher", "Voucher"),
    ("card", "Card"),
    ("mixed", "Mixed"),
]


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
        ("crm", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="CheckoutAttempt",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the checkout attempt",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "status",
                    django_fsm.FSMField(
                        choices=[
                            ("validating", "Validating"),
                            ("committing", "Committing"),
                            ("committed", "Committed"),
                            ("partially_committed", "Partially Committed"),
                            ("failed", "Failed"),
                        ],
                        default="validating",
                        help_text="Current commit status",
                        max_length=50,
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(choices=PAYMENT_METHOD_CHOICES, max_length=10),
                ),
                (
                    "timestamp",
                    models.BigIntegerField(
                        help_text="Resolved checkout instant in epoch milliseconds"
                    ),
                ),
                ("total_units", models.PositiveIntegerField(default=0)),
                ("committed_units", models.PositiveIntegerField(default=0)),
                ("error_message", models.TextField(blank=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="checkout_attempts",
                        to="crm.client",
                    ),
                ),
                (
                    "staff",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="checkout_attempts",
                        to="core.staffmember",
                    ),
                ),
            ],
            options={
                "verbose_name": "Checkout Attempt",
                "verbose_name_plural": "Checkout Attempts",
                "db_table": "sales_checkout_attempts",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["status", "-created_at"], name="attempt_status_idx")
                ],
            },
        ),
        migrations.CreateModel(
            name="TransactionRecord",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the record",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "kind",
                    models.CharField(
                        choices=[("service", "Service"), ("product", "Product")],
                        help_text="Service or product",
                        max_length=10,
                    ),
                ),
                (
                    "amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Unit price",
                        max_digits=12,
                        validators=[django.core.validators.MinValueValidator(Decimal("0.01"))],
                    ),
                ),
                (
                    "payment_method",
                    models.CharField(
                        choices=PAYMENT_METHOD_CHOICES,
                        help_text="Payment channel",
                        max_length=10,
                    ),
                ),
                (
                    "timestamp",
                    models.BigIntegerField(help_text="Checkout instant in epoch milliseconds"),
                ),
                (
                    "item_name",
                    models.CharField(help_text="Catalog item name at sale time", max_length=255),
                ),
                (
                    "catalog_item_id",
                    models.CharField(
                        blank=True, help_text="Catalog item identifier", max_length=64
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "attempt",
                    models.ForeignKey(
                        blank=True,
                        help_text="Checkout attempt that wrote this record",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="records",
                        to="sales.checkoutattempt",
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        blank=True,
                        help_text="Client the unit was sold to (optional)",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="records",
                        to="crm.client",
                    ),
                ),
                (
                    "staff",
                    models.ForeignKey(
                        blank=True,
                        help_text="Staff member the sale is attributed to",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="records",
                        to="core.staffmember",
                    ),
                ),
            ],
            options={
                "verbose_name": "Transaction Record",
                "verbose_name_plural": "Transaction Records",
                "db_table": "sales_transaction_records",
                "ordering": ["-timestamp"],
                "indexes": [
                    models.Index(fields=["timestamp"], name="record_timestamp_idx"),
                    models.Index(fields=["staff", "timestamp"], name="record_staff_ts_idx"),
                    models.Index(fields=["kind", "timestamp"], name="record_kind_ts_idx"),
                    models.Index(fields=["client", "timestamp"], name="record_client_ts_idx"),
                ],
            },
        ),
    ]
