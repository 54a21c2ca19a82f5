import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("core", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Client",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the client",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("name", models.CharField(help_text="Full name, first name first", max_length=255)),
                ("phone", models.CharField(blank=True, help_text="Phone number", max_length=32)),
                ("email", models.EmailField(blank=True, help_text="Email address", max_length=254)),
                (
                    "loyalty_points",
                    models.PositiveIntegerField(
                        default=0,
                        help_text="Current loyalty points balance",
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                (
                    "last_visit_at",
                    models.BigIntegerField(
                        blank=True,
                        help_text="Epoch milliseconds of the client's last committed checkout",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "verbose_name": "Client",
                "verbose_name_plural": "Clients",
                "db_table": "crm_clients",
                "ordering": ["name"],
                "indexes": [
                    models.Index(fields=["name"], name="crm_client_name_idx"),
                    models.Index(fields=["phone"], name="crm_client_phone_idx"),
                    models.Index(fields=["email"], name="crm_client_email_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="LoyaltyTransaction",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        help_text="Unique identifier for the loyalty transaction",
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "transaction_type",
                    models.CharField(
                        choices=[
                            ("EARNED", "Points Earned"),
                            ("REDEEMED", "Points Redeemed"),
                            ("ADJUSTED", "Points Adjusted"),
                            ("REVERSED", "Points Reversed"),
                        ],
                        help_text="Type of loyalty transaction",
                        max_length=20,
                    ),
                ),
                (
                    "points",
                    models.IntegerField(
                        help_text="Points amount (positive for earned/adjusted, negative for redeemed/reversed)"
                    ),
                ),
                (
                    "description",
                    models.CharField(
                        blank=True,
                        help_text="Description or reason of the transaction",
                        max_length=255,
                    ),
                ),
                (
                    "created_at",
                    models.DateTimeField(
                        auto_now_add=True, help_text="When the transaction was created"
                    ),
                ),
                (
                    "timestamp",
                    models.BigIntegerField(
                        help_text="Epoch milliseconds the transaction is reported under"
                    ),
                ),
                (
                    "client",
                    models.ForeignKey(
                        help_text="Client this transaction belongs to",
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="loyalty_transactions",
                        to="crm.client",
                    ),
                ),
                (
                    "staff",
                    models.ForeignKey(
                        blank=True,
                        help_text="Staff member the transaction is attributed to",
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="loyalty_transactions",
                        to="core.staffmember",
                    ),
                ),
            ],
            options={
                "verbose_name": "Loyalty Transaction",
                "verbose_name_plural": "Loyalty Transactions",
                "db_table": "crm_loyalty_transactions",
                "ordering": ["-timestamp"],
            },
        ),
    ]
