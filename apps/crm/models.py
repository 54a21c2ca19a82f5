"""
CRM models for the salon.

- Client: people services and products are sold to
- LoyaltyTransaction: signed ledger of every loyalty point movement
"""

import uuid

from django.core.validators import MinValueValidator
from django.db import models


def split_name_parts(full_name):
    """
    Split a stored client name into (first_name, last_name).

    The first whitespace-separated word is the first name and everything after
    it is the last name.
    """
    value = (full_name or "").strip()
    if not value:
        return "", ""
    parts = value.split()
    if len(parts) == 1:
        return parts[0], ""
    return parts[0], " ".join(parts[1:])


class Client(models.Model):
    """
    Salon client.

    The loyalty balance is never negative; every change to it is mirrored by a
    LoyaltyTransaction row.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the client",
    )

    name = models.CharField(max_length=255, help_text="Full name, first name first")

    phone = models.CharField(max_length=32, blank=True, help_text="Phone number")

    email = models.EmailField(blank=True, help_text="Email address")

    loyalty_points = models.PositiveIntegerField(
        default=0,
        validators=[MinValueValidator(0)],
        help_text="Current loyalty points balance",
    )

    last_visit_at = models.BigIntegerField(
        null=True,
        blank=True,
        help_text="Epoch milliseconds of the client's last committed checkout",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "crm_clients"
        ordering = ["name"]
        verbose_name = "Client"
        verbose_name_plural = "Clients"
        indexes = [
            models.Index(fields=["name"], name="crm_client_name_idx"),
            models.Index(fields=["phone"], name="crm_client_phone_idx"),
            models.Index(fields=["email"], name="crm_client_email_idx"),
        ]

    def __str__(self):
        return self.name

    def get_name_parts(self):
        return split_name_parts(self.name)


class LoyaltyTransaction(models.Model):
    """
    One loyalty point movement.

    Points are signed: positive for earned and adjusted entries, negative for
    redeemed and reversed entries. A reversal records the points actually
    removed from the balance.
    """

    # Transaction types
    EARNED = "EARNED"
    REDEEMED = "REDEEMED"
    ADJUSTED = "ADJUSTED"
    REVERSED = "REVERSED"

    TRANSACTION_TYPE_CHOICES = [
        (EARNED, "Points Earned"),
        (REDEEMED, "Points Redeemed"),
        (ADJUSTED, "Points Adjusted"),
        (REVERSED, "Points Reversed"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the loyalty transaction",
    )

    client = models.ForeignKey(
        Client,
        on_delete=models.CASCADE,
        related_name="loyalty_transactions",
        help_text="Client this transaction belongs to",
    )

    transaction_type = models.CharField(
        max_length=20, choices=TRANSACTION_TYPE_CHOICES, help_text="Type of loyalty transaction"
    )

    points = models.IntegerField(
        help_text="Points amount (positive for earned/adjusted, negative for redeemed/reversed)"
    )

    description = models.CharField(
        max_length=255, blank=True, help_text="Description or reason of the transaction"
    )

    # Related objects
    record = models.ForeignKey(
        "sales.TransactionRecord",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="loyalty_transactions",
        help_text="Ledger record that generated this transaction (if applicable)",
    )

    staff = models.ForeignKey(
        "core.StaffMember",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="loyalty_transactions",
        help_text="Staff member the transaction is attributed to",
    )

    created_at = models.DateTimeField(
        auto_now_add=True, help_text="When the transaction was created"
    )

    timestamp = models.BigIntegerField(
        help_text="Epoch milliseconds the transaction is reported under",
    )

    class Meta:
        db_table = "crm_loyalty_transactions"
        ordering = ["-timestamp"]
        verbose_name = "Loyalty Transaction"
        verbose_name_plural = "Loyalty Transactions"
        indexes = [
            models.Index(fields=["client", "-timestamp"], name="loyalty_client_ts_idx"),
            models.Index(fields=["transaction_type", "timestamp"], name="loyalty_type_ts_idx"),
            models.Index(fields=["record"], name="loyalty_record_idx"),
        ]

    def __str__(self):
        return f"{self.client.name} - {self.transaction_type}: {self.points} points"
