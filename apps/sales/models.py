"""
Sales models for the salon ledger.

- TransactionRecord: one sold unit (a service performed once or one product item)
- CheckoutAttempt: progress of committing one basket to the ledger

A basket with quantities is never stored as such: it is decomposed into one
TransactionRecord per unit at checkout. Records are immutable except for their
payment method, which can be corrected, and their existence.
"""

import uuid
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django_fsm import FSMField, transition


class TransactionRecord(models.Model):
    """
    Ledger entry for a single unit sold.

    ``amount`` is always one unit price; there is no quantity column.
    ``timestamp`` is the resolved checkout instant in epoch milliseconds and is
    shared by every unit of the same basket.
    """

    # Kinds
    SERVICE = "service"
    PRODUCT = "product"

    KIND_CHOICES = [
        (SERVICE, "Service"),
        (PRODUCT, "Product"),
    ]

    # Payment method choices
    CASH = "cash"
    VOUCHER = "voucher"
    CARD = "card"
    MIXED = "mixed"

    PAYMENT_METHOD_CHOICES = [
        (CASH, "Cash"),
        (VOUCHER, "Voucher"),
        (CARD, "Card"),
        (MIXED, "Mixed"),
    ]

    # Mixed is only reachable through a correction
    CHECKOUT_PAYMENT_METHODS = (CASH, VOUCHER, CARD)
    PAYMENT_METHODS = (CASH, VOUCHER, CARD, MIXED)

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the record",
    )

    kind = models.CharField(max_length=10, choices=KIND_CHOICES, help_text="Service or product")

    staff = models.ForeignKey(
        "core.StaffMember",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="records",
        help_text="Staff member the sale is attributed to",
    )

    client = models.ForeignKey(
        "crm.Client",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="records",
        help_text="Client the unit was sold to (optional)",
    )

    amount = models.DecimalField(
        max_digits=12,
        decimal_places=2,
        validators=[MinValueValidator(Decimal("0.01"))],
        help_text="Unit price",
    )

    payment_method = models.CharField(
        max_length=10,
        choices=PAYMENT_METHOD_CHOICES,
        help_text="Payment channel",
    )

    timestamp = models.BigIntegerField(help_text="Checkout instant in epoch milliseconds")

    item_name = models.CharField(max_length=255, help_text="Catalog item name at sale time")

    catalog_item_id = models.CharField(
        max_length=64, blank=True, help_text="Catalog item identifier"
    )

    attempt = models.ForeignKey(
        "sales.CheckoutAttempt",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="records",
        help_text="Checkout attempt that wrote this record",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "sales_transaction_records"
        ordering = ["-timestamp"]
        verbose_name = "Transaction Record"
        verbose_name_plural = "Transaction Records"
        indexes = [
            models.Index(fields=["timestamp"], name="record_timestamp_idx"),
            models.Index(fields=["staff", "timestamp"], name="record_staff_ts_idx"),
            models.Index(fields=["kind", "timestamp"], name="record_kind_ts_idx"),
            models.Index(fields=["client", "timestamp"], name="record_client_ts_idx"),
        ]

    def __str__(self):
        return f"{self.kind} {self.item_name} - {self.amount} ({self.payment_method})"

    @property
    def is_service(self):
        return self.kind == self.SERVICE


class CheckoutAttempt(models.Model):
    """
    Persisted progress of one basket commit.

    Created once a basket passes validation, so a refused basket leaves no row.
    ``committed_units`` advances after every successful ledger write.
    """

    VALIDATING = "validating"
    COMMITTING = "committing"
    COMMITTED = "committed"
    PARTIALLY_COMMITTED = "partially_committed"
    FAILED = "failed"

    STATUS_CHOICES = [
        (VALIDATING, "Validating"),
        (COMMITTING, "Committing"),
        (COMMITTED, "Committed"),
        (PARTIALLY_COMMITTED, "Partially Committed"),
        (FAILED, "Failed"),
    ]

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the checkout attempt",
    )

    status = FSMField(
        default=VALIDATING, choices=STATUS_CHOICES, help_text="Current commit status"
    )

    staff = models.ForeignKey(
        "core.StaffMember",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checkout_attempts",
    )

    client = models.ForeignKey(
        "crm.Client",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="checkout_attempts",
    )

    payment_method = models.CharField(
        max_length=10, choices=TransactionRecord.PAYMENT_METHOD_CHOICES
    )

    timestamp = models.BigIntegerField(help_text="Resolved checkout instant in epoch milliseconds")

    total_units = models.PositiveIntegerField(default=0)
    committed_units = models.PositiveIntegerField(default=0)

    error_message = models.TextField(blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "sales_checkout_attempts"
        ordering = ["-created_at"]
        verbose_name = "Checkout Attempt"
        verbose_name_plural = "Checkout Attempts"
        indexes = [
            models.Index(fields=["status", "-created_at"], name="attempt_status_idx"),
        ]

    def __str__(self):
        return f"Checkout {self.id} - {self.status} ({self.committed_units}/{self.total_units})"

    @transition(field=status, source=VALIDATING, target=COMMITTING)
    def begin_commit(self):
        """Start submitting units to the ledger."""
        pass

    @transition(field=status, source=COMMITTING, target=COMMITTED)
    def complete(self):
        """Every unit was written."""
        pass

    @transition(field=status, source=COMMITTING, target=PARTIALLY_COMMITTED)
    def mark_partial(self, message=""):
        """Some units were written before a write failed."""
        self.error_message = message

    @transition(field=status, source=[VALIDATING, COMMITTING], target=FAILED)
    def fail(self, message=""):
        """No unit was written."""
        self.error_message = message

    @property
    def remaining_units(self):
        return self.total_units - self.committed_units
