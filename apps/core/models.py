"""
Core models for the salon point-of-sale platform.

- BusinessSettings: the single configuration record of the salon
- CommissionDefaultChange: history of the business default commission
- StaffMember: people who perform services and sell products
"""

import logging
import uuid
from decimal import Decimal

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models, transaction

from apps.core.time_resolver import now_ms
from apps.core.visibility import VisibilityMask

logger = logging.getLogger(__name__)

PERCENT_VALIDATORS = [
    MinValueValidator(Decimal("0.00")),
    MaxValueValidator(Decimal("100.00")),
]


def clamp_percent(value):
    """Clamp a commission percentage into [0, 100]."""
    value = Decimal(str(value))
    return max(Decimal("0"), min(Decimal("100"), value))


class BusinessSettings(models.Model):
    """
    Salon-wide configuration.

    There is exactly one row. It is created on first access from the
    environment-driven defaults in Django settings.
    """

    SINGLETON_ID = 1

    business_name = models.CharField(
        max_length=255,
        blank=True,
        help_text="Display name of the salon",
    )

    time_zone = models.CharField(
        max_length=64,
        help_text="IANA time zone every civil date of the business is expressed in",
    )

    default_commission_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=PERCENT_VALIDATORS,
        help_text="Commission applied to staff members without their own percentage",
    )

    phone_digits_required = models.PositiveSmallIntegerField(
        default=10,
        help_text="Exact number of digits a new client's phone number must contain",
    )

    loyalty_points_per_service = models.PositiveIntegerField(
        default=1,
        help_text="Loyalty points credited to a client per service unit",
    )

    points_redeem_default = models.PositiveIntegerField(
        default=10,
        help_text="Points suggested for a redemption",
    )

    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "business_settings"
        verbose_name = "Business Settings"
        verbose_name_plural = "Business Settings"

    def __str__(self):
        return self.business_name or "Business Settings"

    @classmethod
    def load(cls):
        """Return the settings row, creating it from Django settings if missing."""
        instance = cls.objects.filter(pk=cls.SINGLETON_ID).first()
        if instance is None:
            instance = cls(
                pk=cls.SINGLETON_ID,
                time_zone=settings.BUSINESS_TIME_ZONE,
                default_commission_percent=clamp_percent(settings.DEFAULT_COMMISSION_PERCENT),
                phone_digits_required=settings.PHONE_DIGITS_REQUIRED,
                loyalty_points_per_service=settings.LOYALTY_POINTS_PER_SERVICE,
                points_redeem_default=settings.POINTS_REDEEM_DEFAULT,
            )
            instance.save()
        return instance

    def save(self, *args, **kwargs):
        """
        Override save to keep the default commission history in step.

        The first row is recorded as effective since the epoch so that periods
        before any change resolve to the original default.
        """
        self.pk = self.SINGLETON_ID
        previous = (
            BusinessSettings.objects.filter(pk=self.pk)
            .values_list("default_commission_percent", flat=True)
            .first()
        )
        with transaction.atomic():
            super().save(*args, **kwargs)
            if previous is None:
                CommissionDefaultChange.objects.create(
                    percent=self.default_commission_percent, effective_from=0
                )
            elif previous != self.default_commission_percent:
                CommissionDefaultChange.objects.create(
                    percent=self.default_commission_percent,
                    effective_from=now_ms(),
                )
                logger.info(
                    f"Default commission changed from {previous}% "
                    f"to {self.default_commission_percent}%"
                )

    def default_commission_at(self, epoch_ms):
        """Default commission that was in effect at ``epoch_ms``."""
        change = (
            CommissionDefaultChange.objects.filter(effective_from__lte=epoch_ms)
            .order_by("-effective_from", "-id")
            .first()
        )
        if change is None:
            return self.default_commission_percent
        return change.percent


class CommissionDefaultChange(models.Model):
    """
    One entry per value the business default commission has taken.

    Used when COMMISSION_DEFAULT_POLICY is "effective_dated" so that a new
    default only applies to periods starting after the change.
    """

    percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        validators=PERCENT_VALIDATORS,
        help_text="Default commission percentage",
    )

    effective_from = models.BigIntegerField(
        help_text="Epoch milliseconds from which this default applies",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "commission_default_changes"
        ordering = ["-effective_from"]
        verbose_name = "Commission Default Change"
        verbose_name_plural = "Commission Default Changes"
        indexes = [
            models.Index(fields=["effective_from"], name="commission_effective_idx"),
        ]

    def __str__(self):
        return f"{self.percent}% from {self.effective_from}"


class StaffMember(models.Model):
    """
    A staff member who records sales against themselves.

    Carries an optional commission override and the visibility mask applied
    to the staff member's own revenue views.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
        help_text="Unique identifier for the staff member",
    )

    name = models.CharField(max_length=255, help_text="Display name")

    commission_percent = models.DecimalField(
        max_digits=5,
        decimal_places=2,
        null=True,
        blank=True,
        validators=PERCENT_VALIDATORS,
        help_text="Commission override; the business default applies when empty",
    )

    # Visibility mask
    hidden_months = models.JSONField(
        default=list,
        blank=True,
        help_text="Months hidden from this staff member's views: [{year, month}]",
    )

    hidden_windows = models.JSONField(
        default=list,
        blank=True,
        help_text="Day windows hidden from this staff member's views: "
        "[{year, month, start_day, end_day}]",
    )

    is_active = models.BooleanField(default=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "staff_members"
        ordering = ["name"]
        verbose_name = "Staff Member"
        verbose_name_plural = "Staff Members"
        indexes = [
            models.Index(fields=["is_active", "name"], name="staff_active_name_idx"),
        ]

    def __str__(self):
        return self.name

    @property
    def visibility_mask(self):
        return VisibilityMask.from_json(self.hidden_months, self.hidden_windows)

    def replace_visibility_mask(self, hidden_months, hidden_windows):
        """
        Replace the whole mask. Entries not listed are no longer hidden.

        Raises ValidationError before saving anything if an entry is malformed.
        """
        mask = VisibilityMask.from_json(hidden_months, hidden_windows)
        self.hidden_months = mask.months_as_json()
        self.hidden_windows = mask.windows_as_json()
        self.save(update_fields=["hidden_months", "hidden_windows", "updated_at"])
        logger.info(
            f"Visibility mask replaced for staff {self.id}: "
            f"{len(self.hidden_months)} months, {len(self.hidden_windows)} windows"
        )
        return mask

    def set_commission(self, percent):
        """Set or clear (None) the commission override, clamped to [0, 100]."""
        self.commission_percent = None if percent is None else clamp_percent(percent)
        self.save(update_fields=["commission_percent", "updated_at"])
        logger.info(f"Commission for staff {self.id} set to {self.commission_percent}")
