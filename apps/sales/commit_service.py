"""
Checkout: committing a basket to the ledger.

The basket is validated completely before anything is written. Units are then
written one at a time, services first, each as its own atomic ledger write.
There is no enclosing transaction: when a write fails, units already written
stay, and the caller receives the exact remainder to retry.

Loyalty credits and the client's last visit are only recorded once every unit
has been written.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import DatabaseError, transaction

from apps.core.exceptions import (
    NotFoundError,
    PartialCommitError,
    TransientError,
    ValidationError,
)
from apps.core.models import BusinessSettings, StaffMember
from apps.core.time_resolver import TimeResolver
from apps.crm import services as loyalty
from apps.crm.models import Client

from .ledger import Ledger
from .models import CheckoutAttempt, TransactionRecord

logger = logging.getLogger(__name__)


@dataclass
class CommitResult:
    attempt: CheckoutAttempt
    records: List[TransactionRecord]
    client: Optional[Client] = None
    loyalty_entries: list = field(default_factory=list)

    @property
    def timestamp(self):
        return self.attempt.timestamp


class TransactionCommitter:
    """
    Commit a Basket to the ledger.

    Usage:
        result = TransactionCommitter().commit(basket)
    """

    def __init__(self, ledger=None, resolver=None, business=None):
        self.business = business or BusinessSettings.load()
        self.ledger = ledger or Ledger()
        self.resolver = resolver or TimeResolver(self.business.time_zone)

    def commit(self, basket):
        """
        Validate, decompose and write ``basket``.

        Raises:
            ValidationError: the basket was refused; nothing was written.
            NotFoundError: the staff member or client does not exist.
            TransientError: the first write failed; no unit was written. Its
                ``remainder`` carries the client created for a new-client draft.
            PartialCommitError: some units were written before a write failed.
        """
        self._validate_lines(basket)
        staff = self._resolve_staff(basket.staff_id)
        client = self._resolve_client(basket)
        draft = self._validate_draft(basket)
        timestamp = self._resolve_instant(basket)
        total = basket.unit_count

        logger.info(
            f"Checkout started for staff {staff.id}: {total} units, {basket.payment_method}"
        )

        created_client_id = None
        try:
            with transaction.atomic():
                if draft is not None:
                    client = Client.objects.create(name=draft.full_name, phone=draft.phone)
                    created_client_id = client.id
                    logger.info(f"Client {client.id} created at checkout")
                attempt = CheckoutAttempt.objects.create(
                    staff=staff,
                    client=client,
                    payment_method=basket.payment_method,
                    timestamp=timestamp,
                    total_units=total,
                )
        except DatabaseError as e:
            logger.error(f"Checkout could not start: {e}", exc_info=True)
            raise TransientError(str(e)) from e

        attempt.begin_commit()
        self._save_progress(attempt)

        records = []
        for unit in basket.units():
            try:
                record = self.ledger.write(
                    unit,
                    staff=staff,
                    client=client,
                    payment_method=basket.payment_method,
                    timestamp=timestamp,
                    attempt=attempt,
                )
            except TransientError as e:
                self._stop(attempt, basket, len(records), total, created_client_id, e)

            records.append(record)
            attempt.committed_units = len(records)
            self._save_progress(attempt)

        attempt.complete()
        self._save_progress(attempt)

        entries = []
        if client is not None:
            entries = self._reward(client, records, timestamp)
            client.refresh_from_db()

        logger.info(
            f"Checkout {attempt.id} committed: {total} units for staff {staff.id}"
            + (f", client {client.id}" if client is not None else "")
        )
        return CommitResult(
            attempt=attempt, records=records, client=client, loyalty_entries=entries
        )

    def _stop(self, attempt, basket, committed, total, created_client_id, error):
        remainder = basket.remainder(committed, client_id=created_client_id)
        if committed == 0:
            attempt.fail(str(error))
            self._save_progress(attempt)
            logger.error(f"Checkout {attempt.id} failed before any write: {error}")
            raise TransientError(str(error), remainder=remainder, attempt=attempt) from error

        attempt.mark_partial(str(error))
        self._save_progress(attempt)
        logger.error(f"Checkout {attempt.id} stopped after {committed} of {total} units: {error}")
        raise PartialCommitError(
            committed,
            total,
            remainder=remainder,
            attempt=attempt,
            cause=error,
        ) from error

    def _save_progress(self, attempt):
        # Progress is advisory: the ledger records are authoritative.
        try:
            attempt.save()
        except DatabaseError as e:
            logger.error(f"Progress of checkout {attempt.id} not saved: {e}", exc_info=True)

    @transaction.atomic
    def _reward(self, client, records, timestamp):
        entries = loyalty.credit_for_records(
            client, records, self.business.loyalty_points_per_service
        )
        Client.objects.filter(pk=client.pk).exclude(last_visit_at__gte=timestamp).update(
            last_visit_at=timestamp
        )
        return entries

    # Validation

    def _validate_lines(self, basket):
        if basket.is_empty:
            raise ValidationError("The basket is empty", field="items")

        if basket.payment_method not in TransactionRecord.CHECKOUT_PAYMENT_METHODS:
            raise ValidationError(
                f"Unsupported payment method '{basket.payment_method}'", field="payment_method"
            )

        for group, items in (("services", basket.services), ("products", basket.products)):
            for index, item in enumerate(items):
                try:
                    price = Decimal(item.unit_price)
                except (InvalidOperation, TypeError, ValueError):
                    price = None
                if price is None or not price.is_finite() or price <= 0:
                    raise ValidationError(
                        "Unit price must be greater than zero", field=f"{group}[{index}].price"
                    )
                quantity = item.quantity
                if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
                    raise ValidationError(
                        "Quantity must be at least 1", field=f"{group}[{index}].quantity"
                    )

    def _resolve_staff(self, staff_id):
        try:
            return StaffMember.objects.get(id=staff_id)
        except (StaffMember.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError(f"Staff member {staff_id} not found")

    def _resolve_client(self, basket):
        if basket.client_id and basket.new_client is not None:
            raise ValidationError(
                "Choose an existing client or a new client, not both", field="client"
            )
        if not basket.client_id:
            return None
        try:
            return Client.objects.get(id=basket.client_id)
        except (Client.DoesNotExist, DjangoValidationError, ValueError):
            raise NotFoundError(f"Client {basket.client_id} not found")

    def _validate_draft(self, basket):
        if basket.new_client is None:
            return None

        draft = basket.new_client.normalized()
        if not draft.first_name:
            raise ValidationError("First name is required", field="first_name")
        if not draft.last_name:
            raise ValidationError("Last name is required", field="last_name")

        required = self.business.phone_digits_required
        if len(draft.phone) != required:
            raise ValidationError(
                f"Phone number must contain exactly {required} digits", field="phone"
            )
        return draft

    def _resolve_instant(self, basket):
        if basket.checkout_at:
            return self.resolver.to_instant(basket.checkout_at, field="checkout_at")
        return self.resolver.now_ms()
