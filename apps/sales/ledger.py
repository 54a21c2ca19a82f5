"""
Ledger of transaction records.

Each method is one atomic database write. Availability failures surface as
TransientError and are never retried here.
"""

import logging

from django.db import DatabaseError, transaction

from apps.core.exceptions import NotFoundError, TransientError, ValidationError
from apps.crm import services as loyalty

from .models import TransactionRecord

logger = logging.getLogger(__name__)


class Ledger:
    """
    Persistence boundary for TransactionRecord.

    TransactionCommitter receives a Ledger instance, so a different ledger can be
    substituted for one that fails on demand.
    """

    def write(self, unit, staff, client, payment_method, timestamp, attempt=None):
        """Persist one unit as its own record."""
        try:
            with transaction.atomic():
                return TransactionRecord.objects.create(
                    kind=unit.kind,
                    staff=staff,
                    client=client,
                    amount=unit.amount,
                    payment_method=payment_method,
                    timestamp=timestamp,
                    item_name=unit.name,
                    catalog_item_id=unit.catalog_item_id,
                    attempt=attempt,
                )
        except DatabaseError as e:
            logger.error(f"Ledger write failed for {unit.kind} '{unit.name}': {e}", exc_info=True)
            raise TransientError(str(e)) from e

    def get(self, record_id, kind=None):
        """Fetch a record, optionally requiring its kind to match."""
        filters = {"id": record_id}
        if kind is not None:
            filters["kind"] = kind
        try:
            return TransactionRecord.objects.select_related("staff", "client").get(**filters)
        except TransactionRecord.DoesNotExist:
            raise NotFoundError(f"No {kind or 'transaction'} record {record_id}")

    def correct_payment_method(self, record_id, kind, payment_method):
        """
        Change the payment method of an existing record.

        A record whose kind differs from ``kind`` is treated as not found.
        ``mixed`` is accepted here even though checkout refuses it.
        """
        if payment_method not in TransactionRecord.PAYMENT_METHODS:
            raise ValidationError(
                f"Unsupported payment method '{payment_method}'", field="payment_method"
            )

        record = self.get(record_id, kind=kind)
        previous = record.payment_method
        record.payment_method = payment_method
        try:
            with transaction.atomic():
                record.save(update_fields=["payment_method", "updated_at"])
        except DatabaseError as e:
            logger.error(f"Payment method correction failed for {record_id}: {e}", exc_info=True)
            raise TransientError(str(e)) from e

        logger.info(f"Record {record.id} payment method corrected: {previous} -> {payment_method}")
        return record

    def delete_record(self, record_id):
        """Delete a record and reverse every loyalty credit it generated."""
        record = self.get(record_id)
        try:
            with transaction.atomic():
                reversals = loyalty.reverse_for_record(record)
                record.delete()
        except DatabaseError as e:
            logger.error(f"Deletion failed for record {record_id}: {e}", exc_info=True)
            raise TransientError(str(e)) from e

        logger.info(f"Record {record_id} deleted, {len(reversals)} loyalty credits reversed")
        return reversals
