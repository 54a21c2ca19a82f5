"""
Tests for ledger corrections and deletions.
"""

import uuid
from decimal import Decimal

import pytest

from apps.core.exceptions import NotFoundError, ValidationError
from apps.crm import services as loyalty
from apps.crm.models import LoyaltyTransaction
from apps.sales.basket import Basket, LineItem
from apps.sales.commit_service import TransactionCommitter
from apps.sales.ledger import Ledger
from apps.sales.models import TransactionRecord


@pytest.mark.django_db
class TestPaymentMethodCorrection:
    """Only the payment method of a record can change."""

    def test_correct_to_mixed(self, staff, make_record):
        record = make_record(staff, "20.00", "2024-03-15T10:00", payment_method="cash")

        corrected = Ledger().correct_payment_method(record.id, "service", "mixed")
        record.refresh_from_db()

        assert corrected.payment_method == "mixed"
        assert record.payment_method == "mixed"
        assert record.amount == Decimal("20.00")

    def test_kind_mismatch_is_not_found(self, staff, make_record):
        record = make_record(staff, "20.00", "2024-03-15T10:00")

        with pytest.raises(NotFoundError):
            Ledger().correct_payment_method(record.id, "product", "card")

        record.refresh_from_db()
        assert record.payment_method == "cash"

    def test_unknown_payment_method(self, staff, make_record):
        record = make_record(staff, "20.00", "2024-03-15T10:00")

        with pytest.raises(ValidationError) as exc_info:
            Ledger().correct_payment_method(record.id, "service", "cheque")
        assert exc_info.value.field == "payment_method"

    def test_missing_record(self, db):
        with pytest.raises(NotFoundError):
            Ledger().correct_payment_method(uuid.uuid4(), "service", "card")


@pytest.mark.django_db
class TestRecordDeletion:
    """Deleting a record reverses the loyalty it generated."""

    def commit_services(self, business_settings, staff, client, quantity):
        basket = Basket(
            staff_id=str(staff.id),
            client_id=str(client.id),
            payment_method="cash",
            services=(LineItem("svc-1", "Cut", Decimal("20.00"), quantity),),
        )
        return TransactionCommitter(business=business_settings).commit(basket)

    def test_delete_reverses_credit(self, business_settings, staff, salon_client):
        result = self.commit_services(business_settings, staff, salon_client, 2)

        reversals = Ledger().delete_record(result.records[0].id)
        salon_client.refresh_from_db()

        assert TransactionRecord.objects.count() == 1
        assert salon_client.loyalty_points == 1
        assert len(reversals) == 1
        assert reversals[0].transaction_type == LoyaltyTransaction.REVERSED
        assert reversals[0].points == -1

    def test_reversal_never_goes_below_zero(self, business_settings, staff, salon_client):
        result = self.commit_services(business_settings, staff, salon_client, 2)
        loyalty.redeem(salon_client, 2, staff=staff)

        reversals = Ledger().delete_record(result.records[0].id)
        salon_client.refresh_from_db()

        assert salon_client.loyalty_points == 0
        assert reversals[0].points == 0

    def test_delete_product_has_no_reversal(self, staff, make_record):
        record = make_record(staff, "12.50", "2024-03-15T10:00", kind=TransactionRecord.PRODUCT)

        assert Ledger().delete_record(record.id) == []
        assert not TransactionRecord.objects.exists()

    def test_delete_missing_record(self, db):
        with pytest.raises(NotFoundError):
            Ledger().delete_record(uuid.uuid4())
