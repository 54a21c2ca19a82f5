"""
Tests for the checkout commit protocol.

Covers pre-flight validation, sequential unit writes, partial failure with a
retryable remainder, and the loyalty side effects of a full commit.
"""

import logging
import uuid
from decimal import Decimal

from django.db import DatabaseError

import pytest

from apps.core.exceptions import (
    NotFoundError,
    PartialCommitError,
    TransientError,
    ValidationError,
)
from apps.crm.models import Client, LoyaltyTransaction
from apps.sales.basket import Basket, LineItem, NewClientDraft
from apps.sales.commit_service import TransactionCommitter
from apps.sales.models import CheckoutAttempt, TransactionRecord


def cut(quantity=1, price="20.00"):
    return LineItem("svc-1", "Cut", Decimal(price), quantity)


def wax(quantity=1, price="12.50"):
    return LineItem("prd-1", "Wax", Decimal(price), quantity)


@pytest.fixture
def committer(business_settings):
    return TransactionCommitter(business=business_settings)


@pytest.mark.django_db
class TestCommitSuccess:
    """Fully committed baskets."""

    def test_records_one_row_per_unit(self, committer, staff, resolver):
        basket = Basket(
            staff_id=str(staff.id),
            payment_method="card",
            services=(cut(3),),
            products=(wax(2),),
            checkout_at="2024-03-15T10:00",
        )

        result = committer.commit(basket)

        assert len(result.records) == 5
        assert TransactionRecord.objects.count() == 5
        assert [r.kind for r in result.records] == ["service"] * 3 + ["product"] * 2
        expected = resolver.to_instant("2024-03-15T10:00")
        assert {r.timestamp for r in result.records} == {expected}
        assert {r.payment_method for r in result.records} == {"card"}
        cuts = TransactionRecord.objects.filter(kind="service", amount=Decimal("20.00"))
        assert cuts.count() == 3

    def test_attempt_is_committed(self, committer, staff):
        basket = Basket(staff_id=str(staff.id), payment_method="cash", services=(cut(2),))

        result = committer.commit(basket)
        result.attempt.refresh_from_db()

        assert result.attempt.status == CheckoutAttempt.COMMITTED
        assert result.attempt.total_units == 2
        assert result.attempt.committed_units == 2
        assert result.attempt.remaining_units == 0

    def test_loyalty_credited_per_service_unit(self, committer, staff, salon_client):
        basket = Basket(
            staff_id=str(staff.id),
            client_id=str(salon_client.id),
            payment_method="voucher",
            services=(cut(3),),
            products=(wax(1),),
            checkout_at="2024-03-15T10:00",
        )

        result = committer.commit(basket)
        salon_client.refresh_from_db()

        assert salon_client.loyalty_points == 3
        assert len(result.loyalty_entries) == 3
        assert LoyaltyTransaction.objects.filter(
            client=salon_client, transaction_type=LoyaltyTransaction.EARNED
        ).count() == 3
        assert salon_client.last_visit_at == result.timestamp

    def test_new_client_created_before_records(self, committer, staff):
        basket = Basket(
            staff_id=str(staff.id),
            payment_method="cash",
            services=(cut(2),),
            new_client=NewClientDraft(" Jane ", "Doe", "06 12 34 56 78"),
        )

        result = committer.commit(basket)

        client = Client.objects.get()
        assert client.name == "Jane Doe"
        assert client.phone == "0612345678"
        assert result.client == client
        assert all(record.client_id == client.id for record in result.records)

    def test_default_instant_is_now(self, committer, staff, resolver):
        before = resolver.now_ms()
        result = committer.commit(
            Basket(staff_id=str(staff.id), payment_method="cash", services=(cut(),))
        )
        assert before <= result.timestamp <= resolver.now_ms()


@pytest.mark.django_db
class TestCommitValidation:
    """Refused baskets leave the database untouched."""

    def assert_nothing_written(self):
        assert TransactionRecord.objects.count() == 0
        assert CheckoutAttempt.objects.count() == 0
        assert Client.objects.count() == 0

    def test_phone_with_too_few_digits(self, committer, staff):
        basket = Basket(
            staff_id=str(staff.id),
            payment_method="cash",
            services=(cut(),),
            new_client=NewClientDraft("Jane", "Doe", "06 12 34 56 7"),
        )

        with pytest.raises(ValidationError) as exc_info:
            committer.commit(basket)

        assert exc_info.value.field == "phone"
        self.assert_nothing_written()

    @pytest.mark.parametrize(
        "draft,field",
        [
            (NewClientDraft("  ", "Doe", "0612345678"), "first_name"),
            (NewClientDraft("Jane", "", "0612345678"), "last_name"),
        ],
    )
    def test_draft_names_required(self, committer, staff, draft, field):
        basket = Basket(
            staff_id=str(staff.id), payment_method="cash", services=(cut(),), new_client=draft
        )
        with pytest.raises(ValidationError) as exc_info:
            committer.commit(basket)
        assert exc_info.value.field == field
        self.assert_nothing_written()

    def test_empty_basket(self, committer, staff):
        with pytest.raises(ValidationError) as exc_info:
            committer.commit(Basket(staff_id=str(staff.id), payment_method="cash"))
        assert exc_info.value.field == "items"

    def test_mixed_refused_at_checkout(self, committer, staff):
        basket = Basket(staff_id=str(staff.id), payment_method="mixed", services=(cut(),))
        with pytest.raises(ValidationError) as exc_info:
            committer.commit(basket)
        assert exc_info.value.field == "payment_method"
        self.assert_nothing_written()

    def test_non_positive_price(self, committer, staff):
        basket = Basket(
            staff_id=str(staff.id), payment_method="cash", services=(cut(), cut(price="0"))
        )
        with pytest.raises(ValidationError) as exc_info:
            committer.commit(basket)
        assert exc_info.value.field == "services[1].price"

    def test_zero_quantity(self, committer, staff):
        basket = Basket(staff_id=str(staff.id), payment_method="cash", products=(wax(0),))
        with pytest.raises(ValidationError) as exc_info:
            committer.commit(basket)
        assert exc_info.value.field == "products[0].quantity"

    def test_unknown_staff(self, committer):
        basket = Basket(staff_id=str(uuid.uuid4()), payment_method="cash", services=(cut(),))
        with pytest.raises(NotFoundError):
            committer.commit(basket)
        self.assert_nothing_written()

    def test_unknown_client(self, committer, staff):
        basket = Basket(
            staff_id=str(staff.id),
            client_id=str(uuid.uuid4()),
            payment_method="cash",
            services=(cut(),),
        )
        with pytest.raises(NotFoundError):
            committer.commit(basket)

    def test_existing_client_and_draft(self, committer, staff, salon_client):
        basket = Basket(
            staff_id=str(staff.id),
            client_id=str(salon_client.id),
            new_client=NewClientDraft("Jane", "Doe", "0612345678"),
            payment_method="cash",
            services=(cut(),),
        )
        with pytest.raises(ValidationError) as exc_info:
            committer.commit(basket)
        assert exc_info.value.field == "client"

    def test_malformed_checkout_time(self, committer, staff):
        basket = Basket(
            staff_id=str(staff.id),
            payment_method="cash",
            services=(cut(),),
            checkout_at="yesterday",
        )
        with pytest.raises(ValidationError) as exc_info:
            committer.commit(basket)
        assert exc_info.value.field == "checkout_at"
        self.assert_nothing_written()


@pytest.mark.django_db
class TestCommitFailure:
    """Write failures stop the commit without undoing written units."""

    def test_second_write_fails(self, failing_ledger, business_settings, staff):
        committer = TransactionCommitter(
            ledger=failing_ledger(fail_on=2), business=business_settings
        )
        basket = Basket(staff_id=str(staff.id), payment_method="card", services=(cut(3),))

        with pytest.raises(PartialCommitError) as exc_info:
            committer.commit(basket)

        error = exc_info.value
        assert str(error) == "1 of 3 committed"
        assert (error.committed, error.total) == (1, 3)

        record = TransactionRecord.objects.get()
        assert record.amount == Decimal("20.00")
        assert record.payment_method == "card"

        assert error.remainder.unit_count == 2
        assert error.remainder.services[0].quantity == 2

        attempt = CheckoutAttempt.objects.get()
        assert attempt.status == CheckoutAttempt.PARTIALLY_COMMITTED
        assert attempt.committed_units == 1
        assert attempt.error_message == "database unavailable"

    def test_partial_failure_skips_loyalty(
        self, failing_ledger, business_settings, staff, salon_client
    ):
        committer = TransactionCommitter(
            ledger=failing_ledger(fail_on=3), business=business_settings
        )
        basket = Basket(
            staff_id=str(staff.id),
            client_id=str(salon_client.id),
            payment_method="cash",
            services=(cut(3),),
        )

        with pytest.raises(PartialCommitError):
            committer.commit(basket)
        salon_client.refresh_from_db()

        assert TransactionRecord.objects.count() == 2
        assert salon_client.loyalty_points == 0
        assert salon_client.last_visit_at is None
        assert LoyaltyTransaction.objects.count() == 0

    def test_remainder_points_to_created_client(self, failing_ledger, business_settings, staff):
        committer = TransactionCommitter(
            ledger=failing_ledger(fail_on=2), business=business_settings
        )
        basket = Basket(
            staff_id=str(staff.id),
            payment_method="cash",
            services=(cut(),),
            products=(wax(),),
            new_client=NewClientDraft("Jane", "Doe", "0612345678"),
        )

        with pytest.raises(PartialCommitError) as exc_info:
            committer.commit(basket)

        client = Client.objects.get()
        remainder = exc_info.value.remainder
        assert remainder.client_id == client.id
        assert remainder.new_client is None
        assert remainder.services == ()
        assert remainder.products[0].quantity == 1

    def test_first_write_fails(self, failing_ledger, business_settings, staff):
        committer = TransactionCommitter(
            ledger=failing_ledger(fail_on=1), business=business_settings
        )
        basket = Basket(staff_id=str(staff.id), payment_method="cash", services=(cut(2),))

        with pytest.raises(TransientError):
            committer.commit(basket)

        assert TransactionRecord.objects.count() == 0
        attempt = CheckoutAttempt.objects.get()
        assert attempt.status == CheckoutAttempt.FAILED
        assert attempt.committed_units == 0

    def test_first_write_fails_after_client_created(
        self, failing_ledger, business_settings, staff
    ):
        committer = TransactionCommitter(
            ledger=failing_ledger(fail_on=1), business=business_settings
        )
        basket = Basket(
            staff_id=str(staff.id),
            payment_method="cash",
            services=(cut(2),),
            new_client=NewClientDraft("Jo", "Doe", "0612345678"),
        )

        with pytest.raises(TransientError) as exc_info:
            committer.commit(basket)

        client = Client.objects.get()
        remainder = exc_info.value.remainder
        assert remainder.client_id == client.id
        assert remainder.new_client is None
        assert remainder.unit_count == 2

        TransactionCommitter(business=business_settings).commit(remainder)

        assert Client.objects.count() == 1
        assert TransactionRecord.objects.filter(client=client).count() == 2

    def test_retrying_remainder_completes_basket(self, failing_ledger, business_settings, staff):
        failing = TransactionCommitter(
            ledger=failing_ledger(fail_on=2), business=business_settings
        )
        basket = Basket(staff_id=str(staff.id), payment_method="card", services=(cut(3),))

        with pytest.raises(PartialCommitError) as exc_info:
            failing.commit(basket)

        TransactionCommitter(business=business_settings).commit(exc_info.value.remainder)

        assert TransactionRecord.objects.count() == 3


@pytest.mark.django_db
class TestCommitProgress:
    """Persisted attempt progress next to the ledger writes."""

    def test_unsaved_progress_does_not_stop_commit(
        self, committer, staff, monkeypatch, caplog
    ):
        original_save = CheckoutAttempt.save

        def save(self, *args, **kwargs):
            if self.status != CheckoutAttempt.VALIDATING:
                raise DatabaseError("attempt table locked")
            return original_save(self, *args, **kwargs)

        monkeypatch.setattr(CheckoutAttempt, "save", save)
        basket = Basket(staff_id=str(staff.id), payment_method="cash", services=(cut(2),))

        with caplog.at_level(logging.ERROR, logger="apps.sales.commit_service"):
            result = committer.commit(basket)

        assert len(result.records) == 2
        assert TransactionRecord.objects.count() == 2
        assert any("not saved" in message for message in caplog.messages)
