"""
Pytest configuration and fixtures for the salon point-of-sale platform.
"""

from decimal import Decimal

import pytest

from apps.core.exceptions import TransientError
from apps.core.models import BusinessSettings, StaffMember
from apps.core.time_resolver import TimeResolver
from apps.crm.models import Client
from apps.sales.ledger import Ledger
from apps.sales.models import TransactionRecord


class FailingLedger(Ledger):
    """Ledger whose n-th write raises TransientError."""

    def __init__(self, fail_on):
        self.fail_on = fail_on
        self.calls = 0

    def write(self, unit, *args, **kwargs):
        self.calls += 1
        if self.calls == self.fail_on:
            raise TransientError("database unavailable")
        return super().write(unit, *args, **kwargs)


@pytest.fixture
def failing_ledger():
    """Factory for a ledger that fails on its n-th write."""
    return FailingLedger


@pytest.fixture
def api_client():
    """
    Fixture for Django REST framework API client.
    """
    from rest_framework.test import APIClient

    return APIClient()


@pytest.fixture
def authenticated_client(api_client, django_user_model):
    """
    Fixture for authenticated API client.
    """
    user = django_user_model.objects.create_user(
        username="testuser", email="test@example.com", password="testpass123"
    )
    api_client.force_authenticate(user=user)
    return api_client


@pytest.fixture
def business_settings(db):
    """Settings record seeded from the test settings (Europe/Paris, 50%, 10 digits)."""
    return BusinessSettings.load()


@pytest.fixture
def resolver(business_settings):
    return TimeResolver(business_settings.time_zone)


@pytest.fixture
def staff(db):
    return StaffMember.objects.create(name="Alice Martin")


@pytest.fixture
def other_staff(db):
    return StaffMember.objects.create(name="bob Durand", commission_percent=Decimal("40"))


@pytest.fixture
def salon_client(db):
    return Client.objects.create(name="Jane Doe", phone="0612345678", email="jane@example.com")


@pytest.fixture
def make_record(resolver):
    """Create a ledger record at a civil date-time in the business zone."""

    def _make(
        staff, amount, civil, kind=TransactionRecord.SERVICE, payment_method="cash", client=None
    ):
        return TransactionRecord.objects.create(
            kind=kind,
            staff=staff,
            client=client,
            amount=Decimal(amount),
            payment_method=payment_method,
            timestamp=resolver.to_instant(civil),
            item_name="Cut" if kind == TransactionRecord.SERVICE else "Wax",
            catalog_item_id="svc-1" if kind == TransactionRecord.SERVICE else "prd-1",
        )

    return _make
