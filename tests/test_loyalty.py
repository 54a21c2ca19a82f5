"""
Tests for loyalty point redemptions and manual grants.
"""

import pytest

from apps.core.exceptions import ValidationError
from apps.crm import services as loyalty
from apps.crm.models import LoyaltyTransaction


@pytest.mark.django_db
class TestRedeem:
    def test_redeem_debits_balance(self, salon_client, staff):
        loyalty.grant(salon_client, 20)

        client, entry = loyalty.redeem(salon_client, 5, staff=staff, reason="free fringe")

        assert client.loyalty_points == 15
        assert entry.transaction_type == LoyaltyTransaction.REDEEMED
        assert entry.points == -5
        assert entry.staff == staff
        assert entry.description == "free fringe"

    def test_redeem_more_than_balance(self, salon_client):
        loyalty.grant(salon_client, 3)

        with pytest.raises(ValidationError) as exc_info:
            loyalty.redeem(salon_client, 4)

        assert exc_info.value.field == "points"
        salon_client.refresh_from_db()
        assert salon_client.loyalty_points == 3

    @pytest.mark.parametrize("points", [0, -5, True])
    def test_redeem_requires_positive_points(self, salon_client, points):
        with pytest.raises(ValidationError):
            loyalty.redeem(salon_client, points)


@pytest.mark.django_db
class TestGrant:
    def test_grant_adds_points(self, salon_client):
        client, entry = loyalty.grant(salon_client, 7)

        assert client.loyalty_points == 7
        assert entry.transaction_type == LoyaltyTransaction.ADJUSTED
        assert entry.description == "Points added: 7"

    def test_balance_matches_entries(self, salon_client, staff):
        loyalty.grant(salon_client, 10)
        loyalty.redeem(salon_client, 4, staff=staff)
        loyalty.grant(salon_client, 2, reason="birthday")

        salon_client.refresh_from_db()
        entries = LoyaltyTransaction.objects.filter(client=salon_client)
        assert salon_client.loyalty_points == sum(entry.points for entry in entries) == 8

    def test_grant_rejects_zero(self, salon_client):
        with pytest.raises(ValidationError):
            loyalty.grant(salon_client, 0)
