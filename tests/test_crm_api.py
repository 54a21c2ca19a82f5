"""
Tests for client and loyalty endpoints.
"""

import uuid

from django.urls import reverse

import pytest
from rest_framework import status

from apps.crm import services as loyalty
from apps.crm.models import Client, LoyaltyTransaction


@pytest.mark.django_db
class TestClientEndpoints:
    def test_create_client(self, authenticated_client):
        response = authenticated_client.post(
            reverse("crm:client_list"),
            {
                "name": "  Jane   de la Cruz ",
                "email": "JANE@EXAMPLE.COM",
                "phone": "06 12 34 56 78",
            },
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["name"] == "Jane de la Cruz"
        assert response.data["first_name"] == "Jane"
        assert response.data["last_name"] == "de la Cruz"
        assert response.data["email"] == "jane@example.com"
        assert response.data["loyalty_points"] == 0

    def test_create_client_invalid_phone(self, authenticated_client):
        response = authenticated_client.post(
            reverse("crm:client_list"), {"name": "Jane Doe", "phone": "12"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert "phone" in response.data

    def test_search(self, authenticated_client, salon_client):
        Client.objects.create(name="John Smith")

        response = authenticated_client.get(reverse("crm:client_list"), {"q": "jane"})

        assert response.status_code == status.HTTP_200_OK
        assert [client["name"] for client in response.data["results"]] == ["Jane Doe"]


    def test_delete_unlinks_records(self, authenticated_client, salon_client, staff, make_record):
        record = make_record(staff, "20.00", "2024-03-15T10:00", client=salon_client)
        loyalty.grant(salon_client, 5)

        response = authenticated_client.delete(
            reverse("crm:client_detail", args=[salon_client.id])
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert not Client.objects.filter(id=salon_client.id).exists()
        assert not LoyaltyTransaction.objects.exists()
        record.refresh_from_db()
        assert record.client is None

    def test_delete_unknown_client(self, authenticated_client, db):
        response = authenticated_client.delete(reverse("crm:client_detail", args=[uuid.uuid4()]))

        assert response.status_code == status.HTTP_404_NOT_FOUND


@pytest.mark.django_db
class TestLoyaltyEndpoints:
    def test_redeem(self, authenticated_client, salon_client, staff):
        loyalty.grant(salon_client, 20)

        response = authenticated_client.post(
            reverse("crm:client_redeem", args=[salon_client.id]),
            {"points": 5, "staff_id": str(staff.id), "reason": "free fringe"},
            format="json",
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["client"]["loyalty_points"] == 15
        assert response.data["usage"]["points"] == -5
        assert response.data["usage"]["transaction_type"] == LoyaltyTransaction.REDEEMED

    def test_redeem_over_balance(self, authenticated_client, salon_client):
        response = authenticated_client.post(
            reverse("crm:client_redeem", args=[salon_client.id]), {"points": 5}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["field"] == "points"

    def test_redeem_unknown_staff(self, authenticated_client, salon_client):
        loyalty.grant(salon_client, 20)

        response = authenticated_client.post(
            reverse("crm:client_redeem", args=[salon_client.id]),
            {"points": 5, "staff_id": str(uuid.uuid4())},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_add_points(self, authenticated_client, salon_client):
        response = authenticated_client.post(
            reverse("crm:client_add_points", args=[salon_client.id]), {"points": 12}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["client"]["loyalty_points"] == 12

    def test_unknown_client(self, authenticated_client, db):
        response = authenticated_client.post(
            reverse("crm:client_add_points", args=[uuid.uuid4()]), {"points": 12}, format="json"
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
