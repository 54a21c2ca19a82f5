"""
Serializers for clients and loyalty operations.
"""

import re

from rest_framework import serializers

from .models import Client, LoyaltyTransaction

PHONE_PATTERN = re.compile(r"^[+\d(][\d().\-\s]{5,}$")


class ClientSerializer(serializers.ModelSerializer):
    """Serializer for listing and creating clients."""

    first_name = serializers.SerializerMethodField()
    last_name = serializers.SerializerMethodField()

    class Meta:
        model = Client
        fields = [
            "id",
            "name",
            "first_name",
            "last_name",
            "phone",
            "email",
            "loyalty_points",
            "last_visit_at",
            "created_at",
        ]
        read_only_fields = ["id", "loyalty_points", "last_visit_at", "created_at"]

    def get_first_name(self, obj):
        return obj.get_name_parts()[0]

    def get_last_name(self, obj):
        return obj.get_name_parts()[1]

    def validate_name(self, value):
        value = " ".join(value.split())
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_email(self, value):
        return value.strip().lower()

    def validate_phone(self, value):
        value = re.sub(r"[^+\d().\-\s]", "", value.strip())
        if value and not PHONE_PATTERN.match(value):
            raise serializers.ValidationError("Invalid phone number.")
        return value


class PointsSerializer(serializers.Serializer):
    """Points amount for a redemption or a manual grant."""

    points = serializers.IntegerField()
    reason = serializers.CharField(required=False, allow_blank=True, max_length=255, default="")
    staff_id = serializers.UUIDField(required=False, allow_null=True)


class LoyaltyTransactionSerializer(serializers.ModelSerializer):
    """Serializer for loyalty ledger entries."""

    class Meta:
        model = LoyaltyTransaction
        fields = [
            "id",
            "transaction_type",
            "points",
            "description",
            "record",
            "staff",
            "timestamp",
        ]
