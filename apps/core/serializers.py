"""
Serializers for staff members and business settings.
"""

from rest_framework import serializers

from apps.core.exceptions import ValidationError as DomainValidationError

from .models import BusinessSettings, StaffMember, clamp_percent
from .time_resolver import TimeResolver


class StaffMemberSerializer(serializers.ModelSerializer):
    """Serializer for listing and creating staff members."""

    commission_percent = serializers.DecimalField(
        max_digits=7, decimal_places=2, required=False, allow_null=True
    )

    class Meta:
        model = StaffMember
        fields = [
            "id",
            "name",
            "commission_percent",
            "hidden_months",
            "hidden_windows",
            "is_active",
            "created_at",
        ]
        read_only_fields = ["id", "hidden_months", "hidden_windows", "created_at"]

    def validate_name(self, value):
        value = " ".join(value.split())
        if not value:
            raise serializers.ValidationError("Name is required.")
        return value

    def validate_commission_percent(self, value):
        if value is None:
            return value
        return clamp_percent(value)


class CommissionUpdateSerializer(serializers.Serializer):
    """Commission override; null clears it and falls back to the business default."""

    commission_percent = serializers.DecimalField(
        max_digits=7, decimal_places=2, allow_null=True
    )


class VisibilityMaskSerializer(serializers.Serializer):
    """Full replacement of a staff member's visibility mask."""

    hidden_months = serializers.ListField(child=serializers.DictField(), default=list)
    hidden_windows = serializers.ListField(child=serializers.DictField(), default=list)


class BusinessSettingsSerializer(serializers.ModelSerializer):
    """Serializer for reading and updating the business settings record."""

    default_commission_percent = serializers.DecimalField(
        max_digits=7, decimal_places=2, required=False
    )

    class Meta:
        model = BusinessSettings
        fields = [
            "business_name",
            "time_zone",
            "default_commission_percent",
            "phone_digits_required",
            "loyalty_points_per_service",
            "points_redeem_default",
            "updated_at",
        ]
        read_only_fields = ["updated_at"]

    def validate_time_zone(self, value):
        try:
            TimeResolver(value)
        except DomainValidationError as e:
            raise serializers.ValidationError(e.message)
        return value

    def validate_default_commission_percent(self, value):
        return clamp_percent(value)

    def validate_phone_digits_required(self, value):
        if value < 1:
            raise serializers.ValidationError("At least one digit is required.")
        return value
