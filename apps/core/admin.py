"""
Django admin configuration for core models.
"""

from django.contrib import admin

from .models import BusinessSettings, CommissionDefaultChange, StaffMember


@admin.register(BusinessSettings)
class BusinessSettingsAdmin(admin.ModelAdmin):
    """Admin interface for the business settings record."""

    list_display = [
        "business_name",
        "time_zone",
        "default_commission_percent",
        "phone_digits_required",
        "loyalty_points_per_service",
        "updated_at",
    ]

    readonly_fields = ["updated_at"]

    def has_add_permission(self, request):
        return not BusinessSettings.objects.exists()

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(CommissionDefaultChange)
class CommissionDefaultChangeAdmin(admin.ModelAdmin):
    """Read-only history of the default commission."""

    list_display = ["percent", "effective_from", "created_at"]
    readonly_fields = ["percent", "effective_from", "created_at"]

    def has_add_permission(self, request):
        return False


@admin.register(StaffMember)
class StaffMemberAdmin(admin.ModelAdmin):
    """Admin interface for StaffMember model."""

    list_display = ["name", "commission_percent", "is_active", "created_at"]
    list_filter = ["is_active"]
    search_fields = ["name"]
    readonly_fields = ["id", "created_at", "updated_at"]

    fieldsets = (
        ("Staff Member", {"fields": ("id", "name", "is_active")}),
        ("Commission", {"fields": ("commission_percent",)}),
        ("Visibility", {"fields": ("hidden_months", "hidden_windows")}),
        ("Timestamps", {"fields": ("created_at", "updated_at"), "classes": ("collapse",)}),
    )
