"""
Django admin configuration for sales models.
"""

from django.contrib import admin

from .models import CheckoutAttempt, TransactionRecord


@admin.register(TransactionRecord)
class TransactionRecordAdmin(admin.ModelAdmin):
    """Admin interface for TransactionRecord model."""

    list_display = ["item_name", "kind", "amount", "payment_method", "staff", "client", "timestamp"]
    list_filter = ["kind", "payment_method"]
    search_fields = ["item_name", "catalog_item_id", "staff__name", "client__name"]
    readonly_fields = [
        "id",
        "kind",
        "staff",
        "client",
        "amount",
        "timestamp",
        "item_name",
        "catalog_item_id",
        "attempt",
        "created_at",
        "updated_at",
    ]

    def has_add_permission(self, request):
        return False


@admin.register(CheckoutAttempt)
class CheckoutAttemptAdmin(admin.ModelAdmin):
    """Admin interface for CheckoutAttempt model."""

    list_display = ["id", "status", "staff", "committed_units", "total_units", "created_at"]
    list_filter = ["status"]
    readonly_fields = [
        "id",
        "status",
        "staff",
        "client",
        "payment_method",
        "timestamp",
        "total_units",
        "committed_units",
        "error_message",
        "created_at",
        "updated_at",
    ]

    def has_add_permission(self, request):
        return False
