from django.contrib import admin

from .models import Client, LoyaltyTransaction


class LoyaltyTransactionInline(admin.TabularInline):
    """Read-only loyalty history shown on the client page."""

    model = LoyaltyTransaction
    fk_name = "client"
    extra = 0
    can_delete = False
    fields = ["transaction_type", "points", "description", "staff", "timestamp"]
    readonly_fields = fields


@admin.register(Client)
class ClientAdmin(admin.ModelAdmin):
    """Admin interface for Client model."""

    list_display = ["name", "phone", "email", "loyalty_points", "created_at"]
    search_fields = ["name", "phone", "email"]
    readonly_fields = ["id", "loyalty_points", "last_visit_at", "created_at", "updated_at"]
    inlines = [LoyaltyTransactionInline]


@admin.register(LoyaltyTransaction)
class LoyaltyTransactionAdmin(admin.ModelAdmin):
    """Admin interface for LoyaltyTransaction model."""

    list_display = ["client", "transaction_type", "points", "staff", "timestamp"]
    list_filter = ["transaction_type"]
    search_fields = ["client__name", "description"]
    readonly_fields = [
        "id",
        "client",
        "transaction_type",
        "points",
        "description",
        "record",
        "staff",
        "timestamp",
        "created_at",
    ]

    def has_add_permission(self, request):
        return False
