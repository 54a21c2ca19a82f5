"""
Serializers for checkout and transaction records.

Request serializers only check the shape of the payload; business validation
(positive prices, phone digits, payment methods allowed at checkout) is done by
TransactionCommitter so refusals carry the offending field.
"""

from rest_framework import serializers

from .basket import Basket, LineItem, NewClientDraft
from .models import CheckoutAttempt, TransactionRecord


class LineItemSerializer(serializers.Serializer):
    """One catalog item selection."""

    id = serializers.CharField(max_length=64)
    name = serializers.CharField(max_length=255)
    price = serializers.DecimalField(max_digits=12, decimal_places=2)
    quantity = serializers.IntegerField(default=1)


class NewClientSerializer(serializers.Serializer):
    first_name = serializers.CharField(allow_blank=True, trim_whitespace=False)
    last_name = serializers.CharField(allow_blank=True, trim_whitespace=False)
    phone = serializers.CharField(allow_blank=True)


class CheckoutSerializer(serializers.Serializer):
    """
    Checkout request.

    Request body:
    {
        "staff_id": "uuid",
        "client_id": "uuid" (optional),
        "new_client": {"first_name": "", "last_name": "", "phone": ""} (optional),
        "services": [{"id": "svc-1", "name": "Cut", "price": "20.00", "quantity": 1}],
        "products": [{"id": "prd-1", "name": "Wax", "price": "12.00", "quantity": 2}],
        "payment_method": "cash|voucher|card",
        "checkout_at": "YYYY-MM-DDTHH:MM" (optional, defaults to now)
    }
    """

    staff_id = serializers.CharField()
    client_id = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    new_client = NewClientSerializer(required=False, allow_null=True)
    services = LineItemSerializer(many=True, required=False, default=list)
    products = LineItemSerializer(many=True, required=False, default=list)
    payment_method = serializers.CharField()
    checkout_at = serializers.CharField(required=False, allow_null=True, allow_blank=True)

    def to_basket(self):
        data = self.validated_data
        new_client = data.get("new_client")
        return Basket(
            staff_id=data["staff_id"],
            client_id=data.get("client_id") or None,
            new_client=NewClientDraft(**new_client) if new_client else None,
            services=tuple(self._line(item) for item in data.get("services", [])),
            products=tuple(self._line(item) for item in data.get("products", [])),
            payment_method=data["payment_method"],
            checkout_at=data.get("checkout_at") or None,
        )

    @staticmethod
    def _line(item):
        return LineItem(
            catalog_item_id=item["id"],
            name=item["name"],
            unit_price=item["price"],
            quantity=item["quantity"],
        )


class TransactionRecordSerializer(serializers.ModelSerializer):
    """Serializer for ledger records."""

    staff_name = serializers.CharField(source="staff.name", read_only=True, default=None)

    class Meta:
        model = TransactionRecord
        fields = [
            "id",
            "kind",
            "staff",
            "staff_name",
            "client",
            "amount",
            "payment_method",
            "timestamp",
            "item_name",
            "catalog_item_id",
            "attempt",
        ]
        read_only_fields = fields


class CheckoutAttemptSerializer(serializers.ModelSerializer):
    class Meta:
        model = CheckoutAttempt
        fields = [
            "id",
            "status",
            "total_units",
            "committed_units",
            "payment_method",
            "timestamp",
            "error_message",
        ]
        read_only_fields = fields


class PaymentMethodCorrectionSerializer(serializers.Serializer):
    kind = serializers.ChoiceField(choices=TransactionRecord.KIND_CHOICES)
    payment_method = serializers.CharField()
