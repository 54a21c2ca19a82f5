"""
API views for checkout and the transaction ledger.
"""

import logging
import uuid

from django.db import transaction

from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.exceptions import (
    NotFoundError,
    PartialCommitError,
    SalonLedgerError,
    TransientError,
    ValidationError,
)
from apps.core.responses import error_response
from apps.core.time_resolver import TimeResolver, parse_civil_date
from apps.crm.serializers import ClientSerializer

from .commit_service import TransactionCommitter
from .ledger import Ledger
from .models import TransactionRecord
from .serializers import (
    CheckoutAttemptSerializer,
    CheckoutSerializer,
    PaymentMethodCorrectionSerializer,
    TransactionRecordSerializer,
)

logger = logging.getLogger(__name__)


@transaction.non_atomic_requests
@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def checkout(request):
    """
    Commit a basket.

    Every unit is written by its own transaction, so this view opts out of
    ATOMIC_REQUESTS.

    Responses:
    - 201: every unit committed
    - 207: some units committed, body carries the remainder to retry
    - 400: basket refused, nothing written
    - 404: unknown staff member or client
    - 503: the first write failed, no unit written; body carries the remainder
    """
    serializer = CheckoutSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    basket = serializer.to_basket()
    try:
        result = TransactionCommitter().commit(basket)
    except ValidationError as e:
        logger.warning(f"Checkout refused on '{e.field}': {e.message}")
        return error_response(e)
    except NotFoundError as e:
        logger.warning(f"Checkout refused: {e}")
        return error_response(e)
    except PartialCommitError as e:
        return error_response(e)
    except TransientError as e:
        return error_response(e)

    return Response(
        {
            "attempt": CheckoutAttemptSerializer(result.attempt).data,
            "records": TransactionRecordSerializer(result.records, many=True).data,
            "client": ClientSerializer(result.client).data if result.client else None,
        },
        status=status.HTTP_201_CREATED,
    )


class TransactionRecordListView(generics.ListAPIView):
    """
    API endpoint for listing ledger records, newest first.

    Query parameters:
    - staff: Filter by staff member
    - day: Civil day in the business time zone (YYYY-MM-DD)
    - kind: service or product
    """

    serializer_class = TransactionRecordSerializer
    permission_classes = [permissions.IsAuthenticated]

    def list(self, request, *args, **kwargs):
        try:
            return super().list(request, *args, **kwargs)
        except ValidationError as e:
            return error_response(e)

    def get_queryset(self):
        queryset = TransactionRecord.objects.select_related("staff").order_by("-timestamp")

        staff_id = self.request.query_params.get("staff")
        if staff_id:
            try:
                queryset = queryset.filter(staff_id=uuid.UUID(staff_id))
            except ValueError:
                raise ValidationError("'staff' must be a valid id", field="staff")

        kind = self.request.query_params.get("kind")
        if kind:
            queryset = queryset.filter(kind=kind)

        day = self.request.query_params.get("day")
        if day:
            start, end = TimeResolver.for_business().day_bounds(parse_civil_date(day))
            queryset = queryset.filter(timestamp__gte=start, timestamp__lt=end)

        return queryset


@api_view(["DELETE"])
@permission_classes([permissions.IsAuthenticated])
def transaction_delete(request, record_id):
    """Delete a record; loyalty points it earned are taken back."""
    try:
        Ledger().delete_record(record_id)
    except SalonLedgerError as e:
        return error_response(e)

    return Response(status=status.HTTP_204_NO_CONTENT)


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def transaction_payment_method(request, record_id):
    """
    Correct the payment method of a record.

    Request body:
    {
        "kind": "service|product",
        "payment_method": "cash|voucher|card|mixed"
    }

    A kind that does not match the record answers 404.
    """
    serializer = PaymentMethodCorrectionSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        record = Ledger().correct_payment_method(
            record_id,
            serializer.validated_data["kind"],
            serializer.validated_data["payment_method"],
        )
    except SalonLedgerError as e:
        return error_response(e)

    return Response(TransactionRecordSerializer(record).data, status=status.HTTP_200_OK)
