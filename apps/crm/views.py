"""
API views for clients and loyalty points.
"""

import logging

from django.db.models import Q
from django.shortcuts import get_object_or_404

from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.exceptions import ValidationError
from apps.core.models import StaffMember
from apps.core.responses import error_response

from . import services
from .models import Client
from .serializers import ClientSerializer, LoyaltyTransactionSerializer, PointsSerializer

logger = logging.getLogger(__name__)


class ClientListCreateView(generics.ListCreateAPIView):
    """
    API endpoint for listing and creating clients.

    Query parameters:
    - q: Search by name, phone or email
    """

    serializer_class = ClientSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = Client.objects.all()

        query = self.request.query_params.get("q", "").strip()
        if query:
            queryset = queryset.filter(
                Q(name__icontains=query) | Q(phone__icontains=query) | Q(email__icontains=query)
            )

        return queryset

    def perform_create(self, serializer):
        client = serializer.save()
        logger.info(f"Client {client.id} created")


class ClientDetailView(generics.RetrieveDestroyAPIView):
    """
    API endpoint for reading and deleting a client.

    Deleting a client removes its loyalty ledger and unlinks its records.
    """

    queryset = Client.objects.all()
    serializer_class = ClientSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_url_kwarg = "client_id"

    def perform_destroy(self, instance):
        client_id = instance.id
        instance.delete()
        logger.info(f"Client {client_id} deleted")


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def client_redeem(request, client_id):
    """
    Redeem loyalty points.

    Request body:
    {
        "points": 10,
        "reason": "free haircut" (optional),
        "staff_id": "uuid" (optional, attributes the redemption to a staff member)
    }
    """
    client = get_object_or_404(Client, id=client_id)

    serializer = PointsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    staff = None
    staff_id = serializer.validated_data.get("staff_id")
    if staff_id:
        staff = get_object_or_404(StaffMember, id=staff_id)

    try:
        client, entry = services.redeem(
            client,
            serializer.validated_data["points"],
            staff=staff,
            reason=serializer.validated_data["reason"],
        )
    except ValidationError as e:
        return error_response(e)

    return Response(
        {
            "client": ClientSerializer(client).data,
            "usage": LoyaltyTransactionSerializer(entry).data,
        },
        status=status.HTTP_200_OK,
    )


@api_view(["POST"])
@permission_classes([permissions.IsAuthenticated])
def client_add_points(request, client_id):
    """Manually add loyalty points to a client."""
    client = get_object_or_404(Client, id=client_id)

    serializer = PointsSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        client, _ = services.grant(
            client,
            serializer.validated_data["points"],
            reason=serializer.validated_data["reason"],
        )
    except ValidationError as e:
        return error_response(e)

    return Response({"client": ClientSerializer(client).data}, status=status.HTTP_200_OK)
