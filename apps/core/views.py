"""
API views for staff members and business settings.
"""

import logging

from django.shortcuts import get_object_or_404

from rest_framework import generics, permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.exceptions import ValidationError
from apps.core.responses import error_response

from .models import BusinessSettings, StaffMember
from .serializers import (
    BusinessSettingsSerializer,
    CommissionUpdateSerializer,
    StaffMemberSerializer,
    VisibilityMaskSerializer,
)

logger = logging.getLogger(__name__)


class StaffMemberListCreateView(generics.ListCreateAPIView):
    """
    API endpoint for listing and creating staff members.

    Query parameters:
    - active: "true" to list active staff members only
    """

    serializer_class = StaffMemberSerializer
    permission_classes = [permissions.IsAuthenticated]
    pagination_class = None

    def get_queryset(self):
        queryset = StaffMember.objects.all()
        if self.request.query_params.get("active") == "true":
            queryset = queryset.filter(is_active=True)
        return queryset

    def perform_create(self, serializer):
        staff = serializer.save()
        logger.info(f"Staff member {staff.id} created")


class StaffMemberDetailView(generics.RetrieveUpdateDestroyAPIView):
    """
    API endpoint for reading, updating and deleting a staff member.

    PATCH accepts name, is_active (false to deactivate) and commission_percent.
    Deleting keeps the staff member's records; they become unattributed.
    """

    queryset = StaffMember.objects.all()
    serializer_class = StaffMemberSerializer
    permission_classes = [permissions.IsAuthenticated]
    lookup_url_kwarg = "staff_id"

    def perform_update(self, serializer):
        staff = serializer.save()
        logger.info(f"Staff member {staff.id} updated: {sorted(serializer.validated_data)}")

    def perform_destroy(self, instance):
        staff_id = instance.id
        instance.delete()
        logger.info(f"Staff member {staff_id} deleted")


@api_view(["PATCH"])
@permission_classes([permissions.IsAuthenticated])
def staff_commission(request, staff_id):
    """
    Set or clear a staff member's commission override.

    The value is clamped to [0, 100]. Only subsequent reports are affected.
    """
    staff = get_object_or_404(StaffMember, id=staff_id)

    serializer = CommissionUpdateSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    staff.set_commission(serializer.validated_data["commission_percent"])
    return Response(StaffMemberSerializer(staff).data, status=status.HTTP_200_OK)


@api_view(["PUT"])
@permission_classes([permissions.IsAuthenticated])
def staff_visibility_mask(request, staff_id):
    """
    Replace a staff member's visibility mask.

    Request body:
    {
        "hidden_months": [{"year": 2024, "month": 3}],
        "hidden_windows": [{"year": 2024, "month": 4, "start_day": 1, "end_day": 15}]
    }

    Entries left out are no longer hidden.
    """
    staff = get_object_or_404(StaffMember, id=staff_id)

    serializer = VisibilityMaskSerializer(data=request.data)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    try:
        staff.replace_visibility_mask(
            serializer.validated_data["hidden_months"],
            serializer.validated_data["hidden_windows"],
        )
    except ValidationError as e:
        logger.warning(f"Visibility mask refused for staff {staff.id}: {e.message}")
        return error_response(e)

    return Response(StaffMemberSerializer(staff).data, status=status.HTTP_200_OK)


@api_view(["GET", "PATCH"])
@permission_classes([permissions.IsAuthenticated])
def business_settings(request):
    """Read or partially update the business settings record."""
    instance = BusinessSettings.load()

    if request.method == "GET":
        return Response(BusinessSettingsSerializer(instance).data, status=status.HTTP_200_OK)

    serializer = BusinessSettingsSerializer(instance, data=request.data, partial=True)
    if not serializer.is_valid():
        return Response(serializer.errors, status=status.HTTP_400_BAD_REQUEST)

    serializer.save()
    logger.info(f"Business settings updated: {sorted(serializer.validated_data)}")
    return Response(serializer.data, status=status.HTTP_200_OK)
