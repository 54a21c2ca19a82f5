"""
API views for revenue reports.

Every date parameter is a civil date in the business time zone.
"""

import logging
import uuid

from django.shortcuts import get_object_or_404

from rest_framework import permissions, status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.response import Response

from apps.core.exceptions import ValidationError
from apps.core.models import StaffMember
from apps.core.responses import error_response
from apps.core.time_resolver import (
    MAX_YEAR,
    MIN_YEAR,
    TimeResolver,
    parse_civil_date,
    parse_civil_month,
)
from apps.sales.serializers import TransactionRecordSerializer

from .aggregation import AggregationEngine, AggregationScope, DayWindow, MonthWindow, RangeWindow
from .services import CalendarReportService, PointsUsageReportService, StaffReportService

logger = logging.getLogger(__name__)


def _int_param(request, name, default, minimum, maximum):
    value = request.query_params.get(name)
    if value in (None, ""):
        return default
    try:
        value = int(value)
    except ValueError:
        raise ValidationError(f"'{name}' must be an integer", field=name)
    if not minimum <= value <= maximum:
        raise ValidationError(f"'{name}' must be between {minimum} and {maximum}", field=name)
    return value


def _uuid_param(value, name):
    try:
        return uuid.UUID(str(value))
    except ValueError:
        raise ValidationError(f"'{name}' must be a valid id", field=name)


def _window_from_params(request, resolver):
    params = request.query_params
    if params.get("day"):
        return DayWindow(parse_civil_date(params["day"], field="day"))
    if params.get("month"):
        return MonthWindow(*parse_civil_month(params["month"], field="month"))
    if params.get("start"):
        start = parse_civil_date(params["start"], field="start")
        end = parse_civil_date(params["end"], field="end") if params.get("end") else None
        return RangeWindow(start, end)
    if params.get("end"):
        raise ValidationError("A range needs a start date", field="start")
    return DayWindow(resolver.today())


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def aggregate(request):
    """
    Aggregate revenue for a staff member or the whole business.

    Query parameters:
    - staff: Staff member id; omitted for the whole business
    - day: YYYY-MM-DD
    - month: YYYY-MM
    - start, end: YYYY-MM-DD, inclusive; without end, the single start day
    Defaults to today.
    """
    try:
        engine = AggregationEngine()
        window = _window_from_params(request, engine.resolver)

        staff_id = request.query_params.get("staff")
        if staff_id:
            staff = get_object_or_404(StaffMember, id=_uuid_param(staff_id, "staff"))
            result = engine.aggregate(AggregationScope.staff(staff), window)
        else:
            result = engine.aggregate(AggregationScope.business(), window, include_salary=True)
    except ValidationError as e:
        return error_response(e)

    data = result.as_dict()
    data["scope"] = staff_id or "business"
    return Response(data, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def summary_report(request):
    """Business totals for today and the current month, with the last 10 services."""
    data = CalendarReportService().summary()
    data["latest_services"] = TransactionRecordSerializer(data["latest_services"], many=True).data
    return Response(data, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def report_by_day(request):
    """
    Business revenue per day of a month.

    Query parameters:
    - year, month: default to the current month
    """
    try:
        service = CalendarReportService()
        today = service.resolver.today()
        year = _int_param(request, "year", today.year, MIN_YEAR, MAX_YEAR)
        month = _int_param(request, "month", today.month, 1, 12)
        data = service.by_day(year, month)
    except ValidationError as e:
        return error_response(e)

    return Response(data, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def report_by_month(request):
    """Business revenue per month of a year (default: current year)."""
    try:
        service = CalendarReportService()
        year = _int_param(request, "year", service.resolver.today().year, MIN_YEAR, MAX_YEAR)
        data = service.by_month(year)
    except ValidationError as e:
        return error_response(e)

    return Response(data, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def salary_report(request):
    """
    Commission per staff member for a month and the business salary total.

    Query parameters:
    - month: YYYY-MM, defaults to the current month
    """
    try:
        service = CalendarReportService()
        if request.query_params.get("month"):
            year, month = parse_civil_month(request.query_params["month"])
        else:
            today = service.resolver.today()
            year, month = today.year, today.month
        data = service.salary(year, month)
    except ValidationError as e:
        return error_response(e)

    return Response(data, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def staff_breakdown(request, staff_id):
    """
    A staff member's day and month, with their visibility mask applied.

    Query parameters:
    - date: YYYY-MM-DD reference day, defaults to today
    """
    staff = get_object_or_404(StaffMember, id=staff_id)
    try:
        reference = None
        if request.query_params.get("date"):
            reference = parse_civil_date(request.query_params["date"], field="date")
        data = StaffReportService().breakdown(staff, reference)
    except ValidationError as e:
        return error_response(e)

    return Response(data, status=status.HTTP_200_OK)


@api_view(["GET"])
@permission_classes([permissions.IsAuthenticated])
def points_usage(request):
    """
    Loyalty redemptions grouped by staff member.

    Query parameters:
    - day: YYYY-MM-DD, defaults to today
    - month: YYYY-MM, defaults to the month of ``day``
    """
    try:
        resolver = TimeResolver.for_business()
        day = resolver.today()
        if request.query_params.get("day"):
            day = parse_civil_date(request.query_params["day"])
        if request.query_params.get("month"):
            year, month = parse_civil_month(request.query_params["month"])
        else:
            year, month = day.year, day.month
        data = PointsUsageReportService(resolver).build(day, year, month)
    except ValidationError as e:
        return error_response(e)

    return Response(data, status=status.HTTP_200_OK)
