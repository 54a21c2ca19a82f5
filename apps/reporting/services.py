"""
Calendar reports for the salon.

- Summary: today and the current month, with the latest services
- By-day report: one row per civil day of a month
- By-month report: one row per month of a year
- Salary report: per-staff commission for a month, reconciled business total
- Staff breakdown: a staff member's day and month, as that staff member sees it
- Points usage: redemptions attributed to staff, for a day and for a month
"""

import calendar
import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from apps.core.models import StaffMember
from apps.core.time_resolver import DATE_FORMAT, MONTH_FORMAT
from apps.crm.models import LoyaltyTransaction, split_name_parts
from apps.sales.models import TransactionRecord

from .aggregation import (
    AggregationEngine,
    AggregationResult,
    AggregationScope,
    DayWindow,
    MonthWindow,
)
from .commission import to_cents

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "Unknown client"


class CalendarReportService:
    """
    Business-wide reports bucketed by civil day or month.

    Rows are built from a single pass over the period's records; no visibility
    mask applies to business reports.
    """

    def __init__(self, engine: Optional[AggregationEngine] = None):
        self.engine = engine or AggregationEngine()
        self.resolver = self.engine.resolver

    def _row(self, result: AggregationResult, salary: Decimal) -> Dict[str, Any]:
        return {
            "amount": str(result.total.amount),
            "count": result.total.count,
            "salary": str(to_cents(salary)),
            "product_count": result.product_count,
            "methods": {method: bucket.as_dict() for method, bucket in result.methods.items()},
        }

    def summary(self, latest: int = 10) -> Dict[str, Any]:
        """Totals for today and the current month, plus the latest service records."""
        today = self.resolver.today()
        scope = AggregationScope.business()
        daily = self.engine.aggregate(scope, DayWindow(today))
        monthly = self.engine.aggregate(scope, MonthWindow(today.year, today.month))
        latest_services = (
            TransactionRecord.objects.filter(kind=TransactionRecord.SERVICE)
            .select_related("staff")
            .order_by("-timestamp", "-created_at")[:latest]
        )

        return {
            "date": today.strftime(DATE_FORMAT),
            "daily": daily.as_dict(include_records=False),
            "monthly": monthly.as_dict(include_records=False),
            "latest_services": list(latest_services),
        }

    def by_day(self, year: int, month: int) -> Dict[str, Any]:
        """
        One row per day of the month.

        For the current month, rows stop at today.
        """
        window = MonthWindow(year, month)
        period_start, _ = window.bounds(self.resolver)
        records = self.engine.qualifying_records(AggregationScope.business(), window)

        per_day = defaultdict(list)
        for record in records:
            per_day[self.resolver.civil_date(record.timestamp)].append(record)

        today = self.resolver.today()
        last_day = calendar.monthrange(year, month)[1]
        if (year, month) == (today.year, today.month):
            last_day = today.day

        days = []
        for day_number in range(1, last_day + 1):
            day = date(year, month, day_number)
            day_records = per_day.get(day, [])
            result = self.engine.summarize(day_records)
            salary = self.engine.salary_of(day_records, period_start)
            days.append({"date": day.strftime(DATE_FORMAT), **self._row(result, salary)})

        month_result = self.engine.summarize(
            records, include_salary=True, period_start=period_start
        )
        return {
            "days": days,
            "total": month_result.total.as_dict(),
            "methods": {k: v.as_dict() for k, v in month_result.methods.items()},
            "product_count": month_result.product_count,
            "salary_total": str(to_cents(month_result.salary_total)),
        }

    def by_month(self, year: int) -> Dict[str, Any]:
        """
        One row per month of the year.

        For the current year, rows stop at the current month.
        """
        today = self.resolver.today()
        last_month = today.month if year == today.year else 12

        months = []
        year_total = AggregationResult()
        year_salary = Decimal("0")
        for month in range(1, last_month + 1):
            window = MonthWindow(year, month)
            period_start, _ = window.bounds(self.resolver)
            records = self.engine.qualifying_records(AggregationScope.business(), window)
            result = self.engine.summarize(records)
            salary = self.engine.salary_of(records, period_start)

            for record in records:
                year_total.add(record)
            year_salary += salary

            months.append(
                {"month": date(year, month, 1).strftime(MONTH_FORMAT), **self._row(result, salary)}
            )

        return {
            "months": months,
            "total": year_total.total.as_dict(),
            "methods": {k: v.as_dict() for k, v in year_total.methods.items()},
            "product_count": year_total.product_count,
            "salary_total": str(to_cents(year_salary)),
        }

    def salary(self, year: int, month: int) -> Dict[str, Any]:
        """Commission per staff member for a month, plus the reconciled business total."""
        window = MonthWindow(year, month)
        period_start, _ = window.bounds(self.resolver)
        estimator = self.engine.estimator

        revenue_by_staff = self.engine.service_revenue_by_staff(window)
        unattributed = revenue_by_staff.pop(None, Decimal("0"))
        staff_by_id = StaffMember.objects.in_bulk(list(revenue_by_staff))

        rows = []
        attributed = {}
        for staff_id, revenue in revenue_by_staff.items():
            staff = staff_by_id.get(staff_id)
            attributed[staff] = revenue
            estimate = estimator.estimate_for(staff, revenue, period_start)
            rows.append(
                {
                    "staff_id": str(staff_id),
                    "staff_name": staff.name if staff else "",
                    **estimate.as_dict(),
                }
            )
        rows.sort(key=lambda row: row["staff_name"].casefold())

        business = self.engine.aggregate(
            AggregationScope.business(), window, include_salary=True
        )
        total = estimator.reconcile(business, attributed, period_start)

        return {
            "month": date(year, month, 1).strftime(MONTH_FORMAT),
            "staff": rows,
            "unattributed_service_revenue": str(unattributed),
            "default_percent": str(estimator.default_percent(period_start)),
            "service_revenue": str(business.service_total.amount),
            "salary_total": str(to_cents(total)),
        }


class StaffReportService:
    """Reports seen from one staff member's point of view (masked)."""

    def __init__(self, engine: Optional[AggregationEngine] = None):
        self.engine = engine or AggregationEngine()
        self.resolver = self.engine.resolver

    def breakdown(self, staff: StaffMember, reference: Optional[date] = None) -> Dict[str, Any]:
        """
        Day and month aggregates for ``staff`` around ``reference`` (default today).

        Includes the itemized entries of the day and the points the staff member
        had clients redeem.
        """
        reference = reference or self.resolver.today()
        scope = AggregationScope.staff(staff)
        day_window = DayWindow(reference)
        month_window = MonthWindow(reference.year, reference.month)

        daily = self.engine.aggregate(scope, day_window)
        monthly = self.engine.aggregate(scope, month_window)

        month_start, _ = month_window.bounds(self.resolver)
        estimate = self.engine.estimator.estimate_for(
            staff, monthly.service_total.amount, month_start
        )

        return {
            "staff_id": str(staff.id),
            "staff_name": staff.name,
            "date": reference.strftime(DATE_FORMAT),
            "daily": daily.as_dict(include_records=False),
            "monthly": monthly.as_dict(include_records=False),
            "daily_entries": daily.records,
            "daily_points_used": self._points_used(staff, day_window),
            "monthly_points_used": self._points_used(staff, month_window),
            "commission": estimate.as_dict(),
        }

    def _points_used(self, staff, window):
        start, end = window.bounds(self.resolver)
        points = LoyaltyTransaction.objects.filter(
            staff=staff,
            transaction_type=LoyaltyTransaction.REDEEMED,
            timestamp__gte=start,
            timestamp__lt=end,
        ).values_list("points", flat=True)
        return sum(-value for value in points)


class PointsUsageReportService:
    """Redemptions grouped by the staff member they are attributed to."""

    def __init__(self, resolver):
        self.resolver = resolver

    def build(self, day: date, year: int, month: int) -> Dict[str, Any]:
        return {
            "daily": self._groups(DayWindow(day)),
            "monthly": self._groups(MonthWindow(year, month)),
            "generated_at": self.resolver.now_ms(),
        }

    def _groups(self, window) -> List[Dict[str, Any]]:
        start, end = window.bounds(self.resolver)
        redemptions = (
            LoyaltyTransaction.objects.filter(
                transaction_type=LoyaltyTransaction.REDEEMED,
                staff__isnull=False,
                timestamp__gte=start,
                timestamp__lt=end,
            )
            .select_related("staff", "client")
            .order_by("-timestamp")
        )

        groups = {}
        for usage in redemptions:
            group = groups.setdefault(
                usage.staff_id,
                {
                    "staff_id": str(usage.staff_id),
                    "staff_name": usage.staff.name,
                    "total_points": 0,
                    "entries": [],
                },
            )
            client = usage.client
            first_name, last_name = split_name_parts(client.name)
            points = -usage.points
            group["total_points"] += points
            group["entries"].append(
                {
                    "id": str(usage.id),
                    "client_id": str(client.id),
                    "points": points,
                    "timestamp": usage.timestamp,
                    "reason": usage.description,
                    "client_name": client.name.strip() or UNKNOWN_CLIENT,
                    "first_name": first_name,
                    "last_name": last_name,
                    "email": client.email or None,
                    "phone": client.phone or None,
                }
            )

        return sorted(groups.values(), key=lambda group: group["staff_name"].casefold())
