"""
Revenue aggregation over the transaction ledger.

A query is a scope (one staff member, or the whole business) and a window (a
civil day, a civil month, or an inclusive range of civil days), resolved to
half-open epoch millisecond bounds in the business time zone.

Staff scope applies the staff member's visibility mask; business scope never
does.
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from apps.core.exceptions import ValidationError
from apps.core.time_resolver import TimeResolver
from apps.core.visibility import VisibilityMask
from apps.sales.models import TransactionRecord

from .commission import CommissionEstimator

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


@dataclass(frozen=True)
class DayWindow:
    day: date

    def bounds(self, resolver):
        return resolver.day_bounds(self.day)


@dataclass(frozen=True)
class MonthWindow:
    year: int
    month: int

    def bounds(self, resolver):
        if not 1 <= self.month <= 12:
            raise ValidationError("Month must be between 1 and 12", field="month")
        return resolver.month_bounds(self.year, self.month)


@dataclass(frozen=True)
class RangeWindow:
    start: date
    end: Optional[date] = None

    def bounds(self, resolver):
        # A range without an end is the single day it starts on
        if self.end is None:
            return DayWindow(self.start).bounds(resolver)
        if self.end < self.start:
            raise ValidationError("Range end is before range start", field="end")
        return resolver.range_bounds(self.start, self.end)


class AggregationScope:
    """Either one staff member (masked) or the whole business (unmasked)."""

    def __init__(self, member=None):
        self.member = member

    @classmethod
    def staff(cls, member):
        return cls(member=member)

    @classmethod
    def business(cls):
        return cls()

    @property
    def is_business(self):
        return self.member is None

    @property
    def mask(self):
        if self.member is None:
            return VisibilityMask()
        return self.member.visibility_mask

    def __repr__(self):
        if self.is_business:
            return "AggregationScope(business)"
        return f"AggregationScope({self.member})"


@dataclass
class Bucket:
    amount: Decimal = ZERO
    count: int = 0

    def add(self, amount):
        self.amount += amount
        self.count += 1

    def as_dict(self):
        return {"amount": str(self.amount), "count": self.count}


def empty_methods():
    return {method: Bucket() for method in TransactionRecord.PAYMENT_METHODS}


@dataclass
class AggregationResult:
    total: Bucket = field(default_factory=Bucket)
    service_total: Bucket = field(default_factory=Bucket)
    methods: Dict[str, Bucket] = field(default_factory=empty_methods)
    product_count: int = 0
    service_count: int = 0
    records: List[dict] = field(default_factory=list)
    salary_total: Optional[Decimal] = None

    def add(self, record):
        self.total.add(record.amount)
        self.methods[record.payment_method].add(record.amount)
        if record.kind == TransactionRecord.SERVICE:
            self.service_total.add(record.amount)
            self.service_count += 1
        else:
            self.product_count += 1
        self.records.append(
            {
                "id": str(record.id),
                "kind": record.kind,
                "amount": str(record.amount),
                "payment_method": record.payment_method,
                "timestamp": record.timestamp,
                "item_name": record.item_name,
                "staff_id": str(record.staff_id) if record.staff_id else None,
            }
        )

    def as_dict(self, include_records=True):
        data = {
            "total": self.total.as_dict(),
            "service_total": self.service_total.as_dict(),
            "methods": {method: bucket.as_dict() for method, bucket in self.methods.items()},
            "product_count": self.product_count,
            "service_count": self.service_count,
            "salary_total": None if self.salary_total is None else str(self.salary_total),
        }
        if include_records:
            data["records"] = self.records
        return data


class AggregationEngine:
    """
    Aggregate ledger records for a scope and a window.

    Usage:
        engine = AggregationEngine()
        result = engine.aggregate(AggregationScope.staff(member), MonthWindow(2024, 3))
    """

    def __init__(self, resolver=None, estimator=None):
        self.resolver = resolver or TimeResolver.for_business()
        self._estimator = estimator

    @property
    def estimator(self):
        if self._estimator is None:
            self._estimator = CommissionEstimator()
        return self._estimator

    def qualifying_records(self, scope, window):
        """Records of ``scope`` inside ``window``, newest first, mask applied."""
        start, end = window.bounds(self.resolver)
        queryset = TransactionRecord.objects.filter(timestamp__gte=start, timestamp__lt=end)
        if not scope.is_business:
            queryset = queryset.filter(staff=scope.member)
        queryset = queryset.select_related("staff").order_by("-timestamp", "-created_at")

        mask = scope.mask
        if mask.is_empty:
            return list(queryset)

        visible = []
        for record in queryset:
            civil = self.resolver.civil_date(record.timestamp)
            if not mask.hides(civil.year, civil.month, civil.day):
                visible.append(record)
        return visible

    def summarize(self, records, include_salary=False, period_start=None):
        result = AggregationResult()
        for record in records:
            result.add(record)
        if include_salary:
            result.salary_total = self.salary_of(records, period_start)
        return result

    def salary_of(self, records, period_start=None):
        """Per-record commission sum over the service records in ``records``."""
        salary = ZERO
        for record in records:
            if record.kind != TransactionRecord.SERVICE:
                continue
            percent = self.estimator.percent_for(record.staff, period_start)
            salary += self.estimator.estimate(record.amount, percent)
        return salary

    def aggregate(self, scope, window, include_salary=False):
        start, _ = window.bounds(self.resolver)
        records = self.qualifying_records(scope, window)
        return self.summarize(records, include_salary=include_salary, period_start=start)

    def service_revenue_by_staff(self, window):
        """Unmasked service revenue keyed by staff id; unattributed records under None."""
        start, end = window.bounds(self.resolver)
        revenue = defaultdict(lambda: ZERO)
        rows = TransactionRecord.objects.filter(
            kind=TransactionRecord.SERVICE, timestamp__gte=start, timestamp__lt=end
        ).values_list("staff_id", "amount")
        for staff_id, amount in rows:
            revenue[staff_id] += amount
        return dict(revenue)
