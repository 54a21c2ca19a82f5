"""
Commission estimation.

Only service revenue earns commission; product sales never do. Amounts stay
exact Decimals and are only rounded to cents by CommissionEstimate.display().
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, Optional

from django.conf import settings

from apps.core.models import BusinessSettings

logger = logging.getLogger(__name__)

CENTS = Decimal("0.01")
HUNDRED = Decimal("100")
ZERO = Decimal("0")

RETROACTIVE = "retroactive"
EFFECTIVE_DATED = "effective_dated"


def to_cents(value):
    return Decimal(value).quantize(CENTS, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class CommissionEstimate:
    service_revenue: Decimal
    percent: Decimal
    amount: Decimal

    def display(self) -> Decimal:
        return to_cents(self.amount)

    def as_dict(self):
        return {
            "service_revenue": str(self.service_revenue),
            "percent": str(self.percent),
            "salary": str(self.display()),
        }


class CommissionEstimator:
    """
    Derive salary estimates from service revenue.

    The percentage of a staff member is their override, else the business
    default. Which default applies to a past period depends on the
    COMMISSION_DEFAULT_POLICY setting:
    - "retroactive": the current default, for every period
    - "effective_dated": the default in effect when the period started
    """

    def __init__(self, business=None, policy=None):
        self.business = business or BusinessSettings.load()
        self.policy = policy or settings.COMMISSION_DEFAULT_POLICY
        self._defaults = {}

    @staticmethod
    def estimate(service_revenue, percent) -> Decimal:
        return Decimal(service_revenue) * Decimal(percent) / HUNDRED

    def default_percent(self, period_start: Optional[int] = None) -> Decimal:
        if self.policy == EFFECTIVE_DATED and period_start is not None:
            if period_start not in self._defaults:
                self._defaults[period_start] = self.business.default_commission_at(period_start)
            return self._defaults[period_start]
        return self.business.default_commission_percent

    def percent_for(self, staff, period_start: Optional[int] = None) -> Decimal:
        if staff is not None and staff.commission_percent is not None:
            return staff.commission_percent
        return self.default_percent(period_start)

    def estimate_for(self, staff, service_revenue, period_start=None) -> CommissionEstimate:
        percent = self.percent_for(staff, period_start)
        return CommissionEstimate(
            service_revenue=Decimal(service_revenue),
            percent=percent,
            amount=self.estimate(service_revenue, percent),
        )

    def reconcile(
        self,
        business_result,
        attributed: Dict[object, Decimal],
        period_start: Optional[int] = None,
    ) -> Decimal:
        """
        Business-wide salary total.

        ``attributed`` maps staff members to their service revenue for the
        period. The engine's per-record salary sum wins when it was computed;
        otherwise known staff estimates are summed and revenue nobody is
        attributed to is estimated at the default percentage, so no revenue is
        counted twice.
        """
        if business_result.salary_total is not None:
            return business_result.salary_total

        known = ZERO
        attributed_revenue = ZERO
        for staff, revenue in attributed.items():
            known += self.estimate(revenue, self.percent_for(staff, period_start))
            attributed_revenue += Decimal(revenue)

        unattributed = max(ZERO, business_result.service_total.amount - attributed_revenue)
        if unattributed:
            logger.debug(f"Estimating {unattributed} of unattributed service revenue at default")
        return known + self.estimate(unattributed, self.default_percent(period_start))
