"""
Tests for commission estimation and business salary reconciliation.
"""

from decimal import Decimal

import pytest

from apps.core.models import CommissionDefaultChange
from apps.reporting.aggregation import AggregationResult, Bucket
from apps.reporting.commission import (
    EFFECTIVE_DATED,
    RETROACTIVE,
    CommissionEstimate,
    CommissionEstimator,
)


class TestEstimate:
    def test_half_of_service_revenue(self):
        assert CommissionEstimator.estimate(Decimal("1000"), Decimal("50")) == Decimal("500")

    def test_exact_until_display(self):
        amount = CommissionEstimator.estimate(Decimal("33.35"), Decimal("50"))
        estimate = CommissionEstimate(Decimal("33.35"), Decimal("50"), amount)

        assert amount == Decimal("16.675")
        assert estimate.display() == Decimal("16.68")
        assert estimate.as_dict()["salary"] == "16.68"


@pytest.mark.django_db
class TestPercentResolution:
    def test_override_wins(self, business_settings, other_staff):
        estimator = CommissionEstimator(business=business_settings)
        assert estimator.percent_for(other_staff) == Decimal("40")

    def test_default_when_no_override(self, business_settings, staff):
        estimator = CommissionEstimator(business=business_settings)
        assert estimator.percent_for(staff) == Decimal("50")
        assert estimator.percent_for(None) == Decimal("50")

    def test_override_is_clamped(self, staff):
        staff.set_commission(Decimal("150"))
        assert staff.commission_percent == Decimal("100")

        staff.set_commission(Decimal("-5"))
        assert staff.commission_percent == Decimal("0")

        staff.set_commission(None)
        assert staff.commission_percent is None

    def test_default_change_is_recorded(self, business_settings):
        business_settings.default_commission_percent = Decimal("30")
        business_settings.save()

        changes = CommissionDefaultChange.objects.order_by("effective_from")
        assert [change.percent for change in changes] == [Decimal("50"), Decimal("30")]
        assert changes[0].effective_from == 0

    def test_retroactive_policy_uses_current_default(self, business_settings, resolver):
        business_settings.default_commission_percent = Decimal("30")
        business_settings.save()
        period_start = resolver.to_instant("2024-03-01T00:00")

        estimator = CommissionEstimator(business=business_settings, policy=RETROACTIVE)
        assert estimator.default_percent(period_start) == Decimal("30")

    def test_effective_dated_policy_uses_default_of_period(self, business_settings, resolver):
        business_settings.default_commission_percent = Decimal("30")
        business_settings.save()
        period_start = resolver.to_instant("2024-03-01T00:00")

        estimator = CommissionEstimator(business=business_settings, policy=EFFECTIVE_DATED)
        assert estimator.default_percent(period_start) == Decimal("50")
        assert estimator.default_percent(resolver.now_ms()) == Decimal("30")

    def test_policy_read_from_settings(self, business_settings, settings):
        settings.COMMISSION_DEFAULT_POLICY = EFFECTIVE_DATED
        assert CommissionEstimator(business=business_settings).policy == EFFECTIVE_DATED


@pytest.mark.django_db
class TestReconcile:
    def test_engine_total_wins(self, business_settings):
        result = AggregationResult(salary_total=Decimal("123.45"))
        estimator = CommissionEstimator(business=business_settings)

        assert estimator.reconcile(result, {}) == Decimal("123.45")

    def test_unattributed_revenue_at_default(self, business_settings, other_staff):
        result = AggregationResult(service_total=Bucket(Decimal("300"), 3))
        estimator = CommissionEstimator(business=business_settings)

        # 100 at 40% for other_staff, the remaining 200 at the 50% default
        total = estimator.reconcile(result, {other_staff: Decimal("100")})
        assert total == Decimal("140")

    def test_attributed_revenue_not_counted_twice(self, business_settings, staff, other_staff):
        result = AggregationResult(service_total=Bucket(Decimal("200"), 2))
        estimator = CommissionEstimator(business=business_settings)

        total = estimator.reconcile(
            result, {staff: Decimal("100"), other_staff: Decimal("100")}
        )
        assert total == Decimal("90")
