"""Tests for EntitlementEvaluator — admission, capabilities and quotas."""

from __future__ import annotations

import pytest

from bizcore.catalog.plans import PLAN_LIMITS, PLAN_ORDER
from bizcore.core.types import (
    UNLIMITED,
    Capability,
    Capped,
    Resource,
    SubscriptionPlan,
    Usage,
)
from bizcore.entitlements.evaluator import EntitlementEvaluator, admits


class TestAdmits:
    def test_strict_cap(self) -> None:
        assert admits(Capped(2), 1) is True
        assert admits(Capped(2), 2) is False
        assert admits(Capped(2), 3) is False

    def test_zero_cap_admits_nothing(self) -> None:
        assert admits(Capped(0), 0) is False

    def test_unlimited_always_admits(self) -> None:
        assert admits(UNLIMITED, 0) is True
        assert admits(UNLIMITED, 10**9) is True


class TestAdmission:
    def test_base_branch_boundary(self) -> None:
        assert EntitlementEvaluator("base", {"branches": 1}).can_add_branch() is True
        assert EntitlementEvaluator("base", {"branches": 2}).can_add_branch() is False

    def test_free_staff_boundary(self) -> None:
        assert EntitlementEvaluator("free", Usage(staff=2)).can_add_staff() is True
        assert EntitlementEvaluator("free", Usage(staff=3)).can_add_staff() is False

    def test_pro_business_boundary(self) -> None:
        assert EntitlementEvaluator("pro", Usage(businesses=9)).can_add_business() is True
        assert EntitlementEvaluator("pro", Usage(businesses=10)).can_add_business() is False

    def test_enterprise_never_denies(self) -> None:
        huge = Usage(businesses=10_000, branches=10_000, staff=10_000)
        evaluator = EntitlementEvaluator("enterprise", huge)
        assert evaluator.can_add_business() is True
        assert evaluator.can_add_branch() is True
        assert evaluator.can_add_staff() is True

    @pytest.mark.parametrize("plan", list(SubscriptionPlan))
    @pytest.mark.parametrize("used", [0, 1, 2, 5, 10, 25, 100])
    def test_denied_exactly_at_or_over_cap(self, plan: SubscriptionPlan, used: int) -> None:
        usage = Usage(businesses=used, branches=used, staff=used)
        evaluator = EntitlementEvaluator(plan, usage)
        for resource in Resource:
            limit = PLAN_LIMITS[plan].for_resource(resource)
            expected = not isinstance(limit, Capped) or used < limit.value
            assert evaluator.can_add(resource) is expected

    def test_missing_usage_fields_count_as_zero(self) -> None:
        evaluator = EntitlementEvaluator("free", {"staff": 1})
        assert evaluator.usage == Usage(businesses=0, branches=0, staff=1)
        assert evaluator.can_add_business() is True
        assert evaluator.can_add_branch() is True

    def test_no_usage_at_all(self) -> None:
        assert EntitlementEvaluator("free").usage == Usage()

    @pytest.mark.parametrize("raw", [None, "abc", -4, float("nan"), float("inf"), True])
    def test_malformed_counts_are_zero(self, raw: object) -> None:
        evaluator = EntitlementEvaluator("free", {"branches": raw})
        assert evaluator.usage.branches == 0

    def test_numeric_strings_are_counted(self) -> None:
        assert EntitlementEvaluator("free", {"branches": " 4 "}).usage.branches == 4

    def test_unknown_plan_evaluates_as_free(self) -> None:
        evaluator = EntitlementEvaluator("legacy_gold", Usage(branches=1))
        assert evaluator.plan is SubscriptionPlan.FREE
        assert evaluator.can_add_branch() is False


class TestProgressionAndCapabilities:
    def test_next_plan(self) -> None:
        assert EntitlementEvaluator("free").next_plan() is SubscriptionPlan.BASE
        assert EntitlementEvaluator("enterprise").next_plan() is None

    @pytest.mark.parametrize("plan", list(SubscriptionPlan))
    def test_gated_modules_from_pro(self, plan: SubscriptionPlan) -> None:
        evaluator = EntitlementEvaluator(plan)
        expected = plan in (SubscriptionPlan.PRO, SubscriptionPlan.ENTERPRISE)
        assert evaluator.has_finance_access() is expected
        assert evaluator.has_advanced_reports() is expected
        assert evaluator.has_integrations() is expected

    def test_capabilities_map_covers_all(self) -> None:
        caps = EntitlementEvaluator("pro").capabilities()
        assert set(caps) == set(Capability)
        assert all(caps.values())

    def test_plan_at_least(self) -> None:
        evaluator = EntitlementEvaluator("base")
        assert evaluator.plan_at_least(SubscriptionPlan.FREE) is True
        assert evaluator.plan_at_least(SubscriptionPlan.BASE) is True
        assert evaluator.plan_at_least(SubscriptionPlan.PRO) is False

    def test_answers_are_idempotent(self) -> None:
        evaluator = EntitlementEvaluator("base", Usage(branches=1, staff=4))
        first = (evaluator.can_add_branch(), evaluator.can_add_staff(), evaluator.quotas())
        second = (evaluator.can_add_branch(), evaluator.can_add_staff(), evaluator.quotas())
        assert first == second


class TestQuota:
    def test_capped_quota(self) -> None:
        quota = EntitlementEvaluator("base", Usage(staff=4)).quota(Resource.STAFF)
        assert quota.used == 4
        assert quota.limit == Capped(5)
        assert quota.remaining == 1
        assert quota.percent_used == 80.0
        assert quota.reached is False

    def test_quota_reached(self) -> None:
        quota = EntitlementEvaluator("base", Usage(branches=2)).quota(Resource.BRANCHES)
        assert quota.remaining == 0
        assert quota.percent_used == 100.0
        assert quota.reached is True

    def test_over_cap_percentage_is_capped(self) -> None:
        quota = EntitlementEvaluator("free", Usage(staff=9)).quota(Resource.STAFF)
        assert quota.percent_used == 100.0
        assert quota.remaining == 0

    def test_unlimited_quota(self) -> None:
        quota = EntitlementEvaluator("enterprise", Usage(staff=500)).quota(Resource.STAFF)
        assert quota.limit is UNLIMITED
        assert quota.remaining is None
        assert quota.percent_used == 0.0
        assert quota.reached is False

    def test_quotas_for_every_resource(self) -> None:
        assert set(EntitlementEvaluator("pro").quotas()) == set(Resource)

    def test_percentages_rounded(self) -> None:
        quota = EntitlementEvaluator("free", Usage(staff=1)).quota(Resource.STAFF)
        assert quota.percent_used == 33.33


def test_plan_order_covers_catalog() -> None:
    assert set(PLAN_ORDER) == set(PLAN_LIMITS)
