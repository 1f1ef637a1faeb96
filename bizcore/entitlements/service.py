"""Entitlement service — ties an organization, its live usage and the evaluator together."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from bizcore.catalog.plans import PlanDetails, plan_details
from bizcore.core.exceptions import UsageFetchError
from bizcore.core.logging import get_logger
from bizcore.core.types import (
    Capability,
    Limits,
    Organization,
    QuotaStatus,
    Resource,
    SubscriptionPlan,
    Usage,
)
from bizcore.entitlements.evaluator import EntitlementEvaluator
from bizcore.usage.aggregator import UsageAggregator

log = get_logger(__name__)


class UsageStatus(str, Enum):
    AVAILABLE = "available"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class EntitlementReport:
    """Everything a UI needs to gate creation and upsell for one organization.

    When usage could not be fetched, ``usage`` is None and every admission
    field is None: the decision is unknown, not denied and not granted.
    """

    organization_id: str
    plan: SubscriptionPlan
    details: PlanDetails
    limits: Limits
    next_plan: SubscriptionPlan | None
    capabilities: dict[Capability, bool]
    usage_status: UsageStatus
    usage: Usage | None = None
    usage_error: str | None = None
    can_add_business: bool | None = None
    can_add_branch: bool | None = None
    can_add_staff: bool | None = None
    quotas: dict[Resource, QuotaStatus] = field(default_factory=dict)


def build_report(
    organization: Organization,
    usage: Usage | None,
    usage_error: str | None = None,
) -> EntitlementReport:
    """Assemble a report; the evaluator only ever sees a successful snapshot."""
    # Plan-only answers do not depend on usage
    plan_view = EntitlementEvaluator(organization.subscription_plan)
    common = {
        "organization_id": organization.id,
        "plan": plan_view.plan,
        "details": plan_details(plan_view.plan),
        "limits": plan_view.limits,
        "next_plan": plan_view.next_plan(),
        "capabilities": plan_view.capabilities(),
    }

    if usage is None:
        return EntitlementReport(
            **common,
            usage_status=UsageStatus.UNAVAILABLE,
            usage_error=usage_error or "usage unavailable",
        )

    evaluator = EntitlementEvaluator(plan_view.plan, usage)
    return EntitlementReport(
        **common,
        usage_status=UsageStatus.AVAILABLE,
        usage=usage,
        can_add_business=evaluator.can_add_business(),
        can_add_branch=evaluator.can_add_branch(),
        can_add_staff=evaluator.can_add_staff(),
        quotas=evaluator.quotas(),
    )


class EntitlementService:
    """Fetches usage for an organization and produces an ``EntitlementReport``."""

    def __init__(self, aggregator: UsageAggregator) -> None:
        self._aggregator = aggregator

    async def report_for(self, organization: Organization, principal_id: str) -> EntitlementReport:
        try:
            usage = await self._aggregator.fetch(principal_id, organization.id)
        except UsageFetchError as exc:
            log.warning(
                "entitlements_without_usage",
                organization_id=organization.id,
                error=str(exc),
            )
            return build_report(organization, None, usage_error=str(exc))

        report = build_report(organization, usage)
        log.debug(
            "entitlements_evaluated",
            organization_id=organization.id,
            plan=report.plan.value,
            can_add_branch=report.can_add_branch,
            can_add_staff=report.can_add_staff,
        )
        return report
