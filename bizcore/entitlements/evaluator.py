"""Entitlement evaluator — admission and plan-progression answers for one tenant.

Pure and synchronous: every answer is a function of ``(plan, usage)`` and the
static plan catalog. Construct a new evaluator whenever either input changes.
"""

from __future__ import annotations

from collections.abc import Mapping

from bizcore.catalog.plans import (
    limits_for,
    next_plan,
    plan_at_least,
    required_plan_for,
    resolve_plan,
)
from bizcore.core.types import (
    Capability,
    Capped,
    Limit,
    Limits,
    QuotaStatus,
    Resource,
    SubscriptionPlan,
    Usage,
)


def admits(limit: Limit, used: int) -> bool:
    """True if one more resource fits under ``limit``.

    The cap is strict: at ``used == cap`` the next creation is denied.
    """
    if isinstance(limit, Capped):
        return used < limit.value
    return True


class EntitlementEvaluator:
    """Answers "may this tenant create another X?" and "what does the plan unlock?"."""

    def __init__(
        self,
        plan: SubscriptionPlan | str | None,
        usage: Usage | Mapping[str, object] | None = None,
    ) -> None:
        self._plan: SubscriptionPlan = resolve_plan(plan)
        self._limits: Limits = limits_for(self._plan)
        if isinstance(usage, Usage):
            self._usage = usage
        else:
            self._usage = Usage.from_mapping(usage)

    @property
    def plan(self) -> SubscriptionPlan:
        return self._plan

    @property
    def limits(self) -> Limits:
        return self._limits

    @property
    def usage(self) -> Usage:
        return self._usage

    # ── Admission ────────────────────────────────────────────────

    def can_add(self, resource: Resource) -> bool:
        return admits(self._limits.for_resource(resource), self._usage.for_resource(resource))

    def can_add_business(self) -> bool:
        return self.can_add(Resource.BUSINESSES)

    def can_add_branch(self) -> bool:
        return self.can_add(Resource.BRANCHES)

    def can_add_staff(self) -> bool:
        return self.can_add(Resource.STAFF)

    # ── Plan progression ─────────────────────────────────────────

    def next_plan(self) -> SubscriptionPlan | None:
        return next_plan(self._plan)

    def plan_at_least(self, minimum: SubscriptionPlan) -> bool:
        return plan_at_least(self._plan, minimum)

    def has_capability(self, capability: Capability) -> bool:
        return self.plan_at_least(required_plan_for(capability))

    def has_finance_access(self) -> bool:
        return self.has_capability(Capability.FINANCE)

    def has_advanced_reports(self) -> bool:
        return self.has_capability(Capability.ADVANCED_REPORTS)

    def has_integrations(self) -> bool:
        return self.has_capability(Capability.INTEGRATIONS)

    def capabilities(self) -> dict[Capability, bool]:
        return {c: self.has_capability(c) for c in Capability}

    # ── Quotas ───────────────────────────────────────────────────

    def quota(self, resource: Resource) -> QuotaStatus:
        limit = self._limits.for_resource(resource)
        used = self._usage.for_resource(resource)

        if not isinstance(limit, Capped):
            return QuotaStatus(
                resource=resource,
                used=used,
                limit=limit,
                remaining=None,
                percent_used=0.0,
                reached=False,
            )

        if limit.value == 0:
            percent = 100.0
        else:
            percent = min(used / limit.value * 100.0, 100.0)
        return QuotaStatus(
            resource=resource,
            used=used,
            limit=limit,
            remaining=max(limit.value - used, 0),
            percent_used=round(percent, 2),
            reached=not admits(limit, used),
        )

    def quotas(self) -> dict[Resource, QuotaStatus]:
        return {r: self.quota(r) for r in Resource}
