"""Plan catalog — resource limits and display details per subscription tier.

This module is the only place that turns a raw ``subscription_plan`` string
into a ``SubscriptionPlan``. Unknown identifiers fall back to ``free`` so a
bad row under-provisions rather than over-provisions.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from bizcore.core.constants import LEGACY_PLAN_ALIASES
from bizcore.core.exceptions import CatalogError
from bizcore.core.logging import get_logger
from bizcore.core.types import (
    UNLIMITED,
    Capability,
    Capped,
    Limits,
    SubscriptionPlan,
)

log = get_logger(__name__)

PLAN_CATALOG_VERSION = "2025.1"

PLAN_ORDER: tuple[SubscriptionPlan, ...] = tuple(SubscriptionPlan)

DEFAULT_PLAN = SubscriptionPlan.FREE


@dataclass(frozen=True)
class PlanDetails:
    """Customer-facing description of a plan, used by upgrade prompts."""

    plan: SubscriptionPlan
    name: str
    monthly_price_usd: int
    description: str
    highlights: tuple[str, ...] = ()
    popular: bool = False


PLAN_LIMITS: Mapping[SubscriptionPlan, Limits] = MappingProxyType({
    SubscriptionPlan.FREE: Limits(
        businesses=Capped(1),
        branches_per_business=Capped(1),
        staff_per_branch=Capped(3),
    ),
    SubscriptionPlan.BASE: Limits(
        businesses=Capped(1),
        branches_per_business=Capped(2),
        staff_per_branch=Capped(5),
    ),
    SubscriptionPlan.PRO: Limits(
        businesses=Capped(10),
        branches_per_business=Capped(10),
        staff_per_branch=Capped(25),
    ),
    SubscriptionPlan.ENTERPRISE: Limits(
        businesses=UNLIMITED,
        branches_per_business=UNLIMITED,
        staff_per_branch=UNLIMITED,
    ),
})

PLAN_DETAILS: Mapping[SubscriptionPlan, PlanDetails] = MappingProxyType({
    SubscriptionPlan.FREE: PlanDetails(
        plan=SubscriptionPlan.FREE,
        name="Free Plan",
        monthly_price_usd=0,
        description="Try the essentials with a single location",
        highlights=(
            "1 Business",
            "1 Branch",
            "Up to 3 Staff",
            "Dashboard & Sales",
        ),
    ),
    SubscriptionPlan.BASE: PlanDetails(
        plan=SubscriptionPlan.BASE,
        name="Base Plan",
        monthly_price_usd=29,
        description="Perfect for small businesses",
        highlights=(
            "1 Business",
            "1-2 Branches per Business",
            "Up to 5 Staff",
            "Dashboard & Sales",
            "Products & Inventory",
            "Contacts & Basic Reports",
        ),
    ),
    SubscriptionPlan.PRO: PlanDetails(
        plan=SubscriptionPlan.PRO,
        name="Pro Plan",
        monthly_price_usd=79,
        description="Best for growing companies",
        highlights=(
            "Multiple Businesses",
            "More Branches per Business",
            "More Staff per Branch",
            "Finance Module",
            "Advanced Reports & Analytics",
            "Integrations & Priority Support",
        ),
        popular=True,
    ),
    SubscriptionPlan.ENTERPRISE: PlanDetails(
        plan=SubscriptionPlan.ENTERPRISE,
        name="Enterprise Plan",
        monthly_price_usd=299,
        description="For large organizations",
        highlights=(
            "Unlimited Businesses",
            "Unlimited Branches & Staff",
            "Custom Branding / White-label",
            "Bulk Import/Export",
            "Advanced Integrations",
            "Dedicated Account Manager",
        ),
    ),
})

# Lowest tier that unlocks each gated module
CAPABILITY_MINIMUM_PLAN: Mapping[Capability, SubscriptionPlan] = MappingProxyType({
    Capability.FINANCE: SubscriptionPlan.PRO,
    Capability.ADVANCED_REPORTS: SubscriptionPlan.PRO,
    Capability.INTEGRATIONS: SubscriptionPlan.PRO,
})


def _check_exhaustive() -> None:
    """Fail at import if a tier or capability was added without table entries."""
    for table_name, table, keys in (
        ("PLAN_LIMITS", PLAN_LIMITS, set(SubscriptionPlan)),
        ("PLAN_DETAILS", PLAN_DETAILS, set(SubscriptionPlan)),
        ("CAPABILITY_MINIMUM_PLAN", CAPABILITY_MINIMUM_PLAN, set(Capability)),
    ):
        missing = keys - set(table)
        if missing:
            msg = f"{table_name} is missing entries for {sorted(k.value for k in missing)}"
            raise CatalogError(msg, context={"table": table_name})


_check_exhaustive()


# ── Lookup ───────────────────────────────────────────────────────


def resolve_plan(raw: SubscriptionPlan | str | None) -> SubscriptionPlan:
    """Map a stored plan identifier to a tier, defaulting to ``free``."""
    if isinstance(raw, SubscriptionPlan):
        return raw
    if not raw or not isinstance(raw, str):
        return DEFAULT_PLAN

    key = raw.strip().lower()
    key = LEGACY_PLAN_ALIASES.get(key, key)
    try:
        return SubscriptionPlan(key)
    except ValueError:
        log.debug("plan_unrecognized_fallback", raw_plan=raw, fallback=DEFAULT_PLAN.value)
        return DEFAULT_PLAN


def limits_for(plan: SubscriptionPlan | str | None) -> Limits:
    return PLAN_LIMITS[resolve_plan(plan)]


def plan_details(plan: SubscriptionPlan | str | None) -> PlanDetails:
    return PLAN_DETAILS[resolve_plan(plan)]


def plan_rank(plan: SubscriptionPlan | str | None) -> int:
    """Zero-based position of the plan in the upgrade order."""
    return PLAN_ORDER.index(resolve_plan(plan))


def next_plan(plan: SubscriptionPlan | str | None) -> SubscriptionPlan | None:
    """The tier immediately above ``plan``, or None at the top tier."""
    rank = plan_rank(plan)
    if rank + 1 >= len(PLAN_ORDER):
        return None
    return PLAN_ORDER[rank + 1]


def plan_at_least(
    plan: SubscriptionPlan | str | None,
    minimum: SubscriptionPlan,
) -> bool:
    return plan_rank(plan) >= plan_rank(minimum)


def required_plan_for(capability: Capability) -> SubscriptionPlan:
    return CAPABILITY_MINIMUM_PLAN[capability]
