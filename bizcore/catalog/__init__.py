"""Static plan and sector tables with centralized fallback lookups."""

from bizcore.catalog.plans import (
    PLAN_DETAILS,
    PLAN_LIMITS,
    PLAN_ORDER,
    PlanDetails,
    limits_for,
    next_plan,
    plan_at_least,
    plan_details,
    resolve_plan,
)
from bizcore.catalog.sectors import (
    configuration_for,
    default_catalog,
    features_for,
    load_sector_catalog,
    product_categories_for,
    resolve_sector,
)

__all__ = [
    "PLAN_DETAILS",
    "PLAN_LIMITS",
    "PLAN_ORDER",
    "PlanDetails",
    "limits_for",
    "next_plan",
    "plan_at_least",
    "plan_details",
    "resolve_plan",
    "configuration_for",
    "default_catalog",
    "features_for",
    "load_sector_catalog",
    "product_categories_for",
    "resolve_sector",
]
