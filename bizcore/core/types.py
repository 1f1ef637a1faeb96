"""System-wide shared types — the single source of truth for all data structures."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum

from bizcore.core.constants import UNLIMITED_SENTINEL


# ── Enums ────────────────────────────────────────────────────────

class SubscriptionPlan(str, Enum):
    """Plan tiers. Declaration order is the upgrade order."""

    FREE = "free"
    BASE = "base"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class BusinessSector(str, Enum):
    RETAIL = "retail"
    MANUFACTURING = "manufacturing"
    TECHNOLOGY = "technology"
    HEALTHCARE = "healthcare"
    FINANCE = "finance"
    EDUCATION = "education"
    HOSPITALITY = "hospitality"
    REAL_ESTATE = "real_estate"
    CONSTRUCTION = "construction"
    TRANSPORTATION = "transportation"
    AGRICULTURE = "agriculture"
    ENTERTAINMENT = "entertainment"
    CONSULTING = "consulting"
    NON_PROFIT = "non_profit"
    OTHER = "other"           # generic fallback


class Resource(str, Enum):
    """Countable resources gated by plan limits."""

    BUSINESSES = "businesses"
    BRANCHES = "branches"
    STAFF = "staff"


class Capability(str, Enum):
    """Plan-gated product modules."""

    FINANCE = "finance"
    ADVANCED_REPORTS = "advanced_reports"
    INTEGRATIONS = "integrations"


class FieldType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    DATE = "date"
    SELECT = "select"


# ── Limits ───────────────────────────────────────────────────────

@dataclass(frozen=True)
class Capped:
    """A hard cap of ``value`` resources."""

    value: int

    def __post_init__(self) -> None:
        if self.value < 0:
            msg = f"cap cannot be negative: {self.value}"
            raise ValueError(msg)


@dataclass(frozen=True)
class Unlimited:
    """No cap."""


Limit = Capped | Unlimited

UNLIMITED = Unlimited()


def limit_from_wire(value: int) -> Limit:
    """Decode the storage encoding, where ``-1`` means unlimited."""
    if value == UNLIMITED_SENTINEL:
        return UNLIMITED
    return Capped(value)


def limit_to_wire(limit: Limit) -> int:
    if isinstance(limit, Unlimited):
        return UNLIMITED_SENTINEL
    return limit.value


@dataclass(frozen=True)
class Limits:
    """Resource caps for one plan."""

    businesses: Limit
    branches_per_business: Limit
    staff_per_branch: Limit

    def for_resource(self, resource: Resource) -> Limit:
        if resource is Resource.BUSINESSES:
            return self.businesses
        if resource is Resource.BRANCHES:
            return self.branches_per_business
        return self.staff_per_branch

    @classmethod
    def from_wire(cls, data: Mapping[str, int]) -> Limits:
        """Decode a stored limits row, where ``-1`` means unlimited."""
        return cls(
            businesses=limit_from_wire(data["businesses"]),
            branches_per_business=limit_from_wire(data["branches_per_business"]),
            staff_per_branch=limit_from_wire(data["staff_per_branch"]),
        )

    def to_wire(self) -> dict[str, int]:
        return {
            "businesses": limit_to_wire(self.businesses),
            "branches_per_business": limit_to_wire(self.branches_per_business),
            "staff_per_branch": limit_to_wire(self.staff_per_branch),
        }


# ── Usage ────────────────────────────────────────────────────────

def _as_count(value: object) -> int:
    """Coerce a raw count to a non-negative int; anything unusable is 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, int):
        return max(value, 0)
    if isinstance(value, float) and math.isfinite(value):
        return max(int(value), 0)
    if isinstance(value, str):
        try:
            return max(int(value.strip()), 0)
        except ValueError:
            return 0
    return 0


@dataclass(frozen=True)
class Usage:
    """Live resource counts for one tenant at one point in time.

    ``businesses`` is counted across the acting principal's organizations;
    ``branches`` and ``staff`` are counted inside the current organization.
    """

    businesses: int = 0
    branches: int = 0
    staff: int = 0

    def __post_init__(self) -> None:
        # Frozen, so normalise through object.__setattr__
        for name in ("businesses", "branches", "staff"):
            object.__setattr__(self, name, _as_count(getattr(self, name)))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, object] | None) -> Usage:
        """Build from a loosely-typed mapping; each missing field counts as zero."""
        if not raw or not isinstance(raw, Mapping):
            return cls()
        return cls(
            businesses=_as_count(raw.get("businesses")),
            branches=_as_count(raw.get("branches")),
            staff=_as_count(raw.get("staff")),
        )

    def for_resource(self, resource: Resource) -> int:
        return int(getattr(self, resource.value))

    def to_dict(self) -> dict[str, int]:
        return {"businesses": self.businesses, "branches": self.branches, "staff": self.staff}


@dataclass(frozen=True)
class QuotaStatus:
    """Consumption of one resource against its plan limit."""

    resource: Resource
    used: int
    limit: Limit
    remaining: int | None      # None when unlimited
    percent_used: float        # 0.0 when unlimited, capped at 100.0
    reached: bool


# ── Organization ─────────────────────────────────────────────────

@dataclass(frozen=True)
class Organization:
    """Read-only view of an organization record from the external store.

    ``subscription_plan`` and ``business_sector`` are kept as the raw strings
    the store returned; the catalogs resolve them.
    """

    id: str
    subscription_plan: str | None = None
    business_sector: str | None = None
    name: str = ""
    is_active: bool = True


# ── Sector Catalog Types ─────────────────────────────────────────

@dataclass(frozen=True)
class CustomField:
    name: str
    type: FieldType
    options: tuple[str, ...] | None = None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"name": self.name, "type": self.type.value}
        if self.options is not None:
            data["options"] = list(self.options)
        return data


@dataclass(frozen=True)
class SectorFeature:
    """Opaque capability marker; membership is tested by ``id``."""

    id: str
    name: str
    description: str = ""
    enabled: bool = True


@dataclass(frozen=True)
class ProductCategory:
    id: str
    name: str
    description: str | None = None
    fields: tuple[CustomField, ...] = ()


@dataclass(frozen=True)
class SectorConfiguration:
    """Everything the product shows differently for one business sector."""

    id: BusinessSector
    name: str
    features: tuple[SectorFeature, ...] = ()
    product_categories: tuple[ProductCategory, ...] = ()
    dashboard_metrics: tuple[str, ...] = ()
    workflows: tuple[str, ...] = ()
    report_types: tuple[str, ...] = ()
    required_fields: tuple[str, ...] = ()
    custom_fields: tuple[CustomField, ...] = ()
    enabled_feature_ids: frozenset[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "enabled_feature_ids",
            frozenset(f.id for f in self.features if f.enabled),
        )

    @property
    def enabled_features(self) -> tuple[SectorFeature, ...]:
        return tuple(f for f in self.features if f.enabled)
