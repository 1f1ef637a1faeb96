"""Pydantic V2 response schemas for the BIZCORE API.

Limits travel in their storage encoding: ``-1`` means unlimited.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

from bizcore.catalog.plans import PlanDetails
from bizcore.core.types import (
    CustomField,
    Limits,
    ProductCategory,
    QuotaStatus,
    SectorConfiguration,
    SectorFeature,
    limit_to_wire,
)
from bizcore.entitlements.service import EntitlementReport
from bizcore.sectors.resolver import SectorFeatureResolver


# ── Health ────────────────────────────────────────────────────────

class HealthResponse(BaseModel):
    status: str
    version: str
    environment: str


# ── Plans ─────────────────────────────────────────────────────────

class LimitsOut(BaseModel):
    businesses: int
    branches_per_business: int
    staff_per_branch: int

    @classmethod
    def from_limits(cls, limits: Limits) -> LimitsOut:
        return cls(**limits.to_wire())


class PlanOut(BaseModel):
    id: str
    name: str
    monthly_price_usd: int
    description: str
    highlights: list[str] = Field(default_factory=list)
    popular: bool = False
    limits: LimitsOut

    @classmethod
    def from_details(cls, details: PlanDetails, limits: Limits) -> PlanOut:
        return cls(
            id=details.plan.value,
            name=details.name,
            monthly_price_usd=details.monthly_price_usd,
            description=details.description,
            highlights=list(details.highlights),
            popular=details.popular,
            limits=LimitsOut.from_limits(limits),
        )


# ── Entitlements ──────────────────────────────────────────────────

class UsageOut(BaseModel):
    businesses: int
    branches: int
    staff: int


class QuotaOut(BaseModel):
    used: int
    limit: int
    remaining: int | None = None
    percent_used: float
    reached: bool

    @classmethod
    def from_status(cls, status: QuotaStatus) -> QuotaOut:
        return cls(
            used=status.used,
            limit=limit_to_wire(status.limit),
            remaining=status.remaining,
            percent_used=status.percent_used,
            reached=status.reached,
        )


class EntitlementsOut(BaseModel):
    """Admission fields are null when usage is unavailable."""

    organization_id: str
    plan: PlanOut
    next_plan: str | None = None
    capabilities: dict[str, bool]
    usage_status: str
    usage: UsageOut | None = None
    usage_error: str | None = None
    can_add_business: bool | None = None
    can_add_branch: bool | None = None
    can_add_staff: bool | None = None
    quotas: dict[str, QuotaOut] = Field(default_factory=dict)

    @classmethod
    def from_report(cls, report: EntitlementReport) -> EntitlementsOut:
        return cls(
            organization_id=report.organization_id,
            plan=PlanOut.from_details(report.details, report.limits),
            next_plan=report.next_plan.value if report.next_plan else None,
            capabilities={c.value: allowed for c, allowed in report.capabilities.items()},
            usage_status=report.usage_status.value,
            usage=UsageOut(**report.usage.to_dict()) if report.usage else None,
            usage_error=report.usage_error,
            can_add_business=report.can_add_business,
            can_add_branch=report.can_add_branch,
            can_add_staff=report.can_add_staff,
            quotas={r.value: QuotaOut.from_status(q) for r, q in report.quotas.items()},
        )


# ── Sectors ───────────────────────────────────────────────────────

class CustomFieldOut(BaseModel):
    name: str
    type: str
    options: list[str] | None = None

    @classmethod
    def from_field(cls, f: CustomField) -> CustomFieldOut:
        return cls(
            name=f.name,
            type=f.type.value,
            options=list(f.options) if f.options is not None else None,
        )


class SectorFeatureOut(BaseModel):
    id: str
    name: str
    description: str = ""

    @classmethod
    def from_feature(cls, f: SectorFeature) -> SectorFeatureOut:
        return cls(id=f.id, name=f.name, description=f.description)


class ProductCategoryOut(BaseModel):
    id: str
    name: str
    description: str | None = None
    fields: list[CustomFieldOut] = Field(default_factory=list)

    @classmethod
    def from_category(cls, c: ProductCategory) -> ProductCategoryOut:
        return cls(
            id=c.id,
            name=c.name,
            description=c.description,
            fields=[CustomFieldOut.from_field(f) for f in c.fields],
        )


class SectorSummaryOut(BaseModel):
    id: str
    name: str


class SectorConfigurationOut(BaseModel):
    id: str
    name: str
    features: list[SectorFeatureOut] = Field(default_factory=list)
    product_categories: list[ProductCategoryOut] = Field(default_factory=list)
    dashboard_metrics: list[str] = Field(default_factory=list)
    workflows: list[str] = Field(default_factory=list)
    report_types: list[str] = Field(default_factory=list)
    required_fields: list[str] = Field(default_factory=list)
    custom_fields: list[CustomFieldOut] = Field(default_factory=list)
    is_sector_specific: bool

    @classmethod
    def from_resolver(cls, resolver: SectorFeatureResolver) -> SectorConfigurationOut:
        config: SectorConfiguration = resolver.configuration
        return cls(
            id=config.id.value,
            name=config.name,
            features=[SectorFeatureOut.from_feature(f) for f in resolver.features()],
            product_categories=[
                ProductCategoryOut.from_category(c) for c in resolver.product_categories()
            ],
            dashboard_metrics=list(resolver.dashboard_metrics()),
            workflows=list(resolver.workflows()),
            report_types=list(resolver.report_types()),
            required_fields=list(resolver.required_fields()),
            custom_fields=[CustomFieldOut.from_field(f) for f in resolver.custom_fields()],
            is_sector_specific=resolver.is_sector_specific(),
        )


class OrganizationSectorOut(SectorConfigurationOut):
    """Sector configuration as seen by one organization."""

    organization_id: str
    declared_sector: str | None = None
