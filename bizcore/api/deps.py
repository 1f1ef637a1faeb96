"""FastAPI dependency injection — shared instances for routes."""

from __future__ import annotations

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncEngine

from config.settings import get_settings
from bizcore.api.db.organizations import OrganizationRepository
from bizcore.catalog.sectors import SectorCatalog, default_catalog
from bizcore.core.constants import PRINCIPAL_HEADER
from bizcore.data.db import get_engine
from bizcore.entitlements.service import EntitlementService
from bizcore.usage.aggregator import UsageAggregator
from bizcore.usage.counters import SqlResourceCounter

# ── Database engine ───────────────────────────────────────────────


async def get_db_engine() -> AsyncEngine:
    """Provide the async database engine."""
    return await get_engine()


# ── Repositories ──────────────────────────────────────────────────


async def get_org_repo(
    engine: AsyncEngine = Depends(get_db_engine),
) -> OrganizationRepository:
    """Provide an OrganizationRepository instance."""
    return OrganizationRepository(engine)


# ── Catalogs and services ─────────────────────────────────────────


def get_sector_catalog() -> SectorCatalog:
    return default_catalog()


async def get_aggregator(
    engine: AsyncEngine = Depends(get_db_engine),
) -> UsageAggregator:
    settings = get_settings()
    return UsageAggregator(
        SqlResourceCounter(engine),
        timeout_seconds=settings.usage_fetch_timeout_seconds,
    )


async def get_entitlement_service(
    aggregator: UsageAggregator = Depends(get_aggregator),
) -> EntitlementService:
    return EntitlementService(aggregator)


# ── Principal ─────────────────────────────────────────────────────


async def require_principal(
    principal_id: str | None = Header(default=None, alias=PRINCIPAL_HEADER),
) -> str:
    """Return the acting principal's id, set upstream by the auth proxy."""
    if principal_id is None or not principal_id.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
        )
    return principal_id.strip()
