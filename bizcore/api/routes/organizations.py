"""Organization-scoped endpoints — entitlements and sector features."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, status

from bizcore.api.db.organizations import OrganizationRepository
from bizcore.api.deps import (
    get_entitlement_service,
    get_org_repo,
    get_sector_catalog,
    require_principal,
)
from bizcore.api.models.schemas import EntitlementsOut, OrganizationSectorOut, SectorConfigurationOut
from bizcore.catalog.sectors import SectorCatalog
from bizcore.core.exceptions import OrganizationNotFoundError
from bizcore.core.logging import get_logger
from bizcore.core.types import Organization
from bizcore.entitlements.service import EntitlementService
from bizcore.sectors.resolver import SectorFeatureResolver

log = get_logger(__name__)

router = APIRouter(prefix="/organizations", tags=["organizations"])


async def _load_for_principal(
    repo: OrganizationRepository,
    organization_id: str,
    principal_id: str,
) -> Organization:
    """Fetch the organization and confirm the principal belongs to it."""
    try:
        organization = await repo.get(organization_id)
    except OrganizationNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Organization not found",
        ) from None

    if not await repo.is_member(organization_id, principal_id):
        log.info(
            "organization_access_denied",
            organization_id=organization_id,
            principal_id=principal_id,
        )
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not a member of this organization",
        )
    return organization


@router.get("/{organization_id}/entitlements", response_model=EntitlementsOut)
async def get_entitlements(
    organization_id: str,
    principal_id: str = Depends(require_principal),
    repo: OrganizationRepository = Depends(get_org_repo),
    service: EntitlementService = Depends(get_entitlement_service),
) -> EntitlementsOut:
    """Plan limits, live usage and admission decisions for one organization."""
    organization = await _load_for_principal(repo, organization_id, principal_id)
    report = await service.report_for(organization, principal_id)
    return EntitlementsOut.from_report(report)


@router.get("/{organization_id}/sector-features", response_model=OrganizationSectorOut)
async def get_sector_features(
    organization_id: str,
    principal_id: str = Depends(require_principal),
    repo: OrganizationRepository = Depends(get_org_repo),
    catalog: SectorCatalog = Depends(get_sector_catalog),
) -> OrganizationSectorOut:
    """Sector configuration the organization's UI should render."""
    organization = await _load_for_principal(repo, organization_id, principal_id)
    resolver = SectorFeatureResolver(organization.business_sector, catalog)
    base = SectorConfigurationOut.from_resolver(resolver)
    return OrganizationSectorOut(
        **base.model_dump(),
        organization_id=organization.id,
        declared_sector=organization.business_sector,
    )
