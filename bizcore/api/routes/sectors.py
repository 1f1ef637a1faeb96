"""Sector catalog endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from bizcore.api.deps import get_sector_catalog
from bizcore.api.models.schemas import SectorConfigurationOut, SectorSummaryOut
from bizcore.catalog.sectors import SectorCatalog
from bizcore.sectors.resolver import SectorFeatureResolver

router = APIRouter(prefix="/sectors", tags=["sectors"])


@router.get("", response_model=list[SectorSummaryOut])
async def list_sectors(
    catalog: SectorCatalog = Depends(get_sector_catalog),
) -> list[SectorSummaryOut]:
    return [SectorSummaryOut(id=s.value, name=c.name) for s, c in catalog.items()]


@router.get("/{sector_id}", response_model=SectorConfigurationOut)
async def get_sector(
    sector_id: str,
    catalog: SectorCatalog = Depends(get_sector_catalog),
) -> SectorConfigurationOut:
    """Configuration for a sector; unknown ids get the generic one."""
    return SectorConfigurationOut.from_resolver(SectorFeatureResolver(sector_id, catalog))
