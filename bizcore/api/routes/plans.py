"""Plan catalog endpoint — public pricing and limits."""

from __future__ import annotations

from fastapi import APIRouter

from bizcore.api.models.schemas import PlanOut
from bizcore.catalog.plans import PLAN_ORDER, limits_for, plan_details

router = APIRouter(prefix="/plans", tags=["plans"])


@router.get("", response_model=list[PlanOut])
async def list_plans() -> list[PlanOut]:
    """All plans from lowest to highest tier."""
    return [PlanOut.from_details(plan_details(p), limits_for(p)) for p in PLAN_ORDER]
