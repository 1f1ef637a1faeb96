"""Read-only organization lookup against the external store."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from bizcore.core.exceptions import OrganizationNotFoundError
from bizcore.core.logging import get_logger
from bizcore.core.types import Organization

log = get_logger(__name__)


class OrganizationRepository:
    """Async lookup of organization records.

    Plan and sector columns are passed through as raw strings; the catalogs
    decide what they mean.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def find_by_id(self, organization_id: str) -> Organization | None:
        """Look up an organization by ID."""
        async with self._engine.begin() as conn:
            row = await conn.execute(
                text(
                    "SELECT id, name, subscription_plan, business_sector, is_active "
                    "FROM organizations WHERE id = :oid"
                ),
                {"oid": organization_id},
            )
            r = row.mappings().first()
            if r is None:
                log.debug("organization_not_found", organization_id=organization_id)
                return None
            return self._row_to_organization(r)

    async def get(self, organization_id: str) -> Organization:
        """Like ``find_by_id`` but raises ``OrganizationNotFoundError`` on a miss."""
        organization = await self.find_by_id(organization_id)
        if organization is None:
            msg = f"organization {organization_id} not found"
            raise OrganizationNotFoundError(msg, context={"organization_id": organization_id})
        return organization

    async def is_member(self, organization_id: str, principal_id: str) -> bool:
        """True if the principal holds a membership in the organization."""
        async with self._engine.begin() as conn:
            result = await conn.execute(
                text(
                    "SELECT 1 FROM organization_memberships "
                    "WHERE organization_id = :oid AND user_id = :pid"
                ),
                {"oid": organization_id, "pid": principal_id},
            )
            return result.first() is not None

    @staticmethod
    def _row_to_organization(r: object) -> Organization:
        """Convert a DB row mapping to an Organization dataclass."""
        is_active = r.get("is_active")  # type: ignore[attr-defined]
        return Organization(
            id=str(r["id"]),  # type: ignore[index]
            name=r.get("name") or "",  # type: ignore[attr-defined]
            subscription_plan=r.get("subscription_plan"),  # type: ignore[attr-defined]
            business_sector=r.get("business_sector"),  # type: ignore[attr-defined]
            is_active=True if is_active is None else bool(is_active),
        )
