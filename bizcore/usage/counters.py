"""SQL-backed resource counters over the external business store."""

from __future__ import annotations

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine

from bizcore.core.interfaces import ResourceCounter
from bizcore.core.logging import get_logger

log = get_logger(__name__)

_COUNT_ORGANIZATIONS = text(
    "SELECT count(DISTINCT o.id) AS cnt "
    "FROM organizations o "
    "JOIN organization_memberships m ON m.organization_id = o.id "
    "WHERE m.user_id = :pid AND o.is_active = true"
)

_COUNT_BRANCHES = text(
    "SELECT count(*) AS cnt FROM branches WHERE organization_id = :oid"
)

_COUNT_STAFF = text(
    "SELECT count(*) AS cnt FROM employees WHERE organization_id = :oid"
)


class SqlResourceCounter(ResourceCounter):
    """Counts rows with one short transaction per query.

    Each count opens its own connection so the aggregator can run the three
    queries concurrently.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine

    async def _scalar_count(self, statement: object, params: dict[str, str]) -> int:
        async with self._engine.begin() as conn:
            result = await conn.execute(statement, params)  # type: ignore[arg-type]
            return int(result.scalar() or 0)

    async def count_organizations(self, principal_id: str) -> int:
        return await self._scalar_count(_COUNT_ORGANIZATIONS, {"pid": principal_id})

    async def count_branches(self, organization_id: str) -> int:
        return await self._scalar_count(_COUNT_BRANCHES, {"oid": organization_id})

    async def count_staff(self, organization_id: str) -> int:
        return await self._scalar_count(_COUNT_STAFF, {"oid": organization_id})
