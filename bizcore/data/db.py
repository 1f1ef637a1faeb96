"""Async connection to the external business store.

BIZCORE never writes to the store; it only reads organizations and counts
branches, employees and memberships.
"""

from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from config.settings import get_settings
from bizcore.core.logging import get_logger

log = get_logger(__name__)

_engine: AsyncEngine | None = None


async def get_engine() -> AsyncEngine:
    """Get or create the shared read-only engine."""
    global _engine  # noqa: PLW0603
    if _engine is None:
        settings = get_settings()
        url = make_url(settings.database_url.get_secret_value())
        connect_args: dict[str, object] = {}
        if url.drivername.endswith("+asyncpg"):
            connect_args["server_settings"] = {
                "application_name": "bizcore",
                "default_transaction_read_only": "on",
            }
        _engine = create_async_engine(
            url,
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        log.info("database_engine_created", host=url.host, database=url.database)
    return _engine


async def close_engine() -> None:
    global _engine  # noqa: PLW0603
    if _engine is not None:
        await _engine.dispose()
        _engine = None
        log.info("database_engine_closed")
