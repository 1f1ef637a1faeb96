"""BIZCORE FastAPI application — entry point for the API server."""

from __future__ import annotations

from contextlib import asynccontextmanager
from collections.abc import AsyncIterator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from config.settings import get_settings
from bizcore.catalog.plans import PLAN_ORDER
from bizcore.catalog.sectors import default_catalog
from bizcore.core.constants import API_VERSION
from bizcore.core.logging import get_logger, is_configured, setup_logging
from bizcore.data.db import close_engine, get_engine

log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Startup/shutdown lifecycle — load catalogs, open the DB engine, close on exit."""
    log.info("api_starting")
    # Eager load; a CatalogError aborts startup
    catalog = default_catalog()
    log.info("catalogs_ready", plans=len(PLAN_ORDER), sectors=len(catalog))
    await get_engine()
    yield
    await close_engine()
    log.info("api_shutdown")


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    if not is_configured():
        setup_logging(json_output=settings.log_json, level=settings.log_level)

    app = FastAPI(
        title="BIZCORE API",
        description="Plan entitlements and sector features — REST API",
        version=API_VERSION,
        lifespan=lifespan,
    )

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url, "http://localhost:3000"],
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # Register routers
    from bizcore.api.routes.health import router as health_router
    from bizcore.api.routes.organizations import router as organizations_router
    from bizcore.api.routes.plans import router as plans_router
    from bizcore.api.routes.sectors import router as sectors_router

    app.include_router(health_router, prefix="/api")
    app.include_router(plans_router, prefix="/api")
    app.include_router(sectors_router, prefix="/api")
    app.include_router(organizations_router, prefix="/api")

    return app


app = create_app()
