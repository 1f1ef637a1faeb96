#!/usr/bin/env python3
"""Validate the plan and sector catalogs before a deploy."""

from __future__ import annotations

import sys

from config.settings import get_settings
from bizcore.catalog.plans import PLAN_CATALOG_VERSION, PLAN_ORDER, limits_for
from bizcore.catalog.sectors import load_sector_catalog
from bizcore.core.exceptions import CatalogError
from bizcore.core.logging import get_logger, setup_logging
from bizcore.core.types import Limits

log = get_logger(__name__)


def check_plan_encoding() -> list[str]:
    """Plans whose stored ``-1`` encoding does not decode back to the same limits."""
    broken: list[str] = []
    for plan in PLAN_ORDER:
        limits = limits_for(plan)
        wire = limits.to_wire()
        if Limits.from_wire(wire) != limits:
            broken.append(plan.value)
        log.info("plan_limits", plan=plan.value, **wire)
    return broken


def main() -> int:
    settings = get_settings()
    setup_logging(json_output=settings.log_json, level=settings.log_level)

    broken = check_plan_encoding()
    if broken:
        log.error("plan_limits_not_round_trippable", plans=broken)
        return 1

    try:
        catalog = load_sector_catalog(settings.sector_catalog_path)
    except CatalogError as exc:
        log.error("sector_catalog_invalid", error=str(exc), context=exc.context)
        return 1

    log.info(
        "catalog_check_complete",
        plan_catalog_version=PLAN_CATALOG_VERSION,
        sectors=len(catalog),
        features=sum(len(c.enabled_features) for c in catalog.values()),
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
