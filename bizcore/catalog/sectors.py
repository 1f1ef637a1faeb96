"""Sector catalog — per-sector features, categories, metrics and field schemas.

The table lives in ``config/sectors.yaml`` and is parsed once into frozen
dataclasses. Every ``BusinessSector`` member must have exactly one entry;
lookups for anything else resolve to ``other``.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Mapping

import yaml

from config.settings import get_settings
from bizcore.core.constants import SECTOR_FALLBACK
from bizcore.core.exceptions import CatalogError
from bizcore.core.logging import get_logger
from bizcore.core.types import (
    BusinessSector,
    CustomField,
    FieldType,
    ProductCategory,
    SectorConfiguration,
    SectorFeature,
)

log = get_logger(__name__)

FALLBACK_SECTOR = BusinessSector(SECTOR_FALLBACK)

_SECTOR_KEYS = frozenset({
    "name",
    "features",
    "product_categories",
    "dashboard_metrics",
    "workflows",
    "report_types",
    "required_fields",
    "custom_fields",
})

SectorCatalog = Mapping[BusinessSector, SectorConfiguration]


# ── Parsing ──────────────────────────────────────────────────────


def _str_tuple(raw: object, where: str) -> tuple[str, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list) or not all(isinstance(v, str) for v in raw):
        msg = f"{where} must be a list of strings"
        raise CatalogError(msg, context={"where": where})
    return tuple(raw)


def _parse_field(raw: Any, where: str) -> CustomField:
    if not isinstance(raw, dict) or "name" not in raw or "type" not in raw:
        msg = f"{where} must be a mapping with 'name' and 'type'"
        raise CatalogError(msg, context={"where": where})
    try:
        field_type = FieldType(raw["type"])
    except ValueError as exc:
        msg = f"{where} has unknown field type {raw['type']!r}"
        raise CatalogError(msg, context={"where": where}) from exc

    options = raw.get("options")
    return CustomField(
        name=str(raw["name"]),
        type=field_type,
        options=_str_tuple(options, f"{where}.options") if options is not None else None,
    )


def _parse_fields(raw: object, where: str) -> tuple[CustomField, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        msg = f"{where} must be a list"
        raise CatalogError(msg, context={"where": where})
    return tuple(_parse_field(item, f"{where}[{i}]") for i, item in enumerate(raw))


def _parse_features(raw: object, where: str) -> tuple[SectorFeature, ...]:
    if not isinstance(raw, list):
        msg = f"{where} must be a list"
        raise CatalogError(msg, context={"where": where})

    features: list[SectorFeature] = []
    seen: set[str] = set()
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or "id" not in item or "name" not in item:
            msg = f"{where}[{i}] must be a mapping with 'id' and 'name'"
            raise CatalogError(msg, context={"where": where})
        feature_id = str(item["id"])
        if feature_id in seen:
            msg = f"{where} declares feature {feature_id!r} twice"
            raise CatalogError(msg, context={"where": where, "feature_id": feature_id})
        seen.add(feature_id)
        features.append(
            SectorFeature(
                id=feature_id,
                name=str(item["name"]),
                description=str(item.get("description", "")),
                enabled=bool(item.get("enabled", True)),
            )
        )
    return tuple(features)


def _parse_categories(raw: object, where: str) -> tuple[ProductCategory, ...]:
    if raw is None:
        return ()
    if not isinstance(raw, list):
        msg = f"{where} must be a list"
        raise CatalogError(msg, context={"where": where})

    categories: list[ProductCategory] = []
    for i, item in enumerate(raw):
        if not isinstance(item, dict) or "id" not in item or "name" not in item:
            msg = f"{where}[{i}] must be a mapping with 'id' and 'name'"
            raise CatalogError(msg, context={"where": where})
        description = item.get("description")
        categories.append(
            ProductCategory(
                id=str(item["id"]),
                name=str(item["name"]),
                description=str(description) if description is not None else None,
                fields=_parse_fields(item.get("fields"), f"{where}[{i}].fields"),
            )
        )
    return tuple(categories)


def _parse_sector(sector: BusinessSector, raw: Any) -> SectorConfiguration:
    where = sector.value
    if not isinstance(raw, dict):
        msg = f"sector {where!r} must be a mapping"
        raise CatalogError(msg, context={"sector": where})

    unknown = set(raw) - _SECTOR_KEYS
    if unknown:
        msg = f"sector {where!r} has unknown keys {sorted(unknown)}"
        raise CatalogError(msg, context={"sector": where})

    return SectorConfiguration(
        id=sector,
        name=str(raw.get("name", sector.value)),
        features=_parse_features(raw.get("features", []), f"{where}.features"),
        product_categories=_parse_categories(
            raw.get("product_categories"), f"{where}.product_categories"
        ),
        dashboard_metrics=_str_tuple(raw.get("dashboard_metrics"), f"{where}.dashboard_metrics"),
        workflows=_str_tuple(raw.get("workflows"), f"{where}.workflows"),
        report_types=_str_tuple(raw.get("report_types"), f"{where}.report_types"),
        required_fields=_str_tuple(raw.get("required_fields"), f"{where}.required_fields"),
        custom_fields=_parse_fields(raw.get("custom_fields"), f"{where}.custom_fields"),
    )


def parse_sector_catalog(document: Any) -> SectorCatalog:
    """Validate a loaded YAML document and build the immutable catalog."""
    if not isinstance(document, dict):
        msg = "sector catalog must be a mapping of sector id to configuration"
        raise CatalogError(msg)

    known = {s.value for s in BusinessSector}
    unknown = set(document) - known
    if unknown:
        msg = f"sector catalog has unknown sectors {sorted(unknown)}"
        raise CatalogError(msg, context={"unknown": sorted(unknown)})

    missing = known - set(document)
    if missing:
        msg = f"sector catalog is missing sectors {sorted(missing)}"
        raise CatalogError(msg, context={"missing": sorted(missing)})

    return MappingProxyType({
        sector: _parse_sector(sector, document[sector.value])
        for sector in BusinessSector
    })


def load_sector_catalog(path: Path) -> SectorCatalog:
    """Read and validate a sector catalog file."""
    try:
        with path.open(encoding="utf-8") as fh:
            document = yaml.safe_load(fh)
    except (OSError, yaml.YAMLError) as exc:
        msg = f"cannot load sector catalog from {path}"
        raise CatalogError(msg, context={"path": str(path), "error": str(exc)}) from exc

    catalog = parse_sector_catalog(document)
    log.info("sector_catalog_loaded", path=str(path), sectors=len(catalog))
    return catalog


@lru_cache(maxsize=1)
def default_catalog() -> SectorCatalog:
    """Process-wide catalog from the configured path, loaded on first use."""
    return load_sector_catalog(get_settings().sector_catalog_path)


# ── Lookup ───────────────────────────────────────────────────────


def resolve_sector(raw: BusinessSector | str | None) -> BusinessSector:
    """Map a stored sector identifier to a sector, defaulting to ``other``."""
    if isinstance(raw, BusinessSector):
        return raw
    if not raw or not isinstance(raw, str):
        return FALLBACK_SECTOR
    try:
        return BusinessSector(raw.strip().lower())
    except ValueError:
        log.debug("sector_unrecognized_fallback", raw_sector=raw, fallback=FALLBACK_SECTOR.value)
        return FALLBACK_SECTOR


def configuration_for(
    sector: BusinessSector | str | None,
    catalog: SectorCatalog | None = None,
) -> SectorConfiguration:
    table = catalog if catalog is not None else default_catalog()
    return table[resolve_sector(sector)]


def features_for(
    sector: BusinessSector | str | None,
    catalog: SectorCatalog | None = None,
) -> tuple[SectorFeature, ...]:
    """Enabled features of the sector's configuration."""
    return configuration_for(sector, catalog).enabled_features


def product_categories_for(
    sector: BusinessSector | str | None,
    catalog: SectorCatalog | None = None,
) -> tuple[ProductCategory, ...]:
    return configuration_for(sector, catalog).product_categories
