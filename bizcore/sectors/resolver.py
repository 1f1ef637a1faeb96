"""Sector feature resolver — what the product shows for an organization's sector."""

from __future__ import annotations

from bizcore.catalog.sectors import (
    FALLBACK_SECTOR,
    SectorCatalog,
    configuration_for,
)
from bizcore.core.types import (
    BusinessSector,
    CustomField,
    ProductCategory,
    SectorConfiguration,
    SectorFeature,
)


class SectorFeatureResolver:
    """Read-only projections of one sector's configuration.

    Every returned sequence is a tuple shared with the catalog, so callers
    cannot mutate the backing table.
    """

    def __init__(
        self,
        sector: BusinessSector | str | None,
        catalog: SectorCatalog | None = None,
    ) -> None:
        self._config: SectorConfiguration = configuration_for(sector, catalog)

    @property
    def sector(self) -> BusinessSector:
        return self._config.id

    @property
    def configuration(self) -> SectorConfiguration:
        return self._config

    def has_feature(self, feature_id: str) -> bool:
        return feature_id in self._config.enabled_feature_ids

    def feature_ids(self) -> frozenset[str]:
        return self._config.enabled_feature_ids

    def features(self) -> tuple[SectorFeature, ...]:
        return self._config.enabled_features

    def product_categories(self) -> tuple[ProductCategory, ...]:
        return self._config.product_categories

    def dashboard_metrics(self) -> tuple[str, ...]:
        return self._config.dashboard_metrics

    def workflows(self) -> tuple[str, ...]:
        return self._config.workflows

    def report_types(self) -> tuple[str, ...]:
        return self._config.report_types

    def required_fields(self) -> tuple[str, ...]:
        return self._config.required_fields

    def custom_fields(self) -> tuple[CustomField, ...]:
        return self._config.custom_fields

    def is_sector_specific(self) -> bool:
        return self._config.id is not FALLBACK_SECTOR
