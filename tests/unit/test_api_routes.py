"""Tests for the BIZCORE HTTP routes."""

from __future__ import annotations

from collections.abc import Iterator
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from bizcore.api.deps import get_entitlement_service, get_org_repo
from bizcore.api.main import create_app
from bizcore.core.exceptions import OrganizationNotFoundError, UsageFetchError
from bizcore.core.types import Organization, Usage
from bizcore.entitlements.service import EntitlementService

PRINCIPAL = {"X-Principal-Id": "user-1"}


def _repo(organization: Organization | None, member: bool = True) -> AsyncMock:
    repo = AsyncMock()
    if organization is None:
        repo.get.side_effect = OrganizationNotFoundError("organization missing")
    else:
        repo.get.return_value = organization
    repo.is_member.return_value = member
    return repo


def _service(usage: Usage | None = None, error: Exception | None = None) -> EntitlementService:
    aggregator = AsyncMock()
    if error is not None:
        aggregator.fetch.side_effect = error
    else:
        aggregator.fetch.return_value = usage or Usage()
    return EntitlementService(aggregator)


@pytest.fixture()
def app() -> Iterator[FastAPI]:
    """App with the DB engine lifecycle mocked out."""
    with patch("bizcore.api.main.get_engine", new_callable=lambda: lambda: MagicMock()):
        with patch("bizcore.api.main.close_engine", new_callable=lambda: lambda: MagicMock()):
            yield create_app()


def _client(app: FastAPI, repo: AsyncMock, service: EntitlementService | None = None) -> TestClient:
    app.dependency_overrides[get_org_repo] = lambda: repo
    app.dependency_overrides[get_entitlement_service] = lambda: service or _service()
    return TestClient(app)


class TestHealth:
    def test_health_returns_ok(self, app: FastAPI) -> None:
        response = TestClient(app).get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["version"] == "0.1.0"
        assert "environment" in data


class TestPlans:
    def test_lists_plans_in_order(self, app: FastAPI) -> None:
        response = TestClient(app).get("/api/plans")
        assert response.status_code == 200
        plans = response.json()
        assert [p["id"] for p in plans] == ["free", "base", "pro", "enterprise"]

    def test_unlimited_encoded_as_minus_one(self, app: FastAPI) -> None:
        plans = {p["id"]: p for p in TestClient(app).get("/api/plans").json()}
        assert plans["enterprise"]["limits"] == {
            "businesses": -1,
            "branches_per_business": -1,
            "staff_per_branch": -1,
        }
        assert plans["pro"]["popular"] is True
        assert plans["base"]["monthly_price_usd"] == 29


class TestSectors:
    def test_list_sectors(self, app: FastAPI) -> None:
        sectors = TestClient(app).get("/api/sectors").json()
        assert len(sectors) == 15
        assert {"id": "retail", "name": "Retail"} in sectors

    def test_get_sector(self, app: FastAPI) -> None:
        data = TestClient(app).get("/api/sectors/retail").json()
        assert data["id"] == "retail"
        assert data["is_sector_specific"] is True
        assert "loyalty_programs" in {f["id"] for f in data["features"]}
        categories = {c["id"]: c for c in data["product_categories"]}
        organic = next(f for f in categories["food_beverage"]["fields"] if f["name"] == "organic")
        assert organic["options"] == ["Yes", "No"]

    def test_unknown_sector_is_generic(self, app: FastAPI) -> None:
        response = TestClient(app).get("/api/sectors/space_mining")
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == "other"
        assert data["is_sector_specific"] is False


class TestEntitlements:
    def test_requires_principal(self, app: FastAPI) -> None:
        client = _client(app, _repo(Organization(id="org-1")))
        response = client.get("/api/organizations/org-1/entitlements")
        assert response.status_code == 401

    def test_unknown_organization(self, app: FastAPI) -> None:
        client = _client(app, _repo(None))
        response = client.get("/api/organizations/nope/entitlements", headers=PRINCIPAL)
        assert response.status_code == 404

    def test_non_member_forbidden(self, app: FastAPI) -> None:
        client = _client(app, _repo(Organization(id="org-1"), member=False))
        response = client.get("/api/organizations/org-1/entitlements", headers=PRINCIPAL)
        assert response.status_code == 403

    def test_entitlements_with_usage(self, app: FastAPI) -> None:
        org = Organization(id="org-1", subscription_plan="base", business_sector="retail")
        client = _client(app, _repo(org), _service(Usage(businesses=1, branches=1, staff=5)))
        response = client.get("/api/organizations/org-1/entitlements", headers=PRINCIPAL)

        assert response.status_code == 200
        data = response.json()
        assert data["plan"]["id"] == "base"
        assert data["next_plan"] == "pro"
        assert data["usage_status"] == "available"
        assert data["usage"] == {"businesses": 1, "branches": 1, "staff": 5}
        assert data["can_add_business"] is False
        assert data["can_add_branch"] is True
        assert data["can_add_staff"] is False
        assert data["capabilities"]["finance"] is False
        assert data["quotas"]["staff"]["reached"] is True

    def test_enterprise_quotas_unlimited(self, app: FastAPI) -> None:
        org = Organization(id="org-1", subscription_plan="enterprise")
        client = _client(app, _repo(org), _service(Usage(branches=40)))
        data = client.get("/api/organizations/org-1/entitlements", headers=PRINCIPAL).json()
        assert data["next_plan"] is None
        assert data["quotas"]["branches"]["limit"] == -1
        assert data["quotas"]["branches"]["remaining"] is None

    def test_usage_unavailable(self, app: FastAPI) -> None:
        org = Organization(id="org-1", subscription_plan="pro")
        client = _client(app, _repo(org), _service(error=UsageFetchError("usage fetch failed")))
        response = client.get("/api/organizations/org-1/entitlements", headers=PRINCIPAL)

        assert response.status_code == 200
        data = response.json()
        assert data["usage_status"] == "unavailable"
        assert data["usage"] is None
        assert data["can_add_branch"] is None
        assert data["capabilities"]["finance"] is True


class TestSectorFeatures:
    def test_organization_sector(self, app: FastAPI) -> None:
        org = Organization(id="org-1", subscription_plan="pro", business_sector="healthcare")
        client = _client(app, _repo(org))
        data = client.get("/api/organizations/org-1/sector-features", headers=PRINCIPAL).json()
        assert data["organization_id"] == "org-1"
        assert data["id"] == "healthcare"
        assert data["declared_sector"] == "healthcare"
        assert "patient_records" in {f["id"] for f in data["features"]}

    def test_unrecognized_sector_falls_back(self, app: FastAPI) -> None:
        org = Organization(id="org-1", business_sector="space_mining")
        client = _client(app, _repo(org))
        data = client.get("/api/organizations/org-1/sector-features", headers=PRINCIPAL).json()
        assert data["id"] == "other"
        assert data["declared_sector"] == "space_mining"
        assert data["is_sector_specific"] is False
