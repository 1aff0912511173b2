"""Integration tests for config and selection API endpoints."""

import pytest
from fastapi.testclient import TestClient

from golf_configurator.api.dependencies import get_configurator_config
from golf_configurator.api.main import create_app
from golf_configurator.config import ConfiguratorConfig
from golf_configurator.models.pydantic_models import GripCatalogEntry


@pytest.fixture
def mock_config() -> ConfiguratorConfig:
    """Create a small configurator configuration."""
    return ConfiguratorConfig(
        shaft_brands=["KBS", "Fujikura"],
        grips={"Lamkin": GripCatalogEntry(models=["UTx"], sizes=["Standard"])},
    )


@pytest.fixture
def client(mock_config: ConfiguratorConfig) -> TestClient:
    """Create a test client with overridden dependencies."""
    app = create_app()

    def override_get_configurator_config():
        return mock_config

    app.dependency_overrides[get_configurator_config] = override_get_configurator_config
    return TestClient(app)


class TestHealth:
    """Tests for GET /health."""

    def test_health(self, client: TestClient) -> None:
        """Health endpoint reports healthy."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "healthy"}


class TestGetCatalog:
    """Tests for GET /api/config/catalog endpoint."""

    def test_get_catalog(self, client: TestClient) -> None:
        """Returns clubs, shaft brands and grips."""
        response = client.get("/api/config/catalog")
        assert response.status_code == 200
        data = response.json()

        assert [club["id"] for club in data["clubs"]] == ["4", "5", "6", "7", "8", "9", "PW"]
        assert data["shaft_brands"] == ["KBS", "Fujikura"]
        assert data["grips"]["Lamkin"]["models"] == ["UTx"]

    def test_club_flags(self, client: TestClient) -> None:
        """Clubs carry their required flag."""
        data = client.get("/api/config/catalog").json()

        by_id = {club["id"]: club for club in data["clubs"]}
        assert by_id["PW"]["is_required"] is True
        assert by_id["4"]["is_required"] is False


class TestGetRules:
    """Tests for GET /api/config/rules endpoint."""

    def test_get_rules(self, client: TestClient) -> None:
        """Returns business rules and required bundle properties."""
        response = client.get("/api/config/rules")
        assert response.status_code == 200
        data = response.json()

        assert data["rules"]["min_club_count"] == 5
        assert data["rules"]["max_club_count"] == 7
        assert data["rules"]["dependencies"] == {"4": ["5"]}
        assert "parentVariantId" in data["required_properties"]


class TestValidateSelection:
    """Tests for POST /api/selection/validate endpoint."""

    def test_valid_selection(self, client: TestClient) -> None:
        """A complete selection validates and can check out."""
        response = client.post(
            "/api/selection/validate",
            json={
                "state": {
                    "hand": "Right",
                    "clubs": ["6", "7", "8", "9", "PW"],
                    "grip": {"brand": "Golf Pride", "model": "Tour Velvet", "size": "Standard"},
                }
            },
        )
        assert response.status_code == 200
        data = response.json()

        assert data["valid"] is True
        assert data["derived"]["can_checkout"] is True
        assert data["derived"]["max_unlocked_step"] == 3

    def test_too_few_clubs(self, client: TestClient) -> None:
        """A short selection reports the missing required clubs."""
        response = client.post(
            "/api/selection/validate",
            json={"state": {"hand": "Right", "clubs": ["4"]}},
        )
        data = response.json()

        assert data["valid"] is False
        assert "missing required clubs: 6, 7, 8, 9, PW" in data["reason"]

    def test_require_shaft_flag(self, client: TestClient) -> None:
        """require_shaft forces the shaft check for a stock-shaft selection."""
        response = client.post(
            "/api/selection/validate",
            json={
                "state": {
                    "hand": "Left",
                    "grip": {"brand": "Lamkin", "model": "UTx", "size": "Standard"},
                },
                "require_shaft": True,
            },
        )
        data = response.json()

        assert data["valid"] is False
        assert data["reason"] == "Shaft brand required"

    def test_invalid_payload(self, client: TestClient) -> None:
        """Malformed selections are rejected by request validation."""
        response = client.post("/api/selection/validate", json={"state": {"hand": "Both"}})
        assert response.status_code == 422
