"""
API tests for the option portfolio endpoints.

Tests cover: listing with evaluation, creation and validation, kill and
review transitions, vault export and import.
"""

import pytest
from fastapi import status


class TestPortfolioListing:
    """Tests for GET /api/portfolio endpoint."""

    def test_empty_portfolio(self, client):
        response = client.get("/api/portfolio")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["options"] == []
        assert data["portfolio_score"] == 0

    def test_list_with_evaluation(self, client, sample_option):
        response = client.get("/api/portfolio")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["active_count"] == 1
        assert data["killed_count"] == 0
        option = data["options"][0]
        assert option["title"] == "Newsletter"
        assert option["gem"] == 12
        assert option["classification"] == "High Optionality"
        assert option["decay"] == pytest.approx(1.0, abs=0.01)
        assert data["portfolio_score"] == pytest.approx(108, abs=1)


class TestPortfolioCreation:
    """Tests for POST /api/portfolio endpoint."""

    def test_add_option(self, client):
        payload = {
            "title": "Rent out the spare room",
            "gain_potential": 3,
            "effort_cost": 8,
            "multiplier_effect": 1,
            "reversibility": 2,
            "category": "asset",
        }

        response = client.post("/api/portfolio", json=payload)

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["status"] == "active"
        assert data["classification"] == "Optimization Trap"
        assert "Effort outweighs upside" in data["warnings"]
        assert "id" in data

    def test_add_option_defaults(self, client):
        response = client.post("/api/portfolio", json={"title": "Learn Portuguese"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["category"] == "project"

    @pytest.mark.parametrize("payload", [
        {},
        {"title": ""},
        {"title": "Too good", "gain_potential": 11},
        {"title": "Free lunch", "effort_cost": 0},
        {"title": "Yacht", "category": "yacht"},
    ])
    def test_invalid_option(self, client, payload):
        response = client.post("/api/portfolio", json=payload)

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestPortfolioTransitions:
    """Tests for kill and review endpoints."""

    def test_kill_option_leaves_score(self, client, sample_option):
        response = client.post(f"/api/portfolio/{sample_option.id}/kill")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "killed"

        overview = client.get("/api/portfolio").json()
        assert overview["killed_count"] == 1
        assert overview["portfolio_score"] == 0
        assert len(overview["options"]) == 1

    def test_review_option(self, client, sample_option):
        response = client.post(f"/api/portfolio/{sample_option.id}/review")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["decay"] == pytest.approx(1.0, abs=0.01)

    @pytest.mark.parametrize("action", ["kill", "review"])
    def test_unknown_option(self, client, action):
        response = client.post(f"/api/portfolio/9999/{action}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "OPTION_NOT_FOUND"


class TestPortfolioVault:
    """Tests for GET /api/portfolio/export and POST /api/portfolio/import."""

    def test_export_then_import_restores_portfolio(self, client, sample_option):
        client.post("/api/portfolio", json={"title": "Rent out the spare room", "gain_potential": 3,
                                            "effort_cost": 8, "reversibility": 2, "category": "asset"})
        killed = client.post("/api/portfolio", json={"title": "Day trading"}).json()
        client.post(f"/api/portfolio/{killed['id']}/kill")
        before = client.get("/api/portfolio").json()

        exported = client.get("/api/portfolio/export")
        assert exported.status_code == status.HTTP_200_OK
        assert exported.text.startswith("# optionality-vault v1")
        assert "portfolio.opt" in exported.headers["content-disposition"]

        client.post("/api/portfolio", json={"title": "Should disappear"})
        imported = client.post("/api/portfolio/import", content=exported.text,
                               headers={"Content-Type": "text/plain"})

        assert imported.status_code == status.HTTP_200_OK
        after = imported.json()
        assert [o["title"] for o in after["options"]] == [o["title"] for o in before["options"]]
        assert [o["status"] for o in after["options"]] == ["killed", "active", "active"]
        assert after["killed_count"] == 1
        assert after["portfolio_score"] == pytest.approx(before["portfolio_score"], abs=0.2)
        assert after["options"][-1]["gem"] == 12

    def test_import_empty_vault_clears_portfolio(self, client, sample_option):
        response = client.post("/api/portfolio/import", content="# optionality-vault v1\n",
                               headers={"Content-Type": "text/plain"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["options"] == []

    @pytest.mark.parametrize("text,error_code", [
        ("not a vault", "VAULT_SYNTAX"),
        ("portfolio=everything\n", "VAULT_NO_PORTFOLIO"),
        ("portfolio.0.title=Moonshot\nportfolio.0.gain_potential=11\n", "VAULT_BAD_OPTION"),
        ("portfolio.0.title=Moonshot\nportfolio.0.status=paused\n", "VAULT_BAD_OPTION"),
        ("portfolio.0.title=Moonshot\nportfolio.0.last_reviewed_at=last tuesday\n", "VAULT_BAD_OPTION"),
    ])
    def test_import_rejects_bad_vault_and_keeps_portfolio(self, client, sample_option, text, error_code):
        response = client.post("/api/portfolio/import", content=text, headers={"Content-Type": "text/plain"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == error_code
        assert [o["title"] for o in client.get("/api/portfolio").json()["options"]] == ["Newsletter"]
