"""
API tests for rule-set catalogue and assessment endpoints.

Tests cover: scoring without storage, save / fetch / rescore, vault
export and import, and error handling.
"""

import pytest
from fastapi import status


class TestRuleSets:
    """Tests for GET /api/rule-sets endpoints."""

    def test_list_rule_sets(self, client):
        response = client.get("/api/rule-sets")

        assert response.status_code == status.HTTP_200_OK
        names = {r["name"]: r for r in response.json()}
        assert set(names) == {"decision_os", "assessment"}
        assert names["decision_os"]["has_tiers"] is True
        assert names["assessment"]["headline_metric"] == "total"

    def test_question_catalogue(self, client):
        response = client.get("/api/rule-sets/assessment/questions")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        ids = [q["id"] for q in data["questions"]]
        assert "income_concentration" in ids
        assert data["mapping"]["time_buffer"] == {"full_at": 12, "ceiling": 100.0}

    def test_unknown_rule_set(self, client):
        response = client.get("/api/rule-sets/astrology/questions")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "UNKNOWN_RULE_SET"


class TestScoring:
    """Tests for POST /api/assessments/{rule_set}/score endpoint."""

    def test_score_decision(self, client, high_optionality_answers):
        response = client.post("/api/assessments/decision_os/score", json={"answers": high_optionality_answers})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["classification"] == "High Optionality"
        assert data["headline_metric"] == "effective_optionality"
        assert data["headline"] == pytest.approx(225)
        assert data["tier"] == "A"
        assert data["moves_status"] == "not_applicable"
        assert data["client_id"].endswith("-1111")

    def test_score_assessment(self, client, default_assessment_answers):
        response = client.post("/api/assessments/assessment/score", json={"answers": default_assessment_answers})

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["headline"] == 41
        assert data["classification"] is None
        assert [m["area"] for m in data["moves"]] == ["Income", "Currency"]

    def test_score_does_not_store(self, client, high_optionality_answers):
        response = client.post("/api/assessments/decision_os/score", json={"answers": high_optionality_answers})
        client_id = response.json()["client_id"]

        assert client.get(f"/api/assessments/{client_id}").status_code == status.HTTP_404_NOT_FOUND

    def test_score_with_default_rule_set(self, client, high_optionality_answers):
        response = client.post("/api/assessments/score", json={"answers": high_optionality_answers})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["rule_set"] == "decision_os"
        assert response.json()["classification"] == "High Optionality"

    def test_garbage_answers_still_score(self, client):
        response = client.post("/api/assessments/decision_os/score", json={"answers": {
            "upside": 42, "effort": ["x"], "multipliers": "Fame", "unexpected": True,
        }})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["classification"] == "Neutral"

    def test_unknown_rule_set(self, client):
        response = client.post("/api/assessments/astrology/score", json={"answers": {}})

        assert response.status_code == status.HTTP_404_NOT_FOUND

    def test_answers_must_be_object(self, client):
        response = client.post("/api/assessments/decision_os/score", json={"answers": ["not", "a", "mapping"]})

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


class TestStoredAssessments:
    """Tests for save, fetch and rescore."""

    def test_save_and_fetch(self, client, default_assessment_answers):
        response = client.post("/api/assessments/assessment",
                               json={"answers": default_assessment_answers, "key": "household-2025"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["key"] == "household-2025"

        fetched = client.get("/api/assessments/household-2025")
        assert fetched.status_code == status.HTTP_200_OK
        assert fetched.json()["scores"]["composites"]["total"] == 41

    def test_key_defaults_to_client_id_with_suffix(self, client, high_optionality_answers):
        response = client.post("/api/assessments/decision_os", json={"answers": high_optionality_answers})

        data = response.json()
        assert data["key"].startswith(data["result"]["client_id"] + "-")

    def test_same_person_saves_keep_separate_records(self, client, high_optionality_answers):
        person = {"first_name": high_optionality_answers["first_name"],
                  "email": high_optionality_answers["email"]}
        idea = client.post("/api/assessments/decision_os", json={"answers": high_optionality_answers}).json()
        check = client.post("/api/assessments/assessment", json={"answers": person}).json()
        again = client.post("/api/assessments/decision_os", json={"answers": high_optionality_answers}).json()

        assert idea["result"]["client_id"] == check["result"]["client_id"]
        assert len({idea["key"], check["key"], again["key"]}) == 3
        assert client.get(f"/api/assessments/{idea['key']}").json()["rule_set"] == "decision_os"
        assert client.get(f"/api/assessments/{check['key']}").json()["rule_set"] == "assessment"
        assert client.get(f"/api/assessments/{again['key']}").status_code == status.HTTP_200_OK

    def test_explicit_key_of_other_rule_set_conflicts(self, client, high_optionality_answers,
                                                      default_assessment_answers):
        client.post("/api/assessments/decision_os", json={"answers": high_optionality_answers, "key": "shared"})

        response = client.post("/api/assessments/assessment",
                               json={"answers": default_assessment_answers, "key": "shared"})

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error_code"] == "ASSESSMENT_CONFLICT"
        assert client.get("/api/assessments/shared").json()["rule_set"] == "decision_os"

    def test_resave_replaces_result(self, client, default_assessment_answers):
        client.post("/api/assessments/assessment", json={"answers": default_assessment_answers, "key": "k1"})
        client.post("/api/assessments/assessment", json={
            "answers": {**default_assessment_answers, "leverage_debt": True}, "key": "k1",
        })

        data = client.get("/api/assessments/k1").json()
        assert data["answers"]["leverage_debt"] is True
        assert data["moves"][-1]["area"] == "Leverage"

    def test_fetch_answers(self, client, high_optionality_answers):
        client.post("/api/assessments/decision_os", json={"answers": high_optionality_answers, "key": "idea-1"})

        response = client.get("/api/assessments/idea-1/answers")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["rule_set"] == "decision_os"
        assert data["answers"]["multipliers"] == ["New skills", "Leverage for future projects"]

    def test_rescore(self, client, trap_answers):
        client.post("/api/assessments/decision_os", json={"answers": trap_answers, "key": "idea-2"})

        response = client.post("/api/assessments/idea-2/rescore")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["classification"] == "Optimization Trap"

    @pytest.mark.parametrize("path", ["/api/assessments/missing", "/api/assessments/missing/answers",
                                      "/api/assessments/missing/export"])
    def test_missing_key(self, client, path):
        response = client.get(path)

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error_code"] == "ASSESSMENT_NOT_FOUND"

    def test_rescore_missing_key(self, client):
        assert client.post("/api/assessments/missing/rescore").status_code == status.HTTP_404_NOT_FOUND


class TestVault:
    """Tests for export and import of key=value vault files."""

    def test_export_then_import(self, client, default_assessment_answers):
        client.post("/api/assessments/assessment", json={"answers": default_assessment_answers, "key": "vault-1"})

        exported = client.get("/api/assessments/vault-1/export")
        assert exported.status_code == status.HTTP_200_OK
        assert exported.text.startswith("# optionality-vault v1")
        assert "vault-1.opt" in exported.headers["content-disposition"]

        imported = client.post("/api/assessments/assessment/import", content=exported.text,
                               headers={"Content-Type": "text/plain"})
        assert imported.status_code == status.HTTP_200_OK
        assert imported.json()["scores"]["composites"]["total"] == 41

    def test_import_into_wrong_rule_set(self, client, default_assessment_answers):
        client.post("/api/assessments/assessment", json={"answers": default_assessment_answers, "key": "vault-2"})
        exported = client.get("/api/assessments/vault-2/export").text

        response = client.post("/api/assessments/decision_os/import", content=exported,
                               headers={"Content-Type": "text/plain"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "VAULT_RULE_SET"

    def test_import_malformed(self, client):
        response = client.post("/api/assessments/assessment/import", content="this is not a vault",
                               headers={"Content-Type": "text/plain"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.json()["error_code"] == "VAULT_SYNTAX"


class TestHealth:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["status"] == "healthy"
        assert "assessment" in response.json()["rule_sets"]

    def test_metrics_count_scored_assessments(self, client, trap_answers):
        client.post("/api/assessments/decision_os/score", json={"answers": trap_answers})

        response = client.get("/metrics")

        assert response.status_code == status.HTTP_200_OK
        assert "assessments_scored_total" in response.text
