"""
Tests for the calculation API endpoints.

These tests exercise the /v1/calculate routes, the health endpoints and the
sanitized error responses.
"""

import pytest


@pytest.fixture
def benefit_inputs():
    """Cost-only use case: 34,000 hours at $150 with default factors."""
    return {
        "hours_saved": 34000,
        "loaded_hourly_rate": 150,
        "probability_of_success": 0.75,
    }


@pytest.fixture
def scenario_snapshot():
    """Two-use-case scenario in the shape stored by the application."""
    return {
        "scenario": "base",
        "benefits": [
            {
                "id": "bq-1",
                "use_case_id": "uc-1",
                "use_case_name": "Invoice matching",
                "cost_formula_labels": {"components": [
                    {"label": "Hours Saved", "value": 34000},
                    {"label": "Loaded Hourly Rate", "value": 150},
                ]},
                "probability_of_success": 0.75,
            },
            {
                "id": "bq-2",
                "use_case_id": "uc-2",
                "use_case_name": "Dynamic pricing",
                "revenue_formula_labels": {"components": [
                    {"label": "Revenue Uplift %", "value": 0.02},
                    {"label": "Revenue at Risk", "value": 100000000},
                ]},
                "probability_of_success": 0.5,
            },
        ],
        "readiness": [
            {
                "use_case_id": "uc-1",
                "data_availability": 8,
                "technical_infrastructure": 6,
                "organizational_capacity": 7,
                "governance": 5,
                "runs_per_month": 1000,
                "input_tokens_per_run": 2000,
                "output_tokens_per_run": 500,
            },
            {
                "use_case_id": "uc-2",
                "data_availability": 4,
                "technical_infrastructure": 4,
                "organizational_capacity": 4,
                "governance": 4,
            },
        ],
        "annual_revenue": 10000000,
        "total_employees": 50,
    }


# ============================================================================
# Health
# ============================================================================

def test_healthz(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.json() == {"ok": True}


def test_health_status(client):
    response = client.get("/v1/health/status")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["version"] == "0.1.0"
    assert data["scenarios"] == ["base", "conservative", "optimistic"]
    assert data["bounded_inputs"] == 13


def test_root(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "operational"


# ============================================================================
# Single-formula endpoints
# ============================================================================

def test_benefit_endpoint(client, benefit_inputs):
    response = client.post("/v1/calculate/benefit", json=benefit_inputs)

    assert response.status_code == 200
    data = response.json()
    assert abs(data["cost"] - 4647375.0) < 1.0
    assert abs(data["expected_value"] - 3485531.25) < 1.0
    assert data["traces"]["cost"]["inputs"]["hours_saved"] == 34000
    assert data["traces"]["cost"]["output"] == data["cost"]


def test_readiness_score_endpoint(client):
    response = client.post("/v1/calculate/readiness-score", json={
        "data_availability": 8,
        "technical_infrastructure": 6,
        "organizational_capacity": 7,
        "governance": 5,
        "runs_per_month": 1000,
        "input_tokens_per_run": 2000,
        "output_tokens_per_run": 500,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["readiness_score"] == pytest.approx(6.7)
    assert data["annual_token_cost"] == pytest.approx(162.0)


def test_priority_endpoint(client):
    response = client.post("/v1/calculate/priority", json={
        "expected_value": 2000000,
        "all_expected_values": [2000000, 1000000],
        "readiness_score": 6.0,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["value_score"] == 10.0
    assert data["priority_score"] == pytest.approx(8.0)
    assert data["recommended_phase"] == "Q1"


def test_projection_endpoint(client):
    response = client.post("/v1/calculate/projection", json={
        "annual_benefit": 1000000,
        "initial_investment": 200000,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["payback_months"] == 3
    assert data["irr"] > 0


def test_guardrails_endpoint(client):
    response = client.post("/v1/calculate/guardrails", json={
        "use_cases": [{"cost_benefit": 60000000}, {"revenue_benefit": 35000000}],
        "annual_revenue": 100000000,
        "total_employees": 0,
    })

    assert response.status_code == 200
    data = response.json()
    assert len(data["warnings"]) == 2
    assert data["metrics"]["benefits_capped"] is True


def test_input_bounds_endpoint(client):
    response = client.get("/v1/calculate/input-bounds")

    assert response.status_code == 200
    data = response.json()
    assert data["loadedHourlyRate"]["min_value"] == 25
    assert data["loadedHourlyRate"]["max_value"] == 500


# ============================================================================
# Pipeline endpoints
# ============================================================================

def test_benefits_endpoint_applies_scenario(client, scenario_snapshot):
    response = client.post("/v1/calculate/benefits", json={
        "scenario": "conservative",
        "benefits": scenario_snapshot["benefits"],
    })

    assert response.status_code == 200
    data = response.json()
    assert abs(data[0]["cost_benefit"] - 4647375.0 * 0.6) < 1.0
    assert data[0]["display"]["cost_benefit"] == "$2.8M"


def test_readiness_endpoint(client, scenario_snapshot):
    response = client.post("/v1/calculate/readiness", json={"readiness": scenario_snapshot["readiness"]})

    assert response.status_code == 200
    data = response.json()
    assert data[0]["readiness_score"] == 6.7
    assert data[1]["readiness_score"] == 4.0


def test_priorities_scenarios_dashboard_chain(client, scenario_snapshot):
    benefits = client.post("/v1/calculate/benefits", json={"benefits": scenario_snapshot["benefits"]}).json()
    readiness = client.post("/v1/calculate/readiness", json={"readiness": scenario_snapshot["readiness"]}).json()

    response = client.post("/v1/calculate/priorities", json={"benefits": benefits, "readiness": readiness})
    assert response.status_code == 200
    priorities = response.json()
    assert priorities[0]["quadrant"] == "champions"

    response = client.post("/v1/calculate/scenarios", json={"benefits": benefits})
    assert response.status_code == 200
    assert response.json()["moderate"]["payback_months"] == 3

    response = client.post("/v1/calculate/multi-year", json={"benefits": benefits})
    assert response.status_code == 200
    assert response.json()["total_benefit_over_period_display"] == "$12.6M"

    response = client.post("/v1/calculate/dashboard", json={
        "benefits": benefits,
        "readiness": readiness,
        "priorities": priorities,
    })
    assert response.status_code == 200
    assert response.json()["value_per_million_tokens"] == 2428950


def test_recalculate_endpoint(client, scenario_snapshot):
    response = client.post("/v1/calculate/recalculate", json=scenario_snapshot)

    assert response.status_code == 200
    data = response.json()
    assert set(data) == {
        "benefits", "readiness", "priorities", "scenario_analysis",
        "multi_year", "executive_dashboard", "guardrails",
    }
    assert abs(data["benefits"][0]["cost_benefit"] - 4647375.0) < 1.0
    assert len(data["guardrails"]["warnings"]) == 2


# ============================================================================
# Validation errors
# ============================================================================

def test_negative_hours_rejected(client, benefit_inputs):
    benefit_inputs["hours_saved"] = -100
    response = client.post("/v1/calculate/benefit", json=benefit_inputs)

    assert response.status_code == 422
    data = response.json()
    assert data["error"] == "validation_error"
    assert data["message"] == "Request validation failed"
    assert data["details"][0]["field"] == "body -> hours_saved"


def test_validation_error_does_not_echo_input(client):
    response = client.post("/v1/calculate/readiness-score", json={
        "data_availability": 987654,
        "technical_infrastructure": 5,
        "organizational_capacity": 5,
        "governance": 5,
    })

    assert response.status_code == 422
    assert "987654" not in response.text
    for detail in response.json()["details"]:
        assert set(detail) == {"field", "type", "message"}


def test_readiness_dimension_out_of_range_in_snapshot(client, scenario_snapshot):
    scenario_snapshot["readiness"][0]["governance"] = 11
    response = client.post("/v1/calculate/recalculate", json=scenario_snapshot)

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


def test_missing_body_rejected(client):
    response = client.post("/v1/calculate/projection", json={})

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "body -> annual_benefit"


def test_projection_endpoint_unrecoverable_investment(client):
    response = client.post("/v1/calculate/projection", json={
        "annual_benefit": 1,
        "initial_investment": 1000,
    })

    assert response.status_code == 200
    data = response.json()
    assert data["irr"] > -1
    assert data["payback_months"] == 12000


def test_recalculate_endpoint_conservative_keeps_scenario_analysis(client, scenario_snapshot):
    base = client.post("/v1/calculate/recalculate", json=scenario_snapshot).json()
    scenario_snapshot["scenario"] = "conservative"
    conservative = client.post("/v1/calculate/recalculate", json=scenario_snapshot).json()

    assert conservative["scenario_analysis"] == base["scenario_analysis"]
    assert conservative["benefits"][0]["probability_of_success"] == pytest.approx(0.6375)


def test_priority_endpoint_rejects_zero_readiness(client):
    response = client.post("/v1/calculate/priority", json={
        "expected_value": 1000,
        "all_expected_values": [1000],
        "readiness_score": 0,
    })

    assert response.status_code == 422
    assert response.json()["details"][0]["field"] == "body -> readiness_score"
