"""
Tests for calculation API endpoints.
"""

import pytest


FLAT_ASSUMPTIONS = {
    "country": "USA",
    "appreciation_rate": 0,
    "rent_growth_rate": 0,
    "expense_growth_rate": 0,
    "inflation_rate": 0,
    "capital_gains_tax_rate": 0,
    "selling_cost_rate": 0,
    "income_tax_rate": 0,
}

ALL_CASH_PROPERTY = {
    "purchase_price": 500000,
    "down_payment": 100000,
    "current_value": 500000,
    "monthly_rent": 3000,
    "monthly_expenses": 1200,
}

MORTGAGED_PROPERTY = {
    "purchase_price": 400000,
    "down_payment": 80000,
    "current_value": 420000,
    "monthly_rent": 2800,
    "monthly_expenses": 700,
    "loan_amount": 320000,
    "outstanding_balance": 311000,
    "monthly_mortgage": 1918.56,
    "interest_rate": 0.06,
    "loan_term_months": 360,
    "elapsed_term_months": 24,
}


class TestMetricsAPI:
    """Test property metric endpoints."""

    def test_calculate_metrics(self, client):
        """Ten-year all-cash hold with flat assumptions."""
        response = client.post(
            "/api/calculate/metrics",
            json={
                "property": ALL_CASH_PROPERTY,
                "assumptions": FLAT_ASSUMPTIONS,
                "horizon_years": 10,
                "closing_costs": 0,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["cash_flows"] == [-100000.0] + [21600.0] * 9 + [521600.0]
        assert data["is_valid"] is True
        assert 30 < data["irr_pct"] < 31
        assert 276534 < data["npv"] < 276535
        assert data["npv_index"] > 1
        assert data["total_cash_flow"] == 716000
        assert data["cumulative_return"] == pytest.approx(616.0)
        assert data["cash_on_cash_return"] == pytest.approx(21.6)

    def test_metrics_uses_country_preset(self, client):
        response = client.post(
            "/api/calculate/metrics",
            json={"property": MORTGAGED_PROPERTY, "assumptions": {"country": "UK"}},
        )
        assert response.status_code == 200
        assert len(response.json()["cash_flows"]) == 11

    def test_invalid_purchase_price(self, client):
        response = client.post(
            "/api/calculate/metrics",
            json={"property": {**ALL_CASH_PROPERTY, "purchase_price": 0}},
        )
        assert response.status_code == 422
        assert response.json()["field"] == "purchase_price"

    def test_unknown_country(self, client):
        response = client.post(
            "/api/calculate/metrics",
            json={"property": ALL_CASH_PROPERTY, "assumptions": {"country": "Atlantis"}},
        )
        assert response.status_code == 422
        assert response.json()["field"] == "country"

    def test_calculate_horizons(self, client):
        response = client.post(
            "/api/calculate/horizons",
            json={"property": ALL_CASH_PROPERTY, "horizons": [5, 10]},
        )
        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["horizon_years"] for r in results] == [5, 10]

    def test_calculate_scenarios(self, client):
        response = client.post(
            "/api/calculate/scenarios",
            json={"property": MORTGAGED_PROPERTY},
        )
        assert response.status_code == 200
        scenarios = response.json()["scenarios"]
        assert set(scenarios) == {"current", "max_debt", "zero_debt"}


class TestCashFlowMetricsAPI:
    """Test endpoints that work on raw cash flows."""

    def test_calculate_irr(self, client):
        response = client.post(
            "/api/calculate/irr",
            json={"cash_flows": [-100, 20, 20, 20, 20, 80]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert data["irr_pct"] == pytest.approx(data["irr"] * 100)
        assert data["multiple"] == pytest.approx(1.6)
        assert data["profit"] == 60

    def test_calculate_irr_without_sign_change(self, client):
        """Unsolvable flows are reported, not rejected."""
        response = client.post(
            "/api/calculate/irr",
            json={"cash_flows": [100, 100, 100]},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is False
        assert data["multiple"] is None

    def test_calculate_irr_single_flow(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [-100]})
        assert response.status_code == 400

    def test_calculate_npv(self, client):
        response = client.post(
            "/api/calculate/npv",
            json={"cash_flows": [-1000, 1100], "discount_rate_pct": 10},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["npv"] == pytest.approx(0, abs=0.01)
        assert data["npv_index"] == pytest.approx(1.0)

    def test_calculate_npv_empty(self, client):
        response = client.post("/api/calculate/npv", json={"cash_flows": []})
        assert response.status_code == 400

    def test_calculate_mirr(self, client):
        response = client.post(
            "/api/calculate/mirr",
            json={
                "cash_flows": [-1000, 0, 0, 1200],
                "financing_rate": 0.12,
                "reinvest_rate": 0.12,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["is_valid"] is True
        assert data["pv_negative"] == -1000
        assert data["fv_positive"] == 1200
        assert round(data["mirr_annual"], 4) == 1.0736


class TestAmortizationAPI:
    """Test loan amortization endpoint."""

    def test_calculate_amortization(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "loan_amount": 200000,
                "annual_rate": 0.06,
                "total_term_months": 360,
                "months_elapsed": 60,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["monthly_payment"] == pytest.approx(1199.10, abs=0.01)
        assert data["outstanding_balance"] == pytest.approx(186108.71, abs=1)
        assert data["remaining_term_months"] == 300
        assert len(data["schedule"]) == 360
        assert data["schedule"][-1]["ending_balance"] == 0

    def test_amortization_without_schedule(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "loan_amount": 100000,
                "annual_rate": 0.05,
                "total_term_months": 120,
                "include_schedule": False,
            },
        )
        assert response.status_code == 200
        assert response.json()["schedule"] == []

    def test_interest_only_position_matches_schedule(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={
                "loan_amount": 100000,
                "annual_rate": 0.06,
                "total_term_months": 360,
                "months_elapsed": 12,
                "io_months": 12,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["outstanding_balance"] == 100000
        assert data["cumulative_principal_paid"] == 0
        assert data["schedule"][11]["ending_balance"] == data["outstanding_balance"]
        assert data["interest_only_payment"] == 500
        assert data["schedule"][12]["payment"] == pytest.approx(
            data["monthly_payment"], abs=0.01
        )

    def test_total_interest_without_schedule(self, client):
        terms = {"loan_amount": 100000, "annual_rate": 0.05, "total_term_months": 120}
        with_schedule = client.post("/api/calculate/amortization", json=terms).json()
        without = client.post(
            "/api/calculate/amortization", json={**terms, "include_schedule": False}
        ).json()
        assert without["total_interest"] > 0
        assert without["total_interest"] == with_schedule["total_interest"]

    def test_non_finite_rate_rejected(self, client):
        response = client.post(
            "/api/calculate/amortization",
            content='{"loan_amount": 100000, "annual_rate": NaN, "total_term_months": 120}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 422

    def test_negative_rate_rejected(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"loan_amount": 100000, "annual_rate": -0.01, "total_term_months": 120},
        )
        assert response.status_code == 422


class TestProjectionAPI:
    """Test equity projection endpoint."""

    def test_calculate_projection(self, client):
        response = client.post(
            "/api/calculate/projection",
            json={"property": MORTGAGED_PROPERTY, "years": 5},
        )
        assert response.status_code == 200
        points = response.json()["points"]
        assert [p["year"] for p in points] == [0, 1, 2, 3, 4, 5]
        assert points[0]["market_value"] == 420000
        assert points[5]["remaining_term_months"] == 276


class TestInflationAPI:
    """Test inflation-adjusted return endpoint."""

    def test_calculate_inflation(self, client):
        response = client.post(
            "/api/calculate/inflation",
            json={
                "property": {
                    "purchase_price": 300000,
                    "down_payment": 60000,
                    "current_value": 390000,
                    "monthly_rent": 2000,
                    "monthly_expenses": 500,
                    "monthly_mortgage": 1000,
                },
                "purchase_date": "2020-06-01",
                "current_year": 2022,
            },
        )
        assert response.status_code == 200
        data = response.json()
        assert data["appreciation"]["nominal_roi"] == 30.0
        assert data["appreciation"]["inflation_factor"] == 1.131
        assert data["appreciation"]["inflation_adjusted_price"] == 339228.0
        assert data["appreciation"]["real_roi"] == 14.97
        assert data["roi"]["total_cash_flow"] == 12000
        assert data["roi"]["total_roi"] == 34.0
        assert data["roi"]["annualized_roi"] == 15.76

    def test_invalid_property(self, client):
        response = client.post(
            "/api/calculate/inflation",
            json={
                "property": {"purchase_price": -1, "down_payment": 0},
                "purchase_date": "2020-06-01",
            },
        )
        assert response.status_code == 422


class TestHealthCheck:
    """Test health check endpoint."""

    def test_health_check(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
