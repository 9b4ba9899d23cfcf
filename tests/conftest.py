"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from return_engine.main import app
from return_engine.calculations.inputs import EconomicAssumptions, PropertyFinancials


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def flat_assumptions():
    """No growth, no inflation, no taxes or selling costs."""
    return EconomicAssumptions(
        appreciation_rate=0.0,
        rent_growth_rate=0.0,
        expense_growth_rate=0.0,
        inflation_rate=0.0,
        capital_gains_tax_rate=0.0,
        selling_cost_rate=0.0,
        income_tax_rate=0.0,
    )


@pytest.fixture
def all_cash_property():
    """500k property bought with 100k down, no mortgage."""
    return PropertyFinancials(
        purchase_price=500_000,
        down_payment=100_000,
        current_value=500_000,
        monthly_rent=3_000,
        monthly_expenses=1_200,
        closing_costs=0.0,
    )


@pytest.fixture
def mortgaged_property():
    """400k property with a 320k, 6%, 30-year note two years in."""
    return PropertyFinancials(
        purchase_price=400_000,
        down_payment=80_000,
        current_value=420_000,
        monthly_rent=2_800,
        monthly_expenses=700,
        loan_amount=320_000,
        outstanding_balance=311_000,
        monthly_mortgage=1_918.56,
        interest_rate=0.06,
        loan_term_months=360,
        elapsed_term_months=24,
    )
