"""
Pytest configuration and shared fixtures.
"""

import pytest
import sys
import os

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from dealmetrics.main import app
from dealmetrics.calculations.models import (
    HoldingPeriodInputs,
    PropertyUse,
    UnderwritingInputs,
)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "slow: marks tests as slow")
    config.addinivalue_line("markers", "integration: marks integration tests")


def make_inputs(**overrides) -> UnderwritingInputs:
    """Single-family rental: $250K, 20% down, 7% for 30 years, $2,000 rent."""
    values = dict(
        purchase_price=250000,
        closing_cost_rate=3,
        rehab_cost=20000,
        down_payment_pct=20,
        interest_rate=7,
        term_years=30,
        pmi_enabled=False,
        pmi_monthly=0,
        taxes_annual=3000,
        insurance_annual=1200,
        hoa_monthly=0,
        utilities_monthly=100,
        rent_monthly=2000,
        other_income_monthly=0,
        vacancy_rate=5,
        maintenance_rate=8,
        capex_rate=5,
        management_rate=8,
    )
    values.update(overrides)
    return UnderwritingInputs(**values)


def make_holding_inputs(deal: UnderwritingInputs = None, **overrides) -> HoldingPeriodInputs:
    """Ten-year hold with typical growth assumptions."""
    values = dict(
        underwriting_inputs=deal or make_inputs(),
        holding_period_years=10,
        appreciation_rate=3,
        rent_growth_rate=2,
        expense_growth_rate=2,
        selling_cost_rate=6,
    )
    values.update(overrides)
    return HoldingPeriodInputs(**values)


@pytest.fixture
def rental_inputs():
    """Investment property inputs."""
    return make_inputs()


@pytest.fixture
def residence_inputs():
    """Owner-occupied home: no rent, no management fee."""
    return make_inputs(
        purchase_price=400000,
        rehab_cost=0,
        down_payment_pct=10,
        interest_rate=6.5,
        pmi_enabled=True,
        pmi_monthly=150,
        taxes_annual=4800,
        insurance_annual=1500,
        hoa_monthly=50,
        utilities_monthly=250,
        rent_monthly=0,
        vacancy_rate=0,
        maintenance_rate=1,
        capex_rate=0.5,
        management_rate=0,
        property_use=PropertyUse.primary_residence,
    )


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def deal_factory():
    """Build UnderwritingInputs with overrides."""
    return make_inputs


@pytest.fixture
def holding_factory():
    """Build HoldingPeriodInputs with overrides."""
    return make_holding_inputs
