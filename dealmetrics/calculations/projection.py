"""
Multi-Year Projection

Grows income, expenses, and property value year by year over a holding
period, producing one YearlyProjection row per year.

Growth conventions:
- Property value compounds from year 1: price * (1 + appreciation) ** year
- Rent and expenses use the base figures in year 1 and compound from year 2:
  base * (1 + growth) ** (year - 1)
"""

from typing import List

from dealmetrics.calculations.amortization import (
    interest_paid_in_year,
    loan_balance_at_year,
    principal_paid_in_year,
)
from dealmetrics.calculations.models import HoldingPeriodInputs, YearlyProjection
from dealmetrics.calculations.underwriting import debt_service, loan_amount


def calculate_growth_factor(annual_rate_pct: float, periods: int) -> float:
    """Compound growth factor for a percentage rate over whole periods."""
    return (1 + annual_rate_pct / 100) ** periods


def calculate_yearly_projection(
    inputs: HoldingPeriodInputs,
    year: int,
    previous_cumulative_cash_flow: float = 0.0,
) -> YearlyProjection:
    """
    Project a single year of the hold.

    Args:
        inputs: Holding period assumptions
        year: Year number (1-based)
        previous_cumulative_cash_flow: Cumulative cash flow through the prior year

    Returns:
        YearlyProjection for ``year``
    """
    deal = inputs.underwriting_inputs
    principal = loan_amount(deal)

    # === PROPERTY ===
    property_value = deal.purchase_price * calculate_growth_factor(inputs.appreciation_rate, year)
    loan_balance = loan_balance_at_year(principal, deal.interest_rate, deal.term_years, year)
    equity = property_value - loan_balance

    # === INCOME ===
    rent_factor = calculate_growth_factor(inputs.rent_growth_rate, year - 1)
    rent_annual = deal.rent_monthly * 12 * rent_factor
    other_income_annual = deal.other_income_monthly * 12 * rent_factor
    gross_income_annual = rent_annual + other_income_annual

    vacancy_loss_annual = gross_income_annual * (deal.vacancy_rate / 100)
    effective_income_annual = gross_income_annual - vacancy_loss_annual

    # === EXPENSES ===
    expense_factor = calculate_growth_factor(inputs.expense_growth_rate, year - 1)
    fixed_expenses_annual = (
        deal.taxes_annual
        + deal.insurance_annual
        + deal.hoa_monthly * 12
        + deal.utilities_monthly * 12
    ) * expense_factor

    # Rent-linked expenses follow that year's grown gross income
    variable_rate = (deal.maintenance_rate + deal.capex_rate + deal.management_rate) / 100
    operating_expenses_annual = fixed_expenses_annual + gross_income_annual * variable_rate

    noi_annual = effective_income_annual - operating_expenses_annual

    # === DEBT ===
    principal_paid_annual = principal_paid_in_year(
        principal, deal.interest_rate, deal.term_years, year
    )
    interest_paid_annual = interest_paid_in_year(
        principal, deal.interest_rate, deal.term_years, year
    )
    # Level P&I plus mortgage insurance, charged every year of the hold
    _, debt_service_annual = debt_service(deal)

    # === CASH FLOW ===
    cash_flow_annual = noi_annual - debt_service_annual
    cumulative_cash_flow = previous_cumulative_cash_flow + cash_flow_annual

    return YearlyProjection(
        year=year,
        property_value=property_value,
        loan_balance=loan_balance,
        equity=equity,
        rent_annual=rent_annual,
        other_income_annual=other_income_annual,
        gross_income_annual=gross_income_annual,
        vacancy_loss_annual=vacancy_loss_annual,
        effective_income_annual=effective_income_annual,
        operating_expenses_annual=operating_expenses_annual,
        noi_annual=noi_annual,
        debt_service_annual=debt_service_annual,
        principal_paid_annual=principal_paid_annual,
        interest_paid_annual=interest_paid_annual,
        cash_flow_annual=cash_flow_annual,
        cumulative_cash_flow=cumulative_cash_flow,
    )


def calculate_holding_period_projection(inputs: HoldingPeriodInputs) -> List[YearlyProjection]:
    """Project every year from 1 through the holding period."""
    projections = []
    cumulative_cash_flow = 0.0

    for year in range(1, inputs.holding_period_years + 1):
        projection = calculate_yearly_projection(inputs, year, cumulative_cash_flow)
        projections.append(projection)
        cumulative_cash_flow = projection.cumulative_cash_flow

    return projections
