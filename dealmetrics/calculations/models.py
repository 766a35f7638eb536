"""
Underwriting Records

Immutable input/output records passed to and returned from the calculation
engine. All rates are percentages (e.g., 7.0 for 7%) and all money values
are plain dollars.
"""

import enum
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional


class PropertyUse(str, enum.Enum):
    """How the buyer intends to use the property."""

    investment = "investment"
    primary_residence = "primary_residence"


@dataclass(frozen=True)
class UnderwritingInputs:
    """Deal assumptions for a single point-in-time underwriting."""

    purchase_price: float
    closing_cost_rate: float
    rehab_cost: float
    down_payment_pct: float
    interest_rate: float
    term_years: int
    pmi_enabled: bool
    pmi_monthly: float
    taxes_annual: float
    insurance_annual: float
    hoa_monthly: float
    utilities_monthly: float
    rent_monthly: float
    other_income_monthly: float
    vacancy_rate: float
    maintenance_rate: float
    capex_rate: float
    management_rate: float
    # None falls back to inferring the use from rent and management rate
    property_use: Optional[PropertyUse] = None


@dataclass(frozen=True)
class UnderwritingOutputs:
    """One stabilized year's income statement and key ratios."""

    total_monthly_payment: float
    noi_monthly: float
    noi_annual: float
    cash_flow_monthly: float
    cash_flow_annual: float
    cap_rate: float
    cash_on_cash: float
    dscr: float
    break_even_rent_monthly: float
    all_in_cash_required: float


@dataclass(frozen=True)
class AmortizationEntry:
    """Single month of a loan amortization schedule."""

    month: int
    payment: float
    principal: float
    interest: float
    balance: float
    payment_date: Optional[date] = None


@dataclass(frozen=True)
class HoldingPeriodInputs:
    """Underwriting inputs plus the growth assumptions for a multi-year hold."""

    underwriting_inputs: UnderwritingInputs
    holding_period_years: int
    appreciation_rate: float
    rent_growth_rate: float
    expense_growth_rate: float
    selling_cost_rate: float


@dataclass(frozen=True)
class YearlyProjection:
    """Projected figures for one year of the holding period."""

    year: int
    # Property
    property_value: float
    loan_balance: float
    equity: float
    # Income
    rent_annual: float
    other_income_annual: float
    gross_income_annual: float
    vacancy_loss_annual: float
    effective_income_annual: float
    # Expenses
    operating_expenses_annual: float
    noi_annual: float
    # Debt
    debt_service_annual: float
    principal_paid_annual: float
    interest_paid_annual: float
    # Cash flow
    cash_flow_annual: float
    cumulative_cash_flow: float


@dataclass(frozen=True)
class ExitScenario:
    """Sale of the property at the end of the holding period."""

    sale_price: float
    selling_costs: float
    loan_payoff: float
    net_proceeds_from_sale: float
    cumulative_cash_flow: float
    total_profit: float
    initial_investment: float
    total_roi: float
    annualized_roi: float


@dataclass(frozen=True)
class HoldingPeriodOutputs:
    """Full holding-period result for an investment property."""

    yearly_projections: List[YearlyProjection]
    exit_scenario: ExitScenario
    irr: float
    equity_multiple: float


@dataclass(frozen=True)
class PrimaryResidenceOutputs:
    """Homeowner view of the monthly and annual cost of ownership."""

    all_in_monthly_cost: float
    mortgage_pi: float
    monthly_taxes: float
    monthly_insurance: float
    monthly_hoa: float
    monthly_maintenance_reserve: float
    cash_required_at_close: float
    annual_gross_cost: float
    annual_principal_paydown: float
    annual_net_cost_of_ownership: float
    monthly_cost_vs_rent: Optional[float] = None


@dataclass(frozen=True)
class ResidenceExitScenario:
    """Owner position if the home is sold at a given year."""

    year: int
    net_proceeds_from_sale: float
    total_housing_cost_to_date: float
    net_position_vs_renting: float


@dataclass(frozen=True)
class PriceScenario:
    """Sale outcome under a stressed price path."""

    net_proceeds_at_sale: float
    effective_monthly_cost: float


@dataclass(frozen=True)
class PrimaryResidenceHoldingPeriodOutputs:
    """Homeowner view of a multi-year hold, including rent-vs-buy break-even."""

    break_even_year_buy_vs_rent: Optional[int]
    net_cost_of_housing_total: float
    net_cost_of_housing_monthly_equivalent: float
    equity_from_principal_paydown: float
    equity_from_appreciation: float
    total_equity_accumulation: float
    flat_price_scenario: PriceScenario
    negative_price_scenario: PriceScenario
    exit_scenarios: List[ResidenceExitScenario] = field(default_factory=list)
