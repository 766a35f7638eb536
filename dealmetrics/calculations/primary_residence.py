"""
Primary Residence Analysis

Homeowner-centric restatement of a deal: cost of living rather than yield,
equity accumulation over the hold, rent-vs-buy break-even, and price stress
scenarios.
"""

from typing import Optional

from dealmetrics.calculations.amortization import (
    loan_balance_at_year,
    principal_paid_in_year,
)
from dealmetrics.calculations.holding_period import net_sale_proceeds
from dealmetrics.calculations.models import (
    HoldingPeriodInputs,
    PriceScenario,
    PrimaryResidenceHoldingPeriodOutputs,
    PrimaryResidenceOutputs,
    ResidenceExitScenario,
    UnderwritingInputs,
)
from dealmetrics.calculations.projection import calculate_growth_factor
from dealmetrics.calculations.underwriting import (
    all_in_cash_required,
    loan_amount,
    monthly_pi,
    mortgage_insurance_monthly,
)

# Return a renter earns by investing the cash they would have put into the purchase
RENTER_REINVESTMENT_RATE = 3.0

BREAK_EVEN_SEARCH_MAX_YEARS = 30
BREAK_EVEN_SEARCH_EXTRA_YEARS = 10
EXIT_SCENARIO_YEARS = (3, 5, 7)
NEGATIVE_PRICE_SHOCK = 0.10


def calculate_primary_residence_analysis(
    inputs: UnderwritingInputs, market_rent_monthly: Optional[float] = None
) -> PrimaryResidenceOutputs:
    """
    Monthly and annual cost of owning the home.

    The maintenance/capex reserve is sized against property value since there
    is no rent. The net annual cost excludes first-year principal paydown,
    which builds equity rather than being consumed.
    """
    mortgage_pi = monthly_pi(inputs)
    monthly_taxes = inputs.taxes_annual / 12
    monthly_insurance = inputs.insurance_annual / 12
    monthly_hoa = inputs.hoa_monthly

    monthly_maintenance_reserve = inputs.purchase_price * (
        (inputs.maintenance_rate + inputs.capex_rate) / 100 / 12
    )

    all_in_monthly_cost = (
        mortgage_pi
        + mortgage_insurance_monthly(inputs)
        + monthly_taxes
        + monthly_insurance
        + monthly_hoa
        + inputs.utilities_monthly
        + monthly_maintenance_reserve
    )

    annual_gross_cost = all_in_monthly_cost * 12
    annual_principal_paydown = principal_paid_in_year(
        loan_amount(inputs), inputs.interest_rate, inputs.term_years, 1
    )

    monthly_cost_vs_rent = None
    if market_rent_monthly:
        monthly_cost_vs_rent = all_in_monthly_cost - market_rent_monthly

    return PrimaryResidenceOutputs(
        all_in_monthly_cost=all_in_monthly_cost,
        mortgage_pi=mortgage_pi,
        monthly_taxes=monthly_taxes,
        monthly_insurance=monthly_insurance,
        monthly_hoa=monthly_hoa,
        monthly_maintenance_reserve=monthly_maintenance_reserve,
        cash_required_at_close=all_in_cash_required(inputs),
        annual_gross_cost=annual_gross_cost,
        annual_principal_paydown=annual_principal_paydown,
        annual_net_cost_of_ownership=annual_gross_cost - annual_principal_paydown,
        monthly_cost_vs_rent=monthly_cost_vs_rent,
    )


def renter_net_wealth(
    cash_at_close: float,
    market_rent_monthly: float,
    year: int,
    reinvestment_rate: float = RENTER_REINVESTMENT_RATE,
) -> float:
    """Renter's invested cash compounded to ``year`` less cumulative rent paid."""
    invested = cash_at_close * calculate_growth_factor(reinvestment_rate, year)
    return invested - market_rent_monthly * 12 * year


def find_break_even_year(
    inputs: HoldingPeriodInputs,
    market_rent_monthly: float,
    reinvestment_rate: float = RENTER_REINVESTMENT_RATE,
) -> Optional[int]:
    """
    First year in which owning leaves more net wealth than renting.

    Owner net wealth is equity (down payment + principal paid + appreciation)
    less cumulative gross ownership cost. Returns None when no market rent is
    supplied or ownership never pulls ahead within the search horizon.
    """
    if market_rent_monthly <= 0:
        return None

    deal = inputs.underwriting_inputs
    principal = loan_amount(deal)
    residence = calculate_primary_residence_analysis(deal)
    down_payment = deal.purchase_price * deal.down_payment_pct / 100

    horizon = min(
        BREAK_EVEN_SEARCH_MAX_YEARS,
        inputs.holding_period_years + BREAK_EVEN_SEARCH_EXTRA_YEARS,
    )

    principal_paid_to_date = 0.0
    for year in range(1, horizon + 1):
        principal_paid_to_date += principal_paid_in_year(
            principal, deal.interest_rate, deal.term_years, year
        )
        appreciation = deal.purchase_price * (
            calculate_growth_factor(inputs.appreciation_rate, year) - 1
        )
        equity = down_payment + principal_paid_to_date + appreciation

        owning = equity - residence.annual_gross_cost * year
        renting = renter_net_wealth(
            residence.cash_required_at_close, market_rent_monthly, year, reinvestment_rate
        )

        if owning > renting:
            return year

    return None


def _price_scenario(
    inputs: HoldingPeriodInputs,
    sale_price: float,
    annual_gross_cost: float,
    cash_at_close: float,
) -> PriceScenario:
    deal = inputs.underwriting_inputs
    years = inputs.holding_period_years
    loan_payoff = loan_balance_at_year(
        loan_amount(deal), deal.interest_rate, deal.term_years, years
    )
    net_proceeds = net_sale_proceeds(sale_price, inputs.selling_cost_rate, loan_payoff)

    effective_monthly_cost = 0.0
    if years > 0:
        total_cost = annual_gross_cost * years
        effective_monthly_cost = (total_cost - net_proceeds + cash_at_close) / (years * 12)

    return PriceScenario(
        net_proceeds_at_sale=net_proceeds,
        effective_monthly_cost=effective_monthly_cost,
    )


def calculate_primary_residence_holding_period(
    inputs: HoldingPeriodInputs,
    market_rent_monthly: float = 0.0,
    reinvestment_rate: float = RENTER_REINVESTMENT_RATE,
) -> PrimaryResidenceHoldingPeriodOutputs:
    """
    Homeowner view of a multi-year hold.

    Args:
        inputs: Holding period assumptions
        market_rent_monthly: Rent for a comparable home; 0 skips the rent comparison
        reinvestment_rate: Annual return (%) on the renter's uninvested cash

    Returns:
        PrimaryResidenceHoldingPeriodOutputs
    """
    deal = inputs.underwriting_inputs
    years = inputs.holding_period_years
    principal = loan_amount(deal)
    residence = calculate_primary_residence_analysis(deal)

    # Equity accumulation
    total_principal_paydown = sum(
        principal_paid_in_year(principal, deal.interest_rate, deal.term_years, year)
        for year in range(1, years + 1)
    )
    end_value = deal.purchase_price * calculate_growth_factor(inputs.appreciation_rate, years)
    total_appreciation = end_value - deal.purchase_price
    down_payment = deal.purchase_price * deal.down_payment_pct / 100

    # Simplified: first-year costs held constant across the hold
    net_cost_total = residence.annual_net_cost_of_ownership * years
    net_cost_monthly = net_cost_total / (years * 12) if years > 0 else 0.0

    exit_scenarios = []
    for year in EXIT_SCENARIO_YEARS:
        if year > years + 3:
            continue
        value = deal.purchase_price * calculate_growth_factor(inputs.appreciation_rate, year)
        balance = loan_balance_at_year(principal, deal.interest_rate, deal.term_years, year)
        proceeds = net_sale_proceeds(value, inputs.selling_cost_rate, balance)
        housing_cost = residence.annual_gross_cost * year

        owner = proceeds - housing_cost + residence.cash_required_at_close
        renter = renter_net_wealth(
            residence.cash_required_at_close, market_rent_monthly, year, reinvestment_rate
        )

        exit_scenarios.append(
            ResidenceExitScenario(
                year=year,
                net_proceeds_from_sale=proceeds,
                total_housing_cost_to_date=housing_cost,
                net_position_vs_renting=owner - renter,
            )
        )

    return PrimaryResidenceHoldingPeriodOutputs(
        break_even_year_buy_vs_rent=find_break_even_year(
            inputs, market_rent_monthly, reinvestment_rate
        ),
        net_cost_of_housing_total=net_cost_total,
        net_cost_of_housing_monthly_equivalent=net_cost_monthly,
        equity_from_principal_paydown=total_principal_paydown,
        equity_from_appreciation=total_appreciation,
        total_equity_accumulation=total_principal_paydown + total_appreciation + down_payment,
        flat_price_scenario=_price_scenario(
            inputs, deal.purchase_price, residence.annual_gross_cost,
            residence.cash_required_at_close,
        ),
        negative_price_scenario=_price_scenario(
            inputs, deal.purchase_price * (1 - NEGATIVE_PRICE_SHOCK),
            residence.annual_gross_cost, residence.cash_required_at_close,
        ),
        exit_scenarios=exit_scenarios,
    )
