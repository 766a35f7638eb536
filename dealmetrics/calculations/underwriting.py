"""
Point-in-Time Underwriting

Combines purchase, financing, and operating assumptions into one stabilized
year's income statement and key ratios. Every ratio guards its denominator
and returns 0 instead of raising or producing inf/NaN.
"""

from typing import Tuple

from dealmetrics.calculations.amortization import monthly_payment
from dealmetrics.calculations.models import (
    PropertyUse,
    UnderwritingInputs,
    UnderwritingOutputs,
)


def resolve_property_use(inputs: UnderwritingInputs) -> PropertyUse:
    """
    Return the expense regime for a deal.

    An explicit ``property_use`` wins. Otherwise a deal with no rent and no
    management fee is treated as a primary residence.
    """
    if inputs.property_use is not None:
        return inputs.property_use
    if inputs.rent_monthly == 0 and inputs.management_rate == 0:
        return PropertyUse.primary_residence
    return PropertyUse.investment


def loan_amount(inputs: UnderwritingInputs) -> float:
    """Financed amount after the down payment."""
    return inputs.purchase_price * (1 - inputs.down_payment_pct / 100)


def monthly_pi(inputs: UnderwritingInputs) -> float:
    """Monthly principal and interest on the acquisition loan."""
    return monthly_payment(loan_amount(inputs), inputs.interest_rate, inputs.term_years)


def mortgage_insurance_monthly(inputs: UnderwritingInputs) -> float:
    """Monthly mortgage insurance, only when enabled."""
    if not inputs.pmi_enabled:
        return 0.0
    return inputs.pmi_monthly or 0.0


def fixed_expenses_monthly(inputs: UnderwritingInputs) -> float:
    """Operating expenses that do not scale with rent."""
    return (
        inputs.taxes_annual / 12
        + inputs.insurance_annual / 12
        + inputs.hoa_monthly
        + inputs.utilities_monthly
    )


def total_monthly_payment(inputs: UnderwritingInputs) -> float:
    """P&I + mortgage insurance + taxes + insurance + HOA + utilities."""
    return monthly_pi(inputs) + mortgage_insurance_monthly(inputs) + fixed_expenses_monthly(inputs)


def net_operating_income(inputs: UnderwritingInputs) -> Tuple[float, float]:
    """
    Calculate Net Operating Income.

    Investment properties size maintenance and capex against gross income.
    Primary residences have no rent to anchor those percentages, so they are
    sized against ``purchase_price / 100`` as a monthly value proxy.
    Management is always a share of gross income.

    Returns:
        (monthly NOI, annual NOI)
    """
    gross_income = inputs.rent_monthly + inputs.other_income_monthly
    vacancy_loss = gross_income * (inputs.vacancy_rate / 100)
    effective_income = gross_income - vacancy_loss

    if resolve_property_use(inputs) is PropertyUse.primary_residence:
        expense_base = inputs.purchase_price / 100
    else:
        expense_base = gross_income

    maintenance = expense_base * (inputs.maintenance_rate / 100)
    capex = expense_base * (inputs.capex_rate / 100)
    management = gross_income * (inputs.management_rate / 100)

    operating_expenses = maintenance + capex + management + fixed_expenses_monthly(inputs)

    noi_monthly = effective_income - operating_expenses
    return noi_monthly, noi_monthly * 12


def debt_service(inputs: UnderwritingInputs) -> Tuple[float, float]:
    """Debt service (P&I + mortgage insurance) as (monthly, annual)."""
    monthly = monthly_pi(inputs) + mortgage_insurance_monthly(inputs)
    return monthly, monthly * 12


def cash_flow(inputs: UnderwritingInputs) -> Tuple[float, float]:
    """
    Cash flow = NOI - debt service.

    Operating expenses are already netted into NOI, so only debt service is
    subtracted here.
    """
    noi_monthly, _ = net_operating_income(inputs)
    debt_monthly, _ = debt_service(inputs)
    cash_flow_monthly = noi_monthly - debt_monthly
    return cash_flow_monthly, cash_flow_monthly * 12


def all_in_cash_required(inputs: UnderwritingInputs) -> float:
    """Down payment + closing costs + rehab."""
    down_payment = inputs.purchase_price * (inputs.down_payment_pct / 100)
    closing_costs = inputs.purchase_price * (inputs.closing_cost_rate / 100)
    return down_payment + closing_costs + inputs.rehab_cost


def cap_rate(inputs: UnderwritingInputs) -> float:
    """Annual NOI as a percentage of purchase price."""
    if inputs.purchase_price == 0:
        return 0.0
    _, noi_annual = net_operating_income(inputs)
    return noi_annual / inputs.purchase_price * 100


def cash_on_cash(inputs: UnderwritingInputs) -> float:
    """Annual cash flow as a percentage of all-in cash."""
    all_in_cash = all_in_cash_required(inputs)
    if all_in_cash == 0:
        return 0.0
    _, cash_flow_annual = cash_flow(inputs)
    return cash_flow_annual / all_in_cash * 100


def dscr(inputs: UnderwritingInputs) -> float:
    """Debt Service Coverage Ratio (annual NOI / annual debt service)."""
    _, debt_annual = debt_service(inputs)
    if debt_annual == 0:
        return 0.0
    _, noi_annual = net_operating_income(inputs)
    return noi_annual / debt_annual


def break_even_rent(inputs: UnderwritingInputs) -> float:
    """
    Monthly rent at which cash flow is exactly zero, solved algebraically.

    (rent + other) * (1 - vacancy - maint - capex - mgmt) - fixed = debt service

    Other income is subtracted after dividing; ``(debt + fixed - other) / denom``
    would not zero cash flow when other income is non-zero.

    When the rent-linked rates sum to 100% or more no break-even exists and
    debt service plus fixed expenses is returned instead.
    """
    debt_monthly, _ = debt_service(inputs)
    fixed = fixed_expenses_monthly(inputs)

    variable_rate = (
        inputs.vacancy_rate + inputs.maintenance_rate + inputs.capex_rate + inputs.management_rate
    ) / 100

    if inputs.property_use is PropertyUse.primary_residence:
        # maintenance and capex are fixed against value, not rent
        value_base = inputs.purchase_price / 100
        fixed += value_base * (inputs.maintenance_rate + inputs.capex_rate) / 100
        variable_rate = (inputs.vacancy_rate + inputs.management_rate) / 100

    denominator = 1 - variable_rate

    if denominator <= 0:
        return debt_monthly + fixed

    rent = (debt_monthly + fixed) / denominator - inputs.other_income_monthly
    return max(0.0, rent)


def calculate_underwriting(inputs: UnderwritingInputs) -> UnderwritingOutputs:
    """Run the full point-in-time underwriting for a deal."""
    noi_monthly, noi_annual = net_operating_income(inputs)
    cash_flow_monthly, cash_flow_annual = cash_flow(inputs)

    return UnderwritingOutputs(
        total_monthly_payment=total_monthly_payment(inputs),
        noi_monthly=noi_monthly,
        noi_annual=noi_annual,
        cash_flow_monthly=cash_flow_monthly,
        cash_flow_annual=cash_flow_annual,
        cap_rate=cap_rate(inputs),
        cash_on_cash=cash_on_cash(inputs),
        dscr=dscr(inputs),
        break_even_rent_monthly=break_even_rent(inputs),
        all_in_cash_required=all_in_cash_required(inputs),
    )
