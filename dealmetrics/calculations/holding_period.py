"""
Exit & Holding-Period Analysis

Composes the yearly projection, the sale at the end of the hold, and the IRR
solver into a holding-period result.
"""

from typing import List

from dealmetrics.calculations.irr import calculate_irr
from dealmetrics.calculations.models import (
    ExitScenario,
    HoldingPeriodInputs,
    HoldingPeriodOutputs,
    YearlyProjection,
)
from dealmetrics.calculations.projection import calculate_holding_period_projection
from dealmetrics.calculations.underwriting import all_in_cash_required, loan_amount


def net_sale_proceeds(sale_price: float, selling_cost_rate: float, loan_payoff: float) -> float:
    """Sale price less selling costs and the loan payoff."""
    return sale_price - sale_price * (selling_cost_rate / 100) - loan_payoff


def annualized_return(initial_investment: float, total_profit: float, years: int) -> float:
    """
    Compound annual growth rate of the investment, as a percentage.

    A non-positive ending value means the whole investment (or more) was lost,
    reported as -100%.
    """
    if initial_investment <= 0 or years <= 0:
        return 0.0

    ending_value = initial_investment + total_profit
    if ending_value <= 0:
        return -100.0

    return ((ending_value / initial_investment) ** (1 / years) - 1) * 100


def calculate_exit_scenario(
    inputs: HoldingPeriodInputs, projections: List[YearlyProjection]
) -> ExitScenario:
    """Sell at the end of the last projected year."""
    deal = inputs.underwriting_inputs
    initial_investment = all_in_cash_required(deal)

    if projections:
        last_year = projections[-1]
        sale_price = last_year.property_value
        loan_payoff = last_year.loan_balance
        cumulative_cash_flow = last_year.cumulative_cash_flow
    else:
        # No hold: sell at purchase
        sale_price = deal.purchase_price
        loan_payoff = loan_amount(deal)
        cumulative_cash_flow = 0.0

    selling_costs = sale_price * (inputs.selling_cost_rate / 100)
    net_proceeds = net_sale_proceeds(sale_price, inputs.selling_cost_rate, loan_payoff)

    total_profit = net_proceeds + cumulative_cash_flow - initial_investment
    total_roi = total_profit / initial_investment * 100 if initial_investment > 0 else 0.0

    return ExitScenario(
        sale_price=sale_price,
        selling_costs=selling_costs,
        loan_payoff=loan_payoff,
        net_proceeds_from_sale=net_proceeds,
        cumulative_cash_flow=cumulative_cash_flow,
        total_profit=total_profit,
        initial_investment=initial_investment,
        total_roi=total_roi,
        annualized_roi=annualized_return(
            initial_investment, total_profit, inputs.holding_period_years
        ),
    )


def build_irr_cash_flows(
    initial_investment: float,
    projections: List[YearlyProjection],
    net_proceeds: float,
) -> List[float]:
    """
    Assemble the signed series for IRR.

    Year 0 is the (negative) initial investment; the final year also carries
    the net sale proceeds.
    """
    cash_flows = [-initial_investment]
    cash_flows.extend(p.cash_flow_annual for p in projections)

    if projections:
        cash_flows[-1] += net_proceeds
    else:
        cash_flows.append(net_proceeds)

    return cash_flows


def calculate_holding_period_analysis(inputs: HoldingPeriodInputs) -> HoldingPeriodOutputs:
    """Run the full holding-period analysis for an investment property."""
    projections = calculate_holding_period_projection(inputs)
    exit_scenario = calculate_exit_scenario(inputs, projections)
    initial_investment = exit_scenario.initial_investment

    cash_flows = build_irr_cash_flows(
        initial_investment, projections, exit_scenario.net_proceeds_from_sale
    )
    irr = calculate_irr(cash_flows)

    total_returns = exit_scenario.cumulative_cash_flow + exit_scenario.net_proceeds_from_sale
    equity_multiple = total_returns / initial_investment if initial_investment > 0 else 0.0

    return HoldingPeriodOutputs(
        yearly_projections=projections,
        exit_scenario=exit_scenario,
        irr=irr,
        equity_multiple=equity_multiple,
    )
