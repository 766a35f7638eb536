"""
Tests for multi-year projection, exit, and primary residence analysis.
"""

import dataclasses
import math

import pytest
from dealmetrics.calculations.amortization import loan_balance_at_year
from dealmetrics.calculations.holding_period import (
    annualized_return,
    build_irr_cash_flows,
    calculate_exit_scenario,
    calculate_holding_period_analysis,
)
from dealmetrics.calculations.irr import calculate_npv
from dealmetrics.calculations.primary_residence import (
    calculate_primary_residence_analysis,
    calculate_primary_residence_holding_period,
    find_break_even_year,
    renter_net_wealth,
)
from dealmetrics.calculations.projection import calculate_holding_period_projection
from dealmetrics.calculations.underwriting import (
    all_in_cash_required,
    break_even_rent,
    debt_service,
    loan_amount,
    net_operating_income,
)


def _ownership_advantage(inputs, market_rent_monthly, year, reinvestment_rate):
    """Owner net wealth less renter net wealth after ``year`` years."""
    deal = inputs.underwriting_inputs
    principal = loan_amount(deal)
    residence = calculate_primary_residence_analysis(deal)

    balance = loan_balance_at_year(principal, deal.interest_rate, deal.term_years, year)
    paid_down = principal - balance
    appreciation = deal.purchase_price * ((1 + inputs.appreciation_rate / 100) ** year - 1)
    down_payment = deal.purchase_price * deal.down_payment_pct / 100
    owning = down_payment + paid_down + appreciation - residence.annual_gross_cost * year

    renting = renter_net_wealth(
        residence.cash_required_at_close, market_rent_monthly, year, reinvestment_rate
    )
    return owning - renting


class TestProjection:
    """Test year-by-year projection."""

    def test_years_are_contiguous(self, holding_factory):
        projections = calculate_holding_period_projection(holding_factory())
        assert [p.year for p in projections] == list(range(1, 11))

    def test_equity_and_cumulative_invariants(self, holding_factory):
        projections = calculate_holding_period_projection(holding_factory())
        cumulative = 0.0
        for p in projections:
            assert p.equity == pytest.approx(p.property_value - p.loan_balance)
            cumulative += p.cash_flow_annual
            assert p.cumulative_cash_flow == pytest.approx(cumulative)

    def test_year_one_matches_point_in_time(self, holding_factory, rental_inputs):
        first = calculate_holding_period_projection(holding_factory(rental_inputs))[0]
        _, noi_annual = net_operating_income(rental_inputs)
        _, debt_annual = debt_service(rental_inputs)
        assert first.noi_annual == pytest.approx(noi_annual)
        assert first.debt_service_annual == pytest.approx(debt_annual)

    def test_flat_line_without_growth(self, holding_factory):
        inputs = holding_factory(appreciation_rate=0, rent_growth_rate=0, expense_growth_rate=0)
        projections = calculate_holding_period_projection(inputs)
        first = projections[0]
        for p in projections[1:]:
            assert p.noi_annual == pytest.approx(first.noi_annual)
            assert p.cash_flow_annual == pytest.approx(first.cash_flow_annual)
            assert p.property_value == pytest.approx(first.property_value)

    def test_growth_compounds_from_second_year(self, holding_factory, rental_inputs):
        projections = calculate_holding_period_projection(holding_factory(rental_inputs))
        assert projections[0].rent_annual == pytest.approx(2000 * 12)
        assert projections[1].rent_annual == pytest.approx(2000 * 12 * 1.02)
        assert projections[0].property_value == pytest.approx(250000 * 1.03)
        assert projections[4].property_value == pytest.approx(250000 * 1.03 ** 5)

    def test_flat_line_past_loan_term(self, holding_factory, deal_factory):
        """Debt service stays level after the loan is retired."""
        deal = deal_factory(term_years=5, pmi_enabled=True, pmi_monthly=50)
        inputs = holding_factory(
            deal,
            holding_period_years=8,
            appreciation_rate=0,
            rent_growth_rate=0,
            expense_growth_rate=0,
        )
        projections = calculate_holding_period_projection(inputs)
        _, debt_annual = debt_service(deal)

        assert len(projections) == 8
        for p in projections:
            assert p.debt_service_annual == pytest.approx(debt_annual)
            assert p.noi_annual == pytest.approx(projections[0].noi_annual)
            assert p.cash_flow_annual == pytest.approx(projections[0].cash_flow_annual)

    def test_loan_balance_past_term(self, holding_factory, deal_factory):
        inputs = holding_factory(deal_factory(term_years=5), holding_period_years=8)
        projections = calculate_holding_period_projection(inputs)
        balances = [p.loan_balance for p in projections]

        assert all(later <= earlier for earlier, later in zip(balances, balances[1:]))
        assert projections[4].loan_balance == 0
        for p in projections[5:]:
            assert p.loan_balance == 0
            assert p.principal_paid_annual == 0
            assert p.interest_paid_annual == 0

    def test_zero_year_hold(self, holding_factory):
        assert calculate_holding_period_projection(holding_factory(holding_period_years=0)) == []


class TestExitScenario:
    """Test sale at the end of the hold."""

    def test_sale_uses_last_year(self, holding_factory):
        inputs = holding_factory()
        projections = calculate_holding_period_projection(inputs)
        exit_scenario = calculate_exit_scenario(inputs, projections)
        last = projections[-1]

        assert exit_scenario.sale_price == last.property_value
        assert exit_scenario.loan_payoff == last.loan_balance
        assert exit_scenario.selling_costs == pytest.approx(last.property_value * 0.06)
        assert exit_scenario.net_proceeds_from_sale == pytest.approx(
            last.property_value * 0.94 - last.loan_balance
        )
        assert exit_scenario.total_profit == pytest.approx(
            exit_scenario.net_proceeds_from_sale
            + last.cumulative_cash_flow
            - exit_scenario.initial_investment
        )

    def test_annualized_roi_is_geometric(self, holding_factory):
        exit_scenario = calculate_holding_period_analysis(holding_factory()).exit_scenario
        growth = 1 + exit_scenario.total_roi / 100
        assert exit_scenario.annualized_roi == pytest.approx((growth ** (1 / 10) - 1) * 100)

    def test_annualized_return_total_loss(self):
        assert annualized_return(10000, -15000, 5) == -100.0

    def test_annualized_return_guards(self):
        assert annualized_return(0, 5000, 5) == 0.0
        assert annualized_return(10000, 5000, 0) == 0.0

    def test_zero_year_hold_sells_at_purchase(self, holding_factory, rental_inputs):
        inputs = holding_factory(rental_inputs, holding_period_years=0)
        exit_scenario = calculate_exit_scenario(inputs, [])
        assert exit_scenario.sale_price == rental_inputs.purchase_price
        assert exit_scenario.loan_payoff == pytest.approx(loan_amount(rental_inputs))
        assert exit_scenario.cumulative_cash_flow == 0
        assert exit_scenario.annualized_roi == 0


class TestHoldingPeriodAnalysis:
    """Test composed holding-period outputs."""

    def test_irr_cash_flow_series(self, holding_factory):
        inputs = holding_factory()
        projections = calculate_holding_period_projection(inputs)
        cash_flows = build_irr_cash_flows(77500, projections, 100000)

        assert len(cash_flows) == 11
        assert cash_flows[0] == -77500
        assert cash_flows[1] == projections[0].cash_flow_annual
        assert cash_flows[-1] == pytest.approx(projections[-1].cash_flow_annual + 100000)

    def test_irr_zeroes_npv(self, holding_factory):
        inputs = holding_factory()
        outputs = calculate_holding_period_analysis(inputs)
        cash_flows = build_irr_cash_flows(
            outputs.exit_scenario.initial_investment,
            outputs.yearly_projections,
            outputs.exit_scenario.net_proceeds_from_sale,
        )
        assert abs(calculate_npv(cash_flows, outputs.irr / 100)) < 1e-3

    def test_equity_multiple(self, holding_factory):
        outputs = calculate_holding_period_analysis(holding_factory())
        exit_scenario = outputs.exit_scenario
        expected = (
            exit_scenario.cumulative_cash_flow + exit_scenario.net_proceeds_from_sale
        ) / exit_scenario.initial_investment
        assert outputs.equity_multiple == pytest.approx(expected)

    def test_equity_multiple_flat_deal(self, holding_factory, rental_inputs):
        """Zero cash flow and zero appreciation leaves only the sale proceeds."""
        deal = dataclasses.replace(rental_inputs, rent_monthly=break_even_rent(rental_inputs))
        inputs = holding_factory(
            deal, appreciation_rate=0, rent_growth_rate=0, expense_growth_rate=0
        )
        outputs = calculate_holding_period_analysis(inputs)
        exit_scenario = outputs.exit_scenario

        assert exit_scenario.cumulative_cash_flow == pytest.approx(0, abs=1e-6)
        expected = (
            deal.purchase_price - exit_scenario.selling_costs - exit_scenario.loan_payoff
        ) / all_in_cash_required(deal)
        assert outputs.equity_multiple == pytest.approx(expected)

    def test_no_initial_investment(self, holding_factory, deal_factory):
        deal = deal_factory(purchase_price=0, rehab_cost=0)
        outputs = calculate_holding_period_analysis(holding_factory(deal))
        assert outputs.equity_multiple == 0
        assert outputs.exit_scenario.total_roi == 0
        assert math.isfinite(outputs.irr)

    def test_outputs_are_finite(self, holding_factory, deal_factory):
        deal = deal_factory(rent_monthly=500, vacancy_rate=20)
        outputs = calculate_holding_period_analysis(
            holding_factory(deal, appreciation_rate=-5, holding_period_years=30)
        )
        assert math.isfinite(outputs.irr)
        assert math.isfinite(outputs.exit_scenario.annualized_roi)


class TestPrimaryResidence:
    """Test homeowner cost-of-ownership view."""

    def test_monthly_cost_breakdown(self, residence_inputs):
        outputs = calculate_primary_residence_analysis(residence_inputs)
        # 400,000 * 1.5% / 12
        assert outputs.monthly_maintenance_reserve == pytest.approx(500)
        assert outputs.monthly_taxes == pytest.approx(400)
        assert outputs.monthly_insurance == pytest.approx(125)
        assert outputs.all_in_monthly_cost == pytest.approx(
            outputs.mortgage_pi + 150 + 400 + 125 + 50 + 250 + 500
        )
        assert outputs.annual_gross_cost == pytest.approx(outputs.all_in_monthly_cost * 12)

    def test_cash_required_matches_investment_view(self, residence_inputs):
        outputs = calculate_primary_residence_analysis(residence_inputs)
        assert outputs.cash_required_at_close == pytest.approx(52000)
        assert outputs.cash_required_at_close == all_in_cash_required(residence_inputs)

    def test_net_cost_excludes_principal(self, residence_inputs):
        outputs = calculate_primary_residence_analysis(residence_inputs)
        assert outputs.annual_principal_paydown > 0
        assert outputs.annual_net_cost_of_ownership == pytest.approx(
            outputs.annual_gross_cost - outputs.annual_principal_paydown
        )

    def test_cost_vs_rent(self, residence_inputs):
        assert calculate_primary_residence_analysis(residence_inputs).monthly_cost_vs_rent is None
        outputs = calculate_primary_residence_analysis(residence_inputs, market_rent_monthly=2500)
        assert outputs.monthly_cost_vs_rent == pytest.approx(outputs.all_in_monthly_cost - 2500)


class TestPrimaryResidenceHoldingPeriod:
    """Test homeowner holding-period view."""

    def test_equity_split(self, holding_factory, residence_inputs):
        outputs = calculate_primary_residence_holding_period(holding_factory(residence_inputs))
        paid_down = 360000 - loan_balance_at_year(360000, 6.5, 30, 10)

        assert outputs.equity_from_principal_paydown == pytest.approx(paid_down)
        assert outputs.equity_from_appreciation == pytest.approx(400000 * (1.03 ** 10 - 1))
        assert outputs.total_equity_accumulation == pytest.approx(
            paid_down + outputs.equity_from_appreciation + 40000
        )

    def test_no_market_rent_has_no_break_even(self, holding_factory, residence_inputs):
        outputs = calculate_primary_residence_holding_period(holding_factory(residence_inputs))
        assert outputs.break_even_year_buy_vs_rent is None

    def test_high_rent_breaks_even_first_year(self, holding_factory, residence_inputs):
        inputs = holding_factory(residence_inputs)
        assert find_break_even_year(inputs, market_rent_monthly=10000) == 1

    def test_low_rent_never_breaks_even(self, holding_factory, residence_inputs):
        inputs = holding_factory(residence_inputs)
        assert find_break_even_year(inputs, market_rent_monthly=500) is None

    @pytest.mark.parametrize(
        "rent,rate,expected",
        [
            (3500, 3.0, 2),
            (4000, 3.0, 1),
            (4000, 15.0, 2),
        ],
    )
    def test_break_even_is_first_year_owning_wins(
        self, holding_factory, residence_inputs, rent, rate, expected
    ):
        inputs = holding_factory(residence_inputs, holding_period_years=20)
        year = find_break_even_year(inputs, market_rent_monthly=rent, reinvestment_rate=rate)

        assert year == expected
        assert _ownership_advantage(inputs, rent, year, rate) > 0
        assert _ownership_advantage(inputs, rent, year - 1, rate) <= 0

    def test_higher_reinvestment_rate_delays_break_even(self, holding_factory, residence_inputs):
        inputs = holding_factory(residence_inputs, holding_period_years=20)
        base = find_break_even_year(inputs, market_rent_monthly=4000)
        slower = find_break_even_year(inputs, market_rent_monthly=4000, reinvestment_rate=15.0)
        assert base == 1
        assert slower == 2

    def test_exit_scenarios(self, holding_factory, residence_inputs):
        outputs = calculate_primary_residence_holding_period(
            holding_factory(residence_inputs), market_rent_monthly=2500
        )
        assert [s.year for s in outputs.exit_scenarios] == [3, 5, 7]

        short = calculate_primary_residence_holding_period(
            holding_factory(residence_inputs, holding_period_years=2)
        )
        assert [s.year for s in short.exit_scenarios] == [3, 5]

    def test_exit_scenario_proceeds(self, holding_factory, residence_inputs):
        outputs = calculate_primary_residence_holding_period(holding_factory(residence_inputs))
        year_five = outputs.exit_scenarios[1]
        value = 400000 * 1.03 ** 5
        balance = loan_balance_at_year(360000, 6.5, 30, 5)
        assert year_five.net_proceeds_from_sale == pytest.approx(value * 0.94 - balance)

    def test_price_stress_scenarios(self, holding_factory, residence_inputs):
        outputs = calculate_primary_residence_holding_period(holding_factory(residence_inputs))
        balance = loan_balance_at_year(360000, 6.5, 30, 10)

        assert outputs.flat_price_scenario.net_proceeds_at_sale == pytest.approx(
            400000 * 0.94 - balance
        )
        assert outputs.negative_price_scenario.net_proceeds_at_sale == pytest.approx(
            360000 * 0.94 - balance
        )
        assert (
            outputs.negative_price_scenario.effective_monthly_cost
            > outputs.flat_price_scenario.effective_monthly_cost
        )

    def test_zero_year_hold(self, holding_factory, residence_inputs):
        outputs = calculate_primary_residence_holding_period(
            holding_factory(residence_inputs, holding_period_years=0), market_rent_monthly=2500
        )
        assert outputs.net_cost_of_housing_monthly_equivalent == 0
        assert outputs.flat_price_scenario.effective_monthly_cost == 0
        assert outputs.equity_from_principal_paydown == 0
