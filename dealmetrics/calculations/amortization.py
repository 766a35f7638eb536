"""
Loan Amortization Calculations

Closed-form fixed-rate mortgage math: monthly payment, remaining balance at
the end of any year, and the principal/interest split of a year's payments.
Rates are nominal annual percentages (e.g., 7.0 for 7%).
"""

from typing import List, Optional
from datetime import date
from dateutil.relativedelta import relativedelta

from dealmetrics.calculations.models import AmortizationEntry


def monthly_payment(principal: float, annual_rate_pct: float, term_years: int) -> float:
    """
    Calculate the monthly principal and interest payment.

    Args:
        principal: Loan principal amount
        annual_rate_pct: Nominal annual interest rate as a percentage
        term_years: Loan term in years

    Returns:
        Monthly P&I payment (0 when there is no loan or no term)
    """
    if principal == 0 or term_years == 0:
        return 0.0

    monthly_rate = annual_rate_pct / 100 / 12
    num_payments = term_years * 12

    if monthly_rate == 0:
        return principal / num_payments

    growth = (1 + monthly_rate) ** num_payments
    return principal * monthly_rate * growth / (growth - 1)


def loan_balance_at_year(
    principal: float, annual_rate_pct: float, term_years: int, year: int
) -> float:
    """
    Calculate remaining loan balance after ``year * 12`` payments.

    Uses B_n = P * [(1+r)^N - (1+r)^n] / [(1+r)^N - 1].
    """
    if year <= 0:
        return principal
    if year >= term_years:
        return 0.0

    monthly_rate = annual_rate_pct / 100 / 12
    num_payments = term_years * 12
    payments_made = year * 12

    if monthly_rate == 0:
        payment = monthly_payment(principal, annual_rate_pct, term_years)
        return max(0.0, principal - payment * payments_made)

    balance = (
        principal
        * ((1 + monthly_rate) ** num_payments - (1 + monthly_rate) ** payments_made)
        / ((1 + monthly_rate) ** num_payments - 1)
    )

    return max(0.0, balance)


def principal_paid_in_year(
    principal: float, annual_rate_pct: float, term_years: int, year: int
) -> float:
    """Principal repaid during the given loan year (1-based)."""
    balance_start = loan_balance_at_year(principal, annual_rate_pct, term_years, year - 1)
    balance_end = loan_balance_at_year(principal, annual_rate_pct, term_years, year)
    return balance_start - balance_end


def interest_paid_in_year(
    principal: float, annual_rate_pct: float, term_years: int, year: int
) -> float:
    """Interest paid during the given loan year; 0 outside the loan term."""
    if year < 1 or year > term_years:
        return 0.0

    annual_payments = monthly_payment(principal, annual_rate_pct, term_years) * 12
    return annual_payments - principal_paid_in_year(
        principal, annual_rate_pct, term_years, year
    )


def generate_amortization_schedule(
    principal: float,
    annual_rate_pct: float,
    term_years: int,
    start_date: Optional[date] = None,
) -> List[AmortizationEntry]:
    """
    Generate a month-by-month amortization schedule.

    Args:
        principal: Loan principal amount
        annual_rate_pct: Nominal annual interest rate as a percentage
        term_years: Loan term in years
        start_date: Date of first payment; rows are undated when omitted

    Returns:
        List of amortization rows, one per scheduled payment
    """
    schedule = []
    monthly_rate = annual_rate_pct / 100 / 12
    payment = monthly_payment(principal, annual_rate_pct, term_years)
    balance = principal

    for month in range(1, term_years * 12 + 1):
        interest = balance * monthly_rate
        principal_pmt = payment - interest
        balance = max(0.0, balance - principal_pmt)

        payment_date = None
        if start_date is not None:
            payment_date = start_date + relativedelta(months=month - 1)

        schedule.append(
            AmortizationEntry(
                month=month,
                payment=payment,
                principal=principal_pmt,
                interest=interest,
                balance=balance,
                payment_date=payment_date,
            )
        )

    return schedule


def calculate_total_interest(schedule: List[AmortizationEntry]) -> float:
    """Calculate total interest paid over a schedule."""
    return sum(row.interest for row in schedule)
